"""Process and memory exercises 1 and 2: task_struct fields and the VMA list."""

from __future__ import annotations

import mmap
import os
import sys
from collections.abc import Iterable
from typing import TextIO

from oslabs.common import read_lines

TASK_FIELDS = (
    "Name", "Pid", "PPid", "Threads", "VmPeak", "VmSize",
    "VmRSS", "VmData", "VmStk", "VmExe", "VmPTE",
    "voluntary_ctxt_switches", "nonvoluntary_ctxt_switches",
)


def section(title: str, out: TextIO | None = None) -> None:
    """Write a boxed section heading."""
    out = sys.stdout if out is None else out
    out.write("\n╔" + "═" * 62 + "╗\n")
    out.write(f"║  {title:<60}║\n")
    out.write("╚" + "═" * 62 + "╝\n")


def subsection(title: str, out: TextIO | None = None) -> None:
    """Write a subsection heading."""
    out = sys.stdout if out is None else out
    out.write(f"\n  ── {title} ──\n")


def print_proc_file(path: str, max_lines: int, out: TextIO | None = None) -> None:
    """Write up to ``max_lines`` lines of a file, noting when it was cut short."""
    out = sys.stdout if out is None else out
    try:
        handle = open(path, encoding="utf-8", errors="replace")
    except OSError as exc:
        out.write(f"  [cannot open {path}: {exc.strerror}]\n")
        return
    with handle:
        printed = 0
        truncated = False
        for line in handle:
            if printed >= max_lines:
                truncated = True
                break
            out.write(f"  {line}")
            printed += 1
    if truncated:
        out.write(f"  ... (truncated at {max_lines} lines)\n")


def status_fields(status_text: str, fields: Iterable[str] = TASK_FIELDS) -> list[str]:
    """Return the status lines that start with one of ``fields``, in file order."""
    prefixes = tuple(fields)
    return [line for line in status_text.splitlines() if line.startswith(prefixes)]


def task_struct_exercise(out: TextIO | None = None) -> None:
    """Exercise 1: task_struct fields seen through /proc/<pid>/status."""
    out = sys.stdout if out is None else out
    w = out.write
    section("Exercise 1: task_struct Fields via /proc/<pid>/status", out)
    w("  WHAT: /proc/<pid>/status exposes key task_struct fields in human-readable form.\n")
    w("  WHY:  task_struct (~10 KB in Linux 6.x) is the kernel's process descriptor.\n")
    w("        Every field here maps directly to a struct member in include/linux/sched.h\n\n")

    path = f"/proc/{os.getpid()}/status"
    try:
        with open(path, encoding="utf-8", errors="replace") as handle:
            text = handle.read()
    except OSError as exc:
        print(f"fopen status: {exc.strerror}", file=sys.stderr)
        return
    for line in status_fields(text):
        w(f"  {line}\n")

    w("\n  OBSERVE:\n")
    w("    VmSize  = reserved virtual address space (vm_area_struct list total)\n")
    w("    VmRSS   = resident pages actually in RAM (physical frames mapped)\n")
    w("    VmPTE   = memory used by page table entries themselves\n")
    w("    VmStk   = size of main thread stack VMA\n")
    w("    voluntary_ctxt_switches   = syscall/sleep caused rescheduling\n")
    w("    nonvoluntary_ctxt_switches = scheduler preempted this task\n")

    w("\n  QUIZ:\n")
    w("    Q1. What is the difference between VmSize and VmRSS?\n")
    w("    Q2. Why does VmPTE grow as you mmap() more regions?\n")
    w("    Q3. What kernel struct does each /proc/<pid>/status line map to?\n")


def _new_mapping_starts(before: list[str], after: list[str], min_size: int) -> list[str]:
    """Start addresses of mappings present only in ``after`` and at least ``min_size``."""
    old = set(before)
    starts = []
    for line in after:
        if line in old:
            continue
        lo, _, hi = line.split()[0].partition("-")
        if int(hi, 16) - int(lo, 16) >= min_size:
            starts.append(lo)
    return starts


def mm_struct_exercise(out: TextIO | None = None) -> None:
    """Exercise 2: mm_struct and the VMA list in /proc/self/maps and smaps."""
    out = sys.stdout if out is None else out
    w = out.write
    section("Exercise 2: mm_struct and the VMA List (/proc/self/maps + smaps)", out)
    w("  WHAT: mm_struct is the per-process virtual memory descriptor.\n")
    w("  WHY:  It holds the VMA red-black tree, page table root (pgd),\n")
    w("        mm_count/mm_users, and memory statistics.\n\n")

    size = 2 * 1024 * 1024
    before = read_lines("/proc/self/maps") or []
    try:
        region = mmap.mmap(-1, size, flags=mmap.MAP_PRIVATE | mmap.MAP_ANONYMOUS)
    except OSError as exc:
        print(f"mmap: {exc.strerror}", file=sys.stderr)
        return
    with region:
        region[:] = b"\xab" * size
        after = read_lines("/proc/self/maps") or []

        subsection("/proc/self/maps  (first 25 lines)", out)
        print_proc_file("/proc/self/maps", 25, out)

        subsection("smaps entry for our 2 MiB anonymous region", out)
        starts = _new_mapping_starts(before, after, size)
        smaps = read_lines("/proc/self/smaps")
        if starts and smaps is not None:
            target = starts[0] + "-"
            found = False
            printed = 0
            for line in smaps:
                if printed >= 18:
                    break
                if not found and line.startswith(target):
                    found = True
                if found:
                    w(f"  {line}")
                    printed += 1
                    if line.startswith("VmFlags"):
                        break

        w("\n  OBSERVE:\n")
        w("    Size:       = VMA size (reserved virtual space)\n")
        w("    Rss:        = physical pages currently mapped\n")
        w("    Pss:        = proportional share (RSS / sharing_count)\n")
        w("    Private_Dirty: pages written and not shared (COW happened)\n")
        w("    Shared_Clean:  pages shared read-only (e.g. libc text)\n")
        w("    Anonymous:  = not backed by a file\n")
        w("    VmFlags: rd wr mr mw me ac  (read/write/mayread/maywrite/mayexec/accounting)\n")

    w("\n  QUIZ:\n")
    w("    Q1. What is PSS and why is it more accurate than RSS for measuring\n")
    w("        memory usage of a process that uses shared libraries?\n")
    w("    Q2. After munmap(), does the VMA appear in /proc/self/maps? Why?\n")
    w("    Q3. What fields in mm_struct track the number of VMAs?\n")