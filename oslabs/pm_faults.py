"""Process and memory exercises 3 and 4: page fault lifecycle and mmap types."""

from __future__ import annotations

import mmap
import os
import resource
import struct
import sys
from typing import TextIO

from oslabs.common import read_lines
from oslabs.pm_task import section

PAGE = 4096


def fault_counts() -> tuple[int, int]:
    """Return (minor, major) page faults of this process so far."""
    usage = resource.getrusage(resource.RUSAGE_SELF)
    return usage.ru_minflt, usage.ru_majflt


def _print_status_field(field: str, out: TextIO) -> None:
    for line in read_lines(f"/proc/{os.getpid()}/status") or []:
        if line.startswith(field):
            out.write(f"  {line}")
            break


def page_fault_exercise(out: TextIO | None = None) -> None:
    """Exercise 3: mmap, first read, first write, warm rescan, MADV_DONTNEED."""
    out = sys.stdout if out is None else out
    w = out.write
    section("Exercise 3: Page Fault Lifecycle — mmap -> first-touch -> warm rescan", out)
    w("  WHAT: Observe exactly when physical pages are allocated.\n")
    w("  WHY:  Demand paging means pages are allocated lazily on first access,\n")
    w("        not at mmap() time. This is fundamental to how fork(), exec(),\n")
    w("        and every malloc() implementation works.\n\n")

    size = 32 * 1024 * 1024
    fill_b = b"\xbb" * size
    fill_c = b"\xcc" * size

    mn0, mj0 = fault_counts()
    try:
        region = mmap.mmap(-1, size, flags=mmap.MAP_PRIVATE | mmap.MAP_ANONYMOUS)
    except OSError as exc:
        print(f"mmap: {exc.strerror}", file=sys.stderr)
        return
    mn1, mj1 = fault_counts()

    with region:
        w("  [Step 1] mmap(32 MiB, PROT_READ|PROT_WRITE, MAP_ANONYMOUS)\n")
        w(f"    minor faults: {mn1 - mn0}  major faults: {mj1 - mj0}\n")
        w("    WHY: mmap() only creates a vm_area_struct. No PTEs, no physical pages.\n")
        _print_status_field("VmRSS", out)

        mn0, _ = fault_counts()
        checksum = sum(region[offset] for offset in range(0, size, PAGE))
        mn1, _ = fault_counts()
        w("\n  [Step 2] Read every page (stride 4096)\n")
        w(f"    minor faults: {mn1 - mn0}  (checksum={checksum})\n")
        w("    WHY: First read maps to the shared zero page — no physical alloc.\n")
        w("         The zero page is a single global read-only page mapped to all\n")
        w("         unwritten anonymous pages (saves huge amounts of RAM).\n")
        _print_status_field("VmRSS", out)

        mn0, _ = fault_counts()
        region[:] = fill_b
        mn1, _ = fault_counts()
        expected = size // PAGE
        w("\n  [Step 3] memset(32 MiB) — first write to each page\n")
        w(f"    minor faults: {mn1 - mn0}  (expected ~{expected})\n")
        w("    WHY: Each first write triggers COW on the zero page:\n")
        w("         kernel allocates a real frame, copies zeros, maps PTE R/W.\n")
        _print_status_field("VmRSS", out)

        mn0, _ = fault_counts()
        region[:] = fill_c
        mn1, _ = fault_counts()
        w("\n  [Step 4] memset again — warm rescan\n")
        w(f"    minor faults: {mn1 - mn0}\n")
        w("    WHY: All PTEs are now present. CPU walks page table, no fault.\n")
        _print_status_field("VmRSS", out)

        if hasattr(mmap, "MADV_DONTNEED"):
            region.madvise(mmap.MADV_DONTNEED)
        w("\n  [Step 5] madvise(MADV_DONTNEED) — release pages without unmapping\n")
        _print_status_field("VmRSS", out)
        w("    WHY: Kernel marks PTEs not-present and frees frames. VMA survives.\n")
        w("         This is how jemalloc and tcmalloc return memory to the OS.\n")

    w("\n  QUIZ:\n")
    w("    Q1. What is the 'zero page' and why does the kernel maintain it?\n")
    w("    Q2. Why is MADV_DONTNEED preferred over munmap()+mmap() by allocators?\n")
    w("    Q3. What does MAP_POPULATE do and when would you use it?\n")
    w("    Q4. In the write phase, why are all faults 'minor' and not 'major'?\n")


def _new_map_lines(before: list[str], after: list[str]) -> list[str]:
    old = set(before)
    return [line for line in after if line not in old]


def mmap_types_exercise(out: TextIO | None = None) -> None:
    """Exercise 4: anonymous private, file-backed private and shared anonymous mappings."""
    out = sys.stdout if out is None else out
    w = out.write
    section("Exercise 4: mmap Type Comparison — Anonymous, File-backed, Shared", out)
    w("  WHAT: Different mmap flags produce different VMA types with different\n")
    w("        kernel behaviours for faults, writeback, and COW.\n\n")

    before = read_lines("/proc/self/maps") or []
    regions: list[mmap.mmap] = []
    try:
        try:
            regions.append(mmap.mmap(-1, PAGE, flags=mmap.MAP_PRIVATE | mmap.MAP_ANONYMOUS))
        except OSError:
            pass
        w("  MAP_PRIVATE | MAP_ANONYMOUS\n")
        w("    Use: malloc, stack, BSS\n")
        w("    Fault: allocates a zero page copy (COW from zero page)\n")
        w("    Write: stays private — never written back to disk\n\n")

        try:
            fd = os.open("/proc/self/exe", os.O_RDONLY)
        except OSError:
            fd = -1
        if fd >= 0:
            try:
                regions.append(
                    mmap.mmap(fd, PAGE, flags=mmap.MAP_PRIVATE, prot=mmap.PROT_READ)
                )
            except (OSError, ValueError):
                pass
            finally:
                os.close(fd)
            w("  MAP_PRIVATE (file-backed — e.g. text segment from ELF)\n")
            w("    Use: text/rodata segments of executables and .so files\n")
            w("    Fault: page read from file on first access\n")
            w("    Write: COW — modified page becomes private anonymous\n\n")

        try:
            shared = mmap.mmap(-1, PAGE, flags=mmap.MAP_SHARED | mmap.MAP_ANONYMOUS)
            struct.pack_into("i", shared, 0, 42)
            regions.append(shared)
        except OSError:
            pass
        w("  MAP_SHARED | MAP_ANONYMOUS\n")
        w("    Use: shared memory between parent and child after fork()\n")
        w("    Fault: single physical page shared; writes visible to all mappers\n")
        w("    No COW: writes go directly to the shared physical page\n\n")

        w("  OBSERVE in /proc/self/maps:\n")
        after = read_lines("/proc/self/maps")
        if after is not None:
            for line in _new_map_lines(before, after):
                w(f"    {line}")
    finally:
        for region in regions:
            region.close()

    w("\n  QUIZ:\n")
    w("    Q1. Can MAP_SHARED anonymous memory be used for IPC between unrelated\n")
    w("        processes (without a file descriptor)? Why or why not?\n")
    w("    Q2. What happens to dirty pages in a MAP_PRIVATE file-backed mapping\n")
    w("        when the process exits? What about MAP_SHARED?\n")
    w("    Q3. Why does 'ps aux' show a much larger VSZ than RSS for most processes?\n")