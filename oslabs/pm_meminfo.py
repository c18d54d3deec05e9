"""Process and memory exercises 7 and 10: /proc/meminfo tour and cgroup limits."""

from __future__ import annotations

import sys
from typing import TextIO

from oslabs.common import read_lines
from oslabs.pm_task import section

MEMINFO_NOTES = {
    "MemTotal": "Total usable RAM (kernel reserved memory excluded)",
    "MemFree": "Completely unused RAM (not cache, not buffers)",
    "MemAvailable": "Estimate of RAM available without swapping (use this, not MemFree)",
    "Buffers": "Kernel block-layer I/O buffers (small, mostly metadata)",
    "Cached": "Page cache: file content cached in RAM",
    "SwapCached": "Pages swapped out but still in swap cache (fast re-access)",
    "Active": "Pages recently used (unlikely to be reclaimed)",
    "Inactive": "Pages not recently used (candidates for reclaim)",
    "SwapTotal": "Total swap space (disk or zram)",
    "SwapFree": "Unused swap space",
    "Dirty": "Pages modified in page cache not yet written to disk",
    "Writeback": "Pages being written back to disk right now",
    "AnonPages": "Anonymous pages mapped into processes (heap, stack, mmap anon)",
    "Mapped": "Files mapped into memory (mmap'd files, shared libs)",
    "Shmem": "Shared memory (tmpfs, SysV shm, shared anon mmap)",
    "KReclaimable": "Kernel memory that can be reclaimed under pressure",
    "Slab": "Total SLUB/SLAB allocator memory",
    "SReclaimable": "Reclaimable slab (dcache, icache — freed under pressure)",
    "SUnreclaim": "Unreclaimable slab (kernel data structures always needed)",
    "PageTables": "Memory used by page table entries",
    "VmallocTotal": "Total vmalloc virtual address space",
    "VmallocUsed": "Used vmalloc space (kernel modules, ioremap)",
    "HugePages_Total": "Pre-allocated 2 MiB huge pages",
    "AnonHugePages": "Transparent huge pages in use by anonymous regions",
}

CGROUP_FILES = (
    "/sys/fs/cgroup/memory.max",
    "/sys/fs/cgroup/memory.current",
    "/sys/fs/cgroup/memory.high",
    "/sys/fs/cgroup/cpu.max",
    "/sys/fs/cgroup/cpu.stat",
    "/sys/fs/cgroup/memory.stat",
)


def _key(line: str) -> str:
    return line.partition(":")[0][:63]


def annotate_meminfo(meminfo_text: str) -> list[tuple[str, str | None]]:
    """Pair each /proc/meminfo line (without newline) with its explanation, if any."""
    return [(line, MEMINFO_NOTES.get(_key(line))) for line in meminfo_text.splitlines()]


def meminfo_exercise(out: TextIO | None = None) -> None:
    """Exercise 7: print /proc/meminfo with explanations of the key fields."""
    out = sys.stdout if out is None else out
    w = out.write
    section("Exercise 7: /proc/meminfo Full Tour", out)
    w("  WHAT: A complete view of the system's memory state.\n")
    w("  WHY:  Every production monitoring tool (Prometheus node_exporter,\n")
    w("        Datadog, CloudWatch) reads /proc/meminfo. Knowing each field\n")
    w("        is essential for capacity planning and OOM root-cause analysis.\n\n")

    try:
        with open("/proc/meminfo", encoding="utf-8", errors="replace") as handle:
            text = handle.read()
    except OSError as exc:
        print(f"fopen /proc/meminfo: {exc.strerror}", file=sys.stderr)
        return

    for line, note in annotate_meminfo(text):
        if note is not None:
            rest = line[len(_key(line)) + 1:] + "\n"
            w(f"  {rest:<20}  ← {note}\n")
        w(f"  {line}\n")

    w("\n  QUIZ:\n")
    w("    Q1. A server shows MemFree=100MB but MemAvailable=4GB. Is it under\n")
    w("        memory pressure? Why are these two values so different?\n")
    w("    Q2. What does a large 'Dirty' value indicate and when is it a concern?\n")
    w("    Q3. Why is SReclaimable memory 'free' for practical purposes?\n")


def cgroup_exercise(out: TextIO | None = None) -> None:
    """Exercise 10: cgroup v2 memory and CPU limit files."""
    out = sys.stdout if out is None else out
    w = out.write
    section("Exercise 10: cgroup v2 Memory Limit Detection", out)
    w("  WHAT: cgroups v2 exposes resource limits as files in /sys/fs/cgroup/.\n")
    w("  WHY:  Every container runtime (Docker, containerd, CRI-O) and\n")
    w("        orchestrator (Kubernetes) uses cgroups v2 to enforce limits.\n")
    w("        Understanding how limits are enforced helps diagnose OOM kills\n")
    w("        and throttling in production.\n\n")

    for path in CGROUP_FILES:
        w(f"  {path:<45} : ")
        lines = read_lines(path)
        if lines is None:
            w("(not found — may be running outside a cgroup or on cgroups v1)\n")
        elif lines:
            w(lines[0])

    w("\n  Interpreting memory.max:\n")
    w("    'max'         = no limit (bare metal or unlimited container)\n")
    w("    '67108864'    = 64 MiB limit (Docker --memory=64m)\n")
    w("    '1073741824'  = 1 GiB limit  (Kubernetes resources.limits.memory: 1Gi)\n\n")

    w("  Interpreting cpu.max:\n")
    w("    'max 100000'  = no CPU limit\n")
    w("    '200000 100000' = 2.0 cores (Docker --cpus=2)\n\n")

    w("  QUIZ:\n")
    w("    Q1. What is the difference between memory.max and memory.high in cgroups v2?\n")
    w("    Q2. How does the kernel enforce memory.max? What happens when a process\n")
    w("        exceeds it?\n")
    w("    Q3. How does Kubernetes translate 'resources.limits.cpu: 500m' into\n")
    w("        a cgroup cpu.max value?\n")
    w("    Q4. What is the difference between cgroups v1 and v2 hierarchy?\n")
    w("        Why does Kubernetes prefer v2?\n")