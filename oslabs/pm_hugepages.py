"""Process and memory exercise 6: huge pages and TLB coverage."""

from __future__ import annotations

import mmap
import sys
import time
from typing import TextIO

from oslabs.common import read_lines
from oslabs.pm_task import print_proc_file, section, subsection

PAGE = 4096
BENCH_SIZE = 256 * 1024 * 1024
_CHUNK = 1024 * 1024


def huge_page_lines(meminfo_text: str) -> list[str]:
    """Return the /proc/meminfo lines that mention huge pages."""
    return [
        line for line in meminfo_text.splitlines()
        if "Huge" in line or "huge" in line
    ]


def _fill(region: mmap.mmap, byte: int) -> None:
    chunk = bytes([byte]) * _CHUNK
    size = len(region)
    for offset in range(0, size, _CHUNK):
        end = min(offset + _CHUNK, size)
        region[offset:end] = chunk[: end - offset]


def _scan(region: mmap.mmap) -> tuple[float, int]:
    t0 = time.monotonic()
    total = sum(region[::PAGE])
    return time.monotonic() - t0, total


def huge_pages_exercise(out: TextIO | None = None) -> None:
    """Exercise 6: huge page counters, THP setting and a 4K vs THP scan."""
    out = sys.stdout if out is None else out
    w = out.write
    section("Exercise 6: Huge Pages — TLB Coverage and Allocation", out)
    w("  WHAT: 2 MiB huge pages reduce TLB pressure 512x vs 4 KiB pages.\n")
    w("  WHY:  A modern Intel dTLB holds ~64 4K-page entries or ~32 2M-page entries.\n")
    w("        For 256 MiB of random access: 65536 TLB entries needed (4K) vs 128 (2M).\n\n")

    subsection("/proc/meminfo huge page fields", out)
    meminfo = read_lines("/proc/meminfo")
    if meminfo is not None:
        for line in huge_page_lines("".join(meminfo)):
            w(f"  {line}\n")

    subsection("Transparent Huge Pages (THP) setting", out)
    print_proc_file("/sys/kernel/mm/transparent_hugepage/enabled", 1, out)

    w("\n  OBSERVE:\n")
    w("    HugePages_Total:  pre-allocated huge pages (via vm.nr_hugepages)\n")
    w("    HugePages_Free:   unused pre-allocated huge pages\n")
    w("    AnonHugePages:    THP — anonymous huge pages allocated on demand\n")
    w("    THP enabled=always: kernel promotes 4K pages to 2M automatically\n")
    w("    THP enabled=madvise: only for regions tagged with MADV_HUGEPAGE\n\n")

    try:
        region = mmap.mmap(-1, BENCH_SIZE, flags=mmap.MAP_PRIVATE | mmap.MAP_ANONYMOUS)
    except OSError:
        w("  [mmap failed, skipping benchmark]\n")
        return

    with region:
        _fill(region, 1)
        t4k, total = _scan(region)
        w(f"  Random-stride scan 256 MiB (4K pages): {t4k:.3f} s  (s={total})\n")

        if hasattr(mmap, "MADV_HUGEPAGE"):
            try:
                region.madvise(mmap.MADV_HUGEPAGE)
            except OSError:
                pass
            _fill(region, 2)
            tthp, total = _scan(region)
            w(f"  Random-stride scan 256 MiB (THP/2M):   {tthp:.3f} s  (s={total})\n")
            if tthp > 0 and t4k > 0:
                w(f"  Speedup from THP: {t4k / tthp:.1f}x\n")
        else:
            w("  [MADV_HUGEPAGE not available on this platform]\n")

    w("\n  QUIZ:\n")
    w("    Q1. Why does THP improve performance for sequential access less than\n")
    w("        for random access?\n")
    w("    Q2. What is a TLB shootdown and why is it expensive on 256-core servers?\n")
    w("    Q3. Why do GPU ML frameworks set THP to 'madvise' rather than 'always'?\n")
    w("        Hint: khugepaged compaction stalls.\n")