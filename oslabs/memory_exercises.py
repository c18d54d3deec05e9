"""Process and memory subsystems deep dive: runs all ten exercises."""

from __future__ import annotations

import os
import sys
import time
from typing import TextIO

from oslabs.common import read_lines
from oslabs.pm_faults import mmap_types_exercise, page_fault_exercise
from oslabs.pm_hugepages import huge_pages_exercise
from oslabs.pm_meminfo import cgroup_exercise, meminfo_exercise
from oslabs.pm_oom import kthreads_exercise, oom_killer_exercise
from oslabs.pm_task import mm_struct_exercise, section, task_struct_exercise

CHILD_EXIT_CODE = 42


def _child_report() -> str:
    pid = os.getpid()
    parts = [
        f"  Child  PID: {pid}   PPID: {os.getppid()}\n",
        f"  Child reading its own /proc/{pid}/status:\n",
    ]
    for line in (read_lines(f"/proc/{pid}/status") or [])[:6]:
        parts.append(f"    {line}")
    parts.append(f"  Child: about to exit({CHILD_EXIT_CODE})\n")
    return "".join(parts)


def lineage_exercise(out: TextIO | None = None) -> int:
    """Exercise 9: fork a child, observe it as a zombie, reap it.

    Returns the child's exit status, or -1 if it did not exit normally.
    """
    out = sys.stdout if out is None else out
    w = out.write
    section("Exercise 9: Process Lineage — fork -> exec -> wait Chain", out)
    w("  WHAT: Demonstrate the complete fork/exec/wait lifecycle and observe\n")
    w("        how /proc entries appear and disappear.\n")
    w("  WHY:  Every shell command, every container start, every Kubernetes\n")
    w("        pod launch uses exactly this sequence.\n\n")
    w(f"  Parent PID: {os.getpid()}   PPID: {os.getppid()}\n")

    rfd, wfd = os.pipe()
    child = os.fork()
    if child == 0:
        try:
            os.close(rfd)
            os.write(wfd, _child_report().encode())
        finally:
            os._exit(CHILD_EXIT_CODE)
    os.close(wfd)

    time.sleep(0.05)
    with os.fdopen(rfd, "r", encoding="utf-8", errors="replace") as reader:
        w(reader.read())

    w(f"\n  Parent: child {child} has exited. Checking for zombie state...\n")
    status_lines = read_lines(f"/proc/{child}/status")
    if status_lines is None:
        w(f"  /proc/{child} already gone (may have been reaped by timing)\n")
    else:
        for line in status_lines:
            if line.startswith("State"):
                w(f"  {line}")
                break

    reaped, status = os.waitpid(child, 0)
    exit_status = os.WEXITSTATUS(status) if os.WIFEXITED(status) else -1
    w(f"  Parent reaped PID {reaped}: exit_status={exit_status}\n")
    w(f"  After wait(): /proc/{child}/ no longer exists.\n")

    w("\n  OBSERVE:\n")
    w("    Between child exit and parent wait(): child is a ZOMBIE (Z state).\n")
    w("    It consumes a PID slot and a task_struct but no memory.\n")
    w("    After wait(): task_struct is freed, PID is recycled.\n")

    w("\n  QUIZ:\n")
    w("    Q1. What resources does a zombie process hold?\n")
    w("    Q2. What happens if the parent never calls wait() and itself exits?\n")
    w("    Q3. How does PID 1 (systemd) avoid zombie accumulation?\n")
    w("    Q4. Why does exec() reset signal handlers to SIG_DFL?\n")
    return exit_status


def run(out: TextIO | None = None) -> None:
    """Run all ten exercises and the summary."""
    out = sys.stdout if out is None else out
    w = out.write
    w("╔══════════════════════════════════════════════════════════════════╗\n")
    w("║  Process & Memory Subsystems — Deep Dive Exercise               ║\n")
    w("╚══════════════════════════════════════════════════════════════════╝\n")
    w(f"PID: {os.getpid()}  (use this in /proc/<pid>/ commands while the program runs)\n")

    task_struct_exercise(out)
    mm_struct_exercise(out)
    page_fault_exercise(out)
    mmap_types_exercise(out)
    oom_killer_exercise(out)
    huge_pages_exercise(out)
    meminfo_exercise(out)
    kthreads_exercise(out)
    out.flush()
    lineage_exercise(out)
    cgroup_exercise(out)

    w("\n\n")
    section("Summary: What You Should Now Be Able to Explain", out)
    w("  1.  What each field in /proc/<pid>/status maps to in task_struct\n")
    w("  2.  The sequence: mmap() -> first-touch fault -> PTE install -> warm access\n")
    w("  3.  Why VmSize >> VmRSS for most processes\n")
    w("  4.  How MAP_PRIVATE COW differs from MAP_SHARED semantics\n")
    w("  5.  How the OOM killer scores processes and how Kubernetes adjusts scores\n")
    w("  6.  Why huge pages reduce TLB misses and when to use madvise(MADV_HUGEPAGE)\n")
    w("  7.  What MemAvailable means vs MemFree in /proc/meminfo\n")
    w("  8.  Why kernel threads show VmSize=0 in /proc/<pid>/status\n")
    w("  9.  The zombie lifecycle and why reaping is critical in PID namespaces\n")
    w(" 10.  How cgroup v2 memory.max maps to Kubernetes resource limits\n")

    w("\n  Next steps:\n")
    w("    Run labs 08, 09, 10, 27, 28 and cross-reference the /proc output\n")
    w("    Read kernel source: mm/memory.c (page fault handler)\n")
    w("                        mm/mmap.c   (mmap, VMA management)\n")
    w("                        mm/vmscan.c (kswapd, LRU reclaim)\n")
    w("                        kernel/fork.c (do_fork, copy_mm)\n")


def main(argv: list[str] | None = None) -> int:
    """Run every exercise on standard output."""
    run(sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())