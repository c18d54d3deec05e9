"""Process and memory exercises 5 and 8: OOM killer scoring and kernel threads."""

from __future__ import annotations

import os
import sys
from typing import TextIO

from oslabs.common import read_first_line, read_lines
from oslabs.pm_task import print_proc_file, section

KERNEL_THREADS = (
    ("kswapd0", "Memory reclaim — scans LRU lists, frees pages"),
    ("kcompactd0", "Memory compaction — moves pages to reduce fragmentation"),
    ("kworker/*", "Workqueue threads — deferred kernel work items"),
    ("writeback", "Page cache writeback — flushes dirty pages to disk"),
    ("ksoftirqd/*", "Softirq handler — network RX, timers, tasklets"),
    ("migration/*", "CPU migration — moves tasks between CPUs for load balance"),
    ("watchdog/*", "Hard lockup detector — fires NMI if CPU stuck"),
    ("kthreadd", "PID 2: parent of all kernel threads"),
)


def _raw_first_line(path: str) -> str:
    lines = read_lines(path)
    return lines[0] if lines else ""


def oom_killer_exercise(out: TextIO | None = None) -> None:
    """Exercise 5: oom_score and oom_score_adj of this process, init and kthreadd."""
    out = sys.stdout if out is None else out
    w = out.write
    section("Exercise 5: OOM Killer — Scoring and Adjustment", out)
    w("  WHAT: When the system runs out of memory, the OOM killer selects\n")
    w("        and terminates the process with the highest oom_score.\n")
    w("  WHY:  The score is based on RSS, page table size, and oom_score_adj.\n\n")

    pid = os.getpid()
    w("  /proc/self/oom_score: ")
    print_proc_file(f"/proc/{pid}/oom_score", 1, out)
    w("  /proc/self/oom_score_adj: ")
    print_proc_file(f"/proc/{pid}/oom_score_adj", 1, out)

    w("\n  oom_score_adj range: -1000 (never kill) to +1000 (kill first)\n")
    w("  Kubernetes sets oom_score_adj on containers:\n")
    w("    BestEffort pods:   +1000  (killed first under pressure)\n")
    w("    Burstable pods:      2-999 (proportional to over-commit)\n")
    w("    Guaranteed pods:     -998  (protected, killed last)\n\n")

    w("  Key processes on a Linux server (check with: ")
    w("cat /proc/<pid>/oom_score_adj):\n")
    for proc in ("1", "2"):
        comm = read_first_line(f"/proc/{proc}/comm")
        name = comm if comm is not None else "(unknown)"
        w(f"  PID {proc:<4} ({name})  oom_score=")
        w(_raw_first_line(f"/proc/{proc}/oom_score"))
        w("  oom_score_adj=")
        w(_raw_first_line(f"/proc/{proc}/oom_score_adj"))

    w("\n  OBSERVE: PID 1 (init/systemd) has oom_score_adj = -1000 by default.\n")
    w("           It will never be OOM-killed — doing so would crash the system.\n")

    w("\n  QUIZ:\n")
    w("    Q1. How does the kernel calculate oom_score from RSS and page table size?\n")
    w("    Q2. How would you protect a critical daemon from the OOM killer?\n")
    w("    Q3. What is the difference between oom_score and oom_score_adj?\n")
    w("    Q4. How does Kubernetes map QoS classes to oom_score_adj values?\n")


def kthreads_exercise(out: TextIO | None = None) -> None:
    """Exercise 8: the main kernel threads and the status of kthreadd."""
    out = sys.stdout if out is None else out
    w = out.write
    section("Exercise 8: Kernel Thread Observation via /proc", out)
    w("  WHAT: Kernel threads appear in /proc just like user processes,\n")
    w("        but have no user-space address space (VmSize=0, mm=NULL).\n")
    w("  WHY:  kswapd reclaims memory, kcompactd defragments, writeback\n")
    w("        flushes dirty pages, ksoftirqd runs softirq handlers.\n\n")

    w("  Key kernel threads (look for these with "
      "'ps aux | grep -E \"kswapd|kcompactd|writeback\"'):\n\n")
    for name, role in KERNEL_THREADS:
        w(f"  {name:<20}  {role}\n")

    w("\n  Checking PID 2 (kthreadd):\n")
    print_proc_file("/proc/2/status", 8, out)
    w("  OBSERVE: VmSize and VmRSS are absent — kernel threads have mm=NULL.\n")

    w("\n  QUIZ:\n")
    w("    Q1. Why do kernel threads have no virtual address space?\n")
    w("    Q2. When does kswapd wake up? What triggers it?\n")
    w("    Q3. What is the difference between kswapd and kcompactd?\n")
    w("    Q4. Why is there one kswapd per NUMA node?\n")