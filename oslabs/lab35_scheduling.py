"""Lab 35: scheduling policies."""

from __future__ import annotations

import os
import sys
from collections.abc import Iterable
from typing import TextIO

from oslabs.common import phase, read_first_line, read_lines

SCHED_TUNABLES = (
    "/proc/sys/kernel/sched_min_granularity_ns",
    "/proc/sys/kernel/sched_latency_ns",
    "/proc/sys/kernel/sched_migration_cost_ns",
)


def format_cpu_list(cpus: Iterable[int], limit: int = 16) -> str:
    """Return the CPUs below ``limit`` in ascending order, separated by spaces."""
    return " ".join(str(cpu) for cpu in sorted(set(cpus)) if 0 <= cpu < limit)


def read_tunables(paths: Iterable[str] = SCHED_TUNABLES) -> list[tuple[str, str]]:
    """Return (file name, first line) for every tunable that can be read."""
    values = []
    for path in paths:
        value = read_first_line(path)
        if value is not None:
            values.append((os.path.basename(path), value))
    return values


def _current_nice() -> int:
    return os.getpriority(os.PRIO_PROCESS, 0)


def _affinity() -> set[int]:
    try:
        return set(os.sched_getaffinity(0))
    except (AttributeError, OSError):
        return set()


def run(out: TextIO | None = None) -> None:
    """Write the whole lab to ``out``."""
    out = sys.stdout if out is None else out
    w = out.write
    w("=== Lab 35: Scheduling Policies ===\n")

    phase("Phase 1: CFS (Completely Fair Scheduler)", out)
    w("  Default scheduler for SCHED_OTHER/SCHED_NORMAL tasks.\n")
    w("  Uses virtual runtime (vruntime) to ensure fairness.\n")
    w("  Stored in red-black tree ordered by vruntime.\n")
    w("  Nice values -20 to +19 adjust weight (lower nice = more CPU).\n\n")
    w(f"  Current nice: {_current_nice()}\n")
    w("  Timeslice target: /proc/sys/kernel/sched_min_granularity_ns\n")
    granularity = read_lines("/proc/sys/kernel/sched_min_granularity_ns")
    if granularity:
        w(f"  sched_min_granularity: {granularity[0]}")

    phase("Phase 2: Real-Time Schedulers", out)
    w("  SCHED_FIFO: first-in first-out, no timeslice, runs until yield/block.\n")
    w("  SCHED_RR:   round-robin with fixed timeslice among same-priority tasks.\n")
    w("  Priority: 1-99 (higher = more urgent). Always preempts CFS tasks.\n")
    w("  GPU DCs: NCCL communication threads often use SCHED_FIFO.\n")

    phase("Phase 3: SCHED_DEADLINE", out)
    w("  Earliest Deadline First (EDF) scheduling.\n")
    w("  Parameters: runtime, deadline, period.\n")
    w("  Guarantees: if runtime <= deadline, task will complete on time.\n")
    w("  Used for: real-time audio/video, robotics, latency-critical GPU work.\n")

    phase("Phase 4: CPU Affinity", out)
    cpus = format_cpu_list(_affinity(), 16)
    w("  This process can run on CPUs:" + (f" {cpus}" if cpus else ""))
    w("\n  GPU DCs: pin NCCL threads to specific NUMA-local CPUs.\n")

    phase("Phase 5: EEVDF Scheduler (Linux 6.6+) and nice() Impact", out)
    w("  EEVDF replaced CFS in Linux 6.6:\n")
    w("    CFS: pick task with smallest vruntime (most CPU-starved)\n")
    w("    EEVDF: pick ELIGIBLE task with earliest virtual DEADLINE\n")
    w("    Eligibility: task has accumulated >= its minimum runtime\n")
    w("    Benefit: better latency for interactive tasks with latency_nice\n\n")
    w(f"  Current nice value: {_current_nice()}\n")
    for name, value in read_tunables(SCHED_TUNABLES):
        w(f"  {name}: {value} ns\n")

    w("\n  nice() weight table (selected values):\n")
    w("    nice -20: weight=88761 (gets ~98.8% vs nice 0)\n")
    w("    nice  -5: weight=3121  (gets ~75% vs nice 0)\n")
    w("    nice   0: weight=1024  (baseline)\n")
    w("    nice  +5: weight=335   (gets ~24% vs nice 0)\n")
    w("    nice +19: weight=15    (gets ~1.4% vs nice 0)\n")

    w("\n========== Hands-On Exercise ==========\n")
    w("1. Run two CPU-bound loops at nice -10 and nice +10; verify ~16x CPU ratio.\n")
    w("2. Measure wake-up latency for SCHED_FIFO vs SCHED_OTHER;\n")
    w("   verify FIFO has lower and more consistent latency.\n")
    w("3. Modern (EEVDF Linux 6.6): look for se.deadline in /proc/self/sched;\n")
    w("   compare EEVDF slice with sched_min_granularity_ns tunable.\n")

    w("\n========== Quiz ==========\n")
    w("Q1. How does CFS ensure fairness using vruntime?\n")
    w("Q2. Why would you use SCHED_FIFO for GPU communication threads?\n")
    w("Q3. What is the risk of using SCHED_FIFO without care? (hint: starvation)\n")
    w("Q4. How does CPU affinity interact with NUMA topology?\n")
    w("Q5. What is EEVDF and how does it differ from CFS in the scheduling decision?\n")
    w("    What is 'latency_nice' and which workloads benefit from it?\n")
    w("Q6. How does the nice value weight formula work?  What CPU fraction does\n")
    w("    a nice -20 process get when competing with a nice 0 process?\n")
    w("Q7. What is SCHED_DEADLINE and what three parameters does it require?\n")
    w("    Why is it suitable for real-time GPU kernel dispatch scheduling?\n")


def main(argv: list[str] | None = None) -> int:
    """Run the lab on standard output."""
    run(sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())