"""Lab 39: cloud computing OS primitives (cgroups, namespaces, containers)."""

from __future__ import annotations

import os
import re
import sys
from collections.abc import Iterable
from typing import TextIO

from oslabs.common import phase, read_lines

NAMESPACES = ("cgroup", "ipc", "mnt", "net", "pid", "user", "uts")

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def cgroup_v2_path(cgroup_text: str) -> str:
    """Return the cgroup v2 path ("0::<path>" line) of a /proc/<pid>/cgroup file.

    When several such lines exist the last one wins; "" when there is none.
    """
    path = ""
    for line in cgroup_text.splitlines():
        if line.startswith("0::"):
            path = line[3:]
    return path


def describe_memory_max(value: str) -> str:
    """Describe a cgroup memory.max value the way the lab prints it."""
    if value == "max":
        return "max (unlimited -- not in a limited container)"
    match = _LEADING_INT.match(value)
    limit = int(match.group(1)) if match else 0
    return f"{value} bytes (~{limit / (1024.0 * 1024.0):.0f} MiB)"


def namespace_inodes(
    names: Iterable[str] = NAMESPACES,
    root: str = "/proc/self/ns",
) -> list[tuple[str, int]]:
    """Return (name, inode) for every namespace entry under ``root`` that can be stat'ed."""
    inodes = []
    for name in names:
        try:
            info = os.stat(os.path.join(root, name))
        except OSError:
            continue
        inodes.append((name, info.st_ino))
    return inodes


def _first_of(*paths: str) -> list[str] | None:
    """Lines of the first of ``paths`` that can be opened, or None."""
    for path in paths:
        lines = read_lines(path)
        if lines is not None:
            return lines
    return None


def run(out: TextIO | None = None) -> None:
    """Write the whole lab to ``out``."""
    out = sys.stdout if out is None else out
    w = out.write
    w("=== Lab 39: Cloud Computing OS Primitives ===\n")

    phase("Phase 1: Cgroups — Resource Control", out)
    w("  Cgroups v2 hierarchy: /sys/fs/cgroup/\n")
    w("  Controls: cpu, memory, io, pids, cpuset\n\n")
    cgroup_lines = read_lines("/proc/self/cgroup")
    for line in cgroup_lines or []:
        w(f"  {line}")
    w("\n  Memory cgroup enforces limits:\n")
    memory = _first_of(
        "/sys/fs/cgroup/memory.max",
        "/sys/fs/cgroup/memory/memory.limit_in_bytes",
    )
    if memory:
        w(f"    memory.max: {memory[0]}")

    phase("Phase 2: Namespaces — Isolation", out)
    w("  This process namespaces:\n")
    for name, inode in namespace_inodes():
        w(f"    {name}: inode={inode}\n")

    phase("Phase 3: Container = cgroups + namespaces + fs overlay", out)
    w("  Docker/containerd builds on:\n")
    w("    cgroups: resource limits (CPU, memory, I/O)\n")
    w("    namespaces: isolation (PID, network, mount, user)\n")
    w("    overlayfs: layered filesystem (image layers)\n")
    w("    seccomp: syscall filtering\n")
    w("    capabilities: fine-grained privileges\n")

    phase("Phase 4: Cloud-Native GPU Scheduling", out)
    w("  Kubernetes GPU scheduling:\n")
    w("    nvidia-device-plugin exposes GPU resources\n")
    w("    Pod requests: nvidia.com/gpu: 1\n")
    w("    GPU isolation: CUDA_VISIBLE_DEVICES + MIG\n")
    w("    Scheduling constraints: NUMA locality, PCIe topology\n")

    phase("Phase 5: Reading cgroup Memory Limits and Kubernetes Context", out)
    w("  Reading cgroup v2 memory limits for this process:\n")
    cgroup_text = "".join(read_lines("/proc/self/cgroup") or [])
    for line in cgroup_text.splitlines():
        if line.startswith("0::"):
            w(f"  cgroup v2 path: {line[3:]}\n")
    cgpath = cgroup_v2_path(cgroup_text)

    memory = _first_of(f"/sys/fs/cgroup{cgpath}/memory.max", "/sys/fs/cgroup/memory.max")
    if memory:
        w(f"  memory.max: {describe_memory_max(memory[0].rstrip(chr(10)))}\n")
    pids = _first_of(f"/sys/fs/cgroup{cgpath}/pids.max", "/sys/fs/cgroup/pids.max")
    if pids:
        w(f"  pids.max: {pids[0].rstrip(chr(10))} (container fork-bomb protection)\n")

    w("\n  Kubernetes pod cgroup hierarchy:\n")
    w("    /sys/fs/cgroup/kubepods/<qos>/<pod-uid>/<container>/\n")
    w("    QoS classes: Guaranteed (limits==requests), Burstable, BestEffort\n")
    w("    Guaranteed pods: CPU pinned, no memory balloon, first served by scheduler\n\n")
    w("  Firecracker microVM (AWS Lambda):\n")
    w("    - KVM microVM with minimal virtio devices, jailer seccomp, memory balloon\n")
    w("    - <125ms boot time (vs seconds for QEMU full VM)\n")
    w("    - Each Lambda function invocation = isolated microVM\n")
    w("    - No shared kernel between Lambda functions (stronger than containers)\n")

    w("\n========== Hands-On Exercise ==========\n")
    w("1. Read /sys/fs/cgroup/<path>/memory.current; compare to /proc/self/status VmRSS.\n")
    w("2. Simulate K8s memory limit: mkdir cgroup, set memory.max=50MB,\n")
    w("   add shell process, try to malloc > limit and observe OOM kill.\n")
    w("3. Modern (Firecracker): compare container vs microVM isolation model;\n")
    w("   explain why separate kernel per workload improves multi-tenant security.\n")

    w("\n========== Quiz ==========\n")
    w("Q1. How do cgroups enforce a memory limit? What happens on OOM?\n")
    w("Q2. Why cant you see host processes from inside a PID namespace?\n")
    w("Q3. What is overlayfs and why is it efficient for container images?\n")
    w("Q4. How does Kubernetes schedule GPU workloads across nodes?\n")
    w("Q5. What is the difference between cgroups v1 and v2?  Why does Kubernetes\n")
    w("    prefer v2 for memory accounting?\n")
    w("Q6. What is Firecracker and how does it differ from Docker containers\n")
    w("    in terms of kernel sharing and isolation?\n")
    w("Q7. What are Kubernetes QoS classes (Guaranteed/Burstable/BestEffort)\n")
    w("    and how do they map to cgroup priority and OOM score?\n")


def main(argv: list[str] | None = None) -> int:
    """Run the lab on standard output."""
    run(sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())