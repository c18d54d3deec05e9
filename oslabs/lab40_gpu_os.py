"""Lab 40: GPU OS — multicore, hyperthreading, NCCL."""

from __future__ import annotations

import os
import sys
import time
from dataclasses import dataclass
from typing import TextIO

from oslabs.common import phase, read_first_line, read_lines
from oslabs.gpu_topology import gpu_information, locked_memory_lines, numa_nodes

PAGE = 4096
BUFFER_SIZE = 64 * 1024 * 1024
_GIB = 1024.0 * 1024.0 * 1024.0


@dataclass(frozen=True)
class CopyResult:
    """Size and duration of one buffer copy."""

    size: int
    seconds: float

    @property
    def gib_per_second(self) -> float:
        """Copy bandwidth in GiB/s."""
        if self.size == 0:
            return 0.0
        if self.seconds <= 0:
            return float("inf")
        return (self.size / _GIB) / self.seconds


def touch_pages(size: int, stride: int = PAGE) -> tuple[bytearray, float]:
    """Allocate ``size`` bytes and write one byte every ``stride`` bytes.

    Returns the buffer and the seconds spent touching it.
    """
    if stride <= 0:
        raise ValueError("stride must be positive")
    buffer = bytearray(size)
    t0 = time.monotonic()
    buffer[::stride] = bytes(offset & 0xFF for offset in range(0, size, stride))
    return buffer, time.monotonic() - t0


def measure_copy(size: int) -> CopyResult:
    """Time a full copy of a freshly touched ``size``-byte buffer."""
    source, _ = touch_pages(size)
    t0 = time.monotonic()
    copy = bytes(source)
    elapsed = time.monotonic() - t0
    del copy
    return CopyResult(size, elapsed)


def _online_cpus() -> int:
    try:
        return os.sysconf("SC_NPROCESSORS_ONLN")
    except (ValueError, OSError):
        return os.cpu_count() or 0


def _pin_to_cpu0() -> bool:
    try:
        os.sched_setaffinity(0, {0})
    except (AttributeError, OSError):
        return False
    return True


def run(out: TextIO | None = None) -> None:
    """Write the whole lab to ``out``."""
    out = sys.stdout if out is None else out
    w = out.write
    w("=== Lab 40: GPU OS — Multicore, Hyperthreading, NCCL ===\n")

    phase("Phase 1: CPU Topology for GPU Workloads", out)
    w(f"  Online CPUs: {_online_cpus()}\n")
    for node, cpulist in numa_nodes():
        w(f"  NUMA node {node}: CPUs {cpulist}\n")

    phase("Phase 2: GPU Topology (nvidia-smi)", out)
    gpus = gpu_information()
    if gpus is None:
        w("  No NVIDIA GPUs detected (nvidia driver not loaded).\n")
        w("  On a GPU server, you would see:\n")
        w("    nvidia-smi topo -m  (GPU interconnect topology: NVLink, PCIe)\n")
        w("    nvidia-smi -L       (list GPUs)\n")
        w("    lstopo              (full hardware topology)\n")
    else:
        for index, lines in enumerate(gpus):
            w(f"  GPU {index}:\n")
            for line in lines:
                w(f"    {line}")

    phase("Phase 3: Hyperthreading Impact", out)
    w("  HT siblings share: L1/L2 cache, execution units, TLB.\n")
    w("  For compute-heavy (GPU training): disable HT or pin to physical cores.\n")
    w("  For I/O-heavy (data loading): HT helps with context switch throughput.\n\n")
    if _pin_to_cpu0():
        w("  Pinned to CPU 0. NCCL threads should be pinned to NUMA-local CPUs.\n")

    phase("Phase 4: NCCL and OS Interactions", out)
    w("  NCCL (NVIDIA Collective Communication Library) for multi-GPU training:\n")
    w("    AllReduce, AllGather, ReduceScatter across GPUs/nodes.\n\n")
    w("  OS-level requirements for optimal NCCL performance:\n")
    w("    1. CPU affinity: pin NCCL threads to NUMA-local CPUs\n")
    w("    2. Huge pages: reduce TLB misses for pinned GPU memory\n")
    w("    3. IRQ affinity: route NIC interrupts to correct NUMA node\n")
    w("    4. SCHED_FIFO: avoid latency spikes from preemption\n")
    w("    5. Kernel bypass: GPUDirect RDMA avoids CPU memory copies\n")
    w("    6. IOMMU: iommu=pt for direct DMA without translation overhead\n")
    w("    7. Transparent Huge Pages: disable for GPU workloads (compaction stalls)\n")
    w("    8. CPU governor: set to performance (no frequency scaling)\n\n")
    thp = read_first_line("/sys/kernel/mm/transparent_hugepage/enabled")
    if thp is not None:
        w(f"  THP: {thp}\n")
    governor = read_first_line("/sys/devices/system/cpu/cpu0/cpufreq/scaling_governor")
    if governor is not None:
        w(f"  CPU governor: {governor}\n")

    phase("Phase 5: OS Tuning Checklist for GPU DCs", out)
    w("  /proc/sys/vm/zone_reclaim_mode = 0     (dont reclaim NUMA-local memory aggressively)\n")
    w("  /proc/sys/kernel/numa_balancing = 0     (disable auto-NUMA for pinned workloads)\n")
    w("  /sys/kernel/mm/transparent_hugepage/enabled = never\n")
    w("  /sys/devices/system/cpu/cpu*/cpufreq/scaling_governor = performance\n")
    w("  isolcpus=<list> on kernel cmdline (reserve CPUs for NCCL)\n")
    w("  IRQ affinity: /proc/irq/*/smp_affinity\n")

    phase("Phase 6: CPU-GPU Shared Memory Simulation", out)
    w("  Simulating pinned (page-locked) memory allocation and transfer timing.\n")
    try:
        buffer, touch_seconds = touch_pages(BUFFER_SIZE, PAGE)
    except MemoryError:
        buffer = None
    if buffer is not None:
        w(
            f"  Allocated {BUFFER_SIZE >> 20} MiB buffer, touched {BUFFER_SIZE >> 12} "
            f"pages in {touch_seconds * 1e3:.1f} ms\n"
        )
        del buffer
        try:
            copy = measure_copy(BUFFER_SIZE)
        except MemoryError:
            copy = None
        if copy is not None:
            w(
                f"  memcpy {BUFFER_SIZE >> 20} MiB (proxy for DMA): "
                f"{copy.seconds * 1e3:.1f} ms, {copy.gib_per_second:.1f} GB/s\n"
            )
            w("  PCIe Gen5 x16 actual limit: ~64 GB/s (H2D + D2H combined)\n")
            w("  NVLink 4.0 GPU-to-GPU:      ~900 GB/s all-to-all via NVSwitch\n")

    w("\n  cudaMallocHost equivalent: mlock() pins pages in RAM (no swap).\n")
    w("  mlock() requires RLIMIT_MEMLOCK or CAP_IPC_LOCK (or root).\n")
    limits = read_lines("/proc/self/limits")
    if limits is not None:
        for line in locked_memory_lines("".join(limits)):
            w(f"  {line}\n")

    w("\n========== Hands-On Exercise ==========\n")
    w("1. Benchmark mlock-pinned vs pageable memory: measure memcpy bandwidth\n")
    w("   difference; correlate with GPU cudaMallocHost vs pageable cudaMalloc.\n")
    w("2. Measure NUMA locality: compare numactl --membind=0 vs --membind=1\n")
    w("   bandwidth; observe numa_pages_migrated in /proc/vmstat.\n")
    w("3. Modern (NVLink/NCCL): run nvidia-smi topo -m to inspect NVLink paths;\n")
    w("   measure AllReduce latency with nccl-tests; observe NCCL_DEBUG transport selection.\n")

    w("\n========== Quiz ==========\n")
    w("Q1. Why should NCCL threads be pinned to NUMA-local CPUs?\n")
    w("Q2. How does GPUDirect RDMA bypass the CPU for inter-node GPU communication?\n")
    w("Q3. Why disable Transparent Huge Pages for GPU workloads?\n")
    w("Q4. What is the relationship between IRQ affinity and NCCL performance?\n")
    w("Q5. Design the OS configuration for an 8xH100 GPU server optimized for LLM training.\n")
    w("Q6. What is CUDA Unified Memory (UM) and how does it use demand paging?\n")
    w("    Why is cudaMemPrefetchAsync() important for training performance?\n")
    w("    How does ATS (Address Translation Services, PCIe 4.0+) differ from UM page faults?\n")
    w("Q7. Compare NVLink 4.0 (900 GB/s) vs PCIe Gen5 x16 (64 GB/s) for AllReduce.\n")
    w("    When must a NCCL job fall back to PCIe instead of NVLink?\n")
    w("    How does GDR (GPUDirect RDMA) interact with the IOMMU and iommu=pt?\n")


def main(argv: list[str] | None = None) -> int:
    """Run the lab on standard output."""
    run(sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())