"""Lab 38: virtualization."""

from __future__ import annotations

import os
import sys
from typing import TextIO

from oslabs.common import phase, read_first_line, read_lines


def hypervisor_present(cpuinfo_text: str) -> bool:
    """True when a flags line of /proc/cpuinfo carries the ``hypervisor`` flag."""
    for line in cpuinfo_text.splitlines():
        key, sep, value = line.partition(":")
        if sep and key.strip() == "flags" and "hypervisor" in value.split():
            return True
    return False


def count_iommu_groups(path: str = "/sys/kernel/iommu_groups") -> int:
    """Return the number of entries in the IOMMU groups directory, 0 if absent."""
    try:
        return len(os.listdir(path))
    except OSError:
        return 0


def _device_present(path: str) -> bool:
    try:
        with open(path, "rb"):
            return True
    except OSError:
        return False


def _hypervisor_name() -> str | None:
    for path in ("/sys/hypervisor/type", "/sys/class/dmi/id/sys_vendor"):
        name = read_first_line(path)
        if name:
            return name.strip()
    return None


def run(out: TextIO | None = None) -> None:
    """Write the whole lab to ``out``."""
    out = sys.stdout if out is None else out
    w = out.write
    w("=== Lab 38: Virtualization ===\n")

    phase("Phase 1: Hypervisor Detection", out)
    cpuinfo = read_lines("/proc/cpuinfo")
    if cpuinfo is not None:
        in_vm = hypervisor_present("".join(cpuinfo))
        state = "SET (running in VM)" if in_vm else "NOT SET (bare metal likely)"
        w(f"  CPUID hypervisor bit: {state}\n")
        if in_vm:
            name = _hypervisor_name()
            if name:
                w(f"  Hypervisor: {name}\n")

    phase("Phase 2: Virtualization Types", out)
    w("  Type 1 (bare-metal): KVM, Xen, VMware ESXi — hypervisor on hardware.\n")
    w("  Type 2 (hosted): VirtualBox, VMware Workstation — hypervisor on host OS.\n")
    w("  Paravirtualization: guest OS modified for hypervisor (Xen PV, virtio).\n")
    w("  Hardware-assisted: Intel VT-x, AMD-V — CPU supports VM natively.\n")

    phase("Phase 3: KVM Architecture", out)
    w("  KVM turns Linux into a Type-1 hypervisor:\n")
    w("    /dev/kvm — userspace interface\n")
    w("    QEMU provides device emulation\n")
    w("    Guest runs in a special CPU mode (non-root mode)\n")
    w("    VM exits trap to KVM for privileged operations\n\n")
    if _device_present("/dev/kvm"):
        w("  /dev/kvm present — KVM available.\n")
    else:
        w("  /dev/kvm not present (may need modprobe kvm).\n")

    phase("Phase 4: GPU Virtualization", out)
    w("  NVIDIA vGPU: time-sliced GPU sharing (MIG on A100/H100).\n")
    w("  GPU passthrough: full GPU assigned to one VM (SR-IOV).\n")
    w("  MIG: Multi-Instance GPU — hardware-partitioned GPU slices.\n")

    phase("Phase 5: VFIO GPU Passthrough and VM Detection", out)
    w("  VFIO (Virtual Function I/O):\n")
    w("    - IOMMU-based device isolation for userspace direct device access\n")
    w("    - GPU assigned to VM: IOMMU translates GPU DMA to host physical addresses\n")
    w("    - /dev/vfio/<group>: VFIO group device file\n")
    w("    - Used by: QEMU GPU passthrough, DPDK, SPDK\n\n")
    if _device_present("/dev/vfio/vfio"):
        w("  /dev/vfio/vfio present -- VFIO module loaded\n")
    else:
        w("  /dev/vfio/vfio not present (modprobe vfio vfio_pci to enable)\n")
    groups = count_iommu_groups()
    w(f"  IOMMU groups: {groups} (0 = IOMMU disabled or passthrough mode)\n")

    w("\n  GPU virtualization comparison:\n")
    w("    Time-sliced vGPU: GPU context-switched like CPU (NVIDIA GRID)\n")
    w("                      Multiple VMs share one GPU; each gets time slice\n")
    w("                      Latency: same as bare-metal / context-switch overhead\n")
    w("    MIG (A100/H100):  hardware-partitioned GPU slices (1/7, 2/7, 4/7, etc.)\n")
    w("                      Each slice is isolated: VRAM, cache, compute engines\n")
    w("                      No inter-slice interference (unlike time-slicing)\n")
    w("    VFIO passthrough:  entire GPU to one VM; full VRAM and compute\n")
    w("                      Best performance; no sharing\n")

    w("\n========== Hands-On Exercise ==========\n")
    w("1. Detect hypervisor via CPUID, /proc/cpuinfo flags, and dmesg;\n")
    w("   compare reliability of each method.\n")
    w("2. Measure VM exit overhead: compare CPUID latency vs RDTSC in a KVM guest.\n")
    w("3. Modern (VFIO passthrough): list IOMMU groups for GPUs;\n")
    w("   explain why ACS (PCIe Access Control Services) is required for safe isolation.\n")

    w("\n========== Quiz ==========\n")
    w("Q1. What is a VM exit and when does it occur?\n")
    w("Q2. How does KVM use Intel VT-x for hardware virtualization?\n")
    w("Q3. What is virtio and why is it faster than emulated devices?\n")
    w("Q4. How does MIG differ from time-sliced vGPU sharing?\n")
    w("Q5. What is VFIO and how does it enable GPU passthrough to VMs?\n")
    w("    What role does the IOMMU play in isolating GPU DMA?\n")
    w("Q6. On a KVM host, what is the overhead of a VM exit caused by CPUID\n")
    w("    vs a RDTSC that is handled without a VM exit?\n")
    w("Q7. What is SR-IOV (Single Root I/O Virtualization) and how does it differ\n")
    w("    from MIG for GPU sharing across multiple VMs or Kubernetes pods?\n")


def main(argv: list[str] | None = None) -> int:
    """Run the lab on standard output."""
    run(sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())