"""Lab 34: protection and security."""

from __future__ import annotations

import os
import re
import sys
from typing import TextIO

from oslabs.common import phase, read_lines

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def capability_lines(status_text: str) -> list[str]:
    """Return the capability lines (starting with "Cap") of a status file."""
    return [line for line in status_text.splitlines() if line.startswith("Cap")]


def selinux_status(value: str) -> str:
    """Describe the SELinux enforce flag read from /sys/fs/selinux/enforce."""
    match = _LEADING_INT.match(value)
    enforcing = bool(match and int(match.group(1)))
    return "YES" if enforcing else "NO (permissive/disabled)"


def _mapping_start(predicate) -> str:
    for line in read_lines("/proc/self/maps") or []:
        fields = line.split()
        if len(fields) >= 2 and predicate(fields):
            return "0x" + fields[0].split("-")[0]
    return "(unknown)"


def run(out: TextIO | None = None) -> None:
    """Write the whole lab to ``out``."""
    out = sys.stdout if out is None else out
    w = out.write
    pid = os.getpid()
    w("=== Lab 34: Protection and Security ===\n")

    phase("Phase 1: Linux Capabilities", out)
    w("  Traditional: root (UID 0) can do everything.\n")
    w("  Capabilities: fine-grained privileges (CAP_NET_ADMIN, CAP_SYS_PTRACE, etc.)\n\n")
    w(f"  This process (PID {pid}) capabilities:\n")
    status = read_lines(f"/proc/{pid}/status")
    if status is not None:
        for line in capability_lines("".join(status)):
            w(f"  {line}\n")

    phase("Phase 2: Namespaces", out)
    w("  Linux namespaces isolate system resources per process group:\n")
    w("    PID ns:  separate PID numbering (containers see PID 1)\n")
    w("    NET ns:  separate network stack\n")
    w("    MNT ns:  separate mount table\n")
    w("    UTS ns:  separate hostname\n")
    w("    USER ns: separate UID/GID mapping\n")
    w("    IPC ns:  separate IPC resources\n")
    w("  Docker/containers use ALL of these together.\n")

    phase("Phase 3: Seccomp", out)
    w("  Seccomp filters restrict which syscalls a process can make.\n")
    w("  Used by: Chrome, Docker, Android, systemd.\n")
    w("  Mode 1: only read/write/exit/sigreturn.\n")
    w("  Mode 2 (BPF): custom filter program per syscall.\n")

    phase("Phase 4: ASLR", out)
    w("  Address Space Layout Randomization:\n")
    stack = _mapping_start(lambda f: f[-1] == "[stack]")
    heap = _mapping_start(lambda f: f[-1] == "[heap]")
    code = _mapping_start(lambda f: "x" in f[1])
    w(f"    Stack address:  {stack} (changes each run)\n")
    w(f"    Heap address:   {heap}\n")
    w(f"    Code address:   {code}\n")
    w("  ASLR makes exploits harder by randomizing memory layout.\n")

    phase("Phase 5: DAC vs MAC, eBPF Security", out)
    w("  DAC (Discretionary Access Control) -- traditional Unix:\n")
    w("    - Owner of file sets permissions (rwxrwxrwx)\n")
    w("    - Root (UID 0) can override any DAC check\n")
    w("    - Process runs as UID and inherits its permissions\n\n")
    w("  MAC (Mandatory Access Control) -- SELinux / AppArmor:\n")
    w("    - System policy (not owner) enforces access\n")
    w("    - Even root is subject to MAC policy\n")
    w("    - SELinux labels: user:role:type:level on files and processes\n")
    w("    - AppArmor profiles: path-based rules per process\n\n")

    enforce = read_lines("/sys/fs/selinux/enforce")
    if enforce is None:
        w("  SELinux: not present (check AppArmor: cat /sys/kernel/security/apparmor/profiles)\n")
    elif enforce:
        w(f"  SELinux enforcing: {selinux_status(enforce[0].rstrip(chr(10)))}\n")

    w("\n  eBPF LSM (Linux 5.7+):\n")
    w("    - BPF programs attached to LSM hooks (security_file_open, etc.)\n")
    w("    - Allows custom security policies without kernel module\n")
    w("    - Cilium: eBPF network policy for Kubernetes pod-to-pod security\n")
    w("    - Falco: eBPF syscall monitoring for runtime threat detection\n")
    w("    - Check: bpftool prog list (shows loaded BPF programs on this system)\n")

    w("\n========== Hands-On Exercise ==========\n")
    w("1. Create chmod 000 file; verify root bypasses DAC; test SELinux MAC overrides root.\n")
    w("2. Use setcap to grant cap_net_raw+ep without root; verify minimal privilege.\n")
    w("3. Modern (eBPF LSM): run 'bpftool prog list'; on a Cilium/Falco node,\n")
    w("   identify security BPF programs; explain BPF LSM vs seccomp-bpf scope.\n")

    w("\n========== Quiz ==========\n")
    w("Q1. Why are capabilities better than all-or-nothing root?\n")
    w("Q2. How do PID namespaces make containers think they have PID 1?\n")
    w("Q3. What is seccomp-bpf and how does Docker use it?\n")
    w("Q4. Can ASLR be bypassed? How?\n")
    w("Q5. What is the difference between DAC and MAC?  Give an example where\n")
    w("    MAC prevents access that DAC would allow (even for root).\n")
    w("Q6. How does eBPF LSM differ from traditional SELinux in terms of policy\n")
    w("    deployment and maintainability?\n")
    w("Q7. What capabilities does Docker drop by default from containers, and\n")
    w("    why does dropping CAP_SYS_ADMIN prevent certain container escapes?\n")


def main(argv: list[str] | None = None) -> int:
    """Run the lab on standard output."""
    run(sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())