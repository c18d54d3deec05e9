"""CPU/GPU topology readers: NUMA node CPU lists, NVIDIA GPU info, locked-memory limits."""

from __future__ import annotations

import os

from oslabs.common import read_first_line, read_lines


def numa_nodes(
    root: str = "/sys/devices/system/node",
    limit: int = 8,
) -> list[tuple[int, str]]:
    """Return (node, cpulist) for nodes 0, 1, ... up to ``limit``.

    Scanning stops at the first node whose cpulist cannot be read.
    """
    nodes = []
    for node in range(limit):
        cpulist = read_first_line(os.path.join(root, f"node{node}", "cpulist"))
        if cpulist is None:
            break
        nodes.append((node, cpulist))
    return nodes


def gpu_information(root: str = "/proc/driver/nvidia/gpus") -> list[list[str]] | None:
    """Return the information file lines of every GPU under ``root``.

    Hidden entries and GPUs without a readable information file are skipped.
    None is returned when ``root`` itself cannot be listed.
    """
    try:
        entries = sorted(os.listdir(root))
    except OSError:
        return None
    gpus = []
    for entry in entries:
        if entry.startswith("."):
            continue
        lines = read_lines(os.path.join(root, entry, "information"))
        if lines is not None:
            gpus.append(lines)
    return gpus


def locked_memory_lines(limits_text: str) -> list[str]:
    """Return the "Max locked memory" lines of a /proc/<pid>/limits file."""
    return [line for line in limits_text.splitlines() if "Max locked memory" in line]