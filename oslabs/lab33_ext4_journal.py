"""Lab 33: logging in the ext4 filesystem."""

from __future__ import annotations

import glob
import os
import sys
from collections.abc import Iterable
from typing import TextIO

from oslabs.common import phase, read_lines, shell_lines


def ext4_mounts(mount_lines: Iterable[str], limit: int = 3) -> list[str]:
    """Return up to ``limit`` mount table lines that mention ext4."""
    matches = [line for line in mount_lines if "ext4" in line]
    return matches[:limit]


def list_ext4_entries(proc_dir: str = "/proc/fs/ext4") -> list[str]:
    """Return the sorted entry names of the ext4 proc directory, or [] if absent."""
    try:
        return sorted(os.listdir(proc_dir))
    except OSError:
        return []


def _glob_lines(pattern: str, limit: int) -> list[str]:
    lines: list[str] = []
    for path in sorted(glob.glob(pattern)):
        lines.extend(read_lines(path) or [])
        if len(lines) >= limit:
            break
    return lines[:limit]


def run(out: TextIO | None = None) -> None:
    """Write the whole lab to ``out``."""
    out = sys.stdout if out is None else out
    w = out.write
    w("=== Lab 33: Logging in ext4 Filesystem ===\n")

    phase("Phase 1: ext4 Features", out)
    try:
        for line in ext4_mounts(shell_lines("mount"), 3):
            w(f"  {line}")
    except OSError:
        w("  (no ext4 mounts found — check with: mount | grep ext)\n")

    phase("Phase 2: Journal Device", out)
    w("  ext4 journal (jbd2) creates a circular log on disk.\n")
    w("  Transactions: group related changes, commit atomically.\n")
    w("  Checkpointing: flush committed transactions to their final locations.\n\n")
    for line in _glob_lines("/proc/fs/jbd2/*/info", 15):
        w(f"  {line}")

    phase("Phase 3: Barriers", out)
    w("  Disk write barriers ensure journal commit hits disk before data.\n")
    w("  Without barriers: disk reordering can corrupt the journal.\n")
    w("  NVMe: supports FUA (Force Unit Access) for barrier-like semantics.\n")

    phase("Phase 4: Modern ext4 Features (fast_commit, inline_data)", out)
    w("  ext4 fast_commit (Linux 5.10+):\n")
    w("    Traditional: full descriptor block per commit (all modified blocks listed)\n")
    w("    fast_commit: write only the 'delta' of what changed (smaller, faster)\n")
    w("    Benefit: 80-90% smaller journal writes for append/rename/link operations\n")
    w("    Enable: tune2fs -O fast_commit /dev/sdX\n\n")
    w("  ext4 inline_data:\n")
    w("    Files < 60 bytes stored in the inode's i_block[] area directly\n")
    w("    No separate data block needed; saves one disk I/O per small file\n")
    w("    Enable: tune2fs -O inline_data /dev/sdX\n\n")

    phase("Phase 5: Live ext4 Journal Stats (/proc/fs/ext4/)", out)
    w("  ext4 filesystems with stats in /proc/fs/ext4/:\n")
    entries = list_ext4_entries()
    for name in entries:
        w(f"    /proc/fs/ext4/{name}/\n")
    if not entries:
        w("    (none -- no ext4 mounted, or /proc/fs/ext4 unavailable)\n")
    w("  ext4 block group info (first 5 lines of mb_groups):\n")
    for line in _glob_lines("/proc/fs/ext4/*/mb_groups", 5):
        w(f"    {line}")

    w("\n========== Hands-On Exercise ==========\n")
    w("1. Read /proc/fs/jbd2/*/info; run 1000-file workload; observe counter changes.\n")
    w("2. Create loop-device ext4; benchmark fsync throughput without/with fast_commit.\n")
    w("3. Modern (inline_data): create files < 60B on inline_data ext4;\n")
    w("   verify blocks=0 in stat output (content stored in inode).\n")

    w("\n========== Quiz ==========\n")
    w("Q1. What is jbd2 and how does it relate to ext4?\n")
    w("Q2. What is a transaction in the ext4 journal?\n")
    w("Q3. Why are disk write barriers important for journal integrity?\n")
    w("Q4. What is FUA and how does NVMe handle it differently from SATA?\n")
    w("Q5. What is ext4 fast_commit and how does it differ from traditional jbd2 commits?\n")
    w("Q6. What is ext4 inline_data and for what file size range does it apply?\n")
    w("Q7. How does jbd2 group commit improve fsync() throughput under concurrent\n")
    w("    write load (hint: multiple fsync callers share one journal transaction)?\n")


def main(argv: list[str] | None = None) -> int:
    """Run the lab on standard output."""
    run(sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())