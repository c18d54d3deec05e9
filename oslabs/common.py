"""Shared helpers for the lab programs: phase banners, /proc readers, shell pipes."""

from __future__ import annotations

import subprocess
import sys
from typing import TextIO


def phase(title: str, out: TextIO | None = None) -> None:
    """Write a phase banner."""
    out = sys.stdout if out is None else out
    out.write(f"\n========== {title} ==========\n")


def read_lines(path: str) -> list[str] | None:
    """Return the lines of a file with their newlines, or None if it cannot be read."""
    try:
        with open(path, encoding="utf-8", errors="replace") as handle:
            return handle.readlines()
    except OSError:
        return None


def read_first_line(path: str) -> str | None:
    """Return the first line of a file without its newline.

    None is returned when the file cannot be read or is empty.
    """
    lines = read_lines(path)
    if not lines:
        return None
    return lines[0].rstrip("\n")


def shell_lines(command: str) -> list[str]:
    """Run a shell command and return its standard output as lines with newlines.

    Raises OSError when the shell itself cannot be started.
    """
    result = subprocess.run(
        command,
        shell=True,
        capture_output=True,
        text=True,
        errors="replace",
        check=False,
    )
    return result.stdout.splitlines(keepends=True)