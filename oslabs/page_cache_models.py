"""Compare page cache behaviour across single, threaded, multi-process and hybrid readers."""

from __future__ import annotations

import enum
import os
import re
import sys
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import TextIO

from oslabs.pm_faults import fault_counts

BUF_SIZE = 1024 * 1024
PAGE = 4096
MAX_COUNT = 1024

USAGE = (
    "Usage: page_cache_models <file> <mode:single|threads|processes|hybrid> "
    "<proc_count> <thread_count> <rounds>"
)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class Mode(enum.Enum):
    """Execution model of the readers."""

    SINGLE = "single"
    THREADS = "threads"
    PROCESSES = "processes"
    HYBRID = "hybrid"


@dataclass(frozen=True)
class WorkerResult:
    """Faults, time and checksum of one reader."""

    minflt: int
    majflt: int
    seconds: float
    checksum: int


@dataclass(frozen=True)
class Config:
    """Normalised run configuration."""

    path: str
    mode: Mode
    proc_count: int
    thread_count: int
    rounds: int

    @property
    def total_workers(self) -> int:
        return self.proc_count * self.thread_count


def _leading_int(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def parse_args(argv: list[str]) -> Config:
    """Build a Config from <file> <mode> <proc_count> <thread_count> <rounds>.

    Raises ValueError with the usage text on any invalid argument.
    """
    if len(argv) != 5:
        raise ValueError(USAGE)
    path, mode_name, procs, threads, rounds_text = argv
    proc_count = _leading_int(procs)
    thread_count = _leading_int(threads)
    rounds = _leading_int(rounds_text)
    if not (0 < proc_count <= MAX_COUNT and 0 < thread_count <= MAX_COUNT and rounds > 0):
        raise ValueError(USAGE)
    try:
        mode = Mode(mode_name)
    except ValueError:
        raise ValueError(USAGE) from None
    if mode is Mode.SINGLE:
        proc_count = thread_count = 1
    elif mode is Mode.THREADS:
        proc_count = 1
    elif mode is Mode.PROCESSES:
        thread_count = 1
    return Config(path, mode, proc_count, thread_count, rounds)


def worker_ranges(size: int, total_workers: int) -> list[tuple[int, int]]:
    """Split [0, size) into equal slices; the last slice takes the remainder."""
    slice_size = size // total_workers
    return [
        (i * slice_size, size if i == total_workers - 1 else (i + 1) * slice_size)
        for i in range(total_workers)
    ]


def read_range(path: str, start: int, end: int) -> WorkerResult:
    """Read [start, end) of a file sequentially, summing one byte per page of each chunk."""
    fd = os.open(path, os.O_RDONLY)
    try:
        os.lseek(fd, start, os.SEEK_SET)
        min0, maj0 = fault_counts()
        t0 = time.monotonic()
        checksum = 0
        remaining = end - start
        while remaining > 0:
            data = os.read(fd, min(remaining, BUF_SIZE))
            if not data:
                break
            checksum += sum(data[::PAGE])
            remaining -= len(data)
        t1 = time.monotonic()
        min1, maj1 = fault_counts()
    finally:
        os.close(fd)
    return WorkerResult(min1 - min0, maj1 - maj0, t1 - t0, checksum)


def _read_all(path: str, ranges: list[tuple[int, int]]) -> list[WorkerResult]:
    with ThreadPoolExecutor(max_workers=max(1, len(ranges))) as pool:
        return list(pool.map(lambda rng: read_range(path, *rng), ranges))


def _run_threads(config: Config, ranges: list[tuple[int, int]], out: TextIO) -> tuple[int, int, int]:
    total_min = total_maj = checksum = 0
    for worker, res in enumerate(_read_all(config.path, ranges)):
        total_min += res.minflt
        total_maj += res.majflt
        checksum += res.checksum
        out.write(
            f"worker={worker} minflt={res.minflt} majflt={res.majflt} sec={res.seconds:.3f}\n"
        )
    return total_min, total_maj, checksum


def _child(config: Config, proc: int, ranges: list[tuple[int, int]], wfd: int) -> None:
    status = 1
    try:
        own = ranges[proc * config.thread_count:(proc + 1) * config.thread_count]
        results = _read_all(config.path, own)
        line = (
            f"{proc} {sum(r.minflt for r in results)} "
            f"{sum(r.majflt for r in results)} {sum(r.checksum for r in results)}\n"
        )
        os.write(wfd, line.encode())
        status = 0
    except BaseException:
        status = 1
    finally:
        os._exit(status)


def _run_processes(config: Config, ranges: list[tuple[int, int]], out: TextIO) -> tuple[int, int, int]:
    children: list[tuple[int, int]] = []
    for proc in range(config.proc_count):
        rfd, wfd = os.pipe()
        pid = os.fork()
        if pid == 0:
            os.close(rfd)
            _child(config, proc, ranges, wfd)
        os.close(wfd)
        children.append((rfd, pid))

    total_min = total_maj = checksum = 0
    for rfd, _ in children:
        with os.fdopen(rfd, "r") as reader:
            fields = reader.read().split()
        if len(fields) < 4:
            continue
        try:
            idx, minf, majf, part = (int(field) for field in fields[:4])
        except ValueError:
            continue
        out.write(f"proc={idx} minflt={minf} majflt={majf}\n")
        total_min += minf
        total_maj += majf
        checksum += part
    for _, pid in children:
        os.waitpid(pid, 0)
    return total_min, total_maj, checksum


def run_round(config: Config, size: int, out: TextIO | None = None) -> int:
    """Run one round of reads over a file of ``size`` bytes; return the checksum."""
    out = sys.stdout if out is None else out
    ranges = worker_ranges(size, config.total_workers)
    round_start = time.monotonic()
    if config.mode in (Mode.SINGLE, Mode.THREADS):
        total_min, total_maj, checksum = _run_threads(config, ranges, out)
    else:
        out.flush()
        total_min, total_maj, checksum = _run_processes(config, ranges, out)
    elapsed = time.monotonic() - round_start
    out.write(
        f"summary minflt={total_min} majflt={total_maj} "
        f"checksum={checksum} elapsed={elapsed:.3f}\n\n"
    )
    return checksum


def run(config: Config, out: TextIO | None = None) -> None:
    """Run every round of the lab; raises OSError if the file cannot be stat'ed."""
    out = sys.stdout if out is None else out
    w = out.write
    size = os.stat(config.path).st_size
    w("=== Page Cache / Process vs Thread Lab ===\n")
    w(f"File             : {config.path}\n")
    w(f"File size        : {size} bytes\n")
    w(f"Mode             : {config.mode.value}\n")
    w(f"Processes        : {config.proc_count}\n")
    w(f"Threads/process  : {config.thread_count}\n")
    w(f"Total workers    : {config.total_workers}\n")
    w(f"Rounds           : {config.rounds}\n\n")

    for round_no in range(1, config.rounds + 1):
        w(f"--- Round {round_no} ---\n")
        w("Hint: later rounds are often faster because data may already be in the Linux page cache.\n")
        run_round(config, size, out)

    w("Quiz:\n")
    w("  1. Why can round 2 be faster even when the code is unchanged?\n")
    w("  2. Which resources are shared by threads but not by separate processes?\n")
    w("  3. Why might process mode show higher total overhead than thread mode?\n")
    w("  4. Why are file reads often served from page cache without major faults after warm-up?\n")


def main(argv: list[str] | None = None) -> int:
    """Command-line entry point."""
    argv = sys.argv[1:] if argv is None else argv
    try:
        config = parse_args(argv)
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return 1
    try:
        run(config, sys.stdout)
    except OSError as exc:
        print(f"{exc.filename}: {exc.strerror}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())