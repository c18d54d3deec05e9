import io

import pytest

from oslabs.page_cache_models import (
    Config,
    Mode,
    WorkerResult,
    main,
    parse_args,
    read_range,
    run,
    run_round,
    worker_ranges,
)


@pytest.fixture
def data_file(tmp_path):
    data = bytearray(8192)
    data[0] = 7
    data[4096] = 5
    path = tmp_path / "data.bin"
    path.write_bytes(bytes(data))
    return path


@pytest.fixture
def patterned_file(tmp_path):
    path = tmp_path / "pattern.bin"
    path.write_bytes(bytes((i * 31) % 251 for i in range(200_003)))
    return path


def test_parse_args_threads():
    config = parse_args(["f.bin", "threads", "3", "4", "2"])
    assert config == Config("f.bin", Mode.THREADS, 1, 4, 2)
    assert config.total_workers == 4


def test_parse_args_single_forces_one_worker():
    config = parse_args(["f.bin", "single", "5", "6", "1"])
    assert (config.proc_count, config.thread_count, config.total_workers) == (1, 1, 1)


def test_parse_args_processes_forces_one_thread():
    config = parse_args(["f.bin", "processes", "4", "9", "1"])
    assert (config.proc_count, config.thread_count) == (4, 1)
    assert config.total_workers == config.proc_count


def test_parse_args_hybrid_keeps_both_counts():
    config = parse_args(["f.bin", "hybrid", "2", "3", "1"])
    assert (config.proc_count, config.thread_count) == (2, 3)
    assert config.total_workers == config.proc_count * config.thread_count


@pytest.mark.parametrize(
    "argv",
    [
        ["f.bin", "bogus", "1", "1", "1"],
        ["f.bin", "threads", "0", "1", "1"],
        ["f.bin", "threads", "1", "1025", "1"],
        ["f.bin", "threads", "1", "1", "0"],
        ["f.bin", "threads", "x", "1", "1"],
        ["f.bin", "threads", "1", "1"],
    ],
)
def test_parse_args_rejects_invalid(argv):
    with pytest.raises(ValueError, match="Usage"):
        parse_args(argv)


@pytest.mark.parametrize("size,workers", [(100, 3), (8192, 4), (5, 1), (2, 4)])
def test_worker_ranges_partition(size, workers):
    ranges = worker_ranges(size, workers)
    assert len(ranges) == workers
    assert ranges[0][0] == 0
    assert ranges[-1][1] == size
    for (_, end), (start, _) in zip(ranges, ranges[1:]):
        assert end == start


def test_read_range_whole_file(data_file):
    result = read_range(str(data_file), 0, 8192)
    assert isinstance(result, WorkerResult)
    assert result.checksum == 12
    assert result.seconds >= 0
    assert result.minflt >= 0 and result.majflt >= 0


def test_read_range_with_offset(data_file):
    assert read_range(str(data_file), 4096, 8192).checksum == 5


def test_read_range_empty(data_file):
    assert read_range(str(data_file), 100, 100).checksum == 0


def test_read_range_missing_file(tmp_path):
    with pytest.raises(OSError):
        read_range(str(tmp_path / "absent"), 0, 10)


def test_run_round_single_matches_read_range(patterned_file):
    size = patterned_file.stat().st_size
    config = parse_args([str(patterned_file), "single", "1", "1", "1"])
    buf = io.StringIO()
    checksum = run_round(config, size, buf)
    assert checksum == read_range(str(patterned_file), 0, size).checksum
    assert "worker=0 " in buf.getvalue()
    assert f"checksum={checksum} " in buf.getvalue()


def test_run_round_same_ranges_same_checksum(patterned_file):
    size = patterned_file.stat().st_size
    path = str(patterned_file)
    threads = run_round(parse_args([path, "threads", "1", "4", "1"]), size, io.StringIO())
    buf = io.StringIO()
    procs = run_round(parse_args([path, "processes", "4", "1", "1"]), size, buf)
    hybrid = run_round(parse_args([path, "hybrid", "2", "2", "1"]), size, io.StringIO())
    assert threads == procs == hybrid
    text = buf.getvalue()
    for p in range(4):
        assert f"proc={p} " in text


def test_run_writes_rounds(patterned_file):
    buf = io.StringIO()
    run(parse_args([str(patterned_file), "threads", "1", "2", "2"]), buf)
    text = buf.getvalue()
    assert text.startswith("=== Page Cache / Process vs Thread Lab ===\n")
    assert f"File size        : {patterned_file.stat().st_size} bytes\n" in text
    assert "--- Round 1 ---" in text and "--- Round 2 ---" in text
    assert text.count("summary ") == 2


def test_run_missing_file_raises(tmp_path):
    with pytest.raises(OSError):
        run(parse_args([str(tmp_path / "absent"), "single", "1", "1", "1"]), io.StringIO())


def test_main_bad_args_returns_one(capsys):
    assert main(["only-one"]) == 1
    assert "Usage" in capsys.readouterr().err


def test_main_missing_file_returns_one(tmp_path):
    assert main([str(tmp_path / "absent"), "single", "1", "1", "1"]) == 1


def test_main_success(patterned_file, capsys):
    assert main([str(patterned_file), "single", "1", "1", "1"]) == 0
    assert "Quiz:" in capsys.readouterr().out