import io
import os

import pytest

from oslabs.lab40_gpu_os import CopyResult, measure_copy, run, touch_pages


@pytest.fixture
def restore_affinity():
    saved = os.sched_getaffinity(0)
    yield
    os.sched_setaffinity(0, saved)


def test_touch_pages_writes_low_byte_of_offset():
    buffer, seconds = touch_pages(1000, 100)
    assert len(buffer) == 1000
    assert buffer[200] == 200
    assert buffer[0] == 0
    assert seconds >= 0


def test_touch_pages_leaves_other_bytes_zero():
    buffer, _ = touch_pages(1000, 100)
    assert buffer[1] == 0
    assert buffer[150] == 0


def test_touch_pages_page_stride_count():
    buffer, _ = touch_pages(4096 * 4)
    assert len(buffer) == 4096 * 4
    assert set(buffer) == {0}


def test_touch_pages_rejects_bad_stride():
    with pytest.raises(ValueError):
        touch_pages(100, 0)


def test_measure_copy_reports_size():
    result = measure_copy(1 << 20)
    assert result.size == 1 << 20
    assert result.seconds >= 0
    assert result.gib_per_second > 0


def test_copy_result_bandwidth_worked_example():
    assert CopyResult(size=1 << 30, seconds=0.5).gib_per_second == 2.0


def test_copy_result_empty_copy():
    assert CopyResult(size=0, seconds=0.0).gib_per_second == 0.0


def test_copy_result_instant_copy_is_infinite():
    assert CopyResult(size=10, seconds=0.0).gib_per_second == float("inf")


def test_run_writes_all_phases(restore_affinity):
    out = io.StringIO()
    run(out)
    text = out.getvalue()
    assert text.startswith("=== Lab 40: GPU OS — Multicore, Hyperthreading, NCCL ===\n")
    assert "Phase 6: CPU-GPU Shared Memory Simulation" in text
    assert "Allocated 64 MiB buffer" in text
    assert text.index("Phase 1:") < text.index("Phase 6:") < text.index("Quiz")