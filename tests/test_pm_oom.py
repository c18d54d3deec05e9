import io

from oslabs.pm_oom import kthreads_exercise, oom_killer_exercise


def _oom_output():
    buffer = io.StringIO()
    oom_killer_exercise(buffer)
    return buffer.getvalue()


def _kthreads_output():
    buffer = io.StringIO()
    kthreads_exercise(buffer)
    return buffer.getvalue()


def test_oom_exercise_has_title_and_range():
    text = _oom_output()
    assert "Exercise 5: OOM Killer — Scoring and Adjustment" in text
    assert "  oom_score_adj range: -1000 (never kill) to +1000 (kill first)\n" in text


def test_oom_exercise_lists_init_and_kthreadd():
    text = _oom_output()
    assert "  PID 1    (" in text
    assert "  PID 2    (" in text
    assert text.index("  PID 1    (") < text.index("  PID 2    (")


def test_oom_exercise_ends_with_quiz():
    text = _oom_output()
    assert text.rstrip("\n").endswith(
        "Q4. How does Kubernetes map QoS classes to oom_score_adj values?"
    )


def test_kthreads_table_is_aligned():
    text = _kthreads_output()
    assert "  kswapd0               Memory reclaim — scans LRU lists, frees pages\n" in text
    assert "  kthreadd              PID 2: parent of all kernel threads\n" in text


def test_kthreads_table_order():
    text = _kthreads_output()
    assert text.index("kswapd0") < text.index("kcompactd0") < text.index("  kthreadd ")


def test_kthreads_checks_pid_2():
    text = _kthreads_output()
    assert "\n  Checking PID 2 (kthreadd):\n" in text
    assert "Exercise 8: Kernel Thread Observation via /proc" in text