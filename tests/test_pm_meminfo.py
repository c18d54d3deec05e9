import io

from oslabs.pm_meminfo import (
    CGROUP_FILES,
    annotate_meminfo,
    cgroup_exercise,
    meminfo_exercise,
)


def test_annotate_known_field():
    result = annotate_meminfo("MemTotal:       16384 kB\n")
    assert result == [
        ("MemTotal:       16384 kB", "Total usable RAM (kernel reserved memory excluded)")
    ]


def test_annotate_unknown_field_has_no_note():
    result = annotate_meminfo("Bogus: 1 kB\nDirty:  4 kB\n")
    assert result[0] == ("Bogus: 1 kB", None)
    assert result[1][1] == "Pages modified in page cache not yet written to disk"


def test_annotate_keeps_every_line_in_order():
    text = "MemFree: 1\nX: 2\nHugePages_Total: 0\n"
    lines = [line for line, _ in annotate_meminfo(text)]
    assert lines == text.splitlines()


def test_annotate_prefix_is_not_a_match():
    assert annotate_meminfo("Active(anon): 5 kB\n") == [("Active(anon): 5 kB", None)]


def test_meminfo_exercise_prints_every_line():
    out = io.StringIO()
    meminfo_exercise(out)
    text = out.getvalue()
    assert "Exercise 7: /proc/meminfo Full Tour" in text
    with open("/proc/meminfo", encoding="utf-8") as handle:
        first = handle.readline().rstrip("\n")
    assert f"  {first}\n" in text
    assert "← Total usable RAM" in text


def test_cgroup_exercise_lists_every_file():
    out = io.StringIO()
    cgroup_exercise(out)
    text = out.getvalue()
    for path in CGROUP_FILES:
        assert f"  {path:<45} : " in text
    assert "Exercise 10: cgroup v2 Memory Limit Detection" in text