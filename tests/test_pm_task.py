from io import StringIO

from oslabs.pm_task import (
    mm_struct_exercise,
    print_proc_file,
    section,
    status_fields,
    subsection,
    task_struct_exercise,
)

STATUS = (
    "Name:\tpython3\n"
    "Umask:\t0022\n"
    "State:\tR (running)\n"
    "Pid:\t4242\n"
    "PPid:\t1\n"
    "VmRSS:\t  1024 kB\n"
    "voluntary_ctxt_switches:\t3\n"
)


def test_section_box():
    out = StringIO()
    section("Exercise 7: /proc/meminfo Full Tour", out)
    lines = out.getvalue().split("\n")
    assert lines[0] == ""
    assert lines[2] == "║  " + "Exercise 7: /proc/meminfo Full Tour".ljust(60) + "║"
    assert len(lines[1]) == len(lines[2]) == len(lines[3])


def test_subsection():
    out = StringIO()
    subsection("Transparent Huge Pages (THP) setting", out)
    assert out.getvalue() == "\n  ── Transparent Huge Pages (THP) setting ──\n"


def test_print_proc_file_truncates(tmp_path):
    path = tmp_path / "f"
    path.write_text("l1\nl2\nl3\nl4\nl5\n")
    out = StringIO()
    print_proc_file(str(path), 3, out)
    assert out.getvalue() == "  l1\n  l2\n  l3\n  ... (truncated at 3 lines)\n"


def test_print_proc_file_exact_length_not_truncated(tmp_path):
    path = tmp_path / "f"
    path.write_text("only\n")
    out = StringIO()
    print_proc_file(str(path), 1, out)
    assert out.getvalue() == "  only\n"


def test_print_proc_file_missing(tmp_path):
    missing = str(tmp_path / "missing")
    out = StringIO()
    print_proc_file(missing, 5, out)
    assert out.getvalue().startswith(f"  [cannot open {missing}: ")


def test_status_fields_keeps_order_and_filters():
    lines = status_fields(STATUS)
    assert [line.split(":")[0] for line in lines] == [
        "Name", "Pid", "PPid", "VmRSS", "voluntary_ctxt_switches",
    ]


def test_status_fields_custom():
    assert status_fields(STATUS, ["State"]) == ["State:\tR (running)"]


def test_task_struct_exercise_output():
    out = StringIO()
    task_struct_exercise(out)
    text = out.getvalue()
    assert "Exercise 1: task_struct Fields via /proc/<pid>/status" in text
    assert "  Pid:" in text
    assert "Q3. What kernel struct does each /proc/<pid>/status line map to?" in text


def test_mm_struct_exercise_output():
    out = StringIO()
    mm_struct_exercise(out)
    text = out.getvalue()
    assert "── /proc/self/maps  (first 25 lines) ──" in text
    assert "── smaps entry for our 2 MiB anonymous region ──" in text
    assert "Q3. What fields in mm_struct track the number of VMAs?" in text