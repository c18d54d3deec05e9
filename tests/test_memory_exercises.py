import io
import re

from oslabs.memory_exercises import lineage_exercise, main


def test_lineage_returns_child_exit_status():
    out = io.StringIO()
    assert lineage_exercise(out) == 42


def test_lineage_reports_child_output_and_reaping():
    out = io.StringIO()
    lineage_exercise(out)
    text = out.getvalue()
    child = re.search(r"Child  PID: (\d+)", text)
    reaped = re.search(r"Parent reaped PID (\d+): exit_status=42", text)
    assert child is not None and reaped is not None
    assert child.group(1) == reaped.group(1)
    assert "Child: about to exit(42)" in text


def test_lineage_child_text_precedes_parent_check():
    out = io.StringIO()
    lineage_exercise(out)
    text = out.getvalue()
    assert text.index("Child: about to exit") < text.index("Checking for zombie state")


def test_main_runs_all_exercises_in_order(capsys):
    assert main([]) == 0
    text = capsys.readouterr().out
    positions = [
        text.index("Exercise 1:"),
        text.index("Exercise 3:"),
        text.index("Exercise 7:"),
        text.index("Exercise 9:"),
        text.index("Exercise 10:"),
        text.index("Summary: What You Should Now Be Able to Explain"),
    ]
    assert positions == sorted(positions)
    assert "exit_status=42" in text