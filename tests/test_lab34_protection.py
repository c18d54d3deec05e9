from io import StringIO

import pytest

from oslabs.lab34_protection import capability_lines, main, run, selinux_status

STATUS = (
    "Name:\tpython3\n"
    "CapInh:\t0000000000000000\n"
    "CapPrm:\t0000000000000000\n"
    "Uid:\t1000\t1000\t1000\t1000\n"
    "CapEff:\t0000000000000000\n"
)


def test_capability_lines_selects_cap_prefix():
    lines = capability_lines(STATUS)
    assert [line.split(":")[0] for line in lines] == ["CapInh", "CapPrm", "CapEff"]
    assert all(line.startswith("Cap") for line in lines)


def test_capability_lines_none():
    assert capability_lines("Name:\tx\nPid:\t1\n") == []


@pytest.mark.parametrize("value", ["1", " 1", "2"])
def test_selinux_enforcing(value):
    assert selinux_status(value) == "YES"


@pytest.mark.parametrize("value", ["0", "", "abc"])
def test_selinux_not_enforcing(value):
    assert selinux_status(value) == "NO (permissive/disabled)"


def test_run_output():
    out = StringIO()
    run(out)
    text = out.getvalue()
    assert text.startswith("=== Lab 34: Protection and Security ===\n")
    assert "    Stack address:  " in text
    assert "========== Phase 5: DAC vs MAC, eBPF Security ==========" in text
    assert "Q7. What capabilities does Docker drop" in text


def test_main_returns_zero(capsys):
    assert main([]) == 0
    assert "Phase 3: Seccomp" in capsys.readouterr().out