import io
import os

from oslabs.lab39_cloud_compute import (
    cgroup_v2_path,
    describe_memory_max,
    main,
    namespace_inodes,
    run,
)


def test_cgroup_v2_path_simple():
    assert cgroup_v2_path("0::/user.slice/session.scope\n") == "/user.slice/session.scope"


def test_cgroup_v2_path_absent_on_v1_only():
    text = "12:memory:/docker/abc\n11:cpu,cpuacct:/docker/abc\n"
    assert cgroup_v2_path(text) == ""


def test_cgroup_v2_path_mixed_lines():
    text = "3:pids:/a\n0::/kubepods/pod1/c1\n1:name=systemd:/b\n"
    assert cgroup_v2_path(text) == "/kubepods/pod1/c1"


def test_cgroup_v2_path_last_wins():
    assert cgroup_v2_path("0::/first\n0::/second\n") == "/second"


def test_describe_memory_max_unlimited():
    assert describe_memory_max("max") == "max (unlimited -- not in a limited container)"


def test_describe_memory_max_64_mib():
    assert describe_memory_max("67108864") == "67108864 bytes (~64 MiB)"


def test_describe_memory_max_keeps_raw_value():
    result = describe_memory_max("1073741824")
    assert result.startswith("1073741824 bytes (~")
    assert result.endswith(" MiB)")


def test_describe_memory_max_non_numeric_is_zero():
    assert describe_memory_max("junk") == "junk bytes (~0 MiB)"


def test_namespace_inodes_reads_existing_entries(tmp_path):
    for name in ("net", "pid"):
        (tmp_path / name).write_text("x")
    result = namespace_inodes(["net", "missing", "pid"], str(tmp_path))
    assert [name for name, _ in result] == ["net", "pid"]
    assert result[0][1] == os.stat(tmp_path / "net").st_ino
    assert result[1][1] == os.stat(tmp_path / "pid").st_ino


def test_namespace_inodes_empty_for_missing_root(tmp_path):
    assert namespace_inodes(["net"], str(tmp_path / "none")) == []


def test_run_writes_all_phases():
    buf = io.StringIO()
    run(buf)
    text = buf.getvalue()
    assert text.startswith("=== Lab 39: Cloud Computing OS Primitives ===\n")
    for n in range(1, 6):
        assert f"========== Phase {n}:" in text
    assert "Q7. What are Kubernetes QoS classes" in text


def test_main_returns_zero(capsys):
    assert main([]) == 0
    assert "Hands-On Exercise" in capsys.readouterr().out