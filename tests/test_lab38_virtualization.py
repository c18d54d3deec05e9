import io

from oslabs.lab38_virtualization import count_iommu_groups, hypervisor_present, run

VM_CPUINFO = (
    "processor\t: 0\n"
    "model name\t: Example CPU\n"
    "flags\t\t: fpu vme sse2 hypervisor lahf_lm\n"
)
METAL_CPUINFO = (
    "processor\t: 0\n"
    "flags\t\t: fpu vme sse2 lahf_lm\n"
)


def test_hypervisor_flag_detected():
    assert hypervisor_present(VM_CPUINFO) is True


def test_no_hypervisor_flag_on_bare_metal():
    assert hypervisor_present(METAL_CPUINFO) is False


def test_flag_must_be_a_whole_token():
    text = "flags\t\t: fpu hypervisor_like\n"
    assert hypervisor_present(text) is False


def test_hypervisor_word_outside_flags_ignored():
    text = "model name\t: hypervisor\nflags\t\t: fpu\n"
    assert hypervisor_present(text) is False


def test_empty_cpuinfo():
    assert hypervisor_present("") is False


def test_count_iommu_groups(tmp_path):
    for name in ("0", "1", "2"):
        (tmp_path / name).mkdir()
    assert count_iommu_groups(str(tmp_path)) == 3


def test_count_iommu_groups_missing_dir(tmp_path):
    assert count_iommu_groups(str(tmp_path / "absent")) == 0


def test_run_reports_iommu_and_quiz():
    buffer = io.StringIO()
    run(buffer)
    text = buffer.getvalue()
    assert text.startswith("=== Lab 38: Virtualization ===\n")
    assert "  IOMMU groups: " in text
    assert "/dev/vfio/vfio" in text
    assert "Q7. What is SR-IOV" in text