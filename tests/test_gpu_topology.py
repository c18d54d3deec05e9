from oslabs.gpu_topology import gpu_information, locked_memory_lines, numa_nodes


def _node(root, number, cpulist):
    node_dir = root / f"node{number}"
    node_dir.mkdir()
    (node_dir / "cpulist").write_text(cpulist + "\n")


def test_numa_nodes_reads_consecutive_nodes(tmp_path):
    _node(tmp_path, 0, "0-31,64-95")
    _node(tmp_path, 1, "32-63,96-127")
    assert numa_nodes(str(tmp_path), 8) == [(0, "0-31,64-95"), (1, "32-63,96-127")]


def test_numa_nodes_stops_at_gap(tmp_path):
    _node(tmp_path, 0, "0-3")
    _node(tmp_path, 2, "8-11")
    assert numa_nodes(str(tmp_path), 8) == [(0, "0-3")]


def test_numa_nodes_respects_limit(tmp_path):
    for number in range(3):
        _node(tmp_path, number, str(number))
    nodes = numa_nodes(str(tmp_path), 2)
    assert [node for node, _ in nodes] == [0, 1]


def test_numa_nodes_missing_root(tmp_path):
    assert numa_nodes(str(tmp_path / "absent"), 8) == []


def test_gpu_information_missing_root(tmp_path):
    assert gpu_information(str(tmp_path / "absent")) is None


def test_gpu_information_reads_visible_gpus(tmp_path):
    gpu = tmp_path / "0000:03:00.0"
    gpu.mkdir()
    (gpu / "information").write_text("Model: \t Example GPU\nIRQ: 42\n")
    hidden = tmp_path / ".hidden"
    hidden.mkdir()
    (hidden / "information").write_text("Model: hidden\n")
    (tmp_path / "no-info").mkdir()
    assert gpu_information(str(tmp_path)) == [["Model: \t Example GPU\n", "IRQ: 42\n"]]


def test_gpu_information_empty_directory(tmp_path):
    assert gpu_information(str(tmp_path)) == []


def test_locked_memory_lines():
    text = (
        "Limit                     Soft Limit           Hard Limit           Units\n"
        "Max open files            1024                 1048576              files\n"
        "Max locked memory         8388608              8388608              bytes\n"
    )
    result = locked_memory_lines(text)
    assert len(result) == 1
    assert result[0].startswith("Max locked memory")


def test_locked_memory_lines_absent():
    assert locked_memory_lines("Max open files 1024 1024 files\n") == []