# oslabs

Console labs that walk through Linux operating-system internals by reading
what the running kernel exposes under `/proc` and `/sys`, and by running
small experiments of their own. Each lab prints a series of phases, and most
end with a hands-on exercise list and a short quiz.

The labs are meant for Linux. On other systems, or inside restricted
containers, files that are missing are skipped or reported as absent.

## Installation

```
pip install .
```

Python 3.10 or later is required; there are no third-party dependencies.

## The labs

| Command              | Topic                                                        |
|----------------------|--------------------------------------------------------------|
| `oslabs-lab33`       | ext4 journal (jbd2), fast_commit, inline_data                |
| `oslabs-lab34`       | Capabilities, namespaces, seccomp, ASLR, DAC vs MAC          |
| `oslabs-lab35`       | CFS/EEVDF, real-time policies, CPU affinity, nice weights    |
| `oslabs-lab38`       | Hypervisor detection, KVM, VFIO and IOMMU groups             |
| `oslabs-lab39`       | cgroups v2 limits, namespaces, containers and microVMs       |
| `oslabs-lab40`       | CPU/NUMA/GPU topology, THP, governor, buffer copy timing     |
| `oslabs-memory`      | Process and memory subsystems: ten guided exercises          |
| `oslabs-page-cache`  | Page cache behaviour across threads and processes            |

Run any of them without arguments, for example:

```
oslabs-lab35
oslabs-memory
```

## What is not included

There is no lab on read-copy-update or lock-free coordination, and none on
kernel architectures (monolithic, micro-, exo- and multikernels) or the
`/proc/sys/kernel` tunables; the numbering above skips those topics.

## Page cache experiment

`oslabs-page-cache` reads one file sequentially with a number of workers and
reports minor and major page faults, a checksum and the elapsed time for each
round. Later rounds are usually faster because the file is already in the page
cache.

```
oslabs-page-cache <file> <mode> <proc_count> <thread_count> <rounds>
```

`mode` is one of `single`, `threads`, `processes` or `hybrid`. The process
and thread counts must be between 1 and 1024 and `rounds` at least 1:

```
oslabs-page-cache testdata.bin single 1 1 2
oslabs-page-cache testdata.bin threads 1 4 2
oslabs-page-cache testdata.bin processes 4 1 2
oslabs-page-cache testdata.bin hybrid 2 2 2
```

In `single` mode both counts are forced to 1; in `threads` mode the process
count is 1, and in `processes` mode the thread count is 1. Invalid arguments
print the usage line and exit with status 1.

Any large file works as input; a file of random bytes of a hundred megabytes
or so shows the cold and warm rounds clearly.

## Using the labs from Python

Every lab module has a `run(out)` function that writes its report to a text
stream, so the output can be captured:

```python
import io
from oslabs import lab35_scheduling

buffer = io.StringIO()
lab35_scheduling.run(buffer)
print(buffer.getvalue())
```

`oslabs.page_cache_models.run` takes a `Config` first, as built by
`parse_args`.

The helpers behind the labs are plain functions that take text or paths and
can be used on their own, for instance:

- `oslabs.lab39_cloud_compute.cgroup_v2_path` and `describe_memory_max`
- `oslabs.lab38_virtualization.hypervisor_present` and `count_iommu_groups`
- `oslabs.gpu_topology.numa_nodes` and `gpu_information`
- `oslabs.pm_meminfo.annotate_meminfo`
- `oslabs.page_cache_models.worker_ranges` and `read_range`

## Running the tests

```
pip install .[test]
pytest
```