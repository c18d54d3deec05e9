[build-system]
requires = ["setuptools>=64"]
build-backend = "setuptools.build_meta"

[project]
name = "oslabs"
version = "0.1.0"
description = "Hands-on Linux operating-system labs: journaling, protection, scheduling, virtualization, cgroups, GPU hosts, page cache and process memory."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "linux",
    "operating-systems",
    "procfs",
    "cgroups",
    "page-cache",
    "scheduling",
    "virtualization",
    "education",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Education",
    "Topic :: System :: Operating System",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
oslabs-lab33 = "oslabs.lab33_ext4_journal:main"
oslabs-lab34 = "oslabs.lab34_protection:main"
oslabs-lab35 = "oslabs.lab35_scheduling:main"
oslabs-lab38 = "oslabs.lab38_virtualization:main"
oslabs-lab39 = "oslabs.lab39_cloud_compute:main"
oslabs-lab40 = "oslabs.lab40_gpu_os:main"
oslabs-page-cache = "oslabs.page_cache_models:main"
oslabs-memory = "oslabs.memory_exercises:main"

[tool.setuptools.packages.find]
include = ["oslabs*"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
