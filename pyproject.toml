[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mapred"
version = "0.1.0"
description = "A small MapReduce framework: a coordinator, workers that talk to it over a local socket, and a sequential runner."
requires-python = ">=3.10"
dependencies = []
keywords = ["mapreduce", "distributed", "coordinator", "worker", "word-count"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Distributed Computing",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
mrcoordinator = "mapred.coordinator:main"
mrworker = "mapred.worker:main"
mrsequential = "mapred.sequential:main"

[tool.hatch.build.targets.wheel]
packages = ["mapred"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
