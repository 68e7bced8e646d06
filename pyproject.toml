[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "corekv"
version = "0.1.0"
description = "Building blocks for a log-structured key-value store: skip list, bloom filters, W-TinyLFU cache, entry codecs and value pointers"
requires-python = ">=3.10"
dependencies = []
keywords = ["key-value", "lsm", "skiplist", "bloom-filter", "cache", "tinylfu", "storage"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Database Engines/Servers",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["corekv"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
