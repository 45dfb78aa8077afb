[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "batchflow"
version = "0.1.0"
description = "Offset-based batch reading of CSV files into document sinks, with bounded continue-as-new runs"
requires-python = ">=3.10"
dependencies = [
    "pymongo",
]
keywords = ["batch", "csv", "etl", "mongodb", "workflow", "offsets"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Application Frameworks",
    "Topic :: Database",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["batchflow"]

[tool.hatch.build.targets.sdist]
include = ["batchflow", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
