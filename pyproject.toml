[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "slamgraph"
version = "0.1.0"
description = "Graph SLAM: Gauss-Newton optimisation of 2D and 3D factor graphs, read from and written to g2o and JSON files."
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["slam", "graph-slam", "factor-graph", "robotics", "g2o", "gauss-newton"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
slamgraph = "slamgraph.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["slamgraph"]

[tool.hatch.build.targets.sdist]
include = ["slamgraph", "tests", "pyproject.toml", "README.md"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
ignore_missing_imports = true
