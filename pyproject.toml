[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "monoui"
version = "0.1.0"
description = "Monochrome minimal user interface (form definition strings, field dispatch, cursor navigation) and a two-wheel PI drive controller"
requires-python = ">=3.10"
dependencies = []
keywords = ["user-interface", "menu", "monochrome", "embedded", "pid", "motor"]
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
    "Topic :: Software Development :: User Interfaces",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["monoui"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
