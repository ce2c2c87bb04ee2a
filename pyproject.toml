[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "esshell"
version = "0.9.2"
description = "Building blocks of an extensible, functional command shell: terms, statuses, signals, wildcard matching, field splitting, formatting, parse trees, lexing, variables, options and child processes"
requires-python = ">=3.10"
dependencies = []
keywords = ["shell", "lexer", "glob", "pattern-matching", "field-splitting", "printf"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Shells",
    "Topic :: Software Development :: Interpreters",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["esshell"]

[tool.hatch.build.targets.sdist]
include = ["esshell", "tests", "pyproject.toml", "README.md"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
