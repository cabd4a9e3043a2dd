[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "prestql"
version = "0.1.0"
description = "Turn HTTP query strings and JSON bodies into parameterised PostgreSQL statements and run them"
requires-python = ">=3.10"
dependencies = [
    "python-slugify",
]
keywords = [
    "postgresql",
    "rest",
    "sql",
    "query-builder",
    "api",
]
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
    "Programming Language :: SQL",
    "Topic :: Database :: Front-Ends",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["prestql"]

[tool.hatch.build.targets.sdist]
include = [
    "prestql",
    "tests",
]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
