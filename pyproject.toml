[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "eipwlint"
version = "0.1.0"
description = "Building blocks for linting Ethereum Improvement Proposal documents: preamble parsing, Markdown trees, lint checks and diagnostics."
requires-python = ">=3.10"
dependencies = [
    "markdown-it-py",
]
keywords = ["eip", "ethereum", "lint", "linter", "markdown", "preamble", "diagnostics"]
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
    "Topic :: Software Development :: Quality Assurance",
    "Topic :: Text Processing :: Markup :: Markdown",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["eipwlint"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
