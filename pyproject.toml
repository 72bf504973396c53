[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bqls"
version = "0.1.0"
description = "Building blocks for a BigQuery SQL language server: LSP structures, virtual document URIs, line diffs, diagnostics, a metadata cache and result export"
requires-python = ">=3.10"
dependencies = []
keywords = ["bigquery", "sql", "language-server", "lsp", "editor"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development",
    "Topic :: Database :: Front-Ends",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["bqls"]

[tool.hatch.build.targets.sdist]
include = ["bqls", "tests"]

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
warn_redundant_casts = true
