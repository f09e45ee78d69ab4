[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "xvkit"
version = "0.1.0"
description = "Models of a small x86 teaching kernel's data structures, page tables, locks, shell parser and user utilities"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "kernel",
    "operating-system",
    "x86",
    "page-table",
    "red-black-tree",
    "shell",
    "malloc",
    "teaching",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Education",
    "Topic :: System :: Operating System Kernels",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
xvkit-wc = "xvkit.wc:main"
xvkit-rm = "xvkit.rm:main"

[tool.hatch.build.targets.wheel]
packages = ["xvkit"]

[tool.hatch.build.targets.sdist]
include = ["xvkit", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
