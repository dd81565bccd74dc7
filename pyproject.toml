[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "xvutils"
version = "0.1.0"
description = "Command-line tools, a file-system image builder, a shell parser and binary formats of a small RISC-V teaching operating system"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "operating-system",
    "teaching",
    "shell",
    "file-system",
    "page-table",
    "elf",
    "virtio",
    "mkfs",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Operating System",
    "Topic :: Education",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
xv-grep = "xvutils.grep:main"
xv-wc = "xvutils.wc:main"
xv-cat = "xvutils.cat:main"
xv-echo = "xvutils.echo:main"
xv-ls = "xvutils.ls:main"
xv-kill = "xvutils.fileops:kill_main"
xv-ln = "xvutils.fileops:ln_main"
xv-mkdir = "xvutils.fileops:mkdir_main"
xv-rm = "xvutils.fileops:rm_main"
xv-stressfs = "xvutils.stressfs:main"
xv-mkfs = "xvutils.mkfs:main"

[tool.hatch.build.targets.wheel]
packages = ["xvutils"]

[tool.hatch.build.targets.sdist]
include = ["xvutils", "tests", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
