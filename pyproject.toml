[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "minios"
version = "1.0.0"
description = "A small operating system kernel modelled in Python: heap, paging, GDT, FAT16, ELF parsing, keyboard layouts and a shell"
requires-python = ">=3.10"
dependencies = []
keywords = ["kernel", "operating-system", "fat16", "elf", "paging", "heap", "gdt", "keyboard", "simulation"]
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
    "Topic :: System :: Operating System",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
minios-shell = "minios.shell:main"
minios-keyboard = "minios.keyboard_cli:main"

[tool.hatch.build.targets.wheel]
packages = ["minios"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
