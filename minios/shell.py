"""An interactive shell that reads command lines and starts programs."""

from __future__ import annotations

import sys
from typing import Any, Callable, Iterable, Mapping, Optional, TextIO

from .cstring import istrncmp
from .errors import MAX_PATH, KernelError
from .keyboard_cli import default_manager
from .keyboard_cli import run as run_keyboard
from .userlib import parse_command, read_line

BANNER = "DanOS v1.0.0\n"
PROMPT = "> "
LINE_BUFFER_SIZE = 1024

Program = Callable[[list[str]], Any]


def _find_program(programs: Mapping[str, Program], name: str) -> Optional[Program]:
    # Program names are looked up the way the filesystem matches names.
    match = None
    for candidate, program in programs.items():
        if istrncmp(candidate, name, MAX_PATH) == 0:
            match = program
    return match


def _read(line: str) -> str:
    keys = iter(line.rstrip("\n") + "\r")
    return read_line(lambda: next(keys, "\r"), LINE_BUFFER_SIZE)


def run_shell(
    lines: Iterable[str],
    programs: Mapping[str, Program],
    out: TextIO,
) -> list[Any]:
    """Run commands from lines until they run out; returns the programs' results."""
    results: list[Any] = []
    out.write(BANNER)
    for line in lines:
        out.write(PROMPT)
        text = _read(line)
        out.write("\n")
        try:
            argv = parse_command(text, LINE_BUFFER_SIZE)
        except KernelError:
            continue
        if not argv:
            continue
        program = _find_program(programs, argv[0])
        if program is None:
            continue
        results.append(program(argv))
    return results


def _default_programs(out: TextIO) -> dict[str, Program]:
    manager = default_manager()
    return {"keyboard.elf": lambda argv: run_keyboard(argv, manager, out)}


def main(argv: Optional[list[str]] = None) -> int:
    """Run the shell on standard input and output."""
    run_shell(sys.stdin, _default_programs(sys.stdout), sys.stdout)
    return 0