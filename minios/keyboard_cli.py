"""The ``keyboard`` command: show, list and change the keyboard layout."""

from __future__ import annotations

import sys
from typing import Optional, TextIO

from .errors import InvalidArgumentError
from .keyboard import KEYBOARD_LAYOUT_ID_LENGTH, ClassicKeyboard, KeyboardManager
from .userlib import format_printf

PROGRAM_NAME = "keyboard"

USAGE = (
    "Usage:\n"
    "\tkeyboard layout set LANGUAGE \t to set the keyboard layout\n"
    "\tkeyboard layout \t\t\t\t to show the keyboard layout\n"
    "\tkeyboard layout list \t\t\t\t to list the available layouts\n"
)


def default_manager() -> KeyboardManager:
    """A keyboard manager with the classic keyboard installed."""
    manager = KeyboardManager()
    manager.insert(ClassicKeyboard())
    return manager


class _Command:
    def __init__(self, manager: KeyboardManager, out: TextIO) -> None:
        self.manager = manager
        self.out = out

    def printf(self, fmt: str, *args: object) -> None:
        self.out.write(format_printf(fmt, *args))

    def usage(self) -> None:
        self.out.write(USAGE)

    def show_layout(self) -> None:
        layout_id = self.manager.active_layout_id(KEYBOARD_LAYOUT_ID_LENGTH)
        self.printf("Active keyboard layout: %s\n", layout_id)

    def list_layouts(self) -> None:
        self.printf("Available keyboard layouts:\n")
        count = self.manager.layout_count()
        for layout_id in self.manager.available_layouts(count):
            self.printf("%s\n", layout_id)

    def set_layout(self, layout_id: str) -> None:
        try:
            self.manager.set_layout(layout_id)
        except InvalidArgumentError:
            self.printf("Unknown layout %s\n", layout_id)
            return
        self.printf("Set layout to %s\n", layout_id)

    def handle_layout(self, argv: list[str]) -> None:
        argc = len(argv)
        if argc == 2:
            self.show_layout()
        elif argc == 3 and argv[2] != "list":
            # "keyboard layout set" also lands here and is reported as unknown.
            self.printf('Unknown option: "%s"\n', argv[2])
            self.usage()
        elif argc == 3:
            self.list_layouts()
        elif argc == 4 and argv[2] == "set":
            self.set_layout(argv[3])
        else:
            self.usage()


def run(
    argv: list[str],
    manager: Optional[KeyboardManager] = None,
    out: Optional[TextIO] = None,
) -> int:
    """Run the command with argv[0] as the program name; always returns 0."""
    command = _Command(
        manager if manager is not None else default_manager(),
        out if out is not None else sys.stdout,
    )
    if len(argv) <= 1:
        command.usage()
    elif argv[1] == "layout":
        command.handle_layout(list(argv))
    else:
        command.usage()
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point taking the arguments that follow the program name."""
    args = sys.argv[1:] if argv is None else list(argv)
    return run([PROGRAM_NAME, *args])