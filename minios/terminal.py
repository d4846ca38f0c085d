"""A text-mode terminal backed by a grid of character cells."""

from __future__ import annotations

from typing import Union

VGA_WIDTH = 80
VGA_HEIGHT = 20

DEFAULT_COLOR = 15
BACKSPACE = "\x08"
TAB_WIDTH = 5


def make_char(c: Union[str, int], color: int) -> int:
    """Pack a character and its colour into one 16-bit cell value."""
    code = ord(c) if isinstance(c, str) else int(c)
    return ((color & 0xFF) << 8) | (code & 0xFF)


class Terminal:
    """Cursor-driven writer over a width by height grid of cells."""

    def __init__(self, width: int = VGA_WIDTH, height: int = VGA_HEIGHT) -> None:
        self.width = width
        self.height = height
        self.row = 0
        self.col = 0
        self._cells = [make_char(" ", 0)] * (width * height)

    def _index(self, x: int, y: int) -> int:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"cell ({x}, {y}) is outside the screen")
        return y * self.width + x

    def put_char(self, x: int, y: int, c: Union[str, int], color: int) -> None:
        """Store a character at the given column and row."""
        self._cells[self._index(x, y)] = make_char(c, color)

    def cell(self, x: int, y: int) -> int:
        """The packed value stored at the given column and row."""
        return self._cells[self._index(x, y)]

    def _advance(self) -> None:
        self.col += 1
        if self.col >= self.width:
            self.col = 0
            self.row += 1

    def write_char(self, c: str, color: int = DEFAULT_COLOR) -> None:
        """Write a character at the cursor, handling newline, tab and backspace."""
        if c == "\n":
            self.row += 1
            self.col = 0
        elif c == "\t":
            self.tab()
        elif c == BACKSPACE:
            self.backspace()
        else:
            self.put_char(self.col, self.row, c, color)
            self._advance()

    def backspace(self) -> None:
        """Blank the character before the cursor and move back onto it."""
        if self.row == 0 and self.col == 0:
            return
        if self.col == 0:
            self.row -= 1
            self.col = self.width
        self.col -= 1
        self.write_char(" ", DEFAULT_COLOR)
        if not self.col:
            self.row -= 1
            self.col = self.width
        self.col -= 1

    def tab(self) -> None:
        """Write a run of blanks at the cursor."""
        for _ in range(TAB_WIDTH):
            self.put_char(self.col, self.row, " ", DEFAULT_COLOR)
            self._advance()

    def print(self, text: str) -> None:
        """Write text up to its first NUL in the default colour."""
        for c in text.split("\0", 1)[0]:
            self.write_char(c, DEFAULT_COLOR)