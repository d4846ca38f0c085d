"""Keyboard drivers, layouts and the per-process key buffer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Union

from .cstring import strncmp
from .errors import KEYBOARD_BUFFER_SIZE, InvalidArgumentError, OutOfMemoryError

MAX_KEYBOARD_LAYOUT_COUNT = 20
KEYBOARD_LAYOUT_ID_LENGTH = 6
SCAN_SET_SIZE = 82

PS2_PORT = 0x64
PS2_COMMAND_ENABLE_FIRST_PORT = 0xAE
ISR_KEYBOARD_INTERRUPT = 0x21
KEYBOARD_INPUT_PORT = 0x60

CLASSIC_KEYBOARD_CAPSLOCK = 0x3A
CLASSIC_KEYBOARD_KEY_RELEASED = 0x80
CLASSIC_KEYBOARD_LSHIFT_PRESSED = 0x2A
CLASSIC_KEYBOARD_LSHIFT_RELEASED = 0xAA
CLASSIC_KEYBOARD_RSHIFT_PRESSED = 0x36
CLASSIC_KEYBOARD_RSHIFT_RELEASED = 0xB6

_KEYPAD = b"\x00 " + b"\x00" * 10 + b"\x00789-456+1230."


@dataclass(frozen=True)
class KeyboardLayout:
    """A named pair of scan-code tables: plain and shifted."""

    identifier: str
    scan_set_default: bytes
    scan_set_shift: bytes

    def __post_init__(self) -> None:
        if len(self.identifier) > KEYBOARD_LAYOUT_ID_LENGTH - 1:
            raise InvalidArgumentError(f"layout id {self.identifier!r} is too long")
        for table in (self.scan_set_default, self.scan_set_shift):
            if len(table) != SCAN_SET_SIZE:
                raise InvalidArgumentError(
                    f"scan set must hold {SCAN_SET_SIZE} entries, got {len(table)}"
                )


US_LAYOUT = KeyboardLayout(
    identifier="en_US",
    scan_set_default=(
        b"\x00\x1b1234567890-=\x08\tqwertyuiop[]\r\x00asdfghjkl;'`"
        b"\x00\\zxcvbnm,./\x00*" + _KEYPAD
    ),
    scan_set_shift=(
        b"\x00\x1b!@#$%^&*()_+\x08\tQWERTYUIOP{}\r\x00ASDFGHJKL:\"~"
        b"\x00|ZXCVBNM<>?\x00*" + _KEYPAD
    ),
)

DE_LAYOUT = KeyboardLayout(
    identifier="de_DE",
    scan_set_default=(
        b"\x00\x1b1234567890s`\x08\tqwertyuiopu+\r\x00asdfghjkloa^"
        b"\x00#zxcvbnm,.-\x00*" + _KEYPAD
    ),
    scan_set_shift=(
        b"\x00\x1b!\"S$%&/()=?`\x08\tQWERTYUIOPU*\r\x00ASDFGHJKLOA^"
        b"\x00'ZXCVBNM;:_\x00*" + _KEYPAD
    ),
)


def _code(c: Union[str, int]) -> int:
    return (ord(c) if isinstance(c, str) else int(c)) & 0xFF


class KeyBuffer:
    """A ring buffer of typed characters; an empty slot holds zero."""

    def __init__(self, size: int = KEYBOARD_BUFFER_SIZE) -> None:
        if size <= 0:
            raise InvalidArgumentError("key buffer size must be positive")
        self._buffer = bytearray(size)
        self.head = 0
        self.tail = 0

    def push(self, c: Union[str, int]) -> None:
        """Append a character; zero is ignored."""
        code = _code(c)
        if code == 0:
            return
        self._buffer[self.tail % len(self._buffer)] = code
        self.tail += 1

    def pop(self) -> Optional[str]:
        """Take the oldest character, or None when nothing is waiting."""
        index = self.head % len(self._buffer)
        code = self._buffer[index]
        if code == 0:
            return None
        self._buffer[index] = 0
        self.head += 1
        return chr(code)

    def backspace(self) -> None:
        """Drop the most recently pushed character."""
        self.tail -= 1
        self._buffer[self.tail % len(self._buffer)] = 0


class Keyboard:
    """A keyboard driver with its layouts and modifier state."""

    def __init__(
        self,
        name: str,
        initializer: Optional[Callable[["KeyboardManager"], None]] = None,
    ) -> None:
        self.name = name
        self.initializer = initializer
        self.capslock = False
        self.shift = False
        self.layouts: list[KeyboardLayout] = []

    def add_layout(self, layout: KeyboardLayout) -> None:
        """Make a layout available on this keyboard."""
        if len(self.layouts) >= MAX_KEYBOARD_LAYOUT_COUNT:
            raise OutOfMemoryError("too many keyboard layouts")
        self.layouts.append(layout)


class ClassicKeyboard(Keyboard):
    """A PS/2 keyboard that translates set-one scan codes."""

    def __init__(self) -> None:
        super().__init__("Classic", initializer=self._initialize)
        self.manager: Optional[KeyboardManager] = None

    def _initialize(self, manager: "KeyboardManager") -> None:
        self.manager = manager
        self.add_layout(DE_LAYOUT)
        self.add_layout(US_LAYOUT)
        manager.active_layout = DE_LAYOUT
        self.capslock = False
        self.shift = False

    def scancode_to_char(self, layout: KeyboardLayout, scancode: int) -> Optional[str]:
        """The character a scan code produces, or None if it produces none."""
        if not 0 <= scancode < SCAN_SET_SIZE:
            return None
        table = layout.scan_set_shift if self.shift or self.capslock else layout.scan_set_default
        code = table[scancode]
        return chr(code) if code else None

    def handle_scancode(self, scancode: int) -> Optional[str]:
        """Process one scan code and push the resulting character, if any."""
        if self.manager is None:
            raise InvalidArgumentError("keyboard has not been inserted")
        if scancode in (CLASSIC_KEYBOARD_LSHIFT_PRESSED, CLASSIC_KEYBOARD_RSHIFT_PRESSED):
            self.shift = True
            return None
        if scancode in (CLASSIC_KEYBOARD_LSHIFT_RELEASED, CLASSIC_KEYBOARD_RSHIFT_RELEASED):
            self.shift = False
            return None
        if scancode & CLASSIC_KEYBOARD_KEY_RELEASED:
            return None
        if scancode == CLASSIC_KEYBOARD_CAPSLOCK:
            self.capslock = not self.capslock
        layout = self.manager.active_layout
        if layout is None:
            raise InvalidArgumentError("no active keyboard layout")
        c = self.scancode_to_char(layout, scancode)
        if c is not None:
            self.manager.push(c)
        return c


class KeyboardManager:
    """The installed keyboards, the active layout and the current key buffer."""

    def __init__(self, buffer: Optional[KeyBuffer] = None) -> None:
        self.keyboards: list[Keyboard] = []
        self.active_layout: Optional[KeyboardLayout] = None
        self.buffer = buffer

    def insert(self, keyboard: Keyboard) -> None:
        """Install a keyboard and run its initializer."""
        if keyboard.initializer is None:
            raise InvalidArgumentError("keyboard has no initializer")
        self.keyboards.append(keyboard)
        keyboard.initializer(self)

    def push(self, c: Union[str, int]) -> None:
        """Hand a character to the current buffer; dropped if there is none."""
        if self.buffer is not None:
            self.buffer.push(c)

    def layout_count(self) -> int:
        """Number of layouts over all keyboards."""
        return sum(len(keyboard.layouts) for keyboard in self.keyboards)

    def available_layouts(self, size: int) -> list[str]:
        """Identifiers of at most size layouts, in installation order."""
        ids = [
            layout.identifier[: KEYBOARD_LAYOUT_ID_LENGTH - 1]
            for keyboard in self.keyboards
            for layout in keyboard.layouts
        ]
        return ids[: max(size, 0)]

    def active_layout_id(self, size: int = KEYBOARD_LAYOUT_ID_LENGTH) -> str:
        """Identifier of the active layout, as it fits a buffer of size bytes."""
        if size < KEYBOARD_LAYOUT_ID_LENGTH:
            raise InvalidArgumentError("buffer too small for a layout id")
        if self.active_layout is None:
            raise InvalidArgumentError("no active keyboard layout")
        return self.active_layout.identifier[: size - 1]

    def set_layout(self, layout_id: Optional[str]) -> None:
        """Activate the layout with the given identifier."""
        if layout_id is None:
            raise InvalidArgumentError("no layout id given")
        for keyboard in self.keyboards:
            for layout in keyboard.layouts:
                if strncmp(layout.identifier, layout_id, KEYBOARD_LAYOUT_ID_LENGTH) == 0:
                    self.active_layout = layout
                    return
        raise InvalidArgumentError(f"unknown layout {layout_id!r}")