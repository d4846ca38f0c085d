"""C-style string and memory comparison helpers used by the kernel."""

from __future__ import annotations

from itertools import chain, islice, repeat
from typing import Iterator, Union

Text = Union[str, bytes, bytearray]


def _raw(text: Text) -> bytes:
    data = text.encode("latin-1") if isinstance(text, str) else bytes(text)
    return data.split(b"\0", 1)[0]


def _codes(text: Text) -> Iterator[int]:
    """Byte values of a C string followed by an endless run of terminators."""
    return chain(_raw(text), repeat(0))


def _char_code(c: Union[str, int]) -> int:
    return ord(c) if isinstance(c, str) else int(c)


def _lower_code(code: int) -> int:
    return code + 32 if 65 <= code <= 90 else code


def is_digit(c: Union[str, int]) -> bool:
    """True for the ASCII digits 0 to 9."""
    return 48 <= _char_code(c) <= 57


def to_numeric_digit(c: Union[str, int]) -> int:
    """Value of an ASCII digit character."""
    return _char_code(c) - 48


def tolower(c: Union[str, int]) -> Union[str, int]:
    """Lower-case an ASCII letter, leaving everything else unchanged."""
    lowered = _lower_code(_char_code(c))
    return chr(lowered) if isinstance(c, str) else lowered


def strncmp(a: Text, b: Text, n: int) -> int:
    """Compare at most n characters; the sign of the result orders a and b."""
    for u1, u2 in islice(zip(_codes(a), _codes(b)), max(n, 0)):
        if u1 != u2:
            return u1 - u2
        if u1 == 0:
            return 0
    return 0


def istrncmp(a: Text, b: Text, n: int) -> int:
    """Like strncmp, but ASCII letters compare without regard to case."""
    for u1, u2 in islice(zip(_codes(a), _codes(b)), max(n, 0)):
        if u1 != u2 and _lower_code(u1) != _lower_code(u2):
            return u1 - u2
        if u1 == 0:
            return 0
    return 0


def strnlen_terminator(text: Text, max_len: int, terminator: Union[str, int]) -> int:
    """Length up to the end of the string, the terminator, or max_len."""
    stop = _char_code(terminator)
    length = 0
    for code in islice(_raw(text), max(max_len, 0)):
        if code == stop:
            break
        length += 1
    return length


def _signed(byte: int) -> int:
    return byte - 256 if byte >= 128 else byte


def memcmp(a: Union[bytes, bytearray, str], b: Union[bytes, bytearray, str], count: int) -> int:
    """Compare count bytes as signed chars; returns -1, 0 or 1."""
    x = a.encode("latin-1") if isinstance(a, str) else bytes(a)
    y = b.encode("latin-1") if isinstance(b, str) else bytes(b)
    if count > len(x) or count > len(y):
        raise ValueError("count exceeds the length of an operand")
    for c1, c2 in zip(x[:count], y[:count]):
        if c1 != c2:
            return -1 if _signed(c1) < _signed(c2) else 1
    return 0