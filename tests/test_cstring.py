import pytest

from minios.cstring import (
    is_digit,
    istrncmp,
    memcmp,
    strncmp,
    strnlen_terminator,
    to_numeric_digit,
    tolower,
)


@pytest.mark.parametrize("c", list("0123456789"))
def test_is_digit_true(c):
    assert is_digit(c) is True
    assert str(to_numeric_digit(c)) == c


@pytest.mark.parametrize("c", ["a", ":", "/", " ", "Z"])
def test_is_digit_false(c):
    assert is_digit(c) is False


def test_tolower_letters_and_others():
    assert tolower("Q") == "q"
    assert tolower("q") == "q"
    assert tolower("[") == "["
    assert tolower("@") == "@"


def test_tolower_accepts_codes():
    assert tolower(ord("M")) == ord("m")


def test_strncmp_equal():
    assert strncmp("abc", "abc", 3) == 0
    assert strncmp("abc", "abc", 100) == 0


def test_strncmp_ordering_is_antisymmetric():
    assert strncmp("abc", "abd", 3) < 0
    assert strncmp("abd", "abc", 3) > 0
    assert strncmp("abc", "abd", 3) == -strncmp("abd", "abc", 3)


def test_strncmp_limited_by_n():
    assert strncmp("abcX", "abcY", 3) == 0
    assert strncmp("abcX", "abcY", 4) != 0
    assert strncmp("x", "y", 0) == 0


def test_strncmp_prefix_is_smaller():
    assert strncmp("ab", "abc", 3) < 0


def test_strncmp_stops_at_nul():
    assert strncmp("ab\0x", "ab\0y", 4) == 0


def test_strncmp_bytes_and_str_agree():
    assert strncmp(b"list", "list", 5) == 0


def test_istrncmp_ignores_case():
    assert istrncmp("HELLO.TXT", "hello.txt", 108) == 0
    assert istrncmp("Shell.elf", "SHELL.ELF", 108) == 0


def test_strnlen_terminator():
    assert strnlen_terminator("abc/def", 10, "/") == len("abc")
    assert strnlen_terminator("abcdef", 10, "/") == len("abcdef")
    assert strnlen_terminator("abcdef", 2, "/") == 2


def test_memcmp_equal_and_empty():
    assert memcmp(b"\x7fELF", b"\x7fELF", 4) == 0
    assert memcmp(b"a", b"b", 0) == 0


def test_memcmp_is_signed():
    assert memcmp(b"\x80", b"\x01", 1) == -1
    assert memcmp(b"\x01", b"\x80", 1) == 1


def test_memcmp_count_too_large():
    with pytest.raises(ValueError):
        memcmp(b"ab", b"abc", 3)