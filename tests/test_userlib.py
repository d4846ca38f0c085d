import pytest

from minios.errors import InvalidArgumentError
from minios.userlib import (
    format_printf,
    itoa,
    parse_command,
    read_line,
    system_run,
    tokenize,
)


def keys(text):
    source = iter(text)
    return lambda: next(source)


def test_tokenize_skips_repeated_delimiters():
    assert list(tokenize("  ls  -l a ", " ")) == ["ls", "-l", "a"]


def test_tokenize_several_delimiters():
    assert list(tokenize("a,b;;c", ",;")) == ["a", "b", "c"]


def test_tokenize_empty_and_nul():
    assert list(tokenize("   ", " ")) == []
    assert list(tokenize("ab\0cd", " ")) == ["ab"]
    assert list(tokenize("a b", "")) == ["a b"]


def test_parse_command():
    assert parse_command("keyboard layout set en_US", 1024) == [
        "keyboard",
        "layout",
        "set",
        "en_US",
    ]
    assert parse_command("   ", 1024) == []


def test_parse_command_truncates_arguments():
    args = parse_command("x" * 600, 1024)
    assert len(args) == 1
    assert len(args[0]) == 511


def test_parse_command_rejects_large_max():
    with pytest.raises(InvalidArgumentError):
        parse_command("ls", 1025)


def test_itoa():
    assert itoa(0) == "0"
    assert itoa(123) == "123"
    assert itoa(-42) == "-42"
    assert itoa(-2147483648) == "-2147483648"


def test_format_printf():
    assert format_printf("Set layout to %s\n", "en_US") == "Set layout to en_US\n"
    assert format_printf("n=%i", 5) == "n=5"
    assert format_printf("100%%") == "100%"
    assert format_printf("%d") == "d"


def test_format_printf_missing_argument():
    with pytest.raises(TypeError):
        format_printf("%s")


def test_read_line_basic():
    assert read_line(keys("abc\r"), 1024) == "abc"


def test_read_line_backspace_and_echo():
    echoed = []
    line = read_line(keys("ab\x08c\r"), 1024, echoed.append)
    assert line == "ac"
    assert "".join(echoed) == "ab\x08c"


def test_read_line_skips_empty_keys():
    assert read_line(keys([0, "a", None, 98, "\r"]), 1024) == "ab"


def test_read_line_limit():
    assert read_line(keys("abcdef"), 3) == "ab"


def test_read_line_backspace_at_start_is_kept():
    assert read_line(keys("\x08a\r"), 1024) == "\x08a"


def test_system_run_passes_arguments():
    seen = []

    def runner(arguments):
        seen.append(arguments)
        return 7

    assert system_run("ls -a", runner) == 7
    assert seen == [["ls", "-a"]]


def test_system_run_empty_raises():
    with pytest.raises(InvalidArgumentError):
        system_run("   ", lambda arguments: 0)