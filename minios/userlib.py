"""User-space helpers: tokenising, command parsing, formatting and line input."""

from __future__ import annotations

from typing import Any, Callable, Iterator, Optional, Union

from .errors import InvalidArgumentError

COMMAND_BUFFER_SIZE = 1025
ARGUMENT_SIZE = 512
RUN_BUFFER_SIZE = 1024
CARRIAGE_RETURN = "\r"
BACKSPACE = "\x08"


def _cut(text: str) -> str:
    return text.split("\0", 1)[0]


def tokenize(text: str, delimiters: str) -> Iterator[str]:
    """Yield the non-empty runs of text between delimiter characters."""
    text = _cut(text)
    delimiters = _cut(delimiters)
    if not delimiters:
        if text:
            yield text
        return
    token: list[str] = []
    for c in text:
        if c in delimiters:
            if token:
                yield "".join(token)
                token = []
        else:
            token.append(c)
    if token:
        yield "".join(token)


def parse_command(command: str, max_len: int) -> list[str]:
    """Split a command line into its space-separated arguments."""
    if max_len >= COMMAND_BUFFER_SIZE:
        raise InvalidArgumentError("command buffer too large")
    line = _cut(command)[: COMMAND_BUFFER_SIZE - 1]
    return [token[: ARGUMENT_SIZE - 1] for token in tokenize(line, " ")]


def itoa(value: int) -> str:
    """Decimal text of a 32-bit signed integer."""
    wrapped = (int(value) + 2**31) % 2**32 - 2**31
    return str(wrapped)


def format_printf(fmt: str, *args: Any) -> str:
    """Format text supporting %i and %s; any other %x yields x itself."""
    out: list[str] = []
    remaining = iter(args)
    chars = iter(_cut(fmt))

    def next_arg() -> Any:
        try:
            return next(remaining)
        except StopIteration:
            raise TypeError("not enough arguments for format string") from None

    for c in chars:
        if c != "%":
            out.append(c)
            continue
        spec = next(chars, None)
        if spec is None:
            break
        if spec == "i":
            out.append(itoa(next_arg()))
        elif spec == "s":
            out.append(_cut(str(next_arg())))
        else:
            out.append(spec)
    return "".join(out)


def _key(value: Union[str, int, None]) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, int):
        return chr(value) if value else None
    return value[0] if value and value[0] != "\0" else None


def _getkey_block(getkey: Callable[[], Union[str, int, None]]) -> str:
    while True:
        key = _key(getkey())
        if key is not None:
            return key


def read_line(
    getkey: Callable[[], Union[str, int, None]],
    max_len: int,
    echo: Optional[Callable[[str], Any]] = None,
) -> str:
    """Read keys until carriage return or max_len - 1 characters, honouring backspace."""
    chars: list[str] = []
    while len(chars) < max_len - 1:
        key = _getkey_block(getkey)
        if key == CARRIAGE_RETURN:
            break
        if echo is not None:
            echo(key)
        if key == BACKSPACE and chars:
            chars.pop()
            continue
        chars.append(key)
    return "".join(chars)


def system_run(command: str, runner: Callable[[list[str]], Any]) -> Any:
    """Parse a command line and hand its arguments to runner."""
    arguments = parse_command(_cut(command)[: RUN_BUFFER_SIZE - 1], RUN_BUFFER_SIZE)
    if not arguments:
        raise InvalidArgumentError("empty command")
    return runner(arguments)