"""Parsing of drive paths such as ``0:/dir/file.txt``."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional

from .cstring import is_digit, to_numeric_digit
from .errors import MAX_PATH, BadPathError


@dataclass
class PathRoot:
    """A parsed path: the drive number and the path parts below the root."""

    drive_no: int
    parts: list[str] = field(default_factory=list)

    @property
    def first(self) -> Optional[str]:
        """The first part, or None for a bare root such as ``0:/``."""
        return self.parts[0] if self.parts else None

    def __iter__(self) -> Iterator[str]:
        return iter(self.parts)


def _valid_format(path: str) -> bool:
    return len(path[:MAX_PATH]) >= 3 and is_digit(path[0]) and path[1:3] == ":/"


def _iter_parts(rest: str) -> Iterator[str]:
    # Parsing ends at the first empty part.
    for part in rest.split("/"):
        if not part:
            return
        yield part


def parse_path(path: str, current_directory: Optional[str] = None) -> PathRoot:
    """Parse a path of the form ``<digit>:/a/b``; raises BadPathError if malformed."""
    path = path.split("\0", 1)[0]
    if len(path) > MAX_PATH:
        raise BadPathError(f"path longer than {MAX_PATH} characters")
    if not _valid_format(path):
        raise BadPathError(f"malformed path: {path!r}")
    return PathRoot(drive_no=to_numeric_digit(path[0]), parts=list(_iter_parts(path[3:])))