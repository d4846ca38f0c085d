"""A sector-addressed disk over a byte image and a byte stream over it."""

from __future__ import annotations

from typing import Any, Union

from .errors import SECTOR_SIZE, DiskIOError, InvalidArgumentError

DISK_TYPE_REAL = 0


class Disk:
    """A disk whose contents are held in memory as a byte image."""

    def __init__(
        self,
        image: Union[bytes, bytearray, memoryview],
        sector_size: int = SECTOR_SIZE,
        disk_id: int = 0,
    ) -> None:
        if sector_size <= 0:
            raise InvalidArgumentError("sector size must be positive")
        self._image = bytes(image)
        self.sector_size = sector_size
        self.id = disk_id
        self.type = DISK_TYPE_REAL
        self.filesystem: Any = None
        self.fs_private: Any = None

    @property
    def total_sectors(self) -> int:
        """Number of sectors on the disk; a partial last sector counts."""
        return -(-len(self._image) // self.sector_size)

    def read_block(self, lba: int, total: int) -> bytes:
        """Read total whole sectors starting at sector lba."""
        if lba < 0 or total < 0 or lba + total > self.total_sectors:
            raise DiskIOError(f"sectors {lba}..{lba + total} are not on the disk")
        start = lba * self.sector_size
        length = total * self.sector_size
        return self._image[start:start + length].ljust(length, b"\0")

    def stream(self) -> "DiskStream":
        """A new byte stream positioned at the start of the disk."""
        return DiskStream(self)


class DiskStream:
    """Reads arbitrary byte ranges from a disk one sector at a time."""

    def __init__(self, disk: Disk) -> None:
        self.disk = disk
        self.pos = 0

    def seek(self, pos: int) -> None:
        """Move to an absolute byte position."""
        if pos < 0:
            raise InvalidArgumentError("stream position cannot be negative")
        self.pos = pos

    def read(self, total: int) -> bytes:
        """Read total bytes from the current position and advance past them."""
        if total < 0:
            raise InvalidArgumentError("cannot read a negative number of bytes")
        size = self.disk.sector_size
        chunks = []
        remaining = total
        while remaining > 0:
            sector, offset = divmod(self.pos, size)
            piece = self.disk.read_block(sector, 1)[offset:offset + remaining]
            chunks.append(piece)
            self.pos += len(piece)
            remaining -= len(piece)
        return b"".join(chunks)