"""The virtual filesystem layer: disks, filesystem drivers and file descriptors."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Iterable, Optional, Protocol, Union

from .disk import Disk
from .errors import (
    MAX_FILE_DESCRIPTORS,
    MAX_FILESYSTEMS,
    BadPathError,
    DiskIOError,
    InvalidArgumentError,
    KernelError,
    OutOfMemoryError,
    TakenError,
)
from .fat16 import Fat16
from .pathparser import parse_path

FILE_STAT_READ_ONLY = 0x00000001


class FileMode(IntEnum):
    """How a file is opened."""

    READ = 0
    WRITE = 1
    APPEND = 2
    INVALID = 3


class SeekMode(IntEnum):
    """Where a seek offset is measured from."""

    SET = 0
    CUR = 1
    END = 2


@dataclass(frozen=True)
class FileStat:
    """Flags and size of an open file."""

    flags: int
    filesize: int

    @property
    def read_only(self) -> bool:
        return bool(self.flags & FILE_STAT_READ_ONLY)


class Filesystem(Protocol):
    """What a filesystem driver offers to the virtual filesystem."""

    name: str

    def resolve(self, disk: Disk) -> None: ...

    def open(self, disk: Disk, parts: Iterable[str], mode: int) -> Any: ...

    def read(self, disk: Disk, descriptor: Any, size: int, nmemb: int) -> bytes: ...

    def seek(self, descriptor: Any, offset: int, whence: int) -> None: ...

    def stat(self, disk: Disk, descriptor: Any) -> Any: ...

    def close(self, descriptor: Any) -> None: ...


@dataclass
class _FileDescriptor:
    index: int
    filesystem: Filesystem
    private: Any
    disk: Disk


def mode_from_string(text: str) -> FileMode:
    """The file mode named by the first character of text."""
    if text.startswith("r"):
        return FileMode.READ
    if text.startswith("w"):
        return FileMode.WRITE
    if text.startswith("a"):
        return FileMode.APPEND
    return FileMode.INVALID


class VirtualFileSystem:
    """Routes file operations on numbered descriptors to filesystem drivers."""

    def __init__(self, filesystems: Optional[Iterable[Filesystem]] = None) -> None:
        self._filesystems: list[Filesystem] = []
        self._descriptors: dict[int, _FileDescriptor] = {}
        self._disks: dict[int, Disk] = {}
        for filesystem in filesystems if filesystems is not None else [Fat16()]:
            self.insert_filesystem(filesystem)

    @property
    def filesystems(self) -> list[Filesystem]:
        return list(self._filesystems)

    @property
    def open_descriptors(self) -> list[int]:
        """The descriptor numbers currently in use, in ascending order."""
        return sorted(self._descriptors)

    def disk(self, index: int) -> Optional[Disk]:
        """The disk registered under index, if any."""
        return self._disks.get(index)

    def insert_filesystem(self, filesystem: Filesystem) -> None:
        """Register a filesystem driver."""
        if len(self._filesystems) >= MAX_FILESYSTEMS:
            raise OutOfMemoryError("problem inserting filesystem: no free slot")
        self._filesystems.append(filesystem)

    def resolve(self, disk: Disk) -> Optional[Filesystem]:
        """The first registered filesystem that claims the disk, or None."""
        for filesystem in self._filesystems:
            try:
                filesystem.resolve(disk)
            except KernelError:
                continue
            return filesystem
        return None

    def add_disk(self, disk: Disk) -> Optional[Filesystem]:
        """Register a disk under its id and bind the filesystem found on it."""
        if disk.id in self._disks:
            raise TakenError(f"disk {disk.id} is already registered")
        disk.filesystem = self.resolve(disk)
        self._disks[disk.id] = disk
        return disk.filesystem

    def _free_index(self) -> int:
        for index in range(1, MAX_FILE_DESCRIPTORS + 1):
            if index not in self._descriptors:
                return index
        raise OutOfMemoryError("no free file descriptor")

    def _get(self, fd: int) -> Optional[_FileDescriptor]:
        if fd <= 0 or fd >= MAX_FILE_DESCRIPTORS:
            return None
        return self._descriptors.get(fd)

    def open(self, filename: str, mode: Union[str, FileMode] = "r") -> int:
        """Open a file such as ``0:/dir/name.txt`` and return its descriptor."""
        try:
            root = parse_path(filename)
        except BadPathError as exc:
            raise InvalidArgumentError(str(exc)) from exc
        if root.first is None:
            raise InvalidArgumentError("cannot open a bare root path")

        disk = self._disks.get(root.drive_no)
        if disk is None:
            raise DiskIOError(f"no disk {root.drive_no}")
        if disk.filesystem is None:
            raise DiskIOError(f"disk {root.drive_no} has no filesystem")

        file_mode = mode if isinstance(mode, FileMode) else mode_from_string(mode)
        if file_mode == FileMode.INVALID:
            raise InvalidArgumentError(f"invalid file mode {mode!r}")

        filesystem = disk.filesystem
        private = filesystem.open(disk, root.parts, file_mode)
        try:
            index = self._free_index()
        except OutOfMemoryError:
            filesystem.close(private)
            raise
        self._descriptors[index] = _FileDescriptor(index, filesystem, private, disk)
        return index

    def seek(self, fd: int, offset: int, whence: Union[int, SeekMode] = SeekMode.SET) -> None:
        """Move the position of an open file."""
        desc = self._get(fd)
        if desc is None:
            raise DiskIOError(f"bad file descriptor {fd}")
        desc.filesystem.seek(desc.private, offset, whence)

    def read(self, fd: int, size: int, nmemb: int) -> bytes:
        """Read nmemb records of size bytes from an open file."""
        if size == 0 or nmemb == 0 or fd < 1:
            raise InvalidArgumentError("read needs a size, a count and a descriptor")
        desc = self._get(fd)
        if desc is None:
            raise InvalidArgumentError(f"bad file descriptor {fd}")
        return desc.filesystem.read(desc.disk, desc.private, size, nmemb)

    def stat(self, fd: int) -> FileStat:
        """Size and flags of an open file."""
        desc = self._get(fd)
        if desc is None:
            raise DiskIOError(f"bad file descriptor {fd}")
        result = desc.filesystem.stat(desc.disk, desc.private)
        return FileStat(flags=result.flags, filesize=result.filesize)

    def close(self, fd: int) -> None:
        """Close an open file and free its descriptor number."""
        desc = self._get(fd)
        if desc is None:
            raise DiskIOError(f"bad file descriptor {fd}")
        desc.filesystem.close(desc.private)
        del self._descriptors[fd]