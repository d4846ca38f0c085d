"""A read-only FAT16 filesystem driver working over a disk stream."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Iterable, NamedTuple, Optional, Union

from .cstring import istrncmp
from .disk import Disk, DiskStream
from .errors import (
    MAX_PATH,
    DiskIOError,
    FilesystemNotUsError,
    InvalidArgumentError,
    ReadOnlyError,
    UnimplementedError,
)

FAT16_SIGNATURE = 0x29
FAT16_FAT_ENTRY_SIZE = 0x02
FAT16_BAD_SECTOR = 0xFF7
FAT16_UNUSED = 0x00
DELETED_ENTRY_MARKER = 0xE5

ATTR_READ_ONLY = 0x01
ATTR_HIDDEN = 0x02
ATTR_SYSTEM = 0x04
ATTR_VOLUME_LABEL = 0x08
ATTR_SUBDIRECTORY = 0x10
ATTR_ARCHIVED = 0x20
ATTR_DEVICE = 0x40
ATTR_RESERVED = 0x80

MODE_READ = 0
SEEK_SET = 0
SEEK_CUR = 1
SEEK_END = 2

STAT_READ_ONLY = 0x01

_END_OF_CHAIN = (0xFFF8, 0xFFFF)
_RESERVED_ENTRIES = (0xFFF0, 0xFFF6)

_HEADER = struct.Struct("<3s8sHBHBHHBHHHII")
_EXTENDED = struct.Struct("<BBBI11s8s")
_ITEM = struct.Struct("<8s3sBBBHHHHHHHI")
_FAT_ENTRY = struct.Struct("<H")


def _proper_string(raw: bytes) -> str:
    """The padded on-disk name cut at its first NUL or space."""
    end = len(raw)
    for index, byte in enumerate(raw):
        if byte in (0x00, 0x20):
            end = index
            break
    return raw[:end].decode("latin-1")


@dataclass(frozen=True)
class DirectoryItem:
    """One 32-byte entry of a FAT directory."""

    filename: bytes
    ext: bytes
    attribute: int
    reserved: int
    creation_time_tenths: int
    creation_time: int
    creation_date: int
    last_access: int
    high_16_bits_first_cluster: int
    last_mod_time: int
    last_mod_date: int
    low_16_bits_first_cluster: int
    filesize: int

    SIZE = _ITEM.size

    @classmethod
    def from_bytes(cls, data: Union[bytes, bytearray, memoryview]) -> "DirectoryItem":
        """Parse the first entry held in data."""
        raw = bytes(data)
        if len(raw) < _ITEM.size:
            raise InvalidArgumentError(
                f"a directory item needs {_ITEM.size} bytes, got {len(raw)}"
            )
        return cls(*_ITEM.unpack_from(raw))

    @property
    def first_cluster(self) -> int:
        """The first data cluster of the entry."""
        return self.high_16_bits_first_cluster | self.low_16_bits_first_cluster

    @property
    def is_directory(self) -> bool:
        return bool(self.attribute & ATTR_SUBDIRECTORY)

    def full_name(self) -> str:
        """The name as ``NAME.EXT``, without the padding of the on-disk form."""
        name = _proper_string(self.filename)
        if self.ext and self.ext[0] not in (0x00, 0x20):
            name += "." + _proper_string(self.ext)
        return name


@dataclass
class FatDirectory:
    """The entries of a directory and where it lies on the disk."""

    items: list[DirectoryItem] = field(default_factory=list)
    total: int = 0
    sector_pos: int = 0
    ending_sector_pos: int = 0

    def visible_items(self) -> list[DirectoryItem]:
        """The entries that lookups consider."""
        return self.items[: self.total]


@dataclass
class FatDescriptor:
    """An open file or directory together with its read position."""

    item: Optional[Union[DirectoryItem, FatDirectory]]
    pos: int = 0

    @property
    def closed(self) -> bool:
        return self.item is None


class _StatResult(NamedTuple):
    filesize: int
    flags: int


@dataclass(frozen=True)
class _FatHeader:
    bytes_per_sector: int
    sectors_per_cluster: int
    reserved_sectors: int
    fat_copies: int
    root_dir_entries: int
    number_of_sectors: int
    media_type: int
    sectors_per_fat: int
    sectors_per_track: int
    number_of_heads: int
    hidden_sectors: int
    sectors_big: int
    drive_number: int
    signature: int
    volume_id: int

    SIZE = _HEADER.size + _EXTENDED.size

    @classmethod
    def from_bytes(cls, raw: bytes) -> "_FatHeader":
        (
            _jmp,
            _oem,
            bytes_per_sector,
            sectors_per_cluster,
            reserved_sectors,
            fat_copies,
            root_dir_entries,
            number_of_sectors,
            media_type,
            sectors_per_fat,
            sectors_per_track,
            number_of_heads,
            hidden_sectors,
            sectors_big,
        ) = _HEADER.unpack_from(raw)
        drive_number, _nt, signature, volume_id, _label, _system = _EXTENDED.unpack_from(
            raw, _HEADER.size
        )
        return cls(
            bytes_per_sector,
            sectors_per_cluster,
            reserved_sectors,
            fat_copies,
            root_dir_entries,
            number_of_sectors,
            media_type,
            sectors_per_fat,
            sectors_per_track,
            number_of_heads,
            hidden_sectors,
            sectors_big,
            drive_number,
            signature,
            volume_id,
        )


@dataclass
class _FatPrivate:
    header: _FatHeader
    cluster_read_stream: DiskStream
    fat_read_stream: DiskStream
    directory_stream: DiskStream
    root_directory: FatDirectory = field(default_factory=FatDirectory)


class Fat16:
    """The FAT16 filesystem: recognises a disk and reads files from it."""

    def __init__(self) -> None:
        self.name = "FAT16"

    # -- disk layout -----------------------------------------------------

    @staticmethod
    def _private(disk: Disk) -> _FatPrivate:
        private = disk.fs_private
        if not isinstance(private, _FatPrivate):
            raise InvalidArgumentError("disk is not resolved as FAT16")
        return private

    @staticmethod
    def _cluster_bytes(disk: Disk, private: _FatPrivate) -> int:
        size = private.header.sectors_per_cluster * disk.sector_size
        if size <= 0:
            raise DiskIOError("cluster size is zero")
        return size

    @staticmethod
    def _cluster_to_sector(private: _FatPrivate, cluster: int) -> int:
        return private.root_directory.ending_sector_pos + (
            (cluster - 2) * private.header.sectors_per_cluster
        )

    @staticmethod
    def _count_items(disk: Disk, private: _FatPrivate, start_sector: int) -> int:
        stream = private.directory_stream
        stream.seek(start_sector * disk.sector_size)
        count = 0
        while True:
            first = stream.read(_ITEM.size)[0]
            if first == 0x00:
                return count
            if first == DELETED_ENTRY_MARKER:
                continue
            count += 1

    def _load_root_directory(self, disk: Disk, private: _FatPrivate) -> FatDirectory:
        header = private.header
        sector_pos = header.fat_copies * header.sectors_per_fat + header.reserved_sectors
        size = header.root_dir_entries * _ITEM.size
        total = self._count_items(disk, private, sector_pos)

        stream = private.directory_stream
        stream.seek(sector_pos * disk.sector_size)
        raw = stream.read(size)
        return FatDirectory(
            items=[DirectoryItem.from_bytes(chunk) for chunk in _chunks(raw)],
            total=total,
            sector_pos=sector_pos,
            ending_sector_pos=sector_pos + size // disk.sector_size,
        )

    def _fat_entry(self, disk: Disk, private: _FatPrivate, cluster: int) -> int:
        fat_table_position = private.header.reserved_sectors * disk.sector_size
        stream = private.fat_read_stream
        stream.seek(fat_table_position * (cluster * FAT16_FAT_ENTRY_SIZE))
        (entry,) = _FAT_ENTRY.unpack(stream.read(_FAT_ENTRY.size))
        return entry

    def _cluster_for_offset(
        self, disk: Disk, private: _FatPrivate, starting_cluster: int, offset: int
    ) -> int:
        cluster = starting_cluster
        for _ in range(offset // self._cluster_bytes(disk, private)):
            entry = self._fat_entry(disk, private, cluster)
            if entry in _END_OF_CHAIN:
                raise DiskIOError("read past the last cluster of the file")
            if entry == FAT16_BAD_SECTOR:
                raise DiskIOError("cluster is marked bad")
            if entry in _RESERVED_ENTRIES:
                raise DiskIOError("cluster chain reaches a reserved entry")
            if entry == FAT16_UNUSED:
                raise DiskIOError("cluster chain reaches an unused entry")
            cluster = entry
        return cluster

    def _read_internal(
        self, disk: Disk, private: _FatPrivate, starting_cluster: int, offset: int, total: int
    ) -> bytes:
        stream = private.cluster_read_stream
        cluster_bytes = self._cluster_bytes(disk, private)
        chunks = []
        while True:
            cluster = self._cluster_for_offset(disk, private, starting_cluster, offset)
            sector = self._cluster_to_sector(private, cluster)
            stream.seek(sector * disk.sector_size + offset % cluster_bytes)
            count = min(total, cluster_bytes)
            chunks.append(stream.read(count))
            total -= count
            offset += count
            if total <= 0:
                return b"".join(chunks)

    def _load_directory(
        self, disk: Disk, private: _FatPrivate, item: DirectoryItem
    ) -> FatDirectory:
        if not item.is_directory:
            raise InvalidArgumentError(f"{item.full_name()} is not a directory")
        cluster = item.first_cluster
        total = self._count_items(disk, private, self._cluster_to_sector(private, cluster))
        raw = self._read_internal(disk, private, cluster, 0, total * _ITEM.size)
        return FatDirectory(
            items=[DirectoryItem.from_bytes(chunk) for chunk in _chunks(raw)],
            total=total,
        )

    def _new_fat_item(
        self, disk: Disk, private: _FatPrivate, item: DirectoryItem
    ) -> Union[DirectoryItem, FatDirectory]:
        if item.is_directory:
            return self._load_directory(disk, private, item)
        return item

    def _find_in_directory(
        self, disk: Disk, private: _FatPrivate, directory: FatDirectory, name: str
    ) -> Optional[Union[DirectoryItem, FatDirectory]]:
        match = None
        for item in directory.visible_items():
            if istrncmp(item.full_name(), name, MAX_PATH) == 0:
                match = item
        return None if match is None else self._new_fat_item(disk, private, match)

    def _directory_entry(
        self, disk: Disk, parts: list[str]
    ) -> Optional[Union[DirectoryItem, FatDirectory]]:
        private = self._private(disk)
        current = self._find_in_directory(disk, private, private.root_directory, parts[0])
        for part in parts[1:]:
            if not isinstance(current, FatDirectory):
                return None
            current = self._find_in_directory(disk, private, current, part)
        return current

    @staticmethod
    def _file_item(descriptor: FatDescriptor) -> DirectoryItem:
        if descriptor.closed:
            raise InvalidArgumentError("descriptor is closed")
        if not isinstance(descriptor.item, DirectoryItem):
            raise InvalidArgumentError("descriptor does not refer to a file")
        return descriptor.item

    # -- filesystem interface ---------------------------------------------

    def resolve(self, disk: Disk) -> None:
        """Claim the disk if it holds FAT16; raises FilesystemNotUsError if not."""
        private = _FatPrivate(
            header=_FatHeader.from_bytes(bytes(_FatHeader.SIZE)),
            cluster_read_stream=disk.stream(),
            fat_read_stream=disk.stream(),
            directory_stream=disk.stream(),
        )
        disk.fs_private = private
        try:
            private.header = _FatHeader.from_bytes(disk.stream().read(_FatHeader.SIZE))
            if private.header.signature != FAT16_SIGNATURE:
                raise FilesystemNotUsError("disk does not carry a FAT16 signature")
            try:
                private.root_directory = self._load_root_directory(disk, private)
            except DiskIOError as exc:
                raise DiskIOError(f"cannot read the root directory: {exc}") from exc
        except Exception:
            disk.fs_private = None
            raise
        disk.filesystem = self

    def open(self, disk: Disk, parts: Iterable[str], mode: int) -> FatDescriptor:
        """Open the entry named by the path parts for reading."""
        if int(mode) != MODE_READ:
            raise ReadOnlyError("FAT16 only supports reading")
        path = list(parts)
        if not path:
            raise InvalidArgumentError("cannot open the root directory")
        item = self._directory_entry(disk, path)
        if item is None:
            raise DiskIOError(f"no such entry: {'/'.join(path)}")
        return FatDescriptor(item=item)

    def read(self, disk: Disk, descriptor: FatDescriptor, size: int, nmemb: int) -> bytes:
        """Read nmemb records of size bytes from the descriptor's position."""
        item = self._file_item(descriptor)
        private = self._private(disk)
        offset = descriptor.pos
        records = []
        for _ in range(nmemb):
            records.append(self._read_internal(disk, private, item.first_cluster, offset, size))
            offset += size
        return b"".join(records)

    def seek(self, descriptor: FatDescriptor, offset: int, whence: int) -> None:
        """Move the read position of an open file."""
        item = self._file_item(descriptor)
        offset &= 0xFFFFFFFF
        if offset >= item.filesize:
            raise DiskIOError("seek beyond the end of the file")
        whence = int(whence)
        if whence == SEEK_SET:
            descriptor.pos = offset
        elif whence == SEEK_END:
            raise UnimplementedError("seeking from the end is not supported")
        elif whence == SEEK_CUR:
            descriptor.pos += offset
        else:
            raise InvalidArgumentError(f"unknown seek mode {whence}")

    def stat(self, disk: Disk, descriptor: FatDescriptor) -> _StatResult:
        """Size and flags of an open file."""
        item = self._file_item(descriptor)
        flags = STAT_READ_ONLY if item.attribute & ATTR_READ_ONLY else 0
        return _StatResult(filesize=item.filesize, flags=flags)

    def close(self, descriptor: FatDescriptor) -> None:
        """Release a descriptor; it cannot be used afterwards."""
        if descriptor.closed:
            raise InvalidArgumentError("descriptor is already closed")
        descriptor.item = None
        descriptor.pos = 0


def _chunks(raw: bytes) -> list[bytes]:
    return [raw[start:start + _ITEM.size] for start in range(0, len(raw) - _ITEM.size + 1, _ITEM.size)]