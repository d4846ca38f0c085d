import struct

import pytest

from minios.disk import Disk
from minios.errors import (
    MAX_FILE_DESCRIPTORS,
    MAX_FILESYSTEMS,
    DiskIOError,
    InvalidArgumentError,
    OutOfMemoryError,
    ReadOnlyError,
    TakenError,
    UnimplementedError,
)
from minios.fat16 import Fat16
from minios.filesystem import (
    FILE_STAT_READ_ONLY,
    FileMode,
    FileStat,
    SeekMode,
    VirtualFileSystem,
    mode_from_string,
)

SECTOR = 512
HELLO = b"Hello, world!"
NOTES = b"read only notes"
INNER = b"nested file"


def _sector(data):
    return data.ljust(SECTOR, b"\0")


def _boot_sector():
    header = struct.pack(
        "<3s8sHBHBHHBHHHII",
        b"\xeb\x3c\x90", b"MINIOS  ", SECTOR, 1, 1, 1, 16, 8, 0xF8, 1, 32, 2, 0, 0,
    )
    extended = struct.pack("<BBBI11s8s", 0x80, 0, 0x29, 0x1234, b"NO NAME    ", b"FAT16   ")
    return _sector(header + extended)


def _entry(name, ext, cluster, size, attribute=0x20):
    return struct.pack(
        "<8s3sBBBHHHHHHHI",
        name.ljust(8), ext.ljust(3), attribute, 0, 0, 0, 0, 0, 0, 0, 0, cluster, size,
    )


def build_image():
    root = (
        _entry(b"HELLO", b"TXT", 2, len(HELLO))
        + _entry(b"NOTES", b"TXT", 3, len(NOTES), attribute=0x01)
        + _entry(b"DIR", b"", 4, 0, attribute=0x10)
    )
    subdir = _entry(b"INNER", b"TXT", 5, len(INNER))
    sectors = [
        _boot_sector(),
        _sector(b""),
        _sector(root),
        _sector(HELLO),
        _sector(NOTES),
        _sector(subdir),
        _sector(INNER),
        _sector(b""),
    ]
    return b"".join(sectors)


@pytest.fixture
def vfs():
    system = VirtualFileSystem()
    system.add_disk(Disk(build_image()))
    return system


@pytest.mark.parametrize(
    "text, expected",
    [
        ("r", FileMode.READ),
        ("rb", FileMode.READ),
        ("w", FileMode.WRITE),
        ("a", FileMode.APPEND),
        ("x", FileMode.INVALID),
        ("", FileMode.INVALID),
    ],
)
def test_mode_from_string(text, expected):
    assert mode_from_string(text) == expected


def test_add_disk_binds_fat16():
    system = VirtualFileSystem()
    disk = Disk(build_image())
    fs = system.add_disk(disk)
    assert isinstance(fs, Fat16)
    assert disk.filesystem is fs
    assert system.disk(0) is disk


def test_add_disk_twice_is_taken():
    system = VirtualFileSystem()
    system.add_disk(Disk(build_image()))
    with pytest.raises(TakenError):
        system.add_disk(Disk(build_image()))


def test_resolve_unknown_disk_returns_none():
    system = VirtualFileSystem()
    assert system.resolve(Disk(bytes(SECTOR * 2))) is None


def test_descriptors_start_at_one(vfs):
    first = vfs.open("0:/hello.txt", "r")
    second = vfs.open("0:/hello.txt", "r")
    assert (first, second) == (1, 2)
    assert vfs.open_descriptors == [1, 2]


def test_read_whole_file(vfs):
    fd = vfs.open("0:/HELLO.TXT", "r")
    assert vfs.read(fd, len(HELLO), 1) == HELLO


def test_read_multiple_records_starts_at_position(vfs):
    fd = vfs.open("0:/hello.txt", "r")
    assert vfs.read(fd, 5, 2) == HELLO[:10]


def test_seek_set_then_read(vfs):
    fd = vfs.open("0:/hello.txt", "r")
    vfs.seek(fd, 7, SeekMode.SET)
    assert vfs.read(fd, 5, 1) == HELLO[7:12]


def test_seek_cur_accumulates(vfs):
    fd = vfs.open("0:/hello.txt", "r")
    vfs.seek(fd, 3, SeekMode.SET)
    vfs.seek(fd, 4, SeekMode.CUR)
    assert vfs.read(fd, 3, 1) == HELLO[7:10]


def test_seek_past_end_fails(vfs):
    fd = vfs.open("0:/hello.txt", "r")
    with pytest.raises(DiskIOError):
        vfs.seek(fd, len(HELLO), SeekMode.SET)


def test_seek_end_is_unimplemented(vfs):
    fd = vfs.open("0:/hello.txt", "r")
    with pytest.raises(UnimplementedError):
        vfs.seek(fd, 0, SeekMode.END)


def test_seek_bad_descriptor(vfs):
    with pytest.raises(DiskIOError):
        vfs.seek(9, 0, SeekMode.SET)


def test_stat_plain_file(vfs):
    fd = vfs.open("0:/hello.txt", "r")
    result = vfs.stat(fd)
    assert result == FileStat(flags=0, filesize=len(HELLO))
    assert not result.read_only


def test_stat_read_only_file(vfs):
    fd = vfs.open("0:/notes.txt", "r")
    result = vfs.stat(fd)
    assert result.flags == FILE_STAT_READ_ONLY
    assert result.read_only
    assert result.filesize == len(NOTES)


def test_nested_path(vfs):
    fd = vfs.open("0:/dir/inner.txt", "r")
    assert vfs.read(fd, len(INNER), 1) == INNER


def test_stat_of_directory_fails(vfs):
    fd = vfs.open("0:/dir", "r")
    with pytest.raises(InvalidArgumentError):
        vfs.stat(fd)


@pytest.mark.parametrize("path", ["0:/", "bad", "x:/hello.txt"])
def test_open_invalid_path(vfs, path):
    with pytest.raises(InvalidArgumentError):
        vfs.open(path, "r")


def test_open_missing_disk(vfs):
    with pytest.raises(DiskIOError):
        vfs.open("1:/hello.txt", "r")


def test_open_disk_without_filesystem(vfs):
    assert vfs.add_disk(Disk(bytes(SECTOR * 2), disk_id=1)) is None
    with pytest.raises(DiskIOError):
        vfs.open("1:/hello.txt", "r")


def test_open_invalid_mode(vfs):
    with pytest.raises(InvalidArgumentError):
        vfs.open("0:/hello.txt", "x")


def test_open_for_write_is_read_only(vfs):
    with pytest.raises(ReadOnlyError):
        vfs.open("0:/hello.txt", "w")
    assert vfs.open_descriptors == []


def test_open_missing_file(vfs):
    with pytest.raises(DiskIOError):
        vfs.open("0:/missing.txt", "r")


def test_read_rejects_zero_sizes(vfs):
    fd = vfs.open("0:/hello.txt", "r")
    with pytest.raises(InvalidArgumentError):
        vfs.read(fd, 0, 1)
    with pytest.raises(InvalidArgumentError):
        vfs.read(fd, 1, 0)
    with pytest.raises(InvalidArgumentError):
        vfs.read(0, 1, 1)


def test_close_frees_descriptor_for_reuse(vfs):
    first = vfs.open("0:/hello.txt", "r")
    second = vfs.open("0:/notes.txt", "r")
    vfs.close(first)
    assert vfs.open_descriptors == [second]
    assert vfs.open("0:/hello.txt", "r") == first


def test_closed_descriptor_is_unusable(vfs):
    fd = vfs.open("0:/hello.txt", "r")
    vfs.close(fd)
    with pytest.raises(InvalidArgumentError):
        vfs.read(fd, 1, 1)
    with pytest.raises(DiskIOError):
        vfs.stat(fd)
    with pytest.raises(DiskIOError):
        vfs.close(fd)


def test_descriptor_table_exhaustion(vfs):
    fds = [vfs.open("0:/hello.txt", "r") for _ in range(MAX_FILE_DESCRIPTORS)]
    assert fds == list(range(1, MAX_FILE_DESCRIPTORS + 1))
    with pytest.raises(OutOfMemoryError):
        vfs.open("0:/hello.txt", "r")


def test_too_many_filesystems():
    system = VirtualFileSystem([Fat16() for _ in range(MAX_FILESYSTEMS)])
    assert len(system.filesystems) == MAX_FILESYSTEMS
    with pytest.raises(OutOfMemoryError):
        system.insert_filesystem(Fat16())