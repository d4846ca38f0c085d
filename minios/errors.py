"""Kernel status codes, the exceptions that carry them, and system limits."""

from __future__ import annotations

from enum import IntEnum

TOTAL_INTERRUPTS = 512

KERNEL_CODE_SELECTOR = 0x08
KERNEL_DATA_SELECTOR = 0x10

HEAP_SIZE_BYTES = 104857600
HEAP_BLOCK_SIZE = 4096
HEAP_ADDRESS = 0x01000000
HEAP_TABLE_ADDRESS = 0x00007E00

SECTOR_SIZE = 512

MAX_FILESYSTEMS = 12
MAX_FILE_DESCRIPTORS = 512

TOTAL_GDT_SEGMENTS = 6

PROGRAM_VIRTUAL_ADDRESS = 0x400000
PROGRAM_VIRTUAL_STACK_ADDRESS_START = 0x3FF000
USER_PROGRAM_STACK_SIZE = 1024 * 16
PROGRAM_VIRTUAL_STACK_ADDRESS_END = (
    PROGRAM_VIRTUAL_STACK_ADDRESS_START - USER_PROGRAM_STACK_SIZE
)

USER_DATA_SEGMENT = 0x23
USER_CODE_SEGMENT = 0x1B

MAX_PATH = 108

MAX_PROGRAM_ALLOCATIONS = 1024
MAX_PROCESSES = 12
MAX_ISR80H_COMMANDS = 1024
KEYBOARD_BUFFER_SIZE = 1024


class Status(IntEnum):
    """Status codes reported by kernel operations."""

    ALL_OK = 0
    EIO = 1
    EINVARG = 2
    ENOMEM = 3
    EBADPATH = 4
    EFSNOTUS = 5
    ERDONLY = 6
    EUNIMP = 7
    EISTKN = 8
    EINFORMAT = 9


class KernelError(Exception):
    """Base class of every error a kernel operation raises."""

    status: Status = Status.EIO

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.status.name)

    @property
    def code(self) -> int:
        """The negative status value the kernel returns for this error."""
        return -int(self.status)


class DiskIOError(KernelError):
    status = Status.EIO


class InvalidArgumentError(KernelError):
    status = Status.EINVARG


class OutOfMemoryError(KernelError):
    status = Status.ENOMEM


class BadPathError(KernelError):
    status = Status.EBADPATH


class FilesystemNotUsError(KernelError):
    status = Status.EFSNOTUS


class ReadOnlyError(KernelError):
    status = Status.ERDONLY


class UnimplementedError(KernelError):
    status = Status.EUNIMP


class TakenError(KernelError):
    status = Status.EISTKN


class InvalidFormatError(KernelError):
    status = Status.EINFORMAT


_BY_STATUS: dict[Status, type[KernelError]] = {
    cls.status: cls
    for cls in (
        DiskIOError,
        InvalidArgumentError,
        OutOfMemoryError,
        BadPathError,
        FilesystemNotUsError,
        ReadOnlyError,
        UnimplementedError,
        TakenError,
        InvalidFormatError,
    )
}


def error_for(status: int, message: str = "") -> KernelError:
    """Build the exception for a status code; negative codes are accepted."""
    resolved = Status(abs(int(status)))
    try:
        cls = _BY_STATUS[resolved]
    except KeyError:
        raise ValueError(f"status {resolved.name} is not an error") from None
    return cls(message)