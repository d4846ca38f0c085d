"""Page tables that map a 4 GiB virtual address space onto physical pages."""

from __future__ import annotations

from enum import IntFlag

from .errors import InvalidArgumentError

TOTAL_ENTRIES_PER_TABLE = 1024
PAGE_SIZE = 4096
_TABLE_SPAN = TOTAL_ENTRIES_PER_TABLE * PAGE_SIZE
_ADDRESS_LIMIT = 1 << 32
_FRAME_MASK = 0xFFFF000


class PageFlag(IntFlag):
    """Bits of a page-table entry."""

    IS_PRESENT = 0b00000001
    IS_WRITEABLE = 0b00000010
    ACCESS_FROM_ALL = 0b00000100
    WRITE_THROUGH = 0b00001000
    CACHE_DISABLED = 0b00010000


def is_aligned(address: int) -> bool:
    """True when an address falls on a page boundary."""
    return address % PAGE_SIZE == 0


def align_address(address: int) -> int:
    """Round an address up to the next page boundary."""
    remainder = address % PAGE_SIZE
    return address + PAGE_SIZE - remainder if remainder else address


def align_to_lower_page(address: int) -> int:
    """Round an address down to its page boundary."""
    return address - address % PAGE_SIZE


def get_indexes(address: int) -> tuple[int, int]:
    """Directory and table index of a page-aligned virtual address."""
    if not is_aligned(address):
        raise InvalidArgumentError(f"address {address:#x} is not page aligned")
    if not 0 <= address < _ADDRESS_LIMIT:
        raise InvalidArgumentError(f"address {address:#x} is outside 4 GiB")
    return address // _TABLE_SPAN, address % _TABLE_SPAN // PAGE_SIZE


class PageDirectory:
    """A full page directory that starts as an identity map with given flags."""

    def __init__(self, flags: int = PageFlag.IS_PRESENT) -> None:
        self.flags = int(flags)
        self._changed: dict[tuple[int, int], int] = {}

    def set(self, virt: int, value: int) -> None:
        """Store a raw entry for the page at virt."""
        self._changed[get_indexes(virt)] = value & 0xFFFFFFFF

    def get(self, virt: int) -> int:
        """The raw entry for the page at virt."""
        key = get_indexes(virt)
        if key in self._changed:
            return self._changed[key]
        directory_index, table_index = key
        return (directory_index * _TABLE_SPAN + table_index * PAGE_SIZE) | self.flags

    def map(self, virt: int, phys: int, flags: int) -> None:
        """Map one virtual page onto one physical page."""
        if not is_aligned(virt) or not is_aligned(phys):
            raise InvalidArgumentError("map requires page aligned addresses")
        self.set(virt, phys | int(flags))

    def map_range(self, virt: int, phys: int, count: int, flags: int) -> None:
        """Map count consecutive pages."""
        for page in range(count):
            offset = page * PAGE_SIZE
            self.map(virt + offset, phys + offset, flags)

    def map_to(self, virt: int, phys: int, phys_end: int, flags: int) -> None:
        """Map the physical range [phys, phys_end) starting at virt."""
        if not (is_aligned(virt) and is_aligned(phys) and is_aligned(phys_end)):
            raise InvalidArgumentError("map_to requires page aligned addresses")
        if phys_end < phys:
            raise InvalidArgumentError("physical end lies before its start")
        self.map_range(virt, phys, (phys_end - phys) // PAGE_SIZE, flags)

    def physical_address(self, virt: int) -> int:
        """Translate any virtual address through this directory."""
        page = align_to_lower_page(virt)
        return (self.get(page) & _FRAME_MASK) + (virt - page)