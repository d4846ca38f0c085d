"""Block-based heap allocator that tracks taken blocks in an entry table."""

from __future__ import annotations

from enum import IntFlag

from .errors import (
    HEAP_ADDRESS,
    HEAP_BLOCK_SIZE,
    HEAP_SIZE_BYTES,
    InvalidArgumentError,
    OutOfMemoryError,
)

_ENTRY_TYPE_MASK = 0x0F


class BlockFlag(IntFlag):
    """Bits of one block-table entry."""

    FREE = 0x00
    TAKEN = 0x01
    IS_FIRST = 0x40
    HAS_NEXT = 0x80


def align_to_block(value: int) -> int:
    """Round a size up to a whole number of heap blocks."""
    remainder = value % HEAP_BLOCK_SIZE
    if remainder == 0:
        return value
    return value - remainder + HEAP_BLOCK_SIZE


class BlockHeap:
    """A heap over the address range [start, end) split into fixed blocks."""

    def __init__(
        self,
        start: int = HEAP_ADDRESS,
        end: int = HEAP_ADDRESS + HEAP_SIZE_BYTES,
        total: int | None = None,
    ) -> None:
        if start % HEAP_BLOCK_SIZE or end % HEAP_BLOCK_SIZE:
            raise InvalidArgumentError("heap bounds must be block aligned")
        if end < start:
            raise InvalidArgumentError("heap end lies before its start")
        blocks = (end - start) // HEAP_BLOCK_SIZE
        if total is None:
            total = blocks
        if total != blocks:
            raise InvalidArgumentError(
                f"table holds {total} entries but the range has {blocks} blocks"
            )
        self.start = start
        self.end = end
        self._table = bytearray(total)

    @property
    def total(self) -> int:
        """Number of blocks managed by the heap."""
        return len(self._table)

    @property
    def entries(self) -> bytes:
        """A snapshot of the block table."""
        return bytes(self._table)

    def block_to_address(self, block: int) -> int:
        """Address of the first byte of a block."""
        return self.start + block * HEAP_BLOCK_SIZE

    def address_to_block(self, address: int) -> int:
        """Index of the block that holds an address."""
        return (address - self.start) // HEAP_BLOCK_SIZE

    def _find_start_block(self, count: int) -> int:
        run_start: int | None = None
        run_length = 0
        for index, entry in enumerate(self._table):
            if entry & _ENTRY_TYPE_MASK != BlockFlag.FREE:
                run_start = None
                run_length = 0
                continue
            if run_start is None:
                run_start = index
            run_length += 1
            if run_length == count:
                return run_start
        raise OutOfMemoryError(f"no run of {count} free blocks")

    def _mark_taken(self, start_block: int, count: int) -> None:
        last = start_block + count - 1
        for index in range(start_block, start_block + count):
            entry = BlockFlag.TAKEN
            if index == start_block:
                entry |= BlockFlag.IS_FIRST
            if index != last:
                entry |= BlockFlag.HAS_NEXT
            self._table[index] = int(entry)

    def malloc(self, size: int) -> int:
        """Reserve enough whole blocks for size bytes and return their address."""
        if size <= 0:
            raise InvalidArgumentError("allocation size must be positive")
        count = align_to_block(size) // HEAP_BLOCK_SIZE
        start_block = self._find_start_block(count)
        self._mark_taken(start_block, count)
        return self.block_to_address(start_block)

    def free(self, address: int) -> None:
        """Release the chain of blocks that starts at address."""
        block = self.address_to_block(address)
        if not 0 <= block < self.total:
            raise InvalidArgumentError(f"address {address:#x} is outside the heap")
        for index in range(block, self.total):
            entry = self._table[index]
            self._table[index] = BlockFlag.FREE
            if not entry & BlockFlag.HAS_NEXT:
                break