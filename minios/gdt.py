"""Encoding of global descriptor table entries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .errors import InvalidArgumentError

_BYTE_GRANULARITY_MAX = 65536


@dataclass(frozen=True)
class GdtSegment:
    """A segment described by base address, limit and access type byte."""

    base: int
    limit: int
    type: int


def encode_gdt_entry(segment: GdtSegment) -> bytes:
    """Encode one segment as the 8-byte descriptor the processor reads."""
    limit = segment.limit
    if limit > _BYTE_GRANULARITY_MAX and (limit & 0xFFF) != 0xFFF:
        raise InvalidArgumentError("encode_gdt_entry: invalid limit")

    flags = 0x40
    if limit > _BYTE_GRANULARITY_MAX:
        limit >>= 12
        flags = 0xC0

    base = segment.base
    return bytes(
        (
            limit & 0xFF,
            (limit >> 8) & 0xFF,
            base & 0xFF,
            (base >> 8) & 0xFF,
            (base >> 16) & 0xFF,
            segment.type & 0xFF,
            flags | ((limit >> 16) & 0x0F),
            (base >> 24) & 0xFF,
        )
    )


def encode_gdt(segments: Iterable[GdtSegment]) -> bytes:
    """Encode a whole table of segments back to back."""
    return b"".join(encode_gdt_entry(segment) for segment in segments)