"""Parsing and validation of 32-bit ELF executables."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from .errors import DiskIOError, InvalidFormatError, KernelError

if TYPE_CHECKING:
    from .filesystem import VirtualFileSystem

PF_X = 0x01
PF_W = 0x02
PF_R = 0x04

PT_NULL = 0
PT_LOAD = 1
PT_DYNAMIC = 2
PT_INTERP = 3
PT_NOTE = 4
PT_SHLIB = 5
PT_PHDR = 6

SHT_NULL = 0
SHT_PROGBITS = 1
SHT_SYMTAB = 2
SHT_STRTAB = 3
SHT_RELA = 4
SHT_HASH = 5
SHT_DYNAMIC = 6
SHT_NOTE = 7
SHT_NOBITS = 8
SHT_REL = 9
SHT_SHLIB = 10
SHT_DYNSYM = 11
SHT_LOPROC = 12
SHT_HIPROC = 13
SHT_LOUSER = 14
SHT_HIUSER = 15

ET_NONE = 0
ET_REL = 1
ET_EXEC = 2
ET_DYN = 3
ET_CORE = 4

EI_NIDENT = 16
EI_CLASS = 4
EI_DATA = 5

ELFCLASSNONE = 0
ELFCLASS32 = 1
ELFCLASS64 = 2

ELFDATANONE = 0
ELFDATA2LSB = 1
ELFDATA2MSB = 2

SHN_UNDEF = 0

ELF_SIGNATURE = b"\x7fELF"

_HEADER = struct.Struct("<16sHHIIiiIHHHHHH")
_PHDR = struct.Struct("<IiIIIIII")
_SHDR = struct.Struct("<IIIIiIIIII")

Buffer = Union[bytes, bytearray, memoryview]


def _unpack(layout: struct.Struct, data: Buffer, what: str, offset: int = 0) -> tuple:
    raw = bytes(data)
    if offset < 0 or len(raw) < offset + layout.size:
        raise InvalidFormatError(f"not enough data for {what} at offset {offset}")
    return layout.unpack_from(raw, offset)


@dataclass(frozen=True)
class ElfHeader:
    """The ELF file header."""

    e_ident: bytes
    e_type: int
    e_machine: int
    e_version: int
    e_entry: int
    e_phoff: int
    e_shoff: int
    e_flags: int
    e_ehsize: int
    e_phentsize: int
    e_phnum: int
    e_shentsize: int
    e_shnum: int
    e_shstrndx: int

    SIZE = _HEADER.size

    @classmethod
    def from_bytes(cls, data: Buffer) -> "ElfHeader":
        """Parse the header at the start of data."""
        return cls(*_unpack(_HEADER, data, "an ELF header"))

    @property
    def entry(self) -> int:
        """The virtual address execution starts at."""
        return self.e_entry


@dataclass(frozen=True)
class ProgramHeader:
    """One program (segment) header."""

    p_type: int
    p_offset: int
    p_vaddr: int
    p_paddr: int
    p_filesz: int
    p_memsz: int
    p_flags: int
    p_align: int

    SIZE = _PHDR.size

    @classmethod
    def from_bytes(cls, data: Buffer) -> "ProgramHeader":
        """Parse the program header at the start of data."""
        return cls(*_unpack(_PHDR, data, "a program header"))

    @property
    def writeable(self) -> bool:
        return bool(self.p_flags & PF_W)


@dataclass(frozen=True)
class SectionHeader:
    """One section header."""

    sh_name: int
    sh_type: int
    sh_flags: int
    sh_addr: int
    sh_offset: int
    sh_size: int
    sh_link: int
    sh_info: int
    sh_addralign: int
    sh_entsize: int

    SIZE = _SHDR.size

    @classmethod
    def from_bytes(cls, data: Buffer) -> "SectionHeader":
        """Parse the section header at the start of data."""
        return cls(*_unpack(_SHDR, data, "a section header"))


def _validate(memory: bytes, header: ElfHeader) -> None:
    if memory[: len(ELF_SIGNATURE)] != ELF_SIGNATURE:
        raise InvalidFormatError("missing ELF signature")
    if header.e_ident[EI_CLASS] not in (ELFCLASSNONE, ELFCLASS32):
        raise InvalidFormatError("only 32-bit ELF files are supported")
    if header.e_ident[EI_DATA] not in (ELFDATANONE, ELFDATA2LSB):
        raise InvalidFormatError("only little-endian ELF files are supported")
    if header.e_phoff == 0:
        raise InvalidFormatError("ELF file has no program header table")


@dataclass
class ElfFile:
    """A validated ELF image and the address range its loadable segments span.

    Physical addresses are load_address plus offsets into the image.
    """

    memory: bytes
    header: ElfHeader
    filename: str = ""
    load_address: int = 0
    virtual_base_address: int = 0
    virtual_end_address: int = 0
    physical_base_address: int = 0
    physical_end_address: int = 0

    @classmethod
    def from_bytes(cls, data: Buffer, filename: str = "") -> "ElfFile":
        """Validate an ELF image and compute the bounds of its loadable segments."""
        memory = bytes(data)
        header = ElfHeader.from_bytes(memory)
        _validate(memory, header)
        elf_file = cls(memory=memory, header=header, filename=filename)
        for phdr in elf_file.program_headers():
            if phdr.p_type == PT_LOAD:
                elf_file._add_load_segment(phdr)
        return elf_file

    @property
    def entry(self) -> int:
        return self.header.e_entry

    @property
    def size(self) -> int:
        return len(self.memory)

    @property
    def is_executable(self) -> bool:
        """True for an executable whose entry lies in the program area."""
        from .errors import PROGRAM_VIRTUAL_ADDRESS

        return self.header.e_type == ET_EXEC and self.header.e_entry >= PROGRAM_VIRTUAL_ADDRESS

    def _add_load_segment(self, phdr: ProgramHeader) -> None:
        if self.virtual_base_address >= phdr.p_vaddr or self.virtual_base_address == 0:
            self.virtual_base_address = phdr.p_vaddr
            self.physical_base_address = self.phdr_phys_address(phdr)

        end_virtual = (phdr.p_vaddr + phdr.p_filesz) & 0xFFFFFFFF
        if self.virtual_end_address <= end_virtual or self.virtual_end_address == 0:
            self.virtual_end_address = end_virtual
            self.physical_end_address = self.phdr_phys_address(phdr) + phdr.p_filesz

    def program_headers(self) -> list[ProgramHeader]:
        """All program headers; empty when the file has no program header table."""
        if self.header.e_phoff == 0:
            return []
        return [
            ProgramHeader(*_unpack(_PHDR, self.memory, "a program header",
                                   self.header.e_phoff + index * _PHDR.size))
            for index in range(self.header.e_phnum)
        ]

    def section(self, index: int) -> SectionHeader:
        """The section header at index in the section header table."""
        offset = self.header.e_shoff + index * _SHDR.size
        return SectionHeader(*_unpack(_SHDR, self.memory, "a section header", offset))

    def string_table_offset(self) -> int:
        """Offset of the section name string table within the image."""
        return self.section(self.header.e_shstrndx).sh_offset

    def phdr_phys_address(self, phdr: ProgramHeader) -> int:
        """Physical address of a segment's data."""
        return self.load_address + phdr.p_offset


def load_elf(vfs: "VirtualFileSystem", filename: str) -> ElfFile:
    """Read and validate an ELF file through the virtual filesystem."""
    try:
        fd = vfs.open(filename, "r")
    except KernelError as exc:
        raise DiskIOError(f"cannot open {filename}") from exc
    try:
        stat = vfs.stat(fd)
        data = vfs.read(fd, stat.filesize, 1)
        return ElfFile.from_bytes(data, filename)
    finally:
        vfs.close(fd)