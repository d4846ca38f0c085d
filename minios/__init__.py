"""A small operating-system kernel modelled in Python: heap, paging, GDT, disks, FAT16, ELF, keyboard, terminal and shell."""

__version__ = "1.0.0"