# minios

A small hobby operating-system kernel, modelled in plain Python. Every part
works on ordinary Python objects and byte strings, so it can be used to study
and experiment with how such a kernel is put together. There are no
dependencies beyond the standard library.

## Modules

- `minios.errors`: the `Status` codes, the `KernelError` exception family
  (`DiskIOError`, `InvalidArgumentError`, `OutOfMemoryError`, `BadPathError`,
  `FilesystemNotUsError`, `ReadOnlyError`, `UnimplementedError`, `TakenError`,
  `InvalidFormatError`), `error_for(status, message)` and the system limits.
  Each exception carries its status; `KernelError.code` gives the negative value.
- `minios.cstring`: C-style helpers `strncmp`, `istrncmp` (ASCII case-insensitive),
  `memcmp`, `strnlen_terminator`, `is_digit`, `to_numeric_digit`, `tolower`.
- `minios.pathparser`: `parse_path` turns `0:/dir/file.txt` into a `PathRoot`
  with `drive_no` and `parts`; malformed paths raise `BadPathError`.
- `minios.gdt`: `GdtSegment`, `encode_gdt_entry` and `encode_gdt`, producing the
  8-byte descriptors of a global descriptor table.
- `minios.terminal`: `Terminal`, an 80x20 grid of packed character cells with a
  cursor that handles newline, tab (five blanks) and backspace; `make_char`.
- `minios.heap`: `BlockHeap`, a heap of 4096-byte blocks whose table marks
  taken, first and chained blocks (`BlockFlag`); `align_to_block`.
- `minios.paging`: `PageDirectory`, a 4 GiB identity map that can be remapped
  page by page (`map`, `map_range`, `map_to`, `physical_address`); `PageFlag`
  and the alignment helpers `is_aligned`, `align_address`,
  `align_to_lower_page`, `get_indexes`.
- `minios.disk`: `Disk`, a sector-addressed disk over a byte image, and
  `DiskStream`, a seekable byte stream over it.
- `minios.fat16`: `Fat16`, a read-only FAT16 driver (`resolve`, `open`, `read`,
  `seek`, `stat`, `close`) with `DirectoryItem`, `FatDirectory` and
  `FatDescriptor`. Seeking from the end raises `UnimplementedError`; opening for
  anything but reading raises `ReadOnlyError`.
- `minios.filesystem`: `VirtualFileSystem`, which registers filesystem drivers
  and disks and hands out numbered file descriptors starting at 1 for drive
  paths such as `0:/hello.txt`; `FileMode`, `SeekMode`, `FileStat`,
  `mode_from_string`.
- `minios.elf`: `ElfHeader`, `ProgramHeader`, `SectionHeader` and `ElfFile`,
  which validates 32-bit little-endian ELF images and computes the address
  range of their loadable segments; `load_elf(vfs, filename)` reads one through
  the virtual filesystem.
- `minios.keyboard`: `KeyboardLayout` with the built-in `US_LAYOUT` (`en_US`)
  and `DE_LAYOUT` (`de_DE`), `ClassicKeyboard` translating set-one scan codes
  with shift and caps lock, `KeyBuffer` (a ring buffer of typed characters) and
  `KeyboardManager`, which tracks installed keyboards and the active layout.
- `minios.userlib`: `tokenize`, `parse_command`, `itoa`, `format_printf`
  (`%i` and `%s`), `read_line` (with backspace handling) and `system_run`.
- `minios.keyboard_cli`: the `keyboard` command.
- `minios.shell`: the shell loop, `run_shell`.

## Installation

```
pip install .
```

## Commands

Show, list or change the keyboard layout:

```
minios-keyboard layout
minios-keyboard layout list
minios-keyboard layout set en_US
```

The classic keyboard starts with `de_DE` active. Each run starts from that
state, so a layout set in one run is not remembered by the next.

Start the interactive shell, which prints a banner and a `> ` prompt and reads
command lines from standard input until it ends:

```
minios-shell
```

The only program the shell knows is `keyboard.elf` (matched without regard to
case), which runs the keyboard command, for example
`keyboard.elf layout list`. Within one shell session the layout set by
`keyboard.elf layout set en_US` stays active. Lines naming any other program
are ignored without a message.

## Example

```python
from io import StringIO

from minios.heap import BlockHeap
from minios.keyboard_cli import default_manager, run
from minios.pathparser import parse_path
from minios.shell import run_shell

root = parse_path("0:/bin/shell.elf", None)
print(root.drive_no, root.parts)   # 0 ['bin', 'shell.elf']

heap = BlockHeap()
address = heap.malloc(5000)        # takes two 4096-byte blocks
heap.free(address)

manager = default_manager()
out = StringIO()
run_shell(
    ["keyboard.elf layout set en_US\n", "keyboard.elf layout\n"],
    {"keyboard.elf": lambda argv: run(argv, manager, out)},
    out,
)
print(out.getvalue())
```

## What it does not do

The package models the kernel's parts as separate Python objects. It does not
boot, run machine code, load processes into memory, switch tasks or handle
interrupts, and it talks to no real disk or keyboard: disks are byte images
and keys arrive as scan codes or characters passed in by the caller. The FAT16
driver only reads. The shell cannot start programs from a disk; it runs only
the Python callables it is given.

## Tests

```
pip install .[test]
pytest
```