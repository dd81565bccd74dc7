# xvutils

Small Unix-style command-line tools, a file-system image builder, a shell
command parser, a simulated page-table memory system and the binary record
formats of a small RISC-V teaching operating system. Only the standard
library is needed.

## Installing

```
pip install .
```

For running the tests:

```
pip install .[test]
pytest
```

## Command-line tools

The tools work on the host's files and standard streams and return exit
status 1 on a usage error or on a file that cannot be opened.

| Command        | What it does                                                        |
|----------------|---------------------------------------------------------------------|
| `xv-cat`       | copy the named files, or standard input, to standard output         |
| `xv-echo`      | print its arguments separated by blanks, then a newline             |
| `xv-grep`      | print the lines matching a pattern; only `^ . * $` are special       |
| `xv-wc`        | print line, word and byte counts and the file name                  |
| `xv-ls`        | list a file, or a directory's `.`, `..` and sorted entries, with type, inode number and size |
| `xv-ln`        | make a hard link: `xv-ln old new`                                   |
| `xv-mkdir`     | create directories, stopping at the first failure                   |
| `xv-rm`        | remove files or empty directories, stopping at the first failure    |
| `xv-kill`      | kill the processes with the given ids; failures are ignored         |
| `xv-stressfs`  | five threads each write and read back a file `stressfs0`…`stressfs4` in the given directory (default: the current one) |
| `xv-mkfs`      | build a file-system image from host files                           |

Examples:

```
xv-grep '^ab*c$' notes.txt
xv-wc README.md
xv-mkfs fs.img README.md user/_cat user/_echo
```

`xv-grep` only examines lines ended by a newline; a final line without one
is not printed.

`xv-mkfs` lays out a boot block, super block, log, inode blocks, free
bitmap and data blocks (1024-byte blocks, 2000 blocks, 200 inodes by
default). Files are placed in the root directory; a leading `user/` and
then a leading `_` are dropped from each name, names are cut to 14 bytes,
and a path with any other directory part is refused.

## Library

```python
from xvutils.grep import match
from xvutils.sh import parse_command
from xvutils.fmt import format_string
from xvutils.umalloc import Heap
from xvutils.vm import PhysicalMemory, AddressSpace

match("^a.*z$", "abcz")                   # True
cmd = parse_command("ls > out; cat < out | wc &")
format_string("%d %x %s", -5, 255, "hi")  # "-5 FF hi"

heap = Heap(1 << 20)
addr = heap.malloc(100)
heap.free(addr)

memory = PhysicalMemory(64)
space = AddressSpace(memory)
size = space.grow(0, 8192, 0)
space.copyout(100, b"hello")
space.copyin(100, 5)                      # b"hello"
```

Modules:

- `xvutils.params` — system limits, `OpenFlag`, `FileType`, the `Stat`
  record (`Stat.from_os_stat`) and memory-layout helpers such as `kstack`,
  `clint_mtimecmp` and `plic_sclaim`.
- `xvutils.elf` — `ElfHeader` and `ProgramHeader` reading and writing,
  `ProgFlag` and `read_program_headers`.
- `xvutils.virtio` — `VirtqDesc`, `VirtqUsedElem` and `BlkRequest` records,
  with `DeviceStatus`, `DescFlag` and `BlkRequestType`.
- `xvutils.fmt` — `format_string`, `fprintf` and `printf` understanding
  `%d %l %x %p %s %c %%`.
- `xvutils.ulib` — `atoi`, `strcmp`, `memcmp` and `gets` with C-library
  edge cases.
- `xvutils.umalloc` — `Heap`, a first-fit free-list allocator over a
  simulated heap, with `free_blocks` to inspect it.
- `xvutils.sh` — `tokens`, `Parser` and `parse_command`, producing
  `ExecCmd`, `RedirCmd`, `PipeCmd`, `ListCmd` and `BackCmd` trees.
- `xvutils.wc` — `count` and `wc`, returning `Counts`.
- `xvutils.vm` — `PhysicalMemory` and `AddressSpace`: three-level page
  tables with map, unmap, grow, shrink, copy and user copy-in/copy-out.
- `xvutils.grind` — the Park–Miller generator (`do_rand`, `ParkMiller`).
- `xvutils.stressfs` — `stress_file` and `receive_line`.
- `xvutils.mkfs` — `Geometry`, `SuperBlock`, `DiskInode`, `ImageBuilder`
  and `build_image`.

Errors are raised as exceptions: `ShellSyntaxError` for malformed command
lines, `ElfFormatError` for bad ELF data, `OutOfMemory` when an allocator
runs out and `VmError` for invalid page-table operations.

## What it does not do

There is no operating system here to boot or run. The shell module parses
command lines but does not execute them, and there is no interactive shell
command. `xvutils.vm` simulates page tables in memory; it does not load or
run programs. `xvutils.grind` provides only its random number generator,
not a system-call stress runner, and images built by `xv-mkfs` cannot be
read back by any tool in this package other than through `ImageBuilder`.