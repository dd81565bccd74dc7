"""ELF executable file and program headers."""

from __future__ import annotations

import enum
import struct
from dataclasses import astuple, dataclass
from typing import ClassVar

ELF_MAGIC = 0x464C457F  # "\x7FELF" read as a little-endian word

ELF_PROG_LOAD = 1


class ElfFormatError(ValueError):
    """The data is not a well-formed ELF image."""


class ProgFlag(enum.IntFlag):
    """Permission bits of a program header."""

    EXEC = 1
    WRITE = 2
    READ = 4


@dataclass
class ElfHeader:
    """The file header at offset zero of an ELF image."""

    FORMAT: ClassVar[struct.Struct] = struct.Struct("<I12sHHIQQQIHHHHHH")

    magic: int = ELF_MAGIC
    ident: bytes = bytes(12)
    type: int = 0
    machine: int = 0
    version: int = 0
    entry: int = 0
    phoff: int = 0
    shoff: int = 0
    flags: int = 0
    ehsize: int = 0
    phentsize: int = 0
    phnum: int = 0
    shentsize: int = 0
    shnum: int = 0
    shstrndx: int = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> "ElfHeader":
        """Decode a header, checking its length and magic number."""
        if len(data) < cls.FORMAT.size:
            raise ElfFormatError("truncated ELF header")
        header = cls(*cls.FORMAT.unpack_from(data))
        if header.magic != ELF_MAGIC:
            raise ElfFormatError(f"bad ELF magic {header.magic:#x}")
        return header

    def to_bytes(self) -> bytes:
        """Encode the header in little-endian byte order."""
        return self.FORMAT.pack(*astuple(self))


@dataclass
class ProgramHeader:
    """One program section header."""

    FORMAT: ClassVar[struct.Struct] = struct.Struct("<IIQQQQQQ")

    type: int = 0
    flags: int = 0
    off: int = 0
    vaddr: int = 0
    paddr: int = 0
    filesz: int = 0
    memsz: int = 0
    align: int = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> "ProgramHeader":
        """Decode a program header."""
        if len(data) < cls.FORMAT.size:
            raise ElfFormatError("truncated program header")
        return cls(*cls.FORMAT.unpack_from(data))

    def to_bytes(self) -> bytes:
        """Encode the program header in little-endian byte order."""
        return self.FORMAT.pack(*astuple(self))

    def is_loadable(self) -> bool:
        """True if the segment is to be loaded into memory."""
        return self.type == ELF_PROG_LOAD


def read_program_headers(data: bytes, header: ElfHeader) -> list[ProgramHeader]:
    """Decode every program header that ``header`` describes within ``data``."""
    size = ProgramHeader.FORMAT.size
    result = []
    for index in range(header.phnum):
        start = header.phoff + index * size
        chunk = data[start : start + size]
        if len(chunk) < size:
            raise ElfFormatError(f"program header {index} lies outside the image")
        result.append(ProgramHeader.from_bytes(chunk))
    return result