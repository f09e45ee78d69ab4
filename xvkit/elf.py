"""ELF executable headers."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Iterator

ELF_MAGIC = 0x464C457F

ELF_PROG_LOAD = 1

ELF_PROG_FLAG_EXEC = 1
ELF_PROG_FLAG_WRITE = 2
ELF_PROG_FLAG_READ = 4

_ELF_FORMAT = struct.Struct("<I12sHHIIIIIHHHHHH")
_PROG_FORMAT = struct.Struct("<8I")


class ElfError(ValueError):
    """Raised for malformed ELF data."""


@dataclass
class ElfHeader:
    """The ELF file header."""

    magic: int = ELF_MAGIC
    elf: bytes = bytes(12)
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

    SIZE = _ELF_FORMAT.size

    @classmethod
    def unpack(cls, data: bytes) -> "ElfHeader":
        """Decode the header at the start of data and check its magic."""
        if len(data) < _ELF_FORMAT.size:
            raise ElfError("truncated ELF header")
        header = cls(*_ELF_FORMAT.unpack_from(data))
        if header.magic != ELF_MAGIC:
            raise ElfError(f"bad ELF magic 0x{header.magic:08x}")
        return header

    def pack(self) -> bytes:
        """Encode the header."""
        if len(self.elf) != 12:
            raise ElfError("ident field must be 12 bytes")
        try:
            return _ELF_FORMAT.pack(
                self.magic, self.elf, self.type, self.machine, self.version,
                self.entry, self.phoff, self.shoff, self.flags, self.ehsize,
                self.phentsize, self.phnum, self.shentsize, self.shnum,
                self.shstrndx,
            )
        except struct.error as exc:
            raise ElfError(str(exc)) from exc


@dataclass
class ProgramHeader:
    """An ELF program section header."""

    type: int = 0
    off: int = 0
    vaddr: int = 0
    paddr: int = 0
    filesz: int = 0
    memsz: int = 0
    flags: int = 0
    align: int = 0

    SIZE = _PROG_FORMAT.size

    @property
    def loadable(self) -> bool:
        return self.type == ELF_PROG_LOAD

    @classmethod
    def unpack(cls, data: bytes) -> "ProgramHeader":
        """Decode a program header at the start of data."""
        if len(data) < _PROG_FORMAT.size:
            raise ElfError("truncated program header")
        return cls(*_PROG_FORMAT.unpack_from(data))

    def pack(self) -> bytes:
        """Encode the program header."""
        try:
            return _PROG_FORMAT.pack(
                self.type, self.off, self.vaddr, self.paddr,
                self.filesz, self.memsz, self.flags, self.align,
            )
        except struct.error as exc:
            raise ElfError(str(exc)) from exc


def program_headers(data: bytes) -> Iterator[ProgramHeader]:
    """Yield every program header of the ELF image in data."""
    header = ElfHeader.unpack(data)
    for index in range(header.phnum):
        start = header.phoff + index * _PROG_FORMAT.size
        yield ProgramHeader.unpack(data[start:start + _PROG_FORMAT.size])