"""System parameters, memory layout, trap and system call numbers, and file metadata."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum, IntFlag

_UINT_MASK = 0xFFFFFFFF

# System parameters.
NPROC = 64
KSTACKSIZE = 4096
NCPU = 8
NOFILE = 16
NFILE = 100
NINODE = 50
NDEV = 10
ROOTDEV = 1
MAXARG = 32
MAXOPBLOCKS = 10
LOGSIZE = MAXOPBLOCKS * 3
NBUF = MAXOPBLOCKS * 3
FSSIZE = 1000

# Memory layout.
EXTMEM = 0x100000
PHYSTOP = 0xE000000
DEVSPACE = 0xFE000000
KERNBASE = 0x80000000
KERNLINK = KERNBASE + EXTMEM


def v2p(addr: int) -> int:
    """Translate a kernel virtual address to a physical address (32-bit wrap)."""
    return (addr - KERNBASE) & _UINT_MASK


def p2v(addr: int) -> int:
    """Translate a physical address to a kernel virtual address (32-bit wrap)."""
    return (addr + KERNBASE) & _UINT_MASK


class FileType(IntEnum):
    DIR = 1
    FILE = 2
    DEV = 3


class OpenFlag(IntFlag):
    RDONLY = 0x000
    WRONLY = 0x001
    RDWR = 0x002
    CREATE = 0x200


class Trap(IntEnum):
    DIVIDE = 0
    DEBUG = 1
    NMI = 2
    BRKPT = 3
    OFLOW = 4
    BOUND = 5
    ILLOP = 6
    DEVICE = 7
    DBLFLT = 8
    TSS = 10
    SEGNP = 11
    STACK = 12
    GPFLT = 13
    PGFLT = 14
    FPERR = 16
    ALIGN = 17
    MCHK = 18
    SIMDERR = 19
    IRQ0 = 32
    SYSCALL = 64
    DEFAULT = 500


class Irq(IntEnum):
    TIMER = 0
    KBD = 1
    COM1 = 4
    IDE = 14
    ERROR = 19
    SPURIOUS = 31


class Syscall(IntEnum):
    FORK = 1
    EXIT = 2
    WAIT = 3
    PIPE = 4
    READ = 5
    KILL = 6
    EXEC = 7
    FSTAT = 8
    CHDIR = 9
    DUP = 10
    GETPID = 11
    SBRK = 12
    SLEEP = 13
    UPTIME = 14
    OPEN = 15
    WRITE = 16
    MKNOD = 17
    UNLINK = 18
    LINK = 19
    MKDIR = 20
    CLOSE = 21
    PS = 22
    CHPR = 23


_STAT_FORMAT = struct.Struct("<h2xiIh2xI")


@dataclass
class Stat:
    """File metadata as returned by fstat."""

    type: int = 0
    dev: int = 0
    ino: int = 0
    nlink: int = 0
    size: int = 0

    def pack(self) -> bytes:
        """Encode in the in-memory layout of the 32-bit structure."""
        try:
            return _STAT_FORMAT.pack(
                int(self.type), self.dev, self.ino, self.nlink, self.size
            )
        except struct.error as exc:
            raise ValueError(f"stat field out of range: {exc}") from exc

    @classmethod
    def unpack(cls, data: bytes) -> "Stat":
        """Decode a packed structure."""
        if len(data) != _STAT_FORMAT.size:
            raise ValueError(
                f"stat needs {_STAT_FORMAT.size} bytes, got {len(data)}"
            )
        ftype, dev, ino, nlink, size = _STAT_FORMAT.unpack(data)
        if ftype in FileType._value2member_map_:
            ftype = FileType(ftype)
        return cls(ftype, dev, ino, nlink, size)