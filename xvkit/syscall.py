"""System call argument fetching and dispatch."""

from __future__ import annotations

import struct
import sys
from typing import Callable, Mapping, Union

_MASK = 0xFFFFFFFF
_INT = struct.Struct("<i")

Buffer = Union[bytes, bytearray, memoryview]


class BadAddress(ValueError):
    """Raised when a user address lies outside the process."""


class UserContext:
    """The calling process: its memory, stack pointer, pid and name."""

    def __init__(self, memory: Buffer, esp: int, pid: int = 0, name: str = "") -> None:
        self.memory = memory
        self.esp = esp
        self.pid = pid
        self.name = name

    @property
    def sz(self) -> int:
        return len(self.memory)

    def fetch_int(self, addr: int) -> int:
        """The 32-bit integer at addr."""
        addr &= _MASK
        if addr >= self.sz or addr + 4 > self.sz:
            raise BadAddress(f"int at 0x{addr:x} is outside the process")
        return _INT.unpack_from(self.memory, addr)[0]

    def fetch_str(self, addr: int) -> bytes:
        """The NUL-terminated string at addr, without the NUL."""
        addr &= _MASK
        if addr >= self.sz:
            raise BadAddress(f"string at 0x{addr:x} is outside the process")
        data = bytes(self.memory[addr:])
        end = data.find(0)
        if end < 0:
            raise BadAddress(f"string at 0x{addr:x} is not terminated")
        return data[:end]

    def arg_int(self, n: int) -> int:
        """The nth 32-bit system call argument."""
        return self.fetch_int(self.esp + 4 + 4 * n)

    def arg_ptr(self, n: int, size: int) -> int:
        """The nth argument as the address of size bytes inside the process."""
        addr = self.arg_int(n) & _MASK
        if size < 0 or addr >= self.sz or addr + size > self.sz:
            raise BadAddress(f"buffer at 0x{addr:x} of {size} bytes is outside the process")
        return addr

    def arg_str(self, n: int) -> bytes:
        """The nth argument as a NUL-terminated string."""
        return self.fetch_str(self.arg_int(n))


Handler = Callable[[UserContext], int]


def _stderr(message: str) -> None:
    print(message, file=sys.stderr)


class SyscallTable:
    """Maps system call numbers to handlers."""

    def __init__(
        self,
        handlers: Mapping[int, Handler],
        log: Callable[[str], None] | None = None,
    ) -> None:
        self.handlers = {int(num): handler for num, handler in handlers.items()}
        self.log = log or _stderr

    def dispatch(self, ctx: UserContext, num: int) -> int:
        """Run system call num for ctx; -1 for unknown calls or bad arguments."""
        handler = self.handlers.get(num) if num > 0 else None
        if handler is None:
            self.log(f"{ctx.pid} {ctx.name}: unknown sys call {num}")
            return -1
        try:
            return handler(ctx)
        except BadAddress:
            return -1