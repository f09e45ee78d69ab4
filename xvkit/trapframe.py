"""The trap frame pushed on the kernel stack on entry to a trap."""

from __future__ import annotations

import struct
from dataclasses import astuple, dataclass

from xvkit.mmu import DPL_USER

_FRAME_FORMAT = struct.Struct("<8I" + "H2x" * 4 + "I" + "II" + "H2x" + "I" + "I" + "H2x")


@dataclass
class TrapFrame:
    """Saved registers at a trap; padding fields are not kept."""

    edi: int = 0
    esi: int = 0
    ebp: int = 0
    oesp: int = 0
    ebx: int = 0
    edx: int = 0
    ecx: int = 0
    eax: int = 0
    gs: int = 0
    fs: int = 0
    es: int = 0
    ds: int = 0
    trapno: int = 0
    err: int = 0
    eip: int = 0
    cs: int = 0
    eflags: int = 0
    esp: int = 0
    ss: int = 0

    SIZE = _FRAME_FORMAT.size

    def pack(self) -> bytes:
        """Encode in stack layout, with zero padding."""
        try:
            return _FRAME_FORMAT.pack(*astuple(self))
        except struct.error as exc:
            raise ValueError(f"trap frame field out of range: {exc}") from exc

    @classmethod
    def unpack(cls, data: bytes) -> "TrapFrame":
        """Decode a full trap frame."""
        if len(data) != _FRAME_FORMAT.size:
            raise ValueError(
                f"trap frame needs {_FRAME_FORMAT.size} bytes, got {len(data)}"
            )
        return cls(*_FRAME_FORMAT.unpack(data))

    def from_user(self) -> bool:
        """Whether the trap came from user mode."""
        return (self.cs & 3) == DPL_USER