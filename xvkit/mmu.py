"""x86 paging arithmetic and segment/gate descriptors."""

from __future__ import annotations

from dataclasses import dataclass, fields

_UINT_MASK = 0xFFFFFFFF

# Eflags register.
FL_IF = 0x00000200

# Control register flags.
CR0_PE = 0x00000001
CR0_WP = 0x00010000
CR0_PG = 0x80000000
CR4_PSE = 0x00000010

# Segment selectors.
SEG_KCODE = 1
SEG_KDATA = 2
SEG_UCODE = 3
SEG_UDATA = 4
SEG_TSS = 5
NSEGS = 6

DPL_USER = 0x3

# Application segment type bits.
STA_X = 0x8
STA_W = 0x2
STA_R = 0x2

# System segment type bits.
STS_T32A = 0x9
STS_IG32 = 0xE
STS_TG32 = 0xF

# Paging.
NPDENTRIES = 1024
NPTENTRIES = 1024
PGSIZE = 4096
PTXSHIFT = 12
PDXSHIFT = 22

# Page table entry flags.
PTE_P = 0x001
PTE_W = 0x002
PTE_U = 0x004
PTE_PS = 0x080


def pdx(va: int) -> int:
    """Page directory index of a virtual address."""
    return ((va & _UINT_MASK) >> PDXSHIFT) & 0x3FF


def ptx(va: int) -> int:
    """Page table index of a virtual address."""
    return ((va & _UINT_MASK) >> PTXSHIFT) & 0x3FF


def pgaddr(d: int, t: int, o: int) -> int:
    """Build a virtual address from directory index, table index and offset."""
    return ((d << PDXSHIFT) | (t << PTXSHIFT) | o) & _UINT_MASK


def pgroundup(sz: int) -> int:
    """Round up to a page boundary, wrapping at 32 bits."""
    return ((sz + PGSIZE - 1) & ~(PGSIZE - 1)) & _UINT_MASK


def pgrounddown(a: int) -> int:
    """Round down to a page boundary."""
    return (a & ~(PGSIZE - 1)) & _UINT_MASK


def pte_addr(pte: int) -> int:
    """Physical address held in a page table entry."""
    return pte & _UINT_MASK & ~0xFFF


def pte_flags(pte: int) -> int:
    """Flag bits of a page table entry."""
    return pte & 0xFFF


def _pack_bits(obj, widths: dict[str, int]) -> bytes:
    value = 0
    shift = 0
    for name, bits in widths.items():
        value |= getattr(obj, name) << shift
        shift += bits
    return value.to_bytes(8, "little")


def _unpack_bits(data: bytes, widths: dict[str, int]) -> dict[str, int]:
    if len(data) != 8:
        raise ValueError(f"descriptor needs 8 bytes, got {len(data)}")
    value = int.from_bytes(data, "little")
    values = {}
    for name, bits in widths.items():
        values[name] = value & ((1 << bits) - 1)
        value >>= bits
    return values


def _check_widths(obj, widths: dict[str, int]) -> None:
    for name, bits in widths.items():
        value = getattr(obj, name)
        if not 0 <= value < (1 << bits):
            raise ValueError(f"{name}={value!r} does not fit in {bits} bits")


_SEG_BITS = {
    "lim_15_0": 16,
    "base_15_0": 16,
    "base_23_16": 8,
    "type": 4,
    "s": 1,
    "dpl": 2,
    "p": 1,
    "lim_19_16": 4,
    "avl": 1,
    "rsv1": 1,
    "db": 1,
    "g": 1,
    "base_31_24": 8,
}


@dataclass
class SegDesc:
    """A segment descriptor."""

    lim_15_0: int = 0
    base_15_0: int = 0
    base_23_16: int = 0
    type: int = 0
    s: int = 0
    dpl: int = 0
    p: int = 0
    lim_19_16: int = 0
    avl: int = 0
    rsv1: int = 0
    db: int = 0
    g: int = 0
    base_31_24: int = 0

    def __post_init__(self) -> None:
        _check_widths(self, _SEG_BITS)

    @classmethod
    def seg(cls, type_: int, base: int, lim: int, dpl: int) -> "SegDesc":
        """A normal 32-bit segment with a limit in 4 KiB units."""
        base &= _UINT_MASK
        lim &= _UINT_MASK
        return cls(
            lim_15_0=(lim >> 12) & 0xFFFF,
            base_15_0=base & 0xFFFF,
            base_23_16=(base >> 16) & 0xFF,
            type=type_,
            s=1,
            dpl=dpl,
            p=1,
            lim_19_16=(lim >> 28) & 0xF,
            avl=0,
            rsv1=0,
            db=1,
            g=1,
            base_31_24=(base >> 24) & 0xFF,
        )

    @classmethod
    def seg16(cls, type_: int, base: int, lim: int, dpl: int) -> "SegDesc":
        """A segment with a byte-granular limit."""
        base &= _UINT_MASK
        lim &= _UINT_MASK
        return cls(
            lim_15_0=lim & 0xFFFF,
            base_15_0=base & 0xFFFF,
            base_23_16=(base >> 16) & 0xFF,
            type=type_,
            s=1,
            dpl=dpl,
            p=1,
            lim_19_16=(lim >> 16) & 0xF,
            avl=0,
            rsv1=0,
            db=1,
            g=0,
            base_31_24=(base >> 24) & 0xFF,
        )

    def pack(self) -> bytes:
        """Encode as the 8 bytes stored in a descriptor table."""
        _check_widths(self, _SEG_BITS)
        return _pack_bits(self, _SEG_BITS)

    @classmethod
    def unpack(cls, data: bytes) -> "SegDesc":
        """Decode 8 descriptor bytes."""
        return cls(**_unpack_bits(data, _SEG_BITS))

    @property
    def base(self) -> int:
        return self.base_15_0 | (self.base_23_16 << 16) | (self.base_31_24 << 24)


_GATE_BITS = {
    "off_15_0": 16,
    "cs": 16,
    "args": 5,
    "rsv1": 3,
    "type": 4,
    "s": 1,
    "dpl": 2,
    "p": 1,
    "off_31_16": 16,
}


@dataclass
class GateDesc:
    """An interrupt or trap gate descriptor."""

    off_15_0: int = 0
    cs: int = 0
    args: int = 0
    rsv1: int = 0
    type: int = 0
    s: int = 0
    dpl: int = 0
    p: int = 0
    off_31_16: int = 0

    def __post_init__(self) -> None:
        _check_widths(self, _GATE_BITS)

    @classmethod
    def gate(cls, istrap: bool, sel: int, off: int, dpl: int) -> "GateDesc":
        """A present gate; trap gates leave interrupts enabled."""
        off &= _UINT_MASK
        return cls(
            off_15_0=off & 0xFFFF,
            cs=sel,
            args=0,
            rsv1=0,
            type=STS_TG32 if istrap else STS_IG32,
            s=0,
            dpl=dpl,
            p=1,
            off_31_16=off >> 16,
        )

    def pack(self) -> bytes:
        """Encode as the 8 bytes stored in the interrupt descriptor table."""
        _check_widths(self, _GATE_BITS)
        return _pack_bits(self, _GATE_BITS)

    @classmethod
    def unpack(cls, data: bytes) -> "GateDesc":
        """Decode 8 gate bytes."""
        return cls(**_unpack_bits(data, _GATE_BITS))

    def offset(self) -> int:
        """The full handler offset."""
        return (self.off_31_16 << 16) | self.off_15_0


__all__ = [f.name for f in fields(SegDesc)][:0] + [
    "SegDesc",
    "GateDesc",
    "pdx",
    "ptx",
    "pgaddr",
    "pgroundup",
    "pgrounddown",
    "pte_addr",
    "pte_flags",
]