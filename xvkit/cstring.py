"""NUL-terminated string and raw memory helpers over bytes."""

from __future__ import annotations

from itertools import islice
from typing import BinaryIO, Union

BytesLike = Union[bytes, bytearray, memoryview, str]

_INT_RANGE = 1 << 32
_INT_HALF = 1 << 31


def _as_bytes(s: BytesLike) -> bytes:
    if isinstance(s, str):
        return s.encode("latin-1")
    return bytes(s)


def _cstr(s: BytesLike) -> bytes:
    """The bytes of s up to, not including, the first NUL."""
    data = _as_bytes(s)
    end = data.find(0)
    return data if end < 0 else data[:end]


def _char(c: Union[int, str, bytes]) -> int:
    if isinstance(c, int):
        return c & 0xFF
    data = _as_bytes(c)
    if len(data) != 1:
        raise ValueError("expected a single character")
    return data[0]


def strlen(s: BytesLike) -> int:
    """Number of bytes before the first NUL."""
    return len(_cstr(s))


def strcmp(p: BytesLike, q: BytesLike) -> int:
    """Compare two strings; negative, zero or positive like the C function."""
    a = _cstr(p) + b"\0"
    b = _cstr(q) + b"\0"
    for x, y in zip(a, b):
        if x != y or x == 0:
            return x - y
    return 0


def strncmp(p: BytesLike, q: BytesLike, n: int) -> int:
    """Compare at most n bytes of two strings."""
    a = _cstr(p) + b"\0"
    b = _cstr(q) + b"\0"
    for x, y in islice(zip(a, b), max(n, 0)):
        if x != y or x == 0:
            return x - y
    return 0


def strncpy(t: BytesLike, n: int) -> bytes:
    """The n bytes strncpy would store: t truncated or padded with NULs."""
    if n <= 0:
        return b""
    return _cstr(t)[:n].ljust(n, b"\0")


def safestrcpy(t: BytesLike, n: int) -> bytes:
    """Like strncpy but always NUL-terminated and never padded."""
    if n <= 0:
        return b""
    return _cstr(t)[: n - 1] + b"\0"


def strchr(s: BytesLike, c: Union[int, str, bytes]) -> int | None:
    """Index of the first c before the terminating NUL, or None."""
    index = _cstr(s).find(bytes([_char(c)]))
    return None if index < 0 else index


def memcmp(a: BytesLike, b: BytesLike, n: int) -> int:
    """Compare the first n bytes of a and b."""
    left = _as_bytes(a)
    right = _as_bytes(b)
    if n < 0 or len(left) < n or len(right) < n:
        raise ValueError("memcmp beyond the end of a buffer")
    for x, y in zip(left[:n], right[:n]):
        if x != y:
            return x - y
    return 0


def memmove(buf: bytearray, dst: int, src: int, n: int) -> bytearray:
    """Copy n bytes inside buf from src to dst; regions may overlap."""
    if n < 0 or dst < 0 or src < 0 or dst + n > len(buf) or src + n > len(buf):
        raise IndexError("memmove outside the buffer")
    buf[dst:dst + n] = bytes(buf[src:src + n])
    return buf


def memset(buf: bytearray, c: int, n: int) -> bytearray:
    """Fill the first n bytes of buf with the low byte of c."""
    if n < 0 or n > len(buf):
        raise IndexError("memset outside the buffer")
    buf[:n] = bytes([c & 0xFF]) * n
    return buf


def atoi(s: BytesLike) -> int:
    """Value of the leading decimal digits; no sign, 32-bit wraparound."""
    value = 0
    for ch in _as_bytes(s):
        if not 0x30 <= ch <= 0x39:
            break
        value = value * 10 + ch - 0x30
    return (value + _INT_HALF) % _INT_RANGE - _INT_HALF


def gets(stream: BinaryIO, limit: int) -> bytes:
    """Read one line of at most limit-1 bytes, keeping the newline or CR."""
    line = bytearray()
    while len(line) + 1 < limit:
        ch = stream.read(1)
        if not ch:
            break
        line += ch
        if ch in (b"\n", b"\r"):
            break
    return bytes(line)