"""A first-fit free-list allocator over a simulated break-extended heap."""

from __future__ import annotations

from bisect import bisect_left

UNIT = 8
MIN_GROW_UNITS = 4096
_BASE = -1


class Heap:
    """Hands out byte addresses from a heap grown in large steps up to limit."""

    def __init__(self, limit: int | None = None) -> None:
        self._limit = limit
        self._brk = 0
        self._blocks: list[list[int]] | None = None
        self._freep = 0
        self._allocated: dict[int, int] = {}

    def _next(self, index: int) -> int:
        assert self._blocks is not None
        return (index + 1) % len(self._blocks)

    def malloc(self, nbytes: int) -> int:
        """Allocate nbytes and return the address; raise MemoryError when full."""
        if nbytes < 0:
            raise ValueError("negative allocation size")
        nunits = (nbytes + UNIT - 1) // UNIT + 1
        if self._blocks is None:
            self._blocks = [[_BASE, 0]]
            self._freep = 0
        prev = self._freep
        p = self._next(prev)
        while True:
            block = self._blocks[p]
            if block[1] >= nunits:
                if block[1] == nunits:
                    del self._blocks[p]
                    start = block[0]
                    if p < prev:
                        prev -= 1
                else:
                    block[1] -= nunits
                    start = block[0] + block[1]
                self._freep = prev
                self._allocated[start] = nunits
                return (start + 1) * UNIT
            if p == self._freep:
                p = self._morecore(nunits)
            prev = p
            p = self._next(p)

    def _morecore(self, nunits: int) -> int:
        nunits = max(nunits, MIN_GROW_UNITS)
        nbytes = nunits * UNIT
        if self._limit is not None and self._brk + nbytes > self._limit:
            raise MemoryError(f"cannot grow heap by {nbytes} bytes")
        start = self._brk // UNIT
        self._brk += nbytes
        self._allocated[start] = nunits
        self._release(start)
        return self._freep

    def free(self, addr: int) -> None:
        """Return a block obtained from malloc."""
        start = addr // UNIT - 1
        if addr % UNIT or start not in self._allocated:
            raise ValueError(f"address {addr} was not allocated")
        self._release(start)

    def _release(self, start: int) -> None:
        assert self._blocks is not None
        size = self._allocated.pop(start)
        starts = [block[0] for block in self._blocks]
        i = bisect_left(starts, start) - 1
        new = [start, size]
        nxt = i + 1
        if nxt < len(self._blocks) and start + size == self._blocks[nxt][0]:
            new[1] += self._blocks[nxt][1]
            del self._blocks[nxt]
        prev = self._blocks[i]
        if prev[0] + prev[1] == start:
            prev[1] += new[1]
        else:
            self._blocks.insert(i + 1, new)
        self._freep = i

    def free_blocks(self) -> list[tuple[int, int]]:
        """Free blocks as (start address, size in bytes), in address order."""
        if self._blocks is None:
            return []
        return [(start * UNIT, size * UNIT) for start, size in self._blocks[1:]]

    def size(self) -> int:
        """Bytes the heap has grown to."""
        return self._brk