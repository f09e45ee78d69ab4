"""Two-level x86 page tables over a simulated pool of physical pages."""

from __future__ import annotations

import struct

from xvkit.layout import KERNBASE, p2v, v2p
from xvkit.mmu import (
    NPDENTRIES,
    PGSIZE,
    PTE_P,
    PTE_U,
    PTE_W,
    pdx,
    pgaddr,
    pgrounddown,
    pgroundup,
    ptx,
    pte_addr,
    pte_flags,
)

_MASK = 0xFFFFFFFF
_ENTRY = struct.Struct("<I")


class VMError(Exception):
    """Raised for a bad mapping request or a bad user address."""


class OutOfMemory(MemoryError):
    """Raised when no physical page is left."""


class PhysicalMemory:
    """A fixed set of physical pages handed out one at a time."""

    def __init__(self, npages: int = 256) -> None:
        if npages < 1:
            raise ValueError("need at least one physical page")
        # Page 0 is never handed out, so a zero address always means "none".
        self._free = [PGSIZE * (i + 1) for i in reversed(range(npages))]
        self._pages: dict[int, bytearray] = {}

    def kalloc(self) -> int:
        """Allocate one page and return its physical address."""
        if not self._free:
            raise OutOfMemory("out of physical pages")
        pa = self._free.pop()
        self._pages[pa] = bytearray(PGSIZE)
        return pa

    def kfree(self, pa: int) -> None:
        """Return a page obtained from kalloc."""
        if pa % PGSIZE or pa not in self._pages:
            raise VMError(f"kfree: 0x{pa:x} is not an allocated page")
        del self._pages[pa]
        self._free.append(pa)

    def page(self, pa: int) -> bytearray:
        """The live contents of the allocated page at pa."""
        page = self._pages.get(pa) if pa % PGSIZE == 0 else None
        if page is None:
            raise VMError(f"no allocated page at 0x{pa:x}")
        return page

    def free_count(self) -> int:
        """Number of pages not allocated."""
        return len(self._free)


class PageTable:
    """The user half of a process address space."""

    def __init__(self, memory: PhysicalMemory) -> None:
        self.memory = memory
        pgdir = memory.kalloc()
        memory.page(pgdir)[:] = bytes(PGSIZE)
        self._pgdir: int | None = pgdir

    @property
    def pgdir(self) -> int:
        """Physical address of the page directory."""
        if self._pgdir is None:
            raise VMError("freevm: no pgdir")
        return self._pgdir

    def _get(self, addr: int) -> int:
        page = self.memory.page(pgrounddown(addr))
        return _ENTRY.unpack_from(page, addr % PGSIZE)[0]

    def _set(self, addr: int, value: int) -> None:
        page = self.memory.page(pgrounddown(addr))
        _ENTRY.pack_into(page, addr % PGSIZE, value & _MASK)

    def walk(self, va: int, alloc: bool = False) -> int | None:
        """Physical address of the PTE for va, creating its table if alloc."""
        pde_addr = self.pgdir + 4 * pdx(va)
        pde = self._get(pde_addr)
        if pde & PTE_P:
            pgtab = pte_addr(pde)
        else:
            if not alloc:
                return None
            pgtab = self.memory.kalloc()
            self.memory.page(pgtab)[:] = bytes(PGSIZE)
            self._set(pde_addr, pgtab | PTE_P | PTE_W | PTE_U)
        return pgtab + 4 * ptx(va)

    def map_pages(self, va: int, size: int, pa: int, perm: int) -> None:
        """Map the pages covering [va, va+size) to physical pages from pa."""
        a = pgrounddown(va)
        last = pgrounddown((va + size - 1) & _MASK)
        while True:
            pte = self.walk(a, True)
            if self._get(pte) & PTE_P:
                raise VMError("remap")
            self._set(pte, pa | perm | PTE_P)
            if a == last:
                break
            a += PGSIZE
            pa += PGSIZE

    def init_user(self, code: bytes) -> None:
        """Place code, smaller than a page, at address 0."""
        if len(code) >= PGSIZE:
            raise VMError("inituvm: more than a page")
        mem = self.memory.kalloc()
        page = self.memory.page(mem)
        page[:] = bytes(PGSIZE)
        self.map_pages(0, PGSIZE, mem, PTE_W | PTE_U)
        page[:len(code)] = code

    def load(self, addr: int, data: bytes, offset: int, sz: int) -> None:
        """Copy sz bytes of data from offset into already-mapped pages at addr."""
        if addr % PGSIZE:
            raise VMError("loaduvm: addr must be page aligned")
        for i in range(0, sz, PGSIZE):
            pte = self.walk(addr + i)
            if pte is None:
                raise VMError("loaduvm: address should exist")
            pa = pte_addr(self._get(pte))
            n = min(sz - i, PGSIZE)
            chunk = data[offset + i:offset + i + n]
            if len(chunk) != n:
                raise VMError("loaduvm: short read")
            self.memory.page(pa)[:n] = chunk

    def alloc_user(self, oldsz: int, newsz: int) -> int:
        """Grow the user space from oldsz to newsz; return the new size."""
        if newsz >= KERNBASE:
            raise VMError("allocuvm: size reaches kernel space")
        if newsz < oldsz:
            return oldsz
        for a in range(pgroundup(oldsz), newsz, PGSIZE):
            try:
                mem = self.memory.kalloc()
            except OutOfMemory:
                self.dealloc_user(newsz, oldsz)
                raise
            self.memory.page(mem)[:] = bytes(PGSIZE)
            try:
                self.map_pages(a, PGSIZE, mem, PTE_W | PTE_U)
            except OutOfMemory:
                self.dealloc_user(newsz, oldsz)
                self.memory.kfree(mem)
                raise
        return newsz

    def dealloc_user(self, oldsz: int, newsz: int) -> int:
        """Shrink the user space from oldsz to newsz; return the new size."""
        if newsz >= oldsz:
            return oldsz
        a = pgroundup(newsz)
        while a < oldsz:
            pte = self.walk(a)
            if pte is None:
                a = pgaddr(pdx(a) + 1, 0, 0) - PGSIZE
            else:
                entry = self._get(pte)
                if entry & PTE_P:
                    pa = pte_addr(entry)
                    if pa == 0:
                        raise VMError("kfree")
                    self.memory.kfree(pa)
                    self._set(pte, 0)
            a += PGSIZE
        return newsz

    def free(self) -> None:
        """Release every user page, every page table and the directory."""
        pgdir = self.pgdir
        self.dealloc_user(KERNBASE, 0)
        for i in range(NPDENTRIES):
            pde = self._get(pgdir + 4 * i)
            if pde & PTE_P:
                self.memory.kfree(pte_addr(pde))
        self.memory.kfree(pgdir)
        self._pgdir = None

    def clear_user(self, va: int) -> None:
        """Make the page at va inaccessible to user code."""
        pte = self.walk(va)
        if pte is None:
            raise VMError("clearpteu")
        self._set(pte, self._get(pte) & ~PTE_U)

    def copy(self, sz: int) -> "PageTable":
        """A new table holding a copy of the first sz bytes of user memory."""
        child = PageTable(self.memory)
        try:
            for i in range(0, sz, PGSIZE):
                pte = self.walk(i)
                if pte is None:
                    raise VMError("copyuvm: pte should exist")
                entry = self._get(pte)
                if not entry & PTE_P:
                    raise VMError("copyuvm: page not present")
                mem = self.memory.kalloc()
                self.memory.page(mem)[:] = self.memory.page(pte_addr(entry))
                try:
                    child.map_pages(i, PGSIZE, mem, pte_flags(entry))
                except OutOfMemory:
                    self.memory.kfree(mem)
                    raise
        except (OutOfMemory, VMError):
            child.free()
            raise
        return child

    def user_to_kernel(self, va: int) -> int | None:
        """Kernel address of the user page at va, or None if not user-mapped."""
        pte = self.walk(va)
        if pte is None:
            return None
        entry = self._get(pte)
        if not entry & PTE_P or not entry & PTE_U:
            return None
        return p2v(pte_addr(entry))

    def _user_pages(self, va: int, n: int):
        while n > 0:
            va0 = pgrounddown(va)
            ka = self.user_to_kernel(va0)
            if ka is None:
                raise VMError(f"bad user address 0x{va:x}")
            off = va - va0
            chunk = min(PGSIZE - off, n)
            yield self.memory.page(v2p(ka)), off, chunk
            n -= chunk
            va = va0 + PGSIZE

    def copy_out(self, va: int, data: bytes) -> None:
        """Write data into user memory at va."""
        pos = 0
        for page, off, chunk in self._user_pages(va, len(data)):
            page[off:off + chunk] = data[pos:pos + chunk]
            pos += chunk

    def read(self, va: int, n: int) -> bytes:
        """Read n bytes of user memory at va."""
        if n < 0:
            raise ValueError("negative length")
        return b"".join(
            bytes(page[off:off + chunk]) for page, off, chunk in self._user_pages(va, n)
        )