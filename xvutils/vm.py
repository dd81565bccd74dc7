"""Simulated Sv39 three-level page tables over a pool of physical pages."""

from __future__ import annotations

from typing import Optional

from xvutils.params import KERNBASE, MAXVA, PGSIZE

PGSHIFT = 12  # bits of offset within a page
PTES_PER_TABLE = 512  # 2^9 entries in a page-table page
_PTE_SIZE = 8

# Page-table entry bits.
PTE_V = 1 << 0  # valid
PTE_R = 1 << 1
PTE_W = 1 << 2
PTE_X = 1 << 3
PTE_U = 1 << 4  # user can access


class VmError(Exception):
    """An inconsistent page table, a bad request or an unmapped user address."""


class OutOfMemory(VmError):
    """No free physical page was left."""


def pg_round_up(addr: int) -> int:
    """``addr`` rounded up to a page boundary."""
    return (addr + PGSIZE - 1) & ~(PGSIZE - 1)


def pg_round_down(addr: int) -> int:
    """``addr`` rounded down to a page boundary."""
    return addr & ~(PGSIZE - 1)


def _px(level: int, va: int) -> int:
    return (va >> (PGSHIFT + 9 * level)) & 0x1FF


def _pa2pte(pa: int) -> int:
    return (pa >> 12) << 10


def _pte2pa(pte: int) -> int:
    return (pte >> 10) << 12


def _pte_flags(pte: int) -> int:
    return pte & 0x3FF


class PhysicalMemory:
    """A fixed number of physical pages starting at KERNBASE."""

    def __init__(self, npages: int):
        if npages < 0:
            raise ValueError("number of pages must not be negative")
        self._pages: dict[int, bytearray] = {}
        self._free = [KERNBASE + i * PGSIZE for i in reversed(range(npages))]

    def alloc(self) -> int:
        """Take a zeroed page and return its physical address."""
        if not self._free:
            raise OutOfMemory("out of physical pages")
        pa = self._free.pop()
        self._pages[pa] = bytearray(PGSIZE)
        return pa

    def free(self, pa: int) -> None:
        """Return a page obtained from alloc()."""
        if pa not in self._pages:
            raise VmError(f"kfree: {pa:#x} is not an allocated page")
        del self._pages[pa]
        self._free.append(pa)

    def _page(self, pa: int) -> bytearray:
        page = self._pages.get(pg_round_down(pa))
        if page is None:
            raise VmError(f"physical address {pa:#x} is not allocated")
        return page

    def read(self, pa: int, n: int) -> bytes:
        """Read ``n`` bytes starting at ``pa``; they may span allocated pages."""
        out = bytearray()
        while n > 0:
            page = self._page(pa)
            off = pa % PGSIZE
            chunk = min(n, PGSIZE - off)
            out += page[off : off + chunk]
            pa += chunk
            n -= chunk
        return bytes(out)

    def write(self, pa: int, data: bytes) -> None:
        """Write ``data`` starting at ``pa``."""
        view = memoryview(bytes(data))
        while view:
            page = self._page(pa)
            off = pa % PGSIZE
            chunk = min(len(view), PGSIZE - off)
            page[off : off + chunk] = view[:chunk]
            view = view[chunk:]
            pa += chunk

    def free_count(self) -> int:
        """Number of pages not allocated."""
        return len(self._free)


class AddressSpace:
    """A page table whose pages, and the pages it maps, come from ``memory``."""

    def __init__(self, memory: PhysicalMemory):
        self.memory = memory
        self.root = memory.alloc()

    def _load(self, addr: int) -> int:
        return int.from_bytes(self.memory.read(addr, _PTE_SIZE), "little")

    def _store(self, addr: int, value: int) -> None:
        self.memory.write(addr, value.to_bytes(_PTE_SIZE, "little"))

    def walk(self, va: int, alloc: bool = False) -> Optional[int]:
        """Physical address of the level-0 PTE for ``va``.

        Missing page-table pages are created if ``alloc`` is true; otherwise
        None is returned for them.
        """
        if not 0 <= va < MAXVA:
            raise VmError("walk")
        table = self.root
        for level in (2, 1):
            addr = table + _px(level, va) * _PTE_SIZE
            pte = self._load(addr)
            if pte & PTE_V:
                table = _pte2pa(pte)
            else:
                if not alloc:
                    return None
                table = self.memory.alloc()
                self._store(addr, _pa2pte(table) | PTE_V)
        return table + _px(0, va) * _PTE_SIZE

    def walkaddr(self, va: int) -> Optional[int]:
        """Physical address of the user page at ``va``, or None if unmapped."""
        if not 0 <= va < MAXVA:
            return None
        addr = self.walk(va, False)
        if addr is None:
            return None
        pte = self._load(addr)
        if not pte & PTE_V or not pte & PTE_U:
            return None
        return _pte2pa(pte)

    def mappages(self, va: int, size: int, pa: int, perm: int) -> None:
        """Map the pages covering ``[va, va+size)`` to physical pages from ``pa``."""
        if size == 0:
            raise VmError("mappages: size")
        a = pg_round_down(va)
        last = pg_round_down(va + size - 1)
        while True:
            addr = self.walk(a, True)
            assert addr is not None
            if self._load(addr) & PTE_V:
                raise VmError("mappages: remap")
            self._store(addr, _pa2pte(pa) | perm | PTE_V)
            if a == last:
                return
            a += PGSIZE
            pa += PGSIZE

    def unmap(self, va: int, npages: int, do_free: bool) -> None:
        """Remove ``npages`` existing mappings from page-aligned ``va``."""
        if va % PGSIZE:
            raise VmError("uvmunmap: not aligned")
        for a in range(va, va + npages * PGSIZE, PGSIZE):
            addr = self.walk(a, False)
            if addr is None:
                raise VmError("uvmunmap: walk")
            pte = self._load(addr)
            if not pte & PTE_V:
                raise VmError("uvmunmap: not mapped")
            if _pte_flags(pte) == PTE_V:
                raise VmError("uvmunmap: not a leaf")
            if do_free:
                self.memory.free(_pte2pa(pte))
            self._store(addr, 0)

    def load_first(self, src: bytes) -> None:
        """Place ``src``, shorter than a page, at address zero."""
        if len(src) >= PGSIZE:
            raise VmError("uvmfirst: more than a page")
        mem = self.memory.alloc()
        self.mappages(0, PGSIZE, mem, PTE_W | PTE_R | PTE_X | PTE_U)
        self.memory.write(mem, src)

    def grow(self, oldsz: int, newsz: int, xperm: int = 0) -> int:
        """Map zeroed user pages to grow from ``oldsz`` to ``newsz``.

        Returns the new size.  On failure the pages added are released and
        OutOfMemory is raised.
        """
        if newsz < oldsz:
            return oldsz
        oldsz = pg_round_up(oldsz)
        for a in range(oldsz, newsz, PGSIZE):
            try:
                mem = self.memory.alloc()
            except OutOfMemory:
                self.shrink(a, oldsz)
                raise
            try:
                self.mappages(a, PGSIZE, mem, PTE_R | PTE_U | xperm)
            except OutOfMemory:
                self.memory.free(mem)
                self.shrink(a, oldsz)
                raise
        return newsz

    def shrink(self, oldsz: int, newsz: int) -> int:
        """Release user pages to bring the size from ``oldsz`` to ``newsz``."""
        if newsz >= oldsz:
            return oldsz
        if pg_round_up(newsz) < pg_round_up(oldsz):
            npages = (pg_round_up(oldsz) - pg_round_up(newsz)) // PGSIZE
            self.unmap(pg_round_up(newsz), npages, True)
        return newsz

    def _freewalk(self, table: int) -> None:
        for i in range(PTES_PER_TABLE):
            addr = table + i * _PTE_SIZE
            pte = self._load(addr)
            if pte & PTE_V and not pte & (PTE_R | PTE_W | PTE_X):
                self._freewalk(_pte2pa(pte))
                self._store(addr, 0)
            elif pte & PTE_V:
                raise VmError("freewalk: leaf")
        self.memory.free(table)

    def free(self, sz: int) -> None:
        """Release the user pages below ``sz`` and then every page-table page."""
        if sz > 0:
            self.unmap(0, pg_round_up(sz) // PGSIZE, True)
        self._freewalk(self.root)

    def copy_to(self, other: "AddressSpace", sz: int) -> None:
        """Copy the mappings and contents of the first ``sz`` bytes into ``other``.

        On failure whatever was copied is released and OutOfMemory is raised.
        """
        i = 0
        try:
            for i in range(0, sz, PGSIZE):
                addr = self.walk(i, False)
                if addr is None:
                    raise VmError("uvmcopy: pte should exist")
                pte = self._load(addr)
                if not pte & PTE_V:
                    raise VmError("uvmcopy: page not present")
                mem = other.memory.alloc()
                other.memory.write(mem, self.memory.read(_pte2pa(pte), PGSIZE))
                try:
                    other.mappages(i, PGSIZE, mem, _pte_flags(pte))
                except OutOfMemory:
                    other.memory.free(mem)
                    raise
        except OutOfMemory:
            other.unmap(0, i // PGSIZE, True)
            raise

    def clear_user(self, va: int) -> None:
        """Make the page at ``va`` inaccessible to the user."""
        addr = self.walk(va, False)
        if addr is None:
            raise VmError("uvmclear")
        self._store(addr, self._load(addr) & ~PTE_U)

    def copyout(self, dstva: int, data: bytes) -> None:
        """Copy ``data`` to user address ``dstva``."""
        view = memoryview(bytes(data))
        while view:
            va0 = pg_round_down(dstva)
            pa0 = self.walkaddr(va0)
            if pa0 is None:
                raise VmError(f"copyout: bad user address {dstva:#x}")
            n = min(PGSIZE - (dstva - va0), len(view))
            self.memory.write(pa0 + (dstva - va0), view[:n])
            view = view[n:]
            dstva = va0 + PGSIZE

    def copyin(self, srcva: int, n: int) -> bytes:
        """Copy ``n`` bytes from user address ``srcva``."""
        out = bytearray()
        while n > 0:
            va0 = pg_round_down(srcva)
            pa0 = self.walkaddr(va0)
            if pa0 is None:
                raise VmError(f"copyin: bad user address {srcva:#x}")
            chunk = min(PGSIZE - (srcva - va0), n)
            out += self.memory.read(pa0 + (srcva - va0), chunk)
            n -= chunk
            srcva = va0 + PGSIZE
        return bytes(out)

    def copyinstr(self, srcva: int, max_len: int) -> bytes:
        """Copy a NUL-terminated string of at most ``max_len`` bytes, NUL included.

        The NUL is not part of the result.
        """
        out = bytearray()
        while max_len > 0:
            va0 = pg_round_down(srcva)
            pa0 = self.walkaddr(va0)
            if pa0 is None:
                raise VmError(f"copyinstr: bad user address {srcva:#x}")
            n = min(PGSIZE - (srcva - va0), max_len)
            chunk = self.memory.read(pa0 + (srcva - va0), n)
            nul = chunk.find(b"\0")
            if nul >= 0:
                out += chunk[:nul]
                return bytes(out)
            out += chunk
            max_len -= n
            srcva = va0 + PGSIZE
        raise VmError("copyinstr: string not terminated")