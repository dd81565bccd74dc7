"""A first-fit free-list allocator over a simulated growing heap."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

HEADER_SIZE = 16  # bytes per header, also the allocation unit
MIN_UNITS = 4096  # the heap is grown by at least this many units at a time

_BASE = 0  # address of the list head, below the heap


class OutOfMemory(MemoryError):
    """The heap could not be grown far enough to satisfy a request."""


@dataclass
class _Header:
    ptr: int
    size: int  # in units, including the header itself


class Heap:
    """A heap whose free blocks are kept in an address-ordered circular list.

    Addresses are plain integers.  ``limit`` caps, in bytes, how far the
    heap may grow; ``None`` means no cap.
    """

    def __init__(self, limit: Optional[int] = None):
        self._limit = limit
        self._start = HEADER_SIZE
        self._brk = self._start
        self._headers: dict[int, _Header] = {}
        self._allocated: set[int] = set()
        self._freep: Optional[int] = None

    def _sbrk(self, nbytes: int) -> Optional[int]:
        if self._limit is not None and self._brk + nbytes - self._start > self._limit:
            return None
        old = self._brk
        self._brk += nbytes
        return old

    def _morecore(self, nunits: int) -> int:
        nunits = max(nunits, MIN_UNITS)
        addr = self._sbrk(nunits * HEADER_SIZE)
        if addr is None:
            raise OutOfMemory(f"cannot grow heap by {nunits * HEADER_SIZE} bytes")
        self._headers[addr] = _Header(ptr=0, size=nunits)
        self._release(addr)
        assert self._freep is not None
        return self._freep

    def malloc(self, nbytes: int) -> int:
        """Allocate ``nbytes`` and return the address of the block."""
        if nbytes < 0:
            raise ValueError("size must not be negative")
        nunits = (nbytes + HEADER_SIZE - 1) // HEADER_SIZE + 1
        if self._freep is None:
            self._headers[_BASE] = _Header(ptr=_BASE, size=0)
            self._freep = _BASE
        prevp = self._freep
        p = self._headers[prevp].ptr
        while True:
            block = self._headers[p]
            if block.size >= nunits:
                if block.size == nunits:
                    self._headers[prevp].ptr = block.ptr
                else:
                    block.size -= nunits
                    p += block.size * HEADER_SIZE
                    self._headers[p] = _Header(ptr=0, size=nunits)
                self._freep = prevp
                self._allocated.add(p)
                return p + HEADER_SIZE
            if p == self._freep:
                p = self._morecore(nunits)
            prevp = p
            p = self._headers[p].ptr

    def free(self, addr: int) -> None:
        """Return a block obtained from malloc() to the free list."""
        bp = addr - HEADER_SIZE
        if bp not in self._allocated:
            raise ValueError(f"address {addr:#x} is not an allocated block")
        self._allocated.discard(bp)
        self._release(bp)

    def _release(self, bp: int) -> None:
        headers = self._headers
        assert self._freep is not None
        p = self._freep
        while not (p < bp < headers[p].ptr):
            nxt = headers[p].ptr
            if p >= nxt and (bp > p or bp < nxt):
                break  # freed block at the start or end of the arena
            p = nxt
        block = headers[bp]
        prev = headers[p]
        if bp + block.size * HEADER_SIZE == prev.ptr:
            upper = headers.pop(prev.ptr)
            block.size += upper.size
            block.ptr = upper.ptr
        else:
            block.ptr = prev.ptr
        if p + prev.size * HEADER_SIZE == bp:
            prev.size += block.size
            prev.ptr = block.ptr
            del headers[bp]
        else:
            prev.ptr = bp
        self._freep = p

    def free_blocks(self) -> list[tuple[int, int]]:
        """The free blocks as (address, size in bytes), in address order."""
        if self._freep is None:
            return []
        blocks = []
        p = self._headers[_BASE].ptr
        while p != _BASE:
            block = self._headers[p]
            blocks.append((p, block.size * HEADER_SIZE))
            p = block.ptr
        return blocks