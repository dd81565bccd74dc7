"""System-wide limits, open flags, file types and the physical memory layout."""

from __future__ import annotations

import enum
import os
import stat as _stat
from dataclasses import dataclass

# Limits.
NPROC = 64  # maximum number of processes
NCPU = 8  # maximum number of CPUs
NOFILE = 16  # open files per process
NFILE = 100  # open files per system
NINODE = 50  # maximum number of active i-nodes
NDEV = 10  # maximum major device number
ROOTDEV = 1  # device number of file system root disk
MAXARG = 32  # max exec arguments
MAXOPBLOCKS = 10  # max # of blocks any FS op writes
LOGSIZE = MAXOPBLOCKS * 3  # max data blocks in on-disk log
NBUF = MAXOPBLOCKS * 3  # size of disk block cache
FSSIZE = 2000  # size of file system in blocks
MAXPATH = 128  # maximum file path name

# Widths of the fixed-size integer types, in bytes.
UINT8_SIZE = 1
UINT16_SIZE = 2
UINT32_SIZE = 4
UINT64_SIZE = 8

# Paging.
PGSIZE = 4096
# One bit less than Sv39 allows, so that addresses never need sign extension.
MAXVA = 1 << (9 + 9 + 9 + 12 - 1)

# Physical memory layout of the qemu "virt" machine.
UART0 = 0x10000000
UART0_IRQ = 10

VIRTIO0 = 0x10001000
VIRTIO0_IRQ = 1

CLINT = 0x2000000
CLINT_MTIME = CLINT + 0xBFF8  # cycles since boot

PLIC = 0x0C000000
PLIC_PRIORITY = PLIC + 0x0
PLIC_PENDING = PLIC + 0x1000

KERNBASE = 0x80000000
PHYSTOP = KERNBASE + 128 * 1024 * 1024

# The trampoline page sits at the highest address in both user and kernel space.
TRAMPOLINE = MAXVA - PGSIZE
# The trap frame lives just beneath the trampoline in user space.
TRAPFRAME = TRAMPOLINE - PGSIZE


def clint_mtimecmp(hartid: int) -> int:
    """Address of the timer compare register of a hart."""
    return CLINT + 0x4000 + 8 * hartid


def plic_menable(hart: int) -> int:
    """Machine-mode interrupt enable bits of a hart."""
    return PLIC + 0x2000 + hart * 0x100


def plic_senable(hart: int) -> int:
    """Supervisor-mode interrupt enable bits of a hart."""
    return PLIC + 0x2080 + hart * 0x100


def plic_mpriority(hart: int) -> int:
    """Machine-mode priority threshold of a hart."""
    return PLIC + 0x200000 + hart * 0x2000


def plic_spriority(hart: int) -> int:
    """Supervisor-mode priority threshold of a hart."""
    return PLIC + 0x201000 + hart * 0x2000


def plic_mclaim(hart: int) -> int:
    """Machine-mode claim/complete register of a hart."""
    return PLIC + 0x200004 + hart * 0x2000


def plic_sclaim(hart: int) -> int:
    """Supervisor-mode claim/complete register of a hart."""
    return PLIC + 0x201004 + hart * 0x2000


def kstack(p: int) -> int:
    """Virtual address of the kernel stack of process slot ``p``.

    Each stack is followed by an unmapped guard page.
    """
    return TRAMPOLINE - (p + 1) * 2 * PGSIZE


class OpenFlag(enum.IntFlag):
    """Flags accepted by open()."""

    RDONLY = 0x000
    WRONLY = 0x001
    RDWR = 0x002
    CREATE = 0x200
    TRUNC = 0x400


class FileType(enum.IntEnum):
    """Kinds of inode."""

    DIR = 1
    FILE = 2
    DEVICE = 3


@dataclass(frozen=True)
class Stat:
    """File status as reported by fstat()."""

    dev: int
    ino: int
    type: FileType
    nlink: int
    size: int

    @classmethod
    def from_os_stat(cls, result: os.stat_result) -> "Stat":
        """Build a Stat from the host's ``os.stat`` result."""
        mode = result.st_mode
        if _stat.S_ISDIR(mode):
            kind = FileType.DIR
        elif _stat.S_ISREG(mode):
            kind = FileType.FILE
        else:
            kind = FileType.DEVICE
        return cls(
            dev=result.st_dev,
            ino=result.st_ino,
            type=kind,
            nlink=result.st_nlink,
            size=result.st_size,
        )