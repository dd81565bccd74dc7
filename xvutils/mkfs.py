"""Build a file system image holding a root directory and a set of files.

Disk layout:
[ boot block | super block | log | inode blocks | free bit map | data blocks ]
"""

from __future__ import annotations

import os
import struct
import sys
from dataclasses import dataclass, field
from typing import BinaryIO, Iterable, Optional, Sequence, Union

from xvutils.params import FSSIZE, LOGSIZE, FileType

ROOTINO = 1  # inode number of the root directory
_U32 = 4
_INODE_HEAD = struct.Struct("<HHHHI")
_SUPERBLOCK = struct.Struct("<8I")
_DIRENT_INUM = struct.Struct("<H")

_PathLike = Union[str, "os.PathLike[str]"]


@dataclass(frozen=True)
class Geometry:
    """Sizes that fix the layout of an image."""

    block_size: int = 1024
    ndirect: int = 12
    dirsiz: int = 14
    ninodes: int = 200
    size: int = FSSIZE
    nlog: int = LOGSIZE
    magic: int = 0x10203040

    def __post_init__(self) -> None:
        if self.block_size <= 0 or self.block_size % self.dinode_size:
            raise ValueError("block size must be a multiple of the inode size")
        if self.block_size % self.dirent_size:
            raise ValueError("block size must be a multiple of the directory entry size")
        if self.size <= self.nmeta:
            raise ValueError("image too small for its metadata")

    @property
    def dinode_size(self) -> int:
        return _INODE_HEAD.size + _U32 * (self.ndirect + 1)

    @property
    def dirent_size(self) -> int:
        return _DIRENT_INUM.size + self.dirsiz

    @property
    def inodes_per_block(self) -> int:
        return self.block_size // self.dinode_size

    @property
    def nindirect(self) -> int:
        return self.block_size // _U32

    @property
    def maxfile(self) -> int:
        """Largest file size, in blocks."""
        return self.ndirect + self.nindirect

    @property
    def nbitmap(self) -> int:
        return self.size // (self.block_size * 8) + 1

    @property
    def ninodeblocks(self) -> int:
        return self.ninodes // self.inodes_per_block + 1

    @property
    def nmeta(self) -> int:
        """Blocks taken by boot, super, log, inode and bitmap blocks."""
        return 2 + self.nlog + self.ninodeblocks + self.nbitmap

    @property
    def nblocks(self) -> int:
        """Number of data blocks."""
        return self.size - self.nmeta

    @property
    def logstart(self) -> int:
        return 2

    @property
    def inodestart(self) -> int:
        return 2 + self.nlog

    @property
    def bmapstart(self) -> int:
        return 2 + self.nlog + self.ninodeblocks


@dataclass(frozen=True)
class SuperBlock:
    """The description of the layout stored in block 1."""

    magic: int
    size: int
    nblocks: int
    ninodes: int
    nlog: int
    logstart: int
    inodestart: int
    bmapstart: int

    @classmethod
    def for_geometry(cls, geometry: Geometry) -> "SuperBlock":
        return cls(
            magic=geometry.magic,
            size=geometry.size,
            nblocks=geometry.nblocks,
            ninodes=geometry.ninodes,
            nlog=geometry.nlog,
            logstart=geometry.logstart,
            inodestart=geometry.inodestart,
            bmapstart=geometry.bmapstart,
        )

    def to_bytes(self) -> bytes:
        return _SUPERBLOCK.pack(
            self.magic,
            self.size,
            self.nblocks,
            self.ninodes,
            self.nlog,
            self.logstart,
            self.inodestart,
            self.bmapstart,
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "SuperBlock":
        if len(data) < _SUPERBLOCK.size:
            raise ValueError("truncated super block")
        return cls(*_SUPERBLOCK.unpack_from(data))


@dataclass
class DiskInode:
    """An inode as stored on disk."""

    type: int = 0
    major: int = 0
    minor: int = 0
    nlink: int = 0
    size: int = 0
    addrs: list[int] = field(default_factory=list)

    def to_bytes(self, geometry: Geometry) -> bytes:
        count = geometry.ndirect + 1
        if len(self.addrs) > count:
            raise ValueError(f"an inode holds at most {count} addresses")
        addrs = list(self.addrs) + [0] * (count - len(self.addrs))
        head = _INODE_HEAD.pack(self.type, self.major, self.minor, self.nlink, self.size)
        return head + struct.pack(f"<{count}I", *addrs)

    @classmethod
    def from_bytes(cls, data: bytes, geometry: Geometry) -> "DiskInode":
        if len(data) < geometry.dinode_size:
            raise ValueError("truncated inode")
        kind, major, minor, nlink, size = _INODE_HEAD.unpack_from(data)
        count = geometry.ndirect + 1
        addrs = list(struct.unpack_from(f"<{count}I", data, _INODE_HEAD.size))
        return cls(kind, major, minor, nlink, size, addrs)


class ImageBuilder:
    """Writes a fresh image, with an empty root directory, into ``image``.

    ``image`` is a seekable binary stream opened for reading and writing.
    """

    def __init__(self, image: BinaryIO, geometry: Optional[Geometry] = None):
        self.image = image
        self.geometry = geometry or Geometry()
        self.superblock = SuperBlock.for_geometry(self.geometry)
        self.freeinode = 1
        self.freeblock = self.geometry.nmeta  # the first block that can be allocated

        bs = self.geometry.block_size
        self.image.seek(0)
        self.image.write(bytes(bs * self.geometry.size))
        self._wsect(1, self.superblock.to_bytes())

        self.root = self.ialloc(FileType.DIR)
        if self.root != ROOTINO:
            raise RuntimeError("root inode has the wrong number")
        self.add_dirent(self.root, self.root, ".")
        self.add_dirent(self.root, self.root, "..")

    def _wsect(self, sec: int, data: bytes) -> None:
        bs = self.geometry.block_size
        block = bytes(data[:bs]).ljust(bs, b"\0")
        self.image.seek(sec * bs)
        self.image.write(block)

    def _rsect(self, sec: int) -> bytes:
        bs = self.geometry.block_size
        self.image.seek(sec * bs)
        data = self.image.read(bs)
        if len(data) != bs:
            raise OSError(f"read: short read of block {sec}")
        return data

    def _inode_location(self, inum: int) -> tuple[int, int]:
        if not 0 < inum < self.geometry.ninodes:
            raise ValueError(f"inode number {inum} out of range")
        ipb = self.geometry.inodes_per_block
        block = inum // ipb + self.superblock.inodestart
        return block, (inum % ipb) * self.geometry.dinode_size

    def _next_block(self) -> int:
        if self.freeblock >= self.geometry.size:
            raise ValueError("out of data blocks")
        block = self.freeblock
        self.freeblock += 1
        return block

    def ialloc(self, type_: int) -> int:
        """Allocate an empty inode of the given type and return its number."""
        inum = self.freeinode
        if inum >= self.geometry.ninodes:
            raise ValueError("out of inodes")
        self.freeinode += 1
        self.write_inode(inum, DiskInode(type=int(type_), nlink=1, size=0))
        return inum

    def read_inode(self, inum: int) -> DiskInode:
        block, offset = self._inode_location(inum)
        data = self._rsect(block)
        return DiskInode.from_bytes(data[offset:], self.geometry)

    def write_inode(self, inum: int, inode: DiskInode) -> None:
        block, offset = self._inode_location(inum)
        buf = bytearray(self._rsect(block))
        raw = inode.to_bytes(self.geometry)
        buf[offset : offset + len(raw)] = raw
        self._wsect(block, bytes(buf))

    def append(self, inum: int, data: bytes) -> None:
        """Append ``data`` to the contents of inode ``inum``."""
        g = self.geometry
        bs = g.block_size
        din = self.read_inode(inum)
        off = din.size
        view = memoryview(bytes(data))
        while view:
            fbn = off // bs
            if fbn >= g.maxfile:
                raise ValueError("file too large")
            if fbn < g.ndirect:
                if din.addrs[fbn] == 0:
                    din.addrs[fbn] = self._next_block()
                x = din.addrs[fbn]
            else:
                if din.addrs[g.ndirect] == 0:
                    din.addrs[g.ndirect] = self._next_block()
                ind_block = din.addrs[g.ndirect]
                indirect = list(struct.unpack(f"<{g.nindirect}I", self._rsect(ind_block)))
                if indirect[fbn - g.ndirect] == 0:
                    indirect[fbn - g.ndirect] = self._next_block()
                    self._wsect(ind_block, struct.pack(f"<{g.nindirect}I", *indirect))
                x = indirect[fbn - g.ndirect]
            n1 = min(len(view), (fbn + 1) * bs - off)
            buf = bytearray(self._rsect(x))
            start = off - fbn * bs
            buf[start : start + n1] = view[:n1]
            self._wsect(x, bytes(buf))
            view = view[n1:]
            off += n1
        din.size = off
        self.write_inode(inum, din)

    def add_dirent(self, dir_inum: int, inum: int, name: str) -> None:
        """Append a directory entry; the name is cut to the entry width."""
        encoded = name.encode("utf-8")[: self.geometry.dirsiz]
        entry = _DIRENT_INUM.pack(inum) + encoded.ljust(self.geometry.dirsiz, b"\0")
        self.append(dir_inum, entry)

    def add_file(self, path: _PathLike) -> int:
        """Copy a host file into the root directory and return its inode number.

        A leading ``user/`` and then a leading ``_`` are dropped from the name.
        """
        text = os.fspath(path)
        shortname = text[len("user/") :] if text.startswith("user/") else text
        if "/" in shortname:
            raise ValueError(f"{text}: files must lie in the current or user/ directory")
        with open(text, "rb") as stream:
            if shortname.startswith("_"):
                shortname = shortname[1:]
            inum = self.ialloc(FileType.FILE)
            self.add_dirent(self.root, inum, shortname)
            while chunk := stream.read(self.geometry.block_size):
                self.append(inum, chunk)
        return inum

    def finish(self) -> int:
        """Round the root directory up to whole blocks and write the bitmap.

        Returns the number of blocks in use.
        """
        bs = self.geometry.block_size
        din = self.read_inode(self.root)
        din.size = (din.size // bs + 1) * bs
        self.write_inode(self.root, din)

        used = self.freeblock
        if used >= bs * 8:
            raise ValueError("too many blocks in use for one bitmap block")
        bitmap = bytearray(bs)
        for i in range(used):
            bitmap[i // 8] |= 1 << (i % 8)
        self._wsect(self.superblock.bmapstart, bytes(bitmap))
        return used


def build_image(
    image_path: _PathLike, files: Iterable[_PathLike], geometry: Optional[Geometry] = None
) -> ImageBuilder:
    """Write an image at ``image_path`` holding ``files`` in its root directory."""
    with open(image_path, "w+b") as image:
        builder = ImageBuilder(image, geometry)
        for path in files:
            builder.add_file(path)
        builder.finish()
    return builder


def main(argv: Optional[Sequence[str]] = None) -> int:
    """mkfs fs.img files..."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        sys.stderr.write("Usage: mkfs fs.img files...\n")
        return 1
    image, *files = args
    g = Geometry()
    print(
        f"nmeta {g.nmeta} (boot, super, log blocks {g.nlog} inode blocks "
        f"{g.ninodeblocks}, bitmap blocks {g.nbitmap}) blocks {g.nblocks} total {g.size}"
    )
    try:
        builder = build_image(image, files, g)
    except OSError as exc:
        name = exc.filename if exc.filename is not None else image
        sys.stderr.write(f"{name}: {exc.strerror or exc}\n")
        return 1
    except ValueError as exc:
        sys.stderr.write(f"mkfs: {exc}\n")
        return 1
    print(f"balloc: first {builder.freeblock} blocks have been allocated")
    print(f"balloc: write bitmap block at sector {builder.superblock.bmapstart}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())