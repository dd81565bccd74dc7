import io
import struct

import pytest

from xvutils.mkfs import (
    ROOTINO,
    DiskInode,
    Geometry,
    ImageBuilder,
    SuperBlock,
    build_image,
    main,
)
from xvutils.params import FileType

SMALL = Geometry(block_size=64, ninodes=8, size=200, nlog=3)


def _block(image: bytes, geometry: Geometry, n: int) -> bytes:
    bs = geometry.block_size
    return image[n * bs : (n + 1) * bs]


def _contents(builder: ImageBuilder, inum: int) -> bytes:
    g = builder.geometry
    image = builder.image.getvalue()
    din = builder.read_inode(inum)
    blocks = list(din.addrs[: g.ndirect])
    if din.addrs[g.ndirect]:
        blocks += struct.unpack(f"<{g.nindirect}I", _block(image, g, din.addrs[g.ndirect]))
    data = b"".join(_block(image, g, b) for b in blocks if b)
    return data[: din.size]


def _entries(builder: ImageBuilder) -> list[tuple[int, str]]:
    g = builder.geometry
    raw = _contents(builder, builder.root)
    result = []
    for start in range(0, len(raw), g.dirent_size):
        chunk = raw[start : start + g.dirent_size]
        (inum,) = struct.unpack_from("<H", chunk)
        if inum:
            result.append((inum, chunk[2:].rstrip(b"\0").decode()))
    return result


def test_geometry_invariants():
    g = Geometry()
    assert g.inodes_per_block * g.dinode_size == g.block_size
    assert g.nmeta + g.nblocks == g.size
    assert g.bmapstart == g.inodestart + g.ninodeblocks
    assert g.maxfile == g.ndirect + g.nindirect


def test_geometry_rejects_misaligned_block_size():
    with pytest.raises(ValueError):
        Geometry(block_size=100)


def test_superblock_round_trip():
    sb = SuperBlock.for_geometry(Geometry())
    assert SuperBlock.from_bytes(sb.to_bytes()) == sb
    assert sb.magic == 0x10203040


def test_superblock_truncated():
    with pytest.raises(ValueError):
        SuperBlock.from_bytes(b"\0" * 4)


def test_disk_inode_round_trip():
    g = Geometry()
    inode = DiskInode(type=2, nlink=1, size=42, addrs=[7, 8] + [0] * (g.ndirect - 1))
    raw = inode.to_bytes(g)
    assert len(raw) == g.dinode_size
    assert DiskInode.from_bytes(raw, g) == inode


def test_disk_inode_too_many_addresses():
    g = Geometry()
    with pytest.raises(ValueError):
        DiskInode(addrs=[1] * (g.ndirect + 2)).to_bytes(g)


def test_superblock_written_to_block_one():
    builder = ImageBuilder(io.BytesIO(), SMALL)
    image = builder.image.getvalue()
    assert len(image) == SMALL.size * SMALL.block_size
    assert SuperBlock.from_bytes(_block(image, SMALL, 1)) == builder.superblock


def test_root_directory_entries():
    builder = ImageBuilder(io.BytesIO(), SMALL)
    assert builder.root == ROOTINO
    root = builder.read_inode(ROOTINO)
    assert root.type == FileType.DIR
    assert root.nlink == 1
    assert _entries(builder) == [(ROOTINO, "."), (ROOTINO, "..")]


def test_append_round_trip_with_indirect_blocks():
    builder = ImageBuilder(io.BytesIO(), SMALL)
    inum = builder.ialloc(FileType.FILE)
    data = bytes(range(256)) * 5  # spans more than ndirect small blocks
    builder.append(inum, data[:100])
    builder.append(inum, data[100:])
    assert builder.read_inode(inum).size == len(data)
    assert builder.read_inode(inum).addrs[SMALL.ndirect] != 0
    assert _contents(builder, inum) == data


def test_append_beyond_maxfile_raises():
    builder = ImageBuilder(io.BytesIO(), SMALL)
    inum = builder.ialloc(FileType.FILE)
    with pytest.raises(ValueError):
        builder.append(inum, b"x" * (SMALL.maxfile * SMALL.block_size + 1))


def test_ialloc_out_of_inodes():
    builder = ImageBuilder(io.BytesIO(), SMALL)
    for _ in range(SMALL.ninodes - 2):
        builder.ialloc(FileType.FILE)
    with pytest.raises(ValueError):
        builder.ialloc(FileType.FILE)


def test_add_file_strips_prefix_and_underscore(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "user").mkdir()
    (tmp_path / "user" / "_cat").write_bytes(b"meow" * 40)
    builder = ImageBuilder(io.BytesIO(), SMALL)
    inum = builder.add_file("user/_cat")
    assert (inum, "cat") in _entries(builder)
    assert _contents(builder, inum) == b"meow" * 40


def test_add_file_long_name_truncated(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    name = "abcdefghijklmnopqrst"
    (tmp_path / name).write_bytes(b"z")
    builder = ImageBuilder(io.BytesIO(), SMALL)
    inum = builder.add_file(name)
    assert (inum, name[: SMALL.dirsiz]) in _entries(builder)


def test_add_file_rejects_subdirectory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "a").mkdir()
    (tmp_path / "a" / "b").write_bytes(b"x")
    builder = ImageBuilder(io.BytesIO(), SMALL)
    with pytest.raises(ValueError):
        builder.add_file("a/b")


def test_add_file_missing_raises(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    builder = ImageBuilder(io.BytesIO(), SMALL)
    with pytest.raises(OSError):
        builder.add_file("nothere")


def test_finish_rounds_root_and_writes_bitmap():
    builder = ImageBuilder(io.BytesIO(), SMALL)
    used = builder.finish()
    assert used == builder.freeblock
    assert builder.read_inode(ROOTINO).size % SMALL.block_size == 0
    bitmap = _block(builder.image.getvalue(), SMALL, SMALL.bmapstart)
    bits = [(bitmap[i // 8] >> (i % 8)) & 1 for i in range(SMALL.block_size * 8)]
    assert all(bits[:used])
    assert not any(bits[used:])


def test_build_image_and_main(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "README").write_bytes(b"hello\n")
    builder = build_image(tmp_path / "small.img", ["README"], SMALL)
    assert (tmp_path / "small.img").stat().st_size == SMALL.size * SMALL.block_size
    assert builder.freeinode == 3

    assert main(["fs.img", "README"]) == 0
    g = Geometry()
    assert (tmp_path / "fs.img").stat().st_size == g.size * g.block_size


def test_main_usage_and_missing_file(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main([]) == 1
    assert "Usage: mkfs fs.img files..." in capsys.readouterr().err
    assert main(["fs.img", "missing"]) == 1
    assert "missing" in capsys.readouterr().err