import pytest

from xvutils.virtio import (
    NUM,
    BlkRequest,
    BlkRequestType,
    DescFlag,
    VirtqDesc,
    VirtqUsedElem,
)


def test_descriptor_round_trip():
    desc = VirtqDesc(addr=0x80001000, len=512, flags=DescFlag.NEXT | DescFlag.WRITE, next=3)
    data = desc.to_bytes()
    assert len(data) == VirtqDesc.FORMAT.size
    assert VirtqDesc.from_bytes(data) == desc


def test_descriptor_is_little_endian():
    data = VirtqDesc(addr=1).to_bytes()
    assert data[0] == 1
    assert data[1:8] == bytes(7)


def test_used_elem_round_trip():
    elem = VirtqUsedElem(id=5, len=1)
    assert VirtqUsedElem.from_bytes(elem.to_bytes()) == elem


def test_used_elem_last_ring_slot_round_trip():
    elem = VirtqUsedElem(id=NUM - 1, len=512)
    assert VirtqUsedElem.from_bytes(elem.to_bytes()).id == NUM - 1


def test_block_request_wire_bytes():
    req = BlkRequest(type=BlkRequestType.OUT, sector=1)
    assert req.to_bytes() == b"\x01\x00\x00\x00" + bytes(4) + b"\x01" + bytes(7)


def test_block_request_round_trip():
    req = BlkRequest(type=BlkRequestType.IN, reserved=0, sector=1999)
    decoded = BlkRequest.from_bytes(req.to_bytes())
    assert decoded == req
    assert decoded.type is BlkRequestType.IN


def test_block_request_unknown_type():
    data = BlkRequest(sector=2).to_bytes()
    bad = b"\x07" + data[1:]
    with pytest.raises(ValueError):
        BlkRequest.from_bytes(bad)


def test_short_data_rejected():
    with pytest.raises(ValueError):
        VirtqDesc.from_bytes(b"\x00" * 4)
    with pytest.raises(ValueError):
        VirtqUsedElem.from_bytes(b"")


def test_descriptor_flag_bits_on_the_wire():
    data = VirtqDesc(flags=DescFlag.NEXT | DescFlag.WRITE, next=NUM - 1).to_bytes()
    assert data[12:14] == b"\x03\x00"
    assert data[14:16] == bytes([NUM - 1, 0])