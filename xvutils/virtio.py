"""Virtio MMIO registers and the descriptor formats of a virtio block device."""

from __future__ import annotations

import enum
import struct
from dataclasses import astuple, dataclass
from typing import ClassVar

# MMIO control register offsets.
VIRTIO_MMIO_MAGIC_VALUE = 0x000
VIRTIO_MMIO_VERSION = 0x004
VIRTIO_MMIO_DEVICE_ID = 0x008
VIRTIO_MMIO_VENDOR_ID = 0x00C
VIRTIO_MMIO_DEVICE_FEATURES = 0x010
VIRTIO_MMIO_DRIVER_FEATURES = 0x020
VIRTIO_MMIO_QUEUE_SEL = 0x030
VIRTIO_MMIO_QUEUE_NUM_MAX = 0x034
VIRTIO_MMIO_QUEUE_NUM = 0x038
VIRTIO_MMIO_QUEUE_READY = 0x044
VIRTIO_MMIO_QUEUE_NOTIFY = 0x050
VIRTIO_MMIO_INTERRUPT_STATUS = 0x060
VIRTIO_MMIO_INTERRUPT_ACK = 0x064
VIRTIO_MMIO_STATUS = 0x070
VIRTIO_MMIO_QUEUE_DESC_LOW = 0x080
VIRTIO_MMIO_QUEUE_DESC_HIGH = 0x084
VIRTIO_MMIO_DRIVER_DESC_LOW = 0x090
VIRTIO_MMIO_DRIVER_DESC_HIGH = 0x094
VIRTIO_MMIO_DEVICE_DESC_LOW = 0x0A0
VIRTIO_MMIO_DEVICE_DESC_HIGH = 0x0A4

VIRTIO_MAGIC = 0x74726976
VIRTIO_VENDOR = 0x554D4551

# Device feature bits.
VIRTIO_BLK_F_RO = 5
VIRTIO_BLK_F_SCSI = 7
VIRTIO_BLK_F_CONFIG_WCE = 11
VIRTIO_BLK_F_MQ = 12
VIRTIO_F_ANY_LAYOUT = 27
VIRTIO_RING_F_INDIRECT_DESC = 28
VIRTIO_RING_F_EVENT_IDX = 29

# Number of descriptors; a power of two.
NUM = 8


class DeviceStatus(enum.IntFlag):
    """Bits of the status register."""

    ACKNOWLEDGE = 1
    DRIVER = 2
    DRIVER_OK = 4
    FEATURES_OK = 8


class DescFlag(enum.IntFlag):
    """Flags of a descriptor."""

    NEXT = 1  # chained with another descriptor
    WRITE = 2  # device writes (vs read)


class BlkRequestType(enum.IntEnum):
    """Direction of a block request."""

    IN = 0  # read the disk
    OUT = 1  # write the disk


def _unpack(fmt: struct.Struct, data: bytes, what: str) -> tuple:
    if len(data) < fmt.size:
        raise ValueError(f"{what} needs {fmt.size} bytes, got {len(data)}")
    return fmt.unpack_from(data)


@dataclass
class VirtqDesc:
    """A single descriptor."""

    FORMAT: ClassVar[struct.Struct] = struct.Struct("<QIHH")

    addr: int = 0
    len: int = 0
    flags: int = 0
    next: int = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> "VirtqDesc":
        return cls(*_unpack(cls.FORMAT, data, "descriptor"))

    def to_bytes(self) -> bytes:
        return self.FORMAT.pack(*astuple(self))


@dataclass
class VirtqUsedElem:
    """One entry of the used ring."""

    FORMAT: ClassVar[struct.Struct] = struct.Struct("<II")

    id: int = 0  # index of start of completed descriptor chain
    len: int = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> "VirtqUsedElem":
        return cls(*_unpack(cls.FORMAT, data, "used ring element"))

    def to_bytes(self) -> bytes:
        return self.FORMAT.pack(*astuple(self))


@dataclass
class BlkRequest:
    """The first descriptor of a disk request."""

    FORMAT: ClassVar[struct.Struct] = struct.Struct("<IIQ")

    type: BlkRequestType = BlkRequestType.IN
    reserved: int = 0
    sector: int = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> "BlkRequest":
        kind, reserved, sector = _unpack(cls.FORMAT, data, "block request")
        return cls(BlkRequestType(kind), reserved, sector)

    def to_bytes(self) -> bytes:
        return self.FORMAT.pack(int(self.type), self.reserved, self.sector)