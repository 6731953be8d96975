"""Accelerometer decoder for Polar PMD data frames."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

from hrvmon.protocol import (
    ACC_FRAME_UNCOMPRESSED,
    ACC_SAMPLE_SIZE,
    PMD_FRAME_TYPE_OFFSET,
    PMD_HEADER_SIZE,
    PMD_TIMESTAMP_OFFSET,
    MeasurementType,
)


@dataclass
class AccelSample:
    """A single accelerometer reading in raw sensor units (mG)."""

    x: int
    y: int
    z: int

    @property
    def magnitude(self) -> float:
        return (self.x ** 2 + self.y ** 2 + self.z ** 2) ** 0.5

    def __repr__(self) -> str:
        return f"Accel(x={self.x}, y={self.y}, z={self.z}, mag={self.magnitude:.1f})"


@dataclass
class AccelFrame:
    """Decoded accelerometer samples from one PMD notification."""

    timestamp: int
    samples: list[AccelSample] = field(default_factory=list)

    def __repr__(self) -> str:
        return f"AccelFrame(ts={self.timestamp}, {len(self.samples)} samples)"


class AccelDecoder:
    """Decode PMD accelerometer frames.

    Frame layout (measurement type 0x02):
        [0]      Measurement type (0x02)
        [1:9]    Sensor timestamp, uint64 LE
        [9]      Frame type; only 0x01 (uncompressed) is supported
        [10:]    int16 LE (x, y, z) triplets

    A trailing partial triplet is ignored.
    """

    @staticmethod
    def can_decode(data: bytes | bytearray) -> bool:
        return (
            len(data) >= PMD_HEADER_SIZE
            and data[0] == MeasurementType.ACC
            and data[PMD_FRAME_TYPE_OFFSET] == ACC_FRAME_UNCOMPRESSED
        )

    @staticmethod
    def decode(data: bytes | bytearray) -> AccelFrame | None:
        data = bytes(data)
        if not AccelDecoder.can_decode(data):
            return None

        timestamp = struct.unpack_from("<Q", data, PMD_TIMESTAMP_OFFSET)[0]

        samples: list[AccelSample] = []
        offset = PMD_HEADER_SIZE
        while offset + ACC_SAMPLE_SIZE <= len(data):
            x, y, z = struct.unpack_from("<hhh", data, offset)
            samples.append(AccelSample(x=x, y=y, z=z))
            offset += ACC_SAMPLE_SIZE

        if not samples:
            return None

        return AccelFrame(timestamp=timestamp, samples=samples)
