"""ECG decoder for Polar PMD data frames.

Frame layout (measurement type 0x00):
    [0]      Measurement type (0x00)
    [1:9]    Sensor timestamp, uint64 LE (ns, passed through untouched)
    [9]      Frame type
    [10:]    Samples, one every 3 bytes

Each 3-byte group is read as an int16 LE from its first two bytes; the
third byte is skipped. Decoding stops once fewer than 3 bytes remain.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

from hrvmon.protocol import (
    ECG_SAMPLE_STRIDE,
    PMD_HEADER_SIZE,
    PMD_TIMESTAMP_OFFSET,
    MeasurementType,
)


@dataclass
class EcgFrame:
    """A batch of raw ECG samples (µV) from one PMD notification."""

    timestamp: int
    samples: list[int] = field(default_factory=list)

    def __repr__(self) -> str:
        return f"EcgFrame(ts={self.timestamp}, {len(self.samples)} samples)"


class EcgDecoder:
    """Decode PMD ECG frames."""

    @staticmethod
    def can_decode(data: bytes | bytearray) -> bool:
        return len(data) >= PMD_HEADER_SIZE and data[0] == MeasurementType.ECG

    @staticmethod
    def decode(data: bytes | bytearray) -> EcgFrame | None:
        """Decode an ECG frame. Returns None for other frame types,
        short buffers, or frames without any sample."""
        data = bytes(data)
        if not EcgDecoder.can_decode(data):
            return None

        timestamp = struct.unpack_from("<Q", data, PMD_TIMESTAMP_OFFSET)[0]

        samples: list[int] = []
        offset = PMD_HEADER_SIZE
        while offset + 2 < len(data):
            samples.append(struct.unpack_from("<h", data, offset)[0])
            offset += ECG_SAMPLE_STRIDE

        if not samples:
            return None

        return EcgFrame(timestamp=timestamp, samples=samples)
