"""Standard BLE Heart Rate Measurement (0x2A37) decoder.

Layout per the Bluetooth SIG Heart Rate Service:
    [0]      Flags
    [1(:3)]  HR value, uint8 or uint16 LE depending on flags bit 0
    [+2]     Energy expended (uint16 LE, kJ), only if flags bit 3
    [+2]     RR interval (uint16 LE, 1/1024 s), only if flags bit 4

Only the first RR interval of a frame is surfaced; the H10 sends one beat
per notification.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass

from hrvmon.protocol import (
    HR_FLAG_CONTACT_DETECTED,
    HR_FLAG_CONTACT_SUPPORTED,
    HR_FLAG_ENERGY_PRESENT,
    HR_FLAG_RR_PRESENT,
    HR_FLAG_UINT16,
    rr_raw_to_ms,
)


@dataclass
class HeartRateMeasurement:
    """Decoded Heart Rate Measurement notification."""

    hr_bpm: int
    sensor_contact: bool | None = None
    energy_expended_kj: int | None = None
    rr_interval_ms: float | None = None

    def __repr__(self) -> str:
        rr = f", rr={self.rr_interval_ms:.1f}ms" if self.rr_interval_ms is not None else ""
        return f"HeartRateMeasurement(hr={self.hr_bpm}bpm{rr})"


class HeartRateDecoder:
    """Decode Heart Rate Measurement frames into typed measurements."""

    @staticmethod
    def decode(data: bytes | bytearray) -> HeartRateMeasurement | None:
        """Parse a 0x2A37 value.

        Returns None if the buffer is too short for the fields its flags
        announce. A truncated RR field is treated as RR absent.
        """
        data = bytes(data)
        if len(data) < 2:
            return None

        flags = data[0]
        offset = 1

        if flags & HR_FLAG_UINT16:
            if len(data) < offset + 2:
                return None
            hr_value = struct.unpack_from("<H", data, offset)[0]
            offset += 2
        else:
            hr_value = data[offset]
            offset += 1

        sensor_contact = None
        if flags & HR_FLAG_CONTACT_SUPPORTED:
            sensor_contact = bool(flags & HR_FLAG_CONTACT_DETECTED)

        energy_expended = None
        if flags & HR_FLAG_ENERGY_PRESENT:
            if len(data) < offset + 2:
                return None
            energy_expended = struct.unpack_from("<H", data, offset)[0]
            offset += 2

        rr_ms = None
        if flags & HR_FLAG_RR_PRESENT and len(data) >= offset + 2:
            rr_raw = struct.unpack_from("<H", data, offset)[0]
            rr_ms = rr_raw_to_ms(rr_raw)

        return HeartRateMeasurement(
            hr_bpm=hr_value,
            sensor_contact=sensor_contact,
            energy_expended_kj=energy_expended,
            rr_interval_ms=rr_ms,
        )

    @staticmethod
    def decode_rr(data: bytes | bytearray) -> float | None:
        """Return the RR interval (ms) carried by a frame, or None."""
        measurement = HeartRateDecoder.decode(data)
        if measurement is None:
            return None
        return measurement.rr_interval_ms
