"""Polar H10 BLE protocol constants and frame layouts.

Two notification streams carry everything the metric engine consumes:

Heart Rate Measurement (standard GATT 0x2A37):
    [FLAGS] [HR: 1B or 2B LE] [ENERGY: 2B LE, optional] [RR: 2B LE, optional]

- FLAGS bit 0: HR value width (0 = uint8, 1 = uint16)
- FLAGS bit 1-2: sensor contact (bit 1 = detected, bit 2 = supported)
- FLAGS bit 3: energy expended present
- FLAGS bit 4: RR interval present
- RR is in units of 1/1024 s

Polar Measurement Data (PMD, proprietary service fb005c80):
    [TYPE] [TIMESTAMP: 8B LE] [FRAME_TYPE] [SAMPLES...]

- TYPE 0x00 = ECG, 0x02 = accelerometer
- ECG samples are read every 3 bytes, using the first 2 bytes of each group
  as int16 LE
- Accelerometer frame type 0x01 (uncompressed) carries int16 LE (x, y, z)
"""

from enum import IntEnum

# ---------------------------------------------------------------------------
# BLE UUIDs
# ---------------------------------------------------------------------------
HR_SERVICE_UUID = "0000180d-0000-1000-8000-00805f9b34fb"
HR_MEASUREMENT_UUID = "00002a37-0000-1000-8000-00805f9b34fb"

PMD_SERVICE_UUID = "fb005c80-02e7-f387-1cad-8acd2d8df0c8"
PMD_CONTROL_UUID = "fb005c81-02e7-f387-1cad-8acd2d8df0c8"
PMD_DATA_UUID = "fb005c82-02e7-f387-1cad-8acd2d8df0c8"

POLAR_NAME_PREFIX = "POLAR"

# ---------------------------------------------------------------------------
# Heart Rate Measurement flags
# ---------------------------------------------------------------------------
HR_FLAG_UINT16 = 0x01
HR_FLAG_CONTACT_DETECTED = 0x02
HR_FLAG_CONTACT_SUPPORTED = 0x04
HR_FLAG_ENERGY_PRESENT = 0x08
HR_FLAG_RR_PRESENT = 0x10

RR_UNITS_PER_SECOND = 1024

# Physiologically plausible RR range (ms); anything outside is an artifact
RR_MIN_MS = 300.0
RR_MAX_MS = 2000.0

# ---------------------------------------------------------------------------
# PMD frames
# ---------------------------------------------------------------------------
PMD_HEADER_SIZE = 10  # type + 8-byte timestamp + frame type
PMD_TIMESTAMP_OFFSET = 1
PMD_FRAME_TYPE_OFFSET = 9

ECG_SAMPLE_STRIDE = 3
ECG_SAMPLING_RATE = 130  # Hz

ACC_FRAME_UNCOMPRESSED = 0x01
ACC_SAMPLE_SIZE = 6  # 3 x int16


class MeasurementType(IntEnum):
    """PMD measurement type identifiers (first byte of a PMD data frame)."""

    ECG = 0x00
    PPG = 0x01
    ACC = 0x02


# ---------------------------------------------------------------------------
# PMD control commands
# ---------------------------------------------------------------------------
PMD_START_MEASUREMENT = 0x02
PMD_STOP_MEASUREMENT = 0x03

ECG_START = bytes([
    PMD_START_MEASUREMENT,
    MeasurementType.ECG,
    0x00, 0x01, 0x82, 0x00,  # sample rate setting: 130 Hz
    0x01, 0x01, 0x0E, 0x00,  # resolution setting: 14 bit
])


def build_stop_measurement(measurement: MeasurementType) -> bytes:
    """Build a PMD control command that stops the given measurement stream."""
    return bytes([PMD_STOP_MEASUREMENT, measurement])


def rr_raw_to_ms(raw: int) -> float:
    """Convert an RR value in 1/1024 s units to milliseconds."""
    return raw * 1000 / RR_UNITS_PER_SECOND


def is_valid_rr(rr_ms: float) -> bool:
    """Check whether an RR interval lies in the accepted [300, 2000] ms range."""
    return RR_MIN_MS <= rr_ms <= RR_MAX_MS


def hex_to_bytes(hex_str: str) -> bytes:
    """Convert a hex string (with or without spaces) to bytes."""
    return bytes.fromhex(hex_str.replace(" ", ""))
