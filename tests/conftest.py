"""Shared fixtures and helpers for the hrvmon test suite."""

from __future__ import annotations

import json
import math
import struct
from pathlib import Path

import numpy as np
import pytest

from hrvmon.device import SensorDevice
from hrvmon.protocol import (
    ACC_FRAME_UNCOMPRESSED,
    HR_FLAG_CONTACT_DETECTED,
    HR_FLAG_CONTACT_SUPPORTED,
    HR_FLAG_ENERGY_PRESENT,
    HR_FLAG_RR_PRESENT,
    HR_FLAG_UINT16,
    HR_MEASUREMENT_UUID,
    MeasurementType,
)
from hrvmon.registry import CalculatorRegistry


# ---------------------------------------------------------------------------
# Frame-building helpers
# ---------------------------------------------------------------------------


def rr_ms_to_raw(rr_ms: float) -> int:
    """Nearest 1/1024 s count for an RR interval in ms."""
    return int(round(rr_ms * 1024 / 1000))


def make_hr_frame(
    hr_bpm: int = 72,
    rr_ms: float | None = None,
    uint16: bool = False,
    contact: bool | None = None,
    energy_kj: int | None = None,
) -> bytes:
    """Build a Heart Rate Measurement (0x2A37) notification."""
    flags = 0
    if uint16:
        flags |= HR_FLAG_UINT16
    if contact is not None:
        flags |= HR_FLAG_CONTACT_SUPPORTED
        if contact:
            flags |= HR_FLAG_CONTACT_DETECTED
    if energy_kj is not None:
        flags |= HR_FLAG_ENERGY_PRESENT
    if rr_ms is not None:
        flags |= HR_FLAG_RR_PRESENT

    buf = bytearray([flags])
    buf += struct.pack("<H", hr_bpm) if uint16 else bytes([hr_bpm])
    if energy_kj is not None:
        buf += struct.pack("<H", energy_kj)
    if rr_ms is not None:
        buf += struct.pack("<H", rr_ms_to_raw(rr_ms))
    return bytes(buf)


def decoded_rr(rr_ms: float) -> float:
    """The RR value (ms) a frame built from ``rr_ms`` decodes to."""
    return rr_ms_to_raw(rr_ms) * 1000 / 1024


def make_pmd_header(measurement: int, timestamp: int = 0, frame_type: int = 0x00) -> bytes:
    return bytes([measurement]) + struct.pack("<Q", timestamp) + bytes([frame_type])


def make_ecg_frame(samples: list[int], timestamp: int = 0) -> bytes:
    """Build a PMD ECG frame: each sample is int16 LE plus one padding byte."""
    body = b"".join(struct.pack("<h", s) + b"\x00" for s in samples)
    return make_pmd_header(MeasurementType.ECG, timestamp) + body


def make_accel_frame(samples: list[tuple[int, int, int]], timestamp: int = 0) -> bytes:
    """Build an uncompressed PMD accelerometer frame."""
    body = b"".join(struct.pack("<hhh", *s) for s in samples)
    return make_pmd_header(MeasurementType.ACC, timestamp, ACC_FRAME_UNCOMPRESSED) + body


# ---------------------------------------------------------------------------
# Synthetic signals
# ---------------------------------------------------------------------------


def modulated_rr(
    freq_hz: float,
    n: int = 120,
    base_ms: float = 1000.0,
    amplitude_ms: float = 50.0,
) -> list[float]:
    """RR series whose intervals oscillate at ``freq_hz`` in beat time."""
    rr: list[float] = []
    t = 0.0
    for _ in range(n):
        value = base_ms + amplitude_ms * math.sin(2 * math.pi * freq_hz * t)
        rr.append(value)
        t += value / 1000.0
    return rr


def synthetic_ecg(
    n_samples: int,
    fs: float = 130.0,
    rr_ms: float = 800.0,
    first_r_ms: float = 200.0,
    t_delay_ms: float = 300.0,
) -> np.ndarray:
    """Noise-free ECG: narrow Gaussian R peaks followed by broad T waves."""
    t = np.arange(n_samples) / fs * 1000.0  # ms
    ecg = np.zeros(n_samples)
    r_time = first_r_ms
    while r_time < t[-1] + rr_ms:
        ecg += 1000.0 * np.exp(-((t - r_time) ** 2) / (2 * 10.0 ** 2))
        ecg += 300.0 * np.exp(-((t - r_time - t_delay_ms) ** 2) / (2 * 40.0 ** 2))
        r_time += rr_ms
    return ecg


# ---------------------------------------------------------------------------
# JSONL capture file helpers
# ---------------------------------------------------------------------------


def write_jsonl(path: Path, entries: list[dict | str]) -> Path:
    """Write dicts (as JSON) or raw strings as lines of a JSONL file."""
    with open(path, "w") as f:
        for entry in entries:
            line = entry if isinstance(entry, str) else json.dumps(entry)
            f.write(line + "\n")
    return path


def make_capture_entry(
    data: bytes,
    uuid: str = HR_MEASUREMENT_UUID,
    timestamp: str = "2024-02-13T12:00:00Z",
    hex_only: bool = False,
) -> dict:
    """Create a single JSONL capture entry."""
    import base64

    entry = {
        "timestamp": timestamp,
        "uuid": uuid,
        "hex_data": data.hex(),
        "length": len(data),
    }
    if not hex_only:
        entry["raw_bytes_b64"] = base64.b64encode(data).decode("ascii")
    return entry


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def device() -> SensorDevice:
    return SensorDevice()


@pytest.fixture
def registry(device) -> CalculatorRegistry:
    return CalculatorRegistry(device)
