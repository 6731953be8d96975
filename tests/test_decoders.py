"""Tests for the HR, ECG and accelerometer frame decoders."""

import struct

import pytest

from hrvmon.decoders import (
    AccelDecoder,
    AccelFrame,
    EcgDecoder,
    EcgFrame,
    HeartRateDecoder,
)
from hrvmon.protocol import MeasurementType

from tests.conftest import make_accel_frame, make_ecg_frame, make_hr_frame, make_pmd_header


# ===================================================================
# Heart Rate Measurement (0x2A37)
# ===================================================================


class TestHeartRateUint8:
    def test_basic_uint8_hr(self):
        """Flags=0x00 (uint8, no RR), HR=72."""
        m = HeartRateDecoder.decode(bytes([0x00, 72]))
        assert m.hr_bpm == 72
        assert m.rr_interval_ms is None
        assert m.energy_expended_kj is None

    def test_hr_max_uint8(self):
        assert HeartRateDecoder.decode(bytes([0x00, 255])).hr_bpm == 255


class TestHeartRateUint16:
    def test_basic_uint16_hr(self):
        data = bytes([0x01]) + struct.pack("<H", 300)
        assert HeartRateDecoder.decode(data).hr_bpm == 300

    def test_uint16_with_rr(self):
        data = make_hr_frame(hr_bpm=60, rr_ms=1000.0, uint16=True)
        m = HeartRateDecoder.decode(data)
        assert m.hr_bpm == 60
        assert m.rr_interval_ms == pytest.approx(1000.0)

    def test_truncated_uint16_is_rejected(self):
        assert HeartRateDecoder.decode(bytes([0x01, 72])) is None


class TestHeartRateRR:
    def test_rr_1024_units_is_one_second(self):
        """Flags=0x10, RR raw 1024 -> 1000 ms."""
        data = bytes([0x10, 60]) + struct.pack("<H", 1024)
        assert HeartRateDecoder.decode(data).rr_interval_ms == 1000.0

    def test_rr_conversion(self):
        data = bytes([0x10, 75]) + struct.pack("<H", 819)
        assert HeartRateDecoder.decode(data).rr_interval_ms == pytest.approx(819 * 1000 / 1024)

    def test_only_first_rr_is_read(self):
        data = bytes([0x10, 60]) + struct.pack("<HH", 1024, 512)
        assert HeartRateDecoder.decode(data).rr_interval_ms == 1000.0

    def test_truncated_rr_reads_as_absent(self):
        m = HeartRateDecoder.decode(bytes([0x10, 60, 0x04]))
        assert m is not None
        assert m.rr_interval_ms is None

    def test_energy_field_is_skipped(self):
        data = make_hr_frame(hr_bpm=80, rr_ms=750.0, energy_kj=1234)
        m = HeartRateDecoder.decode(data)
        assert m.energy_expended_kj == 1234
        assert m.rr_interval_ms == pytest.approx(round(750.0 * 1.024) * 1000 / 1024)

    def test_truncated_energy_is_rejected(self):
        assert HeartRateDecoder.decode(bytes([0x08, 72, 0x01])) is None

    def test_decode_rr_helper(self):
        assert HeartRateDecoder.decode_rr(bytes([0x10, 60]) + struct.pack("<H", 1024)) == 1000.0
        assert HeartRateDecoder.decode_rr(bytes([0x00, 60])) is None
        assert HeartRateDecoder.decode_rr(b"") is None


class TestHeartRateContact:
    def test_no_contact_support(self):
        assert HeartRateDecoder.decode(bytes([0x00, 72])).sensor_contact is None

    def test_contact_detected(self):
        assert HeartRateDecoder.decode(bytes([0x06, 72])).sensor_contact is True

    def test_contact_not_detected(self):
        assert HeartRateDecoder.decode(bytes([0x04, 72])).sensor_contact is False

    def test_detected_bit_without_support_is_ignored(self):
        assert HeartRateDecoder.decode(bytes([0x02, 72])).sensor_contact is None

    def test_strap_off_skin_with_rr(self):
        """Supported-but-not-detected frame, as sent by a loose strap."""
        frame = bytes([0x14, 0]) + struct.pack("<H", 820)
        hr = HeartRateDecoder.decode(frame)
        assert hr.sensor_contact is False
        assert hr.rr_interval_ms == pytest.approx(820 / 1024 * 1000)

    @pytest.mark.parametrize("contact", [True, False, None])
    def test_builder_round_trip(self, contact):
        assert HeartRateDecoder.decode(make_hr_frame(70, contact=contact)).sensor_contact is contact


class TestHeartRateMalformed:
    @pytest.mark.parametrize("data", [b"", b"\x10"])
    def test_short_frames(self, data):
        assert HeartRateDecoder.decode(data) is None


# ===================================================================
# ECG
# ===================================================================


class TestEcgDecoder:
    def test_example_frame(self):
        data = make_pmd_header(MeasurementType.ECG) + bytes([0x64, 0x00, 0xFF, 0x9C, 0xFF, 0xFF])
        frame = EcgDecoder.decode(data)
        assert isinstance(frame, EcgFrame)
        assert frame.samples == [100, -100]

    def test_timestamp_passthrough(self):
        frame = EcgDecoder.decode(make_ecg_frame([1, 2, 3], timestamp=599_000_000_123))
        assert frame.timestamp == 599_000_000_123
        assert frame.samples == [1, 2, 3]

    def test_trailing_partial_group(self):
        """Two trailing bytes are not enough for another 3-byte group."""
        data = make_ecg_frame([5]) + struct.pack("<h", 7)
        assert EcgDecoder.decode(data).samples == [5]

    def test_header_only(self):
        assert EcgDecoder.decode(make_pmd_header(MeasurementType.ECG)) is None

    def test_short_frame(self):
        assert EcgDecoder.decode(bytes([0x00, 0x01, 0x02])) is None

    def test_wrong_measurement_type(self):
        data = make_pmd_header(MeasurementType.ACC) + bytes(6)
        assert not EcgDecoder.can_decode(data)
        assert EcgDecoder.decode(data) is None


# ===================================================================
# Accelerometer
# ===================================================================


class TestAccelDecoder:
    def test_decode_triplets(self):
        frame = AccelDecoder.decode(make_accel_frame([(0, 0, 1000), (-3, 4, 0)], timestamp=42))
        assert isinstance(frame, AccelFrame)
        assert frame.timestamp == 42
        assert [(s.x, s.y, s.z) for s in frame.samples] == [(0, 0, 1000), (-3, 4, 0)]
        assert frame.samples[1].magnitude == pytest.approx(5.0)

    def test_partial_triplet_ignored(self):
        frame = AccelDecoder.decode(make_accel_frame([(1, 2, 3)]) + b"\x01\x00")
        assert len(frame.samples) == 1

    def test_compressed_frame_type_rejected(self):
        data = make_pmd_header(MeasurementType.ACC, frame_type=0x80) + bytes(6)
        assert not AccelDecoder.can_decode(data)
        assert AccelDecoder.decode(data) is None

    def test_empty_body(self):
        assert AccelDecoder.decode(make_accel_frame([])) is None
