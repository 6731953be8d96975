"""Inbound boundary: raw notification frames in, decoded event channels out.

A :class:`SensorDevice` does not own a transport. Whatever delivers the
bytes (a live bleak connection, a capture replay, a test) calls
:meth:`SensorDevice.handle_heart_rate_frame` or
:meth:`SensorDevice.handle_pmd_frame`; the frame is decoded and the result
published on the matching channel. Malformed frames are dropped.
"""

from __future__ import annotations

import logging

from hrvmon.channel import Channel
from hrvmon.decoders.accel import AccelDecoder, AccelFrame
from hrvmon.decoders.ecg import EcgDecoder, EcgFrame
from hrvmon.decoders.hr import HeartRateDecoder, HeartRateMeasurement
from hrvmon.protocol import (
    ECG_SAMPLING_RATE,
    HR_MEASUREMENT_UUID,
    PMD_DATA_UUID,
)

logger = logging.getLogger(__name__)


class SensorDevice:
    """Decoded event streams of one chest-strap connection."""

    ecg_sampling_rate = ECG_SAMPLING_RATE

    def __init__(self, name: str = "H10") -> None:
        self.name = name
        self._heart_rate: Channel[HeartRateMeasurement] = Channel()
        self._rr: Channel[float] = Channel()
        self._ecg: Channel[list[int]] = Channel()
        self._ecg_frames: Channel[EcgFrame] = Channel()
        self._accel: Channel[AccelFrame] = Channel()
        self.frames_received = 0
        self.frames_dropped = 0

    # -- streams ----------------------------------------------------------

    def observe_heart_rate(self) -> Channel[HeartRateMeasurement]:
        return self._heart_rate

    def observe_rr_interval(self) -> Channel[float]:
        """RR intervals in ms; frames without RR produce nothing."""
        return self._rr

    def observe_ecg_samples(self) -> Channel[list[int]]:
        """Batches of int16 ECG samples at :attr:`ecg_sampling_rate`."""
        return self._ecg

    def observe_ecg_frames(self) -> Channel[EcgFrame]:
        return self._ecg_frames

    def observe_accelerometer(self) -> Channel[AccelFrame]:
        return self._accel

    # -- frame intake -----------------------------------------------------

    def handle_heart_rate_frame(self, data: bytes | bytearray) -> None:
        self.frames_received += 1
        measurement = HeartRateDecoder.decode(data)
        if measurement is None:
            self.frames_dropped += 1
            logger.debug("%s: dropped malformed HR frame %s", self.name, bytes(data).hex())
            return
        self._heart_rate.publish(measurement)
        if measurement.rr_interval_ms is not None:
            self._rr.publish(measurement.rr_interval_ms)

    def handle_pmd_frame(self, data: bytes | bytearray) -> None:
        self.frames_received += 1
        if EcgDecoder.can_decode(data):
            frame = EcgDecoder.decode(data)
            if frame is not None:
                self._ecg_frames.publish(frame)
                self._ecg.publish(frame.samples)
                return
        elif AccelDecoder.can_decode(data):
            accel = AccelDecoder.decode(data)
            if accel is not None:
                self._accel.publish(accel)
                return
        self.frames_dropped += 1
        logger.debug("%s: dropped unrecognised PMD frame %s", self.name, bytes(data[:12]).hex())

    def handle_notification(self, uuid: str, data: bytes | bytearray) -> bool:
        """Route a notification by characteristic UUID.

        Returns False when the UUID is not one this device consumes.
        """
        uuid = uuid.lower()
        if uuid == HR_MEASUREMENT_UUID:
            self.handle_heart_rate_frame(data)
        elif uuid == PMD_DATA_UUID:
            self.handle_pmd_frame(data)
        else:
            return False
        return True

    def close(self) -> None:
        """Complete every stream; subscribers see end-of-data."""
        for channel in (self._heart_rate, self._rr, self._ecg, self._ecg_frames, self._accel):
            channel.complete()
