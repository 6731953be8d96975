"""Decoders for Polar H10 heart-rate and PMD notification frames."""

from hrvmon.decoders.hr import HeartRateDecoder, HeartRateMeasurement
from hrvmon.decoders.ecg import EcgDecoder, EcgFrame
from hrvmon.decoders.accel import AccelDecoder, AccelFrame, AccelSample

__all__ = [
    "HeartRateDecoder",
    "HeartRateMeasurement",
    "EcgDecoder",
    "EcgFrame",
    "AccelDecoder",
    "AccelFrame",
    "AccelSample",
]
