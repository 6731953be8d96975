"""Frequency-domain HRV: band power of the RR-interval spectrum.

RR intervals arrive at irregular times (one per beat), so the series is
first put on a uniform clock before the FFT:

1. Build the cumulative beat-time axis (seconds) from the intervals.
2. Resample with a natural cubic spline onto a 4 Hz grid.
3. Remove the DC component (zero-order detrend).
4. Apply a Hann window and zero-pad to the next power of two.
5. One-sided periodogram, scaled to ms²/Hz.
6. Integrate the PSD over the requested [low, high) band.

Fewer than 5 intervals give 0 power. Between 5 and ~30 intervals the
frequency resolution is too coarse to trust; the numbers are still produced
but should be read as a rough approximation.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import NamedTuple, Sequence

import numpy as np
from scipy.interpolate import CubicSpline

RESAMPLING_FS = 4.0  # Hz
MIN_INTERVALS = 5
LOW_CONFIDENCE_INTERVALS = 30


class Band(NamedTuple):
    """Half-open frequency band [low, high) in Hz."""

    low: float
    high: float


VLF_BAND = Band(0.003, 0.04)
LF_BAND = Band(0.04, 0.15)
HF_BAND = Band(0.15, 0.40)
TOTAL_BAND = Band(0.003, 0.40)


@dataclass
class Spectrum:
    """One-sided power spectral density of an RR series."""

    freqs: np.ndarray
    psd: np.ndarray  # ms²/Hz
    resolution: float  # Hz per bin

    def band_power(self, band: Band) -> float:
        """Integrate the PSD over ``band.low <= f < band.high`` (ms²)."""
        mask = (self.freqs >= band.low) & (self.freqs < band.high)
        return float(np.sum(self.psd[mask]) * self.resolution)


def next_power_of_two(n: int) -> int:
    if n <= 1:
        return 1
    return 1 << (n - 1).bit_length()


@functools.lru_cache(maxsize=32)
def _hann_window(n: int) -> np.ndarray:
    # Symmetric Hann: 0.5 * (1 - cos(2*pi*i / (n - 1)))
    window = np.hanning(n)
    window.flags.writeable = False
    return window


def resample_rr(
    rr_intervals_ms: Sequence[float],
    fs: float = RESAMPLING_FS,
) -> np.ndarray:
    """Cubic-spline resample an RR series onto a uniform grid.

    The spline knots sit at the cumulative beat times ``[0, t1, ..., tn]``
    carrying ``[rr0, rr0, rr1, ..., rr(n-1)]``. The grid starts a hundredth
    of a step after zero and runs through the last beat time inclusive.

    Returns an empty array when the series cannot be resampled.
    """
    rr = np.asarray(rr_intervals_ms, dtype=np.float64)
    if len(rr) == 0 or np.any(rr <= 0):
        return np.empty(0)

    t_knots = np.concatenate(([0.0], np.cumsum(rr / 1000.0)))
    v_knots = np.concatenate(([rr[0]], rr))

    step = 1.0 / fs
    t_start = t_knots[0] + step / 100.0
    t_end = t_knots[-1]
    if t_end < t_start:
        return np.empty(0)

    n_grid = int(np.floor((t_end - t_start) / step)) + 1
    t_grid = t_start + np.arange(n_grid) * step

    spline = CubicSpline(t_knots, v_knots, bc_type="natural")
    return spline(t_grid)


def power_spectrum(
    rr_intervals_ms: Sequence[float],
    fs: float = RESAMPLING_FS,
) -> Spectrum | None:
    """Compute the windowed one-sided PSD of an RR series.

    Returns None when there are fewer than 5 intervals or the resampled
    grid holds fewer than 2 points.
    """
    if len(rr_intervals_ms) < MIN_INTERVALS:
        return None

    resampled = resample_rr(rr_intervals_ms, fs)
    n = len(resampled)
    if n < 2:
        return None

    detrended = resampled - np.mean(resampled)

    window = _hann_window(n)
    window_energy = float(np.sum(window ** 2))
    if window_energy == 0:
        return None

    n_fft = next_power_of_two(n)
    padded = np.zeros(n_fft)
    padded[:n] = detrended * window

    spectrum = np.fft.rfft(padded)[: n_fft // 2]
    psd = (spectrum.real ** 2 + spectrum.imag ** 2) / (fs * window_energy)
    psd[1:] *= 2.0

    resolution = fs / n_fft
    freqs = np.arange(n_fft // 2) * resolution
    return Spectrum(freqs=freqs, psd=psd, resolution=resolution)


def band_power(
    rr_intervals_ms: Sequence[float],
    band: Band,
    fs: float = RESAMPLING_FS,
) -> float:
    """Power (ms²) of the RR spectrum inside ``band``; 0 on insufficient data."""
    spectrum = power_spectrum(rr_intervals_ms, fs)
    if spectrum is None:
        return 0.0
    return spectrum.band_power(band)


def lf_hf_ratio_from_powers(lf_power: float, hf_power: float) -> float:
    """LF/HF ratio guarded against a zero HF denominator."""
    if hf_power == 0:
        return 0.0
    return lf_power / hf_power


def lf_hf_ratio(rr_intervals_ms: Sequence[float], fs: float = RESAMPLING_FS) -> float:
    """Sympathovagal balance, LF power over HF power of one spectrum."""
    spectrum = power_spectrum(rr_intervals_ms, fs)
    if spectrum is None:
        return 0.0
    return lf_hf_ratio_from_powers(
        spectrum.band_power(LF_BAND),
        spectrum.band_power(HF_BAND),
    )


def is_low_confidence(rr_intervals_ms: Sequence[float]) -> bool:
    """True when the window is too short for a trustworthy spectrum."""
    return len(rr_intervals_ms) < LOW_CONFIDENCE_INTERVALS
