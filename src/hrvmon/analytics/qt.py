"""QT interval estimation from raw single-lead ECG and QTc correction.

The estimator works on a short rolling buffer of samples (a few seconds)
and measures the most recent beat that has a complete T wave behind it:

1. R peaks via ``scipy.signal.find_peaks`` above half the buffer's
   amplitude range, with a 300 ms refractory distance.
2. Baseline: median of the 200-100 ms window before R.
3. Q onset: last sample at or below baseline within 60 ms before R.
4. T end: tangent method. The steepest down-slope after the T peak
   (searched 160-550 ms after R) is extended to the baseline.

QT = Q onset -> T end. QTc divides QT by a power of the RR interval in
seconds: square root for Bazett, cube root for Fridericia.
"""

from __future__ import annotations

from collections import deque
from enum import Enum
from typing import Sequence

import numpy as np
from scipy import signal as sig

from hrvmon.protocol import ECG_SAMPLING_RATE

REFRACTORY_SEC = 0.3
BASELINE_WINDOW_MS = (200, 100)  # before R
Q_SEARCH_MS = 60
T_WINDOW_MS = (160, 550)  # after R

# Plausible QT range (ms); estimates outside are discarded
QT_MIN_MS = 200.0
QT_MAX_MS = 700.0

BUFFER_SECONDS = 4.0


class QtcFormula(str, Enum):
    """Heart-rate correction formula for the QT interval."""

    BAZETT = "bazett"
    FRIDERICIA = "fridericia"


def qtc(qt_ms: float, rr_ms: float, formula: QtcFormula | str = QtcFormula.FRIDERICIA) -> float:
    """Correct a QT interval for heart rate.

    Returns 0.0 when the RR interval is not positive.
    """
    if rr_ms <= 0:
        return 0.0
    rr_sec = rr_ms / 1000.0
    if QtcFormula(formula) is QtcFormula.BAZETT:
        return float(qt_ms / np.sqrt(rr_sec))
    return float(qt_ms / np.cbrt(rr_sec))


def _samples(ms: float, fs: float) -> int:
    return int(ms * fs / 1000)


def estimate_qt_interval(
    ecg: Sequence[float],
    fs: float = ECG_SAMPLING_RATE,
) -> float | None:
    """Estimate the QT interval (ms) of the latest complete beat in ``ecg``.

    Returns None when no beat with a full pre-R baseline and T window is
    present, or when the estimate falls outside the plausible range.
    """
    beat = _latest_beat(ecg, fs)
    return beat[1] if beat is not None else None


def _latest_beat(ecg: Sequence[float], fs: float) -> tuple[int, float] | None:
    """(R index, QT ms) of the latest complete beat in ``ecg``."""
    data = np.asarray(ecg, dtype=np.float64)
    n = len(data)
    if n < int(2 * fs):
        return None

    level = np.median(data)
    peak_height = level + 0.5 * (np.max(data) - level)
    if peak_height <= level:
        return None

    peaks, _ = sig.find_peaks(data, height=peak_height, distance=max(1, int(REFRACTORY_SEC * fs)))

    pre = _samples(BASELINE_WINDOW_MS[0], fs)
    t_start = _samples(T_WINDOW_MS[0], fs)
    t_stop = _samples(T_WINDOW_MS[1], fs)
    complete = [int(r) for r in peaks if r - pre >= 0 and r + t_stop < n]
    if not complete:
        return None
    r = complete[-1]

    baseline = float(np.median(data[r - pre:r - _samples(BASELINE_WINDOW_MS[1], fs)]))

    # Q onset
    q_search = _samples(Q_SEARCH_MS, fs)
    pre_r = data[r - q_search:r]
    below = np.where(pre_r <= baseline)[0]
    q_offset = q_search - int(below[-1]) if len(below) > 0 else 0

    # T end via tangent
    t_seg = data[r + t_start:r + t_stop]
    t_peak = int(np.argmax(t_seg))
    t_end = float(t_peak)
    post = t_seg[t_peak:]
    slopes = np.diff(post)
    if len(slopes) > 2:
        steepest = int(np.argmin(slopes))
        slope = slopes[steepest]
        if slope < 0:
            dx = (baseline - post[steepest]) / slope
            t_end = t_peak + steepest + max(0.0, dx)

    qt_ms = (q_offset + t_start + t_end) / fs * 1000.0
    if not QT_MIN_MS <= qt_ms <= QT_MAX_MS:
        return None
    return r, qt_ms


class QtIntervalTracker:
    """Rolling ECG buffer producing one QT estimate per new beat.

    Batches that do not complete a new beat leave the history untouched.
    """

    def __init__(self, fs: float = ECG_SAMPLING_RATE, max_intervals: int = 60) -> None:
        self.fs = fs
        self._ecg: deque[float] = deque(maxlen=int(BUFFER_SECONDS * fs))
        self.qt_intervals: deque[float] = deque(maxlen=max_intervals)
        self._received = 0
        self._last_r: int | None = None

    @property
    def latest(self) -> float | None:
        return self.qt_intervals[-1] if self.qt_intervals else None

    def add_samples(self, samples: Sequence[int]) -> float | None:
        """Append ECG samples; return the new QT estimate, if any."""
        self._ecg.extend(samples)
        self._received += len(samples)
        if len(self._ecg) < self._ecg.maxlen:
            return None
        beat = _latest_beat(list(self._ecg), self.fs)
        if beat is None:
            return None
        r, qt_ms = beat
        # absolute sample index of the R peak
        r_abs = self._received - len(self._ecg) + r
        if r_abs == self._last_r:
            return None
        self._last_r = r_abs
        self.qt_intervals.append(qt_ms)
        return qt_ms

    def resize(self, max_intervals: int) -> None:
        self.qt_intervals = deque(self.qt_intervals, maxlen=max_intervals)

    def reset(self) -> None:
        self._ecg.clear()
        self.qt_intervals.clear()
        self._received = 0
        self._last_r = None
