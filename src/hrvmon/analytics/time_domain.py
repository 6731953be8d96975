"""Time-domain HRV statistics over a window of RR intervals (ms).

Every function here is total: short or degenerate input yields 0.0, never
None, NaN or an exception, so results can be published as-is.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

# pNN50 threshold and AMo50 histogram bin width (ms)
NN50_THRESHOLD_MS = 50.0
AMO_BIN_MS = 50.0


def mean(samples: Sequence[float]) -> float:
    """Arithmetic mean; 0 for an empty window."""
    if len(samples) == 0:
        return 0.0
    return float(np.mean(np.asarray(samples, dtype=np.float64)))


def stddev(samples: Sequence[float]) -> float:
    """Population standard deviation (divisor n), used as SDNN."""
    if len(samples) < 2:
        return 0.0
    return float(np.std(np.asarray(samples, dtype=np.float64), ddof=0))


def rmssd(samples: Sequence[float]) -> float:
    """Root mean square of successive differences."""
    if len(samples) < 2:
        return 0.0
    diffs = np.diff(np.asarray(samples, dtype=np.float64))
    return float(np.sqrt(np.mean(diffs ** 2)))


def pnn50(samples: Sequence[float]) -> float:
    """Percentage of successive differences larger than 50 ms."""
    if len(samples) < 2:
        return 0.0
    diffs = np.abs(np.diff(np.asarray(samples, dtype=np.float64)))
    return float(np.sum(diffs > NN50_THRESHOLD_MS) / len(diffs) * 100.0)


def cv(samples: Sequence[float]) -> float:
    """Coefficient of variation, 100 * stddev / mean."""
    if len(samples) < 2:
        return 0.0
    mean_val = mean(samples)
    if mean_val == 0:
        return 0.0
    return stddev(samples) / mean_val * 100.0


def mxdmn(samples: Sequence[float]) -> float:
    """Variation range: longest minus shortest interval."""
    if len(samples) < 2:
        return 0.0
    arr = np.asarray(samples, dtype=np.float64)
    return float(np.max(arr) - np.min(arr))


def amo50(samples: Sequence[float]) -> float:
    """Amplitude of the mode with 50 ms bins.

    Intervals are binned at floor(v / 50) * 50; the result is the share of
    intervals falling into the fullest bin, in percent. When two bins tie,
    the one encountered first in the window wins.
    """
    if len(samples) < 2:
        return 0.0

    bins: dict[float, int] = {}
    for rr in samples:
        key = float(np.floor(rr / AMO_BIN_MS) * AMO_BIN_MS)
        bins[key] = bins.get(key, 0) + 1

    mode_count = 0
    for count in bins.values():
        if count > mode_count:
            mode_count = count

    return mode_count / len(samples) * 100.0
