"""Computation strategies, one per metric, resolved from a static table.

A strategy turns the current RR window into a metric value. Time-domain and
spectral strategies are pure functions of the window. The QTc strategy also
consumes the ECG stream and keeps a QT tracker.
"""

from __future__ import annotations

from typing import Callable, Sequence

from hrvmon.analytics import spectral, time_domain
from hrvmon.analytics.qt import QtcFormula, QtIntervalTracker, qtc
from hrvmon.analytics.spectral import Band
from hrvmon.metrics import Metric
from hrvmon.protocol import ECG_SAMPLING_RATE


class Strategy:
    """Base strategy. ``compute`` returns None when there is nothing to publish."""

    requires_ecg = False

    def compute(self, window: Sequence[float]) -> float | None:
        raise NotImplementedError

    def handle_ecg(self, samples: Sequence[int]) -> bool:
        """Consume an ECG batch; return True when a recompute is due."""
        return False

    def low_confidence(self, window: Sequence[float]) -> bool:
        """True when the value for ``window`` is only a rough approximation."""
        return False

    def resize(self, window_size: int) -> None:
        pass

    def reset(self) -> None:
        """Drop any state kept between computations."""


class TimeDomainStrategy(Strategy):
    def __init__(self, func: Callable[[Sequence[float]], float]) -> None:
        self.func = func

    def compute(self, window: Sequence[float]) -> float:
        return self.func(window)

    def __repr__(self) -> str:
        return f"TimeDomainStrategy({self.func.__name__})"


class BandPowerStrategy(Strategy):
    def __init__(self, band: Band, fs: float = spectral.RESAMPLING_FS) -> None:
        self.band = band
        self.fs = fs

    def compute(self, window: Sequence[float]) -> float:
        return spectral.band_power(window, self.band, self.fs)

    def low_confidence(self, window: Sequence[float]) -> bool:
        return spectral.is_low_confidence(window)

    def __repr__(self) -> str:
        return f"BandPowerStrategy({self.band.low}-{self.band.high} Hz)"


class LfHfRatioStrategy(Strategy):
    def compute(self, window: Sequence[float]) -> float:
        return spectral.lf_hf_ratio(window)

    def low_confidence(self, window: Sequence[float]) -> bool:
        return spectral.is_low_confidence(window)


class QtcStrategy(Strategy):
    """QTc from the latest QT estimate and the latest RR interval."""

    requires_ecg = True

    def __init__(
        self,
        formula: QtcFormula | str = QtcFormula.FRIDERICIA,
        fs: float = ECG_SAMPLING_RATE,
        window_size: int = 60,
    ) -> None:
        self.formula = QtcFormula(formula)
        self.tracker = QtIntervalTracker(fs=fs, max_intervals=window_size)

    def compute(self, window: Sequence[float]) -> float | None:
        qt_ms = self.tracker.latest
        if qt_ms is None or len(window) == 0:
            return None
        return qtc(qt_ms, window[-1], self.formula)

    def handle_ecg(self, samples: Sequence[int]) -> bool:
        return self.tracker.add_samples(samples) is not None

    def resize(self, window_size: int) -> None:
        self.tracker.resize(window_size)

    def reset(self) -> None:
        self.tracker.reset()


TIME_DOMAIN_FUNCTIONS: dict[Metric, Callable[[Sequence[float]], float]] = {
    Metric.SDNN: time_domain.stddev,
    Metric.RMSSD: time_domain.rmssd,
    Metric.PNN50: time_domain.pnn50,
    Metric.CV: time_domain.cv,
    Metric.MXDMN: time_domain.mxdmn,
    Metric.AMO50: time_domain.amo50,
}

SPECTRAL_BANDS: dict[Metric, Band] = {
    Metric.TOTAL_POWER: spectral.TOTAL_BAND,
    Metric.VLF_POWER: spectral.VLF_BAND,
    Metric.LF_POWER: spectral.LF_BAND,
    Metric.HF_POWER: spectral.HF_BAND,
}


def build_strategy(
    metric: Metric | str,
    qtc_formula: QtcFormula | str = QtcFormula.FRIDERICIA,
    window_size: int = 60,
) -> Strategy:
    """Return a fresh strategy instance for ``metric``."""
    metric = Metric(metric)
    if metric in TIME_DOMAIN_FUNCTIONS:
        return TimeDomainStrategy(TIME_DOMAIN_FUNCTIONS[metric])
    if metric in SPECTRAL_BANDS:
        return BandPowerStrategy(SPECTRAL_BANDS[metric])
    if metric is Metric.LF_HF_RATIO:
        return LfHfRatioStrategy()
    if metric is Metric.QTC:
        return QtcStrategy(qtc_formula, window_size=window_size)
    raise ValueError(f"no strategy for metric {metric!r}")
