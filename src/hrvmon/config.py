"""Session settings for the metric engine.

window_size: number of most recent RR intervals each metric is computed
    over. Lower values (20-30) respond faster but fluctuate more; higher
    values (60-120) are steadier. 30-60 is recommended for live use.
qtc_formula: heart-rate correction used for QTc. Fridericia (QT / cbrt(RR))
    depends less on heart rate than Bazett (QT / sqrt(RR)).
"""

from __future__ import annotations

from dataclasses import dataclass

from hrvmon.analytics.qt import QtcFormula

DEFAULT_WINDOW_SIZE = 60
HISTORY_FACTOR = 5  # raw history keeps this many windows


def validate_window_size(window_size: int) -> int:
    if isinstance(window_size, bool) or not isinstance(window_size, int):
        raise ValueError(f"window_size must be an integer, got {window_size!r}")
    if window_size < 1:
        raise ValueError(f"window_size must be positive, got {window_size}")
    return window_size


@dataclass
class Settings:
    window_size: int = DEFAULT_WINDOW_SIZE
    qtc_formula: QtcFormula = QtcFormula.FRIDERICIA

    def __post_init__(self) -> None:
        validate_window_size(self.window_size)
        self.qtc_formula = QtcFormula(self.qtc_formula)
