"""Closed set of HRV metrics and their display definitions.

Each metric key maps to a static definition (name, unit, precision, normal
range). Nothing is derived from class names at runtime: code that needs a
metric goes through :class:`Metric`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Metric(str, Enum):
    """Metric keys, as used by the store and the calculator registry."""

    SDNN = "sdnn"
    RMSSD = "rmssd"
    PNN50 = "pnn50"
    CV = "cv"
    MXDMN = "mxdmn"
    AMO50 = "amo50"
    TOTAL_POWER = "totalPower"
    VLF_POWER = "vlfPower"
    LF_POWER = "lfPower"
    HF_POWER = "hfPower"
    LF_HF_RATIO = "lfhfRatio"
    QTC = "qtc"


class Domain(Enum):
    TIME = "time"
    FREQUENCY = "frequency"
    ECG = "ecg"


@dataclass(frozen=True)
class NormalRange:
    min: float
    max: float
    below_text: str = "Low"
    normal_text: str = "Normal"
    above_text: str = "High"


@dataclass(frozen=True)
class MetricDefinition:
    """Static description of a metric."""

    name: str
    description: str
    unit: str
    precision: int
    domain: Domain
    normal_range: NormalRange


METRIC_DEFINITIONS: dict[Metric, MetricDefinition] = {
    Metric.SDNN: MetricDefinition(
        "SDNN", "Standard Deviation of NN Intervals", "ms", 2, Domain.TIME,
        NormalRange(30, 70),
    ),
    Metric.RMSSD: MetricDefinition(
        "RMSSD", "Root Mean Square of Successive Differences", "ms", 2, Domain.TIME,
        NormalRange(20, 60),
    ),
    Metric.PNN50: MetricDefinition(
        "pNN50", "Percentage of NN intervals > 50ms", "%", 2, Domain.TIME,
        NormalRange(5, 25),
    ),
    Metric.CV: MetricDefinition(
        "CV", "Coefficient of Variation", "", 2, Domain.TIME,
        NormalRange(5.3, 7.8, below_text="Strained"),
    ),
    Metric.MXDMN: MetricDefinition(
        "MxDMn", "Difference between max and min NN intervals", "ms", 2, Domain.TIME,
        NormalRange(100, 300),
    ),
    Metric.AMO50: MetricDefinition(
        "AMo50", "Amplitude of the mode with 50ms intervals", "%", 2, Domain.TIME,
        NormalRange(20, 50, below_text="Low variability", above_text="High variability"),
    ),
    Metric.TOTAL_POWER: MetricDefinition(
        "Total Power", "Total power of frequency spectrum", "ms²", 0, Domain.FREQUENCY,
        NormalRange(2999, 7999, below_text="Very poor", above_text="Excellent"),
    ),
    Metric.VLF_POWER: MetricDefinition(
        "VLF Power", "Very Low Frequency power (Long-term Regulation)", "ms²", 0,
        Domain.FREQUENCY, NormalRange(300, 3000),
    ),
    Metric.LF_POWER: MetricDefinition(
        "LF Power", "Low Frequency power (Sympathetic and Parasympathetic)", "ms²", 0,
        Domain.FREQUENCY, NormalRange(500, 2500),
    ),
    Metric.HF_POWER: MetricDefinition(
        "HF Power", "High Frequency power (Parasympathetic)", "ms²", 0,
        Domain.FREQUENCY, NormalRange(100, 1000),
    ),
    Metric.LF_HF_RATIO: MetricDefinition(
        "LF/HF Ratio", "Ratio of Low to High Frequency power", "", 2, Domain.FREQUENCY,
        NormalRange(
            0.5, 2.5,
            below_text="Parasympathetic dominance",
            normal_text="Balanced",
            above_text="Sympathetic dominance",
        ),
    ),
    Metric.QTC: MetricDefinition(
        "QTc", "Corrected QT interval", "ms", 0, Domain.ECG,
        NormalRange(350, 450, below_text="Short", above_text="Prolonged"),
    ),
}


def definition(metric: Metric | str) -> MetricDefinition:
    return METRIC_DEFINITIONS[Metric(metric)]


def metric_status(metric: Metric | str, value: float) -> str:
    """Classify a value against the metric's normal range."""
    rng = definition(metric).normal_range
    if value < rng.min:
        return rng.below_text
    if value > rng.max:
        return rng.above_text
    return rng.normal_text


def format_value(metric: Metric | str, value: float) -> str:
    """Render a value with the metric's precision and unit, e.g. ``42.17 ms``."""
    defn = definition(metric)
    text = f"{value:.{defn.precision}f}"
    return f"{text} {defn.unit}" if defn.unit else text
