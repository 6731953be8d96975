"""HRV analytics over RR-interval windows and raw ECG.

Modules:
    time_domain -- SDNN, RMSSD, pNN50, CV, MxDMn, AMo50
    spectral    -- Spline resampling, Hann-windowed PSD, VLF/LF/HF band power
    qt          -- QT interval estimation from ECG, Bazett/Fridericia QTc
"""

from hrvmon.analytics.time_domain import (
    mean,
    stddev,
    rmssd,
    pnn50,
    cv,
    mxdmn,
    amo50,
)
from hrvmon.analytics.spectral import (
    Band,
    Spectrum,
    VLF_BAND,
    LF_BAND,
    HF_BAND,
    TOTAL_BAND,
    band_power,
    lf_hf_ratio,
    power_spectrum,
    resample_rr,
)
from hrvmon.analytics.qt import (
    QtcFormula,
    QtIntervalTracker,
    estimate_qt_interval,
    qtc,
)

__all__ = [
    # time_domain
    "mean",
    "stddev",
    "rmssd",
    "pnn50",
    "cv",
    "mxdmn",
    "amo50",
    # spectral
    "Band",
    "Spectrum",
    "VLF_BAND",
    "LF_BAND",
    "HF_BAND",
    "TOTAL_BAND",
    "band_power",
    "lf_hf_ratio",
    "power_spectrum",
    "resample_rr",
    # qt
    "QtcFormula",
    "QtIntervalTracker",
    "estimate_qt_interval",
    "qtc",
]
