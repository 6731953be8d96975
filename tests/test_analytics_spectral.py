"""Tests for hrvmon.analytics.spectral -- band power of the RR spectrum."""

import numpy as np
import pytest

from hrvmon.analytics.spectral import (
    HF_BAND,
    LF_BAND,
    RESAMPLING_FS,
    TOTAL_BAND,
    VLF_BAND,
    _hann_window,
    band_power,
    is_low_confidence,
    lf_hf_ratio,
    lf_hf_ratio_from_powers,
    next_power_of_two,
    power_spectrum,
    resample_rr,
)

from tests.conftest import modulated_rr


class TestNextPowerOfTwo:
    @pytest.mark.parametrize("n, expected", [(1, 1), (2, 2), (3, 4), (240, 256), (256, 256), (257, 512)])
    def test_values(self, n, expected):
        assert next_power_of_two(n) == expected


class TestHannWindow:
    def test_symmetric_endpoints(self):
        w = _hann_window(16)
        assert w[0] == pytest.approx(0.0)
        assert w[-1] == pytest.approx(0.0)
        assert np.allclose(w, w[::-1])

    def test_cached_and_read_only(self):
        assert _hann_window(64) is _hann_window(64)
        with pytest.raises(ValueError):
            _hann_window(64)[0] = 1.0


class TestResample:
    def test_uniform_grid_length(self):
        # 10 intervals of 1 s -> 10 s of beat time at 4 Hz
        resampled = resample_rr([1000.0] * 10)
        assert len(resampled) == 40

    def test_constant_series_stays_constant(self):
        resampled = resample_rr([850.0] * 12)
        assert np.allclose(resampled, 850.0)

    def test_empty_input(self):
        assert len(resample_rr([])) == 0

    def test_non_positive_interval(self):
        assert len(resample_rr([800.0, 0.0, 810.0])) == 0


class TestPowerSpectrum:
    def test_too_few_intervals(self):
        assert power_spectrum([800.0] * 4) is None

    def test_resolution(self):
        # 120 s of beats -> 480 grid points -> 512-point FFT
        spectrum = power_spectrum([1000.0] * 120)
        assert spectrum.resolution == pytest.approx(RESAMPLING_FS / 512)
        assert len(spectrum.freqs) == 256
        assert len(spectrum.psd) == 256

    def test_psd_non_negative(self):
        spectrum = power_spectrum(modulated_rr(0.1))
        assert np.all(spectrum.psd >= 0)


class TestBandPower:
    def test_lf_dominant(self):
        rr = modulated_rr(0.1)
        lf = band_power(rr, LF_BAND)
        hf = band_power(rr, HF_BAND)
        assert lf > 10 * hf
        assert lf_hf_ratio(rr) > 10

    def test_hf_dominant(self):
        rr = modulated_rr(0.25)
        lf = band_power(rr, LF_BAND)
        hf = band_power(rr, HF_BAND)
        assert hf > 10 * lf
        assert lf_hf_ratio(rr) < 0.1

    def test_total_covers_bands(self):
        rr = modulated_rr(0.1)
        total = band_power(rr, TOTAL_BAND)
        parts = band_power(rr, VLF_BAND) + band_power(rr, LF_BAND) + band_power(rr, HF_BAND)
        assert total == pytest.approx(parts)

    def test_constant_series_has_no_power(self):
        assert band_power([800.0] * 60, TOTAL_BAND) == pytest.approx(0.0, abs=1e-6)

    def test_insufficient_data_is_zero(self):
        assert band_power([800.0, 810.0, 790.0, 805.0], LF_BAND) == 0.0
        assert lf_hf_ratio([800.0, 810.0]) == 0.0


class TestLfHfRatio:
    def test_zero_hf_guard(self):
        assert lf_hf_ratio_from_powers(120.0, 0.0) == 0.0

    def test_ratio(self):
        assert lf_hf_ratio_from_powers(300.0, 150.0) == pytest.approx(2.0)

    def test_constant_series_ratio_is_finite(self):
        assert np.isfinite(lf_hf_ratio([800.0] * 60))


class TestLowConfidence:
    def test_threshold(self):
        assert is_low_confidence([800.0] * 29)
        assert not is_low_confidence([800.0] * 30)
