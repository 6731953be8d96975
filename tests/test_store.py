"""Tests for store.py -- per-session metric table."""

import dataclasses

import pytest

from hrvmon.metrics import Metric
from hrvmon.store import EntryStatus, MetricEntry, MetricStore


class TestDefaults:
    def test_every_metric_zero_initialised(self):
        store = MetricStore()
        for metric in Metric:
            assert store.entry(metric) == MetricEntry(0.0, 0.0, 0.0)
            assert store.status(metric) is EntryStatus.ABSENT

    def test_string_keys(self):
        store = MetricStore()
        store.update("rmssd", 41.0, 39.5, 2.0)
        assert store.get(Metric.RMSSD) == 41.0

    def test_unknown_key(self):
        with pytest.raises(ValueError):
            MetricStore().get("heartRate")


class TestUpdate:
    def test_accessors(self):
        store = MetricStore()
        store.update(Metric.SDNN, 52.1, 48.0, 3.2)
        assert store.get(Metric.SDNN) == 52.1
        assert store.get_mean(Metric.SDNN) == 48.0
        assert store.get_std_dev(Metric.SDNN) == 3.2
        assert not store.entry(Metric.SDNN).low_confidence

    def test_low_confidence_flag(self):
        store = MetricStore()
        store.update(Metric.HF_POWER, 120.0, 110.0, 8.0, low_confidence=True)
        assert store.entry(Metric.HF_POWER).low_confidence
        store.update(Metric.HF_POWER, 130.0, 115.0, 9.0)
        assert not store.entry(Metric.HF_POWER).low_confidence

    def test_entries_are_immutable_snapshots(self):
        store = MetricStore()
        store.update(Metric.SDNN, 50.0, 50.0, 0.0)
        before = store.entry(Metric.SDNN)
        store.update(Metric.SDNN, 60.0, 55.0, 5.0)
        assert before.value == 50.0
        with pytest.raises(dataclasses.FrozenInstanceError):
            before.value = 1.0

    def test_snapshot_is_a_copy(self):
        store = MetricStore()
        snap = store.snapshot()
        store.update(Metric.CV, 6.0, 6.0, 0.0)
        assert snap[Metric.CV].value == 0.0


class TestStatus:
    def test_lifecycle(self):
        store = MetricStore()
        store.mark_live(Metric.HF_POWER)
        assert store.status(Metric.HF_POWER) is EntryStatus.LIVE
        store.update(Metric.HF_POWER, 310.0, 300.0, 12.0)
        store.mark_stale(Metric.HF_POWER)
        assert store.status(Metric.HF_POWER) is EntryStatus.STALE
        assert store.get(Metric.HF_POWER) == 310.0

    def test_stale_without_write_is_absent(self):
        store = MetricStore()
        store.mark_live(Metric.QTC)
        store.mark_stale(Metric.QTC)
        assert store.status(Metric.QTC) is EntryStatus.ABSENT


class TestAuthoritativeValue:
    def test_non_zero_is_present(self):
        store = MetricStore()
        assert not store.is_authoritative_value_present(Metric.SDNN)
        store.update(Metric.SDNN, 45.0, 45.0, 0.0)
        assert store.is_authoritative_value_present(Metric.SDNN)

    def test_legitimate_zero_reads_absent(self):
        store = MetricStore()
        store.update(Metric.LF_HF_RATIO, 0.0, 0.0, 0.0)
        assert not store.is_authoritative_value_present(Metric.LF_HF_RATIO)
        assert store.status(Metric.LF_HF_RATIO) is EntryStatus.STALE
