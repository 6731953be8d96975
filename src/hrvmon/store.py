"""Per-session table of the latest value, mean and stddev of each metric.

A store is built explicitly for each session and handed to the calculator
registry; there is no module-level instance. Each key is written only by
the live calculator for that metric, so no locking is involved. Readers get
immutable :class:`MetricEntry` snapshots.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from hrvmon.metrics import Metric


@dataclass(frozen=True)
class MetricEntry:
    value: float = 0.0
    mean: float = 0.0
    stddev: float = 0.0
    low_confidence: bool = False


class EntryStatus(Enum):
    """Whether a key has ever been written and whether a calculator owns it."""

    ABSENT = "absent"
    STALE = "stale"
    LIVE = "live"


class MetricStore:
    """Zero-initialised metric table for one session."""

    def __init__(self) -> None:
        self._entries: dict[Metric, MetricEntry] = {m: MetricEntry() for m in Metric}
        self._written: set[Metric] = set()
        self._live: set[Metric] = set()

    def entry(self, metric: Metric | str) -> MetricEntry:
        return self._entries[Metric(metric)]

    def get(self, metric: Metric | str) -> float:
        return self.entry(metric).value

    def get_mean(self, metric: Metric | str) -> float:
        return self.entry(metric).mean

    def get_std_dev(self, metric: Metric | str) -> float:
        return self.entry(metric).stddev

    def snapshot(self) -> dict[Metric, MetricEntry]:
        return dict(self._entries)

    def update(
        self,
        metric: Metric | str,
        value: float,
        mean: float,
        stddev: float,
        low_confidence: bool = False,
    ) -> None:
        metric = Metric(metric)
        self._entries[metric] = MetricEntry(float(value), float(mean), float(stddev), bool(low_confidence))
        self._written.add(metric)

    def is_authoritative_value_present(self, metric: Metric | str) -> bool:
        """Liveness heuristic: the key holds a non-zero value.

        A legitimately zero result (e.g. LF/HF with no HF power) reads as
        "absent", and a value left behind by a destroyed calculator reads as
        present. Use :meth:`status` when the distinction matters.
        """
        metric = Metric(metric)
        return metric in self._entries and self._entries[metric].value != 0

    def status(self, metric: Metric | str) -> EntryStatus:
        metric = Metric(metric)
        if metric in self._live:
            return EntryStatus.LIVE
        if metric in self._written:
            return EntryStatus.STALE
        return EntryStatus.ABSENT

    def mark_live(self, metric: Metric | str) -> None:
        self._live.add(Metric(metric))

    def mark_stale(self, metric: Metric | str) -> None:
        self._live.discard(Metric(metric))
