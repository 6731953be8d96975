"""Shares one live calculator per metric between any number of consumers.

The registry is the entry point consumers use: ``subscribe(metric, cb)``
attaches to the running calculator for that metric, or builds and binds one
if none is live. Dropping the last subscription destroys the calculator and
removes it from the registry, so the next subscriber starts a fresh one.
"""

from __future__ import annotations

import logging
from typing import Callable

from hrvmon.analytics.qt import QtcFormula
from hrvmon.calculator import CalculatorState, MetricCalculator
from hrvmon.channel import Subscription
from hrvmon.config import Settings, validate_window_size
from hrvmon.metrics import Metric
from hrvmon.store import MetricStore
from hrvmon.strategies import QtcStrategy, build_strategy

logger = logging.getLogger(__name__)


class CalculatorRegistry:
    """Session-scoped table of live calculators, keyed by metric."""

    def __init__(
        self,
        device,
        store: MetricStore | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.device = device
        self.store = store if store is not None else MetricStore()
        self.settings = settings if settings is not None else Settings()
        self._calculators: dict[Metric, MetricCalculator] = {}

    def calculator(self, metric: Metric | str) -> MetricCalculator | None:
        return self._calculators.get(Metric(metric))

    def active_calculators(self) -> list[MetricCalculator]:
        return [c for c in self._calculators.values() if c.is_active]

    def subscribe(
        self,
        metric: Metric | str,
        callback: Callable[[float], None],
        on_complete: Callable[[], None] | None = None,
    ) -> Subscription:
        metric = Metric(metric)
        calc = self._calculators.get(metric)
        if calc is None or calc.state is CalculatorState.DESTROYED:
            calc = self._create(metric)
        else:
            logger.debug("%s: reusing live calculator (%d subscribers)", metric.value, calc.subscriber_count)
        return calc.subscribe(callback, on_complete)

    def _create(self, metric: Metric) -> MetricCalculator:
        logger.debug("%s: creating calculator (store status %s)", metric.value, self.store.status(metric).value)
        calc = MetricCalculator(
            metric,
            self.device,
            build_strategy(metric, self.settings.qtc_formula, self.settings.window_size),
            self.store,
            window_size=self.settings.window_size,
            on_destroyed=self._forget,
        )
        self._calculators[metric] = calc
        return calc

    def _forget(self, calc: MetricCalculator) -> None:
        if self._calculators.get(calc.metric) is calc:
            del self._calculators[calc.metric]

    def set_window_size(self, window_size: int) -> None:
        """Change the shared window size and rebuild every live calculator."""
        window_size = validate_window_size(window_size)
        if window_size == self.settings.window_size:
            return
        logger.debug("window size %d -> %d", self.settings.window_size, window_size)
        self.settings.window_size = window_size
        for calc in list(self._calculators.values()):
            calc.reconfigure(window_size)

    def set_qtc_formula(self, formula: QtcFormula | str) -> None:
        self.settings.qtc_formula = QtcFormula(formula)
        calc = self._calculators.get(Metric.QTC)
        if calc is not None and isinstance(calc.strategy, QtcStrategy):
            calc.strategy.formula = self.settings.qtc_formula
            if calc.is_active and len(calc.intervals) > 0:
                calc.recompute()

    def close(self) -> None:
        """Destroy every calculator; values remain in the store as stale."""
        for calc in list(self._calculators.values()):
            calc.destroy()
        self._calculators.clear()
