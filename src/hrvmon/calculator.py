"""Per-metric calculator: binds a device stream to a buffer and a strategy.

Lifecycle::

    UNINITIALIZED --first subscribe--> ACTIVE --last detach--> DESTROYED

While active, every valid RR interval is buffered, the metric recomputed
over the most recent window, and the value published to subscribers and
written through to the session's :class:`MetricStore`. A window-size change
rebuilds both buffers from their raw history and recomputes once.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Sequence

from hrvmon.analytics import time_domain
from hrvmon.channel import Channel, Subscription
from hrvmon.config import DEFAULT_WINDOW_SIZE, validate_window_size
from hrvmon.errors import CalculatorDestroyedError, MissingCapabilityError
from hrvmon.history import IntervalBuffer
from hrvmon.metrics import Metric, definition
from hrvmon.protocol import is_valid_rr
from hrvmon.store import MetricStore
from hrvmon.strategies import Strategy

logger = logging.getLogger(__name__)


class CalculatorState(Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    DESTROYED = "destroyed"


class MetricCalculator:
    """Compute one metric from a device's RR stream.

    Args:
        metric: The metric this calculator owns in the store.
        device: Anything exposing ``observe_rr_interval()`` (and
            ``observe_ecg_samples()`` when the strategy needs ECG).
        strategy: Computation applied to the recent RR window.
        store: Session store receiving value, mean and stddev.
        window_size: Number of recent intervals per computation.
        on_destroyed: Called with the calculator once it is torn down.
    """

    def __init__(
        self,
        metric: Metric | str,
        device,
        strategy: Strategy | None,
        store: MetricStore,
        window_size: int = DEFAULT_WINDOW_SIZE,
        on_destroyed: Callable[[MetricCalculator], None] | None = None,
    ) -> None:
        self.metric = Metric(metric)
        if strategy is None:
            raise MissingCapabilityError(f"{self.metric.value}: no computation strategy")
        if device is None or not callable(getattr(device, "observe_rr_interval", None)):
            raise MissingCapabilityError(f"{self.metric.value}: device has no RR interval stream")
        if strategy.requires_ecg and not callable(getattr(device, "observe_ecg_samples", None)):
            raise MissingCapabilityError(f"{self.metric.value}: device has no ECG stream")

        defn = definition(self.metric)
        self.unit = defn.unit
        self.precision = defn.precision

        self.device = device
        self.strategy = strategy
        self.store = store
        self.window_size = validate_window_size(window_size)
        self.intervals = IntervalBuffer(self.window_size)
        self.values = IntervalBuffer(self.window_size)
        self.value = 0.0
        self.computations = 0
        self.state = CalculatorState.UNINITIALIZED

        self._channel: Channel[float] = Channel(on_idle=self.destroy)
        self._bindings: list[Subscription] = []
        self._on_destroyed = on_destroyed

    def __repr__(self) -> str:
        return (
            f"MetricCalculator({self.metric.value}, {self.state.value}, "
            f"subscribers={self.subscriber_count}, window={self.window_size})"
        )

    @property
    def subscriber_count(self) -> int:
        return self._channel.subscriber_count

    @property
    def is_active(self) -> bool:
        return self.state is CalculatorState.ACTIVE

    @property
    def low_confidence(self) -> bool:
        """True while the window is too short for a trustworthy spectral value."""
        return self.strategy.low_confidence(self.intervals.recent_window(self.window_size))

    # -- subscription -----------------------------------------------------

    def subscribe(
        self,
        callback: Callable[[float], None],
        on_complete: Callable[[], None] | None = None,
    ) -> Subscription:
        """Attach a consumer; the first one binds the device streams."""
        if self.state is CalculatorState.DESTROYED:
            raise CalculatorDestroyedError(f"{self.metric.value} calculator has been destroyed")
        sub = self._channel.attach(callback, on_complete)
        if self.state is CalculatorState.UNINITIALIZED:
            self._bind()
        return sub

    def _bind(self) -> None:
        self._bindings.append(self.device.observe_rr_interval().attach(self.handle))
        if self.strategy.requires_ecg:
            self._bindings.append(self.device.observe_ecg_samples().attach(self.handle_ecg))
        self.store.mark_live(self.metric)
        self.state = CalculatorState.ACTIVE
        logger.debug("%s: calculator bound (%r)", self.metric.value, self.strategy)

    def destroy(self) -> None:
        """Release stream bindings and complete the value channel.

        The last value stays in the store, marked stale; buffered history
        and strategy state are released.
        """
        if self.state is CalculatorState.DESTROYED:
            return
        for binding in self._bindings:
            binding.detach()
        self._bindings.clear()
        if self.state is CalculatorState.ACTIVE:
            self.store.mark_stale(self.metric)
        self.intervals.reset()
        self.values.reset()
        self.strategy.reset()
        self.state = CalculatorState.DESTROYED
        self._channel.complete()
        logger.debug("%s: calculator destroyed after %d computations", self.metric.value, self.computations)
        if self._on_destroyed is not None:
            self._on_destroyed(self)

    # -- events -----------------------------------------------------------

    def handle(self, rr_ms: float) -> None:
        """Process one RR interval (ms)."""
        if not self.is_active or self.subscriber_count == 0:
            return
        if not is_valid_rr(rr_ms):
            logger.debug("%s: dropped out-of-range RR %.1f ms", self.metric.value, rr_ms)
            return
        self.intervals.push(rr_ms)
        self.recompute()

    def handle_ecg(self, samples: Sequence[int]) -> None:
        if not self.is_active or self.subscriber_count == 0:
            return
        if self.strategy.handle_ecg(samples) and len(self.intervals) > 0:
            self.recompute()

    def recompute(self) -> float | None:
        window = self.intervals.recent_window(self.window_size)
        value = self.strategy.compute(window)
        if value is None:
            return None
        self.computations += 1
        self.value = value
        self.values.push(value)
        self.store.update(
            self.metric,
            value,
            time_domain.mean(self.values.raw_history()),
            time_domain.stddev(self.values.recent_window(self.window_size)),
            low_confidence=self.strategy.low_confidence(window),
        )
        self._channel.publish(value)
        return value

    def reconfigure(self, window_size: int) -> None:
        """Apply a new window size: rebuild history, then recompute."""
        self.window_size = validate_window_size(window_size)
        self.intervals.reconstruct(self.window_size)
        self.values.reconstruct(self.window_size)
        self.strategy.resize(self.window_size)
        if self.is_active and len(self.intervals) > 0:
            self.recompute()
