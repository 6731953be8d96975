"""Minimal synchronous publish/subscribe channel.

Values are delivered to every attached subscriber in attach order, on the
caller's thread, before :meth:`Channel.publish` returns. A subscriber
that raises is logged and skipped; the others still receive the value.
Detaching is immediate. A completed channel notifies its subscribers once
and then refuses new values and new subscribers.
"""

from __future__ import annotations

import logging
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Subscription:
    """Handle returned by :meth:`Channel.attach`; call :meth:`detach` to stop."""

    def __init__(self, channel: Channel, callback: Callable, on_complete: Callable[[], None] | None) -> None:
        self._channel = channel
        self.callback = callback
        self.on_complete = on_complete
        self.active = True

    def detach(self) -> None:
        if self.active:
            self.active = False
            self._channel._remove(self)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc) -> None:
        self.detach()


class Channel(Generic[T]):
    """Multicast channel with explicit attach/detach and completion.

    Args:
        on_idle: Called once the last subscriber detaches.
    """

    def __init__(self, on_idle: Callable[[], None] | None = None) -> None:
        self._subscriptions: list[Subscription] = []
        self._on_idle = on_idle
        self.closed = False

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def attach(
        self,
        callback: Callable[[T], None],
        on_complete: Callable[[], None] | None = None,
    ) -> Subscription:
        if self.closed:
            raise RuntimeError("cannot attach to a completed channel")
        sub = Subscription(self, callback, on_complete)
        self._subscriptions.append(sub)
        return sub

    def publish(self, value: T) -> None:
        if self.closed:
            return
        # Snapshot: callbacks may detach while we iterate
        for sub in list(self._subscriptions):
            if not sub.active:
                continue
            try:
                sub.callback(value)
            except Exception:
                logger.exception("subscriber %r failed on %r", sub.callback, value)

    def complete(self) -> None:
        if self.closed:
            return
        self.closed = True
        subs, self._subscriptions = self._subscriptions, []
        for sub in subs:
            sub.active = False
            if sub.on_complete is None:
                continue
            try:
                sub.on_complete()
            except Exception:
                logger.exception("completion handler %r failed", sub.on_complete)

    def _remove(self, sub: Subscription) -> None:
        if sub in self._subscriptions:
            self._subscriptions.remove(sub)
            if not self._subscriptions and self._on_idle is not None:
                self._on_idle()
