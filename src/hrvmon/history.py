"""Bounded rolling history with a segmented (chunked) view.

Values are kept twice:

- raw history: the most recent ``5 * window_size`` values, oldest evicted
  first;
- segmented history: sealed chunks of exactly ``window_size`` values plus
  the chunk currently being filled.

Changing the window size never patches the chunks in place. The raw history
is truncated to the new capacity and replayed from scratch, so the result
depends only on the raw values and the window size.
"""

from __future__ import annotations

from collections import deque

from hrvmon.config import DEFAULT_WINDOW_SIZE, HISTORY_FACTOR, validate_window_size


class IntervalBuffer:
    """Ring buffer of RR intervals (or metric values) with a recent-window view."""

    def __init__(self, window_size: int = DEFAULT_WINDOW_SIZE) -> None:
        self._window_size = validate_window_size(window_size)
        self._raw: deque[float] = deque(maxlen=self.capacity)
        self._chunks: deque[list[float]] = deque(maxlen=HISTORY_FACTOR)
        self._current: list[float] = []

    @property
    def window_size(self) -> int:
        return self._window_size

    @property
    def capacity(self) -> int:
        return self._window_size * HISTORY_FACTOR

    def __len__(self) -> int:
        return len(self._raw)

    def push(self, value: float) -> None:
        self._raw.append(value)
        self._current.append(value)
        if len(self._current) == self._window_size:
            self._chunks.append(self._current)
            self._current = []

    def raw_history(self) -> list[float]:
        return list(self._raw)

    def recent_window(self, n: int | None = None) -> list[float]:
        """Return the last ``n`` values (default: one window), oldest first."""
        if n is None:
            n = self._window_size
        if n <= 0:
            return []
        return list(self._raw)[-n:]

    def segmented_history(self) -> list[list[float]]:
        """Sealed chunks, each exactly ``window_size`` long."""
        return [list(chunk) for chunk in self._chunks]

    def current_chunk(self) -> list[float]:
        return list(self._current)

    def reconstruct(self, window_size: int) -> None:
        """Re-segment the raw history for a new window size."""
        self._window_size = validate_window_size(window_size)
        raw = list(self._raw)[-self.capacity:]

        self._raw = deque(raw, maxlen=self.capacity)
        self._chunks = deque(maxlen=HISTORY_FACTOR)
        self._current = []

        for start in range(0, len(raw), self._window_size):
            chunk = raw[start:start + self._window_size]
            if len(chunk) == self._window_size:
                self._chunks.append(chunk)
            else:
                self._current = chunk

    def reset(self) -> None:
        self._raw.clear()
        self._chunks.clear()
        self._current = []
