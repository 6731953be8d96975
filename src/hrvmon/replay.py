"""Replay captured JSONL notification logs through a SensorDevice."""

from __future__ import annotations

import base64
import json
import logging
from pathlib import Path
from typing import Callable, Iterable

from hrvmon.config import Settings
from hrvmon.device import SensorDevice
from hrvmon.metrics import Metric
from hrvmon.protocol import hex_to_bytes
from hrvmon.registry import CalculatorRegistry
from hrvmon.store import MetricStore

logger = logging.getLogger(__name__)


def entry_bytes(entry: dict) -> bytes | None:
    """Extract the raw frame from a capture entry (base64 preferred)."""
    if "raw_bytes_b64" in entry:
        return base64.b64decode(entry["raw_bytes_b64"])
    if "hex_data" in entry:
        return hex_to_bytes(entry["hex_data"])
    return None


def replay_file(capture_path: str | Path, device: SensorDevice) -> dict[str, int]:
    """Feed every frame of a .jsonl capture into ``device``, in file order.

    Returns counters: ``total`` lines parsed, ``routed`` frames handed to the
    device, ``skipped`` entries with an unknown UUID or no payload.

    Raises:
        FileNotFoundError: if the capture does not exist.
    """
    path = Path(capture_path)
    if not path.exists():
        raise FileNotFoundError(f"capture not found: {capture_path}")

    stats = {"total": 0, "routed": 0, "skipped": 0}

    with open(path) as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue

            try:
                entry = json.loads(line)
            except json.JSONDecodeError:
                logger.debug("line %d: invalid JSON, skipping", line_num)
                continue

            stats["total"] += 1
            raw = entry_bytes(entry)
            if raw is None or not device.handle_notification(entry.get("uuid", ""), raw):
                stats["skipped"] += 1
                continue
            stats["routed"] += 1

    logger.debug("replayed %s: %s", path.name, stats)
    return stats


def replay_metrics(
    capture_path: str | Path,
    metrics: Iterable[Metric | str] | None = None,
    settings: Settings | None = None,
    on_value: Callable[[Metric, float], None] | None = None,
) -> tuple[MetricStore, dict[str, int]]:
    """Run the calculator layer over a capture, offline.

    Subscribes to every requested metric (all of them by default), replays
    the file and closes the registry. Returns the session store, whose
    entries are left stale, and the replay counters.
    """
    device = SensorDevice()
    registry = CalculatorRegistry(device, settings=settings)
    selected = [Metric(m) for m in metrics] if metrics else list(Metric)

    for metric in selected:
        if on_value is None:
            registry.subscribe(metric, lambda _v: None)
        else:
            registry.subscribe(metric, lambda v, m=metric: on_value(m, v))

    try:
        stats = replay_file(capture_path, device)
    finally:
        registry.close()
        device.close()
    return registry.store, stats
