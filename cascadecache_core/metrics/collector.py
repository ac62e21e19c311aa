"""CascadeCache Metrics Collector - In-Process Counter Sink.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import re
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from cascadecache_core.metrics.sink import MetricsSink

logger = logging.getLogger(__name__)

_PROMETHEUS_UNSAFE = re.compile(r"[^a-zA-Z0-9_]")


@dataclass
class TierMetrics:
    """Per-tier view over collected counters.

    Attributes:
        tier: Tier name
        hits: Read hits
        misses: Read misses
        errors: Tier faults
        backfills: Entries backfilled into the tier
    """

    tier: str
    hits: int = 0
    misses: int = 0
    errors: int = 0
    backfills: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate hit rate."""
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0


@dataclass
class MetricsSnapshot:
    """Point-in-time copy of all counters."""

    counters: Dict[str, int] = field(default_factory=dict)

    def get(self, event_name: str) -> int:
        return self.counters.get(event_name, 0)


class MetricsCollector(MetricsSink):
    """Collects named counters in memory.

    Features:
    - Thread-safe counters keyed by event name
    - Per-tier breakdown of ``cascade.<tier>.<event>`` counters
    - Exporter callbacks
    - Prometheus text export

    Example:
        collector = MetricsCollector()
        cache = CascadeCache(config, metrics=collector)
        cache.read("key")

        print(collector.tier_metrics("memory").hit_rate)
    """

    def __init__(self):
        self._counters: Dict[str, int] = defaultdict(int)
        self._lock = threading.Lock()
        self._exporters: List[Callable[[MetricsSnapshot], None]] = []

    def record(self, event_name: str, count: int = 1) -> None:
        """Record a counter event.

        Args:
            event_name: Event name
            count: Increment
        """
        with self._lock:
            self._counters[event_name] += count

    def get(self, event_name: str) -> int:
        """Get a counter value."""
        with self._lock:
            return self._counters.get(event_name, 0)

    def snapshot(self) -> MetricsSnapshot:
        """Copy all counters.

        Returns:
            MetricsSnapshot instance
        """
        with self._lock:
            return MetricsSnapshot(counters=dict(self._counters))

    def tier_metrics(self, tier: str) -> TierMetrics:
        """Collect the cascade counters of one tier.

        Args:
            tier: Tier name

        Returns:
            TierMetrics instance
        """
        prefix = f"cascade.{tier}."
        return TierMetrics(
            tier=tier,
            hits=self.get(f"{prefix}hit"),
            misses=self.get(f"{prefix}miss"),
            errors=self.get(f"{prefix}error"),
            backfills=self.get(f"{prefix}backfill"),
        )

    def reset(self) -> None:
        """Reset all counters."""
        with self._lock:
            self._counters.clear()

    def add_exporter(self, exporter: Callable[[MetricsSnapshot], None]) -> None:
        """Add metrics exporter.

        Args:
            exporter: Callback receiving a snapshot
        """
        self._exporters.append(exporter)

    def export(self) -> None:
        """Export a snapshot to all exporters."""
        snapshot = self.snapshot()
        for exporter in self._exporters:
            try:
                exporter(snapshot)
            except Exception as e:
                logger.error(f"Exporter error: {e}")

    def to_prometheus(self, prefix: Optional[str] = None) -> str:
        """Export counters in Prometheus text format.

        Args:
            prefix: Optional metric name prefix

        Returns:
            Prometheus-formatted metrics
        """
        lines = []
        for name, value in sorted(self.snapshot().counters.items()):
            metric = _PROMETHEUS_UNSAFE.sub("_", f"{prefix}_{name}" if prefix else name)
            lines.append(f"# TYPE {metric}_total counter")
            lines.append(f"{metric}_total {value}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        with self._lock:
            return f"MetricsCollector(counters={len(self._counters)})"


__all__ = ["MetricsCollector", "MetricsSnapshot", "TierMetrics"]
