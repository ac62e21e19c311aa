"""Metrics module - Metrics sinks for cascade events."""

from cascadecache_core.metrics.sink import (
    MetricsSink,
    NullMetricsSink,
)
from cascadecache_core.metrics.collector import (
    MetricsCollector,
    MetricsSnapshot,
    TierMetrics,
)

__all__ = [
    "MetricsSink",
    "NullMetricsSink",
    "MetricsCollector",
    "MetricsSnapshot",
    "TierMetrics",
]
