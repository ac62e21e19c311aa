"""CascadeCache Metrics Sink - Fire-and-Forget Counter Interface.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class MetricsSink(ABC):
    """Receives named counter events from the cascade.

    Implementations must not block; the cascade additionally guards every
    call so a raising sink cannot fail a cache operation.
    """

    @abstractmethod
    def record(self, event_name: str, count: int = 1) -> None:
        """Record ``count`` occurrences of ``event_name``."""


class NullMetricsSink(MetricsSink):
    """Sink that discards every event."""

    def record(self, event_name: str, count: int = 1) -> None:
        pass

    def __repr__(self) -> str:
        return "NullMetricsSink()"


__all__ = ["MetricsSink", "NullMetricsSink"]
