"""CascadeCache Engine - Multi-Tier Cascade Orchestration.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from cascadecache_core.cache.entry import CacheEntry
from cascadecache_core.cascade.config import CascadeConfig
from cascadecache_core.cascade.tier import OutcomeStatus, Tier, TierOutcome, build_tiers
from cascadecache_core.metrics.sink import MetricsSink, NullMetricsSink
from cascadecache_core.store.registry import StoreRegistry

logger = logging.getLogger(__name__)


class CascadeEngine:
    """Orchestrates cache operations over an ordered list of tiers.

    Operation behavior:
    - read: walk tiers in order, first live entry wins, backfill the
      tiers that missed before it
    - read_many: tier 0 first, remaining tiers only for the keys it
      missed, backfill tier 0
    - write/delete/delete_matching/clear: fan out to every tier
    - increment/decrement: fan out, return the first tier's new value

    A failing tier never fails an operation. Its error is logged, counted
    and treated as a miss (reads) or a no-op (everything else). As a
    consequence a read against a cascade whose tiers all fail returns
    None, exactly like a genuine miss.

    Counters are not kept coherent between tiers: each tier increments its
    own copy and the caller sees the value of the first tier that had one.

    Example:
        engine = CascadeEngine(CascadeConfig(tiers=["memory", "redis"]))
        engine.write("user:1", {"name": "Ada"}, ttl=300)
        engine.read("user:1")
    """

    def __init__(
        self,
        config: CascadeConfig,
        metrics: Optional[MetricsSink] = None,
        registry: Optional[StoreRegistry] = None,
    ):
        """Initialize engine.

        Args:
            config: Cascade configuration
            metrics: Metrics sink, ignored when metrics are disabled
            registry: Store registry for named tiers

        Raises:
            ConfigurationError: Invalid tier configuration
        """
        self.config = config
        self.tiers: Tuple[Tier, ...] = build_tiers(config, registry)
        if config.enable_metrics and metrics is not None:
            self._metrics: MetricsSink = metrics
        else:
            self._metrics = NullMetricsSink()

        self._executor: Optional[ThreadPoolExecutor] = None
        self._executor_lock = threading.Lock()

        logger.info(f"Cascade built with tiers {[t.name for t in self.tiers]}")

    @property
    def metrics(self) -> MetricsSink:
        return self._metrics

    # Single-key read

    def read_entry(self, key: str) -> Optional[CacheEntry]:
        """Read the first live entry for a key, backfilling earlier tiers.

        Args:
            key: Cache key

        Returns:
            CacheEntry or None
        """
        missed: List[Tier] = []
        found: Optional[CacheEntry] = None
        source: Optional[Tier] = None

        for tier in self.tiers:
            outcome = tier.invoke("get", key)

            if outcome.is_fault:
                self._fault(tier, outcome)
                missed.append(tier)
                continue

            entry = outcome.value
            if entry is not None and entry.is_expired():
                self._settle(tier, tier.invoke("delete", key))
                entry = None

            if entry is None:
                self._observe(tier, "miss")
                missed.append(tier)
                continue

            self._observe(tier, "hit")
            found, source = entry, tier
            break

        if found is not None and missed:
            self._backfill(key, found, source, missed)

        return found

    def read(self, key: str) -> Any:
        """Read a value.

        Args:
            key: Cache key

        Returns:
            Cached value or None
        """
        entry = self.read_entry(key)
        return entry.value if entry is not None else None

    def _backfill(self, key: str, entry: CacheEntry, source: Tier, tiers: List[Tier]) -> None:
        def write(tier: Tier) -> TierOutcome:
            fresh = entry.fresh_copy(self._backfill_ttl(tier, entry), source=source.name)
            return tier.invoke("set", key, fresh)

        for tier, outcome in zip(tiers, self._fan_out(tiers, write)):
            if self._settle(tier, outcome) and outcome.value:
                self._observe(tier, "backfill")
                logger.debug(f"Backfilled {key!r} from {source.name!r} into {tier.name!r}")

    @staticmethod
    def _backfill_ttl(tier: Tier, entry: CacheEntry) -> Optional[float]:
        if tier.default_ttl is not None:
            return tier.default_ttl
        return entry.remaining_ttl

    # Batch read

    def read_many(self, keys: Iterable[str]) -> Dict[str, Any]:
        """Read several keys, merging results across tiers.

        Absent keys are left out of the result.

        Args:
            keys: Cache keys

        Returns:
            Dict of key -> value for keys found
        """
        keys = list(dict.fromkeys(keys))
        if not keys or not self.tiers:
            return {}

        first = self.tiers[0]
        found = self._batch_get(first, keys)
        missing = [k for k in keys if k not in found]
        result = {k: entry.value for k, entry in found.items()}
        if not missing:
            return result

        resolved: Dict[str, Tuple[CacheEntry, Tier]] = {}
        for tier in self.tiers[1:]:
            hits = self._batch_get(tier, missing)
            for key, entry in hits.items():
                resolved[key] = (entry, tier)
            missing = [k for k in missing if k not in hits]
            if not missing:
                break

        for key, (entry, tier) in resolved.items():
            result[key] = entry.value
            fresh = entry.fresh_copy(self._backfill_ttl(first, entry), source=tier.name)
            outcome = first.invoke("set", key, fresh)
            if self._settle(first, outcome) and outcome.value:
                self._observe(first, "backfill")

        return result

    def _batch_get(self, tier: Tier, keys: Sequence[str]) -> Dict[str, CacheEntry]:
        """Get live entries for keys from one tier."""
        entries: Dict[str, CacheEntry] = {}

        if tier.supports("batch_get"):
            outcome = tier.invoke("get_many", list(keys))
            if outcome.is_fault:
                self._fault(tier, outcome)
                return {}
            entries = dict(outcome.value or {})
        else:
            for key in keys:
                outcome = tier.invoke("get", key)
                if outcome.is_fault:
                    self._fault(tier, outcome)
                elif outcome.has_value:
                    entries[key] = outcome.value

        live = {}
        for key, entry in entries.items():
            if entry.is_expired():
                self._settle(tier, tier.invoke("delete", key))
            else:
                live[key] = entry

        if live:
            self._observe(tier, "hit", len(live))
        if len(keys) > len(live):
            self._observe(tier, "miss", len(keys) - len(live))
        return live

    # Fan-out operations

    def write(self, key: str, value: Any, ttl: Optional[float] = None) -> bool:
        """Write a value to every tier.

        Each tier gets its own entry, using ``ttl`` if given and the tier's
        default TTL otherwise.

        Args:
            key: Cache key
            value: Value to cache
            ttl: TTL in seconds

        Returns:
            True
        """
        def write(tier: Tier) -> TierOutcome:
            entry = CacheEntry(key=key, value=value, ttl_seconds=ttl if ttl is not None else tier.default_ttl)
            return tier.invoke("set", key, entry)

        self._broadcast(write)
        return True

    def delete(self, key: str) -> bool:
        """Delete a key from every tier.

        Returns:
            True
        """
        self._broadcast(lambda tier: tier.invoke("delete", key))
        return True

    def delete_matching(self, pattern: str) -> None:
        """Delete keys matching a glob pattern from every capable tier.

        Args:
            pattern: Glob pattern
        """
        self._broadcast(lambda tier: tier.invoke("delete_matching", pattern, capability="delete_matching"))

    def clear(self) -> int:
        """Clear every tier.

        Returns:
            Total entries cleared
        """
        outcomes = self._broadcast(lambda tier: tier.invoke("clear"))
        return sum(o.value for o in outcomes if o.has_value and isinstance(o.value, int))

    def increment(self, key: str, amount: int = 1) -> Optional[int]:
        """Increment a counter in every tier.

        Args:
            key: Cache key
            amount: Amount to add

        Returns:
            New value from the first tier that had the key, or None
        """
        return self._first_value(
            self._broadcast(lambda tier: tier.invoke("increment", key, amount, capability="counters"))
        )

    def decrement(self, key: str, amount: int = 1) -> Optional[int]:
        """Decrement a counter in every tier.

        Args:
            key: Cache key
            amount: Amount to subtract

        Returns:
            New value from the first tier that had the key, or None
        """
        return self._first_value(
            self._broadcast(lambda tier: tier.invoke("decrement", key, amount, capability="counters"))
        )

    @staticmethod
    def _first_value(outcomes: List[TierOutcome]) -> Optional[int]:
        for outcome in outcomes:
            if outcome.has_value:
                return outcome.value
        return None

    def _broadcast(self, call: Callable[[Tier], TierOutcome]) -> List[TierOutcome]:
        outcomes = self._fan_out(self.tiers, call)
        for tier, outcome in zip(self.tiers, outcomes):
            self._settle(tier, outcome)
        return outcomes

    def _fan_out(self, tiers: Sequence[Tier], call: Callable[[Tier], TierOutcome]) -> List[TierOutcome]:
        """Apply a call to each tier, returning outcomes in tier order."""
        if not self.config.parallel_fanout or len(tiers) < 2:
            return [call(tier) for tier in tiers]

        executor = self._ensure_executor()
        futures = [executor.submit(call, tier) for tier in tiers]
        return [future.result() for future in futures]

    def _ensure_executor(self) -> ThreadPoolExecutor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.config.max_workers or len(self.tiers),
                    thread_name_prefix="cascade-fanout",
                )
            return self._executor

    # Fault and metric bookkeeping

    def _settle(self, tier: Tier, outcome: TierOutcome) -> bool:
        """Account for an outcome; True unless it was a fault."""
        if outcome.is_fault:
            self._fault(tier, outcome)
            return False
        return outcome.status is not OutcomeStatus.UNSUPPORTED

    def _fault(self, tier: Tier, outcome: TierOutcome) -> None:
        logger.warning(f"Cache tier fault in {outcome.fault}")
        self._emit(tier, "error")

    def _observe(self, tier: Tier, event: str, count: int = 1) -> None:
        if event == "hit":
            tier.stats.hits += count
        elif event == "miss":
            tier.stats.misses += count
        elif event == "backfill":
            tier.stats.backfills += count
        self._emit(tier, event, count)

    def _emit(self, tier: Tier, event: str, count: int = 1) -> None:
        try:
            self._metrics.record(f"cascade.{tier.name}.{event}", count)
        except Exception as e:
            logger.debug(f"Metrics sink failed to record {event}: {e}")

    # Lifecycle

    def tier_stats(self) -> List[Dict[str, Any]]:
        """Get stats for each tier.

        Returns:
            List of tier stats
        """
        return [
            {
                "index": tier.index,
                "name": tier.name,
                "capabilities": tier.capabilities,
                "stats": tier.stats.to_dict(),
            }
            for tier in self.tiers
        ]

    def close(self) -> None:
        """Shut down the fan-out pool and close tier backends."""
        with self._executor_lock:
            if self._executor is not None:
                self._executor.shutdown(wait=True)
                self._executor = None

        for tier in self.tiers:
            if callable(getattr(tier.backend, "close", None)):
                self._settle(tier, tier.invoke("close"))

        logger.info("Cascade closed")

    def __repr__(self) -> str:
        return f"CascadeEngine(tiers={[t.name for t in self.tiers]})"


__all__ = ["CascadeEngine"]
