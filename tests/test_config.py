"""Tests for cascade configuration and tier construction.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import pytest

from cascadecache_core.cache.cache import CascadeCache
from cascadecache_core.cascade.config import CascadeConfig, TierOptions, TierSpec
from cascadecache_core.cascade.tier import OutcomeStatus, Tier, build_tiers
from cascadecache_core.errors import ConfigurationError
from cascadecache_core.store.backend import StoreCapabilities
from cascadecache_core.store.memory import MemoryStore
from cascadecache_core.store.registry import StoreRegistry, lookup_store

from conftest import FailingStore, PlainStore


class TestCascadeConfig:
    """Tests for CascadeConfig."""

    def test_specs_are_coerced(self):
        """Test names, pairs and adapters become TierSpecs."""
        store = MemoryStore()
        config = CascadeConfig(tiers=["memory", ("redis", {"expires_in": 5, "prefix": "x:"}), store])

        assert all(isinstance(s, TierSpec) for s in config.tiers)
        assert config.tiers[0].options is None
        assert config.tiers[1].options == TierOptions(default_ttl=5, store_options={"prefix": "x:"})
        assert config.tiers[2].store is store

    def test_tiers_are_immutable(self):
        """Test the tier list cannot change after construction."""
        config = CascadeConfig(tiers=["memory"])
        assert isinstance(config.tiers, tuple)
        with pytest.raises(AttributeError):
            config.tiers = ()

    def test_shared_options_used_without_override(self):
        """Test tiers without options use the shared defaults."""
        config = CascadeConfig(tiers=["memory"], default_ttl=60, store_options={"max_size": 5})
        options = config.resolve_options(config.tiers[0])

        assert options.default_ttl == 60
        assert options.store_options == {"max_size": 5}

    def test_override_replaces_shared_options(self):
        """Test tier options are used unchanged."""
        config = CascadeConfig(tiers=[TierSpec("memory", TierOptions(default_ttl=5))], default_ttl=60)
        assert config.resolve_options(config.tiers[0]).default_ttl == 5

    @pytest.mark.parametrize("ttl", [0, -1])
    def test_invalid_ttl(self, ttl):
        """Test non-positive TTLs are rejected."""
        with pytest.raises(ConfigurationError):
            CascadeConfig(default_ttl=ttl)

    def test_invalid_max_workers(self):
        """Test the pool needs a worker."""
        with pytest.raises(ConfigurationError):
            CascadeConfig(max_workers=0)

    def test_malformed_pair(self):
        """Test pair specs need a store name."""
        with pytest.raises(ConfigurationError):
            CascadeConfig(tiers=[("memory",)])

    def test_race_condition_ttl(self):
        """Test the unsupported option is rejected everywhere."""
        with pytest.raises(ConfigurationError):
            CascadeConfig(race_condition_ttl=1)
        with pytest.raises(ConfigurationError):
            CascadeConfig.from_options({"race_condition_ttl": None})
        with pytest.raises(ConfigurationError):
            CascadeConfig(tiers=[("memory", {"race_condition_ttl": 1})])

    def test_race_condition_ttl_checked_before_stores_built(self):
        """Test no store is constructed for a rejected config."""
        built = []
        registry = StoreRegistry()
        registry.register("probe", lambda options: built.append(options) or MemoryStore())

        with pytest.raises(ConfigurationError):
            config = CascadeConfig.from_options({"stores": ["probe"], "race_condition_ttl": 10})
            build_tiers(config, registry)
        assert built == []


class TestFromOptions:
    """Tests for the legacy option mapping."""

    def test_full_mapping(self):
        """Test every recognised key."""
        config = CascadeConfig.from_options({
            "stores": ["memory", ("memory", {"expires_in": 30})],
            "expires_in": 60,
            "namespace": "app",
            "fire_custom_metrics": True,
            "parallel_fanout": True,
            "max_workers": 4,
            "max_size": 100,
        })

        assert config.default_ttl == 60
        assert config.namespace == "app"
        assert config.enable_metrics is True
        assert config.parallel_fanout is True
        assert config.max_workers == 4
        assert config.store_options == {"max_size": 100}
        assert config.tiers[1].options.default_ttl == 30

    def test_defaults(self):
        """Test an empty mapping."""
        config = CascadeConfig.from_options(None)

        assert config.tiers == ()
        assert config.enable_metrics is False
        assert config.default_ttl is None

    def test_metrics_default_differs_from_direct_construction(self):
        """Test the flat mapping keeps metrics off unless asked."""
        assert CascadeConfig().enable_metrics is True
        assert CascadeConfig.from_options({"stores": ["memory"]}).enable_metrics is False
        assert CascadeConfig.from_options({"fire_custom_metrics": True}).enable_metrics is True

    def test_shared_store_options_reach_stores(self):
        """Test shared store options are applied to default tiers."""
        config = CascadeConfig.from_options({"stores": ["memory"], "max_size": 3})
        tiers = build_tiers(config)

        assert tiers[0].backend.config.max_size == 3


class TestLocalRedis:
    """Tests for the memory + Redis preset."""

    def test_layering(self):
        """Test tier options are layered over shared ones."""
        fakeredis = pytest.importorskip("fakeredis")
        config = CascadeConfig.local_redis(
            local={"expires_in": 30, "max_size": 10},
            redis={"client": fakeredis.FakeRedis(), "prefix": "app:"},
            expires_in=300,
            fire_custom_metrics=True,
        )
        tiers = build_tiers(config)

        assert [t.name for t in tiers] == ["local", "redis"]
        assert tiers[0].default_ttl == 30
        assert tiers[0].backend.config.max_size == 10
        assert tiers[1].default_ttl == 300
        assert tiers[1].backend.config.prefix == "app:"
        assert config.enable_metrics is True


class TestBuildTiers:
    """Tests for tier construction."""

    def test_unknown_store(self):
        """Test unknown store names fail construction."""
        with pytest.raises(ConfigurationError, match="Unknown cache store"):
            build_tiers(CascadeConfig(tiers=["nope"]))

    def test_bad_store_options(self):
        """Test invalid store options fail construction."""
        with pytest.raises(ConfigurationError, match="Invalid options"):
            build_tiers(CascadeConfig(tiers=[("memory", {"colour": "blue"})]))

    def test_names_and_indexes(self):
        """Test tier naming."""
        tiers = build_tiers(CascadeConfig(tiers=[
            "memory",
            TierSpec(MemoryStore(), name="hot"),
            PlainStore(),
            "memory",
        ]))

        assert [t.name for t in tiers] == ["memory", "hot", "tier2", "memory3"]
        assert [t.index for t in tiers] == [0, 1, 2, 3]

    def test_generated_names_skip_taken_ones(self):
        """Test a suffixed name never collides with an explicit one."""
        tiers = build_tiers(CascadeConfig(tiers=[
            "memory",
            TierSpec(MemoryStore(), name="memory2"),
            "memory",
        ]))
        names = [t.name for t in tiers]

        assert names == ["memory", "memory2", "memory3"]
        assert len(set(names)) == len(tiers)

    def test_shared_options_ignored_by_stores_without_them(self):
        """Test shared keys only reach the stores that declare them."""
        fakeredis = pytest.importorskip("fakeredis")
        cache = CascadeCache(stores=["memory", "redis"], prefix="app:", client=fakeredis.FakeRedis())
        memory, redis_store = cache.stores

        assert redis_store.config.prefix == "app:"
        assert memory.config.name == "memory"

        cache.write("foo", "bar")
        memory.clear()
        assert cache.read("foo") == "bar"

    def test_unknown_shared_option_is_ignored(self):
        """Test a shared key no store declares does not fail construction."""
        tiers = build_tiers(CascadeConfig.from_options({"stores": ["memory"], "colour": "blue"}))
        assert isinstance(tiers[0].backend, MemoryStore)

    def test_custom_factory_receives_all_options(self):
        """Test stores registered without declared keys get every option."""
        received = []
        registry = StoreRegistry()
        registry.register("probe", lambda options: received.append(options) or MemoryStore())

        build_tiers(CascadeConfig(tiers=["probe"], store_options={"colour": "blue"}), registry)
        assert received == [{"colour": "blue"}]

    def test_lookup_store(self):
        """Test the global registry."""
        store = lookup_store("memory", {"max_size": 2})
        assert isinstance(store, MemoryStore)
        assert store.config.name == "memory"


class TestTier:
    """Tests for Tier invocation and capabilities."""

    def test_declared_capabilities(self):
        """Test adapters announcing capabilities."""
        tier = Tier(0, "mem", MemoryStore(), TierOptions())
        assert tier.capabilities == StoreCapabilities(batch_get=True, delete_matching=True, counters=True)

    def test_probed_capabilities(self):
        """Test duck-typed adapters are probed once."""
        tier = Tier(0, "plain", PlainStore(), TierOptions())
        assert tier.capabilities == StoreCapabilities()
        assert not tier.supports("batch_get")

    def test_invoke_value_and_absent(self):
        """Test outcome kinds for a healthy tier."""
        tier = Tier(0, "mem", MemoryStore(), TierOptions())

        assert tier.invoke("get", "missing").status is OutcomeStatus.ABSENT
        assert tier.invoke("clear").status is OutcomeStatus.VALUE

    def test_invoke_fault(self):
        """Test exceptions become faults."""
        tier = Tier(0, "broken", FailingStore(), TierOptions())
        outcome = tier.invoke("get", "foo")

        assert outcome.is_fault
        assert outcome.fault.tier == "broken"
        assert outcome.fault.operation == "get"
        assert isinstance(outcome.fault.error, ConnectionError)
        assert tier.stats.errors == 1
        assert tier.stats.to_dict()["last_fault_at"] is not None

    def test_invoke_unsupported(self):
        """Test capability gaps are not faults."""
        tier = Tier(0, "plain", PlainStore(), TierOptions())
        outcome = tier.invoke("increment", "foo", 1, capability="counters")

        assert outcome.status is OutcomeStatus.UNSUPPORTED
        assert tier.stats.errors == 0
