"""Tests for key expansion and the caching decorator.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import pytest

from cascadecache_core.cache.decorator import MAX_KEY_LENGTH, cached
from cascadecache_core.cache.keys import expand_key, namespaced_key, strip_namespace


class Record:
    def __init__(self, pk):
        self.pk = pk

    def cache_key(self):
        return f"records/{self.pk}"


class TestExpandKey:
    """Tests for expand_key."""

    @pytest.mark.parametrize("name,expected", [
        ("Foo", "Foo"),
        (42, "42"),
        (["fu", "foo"], "fu/foo"),
        (("fu", 1), "fu/1"),
        ({"fu": 2, "foo": 1}, "foo=1/fu=2"),
        (["list", {"b": 1, "a": 2}], "list/a=2/b=1"),
        (Record(7), "records/7"),
        ([Record(1), "tag"], "records/1/tag"),
    ])
    def test_expansion(self, name, expected):
        """Test canonical key forms."""
        assert expand_key(name) == expected

    def test_case_sensitive(self):
        """Test keys differing only in case stay distinct."""
        assert expand_key("foo") != expand_key("FOO")

    def test_cache_key_attribute(self):
        """Test a plain cache_key attribute."""
        class Tagged:
            cache_key = "tagged"

        assert expand_key(Tagged()) == "tagged"


class TestNamespace:
    """Tests for namespace helpers."""

    def test_namespaced_key(self):
        """Test prefixing."""
        assert namespaced_key("foo", "app") == "app:foo"
        assert namespaced_key("foo", None) == "foo"

    def test_strip_namespace(self):
        """Test prefix removal."""
        assert strip_namespace("app:foo", "app") == "foo"
        assert strip_namespace("other:foo", "app") == "other:foo"
        assert strip_namespace("foo", None) == "foo"


class TestCachedDecorator:
    """Tests for the cached decorator."""

    def test_calls_once(self, cache):
        """Test results are reused."""
        calls = []

        @cache.cached(ttl=60)
        def double(x):
            calls.append(x)
            return x * 2

        assert double(2) == 4
        assert double(2) == 4
        assert double(3) == 6
        assert calls == [2, 3]

    def test_cached_none_is_reused(self, cache):
        """Test a None result is not recomputed."""
        calls = []

        @cached(cache)
        def lookup():
            calls.append(1)
            return None

        assert lookup() is None
        assert lookup() is None
        assert calls == [1]

    def test_populates_every_tier(self, cache, l1, l2):
        """Test results are written through the cascade."""
        @cache.cached(key_prefix="app")
        def name():
            return "Ada"

        name()
        key = name.cache_key()
        assert key in l1
        assert key in l2

    def test_cache_key(self, cache):
        """Test keys are deterministic and include arguments."""
        @cache.cached(key_prefix="users")
        def get_user(user_id, full=False):
            return {"id": user_id}

        key = get_user.cache_key(1, full=True)
        assert key == get_user.cache_key(1, full=True)
        assert key.startswith("users:")
        assert key.endswith(":1:full=True")
        assert key != get_user.cache_key(2, full=True)

    def test_long_keys_are_hashed(self, cache):
        """Test long argument lists produce a bounded key."""
        @cache.cached(key_prefix="big")
        def echo(value):
            return value

        key = echo.cache_key("x" * 500)
        assert len(key) < MAX_KEY_LENGTH
        assert echo("x" * 500) == "x" * 500

    def test_key_builder(self, cache, l1):
        """Test custom key builders."""
        @cache.cached(key_builder=lambda user_id: ["user", user_id])
        def get_user(user_id):
            return {"id": user_id}

        get_user(5)
        assert get_user.cache_key(5) == "user/5"
        assert "user/5" in l1

    def test_cache_clear(self, cache):
        """Test clearing the function's results."""
        calls = []

        @cache.cached(key_prefix="sq")
        def square(x):
            calls.append(x)
            return x * x

        square(1)
        square(2)
        square.cache_clear()
        square(1)

        assert calls == [1, 2, 1]

    def test_exposes_cache(self, cache):
        """Test the wrapper keeps a reference to its cache."""
        @cache.cached()
        def noop():
            return None

        assert noop.cache is cache
        assert noop.__name__ == "noop"
