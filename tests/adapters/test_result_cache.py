"""Tests for the in-memory and null result caches."""

import time

import pytest

from hopsearch.adapters.cache import InMemoryResultCache, NullResultCache


@pytest.fixture
def cache():
    return InMemoryResultCache(default_ttl_seconds=60, max_size=3)


class TestInMemoryResultCache:
    def test_put_then_get(self, cache):
        cache.put("DEL_BOM", b"payload")
        assert cache.get("DEL_BOM") == b"payload"

    def test_keys_are_prefixed(self, cache):
        cache.put("DEL_BOM", b"payload")
        assert cache.keys() == ["flight_search:DEL_BOM"]

    def test_miss(self, cache):
        assert cache.get("unknown") is None

    def test_expiry(self, cache):
        cache.put("DEL_BOM", b"payload", ttl_seconds=0.01)
        time.sleep(0.05)
        assert cache.get("DEL_BOM") is None

    def test_fifo_eviction_at_max_size(self, cache):
        for i in range(4):
            cache.put(f"k{i}", b"v")
        assert cache.get("k0") is None
        assert cache.get("k3") == b"v"
        assert cache.size() == 3

    def test_evict(self, cache):
        cache.put("DEL_BOM", b"payload")
        assert cache.evict("DEL_BOM") is True
        assert cache.evict("DEL_BOM") is False
        assert cache.get("DEL_BOM") is None

    def test_evict_all(self, cache):
        cache.put("a", b"1")
        cache.put("b", b"2")
        assert cache.evict_all() == 2
        assert cache.size() == 0

    def test_rejects_non_bytes(self, cache):
        cache.put("DEL_BOM", "not bytes")
        assert cache.get("DEL_BOM") is None

    def test_stats(self, cache):
        cache.put("a", b"1")
        cache.get("a")
        cache.get("b")
        stats = cache.stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate_percent"] == 50.0


class TestNullResultCache:
    def test_always_misses(self):
        cache = NullResultCache()
        cache.put("a", b"1")
        assert cache.get("a") is None
        assert cache.evict("a") is False
        assert cache.evict_all() == 0
