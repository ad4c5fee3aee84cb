"""Null result cache.

This cache always misses, ensuring that tests don't accidentally
depend on cached state from previous searches. It is also what the
container wires when caching is disabled in configuration.

Example:
    @pytest.fixture
    def service(null_cache):
        return FlightSearchService(..., cache=null_cache)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional


@dataclass
class NullResultCache:
    """No-op cache - always misses.

    Implements ResultCachePort but never stores anything.
    """

    name: str = "null"

    def get(self, key: str) -> Optional[bytes]:
        """Always returns None (cache miss)."""
        return None

    def put(self, key: str, value: bytes, ttl_seconds: Optional[float] = None) -> None:
        """Does nothing."""
        pass

    def evict(self, key: str) -> bool:
        """Does nothing, returns False."""
        return False

    def evict_all(self) -> int:
        """Does nothing, returns 0."""
        return 0

    def size(self) -> int:
        return 0

    def stats(self) -> Dict[str, int]:
        """Return empty stats."""
        return {
            "size": 0,
            "hits": 0,
            "misses": 0,
            "hit_rate_percent": 0,
        }
