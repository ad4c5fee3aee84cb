"""Cache port - Injectable result cache abstraction.

The result cache memoizes encoded search results keyed by the inputs
that determine the itinerary set. It is a pure speedup: implementations
never raise to the caller, internal errors degrade to a miss or a no-op.
"""

from __future__ import annotations

from typing import Optional, Protocol


class ResultCachePort(Protocol):
    """Port for the shared search result cache.

    Implementations:
    - adapters/cache/memory_cache.py (InMemoryResultCache) - Production
    - adapters/cache/null_cache.py (NullResultCache) - Testing
    """

    def get(self, key: str) -> Optional[bytes]:
        """Get an encoded value from the cache.

        Args:
            key: The cache key.

        Returns:
            The cached bytes, or None if absent, expired or on error.
        """
        ...

    def put(self, key: str, value: bytes, ttl_seconds: Optional[float] = None) -> None:
        """Store an encoded value.

        Args:
            key: The cache key.
            value: The encoded payload.
            ttl_seconds: Optional time-to-live override.
        """
        ...

    def evict(self, key: str) -> bool:
        """Remove a single entry.

        Args:
            key: The cache key to evict.

        Returns:
            True if the key existed and was removed, False otherwise.
        """
        ...

    def evict_all(self) -> int:
        """Remove every entry.

        Returns:
            Number of entries that were removed.
        """
        ...
