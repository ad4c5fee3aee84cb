"""Thread-safe in-memory result cache.

This cache implements ResultCachePort for single-process deployments
and tests. Keys are namespaced with a prefix so search results can be
evicted as a group.

Features:
- Thread-safe with RLock
- Optional TTL (time-to-live)
- FIFO eviction at max size
- Explicit and bulk eviction
- Statistics tracking
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass
class InMemoryResultCache:
    """Thread-safe in-memory cache of encoded search results.

    Errors inside the cache are logged and degrade to a miss or a no-op,
    so a broken cache never fails a search.

    Attributes:
        default_ttl_seconds: Default time-to-live for entries (None = no expiry)
        max_size: Maximum number of entries (None = unlimited)
        key_prefix: Namespace prepended to every key
        name: Cache name for logging

    Example:
        cache = InMemoryResultCache(default_ttl_seconds=1800)
        cache.put("DEL_BOM_2025-08-20T06:00:00_2_3", payload)
    """

    default_ttl_seconds: Optional[float] = None
    max_size: Optional[int] = None
    key_prefix: str = "flight_search:"
    name: str = "results"

    _store: Dict[str, Tuple[bytes, float]] = field(default_factory=dict, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    # Statistics
    _hits: int = field(default=0, repr=False)
    _misses: int = field(default=0, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(f"cache.{self.name}")

    def _full_key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def get(self, key: str) -> Optional[bytes]:
        """Get a value from the cache.

        Args:
            key: The cache key (without prefix).

        Returns:
            The cached bytes, or None if not found or expired.
        """
        cache_key = self._full_key(key)
        with self._lock:
            entry = self._store.get(cache_key)
            if entry is None:
                self._misses += 1
                return None

            value, expiry = entry
            if time.time() > expiry:
                del self._store[cache_key]
                self._logger.debug("Cache entry expired", extra={"key": cache_key})
                self._misses += 1
                return None

            self._hits += 1
            self._logger.debug("Cache hit", extra={"key": cache_key})
            return value

    def put(self, key: str, value: bytes, ttl_seconds: Optional[float] = None) -> None:
        """Set a value in the cache.

        Args:
            key: The cache key (without prefix).
            value: The encoded payload.
            ttl_seconds: Optional TTL override for this entry.
        """
        if not isinstance(value, (bytes, bytearray)):
            self._logger.error(
                "Refusing to cache non-bytes value",
                extra={"key": key, "type": type(value).__name__},
            )
            return

        cache_key = self._full_key(key)
        with self._lock:
            # Simple FIFO eviction
            if self.max_size is not None and len(self._store) >= self.max_size:
                if cache_key not in self._store:
                    oldest_key = next(iter(self._store))
                    del self._store[oldest_key]
                    self._logger.debug(
                        "Cache evicted entry",
                        extra={"key": oldest_key, "reason": "max_size"},
                    )

            effective_ttl = ttl_seconds if ttl_seconds is not None else self.default_ttl_seconds
            expiry = time.time() + effective_ttl if effective_ttl is not None else float("inf")

            self._store[cache_key] = (bytes(value), expiry)
            self._logger.debug(
                "Cached search result",
                extra={"key": cache_key, "ttl": effective_ttl},
            )

    def evict(self, key: str) -> bool:
        """Evict a specific cache entry.

        Args:
            key: The cache key (without prefix).

        Returns:
            True if the key existed and was removed.
        """
        cache_key = self._full_key(key)
        with self._lock:
            if cache_key in self._store:
                del self._store[cache_key]
                self._logger.debug("Evicted cache entry", extra={"key": cache_key})
                return True
            return False

    def evict_all(self) -> int:
        """Evict every entry under this cache's prefix.

        Returns:
            Number of entries that were removed.
        """
        with self._lock:
            doomed = [k for k in self._store if k.startswith(self.key_prefix)]
            for k in doomed:
                del self._store[k]
            self._hits = 0
            self._misses = 0
            self._logger.info(
                "Evicted all flight search cache",
                extra={"entries_cleared": len(doomed)},
            )
            return len(doomed)

    def size(self) -> int:
        """Return the number of entries in the cache."""
        with self._lock:
            return len(self._store)

    def stats(self) -> Dict[str, Any]:
        """Return cache statistics.

        Returns:
            Dictionary with hit/miss counts and size.
        """
        with self._lock:
            total = self._hits + self._misses
            hit_rate = (self._hits / total * 100) if total > 0 else 0.0
            return {
                "size": len(self._store),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate_percent": round(hit_rate, 1),
            }

    def keys(self) -> list[str]:
        """Return all keys in the cache, prefix included."""
        with self._lock:
            return list(self._store.keys())
