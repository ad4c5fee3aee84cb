"""Flight search service - Main orchestrator.

Ties route discovery, segment matching, backtracking and ranking into
the single search entry point, with a memoizing result cache in front.
"""

from __future__ import annotations

import concurrent.futures
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

from ..config import SearchConfig, get_config
from ..domain.connections import LayoverRules
from ..domain.errors import CacheCodecError
from ..domain.models import Itinerary, SearchRequest, SearchResultPage
from ..ports.cache import ResultCachePort
from ..ports.graph import Path
from .codec import ItineraryCodec
from .combinations import build_itineraries
from .ranking import deduplicate, rank
from .route_discovery import RouteDiscoveryService
from .segment_matching import SegmentMatcher


@dataclass
class FlightSearchService:
    """Main service for multi-hop itinerary search.

    This service orchestrates the full search:
    1. Cache lookup for the request's itinerary set
    2. Direct flights (hop count 0)
    3. Route discovery and per-path matching for hop counts 1..max
    4. Cache write
    5. Filtering, sorting and pagination

    Attributes:
        route_discovery: Enumerates candidate location paths
        segment_matcher: Finds schedules for each edge of a path
        cache: Result cache (a NullResultCache disables caching)
        codec: Serializes itinerary lists for the cache
        config: Search configuration
        cache_ttl_seconds: TTL of cache entries (None = cache default)
    """

    route_discovery: RouteDiscoveryService
    segment_matcher: SegmentMatcher
    cache: ResultCachePort
    codec: ItineraryCodec = field(default_factory=ItineraryCodec)
    config: SearchConfig = field(default_factory=lambda: get_config().search)
    cache_ttl_seconds: Optional[float] = None

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    @property
    def rules(self) -> LayoverRules:
        return LayoverRules.from_config(self.config)

    def search(self, request: SearchRequest) -> SearchResultPage:
        """Search itineraries for a validated request.

        Args:
            request: The search request.

        Returns:
            One ranked page of itineraries. An empty page when nothing
            matches; backend failures degrade to fewer results instead
            of raising.
        """
        departure = request.effective_departure
        max_hops = request.effective_max_hops(self.config.default_max_hops)
        key = request.cache_key(self.config.default_max_hops)

        self._logger.info(
            "Starting flight search",
            extra={
                "origin": request.origin,
                "destination": request.destination,
                "departure": departure.isoformat(),
                "seats": request.seats,
                "max_hops": max_hops,
            },
        )

        # Step 1: Cache lookup
        itineraries = self._cache_get(key)

        if itineraries is None:
            # Steps 2-3: Compute the itinerary set
            itineraries, complete = self._compute(
                request.origin, request.destination, departure, request.seats, max_hops
            )

            # Step 4: Memoize complete results only
            if complete:
                self._cache_put(key, itineraries)

        # Step 5: Rank
        page = rank(itineraries, request)
        self._logger.info(
            "Flight search finished",
            extra={"total": page.total, "page": page.page, "returned": len(page.items)},
        )
        return page

    def find_routes_with_hops(self, source: str, destination: str, hops: int) -> List[Path]:
        """Location paths with exactly ``hops`` intermediate stops."""
        return self.route_discovery.find_routes_with_hops(source, destination, hops)

    def evict(self, request: SearchRequest) -> bool:
        """Drop the cached itinerary set of a request."""
        return self.cache.evict(request.cache_key(self.config.default_max_hops))

    def evict_all(self) -> int:
        """Drop every cached search result."""
        removed = self.cache.evict_all()
        self._logger.info("Search cache cleared", extra={"removed": removed})
        return removed

    def _compute(
        self,
        origin: str,
        destination: str,
        departure: datetime,
        seats: int,
        max_hops: int,
    ) -> Tuple[List[Itinerary], bool]:
        """Run every hop-count pass.

        Returns:
            The deduplicated itineraries, and whether every path finished
            before the search deadline.
        """
        started = time.monotonic()
        found: List[Itinerary] = []

        # Hop count 0
        direct = self.segment_matcher.find_direct(origin, destination, departure, seats)
        found.extend(Itinerary((schedule,)) for schedule in direct)

        # Hop counts 1..max_hops
        paths: List[Path] = []
        for hops in range(1, max_hops + 1):
            for path in self.route_discovery.find_routes_with_hops(origin, destination, hops):
                if path not in paths:
                    paths.append(path)

        complete = True
        if paths:
            remaining = self.config.search_deadline_seconds - (time.monotonic() - started)
            connecting, complete = self._search_paths(paths, departure, seats, remaining)
            found.extend(connecting)

        itineraries = deduplicate(found)
        self._logger.info(
            "Itinerary set computed",
            extra={
                "direct": len(direct),
                "paths": len(paths),
                "itineraries": len(itineraries),
                "complete": complete,
                "elapsed_ms": int((time.monotonic() - started) * 1000),
            },
        )
        return itineraries, complete

    def _search_paths(
        self,
        paths: List[Path],
        departure: datetime,
        seats: int,
        timeout_seconds: float,
    ) -> Tuple[List[Itinerary], bool]:
        """Match and combine every path on a bounded worker pool.

        Paths still running at the deadline are abandoned and contribute
        nothing. A path that raises is logged and skipped.
        """
        results: List[Itinerary] = []
        executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=self.config.max_workers,
            thread_name_prefix="path-search",
        )
        try:
            futures = {
                executor.submit(self._search_path, path, departure, seats): path
                for path in paths
            }
            done, not_done = concurrent.futures.wait(
                futures, timeout=max(timeout_seconds, 0.0)
            )

            for future in done:
                path = futures[future]
                try:
                    results.extend(future.result())
                except Exception as e:
                    self._logger.warning(
                        "Path search failed",
                        extra={"path": path, "error": str(e)},
                    )

            if not_done:
                self._logger.warning(
                    "Search deadline reached, abandoning paths",
                    extra={
                        "abandoned": len(not_done),
                        "deadline_seconds": self.config.search_deadline_seconds,
                    },
                )
            return results, not not_done
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def _search_path(self, path: Path, departure: datetime, seats: int) -> List[Itinerary]:
        options = self.segment_matcher.collect_segment_options(path, departure, seats)
        if options is None:
            return []
        return build_itineraries(path, options, self.rules, seats)

    def _cache_get(self, key: str) -> Optional[List[Itinerary]]:
        try:
            payload = self.cache.get(key)
        except Exception as e:
            self._logger.warning("Cache read failed", extra={"key": key, "error": str(e)})
            return None
        if payload is None:
            self._logger.debug("Cache miss", extra={"key": key})
            return None

        try:
            itineraries = self.codec.decode(payload)
        except CacheCodecError as e:
            self._logger.warning(
                "Discarding undecodable cache entry",
                extra={"key": key, "error": str(e)},
            )
            return None
        self._logger.info(
            "Cache hit", extra={"key": key, "itineraries": len(itineraries)}
        )
        return itineraries

    def _cache_put(self, key: str, itineraries: List[Itinerary]) -> None:
        try:
            self.cache.put(key, self.codec.encode(itineraries), self.cache_ttl_seconds)
        except Exception as e:
            self._logger.warning("Cache write failed", extra={"key": key, "error": str(e)})
