"""Route discovery with explicit graph-backend fallback.

The preferred route graph is asked first. When it is absent, raises or
times out, the in-process DFS graph answers instead. When both fail the
hop count contributes no paths; discovery itself never raises.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from ..config import SearchConfig, get_config
from ..ports.graph import Path, RouteGraphPort
from .timeouts import call_with_timeout


def is_simple_path(path: Path, source: str, destination: str, hops: int) -> bool:
    """Check a path's endpoints, length and absence of repeats."""
    return (
        len(path) == hops + 2
        and path[0] == source
        and path[-1] == destination
        and len(set(path)) == len(path)
    )


@dataclass
class RouteDiscoveryService:
    """Route enumeration over hop counts with logged fallback.

    Attributes:
        fallback: In-process route graph (always available)
        primary: Preferred graph-query backend, if configured
        config: Search configuration (result caps, default max hops)
        call_timeout_seconds: Budget for each primary/fallback call
    """

    fallback: RouteGraphPort
    primary: Optional[RouteGraphPort] = None
    config: SearchConfig = field(default_factory=lambda: get_config().search)
    call_timeout_seconds: Optional[float] = None

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def _query(
        self,
        operation: str,
        call: Callable[[RouteGraphPort], List[Path]],
        context: dict,
    ) -> List[Path]:
        """Run a graph query on the primary backend, then the fallback."""
        fallback_name = type(self.fallback).__name__

        if self.primary is not None:
            primary_name = type(self.primary).__name__
            try:
                paths = call_with_timeout(
                    call,
                    self.primary,
                    timeout_seconds=self.call_timeout_seconds,
                    operation=f"{primary_name}.{operation}",
                )
                self._logger.debug(
                    "Route query answered by graph backend",
                    extra={**context, "backend": primary_name, "paths": len(paths)},
                )
                return list(paths)
            except Exception as e:
                self._logger.warning(
                    "Graph backend failed, falling back to schedule DFS",
                    extra={
                        **context,
                        "primary": primary_name,
                        "fallback": fallback_name,
                        "error": str(e),
                    },
                )

        try:
            paths = call_with_timeout(
                call,
                self.fallback,
                timeout_seconds=self.call_timeout_seconds,
                operation=f"{fallback_name}.{operation}",
            )
            self._logger.debug(
                "Route query answered by fallback",
                extra={**context, "backend": fallback_name, "paths": len(paths)},
            )
            return list(paths)
        except Exception as e:
            self._logger.error(
                "All route backends failed",
                extra={**context, "fallback": fallback_name, "error": str(e)},
            )
            return []

    def find_routes_with_hops(self, source: str, destination: str, hops: int) -> List[Path]:
        """Find simple paths with exactly ``hops`` intermediate locations.

        Args:
            source: Origin location code.
            destination: Destination location code.
            hops: Number of intermediate stops.

        Returns:
            Paths of hops + 2 location codes. Paths that revisit a
            location or have the wrong shape are discarded.
        """
        self._logger.info(
            "Finding routes",
            extra={"source": source, "destination": destination, "hops": hops},
        )
        if hops < 0 or source == destination:
            return []

        limit = self.config.max_paths_per_hop
        raw = self._query(
            "paths_with_exact_hops",
            lambda graph: graph.paths_with_exact_hops(source, destination, hops, limit),
            {"source": source, "destination": destination, "hops": hops},
        )

        routes: List[Path] = []
        for path in raw:
            path = list(path)
            if not is_simple_path(path, source, destination, hops):
                self._logger.warning(
                    "Discarding malformed route",
                    extra={"path": path, "hops": hops},
                )
                continue
            if path not in routes:
                routes.append(path)

        self._logger.info(
            "Routes found",
            extra={"hops": hops, "routes": len(routes)},
        )
        return routes[:limit]

    def discover_paths(
        self, source: str, destination: str, max_hops: Optional[int] = None
    ) -> List[Path]:
        """Collect routes for every hop count from 0 to max_hops.

        Every hop count is tried; discovery does not stop at the first
        hop count that yields routes.
        """
        if max_hops is None:
            max_hops = self.config.default_max_hops

        all_routes: List[Path] = []
        for hops in range(0, max_hops + 1):
            for path in self.find_routes_with_hops(source, destination, hops):
                if path not in all_routes:
                    all_routes.append(path)

        self._logger.info(
            "Discovered routes up to max hops",
            extra={"max_hops": max_hops, "routes": len(all_routes)},
        )
        return all_routes

    def find_connecting_routes(self, source: str, destination: str) -> List[Path]:
        """Union of one-stop triples and short multi-stop paths.

        Diagnostic view of the connectivity between two locations;
        direct paths are excluded.
        """
        context = {"source": source, "destination": destination}
        one_stop = self._query(
            "one_stop_connections",
            lambda graph: graph.one_stop_connections(
                source, destination, self.config.one_stop_max_results
            ),
            context,
        )
        shortest = self._query(
            "shortest_paths",
            lambda graph: graph.shortest_paths(
                source, destination, self.config.shortest_paths_max_results
            ),
            context,
        )

        routes: List[Path] = []
        for path in [p for p in one_stop if len(p) == 3] + [
            p for p in shortest if len(p) > 2
        ]:
            path = list(path)
            if len(set(path)) == len(path) and path not in routes:
                routes.append(path)
        return routes[: self.config.connecting_results_limit]
