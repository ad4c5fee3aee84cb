"""Schedule-derived route graph.

In-process fallback for route discovery when the graph-query backend is
absent or failing. The connectivity relation is derived on demand from
the schedule store: a location's neighbours are the destinations it has
schedules to. Paths are enumerated by depth-first search with a visited
set, so every path is simple, and recursion depth is bounded by the
requested hop count.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from ...config import DEFAULT_HUBS
from ...domain.errors import ScheduleStoreError
from ...ports.graph import Path
from ...ports.schedules import ScheduleStorePort

# Intermediate stops, so shortest paths have at most three edges
MAX_SHORTEST_PATH_HOPS = 2


@dataclass
class ScheduleDerivedRouteGraph:
    """RouteGraphPort implemented by DFS over schedule connectivity.

    Attributes:
        store: Schedule store answering reachability questions
        fallback_hubs: Candidate intermediates used when the store
            cannot list destinations for a location
    """

    store: ScheduleStorePort
    fallback_hubs: Sequence[str] = field(default_factory=lambda: list(DEFAULT_HUBS))

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def _has_direct_connection(self, source: str, destination: str) -> bool:
        try:
            return self.store.has_direct_connection(source, destination)
        except ScheduleStoreError as e:
            self._logger.debug(
                "Error checking direct connection",
                extra={"source": source, "destination": destination, "error": str(e)},
            )
            return False

    def _possible_intermediates(
        self, source: str, memo: Dict[str, List[str]]
    ) -> List[str]:
        if source in memo:
            return memo[source]
        try:
            found = list(self.store.destinations_reachable_from(source))
        except ScheduleStoreError as e:
            self._logger.debug(
                "Error getting intermediates, using hub list",
                extra={"source": source, "error": str(e)},
            )
            found = list(self.fallback_hubs)
        memo[source] = found
        return found

    def paths_with_exact_hops(
        self, source: str, destination: str, hops: int, max_results: int
    ) -> List[Path]:
        """Enumerate simple paths with exactly ``hops`` intermediates."""
        if hops < 0 or source == destination or max_results <= 0:
            return []

        if hops == 0:
            if self._has_direct_connection(source, destination):
                return [[source, destination]]
            return []

        routes: List[Path] = []
        current_path: Path = [source]
        visited = {source}
        memo: Dict[str, List[str]] = {}

        def walk(current: str, remaining: int) -> None:
            if len(routes) >= max_results:
                return
            if remaining == 0:
                if self._has_direct_connection(current, destination):
                    routes.append(current_path + [destination])
                return

            for intermediate in self._possible_intermediates(current, memo):
                if intermediate in visited or intermediate == destination:
                    continue
                visited.add(intermediate)
                current_path.append(intermediate)

                walk(intermediate, remaining - 1)

                # Backtrack
                current_path.pop()
                visited.discard(intermediate)

        walk(source, hops)
        self._logger.debug(
            "Routes found by schedule DFS",
            extra={
                "source": source,
                "destination": destination,
                "hops": hops,
                "routes": len(routes),
            },
        )
        return routes

    def shortest_paths(
        self, source: str, destination: str, max_results: int
    ) -> List[Path]:
        """Paths of one to three edges, fewest edges first."""
        paths: List[Path] = []
        for hops in range(0, MAX_SHORTEST_PATH_HOPS + 1):
            remaining = max_results - len(paths)
            if remaining <= 0:
                break
            paths.extend(self.paths_with_exact_hops(source, destination, hops, remaining))
        return paths

    def one_stop_connections(
        self, source: str, destination: str, max_results: int
    ) -> List[Path]:
        return self.paths_with_exact_hops(source, destination, 1, max_results)
