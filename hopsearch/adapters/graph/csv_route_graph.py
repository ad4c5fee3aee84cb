"""CSV route graph adapter.

This adapter is the graph-query backend of route discovery. It loads
the location and route-edge CSV files once and answers the topology
queries of RouteGraphPort:
- exact-hop simple paths, cheapest average fare first
- shortest paths of one to three edges, fewest edges first
- one-stop triples, cheapest average fare first
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from ...config import BackendConfig, get_config
from ...domain.errors import RouteGraphError
from ...domain.models import Location, RouteEdge
from ...ports.graph import Path
from ..schedules.csv_loader import load_locations_csv, load_routes_csv

# source -> {destination: cheapest edge}
Adjacency = Dict[str, Dict[str, RouteEdge]]

MAX_SHORTEST_PATH_EDGES = 3


@dataclass
class CSVRouteGraph:
    """Route graph loaded from CSV files.

    Implements RouteGraphPort. Parallel edges between the same pair of
    locations collapse onto the one with the lowest average fare.

    Attributes:
        config: Backend configuration (data directory, file names)
    """

    config: BackendConfig = field(default_factory=lambda: get_config().backend)
    _logger: logging.Logger = field(init=False, repr=False)

    # Cached data
    _adjacency: Optional[Adjacency] = field(default=None, repr=False)
    _locations: Optional[Dict[str, Location]] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    @classmethod
    def from_edges(
        cls,
        edges: Sequence[RouteEdge],
        locations: Optional[Dict[str, Location]] = None,
    ) -> CSVRouteGraph:
        """Build a graph from already loaded edges."""
        graph = cls()
        graph._adjacency = cls._build_adjacency(edges)
        graph._locations = dict(locations or {})
        return graph

    @staticmethod
    def _build_adjacency(edges: Sequence[RouteEdge]) -> Adjacency:
        adjacency: Adjacency = {}
        for edge in edges:
            neighbours = adjacency.setdefault(edge.source, {})
            current = neighbours.get(edge.destination)
            if current is None or edge.avg_fare < current.avg_fare:
                neighbours[edge.destination] = edge
            adjacency.setdefault(edge.destination, {})
        return adjacency

    def load(self) -> Adjacency:
        """Load the route topology from CSV.

        Returns:
            Adjacency mapping of location codes to outgoing edges.

        Raises:
            RouteGraphError: If the routes file cannot be loaded.
        """
        if self._adjacency is not None:
            return self._adjacency

        self._logger.debug(
            "Loading route graph",
            extra={"routes_path": str(self.config.routes_path)},
        )
        edges = load_routes_csv(self.config.routes_path)
        self._adjacency = self._build_adjacency(edges)
        self._logger.info(
            "Route graph loaded",
            extra={"nodes": len(self._adjacency), "edges": len(edges)},
        )
        return self._adjacency

    def edges_from(self, code: str) -> List[RouteEdge]:
        """Return the outgoing edges of a location."""
        return list(self.load().get(code, {}).values())

    def _enumerate(
        self, source: str, destination: str, min_edges: int, max_edges: int
    ) -> List[Tuple[int, float, Path]]:
        """Enumerate simple paths with an edge count in [min_edges, max_edges].

        Returns:
            (edge_count, total_avg_fare, path) tuples.
        """
        adjacency = self.load()
        if source not in adjacency or destination not in adjacency:
            return []

        found: List[Tuple[int, float, Path]] = []
        path: Path = [source]
        visited = {source}

        def walk(current: str, cost: float) -> None:
            edges = len(path) - 1
            for nxt, edge in adjacency.get(current, {}).items():
                if nxt in visited:
                    continue
                if nxt == destination:
                    if min_edges <= edges + 1 <= max_edges:
                        found.append((edges + 1, cost + edge.avg_fare, path + [nxt]))
                    continue
                if edges + 1 >= max_edges:
                    continue
                visited.add(nxt)
                path.append(nxt)
                walk(nxt, cost + edge.avg_fare)
                path.pop()
                visited.discard(nxt)

        walk(source, 0.0)
        return found

    def paths_with_exact_hops(
        self, source: str, destination: str, hops: int, max_results: int
    ) -> List[Path]:
        if hops < 0:
            return []
        found = self._enumerate(source, destination, hops + 1, hops + 1)
        found.sort(key=lambda item: (item[1], item[2]))
        return [p for _, _, p in found[:max_results]]

    def shortest_paths(
        self, source: str, destination: str, max_results: int
    ) -> List[Path]:
        found = self._enumerate(source, destination, 1, MAX_SHORTEST_PATH_EDGES)
        found.sort(key=lambda item: (item[0], item[1], item[2]))
        return [p for _, _, p in found[:max_results]]

    def one_stop_connections(
        self, source: str, destination: str, max_results: int
    ) -> List[Path]:
        return self.paths_with_exact_hops(source, destination, 1, max_results)

    def get_location(self, code: str) -> Optional[Location]:
        """Get location details by code.

        Args:
            code: The location code to look up.

        Returns:
            Location with full details, or None if not found.
        """
        return self._load_locations().get(code)

    def list_locations(self) -> Sequence[Location]:
        """List all known locations."""
        return list(self._load_locations().values())

    def _load_locations(self) -> Dict[str, Location]:
        """Load location metadata from CSV."""
        if self._locations is not None:
            return self._locations

        try:
            self._locations = load_locations_csv(self.config.locations_path)
        except RouteGraphError as e:
            self._logger.warning(
                "Failed to load location metadata",
                extra={"error": str(e)},
            )
            self._locations = {}

        return self._locations

    def clear_cache(self) -> None:
        """Clear cached topology and location data."""
        self._adjacency = None
        self._locations = None
        self._logger.debug("Route graph cache cleared")
