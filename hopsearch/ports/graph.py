"""Graph port - Abstraction for route topology discovery.

Route graphs answer "which sequences of locations connect A to B"
without looking at concrete schedules. Paths are returned as lists of
location codes, origin first.
"""

from __future__ import annotations

from typing import List, Protocol

# A path is an ordered list of location codes, origin first
Path = List[str]


class RouteGraphPort(Protocol):
    """Port for route topology queries.

    Implementations:
    - adapters/graph/csv_route_graph.py (CSVRouteGraph) - graph-query backend
    - adapters/graph/schedule_graph.py (ScheduleDerivedRouteGraph) - DFS fallback

    Every returned path is simple: no location appears twice.
    """

    def shortest_paths(
        self, source: str, destination: str, max_results: int
    ) -> List[Path]:
        """Find paths of one to three hops, fewest hops first.

        Args:
            source: Origin location code.
            destination: Destination location code.
            max_results: Maximum number of paths returned.

        Returns:
            Paths ordered by length.
        """
        ...

    def paths_with_exact_hops(
        self, source: str, destination: str, hops: int, max_results: int
    ) -> List[Path]:
        """Find simple paths with exactly the given number of stops.

        Args:
            source: Origin location code.
            destination: Destination location code.
            hops: Number of intermediate locations (path has hops + 2 nodes).
            max_results: Maximum number of paths returned.

        Returns:
            Simple paths with exactly hops intermediate locations.
        """
        ...

    def one_stop_connections(
        self, source: str, destination: str, max_results: int
    ) -> List[Path]:
        """Find [source, intermediate, destination] triples.

        Args:
            source: Origin location code.
            destination: Destination location code.
            max_results: Maximum number of triples returned.

        Returns:
            Paths of exactly three locations.
        """
        ...
