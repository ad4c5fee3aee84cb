"""Graph adapters - Implementations of the RouteGraphPort.

Available implementations:
- CSVRouteGraph: Graph-query backend over CSV route topology
- ScheduleDerivedRouteGraph: DFS over schedule-store connectivity (fallback)
"""

from .csv_route_graph import CSVRouteGraph
from .schedule_graph import ScheduleDerivedRouteGraph

__all__ = ["CSVRouteGraph", "ScheduleDerivedRouteGraph"]
