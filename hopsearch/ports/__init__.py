"""Ports layer - Abstract interfaces (Protocols) for the application.

Ports define the contracts between the search core and its external
collaborators. They enable dependency injection and make the system
testable.

This module follows the Hexagonal Architecture pattern:
- Input ports: How the application is driven (services)
- Output ports: How the application drives external systems (adapters)
"""

from .cache import ResultCachePort
from .graph import RouteGraphPort
from .schedules import ScheduleIndexPort, ScheduleStorePort

__all__ = [
    # Schedules
    "ScheduleIndexPort",
    "ScheduleStorePort",
    # Graph
    "RouteGraphPort",
    # Cache
    "ResultCachePort",
]
