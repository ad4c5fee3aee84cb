"""Schedule adapters - Implementations of the schedule ports.

Available implementations:
- InMemoryScheduleIndex: Fast per-route index (ScheduleIndexPort)
- SqliteScheduleStore: Relational store (ScheduleStorePort)
- CSV loaders for schedules, locations and route edges
"""

from .csv_loader import load_locations_csv, load_routes_csv, load_schedules_csv
from .memory_index import InMemoryScheduleIndex
from .sqlite_store import SqliteScheduleStore

__all__ = [
    "InMemoryScheduleIndex",
    "SqliteScheduleStore",
    "load_schedules_csv",
    "load_locations_csv",
    "load_routes_csv",
]
