"""Schedule ports - Abstractions over bookable flight instances.

Two interchangeable backends answer schedule queries: a fast filtered
index and a relational store. The core consults the index first and
falls back to the store. Each query shape is an explicit named method.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Protocol, Sequence

if TYPE_CHECKING:
    from ..domain.models import Schedule


class ScheduleIndexPort(Protocol):
    """Port for the fast, destination-filtered schedule index.

    Implementation: adapters/schedules/memory_index.py
    """

    def find_direct(
        self,
        source: str,
        destination: str,
        after: datetime,
        seats: int,
        limit: int = 100,
    ) -> Sequence[Schedule]:
        """Find schedules departing at or after a timestamp.

        Args:
            source: Departure location code.
            destination: Arrival location code.
            after: Earliest departure timestamp (inclusive).
            seats: Minimum available seats.
            limit: Maximum number of schedules returned.

        Returns:
            Matching schedules ordered by departure time.
        """
        ...

    def find_in_window(
        self,
        source: str,
        destination: str,
        window_start: datetime,
        window_end: datetime,
        seats: int,
        limit: int = 100,
    ) -> Sequence[Schedule]:
        """Find schedules departing inside a time window.

        Args:
            source: Departure location code.
            destination: Arrival location code.
            window_start: Earliest departure (inclusive).
            window_end: Latest departure (inclusive).
            seats: Minimum available seats.
            limit: Maximum number of schedules returned.

        Returns:
            Matching schedules ordered by departure time.
        """
        ...


class ScheduleStorePort(Protocol):
    """Port for the relational schedule store.

    Implementation: adapters/schedules/sqlite_store.py
    """

    def find_direct(
        self, source: str, destination: str, after: datetime, seats: int
    ) -> Sequence[Schedule]:
        """Find schedules between two locations departing at or after a time.

        Returns:
            Matching schedules ordered by departure time.
        """
        ...

    def find_departing(
        self,
        source: str,
        window_start: datetime,
        window_end: datetime,
        seats: int,
    ) -> Sequence[Schedule]:
        """Find every schedule leaving a location inside a window.

        The destination is not filtered; callers narrow it down.

        Returns:
            Matching schedules ordered by departure time.
        """
        ...

    def destinations_reachable_from(self, source: str) -> Sequence[str]:
        """List the distinct destinations served from a location.

        Returns:
            Location codes with at least one schedule from source.
        """
        ...

    def has_direct_connection(self, source: str, destination: str) -> bool:
        """Check whether any schedule connects two locations directly."""
        ...
