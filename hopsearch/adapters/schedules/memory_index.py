"""In-memory schedule index.

Schedules are bucketed by (source, destination) and kept sorted by
departure time, so window queries are a binary search plus a short
scan. This plays the role of the fast filtered index in front of the
relational store.
"""

from __future__ import annotations

import bisect
import logging
from collections import defaultdict
from dataclasses import InitVar, dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ...domain.models import Schedule

_Bucket = Tuple[List[datetime], List[Schedule]]


@dataclass
class InMemoryScheduleIndex:
    """ScheduleIndexPort backed by sorted per-pair buckets.

    Args:
        schedules: Initial schedules to index
    """

    schedules: InitVar[Iterable[Schedule]] = ()

    _buckets: Dict[Tuple[str, str], _Bucket] = field(init=False, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self, schedules: Iterable[Schedule]) -> None:
        self._logger = logging.getLogger(__name__)
        self._buckets = {}
        self.rebuild(schedules)

    def rebuild(self, schedules: Iterable[Schedule]) -> None:
        """Replace the indexed schedules."""
        grouped: Dict[Tuple[str, str], List[Schedule]] = defaultdict(list)
        count = 0
        for s in schedules:
            grouped[(s.source, s.destination)].append(s)
            count += 1

        buckets: Dict[Tuple[str, str], _Bucket] = {}
        for pair, items in grouped.items():
            items.sort(key=lambda s: (s.departure_time, s.schedule_id))
            buckets[pair] = ([s.departure_time for s in items], items)
        self._buckets = buckets
        self._logger.debug(
            "Schedule index built",
            extra={"schedules": count, "pairs": len(buckets)},
        )

    def _scan(
        self,
        source: str,
        destination: str,
        start: datetime,
        end: Optional[datetime],
        seats: int,
        limit: int,
    ) -> List[Schedule]:
        bucket = self._buckets.get((source, destination))
        if bucket is None:
            return []

        times, items = bucket
        lo = bisect.bisect_left(times, start)
        hi = len(times) if end is None else bisect.bisect_right(times, end)

        found: List[Schedule] = []
        for s in items[lo:hi]:
            if s.available_seats >= seats:
                found.append(s)
                if len(found) >= limit:
                    break
        return found

    def find_direct(
        self,
        source: str,
        destination: str,
        after: datetime,
        seats: int,
        limit: int = 100,
    ) -> Sequence[Schedule]:
        return self._scan(source, destination, after, None, seats, limit)

    def find_in_window(
        self,
        source: str,
        destination: str,
        window_start: datetime,
        window_end: datetime,
        seats: int,
        limit: int = 100,
    ) -> Sequence[Schedule]:
        return self._scan(source, destination, window_start, window_end, seats, limit)

    def size(self) -> int:
        """Return the number of indexed schedules."""
        return sum(len(items) for _, items in self._buckets.values())
