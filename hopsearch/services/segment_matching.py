"""Segment matching against the schedule backends.

For each edge of a candidate path, find the bookable schedules that
depart inside a search window. The fast index is consulted first; on an
empty answer, an error or a timeout the relational store is asked for
everything departing the edge's origin in the window, narrowed down
locally to the edge's destination.

Window anchoring: the first edge's window opens at the requested
departure. Each later window opens at the earliest arrival among the
previous edge's candidates plus the minimum layover ("earliest" mode).
This does not branch per candidate, so an itinerary whose first leg is
not the earliest-arriving one can be missed when its connection departs
more than the horizon after the anchor. The "exact" mode widens later
windows to cover every candidate's connection range at the cost of
larger candidate lists.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from ..config import SearchConfig, get_config
from ..domain.connections import LayoverRules
from ..domain.models import Schedule
from ..ports.graph import Path
from ..ports.schedules import ScheduleIndexPort, ScheduleStorePort
from .timeouts import call_with_timeout


def _finalize(schedules: Sequence[Schedule], seats: int, limit: int) -> List[Schedule]:
    """Filter by capacity, order by departure and cap the list."""
    kept = [s for s in schedules if s.available_seats >= seats]
    kept.sort(key=lambda s: (s.departure_time, s.schedule_id))
    return kept[:limit]


@dataclass
class SegmentMatcher:
    """Per-edge schedule lookup with index-then-store fallback.

    Attributes:
        store: Relational schedule store (always consulted on fallback)
        index: Fast schedule index, if configured
        config: Search configuration (horizon, caps, anchoring mode)
        call_timeout_seconds: Budget for each backend call
    """

    store: ScheduleStorePort
    index: Optional[ScheduleIndexPort] = None
    config: SearchConfig = field(default_factory=lambda: get_config().search)
    call_timeout_seconds: Optional[float] = None

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    @property
    def horizon(self) -> timedelta:
        return timedelta(hours=self.config.segment_window_hours)

    @property
    def rules(self) -> LayoverRules:
        return LayoverRules.from_config(self.config)

    def match_segment(
        self,
        source: str,
        destination: str,
        window_start: datetime,
        window_end: datetime,
        seats: int,
    ) -> List[Schedule]:
        """Find candidate schedules for one edge.

        Returns:
            Schedules with enough seats departing in
            [window_start, window_end], ordered by departure, capped at
            the per-segment candidate limit. Empty when both backends
            fail.
        """
        limit = self.config.max_candidates_per_segment
        context = {"source": source, "destination": destination}
        schedules: Sequence[Schedule] = []

        if self.index is not None:
            try:
                schedules = call_with_timeout(
                    self.index.find_in_window,
                    source,
                    destination,
                    window_start,
                    window_end,
                    seats,
                    limit,
                    timeout_seconds=self.call_timeout_seconds,
                    operation="index.find_in_window",
                )
            except Exception as e:
                self._logger.warning(
                    "Schedule index failed, using relational store",
                    extra={**context, "error": str(e)},
                )
                schedules = []

        if not schedules:
            try:
                departing = call_with_timeout(
                    self.store.find_departing,
                    source,
                    window_start,
                    window_end,
                    seats,
                    timeout_seconds=self.call_timeout_seconds,
                    operation="store.find_departing",
                )
                schedules = [s for s in departing if s.destination == destination]
            except Exception as e:
                self._logger.warning(
                    "Schedule store failed, segment has no candidates",
                    extra={**context, "error": str(e)},
                )
                schedules = []

        result = _finalize(schedules, seats, limit)
        self._logger.debug(
            "Found flights for segment",
            extra={**context, "count": len(result)},
        )
        return result

    def find_direct(
        self, source: str, destination: str, after: datetime, seats: int
    ) -> List[Schedule]:
        """Find non-stop schedules departing at or after a timestamp."""
        limit = self.config.direct_results_limit
        context = {"source": source, "destination": destination}
        schedules: Sequence[Schedule] = []

        if self.index is not None:
            try:
                schedules = call_with_timeout(
                    self.index.find_direct,
                    source,
                    destination,
                    after,
                    seats,
                    limit,
                    timeout_seconds=self.call_timeout_seconds,
                    operation="index.find_direct",
                )
            except Exception as e:
                self._logger.warning(
                    "Schedule index failed for direct search, using relational store",
                    extra={**context, "error": str(e)},
                )
                schedules = []

        if not schedules:
            try:
                schedules = call_with_timeout(
                    self.store.find_direct,
                    source,
                    destination,
                    after,
                    seats,
                    timeout_seconds=self.call_timeout_seconds,
                    operation="store.find_direct",
                )
            except Exception as e:
                self._logger.warning(
                    "Schedule store failed for direct search",
                    extra={**context, "error": str(e)},
                )
                schedules = []

        result = _finalize(
            [s for s in schedules if s.destination == destination], seats, limit
        )
        self._logger.info("Found direct flights", extra={**context, "count": len(result)})
        return result

    def collect_segment_options(
        self, path: Path, departure: datetime, seats: int
    ) -> Optional[List[List[Schedule]]]:
        """Gather candidate schedules for every edge of a path.

        Returns:
            One candidate list per edge, or None as soon as an edge has
            no candidates (the path cannot be completed).
        """
        rules = self.rules
        options: List[List[Schedule]] = []
        window_start = departure
        window_end = departure + self.horizon

        for i in range(len(path) - 1):
            source, destination = path[i], path[i + 1]
            candidates = self.match_segment(
                source, destination, window_start, window_end, seats
            )
            if not candidates:
                self._logger.debug(
                    "No flights found for segment",
                    extra={"source": source, "destination": destination, "path": path},
                )
                return None
            options.append(candidates)

            earliest_arrival = min(s.arrival_time for s in candidates)
            window_start = earliest_arrival + rules.min_layover
            if self.config.window_anchoring == "exact":
                latest_arrival = max(s.arrival_time for s in candidates)
                window_end = max(
                    window_start + self.horizon, latest_arrival + rules.max_layover
                )
            else:
                window_end = window_start + self.horizon

        return options
