"""Connection rules shared by backtracking and post-hoc validation.

A connection between two consecutive segments is valid when the first
lands where the second takes off, and the ground time in between falls
inside the layover window (both bounds inclusive).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Sequence

from .errors import InvariantViolationError
from .models import Schedule

MIN_LAYOVER_MINUTES = 60
MAX_LAYOVER_HOURS = 6


@dataclass(frozen=True, slots=True)
class LayoverRules:
    """Inclusive layover window in minutes."""

    min_layover_minutes: int = MIN_LAYOVER_MINUTES
    max_layover_minutes: int = MAX_LAYOVER_HOURS * 60

    def __post_init__(self) -> None:
        if self.min_layover_minutes < 0:
            raise ValueError("Minimum layover cannot be negative")
        if self.max_layover_minutes < self.min_layover_minutes:
            raise ValueError("Maximum layover must not be below the minimum")

    @property
    def min_layover(self) -> timedelta:
        return timedelta(minutes=self.min_layover_minutes)

    @property
    def max_layover(self) -> timedelta:
        return timedelta(minutes=self.max_layover_minutes)

    @classmethod
    def from_config(cls, config) -> LayoverRules:
        """Build rules from a SearchConfig."""
        return cls(
            min_layover_minutes=config.min_layover_minutes,
            max_layover_minutes=config.max_layover_minutes,
        )


DEFAULT_RULES = LayoverRules()


def layover_minutes(prev: Schedule, nxt: Schedule) -> int:
    """Whole minutes between prev's arrival and nxt's departure."""
    return int((nxt.departure_time - prev.arrival_time).total_seconds() // 60)


def is_valid_connection(
    prev: Schedule, nxt: Schedule, rules: LayoverRules = DEFAULT_RULES
) -> bool:
    """Check that nxt can be boarded after landing with prev."""
    if prev.destination != nxt.source:
        return False
    if not prev.arrival_time < nxt.departure_time:
        return False
    minutes = layover_minutes(prev, nxt)
    return rules.min_layover_minutes <= minutes <= rules.max_layover_minutes


def validate_itinerary(
    segments: Sequence[Schedule],
    rules: LayoverRules = DEFAULT_RULES,
    *,
    seats: int = 1,
    origin: Optional[str] = None,
    destination: Optional[str] = None,
) -> None:
    """Check every chaining, timing and capacity invariant of a chain.

    Raises:
        InvariantViolationError: On the first broken invariant.
    """
    ids = tuple(s.schedule_id for s in segments)

    def fail(reason: str) -> None:
        raise InvariantViolationError(reason, segment_ids=ids)

    if not segments:
        fail("Empty segment chain")
    if origin is not None and segments[0].source != origin:
        fail(f"Chain starts at {segments[0].source}, expected {origin}")
    if destination is not None and segments[-1].destination != destination:
        fail(f"Chain ends at {segments[-1].destination}, expected {destination}")

    visited = {segments[0].source}
    for i, segment in enumerate(segments):
        if segment.available_seats < seats:
            fail(
                f"Segment {segment.schedule_id} has {segment.available_seats} "
                f"seats, {seats} required"
            )
        if segment.destination in visited:
            fail(f"Location {segment.destination} visited twice")
        visited.add(segment.destination)

        if i > 0 and not is_valid_connection(segments[i - 1], segment, rules):
            fail(
                f"Invalid connection {segments[i - 1].schedule_id} -> "
                f"{segment.schedule_id}"
            )


def is_valid_itinerary(
    segments: Sequence[Schedule],
    rules: LayoverRules = DEFAULT_RULES,
    *,
    seats: int = 1,
    origin: Optional[str] = None,
    destination: Optional[str] = None,
) -> bool:
    """Boolean form of validate_itinerary."""
    try:
        validate_itinerary(
            segments, rules, seats=seats, origin=origin, destination=destination
        )
    except InvariantViolationError:
        return False
    return True
