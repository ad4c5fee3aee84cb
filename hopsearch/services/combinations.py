"""Backtracking over per-edge candidate lists.

Given one candidate list per edge of a path, enumerate every chain of
schedules (one per edge) that satisfies the connection rules. Branches
are pruned as soon as a connection fails, and a single reusable buffer
holds the partial chain.
"""

from __future__ import annotations

import logging
from typing import Iterator, List, Optional, Sequence, Set

from ..domain.connections import (
    DEFAULT_RULES,
    LayoverRules,
    is_valid_connection,
    validate_itinerary,
)
from ..domain.errors import InvariantViolationError
from ..domain.models import Itinerary, Schedule
from ..ports.graph import Path

logger = logging.getLogger(__name__)


def count_combinations(options: Sequence[Sequence[Schedule]]) -> int:
    """Size of the unpruned search space (product of list lengths)."""
    if not options:
        return 0
    total = 1
    for candidates in options:
        total *= len(candidates)
    return total


def generate_combinations(
    options: Sequence[Sequence[Schedule]],
    rules: LayoverRules = DEFAULT_RULES,
    *,
    seats: int = 1,
    origin: Optional[str] = None,
    destination: Optional[str] = None,
) -> Iterator[Itinerary]:
    """Yield every valid chain, one schedule per edge.

    Args:
        options: Candidate schedules for each edge, in path order.
        rules: Layover window.
        seats: Seats every segment must offer.
        origin: Expected overall origin, checked on complete chains.
        destination: Expected overall destination, checked on complete chains.

    Yields:
        Itineraries in candidate-list order (depth-first).
    """
    if not options or any(len(c) == 0 for c in options):
        return

    depth = len(options)
    buffer: List[Schedule] = []
    visited: Set[str] = set()

    def walk(index: int) -> Iterator[Itinerary]:
        if index == depth:
            try:
                validate_itinerary(
                    buffer, rules, seats=seats, origin=origin, destination=destination
                )
            except InvariantViolationError as e:
                logger.warning(
                    "Dropping invalid combination",
                    extra={"segment_ids": e.segment_ids, "reason": e.message},
                )
                return
            yield Itinerary(tuple(buffer))
            return

        for candidate in options[index]:
            if candidate.available_seats < seats:
                continue
            if buffer:
                if not is_valid_connection(buffer[-1], candidate, rules):
                    continue
            else:
                visited.clear()
                visited.add(candidate.source)
            if candidate.destination in visited:
                continue

            buffer.append(candidate)
            visited.add(candidate.destination)

            yield from walk(index + 1)

            # Backtrack
            visited.discard(candidate.destination)
            buffer.pop()

    yield from walk(0)


def build_itineraries(
    path: Path,
    options: Sequence[Sequence[Schedule]],
    rules: LayoverRules = DEFAULT_RULES,
    seats: int = 1,
) -> List[Itinerary]:
    """Build all valid itineraries that follow a path exactly.

    Every returned itinerary has len(path) - 1 segments, so its hop
    count equals the path's number of intermediate locations.

    Raises:
        ValueError: If the number of candidate lists does not match the
            number of edges of the path.
    """
    if len(options) != len(path) - 1:
        raise ValueError(
            f"Expected {len(path) - 1} candidate lists for path {path}, "
            f"got {len(options)}"
        )

    expected = tuple(path)
    itineraries: List[Itinerary] = []
    for itinerary in generate_combinations(
        options, rules, seats=seats, origin=path[0], destination=path[-1]
    ):
        if itinerary.path != expected:
            logger.warning(
                "Dropping itinerary that leaves its path",
                extra={"path": list(path), "segment_ids": itinerary.key},
            )
            continue
        itineraries.append(itinerary)

    logger.debug(
        "Built itineraries for path",
        extra={
            "path": list(path),
            "search_space": count_combinations(options),
            "itineraries": len(itineraries),
        },
    )
    return itineraries
