"""Typed domain errors for the itinerary search engine.

Collaborator failures are raised as typed errors by adapters and caught
by the services that own the fallback policy, so a failing backend never
aborts a whole multi-path search.

All errors inherit from FlightSearchError and can optionally
wrap a root cause exception for debugging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class FlightSearchError(Exception):
    """Base error for the flight search domain.

    All domain-specific errors inherit from this class.

    Attributes:
        message: Human-readable error description
        cause: Optional underlying exception that caused this error
    """

    message: str
    cause: Optional[Exception] = field(default=None, repr=False)

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def __post_init__(self) -> None:
        super().__init__(self.message)


@dataclass
class InvalidRequestError(FlightSearchError):
    """A search request failed validation before any search work.

    Attributes:
        field_name: Name of the offending request field
    """

    field_name: str = ""


@dataclass
class ScheduleStoreError(FlightSearchError):
    """A schedule backend (fast index or relational store) failed.

    Attributes:
        backend: Name of the backend that failed
    """

    backend: str = ""


@dataclass
class RouteGraphError(FlightSearchError):
    """A route graph backend failed to load or answer a query.

    Attributes:
        backend: Name of the backend that failed
        file_path: Path to the graph data file if relevant
    """

    backend: str = ""
    file_path: Optional[str] = None


@dataclass
class CollaboratorTimeoutError(FlightSearchError):
    """A blocking collaborator call exceeded its time budget.

    Attributes:
        operation: Name of the call that timed out
        timeout_seconds: The budget that was exceeded
    """

    operation: str = ""
    timeout_seconds: float = 0.0


@dataclass
class InvariantViolationError(FlightSearchError):
    """A generated itinerary breaks a chaining or timing invariant.

    Attributes:
        segment_ids: Schedule ids of the offending combination
    """

    segment_ids: tuple[int, ...] = ()


@dataclass
class CacheCodecError(FlightSearchError):
    """A cached payload could not be encoded or decoded."""
