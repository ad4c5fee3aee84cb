"""Immutable domain models for the itinerary search engine.

All models are frozen dataclasses with slots for memory efficiency.
These models have no external dependencies and represent the core
business concepts of the application.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum, auto
from typing import Optional, Union

from .errors import InvalidRequestError


def _is_aware(value: datetime) -> bool:
    return value.tzinfo is not None and value.utcoffset() is not None


class SortMode(Enum):
    """Ranking order of a result page.

    Derived from the two request flags: price wins over hops when both
    are set, and hops become the secondary key.
    """

    PRICE_THEN_HOPS = auto()
    PRICE = auto()
    HOPS = auto()
    DEPARTURE = auto()


@dataclass(frozen=True, slots=True)
class GeoLocation:
    """GPS coordinates representing a geographic location."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        """Validate coordinate ranges."""
        if not -90 <= self.latitude <= 90:
            raise ValueError(
                f"Latitude must be between -90 and 90, got {self.latitude}"
            )
        if not -180 <= self.longitude <= 180:
            raise ValueError(
                f"Longitude must be between -180 and 180, got {self.longitude}"
            )


@dataclass(frozen=True, slots=True)
class Location:
    """An airport with its coordinates and metadata.

    Attributes:
        code: Unique location identifier (e.g., 'DEL')
        name: Human-readable airport name
        city: City served by the airport
        country: Country name
        location: GPS coordinates
    """

    code: str
    name: str
    city: str
    country: str = ""
    location: GeoLocation = field(default_factory=lambda: GeoLocation(0.0, 0.0))


@dataclass(frozen=True, slots=True)
class RouteEdge:
    """Directed connection between two locations.

    Used for topology discovery only. Bookable data comes from the
    schedule store.
    """

    source: str
    destination: str
    carrier: str = ""
    flight_number: str = ""
    distance_km: float = 0.0
    avg_duration_minutes: int = 0
    avg_fare: float = 0.0
    daily_frequency: int = 0


@dataclass(frozen=True, slots=True)
class Schedule:
    """A concrete bookable flight instance.

    Attributes:
        schedule_id: Unique id of this flight instance
        flight_number: Owning flight identifier (e.g., 'AI101')
        carrier: Airline operating the flight
        source: Departure location code
        destination: Arrival location code
        departure_time: Departure timestamp
        arrival_time: Arrival timestamp
        available_seats: Seats still available
        fare: Base fare for one seat
    """

    schedule_id: int
    flight_number: str
    carrier: str
    source: str
    destination: str
    departure_time: datetime
    arrival_time: datetime
    available_seats: int
    fare: Decimal

    def __post_init__(self) -> None:
        if _is_aware(self.departure_time) or _is_aware(self.arrival_time):
            raise ValueError(
                f"Schedule {self.schedule_id}: timestamps must be naive local times"
            )
        if self.departure_time >= self.arrival_time:
            raise ValueError(
                f"Schedule {self.schedule_id}: departure must precede arrival"
            )
        if self.source == self.destination:
            raise ValueError(
                f"Schedule {self.schedule_id}: source equals destination"
            )
        if self.available_seats < 0:
            raise ValueError(
                f"Schedule {self.schedule_id}: negative seat count"
            )
        if self.fare < 0:
            raise ValueError(f"Schedule {self.schedule_id}: negative fare")

    @property
    def duration(self) -> timedelta:
        """Return the flight duration."""
        return self.arrival_time - self.departure_time


@dataclass(frozen=True, slots=True)
class Itinerary:
    """Ordered chain of schedules from overall origin to destination.

    Equality is structural: two itineraries built from the same
    schedules in the same order are the same itinerary.

    Attributes:
        segments: The schedules, in travel order
    """

    segments: tuple[Schedule, ...]

    def __post_init__(self) -> None:
        if not self.segments:
            raise ValueError("Itinerary needs at least one segment")

    @property
    def hops(self) -> int:
        """Number of intermediate stops."""
        return len(self.segments) - 1

    @property
    def key(self) -> tuple[int, ...]:
        """Ordered schedule ids, the deduplication identity."""
        return tuple(s.schedule_id for s in self.segments)

    @property
    def origin(self) -> str:
        return self.segments[0].source

    @property
    def destination(self) -> str:
        return self.segments[-1].destination

    @property
    def path(self) -> tuple[str, ...]:
        """Location codes visited, origin first."""
        return (self.segments[0].source,) + tuple(
            s.destination for s in self.segments
        )

    @property
    def departure_time(self) -> datetime:
        return self.segments[0].departure_time

    @property
    def arrival_time(self) -> datetime:
        return self.segments[-1].arrival_time

    @property
    def total_duration(self) -> timedelta:
        """Last arrival minus first departure."""
        return self.arrival_time - self.departure_time

    @property
    def total_fare(self) -> Decimal:
        """Sum of segment fares."""
        return sum((s.fare for s in self.segments), Decimal("0"))

    @property
    def flight_number(self) -> str:
        """Segment flight numbers joined with '+'."""
        return "+".join(s.flight_number for s in self.segments)

    @property
    def carrier(self) -> str:
        """Distinct carriers in travel order joined with ' / '."""
        seen: list[str] = []
        for s in self.segments:
            if s.carrier not in seen:
                seen.append(s.carrier)
        return " / ".join(seen)

    @property
    def layovers(self) -> tuple[timedelta, ...]:
        """Ground time at each intermediate stop."""
        return tuple(
            nxt.departure_time - prev.arrival_time
            for prev, nxt in zip(self.segments, self.segments[1:])
        )


def _parse_datetime(value: Union[str, datetime, None], field_name: str) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError as e:
            raise InvalidRequestError(
                f"Unparsable timestamp for {field_name}: {value!r}",
                field_name=field_name,
                cause=e,
            )
    if _is_aware(parsed):
        raise InvalidRequestError(
            f"Timestamp for {field_name} must not carry a UTC offset: {value!r}",
            field_name=field_name,
        )
    return parsed


def _parse_date(value: Union[str, date, None], field_name: str) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value.strip())
    except ValueError as e:
        raise InvalidRequestError(
            f"Unparsable date for {field_name}: {value!r}",
            field_name=field_name,
            cause=e,
        )


def _parse_time(value: Union[str, time, None], field_name: str) -> Optional[time]:
    if value is None or isinstance(value, time):
        return value
    try:
        return datetime.strptime(value.strip(), "%H:%M").time()
    except ValueError as e:
        raise InvalidRequestError(
            f"Unparsable time for {field_name} (expected HH:MM): {value!r}",
            field_name=field_name,
            cause=e,
        )


@dataclass(frozen=True, slots=True)
class SearchRequest:
    """Validated, immutable search parameters.

    The departure can be given either as an explicit date with an
    optional preferred time, or as a legacy combined timestamp. The
    explicit date takes priority.

    Attributes:
        origin: Origin location code
        destination: Destination location code
        seats: Number of seats required
        departure_time: Legacy combined departure timestamp
        departure_date: Explicit departure date
        preferred_time: Time of day on departure_date (midnight if unset)
        max_price: Optional ceiling on total fare
        max_hops: Optional maximum number of stops
        carrier: Optional carrier substring filter
        sort_by_price: Rank by total fare
        sort_by_hops: Rank by number of stops
        page: Zero-based page index
        size: Page size
    """

    origin: str
    destination: str
    seats: int
    departure_time: Optional[datetime] = None
    departure_date: Optional[date] = None
    preferred_time: Optional[time] = None
    max_price: Optional[Decimal] = None
    max_hops: Optional[int] = None
    carrier: Optional[str] = None
    sort_by_price: bool = False
    sort_by_hops: bool = False
    page: int = 0
    size: int = 10

    def __post_init__(self) -> None:
        if not self.origin or not self.origin.strip():
            raise InvalidRequestError("Origin is required", field_name="origin")
        if not self.destination or not self.destination.strip():
            raise InvalidRequestError(
                "Destination is required", field_name="destination"
            )
        if self.origin == self.destination:
            raise InvalidRequestError(
                "Origin and destination must differ", field_name="destination"
            )
        if self.seats is None or self.seats <= 0:
            raise InvalidRequestError(
                "Number of seats must be positive", field_name="seats"
            )
        if self.departure_time is None and self.departure_date is None:
            raise InvalidRequestError(
                "A departure date or timestamp is required",
                field_name="departure_date",
            )
        if self.max_hops is not None and self.max_hops < 0:
            raise InvalidRequestError(
                "Maximum hops cannot be negative", field_name="max_hops"
            )
        if self.departure_time is not None and _is_aware(self.departure_time):
            raise InvalidRequestError(
                "Departure timestamp must be a naive local time",
                field_name="departure_at",
            )
        if self.preferred_time is not None and self.preferred_time.tzinfo is not None:
            raise InvalidRequestError(
                "Preferred time must be a naive local time",
                field_name="preferred_time",
            )
        if self.max_price is not None:
            if not Decimal(self.max_price).is_finite():
                raise InvalidRequestError(
                    "Maximum price must be a finite number", field_name="max_price"
                )
            if self.max_price < 0:
                raise InvalidRequestError(
                    "Maximum price cannot be negative", field_name="max_price"
                )
        if self.page < 0:
            raise InvalidRequestError("Page cannot be negative", field_name="page")
        if self.size <= 0:
            raise InvalidRequestError("Page size must be positive", field_name="size")

    @classmethod
    def from_params(
        cls,
        origin: str,
        destination: str,
        seats: int,
        *,
        departure_at: Union[str, datetime, None] = None,
        departure_date: Union[str, date, None] = None,
        preferred_time: Union[str, time, None] = None,
        max_price: Union[str, float, Decimal, None] = None,
        max_hops: Optional[int] = None,
        carrier: Optional[str] = None,
        sort_by_price: bool = False,
        sort_by_hops: bool = False,
        page: int = 0,
        size: int = 10,
    ) -> SearchRequest:
        """Build a request from loosely typed parameters.

        Strings are parsed as ISO timestamps ('2025-08-20T06:00:00'),
        ISO dates ('2025-08-20') and 'HH:MM' times.

        Raises:
            InvalidRequestError: If any value cannot be parsed or fails
                validation.
        """
        price: Optional[Decimal] = None
        if max_price is not None:
            try:
                price = Decimal(str(max_price))
            except ArithmeticError as e:
                raise InvalidRequestError(
                    f"Unparsable max price: {max_price!r}",
                    field_name="max_price",
                    cause=e,
                )
            if not price.is_finite():
                raise InvalidRequestError(
                    f"Max price must be a finite number: {max_price!r}",
                    field_name="max_price",
                )

        return cls(
            origin=(origin or "").strip().upper(),
            destination=(destination or "").strip().upper(),
            seats=seats,
            departure_time=_parse_datetime(departure_at, "departure_at"),
            departure_date=_parse_date(departure_date, "departure_date"),
            preferred_time=_parse_time(preferred_time, "preferred_time"),
            max_price=price,
            max_hops=max_hops,
            carrier=carrier.strip() if carrier and carrier.strip() else None,
            sort_by_price=sort_by_price,
            sort_by_hops=sort_by_hops,
            page=page,
            size=size,
        )

    @property
    def effective_departure(self) -> datetime:
        """Resolve the search start timestamp.

        Explicit date plus preferred time first (midnight when no time is
        given), then the legacy combined timestamp.
        """
        if self.departure_date is not None:
            return datetime.combine(
                self.departure_date, self.preferred_time or time(0, 0)
            )
        if self.departure_time is None:
            raise InvalidRequestError(
                "A departure date or timestamp is required",
                field_name="departure_date",
            )
        return self.departure_time

    def effective_max_hops(self, default: int) -> int:
        return self.max_hops if self.max_hops is not None else default

    @property
    def sort_mode(self) -> SortMode:
        if self.sort_by_price and self.sort_by_hops:
            return SortMode.PRICE_THEN_HOPS
        if self.sort_by_price:
            return SortMode.PRICE
        if self.sort_by_hops:
            return SortMode.HOPS
        return SortMode.DEPARTURE

    def cache_key(self, default_max_hops: int) -> str:
        """Key of the memoized itinerary set for this request.

        Only the inputs that change which itineraries exist are part of
        the key; filters, sorting and paging are applied after lookup.
        """
        return "_".join(
            [
                self.origin,
                self.destination,
                self.effective_departure.isoformat(),
                str(self.seats),
                str(self.effective_max_hops(default_max_hops)),
            ]
        )


@dataclass(frozen=True, slots=True)
class SearchResultPage:
    """One page of ranked itineraries.

    Attributes:
        items: Itineraries on this page, in ranking order
        total: Number of itineraries across all pages
        page: Zero-based page index
        size: Requested page size
    """

    items: tuple[Itinerary, ...] = field(default_factory=tuple)
    total: int = 0
    page: int = 0
    size: int = 10

    @property
    def is_empty(self) -> bool:
        """Check if this page holds no itineraries."""
        return len(self.items) == 0

    @property
    def total_pages(self) -> int:
        if self.size <= 0:
            return 0
        return (self.total + self.size - 1) // self.size

    @property
    def has_next(self) -> bool:
        return self.page + 1 < self.total_pages
