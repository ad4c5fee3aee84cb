"""JSON codec for cached itinerary lists.

Cache entries are bytes. Itineraries are mapped onto pydantic records
and serialized with a TypeAdapter; fares travel as decimal strings and
timestamps as ISO 8601, so a decoded itinerary compares equal to the one
that was encoded.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Sequence

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from ..domain.errors import CacheCodecError
from ..domain.models import Itinerary, Schedule


class SegmentRecord(BaseModel):
    """Wire form of a Schedule."""

    model_config = ConfigDict(frozen=True)

    schedule_id: int
    flight_number: str
    carrier: str
    source: str
    destination: str
    departure_time: datetime
    arrival_time: datetime
    available_seats: int
    fare: Decimal

    @classmethod
    def from_schedule(cls, schedule: Schedule) -> SegmentRecord:
        return cls(
            schedule_id=schedule.schedule_id,
            flight_number=schedule.flight_number,
            carrier=schedule.carrier,
            source=schedule.source,
            destination=schedule.destination,
            departure_time=schedule.departure_time,
            arrival_time=schedule.arrival_time,
            available_seats=schedule.available_seats,
            fare=schedule.fare,
        )

    def to_schedule(self) -> Schedule:
        return Schedule(
            schedule_id=self.schedule_id,
            flight_number=self.flight_number,
            carrier=self.carrier,
            source=self.source,
            destination=self.destination,
            departure_time=self.departure_time,
            arrival_time=self.arrival_time,
            available_seats=self.available_seats,
            fare=self.fare,
        )


class ItineraryRecord(BaseModel):
    """Wire form of an Itinerary."""

    model_config = ConfigDict(frozen=True)

    segments: List[SegmentRecord]


_ITINERARY_LIST = TypeAdapter(List[ItineraryRecord])


class ItineraryCodec:
    """Encode itinerary lists to JSON bytes and back."""

    def encode(self, itineraries: Sequence[Itinerary]) -> bytes:
        """Serialize itineraries, preserving their order.

        Raises:
            CacheCodecError: If the itineraries cannot be serialized.
        """
        records = [
            ItineraryRecord(
                segments=[SegmentRecord.from_schedule(s) for s in itinerary.segments]
            )
            for itinerary in itineraries
        ]
        try:
            return _ITINERARY_LIST.dump_json(records)
        except (ValueError, TypeError) as e:
            raise CacheCodecError("Failed to encode itineraries", cause=e)

    def decode(self, payload: bytes) -> List[Itinerary]:
        """Deserialize itineraries written by encode.

        Raises:
            CacheCodecError: If the payload is malformed or describes an
                invalid schedule.
        """
        try:
            records = _ITINERARY_LIST.validate_json(payload)
            return [
                Itinerary(tuple(segment.to_schedule() for segment in record.segments))
                for record in records
            ]
        except (ValidationError, ValueError) as e:
            raise CacheCodecError("Failed to decode cached itineraries", cause=e)
