"""Domain layer - Core business models, connection rules and errors.

This module contains immutable domain models and typed errors
used throughout the application. No external dependencies.
"""

from .connections import (
    DEFAULT_RULES,
    LayoverRules,
    is_valid_connection,
    is_valid_itinerary,
    validate_itinerary,
)
from .errors import (
    CacheCodecError,
    CollaboratorTimeoutError,
    FlightSearchError,
    InvalidRequestError,
    InvariantViolationError,
    RouteGraphError,
    ScheduleStoreError,
)
from .models import (
    GeoLocation,
    Itinerary,
    Location,
    RouteEdge,
    Schedule,
    SearchRequest,
    SearchResultPage,
    SortMode,
)

__all__ = [
    # Models
    "GeoLocation",
    "Location",
    "RouteEdge",
    "Schedule",
    "Itinerary",
    "SearchRequest",
    "SearchResultPage",
    "SortMode",
    # Connection rules
    "LayoverRules",
    "DEFAULT_RULES",
    "is_valid_connection",
    "is_valid_itinerary",
    "validate_itinerary",
    # Errors
    "FlightSearchError",
    "InvalidRequestError",
    "ScheduleStoreError",
    "RouteGraphError",
    "CollaboratorTimeoutError",
    "InvariantViolationError",
    "CacheCodecError",
]
