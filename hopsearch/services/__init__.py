"""Services layer - Application orchestration.

This module contains the application services that orchestrate the
flow of data through adapters to fulfill use cases.

Available services:
- FlightSearchService: Main multi-hop itinerary search
- RouteDiscoveryService: Route enumeration with graph-backend fallback
- SegmentMatcher: Per-edge schedule lookup with index-store fallback
"""

from .codec import ItineraryCodec
from .flight_search import FlightSearchService
from .route_discovery import RouteDiscoveryService
from .segment_matching import SegmentMatcher

__all__ = [
    "FlightSearchService",
    "ItineraryCodec",
    "RouteDiscoveryService",
    "SegmentMatcher",
]
