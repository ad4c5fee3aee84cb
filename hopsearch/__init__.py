"""Multi-hop flight itinerary search.

Given an origin, a destination, a departure time and a seat count, the
engine enumerates itineraries of up to a configurable number of stops,
chains concrete flight schedules under layover rules, and returns a
ranked, filtered page of results.

Typical use goes through the dependency container:

    from hopsearch.container import Container
    from hopsearch.domain import SearchRequest
    from hopsearch.services import FlightSearchService

    service = Container.create_default().resolve(FlightSearchService)
    page = service.search(SearchRequest.from_params("DEL", "BOM", 1, departure_date="2025-08-20"))
"""

__version__ = "0.1.0"
