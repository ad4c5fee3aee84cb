"""Result aggregation and ranking.

Deduplicate, filter, sort and paginate itineraries. Every sort mode is a
total order: ties on the primary keys are broken by departure time and
then by the ordered schedule ids, so a result page is reproducible
regardless of the order in which paths finished.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from ..domain.models import Itinerary, SearchRequest, SearchResultPage, SortMode


def deduplicate(itineraries: Iterable[Itinerary]) -> List[Itinerary]:
    """Drop repeated schedule chains, keeping the first occurrence."""
    seen = set()
    unique: List[Itinerary] = []
    for itinerary in itineraries:
        if itinerary.key in seen:
            continue
        seen.add(itinerary.key)
        unique.append(itinerary)
    return unique


def apply_filters(
    itineraries: Iterable[Itinerary],
    max_price: Optional[Decimal] = None,
    carrier: Optional[str] = None,
) -> List[Itinerary]:
    """Keep itineraries under the price ceiling and matching the carrier.

    Args:
        itineraries: Candidate itineraries.
        max_price: Inclusive ceiling on the total fare.
        carrier: Case-insensitive substring of the combined carrier string.
    """
    needle = carrier.strip().lower() if carrier and carrier.strip() else None
    kept: List[Itinerary] = []
    for itinerary in itineraries:
        if max_price is not None and itinerary.total_fare > max_price:
            continue
        if needle is not None and needle not in itinerary.carrier.lower():
            continue
        kept.append(itinerary)
    return kept


_SortKey = Callable[[Itinerary], Tuple]

_SORT_KEYS: Dict[SortMode, _SortKey] = {
    SortMode.PRICE_THEN_HOPS: lambda i: (i.total_fare, i.hops, i.departure_time, i.key),
    SortMode.PRICE: lambda i: (i.total_fare, i.departure_time, i.key),
    SortMode.HOPS: lambda i: (i.hops, i.departure_time, i.key),
    SortMode.DEPARTURE: lambda i: (i.departure_time, i.key),
}


def sort_itineraries(
    itineraries: Iterable[Itinerary], mode: SortMode = SortMode.DEPARTURE
) -> List[Itinerary]:
    return sorted(itineraries, key=_SORT_KEYS[mode])


def paginate(itineraries: Sequence[Itinerary], page: int, size: int) -> SearchResultPage:
    """Slice one page out of a ranked list.

    A page past the end is empty but still reports the full total.
    """
    total = len(itineraries)
    offset = page * size
    end = min(offset + size, total)
    items = tuple(itineraries[offset:end]) if offset < total else ()
    return SearchResultPage(items=items, total=total, page=page, size=size)


def rank(itineraries: Iterable[Itinerary], request: SearchRequest) -> SearchResultPage:
    """Deduplicate, filter, sort and paginate for a request."""
    unique = deduplicate(itineraries)
    filtered = apply_filters(unique, request.max_price, request.carrier)
    ordered = sort_itineraries(filtered, request.sort_mode)
    return paginate(ordered, request.page, request.size)
