"""End-to-end tests of the search orchestrator over in-memory fakes."""

import threading
from decimal import Decimal

import pytest

from hopsearch.adapters.cache import InMemoryResultCache, NullResultCache
from hopsearch.config import SearchConfig
from hopsearch.domain.connections import is_valid_itinerary
from hopsearch.domain.models import SearchRequest
from hopsearch.services import FlightSearchService, RouteDiscoveryService, SegmentMatcher


@pytest.fixture
def build_service():
    def _build(store, graph, cache=None, config=None):
        config = config or SearchConfig()
        return FlightSearchService(
            route_discovery=RouteDiscoveryService(fallback=graph, config=config),
            segment_matcher=SegmentMatcher(store=store, config=config),
            cache=cache if cache is not None else NullResultCache(),
            config=config,
        )

    return _build


def _request(**kwargs):
    params = {"departure_date": "2025-08-20"}
    params.update(kwargs)
    seats = params.pop("seats", 1)
    return SearchRequest.from_params("DEL", "BOM", seats, **params)


@pytest.fixture
def network(make_schedule, fake_store_factory, fake_graph_factory):
    """Direct flight plus one-stop and two-stop options DEL -> BOM."""
    store = fake_store_factory(
        [
            make_schedule(1, "DEL", "BOM", "09:00", "11:00", fare=5000, carrier="IndiGo"),
            make_schedule(2, "DEL", "BLR", "06:00", "09:00", fare=2000, carrier="Vistara"),
            make_schedule(3, "BLR", "BOM", "10:30", "12:00", fare=3000, carrier="IndiGo"),
            make_schedule(4, "DEL", "HYD", "06:00", "08:00", fare=2500, carrier="SpiceJet"),
            make_schedule(5, "HYD", "GOI", "09:30", "10:30", fare=1000, carrier="Air India"),
            make_schedule(6, "GOI", "BOM", "12:00", "13:00", fare=1000, carrier="IndiGo"),
        ]
    )
    graph = fake_graph_factory(
        {
            1: [["DEL", "BLR", "BOM"], ["DEL", "MAA", "BOM"]],
            2: [["DEL", "HYD", "GOI", "BOM"]],
        }
    )
    return store, graph


class TestScenarios:
    def test_direct_only(self, build_service, make_schedule, fake_store_factory, fake_graph_factory):
        store = fake_store_factory(
            [make_schedule(1, "DEL", "BOM", "06:00", "08:00", fare=15000, seats=5)]
        )
        service = build_service(store, fake_graph_factory({}))

        page = service.search(_request(seats=2, max_hops=0))

        assert page.total == 1
        assert page.items[0].hops == 0
        assert page.items[0].total_fare == Decimal("15000")

    def test_one_stop_respects_minimum_layover(
        self, build_service, make_schedule, fake_store_factory, fake_graph_factory
    ):
        store = fake_store_factory(
            [
                make_schedule(1, "DEL", "BLR", "07:00", "10:00"),
                make_schedule(2, "BLR", "BOM", "10:30", "12:00"),
                make_schedule(3, "BLR", "BOM", "11:30", "13:00"),
            ]
        )
        graph = fake_graph_factory({1: [["DEL", "BLR", "BOM"]]})
        service = build_service(store, graph)

        page = service.search(_request(max_hops=1))

        assert page.total == 1
        itinerary = page.items[0]
        assert itinerary.hops == 1
        assert itinerary.key == (1, 3)

    def test_path_with_missing_edge_contributes_nothing(self, build_service, network):
        store, graph = network
        service = build_service(store, graph)

        page = service.search(_request(max_hops=1))

        # DEL-MAA-BOM has no schedules; DEL-BLR-BOM is unaffected
        assert sorted(i.key for i in page.items) == [(1,), (2, 3)]

    def test_price_ceiling_filters_everything(
        self, build_service, make_schedule, fake_store_factory, fake_graph_factory
    ):
        store = fake_store_factory(
            [make_schedule(1, "DEL", "BOM", "06:00", "08:00", fare=15000)]
        )
        service = build_service(store, fake_graph_factory({}))

        page = service.search(_request(max_price="10000"))

        assert page.is_empty
        assert page.total == 0

    def test_price_then_hops_ordering(self, build_service, network):
        store, graph = network
        service = build_service(store, graph)

        page = service.search(_request(sort_by_price=True, sort_by_hops=True))

        # Direct, one-stop and two-stop options all cost 5000 or less
        keys = [i.key for i in page.items]
        assert keys == [(4, 5, 6), (1,), (2, 3)]
        fares = [i.total_fare for i in page.items]
        assert fares == sorted(fares)


class TestSearchProperties:
    def test_every_result_satisfies_invariants(self, build_service, network):
        store, graph = network
        page = build_service(store, graph).search(_request(seats=1, size=50))
        assert page.total == 3
        for itinerary in page.items:
            assert itinerary.origin == "DEL"
            assert itinerary.destination == "BOM"
            assert itinerary.hops == len(itinerary.segments) - 1
            assert is_valid_itinerary(itinerary.segments, seats=1)

    def test_idempotent(self, build_service, network):
        store, graph = network
        service = build_service(store, graph)
        assert service.search(_request()) == service.search(_request())

    def test_max_hops_zero_skips_route_discovery(self, build_service, network):
        store, graph = network
        build_service(store, graph).search(_request(max_hops=0))
        assert graph.calls == []

    def test_pagination(self, build_service, network):
        store, graph = network
        service = build_service(store, graph)

        first = service.search(_request(size=2, page=0))
        second = service.search(_request(size=2, page=1))
        past_end = service.search(_request(size=2, page=5))

        assert len(first.items) == 2 and len(second.items) == 1
        assert first.total == second.total == past_end.total == 3
        assert past_end.is_empty

    def test_no_routes_gives_empty_page(self, build_service, fake_store_factory, fake_graph_factory):
        page = build_service(fake_store_factory([]), fake_graph_factory({})).search(_request())
        assert page.is_empty
        assert page.total == 0

    def test_find_routes_with_hops_delegates(self, build_service, network):
        store, graph = network
        service = build_service(store, graph)
        assert service.find_routes_with_hops("DEL", "BOM", 2) == [["DEL", "HYD", "GOI", "BOM"]]


class TestResultCache:
    def test_second_search_served_from_cache(self, build_service, network):
        store, graph = network
        cache = InMemoryResultCache(default_ttl_seconds=60)
        service = build_service(store, graph, cache=cache)

        first = service.search(_request())
        calls_after_first = len(store.calls)
        second = service.search(_request(sort_by_price=True, page=0, size=1))

        assert len(store.calls) == calls_after_first
        assert second.total == first.total
        assert cache.keys() == ["flight_search:DEL_BOM_2025-08-20T00:00:00_1_3"]

    def test_undecodable_entry_treated_as_miss(self, build_service, network):
        store, graph = network
        cache = InMemoryResultCache()
        cache.put("DEL_BOM_2025-08-20T00:00:00_1_3", b"garbage")
        service = build_service(store, graph, cache=cache)

        page = service.search(_request())

        assert page.total == 3
        assert store.calls

    def test_failing_cache_does_not_fail_search(self, build_service, network):
        class BrokenCache:
            def get(self, key):
                raise RuntimeError("cache down")

            def put(self, key, value, ttl_seconds=None):
                raise RuntimeError("cache down")

            def evict(self, key):
                return False

            def evict_all(self):
                return 0

        store, graph = network
        page = build_service(store, graph, cache=BrokenCache()).search(_request())
        assert page.total == 3

    def test_evict(self, build_service, network):
        store, graph = network
        cache = InMemoryResultCache()
        service = build_service(store, graph, cache=cache)
        service.search(_request())

        assert service.evict(_request()) is True
        assert cache.size() == 0

    def test_evict_all(self, build_service, network):
        store, graph = network
        cache = InMemoryResultCache()
        service = build_service(store, graph, cache=cache)
        service.search(_request())
        service.search(_request(seats=2))

        assert service.evict_all() == 2


class TestFailureIsolation:
    def test_failing_path_does_not_affect_others(self, build_service, network, monkeypatch):
        store, graph = network
        service = build_service(store, graph)
        original = service.segment_matcher.collect_segment_options

        def flaky(path, departure, seats):
            if path[1] == "HYD":
                raise RuntimeError("boom")
            return original(path, departure, seats)

        monkeypatch.setattr(service.segment_matcher, "collect_segment_options", flaky)

        page = service.search(_request())

        assert sorted(i.key for i in page.items) == [(1,), (2, 3)]

    def test_deadline_abandons_slow_paths_and_skips_cache(self, build_service, network, monkeypatch):
        store, graph = network
        cache = InMemoryResultCache()
        config = SearchConfig(search_deadline_seconds=0.2)
        service = build_service(store, graph, cache=cache, config=config)
        original = service.segment_matcher.collect_segment_options
        release = threading.Event()

        def slow(path, departure, seats):
            if path[1] == "HYD":
                release.wait(2)
            return original(path, departure, seats)

        monkeypatch.setattr(service.segment_matcher, "collect_segment_options", slow)

        try:
            page = service.search(_request())
        finally:
            release.set()

        assert sorted(i.key for i in page.items) == [(1,), (2, 3)]
        assert cache.size() == 0

    def test_store_outage_gives_empty_page(self, build_service, fake_store_factory, network):
        _, graph = network
        page = build_service(fake_store_factory(fail=True), graph).search(_request())
        assert page.is_empty
