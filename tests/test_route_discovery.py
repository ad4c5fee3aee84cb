"""Tests for route discovery and its graph-backend fallback."""

import logging
import time

import pytest

from hopsearch.config import SearchConfig
from hopsearch.services.route_discovery import RouteDiscoveryService, is_simple_path


class TestIsSimplePath:
    @pytest.mark.parametrize(
        "path,hops,expected",
        [
            (["DEL", "BOM"], 0, True),
            (["DEL", "BLR", "BOM"], 1, True),
            (["DEL", "BLR", "BOM"], 0, False),
            (["DEL", "BLR", "DEL", "BOM"], 2, False),
            (["BLR", "DEL", "BOM"], 1, False),
            (["DEL", "BLR", "HYD"], 1, False),
        ],
    )
    def test_shape(self, path, hops, expected):
        assert is_simple_path(path, "DEL", "BOM", hops) is expected


class TestFindRoutesWithHops:
    def test_primary_answers(self, fake_graph_factory):
        primary = fake_graph_factory({1: [["DEL", "BLR", "BOM"]]})
        fallback = fake_graph_factory({1: [["DEL", "HYD", "BOM"]]})
        service = RouteDiscoveryService(fallback=fallback, primary=primary, config=SearchConfig())

        assert service.find_routes_with_hops("DEL", "BOM", 1) == [["DEL", "BLR", "BOM"]]
        assert fallback.calls == []

    def test_empty_primary_result_is_not_a_failure(self, fake_graph_factory):
        primary = fake_graph_factory({})
        fallback = fake_graph_factory({1: [["DEL", "HYD", "BOM"]]})
        service = RouteDiscoveryService(fallback=fallback, primary=primary, config=SearchConfig())

        assert service.find_routes_with_hops("DEL", "BOM", 1) == []
        assert fallback.calls == []

    def test_falls_back_when_primary_fails(self, fake_graph_factory, caplog):
        primary = fake_graph_factory(fail=True)
        fallback = fake_graph_factory({1: [["DEL", "HYD", "BOM"]]})
        service = RouteDiscoveryService(fallback=fallback, primary=primary, config=SearchConfig())

        with caplog.at_level(logging.WARNING):
            routes = service.find_routes_with_hops("DEL", "BOM", 1)

        assert routes == [["DEL", "HYD", "BOM"]]
        assert "Graph backend failed" in caplog.text

    def test_falls_back_when_primary_absent(self, fake_graph_factory):
        fallback = fake_graph_factory({2: [["DEL", "HYD", "GOI", "BOM"]]})
        service = RouteDiscoveryService(fallback=fallback, config=SearchConfig())
        assert service.find_routes_with_hops("DEL", "BOM", 2) == [["DEL", "HYD", "GOI", "BOM"]]

    def test_falls_back_when_primary_times_out(self, fake_graph_factory):
        primary = fake_graph_factory(
            {1: [["DEL", "BLR", "BOM"]]}, delay=lambda: time.sleep(0.5)
        )
        fallback = fake_graph_factory({1: [["DEL", "HYD", "BOM"]]})
        service = RouteDiscoveryService(
            fallback=fallback,
            primary=primary,
            config=SearchConfig(),
            call_timeout_seconds=0.05,
        )
        assert service.find_routes_with_hops("DEL", "BOM", 1) == [["DEL", "HYD", "BOM"]]

    def test_both_failing_gives_empty(self, fake_graph_factory, caplog):
        service = RouteDiscoveryService(
            fallback=fake_graph_factory(fail=True),
            primary=fake_graph_factory(fail=True),
            config=SearchConfig(),
        )
        with caplog.at_level(logging.ERROR):
            assert service.find_routes_with_hops("DEL", "BOM", 1) == []
        assert "All route backends failed" in caplog.text

    def test_discards_malformed_and_duplicate_paths(self, fake_graph_factory):
        fallback = fake_graph_factory(
            {
                1: [
                    ["DEL", "BLR", "BOM"],
                    ["DEL", "BLR", "BOM"],
                    ["DEL", "DEL", "BOM"],
                    ["DEL", "HYD", "GOI", "BOM"],
                ]
            }
        )
        service = RouteDiscoveryService(fallback=fallback, config=SearchConfig())
        assert service.find_routes_with_hops("DEL", "BOM", 1) == [["DEL", "BLR", "BOM"]]

    def test_caps_paths_per_hop(self, fake_graph_factory):
        paths = [["DEL", code, "BOM"] for code in ("BLR", "HYD", "MAA", "CCU")]
        service = RouteDiscoveryService(
            fallback=fake_graph_factory({1: paths}),
            config=SearchConfig(max_paths_per_hop=2),
        )
        assert len(service.find_routes_with_hops("DEL", "BOM", 1)) == 2

    def test_negative_hops(self, fake_graph_factory):
        service = RouteDiscoveryService(fallback=fake_graph_factory({}), config=SearchConfig())
        assert service.find_routes_with_hops("DEL", "BOM", -1) == []


class TestDiscoverPaths:
    def test_every_hop_count_is_tried(self, fake_graph_factory):
        graph = fake_graph_factory(
            {
                0: [["DEL", "BOM"]],
                1: [["DEL", "BLR", "BOM"]],
                2: [["DEL", "HYD", "GOI", "BOM"]],
            }
        )
        service = RouteDiscoveryService(fallback=graph, config=SearchConfig())

        routes = service.discover_paths("DEL", "BOM", max_hops=3)

        assert routes == [["DEL", "BOM"], ["DEL", "BLR", "BOM"], ["DEL", "HYD", "GOI", "BOM"]]
        hops_asked = [c[3] for c in graph.calls if c[0] == "paths_with_exact_hops"]
        assert hops_asked == [0, 1, 2, 3]

    def test_default_max_hops_from_config(self, fake_graph_factory):
        graph = fake_graph_factory({})
        service = RouteDiscoveryService(fallback=graph, config=SearchConfig(default_max_hops=1))
        service.discover_paths("DEL", "BOM")
        assert [c[3] for c in graph.calls] == [0, 1]


class TestFindConnectingRoutes:
    def test_union_without_direct_paths(self, fake_graph_factory):
        graph = fake_graph_factory(
            {
                0: [["DEL", "BOM"]],
                1: [["DEL", "BLR", "BOM"]],
                2: [["DEL", "HYD", "GOI", "BOM"]],
            }
        )
        service = RouteDiscoveryService(fallback=graph, config=SearchConfig())
        assert service.find_connecting_routes("DEL", "BOM") == [
            ["DEL", "BLR", "BOM"],
            ["DEL", "HYD", "GOI", "BOM"],
        ]
