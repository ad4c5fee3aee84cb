"""Shared fixtures: schedule factories and in-memory fakes of the ports."""

from __future__ import annotations

import os
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

import pytest

from hopsearch.config import (
    AppConfig,
    BackendConfig,
    CacheConfig,
    SearchConfig,
    reset_config,
)
from hopsearch.container import reset_container
from hopsearch.domain.errors import RouteGraphError, ScheduleStoreError
from hopsearch.domain.models import Schedule

DATA_DIR = Path(__file__).resolve().parents[1] / "data"
BASE_DATE = "2025-08-20"

TimeLike = Union[str, datetime]


def _at(value: TimeLike) -> datetime:
    if isinstance(value, datetime):
        return value
    if "T" in value:
        return datetime.fromisoformat(value)
    return datetime.fromisoformat(f"{BASE_DATE}T{value}")


def build_schedule(
    schedule_id: int,
    source: str,
    destination: str,
    departure: TimeLike,
    arrival: TimeLike,
    fare: Union[int, str, Decimal] = 1000,
    seats: int = 10,
    carrier: str = "IndiGo",
    flight_number: Optional[str] = None,
) -> Schedule:
    return Schedule(
        schedule_id=schedule_id,
        flight_number=flight_number or f"FL{schedule_id}",
        carrier=carrier,
        source=source,
        destination=destination,
        departure_time=_at(departure),
        arrival_time=_at(arrival),
        available_seats=seats,
        fare=Decimal(str(fare)),
    )


class FakeScheduleStore:
    """ScheduleStorePort over a plain list."""

    def __init__(self, schedules: Sequence[Schedule] = (), fail: bool = False):
        self.schedules = list(schedules)
        self.fail = fail
        self.calls: List[Tuple[str, tuple]] = []

    def _check(self, name: str, args: tuple) -> None:
        self.calls.append((name, args))
        if self.fail:
            raise ScheduleStoreError("store unavailable", backend="fake")

    def find_direct(self, source, destination, after, seats):
        self._check("find_direct", (source, destination, after, seats))
        return sorted(
            (
                s
                for s in self.schedules
                if s.source == source
                and s.destination == destination
                and s.departure_time >= after
                and s.available_seats >= seats
            ),
            key=lambda s: s.departure_time,
        )

    def find_departing(self, source, window_start, window_end, seats):
        self._check("find_departing", (source, window_start, window_end, seats))
        return sorted(
            (
                s
                for s in self.schedules
                if s.source == source
                and window_start <= s.departure_time <= window_end
                and s.available_seats >= seats
            ),
            key=lambda s: s.departure_time,
        )

    def destinations_reachable_from(self, source):
        self._check("destinations_reachable_from", (source,))
        return sorted({s.destination for s in self.schedules if s.source == source})

    def has_direct_connection(self, source, destination):
        self._check("has_direct_connection", (source, destination))
        return any(
            s.source == source and s.destination == destination for s in self.schedules
        )


class FakeRouteGraph:
    """RouteGraphPort returning canned paths per hop count."""

    def __init__(
        self,
        paths_by_hops: Optional[Dict[int, List[List[str]]]] = None,
        fail: bool = False,
        delay: Optional[Callable[[], None]] = None,
    ):
        self.paths_by_hops = paths_by_hops or {}
        self.fail = fail
        self.delay = delay
        self.calls: List[tuple] = []

    def _check(self) -> None:
        if self.delay is not None:
            self.delay()
        if self.fail:
            raise RouteGraphError("graph unavailable", backend="fake")

    def paths_with_exact_hops(self, source, destination, hops, max_results):
        self.calls.append(("paths_with_exact_hops", source, destination, hops))
        self._check()
        return [list(p) for p in self.paths_by_hops.get(hops, [])][:max_results]

    def shortest_paths(self, source, destination, max_results):
        self.calls.append(("shortest_paths", source, destination))
        self._check()
        found = []
        for hops in sorted(self.paths_by_hops):
            found.extend(list(p) for p in self.paths_by_hops[hops])
        return found[:max_results]

    def one_stop_connections(self, source, destination, max_results):
        self.calls.append(("one_stop_connections", source, destination))
        self._check()
        return [list(p) for p in self.paths_by_hops.get(1, [])][:max_results]


class FakeScheduleIndex:
    """ScheduleIndexPort that can be told to fail or return nothing."""

    def __init__(self, schedules: Sequence[Schedule] = (), fail: bool = False):
        self.schedules = list(schedules)
        self.fail = fail
        self.calls = 0

    def _select(self, source, destination, start, end, seats, limit):
        self.calls += 1
        if self.fail:
            raise ScheduleStoreError("index unavailable", backend="fake-index")
        found = [
            s
            for s in self.schedules
            if s.source == source
            and s.destination == destination
            and s.departure_time >= start
            and (end is None or s.departure_time <= end)
            and s.available_seats >= seats
        ]
        found.sort(key=lambda s: s.departure_time)
        return found[:limit]

    def find_direct(self, source, destination, after, seats, limit=100):
        return self._select(source, destination, after, None, seats, limit)

    def find_in_window(self, source, destination, window_start, window_end, seats, limit=100):
        return self._select(source, destination, window_start, window_end, seats, limit)


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch):
    """Keep environment overrides and global singletons out of tests."""
    for var in list(os.environ):
        if var.startswith("HOPSEARCH_"):
            monkeypatch.delenv(var, raising=False)
    reset_config()
    reset_container()
    yield
    reset_config()
    reset_container()


@pytest.fixture
def make_schedule():
    """Factory building schedules on 2025-08-20 from 'HH:MM' times."""
    return build_schedule


@pytest.fixture
def search_config() -> SearchConfig:
    return SearchConfig()


@pytest.fixture
def app_config() -> AppConfig:
    """Configuration pointing at the bundled sample data."""
    return AppConfig(
        search=SearchConfig(),
        backend=BackendConfig(data_dir=DATA_DIR),
        cache=CacheConfig(),
    )


@pytest.fixture
def fake_store_factory():
    return FakeScheduleStore


@pytest.fixture
def fake_graph_factory():
    return FakeRouteGraph


@pytest.fixture
def fake_index_factory():
    return FakeScheduleIndex
