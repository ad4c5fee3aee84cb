"""Dependency injection container.

This module provides a simple DI container without external frameworks.
It allows registering and resolving dependencies for the application.

Design principles:
1. No magic - explicit registration and resolution
2. Testable - easy to swap implementations
3. Lazy loading - adapters instantiated on first use
4. Thread-safe - for web server contexts
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .config import AppConfig, get_config
from .domain.models import Schedule


@dataclass(frozen=True)
class _ScheduleData:
    """Schedules loaded from the configured CSV file."""

    schedules: List[Schedule]


@dataclass
class Container:
    """Dependency injection container.

    Usage:
        # Production
        container = Container.create_default()
        service = container.resolve(FlightSearchService)

        # Testing
        container = Container()
        container.register(ScheduleStorePort, lambda: FakeStore())
        store = container.resolve(ScheduleStorePort)

    Attributes:
        config: Application configuration
    """

    config: AppConfig = field(default_factory=get_config)

    _factories: Dict[type[Any], Callable[[], Any]] = field(
        default_factory=dict, repr=False
    )
    _singletons: Dict[type[Any], Any] = field(default_factory=dict, repr=False)
    _singleton_types: set[type[Any]] = field(default_factory=set, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def register(
        self,
        port_type: type[Any],
        factory: Callable[[], Any],
        singleton: bool = True,
    ) -> None:
        """Register a factory for a port type.

        Args:
            port_type: The type (usually a Protocol) to register.
            factory: A callable that creates instances of the type.
            singleton: If True, only one instance is created.
        """
        with self._lock:
            self._factories[port_type] = factory
            if singleton:
                self._singleton_types.add(port_type)

    def resolve(self, port_type: type[Any]) -> Any:
        """Resolve an instance of a port type.

        Args:
            port_type: The type to resolve.

        Returns:
            An instance of the requested type.

        Raises:
            KeyError: If the type is not registered.
        """
        with self._lock:
            if port_type not in self._factories:
                raise KeyError(f"Type not registered: {port_type}")

            if port_type in self._singleton_types:
                if port_type not in self._singletons:
                    self._singletons[port_type] = self._factories[port_type]()
                return self._singletons[port_type]

            return self._factories[port_type]()

    def is_registered(self, port_type: type[Any]) -> bool:
        """Check if a type is registered.

        Args:
            port_type: The type to check.

        Returns:
            True if the type is registered.
        """
        return port_type in self._factories

    def clear_singletons(self) -> None:
        """Clear all cached singletons.

        Call this in tests to ensure fresh instances.
        """
        with self._lock:
            self._singletons.clear()

    def clear_all(self) -> None:
        """Clear all registrations and singletons.

        Call this to completely reset the container.
        """
        with self._lock:
            self._factories.clear()
            self._singletons.clear()
            self._singleton_types.clear()

    @classmethod
    def create_default(cls, config: Optional[AppConfig] = None) -> Container:
        """Create a container with default production bindings.

        Schedules are loaded from the configured CSV file into both the
        fast index and the relational store when the store is first
        resolved.

        Args:
            config: Optional configuration override.

        Returns:
            A configured Container instance.
        """
        from .adapters.cache import InMemoryResultCache, NullResultCache
        from .adapters.graph import CSVRouteGraph, ScheduleDerivedRouteGraph
        from .adapters.schedules import (
            InMemoryScheduleIndex,
            SqliteScheduleStore,
            load_schedules_csv,
        )
        from .ports.cache import ResultCachePort
        from .ports.schedules import ScheduleIndexPort, ScheduleStorePort
        from .services import (
            FlightSearchService,
            ItineraryCodec,
            RouteDiscoveryService,
            SegmentMatcher,
        )

        config = config or get_config()
        container = cls(config=config)
        backend = config.backend

        # Schedules (loaded once, shared by index and store)
        container.register(
            _ScheduleData, lambda: _ScheduleData(load_schedules_csv(backend.schedules_path))
        )

        def create_store() -> ScheduleStorePort:
            store = SqliteScheduleStore(backend.sqlite_path)
            store.add_schedules(container.resolve(_ScheduleData).schedules)
            return store

        container.register(ScheduleStorePort, create_store)

        def create_index() -> Optional[ScheduleIndexPort]:
            if not backend.use_index:
                return None
            return InMemoryScheduleIndex(container.resolve(_ScheduleData).schedules)

        container.register(ScheduleIndexPort, create_index)

        # Route graphs
        container.register(
            CSVRouteGraph,
            lambda: CSVRouteGraph(backend) if backend.use_graph else None,
        )
        container.register(
            ScheduleDerivedRouteGraph,
            lambda: ScheduleDerivedRouteGraph(
                container.resolve(ScheduleStorePort),
                fallback_hubs=list(config.search.fallback_hubs),
            ),
        )

        # Cache
        def create_cache() -> ResultCachePort:
            if not config.cache.enabled:
                return NullResultCache()
            return InMemoryResultCache(
                default_ttl_seconds=config.cache.ttl_seconds,
                max_size=config.cache.max_size,
                key_prefix=config.cache.key_prefix,
            )

        container.register(ResultCachePort, create_cache)

        # Services
        container.register(
            RouteDiscoveryService,
            lambda: RouteDiscoveryService(
                fallback=container.resolve(ScheduleDerivedRouteGraph),
                primary=container.resolve(CSVRouteGraph),
                config=config.search,
                call_timeout_seconds=backend.call_timeout_seconds,
            ),
        )
        container.register(
            SegmentMatcher,
            lambda: SegmentMatcher(
                store=container.resolve(ScheduleStorePort),
                index=container.resolve(ScheduleIndexPort),
                config=config.search,
                call_timeout_seconds=backend.call_timeout_seconds,
            ),
        )

        # Main service
        def create_flight_search() -> FlightSearchService:
            return FlightSearchService(
                route_discovery=container.resolve(RouteDiscoveryService),
                segment_matcher=container.resolve(SegmentMatcher),
                cache=container.resolve(ResultCachePort),
                codec=ItineraryCodec(),
                config=config.search,
                cache_ttl_seconds=config.cache.ttl_seconds,
            )

        container.register(FlightSearchService, create_flight_search)

        return container


# Global default container (lazy initialized)
_default_container: Optional[Container] = None
_container_lock = threading.Lock()


def get_container() -> Container:
    """Get the default application container.

    Returns:
        The default Container instance (creates one if needed).
    """
    global _default_container
    if _default_container is None:
        with _container_lock:
            if _default_container is None:
                _default_container = Container.create_default()
    return _default_container


def reset_container() -> None:
    """Reset the default container.

    Call this in tests to ensure a fresh container.
    """
    global _default_container
    with _container_lock:
        if _default_container is not None:
            _default_container.clear_all()
        _default_container = None
