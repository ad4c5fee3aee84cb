"""Centralized configuration using Pydantic Settings.

This module provides a single source of truth for all configuration
used by the itinerary search engine:
- layover window and search horizon (connection rules)
- result caps per segment, per hop count and per graph query
- backend data files and per-call timeouts
- result cache TTL and key prefix
- logging

Configuration can be overridden via environment variables:
- HOPSEARCH_SEARCH_MIN_LAYOVER_MINUTES=45
- HOPSEARCH_BACKEND_DATA_DIR=/path/to/data
- HOPSEARCH_CACHE_ENABLED=false
- etc.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List, Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_HUBS = ["BOM", "DEL", "BLR", "MAA", "CCU", "HYD", "AMD", "COK", "GAU", "PNQ"]


class SearchConfig(BaseSettings):
    """Search-engine tuning.

    Environment variables prefixed with HOPSEARCH_SEARCH_.
    """

    model_config = SettingsConfigDict(env_prefix="HOPSEARCH_SEARCH_")

    min_layover_minutes: int = Field(default=60, ge=0)
    max_layover_hours: int = Field(default=6, ge=0)
    default_max_hops: int = Field(default=3, ge=0)
    segment_window_hours: int = Field(default=24, gt=0)

    max_candidates_per_segment: int = Field(default=100, gt=0)
    max_paths_per_hop: int = Field(default=100, gt=0)
    direct_results_limit: int = Field(default=100, gt=0)
    one_stop_max_results: int = 50
    shortest_paths_max_results: int = 30
    connecting_results_limit: int = 100

    window_anchoring: Literal["earliest", "exact"] = "earliest"

    max_workers: int = Field(default=4, gt=0)
    search_deadline_seconds: float = Field(default=30.0, gt=0)
    default_page_size: int = Field(default=10, gt=0)

    fallback_hubs: List[str] = Field(default_factory=lambda: list(DEFAULT_HUBS))

    @model_validator(mode="after")
    def check_layover_window(self) -> SearchConfig:
        if self.max_layover_minutes < self.min_layover_minutes:
            raise ValueError(
                f"max_layover_hours ({self.max_layover_hours}h) is below "
                f"min_layover_minutes ({self.min_layover_minutes})"
            )
        return self

    @property
    def max_layover_minutes(self) -> int:
        """Upper bound of the layover window in minutes."""
        return self.max_layover_hours * 60


class BackendConfig(BaseSettings):
    """Schedule store and route graph backends.

    Environment variables prefixed with HOPSEARCH_BACKEND_.
    """

    model_config = SettingsConfigDict(env_prefix="HOPSEARCH_BACKEND_")

    data_dir: Path = Field(
        default_factory=lambda: Path(__file__).resolve().parent.parent / "data"
    )
    schedules_file: str = "schedules.csv"
    locations_file: str = "locations.csv"
    routes_file: str = "routes.csv"
    sqlite_path: str = ":memory:"

    call_timeout_seconds: float = Field(default=5.0, gt=0)
    use_index: bool = True
    use_graph: bool = True

    @property
    def schedules_path(self) -> Path:
        """Full path to schedules CSV file."""
        return self.data_dir / self.schedules_file

    @property
    def locations_path(self) -> Path:
        """Full path to locations CSV file."""
        return self.data_dir / self.locations_file

    @property
    def routes_path(self) -> Path:
        """Full path to route edges CSV file."""
        return self.data_dir / self.routes_file


class CacheConfig(BaseSettings):
    """Result cache configuration.

    Environment variables prefixed with HOPSEARCH_CACHE_.
    """

    model_config = SettingsConfigDict(env_prefix="HOPSEARCH_CACHE_")

    enabled: bool = True
    ttl_minutes: int = Field(default=30, gt=0)
    max_size: int = Field(default=1000, gt=0)
    key_prefix: str = "flight_search:"

    @property
    def ttl_seconds(self) -> float:
        return self.ttl_minutes * 60.0


class ObservabilityConfig(BaseSettings):
    """Logging configuration.

    Environment variables prefixed with HOPSEARCH_LOG_.
    """

    model_config = SettingsConfigDict(env_prefix="HOPSEARCH_LOG_")

    level: str = "INFO"
    format: str = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"


class AppConfig(BaseSettings):
    """Main application configuration aggregating all sub-configs.

    Sub-configurations can be accessed via attributes:

        config = get_config()
        print(config.search.min_layover_minutes)
        print(config.backend.schedules_path)

    Environment variables prefixed with HOPSEARCH_.
    """

    model_config = SettingsConfigDict(env_prefix="HOPSEARCH_")

    search: SearchConfig = Field(default_factory=SearchConfig)
    backend: BackendConfig = Field(default_factory=BackendConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    @property
    def project_root(self) -> Path:
        """Return the project root directory."""
        return Path(__file__).resolve().parent.parent


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Get the singleton application configuration.

    Configuration is loaded once and cached. To reload configuration
    (e.g., in tests), use reset_config() first.

    Returns:
        The application configuration instance.
    """
    return AppConfig()


def reset_config() -> None:
    """Reset the configuration cache.

    Call this in tests to ensure a fresh configuration is loaded.
    """
    get_config.cache_clear()
