"""Command line front-end for the itinerary search engine.

Usage:
    python -m hopsearch search DEL BOM --date 2025-08-20 --time 06:00 --seats 2
    python -m hopsearch routes DEL BOM --hops 1
    python -m hopsearch routes DEL BOM --connecting
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from rich.console import Console
from rich.table import Table

from .config import AppConfig, BackendConfig, get_config
from .container import Container
from .domain.errors import FlightSearchError, InvalidRequestError
from .domain.models import Itinerary, SearchRequest, SearchResultPage
from .logging_config import configure_logging
from .services import FlightSearchService
from .services.timeouts import shutdown_collaborator_pool

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID_INPUT = 2

console = Console()
logger = logging.getLogger(__name__)


def _format_duration(itinerary: Itinerary) -> str:
    minutes = int(itinerary.total_duration.total_seconds() // 60)
    return f"{minutes // 60}h{minutes % 60:02d}"


def render_page(page: SearchResultPage, request: SearchRequest) -> None:
    """Print one result page as a table."""
    if page.is_empty:
        console.print("[yellow]No itineraries found with current filters.[/yellow]")
        if page.total:
            console.print(f"[dim]{page.total} results in total, page {page.page} is past the end.[/dim]")
        return

    table = Table(
        title=(
            f"{request.origin} -> {request.destination} | "
            f"page {page.page + 1}/{page.total_pages} ({page.total} itineraries)"
        ),
        show_lines=True,
        header_style="bold green",
    )
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Total Fare", justify="right", style="bold green")
    table.add_column("Stops", justify="center")
    table.add_column("Route")
    table.add_column("Flights")
    table.add_column("Carrier")
    table.add_column("Departure")
    table.add_column("Arrival")
    table.add_column("Duration", justify="right")

    offset = page.page * page.size
    for i, itinerary in enumerate(page.items, start=offset + 1):
        table.add_row(
            str(i),
            f"{itinerary.total_fare:.2f}",
            str(itinerary.hops),
            " -> ".join(itinerary.path),
            itinerary.flight_number,
            itinerary.carrier,
            itinerary.departure_time.strftime("%Y-%m-%d %H:%M"),
            itinerary.arrival_time.strftime("%Y-%m-%d %H:%M"),
            _format_duration(itinerary),
        )

    console.print(table)


def render_routes(routes: Sequence[Sequence[str]], label: str) -> None:
    if not routes:
        console.print(f"[yellow]No routes ({label}).[/yellow]")
        return

    table = Table(title=f"Routes ({label})", header_style="bold green")
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Route")
    for i, route in enumerate(routes, start=1):
        table.add_row(str(i), " -> ".join(route))
    console.print(table)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hopsearch", description="Multi-hop flight itinerary search"
    )
    parser.add_argument("--log-level", help="Override the configured log level")
    parser.add_argument("--data-dir", type=Path, help="Directory holding the CSV data files")
    sub = parser.add_subparsers(dest="command", required=True)

    search = sub.add_parser("search", help="Search itineraries between two locations")
    search.add_argument("origin", help="Origin location code")
    search.add_argument("destination", help="Destination location code")
    search.add_argument("--date", help="Departure date YYYY-MM-DD")
    search.add_argument("--time", help="Preferred departure time HH:MM (default 00:00)")
    search.add_argument("--at", help="Departure timestamp YYYY-MM-DDTHH:MM (used when --date is absent)")
    search.add_argument("--seats", type=int, default=1, help="Number of seats (default 1)")
    search.add_argument("--max-hops", type=int, help="Maximum number of stops")
    search.add_argument("--max-price", help="Maximum total fare")
    search.add_argument("--carrier", help="Only itineraries whose carrier contains this text")
    search.add_argument("--sort-price", action="store_true", help="Sort by total fare")
    search.add_argument("--sort-hops", action="store_true", help="Sort by number of stops")
    search.add_argument("--page", type=int, default=0, help="Zero-based page index")
    search.add_argument("--size", type=int, help="Page size")

    routes = sub.add_parser("routes", help="List location paths between two locations")
    routes.add_argument("origin", help="Origin location code")
    routes.add_argument("destination", help="Destination location code")
    mode = routes.add_mutually_exclusive_group()
    mode.add_argument("--hops", type=int, default=1, help="Number of stops (default 1)")
    mode.add_argument("--up-to", type=int, help="List paths for every stop count from 0 to this one")
    mode.add_argument("--connecting", action="store_true", help="List one-stop and short multi-stop paths")

    return parser


def _load_config(data_dir: Optional[Path]) -> AppConfig:
    config = get_config()
    if data_dir is None:
        return config
    backend = BackendConfig(**{**config.backend.model_dump(), "data_dir": data_dir})
    return config.model_copy(update={"backend": backend})


def _run_search(service: FlightSearchService, args: argparse.Namespace, config: AppConfig) -> int:
    request = SearchRequest.from_params(
        args.origin,
        args.destination,
        args.seats,
        departure_at=args.at,
        departure_date=args.date,
        preferred_time=args.time,
        max_price=args.max_price,
        max_hops=args.max_hops,
        carrier=args.carrier,
        sort_by_price=args.sort_price,
        sort_by_hops=args.sort_hops,
        page=args.page,
        size=args.size if args.size is not None else config.search.default_page_size,
    )
    page = service.search(request)
    render_page(page, request)
    return EXIT_OK


def _run_routes(service: FlightSearchService, args: argparse.Namespace) -> int:
    origin, destination = args.origin.strip().upper(), args.destination.strip().upper()
    discovery = service.route_discovery

    if args.connecting:
        render_routes(discovery.find_connecting_routes(origin, destination), "connecting")
        return EXIT_OK
    if args.up_to is not None:
        if args.up_to < 0:
            raise InvalidRequestError("Number of stops cannot be negative", field_name="up_to")
        render_routes(
            discovery.discover_paths(origin, destination, args.up_to), f"up to {args.up_to} stop(s)"
        )
        return EXIT_OK

    if args.hops < 0:
        raise InvalidRequestError("Number of stops cannot be negative", field_name="hops")
    routes = service.find_routes_with_hops(origin, destination, args.hops)
    render_routes(routes, f"{args.hops} stop(s)")
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Run the command line interface.

    Returns:
        Process exit status: 0 on success, 2 on invalid input, 1 when
        the data cannot be loaded.
    """
    args = build_parser().parse_args(argv)
    config = _load_config(args.data_dir)
    configure_logging(config.observability, level=args.log_level)

    try:
        container = Container.create_default(config)
        service = container.resolve(FlightSearchService)
        if args.command == "search":
            return _run_search(service, args, config)
        return _run_routes(service, args)
    except InvalidRequestError as e:
        console.print(f"[bold red]Invalid input:[/bold red] {e.message}")
        return EXIT_INVALID_INPUT
    except FlightSearchError as e:
        logger.error("Search failed", extra={"error": str(e)})
        console.print(f"[bold red]Error:[/bold red] {e}")
        return EXIT_FAILURE
    finally:
        shutdown_collaborator_pool()
