"""CSV loaders for reference data and bookable schedules.

Rows with missing required columns are skipped with a warning; rows
that are present but malformed (bad timestamps, departure after arrival)
are skipped the same way so one bad line does not hide the rest of the
timetable.
"""

from __future__ import annotations

import csv
import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Dict, List

from ...domain.errors import RouteGraphError, ScheduleStoreError
from ...domain.models import GeoLocation, Location, RouteEdge, Schedule

logger = logging.getLogger(__name__)

SCHEDULE_COLUMNS = (
    "schedule_id",
    "flight_number",
    "carrier",
    "source",
    "destination",
    "departure_time",
    "arrival_time",
    "available_seats",
    "fare",
)


def load_schedules_csv(path: Path) -> List[Schedule]:
    """Load bookable schedules from a CSV file.

    Raises:
        ScheduleStoreError: If the file cannot be read.
    """
    schedules: List[Schedule] = []
    try:
        with Path(path).open(newline="", encoding="utf-8") as f:
            reader = csv.DictReader(f)
            for line_no, row in enumerate(reader, start=2):
                values = {k: (row.get(k) or "").strip() for k in SCHEDULE_COLUMNS}
                missing = [k for k, v in values.items() if not v]
                if missing:
                    logger.warning(
                        "Skipping schedule row with missing columns",
                        extra={"line": line_no, "missing": missing},
                    )
                    continue
                try:
                    schedules.append(
                        Schedule(
                            schedule_id=int(values["schedule_id"]),
                            flight_number=values["flight_number"],
                            carrier=values["carrier"],
                            source=values["source"].upper(),
                            destination=values["destination"].upper(),
                            departure_time=datetime.fromisoformat(values["departure_time"]),
                            arrival_time=datetime.fromisoformat(values["arrival_time"]),
                            available_seats=int(values["available_seats"]),
                            fare=Decimal(values["fare"]),
                        )
                    )
                except (ValueError, InvalidOperation) as e:
                    logger.warning(
                        "Skipping malformed schedule row",
                        extra={"line": line_no, "error": str(e)},
                    )
    except OSError as e:
        raise ScheduleStoreError(
            f"Failed to read schedules from {path}", backend="csv", cause=e
        )

    logger.info("Schedules loaded", extra={"count": len(schedules), "path": str(path)})
    return schedules


def load_locations_csv(path: Path) -> Dict[str, Location]:
    """Load location metadata keyed by code.

    Raises:
        RouteGraphError: If the file cannot be read.
    """
    locations: Dict[str, Location] = {}
    try:
        with Path(path).open(newline="", encoding="utf-8") as f:
            reader = csv.DictReader(f)
            for row in reader:
                code = (row.get("code") or "").strip().upper()
                if not code:
                    continue
                name = (row.get("name") or "").strip()
                city = (row.get("city") or "").strip()

                # Missing coordinates default to the origin
                try:
                    lat = float(row.get("lat") or 0.0)
                    lon = float(row.get("lon") or 0.0)
                    geo = GeoLocation(latitude=lat, longitude=lon)
                except ValueError:
                    geo = GeoLocation(latitude=0.0, longitude=0.0)

                locations[code] = Location(
                    code=code,
                    name=name or code,
                    city=city or name or code,
                    country=(row.get("country") or "").strip(),
                    location=geo,
                )
    except OSError as e:
        raise RouteGraphError(
            f"Failed to read locations from {path}",
            backend="csv",
            file_path=str(path),
            cause=e,
        )
    return locations


def load_routes_csv(path: Path) -> List[RouteEdge]:
    """Load directed route edges.

    Raises:
        RouteGraphError: If the file cannot be read or a row is malformed.
    """
    edges: List[RouteEdge] = []
    try:
        with Path(path).open(newline="", encoding="utf-8") as f:
            reader = csv.DictReader(f)
            for row in reader:
                source = (row.get("source") or "").strip().upper()
                destination = (row.get("destination") or "").strip().upper()
                if not source or not destination or source == destination:
                    continue
                edges.append(
                    RouteEdge(
                        source=source,
                        destination=destination,
                        carrier=(row.get("carrier") or "").strip(),
                        flight_number=(row.get("flight_number") or "").strip(),
                        distance_km=float(row.get("distance_km") or 0.0),
                        avg_duration_minutes=int(row.get("avg_duration_minutes") or 0),
                        avg_fare=float(row.get("avg_fare") or 0.0),
                        daily_frequency=int(row.get("daily_frequency") or 0),
                    )
                )
    except (OSError, ValueError) as e:
        raise RouteGraphError(
            f"Failed to load routes from {path}",
            backend="csv",
            file_path=str(path),
            cause=e,
        )
    return edges
