"""SQLite-backed relational schedule store.

Each query shape the search core needs is a named method with its own
SQL statement. Timestamps are stored as ISO-8601 text, which sorts in
chronological order; fares are stored as text to keep Decimal precision.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Iterable, List, Sequence

from ...domain.errors import ScheduleStoreError
from ...domain.models import Schedule

_COLUMNS = (
    "schedule_id, flight_number, carrier, source, destination, "
    "departure_time, arrival_time, available_seats, fare"
)


def _ensure_parent_dir(path: str) -> None:
    if path == ":memory:":
        return
    Path(path).parent.mkdir(parents=True, exist_ok=True)


def _row_to_schedule(row: tuple) -> Schedule:
    return Schedule(
        schedule_id=int(row[0]),
        flight_number=row[1],
        carrier=row[2],
        source=row[3],
        destination=row[4],
        departure_time=datetime.fromisoformat(row[5]),
        arrival_time=datetime.fromisoformat(row[6]),
        available_seats=int(row[7]),
        fare=Decimal(row[8]),
    )


class SqliteScheduleStore:
    """ScheduleStorePort on top of a single SQLite connection.

    One connection is shared across threads behind a lock so that
    in-memory databases keep their contents between calls.
    """

    def __init__(self, db_path: str = ":memory:"):
        self.db_path = db_path
        self._logger = logging.getLogger(__name__)
        self._lock = threading.Lock()
        _ensure_parent_dir(db_path)
        try:
            self._conn = sqlite3.connect(db_path, check_same_thread=False)
        except sqlite3.Error as e:
            raise ScheduleStoreError(
                f"Cannot open schedule database {db_path}", backend="sqlite", cause=e
            )
        self._init_schema()

    def _init_schema(self) -> None:
        with self._lock, self._conn:
            self._conn.execute(
                """
                CREATE TABLE IF NOT EXISTS schedules (
                    schedule_id INTEGER PRIMARY KEY,
                    flight_number TEXT NOT NULL,
                    carrier TEXT NOT NULL,
                    source TEXT NOT NULL,
                    destination TEXT NOT NULL,
                    departure_time TEXT NOT NULL,
                    arrival_time TEXT NOT NULL,
                    available_seats INTEGER NOT NULL,
                    fare TEXT NOT NULL
                );
                """
            )
            self._conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_source_dep ON schedules(source, departure_time);"
            )
            self._conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_route ON schedules(source, destination);"
            )

    def _query(self, sql: str, params: tuple) -> List[tuple]:
        try:
            with self._lock:
                return self._conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise ScheduleStoreError(
                "Schedule query failed", backend="sqlite", cause=e
            )

    def add_schedules(self, schedules: Iterable[Schedule]) -> int:
        """Insert or replace schedules.

        Returns:
            Number of rows written.
        """
        rows = [
            (
                s.schedule_id,
                s.flight_number,
                s.carrier,
                s.source,
                s.destination,
                s.departure_time.isoformat(),
                s.arrival_time.isoformat(),
                s.available_seats,
                str(s.fare),
            )
            for s in schedules
        ]
        if not rows:
            return 0
        try:
            with self._lock, self._conn:
                self._conn.executemany(
                    f"INSERT OR REPLACE INTO schedules ({_COLUMNS}) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?);",
                    rows,
                )
        except sqlite3.Error as e:
            raise ScheduleStoreError(
                "Failed to store schedules", backend="sqlite", cause=e
            )
        self._logger.debug("Schedules stored", extra={"count": len(rows)})
        return len(rows)

    def find_direct(
        self, source: str, destination: str, after: datetime, seats: int
    ) -> Sequence[Schedule]:
        rows = self._query(
            f"SELECT {_COLUMNS} FROM schedules "
            "WHERE source = ? AND destination = ? "
            "AND departure_time >= ? AND available_seats >= ? "
            "ORDER BY departure_time ASC, schedule_id ASC;",
            (source, destination, after.isoformat(), seats),
        )
        return [_row_to_schedule(r) for r in rows]

    def find_departing(
        self,
        source: str,
        window_start: datetime,
        window_end: datetime,
        seats: int,
    ) -> Sequence[Schedule]:
        rows = self._query(
            f"SELECT {_COLUMNS} FROM schedules "
            "WHERE source = ? AND departure_time >= ? AND departure_time <= ? "
            "AND available_seats >= ? "
            "ORDER BY departure_time ASC, schedule_id ASC;",
            (source, window_start.isoformat(), window_end.isoformat(), seats),
        )
        return [_row_to_schedule(r) for r in rows]

    def destinations_reachable_from(self, source: str) -> Sequence[str]:
        rows = self._query(
            "SELECT DISTINCT destination FROM schedules WHERE source = ? "
            "ORDER BY destination;",
            (source,),
        )
        return [r[0] for r in rows]

    def has_direct_connection(self, source: str, destination: str) -> bool:
        rows = self._query(
            "SELECT 1 FROM schedules WHERE source = ? AND destination = ? LIMIT 1;",
            (source, destination),
        )
        return bool(rows)

    def count(self) -> int:
        """Return the number of stored schedules."""
        return int(self._query("SELECT COUNT(*) FROM schedules;", ())[0][0])

    def close(self) -> None:
        with self._lock:
            self._conn.close()
