"""Repository layer responsible for all database access."""

from __future__ import annotations

import random
import sqlite3
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional

from backend.domain.models import Booking, GuestRecord, Room, TimeSeries, TimeSeriesPoint
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


class DataRepository:
    """Encapsulates SQLite access so forecasting code stays storage-agnostic."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._db_path = Path(self._settings.database_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self._db_path)
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA foreign_keys = ON;")
        return connection

    def initialize_database(self) -> None:
        """Create tables and indexes if they do not exist yet."""
        try:
            with self._connect() as conn:
                cursor = conn.cursor()

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Rooms (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        name TEXT NOT NULL,
                        description TEXT,
                        price REAL NOT NULL CHECK (price > 0)
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Bookings (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        room_id INTEGER NOT NULL,
                        guest_name TEXT NOT NULL,
                        created_at TEXT NOT NULL,
                        FOREIGN KEY (room_id) REFERENCES Rooms(id)
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_bookings_room_created
                    ON Bookings(room_id, created_at);
                    """
                )
                conn.commit()
            logger.info("Database initialized at %s", self._db_path)
        except sqlite3.Error as exc:
            raise RuntimeError(f"Database initialization failed: {exc}") from exc

    def seed_synthetic_data(self) -> None:
        """Seed rooms and a few days of bookings only when the tables are empty."""
        random.seed(self._settings.synthetic_random_seed)
        try:
            with self._connect() as conn:
                cursor = conn.cursor()

                cursor.execute("SELECT COUNT(*) AS count FROM Rooms;")
                room_count = int(cursor.fetchone()["count"])
                if room_count > 0:
                    logger.info("Synthetic data already present; skipping seed")
                    return

                cursor.executemany(
                    """
                    INSERT INTO Rooms (name, description, price)
                    VALUES (?, ?, ?);
                    """,
                    [
                        (room.name, room.description, room.price)
                        for room in self._settings.synthetic_rooms
                    ],
                )

                cursor.execute("SELECT id, name FROM Rooms ORDER BY id ASC;")
                rooms = [(int(row["id"]), str(row["name"])) for row in cursor.fetchall()]
                start_date = date.fromisoformat(self._settings.synthetic_start_date)
                start = datetime(start_date.year, start_date.month, start_date.day)

                booking_entries = []
                for room_id, room_name in rooms:
                    for day in range(self._settings.synthetic_seed_days):
                        bookings_per_day = random.randint(
                            1,
                            self._settings.synthetic_max_bookings_per_day,
                        )
                        for slot in range(bookings_per_day):
                            created_at = start + timedelta(
                                days=day,
                                seconds=random.randrange(86400),
                            )
                            booking_entries.append(
                                (
                                    room_id,
                                    f"Guest {room_name}-{day}-{slot}",
                                    created_at.isoformat(timespec="seconds"),
                                )
                            )

                cursor.executemany(
                    """
                    INSERT INTO Bookings (room_id, guest_name, created_at)
                    VALUES (?, ?, ?);
                    """,
                    booking_entries,
                )
                conn.commit()
            logger.info(
                "Synthetic seed completed with %s rooms and %s bookings",
                len(rooms),
                len(booking_entries),
            )
        except sqlite3.Error as exc:
            raise RuntimeError(f"Synthetic data seeding failed: {exc}") from exc

    def create_room(self, name: str, price: float, description: Optional[str] = None) -> Room:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT INTO Rooms (name, description, price) VALUES (?, ?, ?);",
                (name, description, price),
            )
            conn.commit()
            room_id = int(cursor.lastrowid)
        return Room(room_id=room_id, name=name, description=description, price=float(price))

    def get_room(self, room_id: int) -> Optional[Room]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT id, name, description, price FROM Rooms WHERE id = ?;",
                (room_id,),
            )
            row = cursor.fetchone()
            if row is None:
                return None
            return Room(
                room_id=int(row["id"]),
                name=str(row["name"]),
                description=row["description"],
                price=float(row["price"]),
            )

    def list_rooms(self) -> List[Room]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT id, name, description, price FROM Rooms ORDER BY id ASC;")
            return [
                Room(
                    room_id=int(row["id"]),
                    name=str(row["name"]),
                    description=row["description"],
                    price=float(row["price"]),
                )
                for row in cursor.fetchall()
            ]

    def create_booking(
        self,
        room_id: int,
        guest_name: str,
        created_at: Optional[datetime] = None,
    ) -> Booking:
        timestamp = (created_at or datetime.now(timezone.utc)).isoformat(timespec="seconds")
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO Bookings (room_id, guest_name, created_at)
                VALUES (?, ?, ?);
                """,
                (room_id, guest_name, timestamp),
            )
            conn.commit()
            booking_id = int(cursor.lastrowid)
        logger.info("Booking created | booking_id=%s | room_id=%s", booking_id, room_id)
        return Booking(
            booking_id=booking_id,
            room_id=room_id,
            guest_name=guest_name,
            created_at=timestamp,
        )

    def list_bookings(self, room_id: int) -> List[Booking]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT id, room_id, guest_name, created_at
                FROM Bookings
                WHERE room_id = ?
                ORDER BY created_at ASC, id ASC;
                """,
                (room_id,),
            )
            return [
                Booking(
                    booking_id=int(row["id"]),
                    room_id=int(row["room_id"]),
                    guest_name=str(row["guest_name"]),
                    created_at=str(row["created_at"]),
                )
                for row in cursor.fetchall()
            ]

    def count_bookings(self, room_id: int) -> int:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT COUNT(*) AS count FROM Bookings WHERE room_id = ?;",
                (room_id,),
            )
            return int(cursor.fetchone()["count"])

    def get_daily_booking_series(self, room_id: int) -> TimeSeries:
        """Bucket a room's bookings by calendar date of ``created_at``."""
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT substr(created_at, 1, 10) AS booking_date, COUNT(*) AS count
                FROM Bookings
                WHERE room_id = ?
                GROUP BY booking_date
                ORDER BY booking_date ASC;
                """,
                (room_id,),
            )
            return TimeSeries(
                points=tuple(
                    TimeSeriesPoint(
                        date=date.fromisoformat(str(row["booking_date"])),
                        count=int(row["count"]),
                    )
                    for row in cursor.fetchall()
                )
            )

    def get_guest_records(self, room_id: int) -> List[GuestRecord]:
        """Guest name and booking date, newest first."""
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT guest_name, substr(created_at, 1, 10) AS booking_date
                FROM Bookings
                WHERE room_id = ?
                ORDER BY created_at DESC, id DESC;
                """,
                (room_id,),
            )
            return [
                GuestRecord(
                    guest_name=str(row["guest_name"]) or "Guest",
                    date=str(row["booking_date"]),
                )
                for row in cursor.fetchall()
            ]
