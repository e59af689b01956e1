"""SQLite persistence for vehicles, refill ledgers, and trips."""

from __future__ import annotations

import logging
import sqlite3
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from PySide6.QtCore import QObject, Signal

from garage_log.models.data_records import RefillEvent, TripPoint, TripRecord
from garage_log.models.vehicle import Vehicle

logger = logging.getLogger(__name__)


def get_data_dir() -> Path:
    """Get the data directory, creating if needed."""
    if sys.platform.startswith("linux"):
        data_dir = Path.home() / ".local" / "share" / "garage_log"
    else:
        data_dir = Path.home() / ".garage_log"

    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def get_exports_dir() -> Path:
    """Get the exports directory for backup bundles."""
    exports_dir = get_data_dir() / "exports"
    exports_dir.mkdir(parents=True, exist_ok=True)
    return exports_dir


# SQL schema
SCHEMA = """
-- Vehicles in the garage (rowid keeps insertion order)
CREATE TABLE IF NOT EXISTS vehicles (
    id TEXT PRIMARY KEY,
    make TEXT NOT NULL,
    model TEXT NOT NULL,
    year TEXT,
    license_plate TEXT,
    odometer REAL DEFAULT 0,
    fuel_type TEXT,
    tank_capacity REAL DEFAULT 0,
    horsepower INTEGER DEFAULT 0,
    displacement INTEGER DEFAULT 0
);

-- Refill ledger, position 0 = most recent
CREATE TABLE IF NOT EXISTS refills (
    id TEXT PRIMARY KEY,
    vehicle_id TEXT NOT NULL,
    position INTEGER NOT NULL,
    date REAL NOT NULL,
    odometer REAL NOT NULL,
    liters REAL NOT NULL,
    price_per_unit REAL DEFAULT 0,
    total_cost REAL DEFAULT 0,
    fuel_type TEXT,
    tank_level_before REAL,
    tank_level_after REAL,
    is_full_tank INTEGER DEFAULT 0,
    station_name TEXT,
    distance_since_last REAL,
    efficiency REAL,
    FOREIGN KEY (vehicle_id) REFERENCES vehicles(id) ON DELETE CASCADE
);

-- Completed trips, position 0 = most recent
CREATE TABLE IF NOT EXISTS trips (
    id TEXT PRIMARY KEY,
    position INTEGER NOT NULL,
    start_time REAL NOT NULL,
    end_time REAL NOT NULL,
    distance REAL DEFAULT 0,
    vehicle_label TEXT
);

-- GPS samples per trip
CREATE TABLE IF NOT EXISTS trip_points (
    trip_id TEXT NOT NULL,
    seq INTEGER NOT NULL,
    latitude REAL NOT NULL,
    longitude REAL NOT NULL,
    speed REAL NOT NULL,
    timestamp REAL NOT NULL,
    PRIMARY KEY (trip_id, seq),
    FOREIGN KEY (trip_id) REFERENCES trips(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_refills_vehicle ON refills(vehicle_id, position);
CREATE INDEX IF NOT EXISTS idx_trips_position ON trips(position);
"""

REFILL_COLUMNS = """
    id, date, odometer, liters, price_per_unit, total_cost, fuel_type,
    tank_level_before, tank_level_after, is_full_tank, station_name,
    distance_since_last, efficiency
"""


class DataStore(QObject):
    """
    SQLite store for vehicles, refills and trips.

    Collections are saved with whole-collection replace semantics inside a
    single transaction. Failures never raise: writes return False, reads
    return empty results, and error_occurred is emitted.
    """

    # Signals
    error_occurred = Signal(str)  # error message

    def __init__(self, db_path: Optional[Path] = None):
        super().__init__()
        self._db_path = db_path or (get_data_dir() / "garage_log.db")
        self._conn: Optional[sqlite3.Connection] = None
        self._initialized = False

    @property
    def db_path(self) -> Path:
        return self._db_path

    def initialize(self) -> bool:
        """Initialize the database connection and schema."""
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(
                str(self._db_path),
                check_same_thread=False,  # Callers serialize access
                isolation_level=None,  # Explicit transactions only
            )
            self._conn.execute("PRAGMA foreign_keys = ON")
            self._conn.execute("PRAGMA journal_mode = WAL")
            self._conn.executescript(SCHEMA)
            self._initialized = True
            return True
        except Exception as e:
            self._report(f"Database init failed: {e}")
            return False

    def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
            self._initialized = False

    def _ready(self) -> bool:
        return self._initialized or self.initialize()

    def _report(self, message: str) -> None:
        logger.error(message)
        self.error_occurred.emit(message)

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Run statements atomically, rolling back on any error."""
        self._conn.execute("BEGIN")
        try:
            yield self._conn
            self._conn.execute("COMMIT")
        except Exception:
            if self._conn.in_transaction:
                self._conn.execute("ROLLBACK")
            raise

    # ---------- Vehicles ----------

    def load_vehicles(self) -> List[Vehicle]:
        """
        Load every vehicle with its refill ledger.

        Returns:
            Vehicles in garage order, empty list on error
        """
        if not self._ready():
            return []

        try:
            cursor = self._conn.execute(
                """
                SELECT id, make, model, year, license_plate, odometer, fuel_type,
                       tank_capacity, horsepower, displacement
                FROM vehicles
                ORDER BY rowid
                """
            )
            vehicles = [
                Vehicle(
                    id=row[0],
                    make=row[1],
                    model=row[2],
                    year=row[3] or "",
                    license_plate=row[4] or "",
                    odometer=row[5] or 0.0,
                    fuel_type=row[6] or "",
                    tank_capacity=row[7] or 0.0,
                    horsepower=row[8] or 0,
                    displacement=row[9] or 0,
                )
                for row in cursor.fetchall()
            ]
            for vehicle in vehicles:
                vehicle.refills = self._read_refills(vehicle.id)
            return vehicles
        except Exception as e:
            self._report(f"Load vehicles failed: {e}")
            return []

    def save_vehicle(self, vehicle: Vehicle) -> bool:
        """
        Insert or update one vehicle and replace its refill ledger.

        Args:
            vehicle: The vehicle to store

        Returns:
            True if successful
        """
        if not self._ready():
            return False

        try:
            with self._transaction():
                self._write_vehicle(vehicle)
                self._write_refills(vehicle.id, vehicle.refills)
            return True
        except Exception as e:
            self._report(f"Save vehicle failed: {e}")
            return False

    def save_vehicles(self, vehicles: Sequence[Vehicle]) -> bool:
        """Replace the whole garage, refills included."""
        if not self._ready():
            return False

        try:
            with self._transaction():
                self._conn.execute("DELETE FROM vehicles")
                for vehicle in vehicles:
                    self._write_vehicle(vehicle)
                    self._write_refills(vehicle.id, vehicle.refills)
            return True
        except Exception as e:
            self._report(f"Save vehicles failed: {e}")
            return False

    def delete_vehicle(self, vehicle_id: str) -> bool:
        """
        Delete a vehicle and all its refills.

        Args:
            vehicle_id: The vehicle to delete

        Returns:
            True if successful
        """
        if not self._ready():
            return False

        try:
            # Foreign key cascade handles refills
            with self._transaction():
                self._conn.execute("DELETE FROM vehicles WHERE id = ?", (vehicle_id,))
            return True
        except Exception as e:
            self._report(f"Delete vehicle failed: {e}")
            return False

    # ---------- Refills ----------

    def load_refill_events(self, vehicle_id: str) -> List[RefillEvent]:
        """
        Load a vehicle's refill ledger.

        Returns:
            Refills newest first, empty list on error
        """
        if not self._ready():
            return []

        try:
            return self._read_refills(vehicle_id)
        except Exception as e:
            self._report(f"Load refills failed: {e}")
            return []

    def save_refill_events(self, vehicle_id: str, events: Sequence[RefillEvent]) -> bool:
        """
        Replace a vehicle's refill ledger.

        Args:
            vehicle_id: Owning vehicle (must already be stored)
            events: Refills, newest first

        Returns:
            True if successful
        """
        if not self._ready():
            return False

        try:
            with self._transaction():
                self._write_refills(vehicle_id, events)
            return True
        except Exception as e:
            self._report(f"Save refills failed: {e}")
            return False

    # ---------- Trips ----------

    def load_trips(self) -> List[TripRecord]:
        """
        Load every trip with its GPS points.

        Returns:
            Trips newest first, empty list on error
        """
        if not self._ready():
            return []

        try:
            cursor = self._conn.execute(
                """
                SELECT id, start_time, end_time, distance, vehicle_label
                FROM trips
                ORDER BY position
                """
            )
            trips = [
                TripRecord(
                    id=row[0],
                    start_time=row[1],
                    end_time=row[2],
                    distance=row[3] or 0.0,
                    vehicle_label=row[4],
                )
                for row in cursor.fetchall()
            ]
            for trip in trips:
                trip.points = self._read_trip_points(trip.id)
            return trips
        except Exception as e:
            self._report(f"Load trips failed: {e}")
            return []

    def save_trips(self, trips: Sequence[TripRecord]) -> bool:
        """Replace the whole trip collection."""
        if not self._ready():
            return False

        try:
            with self._transaction():
                self._write_trips(trips)
            return True
        except Exception as e:
            self._report(f"Save trips failed: {e}")
            return False

    # ---------- Bulk ----------

    def replace_all(self, vehicles: Sequence[Vehicle], trips: Sequence[TripRecord]) -> bool:
        """
        Replace every vehicle and trip in one transaction.

        Either both collections are stored or nothing changes.
        """
        if not self._ready():
            return False

        try:
            with self._transaction():
                self._conn.execute("DELETE FROM vehicles")
                for vehicle in vehicles:
                    self._write_vehicle(vehicle)
                    self._write_refills(vehicle.id, vehicle.refills)
                self._write_trips(trips)
            return True
        except Exception as e:
            self._report(f"Replace all data failed: {e}")
            return False

    def get_database_size_mb(self) -> float:
        """Get the current database file size in MB."""
        if self._db_path.exists():
            return self._db_path.stat().st_size / (1024 * 1024)
        return 0.0

    # ---------- Row mapping ----------

    def _write_vehicle(self, vehicle: Vehicle) -> None:
        self._conn.execute(
            """
            INSERT INTO vehicles (
                id, make, model, year, license_plate, odometer, fuel_type,
                tank_capacity, horsepower, displacement
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                make = excluded.make,
                model = excluded.model,
                year = excluded.year,
                license_plate = excluded.license_plate,
                odometer = excluded.odometer,
                fuel_type = excluded.fuel_type,
                tank_capacity = excluded.tank_capacity,
                horsepower = excluded.horsepower,
                displacement = excluded.displacement
            """,
            (
                vehicle.id,
                vehicle.make,
                vehicle.model,
                vehicle.year,
                vehicle.license_plate,
                vehicle.odometer,
                vehicle.fuel_type,
                vehicle.tank_capacity,
                vehicle.horsepower,
                vehicle.displacement,
            ),
        )

    def _write_refills(self, vehicle_id: str, events: Sequence[RefillEvent]) -> None:
        self._conn.execute("DELETE FROM refills WHERE vehicle_id = ?", (vehicle_id,))
        self._conn.executemany(
            f"""
            INSERT INTO refills (vehicle_id, position, {REFILL_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                (
                    vehicle_id,
                    position,
                    e.id,
                    e.date,
                    e.odometer,
                    e.liters,
                    e.price_per_unit,
                    e.total_cost,
                    e.fuel_type,
                    e.tank_level_before,
                    e.tank_level_after,
                    int(e.is_full_tank),
                    e.station_name,
                    e.distance_since_last,
                    e.efficiency,
                )
                for position, e in enumerate(events)
            ],
        )

    def _read_refills(self, vehicle_id: str) -> List[RefillEvent]:
        cursor = self._conn.execute(
            f"""
            SELECT {REFILL_COLUMNS}
            FROM refills
            WHERE vehicle_id = ?
            ORDER BY position
            """,
            (vehicle_id,),
        )
        return [
            RefillEvent(
                id=row[0],
                date=row[1],
                odometer=row[2],
                liters=row[3],
                price_per_unit=row[4] or 0.0,
                total_cost=row[5] or 0.0,
                fuel_type=row[6] or "",
                tank_level_before=row[7],
                tank_level_after=row[8],
                is_full_tank=bool(row[9]),
                station_name=row[10],
                distance_since_last=row[11],
                efficiency=row[12],
            )
            for row in cursor.fetchall()
        ]

    def _write_trips(self, trips: Sequence[TripRecord]) -> None:
        # Foreign key cascade clears trip_points
        self._conn.execute("DELETE FROM trips")
        for position, trip in enumerate(trips):
            self._conn.execute(
                """
                INSERT INTO trips (id, position, start_time, end_time, distance, vehicle_label)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    trip.id,
                    position,
                    trip.start_time,
                    trip.end_time,
                    trip.distance,
                    trip.vehicle_label,
                ),
            )
            self._conn.executemany(
                """
                INSERT INTO trip_points (trip_id, seq, latitude, longitude, speed, timestamp)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                [
                    (trip.id, seq, p.latitude, p.longitude, p.speed, p.timestamp)
                    for seq, p in enumerate(trip.points)
                ],
            )

    def _read_trip_points(self, trip_id: str) -> List[TripPoint]:
        cursor = self._conn.execute(
            """
            SELECT latitude, longitude, speed, timestamp
            FROM trip_points
            WHERE trip_id = ?
            ORDER BY seq
            """,
            (trip_id,),
        )
        return [
            TripPoint(latitude=row[0], longitude=row[1], speed=row[2], timestamp=row[3])
            for row in cursor.fetchall()
        ]
