"""Data records for refills, GPS trips, and backup bundles."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from garage_log.models.vehicle import Vehicle


def new_id() -> str:
    """Generate a new record identifier."""
    return str(uuid.uuid4())


@dataclass
class RefillEvent:
    """
    One fuel purchase.

    distance_since_last and efficiency are derived fields owned by the
    FuelLedger; callers should leave them unset.
    """

    date: float  # Unix timestamp
    odometer: float  # Cumulative distance (km)
    liters: float
    price_per_unit: float = 0.0
    total_cost: float = 0.0
    fuel_type: str = ""
    tank_level_before: Optional[float] = None  # 0.0-1.0, None if not tracked
    tank_level_after: Optional[float] = None  # 0.0-1.0, None if unknown
    is_full_tank: bool = False
    station_name: Optional[str] = None
    id: str = field(default_factory=new_id)

    # Derived (written by FuelLedger)
    distance_since_last: Optional[float] = None
    efficiency: Optional[float] = None  # L/100km, describes interval ending at the next refill

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date,
            "odometer": self.odometer,
            "liters": self.liters,
            "price_per_unit": self.price_per_unit,
            "total_cost": self.total_cost,
            "fuel_type": self.fuel_type,
            "tank_level_before": self.tank_level_before,
            "tank_level_after": self.tank_level_after,
            "is_full_tank": self.is_full_tank,
            "station_name": self.station_name,
            "distance_since_last": self.distance_since_last,
            "efficiency": self.efficiency,
        }

    @classmethod
    def from_dict(cls, data: dict) -> RefillEvent:
        return cls(
            id=data["id"],
            date=float(data["date"]),
            odometer=float(data["odometer"]),
            liters=float(data["liters"]),
            price_per_unit=float(data.get("price_per_unit") or 0.0),
            total_cost=float(data.get("total_cost") or 0.0),
            fuel_type=data.get("fuel_type") or "",
            tank_level_before=data.get("tank_level_before"),
            tank_level_after=data.get("tank_level_after"),
            is_full_tank=bool(data.get("is_full_tank", False)),
            station_name=data.get("station_name"),
            distance_since_last=data.get("distance_since_last"),
            efficiency=data.get("efficiency"),
        )


@dataclass
class TripPoint:
    """Single GPS sample recorded during a trip."""

    latitude: float
    longitude: float
    speed: float  # meters per second
    timestamp: float  # Unix timestamp

    def to_dict(self) -> dict:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "speed": self.speed,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict) -> TripPoint:
        return cls(
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            speed=float(data["speed"]),
            timestamp=float(data["timestamp"]),
        )


@dataclass
class TripRecord:
    """A completed GPS-tracked drive. Immutable once recorded."""

    start_time: float  # Unix timestamp
    end_time: float  # Unix timestamp
    distance: float = 0.0  # meters, accumulated by the location source
    points: List[TripPoint] = field(default_factory=list)
    vehicle_label: Optional[str] = None  # Display only
    id: str = field(default_factory=new_id)

    @property
    def duration_secs(self) -> float:
        """Trip duration in seconds."""
        return self.end_time - self.start_time

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "distance": self.distance,
            "vehicle_label": self.vehicle_label,
            "points": [p.to_dict() for p in self.points],
        }

    @classmethod
    def from_dict(cls, data: dict) -> TripRecord:
        return cls(
            id=data["id"],
            start_time=float(data["start_time"]),
            end_time=float(data["end_time"]),
            distance=float(data.get("distance") or 0.0),
            vehicle_label=data.get("vehicle_label"),
            points=[TripPoint.from_dict(p) for p in data.get("points", [])],
        )


@dataclass
class BackupBundle:
    """Single-file snapshot of every vehicle and trip."""

    version: str
    vehicles: List[Vehicle] = field(default_factory=list)
    trips: List[TripRecord] = field(default_factory=list)
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "timestamp": self.timestamp,
            "vehicles": [v.to_dict() for v in self.vehicles],
            "trips": [t.to_dict() for t in self.trips],
        }

    @classmethod
    def from_dict(cls, data: dict) -> BackupBundle:
        from garage_log.models.vehicle import Vehicle

        return cls(
            version=str(data["version"]),
            timestamp=float(data["timestamp"]),
            vehicles=[Vehicle.from_dict(v) for v in data["vehicles"]],
            trips=[TripRecord.from_dict(t) for t in data["trips"]],
        )
