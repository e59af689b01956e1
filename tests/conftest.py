"""
Pytest configuration and shared fixtures.

Defines refill/trip builders and a store/garage backed by a temporary
SQLite file.
"""

from datetime import datetime
from pathlib import Path
from typing import Callable, Iterator, List, Optional

import pytest

from garage_log.models.data_records import RefillEvent, TripPoint, TripRecord
from garage_log.models.vehicle import Vehicle
from garage_log.services.data_store import DataStore
from garage_log.services.garage import Garage

BASE_TS = datetime(2024, 3, 1, 8, 0).timestamp()
DAY = 24 * 60 * 60


def make_refill(
    odometer: float,
    liters: float = 40.0,
    *,
    day: int = 0,
    full: bool = True,
    level_before: Optional[float] = None,
    level_after: Optional[float] = None,
    price: float = 1.8,
) -> RefillEvent:
    """Build a refill dated `day` days after BASE_TS."""
    return RefillEvent(
        date=BASE_TS + day * DAY,
        odometer=odometer,
        liters=liters,
        price_per_unit=price,
        total_cost=round(liters * price, 2),
        fuel_type="Petrol",
        tank_level_before=level_before,
        tank_level_after=level_after,
        is_full_tank=full,
    )


def make_trip(speeds_mps: List[float], start: float = BASE_TS, step: float = 1.0, **kwargs) -> TripRecord:
    """Build a trip with one point per `step` seconds."""
    points = [
        TripPoint(latitude=38.7 + i * 1e-4, longitude=-9.1, speed=s, timestamp=start + i * step)
        for i, s in enumerate(speeds_mps)
    ]
    end = start + step * max(len(points) - 1, 0)
    return TripRecord(start_time=start, end_time=end, points=points, **kwargs)


@pytest.fixture
def refill_factory() -> Callable[..., RefillEvent]:
    return make_refill


@pytest.fixture
def vehicle() -> Vehicle:
    """A vehicle with unknown tank capacity."""
    return Vehicle(make="Renault", model="Clio", fuel_type="Petrol")


@pytest.fixture
def store(tmp_path: Path) -> Iterator[DataStore]:
    """Initialized store on a temporary database file."""
    data_store = DataStore(tmp_path / "garage.db")
    assert data_store.initialize()
    yield data_store
    data_store.close()


@pytest.fixture
def garage(store: DataStore) -> Garage:
    return Garage(store)
