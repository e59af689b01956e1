"""Vehicle aggregate - owns the refill ledger and the current odometer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List

from garage_log.models.data_records import RefillEvent, new_id

if TYPE_CHECKING:
    from garage_log.services.fuel_ledger import FuelLedger


@dataclass
class Vehicle:
    """
    A vehicle in the garage.

    refills is kept newest first (index 0 = most recent). Only FuelLedger
    should mutate it, so that odometer stays in sync with refills[0].
    """

    make: str
    model: str
    year: str = ""
    license_plate: str = ""
    odometer: float = 0.0  # km
    fuel_type: str = ""
    tank_capacity: float = 0.0  # liters, 0 = unknown
    horsepower: int = 0
    displacement: int = 0  # cc
    refills: List[RefillEvent] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    @property
    def display_name(self) -> str:
        return f"{self.make} {self.model}".strip()

    @property
    def ledger(self) -> FuelLedger:
        """Fuel ledger operating on this vehicle's refills."""
        from garage_log.services.fuel_ledger import FuelLedger

        return FuelLedger(self)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "make": self.make,
            "model": self.model,
            "year": self.year,
            "license_plate": self.license_plate,
            "odometer": self.odometer,
            "fuel_type": self.fuel_type,
            "tank_capacity": self.tank_capacity,
            "horsepower": self.horsepower,
            "displacement": self.displacement,
            "refills": [r.to_dict() for r in self.refills],
        }

    @classmethod
    def from_dict(cls, data: dict) -> Vehicle:
        return cls(
            id=data["id"],
            make=data["make"],
            model=data["model"],
            year=data.get("year") or "",
            license_plate=data.get("license_plate") or "",
            odometer=float(data.get("odometer") or 0.0),
            fuel_type=data.get("fuel_type") or "",
            tank_capacity=float(data.get("tank_capacity") or 0.0),
            horsepower=int(data.get("horsepower") or 0),
            displacement=int(data.get("displacement") or 0),
            refills=[RefillEvent.from_dict(r) for r in data.get("refills", [])],
        )
