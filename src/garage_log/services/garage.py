"""Garage service - owns vehicles, their fuel ledgers, and recorded trips."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable, List, Optional

from PySide6.QtCore import QObject, Signal

from garage_log.models.data_records import RefillEvent, TripRecord
from garage_log.models.vehicle import Vehicle
from garage_log.services.backup import BACKUP_VERSION, BackupExporter
from garage_log.services.data_store import DataStore
from garage_log.services.fuel_ledger import FuelLedger

logger = logging.getLogger(__name__)


class Garage(QObject):
    """
    Application service for vehicles, refills and trips.

    The store is injected; nothing here is a global. Every mutation runs
    under one lock so ledger index arithmetic never sees a concurrent
    structural change, and is followed by a whole-collection save.
    """

    # Signals
    vehicles_changed = Signal()
    vehicle_updated = Signal(str)  # vehicle_id
    trips_changed = Signal()
    error_occurred = Signal(str)  # error message

    def __init__(self, store: DataStore):
        super().__init__()
        self._store = store
        self._store.error_occurred.connect(self.error_occurred)
        self._lock = threading.RLock()

        self._vehicles: List[Vehicle] = store.load_vehicles()
        self._trips: List[TripRecord] = store.load_trips()

    @property
    def vehicles(self) -> List[Vehicle]:
        """Vehicles in garage order."""
        return list(self._vehicles)

    @property
    def trips(self) -> List[TripRecord]:
        """Recorded trips, newest first."""
        return list(self._trips)

    def get_vehicle(self, vehicle_id: str) -> Optional[Vehicle]:
        for vehicle in self._vehicles:
            if vehicle.id == vehicle_id:
                return vehicle
        return None

    # ---------- Vehicles ----------

    def add_vehicle(self, vehicle: Vehicle) -> bool:
        with self._lock:
            self._vehicles.append(vehicle)
            ok = self._store.save_vehicle(vehicle)
        self.vehicles_changed.emit()
        return ok

    def update_vehicle(self, updated: Vehicle) -> bool:
        """
        Replace a vehicle's details. The refill ledger is kept as stored
        and, when it has refills, the odometer follows the newest one.

        Returns:
            False if the vehicle is unknown or could not be saved
        """
        with self._lock:
            index = self._vehicle_index(updated.id)
            if index is None:
                logger.warning("Update skipped, unknown vehicle %s", updated.id)
                return False

            updated.refills = self._vehicles[index].refills
            if updated.refills:
                updated.odometer = updated.refills[0].odometer
            self._vehicles[index] = updated
            ok = self._store.save_vehicle(updated)

        self.vehicle_updated.emit(updated.id)
        self.vehicles_changed.emit()
        return ok

    def delete_vehicle(self, vehicle_id: str) -> bool:
        with self._lock:
            index = self._vehicle_index(vehicle_id)
            if index is None:
                logger.warning("Delete skipped, unknown vehicle %s", vehicle_id)
                return False

            del self._vehicles[index]
            ok = self._store.delete_vehicle(vehicle_id)

        self.vehicles_changed.emit()
        return ok

    # ---------- Refills ----------

    def add_refill(self, vehicle_id: str, event: RefillEvent) -> bool:
        """Record a new refill as the vehicle's most recent one."""
        return self._mutate_ledger(vehicle_id, lambda ledger: ledger.insert(event))

    def add_refill_by_distance(
        self, vehicle_id: str, event: RefillEvent, distance: float
    ) -> bool:
        """Record a new refill entered as distance since the previous refill."""
        return self._mutate_ledger(
            vehicle_id, lambda ledger: ledger.insert_by_distance(event, distance)
        )

    def update_refill(self, vehicle_id: str, event: RefillEvent) -> bool:
        """Replace the stored refill with the same id."""
        return self._mutate_refill(
            vehicle_id, event.id, lambda ledger, index: ledger.update(event, index)
        )

    def update_refill_by_distance(
        self, vehicle_id: str, event: RefillEvent, distance: float
    ) -> bool:
        """Replace a refill, resolving its odometer from distance since the previous refill."""
        return self._mutate_refill(
            vehicle_id,
            event.id,
            lambda ledger, index: ledger.update_by_distance(event, index, distance),
        )

    def delete_refill(self, vehicle_id: str, refill_id: str) -> bool:
        return self._mutate_refill(
            vehicle_id, refill_id, lambda ledger, index: ledger.delete(index)
        )

    def _mutate_refill(
        self,
        vehicle_id: str,
        refill_id: str,
        action: Callable[[FuelLedger, int], object],
    ) -> bool:
        def locate_and_apply(ledger: FuelLedger) -> bool:
            index = ledger.index_of(refill_id)
            if index is None:
                logger.warning("Refill %s not found on vehicle %s", refill_id, vehicle_id)
                return False
            action(ledger, index)
            return True

        return self._mutate_ledger(vehicle_id, locate_and_apply)

    def _mutate_ledger(
        self, vehicle_id: str, action: Callable[[FuelLedger], Optional[bool]]
    ) -> bool:
        """Apply a ledger mutation and persist the vehicle."""
        with self._lock:
            vehicle = self.get_vehicle(vehicle_id)
            if vehicle is None:
                logger.warning("Refill change skipped, unknown vehicle %s", vehicle_id)
                return False

            if action(vehicle.ledger) is False:
                return False

            ok = self._store.save_vehicle(vehicle)

        self.vehicle_updated.emit(vehicle_id)
        return ok

    # ---------- Trips ----------

    def record_trip(self, trip: TripRecord) -> bool:
        """Store a finished trip as the most recent one."""
        with self._lock:
            self._trips.insert(0, trip)
            ok = self._store.save_trips(self._trips)
        self.trips_changed.emit()
        return ok

    def delete_trip(self, trip_id: str) -> bool:
        with self._lock:
            remaining = [t for t in self._trips if t.id != trip_id]
            if len(remaining) == len(self._trips):
                logger.warning("Delete skipped, unknown trip %s", trip_id)
                return False
            self._trips = remaining
            ok = self._store.save_trips(self._trips)
        self.trips_changed.emit()
        return ok

    # ---------- Backup / reset ----------

    def export_backup(self, output_path: Path, version: str = BACKUP_VERSION) -> bool:
        with self._lock:
            return BackupExporter.export_bundle(
                self._vehicles, self._trips, output_path, version
            )

    def restore_backup(self, path: Path) -> bool:
        """
        Replace all vehicles and trips with a backup bundle.

        The bundle is decoded and stored before memory is touched, so a
        corrupt file or a failed write leaves everything as it was.
        """
        bundle = BackupExporter.read_bundle(path)
        if bundle is None:
            self.error_occurred.emit(f"Could not read backup {path}")
            return False

        with self._lock:
            if not self._store.replace_all(bundle.vehicles, bundle.trips):
                return False
            self._vehicles = list(bundle.vehicles)
            self._trips = list(bundle.trips)

        logger.info(
            "Restored backup: %d vehicles, %d trips", len(bundle.vehicles), len(bundle.trips)
        )
        self.vehicles_changed.emit()
        self.trips_changed.emit()
        return True

    def reset_all_data(self) -> bool:
        """Delete every vehicle and trip."""
        with self._lock:
            ok = self._store.replace_all([], [])
            if ok:
                self._vehicles = []
                self._trips = []
        self.vehicles_changed.emit()
        self.trips_changed.emit()
        return ok

    def _vehicle_index(self, vehicle_id: str) -> Optional[int]:
        for i, vehicle in enumerate(self._vehicles):
            if vehicle.id == vehicle_id:
                return i
        return None
