"""Refill history for one vehicle with incremental distance/efficiency recomputation."""

from __future__ import annotations

import logging
from typing import List, Optional

from garage_log.models.data_records import RefillEvent
from garage_log.models.vehicle import Vehicle
from garage_log.services.tank_model import effective_level_after, estimate_consumed_liters
from garage_log.utils.units import liters_per_100

logger = logging.getLogger(__name__)


class FuelLedger:
    """
    Ordered refill history of a vehicle.

    Refills are stored newest first: the older neighbor of index i is i + 1,
    the newer neighbor is i - 1. Every mutation recomputes only the touched
    record and its immediate neighbors, never the whole history.

    Efficiency describes the interval that ends at the next refill, so it is
    stamped on the older record once the newer one exists.
    """

    def __init__(self, vehicle: Vehicle):
        self._vehicle = vehicle

    @property
    def vehicle(self) -> Vehicle:
        return self._vehicle

    @property
    def events(self) -> List[RefillEvent]:
        """Refills, newest first."""
        return self._vehicle.refills

    def __len__(self) -> int:
        return len(self._vehicle.refills)

    def index_of(self, event_id: str) -> Optional[int]:
        """Position of a refill by id, or None."""
        for i, event in enumerate(self._vehicle.refills):
            if event.id == event_id:
                return i
        return None

    # ---------- Mutations ----------

    def insert(self, event: RefillEvent) -> None:
        """
        Add a new refill as the most recent entry.

        Closes the interval between the previous most recent refill and
        this one, then prepends.
        """
        refills = self._vehicle.refills
        event.distance_since_last = None
        event.efficiency = None

        if refills:
            self._close_interval(refills[0], event)

        refills.insert(0, event)

        if event.odometer > self._vehicle.odometer:
            self._vehicle.odometer = event.odometer

        logger.debug("Inserted refill %s at odometer %.1f", event.id, event.odometer)

    def update(self, event: RefillEvent, index: int) -> None:
        """
        Replace the refill at index and recompute both neighbors.

        Raises:
            IndexError: index is outside the ledger
        """
        refills = self._vehicle.refills
        self._check_index(index)

        # Older side: interval ending at this refill
        if index + 1 < len(refills):
            self._close_interval(refills[index + 1], event)
        else:
            event.distance_since_last = None

        # Newer side: interval starting at this refill
        if index > 0:
            self._close_interval(event, refills[index - 1])
        else:
            event.efficiency = None

        refills[index] = event

        if index == 0:
            self._vehicle.odometer = event.odometer

        logger.debug("Updated refill %s at index %d", event.id, index)

    def delete(self, index: int) -> RefillEvent:
        """
        Remove the refill at index.

        When the most recent refill is removed, the new most recent one loses
        its efficiency (the interval it described is no longer closed) and
        becomes the source of the vehicle odometer. Gaps left by deleting a
        historical refill are not bridged.

        Raises:
            IndexError: index is outside the ledger
        """
        refills = self._vehicle.refills
        self._check_index(index)

        removed = refills.pop(index)

        if index == 0 and refills:
            refills[0].efficiency = None
            self._vehicle.odometer = refills[0].odometer

        logger.debug("Deleted refill %s from index %d", removed.id, index)
        return removed

    # ---------- Distance-based entry ----------

    def odometer_for_new_distance(self, distance: float) -> float:
        """Absolute odometer for a new refill entered as distance since the last one."""
        return self._vehicle.odometer + distance

    def odometer_for_edited_distance(self, index: int, distance: float) -> float:
        """
        Absolute odometer for an edited refill entered as distance.

        The base is the odometer the stored record was measured from, so
        repeated edits do not drift.
        """
        self._check_index(index)
        refills = self._vehicle.refills
        stored = refills[index]

        if stored.distance_since_last is not None:
            prior_odometer = stored.odometer - stored.distance_since_last
        elif index + 1 < len(refills):
            prior_odometer = refills[index + 1].odometer
        else:
            prior_odometer = stored.odometer

        return prior_odometer + distance

    def insert_by_distance(self, event: RefillEvent, distance: float) -> None:
        """Insert a refill whose position is given as distance since the last refill."""
        event.odometer = self.odometer_for_new_distance(distance)
        self.insert(event)

    def update_by_distance(self, event: RefillEvent, index: int, distance: float) -> None:
        """
        Update a refill whose position is given as distance since the previous refill.

        The oldest refill has no older neighbor to measure from, so the
        entered distance is kept as its distance_since_last. Later edits then
        resolve against the same base.
        """
        event.odometer = self.odometer_for_edited_distance(index, distance)
        self.update(event, index)

        if index == len(self._vehicle.refills) - 1:
            event.distance_since_last = distance

    # ---------- Internals ----------

    def _close_interval(self, older: RefillEvent, newer: RefillEvent) -> None:
        """Set distance on the newer refill and efficiency on the older one."""
        distance = newer.odometer - older.odometer
        newer.distance_since_last = distance

        consumed = estimate_consumed_liters(
            self._vehicle.tank_capacity,
            effective_level_after(older),
            newer.tank_level_before,
            newer.liters,
            newer.is_full_tank,
        )

        if distance > 0 and consumed > 0:
            older.efficiency = liters_per_100(consumed, distance)
        else:
            older.efficiency = None

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._vehicle.refills):
            raise IndexError(f"Refill index {index} out of range ({len(self._vehicle.refills)} refills)")
