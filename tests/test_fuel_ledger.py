"""Unit tests for refill ledger recomputation."""

from dataclasses import replace
from typing import List, Optional, Tuple

import pytest

from conftest import make_refill
from garage_log.models.vehicle import Vehicle
from garage_log.services.fuel_ledger import FuelLedger


def build_ledger(vehicle: Vehicle, odometers: List[float], liters: float = 40.0) -> FuelLedger:
    """Insert full-tank refills oldest first, one day apart."""
    ledger = vehicle.ledger
    for day, odometer in enumerate(odometers):
        ledger.insert(make_refill(odometer, liters, day=day))
    return ledger


def derived(ledger: FuelLedger) -> List[Tuple[Optional[float], Optional[float]]]:
    return [(e.distance_since_last, e.efficiency) for e in ledger.events]


class TestInsert:
    """Adding refills as the most recent entry."""

    def test_first_refill_has_no_derived_fields(self, vehicle: Vehicle) -> None:
        ledger = build_ledger(vehicle, [1000])

        assert len(ledger) == 1
        assert ledger.events[0].distance_since_last is None
        assert ledger.events[0].efficiency is None
        assert vehicle.odometer == 1000

    def test_efficiency_is_stamped_on_previous_refill(self, vehicle: Vehicle) -> None:
        """Full-to-full: 30 L over 400 km stamps 7.5 L/100km on the older refill."""
        ledger = vehicle.ledger
        ledger.insert(make_refill(1000, 45.0, day=0))
        ledger.insert(make_refill(1400, 30.0, day=1))

        newest, previous = ledger.events
        assert newest.distance_since_last == 400
        assert newest.efficiency is None
        assert previous.efficiency == pytest.approx(7.5)

    def test_untracked_levels_with_known_capacity(self) -> None:
        vehicle = Vehicle(make="VW", model="Golf", tank_capacity=50.0)
        ledger = vehicle.ledger
        ledger.insert(make_refill(1000, 45.0, day=0))
        ledger.insert(make_refill(1400, 30.0, day=1))

        assert ledger.events[1].efficiency == pytest.approx(7.5)

    def test_capacity_aware_estimate(self) -> None:
        """50 L tank, 100% -> 25% over 500 km is 37.5 L, 7.5 L/100km."""
        vehicle = Vehicle(make="VW", model="Golf", tank_capacity=50.0)
        ledger = vehicle.ledger
        ledger.insert(make_refill(1000, 40.0, day=0, full=False, level_before=0.2, level_after=1.0))
        ledger.insert(make_refill(1500, 20.0, day=1, full=False, level_before=0.25, level_after=0.65))

        assert ledger.events[0].distance_since_last == 500
        assert ledger.events[1].efficiency == pytest.approx(7.5)

    def test_unknown_capacity_falls_back_to_full_tank(self, vehicle: Vehicle) -> None:
        ledger = vehicle.ledger
        ledger.insert(make_refill(0, 35.0, day=0))
        ledger.insert(make_refill(600, 40.0, day=1))

        assert ledger.events[1].efficiency == pytest.approx(6.667, abs=1e-3)

    def test_partial_refill_without_levels_leaves_efficiency_unset(self, vehicle: Vehicle) -> None:
        ledger = vehicle.ledger
        ledger.insert(make_refill(1000, day=0))
        ledger.insert(make_refill(1500, day=1, full=False))

        assert ledger.events[0].distance_since_last == 500
        assert ledger.events[1].efficiency is None

    def test_zero_distance_leaves_efficiency_unset(self, vehicle: Vehicle) -> None:
        ledger = build_ledger(vehicle, [1000, 1000])

        assert ledger.events[0].distance_since_last == 0
        assert ledger.events[1].efficiency is None

    def test_malformed_input_does_not_raise(self, vehicle: Vehicle) -> None:
        ledger = vehicle.ledger
        ledger.insert(make_refill(1000, 0.0, day=0))
        ledger.insert(make_refill(-50, -10.0, day=1))

        assert ledger.events[0].distance_since_last == -1050
        assert ledger.events[1].efficiency is None

    def test_caller_supplied_derived_fields_are_ignored(self, vehicle: Vehicle) -> None:
        event = make_refill(1000)
        event.distance_since_last = 999.0
        event.efficiency = 1.0

        vehicle.ledger.insert(event)

        assert event.distance_since_last is None
        assert event.efficiency is None

    def test_odometer_never_decreases_on_insert(self, vehicle: Vehicle) -> None:
        build_ledger(vehicle, [1000, 800])
        assert vehicle.odometer == 1000

    def test_chronological_order(self, vehicle: Vehicle) -> None:
        ledger = build_ledger(vehicle, [1000, 1400, 1900, 2500])
        dates = [e.date for e in ledger.events]
        assert dates == sorted(dates, reverse=True)

    def test_out_of_order_dates_are_not_resorted(self, vehicle: Vehicle) -> None:
        """Insert always prepends; a backdated refill ends up first anyway."""
        ledger = vehicle.ledger
        ledger.insert(make_refill(1000, day=5))
        ledger.insert(make_refill(1400, day=2))

        dates = [e.date for e in ledger.events]
        assert dates != sorted(dates, reverse=True)
        assert ledger.events[0].odometer == 1400


class TestUpdate:
    """In-place edits recompute both neighbors."""

    @pytest.fixture
    def ledger(self, vehicle: Vehicle) -> FuelLedger:
        # index: 0=3000, 1=2500, 2=1900, 3=1400, 4=1000
        return build_ledger(vehicle, [1000, 1400, 1900, 2500, 3000])

    def test_initial_state(self, ledger: FuelLedger) -> None:
        assert derived(ledger) == [
            (500, None),
            (600, pytest.approx(8.0)),
            (500, pytest.approx(40 / 600 * 100)),
            (400, pytest.approx(8.0)),
            (None, pytest.approx(10.0)),
        ]

    def test_middle_edit_touches_only_neighbors(self, ledger: FuelLedger) -> None:
        before = derived(ledger)
        edited = replace(ledger.events[2], odometer=2000, liters=50.0)

        ledger.update(edited, 2)

        after = derived(ledger)
        assert after[0] == before[0]
        assert after[4] == before[4]
        assert ledger.events[3].efficiency == pytest.approx(50 / 600 * 100)
        assert ledger.events[2].distance_since_last == 600
        assert ledger.events[2].efficiency == pytest.approx(8.0)
        assert ledger.events[1].distance_since_last == 500
        assert ledger.events[2] is edited

    def test_historical_edit_keeps_vehicle_odometer(self, ledger: FuelLedger) -> None:
        ledger.update(replace(ledger.events[2], odometer=2000), 2)
        assert ledger.vehicle.odometer == 3000

    def test_most_recent_edit_sets_odometer_and_clears_efficiency(self, ledger: FuelLedger) -> None:
        edited = replace(ledger.events[0], odometer=2900, efficiency=5.0)

        ledger.update(edited, 0)

        assert ledger.vehicle.odometer == 2900
        assert edited.efficiency is None
        assert edited.distance_since_last == 400
        assert ledger.events[1].efficiency == pytest.approx(10.0)

    def test_oldest_edit_has_no_previous_distance(self, ledger: FuelLedger) -> None:
        edited = replace(ledger.events[4], odometer=900)

        ledger.update(edited, 4)

        assert edited.distance_since_last is None
        assert edited.efficiency == pytest.approx(8.0)
        assert ledger.events[3].distance_since_last == 500

    def test_single_refill_edit(self, vehicle: Vehicle) -> None:
        ledger = build_ledger(vehicle, [1000])

        ledger.update(replace(ledger.events[0], odometer=1200), 0)

        assert ledger.events[0].distance_since_last is None
        assert ledger.events[0].efficiency is None
        assert vehicle.odometer == 1200

    def test_index_out_of_range(self, ledger: FuelLedger) -> None:
        with pytest.raises(IndexError):
            ledger.update(make_refill(5000), 5)


class TestDelete:
    """Removing refills."""

    @pytest.fixture
    def ledger(self, vehicle: Vehicle) -> FuelLedger:
        return build_ledger(vehicle, [1000, 1400, 1900, 2500])

    def test_delete_most_recent_clears_dangling_efficiency(self, ledger: FuelLedger) -> None:
        assert ledger.events[1].efficiency is not None

        removed = ledger.delete(0)

        assert removed.odometer == 2500
        assert ledger.events[0].odometer == 1900
        assert ledger.events[0].efficiency is None
        assert ledger.vehicle.odometer == 1900

    def test_delete_middle_does_not_bridge_gap(self, ledger: FuelLedger) -> None:
        before = derived(ledger)

        ledger.delete(1)

        assert [e.odometer for e in ledger.events] == [2500, 1400, 1000]
        assert derived(ledger) == [before[0], before[2], before[3]]
        assert ledger.vehicle.odometer == 2500

    def test_delete_last_refill(self, vehicle: Vehicle) -> None:
        ledger = build_ledger(vehicle, [1000])

        ledger.delete(0)

        assert len(ledger) == 0
        assert vehicle.odometer == 1000

    def test_index_out_of_range(self, ledger: FuelLedger) -> None:
        with pytest.raises(IndexError):
            ledger.delete(-1)


class TestDistanceEntry:
    """Refills entered as distance since the previous refill."""

    def test_insert_by_distance(self, vehicle: Vehicle) -> None:
        ledger = build_ledger(vehicle, [1000])

        ledger.insert_by_distance(make_refill(0, 30.0, day=1), 450)

        assert ledger.events[0].odometer == 1450
        assert ledger.events[0].distance_since_last == 450
        assert vehicle.odometer == 1450

    def test_repeated_edits_do_not_drift(self, vehicle: Vehicle) -> None:
        ledger = build_ledger(vehicle, [1000])
        ledger.insert_by_distance(make_refill(0, 30.0, day=1), 450)

        for _ in range(3):
            ledger.update_by_distance(replace(ledger.events[0]), 0, 500)

        assert ledger.events[0].odometer == 1500
        assert ledger.events[0].distance_since_last == 500
        assert ledger.events[1].efficiency == pytest.approx(6.0)

    def test_edit_of_oldest_refill_uses_its_own_odometer(self, vehicle: Vehicle) -> None:
        ledger = build_ledger(vehicle, [1000, 1400])

        assert ledger.odometer_for_edited_distance(1, 100) == 1100

    def test_repeated_edits_of_oldest_refill_do_not_drift(self, vehicle: Vehicle) -> None:
        ledger = build_ledger(vehicle, [1000, 1400])

        odometers = []
        for _ in range(3):
            ledger.update_by_distance(replace(ledger.events[1]), 1, 100)
            odometers.append(ledger.events[1].odometer)

        assert odometers == [1100, 1100, 1100]
        assert ledger.events[1].distance_since_last == 100
        assert ledger.events[0].distance_since_last == 300
        assert ledger.events[1].efficiency == pytest.approx(40.0 / 3)

    def test_edit_without_stored_distance_uses_older_neighbor(self, vehicle: Vehicle) -> None:
        ledger = build_ledger(vehicle, [1000, 1400])
        ledger.events[0].distance_since_last = None

        assert ledger.odometer_for_edited_distance(0, 300) == 1300
