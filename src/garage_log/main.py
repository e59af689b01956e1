import argparse
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from garage_log.config.settings import Settings
from garage_log.models.data_records import RefillEvent
from garage_log.models.vehicle import Vehicle
from garage_log.services.backup import BackupExporter
from garage_log.services.data_store import DataStore, get_data_dir, get_exports_dir
from garage_log.services.fuel_stats import compute_fuel_summary
from garage_log.services.garage import Garage
from garage_log.services.tank_model import is_overfilled, level_after_refill
from garage_log.services.trip_analytics import (
    combined_speed_distribution,
    compute_all_time_stats,
    compute_trip_summary,
    format_duration,
)
from garage_log.utils.pricing import PriceField, reconcile
from garage_log.utils.units import meters_to_km

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="garage-log")
    p.add_argument("--db", type=Path, help="SQLite database path")
    p.add_argument("--settings", type=Path, help="Settings JSON path")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("summary", help="Print vehicle and trip statistics")

    v = sub.add_parser("add-vehicle", help="Add a vehicle to the garage")
    v.add_argument("--make", required=True)
    v.add_argument("--model", required=True)
    v.add_argument("--year", default="")
    v.add_argument("--plate", default="")
    v.add_argument("--odometer", type=float, default=0.0)
    v.add_argument("--fuel-type", default=None)
    v.add_argument("--capacity", type=float, default=0.0, help="Tank capacity (L), 0 = unknown")

    r = sub.add_parser("add-refill", help="Record a refill")
    r.add_argument("vehicle_id")
    pos = r.add_mutually_exclusive_group(required=True)
    pos.add_argument("--odometer", type=float, help="Odometer reading (km)")
    pos.add_argument("--distance", type=float, help="Distance since last refill (km)")
    r.add_argument("--liters", type=float, required=True)
    r.add_argument("--price", type=float, default=0.0, help="Price per liter")
    r.add_argument("--total", type=float, default=0.0, help="Total cost")
    r.add_argument("--level-before", type=float, default=None, help="Tank level before (0-1)")
    r.add_argument("--full", action="store_true", help="Filled the tank")
    r.add_argument("--station", default=None)
    r.add_argument("--fuel-type", default=None)
    r.add_argument("--date", type=datetime.fromisoformat, default=None, help="ISO date/time")

    e = sub.add_parser("export", help="Write a backup bundle")
    e.add_argument("--output", type=Path, default=None)

    i = sub.add_parser("import", help="Restore a backup bundle (replaces everything)")
    i.add_argument("path", type=Path)

    return p.parse_args(argv)


def _print_summary(garage: Garage, settings: Settings) -> None:
    for vehicle in garage.vehicles:
        summary = compute_fuel_summary(vehicle.refills)
        print(f"{vehicle.display_name} [{vehicle.id}]")
        print(f"  Odometer:     {vehicle.odometer:.0f} km")
        print(f"  Refills:      {summary.refill_count} ({summary.total_liters:.1f} L)")
        print(f"  Spent:        {summary.total_cost:.2f} {settings.currency_symbol}")
        print(f"  Consumption:  {summary.avg_consumption:.2f} L/100km")
        for event in vehicle.refills[:5]:
            dist = f"{event.distance_since_last:.0f} km" if event.distance_since_last is not None else "-"
            eff = f"{event.efficiency:.2f} L/100km" if event.efficiency is not None else "-"
            when = datetime.fromtimestamp(event.date).strftime("%Y-%m-%d")
            print(f"    {when}  {event.odometer:>8.0f} km  {event.liters:6.2f} L  {dist:>8}  {eff}")

    trips = garage.trips
    stats = compute_all_time_stats(trips)
    print(f"Trips: {stats.trip_count}")
    print(f"  Distance:   {meters_to_km(stats.total_distance_m):.1f} km")
    print(f"  Duration:   {format_duration(stats.total_duration_secs)}")
    print(f"  Top speed:  {stats.top_speed_kmh:.0f} km/h")
    for band in combined_speed_distribution(trips):
        print(f"    {band.label:>8} km/h  {band.minutes:7.1f} min")
    for trip in trips[:5]:
        s = compute_trip_summary(trip, settings.red_zone_kmh, settings.sample_interval_secs)
        print(
            f"  {s.start_datetime:%Y-%m-%d %H:%M}  {meters_to_km(s.distance_m):6.1f} km  "
            f"{s.duration_formatted:>7}  avg {s.avg_speed_kmh:5.1f}  max {s.max_speed_kmh:5.1f}  "
            f"red zone {s.red_zone_secs:.0f}s  {s.vehicle_label or ''}"
        )


def _check_fuel_type(fuel_type: Optional[str], settings: Settings) -> bool:
    if fuel_type is None or fuel_type in settings.fuel_types:
        return True
    logger.error("Unknown fuel type %r, expected one of: %s", fuel_type, ", ".join(settings.fuel_types))
    return False


def _add_vehicle(garage: Garage, args: argparse.Namespace, settings: Settings) -> int:
    if not _check_fuel_type(args.fuel_type, settings):
        return 1
    vehicle = Vehicle(
        make=args.make,
        model=args.model,
        year=args.year,
        license_plate=args.plate,
        odometer=args.odometer,
        fuel_type=args.fuel_type or settings.default_fuel_type,
        tank_capacity=args.capacity,
    )
    if not garage.add_vehicle(vehicle):
        return 1
    print(vehicle.id)
    return 0


def _add_refill(garage: Garage, args: argparse.Namespace, settings: Settings) -> int:
    if not _check_fuel_type(args.fuel_type, settings):
        return 1

    vehicle = garage.get_vehicle(args.vehicle_id)
    if vehicle is None:
        logger.error("Unknown vehicle %s", args.vehicle_id)
        return 1

    edited = PriceField.LITERS if args.price > 0 else PriceField.TOTAL
    pricing = reconcile(args.liters, args.price, args.total, edited)

    level_after = level_after_refill(
        vehicle.tank_capacity, args.level_before, pricing.liters, args.full
    )
    if is_overfilled(level_after):
        logger.warning("%.2f L does not fit in the tank at the given level", pricing.liters)

    event = RefillEvent(
        date=args.date.timestamp() if args.date else time.time(),
        odometer=args.odometer or 0.0,
        liters=pricing.liters,
        price_per_unit=pricing.price_per_unit,
        total_cost=pricing.total_cost,
        fuel_type=args.fuel_type or vehicle.fuel_type,
        tank_level_before=args.level_before,
        tank_level_after=level_after,
        is_full_tank=args.full,
        station_name=args.station,
    )

    if args.distance is not None:
        ok = garage.add_refill_by_distance(vehicle.id, event, args.distance)
    else:
        ok = garage.add_refill(vehicle.id, event)
    return 0 if ok else 1


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = Settings.load(args.settings)
    store = DataStore(args.db or (get_data_dir() / settings.db_filename))
    if not store.initialize():
        return 1

    try:
        garage = Garage(store)

        if args.command == "summary":
            _print_summary(garage, settings)
            print(f"Database: {store.get_database_size_mb():.2f} MB")
            return 0
        if args.command == "add-vehicle":
            return _add_vehicle(garage, args, settings)
        if args.command == "add-refill":
            return _add_refill(garage, args, settings)
        if args.command == "export":
            output = args.output or (
                get_exports_dir() / BackupExporter.generate_filename(time.time())
            )
            if not garage.export_backup(output, settings.backup_version):
                return 1
            print(output)
            return 0
        if args.command == "import":
            return 0 if garage.restore_backup(args.path) else 1
        return 2
    finally:
        store.close()


if __name__ == "__main__":
    raise SystemExit(main())
