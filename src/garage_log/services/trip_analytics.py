"""Trip speed profile and statistics computation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from garage_log.models.data_records import TripPoint, TripRecord
from garage_log.utils.units import mps_to_kmh

# Speed band upper bounds (km/h), last band is open-ended
SPEED_BAND_LIMITS = (60.0, 90.0, 120.0, 150.0)
SPEED_BAND_LABELS = ("0-60", "61-90", "91-120", "121-150", "151+")
SPEED_BAND_COLORS = ("green", "blue", "yellow", "orange", "red")

RED_ZONE_KMH = 150.0


@dataclass
class SpeedBandTime:
    """Time spent inside one speed band."""

    label: str
    color: str
    minutes: float = 0.0


@dataclass
class TripSummary:
    """Summary statistics for a single trip."""

    trip_id: str
    start_time: float
    end_time: float
    distance_m: float
    duration_secs: float
    avg_speed_kmh: float
    max_speed_kmh: float
    red_zone_secs: float
    vehicle_label: Optional[str]

    @property
    def start_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.start_time)

    @property
    def duration_formatted(self) -> str:
        return format_duration(self.duration_secs)


@dataclass
class AllTimeStats:
    """All-time aggregated trip statistics."""

    first_trip_date: Optional[datetime]
    trip_count: int
    total_distance_m: float
    total_duration_secs: float
    top_speed_kmh: float


def speed_band_index(kmh: float) -> int:
    """Band index for a speed, upper bounds inclusive."""
    for i, limit in enumerate(SPEED_BAND_LIMITS):
        if kmh <= limit:
            return i
    return len(SPEED_BAND_LIMITS)


def speed_band_color(kmh: float) -> str:
    """Display color for a speed."""
    return SPEED_BAND_COLORS[speed_band_index(kmh)]


def _empty_bands() -> List[SpeedBandTime]:
    return [SpeedBandTime(label, color) for label, color in zip(SPEED_BAND_LABELS, SPEED_BAND_COLORS)]


def _accumulate_bands(bands: List[SpeedBandTime], points: Sequence[TripPoint]) -> None:
    # Each interval is credited to the speed at its start
    for p1, p2 in zip(points, points[1:]):
        minutes = (p2.timestamp - p1.timestamp) / 60.0
        bands[speed_band_index(mps_to_kmh(p1.speed))].minutes += minutes


def speed_band_distribution(points: Sequence[TripPoint]) -> List[SpeedBandTime]:
    """
    Minutes spent in each speed band for one trip.

    Args:
        points: Trip samples in recording order

    Returns:
        Five bands, 0-60 / 61-90 / 91-120 / 121-150 / 151+ km/h
    """
    bands = _empty_bands()
    _accumulate_bands(bands, points)
    return bands


def combined_speed_distribution(trips: Iterable[TripRecord]) -> List[SpeedBandTime]:
    """Speed band minutes summed over many trips."""
    bands = _empty_bands()
    for trip in trips:
        _accumulate_bands(bands, trip.points)
    return bands


def max_speed_kmh(points: Sequence[TripPoint]) -> float:
    """Highest recorded speed in km/h, 0 for an empty trip."""
    top = max((p.speed for p in points), default=0.0)
    return mps_to_kmh(top) if top > 0 else 0.0


def average_speed_kmh(trip: TripRecord) -> float:
    """Average speed from recorded distance and duration."""
    duration = trip.duration_secs
    if duration <= 0:
        return 0.0
    return mps_to_kmh(trip.distance / duration)


def red_zone_duration(
    points: Sequence[TripPoint],
    threshold_kmh: float = RED_ZONE_KMH,
    sample_secs: float = 1.0,
) -> float:
    """
    Approximate seconds spent above threshold_kmh.

    Counts samples over the threshold and assumes each sample covers
    sample_secs. Not a true time integral.
    """
    fast = sum(1 for p in points if mps_to_kmh(p.speed) > threshold_kmh)
    return fast * sample_secs


def compute_trip_summary(
    trip: TripRecord,
    red_zone_kmh: float = RED_ZONE_KMH,
    sample_secs: float = 1.0,
) -> TripSummary:
    """Compute the display summary for one trip."""
    return TripSummary(
        trip_id=trip.id,
        start_time=trip.start_time,
        end_time=trip.end_time,
        distance_m=trip.distance,
        duration_secs=trip.duration_secs,
        avg_speed_kmh=average_speed_kmh(trip),
        max_speed_kmh=max_speed_kmh(trip.points),
        red_zone_secs=red_zone_duration(trip.points, red_zone_kmh, sample_secs),
        vehicle_label=trip.vehicle_label,
    )


def compute_all_time_stats(trips: Sequence[TripRecord]) -> AllTimeStats:
    """Aggregate totals over every recorded trip."""
    first_trip = None
    if trips:
        first_trip = datetime.fromtimestamp(min(t.start_time for t in trips))

    return AllTimeStats(
        first_trip_date=first_trip,
        trip_count=len(trips),
        total_distance_m=sum(t.distance for t in trips),
        total_duration_secs=sum(t.duration_secs for t in trips),
        top_speed_kmh=max((max_speed_kmh(t.points) for t in trips), default=0.0),
    )


def format_duration(secs: float) -> str:
    """Format seconds as human-readable duration."""
    mins = int(secs // 60)
    if mins < 60:
        return f"{mins}m"
    hours = mins // 60
    mins = mins % 60
    if hours < 24:
        return f"{hours}h {mins}m"
    days = hours // 24
    hours = hours % 24
    return f"{days}d {hours}h"
