"""Unit conversion helpers for speed and distance."""

from __future__ import annotations

# Conversion constants
MPS_TO_KMH = 3.6
METERS_PER_KM = 1000.0


def mps_to_kmh(mps: float) -> float:
    """Convert meters per second to kilometers per hour."""
    return mps * MPS_TO_KMH


def meters_to_km(meters: float) -> float:
    """Convert meters to kilometers."""
    return meters / METERS_PER_KM


def liters_per_100(liters: float, distance: float) -> float:
    """
    Consumption in liters per 100 distance units.

    Args:
        liters: Fuel consumed
        distance: Distance covered (must be > 0)
    """
    return (liters / distance) * 100
