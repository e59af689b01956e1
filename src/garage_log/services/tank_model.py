"""Conversions between fractional tank level and liters consumed."""

from __future__ import annotations

from typing import Optional

from garage_log.models.data_records import RefillEvent

FULL_TANK = 1.0


def effective_level_after(event: RefillEvent) -> Optional[float]:
    """
    Tank level right after a refill.

    Returns:
        1.0 for a full tank, the tracked level otherwise, or None if unknown
    """
    if event.is_full_tank:
        return FULL_TANK
    return event.tank_level_after


def estimate_consumed_liters(
    capacity: float,
    level_after_previous: Optional[float],
    level_before_current: Optional[float],
    liters_purchased: float,
    is_full_tank_now: bool,
) -> float:
    """
    Estimate fuel burned between two consecutive refills.

    Tank levels give the better estimate since they capture partial
    refills. Without level data this degrades to the full-to-full method,
    where the liters needed to top up equal the liters burned.

    Args:
        capacity: Tank capacity in liters (0 = unknown)
        level_after_previous: Level after the older refill (None = unknown)
        level_before_current: Level before the newer refill (None = not tracked)
        liters_purchased: Liters bought at the newer refill
        is_full_tank_now: Whether the newer refill filled the tank

    Returns:
        Liters consumed, 0 if it cannot be estimated
    """
    consumed = 0.0

    if (
        capacity > 0
        and level_after_previous is not None
        and level_after_previous > 0
        and level_before_current is not None
    ):
        consumed = max(0.0, level_after_previous - level_before_current) * capacity

    if consumed == 0 and is_full_tank_now:
        consumed = liters_purchased

    return consumed


def level_after_refill(
    capacity: float,
    level_before: Optional[float],
    liters: float,
    is_full_tank: bool,
) -> Optional[float]:
    """
    Compute the tank level after adding fuel.

    May exceed 1.0 when the entered liters do not fit, see is_overfilled().
    """
    if is_full_tank:
        return FULL_TANK
    if capacity <= 0 or level_before is None:
        return None
    return (capacity * level_before + liters) / capacity


def is_overfilled(level: Optional[float]) -> bool:
    """True if a computed level is more than a full tank."""
    return level is not None and level > FULL_TANK
