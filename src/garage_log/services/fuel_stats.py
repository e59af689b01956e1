"""Fuel spending and consumption statistics over a refill history."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional, Sequence, Tuple

from garage_log.models.data_records import RefillEvent
from garage_log.utils.units import liters_per_100


@dataclass
class PeriodTotals:
    """Refill totals for a calendar period."""

    refill_count: int = 0
    liters: float = 0.0
    cost: float = 0.0


@dataclass
class FuelSummary:
    """Aggregated refill statistics for one vehicle."""

    refill_count: int
    total_liters: float
    total_cost: float
    driven_distance: float
    avg_consumption: float  # L/100km, 0 if unknown

    this_month: PeriodTotals
    this_year: PeriodTotals
    prev_month: PeriodTotals
    prev_year: PeriodTotals

    min_fill: float
    max_fill: float
    min_cost: float
    max_cost: float
    min_price: float
    max_price: float


def total_liters(refills: Sequence[RefillEvent]) -> float:
    return sum(r.liters for r in refills)


def total_spent(refills: Sequence[RefillEvent]) -> float:
    return sum(r.total_cost for r in refills)


def driven_distance(refills: Sequence[RefillEvent]) -> float:
    """Odometer span between the newest and oldest refill."""
    if not refills:
        return 0.0
    return refills[0].odometer - refills[-1].odometer


def average_consumption(refills: Sequence[RefillEvent]) -> float:
    """
    Whole-history consumption in L/100km.

    The oldest refill's liters are ignored because there is no recorded
    distance leading up to it.

    Args:
        refills: Ledger refills, newest first
    """
    if len(refills) < 2:
        return 0.0

    distance = driven_distance(refills)
    if distance <= 0:
        return 0.0

    return liters_per_100(total_liters(refills[:-1]), distance)


def cost_per_distance(event: RefillEvent) -> Optional[float]:
    """Cost of a refill divided by the distance driven before it."""
    if event.distance_since_last is None or event.distance_since_last <= 0:
        return None
    return event.total_cost / event.distance_since_last


def _period_totals(
    refills: Sequence[RefillEvent], match: Callable[[datetime], bool]
) -> PeriodTotals:
    totals = PeriodTotals()
    for r in refills:
        if match(datetime.fromtimestamp(r.date)):
            totals.refill_count += 1
            totals.liters += r.liters
            totals.cost += r.total_cost
    return totals


def _min_max(values: List[float]) -> Tuple[float, float]:
    if not values:
        return 0.0, 0.0
    return min(values), max(values)


def compute_fuel_summary(
    refills: Sequence[RefillEvent], now: Optional[datetime] = None
) -> FuelSummary:
    """
    Compute refill statistics for a vehicle.

    Args:
        refills: Ledger refills, newest first
        now: Reference time for the calendar periods (default: current time)
    """
    now = now or datetime.now()
    prev_month_year, prev_month = (
        (now.year - 1, 12) if now.month == 1 else (now.year, now.month - 1)
    )

    min_fill, max_fill = _min_max([r.liters for r in refills])
    min_cost, max_cost = _min_max([r.total_cost for r in refills])
    min_price, max_price = _min_max([r.price_per_unit for r in refills])

    return FuelSummary(
        refill_count=len(refills),
        total_liters=total_liters(refills),
        total_cost=total_spent(refills),
        driven_distance=driven_distance(refills),
        avg_consumption=average_consumption(refills),
        this_month=_period_totals(
            refills, lambda d: d.year == now.year and d.month == now.month
        ),
        this_year=_period_totals(refills, lambda d: d.year == now.year),
        prev_month=_period_totals(
            refills, lambda d: d.year == prev_month_year and d.month == prev_month
        ),
        prev_year=_period_totals(refills, lambda d: d.year == now.year - 1),
        min_fill=min_fill,
        max_fill=max_fill,
        min_cost=min_cost,
        max_cost=max_cost,
        min_price=min_price,
        max_price=max_price,
    )
