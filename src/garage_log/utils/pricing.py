"""Reconcile liters, unit price and total cost while a refill is being edited."""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple


class PriceField(Enum):
    """Which refill form field the user just edited."""

    LITERS = "liters"
    PRICE = "price"
    TOTAL = "total"


class RefillPricing(NamedTuple):
    liters: float
    price_per_unit: float
    total_cost: float


def reconcile(
    liters: float,
    price_per_unit: float,
    total_cost: float,
    edited: PriceField,
) -> RefillPricing:
    """
    Fill in the dependent pricing field after one field changed.

    The edited field is never overwritten. Totals are rounded to cents,
    unit prices to 3 decimals and liters to 2 decimals. Values that
    cannot be derived (missing inputs) are left as given.

    Args:
        liters: Current liters value
        price_per_unit: Current unit price
        total_cost: Current total cost
        edited: Field the user changed

    Returns:
        Reconciled (liters, price_per_unit, total_cost)
    """
    if edited is PriceField.LITERS:
        if price_per_unit > 0:
            total_cost = round(liters * price_per_unit, 2)
        elif total_cost > 0 and liters > 0:
            price_per_unit = round(total_cost / liters, 3)
    elif edited is PriceField.TOTAL:
        if liters > 0:
            price_per_unit = round(total_cost / liters, 3)
        elif price_per_unit > 0:
            liters = round(total_cost / price_per_unit, 2)
    elif edited is PriceField.PRICE:
        if liters > 0:
            total_cost = round(liters * price_per_unit, 2)
        elif total_cost > 0 and price_per_unit > 0:
            liters = round(total_cost / price_per_unit, 2)

    return RefillPricing(liters, price_per_unit, total_cost)
