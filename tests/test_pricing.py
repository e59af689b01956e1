"""Unit tests for liters / price / total reconciliation."""

import pytest

from garage_log.utils.pricing import PriceField, reconcile


@pytest.mark.parametrize(
    "values, edited, expected",
    [
        ((40.0, 1.5, 0.0), PriceField.LITERS, (40.0, 1.5, 60.0)),
        ((40.0, 0.0, 70.0), PriceField.LITERS, (40.0, 1.75, 70.0)),
        ((40.0, 0.0, 80.0), PriceField.TOTAL, (40.0, 2.0, 80.0)),
        ((0.0, 1.6, 80.0), PriceField.TOTAL, (50.0, 1.6, 80.0)),
        ((40.0, 1.899, 0.0), PriceField.PRICE, (40.0, 1.899, 75.96)),
        ((0.0, 2.0, 50.0), PriceField.PRICE, (25.0, 2.0, 50.0)),
        ((0.0, 0.0, 0.0), PriceField.LITERS, (0.0, 0.0, 0.0)),
    ],
)
def test_reconcile_follows_edited_field(values, edited, expected) -> None:
    result = reconcile(*values, edited)
    assert tuple(result) == pytest.approx(expected)


def test_edited_field_is_kept() -> None:
    result = reconcile(33.34, 1.5, 10.0, PriceField.LITERS)
    assert result.liters == 33.34
    assert result.total_cost == pytest.approx(50.01)
