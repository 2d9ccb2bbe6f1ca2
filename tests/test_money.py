"""
Tests for `domain/money.py`.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from domain.money import MAX_AMOUNT, exact_sum, is_valid_amount


@pytest.mark.parametrize("value", [Decimal("0.01"), Decimal("1050"), Decimal("1050.50"), Decimal("1050.500"), MAX_AMOUNT])
def test_cent_amounts_within_bounds_are_valid(value) -> None:
    assert is_valid_amount(value) is True


@pytest.mark.parametrize(
    "value",
    [
        Decimal("0"),
        Decimal("-1"),
        Decimal("0.001"),
        Decimal("1050.005"),
        MAX_AMOUNT + Decimal("0.01"),
        Decimal("1E+30"),
        Decimal("NaN"),
        Decimal("Infinity"),
    ],
)
def test_amounts_outside_bounds_or_scale_are_invalid(value) -> None:
    assert is_valid_amount(value) is False


def test_exact_sum_does_not_round_large_operands() -> None:
    # 1E+30 + 1 rounds back to 1E+30 at the default 28-digit precision.
    total = exact_sum(Decimal("1E+30"), Decimal("1"))

    assert total == Decimal("1000000000000000000000000000001")
    assert total > Decimal("1E+30")


def test_exact_sum_of_ordinary_amounts() -> None:
    assert exact_sum(Decimal("1050.25"), Decimal("50")) == Decimal("1100.25")
