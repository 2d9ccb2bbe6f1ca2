"""
Domain: Money amounts.

Amounts are Decimal values in whole cents, between 0 (exclusive) and MAX_AMOUNT
(inclusive). Within these bounds every amount fits in 14 significant digits, so
sums of two amounts are exact in the default Decimal context.

`exact_sum` widens the precision to the operands when adding, so values loaded
from storage that fall outside these bounds are still compared exactly.
"""

from __future__ import annotations

from decimal import Decimal, localcontext

AMOUNT_SCALE: Decimal = Decimal("0.01")
MAX_AMOUNT: Decimal = Decimal("1000000000000")


def is_valid_amount(value: Decimal) -> bool:
    """True for a finite, positive amount no larger than MAX_AMOUNT with at most 2 decimal places."""

    if not value.is_finite() or value <= 0 or value > MAX_AMOUNT:
        return False
    return value == value.quantize(AMOUNT_SCALE)


def exact_sum(a: Decimal, b: Decimal) -> Decimal:
    """Add two finite Decimals without rounding."""

    lowest_exponent = min(a.as_tuple().exponent, b.as_tuple().exponent, 0)
    highest_digit = max(a.adjusted(), b.adjusted(), 0)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, highest_digit - lowest_exponent + 2)
        return a + b


__all__ = ["AMOUNT_SCALE", "MAX_AMOUNT", "is_valid_amount", "exact_sum"]
