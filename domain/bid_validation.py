"""
Domain: Bid validation (pure decision function).

Rules, evaluated in order:
1. now must be within [start_date, end_date]          -> AUCTION_NOT_LIVE
2. amount must be a positive number in whole cents, at most MAX_AMOUNT -> INVALID_AMOUNT
3. amount >= current_high_bid + bid_increment          -> BID_TOO_LOW (reports the minimum)
4. The current top bidder may bid again; there is no self-outbid prohibition.

No side effects: identical inputs always yield identical decisions.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from .lifecycle import is_live
from .money import exact_sum, is_valid_amount


class RejectionReason(str, Enum):
    AUCTION_NOT_FOUND = "AUCTION_NOT_FOUND"
    AUCTION_NOT_LIVE = "AUCTION_NOT_LIVE"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    BID_TOO_LOW = "BID_TOO_LOW"
    CONFLICT = "CONFLICT"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"

    @property
    def is_retryable(self) -> bool:
        """Transient reasons the caller may resubmit after refreshing state."""

        return self in (RejectionReason.CONFLICT, RejectionReason.STORE_UNAVAILABLE)


@dataclass(frozen=True, slots=True)
class BidDecision:
    """
    Outcome of validating one proposed bid against one auction snapshot.

    minimum_acceptable is set only for BID_TOO_LOW.
    """

    accepted: bool
    reason: Optional[RejectionReason] = None
    minimum_acceptable: Optional[Decimal] = None

    @staticmethod
    def accept() -> "BidDecision":
        return BidDecision(accepted=True)

    @staticmethod
    def reject(reason: RejectionReason, minimum_acceptable: Optional[Decimal] = None) -> "BidDecision":
        return BidDecision(accepted=False, reason=reason, minimum_acceptable=minimum_acceptable)


def coerce_amount(value: Any) -> Optional[Decimal]:
    """
    Convert a submitted amount to Decimal.

    Floats go through str() so 1050.1 stays 1050.1. Returns None for values that
    cannot represent a number (bools included).
    """

    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, Decimal):
        return value
    try:
        if isinstance(value, float):
            return Decimal(str(value))
        return Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        return None


def validate_bid(
    *,
    current_high_bid: Decimal,
    bid_increment: Decimal,
    start_date: datetime,
    end_date: datetime,
    now: datetime,
    amount: Any,
    bidder_id: str,
) -> BidDecision:
    """
    Decide whether a proposed bid is acceptable against the given auction state.

    bidder_id does not influence the decision (rebidding by the top bidder is
    allowed); it is part of the signature so callers pass the full proposal.
    """

    if not is_live(now, start_date, end_date):
        return BidDecision.reject(RejectionReason.AUCTION_NOT_LIVE)

    decimal_amount = coerce_amount(amount)
    if decimal_amount is None or not is_valid_amount(decimal_amount):
        return BidDecision.reject(RejectionReason.INVALID_AMOUNT)

    minimum = exact_sum(current_high_bid, bid_increment)
    if decimal_amount < minimum:
        return BidDecision.reject(RejectionReason.BID_TOO_LOW, minimum_acceptable=minimum)

    return BidDecision.accept()


__all__ = ["RejectionReason", "BidDecision", "coerce_amount", "validate_bid"]
