"""
Domain: Auction aggregate and its bid history log.

Invariants enforced here:
- An Auction is created with current_high_bid = starting_bid, bid_count = 0 and
  an empty bid history.
- starting_bid, bid_increment, start_date and end_date are immutable after creation.
- current_high_bid is monotonically non-decreasing; bid_count grows by exactly 1
  per accepted bid.
- bid_history is append-only and ordered by acceptance (commit) order. Entries are
  never mutated or reordered.
- current_high_bid and top_bidder_id are always re-derivable from the last history
  entry (or from starting_bid / None when the history is empty).

This module contains only pure domain entities: no I/O, no database, no frameworks.
All timestamps must be passed explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple
from uuid import UUID

from .money import exact_sum
from .time import require_utc_timestamp

DEFAULT_CATEGORY: str = "Other"


@dataclass(frozen=True, slots=True)
class Bid:
    """
    Immutable record of an accepted bid.

    submission_id is the caller-supplied idempotency key for the submission that
    produced this bid (None if the caller did not supply one).
    """

    bidder_id: str
    bidder_display_name: str
    amount: Decimal
    accepted_at: datetime
    submission_id: Optional[str] = None

    def __post_init__(self) -> None:
        require_utc_timestamp("accepted_at", self.accepted_at)
        if not self.bidder_id:
            raise ValueError("bidder_id must not be empty")
        if not self.amount.is_finite() or self.amount <= 0:
            raise ValueError("amount must be a positive number")


@dataclass(frozen=True, slots=True)
class Auction:
    """
    Aggregate root for bidding.

    Bid fields (current_high_bid, bid_count, top_bidder_id, bid_history) change only
    through `with_accepted_bid`, which returns a new instance; the original snapshot
    is left untouched.

    reserve_price and buy_now_price are informative only. No acceptance rule uses them.
    """

    auction_id: UUID
    title: str
    created_by: str
    starting_bid: Decimal
    bid_increment: Decimal
    current_high_bid: Decimal
    bid_count: int
    start_date: datetime
    end_date: datetime
    created_at: datetime
    top_bidder_id: Optional[str] = None
    bid_history: Tuple[Bid, ...] = field(default_factory=tuple)
    category: str = DEFAULT_CATEGORY
    description: str = ""
    reserve_price: Optional[Decimal] = None
    buy_now_price: Optional[Decimal] = None

    def __post_init__(self) -> None:
        require_utc_timestamp("start_date", self.start_date)
        require_utc_timestamp("end_date", self.end_date)
        require_utc_timestamp("created_at", self.created_at)

        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        if not self.starting_bid.is_finite() or self.starting_bid <= 0:
            raise ValueError("starting_bid must be a positive number")
        if not self.bid_increment.is_finite() or self.bid_increment <= 0:
            raise ValueError("bid_increment must be a positive number")
        if self.bid_count < 0:
            raise ValueError("bid_count must be >= 0")

    @staticmethod
    def new(
        *,
        auction_id: UUID,
        title: str,
        created_by: str,
        starting_bid: Decimal,
        bid_increment: Decimal,
        start_date: datetime,
        end_date: datetime,
        created_at: datetime,
        category: str = DEFAULT_CATEGORY,
        description: str = "",
        reserve_price: Optional[Decimal] = None,
        buy_now_price: Optional[Decimal] = None,
    ) -> "Auction":
        """Build a freshly created auction with no bids."""

        return Auction(
            auction_id=auction_id,
            title=title,
            created_by=created_by,
            starting_bid=starting_bid,
            bid_increment=bid_increment,
            current_high_bid=starting_bid,
            bid_count=0,
            start_date=start_date,
            end_date=end_date,
            created_at=created_at,
            top_bidder_id=None,
            bid_history=(),
            category=category,
            description=description,
            reserve_price=reserve_price,
            buy_now_price=buy_now_price,
        )

    @property
    def minimum_next_bid(self) -> Decimal:
        """Smallest amount the next bid may have."""

        return exact_sum(self.current_high_bid, self.bid_increment)

    @property
    def last_bid(self) -> Optional[Bid]:
        return self.bid_history[-1] if self.bid_history else None

    @property
    def reserve_met(self) -> Optional[bool]:
        """Whether the reserve price has been reached (None if the auction has no reserve)."""

        if self.reserve_price is None:
            return None
        return self.bid_count > 0 and self.current_high_bid >= self.reserve_price

    def with_accepted_bid(self, bid: Bid) -> "Auction":
        """
        Return a new Auction with `bid` appended to the history.

        Enforces the history ordering rule: the bid must be at least
        current_high_bid + bid_increment.
        """

        if bid.amount < self.minimum_next_bid:
            raise ValueError(
                f"Bid amount {bid.amount} is below the minimum acceptable {self.minimum_next_bid}"
            )

        return replace(
            self,
            current_high_bid=bid.amount,
            bid_count=self.bid_count + 1,
            top_bidder_id=bid.bidder_id,
            bid_history=self.bid_history + (bid,),
        )

    def find_submission(self, submission_id: str, bidder_id: str) -> Optional[Bid]:
        """Return the accepted bid produced by (submission_id, bidder_id), if any."""

        for bid in reversed(self.bid_history):
            if bid.submission_id == submission_id and bid.bidder_id == bidder_id:
                return bid
        return None


def check_history_consistency(auction: Auction) -> List[str]:
    """
    Verify the bid history log invariants for an auction snapshot.

    Returns a list of human-readable violations (empty when consistent):
    - bid_count equals the number of history entries
    - each entry exceeds its predecessor (or starting_bid) by at least bid_increment
    - acceptance timestamps never go backwards
    - current_high_bid / top_bidder_id match the last entry
    """

    problems: List[str] = []
    history = auction.bid_history

    if auction.bid_count != len(history):
        problems.append(
            f"bid_count is {auction.bid_count} but history has {len(history)} entries"
        )

    previous_amount = auction.starting_bid
    previous_at: Optional[datetime] = None
    for index, bid in enumerate(history):
        if bid.amount < exact_sum(previous_amount, auction.bid_increment):
            problems.append(
                f"entry {index} amount {bid.amount} is below {previous_amount} + {auction.bid_increment}"
            )
        if previous_at is not None and bid.accepted_at < previous_at:
            problems.append(f"entry {index} accepted_at goes backwards")
        previous_amount = bid.amount
        previous_at = bid.accepted_at

    last = auction.last_bid
    expected_high = last.amount if last is not None else auction.starting_bid
    expected_top = last.bidder_id if last is not None else None

    if auction.current_high_bid != expected_high:
        problems.append(
            f"current_high_bid is {auction.current_high_bid} but history implies {expected_high}"
        )
    if auction.top_bidder_id != expected_top:
        problems.append(
            f"top_bidder_id is {auction.top_bidder_id!r} but history implies {expected_top!r}"
        )

    return problems


__all__ = ["Bid", "Auction", "check_history_consistency", "DEFAULT_CATEGORY"]
