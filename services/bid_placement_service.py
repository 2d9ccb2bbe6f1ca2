"""
Bid placement service.

Turns the pure bid validation decision into a safe state transition under many
concurrent writers, with no lock manager:

1. Read the current auction snapshot.
2. Validate the proposed bid against it. Rejections return immediately; nothing is written.
3. Conditionally write the new bid fields, guarded by the current_high_bid and
   bid_count that were read (compare-and-swap) and by the bidding window.
4. On success, return the accepted bid and the updated snapshot.
5. On a lost race, re-read and retry, up to max_attempts. When the budget is
   exhausted, report CONFLICT so the caller can refresh the price and resubmit.

The committed order of conditional writes is the authoritative total order of bids.

A store failure (including a timeout) is reported as STORE_UNAVAILABLE with an
unknown outcome. Resubmitting with the same submission_id is safe: if the earlier
attempt did commit, the bid is found in the history and returned without a second write.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from domain.auction import Auction, Bid
from domain.bid_validation import RejectionReason, coerce_amount, validate_bid
from domain.money import MAX_AMOUNT
from domain.time import require_utc_timestamp, utc_now
from repositories.auction_store import AuctionStore, StoreUnavailableError, WriteOutcome

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS: int = 5


@dataclass(frozen=True, slots=True)
class BidPlacementResult:
    """
    Result of a place_bid call.

    accepted: True if the bid is (or already was, for a replay) committed
    auction_id: the auction the bid was placed on
    bid: the committed Bid (accepted only)
    auction: snapshot after the commit (accepted only; for replays, the snapshot read)
    reason: why the bid was rejected (rejected only)
    minimum_acceptable: smallest amount that would have been accepted (BID_TOO_LOW only)
    current_high_bid: the price seen on the last read, when one happened
    attempts: number of read-validate-write rounds performed
    replayed: True when the submission_id matched an already committed bid
    message: human-readable summary of the outcome, suitable for showing to the bidder
    """

    accepted: bool
    auction_id: UUID
    bid: Optional[Bid] = None
    auction: Optional[Auction] = None
    reason: Optional[RejectionReason] = None
    minimum_acceptable: Optional[Decimal] = None
    current_high_bid: Optional[Decimal] = None
    attempts: int = 0
    replayed: bool = False
    message: Optional[str] = None

    @property
    def status(self) -> str:
        return "accepted" if self.accepted else "rejected"


def _rejected(
    auction_id: UUID,
    reason: RejectionReason,
    *,
    attempts: int,
    message: str,
    current_high_bid: Optional[Decimal] = None,
    minimum_acceptable: Optional[Decimal] = None,
) -> BidPlacementResult:
    return BidPlacementResult(
        accepted=False,
        auction_id=auction_id,
        reason=reason,
        minimum_acceptable=minimum_acceptable,
        current_high_bid=current_high_bid,
        attempts=attempts,
        message=message,
    )


def _rejection_message(reason: RejectionReason, minimum: Optional[Decimal]) -> str:
    if reason is RejectionReason.AUCTION_NOT_LIVE:
        return "Auction is not accepting bids."
    if reason is RejectionReason.INVALID_AMOUNT:
        return f"Bid amount must be a positive amount in whole cents, at most {MAX_AMOUNT}."
    if reason is RejectionReason.BID_TOO_LOW:
        return f"Bid must be at least {minimum}."
    return reason.value


def place_bid(
    store: AuctionStore,
    auction_id: UUID,
    bidder_id: str,
    bidder_display_name: str,
    amount: Any,
    *,
    now: Optional[datetime] = None,
    submission_id: Optional[str] = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> BidPlacementResult:
    """
    Place a bid on an auction using optimistic concurrency with bounded retries.

    Args:
        store: Auction record store providing get_auction / conditional_write
        auction_id: Auction to bid on
        bidder_id: Authorized bidder identity (auth is checked upstream)
        bidder_display_name: Name shown in the bid history
        amount: Proposed amount (Decimal, int, float or numeric string)
        now: Evaluation time for every attempt; defaults to the wall clock per attempt
        submission_id: Optional idempotency key for this submission
        max_attempts: Retry budget for lost compare-and-swap races

    Returns:
        BidPlacementResult (accepted, or rejected with a RejectionReason)

    Example:
        result = place_bid(store, auction_id, "bidder-a", "Asha", Decimal("1050"))
        if not result.accepted and result.reason is RejectionReason.BID_TOO_LOW:
            print(f"Bid at least {result.minimum_acceptable}")
    """

    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")
    if not bidder_id:
        raise ValueError("bidder_id must not be empty")
    if now is not None:
        require_utc_timestamp("now", now)

    last_seen_high: Optional[Decimal] = None

    for attempt in range(1, max_attempts + 1):
        attempt_now = now if now is not None else utc_now()

        # 1. Read
        try:
            snapshot = store.get_auction(auction_id)
        except StoreUnavailableError as e:
            logger.warning("Store unavailable reading auction %s: %s", auction_id, e)
            return _rejected(
                auction_id,
                RejectionReason.STORE_UNAVAILABLE,
                attempts=attempt,
                current_high_bid=last_seen_high,
                message="Auction store is unavailable. Please try again.",
            )

        if snapshot is None:
            return _rejected(
                auction_id,
                RejectionReason.AUCTION_NOT_FOUND,
                attempts=attempt,
                message=f"Auction not found: {auction_id}",
            )

        last_seen_high = snapshot.current_high_bid

        if submission_id is not None:
            prior = snapshot.find_submission(submission_id, bidder_id)
            if prior is not None:
                logger.info(
                    "Replayed submission %s for auction %s (bid %s already committed)",
                    submission_id, auction_id, prior.amount,
                )
                return BidPlacementResult(
                    accepted=True,
                    auction_id=auction_id,
                    bid=prior,
                    auction=snapshot,
                    current_high_bid=snapshot.current_high_bid,
                    attempts=attempt,
                    replayed=True,
                    message="Bid was already placed.",
                )

        # 2. Validate
        decision = validate_bid(
            current_high_bid=snapshot.current_high_bid,
            bid_increment=snapshot.bid_increment,
            start_date=snapshot.start_date,
            end_date=snapshot.end_date,
            now=attempt_now,
            amount=amount,
            bidder_id=bidder_id,
        )
        if not decision.accepted:
            if decision.reason is None:
                raise RuntimeError("Rejected bid decision carries no reason")
            return _rejected(
                auction_id,
                decision.reason,
                attempts=attempt,
                current_high_bid=snapshot.current_high_bid,
                minimum_acceptable=decision.minimum_acceptable,
                message=_rejection_message(decision.reason, decision.minimum_acceptable),
            )

        # Acceptance time never precedes the previous entry, so history stays time-ordered.
        accepted_at = attempt_now
        last = snapshot.last_bid
        if last is not None and last.accepted_at > accepted_at:
            accepted_at = last.accepted_at

        bid = Bid(
            bidder_id=bidder_id,
            bidder_display_name=bidder_display_name,
            amount=coerce_amount(amount),  # type: ignore[arg-type]
            accepted_at=accepted_at,
            submission_id=submission_id,
        )
        updated = snapshot.with_accepted_bid(bid)

        # 3. Conditional write
        try:
            outcome = store.conditional_write(
                auction_id,
                expected_current_high_bid=snapshot.current_high_bid,
                expected_bid_count=snapshot.bid_count,
                updated=updated,
                now=attempt_now,
            )
        except StoreUnavailableError as e:
            logger.warning(
                "Store unavailable writing bid on auction %s (outcome unknown): %s", auction_id, e
            )
            return _rejected(
                auction_id,
                RejectionReason.STORE_UNAVAILABLE,
                attempts=attempt,
                current_high_bid=snapshot.current_high_bid,
                message=(
                    "Auction store is unavailable; the bid outcome is unknown. "
                    "Resubmit with the same submission_id to retry safely."
                ),
            )

        # 4. Success
        if outcome is WriteOutcome.APPLIED:
            logger.info(
                "Accepted bid %s by %s on auction %s (attempt %d)",
                bid.amount, bidder_id, auction_id, attempt,
            )
            return BidPlacementResult(
                accepted=True,
                auction_id=auction_id,
                bid=bid,
                auction=updated,
                current_high_bid=updated.current_high_bid,
                attempts=attempt,
                message="Bid placed successfully.",
            )

        # 5. Lost the race: re-read and retry
        logger.debug(
            "Conditional write conflict on auction %s (attempt %d/%d, expected high %s)",
            auction_id, attempt, max_attempts, snapshot.current_high_bid,
        )

    logger.warning(
        "Retry budget exhausted for bid %s by %s on auction %s", amount, bidder_id, auction_id
    )
    return _rejected(
        auction_id,
        RejectionReason.CONFLICT,
        attempts=max_attempts,
        current_high_bid=last_seen_high,
        message="Another bid was placed at the same time. Refresh the price and resubmit.",
    )


__all__ = [
    "DEFAULT_MAX_ATTEMPTS",
    "BidPlacementResult",
    "place_bid",
]
