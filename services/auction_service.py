"""
Auction service for creating auctions and reading their state.

Creation is the only place bid-independent auction fields (starting bid,
increment, bidding window) are set; afterwards they are treated as immutable
configuration by bid placement.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple
from uuid import UUID, uuid4

from domain.auction import DEFAULT_CATEGORY, Auction, Bid
from domain.lifecycle import has_ended, is_live
from domain.money import MAX_AMOUNT, is_valid_amount
from domain.time import require_utc_timestamp, utc_now
from repositories.auction_store import AuctionStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AuctionDraft:
    """
    Request to create an auction, as submitted by a celebrity account.
    """
    title: str
    created_by: str
    starting_bid: Decimal
    bid_increment: Decimal
    start_date: datetime
    end_date: datetime
    category: str = DEFAULT_CATEGORY
    description: str = ""
    reserve_price: Optional[Decimal] = None
    buy_now_price: Optional[Decimal] = None


@dataclass(frozen=True, slots=True)
class AuctionStatus:
    """Derived, time-dependent view of an auction."""
    is_live: bool
    has_ended: bool
    minimum_next_bid: Decimal


def _validate_draft(draft: AuctionDraft) -> List[str]:
    errors: List[str] = []

    if not draft.title or not draft.title.strip():
        errors.append("Title is required.")
    if not draft.created_by:
        errors.append("created_by is required.")
    if not is_valid_amount(draft.starting_bid):
        errors.append(f"Starting bid must be a positive amount in whole cents, at most {MAX_AMOUNT}.")
    if not is_valid_amount(draft.bid_increment):
        errors.append(f"Bid increment must be a positive amount in whole cents, at most {MAX_AMOUNT}.")
    if draft.reserve_price is not None and not is_valid_amount(draft.reserve_price):
        errors.append(f"Reserve price must be a positive amount in whole cents, at most {MAX_AMOUNT}.")
    if draft.buy_now_price is not None and not is_valid_amount(draft.buy_now_price):
        errors.append(f"Buy now price must be a positive amount in whole cents, at most {MAX_AMOUNT}.")
    if draft.end_date <= draft.start_date:
        errors.append("End date must be after the start date.")

    return errors


def create_auction(store: AuctionStore, draft: AuctionDraft, now: Optional[datetime] = None) -> Auction:
    """
    Validate a draft and persist a new auction with no bids.

    Raises:
        ValueError: if the draft is invalid (all problems joined in the message)
    """

    require_utc_timestamp("start_date", draft.start_date)
    require_utc_timestamp("end_date", draft.end_date)

    errors = _validate_draft(draft)
    if errors:
        raise ValueError(" ".join(errors))

    created_at = now if now is not None else utc_now()

    auction = Auction.new(
        auction_id=uuid4(),
        title=draft.title.strip(),
        created_by=draft.created_by,
        starting_bid=draft.starting_bid,
        bid_increment=draft.bid_increment,
        start_date=draft.start_date,
        end_date=draft.end_date,
        created_at=created_at,
        category=draft.category or DEFAULT_CATEGORY,
        description=draft.description,
        reserve_price=draft.reserve_price,
        buy_now_price=draft.buy_now_price,
    )

    store.create_auction(auction)
    logger.info("Created auction %s (%s) by %s", auction.auction_id, auction.title, auction.created_by)
    return auction


def get_auction(store: AuctionStore, auction_id: UUID) -> Optional[Auction]:
    return store.get_auction(auction_id)


def list_auctions(store: AuctionStore, limit: int = 100) -> List[Auction]:
    """Auctions newest first."""
    return store.list_auctions(limit=limit)


def get_bid_history(store: AuctionStore, auction_id: UUID) -> Optional[Tuple[Bid, ...]]:
    """
    Read-only bid history in acceptance order (None if the auction does not exist).
    """

    auction = store.get_auction(auction_id)
    if auction is None:
        return None
    return auction.bid_history


def auction_status(auction: Auction, now: Optional[datetime] = None) -> AuctionStatus:
    at = now if now is not None else utc_now()
    return AuctionStatus(
        is_live=is_live(at, auction.start_date, auction.end_date),
        has_ended=has_ended(at, auction.end_date),
        minimum_next_bid=auction.minimum_next_bid,
    )


__all__ = [
    "AuctionDraft",
    "AuctionStatus",
    "create_auction",
    "get_auction",
    "list_auctions",
    "get_bid_history",
    "auction_status",
]
