"""
Auction record store contract and the in-memory implementation.

A store owns the persisted representation of auctions. The bidding path uses
exactly two store operations:

- get_auction(auction_id) -> Optional[Auction]
- conditional_write(auction_id, expected_current_high_bid, expected_bid_count,
  updated, now) -> WriteOutcome

conditional_write is a compare-and-swap: it applies the bid fields of `updated`
only if the stored current_high_bid and bid_count still equal the expected values
AND the auction is live at `now`. Otherwise it returns CONFLICT and changes nothing.
Stores never expose an unconditional write of the bid fields.
"""

from __future__ import annotations

import threading
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional, Protocol
from uuid import UUID

from domain.auction import Auction
from domain.lifecycle import is_live


class StoreUnavailableError(RuntimeError):
    """Raised when the store cannot be reached or the outcome of a call is unknown."""
    pass


class WriteOutcome(str, Enum):
    APPLIED = "APPLIED"
    CONFLICT = "CONFLICT"


class AuctionStore(Protocol):
    def create_auction(self, auction: Auction) -> Auction:
        ...

    def get_auction(self, auction_id: UUID) -> Optional[Auction]:
        ...

    def list_auctions(self, limit: int = 100) -> List[Auction]:
        ...

    def conditional_write(
        self,
        auction_id: UUID,
        expected_current_high_bid: Decimal,
        expected_bid_count: int,
        updated: Auction,
        now: datetime,
    ) -> WriteOutcome:
        ...


class InMemoryAuctionStore:
    """
    Process-local store with real compare-and-swap semantics.

    The lock is held only for the duration of a single read or a single
    conditional write, never across a read-validate-write sequence.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._auctions: Dict[UUID, Auction] = {}

    def create_auction(self, auction: Auction) -> Auction:
        with self._lock:
            if auction.auction_id in self._auctions:
                raise ValueError(f"Auction already exists: {auction.auction_id}")
            self._auctions[auction.auction_id] = auction
        return auction

    def get_auction(self, auction_id: UUID) -> Optional[Auction]:
        # Auctions are frozen, so handing out the stored instance is a snapshot.
        with self._lock:
            return self._auctions.get(auction_id)

    def list_auctions(self, limit: int = 100) -> List[Auction]:
        with self._lock:
            auctions = list(self._auctions.values())
        auctions.sort(key=lambda a: a.created_at, reverse=True)
        return auctions[:limit]

    def conditional_write(
        self,
        auction_id: UUID,
        expected_current_high_bid: Decimal,
        expected_bid_count: int,
        updated: Auction,
        now: datetime,
    ) -> WriteOutcome:
        if updated.auction_id != auction_id:
            raise ValueError("updated auction does not match auction_id")

        with self._lock:
            stored = self._auctions.get(auction_id)
            if stored is None:
                return WriteOutcome.CONFLICT
            if stored.current_high_bid != expected_current_high_bid:
                return WriteOutcome.CONFLICT
            if stored.bid_count != expected_bid_count:
                return WriteOutcome.CONFLICT
            if not is_live(now, stored.start_date, stored.end_date):
                return WriteOutcome.CONFLICT

            # Only bid fields move; everything else stays as stored.
            self._auctions[auction_id] = Auction(
                auction_id=stored.auction_id,
                title=stored.title,
                created_by=stored.created_by,
                starting_bid=stored.starting_bid,
                bid_increment=stored.bid_increment,
                current_high_bid=updated.current_high_bid,
                bid_count=updated.bid_count,
                start_date=stored.start_date,
                end_date=stored.end_date,
                created_at=stored.created_at,
                top_bidder_id=updated.top_bidder_id,
                bid_history=updated.bid_history,
                category=stored.category,
                description=stored.description,
                reserve_price=stored.reserve_price,
                buy_now_price=stored.buy_now_price,
            )
            return WriteOutcome.APPLIED


__all__ = [
    "AuctionStore",
    "InMemoryAuctionStore",
    "StoreUnavailableError",
    "WriteOutcome",
]
