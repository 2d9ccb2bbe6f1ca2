"""
Auction repository (Supabase persistence).

This module provides persistence operations for the Auction aggregate on top of
Supabase/PostgREST. It contains no bidding rules; it only enforces persistence
constraints:

- Uniqueness of auction_id on insert.
- Conditional (compare-and-swap) updates of the bid fields. The UPDATE carries
  filters on current_high_bid, bid_count and the bidding window, so PostgreSQL
  itself rejects a write that raced with another bid or arrived after end_date.
  An empty result set means the condition did not hold.

Expected table `auctions`:
    auction_id uuid primary key, title text, created_by text, category text,
    description text, starting_bid numeric, bid_increment numeric,
    current_high_bid numeric, bid_count integer, top_bidder_id text null,
    bid_history jsonb, start_date_utc timestamptz, end_date_utc timestamptz,
    reserve_price numeric null, buy_now_price numeric null, created_at_utc timestamptz
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional
from uuid import UUID

import httpx
from postgrest.exceptions import APIError

from domain.auction import DEFAULT_CATEGORY, Auction, Bid
from domain.time import parse_utc_datetime, require_utc_timestamp, to_iso_utc
from repositories.auction_store import StoreUnavailableError, WriteOutcome
from repositories.client import get_supabase

logger = logging.getLogger(__name__)

# Supabase table name for auctions.
# Keep this aligned with your database schema.
_AUCTIONS_TABLE: str = "auctions"


def _to_filter_utc(dt: datetime, *, name: str) -> str:
    """Serialize a UTC datetime for a PostgREST filter ('Z' suffix, no '+' to escape)."""

    require_utc_timestamp(name, dt)
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _optional_decimal(value: Any) -> Optional[Decimal]:
    return Decimal(str(value)) if value is not None else None


def _bid_to_json(bid: Bid) -> Dict[str, Any]:
    return {
        "bidder_id": bid.bidder_id,
        "bidder_display_name": bid.bidder_display_name,
        "amount": str(bid.amount),
        "accepted_at_utc": to_iso_utc(bid.accepted_at, name="accepted_at"),
        "submission_id": bid.submission_id,
    }


def _json_to_bid(entry: Mapping[str, Any]) -> Bid:
    return Bid(
        bidder_id=str(entry["bidder_id"]),
        bidder_display_name=str(entry.get("bidder_display_name") or ""),
        amount=Decimal(str(entry["amount"])),
        accepted_at=parse_utc_datetime(entry["accepted_at_utc"]),
        submission_id=entry.get("submission_id"),
    )


def _row_to_auction(row: Mapping[str, Any]) -> Auction:
    """Convert a Supabase row into an Auction."""

    history = tuple(_json_to_bid(entry) for entry in (row.get("bid_history") or []))
    return Auction(
        auction_id=UUID(str(row["auction_id"])),
        title=str(row["title"]),
        created_by=str(row["created_by"]),
        starting_bid=Decimal(str(row["starting_bid"])),
        bid_increment=Decimal(str(row["bid_increment"])),
        current_high_bid=Decimal(str(row["current_high_bid"])),
        bid_count=int(row["bid_count"]),
        start_date=parse_utc_datetime(row["start_date_utc"]),
        end_date=parse_utc_datetime(row["end_date_utc"]),
        created_at=parse_utc_datetime(row["created_at_utc"]),
        top_bidder_id=row.get("top_bidder_id"),
        bid_history=history,
        category=str(row.get("category") or DEFAULT_CATEGORY),
        description=str(row.get("description") or ""),
        reserve_price=_optional_decimal(row.get("reserve_price")),
        buy_now_price=_optional_decimal(row.get("buy_now_price")),
    )


def _auction_to_row(auction: Auction) -> Dict[str, Any]:
    return {
        "auction_id": str(auction.auction_id),
        "title": auction.title,
        "created_by": auction.created_by,
        "category": auction.category,
        "description": auction.description,
        "starting_bid": str(auction.starting_bid),
        "bid_increment": str(auction.bid_increment),
        "current_high_bid": str(auction.current_high_bid),
        "bid_count": auction.bid_count,
        "top_bidder_id": auction.top_bidder_id,
        "bid_history": [_bid_to_json(bid) for bid in auction.bid_history],
        "start_date_utc": to_iso_utc(auction.start_date, name="start_date"),
        "end_date_utc": to_iso_utc(auction.end_date, name="end_date"),
        "reserve_price": str(auction.reserve_price) if auction.reserve_price is not None else None,
        "buy_now_price": str(auction.buy_now_price) if auction.buy_now_price is not None else None,
        "created_at_utc": to_iso_utc(auction.created_at, name="created_at"),
    }


def _execute(query: Any, *, action: str) -> Any:
    """
    Run a PostgREST query, translating transport/API failures to StoreUnavailableError.

    A timeout here means the outcome is unknown; callers must not assume the write failed.
    """

    try:
        response = query.execute()
    except APIError as e:
        logger.warning("Supabase API error during %s: %s", action, e)
        raise StoreUnavailableError(f"Failed to {action}: {e}") from e
    except httpx.HTTPError as e:
        logger.warning("Supabase transport error during %s: %s", action, e)
        raise StoreUnavailableError(f"Failed to {action}: {e}") from e

    error = getattr(response, "error", None)
    if error:
        raise StoreUnavailableError(f"Failed to {action}: {error}")
    return response


class SupabaseAuctionStore:
    """Auction store backed by the Supabase `auctions` table."""

    def __init__(self, client: Any = None) -> None:
        self._client = client if client is not None else get_supabase()

    def create_auction(self, auction: Auction) -> Auction:
        """
        Insert a new auction.

        Raises ValueError if an auction with the same auction_id already exists.
        """

        try:
            _execute(
                self._client.table(_AUCTIONS_TABLE).insert(_auction_to_row(auction)),
                action="create auction",
            )
        except StoreUnavailableError as e:
            cause = e.__cause__
            if isinstance(cause, APIError) and str(getattr(cause, "code", "")) == "23505":
                raise ValueError(f"Auction already exists: {auction.auction_id}") from None
            raise
        return auction

    def get_auction(self, auction_id: UUID) -> Optional[Auction]:
        response = _execute(
            self._client.table(_AUCTIONS_TABLE)
            .select("*")
            .eq("auction_id", str(auction_id))
            .limit(1),
            action="get auction",
        )
        rows = getattr(response, "data", None) or []
        if not rows:
            return None
        return _row_to_auction(rows[0])

    def list_auctions(self, limit: int = 100) -> List[Auction]:
        response = _execute(
            self._client.table(_AUCTIONS_TABLE)
            .select("*")
            .order("created_at_utc", desc=True)
            .limit(limit),
            action="list auctions",
        )
        rows = getattr(response, "data", None) or []
        return [_row_to_auction(row) for row in rows]

    def conditional_write(
        self,
        auction_id: UUID,
        expected_current_high_bid: Decimal,
        expected_bid_count: int,
        updated: Auction,
        now: datetime,
    ) -> WriteOutcome:
        """
        Compare-and-swap the bid fields of an auction.

        The full bid_history is written back; the bid_count filter guarantees it is
        the history the caller read plus exactly the new entry.
        """

        if updated.auction_id != auction_id:
            raise ValueError("updated auction does not match auction_id")

        payload: Dict[str, Any] = {
            "current_high_bid": str(updated.current_high_bid),
            "bid_count": updated.bid_count,
            "top_bidder_id": updated.top_bidder_id,
            "bid_history": [_bid_to_json(bid) for bid in updated.bid_history],
        }
        now_filter = _to_filter_utc(now, name="now")

        response = _execute(
            self._client.table(_AUCTIONS_TABLE)
            .update(payload)
            .eq("auction_id", str(auction_id))
            .eq("current_high_bid", str(expected_current_high_bid))
            .eq("bid_count", expected_bid_count)
            .lte("start_date_utc", now_filter)
            .gte("end_date_utc", now_filter),
            action="place bid",
        )

        updated_rows = getattr(response, "data", None) or []
        if not updated_rows:
            # Price moved, auction closed, or auction vanished since the read.
            return WriteOutcome.CONFLICT
        return WriteOutcome.APPLIED


__all__ = ["SupabaseAuctionStore"]
