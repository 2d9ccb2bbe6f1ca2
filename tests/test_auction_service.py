"""
Tests for `services/auction_service.py`.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import UUID

import pytest

from domain.auction import check_history_consistency
from repositories.auction_store import InMemoryAuctionStore
from services.auction_service import (
    AuctionDraft,
    auction_status,
    create_auction,
    get_auction,
    get_bid_history,
    list_auctions,
)
from services.bid_placement_service import place_bid

START = datetime(2025, 1, 1, 0, 0, 0, tzinfo=timezone.utc)
END = datetime(2025, 1, 8, 0, 0, 0, tzinfo=timezone.utc)
NOW = datetime(2025, 1, 2, 0, 0, 0, tzinfo=timezone.utc)


def _draft(**overrides) -> AuctionDraft:
    fields = dict(
        title="  Signed bat ",
        created_by="celeb-1",
        starting_bid=Decimal("1000"),
        bid_increment=Decimal("50"),
        start_date=START,
        end_date=END,
    )
    fields.update(overrides)
    return AuctionDraft(**fields)


def test_create_auction_persists_fresh_auction(store: InMemoryAuctionStore) -> None:
    auction = create_auction(store, _draft(), now=START)

    assert auction.title == "Signed bat"
    assert auction.category == "Other"
    assert auction.current_high_bid == Decimal("1000")
    assert auction.bid_count == 0
    assert auction.bid_history == ()
    assert auction.created_at == START
    assert get_auction(store, auction.auction_id) == auction
    assert check_history_consistency(auction) == []


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"title": "   "}, "Title"),
        ({"starting_bid": Decimal("0")}, "Starting bid"),
        ({"bid_increment": Decimal("-1")}, "Bid increment"),
        ({"reserve_price": Decimal("0")}, "Reserve price"),
        ({"buy_now_price": Decimal("NaN")}, "Buy now price"),
        ({"end_date": START}, "End date"),
    ],
)
def test_create_auction_rejects_invalid_drafts(store: InMemoryAuctionStore, overrides, message) -> None:
    with pytest.raises(ValueError, match=message):
        create_auction(store, _draft(**overrides), now=START)

    assert list_auctions(store) == []


def test_create_auction_requires_utc_window(store: InMemoryAuctionStore) -> None:
    with pytest.raises(ValueError):
        create_auction(store, _draft(start_date=datetime(2025, 1, 1)), now=START)


def test_bid_history_is_read_only_view_in_acceptance_order(store: InMemoryAuctionStore) -> None:
    auction = create_auction(store, _draft(), now=START)
    place_bid(store, auction.auction_id, "bidder-a", "A", Decimal("1050"), now=NOW)
    place_bid(store, auction.auction_id, "bidder-b", "B", Decimal("1200"), now=NOW + timedelta(minutes=1))

    history = get_bid_history(store, auction.auction_id)

    assert history is not None
    assert isinstance(history, tuple)
    assert [b.bidder_id for b in history] == ["bidder-a", "bidder-b"]
    assert get_bid_history(store, UUID(int=5)) is None


def test_auction_status_reflects_window(store: InMemoryAuctionStore) -> None:
    auction = create_auction(store, _draft(), now=START)

    live = auction_status(auction, NOW)
    assert live.is_live is True
    assert live.has_ended is False
    assert live.minimum_next_bid == Decimal("1050")

    ended = auction_status(auction, END + timedelta(seconds=1))
    assert ended.is_live is False
    assert ended.has_ended is True


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"starting_bid": Decimal("1000.005")}, "Starting bid"),
        ({"bid_increment": Decimal("0.001")}, "Bid increment"),
        ({"starting_bid": Decimal("1E+30")}, "Starting bid"),
    ],
)
def test_create_auction_rejects_amounts_outside_cent_range(store: InMemoryAuctionStore, overrides, message) -> None:
    with pytest.raises(ValueError, match=message):
        create_auction(store, _draft(**overrides), now=START)
