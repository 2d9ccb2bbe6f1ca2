"""
Tests for `repositories/auction_repository.py` (Supabase store).

The Supabase client is replaced by a small recording fake that evaluates the
PostgREST filters used by the repository against in-memory rows, so the tests
check both the query that is sent and its conditional-update behavior.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

import httpx
import pytest
from postgrest.exceptions import APIError

from domain.auction import Bid, check_history_consistency
from domain.bid_validation import RejectionReason
from domain.time import parse_utc_datetime
from repositories.auction_repository import SupabaseAuctionStore
from repositories.auction_store import StoreUnavailableError, WriteOutcome
from services.bid_placement_service import place_bid

NOW = datetime(2025, 1, 2, 12, 0, 0, tzinfo=timezone.utc)


class FakeResponse:
    def __init__(self, data: List[Dict[str, Any]]) -> None:
        self.data = data
        self.error = None


class FakeQuery:
    def __init__(self, client: "FakeSupabase", table: str) -> None:
        self._client = client
        self._table = table
        self.action: Optional[str] = None
        self.payload: Any = None
        self.filters: List[Tuple[str, str, Any]] = []
        self._limit: Optional[int] = None
        self._order: Optional[Tuple[str, bool]] = None

    def select(self, columns: str) -> "FakeQuery":
        self.action = "select"
        return self

    def insert(self, payload: Dict[str, Any]) -> "FakeQuery":
        self.action, self.payload = "insert", payload
        return self

    def update(self, payload: Dict[str, Any]) -> "FakeQuery":
        self.action, self.payload = "update", payload
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(("eq", column, value))
        return self

    def lte(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(("lte", column, value))
        return self

    def gte(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(("gte", column, value))
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self._order = (column, desc)
        return self

    def limit(self, n: int) -> "FakeQuery":
        self._limit = n
        return self

    def _matches(self, row: Dict[str, Any]) -> bool:
        for op, column, value in self.filters:
            stored = row.get(column)
            if op == "eq":
                if column in ("current_high_bid",):
                    if Decimal(str(stored)) != Decimal(str(value)):
                        return False
                elif str(stored) != str(value):
                    return False
            elif op == "lte" and not parse_utc_datetime(stored) <= parse_utc_datetime(value):
                return False
            elif op == "gte" and not parse_utc_datetime(stored) >= parse_utc_datetime(value):
                return False
        return True

    def execute(self) -> FakeResponse:
        self._client.queries.append(self)
        if self._client.fail_with is not None:
            raise self._client.fail_with

        rows = self._client.tables.setdefault(self._table, [])

        if self.action == "insert":
            if any(r["auction_id"] == self.payload["auction_id"] for r in rows):
                raise APIError({"message": "duplicate key", "code": "23505", "hint": None, "details": None})
            rows.append(dict(self.payload))
            return FakeResponse([dict(self.payload)])

        matched = [r for r in rows if self._matches(r)]

        if self.action == "update":
            for r in matched:
                r.update(self.payload)
            return FakeResponse([dict(r) for r in matched])

        if self._order is not None:
            column, desc = self._order
            matched.sort(key=lambda r: r[column], reverse=desc)
        if self._limit is not None:
            matched = matched[: self._limit]
        return FakeResponse([dict(r) for r in matched])


class FakeSupabase:
    def __init__(self) -> None:
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.queries: List[FakeQuery] = []
        self.fail_with: Optional[Exception] = None

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


@pytest.fixture
def fake_client() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def supabase_store(fake_client: FakeSupabase) -> SupabaseAuctionStore:
    return SupabaseAuctionStore(client=fake_client)


def test_create_and_read_round_trips_auction(supabase_store, auction_factory) -> None:
    auction = auction_factory(reserve_price=Decimal("1500"), description="Worn in the final")
    supabase_store.create_auction(auction)

    loaded = supabase_store.get_auction(auction.auction_id)

    assert loaded == auction
    assert supabase_store.get_auction(UUID(int=9)) is None


def test_duplicate_insert_raises_value_error(supabase_store, auction_factory) -> None:
    auction = auction_factory()
    supabase_store.create_auction(auction)

    with pytest.raises(ValueError):
        supabase_store.create_auction(auction)


def test_conditional_write_sends_cas_and_window_filters(supabase_store, fake_client, auction_factory) -> None:
    auction = supabase_store.create_auction(auction_factory())
    bid = Bid(bidder_id="bidder-a", bidder_display_name="A", amount=Decimal("1050"), accepted_at=NOW)

    outcome = supabase_store.conditional_write(
        auction.auction_id, Decimal("1000"), 0, auction.with_accepted_bid(bid), NOW
    )

    assert outcome is WriteOutcome.APPLIED
    update = fake_client.queries[-1]
    assert update.action == "update"
    assert ("eq", "auction_id", str(auction.auction_id)) in update.filters
    assert ("eq", "current_high_bid", "1000") in update.filters
    assert ("eq", "bid_count", 0) in update.filters
    assert ("lte", "start_date_utc", "2025-01-02T12:00:00Z") in update.filters
    assert ("gte", "end_date_utc", "2025-01-02T12:00:00Z") in update.filters
    assert update.payload["current_high_bid"] == "1050"
    assert update.payload["bid_history"][0]["amount"] == "1050"


def test_conditional_write_with_stale_price_conflicts(supabase_store, auction_factory) -> None:
    auction = supabase_store.create_auction(auction_factory())
    first = Bid(bidder_id="bidder-a", bidder_display_name="A", amount=Decimal("1050"), accepted_at=NOW)
    second = Bid(bidder_id="bidder-b", bidder_display_name="B", amount=Decimal("1050"), accepted_at=NOW)

    assert supabase_store.conditional_write(
        auction.auction_id, Decimal("1000"), 0, auction.with_accepted_bid(first), NOW
    ) is WriteOutcome.APPLIED
    assert supabase_store.conditional_write(
        auction.auction_id, Decimal("1000"), 0, auction.with_accepted_bid(second), NOW
    ) is WriteOutcome.CONFLICT

    stored = supabase_store.get_auction(auction.auction_id)
    assert stored is not None
    assert stored.top_bidder_id == "bidder-a"


def test_conditional_write_after_end_date_conflicts(supabase_store, auction_factory) -> None:
    auction = supabase_store.create_auction(auction_factory())
    late = auction.end_date + timedelta(seconds=1)
    bid = Bid(bidder_id="bidder-a", bidder_display_name="A", amount=Decimal("1050"), accepted_at=late)

    outcome = supabase_store.conditional_write(
        auction.auction_id, Decimal("1000"), 0, auction.with_accepted_bid(bid), late
    )

    assert outcome is WriteOutcome.CONFLICT


def test_place_bid_through_supabase_store(supabase_store, auction_factory) -> None:
    auction = supabase_store.create_auction(auction_factory())

    a = place_bid(supabase_store, auction.auction_id, "bidder-a", "A", Decimal("1050"), now=NOW, submission_id="s-a")
    b = place_bid(supabase_store, auction.auction_id, "bidder-b", "B", Decimal("1060"), now=NOW)
    c = place_bid(supabase_store, auction.auction_id, "bidder-b", "B", Decimal("1100"), now=NOW)

    assert a.accepted is True
    assert b.reason is RejectionReason.BID_TOO_LOW
    assert b.minimum_acceptable == Decimal("1100")
    assert c.accepted is True

    stored = supabase_store.get_auction(auction.auction_id)
    assert stored is not None
    assert [bid.amount for bid in stored.bid_history] == [Decimal("1050"), Decimal("1100")]
    assert stored.bid_history[0].submission_id == "s-a"
    assert check_history_consistency(stored) == []


def test_list_auctions_orders_newest_first(supabase_store, auction_factory) -> None:
    older = supabase_store.create_auction(auction_factory(auction_id=UUID(int=1)))
    newer = supabase_store.create_auction(
        auction_factory(auction_id=UUID(int=2), created_at=older.created_at + timedelta(days=1))
    )

    assert [a.auction_id for a in supabase_store.list_auctions()] == [newer.auction_id, older.auction_id]


@pytest.mark.parametrize(
    "failure",
    [
        APIError({"message": "server error", "code": "500", "hint": None, "details": None}),
        httpx.ReadTimeout("timed out"),
    ],
)
def test_transport_and_api_failures_become_store_unavailable(supabase_store, fake_client, failure) -> None:
    fake_client.fail_with = failure

    with pytest.raises(StoreUnavailableError):
        supabase_store.get_auction(UUID(int=1))


def test_row_timestamps_with_trailing_z_are_parsed(supabase_store, fake_client, auction_factory) -> None:
    auction = supabase_store.create_auction(auction_factory())
    row = fake_client.tables["auctions"][0]
    row["end_date_utc"] = "2025-01-08T00:00:00Z"

    loaded = supabase_store.get_auction(auction.auction_id)

    assert loaded is not None
    assert loaded.end_date == parse_utc_datetime("2025-01-08T00:00:00+00:00")
