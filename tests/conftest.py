"""
Pytest configuration and shared fixtures.

This file adds the project root to the Python path so that tests can import
the domain, repositories, services and api packages, and provides a fresh
in-memory auction store per test.
"""

import sys
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from uuid import UUID

import pytest

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from domain.auction import Auction  # noqa: E402
from repositories.auction_store import InMemoryAuctionStore  # noqa: E402

WINDOW_START = datetime(2025, 1, 1, 0, 0, 0, tzinfo=timezone.utc)
WINDOW_END = datetime(2025, 1, 8, 0, 0, 0, tzinfo=timezone.utc)
AUCTION_ID = UUID("00000000-0000-0000-0000-000000000100")


@pytest.fixture
def auction_factory():
    """Build an auction (starting bid 1000, increment 50, one-week window) with overrides."""

    def _make(**overrides) -> Auction:
        fields = dict(
            auction_id=AUCTION_ID,
            title="Signed match jersey",
            created_by="celeb-1",
            starting_bid=Decimal("1000"),
            bid_increment=Decimal("50"),
            start_date=WINDOW_START,
            end_date=WINDOW_END,
            created_at=WINDOW_START,
        )
        fields.update(overrides)
        return Auction.new(**fields)

    return _make


@pytest.fixture
def store() -> InMemoryAuctionStore:
    return InMemoryAuctionStore()


@pytest.fixture
def auction(store: InMemoryAuctionStore, auction_factory) -> Auction:
    return store.create_auction(auction_factory())
