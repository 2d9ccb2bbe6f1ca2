"""
FastAPI dependencies.

The auction store is process-wide: every request worker shares one store object,
and all coordination between concurrent bids happens inside the store's
conditional write.
"""

from __future__ import annotations

from functools import lru_cache

from api.config import get_settings
from repositories.auction_store import AuctionStore, InMemoryAuctionStore


@lru_cache(maxsize=1)
def _build_store() -> AuctionStore:
    settings = get_settings()
    if settings.store_backend == "memory":
        return InMemoryAuctionStore()

    from repositories.auction_repository import SupabaseAuctionStore

    return SupabaseAuctionStore()


def get_auction_store() -> AuctionStore:
    return _build_store()


def get_bid_max_attempts() -> int:
    return get_settings().bid_max_attempts
