"""
Domain: Auction lifecycle gate.

An auction accepts bids only while "now" lies inside its bidding window.
The window is closed on both ends:

    start_date <= now <= end_date

The same check is repeated by the stores as part of the conditional write,
so a bid that passed validation just before end_date cannot commit after it.
"""

from __future__ import annotations

from datetime import datetime

from .time import require_utc_timestamp


def is_live(now: datetime, start_date: datetime, end_date: datetime) -> bool:
    """Return True if an auction with this window accepts bids at `now`."""

    require_utc_timestamp("now", now)
    require_utc_timestamp("start_date", start_date)
    require_utc_timestamp("end_date", end_date)

    return start_date <= now <= end_date


def has_ended(now: datetime, end_date: datetime) -> bool:
    require_utc_timestamp("now", now)
    require_utc_timestamp("end_date", end_date)
    return now > end_date


__all__ = ["is_live", "has_ended"]
