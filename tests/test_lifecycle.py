"""
Tests for `domain/lifecycle.py`.

Covers:
- The bidding window is inclusive on both ends.
- One second outside either end is not live.
- Timestamps must be UTC.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from domain.lifecycle import has_ended, is_live

START = datetime(2025, 1, 1, 0, 0, 0, tzinfo=timezone.utc)
END = datetime(2025, 1, 8, 0, 0, 0, tzinfo=timezone.utc)


def test_is_live_inside_window() -> None:
    assert is_live(START + timedelta(days=2), START, END) is True


def test_is_live_inclusive_boundaries() -> None:
    assert is_live(START, START, END) is True
    assert is_live(END, START, END) is True


def test_is_live_one_second_outside_window() -> None:
    assert is_live(START - timedelta(seconds=1), START, END) is False
    assert is_live(END + timedelta(seconds=1), START, END) is False


def test_has_ended_only_after_end_date() -> None:
    assert has_ended(END, END) is False
    assert has_ended(END + timedelta(seconds=1), END) is True


def test_is_live_requires_utc_timestamps() -> None:
    with pytest.raises(ValueError):
        is_live(datetime(2025, 1, 2, 0, 0, 0), START, END)

    with pytest.raises(ValueError):
        is_live(datetime(2025, 1, 2, 0, 0, 0, tzinfo=timezone(timedelta(hours=5))), START, END)
