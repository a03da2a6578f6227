"""Shared fixtures: a pinned clock, a UTC calendar and a placement factory."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import pytest

from rotation.domain.models import PlacementRecord
from rotation.services.clock import FixedClock, LocalCalendar

# Saturday; the ISO week starts on Monday 2024-06-10
NOW = datetime(2024, 6, 15, 12, 0, tzinfo=UTC)

PlacementFactory = Callable[..., PlacementRecord]


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def calendar() -> LocalCalendar:
    return LocalCalendar("UTC")


@pytest.fixture
def placement() -> PlacementFactory:
    """Build a placement ``days_ago`` days before NOW (same time of day)."""

    def _make(site_key: str, days_ago: float = 0, note: str | None = None) -> PlacementRecord:
        return PlacementRecord(
            site_key=site_key, placed_at=NOW - timedelta(days=days_ago), note=note
        )

    return _make
