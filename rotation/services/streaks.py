"""Consecutive-day logging streak."""

from collections.abc import Iterable
from datetime import datetime, timedelta

from rotation.domain.models import PlacementRecord
from rotation.services.clock import DEFAULT_CALENDAR, Calendar


def streak(
    placements: Iterable[PlacementRecord],
    now: datetime,
    calendar: Calendar = DEFAULT_CALENDAR,
) -> int:
    """
    Number of consecutive calendar days with at least one placement.

    The streak must end today or yesterday; an older most-recent placement
    means the streak is broken and counts as 0.
    """
    placement_days = {calendar.local_date(p.placed_at) for p in placements}
    if not placement_days:
        return 0

    yesterday = calendar.local_date(now) - timedelta(days=1)
    most_recent = max(placement_days)
    if most_recent < yesterday:
        return 0

    count = 0
    day = most_recent
    while day in placement_days:
        count += 1
        day -= timedelta(days=1)
    return count
