"""
History groupings and weekly summary built on the shared calculators.

These feed history lists and digest screens; they add no new scoring rules.
"""

from collections import Counter
from collections.abc import Iterable
from datetime import date, datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field

from rotation.domain.models import PlacementRecord
from rotation.services.clock import DEFAULT_CALENDAR, Calendar
from rotation.services.rest_status import sort_newest_first
from rotation.services.streaks import streak


class WeeklySummary(BaseModel):
    """Activity for the ISO week containing "now"."""

    model_config = ConfigDict(frozen=True)

    week_start: date
    total_placements: int = Field(ge=0)
    unique_sites: int = Field(ge=0)
    top_site: str | None = None
    average_days_between: float | None = Field(
        default=None, description="Mean gap between consecutive placements this week"
    )
    streak_days: int = Field(ge=0)


def placements_by_day(
    placements: Iterable[PlacementRecord], calendar: Calendar = DEFAULT_CALENDAR
) -> list[tuple[date, list[PlacementRecord]]]:
    """Placements grouped by local day, newest day first, newest placement first."""
    groups: dict[date, list[PlacementRecord]] = {}
    for placement in sort_newest_first(placements):
        groups.setdefault(calendar.local_date(placement.placed_at), []).append(placement)
    return sorted(groups.items(), key=lambda item: item[0], reverse=True)


def average_days_between(placements: Iterable[PlacementRecord]) -> float | None:
    ordered = sorted(p.placed_at for p in placements)
    if len(ordered) < 2:
        return None
    gaps = [(b - a) / timedelta(days=1) for a, b in zip(ordered, ordered[1:])]
    return sum(gaps) / len(gaps)


def top_site(placements: Iterable[PlacementRecord]) -> str | None:
    """Most used site key; ties go to the most recently used site."""
    ordered = sort_newest_first(placements)
    if not ordered:
        return None
    counts = Counter(p.site_key for p in ordered)
    recency = {}
    for rank, placement in enumerate(ordered):
        recency.setdefault(placement.site_key, rank)
    return min(counts, key=lambda key: (-counts[key], recency[key]))


def weekly_summary(
    placements: Iterable[PlacementRecord],
    now: datetime,
    calendar: Calendar = DEFAULT_CALENDAR,
) -> WeeklySummary:
    placements = list(placements)
    today = calendar.local_date(now)
    week_start = calendar.start_of_week(today)
    this_week = [
        p for p in placements if week_start <= calendar.local_date(p.placed_at) <= today
    ]

    return WeeklySummary(
        week_start=week_start,
        total_placements=len(this_week),
        unique_sites=len({p.site_key for p in this_week}),
        top_site=top_site(this_week),
        average_days_between=average_days_between(this_week),
        streak_days=streak(placements, now, calendar),
    )
