"""
Time-bucketed placement trends.

Series are dense: every day (or ISO week) between the range bounds appears,
with zero counts for idle periods, so charts never skip empty stretches.
"""

from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import date, timedelta

from rotation.domain.models import PlacementRecord, TrendGranularity, TrendPoint
from rotation.services.clock import DEFAULT_CALENDAR, Calendar
from rotation.services.heatmap import placements_in_range

MAX_BUCKETS = 1000
DAILY_RANGE_LIMIT_DAYS = 30


def choose_granularity(start_date: date, end_date: date) -> TrendGranularity:
    """Daily buckets for ranges under a month, weekly otherwise."""
    if (end_date - start_date).days < DAILY_RANGE_LIMIT_DAYS:
        return TrendGranularity.DAY
    return TrendGranularity.WEEK


def bucket_start(day: date, granularity: TrendGranularity, calendar: Calendar) -> date:
    if granularity is TrendGranularity.WEEK:
        return calendar.start_of_week(day)
    return day


def bucket_sequence(
    start_date: date,
    end_date: date,
    granularity: TrendGranularity,
    calendar: Calendar = DEFAULT_CALENDAR,
    max_buckets: int = MAX_BUCKETS,
) -> list[date]:
    """Ascending bucket starts covering [start_date, end_date], truncated at ``max_buckets``."""
    step = timedelta(weeks=1) if granularity is TrendGranularity.WEEK else timedelta(days=1)
    current = bucket_start(start_date, granularity, calendar)

    buckets: list[date] = []
    while current <= end_date and len(buckets) < max_buckets:
        buckets.append(current)
        current += step
    return buckets


def _tally(
    placements: Iterable[PlacementRecord],
    start_date: date,
    end_date: date,
    granularity: TrendGranularity,
    calendar: Calendar,
) -> Counter[date]:
    return Counter(
        bucket_start(calendar.local_date(p.placed_at), granularity, calendar)
        for p in placements_in_range(placements, start_date, end_date, calendar)
    )


def trend(
    placements: Iterable[PlacementRecord],
    start_date: date,
    end_date: date,
    granularity: TrendGranularity | None = None,
    calendar: Calendar = DEFAULT_CALENDAR,
) -> list[TrendPoint]:
    """Dense placement counts per period; empty when ``end_date`` precedes ``start_date``."""
    granularity = granularity or choose_granularity(start_date, end_date)
    counts = _tally(placements, start_date, end_date, granularity, calendar)
    return [
        TrendPoint(period_start=bucket, count=counts.get(bucket, 0))
        for bucket in bucket_sequence(start_date, end_date, granularity, calendar)
    ]


def trend_by_site(
    placements: Iterable[PlacementRecord],
    start_date: date,
    end_date: date,
    site_keys: Sequence[str],
    granularity: TrendGranularity | None = None,
    calendar: Calendar = DEFAULT_CALENDAR,
) -> dict[str, list[TrendPoint]]:
    """One dense series per site key, bucketed identically to :func:`trend`."""
    granularity = granularity or choose_granularity(start_date, end_date)
    buckets = bucket_sequence(start_date, end_date, granularity, calendar)

    placements = list(placements)
    series: dict[str, list[TrendPoint]] = {}
    for key in site_keys:
        own = [p for p in placements if p.site_key == key]
        counts = _tally(own, start_date, end_date, granularity, calendar)
        series[key] = [
            TrendPoint(period_start=bucket, count=counts.get(bucket, 0), site_key=key)
            for bucket in buckets
        ]
    return series
