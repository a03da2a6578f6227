"""Per-site usage distribution over a date range."""

from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import date, datetime

from rotation.domain.models import HeatmapEntry, PlacementRecord, Site
from rotation.services.clock import DEFAULT_CALENDAR, Calendar


def placements_in_range(
    placements: Iterable[PlacementRecord],
    start_date: date,
    end_date: date,
    calendar: Calendar = DEFAULT_CALENDAR,
) -> list[PlacementRecord]:
    """Placements whose local calendar date falls in [start_date, end_date]."""
    return [p for p in placements if start_date <= calendar.local_date(p.placed_at) <= end_date]


def heatmap(
    placements: Iterable[PlacementRecord],
    start_date: date,
    end_date: date,
    sites: Sequence[Site],
    calendar: Calendar = DEFAULT_CALENDAR,
) -> list[HeatmapEntry]:
    """
    One entry per site, in ``sites`` order, zero-filled for unused sites.

    Intensity is relative to the busiest site; percentages are relative to
    all placements in range, including any at sites outside ``sites``.
    """
    in_range = placements_in_range(placements, start_date, end_date, calendar)

    counts: Counter[str] = Counter(p.site_key for p in in_range)
    last_used: dict[str, datetime] = {}
    for placement in in_range:
        current = last_used.get(placement.site_key)
        if current is None or placement.placed_at > current:
            last_used[placement.site_key] = placement.placed_at

    total = len(in_range)
    max_count = max(counts.values(), default=0)

    entries = []
    for site in sites:
        usage = counts.get(site.key, 0)
        entries.append(
            HeatmapEntry(
                site_key=site.key,
                usage_count=usage,
                intensity=usage / max_count if max_count > 0 else 0.0,
                last_used=last_used.get(site.key),
                percentage_of_total=usage / total * 100 if total > 0 else 0.0,
            )
        )
    return entries
