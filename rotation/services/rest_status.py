"""
Rest/status calculation for individual sites.

A site's rest interval is the whole number of calendar days since its most
recent placement, or ``NeverUsed`` when it has none. Placements stamped in
the future produce negative day counts; these are kept as-is and simply
fail the rested check.
"""

from collections.abc import Iterable, Sequence
from datetime import datetime

from rotation.domain.models import NeverUsed, PlacementRecord, Site, SiteStatus, UsedDaysAgo
from rotation.services.clock import DEFAULT_CALENDAR, Calendar


def sort_newest_first(placements: Iterable[PlacementRecord]) -> list[PlacementRecord]:
    return sorted(placements, key=lambda p: p.placed_at, reverse=True)


def last_used_map(placements: Iterable[PlacementRecord]) -> dict[str, datetime]:
    """Most recent placement timestamp per site key."""
    last_used: dict[str, datetime] = {}
    for placement in sort_newest_first(placements):
        if placement.site_key not in last_used:
            last_used[placement.site_key] = placement.placed_at
    return last_used


def rest_interval(
    now: datetime, last_used: datetime | None, calendar: Calendar = DEFAULT_CALENDAR
) -> NeverUsed | UsedDaysAgo:
    if last_used is None:
        return NeverUsed()
    return UsedDaysAgo(days=calendar.days_between(last_used, now))


def get_status(
    now: datetime,
    site_key: str,
    last_used: dict[str, datetime],
    minimum_rest_days: int,
    calendar: Calendar = DEFAULT_CALENDAR,
) -> SiteStatus:
    """Rest state of one site given the last-used map."""
    return SiteStatus(
        site_key=site_key,
        rest=rest_interval(now, last_used.get(site_key), calendar),
        minimum_rest_days=minimum_rest_days,
    )


def site_statuses(
    now: datetime,
    sites: Sequence[Site],
    last_used: dict[str, datetime],
    minimum_rest_days: int,
    calendar: Calendar = DEFAULT_CALENDAR,
) -> list[SiteStatus]:
    return [get_status(now, site.key, last_used, minimum_rest_days, calendar) for site in sites]
