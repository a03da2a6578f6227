"""
Next-site recommendation.

Candidates are ranked by rest interval with an explicit three-way comparator:
never-used sites outrank any used site, and among used sites the longer rest
wins. The first rested candidate is recommended; if none is rested the
longest-rested site is returned anyway.
"""

from collections.abc import Sequence
from datetime import datetime
from functools import cmp_to_key

from rotation.domain.models import NeverUsed, PlacementRecord, Site, SiteRecommendation, SiteStatus
from rotation.domain.sites import DEFAULT_STARTING_SITE
from rotation.services.clock import DEFAULT_CALENDAR, Calendar
from rotation.services.rest_status import last_used_map, site_statuses

REASON_FIRST_PLACEMENT = "first placement"
REASON_NEVER_USED = "never used"
REASON_LONGEST_REST = "longest rest among available sites"
REASON_ALL_RECENT = "all sites used recently"


def compare_rest(a: SiteStatus, b: SiteStatus) -> int:
    """
    Order two statuses for ranking; negative means ``a`` ranks first.

    never vs never -> equal; never vs used -> never first;
    used vs used -> more days first.
    """
    a_never = isinstance(a.rest, NeverUsed)
    b_never = isinstance(b.rest, NeverUsed)
    if a_never and b_never:
        return 0
    if a_never:
        return -1
    if b_never:
        return 1
    return b.rest.days - a.rest.days  # type: ignore[operator]


def rank_sites(statuses: Sequence[SiteStatus]) -> list[SiteStatus]:
    """Best candidate first. Stable, so ties keep catalog order."""
    return sorted(statuses, key=cmp_to_key(compare_rest))


def recommend(
    now: datetime,
    placements: Sequence[PlacementRecord],
    enabled_sites: Sequence[Site],
    minimum_rest_days: int,
    calendar: Calendar = DEFAULT_CALENDAR,
    starting_site: str = DEFAULT_STARTING_SITE.value,
) -> SiteRecommendation | None:
    """
    Pick the site for the next placement.

    Returns None only when no site is enabled.
    """
    if not enabled_sites:
        return None

    if not placements:
        keys = [site.key for site in enabled_sites]
        first = starting_site if starting_site in keys else keys[0]
        return SiteRecommendation(
            site_key=first, days_since_use=None, reason=REASON_FIRST_PLACEMENT
        )

    statuses = site_statuses(
        now, enabled_sites, last_used_map(placements), minimum_rest_days, calendar
    )
    ranked = rank_sites(statuses)

    rested = [status for status in ranked if status.is_rested]
    if rested:
        best = rested[0]
        reason = REASON_NEVER_USED if best.days_since_use is None else REASON_LONGEST_REST
        return SiteRecommendation(
            site_key=best.site_key, days_since_use=best.days_since_use, reason=reason
        )

    fallback = ranked[0]
    return SiteRecommendation(
        site_key=fallback.site_key,
        days_since_use=fallback.days_since_use,
        reason=REASON_ALL_RECENT,
    )
