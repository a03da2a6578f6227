"""
Rotation compliance scoring.

The 0-100 score is the sum of two 0-50 components:

- distribution: how evenly placements spread over the available sites,
  measured as squared deviation from an even split and normalized against
  the all-on-one-site worst case;
- rest compliance: share of same-site reuses that respected the minimum
  rest period.

Fewer than ``MIN_PLACEMENTS_FOR_SCORE`` placements in range yields a zero
score with an explanation instead of a noisy number.
"""

import math
from collections import defaultdict
from collections.abc import Iterable
from datetime import date

from rotation.domain.models import PlacementRecord, RotationScore
from rotation.services.clock import DEFAULT_CALENDAR, Calendar
from rotation.services.heatmap import placements_in_range

MIN_PLACEMENTS_FOR_SCORE = 5
COMPONENT_MAX = 50


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _clamp(value: int, low: int = 0, high: int = COMPONENT_MAX) -> int:
    return max(low, min(high, value))


def distribution_score(counts: Iterable[int], site_count: int) -> int:
    """
    Evenness of ``counts`` over ``site_count`` sites, 0-50.

    ``counts`` may omit unused sites; they are padded with zeros. A single
    site cannot be unevenly used and scores the full 50.
    """
    counts = [c for c in counts if c > 0]
    total = sum(counts)
    n = max(site_count, len(counts))
    if total == 0:
        return 0
    if n <= 1:
        return COMPONENT_MAX

    counts.extend([0] * (n - len(counts)))
    ideal = total / n
    squared_diff = sum((c - ideal) ** 2 for c in counts)
    max_variance = total**2 * (n - 1) / n
    return _clamp(round_half_up(COMPONENT_MAX * (1 - squared_diff / max_variance)))


def rest_compliance(
    placements: Iterable[PlacementRecord],
    minimum_rest_days: int,
    calendar: Calendar = DEFAULT_CALENDAR,
) -> tuple[int, int]:
    """(violations, checks) over consecutive same-site placement pairs."""
    by_site: dict[str, list[PlacementRecord]] = defaultdict(list)
    for placement in placements:
        by_site[placement.site_key].append(placement)

    violations = 0
    checks = 0
    for site_placements in by_site.values():
        ordered = sorted(site_placements, key=lambda p: p.placed_at)
        for previous, current in zip(ordered, ordered[1:]):
            checks += 1
            if calendar.days_between(previous.placed_at, current.placed_at) < minimum_rest_days:
                violations += 1
    return violations, checks


def rest_compliance_score(violations: int, checks: int) -> int:
    if checks == 0:
        return COMPONENT_MAX
    return _clamp(round_half_up(COMPONENT_MAX * (1 - violations / checks)))


def rating(score: int) -> str:
    """Band of an overall 0-100 score: excellent, good, fair or poor."""
    if score >= 80:
        return "excellent"
    if score >= 60:
        return "good"
    if score >= 40:
        return "fair"
    return "poor"


_OVERALL_PHRASES = {
    "excellent": "Excellent rotation pattern!",
    "good": "Good rotation pattern.",
    "fair": "Fair rotation pattern with room to improve.",
    "poor": "Your rotation pattern needs attention.",
}


def _distribution_phrase(score: int) -> str:
    if score >= 40:
        return "You're using your sites evenly."
    if score >= 25:
        return "Some sites are used more often than others."
    return "Most placements are concentrated on a few sites; try spreading them out."


def _compliance_phrase(score: int, minimum_rest_days: int) -> str:
    if score >= 40:
        return "Sites are getting enough rest between uses."
    if score >= 25:
        return "Some sites are reused before they have fully rested."
    return f"Sites are often reused too soon; aim for at least {minimum_rest_days} days of rest."


def explain(
    score: int, distribution: int, compliance: int, minimum_rest_days: int
) -> str:
    return " ".join(
        [
            _OVERALL_PHRASES[rating(score)],
            _distribution_phrase(distribution),
            _compliance_phrase(compliance, minimum_rest_days),
        ]
    )


def rotation_score(
    placements: Iterable[PlacementRecord],
    start_date: date,
    end_date: date,
    minimum_rest_days: int,
    site_count: int,
    calendar: Calendar = DEFAULT_CALENDAR,
) -> RotationScore:
    in_range = placements_in_range(placements, start_date, end_date, calendar)

    if len(in_range) < MIN_PLACEMENTS_FOR_SCORE:
        return RotationScore(
            score=0,
            distribution_score=0,
            rest_compliance_score=0,
            explanation=(
                f"Log at least {MIN_PLACEMENTS_FOR_SCORE} placements in this period to see "
                f"your rotation score ({len(in_range)} so far)."
            ),
        )

    counts: dict[str, int] = defaultdict(int)
    for placement in in_range:
        counts[placement.site_key] += 1

    distribution = distribution_score(counts.values(), site_count)
    violations, checks = rest_compliance(in_range, minimum_rest_days, calendar)
    compliance = rest_compliance_score(violations, checks)
    total = distribution + compliance

    return RotationScore(
        score=total,
        distribution_score=distribution,
        rest_compliance_score=compliance,
        explanation=explain(total, distribution, compliance, minimum_rest_days),
    )
