"""
Tests for next-site recommendation.

Covers:
- First placement behaviour and the starting site
- Never-used priority and longest-rest ranking
- Fallback when every site is still resting
- The three-way rest comparator
- Determinism properties via Hypothesis
"""

from datetime import UTC, datetime, timedelta

from hypothesis import given, settings
from hypothesis import strategies as st

from rotation.domain.models import NeverUsed, PlacementRecord, SiteStatus, UsedDaysAgo
from rotation.domain.sites import DefaultSite
from rotation.services.clock import LocalCalendar
from rotation.services.recommendation import (
    REASON_ALL_RECENT,
    REASON_FIRST_PLACEMENT,
    REASON_LONGEST_REST,
    REASON_NEVER_USED,
    compare_rest,
    rank_sites,
    recommend,
)

ALL_SITES = [site.to_site() for site in DefaultSite]
ARMS = [DefaultSite.LEFT_ARM.to_site(), DefaultSite.RIGHT_ARM.to_site()]


def _status(key: str, days: int | None) -> SiteStatus:
    rest = NeverUsed() if days is None else UsedDaysAgo(days=days)
    return SiteStatus(site_key=key, rest=rest, minimum_rest_days=3)


class TestCompareRest:
    def test_never_used_ties(self) -> None:
        assert compare_rest(_status("a", None), _status("b", None)) == 0

    def test_never_used_beats_used(self) -> None:
        assert compare_rest(_status("a", None), _status("b", 100)) < 0
        assert compare_rest(_status("a", 100), _status("b", None)) > 0

    def test_longer_rest_first(self) -> None:
        assert compare_rest(_status("a", 9), _status("b", 4)) < 0
        assert compare_rest(_status("a", 4), _status("b", 4)) == 0

    def test_rank_is_stable_for_ties(self) -> None:
        ranked = rank_sites([_status("a", 4), _status("b", None), _status("c", 4)])
        assert [s.site_key for s in ranked] == ["b", "a", "c"]


class TestRecommend:
    def test_no_enabled_sites(self, now, calendar) -> None:
        assert recommend(now, [], [], 3, calendar) is None

    def test_first_placement_uses_starting_site(self, now, calendar) -> None:
        result = recommend(now, [], ALL_SITES, 3, calendar)

        assert result is not None
        assert result.site_key == "abdomen_right"
        assert result.days_since_use is None
        assert result.reason == REASON_FIRST_PLACEMENT

    def test_first_placement_falls_back_when_starting_site_disabled(self, now, calendar) -> None:
        result = recommend(now, [], ARMS, 3, calendar)
        assert result is not None
        assert result.site_key == "left_arm"

    def test_never_used_site_preferred(self, placement, now, calendar) -> None:
        result = recommend(now, [placement("left_arm", days_ago=30)], ARMS, 3, calendar)

        assert result is not None
        assert result.site_key == "right_arm"
        assert result.reason == REASON_NEVER_USED

    def test_longest_rested_site(self, placement, now, calendar) -> None:
        records = [placement("left_arm", days_ago=4), placement("right_arm", days_ago=9)]
        result = recommend(now, records, ARMS, 3, calendar)

        assert result is not None
        assert result.site_key == "right_arm"
        assert result.days_since_use == 9
        assert result.reason == REASON_LONGEST_REST

    def test_all_recent_falls_back_to_longest_rest(self, placement, now, calendar) -> None:
        records = [placement("left_arm", days_ago=0), placement("right_arm", days_ago=1)]
        result = recommend(now, records, ARMS, 3, calendar)

        assert result is not None
        assert result.site_key == "right_arm"
        assert result.reason == REASON_ALL_RECENT

    def test_disabled_site_never_recommended(self, placement, now, calendar) -> None:
        result = recommend(
            now, [placement("left_arm", days_ago=1)], [ARMS[0]], 3, calendar
        )
        assert result is not None
        assert result.site_key == "left_arm"

    def test_recommendation_after_a_single_placement(self, placement, now, calendar) -> None:
        result = recommend(now, [placement("abdomen_right")], ALL_SITES, 3, calendar)
        assert result is not None
        assert result.site_key == "abdomen_left"
        assert result.days_since_use is None


_keys = st.sampled_from([site.value for site in DefaultSite])
_offsets = st.integers(min_value=0, max_value=60 * 24 * 60)


@st.composite
def _histories(draw: st.DrawFn) -> list[PlacementRecord]:
    base = datetime(2024, 6, 15, 12, 0, tzinfo=UTC)
    pairs = draw(st.lists(st.tuples(_keys, _offsets), max_size=30))
    return [
        PlacementRecord(site_key=key, placed_at=base - timedelta(minutes=minutes))
        for key, minutes in pairs
    ]


class TestRecommendationProperties:
    @settings(max_examples=60)
    @given(history=_histories(), rest=st.integers(min_value=1, max_value=14))
    def test_recommends_an_enabled_site_deterministically(
        self, history: list[PlacementRecord], rest: int
    ) -> None:
        now = datetime(2024, 6, 15, 12, 0, tzinfo=UTC)
        calendar = LocalCalendar("UTC")

        first = recommend(now, history, ALL_SITES, rest, calendar)
        second = recommend(now, list(reversed(history)), ALL_SITES, rest, calendar)

        assert first is not None
        assert first.site_key in {site.key for site in ALL_SITES}
        assert first == second

    @settings(max_examples=60)
    @given(history=_histories(), rest=st.integers(min_value=1, max_value=14))
    def test_never_used_site_wins_when_one_exists(
        self, history: list[PlacementRecord], rest: int
    ) -> None:
        now = datetime(2024, 6, 15, 12, 0, tzinfo=UTC)
        used = {p.site_key for p in history}
        result = recommend(now, history, ALL_SITES, rest, LocalCalendar("UTC"))

        assert result is not None
        if history and len(used) < len(ALL_SITES):
            assert result.site_key not in used
            assert result.days_since_use is None
