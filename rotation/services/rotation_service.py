"""
Rotation service: the single owner of placement mutations and derived caches.

This ties the pure calculators to a repository, a site catalog, settings,
a calendar and a clock:
1. Mutations (log, edit, delete, settings and catalog changes) go through here
2. Each mutation refreshes the caches before returning
3. Reads serve cached values or derive them on demand

Cached day counts depend on the local date of "now", so the recommendation
cache is also keyed by that date and rebuilt when the day rolls over.
"""

from datetime import date, datetime
from uuid import UUID

import structlog

from rotation.domain.models import (
    HeatmapEntry,
    PlacementRecord,
    RotationScore,
    RotationSettings,
    Site,
    SiteRecommendation,
    SiteStatus,
    TrendGranularity,
    TrendPoint,
)
from rotation.domain.sites import DEFAULT_STARTING_SITE, SiteCatalog, UnknownSiteError
from rotation.services.clock import Calendar, Clock, LocalCalendar, SystemClock
from rotation.services.heatmap import heatmap
from rotation.services.recommendation import recommend
from rotation.services.repository import PlacementRepository
from rotation.services.rest_status import get_status, last_used_map, site_statuses
from rotation.services.scoring import rotation_score
from rotation.services.streaks import streak
from rotation.services.summary import WeeklySummary, placements_by_day, weekly_summary
from rotation.services.trends import trend, trend_by_site

logger = structlog.get_logger(__name__)


class RotationService:
    """
    Facade over the rotation calculators with eager cache refresh.

    Design principles:
    - No hidden global state: every collaborator is injected
    - Single writer: a mutation completes, caches included, before the next read
    - Calculators stay pure; only this layer logs
    """

    def __init__(
        self,
        repository: PlacementRepository,
        catalog: SiteCatalog | None = None,
        settings: RotationSettings | None = None,
        calendar: Calendar | None = None,
        clock: Clock | None = None,
        starting_site: str = DEFAULT_STARTING_SITE.value,
    ) -> None:
        self.repository = repository
        self.catalog = catalog or SiteCatalog()
        self.settings = settings or RotationSettings()
        self.calendar = calendar or LocalCalendar()
        self.clock = clock or SystemClock()
        self.starting_site = starting_site
        self.logger = logger.bind(component="rotation_service")

        self._placements: list[PlacementRecord] = []
        self._last_used: dict[str, datetime] = {}
        self._recommendation: SiteRecommendation | None = None
        self._recommendation_day: date | None = None
        self._refresh()

    # ------------------------------------------------------------------
    # Cache management
    # ------------------------------------------------------------------

    def _refresh(self) -> None:
        self._placements = self.repository.list_all()
        self._last_used = last_used_map(self._placements)
        self._recompute_recommendation(self.clock.now())

    def _recompute_recommendation(self, now: datetime) -> None:
        self._recommendation = recommend(
            now,
            self._placements,
            self.catalog.enabled_sites(),
            self.settings.minimum_rest_days,
            self.calendar,
            starting_site=self.starting_site,
        )
        self._recommendation_day = self.calendar.local_date(now)

    # ------------------------------------------------------------------
    # Placements
    # ------------------------------------------------------------------

    @property
    def placements(self) -> list[PlacementRecord]:
        """All placements, newest first."""
        return list(self._placements)

    @property
    def last_used_dates(self) -> dict[str, datetime]:
        return dict(self._last_used)

    @property
    def most_recent_placement(self) -> PlacementRecord | None:
        return self._placements[0] if self._placements else None

    def placements_for(self, site_key: str) -> list[PlacementRecord]:
        return [p for p in self._placements if p.site_key == site_key]

    def log_placement(
        self, site_key: str, placed_at: datetime | None = None, note: str | None = None
    ) -> PlacementRecord:
        """Record a placement, defaulting its timestamp to now."""
        self.catalog.get(site_key)
        record = PlacementRecord(
            site_key=site_key, placed_at=placed_at or self.clock.now(), note=note
        )
        self.repository.add(record)
        self._refresh()
        self.logger.info(
            "placement_logged",
            placement_id=str(record.id),
            site=site_key,
            placed_at=record.placed_at.isoformat(),
        )
        return record

    def edit_placement(
        self,
        placement_id: UUID,
        *,
        site_key: str | None = None,
        placed_at: datetime | None = None,
        note: str | None = None,
        clear_note: bool = False,
    ) -> PlacementRecord:
        current = self.repository.get(placement_id)
        if site_key is not None and site_key not in self.catalog:
            raise UnknownSiteError(site_key)

        # Re-validate through the model so edits obey the same rules as creation
        updated = PlacementRecord(
            id=current.id,
            site_key=site_key or current.site_key,
            placed_at=placed_at or current.placed_at,
            note=None if clear_note else (note if note is not None else current.note),
        )
        self.repository.update(updated)
        self._refresh()
        self.logger.info("placement_edited", placement_id=str(placement_id), site=updated.site_key)
        return updated

    def delete_placement(self, placement_id: UUID) -> None:
        self.repository.remove(placement_id)
        self._refresh()
        self.logger.info("placement_deleted", placement_id=str(placement_id))

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    def recommendation(self) -> SiteRecommendation | None:
        now = self.clock.now()
        if self.calendar.local_date(now) != self._recommendation_day:
            self._recompute_recommendation(now)
        if self._recommendation is None:
            self.logger.warning("no_enabled_sites")
        return self._recommendation

    def status_for(self, site_key: str) -> SiteStatus:
        self.catalog.get(site_key)
        return get_status(
            self.clock.now(),
            site_key,
            self._last_used,
            self.settings.minimum_rest_days,
            self.calendar,
        )

    def statuses(self, include_disabled: bool = False) -> list[SiteStatus]:
        sites = self.catalog.all_sites() if include_disabled else self.catalog.enabled_sites()
        return site_statuses(
            self.clock.now(), sites, self._last_used, self.settings.minimum_rest_days, self.calendar
        )

    def history_sites(self) -> list[Site]:
        return self.catalog.visible_sites(self.settings.show_disabled_sites_in_history)

    def heatmap(self, start_date: date, end_date: date) -> list[HeatmapEntry]:
        """One entry per cataloged site, disabled ones included."""
        return heatmap(
            self._placements, start_date, end_date, self.catalog.all_sites(), self.calendar
        )

    def rotation_score(self, start_date: date, end_date: date) -> RotationScore:
        return rotation_score(
            self._placements,
            start_date,
            end_date,
            self.settings.minimum_rest_days,
            len(self.catalog.enabled_sites()),
            self.calendar,
        )

    def trend(
        self, start_date: date, end_date: date, granularity: TrendGranularity | None = None
    ) -> list[TrendPoint]:
        return trend(self._placements, start_date, end_date, granularity, self.calendar)

    def trend_by_site(
        self, start_date: date, end_date: date, granularity: TrendGranularity | None = None
    ) -> dict[str, list[TrendPoint]]:
        keys = [site.key for site in self.history_sites()]
        return trend_by_site(
            self._placements, start_date, end_date, keys, granularity, self.calendar
        )

    def streak(self) -> int:
        return streak(self._placements, self.clock.now(), self.calendar)

    def weekly_summary(self) -> WeeklySummary:
        return weekly_summary(self._placements, self.clock.now(), self.calendar)

    def placements_by_day(self) -> list[tuple[date, list[PlacementRecord]]]:
        return placements_by_day(self._placements, self.calendar)

    # ------------------------------------------------------------------
    # Settings and catalog
    # ------------------------------------------------------------------

    def update_minimum_rest_days(self, days: int) -> RotationSettings:
        self.settings = RotationSettings.model_validate(
            {**self.settings.model_dump(), "minimum_rest_days": days}
        )
        self._refresh()
        self.logger.info("minimum_rest_days_updated", days=days)
        return self.settings

    def update_show_disabled_sites(self, show: bool) -> RotationSettings:
        self.settings = self.settings.model_copy(update={"show_disabled_sites_in_history": show})
        self.logger.info("show_disabled_sites_updated", show=show)
        return self.settings

    def set_site_enabled(self, site_key: str, enabled: bool) -> Site:
        site = self.catalog.set_enabled(site_key, enabled)
        self._refresh()
        return site

    def add_custom_site(self, name: str, icon_name: str = "star.fill") -> Site:
        site = self.catalog.add_custom_site(name, icon_name)
        self._refresh()
        return site

    def rename_custom_site(self, site_key: str, name: str) -> Site:
        return self.catalog.rename_custom_site(site_key, name)

    def delete_custom_site(self, site_key: str) -> None:
        self.catalog.delete_custom_site(site_key)
        self._refresh()

    def reset_to_defaults(self) -> None:
        """Default rest period and display preference, all default sites, no custom sites."""
        self.settings = RotationSettings()
        self.catalog.reset_to_defaults()
        self._refresh()
        self.logger.info("settings_reset_to_defaults")
