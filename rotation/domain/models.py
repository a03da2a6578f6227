"""
Domain models for placement site rotation.

These models represent the core business concepts and are framework-agnostic.
They use Pydantic for validation; derived models are never persisted.
"""

from datetime import date, datetime
from enum import Enum
from typing import Annotated, Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


class SiteKind(str, Enum):
    """Where a site definition comes from."""

    DEFAULT = "default"
    CUSTOM = "custom"


class SiteState(str, Enum):
    """Rest state of a single site."""

    NEVER_USED = "never_used"
    RESTING = "resting"
    READY = "ready"


class TrendGranularity(str, Enum):
    """Bucket size for trend series."""

    DAY = "day"
    WEEK = "week"


class Site(BaseModel):
    """A body location (default) or user-defined location for the device."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(min_length=1, description="Stable identity, unique across all sites")
    display_name: str = Field(min_length=1)
    icon_name: str = "star.fill"
    enabled: bool = True
    kind: SiteKind = SiteKind.DEFAULT


class PlacementRecord(BaseModel):
    """A logged placement: one site used at one instant."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    site_key: str = Field(min_length=1)
    placed_at: datetime
    note: str | None = None

    @field_validator("placed_at")
    @classmethod
    def require_aware_timestamp(cls, v: datetime) -> datetime:
        if v.tzinfo is None or v.utcoffset() is None:
            raise ValueError("placed_at must be timezone-aware")
        return v.replace(microsecond=0)

    @field_validator("note")
    @classmethod
    def blank_note_is_none(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v


class RotationSettings(BaseModel):
    """User-adjustable rotation preferences."""

    minimum_rest_days: int = Field(default=3, gt=0, description="Days a site rests before reuse")
    show_disabled_sites_in_history: bool = Field(
        default=True, description="Include disabled sites in historical views"
    )


class NeverUsed(BaseModel):
    """Rest interval of a site with no recorded placement."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["never_used"] = "never_used"

    @property
    def days(self) -> None:
        return None


class UsedDaysAgo(BaseModel):
    """Rest interval of a site last used a whole number of calendar days ago.

    ``days`` is negative for placements timestamped in the future.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["used"] = "used"
    days: int


RestInterval = Annotated[NeverUsed | UsedDaysAgo, Field(discriminator="kind")]


class SiteStatus(BaseModel):
    """Derived rest state for one site."""

    model_config = ConfigDict(frozen=True)

    site_key: str
    rest: RestInterval
    minimum_rest_days: int = Field(gt=0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def days_since_use(self) -> int | None:
        return self.rest.days

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_rested(self) -> bool:
        days = self.rest.days
        return days is None or days >= self.minimum_rest_days

    @computed_field  # type: ignore[prop-decorator]
    @property
    def state(self) -> SiteState:
        if isinstance(self.rest, NeverUsed):
            return SiteState.NEVER_USED
        return SiteState.READY if self.is_rested else SiteState.RESTING

    @property
    def days_remaining(self) -> int:
        """Days left before the site is rested again (0 when ready)."""
        days = self.rest.days
        if days is None:
            return 0
        return max(0, self.minimum_rest_days - days)

    @property
    def description(self) -> str:
        days = self.rest.days
        if days is None:
            return "Available"
        if days == 0:
            return "Used today"
        if days == 1:
            return "Used yesterday"
        if days < self.minimum_rest_days:
            return f"Rest {self.minimum_rest_days - days} more days"
        return f"Ready ({days}d rest)"


class SiteRecommendation(BaseModel):
    """The site suggested for the next placement."""

    model_config = ConfigDict(frozen=True)

    site_key: str
    days_since_use: int | None
    reason: str

    @property
    def explanation(self) -> str:
        days = self.days_since_use
        if days is None:
            return "Never used before"
        if days == 0:
            return "Used today"
        if days == 1:
            return "Not used in 1 day"
        return f"Not used in {days} days"


class HeatmapEntry(BaseModel):
    """Usage density for one site within a date range."""

    model_config = ConfigDict(frozen=True)

    site_key: str
    usage_count: int = Field(ge=0)
    intensity: float = Field(ge=0.0, le=1.0, description="1.0 is the most used site")
    last_used: datetime | None = None
    percentage_of_total: float = Field(ge=0.0, le=100.0)


class RotationScore(BaseModel):
    """Composite rotation compliance rating."""

    model_config = ConfigDict(frozen=True)

    score: int = Field(ge=0, le=100)
    distribution_score: int = Field(ge=0, le=50)
    rest_compliance_score: int = Field(ge=0, le=50)
    explanation: str


class TrendPoint(BaseModel):
    """Placement count for one period of a trend series."""

    model_config = ConfigDict(frozen=True)

    period_start: date
    count: int = Field(ge=0)
    site_key: str | None = None
