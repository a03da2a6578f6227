"""
Site catalog: the default body sites plus user-defined custom sites.

Default sites are fixed (enable/disable only). Custom sites can be created,
renamed, disabled and deleted. At least one site must stay enabled.
"""

from enum import Enum
from uuid import uuid4

import structlog

from rotation.domain.models import Site, SiteKind

logger = structlog.get_logger(__name__)


class DefaultSite(str, Enum):
    """Body locations available out of the box."""

    ABDOMEN_RIGHT = "abdomen_right"
    ABDOMEN_LEFT = "abdomen_left"
    LOWER_ABDOMEN = "lower_abdomen"
    LEFT_ARM = "left_arm"
    RIGHT_ARM = "right_arm"
    LEFT_THIGH = "left_thigh"
    RIGHT_THIGH = "right_thigh"
    LEFT_LOWER_BACK = "left_lower_back"
    RIGHT_LOWER_BACK = "right_lower_back"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def short_name(self) -> str:
        return _SHORT_NAMES[self]

    @property
    def icon_name(self) -> str:
        if self in (DefaultSite.LEFT_ARM, DefaultSite.RIGHT_ARM):
            return "hand.raised.fill"
        if self in (DefaultSite.LEFT_THIGH, DefaultSite.RIGHT_THIGH):
            return "figure.stand"
        if self in (DefaultSite.LEFT_LOWER_BACK, DefaultSite.RIGHT_LOWER_BACK):
            return "rectangle.fill"
        return "circle.fill"

    @property
    def opposite_side(self) -> "DefaultSite | None":
        return _OPPOSITES.get(self)

    def to_site(self, enabled: bool = True) -> Site:
        return Site(
            key=self.value,
            display_name=self.display_name,
            icon_name=self.icon_name,
            enabled=enabled,
            kind=SiteKind.DEFAULT,
        )


_DISPLAY_NAMES = {
    DefaultSite.ABDOMEN_RIGHT: "Abdomen (Right)",
    DefaultSite.ABDOMEN_LEFT: "Abdomen (Left)",
    DefaultSite.LOWER_ABDOMEN: "Lower Abdomen",
    DefaultSite.LEFT_ARM: "Left Arm (Back)",
    DefaultSite.RIGHT_ARM: "Right Arm (Back)",
    DefaultSite.LEFT_THIGH: "Left Thigh",
    DefaultSite.RIGHT_THIGH: "Right Thigh",
    DefaultSite.LEFT_LOWER_BACK: "Lower Back (Left)",
    DefaultSite.RIGHT_LOWER_BACK: "Lower Back (Right)",
}

_SHORT_NAMES = {
    DefaultSite.ABDOMEN_RIGHT: "R. Abdomen",
    DefaultSite.ABDOMEN_LEFT: "L. Abdomen",
    DefaultSite.LOWER_ABDOMEN: "Low. Abdomen",
    DefaultSite.LEFT_ARM: "L. Arm",
    DefaultSite.RIGHT_ARM: "R. Arm",
    DefaultSite.LEFT_THIGH: "L. Thigh",
    DefaultSite.RIGHT_THIGH: "R. Thigh",
    DefaultSite.LEFT_LOWER_BACK: "LB Left",
    DefaultSite.RIGHT_LOWER_BACK: "LB Right",
}

_OPPOSITES = {
    DefaultSite.ABDOMEN_RIGHT: DefaultSite.ABDOMEN_LEFT,
    DefaultSite.ABDOMEN_LEFT: DefaultSite.ABDOMEN_RIGHT,
    DefaultSite.LEFT_ARM: DefaultSite.RIGHT_ARM,
    DefaultSite.RIGHT_ARM: DefaultSite.LEFT_ARM,
    DefaultSite.LEFT_THIGH: DefaultSite.RIGHT_THIGH,
    DefaultSite.RIGHT_THIGH: DefaultSite.LEFT_THIGH,
    DefaultSite.LEFT_LOWER_BACK: DefaultSite.RIGHT_LOWER_BACK,
    DefaultSite.RIGHT_LOWER_BACK: DefaultSite.LEFT_LOWER_BACK,
}

DEFAULT_STARTING_SITE = DefaultSite.ABDOMEN_RIGHT


class SiteCatalogError(ValueError):
    """Base class for rejected catalog changes."""


class UnknownSiteError(SiteCatalogError):
    def __init__(self, key: str) -> None:
        super().__init__(f"Unknown site: {key}")
        self.key = key


class LastEnabledSiteError(SiteCatalogError):
    def __init__(self, key: str) -> None:
        super().__init__(f"Cannot disable {key}: at least one site must remain enabled")
        self.key = key


class DefaultSiteError(SiteCatalogError):
    def __init__(self, key: str, action: str) -> None:
        super().__init__(f"Cannot {action} default site {key}")
        self.key = key


class SiteCatalog:
    """
    Registry of default and custom sites with their enabled flags.

    Order is stable: default sites in declaration order, then custom sites
    in creation order. Sites are immutable; changes replace the stored value.
    """

    def __init__(
        self,
        disabled_defaults: set[str] | None = None,
        custom_sites: list[Site] | None = None,
    ) -> None:
        disabled = disabled_defaults or set()
        self._sites: dict[str, Site] = {
            site.value: site.to_site(enabled=site.value not in disabled) for site in DefaultSite
        }
        for custom in custom_sites or []:
            if custom.key in self._sites:
                raise SiteCatalogError(f"Duplicate site key: {custom.key}")
            self._sites[custom.key] = custom.model_copy(update={"kind": SiteKind.CUSTOM})
        self.logger = logger.bind(component="site_catalog")
        if not self.enabled_sites():
            raise SiteCatalogError("At least one site must remain enabled")

    def __contains__(self, key: object) -> bool:
        return key in self._sites

    def __len__(self) -> int:
        return len(self._sites)

    def keys(self) -> list[str]:
        return list(self._sites)

    def all_sites(self) -> list[Site]:
        return list(self._sites.values())

    def enabled_sites(self) -> list[Site]:
        return [site for site in self._sites.values() if site.enabled]

    def visible_sites(self, show_disabled: bool) -> list[Site]:
        """Sites to list in historical views, honouring the display preference."""
        return self.all_sites() if show_disabled else self.enabled_sites()

    def get(self, key: str) -> Site:
        try:
            return self._sites[key]
        except KeyError:
            raise UnknownSiteError(key) from None

    def display_name(self, key: str) -> str:
        """Display name for a key, falling back to the key for sites no longer cataloged."""
        site = self._sites.get(key)
        return site.display_name if site else key

    def opposite_side(self, key: str) -> Site | None:
        self.get(key)
        try:
            default = DefaultSite(key)
        except ValueError:
            return None
        opposite = default.opposite_side
        return self._sites[opposite.value] if opposite else None

    def set_enabled(self, key: str, enabled: bool) -> Site:
        site = self.get(key)
        if site.enabled == enabled:
            return site
        if not enabled and len(self.enabled_sites()) == 1:
            self.logger.warning("last_enabled_site_protected", site=key)
            raise LastEnabledSiteError(key)

        updated = site.model_copy(update={"enabled": enabled})
        self._sites[key] = updated
        self.logger.info("site_enabled" if enabled else "site_disabled", site=key)
        return updated

    def toggle(self, key: str) -> Site:
        return self.set_enabled(key, not self.get(key).enabled)

    def add_custom_site(self, name: str, icon_name: str = "star.fill") -> Site:
        name = name.strip()
        if not name:
            raise SiteCatalogError("Custom site name must not be empty")

        site = Site(
            key=f"custom-{uuid4().hex}",
            display_name=name,
            icon_name=icon_name,
            enabled=True,
            kind=SiteKind.CUSTOM,
        )
        self._sites[site.key] = site
        self.logger.info("custom_site_added", site=site.key, name=name)
        return site

    def rename_custom_site(self, key: str, name: str) -> Site:
        site = self._require_custom(key, "rename")
        name = name.strip()
        if not name:
            raise SiteCatalogError("Custom site name must not be empty")

        updated = site.model_copy(update={"display_name": name})
        self._sites[key] = updated
        self.logger.info("custom_site_renamed", site=key, name=name)
        return updated

    def delete_custom_site(self, key: str) -> None:
        site = self._require_custom(key, "delete")
        if site.enabled and len(self.enabled_sites()) == 1:
            raise LastEnabledSiteError(key)

        del self._sites[key]
        self.logger.info("custom_site_deleted", site=key)

    def reset_to_defaults(self) -> None:
        """Enable every default site and drop all custom sites."""
        self._sites = {site.value: site.to_site() for site in DefaultSite}
        self.logger.info("site_catalog_reset")

    def _require_custom(self, key: str, action: str) -> Site:
        site = self.get(key)
        if site.kind is SiteKind.DEFAULT:
            raise DefaultSiteError(key, action)
        return site
