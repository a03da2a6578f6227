"""
Tests for the site catalog in `rotation/domain/sites.py`.

Covers:
- Default site enumeration and metadata
- Enable/disable with the last-enabled-site guard
- Custom site lifecycle (add, rename, delete)
- Reset to defaults and display preferences
"""

import pytest

from rotation.domain.models import Site, SiteKind
from rotation.domain.sites import (
    DEFAULT_STARTING_SITE,
    DefaultSite,
    DefaultSiteError,
    LastEnabledSiteError,
    SiteCatalog,
    SiteCatalogError,
    UnknownSiteError,
)


@pytest.fixture
def catalog() -> SiteCatalog:
    return SiteCatalog()


class TestDefaultSites:
    def test_nine_defaults_all_enabled(self, catalog: SiteCatalog) -> None:
        assert len(catalog) == 9
        assert len(catalog.enabled_sites()) == 9
        assert catalog.keys()[0] == DefaultSite.ABDOMEN_RIGHT.value
        assert all(site.kind is SiteKind.DEFAULT for site in catalog.all_sites())

    def test_starting_site_is_abdomen_right(self) -> None:
        assert DEFAULT_STARTING_SITE is DefaultSite.ABDOMEN_RIGHT

    def test_opposite_sides(self, catalog: SiteCatalog) -> None:
        arm = catalog.opposite_side("left_arm")
        back = catalog.opposite_side("right_lower_back")

        assert arm is not None and arm.key == "right_arm"
        assert back is not None and back.key == "left_lower_back"
        assert catalog.opposite_side("lower_abdomen") is None

    def test_every_default_has_names_and_icon(self) -> None:
        for site in DefaultSite:
            assert site.display_name
            assert site.short_name
            assert site.icon_name

    def test_initial_disabled_defaults(self) -> None:
        catalog = SiteCatalog(disabled_defaults={"left_arm", "right_arm"})
        assert not catalog.get("left_arm").enabled
        assert len(catalog.enabled_sites()) == 7


class TestEnableDisable:
    def test_disable_and_reenable(self, catalog: SiteCatalog) -> None:
        assert catalog.set_enabled("left_thigh", False).enabled is False
        assert "left_thigh" not in {s.key for s in catalog.enabled_sites()}
        assert catalog.toggle("left_thigh").enabled is True

    def test_cannot_disable_last_enabled_site(self) -> None:
        others = {site.value for site in DefaultSite} - {"left_arm"}
        catalog = SiteCatalog(disabled_defaults=others)

        with pytest.raises(LastEnabledSiteError):
            catalog.set_enabled("left_arm", False)
        assert catalog.get("left_arm").enabled

    def test_catalog_with_nothing_enabled_is_rejected(self) -> None:
        with pytest.raises(SiteCatalogError):
            SiteCatalog(disabled_defaults={site.value for site in DefaultSite})

    def test_unknown_site(self, catalog: SiteCatalog) -> None:
        with pytest.raises(UnknownSiteError):
            catalog.set_enabled("elbow", False)

    def test_visible_sites_respects_preference(self, catalog: SiteCatalog) -> None:
        catalog.set_enabled("left_arm", False)
        assert len(catalog.visible_sites(show_disabled=True)) == 9
        assert len(catalog.visible_sites(show_disabled=False)) == 8


class TestCustomSites:
    def test_add_custom_site(self, catalog: SiteCatalog) -> None:
        site = catalog.add_custom_site("  Upper buttock  ")

        assert site.kind is SiteKind.CUSTOM
        assert site.display_name == "Upper buttock"
        assert site.icon_name == "star.fill"
        assert site.key.startswith("custom-")
        assert catalog.keys()[-1] == site.key
        assert catalog.opposite_side(site.key) is None

    def test_empty_name_rejected(self, catalog: SiteCatalog) -> None:
        with pytest.raises(SiteCatalogError):
            catalog.add_custom_site("   ")

    def test_rename_custom_site(self, catalog: SiteCatalog) -> None:
        site = catalog.add_custom_site("Hip")
        renamed = catalog.rename_custom_site(site.key, "Left hip")
        assert renamed.key == site.key
        assert catalog.display_name(site.key) == "Left hip"

    def test_default_sites_cannot_be_renamed_or_deleted(self, catalog: SiteCatalog) -> None:
        with pytest.raises(DefaultSiteError):
            catalog.rename_custom_site("left_arm", "Arm")
        with pytest.raises(DefaultSiteError):
            catalog.delete_custom_site("left_arm")

    def test_delete_custom_site(self, catalog: SiteCatalog) -> None:
        site = catalog.add_custom_site("Hip")
        catalog.delete_custom_site(site.key)
        assert site.key not in catalog
        assert catalog.display_name(site.key) == site.key

    def test_cannot_delete_last_enabled_custom_site(self) -> None:
        custom = Site(key="custom-hip", display_name="Hip", kind=SiteKind.CUSTOM)
        catalog = SiteCatalog(
            disabled_defaults={site.value for site in DefaultSite}, custom_sites=[custom]
        )
        with pytest.raises(LastEnabledSiteError):
            catalog.delete_custom_site("custom-hip")

    def test_duplicate_custom_key_rejected(self) -> None:
        clash = Site(key="left_arm", display_name="Arm again", kind=SiteKind.CUSTOM)
        with pytest.raises(SiteCatalogError, match="Duplicate"):
            SiteCatalog(custom_sites=[clash])

    def test_reset_to_defaults(self, catalog: SiteCatalog) -> None:
        catalog.add_custom_site("Hip")
        catalog.set_enabled("left_arm", False)

        catalog.reset_to_defaults()

        assert len(catalog) == 9
        assert len(catalog.enabled_sites()) == 9
