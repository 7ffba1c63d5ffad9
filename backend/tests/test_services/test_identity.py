"""Tests for component identity keys and batch collapsing."""

from catalog.models.component import ComponentLicense
from catalog.services.identity import (
    collapse_by_identity,
    component_identity_key,
    license_key,
    license_keys,
)
from tests.mocks.catalog import make_component


class TestComponentIdentityKey:
    def test_purl_wins(self):
        component = make_component("react", "18.2.0")
        assert component_identity_key(component) == "purl:pkg:npm/react@18.2.0"

    def test_coordinates_without_purl(self):
        component = make_component("internal-lib", "2.0.0", purl=None, package_manager="maven")
        assert component_identity_key(component) == "coord:internal-lib|2.0.0|maven"

    def test_missing_coordinates(self):
        component = make_component("app", None, purl=None, package_manager=None)
        assert component_identity_key(component) == "coord:app||"

    def test_version_distinguishes(self):
        a = make_component("react", "18.2.0")
        b = make_component("react", "17.0.2")
        assert component_identity_key(a) != component_identity_key(b)


class TestCollapseByIdentity:
    def test_later_rows_win(self):
        first = make_component("react", "18.2.0", description="first")
        second = make_component("react", "18.2.0", description="second")
        collapsed = collapse_by_identity([first, second])
        assert len(collapsed) == 1
        assert list(collapsed.values())[0].description == "second"

    def test_first_position_kept(self):
        rows = [
            make_component("a", "1.0.0"),
            make_component("b", "1.0.0"),
            make_component("a", "1.0.0", description="updated"),
        ]
        collapsed = collapse_by_identity(rows)
        assert [c.name for c in collapsed.values()] == ["a", "b"]

    def test_empty(self):
        assert collapse_by_identity([]) == {}


class TestLicenseKeys:
    def test_id_preferred(self):
        assert license_key(ComponentLicense(id="MIT", name="MIT License")) == "MIT"

    def test_name_fallback(self):
        assert license_key(ComponentLicense(name="Acme Internal")) == "Acme Internal"

    def test_url_only_has_no_key(self):
        assert license_key(ComponentLicense(url="https://example.com/license")) == ""

    def test_deduplicated_in_order(self):
        component = make_component("lib", "1.0.0", licenses=["MIT", "Apache-2.0", "MIT"])
        assert license_keys(component) == ["MIT", "Apache-2.0"]
