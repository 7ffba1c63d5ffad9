"""Tests for PURL segment extraction."""

from catalog.services.purl_utils import get_purl_namespace, get_purl_type


class TestGetPurlType:
    def test_pypi(self, sample_purls):
        assert get_purl_type(sample_purls["pypi"]) == "pypi"

    def test_npm(self, sample_purls):
        assert get_purl_type(sample_purls["npm"]) == "npm"

    def test_lowercased(self):
        assert get_purl_type("pkg:NPM/react@18.2.0") == "npm"

    def test_qualifiers_and_subpath(self, sample_purls):
        assert get_purl_type(sample_purls["with_qualifiers"]) == "pypi"
        assert get_purl_type(sample_purls["with_subpath"]) == "npm"

    def test_not_a_purl(self):
        assert get_purl_type("react@18.2.0") is None
        assert get_purl_type("") is None
        assert get_purl_type(None) is None


class TestGetPurlNamespace:
    def test_scoped_npm_unquoted(self, sample_purls):
        assert get_purl_namespace(sample_purls["npm_scoped"]) == "@angular"

    def test_maven_group(self, sample_purls):
        assert get_purl_namespace(sample_purls["maven"]) == "org.apache.commons"

    def test_no_namespace(self, sample_purls):
        assert get_purl_namespace(sample_purls["npm"]) is None
        assert get_purl_namespace(sample_purls["pypi"]) is None

    def test_slashes_after_name_ignored(self, sample_purls):
        assert get_purl_namespace(sample_purls["with_qualifiers"]) is None
        assert get_purl_namespace(sample_purls["with_subpath"]) is None

    def test_not_a_purl(self):
        assert get_purl_namespace(None) is None
