"""
Tests for the screenshot catalog
"""

import pytest

from cloudbrowser_mcp.catalog import (
    SCREENSHOT_MIME_TYPE,
    ScreenshotCatalog,
    parse_screenshot_uri,
    screenshot_uri,
)
from cloudbrowser_mcp.exceptions import ResourceNotFoundError


class TestScreenshotUri:
    def test_build(self):
        assert screenshot_uri("home") == "screenshot://home"

    def test_parse(self):
        assert parse_screenshot_uri("screenshot://home") == "home"

    def test_parse_other_scheme(self):
        assert parse_screenshot_uri("foo://x") is None

    @pytest.mark.parametrize(
        "name,uri",
        [
            ("my shot", "screenshot://my%20shot"),
            ("a/b", "screenshot://a%2Fb"),
            ("x?y", "screenshot://x%3Fy"),
            ("über", "screenshot://%C3%BCber"),
        ],
    )
    def test_names_are_percent_encoded(self, name, uri):
        assert screenshot_uri(name) == uri
        assert parse_screenshot_uri(uri) == name


class TestScreenshotCatalog:
    """Tests for storing, listing and reading screenshots."""

    def test_empty(self):
        catalog = ScreenshotCatalog()

        assert len(catalog) == 0
        assert catalog.list() == []

    def test_put_and_get(self):
        catalog = ScreenshotCatalog()

        assert catalog.put("home", "aGVsbG8=") is True
        assert catalog.get("home") == "aGVsbG8="
        assert "home" in catalog

    def test_put_overwrites(self):
        """Test that a repeated name replaces the earlier screenshot."""
        catalog = ScreenshotCatalog()
        catalog.put("home", "Zmlyc3Q=")

        assert catalog.put("home", "c2Vjb25k") is False
        assert catalog.get("home") == "c2Vjb25k"
        assert len(catalog) == 1

    def test_list_entries(self):
        catalog = ScreenshotCatalog()
        catalog.put("home", "aGVsbG8=")
        catalog.put("login", "d29ybGQ=")

        assert catalog.list() == [
            {"uri": "screenshot://home", "mimeType": SCREENSHOT_MIME_TYPE, "name": "Screenshot: home"},
            {"uri": "screenshot://login", "mimeType": SCREENSHOT_MIME_TYPE, "name": "Screenshot: login"},
        ]

    def test_read_existing(self):
        catalog = ScreenshotCatalog()
        catalog.put("home", "aGVsbG8=")

        assert catalog.read("screenshot://home") == "aGVsbG8="

    @pytest.mark.parametrize("name", ["my shot", "a/b", "x?y"])
    def test_list_and_read_awkward_names(self, name):
        catalog = ScreenshotCatalog()
        catalog.put(name, "aGVsbG8=")

        [entry] = catalog.list()

        assert entry["name"] == f"Screenshot: {name}"
        assert catalog.read(entry["uri"]) == "aGVsbG8="

    def test_query_character_is_not_truncated(self):
        """x?y must not resolve to (or report) screenshot://x"""
        catalog = ScreenshotCatalog()
        catalog.put("x", "eA==")
        catalog.put("x?y", "eHk=")

        assert catalog.read(screenshot_uri("x?y")) == "eHk="

    def test_read_missing_name(self):
        catalog = ScreenshotCatalog()

        with pytest.raises(ResourceNotFoundError, match="Resource not found: screenshot://missing"):
            catalog.read("screenshot://missing")

    def test_read_foreign_scheme(self):
        catalog = ScreenshotCatalog()
        catalog.put("x", "aGVsbG8=")

        with pytest.raises(ResourceNotFoundError, match="Resource not found: foo://x"):
            catalog.read("foo://x")
