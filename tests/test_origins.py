# =============================================================================
# tests/test_origins.py - Base Path & Allowlist Tests
# =============================================================================

import pytest

from lib.origins import build_allowlist, normalize_base_path, normalize_origin


# =============================================================================
# normalize_base_path
# =============================================================================

class TestNormalizeBasePath:
    """Test BASE_PATH canonicalization."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("/api/", "/api"),
            ("/api", "/api"),
            ("api", "/api"),
            ("api/v1//", "/api/v1"),
            ("  /api/  ", "/api"),
            ("/", ""),
            ("///", ""),
            ("", ""),
            (None, ""),
            ("https://example.com/api/", "/api"),
            ("HTTP://example.com/api/v1", "/api/v1"),
            ("https://example.com", ""),
            ("https://example.com/", ""),
        ],
    )
    def test_normalizes(self, raw, expected):
        assert normalize_base_path(raw) == expected

    def test_unparseable_url_falls_back_to_root(self):
        """Malformed URLs degrade to no base path instead of raising."""
        assert normalize_base_path("http://[::1/api") == ""

    @pytest.mark.parametrize(
        "raw",
        ["/api/", "api", "/", "", "https://x.com/a/b/", "//double//", " spaced ", "http://[bad", "a/b/c"],
    )
    def test_idempotent(self, raw):
        once = normalize_base_path(raw)
        assert normalize_base_path(once) == once

    @pytest.mark.parametrize("raw", ["/api/", "api", "x/y/", "https://h.com/p/"])
    def test_invariant_leading_slash_no_trailing_slash(self, raw):
        result = normalize_base_path(raw)
        assert result.startswith("/")
        assert not result.endswith("/")


# =============================================================================
# normalize_origin / build_allowlist
# =============================================================================

class TestNormalizeOrigin:

    def test_strips_trailing_slashes(self):
        assert normalize_origin("https://a.com//") == "https://a.com"

    def test_trims_whitespace(self):
        assert normalize_origin("  https://a.com ") == "https://a.com"

    def test_keeps_case_and_port(self):
        assert normalize_origin("http://LocalHost:5173") == "http://LocalHost:5173"


class TestBuildAllowlist:

    def test_comma_separated_with_trailing_slash(self):
        assert build_allowlist("https://a.com/, https://b.com") == frozenset(
            {"https://a.com", "https://b.com"}
        )

    def test_empty_configuration_is_empty(self):
        assert build_allowlist("") == frozenset()
        assert build_allowlist(None) == frozenset()

    def test_discards_empty_entries(self):
        assert build_allowlist(" , https://a.com,, ") == frozenset({"https://a.com"})

    def test_deduplicates(self):
        assert build_allowlist("https://a.com,https://a.com/,https://a.com") == frozenset({"https://a.com"})

    def test_fallback_is_merged_and_normalized(self):
        allowlist = build_allowlist("https://a.com", fallback=["http://localhost:5173/"])
        assert allowlist == frozenset({"https://a.com", "http://localhost:5173"})

    def test_fallback_only(self):
        assert build_allowlist("", fallback=["https://b.com"]) == frozenset({"https://b.com"})

    def test_is_immutable(self):
        assert isinstance(build_allowlist("https://a.com"), frozenset)
