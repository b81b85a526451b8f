"""
Tests for request filtering module.

Tests RequestFilter logic for exact matching, wildcard matching, regex
patterns and combined filters, as used by both capture points.
"""

import logging

import pytest

from tracespec.capture.filters import RequestFilter


class TestRequestFilterInitialization:
    """Test suite for RequestFilter initialization."""

    def test_init_with_host_filters_only(self):
        filters = RequestFilter(["api.example.com", "auth.example.com"])

        assert filters.host_filters == ["api.example.com", "auth.example.com"]
        assert filters.regex_pattern is None

    def test_init_with_regex_pattern(self):
        filters = RequestFilter([], regex_pattern=r"^/api/")

        assert filters.regex_pattern.pattern == r"^/api/"

    def test_init_with_invalid_regex_pattern(self, caplog):
        """An invalid pattern is logged and ignored."""
        with caplog.at_level(logging.WARNING, logger="tracespec.capture"):
            filters = RequestFilter([], regex_pattern="[invalid(")

        assert "Invalid regex pattern" in caplog.text
        assert filters.regex_pattern is None


class TestShouldCapture:
    """Test suite for should_capture()."""

    def test_capture_all_when_no_filters(self):
        filters = RequestFilter([])

        assert filters.should_capture("anything.com", "/users/1") is True
        assert filters.should_capture("", "") is True

    def test_exact_match(self):
        filters = RequestFilter(["api.example.com"])

        assert filters.should_capture("api.example.com", "/users") is True
        assert filters.should_capture("other.example.com", "/users") is False

    def test_exact_match_case_sensitive(self):
        filters = RequestFilter(["api.example.com"])

        assert filters.should_capture("API.example.com", "/users") is False

    @pytest.mark.parametrize("host,expected", [
        ("api.example.com", True),
        ("example.com", True),
        ("v1.api.example.com", True),
        ("example.org", False),
        ("notexample.com", False),
    ])
    def test_wildcard(self, host, expected):
        filters = RequestFilter(["*.example.com"])

        assert filters.should_capture(host, "/") is expected

    def test_regex_matches_path(self):
        filters = RequestFilter([], regex_pattern=r"^/orgs/\d+/")

        assert filters.should_capture("testserver", "/orgs/42/users") is True
        assert filters.should_capture("testserver", "/health") is False

    def test_regex_matches_host(self):
        filters = RequestFilter([], regex_pattern=r"\.internal$")

        assert filters.should_capture("billing.internal", "/invoices") is True

    def test_combined_or_logic(self):
        filters = RequestFilter(["api.example.com"], regex_pattern=r"/admin/")

        assert filters.should_capture("api.example.com", "/users") is True
        assert filters.should_capture("other.com", "/admin/settings") is True
        assert filters.should_capture("other.com", "/users") is False


class TestLogging:
    """Test suite for debug logging of filter decisions."""

    def test_capture_logged(self, caplog):
        filters = RequestFilter(["*.example.com"])

        with caplog.at_level(logging.DEBUG, logger="tracespec.capture"):
            filters.should_capture("api.example.com", "/users")

        assert "wildcard match: *.example.com" in caplog.text

    def test_skip_logged(self, caplog):
        filters = RequestFilter(["api.example.com"])

        with caplog.at_level(logging.DEBUG, logger="tracespec.capture"):
            filters.should_capture("other.com", "/users")

        assert "[SKIP] other.com /users" in caplog.text
