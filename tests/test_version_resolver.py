"""
Tests for the version resolver — IANA page scraping and memoization.
"""

import pytest

from tzupdater.core.models.release import UNKNOWN_RELEASE
from tzupdater.core.services.version_resolver import parse_release_marker, resolve_latest

MARKER = '<span id="version">'


class TestParseReleaseMarker:
    def test_extracts_token(self):
        html = '<p>Latest: <span id="version">2024a</span></p>'
        assert parse_release_marker(html, MARKER) == "2024a"

    def test_first_matching_line_wins(self):
        html = f'nothing here\n{MARKER}2023c</span>\n{MARKER}2019a</span>'
        assert parse_release_marker(html, MARKER) == "2023c"

    def test_missing_marker(self):
        assert parse_release_marker("<html>no version</html>", MARKER) is None

    def test_non_numeric_year(self):
        assert parse_release_marker(f"{MARKER}abcd</span>", MARKER) is None

    def test_too_short(self):
        assert parse_release_marker(f"{MARKER}20</span>", MARKER) is None

    def test_empty_token(self):
        assert parse_release_marker(f"{MARKER}</span>", MARKER) is None

    @pytest.mark.parametrize("token", ["1_23", "+123a", " 12 ", "2024", "2024a-rc1"])
    def test_malformed_token(self, token):
        assert parse_release_marker(f"{MARKER}{token}</span>", MARKER) is None


class TestResolveLatest:
    def test_resolves_from_page(self, session, transport):
        assert resolve_latest(session) == "2024a"
        assert session.latest == "2024a"
        assert transport.fetch_count == 1

    def test_memoized(self, session, transport):
        resolve_latest(session)
        resolve_latest(session)
        resolve_latest(session)
        assert transport.fetch_count == 1

    def test_marker_absent_is_unknown(self, session, transport, settings):
        transport.set_page(settings.iana_website, "<html>redesigned</html>")
        assert resolve_latest(session) == UNKNOWN_RELEASE

    def test_unknown_is_memoized_too(self, session, transport, settings):
        transport.set_page(settings.iana_website, "<html>redesigned</html>")
        resolve_latest(session)
        transport.set_page(settings.iana_website, f"{MARKER}2024b</span>")
        assert resolve_latest(session) == UNKNOWN_RELEASE
        assert transport.fetch_count == 1

    def test_unreachable_is_unknown(self, session, transport, settings):
        transport.set_failure(settings.iana_website, status="unreachable", error="DNS")
        assert resolve_latest(session) == UNKNOWN_RELEASE

    def test_transport_crash_is_unknown(self, session, transport, settings, caplog):
        def boom(url, timeout=60):
            raise RuntimeError("socket exploded")

        transport.fetch_text = boom
        with caplog.at_level("WARNING"):
            assert resolve_latest(session) == UNKNOWN_RELEASE
        assert session.latest == UNKNOWN_RELEASE
        assert "socket exploded" in caplog.text
        assert settings.issue_tracker_url in caplog.text

    def test_failure_logs_warning(self, session, transport, settings, caplog):
        transport.set_failure(settings.iana_website, status="failed", error="HTTP 500")
        with caplog.at_level("WARNING"):
            resolve_latest(session)
        assert "Cannot retrieve the latest tz database name" in caplog.text
        assert settings.issue_tracker_url in caplog.text

    def test_independent_contexts(self, session, settings, compiler, environ):
        from tzupdater.adapters.mock import MockTransport
        from tzupdater.core.context import SessionContext

        resolve_latest(session)
        other_transport = MockTransport(pages={settings.iana_website: f"{MARKER}2025a</span>"})
        other = SessionContext(
            settings=settings, transport=other_transport, compiler=compiler, environ=environ
        )
        assert resolve_latest(other) == "2025a"
        assert session.latest == "2024a"
