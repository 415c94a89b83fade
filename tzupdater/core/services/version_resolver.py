"""
Version resolver — the latest release name published on the IANA website.

The IANA time-zones page carries the current release in a single
``<span id="version">2024a</span>`` element. The page is fetched once
per session; the answer (or "Unknown") is memoized on the context.
"""

from __future__ import annotations

import logging

from tzupdater.core.context import SessionContext
from tzupdater.core.models.outcome import FetchOutcome
from tzupdater.core.models.release import UNKNOWN_RELEASE, is_valid_release

logger = logging.getLogger(__name__)


def parse_release_marker(html: str, marker: str) -> str | None:
    """Extract the token following ``marker`` in ``html``.

    The token ends at the next tag. Returns None when the marker is
    absent or the token is not a release name such as ``2024a``.
    """
    for line in html.splitlines():
        idx = line.find(marker)
        if idx < 0:
            continue
        token = line[idx + len(marker):].split("<", 1)[0].strip()
        return token if is_valid_release(token) else None
    return None


def resolve_latest(context: SessionContext) -> str:
    """Return the latest published release, or ``"Unknown"``.

    Never raises. The first call hits the network; every later call on
    the same context returns the cached value, even ``"Unknown"``.
    """
    if context.latest is not None:
        return context.latest

    settings = context.settings
    try:
        outcome = context.transport.fetch_text(settings.iana_website, timeout=settings.timeout)
    except Exception as e:
        logger.exception("Transport error while fetching %s", settings.iana_website)
        outcome = FetchOutcome.failure(settings.iana_website, f"Unexpected error: {e}")

    if not outcome.ok:
        logger.warning(
            "Cannot retrieve the latest tz database name from %s (%s): %s",
            settings.iana_website, outcome.status, outcome.error,
        )
        if outcome.status != "unreachable":
            logger.warning(
                "This might be a temporary problem. If it persists please report it at %s",
                settings.issue_tracker_url,
            )
        context.latest = UNKNOWN_RELEASE
        return context.latest

    release = parse_release_marker(outcome.text or "", settings.version_marker)
    if release is None:
        logger.warning(
            "Cannot retrieve the latest tz database name from %s. "
            "The html structure might have changed.",
            settings.iana_website,
        )
        context.latest = UNKNOWN_RELEASE
    else:
        logger.debug("Latest published tz database: %s", release)
        context.latest = release

    return context.latest
