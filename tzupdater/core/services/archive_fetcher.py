"""
Archive fetcher — make sure a release tarball exists on local disk.

Download happens at most once per release and target folder: an
existing file short-circuits with no network call. A failed download
never leaves a file behind, so a retry cannot be fooled by a partial.
"""

from __future__ import annotations

import logging
from pathlib import Path

from tzupdater.core.context import SessionContext
from tzupdater.core.models.outcome import FetchOutcome
from tzupdater.core.models.release import LocalArchive, archive_file_name

logger = logging.getLogger(__name__)


def _discard_partial(path: Path) -> None:
    """Remove a partially written archive. Failures are logged, not raised."""
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.error("Unexpected error when removing %s: %s", path, e)


def ensure_archive(
    context: SessionContext,
    release: str,
    target_dir: Path,
) -> LocalArchive | FetchOutcome:
    """Return the local archive of ``release``, downloading it if needed.

    Returns:
        LocalArchive on success, or the failed FetchOutcome
        (``not_found`` / ``unreachable`` / ``failed``).
    """
    path = target_dir / archive_file_name(release)
    if path.is_file():
        logger.debug("Archive %s already present, skipping download", path)
        return LocalArchive(release=release, path=path, downloaded=False)

    settings = context.settings
    url = settings.archive_url(release)

    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        outcome = context.transport.download(url, path, timeout=settings.timeout)
    except Exception as e:
        logger.exception("Transport error while downloading %s", url)
        outcome = FetchOutcome.failure(url, f"A critical issue prevented the download: {e}")

    if outcome.ok:
        return LocalArchive(release=release, path=path, downloaded=True)

    _discard_partial(path)

    if outcome.status == "not_found":
        logger.warning("Cannot fetch %s (404 not found): %s is not available", url, release)
    elif outcome.status == "unreachable":
        logger.warning("IANA website is unreachable: %s", outcome.error)
    else:
        logger.warning("Cannot download %s: %s", url, outcome.error)
    return outcome
