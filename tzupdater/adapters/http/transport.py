"""
HTTP transport — urllib-based access to the IANA website and release archives.

Failures are classified here, once, into the FetchOutcome variants:

    HTTP 404                         → not_found
    DNS / connection / timeout       → unreachable
    anything else                    → failed (with the message)
"""

from __future__ import annotations

import logging
import shutil
import socket
import time
import urllib.error
import urllib.request
from pathlib import Path

from tzupdater import __version__
from tzupdater.adapters.base import Transport
from tzupdater.core.models.outcome import FetchOutcome

logger = logging.getLogger(__name__)

_USER_AGENT = f"tzupdater/{__version__}"
_CHUNK_SIZE = 64 * 1024


def _is_unreachable(reason: object) -> bool:
    """Whether a URLError reason means the host could not be reached."""
    return isinstance(reason, (socket.gaierror, ConnectionError, TimeoutError))


def classify_error(url: str, exc: Exception, **kwargs) -> FetchOutcome:
    """Map a urllib / socket exception onto a FetchOutcome."""
    if isinstance(exc, urllib.error.HTTPError):
        if exc.code == 404:
            return FetchOutcome.not_found(url, f"HTTP 404: {exc.reason}", http_status=404, **kwargs)
        return FetchOutcome.failure(
            url, f"HTTP {exc.code}: {exc.reason}", http_status=exc.code, **kwargs
        )
    if isinstance(exc, urllib.error.URLError):
        if _is_unreachable(exc.reason):
            return FetchOutcome.unreachable(url, f"Cannot reach host: {exc.reason}", **kwargs)
        return FetchOutcome.failure(url, str(exc.reason), **kwargs)
    if _is_unreachable(exc):
        return FetchOutcome.unreachable(url, f"Cannot reach host: {exc}", **kwargs)
    return FetchOutcome.failure(url, str(exc) or exc.__class__.__name__, **kwargs)


class UrllibTransport(Transport):
    """Plain urllib GETs, no auth, no retries."""

    @property
    def name(self) -> str:
        return "urllib"

    def _request(self, url: str) -> urllib.request.Request:
        return urllib.request.Request(url, headers={"User-Agent": _USER_AGENT})

    def fetch_text(self, url: str, timeout: int = 60) -> FetchOutcome:
        logger.debug("GET %s", url)
        try:
            with urllib.request.urlopen(self._request(url), timeout=timeout) as resp:
                charset = resp.headers.get_content_charset() or "utf-8"
                body = resp.read().decode(charset, errors="replace")
                return FetchOutcome.success(url, text=body, http_status=resp.getcode())
        except Exception as exc:
            outcome = classify_error(url, exc)
            logger.debug("GET %s failed: %s (%s)", url, outcome.error, outcome.status)
            return outcome

    def download(self, url: str, dest: Path, timeout: int = 60) -> FetchOutcome:
        logger.info("Downloading %s → %s", url, dest)
        start = time.monotonic()
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            with urllib.request.urlopen(self._request(url), timeout=timeout) as resp:
                with open(dest, "wb") as fh:
                    shutil.copyfileobj(resp, fh, _CHUNK_SIZE)
                status = resp.getcode()
        except Exception as exc:
            outcome = classify_error(url, exc, path=dest)
            logger.debug("Download %s failed: %s (%s)", url, outcome.error, outcome.status)
            return outcome

        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.debug("Downloaded %s in %dms", url, elapsed_ms)
        return FetchOutcome.success(url, path=dest, http_status=status)
