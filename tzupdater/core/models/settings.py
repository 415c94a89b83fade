"""
Settings model — where releases live and where they come from.

Loaded from tzupdater.yml by the config loader; every field has a
default so the tool works without any config file at all.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

from pydantic import BaseModel, Field

DEFAULT_DOWNLOAD_BASE_URL = "https://data.iana.org/time-zones/releases"
DEFAULT_IANA_WEBSITE = "https://www.iana.org/time-zones"
DEFAULT_VERSION_MARKER = '<span id="version">'
DEFAULT_ISSUE_TRACKER_URL = "https://github.com/sthonnard/tzupdater"


def _default_target_folder() -> Path:
    return Path(tempfile.gettempdir()) / "tzupdater" / "data" / "IANA_release"


class Settings(BaseModel):
    """Runtime settings for fetching and compiling tz releases."""

    target_folder: Path = Field(default_factory=_default_target_folder)
    zic_path: Path | None = None            # directory holding zic, if not on PATH

    download_base_url: str = DEFAULT_DOWNLOAD_BASE_URL
    iana_website: str = DEFAULT_IANA_WEBSITE
    version_marker: str = DEFAULT_VERSION_MARKER
    timeout: int = 60                       # seconds, per network request

    issue_tracker_url: str = DEFAULT_ISSUE_TRACKER_URL
    refresh_zoneinfo: bool = False          # also repoint zoneinfo on activation

    def archive_url(self, release: str) -> str:
        """Download URL of a release tarball."""
        return f"{self.download_base_url.rstrip('/')}/tzdata{release}.tar.gz"
