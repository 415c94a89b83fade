"""
Release models — identifiers and on-disk artifacts of one tz release.

Layout under the target folder:

    {root}/tzdata{release}.tar.gz     downloaded archive
    {root}/{release}/                 extracted source
    {root}/{release}/compiled/        zic output, tagged with +VERSION
"""

from __future__ import annotations

import re
from pathlib import Path

from pydantic import BaseModel

# Sentinels
UNKNOWN_RELEASE = "Unknown"     # latest release could not be determined
NO_ACTIVE_RELEASE = "-----"     # nothing activated in this session

VERSION_MARKER_FILE = "+VERSION"
COMPILED_DIR_NAME = "compiled"

_RELEASE_RE = re.compile(r"^\d{4}[a-z]+$")


def is_valid_release(release: str) -> bool:
    """Whether ``release`` looks like an IANA release name (e.g. ``2024a``)."""
    return bool(_RELEASE_RE.match(release))


def archive_file_name(release: str) -> str:
    return f"tzdata{release}.tar.gz"


class ReleaseLayout(BaseModel):
    """Filesystem locations used for one release under a target folder."""

    root: Path
    release: str

    @property
    def source_dir(self) -> Path:
        return self.root / self.release

    @property
    def compiled_dir(self) -> Path:
        return self.source_dir / COMPILED_DIR_NAME

    def has_compiled_copy(self) -> bool:
        """Whether a finished compilation of this release is already staged."""
        return read_version_marker(self.compiled_dir) == self.release


class LocalArchive(BaseModel):
    """A release tarball present on local disk."""

    release: str
    path: Path
    downloaded: bool = False    # False when an existing file was reused


class CompiledDataset(BaseModel):
    """A compiled zoneinfo tree ready to be activated."""

    release: str
    path: Path


def read_version_marker(compiled_dir: Path) -> str | None:
    """Read the release recorded in a compiled directory, or None."""
    marker = compiled_dir / VERSION_MARKER_FILE
    try:
        return marker.read_text(encoding="utf-8").strip() or None
    except OSError:
        return None


def write_version_marker(compiled_dir: Path, release: str) -> Path:
    """Tag a compiled directory with the release that produced it."""
    marker = compiled_dir / VERSION_MARKER_FILE
    marker.write_text(release, encoding="utf-8")
    return marker
