"""
Activation — publish a compiled dataset as the session's active tz database.

Activation repoints the context's active path and exports it as TZDIR
so the C library (and ``time.tzset``) pick it up. No validation is done
on the path: callers only hand over datasets the compiler produced.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

from tzupdater.core.context import TZDIR_ENV, SessionContext
from tzupdater.core.models.release import NO_ACTIVE_RELEASE, read_version_marker

logger = logging.getLogger(__name__)


def activate(context: SessionContext, compiled_dir: Path, verbose: bool = False) -> None:
    """Make ``compiled_dir`` the active tz database of this session."""
    context.active_path = compiled_dir
    context.environ[TZDIR_ENV] = str(compiled_dir)
    refresh_time_facilities(context)

    (logger.info if verbose else logger.debug)(
        "Active tz db: %s", current_version(context)
    )


def refresh_time_facilities(context: SessionContext) -> None:
    """Re-read the time zone setup after the active dataset changed.

    With ``refresh_zoneinfo`` the zoneinfo search path follows the active
    dataset, or goes back to the interpreter default when none is active.
    """
    if hasattr(time, "tzset"):
        time.tzset()

    if context.settings.refresh_zoneinfo:
        import zoneinfo

        if context.active_path is None:
            zoneinfo.reset_tzpath()
        else:
            zoneinfo.reset_tzpath(to=[str(context.active_path)])
        zoneinfo.ZoneInfo.clear_cache()


def current_version(context: SessionContext) -> str:
    """Release of the active dataset, or ``"-----"`` if none is active."""
    if context.active_path is None:
        return NO_ACTIVE_RELEASE
    return read_version_marker(context.active_path) or NO_ACTIVE_RELEASE
