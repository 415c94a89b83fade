"""
Toolchain — locate zic and expose it on PATH for the length of an operation.

The configured zic directory is prepended to PATH on entry and the
previous value is put back on every exit path, including errors.
"""

from __future__ import annotations

import logging
import os
import platform
from collections.abc import Iterator, MutableMapping
from contextlib import contextmanager
from pathlib import Path

logger = logging.getLogger(__name__)

PATH_ENV = "PATH"

# Where Cygwin installs zic on Windows
CYGWIN_ZIC_DIR = Path("C:\\Cygwin\\usr\\sbin")


def default_zic_dir(zic_path: Path | None) -> Path | None:
    """Directory to prepend to PATH, falling back to Cygwin on Windows."""
    if zic_path is not None:
        return zic_path
    if platform.system() == "Windows" and CYGWIN_ZIC_DIR.exists():
        return CYGWIN_ZIC_DIR
    return None


def missing_tool_hint() -> str:
    """Platform-specific advice for installing zic."""
    if platform.system() == "Windows":
        return "Please install Cygwin from https://www.cygwin.com"
    return "Please install the tzdata package (it ships zic)"


@contextmanager
def prepended_search_path(
    environ: MutableMapping[str, str],
    tool_dir: Path | None,
) -> Iterator[None]:
    """Temporarily put ``tool_dir`` first on ``environ['PATH']``."""
    if tool_dir is None:
        yield
        return

    had_path = PATH_ENV in environ
    old_path = environ.get(PATH_ENV, "")
    environ[PATH_ENV] = os.pathsep.join(p for p in (str(tool_dir), old_path) if p)
    logger.debug("PATH prepended with %s", tool_dir)
    try:
        yield
    finally:
        if had_path:
            environ[PATH_ENV] = old_path
        else:
            environ.pop(PATH_ENV, None)
