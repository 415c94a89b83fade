"""
Domain models — Pydantic types for tzupdater.

All models are re-exported here for convenient access:

    from tzupdater.core.models import Settings, FetchOutcome, CompileReport
"""

from tzupdater.core.models.outcome import (
    CompileReport,
    CompilerRun,
    ComponentResult,
    ErrorKind,
    FetchOutcome,
    FetchStatus,
    InstallOptions,
)
from tzupdater.core.models.release import (
    NO_ACTIVE_RELEASE,
    UNKNOWN_RELEASE,
    CompiledDataset,
    LocalArchive,
    ReleaseLayout,
)
from tzupdater.core.models.settings import Settings

__all__ = [
    # outcome.py
    "CompileReport",
    "CompilerRun",
    "ComponentResult",
    "ErrorKind",
    "FetchOutcome",
    "FetchStatus",
    "InstallOptions",
    # release.py
    "CompiledDataset",
    "LocalArchive",
    "NO_ACTIVE_RELEASE",
    "ReleaseLayout",
    "UNKNOWN_RELEASE",
    # settings.py
    "Settings",
]
