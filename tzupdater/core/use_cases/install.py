"""
Install use case — the public operations of tzupdater.

This is the top-level orchestrator: it resolves the target release,
fetches the archive, compiles it, and activates the result. Each run
walks a small state machine and ends in one PipelineState:

    idle → resolving_version → up_to_date
                             → fetching → extracting → compiling → activating → done

with terminal error states unresolvable, tool_missing, fetch_failed,
compile_failed and internal_error. Failures are reported through
InstallResult, never raised (except ToolMissingError, on request).
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from tzupdater.core.context import TZDIR_ENV, SessionContext
from tzupdater.core.models.outcome import (
    FETCH_ERROR_KINDS,
    CompileReport,
    ErrorKind,
    FetchOutcome,
    InstallOptions,
)
from tzupdater.core.models.release import (
    NO_ACTIVE_RELEASE,
    UNKNOWN_RELEASE,
    CompiledDataset,
    LocalArchive,
    ReleaseLayout,
    is_valid_release,
)
from tzupdater.core.services.activation import (
    activate,
    current_version,
    refresh_time_facilities,
)
from tzupdater.core.services.archive_fetcher import ensure_archive
from tzupdater.core.services.compiler import compile_release, extract_archive
from tzupdater.core.services.toolchain import (
    default_zic_dir,
    missing_tool_hint,
    prepended_search_path,
)
from tzupdater.core.services.version_resolver import resolve_latest

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    IDLE = "idle"
    RESOLVING_VERSION = "resolving_version"
    UP_TO_DATE = "up_to_date"
    FETCHING = "fetching"
    EXTRACTING = "extracting"
    COMPILING = "compiling"
    ACTIVATING = "activating"
    DONE = "done"
    # terminal errors
    UNRESOLVABLE = "unresolvable"
    TOOL_MISSING = "tool_missing"
    FETCH_FAILED = "fetch_failed"
    COMPILE_FAILED = "compile_failed"
    INTERNAL_ERROR = "internal_error"


class ToolMissingError(Exception):
    """Raised when zic is missing and the caller asked for a hard stop."""


@dataclass
class InstallResult:
    """Outcome of install_version / install_latest."""

    release: str | None = None
    state: PipelineState = PipelineState.IDLE
    error_kind: ErrorKind | None = None
    error: str | None = None

    archive: LocalArchive | None = None
    report: CompileReport | None = None
    compiled_path: Path | None = None
    reused: bool = False        # an existing compiled copy was activated
    activated: bool = False

    previous_version: str = NO_ACTIVE_RELEASE
    active_version: str = NO_ACTIVE_RELEASE

    @property
    def ok(self) -> bool:
        return self.state in (PipelineState.DONE, PipelineState.UP_TO_DATE)

    def fail(self, state: PipelineState, kind: ErrorKind, error: str) -> InstallResult:
        self.state = state
        self.error_kind = kind
        self.error = error
        return self

    def to_dict(self) -> dict:
        result: dict = {
            "ok": self.ok,
            "state": self.state.value,
            "release": self.release,
            "previous_version": self.previous_version,
            "active_version": self.active_version,
        }
        if self.error:
            result["error_kind"] = self.error_kind
            result["error"] = self.error
            if self.report is None:
                return result

        result["reused"] = self.reused
        result["activated"] = self.activated
        if self.compiled_path:
            result["compiled_path"] = str(self.compiled_path)
        if self.archive:
            result["archive"] = {
                "path": str(self.archive.path),
                "downloaded": self.archive.downloaded,
            }
        if self.report:
            result["compilation"] = self.report.to_dict()
        return result


# ── Public operations ───────────────────────────────────────────


def get_active_version(context: SessionContext) -> str:
    """Release of the active tz database, or ``"-----"``."""
    return current_version(context)


def get_latest_published_version(context: SessionContext) -> str:
    """Latest release on the IANA website, or ``"Unknown"`` (memoized)."""
    return resolve_latest(context)


def install_version(
    context: SessionContext,
    release: str,
    options: InstallOptions | None = None,
) -> InstallResult:
    """Download, compile and (optionally) activate a given release.

    A compiled copy already staged under the target folder is reused:
    no network call, no compiler run.

    Args:
        context: Session state and collaborators.
        release: Release name such as ``2024a``.
        options: Logging, strictness and activation knobs.

    Returns:
        InstallResult; ``result.ok`` is True in state ``done``.

    Raises:
        ToolMissingError: zic is missing and ``options.fail_if_tool_missing``.
    """
    options = options or InstallOptions()
    result = InstallResult(release=release, previous_version=current_version(context))
    tool_dir = default_zic_dir(context.settings.zic_path)

    with _internal_error_guard(context, result):
        with prepended_search_path(context.environ, tool_dir):
            _run_pipeline(context, release, options, result)

    result.active_version = current_version(context)
    return result


def install_latest(
    context: SessionContext,
    options: InstallOptions | None = None,
) -> InstallResult:
    """Install the latest published release unless it is already active."""
    options = options or InstallOptions()
    progress = logger.info if options.verbose else logger.debug
    active = current_version(context)
    result = InstallResult(previous_version=active, active_version=active)

    result.state = PipelineState.RESOLVING_VERSION
    latest = resolve_latest(context)
    result.release = latest

    if latest == UNKNOWN_RELEASE:
        logger.warning(
            "Please look up the latest tz database at %s and install it with "
            "'tzupdater install <version>' if it differs from your active one (%s).",
            context.settings.iana_website, active,
        )
        return result.fail(
            PipelineState.UNRESOLVABLE,
            "version_unresolvable",
            "Cannot determine the latest published tz database",
        )

    if latest == active:
        progress("Local tz database %s is up to date.", active)
        result.state = PipelineState.UP_TO_DATE
        return result

    progress("Local tz database %s outdated. Will install %s now.", active, latest)
    return install_version(context, latest, options)


# ── Pipeline ────────────────────────────────────────────────────


@contextmanager
def _internal_error_guard(context: SessionContext, result: InstallResult) -> Iterator[None]:
    """Turn unexpected exceptions into ``internal_error`` and undo any activation."""
    active_path = context.active_path
    tzdir = context.environ.get(TZDIR_ENV)
    try:
        yield
    except ToolMissingError:
        raise
    except Exception as exc:
        logger.exception("Unexpected error when installing tz database %s", result.release)
        logger.error(
            "If you keep experiencing the issue please report at %s",
            context.settings.issue_tracker_url,
        )
        context.active_path = active_path
        if tzdir is None:
            context.environ.pop(TZDIR_ENV, None)
        else:
            context.environ[TZDIR_ENV] = tzdir
        refresh_time_facilities(context)
        result.activated = False
        result.fail(PipelineState.INTERNAL_ERROR, "internal_error", str(exc) or repr(exc))


def _run_pipeline(
    context: SessionContext,
    release: str,
    options: InstallOptions,
    result: InstallResult,
) -> None:
    settings = context.settings
    progress = logger.info if options.verbose else logger.debug

    if not is_valid_release(release):
        result.fail(
            PipelineState.FETCH_FAILED,
            "fetch_failed",
            f"Invalid release name {release!r} (expected e.g. 2024a)",
        )
        return

    layout = ReleaseLayout(root=settings.target_folder, release=release)
    result.compiled_path = layout.compiled_dir

    # ── Reuse a finished compilation ─────────────────────────────
    if layout.has_compiled_copy():
        progress("tz database %s already compiled in %s", release, layout.compiled_dir)
        result.reused = True
        staged = CompiledDataset(release=release, path=layout.compiled_dir)
        _finish(context, staged, options, result)
        return

    # ── Compiler available? ──────────────────────────────────────
    if not context.compiler.is_available(context.environ):
        hint = missing_tool_hint()
        logger.warning("zic not found on your system! %s", hint)
        if options.fail_if_tool_missing:
            raise ToolMissingError(f"zic not found on your system. {hint}")
        result.fail(
            PipelineState.TOOL_MISSING,
            "tool_missing",
            f"{release} cannot be compiled because zic cannot be found. {hint}",
        )
        return

    # ── Fetch ────────────────────────────────────────────────────
    result.state = PipelineState.FETCHING
    fetched = ensure_archive(context, release, settings.target_folder)
    if isinstance(fetched, FetchOutcome):
        if fetched.status == "not_found" and resolve_latest(context) == release:
            logger.warning(
                "%s is announced as the latest release but cannot be downloaded. "
                "The IANA website might be unreachable; please retry later or report at %s",
                release, settings.issue_tracker_url,
            )
        result.fail(
            PipelineState.FETCH_FAILED,
            FETCH_ERROR_KINDS[fetched.status],
            fetched.error or f"Cannot download {fetched.url}",
        )
        return
    result.archive = fetched

    # ── Extract ──────────────────────────────────────────────────
    result.state = PipelineState.EXTRACTING
    extract_error = extract_archive(fetched.path, layout.source_dir)
    if extract_error:
        # The archive is unusable; drop it so the next attempt downloads again
        fetched.path.unlink(missing_ok=True)
        result.fail(PipelineState.FETCH_FAILED, "fetch_failed", extract_error)
        return

    # ── Compile ──────────────────────────────────────────────────
    result.state = PipelineState.COMPILING
    report = compile_release(context, layout.source_dir, layout.compiled_dir, release, options)
    result.report = report
    dataset = report.dataset()
    if dataset is None:
        logger.error("Cannot install tz%s!", release)
        result.fail(PipelineState.COMPILE_FAILED, "component_compile_error", _describe(report))
        return

    progress("IANA Time Zone Database %s installed in %s", release, dataset.path.resolve())
    _finish(context, dataset, options, result)


def _finish(
    context: SessionContext,
    dataset: CompiledDataset,
    options: InstallOptions,
    result: InstallResult,
) -> None:
    result.compiled_path = dataset.path
    if options.activate:
        result.state = PipelineState.ACTIVATING
        activate(context, dataset.path, verbose=options.verbose)
        result.activated = True
    result.state = PipelineState.DONE


def _describe(report: CompileReport) -> str:
    """One-line summary of why a compilation was rejected."""
    if report.error:
        return report.error
    failed = report.failed_components
    if failed:
        first = failed[0]
        detail = first.errors[0] if first.errors else "failed"
        names = ", ".join(c.name for c in failed)
        return f"zic failed on {names}: {detail}"
    return "No component could be compiled"
