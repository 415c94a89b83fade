"""
Compilation orchestrator — unpack a release and run zic over each component.

Components are compiled one by one, in a fixed order, into
``{root}/{release}/compiled``. Per-component failures are collected in
a CompileReport; in strict mode the loop stops at the first one.
A successful compilation is tagged with a ``+VERSION`` marker.
"""

from __future__ import annotations

import logging
import shutil
import tarfile
from pathlib import Path

from tzupdater.core.context import SessionContext
from tzupdater.core.models.outcome import (
    CompileReport,
    CompilerRun,
    ComponentResult,
    InstallOptions,
)
from tzupdater.core.models.release import write_version_marker

logger = logging.getLogger(__name__)

# tzdata source files understood by zic, in compilation order
COMPONENTS: tuple[str, ...] = (
    "etcetera",
    "southamerica",
    "northamerica",
    "europe",
    "africa",
    "antarctica",
    "asia",
    "australasia",
    "backward",
    "pacificnew",
    "systemv",
    "factory",
)

# Not shipped by every release; their absence is expected
OPTIONAL_COMPONENTS: frozenset[str] = frozenset({"backward", "pacificnew", "systemv", "factory"})

WARNING_MARKER = "warning: "


def remove_tree(path: Path) -> None:
    """Remove an incomplete directory. Failures are logged, not raised."""
    if not path.exists():
        return
    try:
        shutil.rmtree(path)
    except OSError as e:
        logger.error("Unexpected error when removing %s: %s", path, e)


# ── Extraction ──────────────────────────────────────────────────


def extract_archive(archive_path: Path, source_dir: Path) -> str | None:
    """Unpack a release tarball into ``source_dir``.

    Members resolving outside ``source_dir`` are rejected. On any
    failure the partially extracted directory is removed.

    Returns:
        None on success, or an error message.
    """
    target_resolved = source_dir.resolve()
    try:
        source_dir.mkdir(parents=True, exist_ok=True)
        with tarfile.open(archive_path, mode="r:*") as tar:
            for member in tar.getmembers():
                member_path = (source_dir / member.name).resolve()
                if not member_path.is_relative_to(target_resolved):
                    raise ValueError(f"Unsafe tar entry path: {member.name!r}")
            tar.extractall(path=source_dir, filter="data")
    except (OSError, tarfile.TarError, ValueError) as e:
        logger.error("Cannot extract %s: %s", archive_path, e)
        remove_tree(source_dir)
        return f"Cannot extract {archive_path.name}: {e}"

    logger.debug("Extracted %s into %s", archive_path, source_dir)
    return None


# ── Output classification ───────────────────────────────────────


def classify_output(run: CompilerRun) -> tuple[list[str], list[str]]:
    """Split compiler output into ``(warnings, errors)``.

    Lines carrying ``warning: `` are informational; every other line
    is an error. A non-zero exit with no error line still counts as one.
    """
    warnings = [line for line in run.lines if WARNING_MARKER in line]
    errors = [line for line in run.lines if WARNING_MARKER not in line]

    if run.launch_error:
        errors.append(run.launch_error)
    elif run.return_code != 0 and not errors:
        errors.append(f"zic exited with status {run.return_code}")
    return warnings, errors


def compile_component(
    context: SessionContext,
    source: Path,
    compiled_dir: Path,
    options: InstallOptions,
) -> ComponentResult:
    """Run the compiler once over a single component file."""
    try:
        run = context.compiler.compile(source, compiled_dir, context.environ)
    except Exception as e:
        logger.exception("Compiler adapter crashed on %s", source.name)
        run = CompilerRun(return_code=-1, launch_error=f"Unexpected error when running zic: {e}")

    if options.show_compiler_log:
        for line in run.lines:
            logger.info("  [zic %s] %s", source.name, line)

    warnings, errors = classify_output(run)
    return ComponentResult(
        name=source.name,
        status="failed" if errors else "compiled",
        return_code=run.return_code,
        warnings=warnings,
        errors=errors,
        duration_ms=run.duration_ms,
    )


# ── Orchestration ───────────────────────────────────────────────


def compile_release(
    context: SessionContext,
    source_dir: Path,
    compiled_dir: Path,
    release: str,
    options: InstallOptions | None = None,
) -> CompileReport:
    """Compile every known component found in ``source_dir``.

    Args:
        context: Session holding the compiler adapter and environment.
        source_dir: Extracted release sources.
        compiled_dir: Staging directory for zic output.
        release: Release name written to the ``+VERSION`` marker.
        options: Logging and strictness knobs.

    Returns:
        CompileReport; ``report.ok`` tells whether the dataset is usable.
        A failed report leaves no staging directory behind.
    """
    options = options or InstallOptions()
    progress = logger.info if options.verbose else logger.debug
    report = CompileReport(
        release=release,
        compiled_dir=compiled_dir,
        strict=options.strict_on_error,
    )

    for name in COMPONENTS:
        progress("Compile %s", name)
        source = source_dir / name

        if not source.is_file():
            if name in OPTIONAL_COMPONENTS:
                logger.debug("Optional %s not in %s", name, release)
                report.components.append(ComponentResult(name=name, status="skipped"))
            else:
                logger.warning("  Expected %s was not in %s!", name, release)
                report.components.append(ComponentResult(name=name, status="missing"))
            continue

        result = compile_component(context, source, compiled_dir, options)
        report.components.append(result)

        if result.failed:
            for err in result.errors:
                logger.error("  [zic %s] %s", name, err)
            if options.strict_on_error:
                report.aborted = True
                logger.error(
                    "zic command didn't work as expected! Operation cancelled. "
                    "You can force the compilation by disabling strict_on_error."
                )
                break

    if report.ok:
        try:
            write_version_marker(compiled_dir, release)
        except OSError as e:
            report.error = f"Cannot write version marker: {e}"

    report.finish()

    if not report.ok:
        remove_tree(compiled_dir)
    return report
