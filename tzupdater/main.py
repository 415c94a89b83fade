"""
tzupdater — CLI entrypoint.

Usage:
    python -m tzupdater.main --help
    python -m tzupdater.main install 2024a
    python -m tzupdater.main install-latest
    eval "$(python -m tzupdater.main install-latest --print-env)"
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from tzupdater import __version__
from tzupdater.core.context import TZDIR_ENV, SessionContext
from tzupdater.core.observability.logging_config import (
    FILE_ENV,
    FILE_LEVEL_ENV,
    resolve_level,
    setup_logging,
)


@click.group()
@click.version_option(version=__version__, prog_name="tzupdater")
@click.option("--verbose", "-v", is_flag=True, help="Show per-component progress.")
@click.option("--quiet", "-q", is_flag=True, help="Only report errors.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to tzupdater.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """tzupdater — install IANA Time Zone Database releases."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose or debug
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None
    ctx.obj.setdefault("session_factory", SessionContext.from_environ)

    setup_logging(
        level=resolve_level(debug, verbose, quiet, os.environ),
        log_file=os.environ.get(FILE_ENV),
        log_file_level=os.environ.get(FILE_LEVEL_ENV),
    )


def _session(
    ctx: click.Context,
    zic_path: str | None = None,
    target_folder: str | None = None,
) -> SessionContext:
    """Load settings, apply command-line overrides and open a session."""
    from tzupdater.core.config.loader import ConfigError, load_settings

    try:
        settings = load_settings(ctx.obj.get("config_path"))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    updates: dict = {}
    if zic_path:
        updates["zic_path"] = Path(zic_path)
    if target_folder:
        updates["target_folder"] = Path(target_folder)
    if updates:
        settings = settings.model_copy(update=updates)

    return ctx.obj["session_factory"](settings=settings)


def _report(ctx: click.Context, result, as_json: bool, print_env: bool) -> None:
    """Render an InstallResult and exit 1 on failure."""
    from tzupdater.core.use_cases.install import PipelineState

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    if print_env:
        if result.ok and result.compiled_path is not None:
            click.echo(f"export {TZDIR_ENV}={result.compiled_path}")
        sys.exit(0 if result.ok else 1)

    quiet = ctx.obj.get("quiet", False)

    if not result.ok:
        click.secho(f"❌ {result.error}", fg="red")
        if result.report and result.report.failed_components:
            for comp in result.report.failed_components:
                click.echo(f"   • {comp.name}: {comp.errors[0] if comp.errors else 'failed'}")
        sys.exit(1)

    if quiet:
        return

    if result.state is PipelineState.UP_TO_DATE:
        click.secho(f"✅ Local tz database {result.active_version} is up to date", fg="green")
        return

    label = "reused" if result.reused else "installed"
    click.secho(f"✅ tz database {result.release} {label}", fg="green", bold=True)
    click.echo(f"   📦 {result.compiled_path}")
    if result.report:
        click.echo(
            f"   Components: {result.report.compiled_count} compiled"
            f", {len(result.report.failed_components)} failed"
        )
    if result.activated:
        click.echo(f"   Active tz db: {result.active_version}")


@cli.command()
@click.argument("version")
@click.option("--zic-path", default=None, help="Directory containing zic (prepended to PATH).")
@click.option("--target-folder", default=None, help="Where archives and builds are kept.")
@click.option("--show-zic-log", is_flag=True, help="Log everything zic prints.")
@click.option(
    "--err-stop/--no-err-stop",
    default=True,
    help="Stop at the first component zic rejects (default) or keep going.",
)
@click.option("--no-activate", is_flag=True, help="Compile only, don't switch TZDIR.")
@click.option("--fail-if-zic-missing", is_flag=True, help="Abort hard when zic is missing.")
@click.option("--print-env", is_flag=True, help="Print an export line for eval.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def install(
    ctx: click.Context,
    version: str,
    zic_path: str | None,
    target_folder: str | None,
    show_zic_log: bool,
    err_stop: bool,
    no_activate: bool,
    fail_if_zic_missing: bool,
    print_env: bool,
    as_json: bool,
) -> None:
    """Download, compile and activate a given tz database release.

    Examples:

        tzupdater install 2024a

        tzupdater install 2019c --no-err-stop --show-zic-log
    """
    from tzupdater.core.models.outcome import InstallOptions
    from tzupdater.core.use_cases.install import ToolMissingError, install_version

    session = _session(ctx, zic_path, target_folder)
    options = InstallOptions(
        show_compiler_log=show_zic_log,
        strict_on_error=err_stop,
        verbose=ctx.obj["verbose"],
        activate=not no_activate,
        fail_if_tool_missing=fail_if_zic_missing,
    )

    try:
        result = install_version(session, version, options)
    except ToolMissingError as e:
        click.secho(f"❌ {e} Installation stopped!", fg="red")
        sys.exit(1)

    _report(ctx, result, as_json, print_env)


@cli.command("install-latest")
@click.option("--zic-path", default=None, help="Directory containing zic (prepended to PATH).")
@click.option("--target-folder", default=None, help="Where archives and builds are kept.")
@click.option("--print-env", is_flag=True, help="Print an export line for eval.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def install_latest_cmd(
    ctx: click.Context,
    zic_path: str | None,
    target_folder: str | None,
    print_env: bool,
    as_json: bool,
) -> None:
    """Install the latest published release if the active one is older."""
    from tzupdater.core.models.outcome import InstallOptions
    from tzupdater.core.use_cases.install import install_latest

    session = _session(ctx, zic_path, target_folder)
    result = install_latest(session, InstallOptions(verbose=ctx.obj["verbose"]))
    _report(ctx, result, as_json, print_env)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def active(ctx: click.Context, as_json: bool) -> None:
    """Show the active tz database (from an inherited TZDIR)."""
    from tzupdater.core.use_cases.install import get_active_version

    session = _session(ctx)
    version = get_active_version(session)

    if as_json:
        path = str(session.active_path) if session.active_path else None
        click.echo(json.dumps({"active_version": version, "path": path}, indent=2))
        return
    click.echo(version)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def latest(ctx: click.Context, as_json: bool) -> None:
    """Show the latest release published on the IANA website."""
    from tzupdater.core.models.release import UNKNOWN_RELEASE
    from tzupdater.core.use_cases.install import get_latest_published_version

    session = _session(ctx)
    version = get_latest_published_version(session)

    if as_json:
        click.echo(json.dumps({"latest_version": version}, indent=2))
    else:
        click.echo(version)
    if version == UNKNOWN_RELEASE:
        sys.exit(1)


if __name__ == "__main__":
    cli()
