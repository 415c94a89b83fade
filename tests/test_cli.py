"""
Tests for CLI commands — install, install-latest, active, latest and global options.
"""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from tzupdater.core.context import SessionContext
from tzupdater.main import cli


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: Path, monkeypatch):
    """No stray tzupdater.yml or TZU_* variables leak into the tests."""
    monkeypatch.chdir(tmp_path)
    for var in ("TZU_TARGET_FOLDER", "TZU_ZIC_PATH", "TZU_LOG_FILE"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def obj(settings, transport, compiler, environ) -> dict:
    """Click ``obj`` whose session factory wires in the mock adapters."""
    target = settings.target_folder

    def factory(settings):
        return SessionContext.from_environ(
            settings=settings.model_copy(update={"target_folder": target}),
            transport=transport,
            compiler=compiler,
            environ=environ,
        )

    return {"session_factory": factory}


def run(args, obj):
    return CliRunner().invoke(cli, args, obj=obj)


class TestCLIGlobal:
    def test_help(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "install-latest" in result.output

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_missing_config_file(self, obj, tmp_path: Path):
        result = run(["--config", str(tmp_path / "missing.yml"), "latest"], obj)
        assert result.exit_code == 1
        assert "not found" in result.output


class TestInstallCommand:
    def test_install(self, obj, environ, settings):
        result = run(["install", "2024a"], obj)
        assert result.exit_code == 0
        assert "tz database 2024a installed" in result.output
        assert "Active tz db: 2024a" in result.output
        assert environ["TZDIR"] == str(settings.target_folder / "2024a" / "compiled")

    def test_install_twice_reuses(self, obj, transport):
        run(["install", "2024a"], obj)
        transport.reset()
        result = run(["install", "2024a"], obj)
        assert result.exit_code == 0
        assert "reused" in result.output
        assert transport.call_count == 0

    def test_install_json(self, obj):
        result = run(["install", "2024a", "--json"], obj)
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["ok"] is True
        assert data["active_version"] == "2024a"

    def test_install_print_env(self, obj, settings):
        result = run(["install", "2024a", "--print-env"], obj)
        assert result.exit_code == 0
        compiled = settings.target_folder / "2024a" / "compiled"
        assert result.stdout.strip() == f"export TZDIR={compiled}"

    def test_install_no_activate(self, obj, environ):
        result = run(["install", "2024a", "--no-activate"], obj)
        assert result.exit_code == 0
        assert "TZDIR" not in environ

    def test_release_not_found(self, obj):
        result = run(["install", "2022b"], obj)
        assert result.exit_code == 1
        assert "❌" in result.output

    def test_release_not_found_json(self, obj):
        result = run(["install", "2022b", "--json"], obj)
        assert result.exit_code == 1
        assert json.loads(result.stdout)["error_kind"] == "release_not_found"

    def test_compile_failure_lists_components(self, obj, compiler):
        compiler.set_failure("europe", "europe:12: invalid rule")
        result = run(["install", "2024a"], obj)
        assert result.exit_code == 1
        assert "europe: europe:12: invalid rule" in result.output

    def test_no_err_stop_tolerates_optional(self, obj, compiler):
        compiler.set_failure("backward")
        result = run(["install", "2024a", "--no-err-stop"], obj)
        assert result.exit_code == 0
        assert "1 failed" in result.output

    def test_zic_missing(self, obj, compiler):
        compiler._available = False
        result = run(["install", "2024a"], obj)
        assert result.exit_code == 1
        assert "zic cannot be found" in result.output

    def test_fail_if_zic_missing(self, obj, compiler):
        compiler._available = False
        result = run(["install", "2024a", "--fail-if-zic-missing"], obj)
        assert result.exit_code == 1
        assert "Installation stopped!" in result.output


class TestInstallLatestCommand:
    def test_installs_then_up_to_date(self, obj, compiler):
        first = run(["install-latest"], obj)
        assert first.exit_code == 0
        assert "2024a installed" in first.output

        compiler.reset()
        second = run(["install-latest"], obj)
        assert second.exit_code == 0
        assert "2024a is up to date" in second.output
        assert compiler.call_count == 0

    def test_unresolvable(self, obj, transport, settings):
        transport.set_page(settings.iana_website, "<html></html>")
        result = run(["install-latest", "--json"], obj)
        assert result.exit_code == 1
        assert json.loads(result.stdout)["error_kind"] == "version_unresolvable"


class TestInfoCommands:
    def test_latest(self, obj):
        result = run(["latest"], obj)
        assert result.exit_code == 0
        assert result.stdout.strip() == "2024a"

    def test_latest_unknown(self, obj, transport, settings):
        transport.set_failure(settings.iana_website, status="unreachable", error="DNS")
        result = run(["latest", "--json"], obj)
        assert result.exit_code == 1
        assert json.loads(result.stdout) == {"latest_version": "Unknown"}

    def test_active_none(self, obj):
        result = run(["active"], obj)
        assert result.exit_code == 0
        assert result.stdout.strip() == "-----"

    def test_active_after_install(self, obj, settings):
        run(["install", "2023c"], obj)
        result = run(["active", "--json"], obj)
        data = json.loads(result.stdout)
        assert data["active_version"] == "2023c"
        assert data["path"] == str(settings.target_folder / "2023c" / "compiled")
