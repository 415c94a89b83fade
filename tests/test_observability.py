"""
Tests for observability — logging setup.
"""

import logging
from pathlib import Path

import pytest

from tzupdater.core.observability.logging_config import (
    _parse_level,
    resolve_level,
    setup_logging,
)


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestParseLevel:
    @pytest.mark.parametrize(
        "name,expected",
        [("debug", logging.DEBUG), ("INFO", logging.INFO), ("Error", logging.ERROR)],
    )
    def test_names(self, name, expected):
        assert _parse_level(name) == expected

    @pytest.mark.parametrize("name", [None, "", "LOUD", "handlers"])
    def test_fallback_to_warning(self, name):
        assert _parse_level(name) == logging.WARNING


class TestResolveLevel:
    def test_flags_win_over_env(self):
        env = {"TZU_LOG_LEVEL": "ERROR"}
        assert resolve_level(debug=True, verbose=True, environ=env) == "DEBUG"
        assert resolve_level(verbose=True, quiet=True, environ=env) == "INFO"
        assert resolve_level(quiet=True) == "ERROR"

    def test_env_then_default(self):
        assert resolve_level(environ={"TZU_LOG_LEVEL": "info"}) == "info"
        assert resolve_level(environ={"TZU_LOG_LEVEL": ""}) == "WARNING"
        assert resolve_level() == "WARNING"


class TestSetupLogging:
    def test_single_console_handler(self):
        setup_logging("INFO")
        setup_logging("INFO")
        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.level == logging.INFO

    def test_debug_format_includes_location(self):
        setup_logging("DEBUG")
        fmt = logging.getLogger().handlers[0].formatter._fmt
        assert "%(lineno)d" in fmt

    def test_warning_format_is_bare(self):
        setup_logging("WARNING")
        assert logging.getLogger().handlers[0].formatter._fmt == "%(message)s"

    def test_file_handler(self, tmp_path: Path):
        log_file = tmp_path / "tzupdater.log"
        setup_logging("WARNING", log_file=str(log_file), log_file_level="DEBUG")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 2

        logging.getLogger("tzupdater.test").debug("Compile europe")
        for handler in root.handlers:
            handler.flush()
        assert "Compile europe" in log_file.read_text(encoding="utf-8")

    def test_file_parent_created(self, tmp_path: Path):
        log_file = tmp_path / "logs" / "nested" / "tz.log"
        setup_logging("WARNING", log_file=str(log_file))
        assert log_file.parent.is_dir()

    def test_file_level_defaults_to_console(self, tmp_path: Path):
        setup_logging("ERROR", log_file=str(tmp_path / "x.log"))
        file_handler = logging.getLogger().handlers[1]
        assert file_handler.level == logging.ERROR
