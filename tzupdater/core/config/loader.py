"""
Configuration loader — reads tzupdater.yml into Settings.

Reads YAML, validates against the Pydantic model, and applies
environment overrides. A missing config file is not an error:
every setting has a default.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml

from tzupdater.core.models.settings import Settings

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "tzupdater.yml"

# Environment variable → settings field
_ENV_OVERRIDES = {
    "TZU_TARGET_FOLDER": "target_folder",
    "TZU_ZIC_PATH": "zic_path",
}


class ConfigError(Exception):
    """Raised when the configuration is invalid or unreadable."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for tzupdater.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to tzupdater.yml, or None if not found.
    """
    start = (start_dir or Path.cwd()).resolve()
    for directory in (start, *start.parents):
        candidate = directory / CONFIG_FILE
        if candidate.is_file():
            return candidate
    return None


def load_settings(
    path: Path | None = None,
    environ: dict[str, str] | None = None,
) -> Settings:
    """Load and validate settings.

    Args:
        path: Explicit path to tzupdater.yml. If None, searches upward;
            when nothing is found the defaults are used.
        environ: Environment to read overrides from (default: os.environ).

    Returns:
        Validated Settings model.

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid.
    """
    explicit = path is not None
    if path is None:
        path = find_config_file()

    data: dict = {}
    if path is not None:
        if not path.is_file():
            if explicit:
                raise ConfigError(f"Config file not found: {path}")
        else:
            data = _read_yaml(path)

    env = os.environ if environ is None else environ
    for var, field in _ENV_OVERRIDES.items():
        if env.get(var):
            data[field] = env[var]

    try:
        settings = Settings.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Invalid tzupdater configuration: {e}") from e

    logger.debug("Target folder: %s", settings.target_folder)
    return settings


def _read_yaml(path: Path) -> dict:
    logger.debug("Loading config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # Settings may sit under a "tzupdater" key or at the top level
    section = data.get("tzupdater", data)
    if not isinstance(section, dict):
        raise ConfigError(f"Expected a mapping under 'tzupdater' in {path}")
    return dict(section)
