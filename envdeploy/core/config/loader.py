"""
Settings loader — reads envdeploy.yml into a DeploySettings model.

Search order when no explicit path is given:
    1. envdeploy.yml in the working directory or any parent
    2. ~/.envdeploy.yml
    3. built-in defaults

Environment overrides (applied last):
    ENVDEPLOY_WORKSPACE_BASE   → workspace_base
    ENVDEPLOY_DOMAIN_SUFFIX    → domain_suffix
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from envdeploy.core.models.settings import DeploySettings

logger = logging.getLogger(__name__)

SETTINGS_FILE = "envdeploy.yml"
USER_SETTINGS_FILE = ".envdeploy.yml"

_ENV_OVERRIDES = {
    "ENVDEPLOY_WORKSPACE_BASE": "workspace_base",
    "ENVDEPLOY_DOMAIN_SUFFIX": "domain_suffix",
}


class ConfigError(Exception):
    """Raised when the settings file is invalid or unreadable."""


def find_settings_file(start_dir: Path | None = None) -> Path | None:
    """Locate envdeploy.yml, walking up from ``start_dir`` then trying the home dir.

    Returns:
        Path to the settings file, or None when only defaults apply.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / SETTINGS_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent

    user_file = Path.home() / USER_SETTINGS_FILE
    if user_file.is_file():
        return user_file

    return None


def load_settings(path: Path | None = None, *, search: bool = True) -> DeploySettings:
    """Load and validate deploy settings.

    Args:
        path: Explicit settings file. Must exist when given.
        search: When ``path`` is None, look for a settings file
            (otherwise go straight to defaults).

    Returns:
        Validated DeploySettings.

    Raises:
        ConfigError: If the file is missing, unreadable, or invalid.
    """
    data: dict = {}

    if path is None and search:
        path = find_settings_file()

    if path is not None:
        if not path.is_file():
            raise ConfigError(f"Settings file not found: {path}")
        data = _read_yaml(path)
        logger.debug("Loaded settings from %s", path)
    else:
        logger.debug("No %s found — using defaults", SETTINGS_FILE)

    for env_var, key in _ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            logger.debug("Override %s from %s", key, env_var)
            data[key] = value

    try:
        return DeploySettings.model_validate(data)
    except ValidationError as e:
        where = f" in {path}" if path else ""
        raise ConfigError(f"Invalid settings{where}: {e}") from e


def _read_yaml(path: Path) -> dict:
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

    # Either flat, or nested under an "envdeploy:" key
    nested = data.get("envdeploy")
    if isinstance(nested, dict):
        return dict(nested)
    return data
