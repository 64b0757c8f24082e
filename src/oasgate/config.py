"""Configuration management with XDG paths and precedence resolution.

This module handles all persistent configuration for oasgate:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.oasgate/`` on macOS and Windows. See :func:`get_config_dir`,
  :func:`get_cache_dir`, :func:`get_data_dir`.
* **Global config** -- A single :class:`~oasgate.models.GlobalConfig`
  JSON file storing defaults (validation level, output format, remote
  reference loading, cache settings, exclusions).
* **Project config** -- ``./oasgate.json``, merged key by key over the
  global config.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config, and global config into the
  final effective configuration.
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from oasgate.exceptions import ConfigError
from oasgate.models import GlobalConfig

_APP_NAME = "oasgate"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "oasgate.json"

ENV_LEVEL = "OASGATE_LEVEL"
ENV_REMOTE_REFS = "OASGATE_REMOTE_REFS"
ENV_REMOTE_TIMEOUT = "OASGATE_REMOTE_TIMEOUT"

_FALSE_VALUES = {"0", "false", "no", "off"}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    return Path.home().joinpath(*default_segments)


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/oasgate/`` (default ``~/.config/oasgate/``).
    On macOS/Windows: ``~/.oasgate/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_cache_dir() -> Path:
    """Return the cache directory for fetched remote references, creating it if necessary.

    On Linux/BSD: ``$XDG_CACHE_HOME/oasgate/`` (default ``~/.cache/oasgate/``).
    On macOS/Windows: ``~/.oasgate/cache/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CACHE_HOME", (".cache",)) / _APP_NAME
    else:
        path = _fallback_base_dir() / "cache"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/oasgate/`` (default ``~/.local/share/oasgate/``).
    On macOS/Windows: ``~/.oasgate/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Config files ---


def _read_json(path: Path, what: str) -> Optional[dict[str, Any]]:
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Invalid {what} at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {what} at {path}: expected a JSON object")
    return data


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~oasgate.models.GlobalConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = get_config_dir() / _CONFIG_FILENAME
    data = _read_json(path, "global config")
    if data is None:
        return GlobalConfig()
    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./oasgate.json``.

    Returns:
        The parsed JSON as a dict, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    return _read_json(Path.cwd() / _PROJECT_CONFIG_FILENAME, "project config")


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    level = os.environ.get(ENV_LEVEL)
    if level:
        overrides["validation_level"] = level
    remote = os.environ.get(ENV_REMOTE_REFS)
    if remote:
        overrides.setdefault("remote_refs", {})["enabled"] = (
            remote.strip().lower() not in _FALSE_VALUES
        )
    timeout = os.environ.get(ENV_REMOTE_TIMEOUT)
    if timeout:
        overrides.setdefault("remote_refs", {})["timeout"] = timeout
    return overrides


# --- Precedence resolution ---


def resolve_config(
    cli_level: Optional[int] = None,
    cli_format: Optional[str] = None,
    cli_remote_refs: Optional[bool] = None,
    cli_exclude: Optional[list[str]] = None,
) -> GlobalConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI arguments and flags
        2. Environment variables (``OASGATE_LEVEL``, ``OASGATE_REMOTE_REFS``,
           ``OASGATE_REMOTE_TIMEOUT``)
        3. Project config (``./oasgate.json``)
        4. User config (``~/.config/oasgate/config.json``)
        5. Defaults

    CLI ``--exclude`` patterns are appended to the configured ones rather
    than replacing them.

    Raises:
        ConfigError: If any layer holds an invalid value.
    """
    data = load_global_config().model_dump(mode="json")

    project = load_project_config()
    if project is not None:
        data = _merge(data, project)

    data = _merge(data, _env_overrides())

    if cli_level is not None:
        data["validation_level"] = cli_level
    if cli_format is not None:
        data["output"]["format"] = cli_format
    if cli_remote_refs is not None:
        data["remote_refs"]["enabled"] = cli_remote_refs
    if cli_exclude:
        data["exclude"] = list(data.get("exclude") or []) + list(cli_exclude)

    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
