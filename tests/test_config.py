"""Tests for oasgate.config -- XDG paths, config files, precedence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from oasgate.config import (
    get_cache_dir,
    get_config_dir,
    get_data_dir,
    load_global_config,
    load_project_config,
    resolve_config,
)
from oasgate.exceptions import ConfigError
from oasgate.models import GlobalConfig


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_json(path: Path, data: Any) -> None:
    """Write *data* as JSON to *path*, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def _global_config_path(root: Path) -> Path:
    return root / "config" / "oasgate" / "config.json"


# ---------------------------------------------------------------------------
# XDG path resolution
# ---------------------------------------------------------------------------


class TestXDGPaths:
    def test_config_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("oasgate.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_config_dir()
        assert result == tmp_path / ".config" / "oasgate"
        assert result.is_dir()

    def test_config_dir_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        custom = tmp_path / "custom_config"
        monkeypatch.setattr("oasgate.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(custom))

        assert get_config_dir() == custom / "oasgate"

    def test_cache_dir_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        custom = tmp_path / "custom_cache"
        monkeypatch.setattr("oasgate.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_CACHE_HOME", str(custom))

        result = get_cache_dir()
        assert result == custom / "oasgate"
        assert result.is_dir()

    def test_data_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("oasgate.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_DATA_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_data_dir() == tmp_path / ".local" / "share" / "oasgate"

    def test_fallback_paths(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("oasgate.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_config_dir() == tmp_path / ".oasgate"
        assert get_cache_dir() == tmp_path / ".oasgate" / "cache"
        assert get_data_dir() == tmp_path / ".oasgate" / "logs"


# ---------------------------------------------------------------------------
# Config files
# ---------------------------------------------------------------------------


class TestGlobalConfig:
    def test_defaults_when_missing(self, isolated_config: Path) -> None:
        assert load_global_config() == GlobalConfig()

    def test_loads_file(self, isolated_config: Path) -> None:
        _write_json(
            _global_config_path(isolated_config),
            {"validation_level": 1, "output": {"format": "plain"}},
        )
        config = load_global_config()
        assert config.validation_level == 1
        assert config.output.format == "plain"

    def test_invalid_json(self, isolated_config: Path) -> None:
        path = _global_config_path(isolated_config)
        path.parent.mkdir(parents=True)
        path.write_text("{nope", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()

    def test_invalid_values(self, isolated_config: Path) -> None:
        _write_json(_global_config_path(isolated_config), {"validation_level": 7})
        with pytest.raises(ConfigError):
            load_global_config()

    def test_non_object(self, isolated_config: Path) -> None:
        _write_json(_global_config_path(isolated_config), [1, 2])
        with pytest.raises(ConfigError, match="expected a JSON object"):
            load_global_config()


class TestProjectConfig:
    def test_missing(self, isolated_config: Path) -> None:
        assert load_project_config() is None

    def test_loads_from_cwd(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "oasgate.json", {"exclude": ["drafts/"]})
        assert load_project_config() == {"exclude": ["drafts/"]}


# ---------------------------------------------------------------------------
# Precedence resolution
# ---------------------------------------------------------------------------


class TestResolveConfig:
    def test_defaults(self, isolated_config: Path) -> None:
        config = resolve_config()
        assert config.validation_level == 2
        assert config.output.format == "auto"
        assert config.remote_refs.enabled is True
        assert config.exclude == []

    def test_project_overrides_global(self, isolated_config: Path) -> None:
        _write_json(
            _global_config_path(isolated_config),
            {"validation_level": 0, "remote_refs": {"enabled": True, "timeout": 5}},
        )
        _write_json(isolated_config / "oasgate.json", {"validation_level": 1, "remote_refs": {"enabled": False}})

        config = resolve_config()
        assert config.validation_level == 1
        assert config.remote_refs.enabled is False
        assert config.remote_refs.timeout == 5

    def test_env_overrides_project(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _write_json(isolated_config / "oasgate.json", {"validation_level": 1})
        monkeypatch.setenv("OASGATE_LEVEL", "0")
        monkeypatch.setenv("OASGATE_REMOTE_TIMEOUT", "2.5")

        config = resolve_config()
        assert config.validation_level == 0
        assert config.remote_refs.timeout == 2.5

    @pytest.mark.parametrize("value, enabled", [("off", False), ("FALSE", False), ("1", True)])
    def test_env_remote_refs(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch, value: str, enabled: bool
    ) -> None:
        monkeypatch.setenv("OASGATE_REMOTE_REFS", value)
        assert resolve_config().remote_refs.enabled is enabled

    def test_cli_overrides_env(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OASGATE_LEVEL", "0")
        monkeypatch.setenv("OASGATE_REMOTE_REFS", "yes")

        config = resolve_config(cli_level=2, cli_format="json", cli_remote_refs=False)
        assert config.validation_level == 2
        assert config.output.format == "json"
        assert config.remote_refs.enabled is False

    def test_cli_exclude_appends(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "oasgate.json", {"exclude": ["drafts/"]})
        config = resolve_config(cli_exclude=["*.md"])
        assert config.exclude == ["drafts/", "*.md"]

    def test_invalid_env_level(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OASGATE_LEVEL", "3")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            resolve_config()

    def test_invalid_format(self, isolated_config: Path) -> None:
        with pytest.raises(ConfigError):
            resolve_config(cli_format="xml")
