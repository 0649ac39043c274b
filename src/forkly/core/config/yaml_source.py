"""YAML settings source with per-environment overrides."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic_settings import PydanticBaseSettingsSource


if TYPE_CHECKING:
    from pydantic.fields import FieldInfo


CONFIG_DIR_ENV = "FORKLY_CONFIG_DIR"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``.

    Nested mappings are merged key by key; any other value in ``override``
    replaces the one in ``base``.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class MultiYamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Merge ``config/base/*.yaml`` and ``config/environments/{APP_ENV}/*.yaml``.

    The config directory defaults to ``<project root>/config`` and can be
    pointed elsewhere with ``FORKLY_CONFIG_DIR``. Missing directories are
    skipped, so an installed package still works on code defaults alone.
    """

    def __init__(self, settings_cls: type[Any]) -> None:
        super().__init__(settings_cls)
        self._config_dir = self._find_config_dir()
        self._app_env = os.getenv("APP_ENV", "development")
        self._yaml_data: dict[str, Any] = {}
        self._load_yaml_files()

    def _find_config_dir(self) -> Path:
        override = os.getenv(CONFIG_DIR_ENV)
        if override:
            return Path(override).expanduser().resolve()
        # src/forkly/core/config/yaml_source.py -> project root
        return Path(__file__).resolve().parents[4] / "config"

    def _load_directory(self, directory: Path, merged: dict[str, Any]) -> dict[str, Any]:
        if not directory.exists():
            return merged
        for yaml_file in sorted(directory.glob("*.yaml")):
            with yaml_file.open(encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            merged = deep_merge(merged, data)
        return merged

    def _load_yaml_files(self) -> None:
        merged = self._load_directory(self._config_dir / "base", {})
        merged = self._load_directory(
            self._config_dir / "environments" / self._app_env, merged
        )
        self._yaml_data = merged

    def get_field_value(
        self,
        _field: FieldInfo,
        field_name: str,
    ) -> tuple[Any, str, bool]:
        value = self._yaml_data.get(field_name)
        return value, field_name, isinstance(value, (dict, list))

    def __call__(self) -> dict[str, Any]:
        return self._yaml_data
