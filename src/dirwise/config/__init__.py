"""Configuration management for dirwise."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import (
    CLIOptions,
    DirwiseConfig,
    LoggingSettings,
    OrganizationSettings,
    SearchSettings,
)
from .resolver import (
    ENV_PREFIX,
    build_config,
    contains_key,
    dotted_to_nested,
    env_layer,
    require_known_key,
    setting_items,
    source_of,
)

DEFAULT_CONFIG_PATH = Path("~/.dirwise/config.yaml")

_HEADER = (
    "# dirwise settings. Keys left out use their defaults.\n"
    "# DIRWISE__SECTION__KEY environment variables and `dirwise --set` override this file.\n"
)


class ConfigManager:
    """Read, layer, and persist the dirwise YAML settings file.

    Layers apply in this order: defaults, the file, ``DIRWISE__`` environment
    variables, then per-invocation overrides.

    Args:
        config_path: Location of the YAML file; defaults to ``~/.dirwise/config.yaml``.
        env: Environment mapping consulted for ``DIRWISE__`` variables.
    """

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = env if env is not None else os.environ

    @property
    def config_path(self) -> Path:
        return self._config_path

    def load(
        self,
        *,
        overrides: Mapping[str, Any] | None = None,
        use_env: bool = True,
    ) -> DirwiseConfig:
        """Return the effective configuration.

        Args:
            overrides: Per-invocation values keyed by dotted names such as
                ``search.max_depth``.
            use_env: Whether ``DIRWISE__`` environment variables apply.

        Raises:
            ConfigError: If the file is malformed or a value is invalid.
        """
        return build_config(*(layer for _, layer in self._layers(overrides, use_env)))

    def explain(
        self,
        *,
        overrides: Mapping[str, Any] | None = None,
        use_env: bool = True,
    ) -> list[tuple[str, Any, str]]:
        """Return ``(key, value, source)`` for every setting.

        ``source`` is one of ``default``, ``file``, ``environment`` or ``cli``.
        """
        layers = self._layers(overrides, use_env)
        config = build_config(*(layer for _, layer in layers))
        return [(key, value, source_of(key, layers)) for key, value in setting_items(config)]

    def ensure_exists(self) -> Path:
        """Write an empty settings file (defaults only) if none exists yet."""
        if not self._config_path.exists():
            self._write({})
        return self._config_path

    def read_file(self) -> dict[str, Any]:
        """Return the values stored in the file, nested by section.

        Raises:
            ConfigError: If the file is not YAML or not a mapping.
        """
        if not self._config_path.exists():
            return {}
        try:
            data = yaml.safe_load(self._config_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ConfigError(f"{self._config_path} is not valid YAML: {exc}") from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"{self._config_path} must hold a mapping of sections.")
        return dotted_to_nested(data)

    def read_text(self) -> str:
        if not self._config_path.exists():
            return ""
        return self._config_path.read_text(encoding="utf-8")

    def set_value(self, key: str, value: Any) -> tuple[Any, Any]:
        """Store ``value`` for ``key`` in the file.

        The file is only rewritten when the effective file value changes.

        Returns:
            tuple: The value before and after, ignoring environment and overrides.

        Raises:
            ConfigError: If ``key`` is unknown or ``value`` is out of range.
        """
        name = require_known_key(key)
        data = self.read_file()
        before = dict(setting_items(build_config(data)))[name]

        section, setting = name.split(".", 1)
        updated = {**data, section: {**data.get(section, {}), setting: value}}
        after = dict(setting_items(build_config(updated)))[name]

        if after != before:
            self._write(updated)
        return before, after

    def reset_value(self, key: str) -> bool:
        """Drop ``key`` from the file so its default applies again.

        Returns:
            bool: False when the file did not set ``key``.
        """
        name = require_known_key(key)
        data = self.read_file()
        if not contains_key(data, name):
            return False
        section, setting = name.split(".", 1)
        remaining = {k: v for k, v in data[section].items() if k != setting}
        updated = {k: v for k, v in data.items() if k != section}
        if remaining:
            updated[section] = remaining
        self._write(updated)
        return True

    def replace_text(self, text: str) -> None:
        """Replace the file with ``text`` after checking that it parses and validates.

        Raises:
            ConfigError: If ``text`` is not a valid settings document.
        """
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Edited settings are not valid YAML: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError("Edited settings must be a mapping of sections.")
        nested = dotted_to_nested(data)
        build_config(nested)
        self._write(nested)

    def _layers(
        self, overrides: Mapping[str, Any] | None, use_env: bool
    ) -> list[tuple[str, dict[str, Any]]]:
        layers = [("file", self.read_file())]
        if use_env:
            layers.append(("environment", env_layer(self._env)))
        if overrides:
            layers.append(("cli", dotted_to_nested(overrides)))
        return layers

    def _write(self, data: Mapping[str, Any]) -> None:
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        body = yaml.safe_dump(dict(data), sort_keys=True) if data else ""
        self._config_path.write_text(f"{_HEADER}# Last updated: {stamp}\n{body}", encoding="utf-8")


__all__ = [
    "CLIOptions",
    "ConfigError",
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "DirwiseConfig",
    "ENV_PREFIX",
    "LoggingSettings",
    "OrganizationSettings",
    "SearchSettings",
    "build_config",
]
