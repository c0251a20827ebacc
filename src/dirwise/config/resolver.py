"""Layering of configuration sources into a validated ``DirwiseConfig``."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterable

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import DirwiseConfig

ENV_PREFIX = "DIRWISE__"


def setting_items(config: DirwiseConfig) -> list[tuple[str, Any]]:
    """Return ``(dotted key, value)`` pairs for every setting, in model order."""
    items: list[tuple[str, Any]] = []
    for section, values in config.model_dump(mode="json").items():
        for name, value in values.items():
            items.append((f"{section}.{name}", value))
    return items


def known_keys() -> list[str]:
    return [key for key, _ in setting_items(DirwiseConfig())]


def require_known_key(key: str) -> str:
    """Normalize ``key`` and reject anything that is not a setting.

    Raises:
        ConfigError: If ``key`` does not name a setting such as ``search.max_depth``.
    """
    normalized = ".".join(segment.strip().lower() for segment in key.split(".") if segment.strip())
    if normalized not in known_keys():
        raise ConfigError(
            f"Unknown setting '{key}'. Known settings: {', '.join(known_keys())}."
        )
    return normalized


def dotted_to_nested(values: Mapping[str, Any]) -> dict[str, Any]:
    """Expand ``{"search.max_depth": 3}`` style keys into nested mappings.

    Nested mappings are accepted too, so file data and command-line
    assignments can go through the same path.

    Raises:
        ConfigError: If a key is empty or two keys disagree about nesting.
    """
    nested: dict[str, Any] = {}
    for key, value in values.items():
        segments = [segment for segment in str(key).split(".") if segment]
        if not segments:
            raise ConfigError(f"Empty configuration key: {key!r}")
        if isinstance(value, Mapping):
            value = dotted_to_nested(value)

        node = nested
        for segment in segments[:-1]:
            child = node.setdefault(segment, {})
            if not isinstance(child, dict):
                raise ConfigError(f"'{key}' conflicts with the value already set for '{segment}'.")
            node = child
        leaf = segments[-1]
        if isinstance(value, dict) and isinstance(node.get(leaf), dict):
            node[leaf] = merge_layers(node[leaf], value)
        else:
            node[leaf] = value
    return nested


def env_layer(environ: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``DIRWISE__SECTION__KEY`` variables; values are parsed as YAML scalars."""
    dotted: dict[str, Any] = {}
    for name, raw in environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        key = ".".join(part.lower() for part in name[len(ENV_PREFIX) :].split("__") if part)
        if key:
            dotted[key] = parse_scalar(raw)
    return dotted_to_nested(dotted)


def parse_scalar(raw: str) -> Any:
    """Interpret ``raw`` the way it would read in the YAML file (``true``, ``3``, ``1.5``)."""
    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw


def merge_layers(*layers: Mapping[str, Any]) -> dict[str, Any]:
    """Merge nested mappings; later layers win key by key."""
    merged: dict[str, Any] = {}
    for layer in layers:
        for key, value in layer.items():
            current = merged.get(key)
            if isinstance(value, Mapping):
                merged[key] = merge_layers(current if isinstance(current, dict) else {}, value)
            else:
                merged[key] = value
    return merged


def build_config(*layers: Mapping[str, Any]) -> DirwiseConfig:
    """Validate ``layers``, applied in order on top of the defaults.

    Raises:
        ConfigError: With one ``section.key: problem`` entry per invalid value.
    """
    try:
        return DirwiseConfig.model_validate(merge_layers(*layers))
    except ValidationError as exc:
        raise ConfigError(describe_validation_error(exc)) from exc


def describe_validation_error(exc: ValidationError) -> str:
    problems = [
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    ]
    return "Invalid configuration: " + "; ".join(problems)


def contains_key(layer: Mapping[str, Any], dotted_key: str) -> bool:
    node: Any = layer
    for segment in dotted_key.split("."):
        if not isinstance(node, Mapping) or segment not in node:
            return False
        node = node[segment]
    return True


def source_of(dotted_key: str, layers: Iterable[tuple[str, Mapping[str, Any]]]) -> str:
    """Return the name of the last layer that sets ``dotted_key``, or ``default``."""
    source = "default"
    for name, layer in layers:
        if contains_key(layer, dotted_key):
            source = name
    return source


__all__ = [
    "ENV_PREFIX",
    "build_config",
    "contains_key",
    "describe_validation_error",
    "dotted_to_nested",
    "env_layer",
    "known_keys",
    "merge_layers",
    "parse_scalar",
    "require_known_key",
    "setting_items",
    "source_of",
]
