"""Merging of default, file, environment and CLI configuration layers."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import ThumbsniffConfig

ENV_PREFIX = "THUMBSNIFF__"


def resolve_with_precedence(
    *,
    defaults: ThumbsniffConfig,
    file_overrides: Optional[Mapping[str, Any]] = None,
    env_overrides: Optional[Mapping[str, Any]] = None,
    cli_overrides: Optional[Mapping[str, Any]] = None,
) -> ThumbsniffConfig:
    """Layer overrides on top of defaults; later layers win.

    Keys may be nested mappings or dotted paths such as ``processing.thumb_width``.

    Raises:
        ConfigError: If a layer is malformed or the result fails validation.
    """
    merged = defaults.model_dump(mode="python")
    layers = (("file", file_overrides), ("environment", env_overrides), ("cli", cli_overrides))
    for name, layer in layers:
        if layer is None:
            continue
        merged = merge_mappings(merged, expand_dotted(layer, source_name=name))

    try:
        return ThumbsniffConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def env_overrides_from(env: Mapping[str, str]) -> Dict[str, Any]:
    """Collect ``THUMBSNIFF__SECTION__KEY`` variables into a nested mapping.

    Values are parsed as YAML scalars so ``"true"`` and ``"64"`` keep their types.
    """
    overrides: Dict[str, Any] = {}
    for key, raw_value in env.items():
        if not key.startswith(ENV_PREFIX):
            continue
        segments = [part.lower() for part in key[len(ENV_PREFIX) :].split("__") if part]
        if not segments:
            continue
        try:
            value = yaml.safe_load(raw_value)
        except yaml.YAMLError:
            value = raw_value
        node = overrides
        for segment in segments[:-1]:
            node = node.setdefault(segment, {})
            if not isinstance(node, dict):
                raise ConfigError(f"Environment variable {key} conflicts with another override.")
        node[segments[-1]] = value
    return overrides


def flatten_for_env(config: ThumbsniffConfig) -> Dict[str, str]:
    """Render the config as ``THUMBSNIFF__SECTION__KEY`` environment variables."""
    flat: Dict[str, str] = {}

    def _walk(path: list[str], value: Any) -> None:
        if isinstance(value, dict):
            for key, child in value.items():
                _walk(path + [str(key)], child)
            return
        name = ENV_PREFIX + "__".join(part.upper() for part in path)
        if isinstance(value, list):
            flat[name] = yaml.safe_dump(value, default_flow_style=True).strip()
        elif value is None:
            flat[name] = "null"
        else:
            flat[name] = str(value)

    _walk([], config.model_dump(mode="python"))
    return flat


def expand_dotted(source: Mapping[str, Any], *, source_name: str) -> Dict[str, Any]:
    """Turn ``{"a.b": 1}`` into ``{"a": {"b": 1}}``, recursing into nested mappings."""
    if not isinstance(source, MappingABC):
        raise ConfigError(f"{source_name.capitalize()} overrides must be a mapping.")

    expanded: Dict[str, Any] = {}
    for key, value in source.items():
        if not isinstance(key, str):
            raise ConfigError(f"{source_name.capitalize()} override keys must be strings.")
        if isinstance(value, MappingABC):
            value = expand_dotted(value, source_name=source_name)
        *parents, leaf = key.split(".")
        node = expanded
        for segment in parents:
            child = node.setdefault(segment, {})
            if not isinstance(child, dict):
                raise ConfigError(
                    f"{source_name.capitalize()} override for {key} conflicts with existing value."
                )
            node = child
        if isinstance(value, dict) and isinstance(node.get(leaf), dict):
            node[leaf] = merge_mappings(node[leaf], value)
        else:
            node[leaf] = value
    return expanded


def merge_mappings(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a deep copy of ``base`` with ``overrides`` merged in recursively."""
    result = deepcopy(dict(base))
    for key, value in overrides.items():
        current = result.get(key)
        if isinstance(value, MappingABC) and isinstance(current, MappingABC):
            result[key] = merge_mappings(current, value)
        else:
            result[key] = deepcopy(value)
    return result


__all__ = [
    "ENV_PREFIX",
    "env_overrides_from",
    "expand_dotted",
    "flatten_for_env",
    "merge_mappings",
    "resolve_with_precedence",
]
