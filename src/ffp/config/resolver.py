"""Layering of configuration sources over the defaults."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Dict, Mapping, Sequence

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import FfpConfig

ENV_PREFIX = "FFP__"


def resolve_with_precedence(
    *,
    defaults: FfpConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> FfpConfig:
    """Apply file, environment, then CLI overrides on top of ``defaults``.

    Keys in any source may be nested mappings or dotted paths such as
    ``fingerprint.window_size``.

    Raises:
        ConfigError: If a source is malformed or the merged values fail validation.
    """
    merged = defaults.model_dump(mode="python")
    sources = {"file": file_overrides, "environment": env_overrides, "cli": cli_overrides}
    for source_name, source in sources.items():
        if source is not None:
            merged = deep_merge(merged, expand_dotted(source, source_name=source_name))

    try:
        return FfpConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def flatten_for_env(config: FfpConfig) -> Dict[str, str]:
    """Render ``config`` as ``FFP__SECTION__KEY`` environment assignments."""
    flat: Dict[str, str] = {}
    for section, values in config.model_dump(mode="python").items():
        for key, value in values.items():
            env_key = f"{ENV_PREFIX}{section.upper()}__{key.upper()}"
            flat[env_key] = "null" if value is None else str(value)
    return flat


def parse_env(env: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``FFP__`` variables into a nested override mapping.

    Values are parsed as YAML literals so ``"4096"`` becomes an integer and
    ``"false"`` a boolean; unparsable values are kept as strings.
    """
    overrides: dict[str, Any] = {}
    for key, raw_value in env.items():
        if not key.startswith(ENV_PREFIX):
            continue
        segments = [segment.lower() for segment in key[len(ENV_PREFIX) :].split("__") if segment]
        if not segments:
            continue
        try:
            value = yaml.safe_load(raw_value)
        except yaml.YAMLError:
            value = raw_value
        assign_path(overrides, segments, value, source_name="environment")
    return overrides


def expand_dotted(source: Mapping[str, Any], *, source_name: str) -> dict[str, Any]:
    """Return ``source`` with dotted keys expanded into nested mappings."""
    if not isinstance(source, MappingABC):
        raise ConfigError(f"{source_name.capitalize()} overrides must be a mapping.")

    expanded: dict[str, Any] = {}
    for key, value in source.items():
        if not isinstance(key, str):
            raise ConfigError(f"{source_name.capitalize()} override keys must be strings.")
        if isinstance(value, MappingABC):
            value = expand_dotted(value, source_name=source_name)
        assign_path(expanded, key.split("."), value, source_name=source_name)
    return expanded


def assign_path(
    target: dict[str, Any],
    path: Sequence[str],
    value: Any,
    *,
    source_name: str = "config",
) -> None:
    """Set ``value`` at ``path`` inside ``target``, creating mappings as needed.

    Raises:
        ConfigError: If an intermediate segment already holds a non-mapping value.
    """
    node = target
    for segment in path[:-1]:
        child = node.setdefault(segment, {})
        if not isinstance(child, dict):
            raise ConfigError(
                f"{source_name.capitalize()} override for {'.'.join(path)} conflicts with "
                f"the existing value of '{segment}'."
            )
        node = child
    leaf = path[-1]
    if isinstance(value, MappingABC) and isinstance(node.get(leaf), MappingABC):
        node[leaf] = deep_merge(node[leaf], value)
    else:
        node[leaf] = value


def deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = {key: deepcopy(value) for key, value in base.items()}
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(value, MappingABC) and isinstance(current, MappingABC):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged


__all__ = [
    "ENV_PREFIX",
    "assign_path",
    "deep_merge",
    "expand_dotted",
    "flatten_for_env",
    "parse_env",
    "resolve_with_precedence",
]
