"""Configuration management for ffp."""

from __future__ import annotations

import os
import textwrap
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import DEFAULT_WINDOW_SIZE, FfpConfig, FingerprintSettings, LoggingSettings
from .resolver import assign_path, flatten_for_env, parse_env, resolve_with_precedence

DEFAULT_CONFIG_PATH = Path("~/.ffp/config.yaml")
_CONFIG_HEADER = textwrap.dedent(
    """\
    # ffp configuration file
    # Manage with `ffp config set KEY --value VALUE` or `ffp config edit`.
    """
)


class ConfigManager:
    """Read and write the YAML configuration file and resolve effective settings."""

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
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        env_overrides: Mapping[str, str] | None = None,
    ) -> FfpConfig:
        """Return the effective configuration.

        A missing file is treated as empty; nothing is written.

        Args:
            cli_overrides: Dotted-key overrides from command-line flags.
            include_env: Whether ``FFP__`` environment variables participate.
            env_overrides: Environment mapping to use instead of the process environment.

        Raises:
            ConfigError: If the file is unreadable or any value is invalid.
        """
        env_data = None
        if include_env:
            env_data = parse_env(env_overrides if env_overrides is not None else self._env)
        return resolve_with_precedence(
            defaults=FfpConfig(),
            file_overrides=self.load_file_overrides(),
            env_overrides=env_data or None,
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> dict[str, Any]:
        """Return the raw mapping stored in the configuration file."""
        if not self._config_path.exists():
            return {}
        try:
            raw = yaml.safe_load(self._config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse configuration file: {exc}") from exc
        if not isinstance(raw, dict):
            raise ConfigError("Configuration file must contain a mapping at the top level.")
        return raw

    def set_value(self, key: str, raw_value: str) -> FfpConfig:
        """Persist a YAML-literal value at a dotted ``key`` after validating it.

        Returns:
            FfpConfig: The configuration resolved from the updated file.
        """
        segments = [segment.strip() for segment in key.split(".") if segment.strip()]
        if not segments:
            raise ConfigError("KEY must be a dotted path such as 'fingerprint.window_size'.")
        try:
            value = yaml.safe_load(raw_value)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Unable to parse value: {exc}") from exc

        data = self.load_file_overrides()
        assign_path(data, segments, value)
        resolved = resolve_with_precedence(defaults=FfpConfig(), file_overrides=data)
        self.save(data)
        return resolved

    def replace_text(self, text: str) -> FfpConfig:
        """Validate raw YAML ``text`` and store it as the new configuration file.

        Raises:
            ConfigError: If ``text`` is not a YAML mapping of valid settings.
        """
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError("Configuration file must contain a mapping at the top level.")
        resolved = resolve_with_precedence(defaults=FfpConfig(), file_overrides=data)
        self.save(data)
        return resolved

    def save(self, config: FfpConfig | Mapping[str, Any]) -> None:
        """Write ``config`` to disk with a header and timestamp."""
        if isinstance(config, FfpConfig):
            data = config.model_dump(mode="python")
        else:
            data = dict(config)
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        body = yaml.safe_dump(data, sort_keys=False)
        self._config_path.write_text(
            f"{_CONFIG_HEADER}# Last updated: {stamp}\n{body}", encoding="utf-8"
        )

    def ensure_exists(self) -> Path:
        """Write the default configuration if no file exists yet."""
        if not self._config_path.exists():
            self.save(FfpConfig())
        return self._config_path

    def read_text(self) -> str:
        if not self._config_path.exists():
            return ""
        return self._config_path.read_text(encoding="utf-8")


__all__ = [
    "ConfigManager",
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_WINDOW_SIZE",
    "FfpConfig",
    "FingerprintSettings",
    "LoggingSettings",
    "flatten_for_env",
    "resolve_with_precedence",
]
