"""Unit tests for configuration management."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest

from ffp.config import (
    DEFAULT_CONFIG_PATH,
    ConfigError,
    ConfigManager,
    FfpConfig,
    flatten_for_env,
    resolve_with_precedence,
)
from ffp.config.resolver import parse_env


def test_default_path_lives_under_home(isolated_home: Path) -> None:
    manager = ConfigManager()

    assert manager.config_path == DEFAULT_CONFIG_PATH.expanduser()
    assert manager.config_path == isolated_home / ".ffp" / "config.yaml"


def test_load_without_file_uses_defaults_and_writes_nothing() -> None:
    manager = ConfigManager()

    config = manager.load(include_env=False)

    assert config == FfpConfig()
    assert config.fingerprint.window_size == 8192
    assert config.fingerprint.sort_entries is True
    assert not manager.config_path.exists()


def test_ensure_exists_creates_default_file() -> None:
    manager = ConfigManager()

    path = manager.ensure_exists()

    text = path.read_text(encoding="utf-8")
    assert "ffp configuration file" in text
    assert "Last updated:" in text
    assert manager.load(include_env=False) == FfpConfig()


def test_resolve_with_precedence_respects_order() -> None:
    manager = ConfigManager()
    manager.save({"fingerprint": {"window_size": 1024, "algorithm": "blake2b"}})

    env = {"FFP__FINGERPRINT__WINDOW_SIZE": "2048", "FFP__CLI__QUIET_DEFAULT": "true", "OTHER": "x"}
    cli = {"fingerprint.window_size": 4096}

    config = manager.load(cli_overrides=cli, env_overrides=env)

    assert config.fingerprint.algorithm == "blake2b"
    assert config.cli.quiet_default is True
    # CLI overrides take precedence over environment
    assert config.fingerprint.window_size == 4096


def test_process_environment_is_read(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FFP__FINGERPRINT__WORKERS", "3")

    assert ConfigManager().load().fingerprint.workers == 3
    assert ConfigManager().load(include_env=False).fingerprint.workers == 1


def test_parse_env_keeps_unparsable_values_as_strings() -> None:
    overrides = parse_env({"FFP__LOGGING__FILE": "logs/[ffp.log", "FFP__LOGGING__LEVEL": "DEBUG"})

    assert overrides == {"logging": {"file": "logs/[ffp.log", "level": "DEBUG"}}


def test_invalid_yaml_raises_config_error() -> None:
    manager = ConfigManager()
    manager.config_path.parent.mkdir(parents=True)
    manager.config_path.write_text("- not-a-mapping", encoding="utf-8")

    with pytest.raises(ConfigError):
        manager.load()


@pytest.mark.parametrize("window", [0, -5, "big"])
def test_invalid_window_size_raises(window: object) -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(defaults=FfpConfig(), cli_overrides={"fingerprint.window_size": window})


def test_unknown_keys_are_rejected() -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(defaults=FfpConfig(), file_overrides={"fingerprint": {"colour": "red"}})


def test_oversized_window_falls_back_to_default(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="ffp"):
        config = resolve_with_precedence(
            defaults=FfpConfig(), cli_overrides={"fingerprint.window_size": sys.maxsize + 1}
        )

    assert config.fingerprint.window_size == 8192
    assert "exceeds the platform size limit" in caplog.text


def test_conflicting_dotted_override_raises() -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=FfpConfig(),
            cli_overrides={"cli": 1, "cli.quiet_default": True},
        )


def test_set_value_persists_and_validates() -> None:
    manager = ConfigManager()

    resolved = manager.set_value("fingerprint.window_size", "4096")

    assert resolved.fingerprint.window_size == 4096
    assert manager.load_file_overrides() == {"fingerprint": {"window_size": 4096}}
    with pytest.raises(ConfigError):
        manager.set_value("fingerprint.window_size", "0")
    assert manager.load(include_env=False).fingerprint.window_size == 4096


def test_flatten_for_env_round_trips_defaults() -> None:
    flat = flatten_for_env(FfpConfig())

    assert flat["FFP__FINGERPRINT__WINDOW_SIZE"] == "8192"
    assert flat["FFP__LOGGING__FILE"] == "null"
    assert parse_env(flat)["fingerprint"]["window_size"] == 8192


def test_replace_text_validates_before_saving() -> None:
    manager = ConfigManager()
    manager.save({"fingerprint": {"window_size": 1024}})

    with pytest.raises(ConfigError):
        manager.replace_text("fingerprint: [1, 2]")
    with pytest.raises(ConfigError):
        manager.replace_text("fingerprint: {window_size: 0}")
    assert manager.load(include_env=False).fingerprint.window_size == 1024

    resolved = manager.replace_text("cli:\n  histogram_default: true\n")

    assert resolved.cli.histogram_default is True
    assert manager.load_file_overrides() == {"cli": {"histogram_default": True}}
