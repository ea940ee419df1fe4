"""Configuration models describing ffp settings."""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ffp.fingerprint import DEFAULT_WINDOW_SIZE
from ffp.fingerprint.digest import DigestAlgorithm

LOGGER = logging.getLogger(__name__)


class FfpBaseModel(BaseModel):
    """Shared configuration for ffp Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class FingerprintSettings(FfpBaseModel):
    """Options governing how a directory is fingerprinted.

    Attributes:
        window_size: Bytes read from the head and tail of large files.
        algorithm: Digest algorithm for per-file and aggregate digests.
        sort_entries: Whether files are ordered by relative path before hashing.
        follow_symlinks: Whether symbolic links are followed during the walk.
        workers: Number of threads sampling files concurrently.
    """

    window_size: int = Field(default=DEFAULT_WINDOW_SIZE, gt=0)
    algorithm: DigestAlgorithm = "sha256"
    sort_entries: bool = True
    follow_symlinks: bool = False
    workers: int = Field(default=1, ge=1)

    @field_validator("window_size", mode="before")
    @classmethod
    def _coerce_window_size(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool) and value > sys.maxsize:
            LOGGER.warning(
                "Window size %d exceeds the platform size limit; using %d.",
                value,
                DEFAULT_WINDOW_SIZE,
            )
            return DEFAULT_WINDOW_SIZE
        return value


class LoggingSettings(FfpBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
        file: Optional path of a rotating log file.
        max_size_mb: Maximum log size before rotation.
        backup_count: Number of historical log files to retain.
    """

    level: str = "WARNING"
    file: Optional[str] = None
    max_size_mb: int = 100
    backup_count: int = 5


class CLIOptions(FfpBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
        histogram_default: Whether `scan` prints the size histogram by default.
    """

    quiet_default: bool = False
    summary_default: bool = False
    histogram_default: bool = False


class FfpConfig(FfpBaseModel):
    """Top-level configuration struct for ffp.

    Attributes:
        fingerprint: Fingerprinting settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    fingerprint: FingerprintSettings = Field(default_factory=FingerprintSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "DEFAULT_WINDOW_SIZE",
    "FfpBaseModel",
    "FingerprintSettings",
    "LoggingSettings",
    "CLIOptions",
    "FfpConfig",
]
