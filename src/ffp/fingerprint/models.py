"""Data models shared by the fingerprinting components."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .errors import StateConsumedError


class SampleStrategy(str, Enum):
    """How much of a file contributes to its digest."""

    FULL = "full"
    HEAD_TAIL = "head_tail"


class RunPhase(str, Enum):
    """Lifecycle of a single fingerprinting run."""

    INIT = "init"
    WALKING = "walking"
    AGGREGATING = "aggregating"
    DONE = "done"


@dataclass(frozen=True, slots=True)
class WalkEntry:
    """A filesystem entry produced by the walker.

    Attributes:
        path: Absolute path of the entry.
        relative_path: POSIX-style path relative to the walk root.
        size: Size in bytes as reported by ``stat``.
        is_file: Whether the entry is a regular file.
    """

    path: Path
    relative_path: str
    size: int
    is_file: bool


@dataclass(frozen=True, slots=True)
class WalkError:
    """A walk-level failure for an entry or subtree."""

    path: Path
    message: str


WalkItem = Union[WalkEntry, WalkError]


def printable_text(value: str | os.PathLike[str]) -> str:
    """Return ``value`` with undecodable filename bytes shown as ``\\xNN`` escapes.

    Non-UTF-8 names arrive as surrogate-escaped strings, which cannot be written
    to a UTF-8 console or JSON document.
    """
    return os.fsencode(value).decode("utf-8", "backslashreplace")


@dataclass(slots=True)
class FingerprintState:
    """Ordered per-file digests accumulated during a run.

    The state grows by exactly one digest per regular file and is consumed once by
    the aggregator. ``file_count`` always equals ``len(digests)``.
    """

    _digests: List[bytes] = field(default_factory=list)
    _consumed: bool = False

    @property
    def file_count(self) -> int:
        return len(self._digests)

    @property
    def digests(self) -> tuple[bytes, ...]:
        return tuple(self._digests)

    @property
    def consumed(self) -> bool:
        return self._consumed

    def append(self, digest: bytes) -> None:
        """Record the digest of the next regular file in traversal order."""
        if self._consumed:
            raise StateConsumedError("Cannot append to a consumed fingerprint state.")
        self._digests.append(digest)

    def consume(self) -> List[bytes]:
        """Hand the ordered digests to the aggregator exactly once."""
        if self._consumed:
            raise StateConsumedError("Fingerprint state has already been aggregated.")
        self._consumed = True
        return list(self._digests)


class FfpModel(BaseModel):
    """Shared configuration for ffp result models."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class DirectoryFingerprint(FfpModel):
    """Final output of a run.

    Attributes:
        digest: Raw aggregate digest bytes.
        file_count: Number of regular files that contributed a digest.
        root: Root path as supplied by the caller, undecodable bytes escaped.
    """

    digest: bytes
    file_count: int
    root: str

    @property
    def hexdigest(self) -> str:
        return self.digest.hex()


class EntryFailure(FfpModel):
    """A recoverable failure recorded for a single entry."""

    path: str
    kind: Literal["walk", "io"]
    message: str


class FingerprintResult(FfpModel):
    """Fingerprint plus the bookkeeping gathered while producing it.

    Attributes:
        fingerprint: The directory fingerprint.
        window_size: Window size used for sampling.
        algorithm: Digest algorithm name.
        sorted_entries: Whether file entries were sorted by relative path.
        failures: Recoverable entry failures in encounter order.
        strategies: Number of files sampled with each strategy.
        bytes_sampled: Total number of sample bytes hashed.
        histogram: File counts keyed by power-of-two size bucket upper bound.
    """

    fingerprint: DirectoryFingerprint
    window_size: int
    algorithm: str
    sorted_entries: bool = True
    failures: List[EntryFailure] = Field(default_factory=list)
    strategies: Dict[SampleStrategy, int] = Field(default_factory=dict)
    bytes_sampled: int = 0
    histogram: Dict[int, int] = Field(default_factory=dict)

    def to_payload(self) -> dict[str, object]:
        """Return a JSON-ready mapping for CLI output."""
        return {
            "root": self.fingerprint.root,
            "digest": self.fingerprint.hexdigest,
            "file_count": self.fingerprint.file_count,
            "window_size": self.window_size,
            "algorithm": self.algorithm,
            "sorted": self.sorted_entries,
            "bytes_sampled": self.bytes_sampled,
            "strategies": {
                strategy.value: self.strategies.get(strategy, 0) for strategy in SampleStrategy
            },
            "histogram": {str(bound): count for bound, count in sorted(self.histogram.items())},
            "failures": [failure.model_dump(mode="json") for failure in self.failures],
        }


__all__ = [
    "SampleStrategy",
    "RunPhase",
    "WalkEntry",
    "WalkError",
    "WalkItem",
    "printable_text",
    "FingerprintState",
    "DirectoryFingerprint",
    "EntryFailure",
    "FingerprintResult",
]
