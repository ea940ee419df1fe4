"""High-level orchestration of a fingerprinting run."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from .aggregator import aggregate
from .collector import FileCollector
from .digest import DEFAULT_ALGORITHM, DigestEngine
from .errors import PipelineStateError, RootNotFoundError
from .models import (
    DirectoryFingerprint,
    FingerprintResult,
    FingerprintState,
    RunPhase,
    WalkItem,
    printable_text,
)
from .walker import DirectoryWalker, sort_by_relative_path

LOGGER = logging.getLogger(__name__)

DEFAULT_WINDOW_SIZE = 8192


class FingerprintPipeline:
    """Coordinate walking, collection, and aggregation for one directory.

    A pipeline is one-shot: it moves from ``INIT`` through ``WALKING`` and
    ``AGGREGATING`` to ``DONE`` and cannot be run again.
    """

    def __init__(
        self,
        walker: DirectoryWalker,
        collector: FileCollector,
        *,
        sort_entries: bool = True,
    ) -> None:
        self.walker = walker
        self.collector = collector
        self.sort_entries = sort_entries
        self._phase = RunPhase.INIT

    @property
    def phase(self) -> RunPhase:
        return self._phase

    def run(self, root: Path | str) -> FingerprintResult:
        """Fingerprint ``root`` and return the result.

        Args:
            root: Directory to fingerprint; echoed back unmodified in the result.

        Returns:
            FingerprintResult: The fingerprint and the run's bookkeeping.

        Raises:
            RootNotFoundError: If ``root`` does not exist or is not a directory.
            PipelineStateError: If the pipeline has already been started.
        """
        if self._phase is not RunPhase.INIT:
            raise PipelineStateError(f"Pipeline already {self._phase.value}; create a new one per run.")

        root_path = Path(root).expanduser()
        if not root_path.exists():
            raise RootNotFoundError(f"Not found: {root}")
        if not root_path.is_dir():
            raise RootNotFoundError(f"Not a directory: {root}")

        state = FingerprintState()
        self._phase = RunPhase.WALKING
        LOGGER.info("Fingerprinting %s (window=%d).", printable_text(root), self.collector.window_size)
        items: Iterable[WalkItem] = self.walker.walk(root_path)
        if self.sort_entries:
            items = sort_by_relative_path(items)
        stats = self.collector.collect(items, state)

        self._phase = RunPhase.AGGREGATING
        file_count = state.file_count
        digest = aggregate(state.consume(), self.collector.engine)
        self._phase = RunPhase.DONE

        fingerprint = DirectoryFingerprint(digest=digest, file_count=file_count, root=printable_text(root))
        LOGGER.info(
            "Fingerprinted %d file(s) under %s: %s (%d failure(s)).",
            file_count,
            fingerprint.root,
            fingerprint.hexdigest,
            len(stats.failures),
        )
        return FingerprintResult(
            fingerprint=fingerprint,
            window_size=self.collector.window_size,
            algorithm=self.collector.engine.algorithm,
            sorted_entries=self.sort_entries,
            failures=stats.failures,
            strategies=stats.strategies,
            bytes_sampled=stats.bytes_sampled,
            histogram=stats.histogram,
        )


def fingerprint_directory(
    root: Path | str,
    *,
    window_size: int = DEFAULT_WINDOW_SIZE,
    algorithm: str = DEFAULT_ALGORITHM,
    sort_entries: bool = True,
    follow_symlinks: bool = False,
    workers: int = 1,
) -> FingerprintResult:
    """Build a pipeline from plain settings and fingerprint ``root``."""
    pipeline = FingerprintPipeline(
        walker=DirectoryWalker(follow_symlinks=follow_symlinks),
        collector=FileCollector(DigestEngine(algorithm), window_size, workers=workers),
        sort_entries=sort_entries,
    )
    return pipeline.run(root)


__all__ = ["DEFAULT_WINDOW_SIZE", "FingerprintPipeline", "fingerprint_directory"]
