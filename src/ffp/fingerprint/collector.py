"""Turn walk items into ordered per-file digests."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Literal, Optional

from .digest import DigestEngine
from .errors import SampleError
from .models import EntryFailure, FingerprintState, SampleStrategy, WalkError, WalkItem, printable_text
from .sampler import choose_strategy, read_sample

LOGGER = logging.getLogger(__name__)


def size_bucket(size: int) -> int:
    """Return the smallest power of two not below ``size`` (``0`` for empty files)."""
    if size <= 0:
        return 0
    return 1 << (size - 1).bit_length()


@dataclass(slots=True)
class CollectionStats:
    """Bookkeeping gathered while collecting digests.

    Attributes:
        failures: Recoverable walk and I/O failures in encounter order.
        strategies: Number of files sampled with each strategy.
        bytes_sampled: Total sample bytes passed to the digest engine.
        histogram: File counts keyed by :func:`size_bucket`.
    """

    failures: List[EntryFailure] = field(default_factory=list)
    strategies: Dict[SampleStrategy, int] = field(default_factory=dict)
    bytes_sampled: int = 0
    histogram: Dict[int, int] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class _Outcome:
    item: WalkItem
    digest: Optional[bytes] = None
    strategy: Optional[SampleStrategy] = None
    sampled: int = 0
    error: Optional[Exception] = None


class FileCollector:
    """Sample and digest each regular file yielded by the walker.

    Items are processed strictly in the order given. With ``workers > 1`` sampling
    and hashing run on a thread pool, but outcomes are consumed in submission order
    so the state still receives digests in traversal order.
    """

    def __init__(self, engine: DigestEngine, window_size: int, *, workers: int = 1) -> None:
        if window_size <= 0:
            raise ValueError(f"window_size must be positive, got {window_size}")
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")
        self.engine = engine
        self.window_size = window_size
        self.workers = workers

    def collect(self, items: Iterable[WalkItem], state: FingerprintState) -> CollectionStats:
        """Append one digest to ``state`` per regular file in ``items``.

        Args:
            items: Walk entries and walk errors in traversal order.
            state: Run state receiving the digests.

        Returns:
            CollectionStats: Failures and sampling statistics for the run.
        """
        stats = CollectionStats()
        for outcome in self._outcomes(items):
            self._record(outcome, state, stats)
        return stats

    def _outcomes(self, items: Iterable[WalkItem]) -> Iterator[_Outcome]:
        if self.workers == 1:
            yield from map(self._process, items)
            return
        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="ffp-sample") as pool:
            yield from pool.map(self._process, items)

    def _process(self, item: WalkItem) -> _Outcome:
        if isinstance(item, WalkError) or not item.is_file:
            return _Outcome(item=item)
        try:
            sample = read_sample(item.path, item.size, self.window_size)
        except (OSError, SampleError) as exc:
            return _Outcome(item=item, error=exc)
        return _Outcome(
            item=item,
            digest=self.engine.digest(sample),
            strategy=choose_strategy(item.size, self.window_size),
            sampled=len(sample),
        )

    def _record(self, outcome: _Outcome, state: FingerprintState, stats: CollectionStats) -> None:
        item = outcome.item
        if isinstance(item, WalkError):
            self._fail(stats, item.path, "walk", item.message)
            return

        LOGGER.debug("Scanning: %s", printable_text(item.path))
        if not item.is_file:
            LOGGER.debug("Skipping non-regular entry %s.", printable_text(item.path))
            return

        if outcome.error is not None:
            self._fail(stats, item.path, "io", str(outcome.error))
            return
        if outcome.digest is None or outcome.strategy is None:
            return

        state.append(outcome.digest)
        stats.strategies[outcome.strategy] = stats.strategies.get(outcome.strategy, 0) + 1
        stats.bytes_sampled += outcome.sampled
        bucket = size_bucket(item.size)
        stats.histogram[bucket] = stats.histogram.get(bucket, 0) + 1
        LOGGER.debug(
            "Processed %s: size=%d strategy=%s read=%d %s=%s",
            printable_text(item.path),
            item.size,
            outcome.strategy.value,
            outcome.sampled,
            self.engine.algorithm,
            outcome.digest.hex(),
        )

    @staticmethod
    def _fail(stats: CollectionStats, path: Path, kind: Literal["walk", "io"], message: str) -> None:
        failure = EntryFailure(path=printable_text(path), kind=kind, message=printable_text(message))
        label = "Walk error at" if kind == "walk" else "Cannot sample"
        LOGGER.warning("%s %s: %s", label, failure.path, failure.message)
        stats.failures.append(failure)


__all__ = ["CollectionStats", "FileCollector", "size_bucket"]
