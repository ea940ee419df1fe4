"""Directory fingerprinting: sampling, digesting, and aggregation."""

from .aggregator import aggregate
from .collector import CollectionStats, FileCollector
from .digest import DEFAULT_ALGORITHM, DigestEngine, supported_algorithms
from .errors import (
    FingerprintError,
    PipelineStateError,
    RootNotFoundError,
    SampleError,
    StateConsumedError,
    TruncatedReadError,
)
from .models import (
    DirectoryFingerprint,
    EntryFailure,
    FingerprintResult,
    FingerprintState,
    RunPhase,
    SampleStrategy,
    WalkEntry,
    WalkError,
    printable_text,
)
from .pipeline import DEFAULT_WINDOW_SIZE, FingerprintPipeline, fingerprint_directory
from .sampler import choose_strategy, read_sample
from .walker import DirectoryWalker, sort_by_relative_path

__all__ = [
    "aggregate",
    "choose_strategy",
    "read_sample",
    "fingerprint_directory",
    "sort_by_relative_path",
    "supported_algorithms",
    "CollectionStats",
    "DEFAULT_ALGORITHM",
    "DEFAULT_WINDOW_SIZE",
    "DigestEngine",
    "DirectoryFingerprint",
    "DirectoryWalker",
    "EntryFailure",
    "FileCollector",
    "FingerprintError",
    "FingerprintPipeline",
    "FingerprintResult",
    "FingerprintState",
    "PipelineStateError",
    "RootNotFoundError",
    "RunPhase",
    "SampleError",
    "SampleStrategy",
    "StateConsumedError",
    "TruncatedReadError",
    "WalkEntry",
    "WalkError",
    "printable_text",
]
