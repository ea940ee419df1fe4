"""Fingerprinting errors."""


class FingerprintError(Exception):
    """Base exception for fingerprinting operations."""


class RootNotFoundError(FingerprintError):
    """Raised when the directory to fingerprint does not exist."""


class SampleError(FingerprintError):
    """Raised when a file sample cannot be read."""


class TruncatedReadError(SampleError):
    """Raised when a read returns fewer bytes than the sample requires."""

    def __init__(self, path: object, expected: int, actual: int) -> None:
        super().__init__(f"{path}: expected {expected} bytes, read {actual}")
        self.expected = expected
        self.actual = actual


class StateConsumedError(FingerprintError):
    """Raised when a fingerprint state is mutated or aggregated after consumption."""


class PipelineStateError(FingerprintError):
    """Raised when a pipeline is driven outside its one-shot lifecycle."""
