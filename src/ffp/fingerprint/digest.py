"""Digest engine used for per-file samples and the directory aggregate."""

from __future__ import annotations

import hashlib
from typing import Any, Callable, Dict, Literal, get_args

DigestAlgorithm = Literal["sha256", "blake2b", "sha3_256"]

DIGEST_SIZE = 32
DEFAULT_ALGORITHM: DigestAlgorithm = "sha256"

_FACTORIES: Dict[str, Callable[[], Any]] = {
    "sha256": hashlib.sha256,
    "blake2b": lambda: hashlib.blake2b(digest_size=DIGEST_SIZE),
    "sha3_256": hashlib.sha3_256,
}


class DigestEngine:
    """Compute fixed-size cryptographic digests with a single algorithm."""

    def __init__(self, algorithm: str = DEFAULT_ALGORITHM) -> None:
        if algorithm not in _FACTORIES:
            supported = ", ".join(sorted(_FACTORIES))
            raise ValueError(f"Unsupported digest algorithm '{algorithm}' (choose from {supported}).")
        self._algorithm = algorithm

    @property
    def algorithm(self) -> str:
        return self._algorithm

    @property
    def digest_size(self) -> int:
        return DIGEST_SIZE

    def digest(self, data: bytes) -> bytes:
        """Return the digest of ``data``."""
        hasher = _FACTORIES[self._algorithm]()
        hasher.update(data)
        return hasher.digest()


def supported_algorithms() -> tuple[str, ...]:
    return tuple(sorted(get_args(DigestAlgorithm)))


__all__ = [
    "DEFAULT_ALGORITHM",
    "DIGEST_SIZE",
    "DigestAlgorithm",
    "DigestEngine",
    "supported_algorithms",
]
