"""Reduce ordered per-file digests to a single directory digest."""

from __future__ import annotations

from typing import Sequence

from .digest import DigestEngine


def aggregate(digests: Sequence[bytes], engine: DigestEngine) -> bytes:
    """Digest the concatenation of ``digests`` in the given order.

    An empty sequence yields the digest of the empty byte string.

    Raises:
        ValueError: If a digest does not have the engine's digest size.
    """
    for index, digest in enumerate(digests):
        if len(digest) != engine.digest_size:
            raise ValueError(
                f"Digest {index} has {len(digest)} bytes; expected {engine.digest_size}."
            )
    return engine.digest(b"".join(digests))


__all__ = ["aggregate"]
