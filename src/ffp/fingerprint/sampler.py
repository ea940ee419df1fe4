"""Select and read the bytes of a file that contribute to its digest."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO

from .errors import TruncatedReadError
from .models import SampleStrategy

LOGGER = logging.getLogger(__name__)


def choose_strategy(size: int, window_size: int) -> SampleStrategy:
    """Return the sampling strategy for a file of ``size`` bytes.

    Args:
        size: File size in bytes.
        window_size: Number of bytes taken from the head and from the tail.

    Returns:
        SampleStrategy: ``FULL`` when the windows would overlap, ``HEAD_TAIL`` otherwise.

    Raises:
        ValueError: If ``window_size`` is not positive or ``size`` is negative.
    """
    if window_size <= 0:
        raise ValueError(f"window_size must be positive, got {window_size}")
    if size < 0:
        raise ValueError(f"size must be non-negative, got {size}")
    if size < 2 * window_size:
        return SampleStrategy.FULL
    return SampleStrategy.HEAD_TAIL


def _read_exact(handle: BinaryIO, count: int, path: Path) -> bytes:
    chunks: list[bytes] = []
    remaining = count
    while remaining > 0:
        chunk = handle.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    data = b"".join(chunks)
    if len(data) != count:
        raise TruncatedReadError(path, count, len(data))
    return data


def read_sample(path: Path, size: int, window_size: int) -> bytes:
    """Read the sample of ``path`` given its walked ``size``.

    Small files are read whole; larger files contribute their first and last
    ``window_size`` bytes, head first.

    Args:
        path: File to sample.
        size: Size recorded by the walker.
        window_size: Head/tail window in bytes.

    Returns:
        bytes: Exactly the bytes read, never padded.

    Raises:
        OSError: If the file cannot be opened, sought, or read.
        TruncatedReadError: If the file yields fewer bytes than ``size`` implies.
    """
    strategy = choose_strategy(size, window_size)
    with path.open("rb") as handle:
        if strategy is SampleStrategy.FULL:
            LOGGER.debug("Small file %s; reading %d bytes.", path, size)
            return _read_exact(handle, size, path)

        LOGGER.debug("Sampling head and tail of %s (%d bytes each).", path, window_size)
        head = _read_exact(handle, window_size, path)
        offset = handle.seek(size - window_size)
        LOGGER.debug("Moved to %d in %s.", offset, path)
        tail = _read_exact(handle, window_size, path)
    return head + tail


__all__ = ["choose_strategy", "read_sample"]
