"""Helpers for building fixture trees."""

from __future__ import annotations

from pathlib import Path


def write_bytes(path: Path, data: bytes) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path


def patterned(size: int, seed: int = 0) -> bytes:
    """Return ``size`` deterministic, non-repeating-looking bytes."""
    return bytes((index * 31 + seed * 7 + (index >> 8)) % 251 for index in range(size))
