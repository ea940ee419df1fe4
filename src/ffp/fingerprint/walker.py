"""Recursive directory enumeration feeding the file collector."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Set, Tuple

from .models import WalkEntry, WalkError, WalkItem

LOGGER = logging.getLogger(__name__)


def _relative(path: Path, root: Path) -> str:
    try:
        relative = path.relative_to(root)
    except ValueError:
        relative = Path(path.name)
    return relative.as_posix()


class DirectoryWalker:
    """Enumerate a directory tree depth-first in filesystem order.

    Directories are yielded before their contents, the root included. Failures to
    list a directory or stat an entry are yielded as :class:`WalkError` items so the
    caller can continue with the rest of the tree.
    """

    def __init__(self, *, follow_symlinks: bool = False) -> None:
        self.follow_symlinks = follow_symlinks

    def walk(self, root: Path) -> Iterator[WalkItem]:
        """Yield walk items for ``root`` and everything beneath it."""
        try:
            stat = root.stat()
        except OSError as exc:
            yield WalkError(path=root, message=str(exc))
            return

        if not root.is_dir():
            yield WalkEntry(path=root, relative_path=root.name, size=stat.st_size, is_file=root.is_file())
            return

        visited: Set[Tuple[int, int]] = {(stat.st_dev, stat.st_ino)}
        yield WalkEntry(path=root, relative_path=".", size=stat.st_size, is_file=False)

        # One iterator per open directory; the top of the stack is the deepest.
        stack: List[Iterator[os.DirEntry[str]]] = []
        failure = self._open(root, stack)
        if failure is not None:
            yield failure

        while stack:
            entry = next(stack[-1], None)
            if entry is None:
                stack.pop()
                continue

            path = Path(entry.path)
            try:
                is_dir = entry.is_dir(follow_symlinks=self.follow_symlinks)
                is_file = entry.is_file(follow_symlinks=self.follow_symlinks)
                entry_stat = entry.stat(follow_symlinks=self.follow_symlinks)
            except OSError as exc:
                yield WalkError(path=path, message=str(exc))
                continue

            yield WalkEntry(
                path=path,
                relative_path=_relative(path, root),
                size=entry_stat.st_size,
                is_file=is_file,
            )

            if not is_dir:
                continue
            key = (entry_stat.st_dev, entry_stat.st_ino)
            if key in visited:
                yield WalkError(path=path, message="filesystem loop detected; not descending")
                continue
            visited.add(key)
            failure = self._open(path, stack)
            if failure is not None:
                yield failure

    def _open(self, directory: Path, stack: List[Iterator[os.DirEntry[str]]]) -> Optional[WalkError]:
        try:
            with os.scandir(directory) as iterator:
                entries = list(iterator)
        except OSError as exc:
            LOGGER.debug("Cannot list %s: %s", directory, exc)
            return WalkError(path=directory, message=str(exc))
        stack.append(iter(entries))
        return None


def sort_by_relative_path(items: Iterable[WalkItem]) -> List[WalkItem]:
    """Return walk items with entries ordered by their POSIX relative path.

    Walk errors keep their encounter order and precede the sorted entries.
    """
    errors: List[WalkItem] = []
    entries: List[WalkEntry] = []
    for item in items:
        if isinstance(item, WalkError):
            errors.append(item)
        else:
            entries.append(item)
    entries.sort(key=lambda entry: entry.relative_path)
    return [*errors, *entries]


__all__ = ["DirectoryWalker", "sort_by_relative_path"]
