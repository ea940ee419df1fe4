"""Tests for recursive directory enumeration."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

from ffp.fingerprint import DirectoryWalker, WalkEntry, WalkError, fingerprint_directory, sort_by_relative_path
from ffp.fingerprint import walker as walker_module

from .helpers import write_bytes


def _build_tree(root: Path) -> None:
    write_bytes(root / "b.txt", b"bee")
    write_bytes(root / "a" / "x.txt", b"ex")
    write_bytes(root / "a" / "nested" / "y.txt", b"why")
    (root / "empty").mkdir()


def test_walk_yields_root_directories_and_files(tmp_path: Path) -> None:
    root = tmp_path / "tree"
    _build_tree(root)

    items = list(DirectoryWalker().walk(root))

    assert all(isinstance(item, WalkEntry) for item in items)
    by_path = {item.relative_path: item for item in items if isinstance(item, WalkEntry)}
    assert set(by_path) == {".", "a", "a/nested", "a/nested/y.txt", "a/x.txt", "b.txt", "empty"}
    assert by_path["."].is_file is False
    assert by_path["a"].is_file is False
    assert by_path["a/nested/y.txt"].is_file is True
    assert by_path["a/nested/y.txt"].size == 3


def test_walk_visits_directory_before_its_contents(tmp_path: Path) -> None:
    root = tmp_path / "tree"
    _build_tree(root)

    order = [item.relative_path for item in DirectoryWalker().walk(root) if isinstance(item, WalkEntry)]

    assert order[0] == "."
    assert order.index("a") < order.index("a/x.txt")
    assert order.index("a/nested") < order.index("a/nested/y.txt")


def test_walk_missing_root_yields_error(tmp_path: Path) -> None:
    items = list(DirectoryWalker().walk(tmp_path / "absent"))

    assert len(items) == 1
    assert isinstance(items[0], WalkError)


def test_unlistable_directory_yields_error_and_continues(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    root = tmp_path / "tree"
    write_bytes(root / "locked" / "secret.txt", b"hidden")
    write_bytes(root / "open.txt", b"visible")
    real_scandir = os.scandir

    def fake_scandir(path: os.PathLike[str] | str):  # type: ignore[no-untyped-def]
        if Path(path).name == "locked":
            raise PermissionError(13, "Permission denied", str(path))
        return real_scandir(path)

    monkeypatch.setattr(walker_module.os, "scandir", fake_scandir)

    items = list(DirectoryWalker().walk(root))

    errors = [item for item in items if isinstance(item, WalkError)]
    files = [item.relative_path for item in items if isinstance(item, WalkEntry) and item.is_file]
    assert [error.path.name for error in errors] == ["locked"]
    assert "Permission denied" in errors[0].message
    assert files == ["open.txt"]


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
def test_symlinks_are_not_followed_by_default(tmp_path: Path) -> None:
    root = tmp_path / "tree"
    target = write_bytes(tmp_path / "outside" / "target.txt", b"target")
    root.mkdir()
    (root / "link.txt").symlink_to(target)
    (root / "linkdir").symlink_to(target.parent, target_is_directory=True)

    entries = [item for item in DirectoryWalker().walk(root) if isinstance(item, WalkEntry)]
    followed = [item for item in DirectoryWalker(follow_symlinks=True).walk(root) if isinstance(item, WalkEntry)]

    assert not any(item.is_file for item in entries)
    assert {item.relative_path for item in followed if item.is_file} == {"link.txt", "linkdir/target.txt"}


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
def test_following_symlink_loop_reports_error(tmp_path: Path) -> None:
    root = tmp_path / "tree"
    (root / "sub").mkdir(parents=True)
    (root / "sub" / "back").symlink_to(root, target_is_directory=True)

    items = list(DirectoryWalker(follow_symlinks=True).walk(root))

    assert any(isinstance(item, WalkError) and "loop" in item.message for item in items)


def test_sort_by_relative_path_puts_errors_first() -> None:
    items = [
        WalkEntry(path=Path("/r/b"), relative_path="b", size=1, is_file=True),
        WalkError(path=Path("/r/x"), message="boom"),
        WalkEntry(path=Path("/r/a-c"), relative_path="a-c", size=1, is_file=True),
        WalkEntry(path=Path("/r/a/b"), relative_path="a/b", size=1, is_file=True),
    ]

    ordered = sort_by_relative_path(items)

    assert isinstance(ordered[0], WalkError)
    assert [item.relative_path for item in ordered[1:] if isinstance(item, WalkEntry)] == ["a-c", "a/b", "b"]


def _frame_depth() -> int:
    depth = 0
    frame = sys._getframe()
    while frame is not None:
        depth += 1
        frame = frame.f_back
    return depth


def test_tree_deeper_than_recursion_limit_is_walked(tmp_path: Path) -> None:
    root = tmp_path / "deep"
    levels = 600
    leaf_dir = root.joinpath(*(["d"] * levels))
    leaf_dir.mkdir(parents=True)
    write_bytes(leaf_dir / "leaf.txt", b"bottom")

    original_limit = sys.getrecursionlimit()
    # Leave headroom for the call stack but not enough to nest once per level.
    sys.setrecursionlimit(_frame_depth() + 250)
    try:
        assert levels > sys.getrecursionlimit()
        result = fingerprint_directory(root)
    finally:
        sys.setrecursionlimit(original_limit)

    assert result.fingerprint.file_count == 1
    assert result.failures == []


def test_stack_walk_keeps_directory_before_contents_order(tmp_path: Path) -> None:
    root = tmp_path / "tree"
    write_bytes(root / "only" / "inner" / "f.txt", b"f")

    order = [item.relative_path for item in DirectoryWalker().walk(root) if isinstance(item, WalkEntry)]

    assert order == [".", "only", "only/inner", "only/inner/f.txt"]
