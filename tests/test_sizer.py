"""Tests for directory sizing."""

import os
import tempfile
from pathlib import Path

import pytest

from toolsweep.sizer import count_entries, size_of, size_of_async


def _write(path: Path, nbytes: int) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"x" * nbytes)


def test_missing_path_is_zero():
    assert size_of("/nonexistent/toolsweep/nowhere") == (0, 0)
    with tempfile.TemporaryDirectory() as d:
        assert size_of(Path(d) / "gone") == (0, 0)


def test_empty_dir():
    with tempfile.TemporaryDirectory() as d:
        assert size_of(d) == (0, 0)


def test_single_file():
    with tempfile.TemporaryDirectory() as d:
        f = Path(d) / "a.bin"
        _write(f, 123)
        assert size_of(f) == (123, 1)


def test_nested_tree_sums_regular_files(tmp_path):
    """Size is the sum over every regular file, however deep."""
    _write(tmp_path / "a.txt", 10)
    _write(tmp_path / "pkg" / "b.txt", 20)
    _write(tmp_path / "pkg" / "lib" / "c.txt", 30)
    _write(tmp_path / "pkg" / "lib" / "deep" / "er" / "d.txt", 40)
    (tmp_path / "empty").mkdir()
    assert size_of(tmp_path) == (100, 4)


def test_order_independent(tmp_path):
    """Same files created in a different order give the same total."""
    left = tmp_path / "left"
    right = tmp_path / "right"
    names = [("x/1", 5), ("y/2", 7), ("z/3", 11), ("x/y/4", 13)]
    for rel, n in names:
        _write(left / rel, n)
    for rel, n in reversed(names):
        _write(right / rel, n)
    assert size_of(left) == size_of(right) == (36, 4)


def test_symlink_cycle_terminates(tmp_path):
    """A link back to an ancestor must not loop or be counted."""
    _write(tmp_path / "root" / "sub" / "f.txt", 8)
    os.symlink(tmp_path / "root", tmp_path / "root" / "sub" / "loop")
    assert size_of(tmp_path / "root") == (8, 1)


def test_symlinked_file_not_counted(tmp_path):
    _write(tmp_path / "real.txt", 50)
    (tmp_path / "inner").mkdir()
    os.symlink(tmp_path / "real.txt", tmp_path / "inner" / "alias.txt")
    assert size_of(tmp_path / "inner") == (0, 0)


def test_deep_tree_no_recursion_limit(tmp_path):
    """Deeper than the default recursion limit."""
    d = tmp_path
    try:
        for _ in range(1100):
            d = d / "d"
            d.mkdir()
    except OSError:
        pytest.skip("filesystem path length limit")
    (d / "leaf.txt").write_bytes(b"abc")
    assert size_of(tmp_path) == (3, 1)


@pytest.mark.skipif(not hasattr(os, "geteuid") or os.geteuid() == 0, reason="root ignores permissions")
def test_unreadable_dir_is_skipped(tmp_path):
    _write(tmp_path / "ok.txt", 10)
    locked = tmp_path / "locked"
    _write(locked / "secret.txt", 99)
    locked.chmod(0)
    try:
        assert size_of(tmp_path) == (10, 1)
    finally:
        locked.chmod(0o755)


def test_count_entries(tmp_path):
    _write(tmp_path / "a", 1)
    _write(tmp_path / "b" / "c", 1)
    assert count_entries(tmp_path) == 2
    assert count_entries(tmp_path / "missing") == 0


@pytest.mark.asyncio
async def test_size_of_async_matches_sync(tmp_path):
    _write(tmp_path / "x" / "y.bin", 64)
    assert await size_of_async(tmp_path) == size_of(tmp_path) == (64, 1)
