"""Tests for size_aggregator.py."""

import os
from concurrent.futures import ThreadPoolExecutor

import pytest

from size_aggregator import dir_size
from tests.helpers import write_file


def test_sums_nested_files(tmp_path):
    write_file(tmp_path / "a.bin", 100)
    write_file(tmp_path / "sub" / "b.bin", 250)
    write_file(tmp_path / "sub" / "deeper" / "c.bin", 50)
    write_file(tmp_path / ".hidden" / "d.bin", 7)

    assert dir_size(tmp_path) == 407


def test_missing_path_is_zero(tmp_path):
    assert dir_size(tmp_path / "nope") == 0


def test_empty_directory_is_zero(tmp_path):
    (tmp_path / "empty").mkdir()
    assert dir_size(tmp_path / "empty") == 0


def test_regular_file_returns_its_size(tmp_path):
    target = write_file(tmp_path / "single.bin", 42)
    assert dir_size(target) == 42


def test_accepts_str_paths_and_custom_executor(tmp_path):
    write_file(tmp_path / "x" / "y.bin", 10)
    with ThreadPoolExecutor(max_workers=2) as pool:
        assert dir_size(str(tmp_path), executor=pool) == 10


def test_wide_and_deep_tree(tmp_path):
    deep = tmp_path
    for level in range(30):
        deep = deep / f"d{level}"
        write_file(deep / "f.bin", 3)
    for i in range(50):
        write_file(tmp_path / "wide" / f"w{i}" / "f.bin", 2)

    assert dir_size(tmp_path) == 30 * 3 + 50 * 2


def test_follows_symlinked_directories(tmp_path):
    write_file(tmp_path / "real" / "data.bin", 64)
    target = tmp_path / "measured"
    target.mkdir()
    os.symlink(tmp_path / "real", target / "link")

    assert dir_size(target) == 64
    assert dir_size(target, follow_links=False) == 0


def test_symlink_cycle_terminates(tmp_path):
    write_file(tmp_path / "loop" / "f.bin", 5)
    os.symlink(tmp_path / "loop", tmp_path / "loop" / "again")

    assert dir_size(tmp_path / "loop") == 5


def test_unreadable_entries_are_skipped(tmp_path, monkeypatch):
    write_file(tmp_path / "ok" / "a.bin", 11)
    write_file(tmp_path / "bad" / "b.bin", 99)
    denied = str(tmp_path / "bad")
    real_scandir = os.scandir

    def scandir(path="."):
        if os.fspath(path) == denied:
            raise PermissionError(13, "Permission denied", denied)
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", scandir)

    assert dir_size(tmp_path) == 11


@pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="needs named pipes")
def test_special_files_are_not_counted(tmp_path):
    write_file(tmp_path / "a.bin", 8)
    os.mkfifo(tmp_path / "pipe")

    assert dir_size(tmp_path) == 8
