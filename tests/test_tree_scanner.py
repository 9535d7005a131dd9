"""Tests for tree_scanner.py pruning traversal."""

import os
import threading
import time
from pathlib import Path

from project import Project
from project_types import ProjectType
from tree_scanner import ScanError, ScanErrorKind, scan
from tests.helpers import write_file


def _projects(results):
    return {(r.project_type, r.path) for r in results if isinstance(r, Project)}


def _errors(results):
    return [r for r in results if isinstance(r, ScanError)]


def test_finds_project_one_level_down(cargo_repo):
    results = list(scan(cargo_repo.parent))

    assert results == [Project(ProjectType.CARGO, cargo_repo)]


def test_root_itself_can_be_a_project(cargo_repo):
    assert list(scan(cargo_repo)) == [Project(ProjectType.CARGO, cargo_repo)]


def test_does_not_descend_into_projects(tmp_path):
    outer = tmp_path / "outer"
    write_file(outer / "package.json", 2)
    write_file(outer / "node_modules" / "left-pad" / "package.json", 2)
    write_file(outer / "packages" / "inner" / "Cargo.toml", 2)

    results = list(scan(tmp_path))

    assert _projects(results) == {(ProjectType.NODE, outer)}


def test_finds_projects_in_sibling_subtrees(tmp_path):
    write_file(tmp_path / "rust" / "Cargo.toml", 1)
    write_file(tmp_path / "group" / "java" / "pom.xml", 1)
    write_file(tmp_path / "group" / "deep" / "er" / "notebooks" / "a.ipynb", 1)
    write_file(tmp_path / "docs" / "readme.md", 1)

    results = list(scan(tmp_path))

    assert _projects(results) == {
        (ProjectType.CARGO, tmp_path / "rust"),
        (ProjectType.MAVEN, tmp_path / "group" / "java"),
        (ProjectType.JUPYTER, tmp_path / "group" / "deep" / "er" / "notebooks"),
    }
    assert not _errors(results)


def test_skips_hidden_directories(tmp_path):
    write_file(tmp_path / ".cache" / "thing" / "Cargo.toml", 1)
    write_file(tmp_path / ".config" / "package.json", 1)
    write_file(tmp_path / "visible" / "package.json", 1)

    assert _projects(scan(tmp_path)) == {(ProjectType.NODE, tmp_path / "visible")}


def test_hidden_root_is_still_scanned(tmp_path):
    root = tmp_path / ".dotroot"
    write_file(root / "proj" / "stack.yaml", 1)

    assert _projects(scan(root)) == {(ProjectType.STACK, root / "proj")}


def test_multiple_markers_yield_one_project(tmp_path):
    repo = tmp_path / "both"
    write_file(repo / "package.json", 1)
    write_file(repo / "Cargo.toml", 1)

    first = list(scan(tmp_path))
    second = list(scan(tmp_path))

    assert len(first) == 1
    assert first[0].project_type in (ProjectType.NODE, ProjectType.CARGO)
    assert first == second


def test_empty_root_yields_nothing(tmp_path):
    assert list(scan(tmp_path)) == []


def test_missing_root_yields_io_error(tmp_path):
    results = list(scan(tmp_path / "missing"))

    assert len(results) == 1
    assert isinstance(results[0], ScanError)
    assert results[0].kind is ScanErrorKind.IO
    assert isinstance(results[0].cause, FileNotFoundError)


def test_permission_denied_directory_is_reported_and_scan_continues(tmp_path, monkeypatch):
    write_file(tmp_path / "good" / "Cargo.toml", 1)
    write_file(tmp_path / "other" / "pom.xml", 1)
    denied = tmp_path / "locked"
    write_file(denied / "package.json", 1)
    real_scandir = os.scandir

    def scandir(path="."):
        if Path(path) == denied:
            raise PermissionError(13, "Permission denied", str(path))
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", scandir)

    results = list(scan(tmp_path))

    assert _projects(results) == {
        (ProjectType.CARGO, tmp_path / "good"),
        (ProjectType.MAVEN, tmp_path / "other"),
    }
    errors = _errors(results)
    assert len(errors) == 1
    assert errors[0].path == denied
    assert errors[0].kind is ScanErrorKind.IO
    assert isinstance(errors[0].cause, PermissionError)


def test_follows_symlinked_directories(tmp_path):
    write_file(tmp_path / "elsewhere" / "proj" / "composer.json", 1)
    root = tmp_path / "root"
    root.mkdir()
    os.symlink(tmp_path / "elsewhere", root / "link")

    assert _projects(scan(root)) == {(ProjectType.COMPOSER, root / "link" / "proj")}
    assert _projects(scan(root, follow_links=False)) == set()


def test_symlink_cycle_is_reported_as_traversal_error(tmp_path):
    root = tmp_path / "root"
    (root / "a").mkdir(parents=True)
    os.symlink(root, root / "a" / "back")

    results = list(scan(root))

    errors = _errors(results)
    assert len(errors) == 1
    assert errors[0].kind is ScanErrorKind.TRAVERSAL
    assert errors[0].path == root / "a" / "back"


def test_ignore_paths_are_not_visited(tmp_path):
    write_file(tmp_path / "keep" / "Cargo.toml", 1)
    write_file(tmp_path / "skip" / "Cargo.toml", 1)

    results = scan(tmp_path, ignore_paths=[tmp_path / "skip"])

    assert _projects(results) == {(ProjectType.CARGO, tmp_path / "keep")}


def test_each_call_rescans(tmp_path):
    write_file(tmp_path / "one" / "build.sbt", 1)
    assert len(list(scan(tmp_path))) == 1

    write_file(tmp_path / "two" / "CMakeLists.txt", 1)
    assert len(list(scan(tmp_path))) == 2


def test_closing_generator_early_is_safe(tmp_path):
    for i in range(20):
        write_file(tmp_path / f"p{i}" / "Cargo.toml", 1)

    results = scan(tmp_path)
    first = next(results)
    results.close()

    assert isinstance(first, Project)


def test_ignore_paths_match_root_with_parent_references(tmp_path):
    work = tmp_path / "w"
    write_file(work / "keep" / "Cargo.toml", 1)
    write_file(work / "skip" / "Cargo.toml", 1)

    results = scan(work / ".." / "w", ignore_paths=[work / "skip"])

    assert _projects(results) == {(ProjectType.CARGO, work / "keep")}


def test_set_stop_event_visits_nothing_more(tmp_path):
    for i in range(5):
        write_file(tmp_path / f"p{i}" / "Cargo.toml", 1)
    stop = threading.Event()
    stop.set()

    assert list(scan(tmp_path, stop_event=stop)) == []


def test_stop_event_ends_scan_early(tmp_path, monkeypatch):
    for i in range(200):
        (tmp_path / f"d{i}").mkdir()
    stop = threading.Event()
    listed = []
    real_scandir = os.scandir

    def scandir(path="."):
        listed.append(path)
        if len(listed) == 5:
            stop.set()
        time.sleep(0.01)
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", scandir)

    assert _errors(scan(tmp_path, stop_event=stop)) == []
    assert len(listed) < 100
