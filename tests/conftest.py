"""Shared fixtures for building project trees on disk."""

import pytest

import worker_pool
from tests.helpers import write_file


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Point the config directory at an empty temp dir so user config never leaks in."""
    home = tmp_path / "kenosis_home"
    monkeypatch.setenv("KENOSIS_HOME", str(home))
    return home


@pytest.fixture(scope="session", autouse=True)
def shared_pool():
    """Run the suite on a small pool and stop it at the end."""
    worker_pool.configure(4)
    yield
    worker_pool.shutdown()


@pytest.fixture(name="cargo_repo")
def fixture_cargo_repo(tmp_path):
    """repoA: Cargo.toml, target/ with 10 files (5000 bytes), src/ with 2 files (200 bytes)."""
    repo = tmp_path / "workspace" / "repoA"
    write_file(repo / "Cargo.toml", 0)
    for i in range(10):
        write_file(repo / "target" / "debug" / f"obj{i}.o", 500)
    write_file(repo / "src" / "main.rs", 120)
    write_file(repo / "src" / "lib.rs", 80)
    return repo
