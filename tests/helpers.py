"""Filesystem helpers for tests."""

from pathlib import Path


def write_file(path: Path, size: int) -> Path:
    """Create path (and its parents) holding exactly size bytes."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"x" * size)
    return path
