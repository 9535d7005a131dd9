#!/usr/bin/env python3
"""
Auxiliary utility functions for Kenosis

Presentation and path helpers shared by the CLI and the core modules.
"""

import pathlib
from typing import Optional, Union

BYTE_UNITS = ("B", "KiB", "MiB", "GiB", "TiB", "PiB", "EiB")


def format_bytes(size_bytes: int) -> str:
    """Format byte size into human-readable string

    Args:
        size_bytes: Size in bytes to format

    Returns:
        Formatted string with binary units and one decimal, like "1.2 GiB",
        "345.0 MiB" or "789.0 B"
    """
    size = float(size_bytes)
    for unit in BYTE_UNITS[:-1]:
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} {BYTE_UNITS[-1]}"


def parse_size(value: str) -> int:
    """Parse a human-readable size string like '10M' into bytes"""
    value = value.strip().upper()
    if value.endswith("IB"):
        value = value[:-2]
    elif value.endswith("B") and len(value) > 1 and not value[-2].isdigit():
        value = value[:-1]
    multipliers = {"K": 1024, "M": 1024**2, "G": 1024**3, "T": 1024**4, "B": 1}
    for suffix, mult in multipliers.items():
        if value.endswith(suffix):
            return int(float(value[: -len(suffix)]) * mult)
    return int(value)


def format_path_for_display(path: Union[str, pathlib.Path], home_path: Optional[str] = None) -> str:
    """Format file path for display by replacing home directory with ~

    Args:
        path: File path to format
        home_path: Home directory path (defaults to platform home)

    Returns:
        Path with home directory replaced by ~ if applicable
    """
    if home_path is None:
        home_path = str(pathlib.Path.home())

    path = str(path)
    if path == home_path or path.startswith(home_path.rstrip("/") + "/"):
        return "~" + path[len(home_path.rstrip("/")) :]
    return path


def path_canonicalise(base: pathlib.Path, tail: Union[str, pathlib.Path]) -> pathlib.Path:
    """Resolve tail against base

    An absolute tail is returned unchanged. A relative one is joined to base
    and resolved, which fails if the result does not exist.

    Raises:
        OSError: If the joined path does not exist
    """
    tail = pathlib.Path(tail)
    if tail.is_absolute():
        return tail
    return (base / tail).resolve(strict=True)
