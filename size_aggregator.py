#!/usr/bin/env python3
"""
Directory Size Aggregator

Computes the byte footprint of a directory tree. Each directory is listed by
its own pool task, which returns only a local byte sum and the child
directories to visit next, so memory follows the traversal frontier rather
than the size of the tree.
"""

import os
import pathlib
import stat
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Optional, Union

from worker_pool import get_executor

DirKey = tuple[int, int]


@dataclass
class _LevelSize:
    """Partial result for one directory"""

    size: int = 0
    subdirs: list[str] = field(default_factory=list)
    ancestors: tuple[DirKey, ...] = ()


def _size_level(path: str, ancestors: tuple[DirKey, ...], follow_links: bool) -> _LevelSize:
    """Sum the regular files directly inside path and collect its subdirectories

    Unreadable entries contribute nothing. A directory already present among
    its ancestors (a symlink cycle) is not descended into again.
    """
    try:
        st = os.stat(path, follow_symlinks=follow_links)
        key = (st.st_dev, st.st_ino)
        if key in ancestors:
            return _LevelSize()
        entries = os.scandir(path)
    except OSError:
        return _LevelSize()

    level = _LevelSize(ancestors=ancestors + (key,))
    with entries:
        for entry in entries:
            try:
                if entry.is_file(follow_symlinks=follow_links):
                    level.size += entry.stat(follow_symlinks=follow_links).st_size
                elif entry.is_dir(follow_symlinks=follow_links):
                    level.subdirs.append(entry.path)
            except OSError:
                continue
    return level


def dir_size(
    path: Union[str, pathlib.Path],
    follow_links: bool = True,
    executor: Optional[ThreadPoolExecutor] = None,
) -> int:
    """Return the total size of all regular files under path

    Best effort: missing paths and unreadable entries count as zero, the call
    never raises for filesystem errors. A path naming a regular file returns
    that file's size.

    Args:
        path: Directory (or file) to measure
        follow_links: Follow symbolic links to files and directories
        executor: Pool to run directory listings on (defaults to the shared pool)

    Returns:
        Total size in bytes
    """
    root = os.fspath(path)
    try:
        st = os.stat(root, follow_symlinks=follow_links)
    except OSError:
        return 0
    if stat.S_ISREG(st.st_mode):
        return st.st_size
    if not stat.S_ISDIR(st.st_mode):
        return 0

    pool = executor or get_executor()
    total = 0
    pending: set[Future] = {pool.submit(_size_level, root, (), follow_links)}
    while pending:
        done, pending = wait(pending, return_when=FIRST_COMPLETED)
        for future in done:
            level = future.result()
            total += level.size
            for subdir in level.subdirs:
                pending.add(pool.submit(_size_level, subdir, level.ancestors, follow_links))
    return total
