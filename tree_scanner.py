#!/usr/bin/env python3
"""
Pruning Tree Scanner

Walks a directory tree looking for project roots. Every pending directory is
visited by one pool task that lists it and classifies its entries; a
recognized project ends that branch, otherwise the visible subdirectories go
back onto the queue. Artifact folders of a project are therefore never
mistaken for nested projects.

Results stream out as they are found, in no particular order. Failures are
yielded as ScanError values next to the projects and never stop the walk.
"""

import os
import pathlib
import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, Optional, Union

from logging_config import get_logger
from project import Project
from project_types import classify_names
from worker_pool import get_executor

logger = get_logger("tree_scanner")

DirKey = tuple[int, int]

STOP_POLL_SECONDS = 0.1


class ScanErrorKind(Enum):
    """Category of a scan failure"""

    IO = "io"
    TRAVERSAL = "traversal"


class ScanError(Exception):
    """A directory the scanner could not process"""

    def __init__(self, path: pathlib.Path, kind: ScanErrorKind, cause: Optional[OSError] = None, message: str = ""):
        self.path = path
        self.kind = kind
        self.cause = cause
        self.message = message or (cause.strerror or str(cause) if cause else kind.value)
        super().__init__(f"{path}: {self.message}")

    def __eq__(self, other):
        if not isinstance(other, ScanError):
            return NotImplemented
        return (self.path, self.kind, self.message) == (other.path, other.kind, other.message)

    def __hash__(self):
        return hash((self.path, self.kind, self.message))


@dataclass
class _Visit:
    """Outcome of listing one directory"""

    project: Optional[Project] = None
    error: Optional[ScanError] = None
    children: list[pathlib.Path] = field(default_factory=list)
    ancestors: tuple[DirKey, ...] = ()


def is_hidden(name: str) -> bool:
    return name.startswith(".")


def _visit(
    path: pathlib.Path, ancestors: tuple[DirKey, ...], follow_links: bool, ignore_paths: frozenset[str]
) -> _Visit:
    try:
        st = os.stat(path, follow_symlinks=follow_links)
        key = (st.st_dev, st.st_ino)
        if key in ancestors:
            return _Visit(error=ScanError(path, ScanErrorKind.TRAVERSAL, message="symbolic link loop"))
        with os.scandir(path) as it:
            entries = list(it)
    except OSError as e:
        return _Visit(error=ScanError(path, ScanErrorKind.IO, cause=e))

    project_type = classify_names(entry.name for entry in entries)
    if project_type is not None:
        return _Visit(project=Project(project_type, path))

    visit = _Visit(ancestors=ancestors + (key,))
    for entry in entries:
        if is_hidden(entry.name):
            continue
        try:
            if not entry.is_dir(follow_symlinks=follow_links):
                continue
        except OSError:
            continue
        child = path / entry.name
        if str(child) in ignore_paths:
            continue
        visit.children.append(child)
    return visit


def scan(
    root: Union[str, pathlib.Path],
    follow_links: bool = True,
    ignore_paths: Iterable[Union[str, pathlib.Path]] = (),
    executor: Optional[ThreadPoolExecutor] = None,
    stop_event: Optional[threading.Event] = None,
) -> Iterator[Union[Project, ScanError]]:
    """Find every project under root

    The root itself is always visited, even when its name is hidden. Every
    call walks the tree again from scratch.

    Args:
        root: Directory to start from
        follow_links: Follow symbolic links to directories
        ignore_paths: Directories that are neither visited nor classified
        executor: Pool to run directory visits on (defaults to the shared pool)
        stop_event: Once set, no further directories are visited and the
            generator ends

    Yields:
        Project for each project root, ScanError for each directory that
        could not be listed
    """
    root_path = pathlib.Path(root)
    ignored = frozenset(os.path.abspath(os.path.expanduser(str(p))) for p in ignore_paths)
    if ignored:
        root_path = pathlib.Path(os.path.abspath(root_path))

    pool = executor or get_executor()
    pending: set[Future] = {pool.submit(_visit, root_path, (), follow_links, ignored)}
    try:
        while pending:
            if stop_event is not None and stop_event.is_set():
                logger.debug("Scan of %s stopped", root_path)
                return
            done, pending = wait(pending, timeout=STOP_POLL_SECONDS, return_when=FIRST_COMPLETED)
            for future in done:
                visit = future.result()
                if visit.error is not None:
                    logger.debug("Cannot scan %s", visit.error)
                    yield visit.error
                    continue
                if visit.project is not None:
                    yield visit.project
                    continue
                for child in visit.children:
                    pending.add(pool.submit(_visit, child, visit.ancestors, follow_links, ignored))
    finally:
        for future in pending:
            future.cancel()
