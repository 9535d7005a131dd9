#!/usr/bin/env python3
"""
Scan Result Aggregation

Partitions a stream of scan results into found projects and errors, for
callers that want the whole batch rather than a stream. Several roots are
collected concurrently, each into its own ScanResults, and merged once all
of them have finished.
"""

import pathlib
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Iterable, Optional, Union

from logging_config import get_logger
from project import Project
from tree_scanner import ScanError, scan

logger = get_logger("scan_results")


@dataclass
class ScanResults:
    """Projects and errors from one or more scans, each in arrival order"""

    projects: list[Project] = field(default_factory=list)
    errors: list[ScanError] = field(default_factory=list)

    def add(self, result: Union[Project, ScanError]):
        if isinstance(result, ScanError):
            self.errors.append(result)
        else:
            self.projects.append(result)

    def merge(self, other: "ScanResults") -> "ScanResults":
        """Append another batch after this one"""
        self.projects.extend(other.projects)
        self.errors.extend(other.errors)
        return self

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @classmethod
    def collect(cls, results: Iterable[Union[Project, ScanError]]) -> "ScanResults":
        """Consume a result stream into a new ScanResults"""
        batch = cls()
        for result in results:
            batch.add(result)
        return batch


def collect_paths(
    roots: Iterable[Union[str, pathlib.Path]],
    follow_links: bool = True,
    ignore_paths: Iterable[Union[str, pathlib.Path]] = (),
    stop_event: Optional[threading.Event] = None,
) -> ScanResults:
    """Scan several roots and return all of their results in one batch

    Each root is drained by its own collector thread; the directory visits
    themselves still run on the shared pool. Per-root batches are merged in
    the order the roots were given.

    Args:
        roots: Directories to scan
        follow_links: Follow symbolic links to directories
        ignore_paths: Directories that are neither visited nor classified
        stop_event: Once set, every root stops visiting new directories and
            the results found so far are returned

    Returns:
        Merged ScanResults
    """
    roots = list(roots)
    ignore_paths = list(ignore_paths)
    merged = ScanResults()
    if not roots:
        return merged

    def collect_root(root):
        results = scan(root, follow_links=follow_links, ignore_paths=ignore_paths, stop_event=stop_event)
        batch = ScanResults.collect(results)
        logger.debug("%s: %d projects, %d errors", root, len(batch.projects), len(batch.errors))
        return batch

    with ThreadPoolExecutor(max_workers=len(roots), thread_name_prefix="kenosis-root") as collectors:
        for batch in collectors.map(collect_root, roots):
            merged.merge(batch)
    return merged
