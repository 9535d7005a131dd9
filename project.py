#!/usr/bin/env python3
"""
Project Model

A Project is a directory recognized as the root of a build ecosystem. It only
points into the filesystem; sizes are measured on demand and artifact
directories are deleted on request.
"""

import os
import pathlib
import shutil
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Optional, Union

from logging_config import get_logger
from project_types import ProjectType, classify_names
from size_aggregator import dir_size
from worker_pool import get_executor

logger = get_logger("project")


@dataclass
class ProjectSize:
    """Sizes of a project's immediate children, split into artifact and the rest"""

    artifact_size: int = 0
    non_artifact_size: int = 0
    dirs: list[tuple[str, int, bool]] = field(default_factory=list)

    @property
    def total_size(self) -> int:
        return self.artifact_size + self.non_artifact_size


@dataclass(frozen=True)
class CleanError:
    """An artifact directory that could not be removed"""

    path: pathlib.Path
    error: OSError

    def __str__(self) -> str:
        return f"{self.path}: {self.error.strerror or self.error}"


def _remove_tree(path: pathlib.Path) -> Optional[CleanError]:
    """Delete path and everything below it; a symlink itself is unlinked, not followed"""
    try:
        if path.is_symlink():
            path.unlink()
        else:
            shutil.rmtree(path)
    except OSError as e:
        logger.error("error removing directory %s: %s", path, e)
        return CleanError(path, e)
    logger.info("Removed %s", path)
    return None


def remove_artifact_dirs(
    root: pathlib.Path, artifact_dirs: tuple[str, ...], executor: Optional[ThreadPoolExecutor] = None
) -> list[CleanError]:
    """Delete each existing artifact directory under root, continuing past failures

    Args:
        root: Project directory
        artifact_dirs: Names (or nested relative paths) of artifact directories
        executor: Pool to run deletions on (defaults to the shared pool)

    Returns:
        One CleanError per directory that could not be removed, in artifact order
    """
    targets = [root / name for name in artifact_dirs]
    targets = [t for t in targets if t.exists() or t.is_symlink()]
    if not targets:
        return []

    pool = executor or get_executor()
    futures = [pool.submit(_remove_tree, target) for target in targets]
    wait(futures)
    return [f.result() for f in futures if f.result() is not None]


@dataclass(frozen=True)
class Project:
    """A project root and the ecosystem it belongs to"""

    project_type: ProjectType
    path: pathlib.Path

    def artifact_dirs(self) -> tuple[str, ...]:
        return self.project_type.artifact_dirs

    def type_name(self) -> str:
        return self.project_type.display_name

    def name(self) -> str:
        return str(self.path)

    def size(self) -> int:
        """Total bytes held in the project's artifact directories"""
        return sum(dir_size(self.path / name) for name in self.artifact_dirs())

    def size_dirs(self) -> ProjectSize:
        """Measure every immediate child of the project root

        Files count as non-artifact. Directories are measured recursively and
        counted as artifact when their name is one of the project's artifact
        directories. A project directory that can no longer be listed gives a
        zeroed ProjectSize.
        """
        result = ProjectSize()
        artifact_names = set(self.artifact_dirs())

        try:
            with os.scandir(self.path) as it:
                entries = list(it)
        except OSError as e:
            logger.debug("Cannot list project %s: %s", self.path, e)
            return result

        for entry in entries:
            try:
                if entry.is_file(follow_symlinks=False):
                    result.non_artifact_size += entry.stat(follow_symlinks=False).st_size
                    continue
                if not entry.is_dir(follow_symlinks=False):
                    continue
            except OSError:
                continue

            size = dir_size(entry.path)
            is_artifact = entry.name in artifact_names
            if is_artifact:
                result.artifact_size += size
            else:
                result.non_artifact_size += size
            result.dirs.append((entry.name, size, is_artifact))

        return result

    def clean(self) -> list[CleanError]:
        """Delete the project's artifact directories

        Every existing artifact directory is attempted even if an earlier one
        fails. Failures are logged and returned; directories that do not exist
        are skipped silently, so a second call is a no-op.
        """
        return remove_artifact_dirs(self.path, self.artifact_dirs())


def detect_project(path: Union[str, pathlib.Path]) -> Optional[Project]:
    """Classify a single directory without scanning below it

    Raises:
        OSError: If the directory cannot be listed
    """
    project_path = pathlib.Path(path)
    with os.scandir(project_path) as it:
        names = [entry.name for entry in it]
    project_type = classify_names(names)
    if project_type is None:
        return None
    return Project(project_type, project_path)


def clean(path: Union[str, pathlib.Path]) -> list[CleanError]:
    """Clean exactly the project rooted at path

    A directory that is not a project is left alone.

    Raises:
        OSError: If the directory cannot be listed
    """
    project = detect_project(path)
    if project is None:
        logger.info("%s is not a recognized project", path)
        return []
    return project.clean()
