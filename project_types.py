#!/usr/bin/env python3
"""
Project Type Classifier

Maps marker file names to the build ecosystem they identify. Each ecosystem
carries its display name and the artifact directories (relative to the
project root) that hold regenerable build output.
"""

from enum import Enum
from typing import Iterable, Optional


class ProjectType(Enum):
    """Supported build ecosystems

    Member values are (display name, artifact directories). Declaration order
    is also the tie-break order used when one directory holds several markers.
    """

    CARGO = ("Cargo", ("target",))
    NODE = ("Node", ("node_modules",))
    UNITY = ("Unity", ("Library", "Temp", "Obj", "Logs", "MemoryCaptures", "Build", "Builds"))
    STACK = ("Stack", (".stack-work",))
    SBT = ("SBT", ("target", "project/target"))
    MAVEN = ("Maven", ("target",))
    CMAKE = ("CMake", ("build",))
    COMPOSER = ("Composer", ("vendor",))
    UNREAL = ("Unreal", ("Binaries", "Build", "Saved", "DerivedDataCache", "Intermediate"))
    JUPYTER = ("Jupyter", (".ipynb_checkpoints",))
    PYTHON = ("Python", ("__pycache__", "__pypackages__", ".venv"))

    @property
    def display_name(self) -> str:
        return self.value[0]

    @property
    def artifact_dirs(self) -> tuple[str, ...]:
        return self.value[1]

    @property
    def priority(self) -> int:
        """Rank among all types, lower wins"""
        return _PRIORITY[self]


# Exact names are checked before suffixes
MARKER_FILES: dict[str, ProjectType] = {
    "Cargo.toml": ProjectType.CARGO,
    "package.json": ProjectType.NODE,
    "Assembly-CSharp.csproj": ProjectType.UNITY,
    "stack.yaml": ProjectType.STACK,
    "build.sbt": ProjectType.SBT,
    "pom.xml": ProjectType.MAVEN,
    "CMakeLists.txt": ProjectType.CMAKE,
    "composer.json": ProjectType.COMPOSER,
}

MARKER_SUFFIXES: tuple[tuple[str, ProjectType], ...] = (
    (".uproject", ProjectType.UNREAL),
    (".ipynb", ProjectType.JUPYTER),
    (".py", ProjectType.PYTHON),
)

_PRIORITY = {project_type: index for index, project_type in enumerate(ProjectType)}


def classify(file_name: str) -> Optional[ProjectType]:
    """Return the ecosystem identified by a single file name, if any"""
    project_type = MARKER_FILES.get(file_name)
    if project_type is not None:
        return project_type
    for suffix, suffix_type in MARKER_SUFFIXES:
        if file_name.endswith(suffix):
            return suffix_type
    return None


def classify_names(names: Iterable[str]) -> Optional[ProjectType]:
    """Classify a directory from the names of its entries

    When several entries are markers, the highest priority type wins so the
    same directory contents always give the same answer.

    Args:
        names: Entry names of a single directory

    Returns:
        The winning ProjectType, or None if no entry is a marker
    """
    best: Optional[ProjectType] = None
    for name in names:
        project_type = classify(name)
        if project_type is None:
            continue
        if best is None or project_type.priority < best.priority:
            best = project_type
            if best.priority == 0:
                break
    return best
