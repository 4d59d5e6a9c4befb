"""Path helpers for locating manifests, project files and build wrappers."""

import os
from pathlib import Path
from typing import Iterable, List, Optional

from ..errors import ProjectDiscoveryError


def file_exists(path: Path) -> bool:
    """Check that a path exists and is a regular file."""
    return path.is_file()


def first_existing(directory: Path, file_names: Iterable[str]) -> Optional[Path]:
    """Return the first of the given file names present in a directory.

    Args:
        directory: Directory to probe
        file_names: Candidate names in priority order

    Returns:
        Path of the first existing file or None
    """
    for file_name in file_names:
        candidate = directory / file_name
        if file_exists(candidate):
            return candidate
    return None


def find_files_with_suffix(directory: Path, suffix: str) -> List[Path]:
    """List files directly inside a directory with the given suffix."""
    if not directory.is_dir():
        return []
    return sorted(
        entry for entry in directory.iterdir()
        if entry.is_file() and entry.suffix == suffix
    )


def find_single_project(directory: Path, suffix: str) -> Path:
    """Locate exactly one project file in a directory.

    Args:
        directory: Directory to search, subdirectories are not visited
        suffix: Project file suffix, e.g. ``.csproj``

    Returns:
        Path of the project file

    Raises:
        ProjectDiscoveryError: If zero or several project files exist
    """
    projects = find_files_with_suffix(directory, suffix)
    if not projects:
        raise ProjectDiscoveryError(f"no {suffix} files found in {directory}")
    if len(projects) > 1:
        names = ", ".join(project.name for project in projects)
        raise ProjectDiscoveryError(f"multiple {suffix} files found: {names}")
    return projects[0]


def find_wrapper(wrapper: str, start: Path, max_depth: int = 10) -> Optional[Path]:
    """Search a build tool wrapper script upwards from a directory.

    Args:
        wrapper: Wrapper file name, e.g. ``mvnw``
        start: Directory where the search begins
        max_depth: Number of parent directories to visit

    Returns:
        Path of the wrapper or None when no wrapper exists
    """
    directory = start.resolve()
    for _ in range(max_depth + 1):
        candidate = directory / wrapper
        if file_exists(candidate):
            return candidate
        if directory.parent == directory:
            break
        directory = directory.parent
    return None


def resolve_tool(base: str, wrapper: str, start: Path) -> str:
    """Prefer a project-local wrapper over the globally installed binary."""
    found = find_wrapper(wrapper, start)
    if found is None:
        return base
    return os.fspath(found)
