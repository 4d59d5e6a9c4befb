"""Python requirements.txt extractor."""

import re
from pathlib import Path
from typing import List, Tuple

from ..models import Dependency, ParsedDependencies
from .base import BaseExtractor, Ecosystem

PIN_SEPARATOR = "=="


def parse_requirements(content: str) -> Tuple[List[Dependency], List[str]]:
    """Parse a pinned requirements list (``name==version`` per line).

    Blank lines, comments and pip options are ignored. Lines that do not
    split into exactly one name and one version are skipped with a warning.

    Args:
        content: requirements.txt content

    Returns:
        Tuple of parsed dependencies and warnings
    """
    dependencies: List[Dependency] = []
    warnings: List[str] = []

    for raw_line in content.splitlines():
        line = re.sub(r"(^|\s)#.*$", "", raw_line).strip()
        if not line or line.startswith("-"):
            continue

        # Environment markers, e.g. foo==1.0 ; python_version < "3.8"
        requirement = line.split(";", 1)[0].strip()

        parts = requirement.split(PIN_SEPARATOR)
        if len(parts) != 2 or not parts[0].strip() or not parts[1].strip():
            warnings.append(f"Could not parse line: {raw_line.strip()}")
            continue

        name = re.sub(r"\[.*\]$", "", parts[0].strip())
        dependencies.append(Dependency(name=name.lower(), version=parts[1].strip()))

    return dependencies, warnings


class PythonRequirementsExtractor(BaseExtractor):
    """Reads pinned versions from ``requirements.txt``."""

    ecosystem = Ecosystem.PYTHON
    marker_files = ("requirements.txt",)

    def extract(self, working_dir: Path) -> ParsedDependencies:
        marker = self.find_marker(working_dir)
        if marker is None:
            return self._empty("No requirements.txt found")

        dependencies, warnings = parse_requirements(self.read_manifest(marker))
        result = ParsedDependencies(
            dependencies=dependencies,
            source_file=marker,
            ecosystem=self.ecosystem.value,
            warnings=warnings,
        )
        if not dependencies:
            result.add_warning(f"No dependencies found in {marker.name}")
        return result
