"""npm dependency extractor."""

import json
from pathlib import Path
from typing import Any, Dict, List, Tuple

from ...errors import ManifestParseError
from ..models import Dependency, ParsedDependencies
from .base import BaseExtractor, Ecosystem

NODE_MODULES = "node_modules/"

PACKAGE_JSON_SECTIONS = ("dependencies", "devDependencies")


def _load_json_object(content: str, source: str) -> Dict[str, Any]:
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ManifestParseError(source, str(e)) from e
    if not isinstance(data, dict):
        raise ManifestParseError(source, "expected a JSON object")
    return data


def package_name_from_path(path: str) -> str:
    """Turn a lockfile ``packages`` key into a package name.

    ``node_modules/@fastify/ajv-compiler`` becomes ``@fastify/ajv-compiler``
    and nested installs such as ``node_modules/a/node_modules/b`` become ``b``.
    """
    index = path.rfind(NODE_MODULES)
    if index < 0:
        return path
    return path[index + len(NODE_MODULES):]


def parse_package_lock(content: str) -> List[Dependency]:
    """Parse ``package-lock.json`` into a flat list of resolved packages.

    Lockfile versions 2 and 3 list packages under ``packages``; version 1
    nests them under ``dependencies``, which is flattened here.

    Raises:
        ManifestParseError: If the content is not valid JSON
    """
    lock = _load_json_object(content, "package-lock.json")
    dependencies: List[Dependency] = []

    packages = lock.get("packages")
    if isinstance(packages, dict):
        for path, package in packages.items():
            # The empty key is the root project
            if not path or not isinstance(package, dict):
                continue
            if package.get("link"):
                continue
            name = package.get("name") or package_name_from_path(path)
            dependencies.append(Dependency(name=name, version=str(package.get("version", ""))))
        return dependencies

    stack = list(reversed(_dependency_items(lock, "lockfile")))
    while stack:
        name, package = stack.pop()
        if not isinstance(package, dict):
            continue
        dependencies.append(Dependency(name=name, version=str(package.get("version", ""))))
        stack.extend(reversed(_dependency_items(package, f"dependencies of {name}")))
    return dependencies


def _dependency_items(entry: Dict[str, Any], owner: str) -> List[Tuple[str, Any]]:
    nested = entry.get("dependencies") or {}
    if not isinstance(nested, dict):
        raise ManifestParseError("package-lock.json", f"{owner}: 'dependencies' must be an object")
    return list(nested.items())


def strip_range_prefix(specifier: str) -> str:
    """Remove a leading ``^`` or ``~`` from a package.json specifier."""
    specifier = specifier.strip()
    if specifier.startswith("^"):
        specifier = specifier[1:]
    if specifier.startswith("~"):
        specifier = specifier[1:]
    return specifier


def parse_package_json(content: str) -> List[Dependency]:
    """Parse ``package.json`` runtime and dev dependencies.

    Versions are the declared specifiers with ``^``/``~`` stripped; other
    range forms stay as written and simply fail to match later.

    Raises:
        ManifestParseError: If the content is not valid JSON
    """
    package = _load_json_object(content, "package.json")
    dependencies: List[Dependency] = []
    for section in PACKAGE_JSON_SECTIONS:
        entries = package.get(section)
        if not isinstance(entries, dict):
            continue
        for name, specifier in entries.items():
            dependencies.append(Dependency(name=name, version=strip_range_prefix(str(specifier))))
    return dependencies


class NpmExtractor(BaseExtractor):
    """Reads ``package-lock.json`` or, failing that, ``package.json``."""

    ecosystem = Ecosystem.NPM
    marker_files = ("package-lock.json", "package.json")

    def extract(self, working_dir: Path) -> ParsedDependencies:
        marker = self.find_marker(working_dir)
        if marker is None:
            return self._empty("No package-lock.json or package.json found")

        content = self.read_manifest(marker)
        if marker.name == "package-lock.json":
            dependencies = parse_package_lock(content)
        else:
            dependencies = parse_package_json(content)

        result = ParsedDependencies(
            dependencies=dependencies, source_file=marker, ecosystem=self.ecosystem.value
        )
        if not dependencies:
            result.add_warning(f"No dependencies found in {marker.name}")
        return result
