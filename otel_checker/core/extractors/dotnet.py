""".NET NuGet package extractor."""

import json
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Dict, List, Optional

from ...errors import ManifestParseError
from ...utils.path_utils import find_files_with_suffix, find_single_project
from ..models import Dependency, ParsedDependencies
from .base import BaseExtractor, Ecosystem

PROJECT_SUFFIX = ".csproj"
PACKAGE_SECTIONS = ("topLevelPackages", "transitivePackages")

# Shared frameworks each project SDK references without a PackageReference
IMPLICIT_PACKAGES: Dict[str, List[str]] = {
    "Microsoft.NET.Sdk": ["Microsoft.NETCore.App"],
    "Microsoft.NET.Sdk.Web": ["Microsoft.AspNetCore.App", "Microsoft.NETCore.App"],
    "Microsoft.NET.Sdk.Razor": ["Microsoft.AspNetCore.App", "Microsoft.NETCore.App"],
    "Microsoft.NET.Sdk.BlazorWebAssembly": ["Microsoft.NETCore.App"],
    "Microsoft.NET.Sdk.Worker": ["Microsoft.NETCore.App"],
    "Microsoft.NET.Sdk.WindowsDesktop": ["Microsoft.WindowsDesktop.App", "Microsoft.NETCore.App"],
    "Microsoft.Build.NoTargets": [],
}


def implicit_packages(sdk: str) -> List[str]:
    """Return the framework packages a project SDK brings in implicitly.

    Raises:
        ValueError: If the SDK is not known
    """
    # Versioned references such as Microsoft.NET.Sdk.Web/8.0.100 name the same SDK
    name = sdk.split("/", 1)[0].strip()
    try:
        return list(IMPLICIT_PACKAGES[name])
    except KeyError:
        raise ValueError(f"Unrecognized SDK: {sdk}") from None


def parse_project_sdk(content: str) -> str:
    """Return the ``Sdk`` attribute of an SDK-style project file.

    Raises:
        ManifestParseError: If the project file is not valid XML
    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise ManifestParseError("project file", str(e)) from e
    tag = root.tag.rsplit("}", 1)[-1]
    if tag != "Project":
        raise ManifestParseError("project file", f"unexpected root element {tag}")
    return root.get("Sdk", "")


def _object_list(container: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    """Return a list of JSON objects stored under a key.

    Raises:
        ManifestParseError: If the value is not a list of objects
    """
    items = container.get(key) or []
    if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
        raise ManifestParseError("dotnet package list", f"'{key}' must be a list of objects")
    return items


def parse_package_list(content: str) -> List[Dependency]:
    """Parse ``dotnet list package --format json --include-transitive`` output.

    Every target framework lists its top-level and transitive packages
    independently; the lists are concatenated in document order.

    Raises:
        ManifestParseError: If the output is not the expected JSON document
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ManifestParseError("dotnet package list", str(e)) from e
    if not isinstance(data, dict):
        raise ManifestParseError("dotnet package list", "expected a JSON object")

    dependencies: List[Dependency] = []
    for project in _object_list(data, "projects"):
        for framework in _object_list(project, "frameworks"):
            for section in PACKAGE_SECTIONS:
                for package in _object_list(framework, section):
                    dependency = _package_dependency(package)
                    if dependency is not None:
                        dependencies.append(dependency)
    return dependencies


def _package_dependency(package: Dict[str, Any]) -> Optional[Dependency]:
    package_id = package.get("id")
    if not package_id:
        return None
    return Dependency(name=str(package_id), version=str(package.get("resolvedVersion", "")))


class DotNetExtractor(BaseExtractor):
    """Reads NuGet packages of the single project in the working directory."""

    ecosystem = Ecosystem.DOTNET

    def find_marker(self, working_dir: Path) -> Optional[Path]:
        projects = find_files_with_suffix(working_dir, PROJECT_SUFFIX)
        return projects[0] if projects else None

    def extract(self, working_dir: Path) -> ParsedDependencies:
        if self.find_marker(working_dir) is None:
            return self._empty(f"No {PROJECT_SUFFIX} file found")

        project = find_single_project(working_dir, PROJECT_SUFFIX)
        sdk = parse_project_sdk(self.read_manifest(project))

        output = self.run_tool(
            ["dotnet", "list", "package", "--format", "json", "--include-transitive"], working_dir
        )
        result = ParsedDependencies(
            dependencies=parse_package_list(output),
            source_file=project,
            ecosystem=self.ecosystem.value,
            metadata={"sdk": sdk},
        )
        if not result.dependencies:
            result.add_warning("No dependencies found in project")
        return result
