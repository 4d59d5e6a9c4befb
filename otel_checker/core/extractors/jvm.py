"""Maven and Gradle dependency extractors."""

import json
import re
from pathlib import Path
from typing import Any, Dict, List, Set

from ...errors import ManifestParseError
from ...utils.path_utils import resolve_tool
from ..models import Dependency, ParsedDependencies
from .base import BaseExtractor, Ecosystem

MAVEN_LOG_PREFIX = "[INFO] "
MAVEN_JSON_START = "[INFO] {"
MAVEN_JSON_END = "[INFO] }"

GRADLE_BRANCH_MARKER = "---"
# Gradle annotations: (*) omitted repeat, (c) constraint, (n) not resolved
GRADLE_ANNOTATION_PATTERN = re.compile(r"\s+\((?:\*|c|n)\)$")


def extract_maven_json(output: str) -> str:
    """Cut the JSON dependency tree out of Maven log output.

    Only lines from the first ``[INFO] {`` line up to the matching
    ``[INFO] }`` line are kept, with the log prefix stripped. Lines of other
    log levels interleaved inside the block are dropped.
    """
    collected: List[str] = []
    in_json = False
    for line in output.splitlines():
        if not in_json and MAVEN_JSON_START in line:
            in_json = True
        if not in_json:
            continue
        index = line.find(MAVEN_LOG_PREFIX)
        if index >= 0:
            collected.append(line[index + len(MAVEN_LOG_PREFIX):])
        if MAVEN_JSON_END in line:
            break
    return "\n".join(collected)


def _maven_node(data: Dict[str, Any]) -> Dependency:
    return Dependency(
        namespace=str(data.get("groupId", "")),
        name=str(data.get("artifactId", "")),
        version=str(data.get("version", "")),
    )


def parse_maven_tree(output: str) -> List[Dependency]:
    """Parse ``mvn dependency:tree -DoutputType=json`` output.

    Args:
        output: Raw Maven output, including unrelated log lines

    Returns:
        A single-element list holding the project root with nested children,
        or an empty list when the output contains no tree

    Raises:
        ManifestParseError: If the embedded JSON is malformed
    """
    content = extract_maven_json(output)
    if not content.strip():
        return []

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ManifestParseError("Maven dependency tree", str(e)) from e
    if not isinstance(data, dict):
        raise ManifestParseError("Maven dependency tree", "expected a JSON object")

    try:
        root = _maven_node(data)
    except ValueError as e:
        raise ManifestParseError("Maven dependency tree", str(e)) from e

    # Build children iteratively; trees can be arbitrarily deep
    stack = [(data, root)]
    while stack:
        node_data, node = stack.pop()
        children = node_data.get("children") or []
        if not isinstance(children, list):
            raise ManifestParseError("Maven dependency tree", f"children of {node.coordinates} must be a list")
        for child_data in children:
            if not isinstance(child_data, dict):
                continue
            try:
                child = _maven_node(child_data)
            except ValueError:
                continue
            node.children.append(child)
            stack.append((child_data, child))

    return [root]


def parse_gradle_line(line: str) -> Dependency:
    """Parse one ``+--- group:artifact:version`` line.

    Raises:
        ValueError: If the line does not hold exactly three coordinates
    """
    index = line.index(GRADLE_BRANCH_MARKER)
    text = line[index + len(GRADLE_BRANCH_MARKER):].strip()
    text = GRADLE_ANNOTATION_PATTERN.sub("", text)

    resolved = None
    if " -> " in text:
        text, resolved = (part.strip() for part in text.split(" -> ", 1))

    fields = text.split(":")
    if len(fields) != 3 or not all(fields):
        raise ValueError(f"not a group:artifact:version coordinate: {text}")

    group, artifact, version = fields
    return Dependency(namespace=group, name=artifact, version=resolved or version)


def parse_gradle_tree(output: str) -> List[Dependency]:
    """Parse ``gradle dependencies`` text output into a flat list.

    Depth is discarded and the list is de-duplicated on the full
    ``group:artifact:version`` string, keeping the first occurrence.
    """
    dependencies: List[Dependency] = []
    seen: Set[str] = set()
    for line in output.splitlines():
        if GRADLE_BRANCH_MARKER not in line:
            continue
        try:
            dependency = parse_gradle_line(line)
        except ValueError:
            continue
        if dependency.coordinates in seen:
            continue
        seen.add(dependency.coordinates)
        dependencies.append(dependency)
    return dependencies


class MavenExtractor(BaseExtractor):
    """Reads the runtime dependency tree through ``mvn dependency:tree``."""

    ecosystem = Ecosystem.MAVEN
    marker_files = ("pom.xml",)

    def extract(self, working_dir: Path) -> ParsedDependencies:
        marker = self.find_marker(working_dir)
        if marker is None:
            return self._empty("No pom.xml found")

        tool = resolve_tool("mvn", "mvnw", working_dir)
        output = self.run_tool(
            [tool, "dependency:tree", "-Dscope=runtime", "-DoutputType=json"], working_dir
        )

        result = ParsedDependencies(source_file=marker, ecosystem=self.ecosystem.value)
        for dependency in parse_maven_tree(output):
            result.add_dependency(dependency)
        if not result.dependencies:
            result.add_warning("No Maven dependencies found")
        return result


class GradleExtractor(BaseExtractor):
    """Reads the runtime classpath through ``gradle dependencies``."""

    ecosystem = Ecosystem.GRADLE
    marker_files = ("build.gradle", "build.gradle.kts")

    def extract(self, working_dir: Path) -> ParsedDependencies:
        marker = self.find_marker(working_dir)
        if marker is None:
            return self._empty("No build.gradle or build.gradle.kts found")

        tool = resolve_tool("gradle", "gradlew", working_dir)
        output = self.run_tool(
            [tool, f"--build-file={marker.name}", "dependencies", "--configuration=runtimeClasspath"],
            working_dir,
        )

        result = ParsedDependencies(source_file=marker, ecosystem=self.ecosystem.value)
        for dependency in parse_gradle_tree(output):
            result.add_dependency(dependency)
        if not result.dependencies:
            result.add_warning("No Gradle dependencies found")
        return result
