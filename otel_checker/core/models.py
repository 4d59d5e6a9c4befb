"""Data models shared by extractors, catalog loaders and the matcher."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple


@dataclass
class Dependency:
    """One resolved library occurrence extracted from a manifest.

    ``namespace`` holds the Maven group; it is empty for ecosystems with
    flat naming such as npm, Python and NuGet.
    """

    name: str
    version: str = ""
    namespace: str = ""
    children: List["Dependency"] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate the dependency."""
        if not self.name:
            raise ValueError("Dependency name cannot be empty")

    @property
    def identity(self) -> str:
        """Value compared against a catalog instrumentation identity."""
        if self.namespace:
            return f"{self.namespace}:{self.name}"
        return self.name

    @property
    def coordinates(self) -> str:
        return f"{self.identity}:{self.version}"

    def __str__(self) -> str:
        return self.coordinates


@dataclass
class ParsedDependencies:
    """Dependencies produced by one extractor run."""

    dependencies: List[Dependency] = field(default_factory=list)
    source_file: Optional[Path] = None
    ecosystem: str = ""
    warnings: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def add_dependency(self, dependency: Dependency) -> None:
        self.dependencies.append(dependency)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def walk(self) -> Iterator[Dependency]:
        """Yield every dependency, children included, in pre-order."""
        stack = list(reversed(self.dependencies))
        while stack:
            dependency = stack.pop()
            yield dependency
            stack.extend(reversed(dependency.children))

    def __len__(self) -> int:
        return len(self.dependencies)


class InstrumentationType(str, Enum):
    """Integration kind of an instrumentation."""

    AGENT = "AGENT"
    LIBRARY = "LIBRARY"

    @classmethod
    def from_key(cls, key: str) -> "InstrumentationType":
        """Map a catalog key (``javaagent``, ``agent``, ``library``) to a kind."""
        normalized = str(key).strip().upper()
        if normalized in ("JAVAAGENT", "AGENT"):
            return cls.AGENT
        if normalized == "LIBRARY":
            return cls.LIBRARY
        raise ValueError(f"Unknown instrumentation type: {key}")


class TargetStyle(str, Enum):
    """How a catalog expresses which library an instrumentation targets.

    NAMED catalogs compare the instrumentation name with the dependency
    identity. COORDINATES catalogs prefix each range expression with
    ``group:artifact:``.
    """

    NAMED = "named"
    COORDINATES = "coordinates"


@dataclass
class Instrumentation:
    """A catalog entry describing one available instrumentation."""

    name: str
    link: str = ""
    src_path: str = ""
    target_versions: Dict[InstrumentationType, List[str]] = field(default_factory=dict)

    def expressions(self, kind: InstrumentationType) -> List[str]:
        return self.target_versions.get(kind, [])


@dataclass
class Catalog:
    """Instrumentations keyed by module name.

    Loaded once per run and read-only afterwards.
    """

    modules: Dict[str, List[Instrumentation]] = field(default_factory=dict)
    target_style: TargetStyle = TargetStyle.NAMED
    source: str = ""
    issues: List[str] = field(default_factory=list)

    def iter_instrumentations(self) -> Iterator[Tuple[str, Instrumentation]]:
        for module_name, instrumentations in self.modules.items():
            for instrumentation in instrumentations:
                yield module_name, instrumentation

    @property
    def is_empty(self) -> bool:
        return not any(self.modules.values())

    def __len__(self) -> int:
        return sum(len(instrumentations) for instrumentations in self.modules.values())


@dataclass
class MatchResult:
    """Links found for one dependency."""

    dependency: Dependency
    links: List[str] = field(default_factory=list)
    depth: int = 0

    @property
    def supported(self) -> bool:
        return bool(self.links)
