"""Matching of dependencies against the instrumentation catalog."""

from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Set, Tuple

from ..errors import RangeParseError
from ..utils.logging import get_logger
from ..utils.performance import PerformanceMonitor
from .models import Catalog, Dependency, InstrumentationType, MatchResult, TargetStyle
from .versions import VersionRange, parse_version_range, semantic_version


class OutcomeSink(Protocol):
    """Anything accepting the three structured outcomes."""

    def add_successful_check(self, message: str) -> None: ...

    def add_warning(self, message: str) -> None: ...

    def add_error(self, message: str) -> None: ...


@dataclass
class IndexedRange:
    """A parsed range expression with the instrumentation it belongs to."""

    module: str
    link: str
    version_range: VersionRange


class InstrumentationMatcher:
    """Finds reference links for dependencies in one catalog.

    Range expressions are parsed once per kind and indexed by the identity
    they target. Malformed expressions are collected in ``range_errors``
    instead of aborting, and the rest of the catalog stays usable.
    """

    def __init__(self, catalog: Catalog, enable_performance_monitoring: bool = True) -> None:
        """Initialize the matcher.

        Args:
            catalog: Catalog loaded for this run
            enable_performance_monitoring: Enable timing of match operations
        """
        self.catalog = catalog
        self.logger = get_logger("otel_checker.matcher")
        self.performance_monitor = PerformanceMonitor(enable_performance_monitoring)
        self._indexes: Dict[InstrumentationType, Dict[str, List[IndexedRange]]] = {}
        self.range_errors: List[Tuple[str, RangeParseError]] = []
        self._reported: Set[Tuple[str, str]] = set()

    def _split_expression(self, expression: str) -> Tuple[Optional[str], str]:
        """Split a coordinates expression ``group:artifact:range``.

        Returns:
            Tuple of target identity (None for named catalogs) and range text
        """
        if self.catalog.target_style is not TargetStyle.COORDINATES:
            return None, expression
        parts = expression.split(":")
        if len(parts) != 3:
            raise RangeParseError(expression, "expected group:artifact:range")
        return f"{parts[0]}:{parts[1]}", parts[2]

    def _record_error(self, module: str, error: RangeParseError) -> None:
        key = (module, error.expression)
        if key in self._reported:
            return
        self._reported.add(key)
        self.range_errors.append((module, error))
        self.logger.warning(f"Invalid version range in module {module}: {error}")

    def _build_index(self, kind: InstrumentationType) -> Dict[str, List[IndexedRange]]:
        """Build an index of parsed ranges by target identity."""
        with self.performance_monitor.measure("build_instrumentation_index"):
            index: Dict[str, List[IndexedRange]] = {}
            for module, instrumentation in self.catalog.iter_instrumentations():
                for expression in instrumentation.expressions(kind):
                    try:
                        identity, range_text = self._split_expression(expression)
                        version_range = parse_version_range(range_text)
                    except RangeParseError as e:
                        self._record_error(module, RangeParseError(expression, e.reason))
                        continue
                    index.setdefault(identity or instrumentation.name, []).append(
                        IndexedRange(module, instrumentation.link, version_range)
                    )
            return index

    def index_for(self, kind: InstrumentationType) -> Dict[str, List[IndexedRange]]:
        if kind not in self._indexes:
            self._indexes[kind] = self._build_index(kind)
        return self._indexes[kind]

    def find_links(self, dependency: Dependency, kind: InstrumentationType) -> List[str]:
        """Return the distinct links whose ranges contain the dependency version.

        Links keep the order of first discovery. Versions that cannot be
        parsed never match.
        """
        candidates = self.index_for(kind).get(dependency.identity)
        if not candidates:
            return []

        version = semantic_version(dependency.version)
        if version is None:
            self.logger.debug(f"Ignoring unparsable version {dependency.coordinates}")
            return []

        links: List[str] = []
        for candidate in candidates:
            if candidate.version_range.contains(version) and candidate.link not in links:
                links.append(candidate.link)
        return links

    def links_for_identity(self, identity: str, kind: InstrumentationType) -> List[str]:
        """Return the distinct links targeting an identity, whatever its version."""
        links: List[str] = []
        for candidate in self.index_for(kind).get(identity, []):
            if candidate.link not in links:
                links.append(candidate.link)
        return links

    def match(
        self,
        dependencies: List[Dependency],
        kind: InstrumentationType,
        include_children: bool = True,
    ) -> List[MatchResult]:
        """Match dependencies and, optionally, their children in pre-order."""
        with self.performance_monitor.measure("match_dependencies"):
            results = []
            stack = [(dependency, 0) for dependency in reversed(dependencies)]
            while stack:
                dependency, depth = stack.pop()
                results.append(MatchResult(dependency, self.find_links(dependency, kind), depth))
                if include_children:
                    stack.extend((child, depth + 1) for child in reversed(dependency.children))
            return results

    def report(
        self,
        dependencies: List[Dependency],
        kind: InstrumentationType,
        sink: OutcomeSink,
        debug: bool = False,
        debug_transitive: bool = False,
    ) -> List[MatchResult]:
        """Emit one outcome per supported dependency.

        Unsupported dependencies are reported as warnings only when verbose:
        top-level nodes when ``debug`` is set, transitive nodes only when
        ``debug_transitive`` is set as well. Each malformed catalog range is
        reported once as an error.

        Returns:
            Match results for every visited node
        """
        results = self.match(dependencies, kind)
        for result in results:
            verbose = debug if result.depth == 0 else debug and debug_transitive
            coordinates = result.dependency.coordinates
            if result.supported:
                sink.add_successful_check(
                    f"Found supported library: {coordinates} at {', '.join(result.links)}"
                )
            elif verbose:
                sink.add_warning(f"Found unsupported library: {coordinates}")

        for module, error in self.range_errors:
            sink.add_error(f"Error parsing version range in module {module}: {error}")
        self.range_errors = []
        return results
