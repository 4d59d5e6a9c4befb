"""SDK setup check: extract dependencies, load the catalog and report coverage."""

from typing import Dict, Optional, Tuple

from ..catalog.online import fetch_catalog_text
from ..catalog.sources import Fetcher, load_catalog
from ..config import CheckerConfig
from ..errors import CatalogLoadError, ManifestParseError, ProjectDiscoveryError, ToolchainError
from ..output.reporter import Reporter
from ..utils.logging import get_logger
from ..utils.performance import PerformanceMonitor
from ..utils.toolchain import CommandRunner
from .extractors.base import Ecosystem
from .extractors.dotnet import implicit_packages
from .extractors.registry import select_extractor
from .gates import NPM_GATE, RUBY_GATE, PresenceGate
from .matcher import InstrumentationMatcher, OutcomeSink
from .models import Catalog, InstrumentationType, ParsedDependencies

SDK_COMPONENT = "SDK"

# (auto, manual) instrumentation kind per language
INSTRUMENTATION_KINDS: Dict[str, Tuple[InstrumentationType, InstrumentationType]] = {
    "java": (InstrumentationType.AGENT, InstrumentationType.LIBRARY),
    "dotnet": (InstrumentationType.AGENT, InstrumentationType.LIBRARY),
    "js": (InstrumentationType.LIBRARY, InstrumentationType.LIBRARY),
    "python": (InstrumentationType.AGENT, InstrumentationType.LIBRARY),
}

GATES: Dict[str, PresenceGate] = {
    "js": NPM_GATE,
    "ruby": RUBY_GATE,
}


def instrumentation_kind(language: str, manual: bool) -> InstrumentationType:
    """Kind of instrumentation to match for a language and mode.

    Raises:
        ValueError: If the language has no instrumentation catalog
    """
    try:
        auto_kind, manual_kind = INSTRUMENTATION_KINDS[language]
    except KeyError:
        raise ValueError(f"No instrumentation catalog for language {language}") from None
    return manual_kind if manual else auto_kind


class SdkChecker:
    """Runs the SDK check for one language target."""

    def __init__(
        self,
        config: CheckerConfig,
        runner: Optional[CommandRunner] = None,
        fetcher: Fetcher = fetch_catalog_text,
        performance_monitor: Optional[PerformanceMonitor] = None,
    ) -> None:
        """Initialize the checker.

        Args:
            config: Run configuration
            runner: Command runner for build tools, defaults to subprocess
            fetcher: Function downloading remote catalogs
            performance_monitor: Optional monitor collecting timings
        """
        self.config = config
        self.runner = runner
        self.fetcher = fetcher
        self.performance_monitor = performance_monitor or PerformanceMonitor(enabled=False)
        self.logger = get_logger("otel_checker.checker")

    def run_gate(self, sink: OutcomeSink) -> None:
        gate = GATES.get(self.config.language)
        if gate is None:
            return
        try:
            result = gate.check(self.config.working_dir, self.config.manual_instrumentation)
        except ManifestParseError as e:
            sink.add_error(str(e))
            return
        gate.report(result, sink)

    def load_catalog(self, sink: OutcomeSink) -> Catalog:
        """Load the catalog, degrading to an empty one on failure."""
        with self.performance_monitor.measure("load_catalog"):
            try:
                catalog = load_catalog(self.config.language, self.config, fetcher=self.fetcher)
            except CatalogLoadError as e:
                sink.add_error(f"Error reading supported libraries: {e}")
                return Catalog(source="unavailable")

        for issue in catalog.issues:
            sink.add_warning(issue)
        return catalog

    def extract(self, sink: OutcomeSink) -> Optional[ParsedDependencies]:
        """Run the selected extractor, reporting failures for its ecosystem only."""
        extractor = select_extractor(
            self.config.language,
            self.config.working_dir,
            runner=self.runner,
            timeout=self.config.command_timeout,
        )
        if extractor is None:
            return None

        with self.performance_monitor.measure("extract_dependencies"):
            try:
                parsed = extractor.extract(self.config.working_dir)
            except ProjectDiscoveryError as e:
                sink.add_error(f"Failed to find project file: {e}")
                return None
            except (ManifestParseError, ToolchainError) as e:
                sink.add_error(str(e))
                return None

        if extractor.ecosystem is Ecosystem.DOTNET and parsed.source_file is not None:
            message = f"Found project file: {parsed.source_file.name}"
            sdk = parsed.metadata.get("sdk")
            if sdk:
                message += f" (Sdk: {sdk})"
            sink.add_successful_check(message)
        for warning in parsed.warnings:
            sink.add_warning(warning)
        self.logger.info(f"Extracted {len(parsed)} {extractor.ecosystem.value} dependencies")
        return parsed

    def report_sdk_packages(
        self,
        sdk: str,
        matcher: InstrumentationMatcher,
        kind: InstrumentationType,
        sink: OutcomeSink,
    ) -> None:
        """Report catalog entries for the frameworks a .NET project SDK implies."""
        try:
            packages = implicit_packages(sdk)
        except ValueError as e:
            sink.add_error(str(e))
            return
        if not packages:
            sink.add_warning(f"No implicit packages found for SDK: {sdk}")
            return
        for package in packages:
            links = matcher.links_for_identity(package, kind)
            if links:
                sink.add_successful_check(f"Found supported instrumentation for {package}: {', '.join(links)}")
            else:
                self.logger.debug(f"No instrumentation for implicit package {package}")

    def run(self, sink: OutcomeSink) -> Optional[ParsedDependencies]:
        """Check the project and emit outcomes.

        Returns:
            The extracted dependencies, or None when nothing was extracted
        """
        language = self.config.language
        self.logger.info(f"Checking {language} SDK setup in {self.config.working_dir}")

        self.run_gate(sink)
        if language not in INSTRUMENTATION_KINDS:
            return None

        catalog = self.load_catalog(sink)
        parsed = self.extract(sink)
        if parsed is None:
            return None

        kind = instrumentation_kind(language, self.config.manual_instrumentation)
        matcher = InstrumentationMatcher(catalog, enable_performance_monitoring=False)
        # Projects without an Sdk attribute are legacy style and imply nothing
        sdk = parsed.metadata.get("sdk")
        if sdk:
            self.report_sdk_packages(sdk, matcher, kind, sink)
        with self.performance_monitor.measure("match_dependencies"):
            matcher.report(
                parsed.dependencies,
                kind,
                sink,
                debug=self.config.debug,
                debug_transitive=self.config.debug_transitive,
            )
        return parsed


def check_sdk_setup(
    config: CheckerConfig,
    reporter: Reporter,
    runner: Optional[CommandRunner] = None,
    fetcher: Fetcher = fetch_catalog_text,
    performance_monitor: Optional[PerformanceMonitor] = None,
) -> Optional[ParsedDependencies]:
    """Run the SDK check and record outcomes under the ``SDK`` component.

    Args:
        config: Run configuration
        reporter: Reporter collecting outcomes
        runner: Command runner for build tools
        fetcher: Function downloading remote catalogs
        performance_monitor: Optional monitor collecting timings

    Returns:
        The extracted dependencies, or None when nothing was extracted
    """
    checker = SdkChecker(config, runner=runner, fetcher=fetcher, performance_monitor=performance_monitor)
    return checker.run(reporter.component(SDK_COMPONENT))
