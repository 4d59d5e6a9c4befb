"""Registry selecting the dependency extractor for a language target."""

from pathlib import Path
from typing import Dict, List, Optional, Type

from ...utils.logging import get_logger
from ...utils.toolchain import CommandRunner
from .base import BaseExtractor
from .dotnet import DotNetExtractor
from .jvm import GradleExtractor, MavenExtractor
from .nodejs import NpmExtractor
from .python import PythonRequirementsExtractor

logger = get_logger("otel_checker.extractors")


class ExtractorRegistry:
    """Ordered filesystem-probe rules per language target.

    Each language maps to a list of extractor classes. The first one whose
    marker file exists in the working directory wins; when none match, the
    first rule is used so the run still produces a "not found" warning.
    """

    def __init__(self) -> None:
        self._rules: Dict[str, List[Type[BaseExtractor]]] = {}

    def register(self, language: str, extractor_class: Type[BaseExtractor]) -> None:
        """Append an extractor to a language's probe order.

        Args:
            language: Language target, e.g. ``java``
            extractor_class: Extractor to probe after the ones already registered
        """
        self._rules.setdefault(language, []).append(extractor_class)

    def get_rules(self, language: str) -> List[Type[BaseExtractor]]:
        return list(self._rules.get(language, []))

    def get_supported_languages(self) -> List[str]:
        return list(self._rules.keys())

    def select(
        self,
        language: str,
        working_dir: Path,
        runner: Optional[CommandRunner] = None,
        timeout: Optional[float] = None,
    ) -> Optional[BaseExtractor]:
        """Pick the extractor for a language and working directory.

        Args:
            language: Language target
            working_dir: Project directory probed for marker files
            runner: Command runner handed to the extractor
            timeout: Build tool timeout handed to the extractor

        Returns:
            Extractor instance, or None for languages without extractors
        """
        rules = self._rules.get(language)
        if not rules:
            return None

        extractors = [rule(runner=runner, timeout=timeout) for rule in rules]
        for extractor in extractors:
            if extractor.can_extract(working_dir):
                logger.debug(f"Selected {extractor.ecosystem.value} extractor for {language}")
                return extractor
        return extractors[0]


registry = ExtractorRegistry()
registry.register("java", MavenExtractor)
registry.register("java", GradleExtractor)
registry.register("js", NpmExtractor)
registry.register("python", PythonRequirementsExtractor)
registry.register("dotnet", DotNetExtractor)


def select_extractor(
    language: str,
    working_dir: Path,
    runner: Optional[CommandRunner] = None,
    timeout: Optional[float] = None,
) -> Optional[BaseExtractor]:
    """Select an extractor from the default registry."""
    return registry.select(language, working_dir, runner=runner, timeout=timeout)
