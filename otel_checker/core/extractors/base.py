"""Base extractor class for ecosystem dependency listings."""

import os
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

from ...errors import ManifestParseError
from ...utils.logging import get_logger
from ...utils.path_utils import first_existing
from ...utils.toolchain import CommandRunner, run_command
from ..models import ParsedDependencies


class Ecosystem(str, Enum):
    """Packaging ecosystems with a dedicated extractor."""

    MAVEN = "maven"
    GRADLE = "gradle"
    NPM = "npm"
    PYTHON = "python"
    DOTNET = "dotnet"
    RUBY = "ruby"


class BaseExtractor(ABC):
    """Turns ecosystem-native manifests or tool output into dependencies.

    Subclasses declare the marker files that gate them. ``extract`` must
    never fail because a manifest is absent: it returns an empty result with
    one warning instead. Unparsable manifests raise ``ManifestParseError``.
    """

    ecosystem: Ecosystem
    marker_files: Tuple[str, ...] = ()

    def __init__(
        self,
        runner: Optional[CommandRunner] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """Initialize the extractor.

        Args:
            runner: Command runner used for build tool invocations
            timeout: Seconds allowed per build tool invocation
        """
        self.runner: CommandRunner = runner or run_command
        self.timeout = timeout
        self.logger = get_logger(f"otel_checker.extractors.{self.ecosystem.value}")

    def find_marker(self, working_dir: Path) -> Optional[Path]:
        """Return the first marker file present in the working directory."""
        return first_existing(working_dir, self.marker_files)

    def can_extract(self, working_dir: Path) -> bool:
        return self.find_marker(working_dir) is not None

    @abstractmethod
    def extract(self, working_dir: Path) -> ParsedDependencies:
        """Produce the dependency list for a project.

        Args:
            working_dir: Project directory

        Returns:
            Parsed dependencies and any non-fatal warnings

        Raises:
            ManifestParseError: If a manifest exists but cannot be parsed
            ToolchainError: If the build tool cannot be run
        """

    def _empty(self, message: str, source: Optional[Path] = None) -> ParsedDependencies:
        result = ParsedDependencies(source_file=source, ecosystem=self.ecosystem.value)
        result.add_warning(message)
        return result

    def read_manifest(self, file_path: Path) -> str:
        """Read a manifest file as text.

        Raises:
            ManifestParseError: If the file is unreadable
        """
        if not os.access(file_path, os.R_OK):
            raise ManifestParseError(file_path.name, "file is not readable")
        try:
            return file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ManifestParseError(file_path.name, str(e)) from e

    def run_tool(self, args: List[str], working_dir: Path) -> str:
        self.logger.info(f"Reading {self.ecosystem.value} dependencies")
        return self.runner(args, working_dir, self.timeout)
