"""Presence checks for required OpenTelemetry packages.

Unlike extractors these never build dependency nodes: they only look for
package names in a manifest's text.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..errors import ManifestParseError
from .matcher import OutcomeSink


@dataclass
class ForbiddenPackage:
    name: str
    message: str


@dataclass
class GateResult:
    """Outcome of one presence check."""

    source_file: Optional[Path] = None
    found: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)
    forbidden: List[ForbiddenPackage] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


@dataclass
class PresenceGate:
    """Substring check of required package names in a manifest.

    Args:
        manifest: File name looked up in the working directory
        required: Package names required per mode (``"auto"``/``"manual"``)
        forbidden: Packages that must not appear, per mode
        quoted: Match ``"name"`` instead of the bare name (JSON manifests)
        found_message: Template for a present package, ``{name}`` is filled in
        missing_message: Template for an absent package
        absent_message: Warning used when the manifest does not exist
    """

    manifest: str
    required: Dict[str, Tuple[str, ...]]
    forbidden: Dict[str, Tuple[ForbiddenPackage, ...]] = field(default_factory=dict)
    quoted: bool = False
    found_message: str = "Found required dependency: {name}"
    missing_message: str = "Missing required dependency: {name}"
    absent_message: str = ""

    def _needle(self, name: str) -> str:
        return f'"{name}"' if self.quoted else name

    def evaluate(self, content: str, manual: bool) -> GateResult:
        mode = "manual" if manual else "auto"
        result = GateResult()
        for name in self.required.get(mode, ()):
            if self._needle(name) in content:
                result.found.append(name)
            else:
                result.missing.append(name)
        for package in self.forbidden.get(mode, ()):
            if self._needle(package.name) in content:
                result.forbidden.append(package)
        return result

    def check(self, working_dir: Path, manual: bool) -> GateResult:
        """Evaluate the gate against the manifest in a working directory.

        A missing manifest yields an empty result with a warning.

        Raises:
            ManifestParseError: If the manifest cannot be read
        """
        path = working_dir / self.manifest
        if not path.is_file():
            result = GateResult()
            result.warnings.append(self.absent_message or f"Could not find {self.manifest}")
            return result
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ManifestParseError(self.manifest, str(e)) from e
        result = self.evaluate(content, manual)
        result.source_file = path
        return result

    def report(self, result: GateResult, sink: OutcomeSink) -> None:
        """Turn a gate result into outcomes on a component reporter."""
        for message in result.warnings:
            sink.add_warning(message)
        for name in result.found:
            sink.add_successful_check(self.found_message.format(name=name))
        for name in result.missing:
            sink.add_error(self.missing_message.format(name=name))
        for package in result.forbidden:
            sink.add_error(package.message)


RUBY_GATE = PresenceGate(
    manifest="Gemfile.lock",
    required={
        "auto": ("opentelemetry-sdk", "opentelemetry-instrumentation-all"),
        "manual": ("opentelemetry-sdk", "opentelemetry-api", "opentelemetry-common"),
    },
    missing_message=(
        "Missing required OpenTelemetry Ruby dependency: {name}. "
        "Add it to your Gemfile and run 'bundle install'."
    ),
    absent_message="Could not find Gemfile.lock. Run 'bundle install' to generate it.",
)

NPM_GATE = PresenceGate(
    manifest="package.json",
    required={
        "auto": ("@opentelemetry/auto-instrumentations-node", "@opentelemetry/api"),
        "manual": ("@opentelemetry/api",),
    },
    forbidden={
        "manual": (
            ForbiddenPackage(
                "@opentelemetry/exporter-trace-otlp-proto",
                "Dependency @opentelemetry/exporter-trace-otlp-proto is not supported. "
                "Switch to @opentelemetry/exporter-trace-otlp-http instead",
            ),
        ),
    },
    quoted=True,
    found_message="Dependency {name} added on package.json",
    missing_message="Dependency {name} missing on package.json",
    absent_message="Could not find package.json",
)
