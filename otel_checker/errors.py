"""Exception types raised by otel-checker."""

from typing import Optional


class OtelCheckerError(Exception):
    """Base class for all otel-checker errors."""


class RangeParseError(OtelCheckerError, ValueError):
    """A version range expression could not be parsed."""

    def __init__(self, expression: str, reason: str) -> None:
        self.expression = expression
        self.reason = reason
        super().__init__(f"{reason}: {expression}")


class ManifestParseError(OtelCheckerError):
    """A manifest or tool output exists but cannot be parsed."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Could not parse {source}: {reason}")


class CatalogLoadError(OtelCheckerError):
    """The instrumentation catalog could not be fetched or decoded."""


class ToolchainError(OtelCheckerError):
    """An external build tool could not be run or failed."""

    def __init__(self, command: str, reason: str, output: Optional[str] = None) -> None:
        self.command = command
        self.reason = reason
        self.output = output
        message = f"Error running {command}: {reason}"
        if output:
            message += f"\n{output}"
        super().__init__(message)


class ProjectDiscoveryError(OtelCheckerError):
    """The project file for an ecosystem could not be located."""


class ConfigError(OtelCheckerError):
    """A configuration file could not be read."""
