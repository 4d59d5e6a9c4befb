"""otel-checker - checks a project's dependencies against OpenTelemetry instrumentation catalogs."""

__version__ = "0.1.0"

from .config import CheckerConfig
from .core.checker import check_sdk_setup
from .core.matcher import InstrumentationMatcher
from .output.formatters import ConsoleFormatter, JSONFormatter
from .output.reporter import Reporter

__all__ = [
    "CheckerConfig",
    "InstrumentationMatcher",
    "Reporter",
    "ConsoleFormatter",
    "JSONFormatter",
    "check_sdk_setup",
]
