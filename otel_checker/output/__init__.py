"""Reporting and output formatting."""

from .formatters import ConsoleFormatter, JSONFormatter
from .reporter import ComponentReporter, Reporter

__all__ = ["ComponentReporter", "ConsoleFormatter", "JSONFormatter", "Reporter"]
