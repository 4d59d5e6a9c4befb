"""Core extraction, version range and matching logic for otel-checker."""

from .matcher import InstrumentationMatcher
from .models import Catalog, Dependency, Instrumentation, InstrumentationType, ParsedDependencies
from .versions import VersionRange, parse_version_range

__all__ = [
    "Catalog",
    "Dependency",
    "Instrumentation",
    "InstrumentationMatcher",
    "InstrumentationType",
    "ParsedDependencies",
    "VersionRange",
    "parse_version_range",
]
