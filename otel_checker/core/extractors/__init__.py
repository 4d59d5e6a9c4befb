"""Dependency extractors for the supported packaging ecosystems."""

from .base import BaseExtractor, Ecosystem
from .dotnet import DotNetExtractor
from .jvm import GradleExtractor, MavenExtractor
from .nodejs import NpmExtractor
from .python import PythonRequirementsExtractor
from .registry import ExtractorRegistry, registry, select_extractor

__all__ = [
    "BaseExtractor",
    "Ecosystem",
    "DotNetExtractor",
    "GradleExtractor",
    "MavenExtractor",
    "NpmExtractor",
    "PythonRequirementsExtractor",
    "ExtractorRegistry",
    "registry",
    "select_extractor",
]
