"""Utility functions and helpers for otel-checker."""

from .logging import get_logger, setup_logging
from .path_utils import find_single_project, find_wrapper, first_existing
from .performance import PerformanceMonitor, benchmark
from .toolchain import run_command

__all__ = [
    "setup_logging",
    "get_logger",
    "PerformanceMonitor",
    "benchmark",
    "find_single_project",
    "find_wrapper",
    "first_existing",
    "run_command",
]
