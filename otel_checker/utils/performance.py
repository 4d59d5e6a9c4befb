"""Timing helpers for otel-checker."""

import functools
import os
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional, TypeVar

from rich.console import Console
from rich.table import Table

from .logging import get_logger

F = TypeVar('F', bound=Callable[..., Any])

logger = get_logger("otel_checker.performance")


@dataclass
class PerformanceMetrics:
    """Timing of a single measured operation."""

    name: str
    execution_time: float


class PerformanceMonitor:
    """Collects timings of named operations."""

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        self.metrics: List[PerformanceMetrics] = []

    @contextmanager
    def measure(self, name: str) -> Iterator[None]:
        """Context manager for timing an operation.

        Args:
            name: Name of the operation being measured
        """
        if not self.enabled:
            yield
            return

        start_time = time.perf_counter()
        try:
            yield
        finally:
            self.metrics.append(PerformanceMetrics(name, time.perf_counter() - start_time))

    def get_summary(self) -> Dict[str, Any]:
        if not self.metrics:
            return {}

        total_time = sum(m.execution_time for m in self.metrics)
        by_name: Dict[str, float] = {}
        for metric in self.metrics:
            by_name[metric.name] = by_name.get(metric.name, 0.0) + metric.execution_time

        return {
            "total_executions": len(self.metrics),
            "total_time": total_time,
            "average_time": total_time / len(self.metrics),
            "operations": by_name,
        }

    def print_summary(self, console: Optional[Console] = None) -> None:
        """Print a timing table."""
        summary = self.get_summary()
        if not summary:
            return

        table = Table(title="Performance Summary")
        table.add_column("Operation", style="cyan")
        table.add_column("Time", style="green")

        for name, seconds in summary["operations"].items():
            table.add_row(name, f"{seconds:.4f}s")
        table.add_row("Total", f"{summary['total_time']:.4f}s")

        (console or Console()).print(table)


def benchmark(func: F) -> F:
    """Log the wall time of a function when OTEL_CHECKER_VERBOSE_BENCHMARK is set."""
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        start_time = time.perf_counter()
        result = func(*args, **kwargs)
        if os.environ.get("OTEL_CHECKER_VERBOSE_BENCHMARK"):
            logger.info(f"{func.__name__} took {time.perf_counter() - start_time:.4f} seconds")
        return result
    return wrapper  # type: ignore[return-value]
