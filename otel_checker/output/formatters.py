"""Output formatters for otel-checker results."""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..core.models import MatchResult
from ..utils.logging import get_logger
from .reporter import ComponentReporter, Reporter

OUTCOME_STYLES = {
    "check": ("green", "✓"),
    "warning": ("yellow", "!"),
    "error": ("red", "✗"),
}


class ConsoleFormatter:
    """Rich console formatter for check results."""

    def __init__(self, console: Optional[Console] = None) -> None:
        """Initialize the console formatter.

        Args:
            console: Rich console instance
        """
        self.console = console or Console()
        self.logger = get_logger("otel_checker.output.console")

    def format_results(self, reporter: Reporter, language: str, elapsed: float) -> None:
        """Display one table per component followed by a summary panel.

        Args:
            reporter: Reporter holding the run's outcomes
            language: Language target that was checked
            elapsed: Run time in seconds
        """
        for component in reporter.components:
            self.console.print(self._create_component_table(component))
        self.console.print(self._create_summary_panel(reporter, language, elapsed))

    def _create_component_table(self, component: ComponentReporter) -> Table:
        table = Table(title=component.name, show_header=True)
        table.add_column("", width=1)
        table.add_column("Outcome", style="white")

        rows = (
            [("check", message) for message in component.checks]
            + [("warning", message) for message in component.warnings]
            + [("error", message) for message in component.errors]
        )
        for outcome, message in rows:
            style, marker = OUTCOME_STYLES[outcome]
            table.add_row(Text(marker, style=style), Text(message, style=style))
        return table

    def _create_summary_panel(self, reporter: Reporter, language: str, elapsed: float) -> Panel:
        totals = reporter.totals()
        if totals["errors"]:
            style, title = "red", f"Found {totals['errors']} error(s)"
        elif totals["warnings"]:
            style, title = "yellow", "Completed with warnings"
        else:
            style, title = "green", "All checks passed"

        content = (
            f"Language: {language}\n"
            f"Successful checks: {totals['checks']}\n"
            f"Warnings: {totals['warnings']}\n"
            f"Errors: {totals['errors']}\n"
            f"Run time: {elapsed:.2f}s"
        )
        return Panel(content, title=title, style=style)

    def format_matches(self, identity: str, version: str, results: List[MatchResult]) -> None:
        """Display the links found for a single library."""
        links = [link for result in results for link in result.links]
        if not links:
            self.console.print(Panel(f"No instrumentation found for {identity}:{version}", style="yellow"))
            return

        table = Table(title=f"Instrumentation for {identity}:{version}")
        table.add_column("Link", style="cyan")
        for link in links:
            table.add_row(link)
        self.console.print(table)


class JSONFormatter:
    """JSON formatter for check results."""

    def __init__(self, output_file: Optional[Path] = None) -> None:
        """Initialize the JSON formatter.

        Args:
            output_file: Optional output file path
        """
        self.output_file = output_file
        self.logger = get_logger("otel_checker.output.json")

    def format_results(
        self,
        reporter: Reporter,
        language: str,
        elapsed: float,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Format the reporter's outcomes as a JSON-serializable dict.

        Args:
            reporter: Reporter holding the run's outcomes
            language: Language target that was checked
            elapsed: Run time in seconds
            metadata: Optional additional metadata

        Returns:
            Formatted JSON data
        """
        result: Dict[str, Any] = {
            "summary": {
                "language": language,
                **reporter.totals(),
                "run_time_seconds": elapsed,
                "timestamp": datetime.now().isoformat(),
            },
            "components": reporter.results(),
        }
        if metadata:
            result["metadata"] = metadata
        return result

    def save_results(self, results: Dict[str, Any], output_file: Optional[Path] = None) -> None:
        """Save results to a JSON file.

        Raises:
            ValueError: If no output file is configured
            OSError: If the file cannot be written
        """
        file_path = output_file or self.output_file
        if not file_path:
            raise ValueError("No output file specified")

        try:
            with open(file_path, "w", encoding="utf-8") as f:
                json.dump(results, f, indent=2, ensure_ascii=False)
            self.logger.info(f"Results saved to {file_path}")
        except OSError as e:
            self.logger.error(f"Failed to save results to {file_path}: {e}")
            raise
