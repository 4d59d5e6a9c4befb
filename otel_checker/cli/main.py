"""Main CLI interface for otel-checker."""

import time
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel

from ..catalog.sources import load_catalog
from ..config import CATALOG_SOURCES, LANGUAGES, load_config, validate_config
from ..core.checker import check_sdk_setup, instrumentation_kind
from ..core.extractors import Ecosystem, registry
from ..core.matcher import InstrumentationMatcher
from ..core.models import Dependency
from ..errors import CatalogLoadError, ConfigError
from ..output.formatters import ConsoleFormatter, JSONFormatter
from ..output.reporter import Reporter
from ..utils.logging import get_logger, setup_logging
from ..utils.performance import PerformanceMonitor

app = typer.Typer(
    name="otel-checker",
    help="Check a project's OpenTelemetry setup against the instrumentation catalogs",
    add_completion=False,
)

console = Console()
logger = get_logger("otel_checker.cli")

ECOSYSTEM_LANGUAGES = {
    Ecosystem.MAVEN.value: "java",
    Ecosystem.GRADLE.value: "java",
    Ecosystem.NPM.value: "js",
    Ecosystem.PYTHON.value: "python",
    Ecosystem.DOTNET.value: "dotnet",
}


@app.command()
def check(
    language: Optional[str] = typer.Option(
        None,
        "--language",
        "-l",
        help=f"Language target: {', '.join(LANGUAGES)}",
    ),
    manual_instrumentation: bool = typer.Option(
        False,
        "--manual-instrumentation",
        help="Check code-based instrumentation instead of automatic instrumentation",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Also report libraries without available instrumentation",
    ),
    debug_transitive: bool = typer.Option(
        False,
        "--debug-transitive",
        help="With --debug, report transitive libraries as well",
    ),
    path: Optional[Path] = typer.Option(
        None,
        "--path",
        "-p",
        help="Project directory to check",
    ),
    catalog: Optional[str] = typer.Option(
        None,
        "--catalog",
        help=f"Catalog source: {', '.join(CATALOG_SOURCES)}",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        help="YAML or JSON config file",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file for JSON results",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging",
    ),
    performance: bool = typer.Option(
        False,
        "--performance",
        help="Show performance summary",
    ),
) -> None:
    """Check the SDK setup of a project."""
    setup_logging(verbose=verbose)

    overrides = {
        "language": language.lower() if language else None,
        "manual_instrumentation": manual_instrumentation or None,
        "debug": debug or None,
        "debug_transitive": debug_transitive or None,
        "working_dir": path,
        "catalog_source": catalog,
        "output_file": output,
    }
    try:
        config = load_config(config_file, overrides)
    except ConfigError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    problems = validate_config(config)
    if problems:
        for problem in problems:
            console.print(f"[red]Error: {problem}[/red]")
        raise typer.Exit(1)

    logger.debug(f"Running check with {config}")
    monitor = PerformanceMonitor(enabled=performance)
    reporter = Reporter()
    start_time = time.perf_counter()
    check_sdk_setup(config, reporter, performance_monitor=monitor)
    elapsed = time.perf_counter() - start_time

    ConsoleFormatter(console).format_results(reporter, config.language, elapsed)

    if config.output_file:
        json_formatter = JSONFormatter(config.output_file)
        results = json_formatter.format_results(
            reporter,
            config.language,
            elapsed,
            metadata={"mode": config.mode, "catalog_source": config.catalog_source},
        )
        try:
            json_formatter.save_results(results)
        except OSError as e:
            console.print(f"[red]Error: could not write {config.output_file}: {e}[/red]")
            raise typer.Exit(1)

    if performance:
        monitor.print_summary(console)

    if reporter.has_errors():
        raise typer.Exit(1)


@app.command()
def match(
    ecosystem: str = typer.Argument(..., help="Ecosystem: maven, gradle, npm, python or dotnet"),
    identity: str = typer.Argument(..., help="Library identity, group:artifact for Maven and Gradle"),
    version: str = typer.Argument(..., help="Library version"),
    manual_instrumentation: bool = typer.Option(
        False,
        "--manual-instrumentation",
        help="Match library instrumentation instead of agent instrumentation",
    ),
    catalog: str = typer.Option("embedded", "--catalog", help="Catalog source: embedded or remote"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Show the instrumentation links matching a single library version."""
    setup_logging(verbose=verbose)

    language = ECOSYSTEM_LANGUAGES.get(ecosystem.lower())
    if language is None:
        console.print(f"[red]Error: unsupported ecosystem {ecosystem}[/red]")
        raise typer.Exit(1)

    namespace, name = "", identity
    if language == "java":
        if identity.count(":") != 1:
            console.print("[red]Error: Maven and Gradle identities must be group:artifact[/red]")
            raise typer.Exit(1)
        namespace, name = identity.split(":")
    elif language == "python":
        # Requirements names are case-insensitive and catalog names are lowercased
        name = identity.lower()

    try:
        config = load_config(overrides={"language": language, "catalog_source": catalog})
        loaded = load_catalog(language, config)
    except (ConfigError, CatalogLoadError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    matcher = InstrumentationMatcher(loaded, enable_performance_monitoring=False)
    kind = instrumentation_kind(language, manual_instrumentation)
    results = matcher.match([Dependency(name=name, version=version, namespace=namespace)], kind)
    for module, error in matcher.range_errors:
        console.print(f"[yellow]Warning: invalid version range in module {module}: {error}[/yellow]")

    ConsoleFormatter(console).format_matches(identity, version, results)


@app.command()
def info() -> None:
    """Show otel-checker information."""
    console.print(Panel.fit(
        "[bold blue]otel-checker[/bold blue]\n"
        "Checks which of a project's libraries have OpenTelemetry\n"
        "instrumentation available",
        title="Information",
    ))

    console.print(f"\n[bold]Languages:[/bold] {', '.join(LANGUAGES)}")
    for language in registry.get_supported_languages():
        rules = ", ".join(rule.ecosystem.value for rule in registry.get_rules(language))
        console.print(f"  {language}: {rules}")
    console.print("  ruby: Gemfile.lock presence check")
    console.print(f"[bold]Catalog sources:[/bold] {', '.join(CATALOG_SOURCES)}")


def main() -> None:
    """Main entry point for the otel-checker CLI."""
    app()


if __name__ == "__main__":
    main()
