"""Run configuration for otel-checker.

Settings are layered: defaults, then an optional YAML or JSON file, then
``OTEL_CHECKER_*`` environment variables, then command line flags.
"""

import json
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigError

LANGUAGES = ("java", "js", "python", "dotnet", "ruby")
CATALOG_SOURCES = ("embedded", "remote")

DEFAULT_CATALOG_URLS: Dict[str, str] = {
    "java": (
        "https://raw.githubusercontent.com/open-telemetry/opentelemetry-java-instrumentation/"
        "refs/heads/main/docs/instrumentation-list.yaml"
    ),
    "python": (
        "https://raw.githubusercontent.com/open-telemetry/opentelemetry-python-contrib/"
        "refs/heads/main/instrumentation/README.md"
    ),
}


@dataclass
class CheckerConfig:
    """Settings for one check run."""

    language: str = ""
    manual_instrumentation: bool = False
    debug: bool = False
    debug_transitive: bool = False
    working_dir: Path = field(default_factory=Path.cwd)
    catalog_source: str = "embedded"
    catalog_urls: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_CATALOG_URLS))
    command_timeout: Optional[float] = None
    fetch_timeout: Optional[float] = None
    output_file: Optional[Path] = None

    @property
    def mode(self) -> str:
        return "manual" if self.manual_instrumentation else "auto"

    def catalog_url(self, language: Optional[str] = None) -> Optional[str]:
        return self.catalog_urls.get(language or self.language)


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_float(key: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as e:
        raise ConfigError(f"{key} must be a number, got {value!r}") from e


def load_config_file(config_path: Path) -> Dict[str, Any]:
    """Read a YAML or JSON configuration file.

    Args:
        config_path: File with a flat mapping of setting names

    Returns:
        Settings found in the file

    Raises:
        ConfigError: If the file is missing, unreadable or not a mapping
    """
    if not config_path.is_file():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            if config_path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Error loading config from {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")
    return data


def apply_settings(config: CheckerConfig, settings: Dict[str, Any]) -> None:
    """Copy known settings onto a config, ignoring ``None`` values."""
    known = {f.name for f in fields(CheckerConfig)}
    for key, value in settings.items():
        key = key.replace("-", "_")
        if key not in known:
            raise ConfigError(f"Unknown config setting: {key}")
        if value is None:
            continue
        if key in ("working_dir", "output_file"):
            value = Path(value)
        elif key == "catalog_urls":
            value = {**config.catalog_urls, **value}
        setattr(config, key, value)


def load_environment_overrides(config: CheckerConfig, environ: Optional[Dict[str, str]] = None) -> None:
    """Apply ``OTEL_CHECKER_*`` environment variables."""
    environ = os.environ if environ is None else environ

    if language := environ.get("OTEL_CHECKER_LANGUAGE"):
        config.language = language.strip().lower()
    if source := environ.get("OTEL_CHECKER_CATALOG_SOURCE"):
        config.catalog_source = source.strip().lower()
    if debug := environ.get("OTEL_CHECKER_DEBUG"):
        config.debug = _env_bool(debug)
    if timeout := environ.get("OTEL_CHECKER_COMMAND_TIMEOUT"):
        config.command_timeout = _env_float("OTEL_CHECKER_COMMAND_TIMEOUT", timeout)
    if timeout := environ.get("OTEL_CHECKER_FETCH_TIMEOUT"):
        config.fetch_timeout = _env_float("OTEL_CHECKER_FETCH_TIMEOUT", timeout)


def load_config(
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
    environ: Optional[Dict[str, str]] = None,
) -> CheckerConfig:
    """Build a config from file, environment and explicit overrides.

    Raises:
        ConfigError: If the file or an environment value is invalid
    """
    config = CheckerConfig()
    if config_path is not None:
        apply_settings(config, load_config_file(config_path))
    load_environment_overrides(config, environ)
    if overrides:
        apply_settings(config, overrides)
    return config


def validate_config(config: CheckerConfig) -> List[str]:
    """Return a list of problems with a config, empty when it is usable."""
    errors = []

    if not config.language:
        errors.append("language is required")
    elif config.language not in LANGUAGES:
        errors.append(f"language must be one of {', '.join(LANGUAGES)}, got {config.language!r}")

    if config.catalog_source not in CATALOG_SOURCES:
        errors.append(
            f"catalog_source must be one of {', '.join(CATALOG_SOURCES)}, got {config.catalog_source!r}"
        )

    if config.command_timeout is not None and config.command_timeout <= 0:
        errors.append("command_timeout must be positive")
    if config.fetch_timeout is not None and config.fetch_timeout <= 0:
        errors.append("fetch_timeout must be positive")

    if not config.working_dir.is_dir():
        errors.append(f"working_dir {config.working_dir} is not a directory")

    return errors
