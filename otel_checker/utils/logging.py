"""Logging utilities for otel-checker.

All loggers live under the ``otel_checker`` package logger, which owns a
single rich handler on stderr. Stdout stays reserved for results.
"""

import logging
import sys
from pathlib import Path
from typing import Any, MutableMapping, Optional, Tuple

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

PACKAGE_LOGGER = "otel_checker"

LOG_THEME = Theme({
    "logging.level.debug": "dim",
    "logging.level.info": "cyan",
    "logging.level.warning": "yellow",
    "logging.level.error": "red",
    "logging.level.critical": "red bold",
})

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class CheckerLogger(logging.LoggerAdapter):
    """Adapter tagging every record with the component that emitted it.

    The component is the last segment of the logger name, so
    ``otel_checker.extractors.maven`` logs as ``maven``.
    """

    def __init__(self, name: str) -> None:
        super().__init__(logging.getLogger(name), {"component": name.rsplit(".", 1)[-1]})

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def _configure_package_logger() -> None:
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if any(isinstance(handler, RichHandler) for handler in package_logger.handlers):
        return

    # Markup off: messages carry bracketed version ranges such as [1.0,2.0)
    handler = RichHandler(
        console=Console(stderr=True, theme=LOG_THEME),
        show_time=True,
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter(fmt="%(component)s: %(message)s", datefmt="[%X]"))
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.WARNING)
    package_logger.propagate = False


def setup_logging(
    level: int = logging.WARNING,
    log_file: Optional[Path] = None,
    verbose: bool = False
) -> None:
    """Set log levels for a run.

    Args:
        level: Level for otel-checker loggers
        log_file: Optional file receiving a copy of otel-checker records
        verbose: Shortcut for DEBUG
    """
    if verbose:
        level = logging.DEBUG

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        package_logger.addHandler(file_handler)

    # Third-party libraries log through the root logger
    logging.basicConfig(level=logging.WARNING, format=FILE_FORMAT, stream=sys.stderr)
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: str) -> CheckerLogger:
    """Get an otel-checker logger.

    Args:
        name: Logger name, conventionally ``otel_checker.<component>``

    Returns:
        Logger adapter writing through the package handler
    """
    return CheckerLogger(name)


_configure_package_logger()
