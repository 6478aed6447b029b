"""Logging setup for the command-line interface."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "buildstamp"
LOG_FORMAT = "%(message)s"
DEFAULT_LEVEL = "WARNING"


def resolve_level(verbose: bool = False, quiet: bool = False, level: str | None = None) -> int:
    """Pick the log level from CLI flags and the configured level name.

    ``--verbose`` wins over ``--quiet``. A missing or unknown level name
    falls back to WARNING.
    """
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.ERROR
    resolved = logging.getLevelName((level or DEFAULT_LEVEL).strip().upper())
    return resolved if isinstance(resolved, int) else logging.WARNING


def configure_logging(verbose: bool = False, quiet: bool = False, level: str | None = None) -> None:
    """Send buildstamp log records to stderr through rich.

    Safe to call more than once; the previous handler is replaced.

    Args:
        verbose: Log everything down to DEBUG.
        quiet: Only log errors.
        level: Configured level name used when neither flag is set.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(resolve_level(verbose, quiet, level))
