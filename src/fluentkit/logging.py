"""Logging helpers for applications that use fluentkit.

fluentkit only emits records through module loggers below `fluentkit` and never
configures logging on import. Applications that want to see what the helpers
do (directory cleanup, barcode saves, failed DNS lookups, values that did not
parse) can attach a Rich console handler to the `fluentkit` logger tree and to
the loggers of the libraries it wraps with `enable_logging()`, and remove it
again with `disable_logging()`.
"""

from __future__ import annotations

import logging
import platform
import sys
from importlib.metadata import PackageNotFoundError, version
from typing import TYPE_CHECKING

from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from logging import Logger

# pylint: disable=too-few-public-methods

PROJECT_LOGGER = "fluentkit"

# Top-level loggers of the wrapped libraries that log through `logging`.
LIBRARY_LOGGERS = ("PIL", "reportlab", "babel", "dns", "dateutil", "phonenumbers")

# Distributions wrapped by fluentkit, by their name on the package index.
WRAPPED_DISTRIBUTIONS = (
    "babel",
    "phonenumbers",
    "reportlab",
    "pillow",
    "dnspython",
    "python-dateutil",
)

CONSOLE_HANDLER_NAME = "fluentkit-console"


class SourcePrefixFilter(logging.Filter):
    """Label records from the wrapped libraries with their library name.

    Records from the `fluentkit` tree get an empty `record.prefix`; records
    from a wrapped library get `"[PIL] "` and the like, so both can share one
    console format. Records from any other logger are dropped.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        source = record.name.split(".")[0]
        if source == PROJECT_LOGGER:
            record.prefix = ""
            return True
        if source in LIBRARY_LOGGERS:
            record.prefix = f"[{source}] "
            return True
        return False


def _console_handlers(logger: logging.Logger) -> list[logging.Handler]:
    return [h for h in logger.handlers if h.get_name() == CONSOLE_HANDLER_NAME]


def enable_logging(
    level: int = logging.DEBUG,
    console: Console | None = None,
    color: bool = True,
    show_path: bool = False,
) -> RichHandler:
    """Show fluentkit's log records on a Rich console.

    The handler is attached to the `fluentkit` logger and to the top-level
    loggers of the wrapped libraries, not to the root logger, so the
    application's own logging setup is left alone. The `fluentkit` logger is
    set to `level`; library loggers keep their levels. Calling this again
    replaces the previous handler.

    Args:
        level: Minimum level shown for fluentkit records.
        console: Console to write to; defaults to stderr.
        color: Enable color output when the default console is used.
        show_path: Show the source file and line of each record.

    Returns:
        RichHandler: The attached handler.
    """
    disable_logging()

    if console is None:
        console = Console(color_system="auto" if color else None, stderr=True)

    handler = RichHandler(
        level=level,
        console=console,
        rich_tracebacks=True,
        show_time=False,
        show_path=show_path,
        enable_link_path=show_path,
    )
    handler.set_name(CONSOLE_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(fmt="%(prefix)s%(message)s"))
    handler.addFilter(SourcePrefixFilter())

    project_logger = logging.getLogger(PROJECT_LOGGER)
    project_logger.setLevel(level)
    for name in (PROJECT_LOGGER, *LIBRARY_LOGGERS):
        logging.getLogger(name).addHandler(handler)

    return handler


def disable_logging() -> None:
    """Remove the handler installed by `enable_logging()` and reset the level."""
    for name in (PROJECT_LOGGER, *LIBRARY_LOGGERS):
        target = logging.getLogger(name)
        for handler in _console_handlers(target):
            target.removeHandler(handler)
    logging.getLogger(PROJECT_LOGGER).setLevel(logging.NOTSET)


def _installed_version(distribution: str) -> str:
    try:
        return version(distribution)
    except PackageNotFoundError:
        return "<not installed>"


def log_environment(logger: Logger) -> None:
    """Log the fluentkit version and the versions of the wrapped libraries.

    Emits an INFO one-liner with the fluentkit version, and DEBUG lines with
    the Python and platform versions and one line per wrapped distribution.

    Args:
        logger: Logger used to emit the messages.
    """
    logger.info("fluentkit %s", _installed_version(PROJECT_LOGGER))

    logger.debug("Python: %s", sys.version.split()[0])
    logger.debug("Platform: %s %s", platform.system(), platform.release())
    for distribution in WRAPPED_DISTRIBUTIONS:
        logger.debug("%s: %s", distribution, _installed_version(distribution))
