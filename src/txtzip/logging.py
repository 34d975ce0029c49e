from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from pathlib import Path

_LOGGING_CONFIGURED = False


def setup_logging(filename: str | Path | None = None, *, verbose: bool = False) -> structlog.BoundLogger:
    """Set up structured logging for the txtzip package.

    The first call configures structlog; later calls only reconfigure the
    stdlib handlers when a log file or a verbosity change is requested.
    Existing root handlers are only replaced in that second case.

    Args:
        filename: Optional path to a log file. If None, logs are written to stderr.
        verbose: Lower the threshold from INFO to DEBUG.

    Returns:
        A structlog logger instance configured for the txtzip package.
    """
    global _LOGGING_CONFIGURED  # noqa: PLW0603
    if not _LOGGING_CONFIGURED or filename or verbose:
        handlers: list[logging.Handler] = []
        if filename:
            handlers.append(logging.FileHandler(str(filename), encoding="utf-8"))
        else:
            handlers.append(logging.StreamHandler(sys.stderr))

        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            handlers=handlers,
            format="%(message)s",
            force=bool(filename or verbose),
        )
    if not _LOGGING_CONFIGURED:
        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _LOGGING_CONFIGURED = True

    return structlog.get_logger("txtzip")


logger = setup_logging()
