"""
DesignSync Structured Logging Module.

Provides consistent, structured logging throughout the application.
Requires Python 3.11+.
"""

import logging
import sys
from typing import Any, TextIO

import structlog
from structlog.types import Processor

from utils.config import get_settings

_log_file: TextIO | None = None


def _add_app_context(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add application context to all log entries."""
    settings = get_settings()
    event_dict["app"] = settings.app_name
    event_dict["version"] = settings.app_version
    return event_dict


def configure_logging(level: str | None = None, fmt: str | None = None) -> None:
    """
    Configure structured logging for the application.

    Call this once at application startup. Explicit arguments override
    the LOG_LEVEL / LOG_FORMAT settings.
    """
    settings = get_settings()
    level_name = (level or settings.logging.level).upper()
    log_format = fmt or settings.logging.format
    log_level = getattr(logging, level_name, logging.INFO)

    # Common processors for all output formats
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
        _add_app_context,
    ]

    if log_format == "json":
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(
                colors=sys.stderr.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            ),
        ]

    global _log_file
    close_log_file()

    # Diagnostics go to stderr (or a file) so operator lines on stdout stay readable
    if settings.logging.file_path is not None:
        _log_file = settings.logging.file_path.open("a", encoding="utf-8")
        logger_factory = structlog.WriteLoggerFactory(file=_log_file)
    else:
        logger_factory = structlog.PrintLoggerFactory(file=sys.stderr)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=logger_factory,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
    )

    # Suppress noisy loggers
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("watchdog").setLevel(logging.WARNING)


def close_log_file() -> None:
    """Close the diagnostics file opened by configure_logging, if any."""
    global _log_file
    if _log_file is not None:
        _log_file.close()
        _log_file = None


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


# Pre-configured logger for quick imports
logger = get_logger("designsync")


def bind_sync_context(**values: Any) -> None:
    """
    Attach fields such as record_id or design_file to every log entry
    emitted from the current context.
    """
    structlog.contextvars.bind_contextvars(**values)


def clear_sync_context() -> None:
    structlog.contextvars.clear_contextvars()


class LoggerMixin:
    """
    Mixin class to add logging capability to any class.

    Usage:
        class Uploader(LoggerMixin):
            def push(self, record_id):
                self.log.info("push_started", record_id=record_id)
    """

    @property
    def log(self) -> structlog.stdlib.BoundLogger:
        """Get logger bound to this class name."""
        if not hasattr(self, "_logger"):
            self._logger = get_logger(self.__class__.__name__)
        return self._logger
