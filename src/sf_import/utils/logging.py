"""Structured logging for SF Import.

Console output goes through rich and stays human-readable; the optional log
file receives one JSON object per line so scheduled runs can be audited.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any

import structlog
from rich.console import Console
from rich.logging import RichHandler
from structlog.typing import EventDict, WrappedLogger

from sf_import import __version__

_ANSI_PATTERN = re.compile(r"\x1b\[[0-9;]*m")

APP_NAME = "sf-import"


def add_app_context(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """structlog processor stamping every event with the app name and version."""
    event_dict["app"] = APP_NAME
    event_dict["version"] = __version__
    return event_dict


class JSONFileFormatter(logging.Formatter):
    """One JSON line per record.

    Records arrive already rendered by structlog's console renderer, so
    colour codes are removed from the message first.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": _ANSI_PATTERN.sub("", record.getMessage()),
            "app": APP_NAME,
            "version": __version__,
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def _level(name: str | None, default: int) -> int:
    return getattr(logging, (name or "").upper(), default)


def _console_handler(level: int) -> logging.Handler:
    # Timestamps come from structlog
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setLevel(level)
    return handler


def _file_handler(log_file: str, level: int, log_format: str) -> logging.Handler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(path)
    handler.setLevel(level)
    if log_format == "json":
        handler.setFormatter(JSONFileFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


def configure_logging(
    level: str = "WARNING",
    log_format: str = "json",
    log_file: str | None = None,
    file_level: str | None = None,
) -> None:
    """Route structlog through the stdlib root logger.

    Replaces any handlers already on the root logger, so calling it again
    (one CLI invocation after another) does not duplicate output.

    Args:
        level: Console level
        log_format: File format, ``json`` or ``console``
        log_file: Log file path; no file logging when omitted
        file_level: File level, DEBUG when omitted
    """
    console_level = _level(level, logging.WARNING)
    file_log_level = _level(file_level, logging.DEBUG)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.addHandler(_console_handler(console_level))
    if log_file:
        root_logger.addHandler(_file_handler(log_file, file_log_level, log_format))

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(colors=False),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(min(console_level, file_log_level)),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def log_import_summary(
    logger: structlog.stdlib.BoundLogger,
    status: str,
    batches: int,
    imported: int,
    failed: int,
) -> None:
    """Log the end of a tick; warning level when any batch failed."""
    log = logger.warning if failed else logger.info
    log(
        "import_tick_finished",
        status=status,
        batches=batches,
        imported=imported,
        failed=failed,
    )


def log_error(
    logger: structlog.stdlib.BoundLogger,
    error: Exception,
    context: str,
    **extra: Any,
) -> None:
    """Log an exception with its type and where it happened.

    Args:
        logger: Logger instance
        error: Exception that occurred
        context: Operation that failed
        **extra: Additional fields
    """
    logger.error(
        "error_occurred",
        error_type=type(error).__name__,
        error_message=str(error),
        context=context,
        **extra,
        exc_info=True,
    )
