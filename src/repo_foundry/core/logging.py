"""Structured logging configuration.

Uses python-json-logger for JSON output when ``log_format=json``; the
default text format is meant for reading straight from a CI log.
"""

import logging
import sys
from contextvars import ContextVar
from typing import Any

from pythonjsonlogger import jsonlogger

from repo_foundry.config import Settings

# "owner/repo" of the repository being worked on
repository_ctx: ContextVar[str | None] = ContextVar("repository", default=None)


class RepositoryContextFilter(logging.Filter):
    """Log filter that adds the current repository to all log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        repository = repository_ctx.get()
        if repository:
            record.repository = repository
        return True


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with additional fields."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = self.formatTime(record)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name

        if getattr(record, "repository", None):
            log_record["repository"] = record.repository

        log_record["module"] = record.module
        log_record["function"] = record.funcName
        log_record["line"] = record.lineno


def setup_logging(settings: Settings) -> None:
    """Configure logging for a run."""
    handler = logging.StreamHandler(sys.stdout)

    if settings.log_format == "json":
        formatter: logging.Formatter = CustomJsonFormatter(
            fmt="%(timestamp)s %(level)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler.setFormatter(formatter)
    handler.addFilter(RepositoryContextFilter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(settings.log_level)

    # Request lines from the HTTP stack would drown the run summary
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logging.debug(
        "Logging configured",
        extra={"log_level": settings.log_level, "log_format": settings.log_format},
    )
