"""
Structured logging for recordgate

Loggers are built explicitly by the caller and handed to every component
that logs (SchemaStore, Validator, RecordClassifier, RecordEnricher,
EventPipeline). There is no process-wide default logger.

Output goes to stderr so that command output on stdout stays parseable.
Level and format come from arguments, falling back to the LOG_LEVEL and
LOG_FORMAT environment variables.
"""
import logging
import os
import sys
import time
from datetime import datetime, timezone
from typing import IO, Any

from pythonjsonlogger import jsonlogger

DEFAULT_LOGGER_NAME = "recordgate"

JSON_FIELDS = "%(timestamp)s %(level)s %(logger)s %(module)s %(function)s %(message)s"
TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s [%(module)s:%(funcName)s] %(message)s"


class RecordJsonFormatter(jsonlogger.JsonFormatter):
    """
    One JSON object per line, with a UTC ISO-8601 timestamp and the
    emitting logger, module and function next to any extra fields
    """

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(
            timespec="milliseconds"
        )
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["module"] = record.module
        log_record["function"] = record.funcName


def build_formatter(format_type: str) -> logging.Formatter:
    """Formatter for "json" (default) or "text" output."""
    if format_type == "text":
        return logging.Formatter(fmt=TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    return RecordJsonFormatter(fmt=JSON_FIELDS)


def resolve_level(level: str | None) -> int:
    """Map a level name (any case) to its numeric value; unknown names mean INFO."""
    name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.INFO


def setup_logger(
    name: str = DEFAULT_LOGGER_NAME,
    level: str | None = None,
    format_type: str | None = None,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """
    Configure a logger with a single handler

    Calling it again for the same name replaces the handler.

    Args:
        name: Logger name
        level: Log level name (defaults to LOG_LEVEL env or INFO)
        format_type: "json" or "text" (defaults to LOG_FORMAT env or json)
        stream: Destination stream (defaults to stderr)

    Returns:
        Configured logger instance
    """
    log_level = resolve_level(level)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(build_formatter(format_type or os.getenv("LOG_FORMAT", "json")))

    logger = logging.getLogger(name)
    logger.setLevel(log_level)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_logger(name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
    """
    Logger for components constructed without one

    Child names of an already configured logger reuse its handler;
    otherwise the logger is configured on first use.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    parent = logger.parent
    while parent is not None and parent.name != "root":
        if parent.handlers:
            return logger
        parent = parent.parent
    return setup_logger(name)


class log_operation:
    """
    Logs the start and end of an operation with its duration

    Fields set on the context object while the block runs are added to the
    closing log line.

    Usage:
        with log_operation("Processing event", logger=logger, records=3) as op:
            op.fields["kept"] = 2
    """

    def __init__(self, operation_name: str, logger: logging.Logger, **extra_fields: Any):
        self.operation_name = operation_name
        self.logger = logger
        self.extra_fields = extra_fields
        self.fields: dict[str, Any] = {}
        self._started = 0.0

    def _extra(self, **fields: Any) -> dict[str, Any]:
        return {"operation": self.operation_name, **self.extra_fields, **self.fields, **fields}

    def __enter__(self) -> "log_operation":
        self._started = time.perf_counter()
        self.logger.info(f"Starting: {self.operation_name}", extra=self._extra())
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        duration = round(time.perf_counter() - self._started, 3)

        if exc_type is None:
            self.logger.info(
                f"Completed: {self.operation_name}",
                extra=self._extra(duration_seconds=duration, status="success"),
            )
        else:
            self.logger.error(
                f"Failed: {self.operation_name}",
                extra=self._extra(
                    duration_seconds=duration,
                    status="error",
                    error_type=exc_type.__name__,
                    error_message=str(exc_val),
                ),
            )
        return False
