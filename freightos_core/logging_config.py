"""
Freightos Logging Setup
=======================
Structured logging for the client and CLI.

Library modules log through ``structlog.get_logger(__name__)``; ``setup_logging``
routes those records into the standard ``logging`` tree so one handler (JSON
or plain text, on stderr) renders everything. stdout is left to the CLI's
JSON output.

Usage:
    from freightos_core.logging_config import setup_logging, log_event

    setup_logging(command="get-quote", level="DEBUG")
    log_event("quote.requested", origin="CNNGB", destination="GBSOU")
"""

import json
import logging
import sys
import traceback
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO

import structlog

SERVICE_NAME = "freightos-core"

command_var: ContextVar[str] = ContextVar("command", default="")

# LogRecord attributes that are not user supplied context
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys()
) | {"message", "asctime", "extra_data"}


def _record_context(record: logging.LogRecord) -> Dict[str, Any]:
    context: Dict[str, Any] = {}
    if hasattr(record, "extra_data"):
        context.update(record.extra_data)
    for key, value in record.__dict__.items():
        if key not in _RESERVED_ATTRS and not key.startswith("_"):
            context[key] = value
    return context


class JSONFormatter(logging.Formatter):
    """Formats log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": SERVICE_NAME,
            "command": command_var.get() or None,
        }
        log_data.update(_record_context(record))

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": traceback.format_exception(*record.exc_info),
            }

        log_data["source"] = {
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName,
        }

        return json.dumps(log_data, default=str)


class KeyValueFormatter(logging.Formatter):
    """Plain text formatter that appends structured context as key=value."""

    def __init__(self):
        super().__init__("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _record_context(record)
        if context:
            line += " | " + " ".join(f"{k}={v}" for k, v in context.items())
        return line


def configure_structlog() -> None:
    """
    Send structlog events through the standard ``logging`` tree.

    Runs on package import when nothing else configured structlog, so library
    warnings follow the host application's logging instead of printing to
    stdout.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.render_to_log_kwargs,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def setup_logging(
    command: str = "",
    level: str = "WARNING",
    json_output: bool = False,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Configure logging for a CLI run.

    Args:
        command: CLI command being executed, attached to every record
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Emit JSON lines instead of plain text
        stream: Destination stream (stderr by default)

    Returns:
        Configured root logger
    """
    if command:
        command_var.set(command)

    log_level = getattr(logging, level.upper(), logging.WARNING)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(JSONFormatter() if json_output else KeyValueFormatter())
    root_logger.addHandler(handler)

    configure_structlog()

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(log_level, logging.WARNING))
    logging.getLogger("httpcore").setLevel(max(log_level, logging.WARNING))

    root_logger.debug("Logging configured", extra={
        "extra_data": {"event": "logging.configured", "level": level.upper()}
    })

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name."""
    return logging.getLogger(name)


def log_event(
    event_type: str,
    level: str = "INFO",
    **kwargs
) -> None:
    """
    Log a structured event.

    Args:
        event_type: Type of event (e.g., "quote.requested")
        level: Log level
        **kwargs: Additional event data
    """
    logger = logging.getLogger("freightos.events")
    log_level = getattr(logging, level.upper(), logging.INFO)

    extra_data = {
        "event": event_type,
        "event_data": kwargs,
    }

    logger.log(log_level, f"Event: {event_type}", extra={"extra_data": extra_data})


def log_error(
    error: Exception,
    context: str = None,
    **kwargs
) -> None:
    """
    Log an error with full context.

    Args:
        error: The exception
        context: Description of what was happening
        **kwargs: Additional context
    """
    logger = logging.getLogger("freightos.errors")

    extra_data = {
        "error": True,
        "error_type": type(error).__name__,
        "error_message": str(error),
        "context": context,
        "error_data": kwargs,
    }

    logger.error(
        f"Error: {context or type(error).__name__}",
        exc_info=error,
        extra={"extra_data": extra_data}
    )
