"""Structured JSON logging for NovelHub.

Provides:
- JSON-formatted logs for log aggregation systems
- Request/correlation ID propagation via context variables
- Human-readable console output for development

Usage:
    from novelhub.observability.logging import configure_logging

    configure_logging(json_format=True, level="INFO")

    logger = logging.getLogger(__name__)
    logger.info("Cache miss", extra={"cache_key": key})  # Includes request_id
"""

from __future__ import annotations

import contextvars
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="")
correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default=""
)

# LogRecord attributes that are not user-supplied extras
_STANDARD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "message",
    }
)


class JsonFormatter(logging.Formatter):
    """JSON log formatter with correlation ID support.

    Output format:
    {
        "timestamp": "2026-01-10T12:34:56.789Z",
        "level": "INFO",
        "logger": "novelhub.cache.accessor",
        "message": "Cache miss",
        "module": "accessor",
        "function": "fetch",
        "line": 42,
        "request_id": "abc-123",
        "cache_key": "novelhub:novel:n123"
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        request_id = request_id_var.get()
        if request_id:
            log_data["request_id"] = request_id

        correlation_id = correlation_id_var.get()
        if correlation_id:
            log_data["correlation_id"] = correlation_id

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                try:
                    json.dumps(value)
                    log_data[key] = value
                except (TypeError, ValueError):
                    log_data[key] = str(value)

        return json.dumps(log_data, default=str, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """Human-readable formatter for development.

    Output format:
    2026-01-10 12:34:56 | INFO | novelhub.api.app | Request processed | req=abc-123
    """

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        """Format log record for console output."""
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname

        if self.use_colors:
            color = self.COLORS.get(level, "")
            level = f"{color}{level}{self.RESET}"

        message = record.getMessage()

        request_id = request_id_var.get()
        context = f" | req={request_id[:8]}" if request_id else ""

        result = f"{timestamp} | {level:8} | {record.name} | {message}{context}"

        if record.exc_info:
            result += "\n" + self.formatException(record.exc_info)

        return result


def configure_logging(
    json_format: bool = True,
    level: str = "INFO",
    use_colors: bool = True,
) -> None:
    """Configure application-wide logging.

    Args:
        json_format: Use JSON format (recommended for production)
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        use_colors: Use ANSI colors in console format
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)

    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(ConsoleFormatter(use_colors=use_colors))

    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


class LogContext:
    """Context manager for adding temporary correlation context.

    Usage:
        with LogContext(request_id="cli-invalidate"):
            logger.info("Invalidating")  # Includes request_id
    """

    def __init__(self, request_id: str | None = None, correlation_id: str | None = None) -> None:
        self.request_id = request_id
        self.correlation_id = correlation_id
        self._request_token: contextvars.Token[str] | None = None
        self._correlation_token: contextvars.Token[str] | None = None

    def __enter__(self) -> "LogContext":
        if self.request_id is not None:
            self._request_token = request_id_var.set(self.request_id)
        if self.correlation_id is not None:
            self._correlation_token = correlation_id_var.set(self.correlation_id)
        return self

    def __exit__(self, *args: Any) -> None:
        if self._request_token is not None:
            request_id_var.reset(self._request_token)
        if self._correlation_token is not None:
            correlation_id_var.reset(self._correlation_token)
