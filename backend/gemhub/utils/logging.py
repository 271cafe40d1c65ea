# backend/gemhub/utils/logging.py
"""
Logging configuration for GEM Hub.

Centralized setup with:
- Level from LOG_LEVEL (DEBUG in dev, INFO in prod, WARNING in tests)
- Correlation ID stamped on every record
- Text or JSON output (LOG_FORMAT)
- Third-party HTTP client chatter pinned to WARNING

Usage:
    from gemhub.utils import setup_logging

    # In main.py, before creating the FastAPI app
    setup_logging()

Log Levels:
    DEBUG   - Valuation inputs, simulated quotes, saves
    INFO    - Business events (transaction recorded, asset created, price refresh)
    WARNING - Recoverable issues (oversell clamped, category inferred, feed fallback)
    ERROR   - Failures requiring attention (commit failed, refresh job crashed)
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from gemhub.config import settings
from gemhub.utils.context import get_correlation_id

# timestamp | level | correlation_id | logger_name | message
DEFAULT_TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(correlation_id)s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

NO_CORRELATION_ID = "no-correlation-id"

NOISY_LOGGERS = [
    "httpx",
    "httpcore",
    "urllib3",
    "asyncio",
    "sqlalchemy.engine",
]

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# LogRecord attributes that are not "extra" fields
_STANDARD_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "correlation_id", "message", "taskName",
})


class CorrelationIdFilter(logging.Filter):
    """Adds `correlation_id` to every record passing through the handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or NO_CORRELATION_ID
        return True


class JsonFormatter(logging.Formatter):
    """
    One JSON object per line, for log aggregation.

    {"timestamp": "...", "level": "INFO", "logger": "gemhub.services.ledger",
     "correlation_id": "...", "message": "...", "extra": {...}}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "correlation_id": getattr(record, "correlation_id", NO_CORRELATION_ID),
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        extra = {}
        for key, value in record.__dict__.items():
            if key in _STANDARD_ATTRS:
                continue
            try:
                json.dumps(value)
                extra[key] = value
            except (TypeError, ValueError):
                extra[key] = str(value)

        if extra:
            log_entry["extra"] = extra

        return json.dumps(log_entry)


def setup_logging(
        level: str | None = None,
        log_format: str | None = None,
        suppress_noisy_loggers: bool = True,
) -> None:
    """
    Configure the root logger once at startup.

    Args:
        level: Log level name. Defaults to settings.log_level.
        log_format: "text" or "json". Defaults to settings.log_format.
        suppress_noisy_loggers: Pin third-party loggers to WARNING.

    Raises:
        ValueError: If the level name is unknown
    """
    level_name = level or settings.log_level
    log_level = _get_log_level(level_name)
    format_type = (log_format or settings.log_format).lower()

    if format_type == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(fmt=DEFAULT_TEXT_FORMAT, datefmt=DEFAULT_DATE_FORMAT)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(CorrelationIdFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    if suppress_noisy_loggers:
        for logger_name in NOISY_LOGGERS:
            logging.getLogger(logger_name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        f"Logging configured: level={level_name}, format={format_type}",
        extra={"config": {"level": level_name, "format": format_type}},
    )


def _get_log_level(level_str: str) -> int:
    name = level_str.upper().strip()
    if name not in _LEVELS:
        raise ValueError(
            f"Invalid log level: '{level_str}'. Valid levels are: {', '.join(_LEVELS)}"
        )
    return _LEVELS[name]
