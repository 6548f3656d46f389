"""Structured logging configuration for finance-core."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from finance_core.models.base import DomainEvent

# LogRecord attributes copied into JSON output when present
CONTEXT_FIELDS = ("event_name", "event_id", "handler", "user_id", "account_id")

STANDARD_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logging(
    level: str = "INFO",
    format_type: str = "standard",
) -> None:
    """Configure the root logger for finance-core.

    Parameters
    ----------
    level : str
        Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Unknown names
        fall back to INFO.
    format_type : str
        ``"standard"`` for pipe-separated text or ``"json"`` for one JSON
        object per line.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if format_type == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(fmt=STANDARD_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setLevel(log_level)
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    logging.getLogger("finance_core").setLevel(log_level)

    # Reduce noise from external libraries
    for noisy in ("confluent_kafka", "psycopg", "faker"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


class JsonFormatter(logging.Formatter):
    """Render records as JSON, including domain-event context fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                payload[name] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str, ensure_ascii=False)


def event_context(event: DomainEvent, **extra: Any) -> dict[str, Any]:
    """Build the ``extra=`` mapping used when logging about an event."""
    context: dict[str, Any] = {
        "event_name": event.event_name,
        "event_id": event.event_id,
    }
    user_id = event.event_data.get("user_id")
    if user_id is not None:
        context["user_id"] = user_id
    context.update(extra)
    return context


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name.

    Parameters
    ----------
    name : str
        Logger name (usually __name__).

    Returns
    -------
    logging.Logger
        Configured logger.
    """
    return logging.getLogger(name)
