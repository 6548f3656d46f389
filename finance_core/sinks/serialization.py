"""Shared serialization utilities for publishers and stores."""

from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from finance_core.models.base import DomainEvent


def to_dict(obj: Any) -> dict:
    """Convert object to dictionary."""
    if is_dataclass(obj):
        return dataclass_to_dict(obj)
    elif isinstance(obj, dict):
        return {k: serialize_value(v) for k, v in obj.items()}
    else:
        return {"value": str(obj)}


def dataclass_to_dict(obj: Any) -> dict:
    """Convert dataclass to dict with proper serialization."""
    result = {}
    for key, value in asdict(obj).items():
        result[key] = serialize_value(value)
    return result


def event_to_dict(event: DomainEvent) -> dict:
    """Wire representation of a domain event.

    Parameters
    ----------
    event : DomainEvent
        Event to serialize.

    Returns
    -------
    dict
        ``event_id``, ``event_name``, ``occurred_on`` (ISO-8601) and the
        serialized ``data`` payload.
    """
    return {
        "event_id": event.event_id,
        "event_name": event.event_name,
        "occurred_on": event.occurred_on.isoformat(),
        "data": serialize_value(event.event_data),
    }


def serialize_value(value: Any) -> Any:
    """Serialize a value for JSON output."""
    if isinstance(value, Decimal):
        return str(value)
    elif isinstance(value, Enum):
        return value.value
    elif isinstance(value, datetime):
        return value.isoformat()
    elif isinstance(value, date):
        return value.isoformat()
    elif isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    elif isinstance(value, (list, tuple)):
        return [serialize_value(v) for v in value]
    return value
