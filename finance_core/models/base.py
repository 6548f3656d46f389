"""Base models shared across the finance domain."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from finance_core.exceptions import ValidationError


@dataclass
class DomainEvent:
    """In-process message describing a state change.

    Events are built by the factories in ``finance_core.events.events``,
    dispatched through an ``EventBus`` and then discarded; they are never
    persisted. ``event_data`` keys are snake_case (``user_id``,
    ``account_id``, ``amount``...).
    """

    event_name: str  # e.g. TransactionCreated
    event_data: dict[str, Any]
    occurred_on: datetime = field(default_factory=datetime.now)
    event_id: str = field(default_factory=lambda: uuid.uuid4().hex)


@dataclass(frozen=True)
class BudgetAmounts:
    """Monetary budget per bucket derived from salary and percentages."""

    fixed: Decimal  # necessidades
    variable: Decimal  # desejos
    investments: Decimal  # futuro
    total: Decimal


def new_id() -> str:
    """Return a new random entity identifier."""
    return uuid.uuid4().hex


def to_decimal(value: Any) -> Decimal:
    """Coerce ints, floats and strings to Decimal without binary float noise.

    Raises ``ValidationError`` for anything that is not a finite number.
    """
    try:
        if isinstance(value, Decimal):
            result = value
        elif isinstance(value, float):
            result = Decimal(str(value))
        else:
            result = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValidationError(f"Valor inválido: {value!r}") from exc

    if not result.is_finite():
        raise ValidationError(f"Valor inválido: {value!r}")
    return result
