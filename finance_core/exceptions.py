"""Custom exception hierarchy for finance-core."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from finance_core.events.bus import DispatchResult


class FinanceError(Exception):
    """Base exception for all finance-core errors."""

    code = "DOMAIN_ERROR"


class EntityNotFoundError(FinanceError):
    """Raised when a referenced entity does not exist."""

    code = "NOT_FOUND"


class ReferentialIntegrityError(EntityNotFoundError):
    """Raised when a foreign key reference is violated."""

    code = "REFERENTIAL_INTEGRITY"


class EntityAlreadyExistsError(FinanceError):
    """Raised when a unique entity (e.g. category name per user) already exists."""

    code = "ALREADY_EXISTS"


class InvalidEntityStateError(FinanceError):
    """Raised when an entity is in an invalid state for the operation."""

    code = "INVALID_STATE"


class ValidationError(FinanceError):
    """Raised when input values are malformed or out of range."""

    code = "VALIDATION_ERROR"


class BusinessRuleError(ValidationError):
    """Raised when a finance business rule is violated."""

    code = "BUSINESS_RULE_VIOLATION"


class InsufficientFundsError(BusinessRuleError):
    """Raised when an account cannot cover an expense."""

    code = "INSUFFICIENT_FUNDS"


class CreditLimitExceededError(BusinessRuleError):
    """Raised when a card purchase exceeds the available limit."""

    code = "CREDIT_LIMIT_EXCEEDED"


class BudgetExceededError(BusinessRuleError):
    """Raised when an expense does not fit the remaining bucket budget."""

    code = "BUDGET_EXCEEDED"


class ConfigurationError(FinanceError):
    """Raised when configuration is invalid or missing."""

    code = "CONFIGURATION_ERROR"


class EventDispatchError(FinanceError):
    """Raised by ``DispatchResult.raise_for_failures`` when handlers failed."""

    code = "EVENT_DISPATCH_FAILED"

    def __init__(self, message: str, result: DispatchResult | None = None) -> None:
        super().__init__(message)
        self.result = result


class StoreError(FinanceError):
    """Raised when a persistence operation fails."""

    code = "STORE_ERROR"


class PublisherError(FinanceError):
    """Raised when an event publisher cannot deliver an event."""

    code = "PUBLISHER_ERROR"
