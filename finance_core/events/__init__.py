"""Domain events: bus, event factories and handlers."""

from finance_core.events.bus import DispatchResult, ErrorPolicy, EventBus, HandlerResult
from finance_core.events.handlers import (
    BudgetTrackingHandler,
    CreateDefaultCategoriesHandler,
    UpdateAccountBalanceHandler,
    initialize_domain_event_handlers,
)

__all__ = [
    "BudgetTrackingHandler",
    "CreateDefaultCategoriesHandler",
    "DispatchResult",
    "ErrorPolicy",
    "EventBus",
    "HandlerResult",
    "UpdateAccountBalanceHandler",
    "initialize_domain_event_handlers",
]
