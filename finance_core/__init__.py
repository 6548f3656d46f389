"""Personal-finance core: budgets, business rules and domain events."""

__version__ = "0.1.0"
