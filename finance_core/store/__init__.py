"""Persistence for finance entities."""

from finance_core.store.base import FinanceStore
from finance_core.store.memory import InMemoryFinanceStore

__all__ = ["FinanceStore", "InMemoryFinanceStore"]
