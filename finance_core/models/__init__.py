"""Domain models for personal-finance management."""

from finance_core.models.account import FinancialAccount
from finance_core.models.base import BudgetAmounts, DomainEvent
from finance_core.models.category import FinancialCategory
from finance_core.models.credit_card import CreditCard, CreditCardTransaction
from finance_core.models.debt import Debt, DebtPayment
from finance_core.models.enums import (
    AccountType,
    BudgetStatus,
    CardBrand,
    CategoryStatus,
    CategoryType,
    DebtPaymentType,
    DebtStatus,
    DebtType,
    RuleCategory,
    TransactionType,
)
from finance_core.models.settings import UserFinanceSettings
from finance_core.models.transaction import Transaction

__all__ = [
    "AccountType",
    "BudgetAmounts",
    "BudgetStatus",
    "CardBrand",
    "CategoryStatus",
    "CategoryType",
    "CreditCard",
    "CreditCardTransaction",
    "Debt",
    "DebtPayment",
    "DebtPaymentType",
    "DebtStatus",
    "DebtType",
    "DomainEvent",
    "FinancialAccount",
    "FinancialCategory",
    "RuleCategory",
    "Transaction",
    "TransactionType",
    "UserFinanceSettings",
]
