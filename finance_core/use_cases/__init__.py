"""Application use-cases composing the store, domain services and the event bus."""

from finance_core.use_cases.budget import (
    BudgetReport,
    ConfigureBudget,
    GetUserBudget,
    SettingsOutcome,
    UpdateBudgetSettings,
)
from finance_core.use_cases.categories import (
    CategoryOutcome,
    CreateFinancialCategory,
    DeleteFinancialCategory,
)
from finance_core.use_cases.debts import (
    GetDebtSummary,
    PaymentOutcome,
    RegisterDebtPayment,
    SimulateDebtPayoff,
)
from finance_core.use_cases.transactions import (
    CreateCreditCardTransaction,
    CreateTransaction,
    DeleteFinancialAccount,
    TransactionOutcome,
)

__all__ = [
    "BudgetReport",
    "CategoryOutcome",
    "ConfigureBudget",
    "CreateCreditCardTransaction",
    "CreateFinancialCategory",
    "CreateTransaction",
    "DeleteFinancialAccount",
    "DeleteFinancialCategory",
    "GetDebtSummary",
    "GetUserBudget",
    "PaymentOutcome",
    "RegisterDebtPayment",
    "SettingsOutcome",
    "SimulateDebtPayoff",
    "TransactionOutcome",
    "UpdateBudgetSettings",
]
