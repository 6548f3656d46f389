"""Persistence contract used by handlers and use-cases."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Protocol, runtime_checkable

from finance_core.models import (
    CreditCard,
    CreditCardTransaction,
    Debt,
    DebtPayment,
    FinancialAccount,
    FinancialCategory,
    Transaction,
    UserFinanceSettings,
)


@runtime_checkable
class FinanceStore(Protocol):
    """Async storage for the finance entities.

    Lookups return ``None`` for missing rows. Writes that reference a
    missing parent raise ``ReferentialIntegrityError``; updates and
    deletes of a missing row raise ``EntityNotFoundError``.
    """

    # Settings
    async def get_settings(self, user_id: str) -> UserFinanceSettings | None: ...

    async def save_settings(self, settings: UserFinanceSettings) -> None: ...

    # Accounts
    async def add_account(self, account: FinancialAccount) -> None: ...

    async def get_account(self, account_id: str) -> FinancialAccount | None: ...

    async def adjust_account_balance(self, account_id: str, delta: Decimal) -> FinancialAccount:
        """Add ``delta`` (may be negative) to the current balance."""
        ...

    async def delete_account(self, account_id: str) -> None: ...

    async def count_account_transactions(self, account_id: str) -> int: ...

    async def count_account_cards(self, account_id: str) -> int: ...

    # Categories
    async def list_categories(self, user_id: str) -> list[FinancialCategory]: ...

    async def get_category(self, category_id: str) -> FinancialCategory | None: ...

    async def find_category_by_name(self, user_id: str, name: str) -> FinancialCategory | None: ...

    async def add_category(self, category: FinancialCategory) -> None:
        """Raise ``EntityAlreadyExistsError`` when the user already has the name."""
        ...

    async def count_categories(self, user_id: str) -> int: ...

    async def delete_category(self, category_id: str) -> None: ...

    async def count_category_transactions(self, category_id: str) -> int: ...

    # Transactions
    async def add_transaction(self, transaction: Transaction) -> None: ...

    async def list_transactions(
        self,
        user_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Transaction]: ...

    async def sum_expenses(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
        category_id: str | None = None,
        category_name: str | None = None,
    ) -> Decimal:
        """Total ``despesa`` amount in ``[start, end]``.

        With ``category_id``, only transactions of that category count;
        transactions without an id are matched on ``category_name``.
        """
        ...

    # Credit cards
    async def add_credit_card(self, card: CreditCard) -> None: ...

    async def get_credit_card(self, card_id: str) -> CreditCard | None: ...

    async def update_credit_card(self, card: CreditCard) -> None: ...

    async def add_card_transaction(self, transaction: CreditCardTransaction) -> None: ...

    # Debts
    async def add_debt(self, debt: Debt) -> None: ...

    async def get_debt(self, debt_id: str) -> Debt | None: ...

    async def update_debt(self, debt: Debt) -> None: ...

    async def list_debts(self, user_id: str) -> list[Debt]: ...

    async def add_debt_payment(self, payment: DebtPayment) -> None: ...

    async def list_debt_payments(self, user_id: str, debt_id: str | None = None) -> list[DebtPayment]: ...
