"""In-memory finance store with referential integrity."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from finance_core.exceptions import (
    EntityAlreadyExistsError,
    EntityNotFoundError,
    ReferentialIntegrityError,
)
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


@dataclass
class InMemoryFinanceStore:
    """Dict-backed ``FinanceStore`` used by tests and the demo script."""

    # Primary entities
    settings: dict[str, UserFinanceSettings] = field(default_factory=dict)  # by user_id
    accounts: dict[str, FinancialAccount] = field(default_factory=dict)
    categories: dict[str, FinancialCategory] = field(default_factory=dict)
    credit_cards: dict[str, CreditCard] = field(default_factory=dict)
    debts: dict[str, Debt] = field(default_factory=dict)

    # Event-like entities
    transactions: list[Transaction] = field(default_factory=list)
    card_transactions: list[CreditCardTransaction] = field(default_factory=list)
    debt_payments: list[DebtPayment] = field(default_factory=list)

    def load(self, *entities: Any) -> None:
        """Insert entities synchronously, parents first, with integrity checks."""
        for entity in entities:
            if isinstance(entity, UserFinanceSettings):
                self.settings[entity.user_id] = entity
            elif isinstance(entity, FinancialAccount):
                self._put_account(entity)
            elif isinstance(entity, FinancialCategory):
                self._put_category(entity)
            elif isinstance(entity, Transaction):
                self._put_transaction(entity)
            elif isinstance(entity, CreditCard):
                self._put_credit_card(entity)
            elif isinstance(entity, CreditCardTransaction):
                self._put_card_transaction(entity)
            elif isinstance(entity, Debt):
                self.debts[entity.debt_id] = entity
            elif isinstance(entity, DebtPayment):
                self._put_debt_payment(entity)
            else:
                raise TypeError(f"Cannot store {type(entity).__name__}")

    # Settings
    async def get_settings(self, user_id: str) -> UserFinanceSettings | None:
        return self.settings.get(user_id)

    async def save_settings(self, settings: UserFinanceSettings) -> None:
        self.settings[settings.user_id] = settings

    # Accounts
    async def add_account(self, account: FinancialAccount) -> None:
        self._put_account(account)

    async def get_account(self, account_id: str) -> FinancialAccount | None:
        return self.accounts.get(account_id)

    async def adjust_account_balance(self, account_id: str, delta: Decimal) -> FinancialAccount:
        account = self.accounts.get(account_id)
        if account is None:
            raise EntityNotFoundError(f"Account {account_id} not found")
        account.current_balance += delta
        account.updated_at = datetime.now()
        return account

    async def delete_account(self, account_id: str) -> None:
        if self.accounts.pop(account_id, None) is None:
            raise EntityNotFoundError(f"Account {account_id} not found")

    async def count_account_transactions(self, account_id: str) -> int:
        return sum(1 for t in self.transactions if t.account_id == account_id)

    async def count_account_cards(self, account_id: str) -> int:
        return sum(1 for c in self.credit_cards.values() if c.account_id == account_id)

    # Categories
    async def list_categories(self, user_id: str) -> list[FinancialCategory]:
        categories = [c for c in self.categories.values() if c.user_id == user_id]
        return sorted(categories, key=lambda c: (c.sort, c.name))

    async def get_category(self, category_id: str) -> FinancialCategory | None:
        return self.categories.get(category_id)

    async def find_category_by_name(self, user_id: str, name: str) -> FinancialCategory | None:
        for category in self.categories.values():
            if category.user_id == user_id and category.name == name:
                return category
        return None

    async def add_category(self, category: FinancialCategory) -> None:
        self._put_category(category)

    async def count_categories(self, user_id: str) -> int:
        return sum(1 for c in self.categories.values() if c.user_id == user_id)

    async def delete_category(self, category_id: str) -> None:
        if self.categories.pop(category_id, None) is None:
            raise EntityNotFoundError(f"Category {category_id} not found")

    async def count_category_transactions(self, category_id: str) -> int:
        category = self.categories.get(category_id)
        if category is None:
            return sum(1 for t in self.transactions if t.category_id == category_id)
        return sum(
            1
            for t in self.transactions
            if t.user_id == category.user_id and _matches_category(t, category_id, category.name)
        )

    # Transactions
    async def add_transaction(self, transaction: Transaction) -> None:
        self._put_transaction(transaction)

    async def list_transactions(
        self,
        user_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Transaction]:
        return [
            t
            for t in self.transactions
            if t.user_id == user_id
            and (start is None or t.date >= start)
            and (end is None or t.date <= end)
        ]

    async def sum_expenses(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
        category_id: str | None = None,
        category_name: str | None = None,
    ) -> Decimal:
        total = Decimal("0")
        for t in await self.list_transactions(user_id, start, end):
            if not t.is_despesa():
                continue
            if (category_id or category_name) and not _matches_category(t, category_id, category_name):
                continue
            total += t.amount
        return total

    # Credit cards
    async def add_credit_card(self, card: CreditCard) -> None:
        self._put_credit_card(card)

    async def get_credit_card(self, card_id: str) -> CreditCard | None:
        return self.credit_cards.get(card_id)

    async def update_credit_card(self, card: CreditCard) -> None:
        if card.card_id not in self.credit_cards:
            raise EntityNotFoundError(f"Credit card {card.card_id} not found")
        self.credit_cards[card.card_id] = card

    async def add_card_transaction(self, transaction: CreditCardTransaction) -> None:
        self._put_card_transaction(transaction)

    # Debts
    async def add_debt(self, debt: Debt) -> None:
        self.debts[debt.debt_id] = debt

    async def get_debt(self, debt_id: str) -> Debt | None:
        return self.debts.get(debt_id)

    async def update_debt(self, debt: Debt) -> None:
        if debt.debt_id not in self.debts:
            raise EntityNotFoundError(f"Debt {debt.debt_id} not found")
        self.debts[debt.debt_id] = debt

    async def list_debts(self, user_id: str) -> list[Debt]:
        return [d for d in self.debts.values() if d.user_id == user_id]

    async def add_debt_payment(self, payment: DebtPayment) -> None:
        self._put_debt_payment(payment)

    async def list_debt_payments(self, user_id: str, debt_id: str | None = None) -> list[DebtPayment]:
        return [
            p
            for p in self.debt_payments
            if p.user_id == user_id and (debt_id is None or p.debt_id == debt_id)
        ]

    def summary(self) -> dict[str, int]:
        """Return summary counts of all entities."""
        return {
            "settings": len(self.settings),
            "accounts": len(self.accounts),
            "categories": len(self.categories),
            "credit_cards": len(self.credit_cards),
            "debts": len(self.debts),
            "transactions": len(self.transactions),
            "card_transactions": len(self.card_transactions),
            "debt_payments": len(self.debt_payments),
        }

    def _put_account(self, account: FinancialAccount) -> None:
        self.accounts[account.account_id] = account

    def _put_category(self, category: FinancialCategory) -> None:
        for existing in self.categories.values():
            if (
                existing.user_id == category.user_id
                and existing.name == category.name
                and existing.category_id != category.category_id
            ):
                raise EntityAlreadyExistsError(f"Já existe uma categoria com o nome {category.name!r}")
        self.categories[category.category_id] = category

    def _put_transaction(self, transaction: Transaction) -> None:
        if transaction.account_id and transaction.account_id not in self.accounts:
            raise ReferentialIntegrityError(f"Account {transaction.account_id} not found")
        if transaction.category_id and transaction.category_id not in self.categories:
            raise ReferentialIntegrityError(f"Category {transaction.category_id} not found")
        self.transactions.append(transaction)

    def _put_credit_card(self, card: CreditCard) -> None:
        if card.account_id not in self.accounts:
            raise ReferentialIntegrityError(f"Account {card.account_id} not found")
        self.credit_cards[card.card_id] = card

    def _put_card_transaction(self, transaction: CreditCardTransaction) -> None:
        if transaction.card_id not in self.credit_cards:
            raise ReferentialIntegrityError(f"Credit card {transaction.card_id} not found")
        self.card_transactions.append(transaction)

    def _put_debt_payment(self, payment: DebtPayment) -> None:
        if payment.debt_id not in self.debts:
            raise ReferentialIntegrityError(f"Debt {payment.debt_id} not found")
        self.debt_payments.append(payment)


def _matches_category(
    transaction: Transaction,
    category_id: str | None,
    category_name: str | None,
) -> bool:
    if transaction.category_id:
        return transaction.category_id == category_id
    return category_name is not None and transaction.category_name == category_name
