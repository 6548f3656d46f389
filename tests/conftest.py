"""Pytest configuration and fixtures."""

from datetime import datetime
from decimal import Decimal

import pytest

from finance_core.models import (
    AccountType,
    CardBrand,
    CategoryType,
    CreditCard,
    FinancialAccount,
    FinancialCategory,
    RuleCategory,
    Transaction,
    TransactionType,
    UserFinanceSettings,
)
from finance_core.store import InMemoryFinanceStore

USER_ID = "user-test-001"


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def user_id() -> str:
    return USER_ID


@pytest.fixture
def now() -> datetime:
    """Fixed clock inside June 2024."""
    return datetime(2024, 6, 20, 12, 0, 0)


@pytest.fixture
def period() -> tuple[datetime, datetime]:
    return datetime(2024, 6, 1), datetime(2024, 6, 30, 23, 59, 59, 999999)


@pytest.fixture
def settings(user_id: str) -> UserFinanceSettings:
    """5000 BRL salary split 50/30/20."""
    return UserFinanceSettings.create(
        user_id=user_id,
        salary=Decimal("5000"),
        fixed=Decimal("50"),
        variable=Decimal("30"),
        investments=Decimal("20"),
        settings_id="settings-001",
    )


@pytest.fixture
def categories(user_id: str) -> list[FinancialCategory]:
    """One category per bucket plus an income category."""
    return [
        FinancialCategory(
            category_id="cat-alimentacao",
            user_id=user_id,
            name="Alimentação",
            category_type=CategoryType.DESPESA,
            rule_category=RuleCategory.NECESSIDADES,
        ),
        FinancialCategory(
            category_id="cat-lazer",
            user_id=user_id,
            name="Lazer",
            category_type=CategoryType.DESPESA,
            rule_category=RuleCategory.DESEJOS,
        ),
        FinancialCategory(
            category_id="cat-poupanca",
            user_id=user_id,
            name="Poupança",
            category_type=CategoryType.DESPESA,
            rule_category=RuleCategory.FUTURO,
        ),
        FinancialCategory(
            category_id="cat-salario",
            user_id=user_id,
            name="Salário",
            category_type=CategoryType.RECEITA,
        ),
    ]


@pytest.fixture
def checking_account(user_id: str) -> FinancialAccount:
    return FinancialAccount(
        account_id="acct-001",
        user_id=user_id,
        name="Conta Itaú",
        account_type=AccountType.CONTA_CORRENTE,
        initial_balance=Decimal("1000.00"),
        current_balance=Decimal("1000.00"),
    )


@pytest.fixture
def savings_account(user_id: str) -> FinancialAccount:
    return FinancialAccount(
        account_id="acct-002",
        user_id=user_id,
        name="Poupança Caixa",
        account_type=AccountType.CONTA_POUPANCA,
        initial_balance=Decimal("200.00"),
        current_balance=Decimal("200.00"),
    )


@pytest.fixture
def credit_card(user_id: str, checking_account: FinancialAccount) -> CreditCard:
    return CreditCard(
        card_id="card-001",
        user_id=user_id,
        account_id=checking_account.account_id,
        name="Cartão Itaú",
        brand=CardBrand.VISA,
        last_digits="1234",
        credit_limit=Decimal("3000.00"),
        available_limit=Decimal("3000.00"),
        due_day=10,
        closing_day=3,
    )


def make_transaction(
    amount: str,
    category_id: str | None = "cat-alimentacao",
    transaction_type: TransactionType = TransactionType.DESPESA,
    date: datetime = datetime(2024, 6, 10),
    transaction_id: str = "tx-001",
    account_id: str | None = "acct-001",
    category_name: str | None = None,
) -> Transaction:
    """Build a transaction for the test user."""
    return Transaction(
        transaction_id=transaction_id,
        user_id=USER_ID,
        description="Compra de teste",
        amount=Decimal(amount),
        transaction_type=transaction_type,
        date=date,
        account_id=account_id,
        category_id=category_id,
        category_name=category_name,
    )


@pytest.fixture
def store(
    settings: UserFinanceSettings,
    categories: list[FinancialCategory],
    checking_account: FinancialAccount,
    savings_account: FinancialAccount,
    credit_card: CreditCard,
) -> InMemoryFinanceStore:
    """Store preloaded with the test user's settings, categories, accounts and card."""
    store = InMemoryFinanceStore()
    store.load(settings, checking_account, savings_account, *categories, credit_card)
    return store
