"""Synthetic users, accounts, categories and transactions."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal

from finance_core.generators.base import BaseGenerator
from finance_core.models import (
    AccountType,
    CardBrand,
    CategoryType,
    CreditCard,
    Debt,
    DebtType,
    FinancialAccount,
    FinancialCategory,
    RuleCategory,
    Transaction,
    TransactionType,
    UserFinanceSettings,
)
from finance_core.models.category import CATEGORY_COLORS, DEFAULT_CATEGORIES
from finance_core.services.budget import month_period

CENTS = Decimal("0.01")


@dataclass
class UserDataset:
    """Everything generated for one user."""

    settings: UserFinanceSettings
    accounts: list[FinancialAccount] = field(default_factory=list)
    categories: list[FinancialCategory] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)
    credit_cards: list[CreditCard] = field(default_factory=list)
    debts: list[Debt] = field(default_factory=list)

    def entities(self) -> list:
        """All entities, parents before children, ready for ``InMemoryFinanceStore.load``."""
        return [
            self.settings,
            *self.accounts,
            *self.categories,
            *self.credit_cards,
            *self.transactions,
            *self.debts,
        ]


class FinanceDataGenerator(BaseGenerator):
    """Generate Brazilian personal-finance data.

    Salaries follow a log-normal-ish spread between 1 500 and 30 000 BRL and
    percentage splits are drawn from the allowed 50/30/20 ranges, so every
    generated ``UserFinanceSettings`` passes validation.
    """

    # (fixed, variable, investments), each summing to 100
    SPLITS = [
        (Decimal("50"), Decimal("30"), Decimal("20")),
        (Decimal("55"), Decimal("30"), Decimal("15")),
        (Decimal("60"), Decimal("25"), Decimal("15")),
        (Decimal("45"), Decimal("30"), Decimal("25")),
        (Decimal("40"), Decimal("35"), Decimal("25")),
        (Decimal("50"), Decimal("20"), Decimal("30")),
    ]
    SPLIT_WEIGHTS = [0.45, 0.15, 0.15, 0.1, 0.05, 0.1]

    ACCOUNT_TYPES = [AccountType.CONTA_CORRENTE, AccountType.CONTA_POUPANCA, AccountType.CARTEIRA]
    ACCOUNT_TYPE_WEIGHTS = [0.70, 0.20, 0.10]

    INSTITUTIONS = [
        "Banco do Brasil",
        "Santander",
        "Caixa Econômica Federal",
        "Bradesco",
        "Itaú",
        "Nubank",
        "Inter",
        "C6 Bank",
    ]

    BRANDS = [CardBrand.VISA, CardBrand.MASTERCARD, CardBrand.ELO]
    BRAND_WEIGHTS = [0.45, 0.40, 0.15]

    # Typical expense amount range per bucket (BRL)
    AMOUNT_RANGES = {
        RuleCategory.NECESSIDADES: (30, 900),
        RuleCategory.DESEJOS: (20, 400),
        RuleCategory.FUTURO: (100, 1000),
    }

    def __init__(self, seed: int | None = None, locale: str = "pt_BR") -> None:
        super().__init__(seed, locale)

    def generate_settings(self, user_id: str | None = None) -> UserFinanceSettings:
        """Generate a valid budget configuration."""
        salary = Decimal(str(round(min(30000, max(1500, random.lognormvariate(8.5, 0.6))), -1)))
        fixed, variable, investments = random.choices(self.SPLITS, weights=self.SPLIT_WEIGHTS, k=1)[0]
        return UserFinanceSettings.create(
            user_id=user_id or self.new_id(),
            salary=salary,
            fixed=fixed,
            variable=variable,
            investments=investments,
            settings_id=self.new_id(),
        )

    def generate_account(
        self,
        user_id: str,
        account_type: AccountType | None = None,
        balance: Decimal | None = None,
    ) -> FinancialAccount:
        account_type = account_type or random.choices(
            self.ACCOUNT_TYPES, weights=self.ACCOUNT_TYPE_WEIGHTS, k=1
        )[0]
        institution = random.choice(self.INSTITUTIONS)
        if balance is None:
            balance = Decimal(str(round(random.uniform(0, 8000), 2)))
        return FinancialAccount(
            account_id=self.new_id(),
            user_id=user_id,
            name=f"{institution} - {account_type.value.replace('_', ' ').title()}",
            account_type=account_type,
            initial_balance=balance,
            current_balance=balance,
            institution=institution,
            color=random.choice(CATEGORY_COLORS),
        )

    def generate_categories(self, user_id: str) -> list[FinancialCategory]:
        """The default category set, with fresh ids and random colours."""
        return [
            FinancialCategory(
                category_id=self.new_id(),
                user_id=user_id,
                name=name,
                category_type=category_type,
                rule_category=rule_category,
                icon=icon,
                color=random.choice(CATEGORY_COLORS),
                sort=i,
            )
            for i, (name, category_type, rule_category, icon) in enumerate(DEFAULT_CATEGORIES)
        ]

    def generate_transaction(
        self,
        account: FinancialAccount,
        category: FinancialCategory,
        start: datetime,
        end: datetime,
        amount: Decimal | None = None,
    ) -> Transaction:
        """Generate one transaction dated inside ``[start, end]``.

        The transaction type follows the category type; the amount is drawn
        from the bucket's typical range when not given.
        """
        if category.category_type == CategoryType.RECEITA:
            transaction_type = TransactionType.RECEITA
        else:
            transaction_type = TransactionType.DESPESA

        if amount is None:
            low, high = self.AMOUNT_RANGES.get(category.rule_category, (50, 3000))
            amount = Decimal(str(round(random.uniform(low, high), 2)))

        return Transaction(
            transaction_id=self.new_id(),
            user_id=account.user_id,
            description=self._describe(category),
            amount=amount.quantize(CENTS),
            transaction_type=transaction_type,
            date=self.fake.date_time_between(start_date=start, end_date=end),
            account_id=account.account_id,
            category_id=category.category_id,
            category_name=category.name,
        )

    def generate_credit_card(self, account: FinancialAccount, monthly_income: Decimal) -> CreditCard:
        # Limit between 1x and 3x income, rounded to 100
        credit_limit = Decimal(str(round(float(monthly_income) * random.uniform(1, 3), -2))) or Decimal("500")
        return CreditCard(
            card_id=self.new_id(),
            user_id=account.user_id,
            account_id=account.account_id,
            name=f"Cartão {account.institution or 'Principal'}",
            brand=random.choices(self.BRANDS, weights=self.BRAND_WEIGHTS, k=1)[0],
            last_digits=f"{random.randint(0, 9999):04d}",
            credit_limit=credit_limit,
            available_limit=credit_limit,
            due_day=random.randint(1, 28),
            closing_day=random.randint(1, 28),
            bank=account.institution,
        )

    def generate_debt(self, user_id: str, reference: datetime | None = None) -> Debt:
        reference = reference or datetime.now()
        original = Decimal(str(round(random.uniform(500, 20000), 2)))
        paid_share = Decimal(str(round(random.uniform(0, 0.6), 2)))
        current = (original * (1 - paid_share)).quantize(CENTS)
        return Debt(
            debt_id=self.new_id(),
            user_id=user_id,
            creditor=self.fake.company(),
            debt_type=random.choice(list(DebtType)),
            original_amount=original,
            current_amount=current,
            due_date=reference + timedelta(days=random.randint(5, 365)),
            interest_rate=Decimal(str(round(random.uniform(12, 180), 2))),
            created_at=reference - timedelta(days=random.randint(30, 720)),
        )

    def generate_month(
        self,
        reference: datetime | None = None,
        user_id: str | None = None,
        transactions: int = 40,
        debts: int = 0,
    ) -> UserDataset:
        """Generate a user with one month of activity.

        Parameters
        ----------
        reference : datetime | None
            Any instant in the target month (default: now). Transactions
            never fall after ``reference``.
        user_id : str | None
            User id to use; random when omitted.
        transactions : int
            Number of expense transactions; one salary receita is added.
        debts : int
            Number of debts to attach.

        Returns
        -------
        UserDataset
            Settings, one checking account, the default categories and the
            month's transactions.
        """
        reference = reference or datetime.now()
        start, _ = month_period(reference)

        settings = self.generate_settings(user_id)
        account = self.generate_account(settings.user_id, AccountType.CONTA_CORRENTE)
        categories = self.generate_categories(settings.user_id)
        dataset = UserDataset(settings=settings, accounts=[account], categories=categories)

        salary_category = next(c for c in categories if c.name == "Salário")
        dataset.transactions.append(
            self.generate_transaction(account, salary_category, start, reference, amount=settings.salary)
        )

        expense_categories = [c for c in categories if c.rule_category is not None]
        for _ in range(transactions):
            category = random.choice(expense_categories)
            dataset.transactions.append(self.generate_transaction(account, category, start, reference))

        if random.random() < 0.6:
            dataset.credit_cards.append(self.generate_credit_card(account, settings.salary))

        dataset.debts.extend(self.generate_debt(settings.user_id, reference) for _ in range(debts))
        return dataset

    def _describe(self, category: FinancialCategory) -> str:
        if category.category_type == CategoryType.RECEITA:
            return f"{category.name} - {self.fake.company()}"
        return f"{category.name} - {self.fake.catch_phrase()}"
