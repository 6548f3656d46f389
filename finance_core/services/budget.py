"""Budget calculator for the 50/30/20 buckets.

Every function here is pure: results depend only on the arguments, so
calling them twice with the same inputs yields equal results.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Sequence

from finance_core.models import (
    BudgetStatus,
    FinancialCategory,
    RuleCategory,
    Transaction,
    UserFinanceSettings,
)
from finance_core.models.base import to_decimal

ZERO = Decimal("0")

# Usage percentages at which the status moves from safe -> warning -> danger
WARNING_USAGE = Decimal("70")
DANGER_USAGE = Decimal("90")


@dataclass(frozen=True)
class BucketUsage:
    """Budget versus spend for one bucket."""

    budget: Decimal
    spent: Decimal
    remaining: Decimal
    percentage: Decimal  # configured share of the salary


@dataclass(frozen=True)
class BudgetTotals:
    budget: Decimal
    spent: Decimal
    remaining: Decimal


@dataclass(frozen=True)
class BudgetCalculation:
    """Spend-vs-budget report across the three buckets."""

    necessidades: BucketUsage
    desejos: BucketUsage
    futuro: BucketUsage
    total: BudgetTotals

    def bucket(self, rule_category: RuleCategory | str) -> BucketUsage:
        """Return the usage of the given bucket."""
        return getattr(self, RuleCategory(rule_category).value)


@dataclass(frozen=True)
class CategoryBudgetValidation:
    """Outcome of checking an expense against its bucket's remaining budget.

    ``rule_category`` is ``None`` when the category is unknown or
    unclassified; such expenses are always valid.
    """

    is_valid: bool
    rule_category: RuleCategory | None
    available: Decimal
    requested: Decimal
    message: str | None = None
    spent: Decimal = ZERO  # bucket spend before the expense


def resolve_category(
    categories: Iterable[FinancialCategory],
    category_id: str | None = None,
    name: str | None = None,
) -> FinancialCategory | None:
    """Find a category by id, falling back to name only when no id is given.

    Name matching exists for transactions recorded before categories had
    ids; a transaction that carries an id is never matched by name.
    """
    if category_id:
        for category in categories:
            if category.category_id == category_id:
                return category
        return None
    if name:
        for category in categories:
            if category.name == name:
                return category
    return None


def find_category(
    categories: Sequence[FinancialCategory],
    identifier: str,
) -> FinancialCategory | None:
    """Look up a category from a caller-supplied identifier (id, else name)."""
    return resolve_category(categories, category_id=identifier) or resolve_category(
        categories, name=identifier
    )


def spent_by_rule(
    transactions: Iterable[Transaction],
    categories: Sequence[FinancialCategory],
) -> dict[RuleCategory, Decimal]:
    """Sum transaction amounts per bucket, ignoring unclassified categories."""
    totals = {rule: ZERO for rule in RuleCategory}

    for transaction in transactions:
        if not transaction.category_id and not transaction.category_name:
            continue
        category = resolve_category(
            categories,
            category_id=transaction.category_id,
            name=transaction.category_name,
        )
        if category is None or category.rule_category is None:
            continue
        rule = RuleCategory(category.rule_category)
        totals[rule] += to_decimal(transaction.amount)

    return totals


def calculate_budget(
    settings: UserFinanceSettings,
    transactions: Iterable[Transaction],
    categories: Sequence[FinancialCategory],
    start: datetime,
    end: datetime,
) -> BudgetCalculation:
    """Compute bucket budgets and spend for expenses dated in ``[start, end]``.

    Parameters
    ----------
    settings : UserFinanceSettings
        Salary and percentage split.
    transactions : Iterable[Transaction]
        Candidate transactions; only ``despesa`` ones inside the period count.
    categories : Sequence[FinancialCategory]
        The user's categories, used to map transactions to buckets.
    start, end : datetime
        Inclusive period bounds.

    Returns
    -------
    BudgetCalculation
        Per-bucket budget, spent, remaining and configured percentage,
        plus totals.
    """
    budgets = settings.calculate_budgets()
    period_expenses = [
        t for t in transactions if t.is_despesa() and t.in_period(start, end)
    ]
    spent = spent_by_rule(period_expenses, categories)

    total_spent = sum(spent.values(), ZERO)

    return BudgetCalculation(
        necessidades=_bucket(budgets.fixed, spent[RuleCategory.NECESSIDADES], settings.fixed),
        desejos=_bucket(budgets.variable, spent[RuleCategory.DESEJOS], settings.variable),
        futuro=_bucket(budgets.investments, spent[RuleCategory.FUTURO], settings.investments),
        total=BudgetTotals(
            budget=budgets.total,
            spent=total_spent,
            remaining=budgets.total - total_spent,
        ),
    )


def validate_transaction_budget(
    value: Decimal,
    category_identifier: str,
    settings: UserFinanceSettings,
    transactions: Iterable[Transaction],
    categories: Sequence[FinancialCategory],
    start: datetime,
    end: datetime,
) -> CategoryBudgetValidation:
    """Check whether an expense of ``value`` fits its bucket's remaining budget."""
    requested = to_decimal(value)
    category = find_category(categories, category_identifier)

    if category is None or category.rule_category is None:
        return CategoryBudgetValidation(
            is_valid=True,
            rule_category=None,
            available=ZERO,
            requested=requested,
        )

    rule = RuleCategory(category.rule_category)
    current = calculate_budget(settings, transactions, categories, start, end)
    available = current.bucket(rule).remaining
    is_valid = available >= requested

    message = None
    if not is_valid:
        message = (
            f"Orçamento insuficiente para categoria {rule.value}. "
            f"Disponível: R$ {available:.2f}, Solicitado: R$ {requested:.2f}"
        )

    return CategoryBudgetValidation(
        is_valid=is_valid,
        rule_category=rule,
        available=available,
        requested=requested,
        message=message,
        spent=current.bucket(rule).spent,
    )


def month_period(reference: datetime) -> tuple[datetime, datetime]:
    """First and last instant of the month containing ``reference``."""
    last_day = calendar.monthrange(reference.year, reference.month)[1]
    start = datetime(reference.year, reference.month, 1)
    end = datetime(reference.year, reference.month, last_day, 23, 59, 59, 999999)
    return start, end


def current_month_period(now: datetime | None = None) -> tuple[datetime, datetime]:
    return month_period(now or datetime.now())


def has_valid_budget_settings(settings: UserFinanceSettings | None) -> bool:
    """Settings exist and declare a positive salary."""
    return settings is not None and settings.salary > 0


def percentage_of(value: Decimal, budget: Decimal) -> Decimal:
    """``value`` as a percentage of ``budget``; 0 when the budget is 0."""
    if budget == 0:
        return ZERO
    return to_decimal(value) / to_decimal(budget) * 100


def calculate_budget_usage_percentage(spent: Decimal, budget: Decimal) -> Decimal:
    """Share of the budget used, capped at 100."""
    return min(percentage_of(spent, budget), Decimal("100"))


def get_budget_status(usage_percentage: Decimal) -> BudgetStatus:
    if usage_percentage < WARNING_USAGE:
        return BudgetStatus.SAFE
    if usage_percentage < DANGER_USAGE:
        return BudgetStatus.WARNING
    return BudgetStatus.DANGER


def empty_budget() -> BudgetCalculation:
    """All-zero report for users without valid settings."""
    zero_bucket = BucketUsage(budget=ZERO, spent=ZERO, remaining=ZERO, percentage=ZERO)
    return BudgetCalculation(
        necessidades=zero_bucket,
        desejos=zero_bucket,
        futuro=zero_bucket,
        total=BudgetTotals(budget=ZERO, spent=ZERO, remaining=ZERO),
    )


def _bucket(budget: Decimal, spent: Decimal, percentage: Decimal) -> BucketUsage:
    return BucketUsage(
        budget=budget,
        spent=spent,
        remaining=budget - spent,
        percentage=percentage,
    )
