"""Domain event names and factories."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from finance_core.models import (
    CategoryType,
    DomainEvent,
    FinancialCategory,
    RuleCategory,
    Transaction,
    TransactionType,
    UserFinanceSettings,
)

TRANSACTION_CREATED = "TransactionCreated"
BUDGET_EXCEEDED = "BudgetExceeded"
ACCOUNT_BALANCE_UPDATED = "AccountBalanceUpdated"
CATEGORY_CREATED = "CategoryCreated"
USER_BUDGET_CONFIGURED = "UserBudgetConfigured"

EVENT_NAMES = (
    TRANSACTION_CREATED,
    BUDGET_EXCEEDED,
    ACCOUNT_BALANCE_UPDATED,
    CATEGORY_CREATED,
    USER_BUDGET_CONFIGURED,
)


def transaction_created(transaction: Transaction) -> DomainEvent:
    return DomainEvent(
        event_name=TRANSACTION_CREATED,
        event_data={
            "transaction_id": transaction.transaction_id,
            "user_id": transaction.user_id,
            "account_id": transaction.account_id,
            "category_id": transaction.category_id,
            "category_name": transaction.category_name,
            "amount": transaction.amount,
            "type": TransactionType(transaction.transaction_type).value,
            "date": transaction.date,
        },
    )


def budget_exceeded(
    user_id: str,
    rule_category: RuleCategory,
    budget_amount: Decimal,
    current_spent: Decimal,
    percentage: Decimal,
    transaction_id: str | None = None,
) -> DomainEvent:
    return DomainEvent(
        event_name=BUDGET_EXCEEDED,
        event_data={
            "user_id": user_id,
            "category_type": RuleCategory(rule_category).value,
            "budget_amount": budget_amount,
            "current_spent": current_spent,
            "percentage": percentage,
            "transaction_id": transaction_id,
        },
    )


def account_balance_updated(
    account_id: str,
    user_id: str,
    previous_balance: Decimal,
    new_balance: Decimal,
    transaction_id: str | None = None,
) -> DomainEvent:
    return DomainEvent(
        event_name=ACCOUNT_BALANCE_UPDATED,
        event_data={
            "account_id": account_id,
            "user_id": user_id,
            "previous_balance": previous_balance,
            "new_balance": new_balance,
            "transaction_id": transaction_id,
        },
    )


def category_created(category: FinancialCategory) -> DomainEvent:
    return DomainEvent(
        event_name=CATEGORY_CREATED,
        event_data={
            "category_id": category.category_id,
            "user_id": category.user_id,
            "category_name": category.name,
            "rule_category": RuleCategory(category.rule_category).value
            if category.rule_category
            else None,
            "type": CategoryType(category.category_type).value,
        },
    )


def user_budget_configured(settings: UserFinanceSettings) -> DomainEvent:
    """Announce a new or changed budget split, with the derived amounts."""
    budgets = settings.calculate_budgets()
    return DomainEvent(
        event_name=USER_BUDGET_CONFIGURED,
        event_data={
            "user_id": settings.user_id,
            "salary": settings.salary,
            "necessidades_percentage": settings.fixed,
            "desejos_percentage": settings.variable,
            "investimentos_percentage": settings.investments,
            "budget_amounts": {
                "necessidades": budgets.fixed,
                "desejos": budgets.variable,
                "investimentos": budgets.investments,
            },
        },
        occurred_on=settings.updated_at or datetime.now(),
    )
