"""Domain event handlers and their bootstrap wiring."""

from __future__ import annotations

import logging
import random

from finance_core.events import events
from finance_core.events.bus import EventBus, EventHandler
from finance_core.logging import event_context
from finance_core.models import (
    DomainEvent,
    FinancialCategory,
    RuleCategory,
    TransactionType,
)
from finance_core.models.base import new_id, to_decimal
from finance_core.models.category import CATEGORY_COLORS, DEFAULT_CATEGORIES
from finance_core.services.budget import month_period, percentage_of
from finance_core.store.base import FinanceStore

logger = logging.getLogger(__name__)


class UpdateAccountBalanceHandler:
    """Move the account balance for a created transaction.

    ``receita`` adds the amount, ``despesa`` subtracts it and
    ``transferencia`` leaves the balance alone. With a bus, an
    ``AccountBalanceUpdated`` event follows each change. If a handler of
    that event fails, this handler raises ``EventDispatchError`` after the
    balance was applied, so the failure reaches the outer dispatch result.
    """

    def __init__(self, store: FinanceStore, bus: EventBus | None = None) -> None:
        self.store = store
        self.bus = bus

    async def handle(self, event: DomainEvent) -> None:
        data = event.event_data
        account_id = data.get("account_id")
        if not account_id:
            logger.debug("Transaction without account, balance untouched", extra=event_context(event))
            return

        transaction_type = TransactionType(data["type"])
        amount = to_decimal(data["amount"])
        if transaction_type is TransactionType.RECEITA:
            delta = amount
        elif transaction_type is TransactionType.DESPESA:
            delta = -amount
        else:
            return

        account = await self.store.adjust_account_balance(account_id, delta)
        logger.info(
            "Account %s balance adjusted by %s",
            account_id,
            delta,
            extra=event_context(event, account_id=account_id),
        )

        if self.bus is not None:
            result = await self.bus.dispatch(
                events.account_balance_updated(
                    account_id=account_id,
                    user_id=data["user_id"],
                    previous_balance=account.current_balance - delta,
                    new_balance=account.current_balance,
                    transaction_id=data.get("transaction_id"),
                )
            )
            result.raise_for_failures()


class BudgetTrackingHandler:
    """Emit ``BudgetExceeded`` when a category's monthly spend passes its bucket budget.

    The month is the one containing the transaction date. Categories are
    resolved by id; the name is used only when the event carries no id.
    Failures of ``BudgetExceeded`` handlers are raised as
    ``EventDispatchError``.
    """

    def __init__(self, store: FinanceStore, bus: EventBus) -> None:
        self.store = store
        self.bus = bus

    async def handle(self, event: DomainEvent) -> None:
        data = event.event_data
        if TransactionType(data["type"]) is not TransactionType.DESPESA:
            return

        user_id = data["user_id"]
        category = await self._resolve_category(user_id, data.get("category_id"), data.get("category_name"))
        if category is None or category.rule_category is None:
            return

        settings = await self.store.get_settings(user_id)
        if settings is None:
            return

        rule = RuleCategory(category.rule_category)
        category_budget = settings.bucket_budget(rule)

        start, end = month_period(data["date"])
        spent = await self.store.sum_expenses(
            user_id,
            start,
            end,
            category_id=category.category_id,
            category_name=category.name,
        )
        percentage = percentage_of(spent, category_budget)

        logger.debug(
            "Category %s at %.1f%% of %s budget",
            category.name,
            percentage,
            rule.value,
            extra=event_context(event),
        )

        if spent > category_budget:
            logger.info(
                "Budget exceeded for %s: spent=%s budget=%s",
                rule.value,
                spent,
                category_budget,
                extra=event_context(event),
            )
            result = await self.bus.dispatch(
                events.budget_exceeded(
                    user_id=user_id,
                    rule_category=rule,
                    budget_amount=category_budget,
                    current_spent=spent,
                    percentage=percentage,
                    transaction_id=data.get("transaction_id"),
                )
            )
            result.raise_for_failures()

    async def _resolve_category(
        self,
        user_id: str,
        category_id: str | None,
        category_name: str | None,
    ) -> FinancialCategory | None:
        if category_id:
            category = await self.store.get_category(category_id)
            return category if category is not None and category.belongs_to(user_id) else None
        if category_name:
            return await self.store.find_category_by_name(user_id, category_name)
        return None


class CreateDefaultCategoriesHandler:
    """Seed the default categories for a user that has none."""

    def __init__(self, store: FinanceStore, rng: random.Random | None = None) -> None:
        self.store = store
        self.rng = rng or random.Random()

    async def handle(self, event: DomainEvent) -> None:
        user_id = event.event_data["user_id"]

        if await self.store.count_categories(user_id) > 0:
            logger.debug("User already has categories, skipping defaults", extra=event_context(event))
            return

        for name, category_type, rule_category, icon in DEFAULT_CATEGORIES:
            await self.store.add_category(
                FinancialCategory(
                    category_id=new_id(),
                    user_id=user_id,
                    name=name,
                    category_type=category_type,
                    rule_category=rule_category,
                    icon=icon,
                    color=self.rng.choice(CATEGORY_COLORS),
                )
            )

        logger.info("Created %d default categories", len(DEFAULT_CATEGORIES), extra=event_context(event))


def initialize_domain_event_handlers(
    store: FinanceStore,
    bus: EventBus | None = None,
    publisher: EventHandler | None = None,
) -> EventBus:
    """Register the standard handlers on ``bus`` (a new one if omitted).

    ``TransactionCreated`` drives the balance update and then the budget
    check; ``UserBudgetConfigured`` seeds default categories. A publisher,
    when given, also receives the events worth forwarding outside the
    process.
    """
    bus = bus or EventBus()

    bus.register(events.TRANSACTION_CREATED, UpdateAccountBalanceHandler(store, bus))
    bus.register(events.TRANSACTION_CREATED, BudgetTrackingHandler(store, bus))
    bus.register(events.USER_BUDGET_CONFIGURED, CreateDefaultCategoriesHandler(store))

    if publisher is not None:
        for name in (
            events.TRANSACTION_CREATED,
            events.BUDGET_EXCEEDED,
            events.ACCOUNT_BALANCE_UPDATED,
            events.CATEGORY_CREATED,
        ):
            bus.register(name, publisher)

    logger.info("Domain event handlers initialized")
    return bus

