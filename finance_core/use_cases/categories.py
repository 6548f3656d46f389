"""Category use-cases."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from finance_core.events import events
from finance_core.events.bus import DispatchResult, EventBus
from finance_core.exceptions import EntityNotFoundError
from finance_core.models import CategoryType, FinancialCategory, RuleCategory
from finance_core.models.base import new_id
from finance_core.services.rules import validate_category_creation, validate_category_deletion
from finance_core.store.base import FinanceStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CategoryOutcome:
    category: FinancialCategory
    dispatch: DispatchResult


class CreateFinancialCategory:
    """Create a category; bucketed categories require configured settings."""

    def __init__(self, store: FinanceStore, bus: EventBus) -> None:
        self.store = store
        self.bus = bus

    async def execute(
        self,
        user_id: str,
        name: str,
        category_type: CategoryType | str,
        rule_category: RuleCategory | str | None = None,
        description: str | None = None,
        icon: str | None = None,
        color: str | None = None,
    ) -> CategoryOutcome:
        rule = None
        if rule_category is not None:
            validate_category_creation(await self.store.get_settings(user_id), rule_category)
            rule = RuleCategory(rule_category)

        category = FinancialCategory(
            category_id=new_id(),
            user_id=user_id,
            name=name.strip() if name else name,
            category_type=CategoryType(category_type),
            rule_category=rule,
            description=description,
            icon=icon,
            color=color,
            sort=await self.store.count_categories(user_id),
        )
        category.validate()
        await self.store.add_category(category)
        logger.info("Category %s created", category.name, extra={"user_id": user_id})

        dispatch = await self.bus.dispatch(events.category_created(category))
        return CategoryOutcome(category=category, dispatch=dispatch)


class DeleteFinancialCategory:
    """Delete a category that has no transactions and is not a default one."""

    def __init__(self, store: FinanceStore) -> None:
        self.store = store

    async def execute(self, category_id: str, user_id: str) -> None:
        category = await self.store.get_category(category_id)
        if category is None or not category.belongs_to(user_id):
            raise EntityNotFoundError("Categoria não encontrada")

        has_transactions = await self.store.count_category_transactions(category_id) > 0
        validate_category_deletion(category, has_transactions)

        await self.store.delete_category(category_id)
        logger.info("Category %s deleted", category.name, extra={"user_id": user_id})
