"""Budget configuration and reporting use-cases."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from finance_core.events import events
from finance_core.events.bus import DispatchResult, EventBus
from finance_core.exceptions import EntityAlreadyExistsError, EntityNotFoundError
from finance_core.models import UserFinanceSettings
from finance_core.services.budget import (
    BudgetCalculation,
    calculate_budget,
    current_month_period,
    empty_budget,
    has_valid_budget_settings,
)
from finance_core.store.base import FinanceStore

logger = logging.getLogger(__name__)

NO_SETTINGS_MESSAGE = (
    "Usuário não possui configurações de orçamento válidas. "
    "Configure sua renda e percentuais para usar esta funcionalidade."
)


@dataclass(frozen=True)
class SettingsOutcome:
    settings: UserFinanceSettings
    dispatch: DispatchResult


@dataclass(frozen=True)
class BudgetReport:
    """Budget calculation for a period plus whether the user has settings."""

    start: datetime
    end: datetime
    budget: BudgetCalculation
    has_valid_settings: bool
    message: str | None = None


class ConfigureBudget:
    """Create a user's budget settings and announce them."""

    def __init__(self, store: FinanceStore, bus: EventBus) -> None:
        self.store = store
        self.bus = bus

    async def execute(
        self,
        user_id: str,
        salary: Decimal,
        fixed: Decimal,
        variable: Decimal,
        investments: Decimal,
    ) -> SettingsOutcome:
        if await self.store.get_settings(user_id) is not None:
            raise EntityAlreadyExistsError("Usuário já possui configurações financeiras")

        settings = UserFinanceSettings.create(
            user_id=user_id,
            salary=salary,
            fixed=fixed,
            variable=variable,
            investments=investments,
        )
        await self.store.save_settings(settings)
        logger.info("Budget configured for user %s", user_id, extra={"user_id": user_id})

        dispatch = await self.bus.dispatch(events.user_budget_configured(settings))
        return SettingsOutcome(settings=settings, dispatch=dispatch)


class UpdateBudgetSettings:
    """Apply a partial change to existing settings; the merged split must stay valid."""

    def __init__(self, store: FinanceStore, bus: EventBus) -> None:
        self.store = store
        self.bus = bus

    async def execute(
        self,
        user_id: str,
        salary: Decimal | None = None,
        fixed: Decimal | None = None,
        variable: Decimal | None = None,
        investments: Decimal | None = None,
    ) -> SettingsOutcome:
        settings = await self.store.get_settings(user_id)
        if settings is None:
            raise EntityNotFoundError("Configurações financeiras não encontradas")

        settings.update(salary=salary, fixed=fixed, variable=variable, investments=investments)
        await self.store.save_settings(settings)

        dispatch = await self.bus.dispatch(events.user_budget_configured(settings))
        return SettingsOutcome(settings=settings, dispatch=dispatch)


class GetUserBudget:
    """Budget versus spend for a period (default: the current month)."""

    def __init__(self, store: FinanceStore) -> None:
        self.store = store

    async def execute(
        self,
        user_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
        now: datetime | None = None,
    ) -> BudgetReport:
        if start is None or end is None:
            start, end = current_month_period(now)

        settings = await self.store.get_settings(user_id)
        if not has_valid_budget_settings(settings):
            return BudgetReport(
                start=start,
                end=end,
                budget=empty_budget(),
                has_valid_settings=False,
                message=NO_SETTINGS_MESSAGE,
            )

        categories = await self.store.list_categories(user_id)
        transactions = await self.store.list_transactions(user_id, start, end)
        budget = calculate_budget(settings, transactions, categories, start, end)
        return BudgetReport(start=start, end=end, budget=budget, has_valid_settings=True)
