"""Debt use-cases."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Sequence

from finance_core.exceptions import EntityNotFoundError, ValidationError
from finance_core.models import Debt, DebtPayment, DebtPaymentType, DebtStatus
from finance_core.models.base import new_id, to_decimal
from finance_core.services.debts import (
    DebtSummary,
    PayoffScenario,
    SimulationReport,
    simulate_scenarios,
    summarize_debts,
)
from finance_core.store.base import FinanceStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentOutcome:
    payment: DebtPayment
    debt: Debt


class RegisterDebtPayment:
    """Record a payment and reduce the debt's outstanding amount."""

    def __init__(self, store: FinanceStore) -> None:
        self.store = store

    async def execute(
        self,
        debt_id: str,
        user_id: str,
        amount: Decimal,
        paid_at: datetime | None = None,
        notes: str | None = None,
    ) -> PaymentOutcome:
        debt = await self.store.get_debt(debt_id)
        if debt is None or debt.user_id != user_id:
            raise EntityNotFoundError("Dívida não encontrada")

        value = to_decimal(amount)
        debt.register_payment(value)

        payment = DebtPayment(
            payment_id=new_id(),
            debt_id=debt_id,
            user_id=user_id,
            amount=value,
            paid_at=paid_at or datetime.now(),
            payment_type=DebtPaymentType.QUITACAO_TOTAL
            if debt.status == DebtStatus.QUITADA
            else DebtPaymentType.PAGAMENTO_PARCIAL,
            notes=notes,
        )
        await self.store.add_debt_payment(payment)
        await self.store.update_debt(debt)

        logger.info(
            "Payment of %s registered on debt %s (remaining %s)",
            value,
            debt_id,
            debt.current_amount,
            extra={"user_id": user_id},
        )
        return PaymentOutcome(payment=payment, debt=debt)


class GetDebtSummary:
    def __init__(self, store: FinanceStore) -> None:
        self.store = store

    async def execute(
        self,
        user_id: str,
        upcoming_limit: int = 5,
        as_of: datetime | None = None,
    ) -> DebtSummary:
        debts = await self.store.list_debts(user_id)
        payments = await self.store.list_debt_payments(user_id)
        return summarize_debts(debts, payments, upcoming_limit=upcoming_limit, as_of=as_of)


class SimulateDebtPayoff:
    """Compare payoff scenarios for one debt, or for all open debts."""

    def __init__(self, store: FinanceStore) -> None:
        self.store = store

    async def execute(
        self,
        user_id: str,
        scenarios: Sequence[PayoffScenario],
        debt_id: str | None = None,
    ) -> SimulationReport:
        if not scenarios:
            raise ValidationError("Informe ao menos um cenário de pagamento")

        if debt_id is not None:
            debt = await self.store.get_debt(debt_id)
            if debt is None or debt.user_id != user_id:
                raise EntityNotFoundError("Dívida não encontrada")
            total = debt.current_amount
        else:
            debts = await self.store.list_debts(user_id)
            total = sum(
                (d.current_amount for d in debts if d.status != DebtStatus.QUITADA),
                Decimal("0"),
            )

        if total <= 0:
            raise ValidationError("Não há saldo devedor para simular")

        return simulate_scenarios(total, scenarios)
