"""Debt payoff simulation and portfolio summary."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Iterable, Sequence

from finance_core.exceptions import ValidationError
from finance_core.models import Debt, DebtPayment, DebtStatus, DebtType
from finance_core.models.base import to_decimal

ZERO = Decimal("0")

MINIMUM_PAYMENT_SHARE = Decimal("0.05")  # 5% of the balance when no monthly value given
MINIMUM_PAYMENT_RATE = Decimal("0.02")  # 2% a.m. revolving interest
DEFAULT_INSTALLMENT_RATE = Decimal("2")  # % a.m.
DEFAULT_INSTALLMENTS = 12
MAX_SIMULATED_MONTHS = 600  # 50 years; payments that never amortize stop here


class ScenarioType(str, Enum):
    PAGAMENTO_MINIMO = "pagamento_minimo"
    QUITACAO_DESCONTO = "quitacao_desconto"
    PARCELAMENTO = "parcelamento"


@dataclass(frozen=True)
class PayoffScenario:
    """Input for one simulated payoff strategy."""

    name: str
    scenario_type: ScenarioType
    monthly_payment: Decimal | None = None
    discount_percentage: Decimal | None = None
    installments: int | None = None
    interest_rate: Decimal | None = None  # monthly %


@dataclass(frozen=True)
class SimulationResult:
    scenario: str
    total_to_pay: Decimal
    months_to_payoff: int
    total_interest: Decimal
    monthly_payment: Decimal | None = None
    savings: Decimal | None = None


@dataclass(frozen=True)
class SimulationReport:
    results: list[SimulationResult]
    recommendation: str
    justification: str


@dataclass(frozen=True)
class UpcomingDue:
    debt_id: str
    creditor: str
    current_amount: Decimal
    due_date: datetime


@dataclass(frozen=True)
class DebtSummary:
    total_debts: int
    total_original: Decimal
    total_current: Decimal
    total_paid: Decimal
    by_status: dict[str, int] = field(default_factory=dict)
    by_type: dict[str, int] = field(default_factory=dict)
    upcoming: list[UpcomingDue] = field(default_factory=list)


def simulate_minimum_payment(total_debt: Decimal, scenario: PayoffScenario) -> SimulationResult:
    """Pay a fixed monthly value against a revolving balance.

    When the payment does not cover the monthly interest, the balance never
    shrinks and the simulation reports ``MAX_SIMULATED_MONTHS``.
    """
    monthly = scenario.monthly_payment or total_debt * MINIMUM_PAYMENT_SHARE
    balance = total_debt
    months = 0
    total_interest = ZERO

    while balance > 0 and months < MAX_SIMULATED_MONTHS:
        interest = balance * MINIMUM_PAYMENT_RATE
        principal = max(ZERO, monthly - interest)
        if principal <= 0:
            months = MAX_SIMULATED_MONTHS
            break
        balance = max(ZERO, balance - principal)
        total_interest += interest
        months += 1

    return SimulationResult(
        scenario=scenario.name,
        total_to_pay=total_debt + total_interest,
        months_to_payoff=months,
        total_interest=total_interest,
        monthly_payment=monthly,
    )


def simulate_discount_payoff(total_debt: Decimal, scenario: PayoffScenario) -> SimulationResult:
    """Settle everything at once with a negotiated discount."""
    discount = (scenario.discount_percentage or ZERO) / 100
    discounted = total_debt * (1 - discount)
    return SimulationResult(
        scenario=scenario.name,
        total_to_pay=discounted,
        months_to_payoff=1,
        total_interest=ZERO,
        savings=total_debt - discounted,
    )


def simulate_installments(total_debt: Decimal, scenario: PayoffScenario) -> SimulationResult:
    """Fixed installments under compound interest (Price table)."""
    n = scenario.installments or DEFAULT_INSTALLMENTS
    rate = (scenario.interest_rate if scenario.interest_rate is not None else DEFAULT_INSTALLMENT_RATE) / 100

    if rate == 0:
        installment = total_debt / n
    else:
        factor = (1 + rate) ** n
        installment = total_debt * (rate * factor) / (factor - 1)

    total = installment * n
    return SimulationResult(
        scenario=scenario.name,
        total_to_pay=total,
        months_to_payoff=n,
        total_interest=total - total_debt,
        monthly_payment=installment,
    )


SIMULATORS = {
    ScenarioType.PAGAMENTO_MINIMO: simulate_minimum_payment,
    ScenarioType.QUITACAO_DESCONTO: simulate_discount_payoff,
    ScenarioType.PARCELAMENTO: simulate_installments,
}


def simulate_scenarios(total_debt: Decimal, scenarios: Sequence[PayoffScenario]) -> SimulationReport:
    """Run every scenario and recommend the cheapest one."""
    total = to_decimal(total_debt)
    results = [SIMULATORS[ScenarioType(s.scenario_type)](total, s) for s in scenarios]
    recommendation, justification = recommend(results)
    return SimulationReport(results=results, recommendation=recommendation, justification=justification)


def recommend(results: Sequence[SimulationResult]) -> tuple[str, str]:
    """Pick the lowest total cost; explain savings and quick payoff."""
    if not results:
        return "Nenhuma simulação disponível", "Não foi possível gerar recomendações"

    best = min(results, key=lambda r: r.total_to_pay)
    savings = max(
        (r.total_to_pay - best.total_to_pay for r in results if r.scenario != best.scenario),
        default=ZERO,
    )

    justification = "Menor custo total"
    if savings > 0:
        justification += f" e economia de R$ {savings:.2f} comparado às outras opções"
    if best.months_to_payoff <= 3:
        justification += " com quitação rápida"

    return best.scenario, justification


def summarize_debts(
    debts: Iterable[Debt],
    payments: Iterable[DebtPayment] = (),
    upcoming_limit: int = 5,
    as_of: datetime | None = None,
) -> DebtSummary:
    """Aggregate a user's debts by status and type with the next due dates."""
    debts = list(debts)
    if upcoming_limit < 0:
        raise ValidationError("upcoming_limit must be >= 0")

    reference = as_of or datetime.now()
    paid_by_payments = sum((p.amount for p in payments), ZERO)

    open_debts = [
        d for d in debts
        if d.status != DebtStatus.QUITADA and d.due_date >= reference
    ]
    open_debts.sort(key=lambda d: d.due_date)

    return DebtSummary(
        total_debts=len(debts),
        total_original=sum((d.original_amount for d in debts), ZERO),
        total_current=sum((d.current_amount for d in debts), ZERO),
        total_paid=paid_by_payments or sum((d.paid_amount for d in debts), ZERO),
        by_status=dict(Counter(DebtStatus(d.status).value for d in debts)),
        by_type=dict(Counter(DebtType(d.debt_type).value for d in debts)),
        upcoming=[
            UpcomingDue(
                debt_id=d.debt_id,
                creditor=d.creditor,
                current_amount=d.current_amount,
                due_date=d.due_date,
            )
            for d in open_debts[:upcoming_limit]
        ],
    )
