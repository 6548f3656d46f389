"""Business rule validators for accounts, categories, transactions and cards.

Validators return ``None`` on success and raise a ``BusinessRuleError``
subclass carrying a user-facing message otherwise. The exception is
``validate_budget_compliance``, which reports a tiered result instead of
raising so callers can surface warnings without rejecting the operation.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from finance_core.config import BudgetConfig
from finance_core.exceptions import (
    BusinessRuleError,
    CreditLimitExceededError,
    InsufficientFundsError,
    ValidationError,
)
from finance_core.models import (
    CreditCard,
    FinancialAccount,
    FinancialCategory,
    RuleCategory,
    TransactionType,
    UserFinanceSettings,
)
from finance_core.models.base import to_decimal
from finance_core.services.budget import percentage_of

MIN_INSTALLMENTS = 1
MAX_INSTALLMENTS = 12

BUCKET_LABELS = {
    RuleCategory.NECESSIDADES: "Necessidades",
    RuleCategory.DESEJOS: "Desejos",
    RuleCategory.FUTURO: "Investimentos",
}


@dataclass(frozen=True)
class ComplianceResult:
    is_valid: bool
    message: str
    percentage: Decimal


@dataclass(frozen=True)
class BudgetImpact:
    budget: Decimal
    impact: Decimal
    percentage: Decimal


def _rule(rule_category: RuleCategory | str) -> RuleCategory:
    try:
        return RuleCategory(rule_category)
    except ValueError as exc:
        raise ValidationError(f"Tipo de categoria inválido: {rule_category!r}") from exc


def validate_category_creation(
    settings: UserFinanceSettings | None,
    rule_category: RuleCategory | str,
) -> None:
    """A bucketed category needs configured settings and a positive bucket budget."""
    if settings is None:
        raise BusinessRuleError("Para criar categorias, primeiro configure seu orçamento mensal")

    rule = _rule(rule_category)
    if settings.bucket_budget(rule) <= 0:
        label = "investimentos" if rule is RuleCategory.FUTURO else rule.value
        raise BusinessRuleError(f"Orçamento para {label} deve ser maior que zero")


def validate_transaction_creation(
    account: FinancialAccount | None,
    category: FinancialCategory | None,
    value: Decimal,
    transaction_type: TransactionType | str,
) -> None:
    """Account and category must exist, value be positive, category active.

    Expenses additionally need the account to have available balance.
    """
    if account is None:
        raise BusinessRuleError("Transação deve estar vinculada a uma conta. Crie uma conta primeiro.")

    if category is None:
        raise BusinessRuleError("Transação deve ter uma categoria. Crie uma categoria primeiro.")

    amount = to_decimal(value)
    if amount <= 0:
        raise BusinessRuleError("Valor da transação deve ser maior que zero")

    if not category.is_active():
        raise BusinessRuleError("Não é possível criar transação com categoria inativa")

    if TransactionType(transaction_type) is TransactionType.DESPESA and not account.has_available_balance(amount):
        raise InsufficientFundsError("Saldo insuficiente na conta para esta transação")


def validate_credit_card_transaction(
    card: CreditCard | None,
    value: Decimal,
    installments: int = 1,
) -> None:
    """Card must exist, value be positive, 1-12 installments, and fit the limit."""
    if card is None:
        raise BusinessRuleError("Cartão de crédito não encontrado")

    amount = to_decimal(value)
    if amount <= 0:
        raise BusinessRuleError("Valor da compra deve ser maior que zero")

    if not MIN_INSTALLMENTS <= installments <= MAX_INSTALLMENTS:
        raise BusinessRuleError("Número de parcelas deve estar entre 1 e 12")

    available = card.credit_limit - card.used_amount
    if amount > available:
        raise CreditLimitExceededError(f"Limite insuficiente. Disponível: R$ {available:.2f}")


def validate_category_deletion(category: FinancialCategory, has_transactions: bool) -> None:
    if has_transactions:
        raise BusinessRuleError("Não é possível excluir categoria que possui transações associadas")

    if category.is_default():
        raise BusinessRuleError("Não é possível excluir categoria padrão")


def validate_account_deletion(
    account: FinancialAccount,
    has_transactions: bool,
    has_credit_cards: bool,
) -> None:
    if has_transactions:
        raise BusinessRuleError("Não é possível excluir conta que possui transações associadas")

    if has_credit_cards:
        raise BusinessRuleError("Não é possível excluir conta que possui cartões de crédito associados")


def validate_budget_compliance(
    settings: UserFinanceSettings,
    rule_category: RuleCategory | str,
    current_spent: Decimal,
    new_value: Decimal,
    thresholds: BudgetConfig | None = None,
) -> ComplianceResult:
    """Classify a prospective expense against its bucket budget.

    Tiers (percent of the bucket budget after the expense):

    - up to ``warning_threshold`` (80): within budget
    - above ``warning_threshold``: warning
    - above ``exceeded_threshold`` (100): over budget, still allowed
    - above ``hard_limit`` (110): rejected (``is_valid=False``)

    A zero bucket budget yields ``percentage == 0`` and rejects any
    positive spend.
    """
    limits = thresholds or BudgetConfig()
    rule = _rule(rule_category)
    label = BUCKET_LABELS[rule]

    bucket_budget = settings.bucket_budget(rule)
    total_spent = to_decimal(current_spent) + to_decimal(new_value)
    percentage = percentage_of(total_spent, bucket_budget)
    max_allowed = bucket_budget * limits.hard_limit / 100

    if total_spent > max_allowed:
        return ComplianceResult(
            is_valid=False,
            message=f"Esta transação excederia o limite máximo de {label} ({limits.hard_limit}% do orçamento)",
            percentage=percentage,
        )

    if percentage > limits.exceeded_threshold:
        return ComplianceResult(
            is_valid=True,
            message=f"Atenção: Esta transação excederá o orçamento de {label} ({percentage:.1f}%)",
            percentage=percentage,
        )

    if percentage > limits.warning_threshold:
        return ComplianceResult(
            is_valid=True,
            message=f"Aviso: Você está usando {percentage:.1f}% do orçamento de {label}",
            percentage=percentage,
        )

    return ComplianceResult(
        is_valid=True,
        message=f"Transação dentro do orçamento de {label} ({percentage:.1f}%)",
        percentage=percentage,
    )


def calculate_budget_impact(
    settings: UserFinanceSettings,
    rule_category: RuleCategory | str,
    value: Decimal,
) -> BudgetImpact:
    """Share of a bucket budget a single value represents (0 for a zero budget)."""
    rule = _rule(rule_category)
    bucket_budget = settings.bucket_budget(rule)
    amount = to_decimal(value)
    return BudgetImpact(
        budget=bucket_budget,
        impact=amount,
        percentage=percentage_of(amount, bucket_budget),
    )
