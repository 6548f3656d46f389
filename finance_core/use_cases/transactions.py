"""Transaction, account and card use-cases."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from finance_core.config import BudgetConfig
from finance_core.events import events
from finance_core.events.bus import DispatchResult, EventBus
from finance_core.exceptions import (
    BudgetExceededError,
    BusinessRuleError,
    EntityNotFoundError,
    InsufficientFundsError,
)
from finance_core.models import (
    CreditCardTransaction,
    FinancialAccount,
    Transaction,
    TransactionType,
)
from finance_core.models.base import new_id, to_decimal
from finance_core.services.budget import (
    current_month_period,
    has_valid_budget_settings,
    resolve_category,
    validate_transaction_budget,
)
from finance_core.services.rules import (
    ComplianceResult,
    validate_account_deletion,
    validate_budget_compliance,
    validate_credit_card_transaction,
    validate_transaction_creation,
)
from finance_core.store.base import FinanceStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransactionOutcome:
    """Persisted transaction plus what the event handlers did with it.

    ``compliance`` is set for expenses in a budget bucket and carries the
    within-budget or warning message for the bucket after the expense.
    """

    transaction: Transaction
    dispatch: DispatchResult
    compliance: ComplianceResult | None = None


class CreateTransaction:
    """Validate, persist and announce a transaction.

    The account balance is not touched here: ``UpdateAccountBalanceHandler``
    applies it when ``TransactionCreated`` is dispatched. Check
    ``TransactionOutcome.dispatch`` to learn whether that succeeded.

    ``thresholds`` sets the compliance tiers reported for bucketed expenses;
    an expense above its ``hard_limit`` is rejected.
    """

    def __init__(
        self,
        store: FinanceStore,
        bus: EventBus,
        thresholds: BudgetConfig | None = None,
    ) -> None:
        self.store = store
        self.bus = bus
        self.thresholds = thresholds or BudgetConfig()

    async def execute(
        self,
        user_id: str,
        description: str,
        amount: Decimal,
        transaction_type: TransactionType | str,
        date: datetime,
        account_id: str | None = None,
        category_id: str | None = None,
        category_name: str | None = None,
        subcategory: str | None = None,
        notes: str | None = None,
        now: datetime | None = None,
    ) -> TransactionOutcome:
        """Create a transaction.

        Raises
        ------
        ValidationError
            Malformed transaction (empty description, non-positive amount,
            unknown type, future date).
        EntityNotFoundError
            Unknown or foreign account, or unknown category id.
        BusinessRuleError
            Inactive account or category, insufficient balance
            (``InsufficientFundsError``) or no budget left in the
            category's bucket this month, or spend past the compliance hard
            limit (``BudgetExceededError``).
        """
        transaction = Transaction(
            transaction_id=new_id(),
            user_id=user_id,
            description=description,
            amount=to_decimal(amount),
            transaction_type=transaction_type,
            date=date,
            account_id=account_id,
            category_id=category_id,
            category_name=category_name,
            subcategory=subcategory,
            notes=notes,
        )
        transaction.validate(now)

        account = await self._load_account(user_id, account_id)

        categories = await self.store.list_categories(user_id)
        category = resolve_category(categories, category_id=category_id, name=category_name)
        if category_id and category is None:
            raise EntityNotFoundError("Categoria não encontrada")
        if category is not None:
            transaction.category_id = category.category_id
            transaction.category_name = category.name

        if account is not None:
            if category is not None:
                validate_transaction_creation(
                    account, category, transaction.amount, transaction.transaction_type
                )
            elif transaction.is_despesa() and not account.has_available_balance(transaction.amount):
                raise InsufficientFundsError(
                    f"Saldo insuficiente. Saldo atual: R$ {account.current_balance:.2f}, "
                    f"Valor solicitado: R$ {transaction.amount:.2f}"
                )

        compliance = None
        if transaction.is_despesa() and category is not None:
            settings = await self.store.get_settings(user_id)
            if has_valid_budget_settings(settings):
                start, end = current_month_period(now)
                month_transactions = await self.store.list_transactions(user_id, start, end)
                validation = validate_transaction_budget(
                    transaction.amount,
                    category.category_id,
                    settings,
                    month_transactions,
                    categories,
                    start,
                    end,
                )
                if not validation.is_valid:
                    raise BudgetExceededError(validation.message or "Orçamento excedido")
                if validation.rule_category is not None:
                    compliance = validate_budget_compliance(
                        settings,
                        validation.rule_category,
                        validation.spent,
                        transaction.amount,
                        self.thresholds,
                    )
                    if not compliance.is_valid:
                        raise BudgetExceededError(compliance.message)

        await self.store.add_transaction(transaction)
        logger.info(
            "Transaction %s created: %s %s",
            transaction.transaction_id,
            transaction.transaction_type.value,
            transaction.amount,
            extra={"user_id": user_id, "account_id": account_id},
        )

        dispatch = await self.bus.dispatch(events.transaction_created(transaction))
        if not dispatch.ok:
            logger.warning(
                "Transaction %s stored but %d handler(s) failed",
                transaction.transaction_id,
                len(dispatch.failures),
                extra={"user_id": user_id},
            )
        return TransactionOutcome(transaction=transaction, dispatch=dispatch, compliance=compliance)

    async def _load_account(self, user_id: str, account_id: str | None) -> FinancialAccount | None:
        if not account_id:
            return None
        account = await self.store.get_account(account_id)
        if account is None or account.user_id != user_id:
            raise EntityNotFoundError("Conta financeira não encontrada")
        if not account.can_make_transaction():
            raise BusinessRuleError("Conta financeira está inativa")
        return account


class DeleteFinancialAccount:
    """Delete an account with no transactions or credit cards."""

    def __init__(self, store: FinanceStore) -> None:
        self.store = store

    async def execute(self, account_id: str, user_id: str) -> None:
        account = await self.store.get_account(account_id)
        if account is None or account.user_id != user_id:
            raise EntityNotFoundError("Conta financeira não encontrada")

        validate_account_deletion(
            account,
            has_transactions=await self.store.count_account_transactions(account_id) > 0,
            has_credit_cards=await self.store.count_account_cards(account_id) > 0,
        )
        await self.store.delete_account(account_id)
        logger.info("Account %s deleted", account_id, extra={"user_id": user_id, "account_id": account_id})


class CreateCreditCardTransaction:
    """Record a card purchase and reserve its value on the card limit."""

    def __init__(self, store: FinanceStore) -> None:
        self.store = store

    async def execute(
        self,
        user_id: str,
        card_id: str,
        description: str,
        amount: Decimal,
        purchase_date: datetime,
        installments: int = 1,
        current_installment: int = 1,
        category: str | None = None,
        merchant: str | None = None,
        notes: str | None = None,
    ) -> CreditCardTransaction:
        card = await self.store.get_credit_card(card_id)
        if card is None or card.user_id != user_id:
            raise EntityNotFoundError("Cartão de crédito não encontrado")
        if not card.active:
            raise BusinessRuleError("Cartão de crédito está inativo")

        value = to_decimal(amount)
        validate_credit_card_transaction(card, value, installments)
        if not 1 <= current_installment <= installments:
            raise BusinessRuleError("Parcela atual deve estar entre 1 e o número total de parcelas")

        transaction = CreditCardTransaction(
            transaction_id=new_id(),
            card_id=card_id,
            user_id=user_id,
            description=description,
            amount=value,
            purchase_date=purchase_date,
            installments=installments,
            current_installment=current_installment,
            category=category,
            merchant=merchant,
            notes=notes,
        )

        card.use_limit(value)
        await self.store.add_card_transaction(transaction)
        await self.store.update_credit_card(card)
        logger.info(
            "Card purchase %s on %s: %s (%s)",
            transaction.transaction_id,
            card_id,
            value,
            transaction.installment_label(),
            extra={"user_id": user_id},
        )
        return transaction
