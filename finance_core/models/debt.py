"""Debt models."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from finance_core.exceptions import InvalidEntityStateError, ValidationError
from finance_core.models.enums import DebtPaymentType, DebtStatus, DebtType


@dataclass
class Debt:
    """Outstanding debt owed to a creditor."""

    debt_id: str
    user_id: str
    creditor: str
    debt_type: DebtType
    original_amount: Decimal
    current_amount: Decimal
    due_date: datetime
    status: DebtStatus = DebtStatus.ATIVA
    interest_rate: Decimal | None = None  # yearly percentage (e.g. 24 for 24% a.a.)
    description: str | None = None
    total_installments: int | None = None
    installment_amount: Decimal | None = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime | None = None

    @property
    def paid_amount(self) -> Decimal:
        return self.original_amount - self.current_amount

    def register_payment(self, value: Decimal) -> None:
        """Reduce the outstanding amount; settle the debt when it reaches zero."""
        if value <= 0:
            raise ValidationError("Valor do pagamento deve ser positivo")
        if self.status == DebtStatus.QUITADA:
            raise InvalidEntityStateError("Dívida já foi quitada")
        if value > self.current_amount:
            raise ValidationError("Valor do pagamento não pode ser maior que o saldo devedor")

        self.current_amount -= value
        if self.current_amount == 0:
            self.status = DebtStatus.QUITADA
        self._touch()

    def calculate_interest(self, as_of: datetime | None = None) -> Decimal:
        """Simple interest accrued since creation on the outstanding amount."""
        if not self.interest_rate:
            return Decimal("0")
        monthly_rate = self.interest_rate / 100 / 12
        days = ((as_of or datetime.now()) - self.created_at).days
        months_elapsed = Decimal(days) / 30
        return self.current_amount * monthly_rate * months_elapsed

    def is_overdue(self, as_of: datetime | None = None) -> bool:
        return self.due_date < (as_of or datetime.now()) and self.status == DebtStatus.ATIVA

    def mark_as_overdue(self, as_of: datetime | None = None) -> None:
        if self.is_overdue(as_of):
            self.status = DebtStatus.VENCIDA
            self._touch()

    def _touch(self) -> None:
        self.updated_at = datetime.now()


@dataclass
class DebtPayment:
    """Payment made against a debt."""

    payment_id: str
    debt_id: str
    user_id: str
    amount: Decimal
    paid_at: datetime
    payment_type: DebtPaymentType = DebtPaymentType.PAGAMENTO_PARCIAL
    notes: str | None = None
    created_at: datetime = field(default_factory=datetime.now)
