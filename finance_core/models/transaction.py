"""Transaction model for the personal-finance domain."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from finance_core.exceptions import ValidationError
from finance_core.models.enums import TransactionType


@dataclass
class Transaction:
    """Income, expense or transfer booked against a financial account.

    ``category_id`` is the canonical category reference; ``category_name``
    is kept for records that predate category ids.
    """

    transaction_id: str
    user_id: str
    description: str
    amount: Decimal  # always positive; direction comes from transaction_type
    transaction_type: TransactionType
    date: datetime
    account_id: str | None = None
    category_id: str | None = None
    category_name: str | None = None
    subcategory: str | None = None
    notes: str | None = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime | None = None

    def validate(self, now: datetime | None = None) -> None:
        """Raise ``ValidationError`` for a malformed transaction."""
        if not self.description or not self.description.strip():
            raise ValidationError("Descrição da transação é obrigatória")
        if self.amount <= 0:
            raise ValidationError("Valor da transação deve ser maior que zero")
        if not isinstance(self.transaction_type, TransactionType):
            try:
                self.transaction_type = TransactionType(self.transaction_type)
            except ValueError as exc:
                raise ValidationError(
                    'Tipo de transação inválido. Deve ser "receita", "despesa" ou "transferencia"'
                ) from exc
        if self.date > (now or datetime.now()):
            raise ValidationError("Data da transação não pode ser no futuro")

    def is_receita(self) -> bool:
        return self.transaction_type == TransactionType.RECEITA

    def is_despesa(self) -> bool:
        return self.transaction_type == TransactionType.DESPESA

    def is_transferencia(self) -> bool:
        return self.transaction_type == TransactionType.TRANSFERENCIA

    def in_period(self, start: datetime, end: datetime) -> bool:
        """Inclusive on both ends."""
        return start <= self.date <= end
