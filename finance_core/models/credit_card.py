"""Credit card models."""

import re
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from finance_core.exceptions import CreditLimitExceededError, ValidationError
from finance_core.models.enums import CardBrand

LAST_DIGITS = re.compile(r"^\d{4}$")


@dataclass
class CreditCard:
    """Credit card linked to a financial account."""

    card_id: str
    user_id: str
    account_id: str
    name: str
    brand: CardBrand
    last_digits: str  # 4 digits
    credit_limit: Decimal
    available_limit: Decimal
    due_day: int  # 1-31
    closing_day: int  # 1-31
    active: bool = True
    bank: str | None = None
    color: str | None = None
    notes: str | None = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime | None = None

    @property
    def used_amount(self) -> Decimal:
        """Portion of the limit already committed."""
        return self.credit_limit - self.available_limit

    def validate(self) -> None:
        if not self.name or not self.name.strip():
            raise ValidationError("Nome do cartão é obrigatório")
        if not LAST_DIGITS.match(self.last_digits):
            raise ValidationError("Últimos dígitos devem conter exatamente 4 números")
        if self.credit_limit <= 0:
            raise ValidationError("Limite total deve ser maior que zero")
        if not 1 <= self.due_day <= 31:
            raise ValidationError("Dia de vencimento deve estar entre 1 e 31")
        if not 1 <= self.closing_day <= 31:
            raise ValidationError("Dia de fechamento deve estar entre 1 e 31")
        if self.available_limit < 0:
            raise ValidationError("Limite disponível não pode ser negativo")
        if self.available_limit > self.credit_limit:
            raise ValidationError("Limite disponível não pode ser maior que o limite total")

    def use_limit(self, value: Decimal) -> None:
        if value <= 0:
            raise ValidationError("Valor deve ser maior que zero")
        if value > self.available_limit:
            raise CreditLimitExceededError("Limite insuficiente")
        self.available_limit -= value
        self._touch()

    def release_limit(self, value: Decimal) -> None:
        """Give back limit (payment or cancellation), capped at the total limit."""
        if value <= 0:
            raise ValidationError("Valor deve ser maior que zero")
        self.available_limit = min(self.credit_limit, self.available_limit + value)
        self._touch()

    def update_limit(self, new_limit: Decimal) -> None:
        """Change the total limit keeping the used proportion."""
        if new_limit <= 0:
            raise ValidationError("Limite total deve ser maior que zero")
        used_ratio = self.used_amount / self.credit_limit
        self.credit_limit = new_limit
        self.available_limit = new_limit * (1 - used_ratio)
        self._touch()

    def _touch(self) -> None:
        self.updated_at = datetime.now()


@dataclass
class CreditCardTransaction:
    """Purchase made with a credit card, possibly split in installments."""

    transaction_id: str
    card_id: str
    user_id: str
    description: str
    amount: Decimal  # total purchase value
    purchase_date: datetime
    installments: int = 1  # 1 for a vista
    current_installment: int = 1
    category: str | None = None
    subcategory: str | None = None
    merchant: str | None = None
    notes: str | None = None
    invoice_id: str | None = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime | None = None

    def is_installment(self) -> bool:
        return self.installments > 1

    def is_last_installment(self) -> bool:
        return self.current_installment == self.installments

    def installment_amount(self) -> Decimal:
        return self.amount / self.installments

    def installment_label(self) -> str:
        if self.is_installment():
            return f"{self.current_installment}/{self.installments}"
        return "À vista"
