"""Financial account model."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from finance_core.exceptions import InsufficientFundsError, ValidationError
from finance_core.models.enums import AccountType

# Overdraft assumed for checking accounts
CHECKING_OVERDRAFT = Decimal("1000")


@dataclass
class FinancialAccount:
    """User-held account whose balance moves with transactions.

    Account types:
    - CONTA_CORRENTE: checking account, may go negative (overdraft)
    - CONTA_POUPANCA: savings account
    - CARTEIRA: cash wallet
    - INVESTIMENTO: brokerage / investment account
    """

    account_id: str
    user_id: str
    name: str
    account_type: AccountType
    initial_balance: Decimal
    current_balance: Decimal
    active: bool = True
    institution: str | None = None
    color: str | None = None
    icon: str | None = None
    notes: str | None = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime | None = None

    def has_available_balance(self, value: Decimal) -> bool:
        """Whether the account can cover an expense of ``value``."""
        if self.account_type == AccountType.CONTA_CORRENTE:
            return True
        return self.current_balance >= value

    def can_make_transaction(self) -> bool:
        return self.active

    def available_limit(self) -> Decimal:
        if self.account_type == AccountType.CONTA_CORRENTE:
            return CHECKING_OVERDRAFT + self.current_balance
        return max(Decimal("0"), self.current_balance)

    def deposit(self, value: Decimal) -> None:
        self.current_balance += value
        self._touch()

    def withdraw(self, value: Decimal) -> None:
        self.current_balance -= value
        self._touch()

    def transfer_to(self, other: "FinancialAccount", value: Decimal) -> None:
        """Move ``value`` from this account to ``other``."""
        if value <= 0:
            raise ValidationError("Valor da transferência deve ser positivo")
        if self.current_balance < value:
            raise InsufficientFundsError("Saldo insuficiente para transferência")
        self.withdraw(value)
        other.deposit(value)

    def validate(self) -> None:
        if not self.name or not self.name.strip():
            raise ValidationError("Nome da conta é obrigatório")
        if self.initial_balance < 0:
            raise ValidationError("Saldo inicial não pode ser negativo")
        if not self.user_id:
            raise ValidationError("Conta deve estar associada a um usuário")

    def _touch(self) -> None:
        self.updated_at = datetime.now()
