"""Tests for the domain models."""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from finance_core.exceptions import (
    CreditLimitExceededError,
    InsufficientFundsError,
    InvalidEntityStateError,
    ValidationError,
)
from finance_core.models import (
    AccountType,
    CategoryStatus,
    CategoryType,
    CreditCard,
    CreditCardTransaction,
    Debt,
    DebtStatus,
    DebtType,
    DomainEvent,
    FinancialAccount,
    FinancialCategory,
    RuleCategory,
    Transaction,
    TransactionType,
    UserFinanceSettings,
)
from finance_core.models.base import new_id, to_decimal
from finance_core.models.category import CATEGORY_COLORS, DEFAULT_CATEGORIES, HEX_COLOR


class TestBaseHelpers:
    """Tests for new_id, to_decimal and DomainEvent."""

    def test_new_id_unique(self) -> None:
        ids = {new_id() for _ in range(100)}
        assert len(ids) == 100

    def test_to_decimal_float_has_no_binary_noise(self) -> None:
        """Floats go through str so 0.1 stays 0.1."""
        assert to_decimal(0.1) == Decimal("0.1")
        assert to_decimal("12.50") == Decimal("12.50")
        assert to_decimal(3) == Decimal("3")

    def test_to_decimal_passthrough(self) -> None:
        value = Decimal("1.23")
        assert to_decimal(value) is value

    @pytest.mark.parametrize("value", ["abc", "", None, [1], "NaN", float("inf"), Decimal("NaN")])
    def test_to_decimal_rejects_non_numbers(self, value: object) -> None:
        with pytest.raises(ValidationError, match="Valor inválido"):
            to_decimal(value)

    def test_domain_event_defaults(self) -> None:
        """Events get an id and a timestamp automatically."""
        event = DomainEvent(event_name="TransactionCreated", event_data={"user_id": "u"})

        assert event.event_id
        assert isinstance(event.occurred_on, datetime)
        assert event.event_id != DomainEvent(event_name="X", event_data={}).event_id


class TestUserFinanceSettings:
    """Tests for UserFinanceSettings."""

    def test_create_valid(self, settings: UserFinanceSettings) -> None:
        assert settings.salary == Decimal("5000")
        assert settings.fixed + settings.variable + settings.investments == 100

    def test_calculate_budgets(self, settings: UserFinanceSettings) -> None:
        """5000 split 50/30/20 gives 2500/1500/1000."""
        budgets = settings.calculate_budgets()

        assert budgets.fixed == Decimal("2500")
        assert budgets.variable == Decimal("1500")
        assert budgets.investments == Decimal("1000")
        assert budgets.total == Decimal("5000")

    def test_bucket_budget(self, settings: UserFinanceSettings) -> None:
        assert settings.bucket_budget(RuleCategory.NECESSIDADES) == Decimal("2500")
        assert settings.bucket_budget("desejos") == Decimal("1500")
        assert settings.bucket_percentage(RuleCategory.FUTURO) == Decimal("20")

    def test_sum_must_be_100(self, user_id: str) -> None:
        """A split that does not total 100 is rejected."""
        with pytest.raises(ValidationError, match="100"):
            UserFinanceSettings.create(user_id, 5000, 50, 30, 25)

    def test_salary_must_be_positive(self, user_id: str) -> None:
        with pytest.raises(ValidationError, match="Salário"):
            UserFinanceSettings.create(user_id, 0, 50, 30, 20)

    @pytest.mark.parametrize(
        "fixed,variable,investments,label",
        [
            (65, 20, 15, "Necessidades"),
            (35, 45, 20, "Necessidades"),
            (55, 10, 35, "Investimentos"),
            (60, 35, 5, "Investimentos"),
            (40, 55, 5, "Investimentos"),
            (60, 8, 32, "Investimentos"),
        ],
    )
    def test_ranges_enforced(
        self, user_id: str, fixed: int, variable: int, investments: int, label: str
    ) -> None:
        """Bucket percentages must sit inside the methodology ranges."""
        with pytest.raises(ValidationError, match=label):
            UserFinanceSettings.create(user_id, 5000, fixed, variable, investments)

    def test_negative_percentage_rejected(self, user_id: str) -> None:
        with pytest.raises(ValidationError, match="negativos"):
            UserFinanceSettings.create(user_id, 5000, 110, -30, 20)

    def test_update_partial(self, settings: UserFinanceSettings) -> None:
        """Partial updates merge with the current values."""
        settings.update(salary=Decimal("6000"))

        assert settings.salary == Decimal("6000")
        assert settings.fixed == Decimal("50")
        assert settings.updated_at is not None

    def test_update_rejects_invalid_merge(self, settings: UserFinanceSettings) -> None:
        """An update that breaks the sum leaves the settings untouched."""
        with pytest.raises(ValidationError):
            settings.update(fixed=Decimal("60"))

        assert settings.fixed == Decimal("50")
        assert settings.updated_at is None

    def test_update_full_split(self, settings: UserFinanceSettings) -> None:
        settings.update(fixed=55, variable=30, investments=15)

        assert settings.bucket_budget(RuleCategory.NECESSIDADES) == Decimal("2750")


class TestFinancialCategory:
    """Tests for FinancialCategory."""

    def test_is_active(self, categories: list[FinancialCategory]) -> None:
        category = categories[0]
        assert category.is_active()

        category.deactivate()
        assert not category.is_active()

        category.activate()
        category.status = CategoryStatus.DRAFT
        assert not category.is_active()

    def test_archive(self, categories: list[FinancialCategory]) -> None:
        category = categories[0]
        category.archive()

        assert category.status == CategoryStatus.ARCHIVED
        assert category.active is False
        assert category.updated_at is not None

    def test_is_default(self, user_id: str) -> None:
        """Protected names are default categories."""
        outros = FinancialCategory("c1", user_id, "Outros", CategoryType.DESPESA)
        lazer = FinancialCategory("c2", user_id, "Lazer", CategoryType.DESPESA)

        assert outros.is_default()
        assert not lazer.is_default()

    def test_validate_name_required(self, user_id: str) -> None:
        with pytest.raises(ValidationError, match="obrigatório"):
            FinancialCategory("c1", user_id, "   ", CategoryType.DESPESA).validate()

    def test_validate_name_length(self, user_id: str) -> None:
        with pytest.raises(ValidationError, match="100"):
            FinancialCategory("c1", user_id, "x" * 101, CategoryType.DESPESA).validate()

    def test_validate_color(self, user_id: str) -> None:
        FinancialCategory("c1", user_id, "A", CategoryType.DESPESA, color="#fff").validate()
        FinancialCategory("c1", user_id, "A", CategoryType.DESPESA, color="#A1B2C3").validate()

        with pytest.raises(ValidationError, match="Cor"):
            FinancialCategory("c1", user_id, "A", CategoryType.DESPESA, color="blue").validate()

    def test_validate_user_required(self) -> None:
        with pytest.raises(ValidationError, match="usuário"):
            FinancialCategory("c1", "", "A", CategoryType.DESPESA).validate()

    def test_default_categories_well_formed(self) -> None:
        """Every default category has a valid type and icon."""
        names = [name for name, _, _, _ in DEFAULT_CATEGORIES]

        assert len(names) == len(set(names)) == 17
        assert "Outros" in names and "Transferência" in names
        for _, category_type, rule_category, icon in DEFAULT_CATEGORIES:
            assert isinstance(category_type, CategoryType)
            assert rule_category is None or isinstance(rule_category, RuleCategory)
            assert icon

    def test_category_colors_are_hex(self) -> None:
        assert all(HEX_COLOR.match(color) for color in CATEGORY_COLORS)


class TestTransaction:
    """Tests for Transaction."""

    def _tx(self, **overrides: object) -> Transaction:
        fields = dict(
            transaction_id="tx-1",
            user_id="u",
            description="Mercado",
            amount=Decimal("100"),
            transaction_type=TransactionType.DESPESA,
            date=datetime(2024, 6, 10),
        )
        fields.update(overrides)
        return Transaction(**fields)  # type: ignore[arg-type]

    def test_validate_ok(self, now: datetime) -> None:
        self._tx().validate(now)

    def test_validate_coerces_type_string(self, now: datetime) -> None:
        tx = self._tx(transaction_type="receita")
        tx.validate(now)

        assert tx.transaction_type is TransactionType.RECEITA
        assert tx.is_receita()

    def test_validate_rejects_unknown_type(self, now: datetime) -> None:
        with pytest.raises(ValidationError, match="Tipo de transação inválido"):
            self._tx(transaction_type="doacao").validate(now)

    def test_validate_rejects_non_positive_amount(self, now: datetime) -> None:
        with pytest.raises(ValidationError, match="maior que zero"):
            self._tx(amount=Decimal("0")).validate(now)

    def test_validate_rejects_empty_description(self, now: datetime) -> None:
        with pytest.raises(ValidationError, match="Descrição"):
            self._tx(description="").validate(now)

    def test_validate_rejects_future_date(self, now: datetime) -> None:
        with pytest.raises(ValidationError, match="futuro"):
            self._tx(date=now + timedelta(days=1)).validate(now)

    def test_in_period_inclusive(self, period: tuple[datetime, datetime]) -> None:
        start, end = period

        assert self._tx(date=start).in_period(start, end)
        assert self._tx(date=end).in_period(start, end)
        assert not self._tx(date=end + timedelta(microseconds=1)).in_period(start, end)

    def test_type_predicates(self) -> None:
        tx = self._tx(transaction_type=TransactionType.TRANSFERENCIA)

        assert tx.is_transferencia()
        assert not tx.is_despesa()
        assert not tx.is_receita()


class TestFinancialAccount:
    """Tests for FinancialAccount."""

    def test_checking_always_has_balance(self, checking_account: FinancialAccount) -> None:
        """Checking accounts may go into overdraft."""
        assert checking_account.has_available_balance(Decimal("999999"))

    def test_savings_limited_to_balance(self, savings_account: FinancialAccount) -> None:
        assert savings_account.has_available_balance(Decimal("200"))
        assert not savings_account.has_available_balance(Decimal("200.01"))

    def test_available_limit(
        self, checking_account: FinancialAccount, savings_account: FinancialAccount
    ) -> None:
        assert checking_account.available_limit() == Decimal("2000.00")
        savings_account.current_balance = Decimal("-10")
        assert savings_account.available_limit() == Decimal("0")

    def test_inactive_cannot_transact(self, checking_account: FinancialAccount) -> None:
        checking_account.active = False
        assert not checking_account.can_make_transaction()

    def test_transfer_to(
        self, checking_account: FinancialAccount, savings_account: FinancialAccount
    ) -> None:
        checking_account.transfer_to(savings_account, Decimal("300"))

        assert checking_account.current_balance == Decimal("700.00")
        assert savings_account.current_balance == Decimal("500.00")

    def test_transfer_requires_funds(
        self, checking_account: FinancialAccount, savings_account: FinancialAccount
    ) -> None:
        with pytest.raises(InsufficientFundsError):
            savings_account.transfer_to(checking_account, Decimal("500"))

        with pytest.raises(ValidationError):
            savings_account.transfer_to(checking_account, Decimal("0"))

    def test_validate(self, user_id: str) -> None:
        account = FinancialAccount(
            "a", user_id, "Conta", AccountType.CARTEIRA, Decimal("-1"), Decimal("0")
        )
        with pytest.raises(ValidationError, match="negativo"):
            account.validate()


class TestCreditCard:
    """Tests for CreditCard and CreditCardTransaction."""

    def test_use_and_release_limit(self, credit_card: CreditCard) -> None:
        credit_card.use_limit(Decimal("1000"))

        assert credit_card.available_limit == Decimal("2000.00")
        assert credit_card.used_amount == Decimal("1000.00")

        credit_card.release_limit(Decimal("5000"))
        assert credit_card.available_limit == credit_card.credit_limit

    def test_use_limit_exceeded(self, credit_card: CreditCard) -> None:
        with pytest.raises(CreditLimitExceededError):
            credit_card.use_limit(Decimal("3000.01"))

    def test_update_limit_keeps_proportion(self, credit_card: CreditCard) -> None:
        credit_card.use_limit(Decimal("1500"))
        credit_card.update_limit(Decimal("6000"))

        assert credit_card.available_limit == Decimal("3000")

    def test_validate(self, credit_card: CreditCard) -> None:
        credit_card.validate()

        credit_card.last_digits = "12a4"
        with pytest.raises(ValidationError, match="dígitos"):
            credit_card.validate()

    def test_validate_days(self, credit_card: CreditCard) -> None:
        credit_card.due_day = 32
        with pytest.raises(ValidationError, match="vencimento"):
            credit_card.validate()

    def test_installments(self) -> None:
        tx = CreditCardTransaction(
            transaction_id="t",
            card_id="c",
            user_id="u",
            description="TV",
            amount=Decimal("1200"),
            purchase_date=datetime(2024, 6, 1),
            installments=12,
            current_installment=12,
        )

        assert tx.is_installment()
        assert tx.is_last_installment()
        assert tx.installment_amount() == Decimal("100")
        assert tx.installment_label() == "12/12"

    def test_single_payment_label(self) -> None:
        tx = CreditCardTransaction(
            transaction_id="t",
            card_id="c",
            user_id="u",
            description="Livro",
            amount=Decimal("50"),
            purchase_date=datetime(2024, 6, 1),
        )
        assert tx.installment_label() == "À vista"


class TestDebt:
    """Tests for Debt."""

    def _debt(self, **overrides: object) -> Debt:
        fields = dict(
            debt_id="d-1",
            user_id="u",
            creditor="Banco X",
            debt_type=DebtType.EMPRESTIMO_PESSOAL,
            original_amount=Decimal("1000"),
            current_amount=Decimal("1000"),
            due_date=datetime(2024, 12, 1),
            created_at=datetime(2024, 1, 1),
        )
        fields.update(overrides)
        return Debt(**fields)  # type: ignore[arg-type]

    def test_register_partial_payment(self) -> None:
        debt = self._debt()
        debt.register_payment(Decimal("400"))

        assert debt.current_amount == Decimal("600")
        assert debt.paid_amount == Decimal("400")
        assert debt.status == DebtStatus.ATIVA

    def test_register_full_payment_settles(self) -> None:
        debt = self._debt()
        debt.register_payment(Decimal("1000"))

        assert debt.status == DebtStatus.QUITADA

        with pytest.raises(InvalidEntityStateError):
            debt.register_payment(Decimal("1"))

    def test_payment_cannot_exceed_balance(self) -> None:
        with pytest.raises(ValidationError, match="saldo devedor"):
            self._debt().register_payment(Decimal("1000.01"))

    def test_calculate_interest(self) -> None:
        """24% a.a. over 30 days on 1000 is 20."""
        debt = self._debt(interest_rate=Decimal("24"))

        assert debt.calculate_interest(datetime(2024, 1, 31)) == Decimal("20")
        assert self._debt().calculate_interest(datetime(2024, 1, 31)) == Decimal("0")

    def test_overdue(self) -> None:
        debt = self._debt()

        assert not debt.is_overdue(datetime(2024, 11, 30))
        debt.mark_as_overdue(datetime(2024, 12, 2))
        assert debt.status == DebtStatus.VENCIDA
