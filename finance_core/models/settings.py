"""Budget configuration (salary and 50/30/20 split) for a user."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from finance_core.exceptions import ValidationError
from finance_core.models.base import BudgetAmounts, new_id, to_decimal
from finance_core.models.enums import RuleCategory

# Allowed percentage ranges of the 50/30/20 methodology
FIXED_RANGE = (Decimal("40"), Decimal("60"))
VARIABLE_RANGE = (Decimal("10"), Decimal("50"))
INVESTMENTS_RANGE = (Decimal("10"), Decimal("30"))


@dataclass
class UserFinanceSettings:
    """Salary plus the percentage split across the three budget buckets.

    - fixed: necessidades (needs)
    - variable: desejos (wants)
    - investments: futuro (savings)

    One per user. Build through :meth:`create` to get the invariants
    checked; the plain constructor is used when loading from storage.
    """

    settings_id: str
    user_id: str
    salary: Decimal
    fixed: Decimal
    variable: Decimal
    investments: Decimal
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime | None = None

    @classmethod
    def create(
        cls,
        user_id: str,
        salary: Any,
        fixed: Any,
        variable: Any,
        investments: Any,
        settings_id: str | None = None,
    ) -> "UserFinanceSettings":
        """Build validated settings for a user."""
        settings = cls(
            settings_id=settings_id or new_id(),
            user_id=user_id,
            salary=to_decimal(salary),
            fixed=to_decimal(fixed),
            variable=to_decimal(variable),
            investments=to_decimal(investments),
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        """Check the percentage-sum invariant and methodology ranges."""
        validate_split(self.salary, self.fixed, self.variable, self.investments)

    def calculate_budgets(self) -> BudgetAmounts:
        """Return the monetary budget of each bucket."""
        return BudgetAmounts(
            fixed=self.salary * self.fixed / 100,
            variable=self.salary * self.variable / 100,
            investments=self.salary * self.investments / 100,
            total=self.salary,
        )

    def bucket_percentage(self, rule_category: RuleCategory | str) -> Decimal:
        """Configured percentage for a bucket."""
        rule = RuleCategory(rule_category)
        if rule is RuleCategory.NECESSIDADES:
            return self.fixed
        if rule is RuleCategory.DESEJOS:
            return self.variable
        return self.investments

    def bucket_budget(self, rule_category: RuleCategory | str) -> Decimal:
        """Monetary budget for a bucket."""
        return self.salary * self.bucket_percentage(rule_category) / 100

    def update(
        self,
        salary: Any = None,
        fixed: Any = None,
        variable: Any = None,
        investments: Any = None,
    ) -> None:
        """Apply a partial update; the merged values must stay valid."""
        new_salary = self.salary if salary is None else to_decimal(salary)
        new_fixed = self.fixed if fixed is None else to_decimal(fixed)
        new_variable = self.variable if variable is None else to_decimal(variable)
        new_investments = self.investments if investments is None else to_decimal(investments)

        validate_split(new_salary, new_fixed, new_variable, new_investments)

        self.salary = new_salary
        self.fixed = new_fixed
        self.variable = new_variable
        self.investments = new_investments
        self.updated_at = datetime.now()


def validate_split(salary: Decimal, fixed: Decimal, variable: Decimal, investments: Decimal) -> None:
    """Raise ``ValidationError`` unless the salary and split are acceptable."""
    if salary <= 0:
        raise ValidationError("Salário deve ser maior que zero")

    if fixed < 0 or variable < 0 or investments < 0:
        raise ValidationError("Percentuais não podem ser negativos")

    total = fixed + variable + investments
    if total != 100:
        raise ValidationError(f"A soma dos percentuais deve ser 100 (recebido {total})")

    if not FIXED_RANGE[0] <= fixed <= FIXED_RANGE[1]:
        raise ValidationError("Necessidades (fixed) deve estar entre 40% e 60%")

    if not INVESTMENTS_RANGE[0] <= investments <= INVESTMENTS_RANGE[1]:
        raise ValidationError("Investimentos (investments) deve estar entre 10% e 30%")

    if not VARIABLE_RANGE[0] <= variable <= VARIABLE_RANGE[1]:
        raise ValidationError("Desejos (variable) deve estar entre 10% e 50%")
