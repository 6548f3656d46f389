"""Financial category model."""

import re
from dataclasses import dataclass, field
from datetime import datetime

from finance_core.exceptions import ValidationError
from finance_core.models.enums import CategoryStatus, CategoryType, RuleCategory

HEX_COLOR = re.compile(r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")

# Categories that can never be deleted
PROTECTED_NAMES = frozenset({"Outros", "Transferência", "Ajuste"})

MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500

# Seeded for every user on first budget configuration: (name, type, rule category, icon)
DEFAULT_CATEGORIES: tuple[tuple[str, CategoryType, RuleCategory | None, str], ...] = (
    # Necessidades
    ("Alimentação", CategoryType.DESPESA, RuleCategory.NECESSIDADES, "🍽️"),
    ("Moradia", CategoryType.DESPESA, RuleCategory.NECESSIDADES, "🏠"),
    ("Transporte", CategoryType.DESPESA, RuleCategory.NECESSIDADES, "🚗"),
    ("Saúde", CategoryType.DESPESA, RuleCategory.NECESSIDADES, "⚕️"),
    ("Educação", CategoryType.DESPESA, RuleCategory.NECESSIDADES, "📚"),
    # Desejos
    ("Lazer", CategoryType.DESPESA, RuleCategory.DESEJOS, "🎮"),
    ("Restaurantes", CategoryType.DESPESA, RuleCategory.DESEJOS, "🍽️"),
    ("Compras", CategoryType.DESPESA, RuleCategory.DESEJOS, "🛍️"),
    ("Assinaturas", CategoryType.DESPESA, RuleCategory.DESEJOS, "📱"),
    # Futuro
    ("Poupança", CategoryType.DESPESA, RuleCategory.FUTURO, "💰"),
    ("Investimentos", CategoryType.DESPESA, RuleCategory.FUTURO, "📈"),
    ("Emergência", CategoryType.DESPESA, RuleCategory.FUTURO, "🚨"),
    # Receitas
    ("Salário", CategoryType.RECEITA, None, "💵"),
    ("Freelance", CategoryType.RECEITA, None, "💼"),
    ("Rendimentos", CategoryType.RECEITA, None, "📊"),
    # Outros
    ("Outros", CategoryType.DESPESA, RuleCategory.DESEJOS, "❓"),
    ("Transferência", CategoryType.DESPESA, None, "↔️"),
)

CATEGORY_COLORS = (
    "#3B82F6", "#10B981", "#F59E0B", "#EF4444", "#8B5CF6",
    "#F97316", "#06B6D4", "#84CC16", "#EC4899", "#6B7280",
)


@dataclass
class FinancialCategory:
    """User-defined income/expense category.

    ``rule_category`` places an expense category in one of the three budget
    buckets; ``None`` means unclassified (typically income categories).
    Names are unique per user.
    """

    category_id: str
    user_id: str
    name: str
    category_type: CategoryType
    rule_category: RuleCategory | None = None
    active: bool = True
    status: CategoryStatus = CategoryStatus.PUBLISHED
    sort: int = 0
    description: str | None = None
    icon: str | None = None
    color: str | None = None  # #RRGGBB
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime | None = None

    def is_active(self) -> bool:
        """Active and published categories accept transactions."""
        return self.active and self.status == CategoryStatus.PUBLISHED

    def is_default(self) -> bool:
        return self.name in PROTECTED_NAMES

    def has_rule_category(self) -> bool:
        return self.rule_category is not None

    def belongs_to(self, user_id: str) -> bool:
        return self.user_id == user_id

    def validate(self) -> None:
        """Raise ``ValidationError`` if the category fields are malformed."""
        if not self.name or not self.name.strip():
            raise ValidationError("Nome da categoria é obrigatório")
        if len(self.name) > MAX_NAME_LENGTH:
            raise ValidationError("Nome da categoria deve ter no máximo 100 caracteres")
        if self.description and len(self.description) > MAX_DESCRIPTION_LENGTH:
            raise ValidationError("Descrição da categoria deve ter no máximo 500 caracteres")
        if self.color and not HEX_COLOR.match(self.color):
            raise ValidationError("Cor inválida. Use o formato hexadecimal (#RRGGBB)")
        if not self.user_id:
            raise ValidationError("Categoria deve estar associada a um usuário")

    def activate(self) -> None:
        self.active = True
        self._touch()

    def deactivate(self) -> None:
        self.active = False
        self._touch()

    def archive(self) -> None:
        self.status = CategoryStatus.ARCHIVED
        self.active = False
        self._touch()

    def publish(self) -> None:
        self.status = CategoryStatus.PUBLISHED
        self._touch()

    def _touch(self) -> None:
        self.updated_at = datetime.now()
