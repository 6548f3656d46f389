"""Enumeration types for personal-finance entities."""

from enum import Enum


class TransactionType(str, Enum):
    RECEITA = "receita"
    DESPESA = "despesa"
    TRANSFERENCIA = "transferencia"


class CategoryType(str, Enum):
    RECEITA = "receita"
    DESPESA = "despesa"


class RuleCategory(str, Enum):
    """Budget bucket of the 50/30/20 method."""

    NECESSIDADES = "necessidades"  # needs
    DESEJOS = "desejos"  # wants
    FUTURO = "futuro"  # savings / investments


class CategoryStatus(str, Enum):
    PUBLISHED = "published"
    DRAFT = "draft"
    ARCHIVED = "archived"


class AccountType(str, Enum):
    CONTA_CORRENTE = "conta_corrente"
    CONTA_POUPANCA = "conta_poupanca"
    CARTEIRA = "carteira"
    INVESTIMENTO = "investimento"
    OUTRAS = "outras"


class CardBrand(str, Enum):
    VISA = "visa"
    MASTERCARD = "mastercard"
    ELO = "elo"
    AMERICAN_EXPRESS = "american_express"
    DINERS = "diners"
    HIPERCARD = "hipercard"
    OUTROS = "outros"


class DebtType(str, Enum):
    CARTAO_CREDITO = "cartao_credito"
    EMPRESTIMO_PESSOAL = "emprestimo_pessoal"
    FINANCIAMENTO = "financiamento"
    CHEQUE_ESPECIAL = "cheque_especial"
    OUTROS = "outros"


class DebtStatus(str, Enum):
    ATIVA = "ativa"
    QUITADA = "quitada"
    EM_NEGOCIACAO = "em_negociacao"
    VENCIDA = "vencida"


class DebtPaymentType(str, Enum):
    PAGAMENTO_PARCIAL = "pagamento_parcial"
    QUITACAO_TOTAL = "quitacao_total"


class BudgetStatus(str, Enum):
    SAFE = "safe"
    WARNING = "warning"
    DANGER = "danger"
