"""PostgreSQL implementation of ``FinanceStore`` on psycopg 3 (async)."""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any

import psycopg
from psycopg import errors
from psycopg.rows import dict_row

from finance_core.exceptions import (
    EntityAlreadyExistsError,
    EntityNotFoundError,
    ReferentialIntegrityError,
    StoreError,
)
from finance_core.models import (
    AccountType,
    CardBrand,
    CategoryStatus,
    CategoryType,
    CreditCard,
    CreditCardTransaction,
    Debt,
    DebtPayment,
    DebtPaymentType,
    DebtStatus,
    DebtType,
    FinancialAccount,
    FinancialCategory,
    RuleCategory,
    Transaction,
    TransactionType,
    UserFinanceSettings,
)
from finance_core.sinks.serialization import serialize_value

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS user_finance_settings (
    settings_id  TEXT PRIMARY KEY,
    user_id      TEXT NOT NULL UNIQUE,
    salary       NUMERIC(15, 2) NOT NULL,
    fixed        NUMERIC(5, 2) NOT NULL,
    variable     NUMERIC(5, 2) NOT NULL,
    investments  NUMERIC(5, 2) NOT NULL,
    created_at   TIMESTAMP NOT NULL,
    updated_at   TIMESTAMP
);

CREATE TABLE IF NOT EXISTS financial_accounts (
    account_id       TEXT PRIMARY KEY,
    user_id          TEXT NOT NULL,
    name             TEXT NOT NULL,
    account_type     TEXT NOT NULL,
    initial_balance  NUMERIC(15, 2) NOT NULL,
    current_balance  NUMERIC(15, 2) NOT NULL,
    active           BOOLEAN NOT NULL DEFAULT TRUE,
    institution      TEXT,
    color            TEXT,
    icon             TEXT,
    notes            TEXT,
    created_at       TIMESTAMP NOT NULL,
    updated_at       TIMESTAMP
);

CREATE TABLE IF NOT EXISTS financial_categories (
    category_id    TEXT PRIMARY KEY,
    user_id        TEXT NOT NULL,
    name           TEXT NOT NULL,
    category_type  TEXT NOT NULL,
    rule_category  TEXT,
    active         BOOLEAN NOT NULL DEFAULT TRUE,
    status         TEXT NOT NULL DEFAULT 'published',
    sort           INTEGER NOT NULL DEFAULT 0,
    description    TEXT,
    icon           TEXT,
    color          TEXT,
    created_at     TIMESTAMP NOT NULL,
    updated_at     TIMESTAMP,
    UNIQUE (user_id, name)
);

CREATE TABLE IF NOT EXISTS transactions (
    transaction_id    TEXT PRIMARY KEY,
    user_id           TEXT NOT NULL,
    description       TEXT NOT NULL,
    amount            NUMERIC(15, 2) NOT NULL,
    transaction_type  TEXT NOT NULL,
    date              TIMESTAMP NOT NULL,
    account_id        TEXT REFERENCES financial_accounts (account_id),
    category_id       TEXT REFERENCES financial_categories (category_id),
    category_name     TEXT,
    subcategory       TEXT,
    notes             TEXT,
    created_at        TIMESTAMP NOT NULL,
    updated_at        TIMESTAMP
);
CREATE INDEX IF NOT EXISTS idx_transactions_user_date ON transactions (user_id, date);

CREATE TABLE IF NOT EXISTS credit_cards (
    card_id          TEXT PRIMARY KEY,
    user_id          TEXT NOT NULL,
    account_id       TEXT NOT NULL REFERENCES financial_accounts (account_id),
    name             TEXT NOT NULL,
    brand            TEXT NOT NULL,
    last_digits      CHAR(4) NOT NULL,
    credit_limit     NUMERIC(15, 2) NOT NULL,
    available_limit  NUMERIC(15, 2) NOT NULL,
    due_day          INTEGER NOT NULL,
    closing_day      INTEGER NOT NULL,
    active           BOOLEAN NOT NULL DEFAULT TRUE,
    bank             TEXT,
    color            TEXT,
    notes            TEXT,
    created_at       TIMESTAMP NOT NULL,
    updated_at       TIMESTAMP
);

CREATE TABLE IF NOT EXISTS credit_card_transactions (
    transaction_id       TEXT PRIMARY KEY,
    card_id              TEXT NOT NULL REFERENCES credit_cards (card_id),
    user_id              TEXT NOT NULL,
    description          TEXT NOT NULL,
    amount               NUMERIC(15, 2) NOT NULL,
    purchase_date        TIMESTAMP NOT NULL,
    installments         INTEGER NOT NULL DEFAULT 1,
    current_installment  INTEGER NOT NULL DEFAULT 1,
    category             TEXT,
    subcategory          TEXT,
    merchant             TEXT,
    notes                TEXT,
    invoice_id           TEXT,
    created_at           TIMESTAMP NOT NULL,
    updated_at           TIMESTAMP
);

CREATE TABLE IF NOT EXISTS debts (
    debt_id             TEXT PRIMARY KEY,
    user_id             TEXT NOT NULL,
    creditor            TEXT NOT NULL,
    debt_type           TEXT NOT NULL,
    original_amount     NUMERIC(15, 2) NOT NULL,
    current_amount      NUMERIC(15, 2) NOT NULL,
    due_date            TIMESTAMP NOT NULL,
    status              TEXT NOT NULL DEFAULT 'ativa',
    interest_rate       NUMERIC(7, 4),
    description         TEXT,
    total_installments  INTEGER,
    installment_amount  NUMERIC(15, 2),
    created_at          TIMESTAMP NOT NULL,
    updated_at          TIMESTAMP
);

CREATE TABLE IF NOT EXISTS debt_payments (
    payment_id    TEXT PRIMARY KEY,
    debt_id       TEXT NOT NULL REFERENCES debts (debt_id),
    user_id       TEXT NOT NULL,
    amount        NUMERIC(15, 2) NOT NULL,
    paid_at       TIMESTAMP NOT NULL,
    payment_type  TEXT NOT NULL,
    notes         TEXT,
    created_at    TIMESTAMP NOT NULL
);
"""

# Column order per table, matching the dataclass field names
TABLE_COLUMNS = {
    "user_finance_settings": [
        "settings_id", "user_id", "salary", "fixed", "variable", "investments",
        "created_at", "updated_at",
    ],
    "financial_accounts": [
        "account_id", "user_id", "name", "account_type", "initial_balance",
        "current_balance", "active", "institution", "color", "icon", "notes",
        "created_at", "updated_at",
    ],
    "financial_categories": [
        "category_id", "user_id", "name", "category_type", "rule_category",
        "active", "status", "sort", "description", "icon", "color",
        "created_at", "updated_at",
    ],
    "transactions": [
        "transaction_id", "user_id", "description", "amount", "transaction_type",
        "date", "account_id", "category_id", "category_name", "subcategory",
        "notes", "created_at", "updated_at",
    ],
    "credit_cards": [
        "card_id", "user_id", "account_id", "name", "brand", "last_digits",
        "credit_limit", "available_limit", "due_day", "closing_day", "active",
        "bank", "color", "notes", "created_at", "updated_at",
    ],
    "credit_card_transactions": [
        "transaction_id", "card_id", "user_id", "description", "amount",
        "purchase_date", "installments", "current_installment", "category",
        "subcategory", "merchant", "notes", "invoice_id", "created_at",
        "updated_at",
    ],
    "debts": [
        "debt_id", "user_id", "creditor", "debt_type", "original_amount",
        "current_amount", "due_date", "status", "interest_rate", "description",
        "total_installments", "installment_amount", "created_at", "updated_at",
    ],
    "debt_payments": [
        "payment_id", "debt_id", "user_id", "amount", "paid_at", "payment_type",
        "notes", "created_at",
    ],
}


class PostgresFinanceStore:
    """``FinanceStore`` backed by a psycopg ``AsyncConnection``.

    The connection must use ``dict_row`` so rows map onto the dataclasses.
    Every write commits immediately.
    """

    def __init__(self, conn: psycopg.AsyncConnection) -> None:
        self.conn = conn

    @classmethod
    async def connect(cls, conninfo: str) -> PostgresFinanceStore:
        """Open a new connection from a libpq connection string."""
        conn = await psycopg.AsyncConnection.connect(conninfo, row_factory=dict_row)
        logger.info("Connected to PostgreSQL")
        return cls(conn)

    async def create_schema(self) -> None:
        await self.conn.execute(SCHEMA_SQL)
        await self.conn.commit()
        logger.info("Schema ensured: %d tables", len(TABLE_COLUMNS))

    async def close(self) -> None:
        await self.conn.close()

    # Settings
    async def get_settings(self, user_id: str) -> UserFinanceSettings | None:
        row = await self._fetchone(
            "SELECT * FROM user_finance_settings WHERE user_id = %s", (user_id,)
        )
        return UserFinanceSettings(**row) if row else None

    async def save_settings(self, settings: UserFinanceSettings) -> None:
        columns = TABLE_COLUMNS["user_finance_settings"]
        updates = ", ".join(f"{c} = EXCLUDED.{c}" for c in columns if c not in ("settings_id", "user_id"))
        await self._write(
            f"INSERT INTO user_finance_settings ({', '.join(columns)}) "
            f"VALUES ({_placeholders(columns)}) "
            f"ON CONFLICT (user_id) DO UPDATE SET {updates}",
            _values(settings, columns),
        )

    # Accounts
    async def add_account(self, account: FinancialAccount) -> None:
        await self._insert("financial_accounts", account)

    async def get_account(self, account_id: str) -> FinancialAccount | None:
        row = await self._fetchone(
            "SELECT * FROM financial_accounts WHERE account_id = %s", (account_id,)
        )
        return _account(row) if row else None

    async def adjust_account_balance(self, account_id: str, delta: Decimal) -> FinancialAccount:
        row = await self._fetchone(
            "UPDATE financial_accounts "
            "SET current_balance = current_balance + %s, updated_at = %s "
            "WHERE account_id = %s RETURNING *",
            (delta, datetime.now(), account_id),
        )
        if row is None:
            await self.conn.rollback()
            raise EntityNotFoundError(f"Account {account_id} not found")
        await self.conn.commit()
        return _account(row)

    async def delete_account(self, account_id: str) -> None:
        await self._delete("financial_accounts", "account_id", account_id, "Account")

    async def count_account_transactions(self, account_id: str) -> int:
        return await self._count("transactions", "account_id", account_id)

    async def count_account_cards(self, account_id: str) -> int:
        return await self._count("credit_cards", "account_id", account_id)

    # Categories
    async def list_categories(self, user_id: str) -> list[FinancialCategory]:
        rows = await self._fetchall(
            "SELECT * FROM financial_categories WHERE user_id = %s ORDER BY sort, name",
            (user_id,),
        )
        return [_category(r) for r in rows]

    async def get_category(self, category_id: str) -> FinancialCategory | None:
        row = await self._fetchone(
            "SELECT * FROM financial_categories WHERE category_id = %s", (category_id,)
        )
        return _category(row) if row else None

    async def find_category_by_name(self, user_id: str, name: str) -> FinancialCategory | None:
        row = await self._fetchone(
            "SELECT * FROM financial_categories WHERE user_id = %s AND name = %s",
            (user_id, name),
        )
        return _category(row) if row else None

    async def add_category(self, category: FinancialCategory) -> None:
        try:
            await self._insert("financial_categories", category)
        except errors.UniqueViolation as exc:
            raise EntityAlreadyExistsError(
                f"Já existe uma categoria com o nome {category.name!r}"
            ) from exc

    async def count_categories(self, user_id: str) -> int:
        return await self._count("financial_categories", "user_id", user_id)

    async def delete_category(self, category_id: str) -> None:
        await self._delete("financial_categories", "category_id", category_id, "Category")

    async def count_category_transactions(self, category_id: str) -> int:
        # Legacy rows reference the category by name only
        row = await self._fetchone(
            "SELECT COUNT(*) AS n FROM transactions "
            "WHERE category_id = %s OR (category_id IS NULL AND (user_id, category_name) IN "
            "(SELECT user_id, name FROM financial_categories WHERE category_id = %s))",
            (category_id, category_id),
        )
        return int(row["n"]) if row else 0

    # Transactions
    async def add_transaction(self, transaction: Transaction) -> None:
        await self._insert("transactions", transaction)

    async def list_transactions(
        self,
        user_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Transaction]:
        query = "SELECT * FROM transactions WHERE user_id = %s"
        params: list[Any] = [user_id]
        if start is not None:
            query += " AND date >= %s"
            params.append(start)
        if end is not None:
            query += " AND date <= %s"
            params.append(end)
        rows = await self._fetchall(query + " ORDER BY date", tuple(params))
        return [_transaction(r) for r in rows]

    async def sum_expenses(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
        category_id: str | None = None,
        category_name: str | None = None,
    ) -> Decimal:
        query = (
            "SELECT COALESCE(SUM(amount), 0) AS total FROM transactions "
            "WHERE user_id = %s AND transaction_type = %s AND date >= %s AND date <= %s"
        )
        params: list[Any] = [user_id, TransactionType.DESPESA.value, start, end]
        if category_id or category_name:
            query += " AND (category_id = %s OR (category_id IS NULL AND category_name = %s))"
            params.extend([category_id, category_name])
        row = await self._fetchone(query, tuple(params))
        return Decimal(row["total"]) if row else Decimal("0")

    # Credit cards
    async def add_credit_card(self, card: CreditCard) -> None:
        await self._insert("credit_cards", card)

    async def get_credit_card(self, card_id: str) -> CreditCard | None:
        row = await self._fetchone("SELECT * FROM credit_cards WHERE card_id = %s", (card_id,))
        return _credit_card(row) if row else None

    async def update_credit_card(self, card: CreditCard) -> None:
        await self._update("credit_cards", "card_id", card, "Credit card")

    async def add_card_transaction(self, transaction: CreditCardTransaction) -> None:
        await self._insert("credit_card_transactions", transaction)

    # Debts
    async def add_debt(self, debt: Debt) -> None:
        await self._insert("debts", debt)

    async def get_debt(self, debt_id: str) -> Debt | None:
        row = await self._fetchone("SELECT * FROM debts WHERE debt_id = %s", (debt_id,))
        return _debt(row) if row else None

    async def update_debt(self, debt: Debt) -> None:
        await self._update("debts", "debt_id", debt, "Debt")

    async def list_debts(self, user_id: str) -> list[Debt]:
        rows = await self._fetchall(
            "SELECT * FROM debts WHERE user_id = %s ORDER BY due_date", (user_id,)
        )
        return [_debt(r) for r in rows]

    async def add_debt_payment(self, payment: DebtPayment) -> None:
        await self._insert("debt_payments", payment)

    async def list_debt_payments(self, user_id: str, debt_id: str | None = None) -> list[DebtPayment]:
        query = "SELECT * FROM debt_payments WHERE user_id = %s"
        params: tuple[Any, ...] = (user_id,)
        if debt_id is not None:
            query += " AND debt_id = %s"
            params = (user_id, debt_id)
        rows = await self._fetchall(query + " ORDER BY paid_at", params)
        return [_debt_payment(r) for r in rows]

    # Helpers
    async def _fetchone(self, query: str, params: tuple[Any, ...]) -> dict[str, Any] | None:
        try:
            cur = await self.conn.execute(query, params)
            return await cur.fetchone()
        except psycopg.Error as exc:
            await self.conn.rollback()
            raise StoreError(f"Database read failed: {exc}") from exc

    async def _fetchall(self, query: str, params: tuple[Any, ...]) -> list[dict[str, Any]]:
        try:
            cur = await self.conn.execute(query, params)
            return await cur.fetchall()
        except psycopg.Error as exc:
            await self.conn.rollback()
            raise StoreError(f"Database read failed: {exc}") from exc

    async def _count(self, table: str, column: str, value: str) -> int:
        row = await self._fetchone(
            f"SELECT COUNT(*) AS n FROM {table} WHERE {column} = %s",  # noqa: S608
            (value,),
        )
        return int(row["n"]) if row else 0

    async def _write(self, query: str, params: tuple[Any, ...]) -> Any:
        try:
            cur = await self.conn.execute(query, params)
        except errors.ForeignKeyViolation as exc:
            await self.conn.rollback()
            raise ReferentialIntegrityError(str(exc)) from exc
        except errors.UniqueViolation:
            await self.conn.rollback()
            raise
        except psycopg.Error as exc:
            await self.conn.rollback()
            raise StoreError(f"Database write failed: {exc}") from exc
        await self.conn.commit()
        return cur

    async def _insert(self, table: str, entity: Any) -> None:
        columns = TABLE_COLUMNS[table]
        await self._write(
            f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({_placeholders(columns)})",  # noqa: S608
            _values(entity, columns),
        )

    async def _update(self, table: str, key: str, entity: Any, label: str) -> None:
        columns = [c for c in TABLE_COLUMNS[table] if c != key]
        assignments = ", ".join(f"{c} = %s" for c in columns)
        cur = await self._write(
            f"UPDATE {table} SET {assignments} WHERE {key} = %s",  # noqa: S608
            _values(entity, columns) + (getattr(entity, key),),
        )
        if cur.rowcount == 0:
            raise EntityNotFoundError(f"{label} {getattr(entity, key)} not found")

    async def _delete(self, table: str, key: str, value: str, label: str) -> None:
        cur = await self._write(f"DELETE FROM {table} WHERE {key} = %s", (value,))  # noqa: S608
        if cur.rowcount == 0:
            raise EntityNotFoundError(f"{label} {value} not found")


def _placeholders(columns: list[str]) -> str:
    return ", ".join(["%s"] * len(columns))


def _values(entity: Any, columns: list[str]) -> tuple[Any, ...]:
    """Column values with enums flattened; Decimals and datetimes pass through."""
    values = []
    for column in columns:
        value = getattr(entity, column)
        if isinstance(value, (Decimal, datetime)):
            values.append(value)
        else:
            values.append(serialize_value(value))
    return tuple(values)


def _account(row: dict[str, Any]) -> FinancialAccount:
    return FinancialAccount(**{**row, "account_type": AccountType(row["account_type"])})


def _category(row: dict[str, Any]) -> FinancialCategory:
    return FinancialCategory(
        **{
            **row,
            "category_type": CategoryType(row["category_type"]),
            "rule_category": RuleCategory(row["rule_category"]) if row["rule_category"] else None,
            "status": CategoryStatus(row["status"]),
        }
    )


def _transaction(row: dict[str, Any]) -> Transaction:
    return Transaction(**{**row, "transaction_type": TransactionType(row["transaction_type"])})


def _credit_card(row: dict[str, Any]) -> CreditCard:
    return CreditCard(**{**row, "brand": CardBrand(row["brand"])})


def _debt(row: dict[str, Any]) -> Debt:
    return Debt(
        **{
            **row,
            "debt_type": DebtType(row["debt_type"]),
            "status": DebtStatus(row["status"]),
        }
    )


def _debt_payment(row: dict[str, Any]) -> DebtPayment:
    return DebtPayment(**{**row, "payment_type": DebtPaymentType(row["payment_type"])})
