"""Tests for the PostgreSQL store against a mocked psycopg connection."""

from datetime import datetime
from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import psycopg
import pytest
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
    FinancialAccount,
    FinancialCategory,
    RuleCategory,
    UserFinanceSettings,
)
from finance_core.store import FinanceStore
from finance_core.store.postgres import SCHEMA_SQL, TABLE_COLUMNS, PostgresFinanceStore, _values


def make_conn(fetchone: Any = None, fetchall: Any = None, rowcount: int = 1) -> MagicMock:
    """Mock AsyncConnection whose execute() returns a cursor with canned rows."""
    cursor = MagicMock()
    cursor.fetchone = AsyncMock(return_value=fetchone)
    cursor.fetchall = AsyncMock(return_value=fetchall or [])
    cursor.rowcount = rowcount

    conn = MagicMock()
    conn.execute = AsyncMock(return_value=cursor)
    conn.commit = AsyncMock()
    conn.rollback = AsyncMock()
    conn.close = AsyncMock()
    return conn


def account_row(**overrides: Any) -> dict[str, Any]:
    row = {
        "account_id": "acct-001",
        "user_id": "user-1",
        "name": "Conta",
        "account_type": "conta_corrente",
        "initial_balance": Decimal("1000.00"),
        "current_balance": Decimal("1000.00"),
        "active": True,
        "institution": None,
        "color": None,
        "icon": None,
        "notes": None,
        "created_at": datetime(2024, 1, 1),
        "updated_at": None,
    }
    row.update(overrides)
    return row


def category_row(**overrides: Any) -> dict[str, Any]:
    row = {
        "category_id": "cat-1",
        "user_id": "user-1",
        "name": "Lazer",
        "category_type": "despesa",
        "rule_category": "desejos",
        "active": True,
        "status": "published",
        "sort": 0,
        "description": None,
        "icon": None,
        "color": None,
        "created_at": datetime(2024, 1, 1),
        "updated_at": None,
    }
    row.update(overrides)
    return row


class TestSchema:
    """Tests for schema and column metadata."""

    def test_columns_match_schema(self) -> None:
        for table, columns in TABLE_COLUMNS.items():
            assert f"CREATE TABLE IF NOT EXISTS {table} (" in SCHEMA_SQL
            for column in columns:
                assert column in SCHEMA_SQL

    def test_satisfies_protocol(self) -> None:
        assert isinstance(PostgresFinanceStore(make_conn()), FinanceStore)

    @pytest.mark.asyncio
    async def test_create_schema(self) -> None:
        conn = make_conn()

        await PostgresFinanceStore(conn).create_schema()

        conn.execute.assert_awaited_once_with(SCHEMA_SQL)
        conn.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_connect_uses_dict_rows(self) -> None:
        conn = make_conn()
        with patch.object(psycopg.AsyncConnection, "connect", new=AsyncMock(return_value=conn)) as connect:
            store = await PostgresFinanceStore.connect("postgresql://localhost/finance")

        connect.assert_awaited_once_with("postgresql://localhost/finance", row_factory=dict_row)
        assert store.conn is conn

    @pytest.mark.asyncio
    async def test_close(self) -> None:
        conn = make_conn()

        await PostgresFinanceStore(conn).close()

        conn.close.assert_awaited_once()


class TestReads:
    """Tests for row mapping on reads."""

    @pytest.mark.asyncio
    async def test_get_settings(self) -> None:
        row = {
            "settings_id": "s",
            "user_id": "user-1",
            "salary": Decimal("5000.00"),
            "fixed": Decimal("50.00"),
            "variable": Decimal("30.00"),
            "investments": Decimal("20.00"),
            "created_at": datetime(2024, 1, 1),
            "updated_at": None,
        }
        store = PostgresFinanceStore(make_conn(fetchone=row))

        settings = await store.get_settings("user-1")

        assert isinstance(settings, UserFinanceSettings)
        assert settings.bucket_budget(RuleCategory.NECESSIDADES) == Decimal("2500")

    @pytest.mark.asyncio
    async def test_get_missing(self) -> None:
        store = PostgresFinanceStore(make_conn(fetchone=None))

        assert await store.get_settings("user-1") is None
        assert await store.get_account("acct") is None
        assert await store.get_category("cat") is None

    @pytest.mark.asyncio
    async def test_get_account_maps_enum(self) -> None:
        conn = make_conn(fetchone=account_row())

        account = await PostgresFinanceStore(conn).get_account("acct-001")

        assert account.account_type is AccountType.CONTA_CORRENTE
        assert conn.execute.await_args.args[1] == ("acct-001",)

    @pytest.mark.asyncio
    async def test_list_categories_maps_enums(self) -> None:
        conn = make_conn(fetchall=[category_row(), category_row(category_id="cat-2", name="Salário",
                                                                category_type="receita", rule_category=None)])

        categories = await PostgresFinanceStore(conn).list_categories("user-1")

        assert categories[0].rule_category is RuleCategory.DESEJOS
        assert categories[0].status is CategoryStatus.PUBLISHED
        assert categories[1].rule_category is None
        assert categories[1].category_type is CategoryType.RECEITA
        assert "ORDER BY sort, name" in conn.execute.await_args.args[0]

    @pytest.mark.asyncio
    async def test_list_transactions_period_filter(self) -> None:
        conn = make_conn(fetchall=[])
        start, end = datetime(2024, 6, 1), datetime(2024, 6, 30)

        await PostgresFinanceStore(conn).list_transactions("user-1", start, end)

        query, params = conn.execute.await_args.args
        assert "date >= %s" in query and "date <= %s" in query
        assert params == ("user-1", start, end)

    @pytest.mark.asyncio
    async def test_sum_expenses_with_category(self) -> None:
        conn = make_conn(fetchone={"total": Decimal("320.50")})
        start, end = datetime(2024, 6, 1), datetime(2024, 6, 30)

        total = await PostgresFinanceStore(conn).sum_expenses(
            "user-1", start, end, category_id="cat-1", category_name="Lazer"
        )

        query, params = conn.execute.await_args.args
        assert total == Decimal("320.50")
        assert "category_id IS NULL AND category_name = %s" in query
        assert params == ("user-1", "despesa", start, end, "cat-1", "Lazer")

    @pytest.mark.asyncio
    async def test_count(self) -> None:
        store = PostgresFinanceStore(make_conn(fetchone={"n": 3}))

        assert await store.count_categories("user-1") == 3

    @pytest.mark.asyncio
    async def test_count_category_transactions_includes_legacy_names(self) -> None:
        """Name-only rows of the category owner count alongside id-linked rows."""
        conn = make_conn(fetchone={"n": 2})

        count = await PostgresFinanceStore(conn).count_category_transactions("cat-1")

        query, params = conn.execute.await_args.args
        assert count == 2
        assert "category_id IS NULL AND (user_id, category_name) IN" in query
        assert params == ("cat-1", "cat-1")

    @pytest.mark.asyncio
    async def test_read_failure_rolls_back(self) -> None:
        """A failed SELECT leaves no aborted transaction behind."""
        conn = make_conn()
        conn.execute.side_effect = psycopg.OperationalError("connection lost")
        store = PostgresFinanceStore(conn)

        with pytest.raises(StoreError, match="connection lost"):
            await store.get_account("acct-001")
        with pytest.raises(StoreError):
            await store.list_categories("user-1")

        assert conn.rollback.await_count == 2
        conn.commit.assert_not_awaited()


class TestWrites:
    """Tests for inserts, updates and error mapping."""

    @pytest.mark.asyncio
    async def test_add_account_commits(self) -> None:
        conn = make_conn()
        account = FinancialAccount(
            "acct-001", "user-1", "Conta", AccountType.CARTEIRA, Decimal("10"), Decimal("10")
        )

        await PostgresFinanceStore(conn).add_account(account)

        query, params = conn.execute.await_args.args
        assert query.startswith("INSERT INTO financial_accounts")
        assert params[3] == "carteira"
        assert params[4] == Decimal("10")
        conn.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_save_settings_upserts(self) -> None:
        conn = make_conn()
        settings = UserFinanceSettings.create("user-1", 5000, 50, 30, 20)

        await PostgresFinanceStore(conn).save_settings(settings)

        query = conn.execute.await_args.args[0]
        assert "ON CONFLICT (user_id) DO UPDATE" in query
        assert "salary = EXCLUDED.salary" in query

    @pytest.mark.asyncio
    async def test_adjust_balance(self) -> None:
        conn = make_conn(fetchone=account_row(current_balance=Decimal("1300.00")))

        account = await PostgresFinanceStore(conn).adjust_account_balance("acct-001", Decimal("300"))

        assert account.current_balance == Decimal("1300.00")
        assert "RETURNING *" in conn.execute.await_args.args[0]
        conn.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_adjust_balance_missing(self) -> None:
        conn = make_conn(fetchone=None)

        with pytest.raises(EntityNotFoundError):
            await PostgresFinanceStore(conn).adjust_account_balance("missing", Decimal("1"))

        conn.rollback.assert_awaited_once()
        conn.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_adjust_balance_database_error(self) -> None:
        conn = make_conn()
        conn.execute.side_effect = errors.SerializationFailure("could not serialize access")

        with pytest.raises(StoreError, match="serialize"):
            await PostgresFinanceStore(conn).adjust_account_balance("acct-001", Decimal("1"))

        conn.rollback.assert_awaited_once()
        conn.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_duplicate_category(self) -> None:
        conn = make_conn()
        conn.execute.side_effect = errors.UniqueViolation("duplicate key")
        category = FinancialCategory("cat-1", "user-1", "Lazer", CategoryType.DESPESA)

        with pytest.raises(EntityAlreadyExistsError, match="Lazer"):
            await PostgresFinanceStore(conn).add_category(category)

        conn.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_foreign_key_violation(self) -> None:
        conn = make_conn()
        conn.execute.side_effect = errors.ForeignKeyViolation("fk")
        account = FinancialAccount(
            "acct-001", "user-1", "Conta", AccountType.CARTEIRA, Decimal("10"), Decimal("10")
        )

        with pytest.raises(ReferentialIntegrityError):
            await PostgresFinanceStore(conn).add_account(account)

        conn.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_other_database_error(self) -> None:
        conn = make_conn()
        conn.execute.side_effect = psycopg.OperationalError("connection lost")

        with pytest.raises(StoreError, match="connection lost"):
            await PostgresFinanceStore(conn).delete_category("cat-1")

        conn.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delete_missing(self) -> None:
        conn = make_conn(rowcount=0)

        with pytest.raises(EntityNotFoundError, match="Account"):
            await PostgresFinanceStore(conn).delete_account("missing")

    @pytest.mark.asyncio
    async def test_update_uses_key_last(self) -> None:
        conn = make_conn()
        store = PostgresFinanceStore(conn)
        card = CreditCard(
            "card-1", "user-1", "acct-001", "Cartão", CardBrand.ELO, "1234",
            Decimal("1000"), Decimal("900"), 10, 3,
        )

        await store.update_credit_card(card)

        query, params = conn.execute.await_args.args
        assert query.startswith("UPDATE credit_cards SET")
        assert query.endswith("WHERE card_id = %s")
        assert params[-1] == "card-1"
        assert "elo" in params


class TestValues:
    """Tests for parameter flattening."""

    def test_values_flatten_enums_keep_decimals(self) -> None:
        account = FinancialAccount(
            "a", "u", "Conta", AccountType.CONTA_POUPANCA, Decimal("1.50"), Decimal("2.50"),
            created_at=datetime(2024, 1, 1),
        )

        values = _values(account, ["account_type", "initial_balance", "created_at", "updated_at"])

        assert values == ("conta_poupanca", Decimal("1.50"), datetime(2024, 1, 1), None)
