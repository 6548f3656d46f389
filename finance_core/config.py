"""Configuration management for finance-core."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

from finance_core.exceptions import ConfigurationError

ERROR_POLICIES = ("continue", "abort")


@dataclass
class PostgresConfig:
    """PostgreSQL connection configuration."""

    host: str = "localhost"
    port: int = 5432
    database: str = "finance"
    user: str = "postgres"
    password: str = "postgres"

    @property
    def connection_string(self) -> str:
        """Get connection string."""
        return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"


@dataclass
class KafkaConfig:
    """Kafka producer configuration for domain-event publishing."""

    bootstrap_servers: str = "localhost:9092"
    topic_prefix: str = "finance.events"
    acks: str = "all"
    linger_ms: int = 5
    compression: str = "snappy"
    retries: int = 3
    enabled: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to confluent-kafka config dict."""
        return {
            "bootstrap.servers": self.bootstrap_servers,
            "acks": self.acks,
            "linger.ms": self.linger_ms,
            "compression.type": self.compression,
            "retries": self.retries,
        }


@dataclass
class BudgetConfig:
    """Thresholds (in percent of a bucket budget) for compliance messages.

    ``warning_threshold`` < ``exceeded_threshold`` < ``hard_limit`` must hold.
    """

    warning_threshold: Decimal = Decimal("80")
    exceeded_threshold: Decimal = Decimal("100")
    hard_limit: Decimal = Decimal("110")

    def __post_init__(self) -> None:
        if not (self.warning_threshold < self.exceeded_threshold < self.hard_limit):
            raise ConfigurationError(
                "Budget thresholds must satisfy warning < exceeded < hard_limit, got "
                f"{self.warning_threshold}/{self.exceeded_threshold}/{self.hard_limit}"
            )


@dataclass
class DispatchConfig:
    """Event bus behaviour."""

    error_policy: str = "continue"

    def __post_init__(self) -> None:
        if self.error_policy not in ERROR_POLICIES:
            raise ConfigurationError(
                f"Unknown dispatch error policy {self.error_policy!r}; expected one of {ERROR_POLICIES}"
            )


@dataclass
class FinanceConfig:
    """Main configuration for finance-core."""

    postgres: PostgresConfig = field(default_factory=PostgresConfig)
    kafka: KafkaConfig = field(default_factory=KafkaConfig)
    budget: BudgetConfig = field(default_factory=BudgetConfig)
    dispatch: DispatchConfig = field(default_factory=DispatchConfig)
    seed: int | None = None
    log_level: str = "INFO"
    log_format: str = "standard"

    @classmethod
    def from_env(cls) -> FinanceConfig:
        """Create config from environment variables."""
        postgres = PostgresConfig(
            host=os.getenv("POSTGRES_HOST", "localhost"),
            port=_int_env("POSTGRES_PORT", 5432),
            database=os.getenv("POSTGRES_DB", "finance"),
            user=os.getenv("POSTGRES_USER", "postgres"),
            password=os.getenv("POSTGRES_PASSWORD", "postgres"),
        )

        kafka = KafkaConfig(
            bootstrap_servers=os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092"),
            topic_prefix=os.getenv("KAFKA_TOPIC_PREFIX", "finance.events"),
            acks=os.getenv("KAFKA_ACKS", "all"),
            enabled=os.getenv("KAFKA_ENABLED", "false").lower() == "true",
        )

        budget = BudgetConfig(
            warning_threshold=_decimal_env("BUDGET_WARNING_THRESHOLD", "80"),
            exceeded_threshold=_decimal_env("BUDGET_EXCEEDED_THRESHOLD", "100"),
            hard_limit=_decimal_env("BUDGET_HARD_LIMIT", "110"),
        )

        dispatch = DispatchConfig(
            error_policy=os.getenv("DISPATCH_ERROR_POLICY", "continue").lower(),
        )

        seed = os.getenv("SEED")

        return cls(
            postgres=postgres,
            kafka=kafka,
            budget=budget,
            dispatch=dispatch,
            seed=_int_env("SEED", 0) if seed else None,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
        )


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


def _decimal_env(name: str, default: str) -> Decimal:
    raw = os.getenv(name) or default
    try:
        return Decimal(raw)
    except InvalidOperation as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc
