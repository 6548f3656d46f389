#!/usr/bin/env python3
"""Simulate one month of a user's finances and print the budget report.

The script configures a synthetic user's 50/30/20 budget, lets the event
handlers seed the default categories, replays generated transactions
through ``CreateTransaction`` and prints spend versus budget per bucket.

Storage is in-memory unless ``--postgres-url`` is given; events are
forwarded to Kafka with ``--kafka``.
"""

import argparse
import asyncio
import logging
import random
import sys
from datetime import datetime
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from finance_core.config import FinanceConfig
from finance_core.events import EventBus, initialize_domain_event_handlers
from finance_core.exceptions import BusinessRuleError
from finance_core.generators import FinanceDataGenerator
from finance_core.logging import setup_logging
from finance_core.models import AccountType, RuleCategory
from finance_core.services.budget import calculate_budget_usage_percentage, get_budget_status, month_period
from finance_core.sinks.kafka import KafkaEventPublisher
from finance_core.store import InMemoryFinanceStore
from finance_core.store.postgres import PostgresFinanceStore
from finance_core.use_cases import ConfigureBudget, CreateTransaction, GetUserBudget

logger = logging.getLogger(__name__)


async def simulate(args: argparse.Namespace, config: FinanceConfig) -> int:
    """Run the simulation; returns the process exit code."""
    if args.postgres_url:
        store = await PostgresFinanceStore.connect(args.postgres_url)
        await store.create_schema()
    else:
        store = InMemoryFinanceStore()

    publisher = KafkaEventPublisher(config.kafka) if args.kafka else None
    bus = initialize_domain_event_handlers(store, EventBus(config.dispatch.error_policy), publisher)

    try:
        generator = FinanceDataGenerator(seed=args.seed)
        settings = generator.generate_settings()
        user_id = settings.user_id

        await ConfigureBudget(store, bus).execute(
            user_id, settings.salary, settings.fixed, settings.variable, settings.investments
        )

        account = generator.generate_account(user_id, AccountType.CONTA_CORRENTE)
        await store.add_account(account)

        now = datetime.now()
        start, _ = month_period(now)
        categories = await store.list_categories(user_id)
        expense_categories = [c for c in categories if c.rule_category is not None]
        salary_category = next(c for c in categories if c.name == "Salário")

        create = CreateTransaction(store, bus, config.budget)
        salary_tx = generator.generate_transaction(account, salary_category, start, now, amount=settings.salary)
        await create.execute(
            user_id,
            salary_tx.description,
            salary_tx.amount,
            salary_tx.transaction_type,
            salary_tx.date,
            account_id=account.account_id,
            category_id=salary_category.category_id,
        )

        rejected = 0
        for _ in range(args.transactions):
            category = random.choice(expense_categories)
            tx = generator.generate_transaction(account, category, start, now)
            try:
                outcome = await create.execute(
                    user_id,
                    tx.description,
                    tx.amount,
                    tx.transaction_type,
                    tx.date,
                    account_id=account.account_id,
                    category_id=category.category_id,
                    now=now,
                )
            except BusinessRuleError as exc:
                rejected += 1
                logger.info("Rejected %s (%s): %s", tx.description, tx.amount, exc)
                continue
            for failure in outcome.dispatch.failures:
                logger.warning("Handler %s failed: %s", failure.handler, failure.error)
            if outcome.compliance is not None and outcome.compliance.percentage > config.budget.warning_threshold:
                logger.info("%s: %s", tx.description, outcome.compliance.message)

        report = await GetUserBudget(store).execute(user_id, now=now)

        print("=" * 60)
        print(f"User {user_id}  salary R$ {settings.salary:.2f}")
        print(f"Period {report.start:%Y-%m-%d} .. {report.end:%Y-%m-%d}")
        print("-" * 60)
        for rule in RuleCategory:
            usage = report.budget.bucket(rule)
            used = calculate_budget_usage_percentage(usage.spent, usage.budget)
            print(
                f"{rule.value:<13} {usage.percentage:>5}%  budget R$ {usage.budget:>10.2f}  "
                f"spent R$ {usage.spent:>10.2f}  remaining R$ {usage.remaining:>10.2f}  "
                f"[{get_budget_status(used).value}]"
            )
        print("-" * 60)
        print(f"Rejected transactions: {rejected}")
        print(f"Account balance: R$ {(await store.get_account(account.account_id)).current_balance:.2f}")
        print("=" * 60)
    finally:
        if publisher is not None:
            publisher.close()
        if isinstance(store, PostgresFinanceStore):
            await store.close()
    return 0


def main() -> None:
    """Main entry point."""
    config = FinanceConfig.from_env()

    parser = argparse.ArgumentParser(description="Simulate a month of personal finances")
    parser.add_argument(
        "--seed",
        type=int,
        default=config.seed if config.seed is not None else 42,
        help="Random seed for reproducibility (default: 42)",
    )
    parser.add_argument(
        "--transactions",
        type=int,
        default=40,
        help="Number of expense transactions to attempt (default: 40)",
    )
    parser.add_argument(
        "--postgres-url",
        type=str,
        default=None,
        help="PostgreSQL connection string (default: in-memory store)",
    )
    parser.add_argument(
        "--kafka",
        action="store_true",
        default=config.kafka.enabled,
        help="Publish domain events to Kafka",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=config.log_level,
        help="Log level (default: INFO)",
    )
    parser.add_argument(
        "--log-format",
        type=str,
        choices=["standard", "json"],
        default=config.log_format,
        help="Log format (default: standard)",
    )
    args = parser.parse_args()

    setup_logging(args.log_level, args.log_format)
    sys.exit(asyncio.run(simulate(args, config)))


if __name__ == "__main__":
    main()
