"""Faker-based synthetic data generators."""

from finance_core.generators.finance import FinanceDataGenerator, UserDataset

__all__ = ["FinanceDataGenerator", "UserDataset"]
