"""Base generator class for synthetic finance data."""

from __future__ import annotations

import random
from abc import ABC

from faker import Faker


class BaseGenerator(ABC):
    """Base class for data generators.

    Provides common initialization: Faker instance creation and
    seed-based reproducibility.

    Parameters
    ----------
    seed : int | None
        Random seed for reproducibility.
    locale : str
        Faker locale (default ``pt_BR``).
    """

    def __init__(
        self,
        seed: int | None = None,
        locale: str = "pt_BR",
    ) -> None:
        self.fake = Faker(locale)
        if seed is not None:
            self.fake.seed_instance(seed)
            random.seed(seed)

    def new_id(self) -> str:
        return self.fake.uuid4().replace("-", "")
