# recipe_engine/domain/repositories.py
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List

from recipe_engine.domain.entities import IngredientMatch, Unit


class CatalogStore(ABC):
    """
    Read side of the kitchen catalog.
    Every lookup is case-insensitive. Writes are the caller's business once
    resolution has finished; nothing in the engine mutates the catalog.
    """

    @abstractmethod
    async def find_ingredients_by_name_substring(self, text: str, limit: int = 10) -> List[IngredientMatch]:
        ...

    @abstractmethod
    async def find_ingredient_by_exact_name(self, text: str) -> str | None:
        ...

    @abstractmethod
    async def find_preparation_by_exact_name(self, text: str) -> str | None:
        """Preparations share the ingredient name space; returns the preparation id."""

    @abstractmethod
    async def find_preparation_by_fingerprint(self, fingerprint: str) -> str | None:
        ...

    @abstractmethod
    async def find_dish_by_exact_name(self, text: str) -> str | None:
        ...

    @abstractmethod
    async def list_units(self) -> List[Unit]:
        ...
