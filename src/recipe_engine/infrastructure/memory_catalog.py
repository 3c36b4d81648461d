# recipe_engine/infrastructure/memory_catalog.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from recipe_engine.domain.entities import IngredientMatch, Preparation, Unit
from recipe_engine.domain.repositories import CatalogStore

log = logging.getLogger("infra.memory_catalog")


def _norm(text: str) -> str:
    return (text or "").strip().lower()


@dataclass
class InMemoryCatalogStore(CatalogStore):
    """Seedable catalog for tests and local runs. Insertion order is search order."""
    ingredients: Dict[str, str] = field(default_factory=dict)  # id -> name
    preparations: Dict[str, Preparation] = field(default_factory=dict)  # id -> preparation
    dishes: Dict[str, str] = field(default_factory=dict)  # id -> name
    units: List[Unit] = field(default_factory=list)

    def add_ingredient(self, ingredient_id: str, name: str) -> None:
        self.ingredients[ingredient_id] = name

    def add_preparation(self, preparation: Preparation) -> None:
        # preparations are ingredients too (shared identity and name space)
        fp = preparation.fingerprint or preparation.compute_fingerprint()
        self.ingredients[preparation.id] = preparation.name
        self.preparations[preparation.id] = Preparation(
            id=preparation.id,
            name=preparation.name,
            instructions=list(preparation.instructions),
            yield_amount=preparation.yield_amount,
            yield_unit_id=preparation.yield_unit_id,
            ingredients=list(preparation.ingredients),
            fingerprint=fp,
        )

    def add_dish(self, dish_id: str, name: str) -> None:
        self.dishes[dish_id] = name

    async def find_ingredients_by_name_substring(self, text: str, limit: int = 10) -> List[IngredientMatch]:
        q = _norm(text)
        if not q:
            return []
        out = [
            IngredientMatch(id=i, name=n, is_preparation=i in self.preparations)
            for i, n in self.ingredients.items()
            if q in _norm(n)
        ]
        return out[:limit]

    async def find_ingredient_by_exact_name(self, text: str) -> Optional[str]:
        q = _norm(text)
        for i, n in self.ingredients.items():
            if q and _norm(n) == q:
                return i
        return None

    async def find_preparation_by_exact_name(self, text: str) -> Optional[str]:
        ingredient_id = await self.find_ingredient_by_exact_name(text)
        if ingredient_id and ingredient_id in self.preparations:
            return ingredient_id
        return None

    async def find_preparation_by_fingerprint(self, fingerprint: str) -> Optional[str]:
        if not fingerprint:
            return None
        for p in self.preparations.values():
            if p.fingerprint == fingerprint:
                return p.id
        return None

    async def find_dish_by_exact_name(self, text: str) -> Optional[str]:
        q = _norm(text)
        for i, n in self.dishes.items():
            if q and _norm(n) == q:
                return i
        return None

    async def list_units(self) -> List[Unit]:
        return list(self.units)
