# recipe_engine/infrastructure/mongo_catalog.py
from __future__ import annotations
from typing import Any, Dict, List, Optional
import logging
import re

import anyio
from pymongo.collection import Collection

from recipe_engine.domain.entities import IngredientMatch, Unit
from recipe_engine.domain.repositories import CatalogStore

log = logging.getLogger("infra.mongo_catalog")


def _as_str_id(v: Any) -> str:
    # ObjectId and plain string ids alike
    return str(v)


def _exact(text: str) -> Dict[str, Any]:
    return {"$regex": f"^{re.escape(text.strip())}$", "$options": "i"}


def _contains(text: str) -> Dict[str, Any]:
    return {"$regex": re.escape(text.strip()), "$options": "i"}


class MongoCatalogStore(CatalogStore):
    """
    Catalog backed by MongoDB collections:
      ingredients  {ingredient_id, name}
      preparations {preparation_id, fingerprint, ...}  (preparation_id == ingredient_id)
      dishes       {dish_id, dish_name}
      units        {unit_id, unit_name, abbreviation, measurement_type}
    pymongo is blocking, so every query runs in a worker thread.
    Lookups are never cached; each call sees the current catalog.
    """

    def __init__(
        self,
        ingredients: Collection,
        preparations: Collection,
        dishes: Collection,
        units: Collection,
    ) -> None:
        self._ingredients = ingredients
        self._preparations = preparations
        self._dishes = dishes
        self._units = units

    # ----------------------------
    # Ingredients
    # ----------------------------
    def _find_close(self, text: str, limit: int) -> List[IngredientMatch]:
        q = (text or "").strip()
        if not q:
            return []

        docs = list(self._ingredients.find({"name": _contains(q)}).limit(limit))
        if not docs:
            return []

        ids = [_as_str_id(d.get("ingredient_id") or d.get("_id")) for d in docs]
        prep_ids = {
            _as_str_id(p.get("preparation_id"))
            for p in self._preparations.find({"preparation_id": {"$in": ids}}, {"preparation_id": 1})
        }
        return [
            IngredientMatch(id=i, name=str(d.get("name") or "").strip(), is_preparation=i in prep_ids)
            for i, d in zip(ids, docs)
        ]

    def _find_ingredient_id(self, text: str) -> Optional[str]:
        q = (text or "").strip()
        if not q:
            return None
        doc = self._ingredients.find_one({"name": _exact(q)})
        if not doc:
            return None
        return _as_str_id(doc.get("ingredient_id") or doc.get("_id"))

    async def find_ingredients_by_name_substring(self, text: str, limit: int = 10) -> List[IngredientMatch]:
        return await anyio.to_thread.run_sync(self._find_close, text, limit)

    async def find_ingredient_by_exact_name(self, text: str) -> Optional[str]:
        return await anyio.to_thread.run_sync(self._find_ingredient_id, text)

    # ----------------------------
    # Preparations
    # ----------------------------
    def _find_preparation_by_name(self, text: str) -> Optional[str]:
        ingredient_id = self._find_ingredient_id(text)
        if not ingredient_id:
            return None
        prep = self._preparations.find_one({"preparation_id": ingredient_id}, {"preparation_id": 1})
        return ingredient_id if prep else None

    def _find_preparation_by_fingerprint(self, fingerprint: str) -> Optional[str]:
        if not fingerprint:
            return None
        doc = self._preparations.find_one({"fingerprint": fingerprint}, {"preparation_id": 1})
        if not doc:
            return None
        return _as_str_id(doc.get("preparation_id") or doc.get("_id"))

    async def find_preparation_by_exact_name(self, text: str) -> Optional[str]:
        return await anyio.to_thread.run_sync(self._find_preparation_by_name, text)

    async def find_preparation_by_fingerprint(self, fingerprint: str) -> Optional[str]:
        return await anyio.to_thread.run_sync(self._find_preparation_by_fingerprint, fingerprint)

    # ----------------------------
    # Dishes
    # ----------------------------
    def _find_dish(self, text: str) -> Optional[str]:
        q = (text or "").strip()
        if not q:
            return None
        doc = self._dishes.find_one({"dish_name": _exact(q)}, {"dish_id": 1})
        if not doc:
            return None
        return _as_str_id(doc.get("dish_id") or doc.get("_id"))

    async def find_dish_by_exact_name(self, text: str) -> Optional[str]:
        return await anyio.to_thread.run_sync(self._find_dish, text)

    # ----------------------------
    # Units
    # ----------------------------
    def _parse_unit(self, doc: Dict[str, Any]) -> Unit:
        try:
            unit = Unit.from_doc(doc)
        except Exception as e:
            log.exception("Invalid unit document: %s", doc)
            raise ValueError(f"Invalid unit document: {e}") from e
        if not unit.id:
            raise ValueError(f"Unit document without id: {doc}")
        return unit

    def _list_units(self) -> List[Unit]:
        units = [self._parse_unit(doc) for doc in self._units.find({})]
        if not units:
            log.warning("MongoCatalogStore: units collection is empty")
        return units

    async def list_units(self) -> List[Unit]:
        return await anyio.to_thread.run_sync(self._list_units)
