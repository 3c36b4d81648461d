from __future__ import annotations

from typing import List

import pytest

from recipe_engine.application.prompts import ChoiceRequest
from recipe_engine.domain.entities import MeasureKind, Preparation, PreparationIngredient, Unit
from recipe_engine.infrastructure.memory_catalog import InMemoryCatalogStore

UNITS = [
    Unit(id="u-g", name="gram", abbreviation="g", measure_kind=MeasureKind.WEIGHT),
    Unit(id="u-kg", name="kilogram", abbreviation="kg", measure_kind=MeasureKind.WEIGHT),
    Unit(id="u-ml", name="millilitre", abbreviation="ml", measure_kind=MeasureKind.VOLUME),
    Unit(id="u-l", name="litre", abbreviation="l", measure_kind=MeasureKind.VOLUME),
    Unit(id="u-tbsp", name="tablespoon", abbreviation="tbsp", measure_kind=MeasureKind.VOLUME),
    Unit(id="u-x", name="count", abbreviation="x", measure_kind=MeasureKind.COUNT),
    Unit(id="u-prep", name="Preparation", abbreviation="prep", measure_kind=None),
]


class ScriptedPrompt:
    """Answers prompts from a script and records every request it was shown."""

    def __init__(self, *answers: str) -> None:
        self.answers = list(answers)
        self.requests: List[ChoiceRequest] = []

    async def __call__(self, request: ChoiceRequest) -> str:
        self.requests.append(request)
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {request.kind}")
        return request.validate(self.answers.pop(0))


class FailingCatalog(InMemoryCatalogStore):
    async def find_ingredients_by_name_substring(self, text, limit=10):
        raise ConnectionError("catalog down")

    async def find_ingredient_by_exact_name(self, text):
        raise ConnectionError("catalog down")

    async def find_preparation_by_exact_name(self, text):
        raise ConnectionError("catalog down")

    async def find_preparation_by_fingerprint(self, fingerprint):
        raise ConnectionError("catalog down")

    async def find_dish_by_exact_name(self, text):
        raise ConnectionError("catalog down")


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def units() -> List[Unit]:
    return list(UNITS)


@pytest.fixture
def catalog() -> InMemoryCatalogStore:
    store = InMemoryCatalogStore(units=list(UNITS))
    store.add_ingredient("i-salt", "salt")
    store.add_ingredient("i-sea-salt", "Sea Salt Flakes")
    store.add_ingredient("i-flour", "Flour")
    store.add_ingredient("i-tomato", "Tomato")
    store.add_preparation(
        Preparation(
            id="p-sauce",
            name="Marinara",
            instructions=["Simmer tomatoes.", "Season to taste."],
            yield_amount=1.0,
            yield_unit_id="u-l",
            ingredients=[
                PreparationIngredient("i-tomato", "Tomato", 800, "u-g"),
                PreparationIngredient("i-salt", "salt", 5, "u-g"),
            ],
        )
    )
    store.add_preparation(
        Preparation(
            id="p-stock",
            name="Stock",
            instructions=["Boil bones for hours."],
            yield_amount=2.0,
            yield_unit_id="u-l",
            ingredients=[PreparationIngredient("i-salt", "salt", 10, "u-g")],
        )
    )
    store.add_dish("d-lasagne", "Lasagne")
    return store
