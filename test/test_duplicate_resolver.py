import pytest

from conftest import FailingCatalog, ScriptedPrompt
from recipe_engine.application import prompt_templates as pt
from recipe_engine.application.duplicate_resolver import DuplicateResolver
from recipe_engine.core.config import ResolutionPolicy
from recipe_engine.domain.entities import Preparation, PreparationIngredient, ResolutionMode, ResolutionOutcome

pytestmark = pytest.mark.anyio


class TestResolveIngredient:
    async def test_exact_match_is_silent(self, catalog):
        prompt = ScriptedPrompt()
        outcome = await DuplicateResolver(catalog, prompt).resolve_ingredient("Salt")
        assert outcome == ResolutionOutcome.existing("i-salt")
        assert prompt.requests == []

    async def test_similar_match_prompts_and_uses_existing(self, catalog):
        prompt = ScriptedPrompt(pt.USE_EXISTING)
        outcome = await DuplicateResolver(catalog, prompt).resolve_ingredient("Sea Salt")
        assert outcome == ResolutionOutcome.existing("i-sea-salt")
        assert [r.kind for r in prompt.requests] == ["similar_ingredient"]
        assert "Sea Salt Flakes" in prompt.requests[0].message

    async def test_similar_match_prompts_and_creates_new(self, catalog):
        prompt = ScriptedPrompt(pt.CREATE_NEW)
        outcome = await DuplicateResolver(catalog, prompt).resolve_ingredient("flo")
        assert outcome.mode is ResolutionMode.NEW
        assert outcome.id is None

    async def test_no_match_is_new_without_prompt(self, catalog):
        prompt = ScriptedPrompt()
        outcome = await DuplicateResolver(catalog, prompt).resolve_ingredient("Saffron")
        assert outcome == ResolutionOutcome.new()
        assert prompt.requests == []

    async def test_blank_name_is_new(self, catalog):
        assert await DuplicateResolver(catalog, ScriptedPrompt()).resolve_ingredient("   ") == ResolutionOutcome.new()

    async def test_exact_match_beyond_substring_limit_is_found(self, catalog):
        for i in range(3):
            catalog.add_ingredient(f"i-x{i}", f"Butter {i}")
        catalog.add_ingredient("i-butter", "butter")
        prompt = ScriptedPrompt()
        resolver = DuplicateResolver(catalog, prompt, close_match_limit=3)
        assert await resolver.resolve_ingredient("Butter") == ResolutionOutcome.existing("i-butter")
        assert prompt.requests == []

    async def test_catalog_failure_degrades_to_new(self):
        prompt = ScriptedPrompt()
        outcome = await DuplicateResolver(FailingCatalog(), prompt).resolve_ingredient("Salt")
        assert outcome == ResolutionOutcome.new()
        assert prompt.requests == []


class TestResolveDish:
    async def test_no_match_is_new(self, catalog):
        assert await DuplicateResolver(catalog, ScriptedPrompt()).resolve_dish("Moussaka") == ResolutionOutcome.new()

    async def test_dishes_are_not_fuzzy_matched(self, catalog):
        prompt = ScriptedPrompt()
        assert await DuplicateResolver(catalog, prompt).resolve_dish("Lasag") == ResolutionOutcome.new()
        assert prompt.requests == []

    async def test_replace(self, catalog):
        prompt = ScriptedPrompt(pt.REPLACE)
        outcome = await DuplicateResolver(catalog, prompt).resolve_dish("lasagne")
        assert outcome == ResolutionOutcome.overwrite("d-lasagne")
        assert prompt.requests[0].keys() == (pt.REPLACE, pt.CANCEL)

    async def test_cancel_aborts(self, catalog):
        outcome = await DuplicateResolver(catalog, ScriptedPrompt(pt.CANCEL)).resolve_dish("Lasagne")
        assert outcome.is_cancel

    async def test_cancel_policy_create(self, catalog):
        policy = ResolutionPolicy(dish_cancel="create")
        outcome = await DuplicateResolver(catalog, ScriptedPrompt(pt.CANCEL), policy).resolve_dish("Lasagne")
        assert outcome == ResolutionOutcome.new()

    async def test_catalog_failure_degrades_to_new(self):
        assert await DuplicateResolver(FailingCatalog(), ScriptedPrompt()).resolve_dish("Lasagne") == ResolutionOutcome.new()


class TestResolvePreparation:
    async def test_fingerprint_match_wins_over_name(self, catalog):
        fp = catalog.preparations["p-sauce"].fingerprint
        prompt = ScriptedPrompt()
        outcome = await DuplicateResolver(catalog, prompt).resolve_preparation("Tomato Sauce", fp, None)
        assert outcome == ResolutionOutcome.existing("p-sauce")
        assert prompt.requests == []

    async def test_same_name_same_content_is_silent(self, catalog):
        fp = catalog.preparations["p-stock"].fingerprint
        prompt = ScriptedPrompt()
        assert await DuplicateResolver(catalog, prompt).resolve_preparation("Stock", fp) == ResolutionOutcome.existing("p-stock")
        assert prompt.requests == []

    async def test_no_name_match_is_new(self, catalog):
        outcome = await DuplicateResolver(catalog, ScriptedPrompt()).resolve_preparation("Pesto", "other-fp", None)
        assert outcome == ResolutionOutcome.new()

    async def test_name_collision_replace(self, catalog):
        prompt = ScriptedPrompt(pt.REPLACE)
        outcome = await DuplicateResolver(catalog, prompt).resolve_preparation("stock", "different", "Ramen")
        assert outcome == ResolutionOutcome.overwrite("p-stock")
        assert prompt.requests[0].keys() == (pt.REPLACE, pt.RENAME, pt.CANCEL)

    async def test_name_collision_rename_uses_parent_dish(self, catalog):
        outcome = await DuplicateResolver(catalog, ScriptedPrompt(pt.RENAME)).resolve_preparation("Stock", "different", "Ramen")
        assert outcome == ResolutionOutcome.rename("Stock (Ramen)")

    async def test_name_collision_rename_without_parent(self, catalog):
        outcome = await DuplicateResolver(catalog, ScriptedPrompt(pt.RENAME)).resolve_preparation("Stock", None, None)
        assert outcome.new_name == "Stock (variant)"
        assert outcome.id is None

    async def test_cancel_falls_back_to_new(self, catalog):
        outcome = await DuplicateResolver(catalog, ScriptedPrompt(pt.CANCEL)).resolve_preparation("Stock", "different")
        assert outcome == ResolutionOutcome.new()

    async def test_cancel_policy_abort(self, catalog):
        policy = ResolutionPolicy(preparation_cancel="abort")
        outcome = await DuplicateResolver(catalog, ScriptedPrompt(pt.CANCEL), policy).resolve_preparation("Stock", "x")
        assert outcome.is_cancel

    async def test_plain_ingredient_name_is_not_a_preparation_collision(self, catalog):
        outcome = await DuplicateResolver(catalog, ScriptedPrompt()).resolve_preparation("Flour", None)
        assert outcome == ResolutionOutcome.new()

    async def test_catalog_failure_degrades_to_new(self):
        outcome = await DuplicateResolver(FailingCatalog(), ScriptedPrompt()).resolve_preparation("Stock", "fp", None)
        assert outcome == ResolutionOutcome.new()

    async def test_fingerprint_of_new_preparation_matches_catalog_entry(self, catalog):
        draft = Preparation(
            id="draft",
            name="Red Sauce",
            instructions=["simmer TOMATOES", "season to taste"],
            yield_amount=None,
            yield_unit_id=None,
            ingredients=[
                PreparationIngredient("i-salt", "Salt", 5, "u-g"),
                PreparationIngredient("i-tomato", "tomato", 800, "u-g"),
            ],
        )
        outcome = await DuplicateResolver(catalog, ScriptedPrompt()).resolve_preparation(
            draft.name, draft.compute_fingerprint(), None
        )
        assert outcome == ResolutionOutcome.existing("p-sauce")
