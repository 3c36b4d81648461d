import pytest

from conftest import ScriptedPrompt
from recipe_engine.application import prompt_templates as pt
from recipe_engine.application.duplicate_resolver import DuplicateResolver
from recipe_engine.application.usecases import ResolvePreparationSave, ResolveRecipeSave
from recipe_engine.core.config import ResolutionPolicy
from recipe_engine.domain.entities import LeafComponent, PreparationComponent, ResolutionMode

pytestmark = pytest.mark.anyio


def _leaf(name, ingredient_id=None, amount="1", unit_id="u-g"):
    return LeafComponent(key=f"k-{name}", name=name, ingredient_id=ingredient_id, amount=amount, unit_id=unit_id)


def _stock(name="Stock", amount="10"):
    return PreparationComponent(
        key="k-stock",
        name=name,
        ingredient_id=None,
        amount="1",
        unit_id="u-prep",
        sub_components=[_leaf("salt", "i-salt", amount)],
        instructions=["Boil bones for hours."],
    )


async def test_new_dish_resolves_components_in_order(catalog):
    prompt = ScriptedPrompt()
    plan = await ResolveRecipeSave(DuplicateResolver(catalog, prompt))(
        "Ramen", [_leaf("Salt"), _leaf("Saffron"), _stock()]
    )
    assert not plan.cancelled
    assert plan.outcome.mode is ResolutionMode.NEW
    modes = [(e.component.name, e.outcome.mode) for e in plan.entries]
    assert modes == [("Salt", ResolutionMode.EXISTING), ("Saffron", ResolutionMode.NEW), ("Stock", ResolutionMode.EXISTING)]
    assert plan.entries[0].component.ingredient_id == "i-salt"
    assert plan.entries[2].component.ingredient_id == "p-stock"
    assert plan.entries[2].fingerprint is not None
    assert prompt.requests == []


async def test_already_identified_leaf_is_not_re_resolved(catalog):
    prompt = ScriptedPrompt()
    plan = await ResolveRecipeSave(DuplicateResolver(catalog, prompt))("Ramen", [_leaf("sea salt", "i-sea-salt")])
    assert plan.entries[0].outcome.id == "i-sea-salt"
    assert prompt.requests == []


async def test_dish_cancel_short_circuits_everything(catalog):
    prompt = ScriptedPrompt(pt.CANCEL)
    plan = await ResolveRecipeSave(DuplicateResolver(catalog, prompt))("Lasagne", [_leaf("Sea")])
    assert plan.cancelled
    assert plan.entries == []
    assert [r.kind for r in prompt.requests] == ["duplicate_dish"]


async def test_component_cancel_short_circuits_batch(catalog):
    prompt = ScriptedPrompt(pt.CANCEL)
    resolver = DuplicateResolver(catalog, prompt, ResolutionPolicy(preparation_cancel="abort"))
    plan = await ResolveRecipeSave(resolver)("Ramen", [_stock(amount="99"), _leaf("Sea")])
    assert plan.cancelled
    assert plan.entries == []
    # the later ingredient was never looked at
    assert [r.kind for r in prompt.requests] == ["duplicate_preparation"]


async def test_rename_is_applied_to_the_component(catalog):
    prompt = ScriptedPrompt(pt.RENAME)
    plan = await ResolveRecipeSave(DuplicateResolver(catalog, prompt))("Ramen", [_stock(amount="99")])
    entry, salt = plan.entries
    assert entry.outcome.mode is ResolutionMode.RENAME
    assert entry.component.name == "Stock (Ramen)"
    assert entry.component.ingredient_id is None
    assert salt.outcome.id == "i-salt"


async def test_repeated_new_name_is_decided_once(catalog):
    prompt = ScriptedPrompt(pt.CREATE_NEW)
    plan = await ResolveRecipeSave(DuplicateResolver(catalog, prompt))("Ramen", [_leaf("Flo"), _leaf(" flo ")])
    assert [e.outcome.mode for e in plan.entries] == [ResolutionMode.NEW, ResolutionMode.NEW]
    assert len(prompt.requests) == 1


async def test_standalone_preparation_save(catalog):
    prompt = ScriptedPrompt(pt.REPLACE)
    plan = await ResolvePreparationSave(DuplicateResolver(catalog, prompt))(_stock(amount="20"))
    assert plan.outcome.mode is ResolutionMode.OVERWRITE
    head, salt = plan.entries
    assert head.component.ingredient_id == "p-stock"
    assert salt.component.ingredient_id == "i-salt"


def _pesto(*subs):
    return PreparationComponent(
        key="k-pesto",
        name="Pesto",
        ingredient_id=None,
        amount="1",
        unit_id="u-prep",
        sub_components=list(subs),
        instructions=["Pound everything together."],
    )


async def test_new_preparation_inside_dish_resolves_its_lines(catalog):
    prompt = ScriptedPrompt(pt.USE_EXISTING)
    plan = await ResolveRecipeSave(DuplicateResolver(catalog, prompt))("Pasta", [_pesto(_leaf("Sea"))])
    assert [r.kind for r in prompt.requests] == ["similar_ingredient"]
    pesto, sea = plan.entries
    assert pesto.outcome.mode is ResolutionMode.NEW
    assert sea.outcome.id == "i-sea-salt"
    # the preparation's own tree carries the resolved identities as well
    assert pesto.component.sub_components[0].ingredient_id == "i-sea-salt"
    assert pesto.component.sub_components[0].matched is True


async def test_dish_and_standalone_save_ask_the_same_questions(catalog):
    in_dish = ScriptedPrompt(pt.CREATE_NEW)
    await ResolveRecipeSave(DuplicateResolver(catalog, in_dish))("Pasta", [_pesto(_leaf("Sea"))])
    alone = ScriptedPrompt(pt.CREATE_NEW)
    await ResolvePreparationSave(DuplicateResolver(catalog, alone))(_pesto(_leaf("Sea")))
    assert [r.kind for r in in_dish.requests] == [r.kind for r in alone.requests] == ["similar_ingredient"]


async def test_existing_preparation_lines_are_not_re_resolved(catalog):
    # same content as the seeded Stock, so nothing of it gets written
    prompt = ScriptedPrompt()
    plan = await ResolveRecipeSave(DuplicateResolver(catalog, prompt))("Ramen", [_stock()])
    assert len(plan.entries) == 1
    assert prompt.requests == []


async def test_cancel_inside_nested_preparation_aborts_the_dish(catalog):
    prompt = ScriptedPrompt(pt.CANCEL)
    resolver = DuplicateResolver(catalog, prompt, ResolutionPolicy(preparation_cancel="abort"))
    plan = await ResolveRecipeSave(resolver)("Pasta", [_pesto(_stock(amount="99")), _leaf("Saffron")])
    assert plan.cancelled
    assert plan.entries == []
    assert [r.kind for r in prompt.requests] == ["duplicate_preparation"]


async def test_nested_rename_uses_the_dish_name(catalog):
    prompt = ScriptedPrompt(pt.RENAME)
    plan = await ResolveRecipeSave(DuplicateResolver(catalog, prompt))("Pasta", [_pesto(_stock(amount="99"))])
    pesto, stock, salt = plan.entries
    assert stock.component.name == "Stock (Pasta)"
    assert pesto.component.sub_components[0].name == "Stock (Pasta)"
    assert salt.outcome.id == "i-salt"


async def test_save_plan_serialises(catalog):
    plan = await ResolvePreparationSave(DuplicateResolver(catalog, ScriptedPrompt()))(_pesto(_leaf("salt", "i-salt")))
    body = plan.to_dict()
    assert body["name"] == "Pesto"
    assert body["cancelled"] is False
    assert body["outcome"] == {"mode": "new"}
    assert [e["outcome"]["mode"] for e in body["entries"]] == ["new", "existing"]
    assert "fingerprint" in body["entries"][0]
