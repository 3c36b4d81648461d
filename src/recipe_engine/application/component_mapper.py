# recipe_engine/application/component_mapper.py
from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple, Union

from recipe_engine.core.config import CLOSE_MATCH_LIMIT, PREPARATION_UNIT_ID
from recipe_engine.domain.entities import (
    ComponentInput,
    LeafComponent,
    ParsedComponent,
    ParsedRecipe,
    PreparationComponent,
    Unit,
)
from recipe_engine.domain.repositories import CatalogStore
from recipe_engine.services.fingerprint import slug
from recipe_engine.services.units import UnitIndex, build_unit_index, resolve_unit_id

log = logging.getLogger("app.component_mapper")

ParsedInput = Union[ParsedRecipe, Sequence[Union[ParsedComponent, Dict[str, Any]]]]


def _amount_str(amount: Any) -> str:
    return "" if amount is None else str(amount)


def _new_key(prefix: str, name: str) -> str:
    return f"{prefix}-{slug(name).replace(' ', '-')}-{uuid.uuid4().hex[:8]}"


def _as_components(parsed: ParsedInput) -> List[ParsedComponent]:
    if isinstance(parsed, ParsedRecipe):
        return list(parsed.components)
    return [c if isinstance(c, ParsedComponent) else ParsedComponent.from_dict(c) for c in parsed]


class ComponentMapper:
    """
    Turns externally parsed recipe lines into editable components with their
    first-pass catalog identities. Nothing is persisted here; unresolved lines
    are kept (null id, matched=False) for the duplicate resolver.
    """

    def __init__(
        self,
        catalog: CatalogStore,
        close_match_limit: int = CLOSE_MATCH_LIMIT,
        preparation_unit_id: str = PREPARATION_UNIT_ID,
    ) -> None:
        self.catalog = catalog
        self.close_match_limit = close_match_limit
        self.preparation_unit_id = preparation_unit_id

    async def map(self, parsed: ParsedInput, units: Iterable[Unit]) -> List[ComponentInput]:
        index = build_unit_index(units)
        components = _as_components(parsed)
        if not components:
            log.warning("Parsed recipe has no components")
            return []

        mapped: List[ComponentInput] = []
        for pc in components:
            mapped.append(await self._map_one(pc, index, ancestors=frozenset(), prefix="parsed"))
        log.info("Mapped %d parsed components", len(mapped))
        return mapped

    async def _map_one(
        self,
        pc: ParsedComponent,
        index: UnitIndex,
        ancestors: FrozenSet[str],
        prefix: str,
    ) -> ComponentInput:
        if pc.is_preparation:
            return await self._map_preparation(pc, index, ancestors, prefix)
        return await self._map_ingredient(pc, index, ancestors, prefix)

    async def _map_ingredient(
        self,
        pc: ParsedComponent,
        index: UnitIndex,
        ancestors: FrozenSet[str],
        prefix: str,
    ) -> LeafComponent:
        match_id, match_name = await self._close_match(pc.name)
        if match_id and match_id in ancestors:
            # a preparation must never list itself as an ingredient
            log.info("Discarding self-match %r -> %s", pc.name, match_id)
            match_id, match_name = None, None

        unit_id = resolve_unit_id(index, pc.unit)
        log.debug("ingredient %r -> id=%s unit=%r -> %s", pc.name, match_id, pc.unit, unit_id)
        return LeafComponent(
            key=_new_key(prefix, pc.name),
            name=match_name or pc.name,
            ingredient_id=match_id,
            amount=_amount_str(pc.amount),
            unit_id=unit_id,
            matched=match_id is not None,
            item=pc.item or None,
        )

    async def _map_preparation(
        self,
        pc: ParsedComponent,
        index: UnitIndex,
        ancestors: FrozenSet[str],
        prefix: str,
    ) -> PreparationComponent:
        prep_id = await self._existing_preparation(pc.name)
        if prep_id and prep_id in ancestors:
            log.info("Discarding self-match for nested preparation %r -> %s", pc.name, prep_id)
            prep_id = None

        parsed_unit_id = resolve_unit_id(index, pc.unit)
        inner_ancestors = ancestors | {prep_id} if prep_id else ancestors
        subs: List[ComponentInput] = []
        for sub in pc.components:
            subs.append(await self._map_one(sub, index, inner_ancestors, prefix="prep-sub"))

        log.debug("preparation %r -> id=%s with %d sub-components", pc.name, prep_id, len(subs))
        return PreparationComponent(
            key=_new_key(prefix, pc.name),
            name=pc.name,
            ingredient_id=prep_id,
            # scaled through the dish, not as a literal quantity
            amount="1",
            unit_id=self.preparation_unit_id,
            matched=prep_id is not None,
            item=pc.item or None,
            sub_components=subs,
            instructions=list(pc.instructions),
            prep_unit_id=parsed_unit_id,
            prep_amount=_amount_str(pc.amount) or None,
        )

    async def _close_match(self, name: str) -> Tuple[Optional[str], Optional[str]]:
        if not (name or "").strip():
            return None, None
        try:
            matches = await self.catalog.find_ingredients_by_name_substring(name.strip(), limit=self.close_match_limit)
        except Exception:
            log.exception("Close-match lookup failed for %r", name)
            return None, None
        if not matches:
            return None, None
        return matches[0].id, matches[0].name

    async def _existing_preparation(self, name: str) -> Optional[str]:
        if not (name or "").strip():
            return None
        try:
            return await self.catalog.find_preparation_by_exact_name(name.strip())
        except Exception:
            log.exception("Preparation lookup failed for %r", name)
            return None


async def map_parsed_components(parsed: ParsedInput, units: Iterable[Unit], catalog: CatalogStore) -> List[ComponentInput]:
    return await ComponentMapper(catalog).map(parsed, units)
