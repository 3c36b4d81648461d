# recipe_engine/application/duplicate_resolver.py
from __future__ import annotations

import logging
from typing import List, Optional

from recipe_engine.application import prompt_templates as pt
from recipe_engine.application.prompts import ChoicePrompt
from recipe_engine.core.config import CLOSE_MATCH_LIMIT, ResolutionPolicy
from recipe_engine.domain.entities import IngredientMatch, ResolutionOutcome
from recipe_engine.domain.repositories import CatalogStore

log = logging.getLogger("app.duplicate_resolver")


class DuplicateResolver:
    """
    Decides whether a name refers to an existing catalog entry or a new one.

    Catalog errors never escape: they are logged and resolve to ``new`` so a
    flaky store cannot block data entry. Duplicate prevention is best-effort.
    Ambiguous cases suspend on ``prompt`` until the operator picks an option.
    """

    def __init__(
        self,
        catalog: CatalogStore,
        prompt: ChoicePrompt,
        policy: Optional[ResolutionPolicy] = None,
        close_match_limit: int = CLOSE_MATCH_LIMIT,
    ) -> None:
        self.catalog = catalog
        self.prompt = prompt
        self.policy = policy or ResolutionPolicy()
        self.close_match_limit = close_match_limit

    # ----------------------------
    # Ingredients
    # ----------------------------
    async def resolve_ingredient(self, name: str) -> ResolutionOutcome:
        trimmed = (name or "").strip()
        if not trimmed:
            return ResolutionOutcome.new()

        try:
            matches = await self.catalog.find_ingredients_by_name_substring(trimmed, limit=self.close_match_limit)
            exact_id = self._exact_match(trimmed, matches)
            if exact_id is None and len(matches) >= self.close_match_limit:
                # an exact row can sit beyond the substring limit
                exact_id = await self.catalog.find_ingredient_by_exact_name(trimmed)
        except Exception:
            log.exception("resolve_ingredient lookup failed name=%s", trimmed)
            return ResolutionOutcome.new()

        if exact_id:
            log.info("Exact ingredient match for %r -> %s", trimmed, exact_id)
            return ResolutionOutcome.existing(exact_id)

        if not matches:
            return ResolutionOutcome.new()

        best = matches[0]
        choice = await self.prompt(pt.similar_ingredient(trimmed, best.name))
        if choice == pt.USE_EXISTING:
            return ResolutionOutcome.existing(best.id)
        return ResolutionOutcome.new()

    @staticmethod
    def _exact_match(name: str, matches: List[IngredientMatch]) -> Optional[str]:
        lower = name.lower()
        for m in matches:
            if (m.name or "").strip().lower() == lower:
                return m.id
        return None

    # ----------------------------
    # Dishes
    # ----------------------------
    async def resolve_dish(self, name: str) -> ResolutionOutcome:
        trimmed = (name or "").strip()
        if not trimmed:
            return ResolutionOutcome.new()

        try:
            dish_id = await self.catalog.find_dish_by_exact_name(trimmed)
        except Exception:
            log.exception("resolve_dish lookup failed name=%s", trimmed)
            return ResolutionOutcome.new()

        if not dish_id:
            return ResolutionOutcome.new()

        choice = await self.prompt(pt.duplicate_dish(trimmed))
        if choice == pt.REPLACE:
            return ResolutionOutcome.overwrite(dish_id)
        return self._cancelled(self.policy.dish_cancel)

    # ----------------------------
    # Preparations
    # ----------------------------
    async def resolve_preparation(
        self,
        name: str,
        fingerprint: Optional[str],
        parent_dish_name: Optional[str] = None,
    ) -> ResolutionOutcome:
        trimmed = (name or "").strip()
        if not trimmed:
            return ResolutionOutcome.new()

        try:
            if fingerprint:
                fp_id = await self.catalog.find_preparation_by_fingerprint(fingerprint)
                if fp_id:
                    # identical content is never a conflict, whatever it is called
                    log.info("Preparation content match for %r via fingerprint -> %s", trimmed, fp_id)
                    return ResolutionOutcome.existing(fp_id)
            name_id = await self.catalog.find_preparation_by_exact_name(trimmed)
        except Exception:
            log.exception("resolve_preparation lookup failed name=%s", trimmed)
            return ResolutionOutcome.new()

        if not name_id:
            return ResolutionOutcome.new()

        choice = await self.prompt(pt.duplicate_preparation(trimmed))
        if choice == pt.REPLACE:
            return ResolutionOutcome.overwrite(name_id)
        if choice == pt.RENAME:
            return ResolutionOutcome.rename(pt.renamed_preparation(trimmed, parent_dish_name))
        return self._cancelled(self.policy.preparation_cancel)

    @staticmethod
    def _cancelled(policy: str) -> ResolutionOutcome:
        if policy == "create":
            return ResolutionOutcome.new()
        return ResolutionOutcome.cancel()
