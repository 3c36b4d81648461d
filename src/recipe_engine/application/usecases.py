# =========================
# FILE: recipe_engine/application/usecases.py
# =========================
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence, Tuple

from recipe_engine.application.duplicate_resolver import DuplicateResolver
from recipe_engine.core.config import FINGERPRINT_DIGEST
from recipe_engine.domain.entities import (
    ComponentInput,
    PreparationComponent,
    ResolutionMode,
    ResolutionOutcome,
)
from recipe_engine.services.fingerprint import slug

log = logging.getLogger("app.usecases")


@dataclass(frozen=True)
class PlanEntry:
    component: ComponentInput
    outcome: ResolutionOutcome
    fingerprint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out = {"component": self.component.to_dict(), "outcome": self.outcome.to_dict()}
        if self.fingerprint:
            out["fingerprint"] = self.fingerprint
        return out


@dataclass(frozen=True)
class SavePlan:
    """What the caller should persist. A cancelled plan carries no entries."""
    name: str
    outcome: ResolutionOutcome
    entries: List[PlanEntry] = field(default_factory=list)
    cancelled: bool = False

    @classmethod
    def aborted(cls, name: str) -> "SavePlan":
        return cls(name=name, outcome=ResolutionOutcome.cancel(), entries=[], cancelled=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "outcome": self.outcome.to_dict(),
            "cancelled": self.cancelled,
            "entries": [e.to_dict() for e in self.entries],
        }


def apply_outcome(component: ComponentInput, outcome: ResolutionOutcome) -> ComponentInput:
    if outcome.mode in (ResolutionMode.EXISTING, ResolutionMode.OVERWRITE):
        return replace(component, ingredient_id=outcome.id, matched=True)
    if outcome.mode is ResolutionMode.RENAME:
        return replace(component, name=outcome.new_name or component.name, ingredient_id=None, matched=False)
    if outcome.mode is ResolutionMode.NEW:
        return replace(component, ingredient_id=None, matched=False)
    return component


@dataclass(frozen=True)
class _ComponentBatch:
    resolver: DuplicateResolver
    digest: str = FINGERPRINT_DIGEST
    decided_new: Dict[Tuple[bool, str], ResolutionOutcome] = field(default_factory=dict)

    async def run(self, components: Sequence[ComponentInput], parent_name: Optional[str]) -> Optional[List[PlanEntry]]:
        """Sequential on purpose: each decision is visible to the next one. None means cancelled."""
        resolved = await self._run(components, parent_name)
        return None if resolved is None else resolved[1]

    async def _run(
        self, components: Sequence[ComponentInput], parent_name: Optional[str]
    ) -> Optional[Tuple[List[ComponentInput], List[PlanEntry]]]:
        heads: List[ComponentInput] = []
        entries: List[PlanEntry] = []
        for component in components:
            resolved = await self._resolve_one(component, parent_name)
            if resolved is None:
                return None
            heads.append(resolved[0].component)
            entries.extend(resolved)
        return heads, entries

    async def _resolve_one(self, component: ComponentInput, parent_name: Optional[str]) -> Optional[List[PlanEntry]]:
        fp: Optional[str] = None
        if isinstance(component, PreparationComponent):
            fp = component.fingerprint(digest=self.digest or None)
        seen_key = (component.is_preparation, slug(component.name))

        if seen_key in self.decided_new:
            outcome = self.decided_new[seen_key]
        elif isinstance(component, PreparationComponent):
            outcome = await self.resolver.resolve_preparation(component.name, fp, parent_name)
        elif component.ingredient_id:
            outcome = ResolutionOutcome.existing(component.ingredient_id)
        else:
            outcome = await self.resolver.resolve_ingredient(component.name)

        if outcome.is_cancel:
            log.info("Batch cancelled at component %r", component.name)
            return None

        if outcome.mode is ResolutionMode.NEW:
            self.decided_new[seen_key] = outcome
        applied = apply_outcome(component, outcome)

        if not isinstance(applied, PreparationComponent) or outcome.mode is ResolutionMode.EXISTING:
            return [PlanEntry(component=applied, outcome=outcome, fingerprint=fp)]

        # this preparation's content gets written, so its own lines need identities too
        resolved = await self._run(applied.sub_components, parent_name)
        if resolved is None:
            return None
        subs, sub_entries = resolved
        head = PlanEntry(component=replace(applied, sub_components=subs), outcome=outcome, fingerprint=fp)
        return [head] + sub_entries


@dataclass(frozen=True)
class ResolveRecipeSave:
    resolver: DuplicateResolver
    digest: str = FINGERPRINT_DIGEST

    async def __call__(self, dish_name: str, components: Sequence[ComponentInput]) -> SavePlan:
        name = (dish_name or "").strip()
        dish_outcome = await self.resolver.resolve_dish(name)
        if dish_outcome.is_cancel:
            return SavePlan.aborted(name)

        entries = await _ComponentBatch(self.resolver, self.digest).run(components, parent_name=name or None)
        if entries is None:
            return SavePlan.aborted(name)
        return SavePlan(name=name, outcome=dish_outcome, entries=entries)


@dataclass(frozen=True)
class ResolvePreparationSave:
    resolver: DuplicateResolver
    digest: str = FINGERPRINT_DIGEST

    async def __call__(self, preparation: PreparationComponent) -> SavePlan:
        entries = await _ComponentBatch(self.resolver, self.digest).run([preparation], parent_name=None)
        if not entries:
            return SavePlan.aborted(preparation.name)
        head = entries[0]
        return SavePlan(name=head.component.name, outcome=head.outcome, entries=entries)
