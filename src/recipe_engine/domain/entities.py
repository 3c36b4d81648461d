# recipe_engine/domain/entities.py
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class MeasureKind(str, Enum):
    WEIGHT = "weight"
    VOLUME = "volume"
    COUNT = "count"

    @classmethod
    def parse(cls, value: Any) -> Optional["MeasureKind"]:
        if isinstance(value, MeasureKind):
            return value
        if not value:
            return None
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class Unit:
    id: str
    name: str
    abbreviation: str | None
    measure_kind: MeasureKind | None

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> "Unit":
        return cls(
            id=str(doc.get("unit_id") or doc.get("id") or doc.get("_id") or ""),
            name=str(doc.get("unit_name") or doc.get("name") or "").strip(),
            abbreviation=(doc.get("abbreviation") or None),
            measure_kind=MeasureKind.parse(doc.get("measurement_type") or doc.get("measure_kind")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "abbreviation": self.abbreviation,
            "measure_kind": self.measure_kind.value if self.measure_kind else None,
        }


@dataclass(frozen=True)
class IngredientMatch:
    """Slim catalog row returned by substring searches."""
    id: str
    name: str
    is_preparation: bool = False


@dataclass(frozen=True)
class PreparationIngredient:
    ingredient_id: str
    name: str
    amount: float | None
    unit_id: str | None


@dataclass(frozen=True)
class Preparation:
    id: str
    name: str
    instructions: List[str]
    yield_amount: float | None
    yield_unit_id: str | None
    ingredients: List[PreparationIngredient]
    fingerprint: str | None = None

    def compute_fingerprint(self, digest: str | None = None) -> str:
        from recipe_engine.services.fingerprint import fingerprint

        return fingerprint(self.ingredients, self.instructions, digest=digest)


# ----------------------------
# Editable components
# ----------------------------
@dataclass
class LeafComponent:
    key: str
    name: str
    ingredient_id: str | None
    amount: str
    unit_id: str | None
    matched: bool = False
    item: str | None = None

    is_preparation = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "name": self.name,
            "ingredient_id": self.ingredient_id,
            "amount": self.amount,
            "unit_id": self.unit_id,
            "matched": self.matched,
            "item": self.item,
            "is_preparation": False,
        }


@dataclass
class PreparationComponent:
    key: str
    name: str
    ingredient_id: str | None
    amount: str
    unit_id: str | None
    matched: bool = False
    item: str | None = None
    sub_components: List["ComponentInput"] = field(default_factory=list)
    instructions: List[str] = field(default_factory=list)
    prep_unit_id: str | None = None
    prep_amount: str | None = None

    is_preparation = True

    def fingerprint(self, digest: str | None = None) -> str:
        from recipe_engine.services.fingerprint import fingerprint

        return fingerprint(self.sub_components, self.instructions, digest=digest)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "name": self.name,
            "ingredient_id": self.ingredient_id,
            "amount": self.amount,
            "unit_id": self.unit_id,
            "matched": self.matched,
            "item": self.item,
            "is_preparation": True,
            "sub_components": [c.to_dict() for c in self.sub_components],
            "instructions": list(self.instructions),
            "prep_unit_id": self.prep_unit_id,
            "prep_amount": self.prep_amount,
        }


ComponentInput = Union[LeafComponent, PreparationComponent]


def component_from_dict(d: Dict[str, Any]) -> ComponentInput:
    """Inverse of ``to_dict``; ``is_preparation`` picks the variant."""
    amount = d.get("amount")
    common: Dict[str, Any] = dict(
        key=str(d.get("key") or ""),
        name=(d.get("name") or "").strip(),
        ingredient_id=d.get("ingredient_id") or None,
        amount="" if amount is None else str(amount),
        unit_id=d.get("unit_id") or None,
        matched=bool(d.get("matched")),
        item=d.get("item") or None,
    )
    if not d.get("is_preparation"):
        return LeafComponent(**common)
    return PreparationComponent(
        **common,
        sub_components=[component_from_dict(c) for c in (d.get("sub_components") or [])],
        instructions=list(d.get("instructions") or []),
        prep_unit_id=d.get("prep_unit_id") or None,
        prep_amount=d.get("prep_amount") or None,
    )


# ----------------------------
# Parsed (imported) recipes
# ----------------------------
@dataclass(frozen=True)
class ParsedComponent:
    name: str
    amount: float | str | None
    unit: str | None
    item: str | None = None
    ingredient_type: str = "ingredient"
    instructions: List[str] = field(default_factory=list)
    components: List["ParsedComponent"] = field(default_factory=list)

    @property
    def is_preparation(self) -> bool:
        return (self.ingredient_type or "").strip().lower() == "preparation"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ParsedComponent":
        instructions = d.get("instructions") or []
        if isinstance(instructions, str):
            instructions = [instructions]
        return cls(
            name=(d.get("name") or "").strip(),
            amount=d.get("amount"),
            unit=d.get("unit"),
            item=d.get("item"),
            ingredient_type=str(d.get("ingredient_type") or d.get("type") or "ingredient"),
            instructions=list(instructions),
            components=[cls.from_dict(c) for c in (d.get("components") or [])],
        )


@dataclass(frozen=True)
class ParsedRecipe:
    name: str
    components: List[ParsedComponent]
    instructions: List[str] = field(default_factory=list)
    servings: int | None = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ParsedRecipe":
        return cls(
            name=(d.get("name") or d.get("recipe_name") or "").strip(),
            components=[ParsedComponent.from_dict(c) for c in (d.get("components") or [])],
            instructions=list(d.get("instructions") or []),
            servings=d.get("servings"),
        )


# ----------------------------
# Resolution
# ----------------------------
class ResolutionMode(str, Enum):
    EXISTING = "existing"
    NEW = "new"
    OVERWRITE = "overwrite"
    RENAME = "rename"
    CANCEL = "cancel"


@dataclass(frozen=True)
class ResolutionOutcome:
    mode: ResolutionMode
    id: str | None = None
    new_name: str | None = None

    @classmethod
    def existing(cls, id: str) -> "ResolutionOutcome":
        return cls(ResolutionMode.EXISTING, id=id)

    @classmethod
    def new(cls) -> "ResolutionOutcome":
        return cls(ResolutionMode.NEW)

    @classmethod
    def overwrite(cls, id: str) -> "ResolutionOutcome":
        return cls(ResolutionMode.OVERWRITE, id=id)

    @classmethod
    def rename(cls, new_name: str) -> "ResolutionOutcome":
        return cls(ResolutionMode.RENAME, new_name=new_name)

    @classmethod
    def cancel(cls) -> "ResolutionOutcome":
        return cls(ResolutionMode.CANCEL)

    @property
    def is_cancel(self) -> bool:
        return self.mode is ResolutionMode.CANCEL

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"mode": self.mode.value}
        if self.id is not None:
            out["id"] = self.id
        if self.new_name is not None:
            out["new_name"] = self.new_name
        return out
