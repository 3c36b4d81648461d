# recipe_engine/application/scaling.py
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Iterable, List, Optional

from recipe_engine.core.config import PREPARATION_UNIT_ABBR, PREPARATION_UNIT_ID
from recipe_engine.domain.entities import ComponentInput, Unit
from recipe_engine.services.quantities import (
    DisplayQuantity,
    auto_scale_for_display,
    capitalize_words,
    normalize_to_base_unit,
    parse_amount,
)
from recipe_engine.services.units import find_unit, find_unit_by_abbreviation

log = logging.getLogger("app.scaling")

UNKNOWN_UNIT_LABEL = "Unit"


def _ratio(base: Any, target: Any) -> float:
    b = parse_amount(base)
    t = parse_amount(target)
    if not b or t is None:
        return 1.0
    return t / b


def recipe_scale(base_servings: Any, target_servings: Any) -> float:
    """target / base; an unknown or zero base means no scaling."""
    return _ratio(base_servings, target_servings)


def yield_scale(base_yield: Any, target_yield: Any) -> float:
    return _ratio(base_yield, target_yield)


def _total_scale(recipe_scale: Any, prep_scale: Any) -> Optional[float]:
    r = parse_amount(recipe_scale)
    p = 1.0 if prep_scale is None else parse_amount(prep_scale)
    if r is None or p is None:
        return None
    return r * p


def compute_display_amount(base_amount: Any, recipe_scale: Any = 1.0, prep_scale: Any = 1.0) -> Optional[float]:
    base = parse_amount(base_amount)
    scale = _total_scale(recipe_scale, prep_scale)
    if base is None or scale is None:
        return None
    return base * scale


def compute_base_amount_from_edit(edited_amount: Any, recipe_scale: Any = 1.0, prep_scale: Any = 1.0) -> Optional[float]:
    """
    Recover the stored amount from a value typed into a scaled display field.
    A zero or unknown scale keeps the typed value as-is.
    """
    edited = parse_amount(edited_amount)
    if edited is None:
        return None
    scale = _total_scale(recipe_scale, prep_scale)
    if not scale:
        return edited
    return edited / scale


# ----------------------------
# Component-level helpers
# ----------------------------
@dataclass(frozen=True)
class DisplayLine:
    key: str
    name: str
    amount: str
    unit: str
    is_preparation: bool


def _amount_text(value: float) -> str:
    return format(value, ".10g")


def apply_displayed_edit(
    component: ComponentInput,
    edited_text: Any,
    unit_abbr: Optional[str],
    units: Iterable[Unit],
    recipe_scale: Any = 1.0,
    prep_scale: Any = 1.0,
) -> ComponentInput:
    """
    Returns a copy of ``component`` whose stored amount and unit reflect an
    edit made in the scaled display, where ``unit_abbr`` is the unit shown
    next to the field. Amount and unit change together; if the normalised
    unit has no catalog row, the stored unit is kept with the un-normalised
    amount.
    """
    base = compute_base_amount_from_edit(edited_text, recipe_scale, prep_scale)
    if base is None:
        log.debug("Ignoring unparseable edit %r for %s", edited_text, component.key)
        return replace(component, amount=str(edited_text or "").strip())

    normalized = normalize_to_base_unit(base, unit_abbr)
    target = find_unit_by_abbreviation(units, normalized.unit_abbr)
    if target is not None and normalized.amount is not None:
        return replace(component, amount=_amount_text(normalized.amount), unit_id=target.id)

    log.info("No catalog unit for %r; keeping unit %s", normalized.unit_abbr, component.unit_id)
    return replace(component, amount=_amount_text(base))


def display_line(
    component: ComponentInput,
    units: Iterable[Unit],
    recipe_scale: Any = 1.0,
    prep_scale: Any = 1.0,
) -> DisplayLine:
    unit = find_unit(units, component.unit_id)
    if unit is not None and unit.abbreviation:
        unit_abbr = unit.abbreviation
    elif component.unit_id == PREPARATION_UNIT_ID:
        # the pseudo-unit row is not always part of the listed units
        unit_abbr = PREPARATION_UNIT_ABBR
    else:
        unit_abbr = UNKNOWN_UNIT_LABEL
    shown: DisplayQuantity = auto_scale_for_display(
        compute_display_amount(component.amount, recipe_scale, prep_scale),
        unit_abbr,
        component.item,
    )
    return DisplayLine(
        key=component.key,
        name=capitalize_words(component.name),
        amount=shown.amount,
        unit=shown.unit,
        is_preparation=component.is_preparation,
    )


def display_lines(
    components: Iterable[ComponentInput],
    units: Iterable[Unit],
    recipe_scale: Any = 1.0,
) -> List[DisplayLine]:
    units = list(units)
    return [display_line(c, units, recipe_scale) for c in components]
