# recipe_engine/services/units.py
from __future__ import annotations

import logging
from typing import Dict, Iterable, Mapping, Optional, Tuple, Union

from recipe_engine.domain.entities import MeasureKind, Unit

log = logging.getLogger("services.units")


# ----------------------------
# Factor tables (one per measure kind)
# ----------------------------
_WEIGHT_TO_G: Dict[str, float] = {
    "g": 1.0,
    "gram": 1.0,
    "grams": 1.0,
    "kg": 1000.0,
    "kilogram": 1000.0,
    "kilograms": 1000.0,
    "oz": 28.3495,
    "ounce": 28.3495,
    "ounces": 28.3495,
    "lb": 453.592,
    "lbs": 453.592,
    "pound": 453.592,
    "pounds": 453.592,
}
_VOLUME_TO_ML: Dict[str, float] = {
    "ml": 1.0,
    "millilitre": 1.0,
    "millilitres": 1.0,
    "milliliter": 1.0,
    "milliliters": 1.0,
    "l": 1000.0,
    "litre": 1000.0,
    "litres": 1000.0,
    "liter": 1000.0,
    "liters": 1000.0,
    "tsp": 4.92892,
    "teaspoon": 4.92892,
    "teaspoons": 4.92892,
    "tbsp": 14.7868,
    "tablespoon": 14.7868,
    "tablespoons": 14.7868,
    "cup": 236.588,
    "cups": 236.588,
    "pt": 473.176,
    "pint": 473.176,
    "pints": 473.176,
    "qt": 946.353,
    "quart": 946.353,
    "quarts": 946.353,
    "gal": 3785.41,
    "gallon": 3785.41,
    "gallons": 3785.41,
    "fl oz": 29.5735,
    "floz": 29.5735,
    "fluid ounce": 29.5735,
    "fluid ounces": 29.5735,
}

_TABLES: Tuple[Tuple[MeasureKind, Dict[str, float]], ...] = (
    (MeasureKind.WEIGHT, _WEIGHT_TO_G),
    (MeasureKind.VOLUME, _VOLUME_TO_ML),
)


def _key(unit_name: str | None) -> str:
    return " ".join((unit_name or "").lower().split())


def lookup_factor(unit_name: str | None) -> Optional[Tuple[MeasureKind, float]]:
    """(kind, factor-to-base) for a known unit name/abbreviation, else None."""
    k = _key(unit_name)
    if not k:
        return None
    for kind, table in _TABLES:
        if k in table:
            return kind, table[k]
    return None


def classify(unit: Unit | None) -> MeasureKind | None:
    # Kind is reference data owned by the catalog; never derived from the name.
    if unit is None:
        return None
    return unit.measure_kind


def are_convertible(a: Unit | None, b: Unit | None) -> bool:
    ka, kb = classify(a), classify(b)
    return ka is not None and ka == kb


def convert(amount: float, from_unit: str | None, to_unit: str | None) -> float:
    """
    Convert between two units of the same kind via the factor tables.
    Unknown names, mixed kinds and count units leave the amount untouched.
    """
    f, t = _key(from_unit), _key(to_unit)
    if not f or not t or f == t:
        return amount
    for _, table in _TABLES:
        if f in table and t in table:
            return amount * table[f] / table[t]
    return amount


# ----------------------------
# Catalog unit lookups
# ----------------------------
UnitIndex = Dict[str, str]


def build_unit_index(units: Iterable[Unit]) -> UnitIndex:
    """lowercase full name / abbreviation -> unit id (abbreviations win on clashes)."""
    index: UnitIndex = {}
    units = list(units)
    for u in units:
        if u.name:
            index[_key(u.name)] = u.id
    for u in units:
        if u.abbreviation:
            index[_key(u.abbreviation)] = u.id
    return index


def resolve_unit_id(units: Union[UnitIndex, Iterable[Unit]], text: str | None) -> str | None:
    k = _key(text)
    if not k:
        return None
    index = units if isinstance(units, Mapping) else build_unit_index(units)
    return index.get(k)


def find_unit(units: Iterable[Unit], unit_id: str | None) -> Unit | None:
    if not unit_id:
        return None
    for u in units:
        if u.id == unit_id:
            return u
    return None


def find_unit_by_abbreviation(units: Iterable[Unit], abbr: str | None) -> Unit | None:
    k = _key(abbr)
    if not k:
        return None
    for u in units:
        if _key(u.abbreviation) == k:
            return u
    return None
