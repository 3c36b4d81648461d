# recipe_engine/services/quantities.py
"""
Quantity formatting for display and the inverse normalisation used when a
value is typed back in.

Both directions share the same breakpoints (1000 g/kg, 1000 ml/l, 16 oz/lb,
128 fl oz/gal) so a value shown as "1.5 kg" is stored back as 1.5 kg and not
as 1500 kg.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from fractions import Fraction
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from recipe_engine.core.config import COUNT_UNIT_ABBR

EPSILON = 1e-9
_EPSILON_DIGITS = 9

_SMALL_WORDS = frozenset(
    ["a", "an", "and", "as", "at", "but", "by", "for", "in", "nor", "of", "on", "or", "the", "to", "up", "yet"]
)


@dataclass(frozen=True)
class DisplayQuantity:
    amount: str
    unit: str


@dataclass(frozen=True)
class NormalizedQuantity:
    amount: Optional[float]
    unit_abbr: str


# ----------------------------
# Parsing / formatting
# ----------------------------
def parse_amount(value: Any) -> Optional[float]:
    """Lenient numeric parse: floats, "1,5", "1/2", "1 1/2". Anything else -> None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        v = float(value)
        return v if math.isfinite(v) else None

    text = str(value).strip().replace(",", ".")
    if not text:
        return None
    try:
        v = float(text)
        return v if math.isfinite(v) else None
    except ValueError:
        pass

    try:
        return float(sum(Fraction(part) for part in text.split()))
    except (ValueError, ZeroDivisionError):
        return None


def format_quantity(value: Any) -> str:
    v = parse_amount(value)
    if v is None:
        return ""
    return f"{v:.1f}"


def pluralize_item(item: str, quantity: float) -> str:
    if quantity == 1:
        return item
    lower = item.lower()
    if lower.endswith("ss"):
        return item + "es"
    if lower.endswith("s"):
        return item
    return item + "s"


def capitalize_words(text: Optional[str], preserve_small_words: bool = False) -> str:
    t = (text or "").strip()
    if not t:
        return ""
    words: List[str] = []
    for i, w in enumerate(t.split(" ")):
        if not w:
            words.append("")
        elif i > 0 and preserve_small_words and w.lower() in _SMALL_WORDS:
            words.append(w.lower())
        else:
            words.append(w[:1].upper() + w[1:].lower())
    return " ".join(words)


# ----------------------------
# Threshold comparisons
# ----------------------------
def _reaches(value: float, limit: float) -> bool:
    # values within EPSILON of the limit snap onto it
    return round(value - limit, _EPSILON_DIGITS) >= 0


def _below(value: float, limit: float) -> bool:
    return round(value - limit, _EPSILON_DIGITS) < 0


# ----------------------------
# Display direction
# ----------------------------
# unit -> (limit, larger unit)
_DISPLAY_UP: Dict[str, Tuple[float, str]] = {
    "g": (1000.0, "kg"),
    "ml": (1000.0, "l"),
    "oz": (16.0, "lb"),
}
# large unit -> (factor, smaller unit)
_DISPLAY_DOWN: Dict[str, Tuple[float, str]] = {
    "kg": (1000.0, "g"),
    "l": (1000.0, "ml"),
    "lb": (16.0, "oz"),
}


def auto_scale_for_display(amount: Any, unit_abbr: Optional[str], item: Optional[str] = None) -> DisplayQuantity:
    """
    Pick the most readable unit within the same kind (1500 g -> 1.5 kg,
    0.25 kg -> 250 g) and format to one decimal. For the count unit an item
    label replaces the unit ("3 cloves" instead of "3 x").
    """
    qty = parse_amount(amount)
    if qty is None:
        return DisplayQuantity(amount="N/A", unit=item or "")

    lower = (unit_abbr or "").strip().lower()
    adjusted_qty = qty
    adjusted_unit = unit_abbr or ""

    if lower == COUNT_UNIT_ABBR and item:
        adjusted_unit = pluralize_item(item, qty)

    if lower in _DISPLAY_UP and _reaches(qty, _DISPLAY_UP[lower][0]):
        limit, larger = _DISPLAY_UP[lower]
        adjusted_qty, adjusted_unit = qty / limit, larger
    elif lower in _DISPLAY_DOWN and _below(qty, 1.0):
        factor, smaller = _DISPLAY_DOWN[lower]
        adjusted_qty, adjusted_unit = qty * factor, smaller

    return DisplayQuantity(amount=format_quantity(adjusted_qty), unit=adjusted_unit)


# ----------------------------
# Storage direction
# ----------------------------
@dataclass(frozen=True)
class _Rule:
    aliases: FrozenSet[str]
    scale_up: bool
    limit: float
    factor: float
    target: str


_NORMALIZE_RULES: Tuple[_Rule, ...] = (
    _Rule(frozenset({"g", "gram", "grams"}), True, 1000.0, 1000.0, "kg"),
    _Rule(frozenset({"kg", "kilogram", "kilograms"}), False, 1.0, 1000.0, "g"),
    _Rule(frozenset({"oz", "ounce", "ounces"}), True, 16.0, 16.0, "lb"),
    _Rule(frozenset({"lb", "lbs", "pound", "pounds"}), False, 1.0, 16.0, "oz"),
    _Rule(frozenset({"ml", "millilitre", "millilitres", "milliliter", "milliliters"}), True, 1000.0, 1000.0, "l"),
    _Rule(frozenset({"l", "litre", "litres", "liter", "liters"}), False, 1.0, 1000.0, "ml"),
    _Rule(frozenset({"fl oz", "floz", "fluid ounce", "fluid ounces"}), True, 128.0, 128.0, "gal"),
    _Rule(frozenset({"gal", "gallon", "gallons"}), False, 1.0, 128.0, "fl oz"),
)


def normalize_to_base_unit(amount: Any, unit_abbr: Optional[str]) -> NormalizedQuantity:
    """
    Numeric counterpart of auto_scale_for_display for the storage side.
    The returned abbreviation is what the caller looks up to update the unit
    id together with the amount. Unknown units and missing amounts pass through.
    """
    qty = parse_amount(amount)
    unit = unit_abbr or ""
    if qty is None or not unit:
        return NormalizedQuantity(amount=qty, unit_abbr=unit)

    lower = " ".join(unit.lower().split())
    for rule in _NORMALIZE_RULES:
        if lower not in rule.aliases:
            continue
        if rule.scale_up and _reaches(qty, rule.limit):
            return NormalizedQuantity(amount=qty / rule.factor, unit_abbr=rule.target)
        if not rule.scale_up and _below(qty, rule.limit):
            return NormalizedQuantity(amount=qty * rule.factor, unit_abbr=rule.target)
        break

    return NormalizedQuantity(amount=qty, unit_abbr=unit)
