# recipe_engine/services/fingerprint.py
"""
Content address for preparations.

A preparation is identified by its sorted (name, amount, unit) lines plus its
normalised directions, so two preparations typed in a different order, or
with differently cased / punctuated steps, share one fingerprint.
"""
from __future__ import annotations

import hashlib
import re
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from recipe_engine.services.quantities import parse_amount

_WS = re.compile(r"\s+")
_DIRECTIONS_STRIP = re.compile(r"[.,;:!?()\"'\d]")

Instructions = Union[str, Sequence[str], None]


def slug(s: Optional[str]) -> str:
    if not s:
        return ""
    return _WS.sub(" ", s.lower().strip())


def strip_directions(text: Instructions) -> str:
    if not text:
        return ""
    combined = text if isinstance(text, str) else " ".join(t for t in text if t)
    combined = _DIRECTIONS_STRIP.sub("", combined.lower())
    return _WS.sub(" ", combined).strip()


def _field(component: Any, *names: str) -> Any:
    for n in names:
        if isinstance(component, Mapping):
            if component.get(n) is not None:
                return component[n]
        else:
            v = getattr(component, n, None)
            if v is not None:
                return v
    return None


def _amount_text(amount: Any) -> str:
    # "200", "200.0" and 200 must all address the same content
    v = parse_amount(amount)
    if v is None:
        return str(amount).strip() if amount is not None else ""
    return format(v, ".10g")


def _line(component: Any) -> Tuple[str, str, str]:
    name = slug(_field(component, "name"))
    ingredient_id = str(_field(component, "ingredient_id", "id") or "")
    line = f"{name}:{_amount_text(_field(component, 'amount'))}:{_field(component, 'unit_id', 'unit') or 'null'}"
    return name, ingredient_id, line


def fingerprint(components: Iterable[Any], instructions: Instructions, digest: Optional[str] = None) -> str:
    """
    Build "<name>:<amount>:<unit>|...::<directions>" from the components sorted
    by slugged name, then identity (missing identity sorts first).

    digest="sha1" returns the hex digest of that string instead; equality
    semantics are unchanged as long as every caller uses the same setting.
    """
    lines: List[Tuple[str, str, str]] = sorted(_line(c) for c in components)
    joined = "|".join(line for _, _, line in lines)
    combined = f"{joined}::{strip_directions(instructions)}"

    if not digest:
        return combined
    if digest.lower() == "sha1":
        return hashlib.sha1(combined.encode("utf-8")).hexdigest()
    raise ValueError(f"Unsupported fingerprint digest: {digest!r}")
