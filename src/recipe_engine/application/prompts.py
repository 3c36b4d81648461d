# recipe_engine/application/prompts.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Tuple


@dataclass(frozen=True)
class ChoiceOption:
    key: str
    label: str
    style: str = "default"  # "default" | "destructive" | "cancel"


@dataclass(frozen=True)
class ChoiceRequest:
    """
    A suspend point of the resolver: N labeled options, exactly one answer.
    There is no default and no timeout; the caller must answer.
    """
    kind: str
    title: str
    message: str
    options: Tuple[ChoiceOption, ...]

    def keys(self) -> Tuple[str, ...]:
        return tuple(o.key for o in self.options)

    def validate(self, key: str) -> str:
        k = (key or "").strip()
        if k not in self.keys():
            raise ValueError(f"Invalid choice {key!r}; expected one of {list(self.keys())}")
        return k

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "title": self.title,
            "message": self.message,
            "options": [{"key": o.key, "label": o.label, "style": o.style} for o in self.options],
        }


# async (request) -> chosen option key
ChoicePrompt = Callable[[ChoiceRequest], Awaitable[str]]
