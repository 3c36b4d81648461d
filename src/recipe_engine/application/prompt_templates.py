# =========================
# FILE: recipe_engine/application/prompt_templates.py
# =========================
from __future__ import annotations

from recipe_engine.application.prompts import ChoiceOption, ChoiceRequest

USE_EXISTING = "use_existing"
CREATE_NEW = "create_new"
REPLACE = "replace"
RENAME = "rename"
CANCEL = "cancel"

VARIANT_LABEL = "variant"


def similar_ingredient(entered: str, found: str) -> ChoiceRequest:
    return ChoiceRequest(
        kind="similar_ingredient",
        title="Similar ingredient found",
        message=f'You entered "{entered}". An ingredient named "{found}" already exists. Use it, or create a new one?',
        options=(
            ChoiceOption(USE_EXISTING, "Use existing"),
            ChoiceOption(CREATE_NEW, "Create new", style="destructive"),
        ),
    )


def duplicate_dish(name: str) -> ChoiceRequest:
    return ChoiceRequest(
        kind="duplicate_dish",
        title="Duplicate name",
        message=f'A dish named "{name}" already exists. Replace it?',
        options=(
            ChoiceOption(REPLACE, "Replace"),
            ChoiceOption(CANCEL, "Cancel", style="cancel"),
        ),
    )


def duplicate_preparation(name: str) -> ChoiceRequest:
    return ChoiceRequest(
        kind="duplicate_preparation",
        title="Duplicate name",
        message=f'A preparation named "{name}" already exists with different ingredients or directions.',
        options=(
            ChoiceOption(REPLACE, "Replace"),
            ChoiceOption(RENAME, "Rename"),
            ChoiceOption(CANCEL, "Cancel", style="cancel"),
        ),
    )


def renamed_preparation(name: str, parent_dish_name: str | None) -> str:
    suffix = (parent_dish_name or "").strip() or VARIANT_LABEL
    return f"{name} ({suffix})"
