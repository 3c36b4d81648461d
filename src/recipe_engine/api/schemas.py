# =========================
# FILE: recipe_engine/api/schemas.py
# =========================
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field


class UnitOut(BaseModel):
    id: str
    name: str
    abbreviation: Optional[str] = None
    measure_kind: Optional[str] = None


class ConvertRequest(BaseModel):
    amount: float
    from_unit: str = Field(..., json_schema_extra={"example": "kg"})
    to_unit: str = Field(..., json_schema_extra={"example": "g"})


class ConvertResponse(BaseModel):
    amount: float


class DisplayRequest(BaseModel):
    amount: Optional[Union[float, str]] = None
    unit: Optional[str] = None
    item: Optional[str] = None


class DisplayResponse(BaseModel):
    amount: str
    unit: str


class NormalizeRequest(BaseModel):
    amount: Optional[Union[float, str]] = None
    unit: Optional[str] = None


class NormalizeResponse(BaseModel):
    amount: Optional[float] = None
    unit: str


class FingerprintComponent(BaseModel):
    name: str
    amount: Optional[Union[float, str]] = None
    unit_id: Optional[str] = None
    ingredient_id: Optional[str] = None


class FingerprintRequest(BaseModel):
    components: List[FingerprintComponent] = Field(default_factory=list)
    instructions: Optional[Union[str, List[str]]] = None
    digest: Optional[Literal["sha1"]] = None


class FingerprintResponse(BaseModel):
    fingerprint: str


class ScaleDisplayRequest(BaseModel):
    base_amount: Optional[Union[float, str]] = None
    base_servings: Optional[float] = None
    target_servings: Optional[float] = None
    prep_scale: float = 1.0
    unit: Optional[str] = None
    item: Optional[str] = None


class ScaleDisplayResponse(BaseModel):
    scale: float
    amount: Optional[float] = None
    display: DisplayResponse


class ScaleEditRequest(BaseModel):
    edited_amount: Optional[Union[float, str]] = None
    unit: Optional[str] = None
    unit_id: Optional[str] = None  # stored unit of the edited line
    base_servings: Optional[float] = None
    target_servings: Optional[float] = None
    prep_scale: float = 1.0


class ScaleEditResponse(BaseModel):
    base_amount: Optional[float] = None
    unit: str
    unit_id: Optional[str] = None


class ParsedComponentIn(BaseModel):
    name: str
    amount: Optional[Union[float, str]] = None
    unit: Optional[str] = None
    item: Optional[str] = None
    ingredient_type: str = "ingredient"
    instructions: List[str] = Field(default_factory=list)
    components: List["ParsedComponentIn"] = Field(default_factory=list)


class MapRequest(BaseModel):
    components: List[ParsedComponentIn] = Field(default_factory=list)


class MapResponse(BaseModel):
    components: List[Dict[str, Any]]


class ComponentIn(BaseModel):
    key: str = ""
    name: str
    ingredient_id: Optional[str] = None
    amount: Optional[Union[float, str]] = None
    unit_id: Optional[str] = None
    matched: bool = False
    item: Optional[str] = None
    is_preparation: bool = False
    sub_components: List["ComponentIn"] = Field(default_factory=list)
    instructions: List[str] = Field(default_factory=list)
    prep_unit_id: Optional[str] = None
    prep_amount: Optional[str] = None


class RecipeSaveRequest(BaseModel):
    dish_name: str
    components: List[ComponentIn] = Field(default_factory=list)


class PreparationSaveRequest(BaseModel):
    preparation: ComponentIn


class ResolveRequest(BaseModel):
    kind: Literal["ingredient", "dish", "preparation"]
    name: str
    fingerprint: Optional[str] = None
    parent_dish_name: Optional[str] = None


class ChoiceIn(BaseModel):
    choice: str


class ResolveResponse(BaseModel):
    request_id: str
    status: Literal["pending", "resolved"]
    choice: Optional[Dict[str, Any]] = None
    outcome: Optional[Dict[str, Any]] = None


ParsedComponentIn.model_rebuild()
ComponentIn.model_rebuild()
