# recipe_engine/api/routes.py
from __future__ import annotations

import logging
from typing import Any, Tuple

from fastapi import APIRouter, Depends, HTTPException, Request

from recipe_engine.api.schemas import (
    ChoiceIn,
    ConvertRequest,
    ConvertResponse,
    DisplayRequest,
    DisplayResponse,
    FingerprintRequest,
    FingerprintResponse,
    MapRequest,
    MapResponse,
    NormalizeRequest,
    NormalizeResponse,
    PreparationSaveRequest,
    RecipeSaveRequest,
    ResolveRequest,
    ResolveResponse,
    ScaleDisplayRequest,
    ScaleDisplayResponse,
    ScaleEditRequest,
    ScaleEditResponse,
    UnitOut,
)
from recipe_engine.application.component_mapper import ComponentMapper
from recipe_engine.application.duplicate_resolver import DuplicateResolver
from recipe_engine.application.prompts import ChoicePrompt
from recipe_engine.application.scaling import (
    apply_displayed_edit,
    compute_display_amount,
    recipe_scale,
)
from recipe_engine.application.usecases import ResolvePreparationSave, ResolveRecipeSave
from recipe_engine.core.config import FINGERPRINT_DIGEST, ResolutionPolicy
from recipe_engine.domain.entities import LeafComponent, ParsedComponent, component_from_dict
from recipe_engine.domain.repositories import CatalogStore
from recipe_engine.infrastructure.session_store import InMemoryResolutionStore
from recipe_engine.services.fingerprint import fingerprint
from recipe_engine.services.quantities import auto_scale_for_display, normalize_to_base_unit, parse_amount
from recipe_engine.services.units import convert, find_unit

log = logging.getLogger("api.routes")
router = APIRouter()


# -------------------------
# Dependencies via app.state
# -------------------------
def get_catalog(request: Request) -> CatalogStore:
    catalog = getattr(request.app.state, "catalog", None)
    if catalog is None:
        raise RuntimeError("catalog not initialized. Check app startup wiring.")
    return catalog


def get_resolutions(request: Request) -> InMemoryResolutionStore:
    store = getattr(request.app.state, "resolutions", None)
    if store is None:
        raise RuntimeError("resolutions store not initialized. Check app startup wiring.")
    return store


def get_policy(request: Request) -> ResolutionPolicy:
    return getattr(request.app.state, "policy", None) or ResolutionPolicy()


def get_digest(request: Request) -> str:
    return getattr(request.app.state, "fingerprint_digest", FINGERPRINT_DIGEST)


# -------------------------
# Units & quantities (pure)
# -------------------------
@router.get("/units", response_model=list[UnitOut])
async def list_units(catalog: CatalogStore = Depends(get_catalog)) -> Any:
    try:
        units = await catalog.list_units()
    except Exception as e:
        log.exception("Listing units failed")
        raise HTTPException(status_code=500, detail=str(e))
    return [u.to_dict() for u in units]


@router.post("/quantities/convert", response_model=ConvertResponse)
def convert_quantity(req: ConvertRequest) -> Any:
    return {"amount": convert(req.amount, req.from_unit, req.to_unit)}


@router.post("/quantities/display", response_model=DisplayResponse)
def display_quantity(req: DisplayRequest) -> Any:
    shown = auto_scale_for_display(req.amount, req.unit, req.item)
    return {"amount": shown.amount, "unit": shown.unit}


@router.post("/quantities/normalize", response_model=NormalizeResponse)
def normalize_quantity(req: NormalizeRequest) -> Any:
    n = normalize_to_base_unit(req.amount, req.unit)
    return {"amount": n.amount, "unit": n.unit_abbr}


@router.post("/fingerprint", response_model=FingerprintResponse)
def fingerprint_components(req: FingerprintRequest) -> Any:
    comps = [c.model_dump() for c in req.components]
    return {"fingerprint": fingerprint(comps, req.instructions, digest=req.digest)}


# -------------------------
# Scaling
# -------------------------
@router.post("/scale/display", response_model=ScaleDisplayResponse)
def scale_display(req: ScaleDisplayRequest) -> Any:
    scale = recipe_scale(req.base_servings, req.target_servings)
    amount = compute_display_amount(req.base_amount, scale, req.prep_scale)
    shown = auto_scale_for_display(amount, req.unit, req.item)
    return {"scale": scale, "amount": amount, "display": {"amount": shown.amount, "unit": shown.unit}}


@router.post("/scale/edit", response_model=ScaleEditResponse)
async def scale_edit(req: ScaleEditRequest, catalog: CatalogStore = Depends(get_catalog)) -> Any:
    scale = recipe_scale(req.base_servings, req.target_servings)
    try:
        units = await catalog.list_units()
    except Exception:
        log.exception("Listing units failed; unit id left unchanged")
        units = []
    line = LeafComponent(key="edit", name="", ingredient_id=None, amount="", unit_id=req.unit_id)
    edited = apply_displayed_edit(line, req.edited_amount, req.unit, units, scale, req.prep_scale)
    stored = find_unit(units, edited.unit_id)
    return {
        "base_amount": parse_amount(edited.amount),
        "unit": (stored.abbreviation if stored else None) or req.unit or "",
        "unit_id": edited.unit_id,
    }


# -------------------------
# Import mapping
# -------------------------
@router.post("/import/map", response_model=MapResponse)
async def map_components(req: MapRequest, catalog: CatalogStore = Depends(get_catalog)) -> Any:
    parsed = [ParsedComponent.from_dict(c.model_dump()) for c in req.components]
    try:
        units = await catalog.list_units()
        mapped = await ComponentMapper(catalog).map(parsed, units)
    except Exception as e:
        log.exception("Processing /import/map error")
        raise HTTPException(status_code=500, detail=str(e))
    return {"components": [c.to_dict() for c in mapped]}


# -------------------------
# Interactive resolution
# -------------------------
def _to_response(request_id: str, event: Tuple[str, Any]) -> Any:
    kind, payload = event
    if kind == "choice":
        return {"request_id": request_id, "status": "pending", "choice": payload.to_dict()}
    if kind == "outcome":
        return {"request_id": request_id, "status": "resolved", "outcome": payload.to_dict()}
    raise HTTPException(status_code=500, detail=str(payload))


@router.post("/resolve", response_model=ResolveResponse)
async def resolve(
    req: ResolveRequest,
    catalog: CatalogStore = Depends(get_catalog),
    resolutions: InMemoryResolutionStore = Depends(get_resolutions),
    policy: ResolutionPolicy = Depends(get_policy),
) -> Any:
    if not req.name.strip():
        raise HTTPException(status_code=400, detail="name is required")

    async def runner(prompt: ChoicePrompt) -> Any:
        resolver = DuplicateResolver(catalog, prompt, policy)
        if req.kind == "ingredient":
            return await resolver.resolve_ingredient(req.name)
        if req.kind == "dish":
            return await resolver.resolve_dish(req.name)
        return await resolver.resolve_preparation(req.name, req.fingerprint, req.parent_dish_name)

    request_id, event = await resolutions.start(runner)
    return _to_response(request_id, event)


@router.post("/resolve/recipe", response_model=ResolveResponse)
async def resolve_recipe_save(
    req: RecipeSaveRequest,
    catalog: CatalogStore = Depends(get_catalog),
    resolutions: InMemoryResolutionStore = Depends(get_resolutions),
    policy: ResolutionPolicy = Depends(get_policy),
    digest: str = Depends(get_digest),
) -> Any:
    if not req.dish_name.strip():
        raise HTTPException(status_code=400, detail="dish_name is required")
    components = [component_from_dict(c.model_dump()) for c in req.components]

    async def runner(prompt: ChoicePrompt) -> Any:
        save = ResolveRecipeSave(DuplicateResolver(catalog, prompt, policy), digest)
        return await save(req.dish_name, components)

    request_id, event = await resolutions.start(runner)
    return _to_response(request_id, event)


@router.post("/resolve/preparation", response_model=ResolveResponse)
async def resolve_preparation_save(
    req: PreparationSaveRequest,
    catalog: CatalogStore = Depends(get_catalog),
    resolutions: InMemoryResolutionStore = Depends(get_resolutions),
    policy: ResolutionPolicy = Depends(get_policy),
    digest: str = Depends(get_digest),
) -> Any:
    if not req.preparation.name.strip():
        raise HTTPException(status_code=400, detail="preparation name is required")
    preparation = component_from_dict({**req.preparation.model_dump(), "is_preparation": True})

    async def runner(prompt: ChoicePrompt) -> Any:
        save = ResolvePreparationSave(DuplicateResolver(catalog, prompt, policy), digest)
        return await save(preparation)

    request_id, event = await resolutions.start(runner)
    return _to_response(request_id, event)


@router.post("/resolve/{request_id}/choice", response_model=ResolveResponse)
async def resolve_choice(
    request_id: str,
    req: ChoiceIn,
    resolutions: InMemoryResolutionStore = Depends(get_resolutions),
) -> Any:
    try:
        event = await resolutions.answer(request_id, req.choice)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _to_response(request_id, event)
