"""Style profile endpoints: analyze saved drafts, then confirm the profile."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from huddle_engine.api.dependencies import get_interaction_store, get_style_store
from huddle_engine.api.rate_limiter import current_owner
from huddle_engine.models.domain import StyleProfile
from huddle_engine.models.schemas import StyleAnalysis, StyleProfileOut
from huddle_engine.storage.interaction_store import SQLiteInteractionStore
from huddle_engine.storage.style_profile_store import SQLiteStyleProfileStore
from huddle_engine.style.analyzer import analyze_style

router = APIRouter(prefix="/style")


@router.post("/analyze", response_model=StyleAnalysis)
async def analyze(
    store: SQLiteInteractionStore = Depends(get_interaction_store),
    owner_id: str = Depends(current_owner),
) -> StyleAnalysis:
    return analyze_style(await store.all_drafts(owner_id))


@router.put("", response_model=StyleProfileOut)
async def confirm(
    body: StyleAnalysis,
    store: SQLiteStyleProfileStore = Depends(get_style_store),
    owner_id: str = Depends(current_owner),
) -> StyleProfileOut:
    profile = await store.upsert(StyleProfile(owner_id=owner_id, **body.model_dump()))
    return StyleProfileOut(**body.model_dump(), updated_at=profile.updated_at)
