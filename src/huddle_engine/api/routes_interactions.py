"""Interaction persistence endpoints: save, list, and final-reply updates."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from huddle_engine.api.dependencies import get_embedder, get_interaction_store, get_settings
from huddle_engine.api.rate_limiter import current_owner
from huddle_engine.config.settings import Settings
from huddle_engine.exceptions import PersistenceError
from huddle_engine.models.domain import Interaction
from huddle_engine.models.payloads import to_interaction_out
from huddle_engine.models.schemas import (
    FinalReplyUpdate,
    FinalReplyUpdateResponse,
    InteractionCreate,
    InteractionOut,
    InteractionPage,
)
from huddle_engine.observability.logger import get_logger
from huddle_engine.protocols.embedder import Embedder
from huddle_engine.storage.interaction_store import SQLiteInteractionStore

logger = get_logger("routes_interactions")

router = APIRouter(prefix="/interactions")


@router.post("", response_model=InteractionOut, status_code=status.HTTP_201_CREATED)
async def save_interaction(
    body: InteractionCreate,
    store: SQLiteInteractionStore = Depends(get_interaction_store),
    embedder: Embedder = Depends(get_embedder),
    owner_id: str = Depends(current_owner),
) -> InteractionOut:
    interaction = Interaction(owner_id=owner_id, **body.model_dump())
    try:
        interaction.embedding = await embedder.embed_query(interaction.search_text)
    except Exception as e:
        # Saved without a vector: reachable by keyword fallback only.
        logger.warning("interaction_embedding_failed", owner_id=owner_id, error=str(e))

    try:
        stored = await store.save(interaction)
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return to_interaction_out(stored)


@router.get("", response_model=InteractionPage)
async def list_interactions(
    page: int = Query(default=0, ge=0),
    page_size: int | None = Query(default=None, ge=1, le=100),
    store: SQLiteInteractionStore = Depends(get_interaction_store),
    settings: Settings = Depends(get_settings),
    owner_id: str = Depends(current_owner),
) -> InteractionPage:
    size = page_size or settings.interaction_page_size
    items, has_more = await store.list_recent(owner_id, page, size)
    return InteractionPage(
        items=[to_interaction_out(i) for i in items],
        page=page,
        page_size=size,
        has_more=has_more,
    )


@router.patch("/{interaction_id}/final-reply", response_model=FinalReplyUpdateResponse)
async def update_final_reply(
    interaction_id: str,
    body: FinalReplyUpdate,
    store: SQLiteInteractionStore = Depends(get_interaction_store),
    owner_id: str = Depends(current_owner),
) -> FinalReplyUpdateResponse:
    try:
        updated = await store.update_final_reply(
            owner_id, interaction_id, body.final_reply, body.selected_tone
        )
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))
    if not updated:
        raise HTTPException(status_code=404, detail="Interaction not found")
    return FinalReplyUpdateResponse(updated=True)
