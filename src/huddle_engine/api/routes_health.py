"""Health check endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from huddle_engine.api.dependencies import get_document_store, get_interaction_store
from huddle_engine.models.schemas import HealthResponse
from huddle_engine.storage.document_store import SQLiteDocumentStore
from huddle_engine.storage.interaction_store import SQLiteInteractionStore

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(
    interaction_store: SQLiteInteractionStore = Depends(get_interaction_store),
    document_store: SQLiteDocumentStore = Depends(get_document_store),
) -> HealthResponse:
    return HealthResponse(
        status="ok",
        interaction_count=await interaction_store.count(),
        chunk_count=await document_store.count_chunks(),
    )
