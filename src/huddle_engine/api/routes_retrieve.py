"""Context retrieval endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from huddle_engine.api.dependencies import get_retriever
from huddle_engine.api.rate_limiter import current_owner
from huddle_engine.models.payloads import to_retrieve_response
from huddle_engine.models.schemas import RetrieveRequest, RetrieveResponse
from huddle_engine.retrieval.context_retriever import ContextRetriever

router = APIRouter()


@router.post("/retrieve", response_model=RetrieveResponse)
async def retrieve(
    request: RetrieveRequest,
    retriever: ContextRetriever = Depends(get_retriever),
    owner_id: str = Depends(current_owner),
) -> RetrieveResponse:
    bundle = await retriever.retrieve(request.query, owner_id, request.limit)
    return to_retrieve_response(bundle)
