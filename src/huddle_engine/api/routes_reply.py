"""Streamed reply generation endpoint (newline-delimited JSON frames)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse

from huddle_engine.api.dependencies import get_llm, get_reply_streamer
from huddle_engine.api.rate_limiter import current_owner
from huddle_engine.generation.reply_streamer import ReplyStreamer
from huddle_engine.models.schemas import ReplyRequest
from huddle_engine.observability.logger import get_logger
from huddle_engine.protocols.llm import LLMProvider

logger = get_logger("routes_reply")

router = APIRouter()


@router.post("/reply/stream")
async def reply_stream(
    request: ReplyRequest,
    streamer: ReplyStreamer = Depends(get_reply_streamer),
    llm: LLMProvider = Depends(get_llm),
    owner_id: str = Depends(current_owner),
) -> StreamingResponse:
    if not getattr(llm, "configured", True):
        logger.error("reply_llm_not_configured", owner_id=owner_id)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Reply generation is not configured",
        )

    return StreamingResponse(
        streamer.stream(request, owner_id),
        media_type="application/x-ndjson",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",
        },
    )
