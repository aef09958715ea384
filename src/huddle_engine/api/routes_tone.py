"""Tone adjustment endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from huddle_engine.api.dependencies import get_tone_adjuster
from huddle_engine.api.rate_limiter import current_owner
from huddle_engine.generation.tone import ToneAdjuster
from huddle_engine.models.schemas import ToneRequest, ToneResponse

router = APIRouter()


@router.post("/tone", response_model=ToneResponse)
async def adjust_tone(
    request: ToneRequest,
    adjuster: ToneAdjuster = Depends(get_tone_adjuster),
    _owner_id: str = Depends(current_owner),
) -> ToneResponse:
    reply = await adjuster.adjust(request.text, request.tone)
    return ToneResponse(reply=reply, adjusted=reply != request.text)
