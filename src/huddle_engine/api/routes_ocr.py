"""OCR proxy endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from huddle_engine.api.dependencies import get_ocr_client
from huddle_engine.api.rate_limiter import current_owner
from huddle_engine.models.schemas import OCRRequest, OCRResponse
from huddle_engine.ocr.vision_client import VisionOCRClient

router = APIRouter()


@router.post("/ocr", response_model=OCRResponse)
async def extract_text(
    body: OCRRequest,
    client: VisionOCRClient = Depends(get_ocr_client),
    _owner_id: str = Depends(current_owner),
) -> OCRResponse:
    result = await client.extract_text(body.image_data)
    return OCRResponse(
        text=result.text,
        success=result.success,
        processing_time=result.processing_time,
        error=result.error,
    )
