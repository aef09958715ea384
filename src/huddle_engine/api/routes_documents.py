"""Document ingestion endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from huddle_engine.api.dependencies import get_ingestor
from huddle_engine.api.rate_limiter import current_owner
from huddle_engine.exceptions import ConfigurationError, IngestionError, PersistenceError
from huddle_engine.ingestion.pipeline import DocumentIngestor
from huddle_engine.models.schemas import DocumentIngestRequest, IngestResponse

router = APIRouter()


@router.post("/documents", response_model=IngestResponse)
async def ingest_document(
    body: DocumentIngestRequest,
    ingestor: DocumentIngestor = Depends(get_ingestor),
    owner_id: str = Depends(current_owner),
) -> IngestResponse:
    try:
        return await ingestor.ingest(owner_id, body.document_name, body.text, body.metadata)
    except ConfigurationError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    except IngestionError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))
