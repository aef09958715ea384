"""Pydantic models for API request/response serialization."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class PastHuddle(BaseModel):
    id: str
    screenshot_text: str
    user_draft: str
    generated_reply: str
    final_reply: str | None = None
    selected_tone: str = "none"
    created_at: datetime | None = None
    similarity: float

    @property
    def reply(self) -> str:
        return self.final_reply or self.generated_reply


class DocumentKnowledge(BaseModel):
    id: str
    document_name: str
    content_chunk: str
    chunk_index: int = 0
    similarity: float
    metadata: dict = Field(default_factory=dict)


class RetrieveRequest(BaseModel):
    query: str
    limit: int = Field(default=3, ge=1, le=20)


class RetrieveResponse(BaseModel):
    interactions: list[PastHuddle]
    documents: list[DocumentKnowledge]


class ReplyRequest(BaseModel):
    screenshot_text: str = ""
    user_draft: str
    principles: str = ""
    is_regeneration: bool = False
    # Set when the caller already ran retrieval, even if it found nothing.
    context_resolved: bool = False
    past_huddles: list[PastHuddle] = Field(default_factory=list)
    document_knowledge: list[DocumentKnowledge] = Field(default_factory=list)


class ToneRequest(BaseModel):
    text: str
    tone: str = "none"


class ToneResponse(BaseModel):
    reply: str
    adjusted: bool


class InteractionCreate(BaseModel):
    screenshot_text: str = ""
    user_draft: str
    generated_reply: str = Field(min_length=1)
    final_reply: str | None = None
    selected_tone: str = "none"
    principles: str = ""


class InteractionOut(BaseModel):
    id: str
    screenshot_text: str
    user_draft: str
    generated_reply: str
    final_reply: str | None = None
    selected_tone: str
    principles: str = ""
    created_at: datetime
    updated_at: datetime


class InteractionPage(BaseModel):
    items: list[InteractionOut]
    page: int
    page_size: int
    has_more: bool


class FinalReplyUpdate(BaseModel):
    final_reply: str
    selected_tone: str | None = None


class FinalReplyUpdateResponse(BaseModel):
    updated: bool


class DocumentIngestRequest(BaseModel):
    document_name: str = Field(min_length=1)
    text: str
    metadata: dict = Field(default_factory=dict)


class IngestResponse(BaseModel):
    document_name: str
    chunks_created: int
    status: str


class OCRRequest(BaseModel):
    image_data: str  # base64 or data URL


class OCRResponse(BaseModel):
    text: str
    success: bool
    processing_time: float
    error: str | None = None


class StyleAnalysis(BaseModel):
    huddle_count: int
    avg_sentence_length: int
    common_topics: list[str]
    address_terms: list[str] = Field(default_factory=list)


class StyleProfileOut(StyleAnalysis):
    updated_at: datetime


class HealthResponse(BaseModel):
    status: str
    interaction_count: int
    chunk_count: int
