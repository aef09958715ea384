"""Core domain objects used throughout the system."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from huddle_engine.models.schemas import DocumentKnowledge, PastHuddle


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Interaction:
    owner_id: str
    screenshot_text: str
    user_draft: str
    generated_reply: str
    final_reply: str | None = None
    selected_tone: str = "none"
    principles: str = ""
    interaction_id: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    embedding: list[float] | None = None

    @property
    def effective_reply(self) -> str:
        """The reply shown downstream: the final reply once one exists."""
        return self.final_reply or self.generated_reply

    @property
    def search_text(self) -> str:
        return f"{self.screenshot_text} {self.user_draft}".strip()


@dataclass
class DocumentChunk:
    chunk_id: str
    owner_id: str
    document_name: str
    text: str
    chunk_index: int
    metadata: dict = field(default_factory=dict)
    embedding: list[float] | None = None
    created_at: datetime = field(default_factory=utc_now)


@dataclass
class RetrievalMatch:
    item: Interaction | DocumentChunk
    similarity: float
    source_method: str  # "vector", "keyword"

    @property
    def created_at(self) -> datetime:
        return self.item.created_at or datetime.min.replace(tzinfo=timezone.utc)


@dataclass
class RetrievalBundle:
    interactions: list[RetrievalMatch] = field(default_factory=list)
    documents: list[RetrievalMatch] = field(default_factory=list)


@dataclass
class StyleProfile:
    owner_id: str
    huddle_count: int
    avg_sentence_length: int
    common_topics: list[str]
    address_terms: list[str]
    updated_at: datetime = field(default_factory=utc_now)


@dataclass
class OCRResult:
    text: str
    success: bool
    processing_time: float
    error: str | None = None


class GenerationOutcome(str, Enum):
    SUCCESS = "success"
    SENTINEL = "sentinel"
    EXHAUSTED_RETRIES = "exhausted_retries"
    AUTO_REGENERATED = "auto_regenerated"


@dataclass
class GenerationAttempt:
    """Mutable state of one pass of the generation state machine."""

    depth: int
    attempts: int = 0
    accumulated_text: str = ""
    meta_received: bool = False
    past_huddles: list[PastHuddle] = field(default_factory=list)
    document_knowledge: list[DocumentKnowledge] = field(default_factory=list)
    slang_address_terms: list[str] | None = None
    outcome: GenerationOutcome | None = None

    def reset_stream(self) -> None:
        self.accumulated_text = ""


@dataclass
class GenerationResult:
    reply: str
    past_huddles: list[PastHuddle]
    document_knowledge: list[DocumentKnowledge]
    outcome: GenerationOutcome
    attempts: int
    slang_address_terms: list[str] | None = None

    @property
    def degraded(self) -> bool:
        """True when the reply is the sentinel rather than real content."""
        return self.outcome in (GenerationOutcome.SENTINEL, GenerationOutcome.EXHAUSTED_RETRIES)
