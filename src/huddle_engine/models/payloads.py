"""Conversions between domain objects and their wire payloads."""

from __future__ import annotations

from huddle_engine.models.domain import (
    DocumentChunk,
    Interaction,
    RetrievalBundle,
    RetrievalMatch,
)
from huddle_engine.models.schemas import (
    DocumentKnowledge,
    InteractionOut,
    PastHuddle,
    RetrieveResponse,
)


def to_past_huddle(match: RetrievalMatch) -> PastHuddle:
    item: Interaction = match.item
    return PastHuddle(
        id=item.interaction_id,
        screenshot_text=item.screenshot_text,
        user_draft=item.user_draft,
        generated_reply=item.generated_reply,
        final_reply=item.final_reply,
        selected_tone=item.selected_tone,
        created_at=item.created_at,
        similarity=match.similarity,
    )


def to_document_knowledge(match: RetrievalMatch) -> DocumentKnowledge:
    item: DocumentChunk = match.item
    return DocumentKnowledge(
        id=item.chunk_id,
        document_name=item.document_name,
        content_chunk=item.text,
        chunk_index=item.chunk_index,
        similarity=match.similarity,
        metadata=item.metadata,
    )


def to_retrieve_response(bundle: RetrievalBundle) -> RetrieveResponse:
    return RetrieveResponse(
        interactions=[to_past_huddle(m) for m in bundle.interactions],
        documents=[to_document_knowledge(m) for m in bundle.documents],
    )


def to_interaction_out(interaction: Interaction) -> InteractionOut:
    return InteractionOut(
        id=interaction.interaction_id,
        screenshot_text=interaction.screenshot_text,
        user_draft=interaction.user_draft,
        generated_reply=interaction.generated_reply,
        final_reply=interaction.final_reply,
        selected_tone=interaction.selected_tone,
        principles=interaction.principles,
        created_at=interaction.created_at,
        updated_at=interaction.updated_at,
    )
