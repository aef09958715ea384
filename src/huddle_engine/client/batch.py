"""Sequential generation over a small batch of screenshots."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from huddle_engine.client.orchestrator import GenerationOrchestrator, Sleep
from huddle_engine.generation.sanitize import sanitize_human_reply
from huddle_engine.models.schemas import DocumentKnowledge, PastHuddle
from huddle_engine.observability.logger import get_logger

logger = get_logger("batch")

BATCH_LIMIT = 3
FALLBACK_SCREENSHOT_TEXT = (
    "Describe what you see in the screenshot or paste context from the huddle "
    "so we can tailor the reply."
)
PLACEHOLDER_DRAFT = "test"
PLACEHOLDER_DRAFT_EXPANSION = (
    "No explicit draft provided. Generate the best possible reply using the screenshot "
    "context plus any available document knowledge or past huddles. Match the user's usual style."
)


class BatchStatus(str, Enum):
    READY = "ready"
    NEEDS_DRAFT = "needs-draft"
    GENERATING = "generating"
    DONE = "done"
    ERROR = "error"


@dataclass
class BatchItem:
    item_id: str
    draft: str = ""
    extracted_text: str = ""
    tone: str = "none"
    reply: str = ""
    status: BatchStatus = BatchStatus.READY
    past_huddles: list[PastHuddle] = field(default_factory=list)
    documents: list[DocumentKnowledge] = field(default_factory=list)
    error: str | None = None


def draft_for_generation(draft: str) -> str:
    if draft.strip().lower() == PLACEHOLDER_DRAFT:
        return PLACEHOLDER_DRAFT_EXPANSION
    return draft


async def generate_item(
    orchestrator: GenerationOrchestrator,
    item: BatchItem,
    is_regeneration: bool = False,
    outer_attempts: int = 2,
    outer_delay_seconds: float = 0.25,
    sleep: Sleep = asyncio.sleep,
) -> BatchItem:
    """Generate one item in place. Never raises; failures land in ``item.error``."""
    if not item.draft.strip():
        item.status = BatchStatus.NEEDS_DRAFT
        return item

    item.status = BatchStatus.GENERATING
    item.error = None
    if not is_regeneration:
        item.reply = ""

    def on_token(partial: str) -> None:
        item.reply = sanitize_human_reply(partial)

    result = None
    for n in range(1, outer_attempts + 1):
        try:
            result = await orchestrator.generate_reply(
                item.extracted_text or FALLBACK_SCREENSHOT_TEXT,
                draft_for_generation(item.draft),
                is_regeneration=is_regeneration,
                existing_documents=item.documents,
                existing_interactions=item.past_huddles,
                on_token=on_token,
            )
        except Exception as e:
            logger.error("batch_item_generation_raised", item_id=item.item_id, error=str(e))
            result = None
        if result is not None:
            break
        if n == 1:
            await sleep(outer_delay_seconds)

    if result is None:
        item.status = BatchStatus.ERROR
        item.error = "Generation failed"
        return item

    item.reply = sanitize_human_reply(result.reply, result.slang_address_terms)
    item.past_huddles = result.past_huddles
    item.documents = result.document_knowledge
    item.status = BatchStatus.DONE
    logger.info(
        "batch_item_done",
        item_id=item.item_id,
        huddles=len(result.past_huddles),
        documents=len(result.document_knowledge),
        outcome=result.outcome.value,
    )
    return item


async def generate_all(
    orchestrator: GenerationOrchestrator,
    items: Sequence[BatchItem],
    pause_seconds: float = 0.8,
    sleep: Sleep = asyncio.sleep,
) -> list[BatchItem]:
    """Generate items one at a time with a fixed pause between them.

    Items already done or in flight are skipped. A failed item is marked
    and the batch moves on.
    """
    for item in items:
        if item.status in (BatchStatus.DONE, BatchStatus.GENERATING):
            continue
        await generate_item(orchestrator, item, sleep=sleep)
        await sleep(pause_seconds)
    return list(items)
