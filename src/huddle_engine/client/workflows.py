"""Multi-step client workflows built from the service client and orchestrator."""

from __future__ import annotations

from dataclasses import dataclass

from huddle_engine.client.orchestrator import GenerationOrchestrator, TokenCallback
from huddle_engine.client.service_client import ReplyServiceClient
from huddle_engine.generation.sanitize import sanitize_human_reply
from huddle_engine.models.domain import GenerationResult
from huddle_engine.models.schemas import InteractionCreate, InteractionOut


@dataclass
class TonedRegeneration:
    adjusted_draft: str
    result: GenerationResult | None


async def apply_tone_to_draft_and_regenerate(
    client: ReplyServiceClient,
    orchestrator: GenerationOrchestrator,
    screenshot_text: str,
    user_draft: str,
    tone: str,
    on_token: TokenCallback | None = None,
) -> TonedRegeneration:
    """Tone the draft, then run a fresh first generation from it with no prior context."""
    adjusted_draft = await client.adjust_tone(user_draft, tone) or user_draft
    result = await orchestrator.generate_reply(
        screenshot_text,
        adjusted_draft,
        is_regeneration=False,
        existing_documents=[],
        existing_interactions=[],
        on_token=on_token,
    )
    return TonedRegeneration(adjusted_draft=adjusted_draft, result=result)


async def save_generated_reply(
    client: ReplyServiceClient,
    screenshot_text: str,
    user_draft: str,
    result: GenerationResult,
    tone: str = "none",
    principles: str = "",
) -> InteractionOut | None:
    """Persist a finished generation. Degraded (sentinel) results are not saved."""
    if result.degraded:
        return None
    reply = sanitize_human_reply(result.reply, result.slang_address_terms)
    return await client.save_interaction(
        InteractionCreate(
            screenshot_text=screenshot_text,
            user_draft=user_draft,
            generated_reply=reply,
            selected_tone=tone,
            principles=principles,
        )
    )
