"""Server half of the reply stream: resolve context, then stream meta and token frames."""

from __future__ import annotations

import asyncio
import time
from collections.abc import AsyncIterator

from huddle_engine.config.constants import EMPTY_SCREENSHOT_PLACEHOLDER
from huddle_engine.config.settings import Settings
from huddle_engine.exceptions import GenerationError
from huddle_engine.generation.frames import MetaFrame, TokenFrame, encode_frame
from huddle_engine.generation.prompt_templates import (
    REPLY_PROMPT,
    REPLY_SYSTEM,
    format_document_block,
    format_huddle_block,
    format_principles_block,
    format_style_block,
)
from huddle_engine.models.domain import StyleProfile
from huddle_engine.models.payloads import to_document_knowledge, to_past_huddle
from huddle_engine.models.schemas import DocumentKnowledge, PastHuddle, ReplyRequest
from huddle_engine.observability.logger import get_logger
from huddle_engine.observability.metrics import log_latency
from huddle_engine.protocols.llm import LLMProvider
from huddle_engine.retrieval.context_retriever import ContextRetriever, build_query
from huddle_engine.storage.style_profile_store import SQLiteStyleProfileStore

logger = get_logger("reply_streamer")


def build_reply_prompt(
    request: ReplyRequest,
    past_huddles: list[PastHuddle],
    documents: list[DocumentKnowledge],
    profile: StyleProfile | None,
    sentinel: str,
) -> tuple[str, str]:
    """Return (system, prompt) for one reply generation."""
    system = REPLY_SYSTEM.format(
        style_block=format_style_block(profile),
        document_block=format_document_block(documents),
        huddle_block=format_huddle_block(past_huddles),
        principles_block=format_principles_block(request.principles),
        sentinel=sentinel,
    )
    prompt = REPLY_PROMPT.format(
        screenshot_text=request.screenshot_text.strip() or EMPTY_SCREENSHOT_PLACEHOLDER,
        user_draft=request.user_draft,
    )
    return system, prompt


class ReplyStreamer:
    def __init__(
        self,
        llm: LLMProvider,
        retriever: ContextRetriever,
        style_store: SQLiteStyleProfileStore,
        settings: Settings,
    ) -> None:
        self._llm = llm
        self._retriever = retriever
        self._style_store = style_store
        self._settings = settings

    async def resolve_context(
        self, request: ReplyRequest, owner_id: str
    ) -> tuple[list[PastHuddle], list[DocumentKnowledge]]:
        """Use the caller's context when supplied; retrieve only on a bare first generation."""
        if (
            request.is_regeneration
            or request.context_resolved
            or request.past_huddles
            or request.document_knowledge
        ):
            return list(request.past_huddles), list(request.document_knowledge)

        bundle = await self._retriever.retrieve(
            build_query(request.screenshot_text, request.user_draft),
            owner_id,
            self._settings.retrieval_limit,
        )
        return (
            [to_past_huddle(m) for m in bundle.interactions],
            [to_document_knowledge(m) for m in bundle.documents],
        )

    async def stream(self, request: ReplyRequest, owner_id: str) -> AsyncIterator[bytes]:
        start = time.monotonic()
        past_huddles, documents = await self.resolve_context(request, owner_id)
        profile = await self._load_profile(owner_id)

        yield encode_frame(
            MetaFrame(
                past_huddles=past_huddles,
                document_knowledge=documents,
                slang_address_terms=profile.address_terms if profile else None,
            )
        )

        system, prompt = build_reply_prompt(
            request, past_huddles, documents, profile, self._settings.generation_sentinel
        )
        emitted = 0
        try:
            async for text in self._bounded_tokens(prompt, system):
                emitted += 1
                yield encode_frame(TokenFrame(text=text))
        except (GenerationError, TimeoutError) as e:
            if emitted:
                logger.error("reply_stream_aborted", owner_id=owner_id, tokens=emitted, error=str(e))
                raise
            logger.warning("reply_generation_failed", owner_id=owner_id, error=str(e))

        if not emitted:
            yield encode_frame(TokenFrame(text=self._settings.generation_sentinel))

        log_latency(
            "reply_stream",
            (time.monotonic() - start) * 1000,
            owner_id=owner_id,
            tokens=emitted,
            is_regeneration=request.is_regeneration,
        )

    async def _bounded_tokens(self, prompt: str, system: str) -> AsyncIterator[str]:
        """LLM tokens, aborted once the wall-clock budget is spent."""
        deadline = time.monotonic() + self._settings.generation_stream_timeout_seconds
        tokens = self._llm.generate_stream(
            prompt,
            system=system,
            temperature=self._settings.reply_temperature,
            max_tokens=self._settings.reply_max_tokens,
        ).__aiter__()
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise TimeoutError("reply stream exceeded its time budget")
            try:
                text = await asyncio.wait_for(anext(tokens), remaining)
            except StopAsyncIteration:
                return
            if text:
                yield text

    async def _load_profile(self, owner_id: str) -> StyleProfile | None:
        try:
            return await self._style_store.get(owner_id)
        except Exception as e:
            logger.warning("style_profile_unavailable", owner_id=owner_id, error=str(e))
            return None
