"""Client-side generation state machine.

One call to ``generate_reply`` runs at most two passes. A pass makes up to
``max_attempts`` streamed calls to the reply service and ends in one of
three ways: real content, the sentinel reply, or exhausted retries. The
last two trigger a single regeneration pass (depth 1) when the caller
allows it; that pass's result is final whatever it contains.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Sequence

from huddle_engine.client.service_client import ReplyServiceClient
from huddle_engine.config.settings import Settings
from huddle_engine.exceptions import ConfigurationError, StreamProtocolError
from huddle_engine.generation.frames import FrameDecoder, MetaFrame, TokenFrame
from huddle_engine.models.domain import GenerationAttempt, GenerationOutcome, GenerationResult
from huddle_engine.models.schemas import DocumentKnowledge, PastHuddle, ReplyRequest
from huddle_engine.observability.logger import get_logger
from huddle_engine.observability.metrics import log_generation_metrics
from huddle_engine.retrieval.context_retriever import build_query

logger = get_logger("orchestrator")

TokenCallback = Callable[[str], None]
Sleep = Callable[[float], Awaitable[None]]

MAX_AUTO_REGENERATE_DEPTH = 1


class GenerationOrchestrator:
    def __init__(
        self,
        client: ReplyServiceClient,
        max_attempts: int = 5,
        retry_delay_seconds: float = 1.0,
        sentinel: str = "generation failed, please regenerate",
        retrieval_limit: int = 3,
        strict_frames: bool = False,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._client = client
        self._max_attempts = max_attempts
        self._retry_delay = retry_delay_seconds
        self._sentinel = sentinel
        self._retrieval_limit = retrieval_limit
        self._strict_frames = strict_frames
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls, client: ReplyServiceClient, settings: Settings, sleep: Sleep = asyncio.sleep
    ) -> GenerationOrchestrator:
        return cls(
            client,
            max_attempts=settings.generation_max_attempts,
            retry_delay_seconds=settings.generation_retry_delay_seconds,
            sentinel=settings.generation_sentinel,
            retrieval_limit=settings.retrieval_limit,
            strict_frames=settings.strict_frames,
            sleep=sleep,
        )

    @property
    def sentinel(self) -> str:
        return self._sentinel

    async def generate_reply(
        self,
        screenshot_text: str,
        user_draft: str,
        is_regeneration: bool = False,
        existing_documents: Sequence[DocumentKnowledge] = (),
        existing_interactions: Sequence[PastHuddle] = (),
        on_token: TokenCallback | None = None,
        allow_auto_regenerate: bool = True,
        principles: str = "",
    ) -> GenerationResult | None:
        """Draft a reply.

        ``None`` means a configuration failure: the client has no base URL or
        token, or the service reports that generation is not configured.
        """
        if not self._client.configured:
            logger.error("orchestrator_not_configured", has_base_url=bool(self._client.base_url))
            return None

        start = time.monotonic()
        past_huddles = list(existing_interactions)
        documents = list(existing_documents)
        if not is_regeneration:
            past_huddles, documents = await self._retrieve(screenshot_text, user_draft)

        depth = 0
        total_attempts = 0
        regenerate = is_regeneration
        auto_regenerate = allow_auto_regenerate
        while True:
            attempt = GenerationAttempt(
                depth=depth, past_huddles=past_huddles, document_knowledge=documents
            )
            request = ReplyRequest(
                screenshot_text=screenshot_text,
                user_draft=user_draft,
                principles=principles,
                is_regeneration=regenerate,
                context_resolved=True,
                past_huddles=past_huddles,
                document_knowledge=documents,
            )
            try:
                await self._run_pass(attempt, request, on_token)
            except ConfigurationError as e:
                logger.error("reply_service_not_configured", depth=depth, error=str(e))
                return None
            total_attempts += attempt.attempts

            if attempt.outcome is GenerationOutcome.SUCCESS or not auto_regenerate:
                break
            if depth >= MAX_AUTO_REGENERATE_DEPTH:
                break
            logger.info(
                "auto_regenerating",
                reason=attempt.outcome.value,
                attempts=attempt.attempts,
                server_context=attempt.meta_received,
            )
            depth += 1
            regenerate = True
            auto_regenerate = False
            past_huddles, documents = attempt.past_huddles, attempt.document_knowledge

        result = self._finish(attempt, total_attempts)
        if result.outcome is not GenerationOutcome.EXHAUSTED_RETRIES and on_token is not None:
            on_token(result.reply)
        log_generation_metrics(
            result.outcome.value,
            total_attempts,
            len(result.reply),
            depth,
            (time.monotonic() - start) * 1000,
        )
        return result

    async def _retrieve(
        self, screenshot_text: str, user_draft: str
    ) -> tuple[list[PastHuddle], list[DocumentKnowledge]]:
        try:
            bundle = await self._client.retrieve(
                build_query(screenshot_text, user_draft), self._retrieval_limit
            )
        except Exception as e:
            logger.warning("client_retrieval_failed", error=str(e))
            return [], []
        return list(bundle.interactions), list(bundle.documents)

    async def _run_pass(
        self,
        attempt: GenerationAttempt,
        request: ReplyRequest,
        on_token: TokenCallback | None,
    ) -> None:
        for n in range(1, self._max_attempts + 1):
            attempt.attempts = n
            attempt.reset_stream()
            try:
                await self._stream_once(attempt, request, on_token)
                reply = attempt.accumulated_text.strip()
                if not reply:
                    raise StreamProtocolError("Stream ended without any reply text")
            except ConfigurationError:
                raise
            except Exception as e:
                logger.warning(
                    "generation_attempt_failed",
                    depth=attempt.depth,
                    attempt=n,
                    max_attempts=self._max_attempts,
                    error=str(e),
                )
                if n == 1 and n < self._max_attempts:
                    await self._sleep(self._retry_delay)
                continue

            attempt.accumulated_text = reply
            attempt.outcome = (
                GenerationOutcome.SENTINEL if reply == self._sentinel else GenerationOutcome.SUCCESS
            )
            return

        logger.error("generation_retries_exhausted", depth=attempt.depth, attempts=attempt.attempts)
        attempt.outcome = GenerationOutcome.EXHAUSTED_RETRIES

    async def _stream_once(
        self,
        attempt: GenerationAttempt,
        request: ReplyRequest,
        on_token: TokenCallback | None,
    ) -> None:
        decoder = FrameDecoder(strict=self._strict_frames)
        async for chunk in self._client.stream_reply(request):
            for frame in decoder.feed(chunk):
                self._apply(frame, attempt, on_token)
        for frame in decoder.flush():
            self._apply(frame, attempt, on_token)

    @staticmethod
    def _apply(
        frame: MetaFrame | TokenFrame,
        attempt: GenerationAttempt,
        on_token: TokenCallback | None,
    ) -> None:
        if isinstance(frame, MetaFrame):
            # The server's view of the context replaces whatever was sent.
            attempt.meta_received = True
            attempt.past_huddles = list(frame.past_huddles)
            attempt.document_knowledge = list(frame.document_knowledge)
            attempt.slang_address_terms = frame.slang_address_terms
            return
        attempt.accumulated_text += frame.text
        if on_token is not None:
            on_token(attempt.accumulated_text)

    def _finish(self, attempt: GenerationAttempt, total_attempts: int) -> GenerationResult:
        if attempt.outcome is GenerationOutcome.EXHAUSTED_RETRIES:
            return GenerationResult(
                reply=self._sentinel,
                past_huddles=[],
                document_knowledge=[],
                outcome=GenerationOutcome.EXHAUSTED_RETRIES,
                attempts=total_attempts,
            )

        outcome = attempt.outcome
        if outcome is GenerationOutcome.SUCCESS and attempt.depth > 0:
            outcome = GenerationOutcome.AUTO_REGENERATED
        return GenerationResult(
            reply=attempt.accumulated_text,
            past_huddles=attempt.past_huddles,
            document_knowledge=attempt.document_knowledge,
            outcome=outcome,
            attempts=total_attempts,
            slang_address_terms=attempt.slang_address_terms,
        )
