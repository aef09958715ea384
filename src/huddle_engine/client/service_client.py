"""HTTP client for the reply service.

The client is an immutable value: build one with the base URL and access
token, and derive variants with ``with_options`` instead of mutating it.
"""

from __future__ import annotations

import dataclasses
from collections.abc import AsyncIterator
from dataclasses import dataclass

import httpx

from huddle_engine.client.events import InteractionEvents
from huddle_engine.config.settings import Settings
from huddle_engine.exceptions import ConfigurationError, PersistenceError
from huddle_engine.generation.tone import is_no_tone
from huddle_engine.models.schemas import (
    FinalReplyUpdate,
    InteractionCreate,
    InteractionOut,
    InteractionPage,
    ReplyRequest,
    RetrieveRequest,
    RetrieveResponse,
    ToneRequest,
    ToneResponse,
)
from huddle_engine.observability.logger import get_logger

logger = get_logger("service_client")


@dataclass(frozen=True)
class ReplyServiceClient:
    base_url: str
    access_token: str
    timeout_seconds: float = 60.0
    events: InteractionEvents | None = None
    transport: httpx.AsyncBaseTransport | None = None

    @classmethod
    def from_settings(
        cls, settings: Settings, events: InteractionEvents | None = None
    ) -> ReplyServiceClient:
        return cls(
            base_url=settings.service_base_url,
            access_token=settings.service_access_token,
            timeout_seconds=settings.client_timeout_seconds,
            events=events,
        )

    @property
    def configured(self) -> bool:
        return bool(self.base_url.strip() and self.access_token.strip())

    def with_options(self, **changes) -> ReplyServiceClient:
        return dataclasses.replace(self, **changes)

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Authorization": f"Bearer {self.access_token}"},
            timeout=self.timeout_seconds,
            transport=self.transport,
        )

    async def retrieve(self, query: str, limit: int = 3) -> RetrieveResponse:
        async with self._http() as http:
            response = await http.post(
                "/retrieve", json=RetrieveRequest(query=query, limit=limit).model_dump()
            )
            response.raise_for_status()
        return RetrieveResponse.model_validate(response.json())

    async def stream_reply(self, request: ReplyRequest) -> AsyncIterator[bytes]:
        """Raw body chunks of one reply stream. Non-2xx raises before any chunk.

        A 503 means the service cannot generate at all and raises
        ``ConfigurationError``; other failures raise ``httpx.HTTPError``.
        """
        async with self._http() as http:
            async with http.stream(
                "POST", "/reply/stream", json=request.model_dump(mode="json")
            ) as response:
                if response.status_code == httpx.codes.SERVICE_UNAVAILABLE:
                    await response.aread()
                    raise ConfigurationError(f"Reply service not configured: {response.text}")
                response.raise_for_status()
                async for chunk in response.aiter_bytes():
                    yield chunk

    async def adjust_tone(self, text: str, tone: str) -> str:
        """Fail-soft: any error returns ``text`` unchanged."""
        if is_no_tone(tone) or not text.strip():
            return text
        try:
            async with self._http() as http:
                response = await http.post("/tone", json=ToneRequest(text=text, tone=tone).model_dump())
                response.raise_for_status()
            return ToneResponse.model_validate(response.json()).reply or text
        except Exception as e:
            logger.warning("client_tone_adjustment_failed", tone=tone, error=str(e))
            return text

    async def save_interaction(self, interaction: InteractionCreate) -> InteractionOut:
        try:
            async with self._http() as http:
                response = await http.post("/interactions", json=interaction.model_dump())
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise PersistenceError(f"Failed to save interaction: {e}") from e

        saved = InteractionOut.model_validate(response.json())
        if self.events is not None:
            self.events.publish(saved)
        return saved

    async def update_final_reply(
        self, interaction_id: str, final_reply: str, selected_tone: str | None = None
    ) -> bool:
        body = FinalReplyUpdate(final_reply=final_reply, selected_tone=selected_tone)
        try:
            async with self._http() as http:
                response = await http.patch(
                    f"/interactions/{interaction_id}/final-reply", json=body.model_dump()
                )
                if response.status_code == httpx.codes.NOT_FOUND:
                    return False
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise PersistenceError(f"Failed to update interaction {interaction_id}: {e}") from e
        return True

    async def list_interactions(self, page: int = 0, page_size: int | None = None) -> InteractionPage:
        params: dict[str, int] = {"page": page}
        if page_size is not None:
            params["page_size"] = page_size
        async with self._http() as http:
            response = await http.get("/interactions", params=params)
            response.raise_for_status()
        return InteractionPage.model_validate(response.json())
