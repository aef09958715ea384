"""Google Gemini LLM provider using the google-genai SDK."""

from __future__ import annotations

from collections.abc import AsyncIterator

from google import genai
from google.genai import types

from huddle_engine.exceptions import ConfigurationError, GenerationError
from huddle_engine.observability.logger import get_logger

logger = get_logger("gemini")


class GeminiProvider:
    def __init__(self, api_key: str, model: str = "gemini-2.0-flash") -> None:
        self._client = genai.Client(api_key=api_key) if api_key else None
        self._model = model

    @property
    def configured(self) -> bool:
        return self._client is not None

    async def generate(
        self,
        prompt: str,
        system: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 500,
    ) -> str:
        client = self._require_client()
        try:
            response = await client.aio.models.generate_content(
                model=self._model,
                contents=prompt,
                config=self._config(system, temperature, max_tokens),
            )
            return response.text or ""
        except Exception as e:
            raise GenerationError(f"Gemini generation failed: {e}") from e

    async def generate_stream(
        self,
        prompt: str,
        system: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 500,
    ) -> AsyncIterator[str]:
        client = self._require_client()
        try:
            stream = await client.aio.models.generate_content_stream(
                model=self._model,
                contents=prompt,
                config=self._config(system, temperature, max_tokens),
            )
            async for chunk in stream:
                if chunk.text:
                    yield chunk.text
        except Exception as e:
            raise GenerationError(f"Gemini streaming failed: {e}") from e

    @staticmethod
    def _config(
        system: str | None, temperature: float, max_tokens: int
    ) -> types.GenerateContentConfig:
        config = types.GenerateContentConfig(
            temperature=temperature,
            max_output_tokens=max_tokens,
        )
        if system:
            config.system_instruction = system
        return config

    def _require_client(self) -> genai.Client:
        if self._client is None:
            raise ConfigurationError("Google API key not configured")
        return self._client
