"""OpenAI embeddings for interactions, document chunks and retrieval queries."""

from __future__ import annotations

from openai import AsyncOpenAI

from huddle_engine.exceptions import ConfigurationError, EmbeddingError
from huddle_engine.observability.logger import get_logger

logger = get_logger("embeddings")


class OpenAIEmbedder:
    """Vectors of a fixed width; a provider reply of any other width is an error."""

    def __init__(
        self,
        api_key: str,
        model: str = "text-embedding-3-small",
        batch_size: int = 100,
        dimensions: int = 1536,
    ) -> None:
        self._client = AsyncOpenAI(api_key=api_key) if api_key else None
        self._model = model
        self._batch_size = batch_size
        self._dimensions = dimensions

    @property
    def dimensions(self) -> int:
        return self._dimensions

    async def embed_texts(self, texts: list[str]) -> list[list[float]]:
        vectors: list[list[float]] = []
        for start in range(0, len(texts), self._batch_size):
            vectors.extend(await self._create(texts[start : start + self._batch_size]))
        if texts:
            logger.info("embedded_texts", count=len(texts), model=self._model)
        return vectors

    async def embed_query(self, query: str) -> list[float]:
        (vector,) = await self._create([query])
        return vector

    async def _create(self, batch: list[str]) -> list[list[float]]:
        if self._client is None:
            raise ConfigurationError("OpenAI API key not configured")
        try:
            response = await self._client.embeddings.create(
                input=batch, model=self._model, dimensions=self._dimensions
            )
        except Exception as e:
            raise EmbeddingError(f"Failed to embed {len(batch)} texts: {e}") from e

        vectors = [item.embedding for item in response.data]
        if len(vectors) != len(batch) or any(len(v) != self._dimensions for v in vectors):
            raise EmbeddingError(
                f"Provider returned {len(vectors)} vectors for {len(batch)} texts "
                f"(expected width {self._dimensions})"
            )
        return vectors
