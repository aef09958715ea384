"""Owner-scoped cosine-similarity search over stored interactions and document chunks."""

from __future__ import annotations

import asyncio

import numpy as np

from huddle_engine.exceptions import RetrievalError
from huddle_engine.models.domain import DocumentChunk, Interaction, RetrievalMatch
from huddle_engine.observability.logger import get_logger
from huddle_engine.storage.document_store import SQLiteDocumentStore
from huddle_engine.storage.interaction_store import SQLiteInteractionStore

logger = get_logger("similarity_store")


def rank_by_similarity(
    items: list[Interaction | DocumentChunk],
    query_vector: list[float],
    threshold: float,
    limit: int,
) -> list[RetrievalMatch]:
    """Keep items with cosine similarity >= threshold, best first, newest first on ties.

    Reported similarity is clamped to [0, 1]; opposed vectors score 0.
    """
    query = np.asarray(query_vector, dtype=np.float32)
    query_norm = float(np.linalg.norm(query))
    if query_norm == 0.0 or limit <= 0:
        return []

    usable = [it for it in items if it.embedding is not None and len(it.embedding) == query.shape[0]]
    if not usable:
        return []

    matrix = np.asarray([it.embedding for it in usable], dtype=np.float32)
    norms = np.linalg.norm(matrix, axis=1)
    with np.errstate(divide="ignore", invalid="ignore"):
        scores = (matrix @ query) / (norms * query_norm)

    matches = [
        RetrievalMatch(
            item=item, similarity=min(max(float(score), 0.0), 1.0), source_method="vector"
        )
        for item, score, norm in zip(usable, scores, norms)
        if norm > 0 and score >= threshold
    ]
    matches.sort(key=lambda m: (m.similarity, m.created_at), reverse=True)
    return matches[:limit]


class SimilarityStore:
    def __init__(
        self,
        interaction_store: SQLiteInteractionStore,
        document_store: SQLiteDocumentStore,
    ) -> None:
        self._interactions = interaction_store
        self._documents = document_store

    async def search_interactions(
        self, vector: list[float], owner_id: str, threshold: float, limit: int
    ) -> list[RetrievalMatch]:
        try:
            rows = await self._interactions.with_embeddings(owner_id)
            return await asyncio.to_thread(rank_by_similarity, rows, vector, threshold, limit)
        except Exception as e:
            raise RetrievalError(f"Interaction vector search failed: {e}") from e

    async def search_documents(
        self, vector: list[float], owner_id: str, threshold: float, limit: int
    ) -> list[RetrievalMatch]:
        try:
            rows = await self._documents.with_embeddings(owner_id)
            return await asyncio.to_thread(rank_by_similarity, rows, vector, threshold, limit)
        except Exception as e:
            raise RetrievalError(f"Document vector search failed: {e}") from e

    async def keyword_interactions(
        self, owner_id: str, terms: list[str], limit: int, similarity: float
    ) -> list[RetrievalMatch]:
        rows = await self._interactions.keyword_search(owner_id, terms, limit)
        return [RetrievalMatch(item=row, similarity=similarity, source_method="keyword") for row in rows]

    async def keyword_documents(
        self, owner_id: str, terms: list[str], limit: int, similarity: float
    ) -> list[RetrievalMatch]:
        rows = await self._documents.keyword_search(owner_id, terms, limit)
        return [RetrievalMatch(item=row, similarity=similarity, source_method="keyword") for row in rows]
