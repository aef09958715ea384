"""Fetch past interactions and document chunks relevant to a screenshot and draft.

Vector search is the primary path. Any failure (embedding, or the vector
query of one category) degrades that category to a keyword search with a
fixed similarity, and a failing keyword search degrades to an empty list.
``retrieve`` never raises.
"""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable

from huddle_engine.config.settings import Settings
from huddle_engine.keyword_search.tokenizer import query_terms
from huddle_engine.models.domain import RetrievalBundle, RetrievalMatch
from huddle_engine.observability.logger import get_logger
from huddle_engine.observability.metrics import log_latency, log_retrieval_metrics
from huddle_engine.protocols.embedder import Embedder
from huddle_engine.retrieval.similarity_store import SimilarityStore

logger = get_logger("context_retriever")

VectorSearch = Callable[[list[float], str, float, int], Awaitable[list[RetrievalMatch]]]
KeywordSearch = Callable[[str, list[str], int, float], Awaitable[list[RetrievalMatch]]]


def build_query(screenshot_text: str, user_draft: str) -> str:
    return f"{screenshot_text} {user_draft}".strip()


class ContextRetriever:
    def __init__(
        self,
        embedder: Embedder,
        similarity_store: SimilarityStore,
        settings: Settings,
    ) -> None:
        self._embedder = embedder
        self._store = similarity_store
        self._threshold = settings.retrieval_match_threshold
        self._fallback_similarity = settings.fallback_similarity
        self._fallback_term_count = settings.fallback_term_count

    async def retrieve(self, query: str, owner_id: str, limit: int) -> RetrievalBundle:
        start = time.monotonic()
        vector: list[float] | None = None
        if query.strip():
            try:
                vector = await self._embedder.embed_query(query)
            except Exception as e:
                logger.warning("query_embedding_failed", owner_id=owner_id, error=str(e))

        interactions = await self._retrieve_category(
            "interactions",
            query,
            vector,
            owner_id,
            limit,
            self._store.search_interactions,
            self._store.keyword_interactions,
        )
        documents = await self._retrieve_category(
            "documents",
            query,
            vector,
            owner_id,
            limit,
            self._store.search_documents,
            self._store.keyword_documents,
        )

        log_latency(
            "retrieval",
            (time.monotonic() - start) * 1000,
            owner_id=owner_id,
            interactions=len(interactions),
            documents=len(documents),
        )
        return RetrievalBundle(interactions=interactions, documents=documents)

    async def _retrieve_category(
        self,
        category: str,
        query: str,
        vector: list[float] | None,
        owner_id: str,
        limit: int,
        vector_search: VectorSearch,
        keyword_search: KeywordSearch,
    ) -> list[RetrievalMatch]:
        if vector is not None:
            try:
                matches = await vector_search(vector, owner_id, self._threshold, limit)
                log_retrieval_metrics(
                    owner_id, category, "vector", [m.similarity for m in matches], len(matches)
                )
                return matches
            except Exception as e:
                logger.warning("vector_search_failed", category=category, error=str(e))

        terms = query_terms(query, self._fallback_term_count)
        try:
            matches = await keyword_search(owner_id, terms, limit, self._fallback_similarity)
        except Exception as e:
            logger.error("keyword_fallback_failed", category=category, error=str(e))
            return []
        log_retrieval_metrics(
            owner_id, category, "keyword", [m.similarity for m in matches], len(matches)
        )
        return matches
