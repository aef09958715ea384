"""Ingestion pipeline: chunk -> embed -> store."""

from __future__ import annotations

from huddle_engine.exceptions import ConfigurationError, IngestionError
from huddle_engine.ingestion.chunker import FixedSizeChunker
from huddle_engine.models.schemas import IngestResponse
from huddle_engine.observability.logger import get_logger
from huddle_engine.protocols.embedder import Embedder
from huddle_engine.storage.document_store import SQLiteDocumentStore

logger = get_logger("ingestion")


class DocumentIngestor:
    def __init__(
        self,
        chunker: FixedSizeChunker,
        embedder: Embedder,
        document_store: SQLiteDocumentStore,
    ) -> None:
        self._chunker = chunker
        self._embedder = embedder
        self._document_store = document_store

    async def ingest(
        self,
        owner_id: str,
        document_name: str,
        text: str,
        metadata: dict | None = None,
    ) -> IngestResponse:
        chunks = self._chunker.chunk(owner_id, document_name, text, metadata or {})
        if not chunks:
            return IngestResponse(document_name=document_name, chunks_created=0, status="no_chunks")

        try:
            embeddings = await self._embedder.embed_texts([c.text for c in chunks])
        except ConfigurationError:
            raise
        except Exception as e:
            raise IngestionError(f"Failed to embed {document_name}: {e}") from e
        for chunk, emb in zip(chunks, embeddings):
            chunk.embedding = emb

        await self._document_store.save_chunks(chunks)
        logger.info("ingested", owner_id=owner_id, document_name=document_name, chunks=len(chunks))
        return IngestResponse(document_name=document_name, chunks_created=len(chunks), status="indexed")
