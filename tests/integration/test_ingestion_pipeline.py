"""Integration tests for document ingestion into SQLite."""

import pytest

from huddle_engine.exceptions import IngestionError
from huddle_engine.ingestion.chunker import FixedSizeChunker
from huddle_engine.ingestion.pipeline import DocumentIngestor

from fakes import FakeEmbedder


async def test_ingest_stores_embedded_chunks(document_store):
    ingestor = DocumentIngestor(FixedSizeChunker(chunk_size=20), FakeEmbedder(), document_store)

    result = await ingestor.ingest("owner-1", "guide.txt", "coffee " * 6, {"source": "upload"})

    assert result.status == "indexed"
    assert result.chunks_created == 3
    chunks = await document_store.get_chunks_by_document("owner-1", "guide.txt")
    assert [c.chunk_index for c in chunks] == [0, 1, 2]
    assert all(c.embedding is not None for c in chunks)
    assert chunks[0].metadata["total_chunks"] == 3


async def test_ingest_blank_text_creates_nothing(document_store):
    ingestor = DocumentIngestor(FixedSizeChunker(), FakeEmbedder(), document_store)

    result = await ingestor.ingest("owner-1", "empty.txt", "   \x00  ")

    assert result.status == "no_chunks"
    assert await document_store.count_chunks() == 0


async def test_embedding_failure_raises_ingestion_error(document_store):
    ingestor = DocumentIngestor(FixedSizeChunker(), FakeEmbedder(fail=True), document_store)

    with pytest.raises(IngestionError):
        await ingestor.ingest("owner-1", "guide.txt", "some text")
    assert await document_store.count_chunks() == 0
