"""Ingest plain-text files as reference documents for one owner.

Usage: python scripts/ingest_documents.py OWNER_ID FILE [FILE ...]
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from huddle_engine.config.settings import Settings
from huddle_engine.embeddings.openai_embedder import OpenAIEmbedder
from huddle_engine.exceptions import HuddleEngineError
from huddle_engine.ingestion.chunker import FixedSizeChunker
from huddle_engine.ingestion.pipeline import DocumentIngestor
from huddle_engine.observability.logger import setup_logging
from huddle_engine.storage.document_store import SQLiteDocumentStore


async def main(owner_id: str, paths: list[str]):
    settings = Settings()
    setup_logging()

    Path(settings.sqlite_db_path).parent.mkdir(parents=True, exist_ok=True)
    document_store = SQLiteDocumentStore(settings.sqlite_db_path)
    await document_store.initialize()

    embedder = OpenAIEmbedder(
        api_key=settings.openai_api_key,
        model=settings.embedding_model,
        batch_size=settings.embedding_batch_size,
        dimensions=settings.embedding_dimensions,
    )
    ingestor = DocumentIngestor(
        chunker=FixedSizeChunker(settings.document_chunk_size),
        embedder=embedder,
        document_store=document_store,
    )

    for raw_path in paths:
        path = Path(raw_path)
        try:
            result = await ingestor.ingest(
                owner_id,
                path.name,
                path.read_text(encoding="utf-8", errors="replace"),
                {"source": str(path)},
            )
        except (OSError, HuddleEngineError) as e:
            print(f"Failed {path.name}: {e}")
            continue
        print(f"Ingested {path.name}: {result.chunks_created} chunks ({result.status})")

    print(f"\nDocuments for {owner_id}: {await document_store.list_documents(owner_id)}")
    print(f"Total chunks: {await document_store.count_chunks()}")


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print(__doc__)
        sys.exit(1)
    asyncio.run(main(sys.argv[1], sys.argv[2:]))
