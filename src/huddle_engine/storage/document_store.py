"""SQLite-backed store of ingested document chunks."""

from __future__ import annotations

import json
from datetime import datetime

import aiosqlite

from huddle_engine.config.constants import EXTRACTION_FAILURE_MARKERS
from huddle_engine.exceptions import PersistenceError
from huddle_engine.models.domain import DocumentChunk
from huddle_engine.storage.interaction_store import like_pattern
from huddle_engine.storage.migrations import initialize_db

# Chunks holding an extractor's failure placeholder are never served.
_VALID_CHUNK_CLAUSE = " AND ".join(
    "text NOT LIKE ?" for _ in EXTRACTION_FAILURE_MARKERS
)
_VALID_CHUNK_PARAMS = [f"%{marker}%" for marker in EXTRACTION_FAILURE_MARKERS]


class SQLiteDocumentStore:
    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    async def initialize(self) -> None:
        await initialize_db(self._db_path)

    async def save_chunks(self, chunks: list[DocumentChunk]) -> None:
        """Insert only. Chunks are immutable once stored."""
        try:
            async with aiosqlite.connect(self._db_path) as db:
                await db.executemany(
                    "INSERT INTO document_chunks (chunk_id, owner_id, document_name, text, chunk_index, "
                    "metadata, embedding, created_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                    [
                        (
                            c.chunk_id,
                            c.owner_id,
                            c.document_name,
                            c.text,
                            c.chunk_index,
                            json.dumps(c.metadata),
                            json.dumps(c.embedding) if c.embedding is not None else None,
                            c.created_at.isoformat(),
                        )
                        for c in chunks
                    ],
                )
                await db.commit()
        except aiosqlite.Error as e:
            raise PersistenceError(f"Failed to store {len(chunks)} chunks: {e}") from e

    async def get_chunks_by_document(self, owner_id: str, document_name: str) -> list[DocumentChunk]:
        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                "SELECT * FROM document_chunks WHERE owner_id = ? AND document_name = ? "
                "ORDER BY created_at, chunk_index",
                (owner_id, document_name),
            ) as cursor:
                rows = await cursor.fetchall()
                return [self._row_to_chunk(row) for row in rows]

    async def list_documents(self, owner_id: str) -> list[str]:
        async with aiosqlite.connect(self._db_path) as db:
            async with db.execute(
                "SELECT DISTINCT document_name FROM document_chunks WHERE owner_id = ? "
                "ORDER BY document_name",
                (owner_id,),
            ) as cursor:
                rows = await cursor.fetchall()
                return [row[0] for row in rows]

    async def with_embeddings(self, owner_id: str) -> list[DocumentChunk]:
        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                "SELECT * FROM document_chunks WHERE owner_id = ? AND embedding IS NOT NULL "
                f"AND {_VALID_CHUNK_CLAUSE}",
                [owner_id, *_VALID_CHUNK_PARAMS],
            ) as cursor:
                rows = await cursor.fetchall()
                return [self._row_to_chunk(row) for row in rows]

    async def keyword_search(self, owner_id: str, terms: list[str], limit: int) -> list[DocumentChunk]:
        if not terms:
            return []
        clause = " OR ".join("lower(text) LIKE ? ESCAPE '\\'" for _ in terms)
        params = [owner_id, *_VALID_CHUNK_PARAMS, *(like_pattern(t) for t in terms), limit]
        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                f"SELECT * FROM document_chunks WHERE owner_id = ? AND {_VALID_CHUNK_CLAUSE} "
                f"AND ({clause}) ORDER BY created_at DESC, chunk_index LIMIT ?",
                params,
            ) as cursor:
                rows = await cursor.fetchall()
                return [self._row_to_chunk(row) for row in rows]

    async def count_chunks(self) -> int:
        async with aiosqlite.connect(self._db_path) as db:
            async with db.execute("SELECT COUNT(*) FROM document_chunks") as cursor:
                row = await cursor.fetchone()
                return row[0] if row else 0

    @staticmethod
    def _row_to_chunk(row: aiosqlite.Row) -> DocumentChunk:
        return DocumentChunk(
            chunk_id=row["chunk_id"],
            owner_id=row["owner_id"],
            document_name=row["document_name"],
            text=row["text"],
            chunk_index=row["chunk_index"],
            metadata=json.loads(row["metadata"]),
            embedding=json.loads(row["embedding"]) if row["embedding"] else None,
            created_at=datetime.fromisoformat(row["created_at"]),
        )
