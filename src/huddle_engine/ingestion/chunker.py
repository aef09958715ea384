"""Fixed-size character chunker for reference documents."""

from __future__ import annotations

from uuid import uuid4

from huddle_engine.models.domain import DocumentChunk


class FixedSizeChunker:
    def __init__(self, chunk_size: int = 1000) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self._chunk_size = chunk_size

    def chunk(self, owner_id: str, document_name: str, text: str, metadata: dict) -> list[DocumentChunk]:
        # NUL characters are rejected by most databases downstream.
        text = text.replace("\x00", "")
        pieces = [
            text[i : i + self._chunk_size]
            for i in range(0, len(text), self._chunk_size)
        ]
        pieces = [p for p in pieces if p.strip()]
        return [
            DocumentChunk(
                chunk_id=str(uuid4()),
                owner_id=owner_id,
                document_name=document_name,
                text=piece,
                chunk_index=index,
                metadata={**metadata, "total_chunks": len(pieces), "chunk_size": len(piece)},
            )
            for index, piece in enumerate(pieces)
        ]
