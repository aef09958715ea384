"""Idempotent database schema creation."""

from __future__ import annotations

import aiosqlite

INTERACTIONS_TABLE = """
CREATE TABLE IF NOT EXISTS interactions (
    interaction_id TEXT PRIMARY KEY,
    owner_id TEXT NOT NULL,
    screenshot_text TEXT NOT NULL DEFAULT '',
    user_draft TEXT NOT NULL,
    generated_reply TEXT NOT NULL,
    final_reply TEXT,
    selected_tone TEXT NOT NULL DEFAULT 'none',
    principles TEXT NOT NULL DEFAULT '',
    embedding TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""

INTERACTIONS_OWNER_INDEX = """
CREATE INDEX IF NOT EXISTS idx_interactions_owner_created
ON interactions(owner_id, created_at DESC)
"""

DOCUMENT_CHUNKS_TABLE = """
CREATE TABLE IF NOT EXISTS document_chunks (
    chunk_id TEXT PRIMARY KEY,
    owner_id TEXT NOT NULL,
    document_name TEXT NOT NULL,
    text TEXT NOT NULL,
    chunk_index INTEGER NOT NULL,
    metadata TEXT NOT NULL DEFAULT '{}',
    embedding TEXT,
    created_at TEXT NOT NULL
)
"""

DOCUMENT_CHUNKS_OWNER_INDEX = """
CREATE INDEX IF NOT EXISTS idx_document_chunks_owner ON document_chunks(owner_id, document_name)
"""

STYLE_PROFILES_TABLE = """
CREATE TABLE IF NOT EXISTS style_profiles (
    owner_id TEXT PRIMARY KEY,
    huddle_count INTEGER NOT NULL,
    avg_sentence_length INTEGER NOT NULL,
    common_topics TEXT NOT NULL DEFAULT '[]',
    address_terms TEXT NOT NULL DEFAULT '[]',
    updated_at TEXT NOT NULL
)
"""


async def initialize_db(db_path: str) -> None:
    async with aiosqlite.connect(db_path) as db:
        await db.execute(INTERACTIONS_TABLE)
        await db.execute(INTERACTIONS_OWNER_INDEX)
        await db.execute(DOCUMENT_CHUNKS_TABLE)
        await db.execute(DOCUMENT_CHUNKS_OWNER_INDEX)
        await db.execute(STYLE_PROFILES_TABLE)
        await db.commit()
