"""SQLite-backed store of confirmed per-owner style profiles."""

from __future__ import annotations

import json
from datetime import datetime

import aiosqlite

from huddle_engine.models.domain import StyleProfile
from huddle_engine.storage.migrations import initialize_db


class SQLiteStyleProfileStore:
    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    async def initialize(self) -> None:
        await initialize_db(self._db_path)

    async def upsert(self, profile: StyleProfile) -> StyleProfile:
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute(
                "INSERT OR REPLACE INTO style_profiles "
                "(owner_id, huddle_count, avg_sentence_length, common_topics, address_terms, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (
                    profile.owner_id,
                    profile.huddle_count,
                    profile.avg_sentence_length,
                    json.dumps(profile.common_topics),
                    json.dumps(profile.address_terms),
                    profile.updated_at.isoformat(),
                ),
            )
            await db.commit()
        return profile

    async def get(self, owner_id: str) -> StyleProfile | None:
        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                "SELECT * FROM style_profiles WHERE owner_id = ?", (owner_id,)
            ) as cursor:
                row = await cursor.fetchone()
                if row is None:
                    return None
                return StyleProfile(
                    owner_id=row["owner_id"],
                    huddle_count=row["huddle_count"],
                    avg_sentence_length=row["avg_sentence_length"],
                    common_topics=json.loads(row["common_topics"]),
                    address_terms=json.loads(row["address_terms"]),
                    updated_at=datetime.fromisoformat(row["updated_at"]),
                )
