"""SQLite-backed store of saved interactions (screenshot-to-reply episodes)."""

from __future__ import annotations

import json
from datetime import datetime
from uuid import uuid4

import aiosqlite

from huddle_engine.exceptions import PersistenceError
from huddle_engine.models.domain import Interaction, utc_now
from huddle_engine.observability.logger import get_logger
from huddle_engine.storage.migrations import initialize_db

logger = get_logger("interaction_store")


def like_pattern(term: str) -> str:
    escaped = term.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class SQLiteInteractionStore:
    def __init__(self, db_path: str, fetch_cap: int = 500) -> None:
        self._db_path = db_path
        self._fetch_cap = fetch_cap

    async def initialize(self) -> None:
        await initialize_db(self._db_path)

    async def save(self, interaction: Interaction) -> Interaction:
        """Insert a new row. Assigns id and timestamps; every other field is kept."""
        now = utc_now()
        stored = Interaction(
            owner_id=interaction.owner_id,
            screenshot_text=interaction.screenshot_text,
            user_draft=interaction.user_draft,
            generated_reply=interaction.generated_reply,
            final_reply=interaction.final_reply,
            selected_tone=interaction.selected_tone,
            principles=interaction.principles,
            interaction_id=str(uuid4()),
            created_at=now,
            updated_at=now,
            embedding=interaction.embedding,
        )
        try:
            async with aiosqlite.connect(self._db_path) as db:
                await db.execute(
                    "INSERT INTO interactions (interaction_id, owner_id, screenshot_text, user_draft, "
                    "generated_reply, final_reply, selected_tone, principles, embedding, created_at, updated_at) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        stored.interaction_id,
                        stored.owner_id,
                        stored.screenshot_text,
                        stored.user_draft,
                        stored.generated_reply,
                        stored.final_reply,
                        stored.selected_tone,
                        stored.principles,
                        json.dumps(stored.embedding) if stored.embedding is not None else None,
                        now.isoformat(),
                        now.isoformat(),
                    ),
                )
                await db.commit()
        except aiosqlite.Error as e:
            raise PersistenceError(f"Failed to save interaction: {e}") from e
        logger.info("interaction_saved", interaction_id=stored.interaction_id, owner_id=stored.owner_id)
        return stored

    async def update_final_reply(
        self,
        owner_id: str,
        interaction_id: str,
        final_reply: str,
        selected_tone: str | None = None,
    ) -> bool:
        now = utc_now().isoformat()
        try:
            async with aiosqlite.connect(self._db_path) as db:
                if selected_tone is None:
                    cursor = await db.execute(
                        "UPDATE interactions SET final_reply = ?, updated_at = ? "
                        "WHERE interaction_id = ? AND owner_id = ?",
                        (final_reply, now, interaction_id, owner_id),
                    )
                else:
                    cursor = await db.execute(
                        "UPDATE interactions SET final_reply = ?, selected_tone = ?, updated_at = ? "
                        "WHERE interaction_id = ? AND owner_id = ?",
                        (final_reply, selected_tone, now, interaction_id, owner_id),
                    )
                await db.commit()
                updated = cursor.rowcount > 0
        except aiosqlite.Error as e:
            raise PersistenceError(f"Failed to update interaction {interaction_id}: {e}") from e
        if not updated:
            logger.warning("interaction_not_found", interaction_id=interaction_id, owner_id=owner_id)
        return updated

    async def get(self, owner_id: str, interaction_id: str) -> Interaction | None:
        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                "SELECT * FROM interactions WHERE interaction_id = ? AND owner_id = ?",
                (interaction_id, owner_id),
            ) as cursor:
                row = await cursor.fetchone()
                return self._row_to_interaction(row) if row else None

    async def list_recent(
        self, owner_id: str, page: int = 0, page_size: int = 20
    ) -> tuple[list[Interaction], bool]:
        """Newest first. Never reads past the fetch cap, whatever the page."""
        offset = page * page_size
        if offset >= self._fetch_cap:
            return [], False
        fetch_n = min(page_size + 1, self._fetch_cap - offset)
        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                "SELECT * FROM interactions WHERE owner_id = ? "
                "ORDER BY created_at DESC, rowid DESC LIMIT ? OFFSET ?",
                (owner_id, fetch_n, offset),
            ) as cursor:
                rows = await cursor.fetchall()
        items = [self._row_to_interaction(row) for row in rows[:page_size]]
        return items, len(rows) > page_size

    async def all_drafts(self, owner_id: str) -> list[str]:
        async with aiosqlite.connect(self._db_path) as db:
            async with db.execute(
                "SELECT user_draft FROM interactions WHERE owner_id = ? "
                "ORDER BY created_at DESC LIMIT ?",
                (owner_id, self._fetch_cap),
            ) as cursor:
                rows = await cursor.fetchall()
                return [row[0] for row in rows]

    async def with_embeddings(self, owner_id: str) -> list[Interaction]:
        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                "SELECT * FROM interactions WHERE owner_id = ? AND embedding IS NOT NULL",
                (owner_id,),
            ) as cursor:
                rows = await cursor.fetchall()
                return [self._row_to_interaction(row) for row in rows]

    async def keyword_search(self, owner_id: str, terms: list[str], limit: int) -> list[Interaction]:
        """Rows whose text contains any of ``terms`` (case-insensitive), newest first."""
        if not terms:
            return []
        clause = " OR ".join(
            "(lower(screenshot_text) LIKE ? ESCAPE '\\' OR lower(user_draft) LIKE ? ESCAPE '\\' "
            "OR lower(COALESCE(final_reply, generated_reply)) LIKE ? ESCAPE '\\')"
            for _ in terms
        )
        params: list = [owner_id]
        for term in terms:
            params.extend([like_pattern(term)] * 3)
        params.append(limit)
        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                f"SELECT * FROM interactions WHERE owner_id = ? AND ({clause}) "
                "ORDER BY created_at DESC LIMIT ?",
                params,
            ) as cursor:
                rows = await cursor.fetchall()
                return [self._row_to_interaction(row) for row in rows]

    async def list_owner_ids(self, limit: int = 1000) -> list[str]:
        async with aiosqlite.connect(self._db_path) as db:
            async with db.execute(
                "SELECT DISTINCT owner_id FROM interactions ORDER BY owner_id LIMIT ?", (limit,)
            ) as cursor:
                rows = await cursor.fetchall()
                return [row[0] for row in rows]

    async def count(self) -> int:
        async with aiosqlite.connect(self._db_path) as db:
            async with db.execute("SELECT COUNT(*) FROM interactions") as cursor:
                row = await cursor.fetchone()
                return row[0] if row else 0

    @staticmethod
    def _row_to_interaction(row: aiosqlite.Row) -> Interaction:
        return Interaction(
            interaction_id=row["interaction_id"],
            owner_id=row["owner_id"],
            screenshot_text=row["screenshot_text"],
            user_draft=row["user_draft"],
            generated_reply=row["generated_reply"],
            final_reply=row["final_reply"],
            selected_tone=row["selected_tone"],
            principles=row["principles"],
            embedding=json.loads(row["embedding"]) if row["embedding"] else None,
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
