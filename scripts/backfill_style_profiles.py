"""Recompute and store style profiles for every owner with saved interactions."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from huddle_engine.config.settings import Settings
from huddle_engine.models.domain import StyleProfile
from huddle_engine.observability.logger import setup_logging
from huddle_engine.storage.interaction_store import SQLiteInteractionStore
from huddle_engine.storage.style_profile_store import SQLiteStyleProfileStore
from huddle_engine.style.analyzer import analyze_style


async def main():
    settings = Settings()
    setup_logging()

    interaction_store = SQLiteInteractionStore(
        settings.sqlite_db_path, fetch_cap=settings.interaction_fetch_cap
    )
    await interaction_store.initialize()
    style_store = SQLiteStyleProfileStore(settings.sqlite_db_path)

    owner_ids = await interaction_store.list_owner_ids()
    print(f"Found {len(owner_ids)} owners with interactions")

    updated = 0
    for owner_id in owner_ids:
        drafts = await interaction_store.all_drafts(owner_id)
        if not drafts:
            continue
        analysis = analyze_style(drafts)
        await style_store.upsert(StyleProfile(owner_id=owner_id, **analysis.model_dump()))
        updated += 1
        print(
            f"{owner_id}: {analysis.huddle_count} drafts, "
            f"avg sentence {analysis.avg_sentence_length} words, "
            f"address terms {analysis.address_terms or '-'}"
        )

    print(f"\nUpdated {updated} style profiles")


if __name__ == "__main__":
    asyncio.run(main())
