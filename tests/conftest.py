"""Shared test fixtures."""

from __future__ import annotations

import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from uuid import uuid4

import pytest

from huddle_engine.config.settings import Settings
from huddle_engine.models.domain import DocumentChunk, Interaction
from huddle_engine.models.schemas import DocumentKnowledge, PastHuddle
from huddle_engine.storage.document_store import SQLiteDocumentStore
from huddle_engine.storage.interaction_store import SQLiteInteractionStore
from huddle_engine.storage.style_profile_store import SQLiteStyleProfileStore

from fakes import FakeEmbedder, FakeLLM


@pytest.fixture
def settings():
    """Test settings with temp paths and no retry delay."""
    tmp = tempfile.mkdtemp()
    return Settings(
        openai_api_key="test-key",
        google_api_key="test-key",
        sqlite_db_path=str(Path(tmp) / "test_huddle.db"),
        generation_retry_delay_seconds=0.0,
        jwt_secret="test-secret",
        api_keys="owner-1:key-1,owner-2:key-2",
        rate_limit_requests_per_minute=1000,
    )


@pytest.fixture
async def interaction_store(settings):
    store = SQLiteInteractionStore(settings.sqlite_db_path, fetch_cap=settings.interaction_fetch_cap)
    await store.initialize()
    return store


@pytest.fixture
async def document_store(settings):
    store = SQLiteDocumentStore(settings.sqlite_db_path)
    await store.initialize()
    return store


@pytest.fixture
async def style_store(settings):
    store = SQLiteStyleProfileStore(settings.sqlite_db_path)
    await store.initialize()
    return store


@pytest.fixture
def fake_embedder():
    return FakeEmbedder()


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def make_interaction():
    def _make(owner_id: str = "owner-1", **overrides) -> Interaction:
        fields = {
            "screenshot_text": "Are you free for coffee on Friday?",
            "user_draft": "yeah coffee works",
            "generated_reply": "Friday works for me, coffee it is!",
            "embedding": FakeEmbedder.vector("coffee"),
        }
        fields.update(overrides)
        return Interaction(owner_id=owner_id, **fields)

    return _make


@pytest.fixture
def make_chunk():
    def _make(owner_id: str = "owner-1", text: str = "Coffee meetings work best before noon.", **overrides):
        fields = {
            "chunk_id": str(uuid4()),
            "owner_id": owner_id,
            "document_name": "playbook.txt",
            "text": text,
            "chunk_index": 0,
            "embedding": FakeEmbedder.vector(text),
        }
        fields.update(overrides)
        return DocumentChunk(**fields)

    return _make


@pytest.fixture
def sample_huddles():
    base = datetime(2024, 5, 1, tzinfo=timezone.utc)
    return [
        PastHuddle(
            id=f"h{i}",
            screenshot_text=f"message {i}",
            user_draft=f"draft {i}",
            generated_reply=f"reply {i}",
            created_at=base + timedelta(days=i),
            similarity=0.9 - i * 0.1,
        )
        for i in (1, 2)
    ]


@pytest.fixture
def sample_documents():
    return [
        DocumentKnowledge(
            id="d1",
            document_name="playbook.txt",
            content_chunk="Always propose a concrete time.",
            similarity=0.42,
        )
    ]
