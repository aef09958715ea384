"""FastAPI application factory with lifespan management."""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from huddle_engine.api.auth import router as auth_router
from huddle_engine.api.middleware import RequestContextMiddleware
from huddle_engine.api.rate_limiter import SlidingWindowRateLimiter
from huddle_engine.api.routes_documents import router as documents_router
from huddle_engine.api.routes_health import router as health_router
from huddle_engine.api.routes_interactions import router as interactions_router
from huddle_engine.api.routes_ocr import router as ocr_router
from huddle_engine.api.routes_reply import router as reply_router
from huddle_engine.api.routes_retrieve import router as retrieve_router
from huddle_engine.api.routes_style import router as style_router
from huddle_engine.api.routes_tone import router as tone_router
from huddle_engine.config.settings import Settings
from huddle_engine.embeddings.openai_embedder import OpenAIEmbedder
from huddle_engine.generation.gemini_provider import GeminiProvider
from huddle_engine.generation.reply_streamer import ReplyStreamer
from huddle_engine.generation.tone import ToneAdjuster
from huddle_engine.ingestion.chunker import FixedSizeChunker
from huddle_engine.ingestion.pipeline import DocumentIngestor
from huddle_engine.observability.logger import get_logger, setup_logging
from huddle_engine.ocr.vision_client import VisionOCRClient
from huddle_engine.retrieval.context_retriever import ContextRetriever
from huddle_engine.retrieval.similarity_store import SimilarityStore
from huddle_engine.storage.document_store import SQLiteDocumentStore
from huddle_engine.storage.interaction_store import SQLiteInteractionStore
from huddle_engine.storage.migrations import initialize_db
from huddle_engine.storage.style_profile_store import SQLiteStyleProfileStore

logger = get_logger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    setup_logging()

    Path(settings.sqlite_db_path).parent.mkdir(parents=True, exist_ok=True)

    # Storage
    await initialize_db(settings.sqlite_db_path)
    interaction_store = SQLiteInteractionStore(
        settings.sqlite_db_path, fetch_cap=settings.interaction_fetch_cap
    )
    document_store = SQLiteDocumentStore(settings.sqlite_db_path)
    style_store = SQLiteStyleProfileStore(settings.sqlite_db_path)

    # Providers (pre-set on app.state when injected by the caller)
    embedder = app.state.embedder or OpenAIEmbedder(
        api_key=settings.openai_api_key,
        model=settings.embedding_model,
        batch_size=settings.embedding_batch_size,
        dimensions=settings.embedding_dimensions,
    )
    llm = app.state.llm or GeminiProvider(api_key=settings.google_api_key, model=settings.gemini_model)
    ocr_client = app.state.ocr_client or VisionOCRClient(
        api_key=settings.google_vision_api_key or settings.google_api_key,
        endpoint=settings.vision_endpoint,
        timeout_seconds=settings.ocr_timeout_seconds,
    )

    # Retrieval
    similarity_store = SimilarityStore(interaction_store, document_store)
    retriever = ContextRetriever(embedder, similarity_store, settings)

    # Generation
    reply_streamer = ReplyStreamer(llm, retriever, style_store, settings)
    tone_adjuster = ToneAdjuster(
        llm,
        temperature=settings.tone_temperature,
        max_tokens=settings.reply_max_tokens,
    )

    # Ingestion
    ingestor = DocumentIngestor(
        chunker=FixedSizeChunker(settings.document_chunk_size),
        embedder=embedder,
        document_store=document_store,
    )

    # Attach to app state
    app.state.embedder = embedder
    app.state.llm = llm
    app.state.ocr_client = ocr_client
    app.state.interaction_store = interaction_store
    app.state.document_store = document_store
    app.state.style_store = style_store
    app.state.retriever = retriever
    app.state.reply_streamer = reply_streamer
    app.state.tone_adjuster = tone_adjuster
    app.state.ingestor = ingestor
    app.state.rate_limiter = SlidingWindowRateLimiter()

    logger.info(
        "startup_complete",
        interactions=await interaction_store.count(),
        chunks=await document_store.count_chunks(),
    )

    yield

    logger.info("shutdown_complete")


def create_app(
    settings: Settings | None = None,
    embedder=None,
    llm=None,
    ocr_client: VisionOCRClient | None = None,
) -> FastAPI:
    app = FastAPI(
        title="Huddle Engine",
        version="1.0.0",
        description="Retrieval-augmented reply drafting for direct messages",
        lifespan=lifespan,
    )
    app.state.settings = settings or Settings()
    app.state.embedder = embedder
    app.state.llm = llm
    app.state.ocr_client = ocr_client

    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router)
    app.include_router(retrieve_router, tags=["retrieval"])
    app.include_router(reply_router, tags=["generation"])
    app.include_router(tone_router, tags=["generation"])
    app.include_router(interactions_router, tags=["interactions"])
    app.include_router(documents_router, tags=["documents"])
    app.include_router(ocr_router, tags=["ocr"])
    app.include_router(style_router, tags=["style"])
    return app
