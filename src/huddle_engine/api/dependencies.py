"""FastAPI dependency injection helpers."""

from __future__ import annotations

from fastapi import Request

from huddle_engine.config.settings import Settings
from huddle_engine.generation.reply_streamer import ReplyStreamer
from huddle_engine.generation.tone import ToneAdjuster
from huddle_engine.ingestion.pipeline import DocumentIngestor
from huddle_engine.ocr.vision_client import VisionOCRClient
from huddle_engine.protocols.embedder import Embedder
from huddle_engine.protocols.llm import LLMProvider
from huddle_engine.retrieval.context_retriever import ContextRetriever
from huddle_engine.storage.document_store import SQLiteDocumentStore
from huddle_engine.storage.interaction_store import SQLiteInteractionStore
from huddle_engine.storage.style_profile_store import SQLiteStyleProfileStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_retriever(request: Request) -> ContextRetriever:
    return request.app.state.retriever


def get_reply_streamer(request: Request) -> ReplyStreamer:
    return request.app.state.reply_streamer


def get_tone_adjuster(request: Request) -> ToneAdjuster:
    return request.app.state.tone_adjuster


def get_interaction_store(request: Request) -> SQLiteInteractionStore:
    return request.app.state.interaction_store


def get_document_store(request: Request) -> SQLiteDocumentStore:
    return request.app.state.document_store


def get_style_store(request: Request) -> SQLiteStyleProfileStore:
    return request.app.state.style_store


def get_ingestor(request: Request) -> DocumentIngestor:
    return request.app.state.ingestor


def get_ocr_client(request: Request) -> VisionOCRClient:
    return request.app.state.ocr_client


def get_embedder(request: Request) -> Embedder:
    return request.app.state.embedder


def get_llm(request: Request) -> LLMProvider:
    return request.app.state.llm
