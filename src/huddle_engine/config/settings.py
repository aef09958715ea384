"""Central configuration via Pydantic Settings. All values driven by env vars."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # API Keys
    openai_api_key: str = ""
    google_api_key: str = ""
    google_vision_api_key: str = ""  # falls back to google_api_key when empty

    # Embedding
    embedding_model: str = "text-embedding-3-small"
    embedding_dimensions: int = 1536
    embedding_batch_size: int = 100

    # LLM / Gemini
    gemini_model: str = "gemini-2.0-flash"
    reply_temperature: float = 0.7
    reply_max_tokens: int = 500
    tone_temperature: float = 0.7

    # Retrieval
    retrieval_match_threshold: float = 0.1
    retrieval_limit: int = 3
    fallback_similarity: float = 0.5
    fallback_term_count: int = 3

    # Generation
    generation_max_attempts: int = 5
    generation_retry_delay_seconds: float = 1.0
    generation_stream_timeout_seconds: float = 60.0
    generation_sentinel: str = "generation failed, please regenerate"
    strict_frames: bool = False

    # OCR
    ocr_timeout_seconds: float = 30.0
    vision_endpoint: str = "https://vision.googleapis.com/v1/images:annotate"

    # Persistence
    interaction_page_size: int = 20
    interaction_fetch_cap: int = 500
    document_chunk_size: int = 1000

    # Storage paths
    sqlite_db_path: str = "data/huddle.db"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Client
    service_base_url: str = "http://localhost:8000"
    service_access_token: str = ""
    client_timeout_seconds: float = 60.0
    batch_pause_seconds: float = 1.0

    # Auth / JWT
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expiry_minutes: int = 60
    api_keys: str = ""  # comma-separated list of owner_id:api_key pairs

    # Rate limiting
    rate_limit_requests_per_minute: int = 60

    model_config = {"env_file": ".env", "env_prefix": "HUDDLE_"}
