"""Custom exception hierarchy for the huddle engine."""


class HuddleEngineError(Exception):
    """Base exception for all huddle engine errors."""


class ConfigurationError(HuddleEngineError):
    """Required credentials or endpoints are missing."""


class EmbeddingError(HuddleEngineError):
    """Error generating embeddings."""


class RetrievalError(HuddleEngineError):
    """Error querying the similarity store."""


class GenerationError(HuddleEngineError):
    """Error during reply generation or tone adjustment."""


class StreamProtocolError(GenerationError):
    """A reply stream carried a frame that could not be decoded."""


class PersistenceError(HuddleEngineError):
    """Error reading or writing stored records."""


class IngestionError(HuddleEngineError):
    """Error during document ingestion."""


class OCRError(HuddleEngineError):
    """Error talking to the vision provider."""
