"""
Context Window - Retrieval-Augmented Answering over Local Documents

Ingests text, Markdown and PDF files into a Pinecone namespace using Amazon
Titan embeddings, then answers questions with Claude on AWS Bedrock using
only the retrieved chunks, citing the source files.
"""

from .chunking import Chunk, chunk_document, chunk_text
from .config import ContextWindowOptions, NormalizedOptions, normalize_options
from .embedding import EmbeddingClient, cosine_similarity
from .errors import (
    ConfigurationError,
    ContextWindowError,
    EmbeddingError,
    ExtractionError,
    GenerationError,
    IndexProvisioningError,
    QueryError,
    UpsertError,
)
from .fingerprint import fingerprint, stable_hash
from .generation import ChatClient
from .indexing import PineconeStore
from .ingest import IngestStats, collect_files, ingest_paths
from .memory_store import InMemoryStore
from .readers import DocumentReader, is_supported_file, read_as_text
from .registry import (
    WindowRegistry,
    clear_ctx_windows,
    create_ctx_window,
    default_registry,
    delete_ctx_window,
    get_ctx_window,
    has_ctx_window,
    list_ctx_windows,
)
from .retrieve import (
    UNKNOWN_ANSWER,
    ContextWindow,
    build_system_prompt,
    connect_context_window,
    create_context_window,
    pack_context,
)
from .types import AskResult, Match, PackedContext, Record

__all__ = [
    "Chunk",
    "chunk_text",
    "chunk_document",
    "fingerprint",
    "stable_hash",
    "DocumentReader",
    "read_as_text",
    "is_supported_file",
    "EmbeddingClient",
    "cosine_similarity",
    "ChatClient",
    "PineconeStore",
    "InMemoryStore",
    "IngestStats",
    "collect_files",
    "ingest_paths",
    "pack_context",
    "build_system_prompt",
    "ContextWindow",
    "connect_context_window",
    "create_context_window",
    "UNKNOWN_ANSWER",
    "WindowRegistry",
    "default_registry",
    "create_ctx_window",
    "get_ctx_window",
    "has_ctx_window",
    "delete_ctx_window",
    "clear_ctx_windows",
    "list_ctx_windows",
    "ContextWindowOptions",
    "NormalizedOptions",
    "normalize_options",
    "Record",
    "Match",
    "PackedContext",
    "AskResult",
    "ContextWindowError",
    "ConfigurationError",
    "ExtractionError",
    "EmbeddingError",
    "UpsertError",
    "IndexProvisioningError",
    "QueryError",
    "GenerationError",
]
