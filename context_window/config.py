"""
Options and environment settings for context windows.
"""
import os
from dataclasses import dataclass, field
from typing import List, Optional, Union

from dotenv import load_dotenv

from .errors import ConfigurationError

load_dotenv()

DEFAULT_AI_MODEL = "anthropic.claude-3-haiku-20240307-v1:0"
DEFAULT_EMBEDDING_MODEL = "amazon.titan-embed-text-v2:0"
DEFAULT_EMBEDDING_DIMENSIONS = 1024
DEFAULT_INDEX_NAME = "context-window"

DEFAULT_CHUNK_SIZE = 1000
DEFAULT_CHUNK_OVERLAP = 150
DEFAULT_TOP_K = 8
DEFAULT_MAX_CONTEXT_CHARS = 8000
DEFAULT_SCORE_THRESHOLD = 0.0


@dataclass
class ContextWindowOptions:
    """
    Options for creating a context window.

    Args:
        namespace: Vector store namespace, also the registry key
        data: File or directory path(s) to ingest
        ai_model: Bedrock model ID used to generate answers
        chunk_size: Characters per chunk
        chunk_overlap: Characters shared by consecutive chunks
        top_k: Number of matches fetched per question
        max_context_chars: Character budget for packed context
        score_threshold: Minimum similarity for a match to be used
    """
    namespace: str
    data: Union[str, List[str]] = field(default_factory=list)
    ai_model: Optional[str] = None
    chunk_size: Optional[int] = None
    chunk_overlap: Optional[int] = None
    top_k: Optional[int] = None
    max_context_chars: Optional[int] = None
    score_threshold: Optional[float] = None


@dataclass(frozen=True)
class NormalizedOptions:
    namespace: str
    data_paths: List[str]
    ai_model: str
    chunk_size: int
    chunk_overlap: int
    top_k: int
    max_context_chars: int
    score_threshold: float


def _pick(value, default):
    return default if value is None else value


def validate_chunking(chunk_size: int, chunk_overlap: int):
    if chunk_size <= 0:
        raise ConfigurationError(f"chunk_size must be positive, got {chunk_size}")
    if not 0 <= chunk_overlap < chunk_size:
        raise ConfigurationError(
            f"chunk_overlap must be in [0, chunk_size), got {chunk_overlap}"
        )


def default_ai_model() -> str:
    return os.getenv("AWS_BEDROCK_CLAUDE_MODEL") or DEFAULT_AI_MODEL


def normalize_options(opts: ContextWindowOptions) -> NormalizedOptions:
    """
    Apply defaults and validate options before any I/O happens.

    Raises:
        ConfigurationError: if a required field is missing or a value is out of range
    """
    if not opts.namespace or not opts.namespace.strip():
        raise ConfigurationError("namespace is required")

    data_paths = [opts.data] if isinstance(opts.data, str) else list(opts.data or [])
    data_paths = [p for p in data_paths if p]
    if not data_paths:
        raise ConfigurationError("at least one data path is required")

    chunk_size = _pick(opts.chunk_size, DEFAULT_CHUNK_SIZE)
    chunk_overlap = _pick(opts.chunk_overlap, DEFAULT_CHUNK_OVERLAP)
    validate_chunking(chunk_size, chunk_overlap)

    top_k = _pick(opts.top_k, DEFAULT_TOP_K)
    max_context_chars = _pick(opts.max_context_chars, DEFAULT_MAX_CONTEXT_CHARS)
    if top_k <= 0:
        raise ConfigurationError(f"top_k must be positive, got {top_k}")
    if max_context_chars <= 0:
        raise ConfigurationError(
            f"max_context_chars must be positive, got {max_context_chars}"
        )

    return NormalizedOptions(
        namespace=opts.namespace,
        data_paths=data_paths,
        ai_model=opts.ai_model or default_ai_model(),
        chunk_size=chunk_size,
        chunk_overlap=chunk_overlap,
        top_k=top_k,
        max_context_chars=max_context_chars,
        score_threshold=float(_pick(opts.score_threshold, DEFAULT_SCORE_THRESHOLD)),
    )


def require_env(name: str, hint: str = "") -> str:
    """Read a required environment variable or fail with a ConfigurationError."""
    value = os.getenv(name)
    if not value:
        message = f"{name} environment variable is required"
        if hint:
            message = f"{message}. {hint}"
        raise ConfigurationError(message)
    return value
