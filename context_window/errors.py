"""
Error taxonomy for the context-window pipeline.
Every fatal error names the stage that failed.
"""
from typing import Optional


class ContextWindowError(Exception):
    """Base error carrying the failing pipeline stage."""

    stage = "pipeline"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.message = message
        self.cause = cause
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(f"[{self.stage}] {message}")


class ConfigurationError(ContextWindowError):
    stage = "configuration"


class ExtractionError(ContextWindowError):
    stage = "extraction"


class EmbeddingError(ContextWindowError):
    stage = "embedding"


class UpsertError(ContextWindowError):
    stage = "upsert"


class IndexProvisioningError(ContextWindowError):
    stage = "index-provisioning"


class QueryError(ContextWindowError):
    stage = "query"


class GenerationError(ContextWindowError):
    stage = "generation"
