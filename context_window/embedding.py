"""
Embedding utilities for the context-window pipeline.
Provides cached embedding generation using Amazon Titan.
"""
import asyncio
import json
import os
from functools import lru_cache
from typing import List, Tuple

import boto3
import numpy as np

from .config import DEFAULT_EMBEDDING_DIMENSIONS, DEFAULT_EMBEDDING_MODEL
from .errors import EmbeddingError


def cosine_similarity(vec1: np.ndarray, vec2: np.ndarray) -> float:
    """
    Calculate cosine similarity between two vectors.

    Args:
        vec1: First embedding vector
        vec2: Second embedding vector

    Returns:
        Cosine similarity score (-1 to 1), 0.0 for zero or mismatched vectors
    """
    vec1 = np.asarray(vec1, dtype=float)
    vec2 = np.asarray(vec2, dtype=float)

    if vec1.shape != vec2.shape:
        return 0.0

    norm1 = np.linalg.norm(vec1)
    norm2 = np.linalg.norm(vec2)

    if norm1 == 0 or norm2 == 0:
        return 0.0

    return float(np.dot(vec1, vec2) / (norm1 * norm2))


class EmbeddingClient:
    """
    Embedding client with caching support.

    Uses Amazon Titan Embed Text v2 for generating embeddings.
    Implements LRU caching to avoid re-embedding identical text.
    """

    def __init__(
        self,
        aws_region: str = None,
        model_id: str = None,
        dimensions: int = DEFAULT_EMBEDDING_DIMENSIONS,
        normalize: bool = True,
        cache_size: int = 1000
    ):
        """
        Initialize the embedding client.

        Args:
            aws_region: AWS region for Bedrock
            model_id: Amazon Titan embedding model ID
            dimensions: Embedding dimensions (256, 512, or 1024)
            normalize: Whether to normalize embeddings
            cache_size: Maximum number of embeddings to cache
        """
        self.bedrock_client = boto3.client(
            service_name="bedrock-runtime",
            region_name=aws_region or os.getenv("AWS_DEFAULT_REGION", "us-east-1")
        )
        self.model_id = (
            model_id
            or os.getenv("AWS_BEDROCK_TITAN_EMBEDDING_MODEL")
            or DEFAULT_EMBEDDING_MODEL
        )
        self.dimensions = dimensions
        self.normalize = normalize

        self._get_embedding_cached = lru_cache(maxsize=cache_size)(
            self._get_embedding_uncached
        )

    def _get_embedding_uncached(self, text: str) -> Tuple[float, ...]:
        """
        Generate embedding without caching (internal use).
        Returns tuple for hashability in lru_cache.
        """
        request_body = {
            "inputText": text,
            "dimensions": self.dimensions,
            "normalize": self.normalize
        }

        try:
            response = self.bedrock_client.invoke_model(
                modelId=self.model_id,
                body=json.dumps(request_body),
                contentType="application/json",
                accept="application/json"
            )
            response_body = json.loads(response['body'].read())
        except Exception as e:
            raise EmbeddingError("Bedrock embedding failed", e) from e

        embedding = response_body.get('embedding')
        if not embedding:
            raise EmbeddingError(f"Bedrock returned no embedding for model {self.model_id}")
        return tuple(embedding)

    def get_embedding_list(self, text: str) -> List[float]:
        """
        Generate embedding for text, returning as list.

        Args:
            text: Text to embed

        Returns:
            List of floats representing the embedding
        """
        return list(self._get_embedding_cached(text))

    def embed_batch(self, texts: List[str]) -> List[List[float]]:
        """
        Embed several texts, preserving input order.
        Fails as a whole if any single text fails.
        """
        return [self.get_embedding_list(text) for text in texts]

    async def embed(self, texts: List[str]) -> List[List[float]]:
        """Async embedding function used by ingestion and retrieval."""
        if not texts:
            return []
        return await asyncio.to_thread(self.embed_batch, list(texts))

