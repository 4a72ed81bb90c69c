"""
Pinecone vector store for context windows.
Provisions the index, upserts fingerprinted records and runs similarity queries.
"""
import asyncio
import os
import time
from typing import List

from pinecone import Pinecone, ServerlessSpec
from tqdm import tqdm

from .config import DEFAULT_INDEX_NAME, require_env
from .errors import IndexProvisioningError, QueryError, UpsertError
from .logger import get_logger
from .types import Match, Record

logger = get_logger(__name__)


class PineconeStore:
    """
    Vector store backed by a single Pinecone index.

    Features:
    - Creates a serverless index on first use and waits until it is ready
    - Namespaces partition the index per context window
    - Batch upsert, overwriting records with the same id
    - Score-threshold filtering of query matches
    """

    def __init__(
        self,
        index_name: str = None,
        api_key: str = None,
        metric: str = "cosine",
        batch_size: int = 100,
        poll_interval: float = 2.0,
        max_poll_attempts: int = 30
    ):
        """
        Initialize the Pinecone store

        Args:
            index_name: Name of Pinecone index
            api_key: Pinecone API key (defaults to PINECONE_API_KEY)
            metric: Distance metric (cosine, euclidean, or dotproduct)
            batch_size: Number of vectors to upsert at once
            poll_interval: Seconds between readiness checks of a new index
            max_poll_attempts: Readiness checks before giving up
        """
        self.api_key = api_key
        self.index_name = index_name or os.getenv("PINECONE_INDEX_NAME", DEFAULT_INDEX_NAME)
        self.metric = metric
        self.batch_size = batch_size
        self.poll_interval = poll_interval
        self.max_poll_attempts = max_poll_attempts
        self._pc = None
        self._index = None

    @property
    def pc(self) -> Pinecone:
        """Pinecone client, created on first use"""
        if self._pc is None:
            self._pc = Pinecone(api_key=self.api_key or require_env(
                "PINECONE_API_KEY",
                "Get your key from https://app.pinecone.io/"
            ))
        return self._pc

    @property
    def index(self):
        if self._index is None:
            self._index = self.pc.Index(self.index_name)
        return self._index

    def ensure_index_sync(self, dimension: int):
        """Create the Pinecone index if it doesn't exist and wait until it is ready"""
        pc = self.pc
        try:
            existing_indexes = [index.name for index in pc.list_indexes()]
            if self.index_name in existing_indexes:
                logger.info(f"Using existing index: {self.index_name}")
                return

            logger.info(f"Creating new index: {self.index_name} ({dimension} dims)")
            pc.create_index(
                name=self.index_name,
                dimension=dimension,
                metric=self.metric,
                spec=ServerlessSpec(
                    cloud=os.getenv("PINECONE_CLOUD", "aws"),
                    region=os.getenv("PINECONE_REGION", "us-east-1")
                )
            )

            for _ in range(self.max_poll_attempts):
                description = pc.describe_index(self.index_name)
                if description.status["ready"]:
                    logger.info(f"Index '{self.index_name}' is ready")
                    return
                time.sleep(self.poll_interval)
        except Exception as e:
            raise IndexProvisioningError(
                f"Failed to ensure Pinecone index {self.index_name}", e
            ) from e

        raise IndexProvisioningError(
            f"Index {self.index_name} creation timed out after "
            f"{self.max_poll_attempts * self.poll_interval:g} seconds"
        )

    async def ensure_index(self, dimension: int):
        await asyncio.to_thread(self.ensure_index_sync, dimension)

    def upsert_sync(self, records: List[Record], namespace: str) -> int:
        """
        Upsert records into a namespace in batches

        Args:
            records: Fully embedded records
            namespace: Target namespace

        Returns:
            Number of vectors upserted
        """
        if not records:
            return 0

        index = self.index
        vectors = [record.to_vector() for record in records]
        total_upserted = 0
        try:
            for i in tqdm(range(0, len(vectors), self.batch_size), desc="Upserting batches"):
                batch = vectors[i:i + self.batch_size]
                index.upsert(vectors=batch, namespace=namespace)
                total_upserted += len(batch)
        except Exception as e:
            raise UpsertError(f"Pinecone upsert failed for namespace {namespace}", e) from e

        return total_upserted

    async def upsert(self, records: List[Record], namespace: str) -> None:
        await asyncio.to_thread(self.upsert_sync, records, namespace)

    def query_sync(
        self,
        vector: List[float],
        top_k: int,
        namespace: str,
        score_threshold: float = 0.0
    ) -> List[Match]:
        """
        Query a namespace and keep matches scoring at least score_threshold

        Returns:
            Matches ranked by descending similarity
        """
        index = self.index
        try:
            results = index.query(
                vector=vector,
                top_k=top_k,
                namespace=namespace,
                include_metadata=True
            )
        except Exception as e:
            raise QueryError(f"Pinecone query failed for namespace {namespace}", e) from e

        matches = []
        for match in results.matches or []:
            if match.score is None or match.score < score_threshold:
                continue
            metadata = match.metadata or {}
            matches.append(Match(
                id=match.id,
                score=match.score,
                text=metadata.get("text", ""),
                source=metadata.get("source", "")
            ))
        matches.sort(key=lambda m: m.score, reverse=True)
        return matches[:top_k]

    async def query(
        self,
        vector: List[float],
        top_k: int,
        namespace: str,
        score_threshold: float = 0.0
    ) -> List[Match]:
        return await asyncio.to_thread(self.query_sync, vector, top_k, namespace, score_threshold)

    def delete_namespace(self, namespace: str):
        """Delete all vectors of a namespace (keeps index structure)"""
        logger.info(f"Deleting all vectors from namespace: {namespace}")
        self.index.delete(delete_all=True, namespace=namespace)
