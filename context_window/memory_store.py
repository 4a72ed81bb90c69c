"""
In-process vector store with the same upsert/query contract as PineconeStore.
Useful for local experiments and tests that should not touch the network.
"""
import threading
from typing import Dict, List

from .embedding import cosine_similarity
from .types import Match, Record


class InMemoryStore:
    def __init__(self):
        self._namespaces: Dict[str, Dict[str, Record]] = {}
        self._lock = threading.Lock()

    async def ensure_index(self, dimension: int):
        return None

    async def upsert(self, records: List[Record], namespace: str) -> None:
        if not records:
            return
        with self._lock:
            store = self._namespaces.setdefault(namespace, {})
            for record in records:
                store[record.id] = record

    async def query(
        self,
        vector: List[float],
        top_k: int,
        namespace: str,
        score_threshold: float = 0.0
    ) -> List[Match]:
        with self._lock:
            records = list(self._namespaces.get(namespace, {}).values())

        matches = []
        for record in records:
            score = cosine_similarity(vector, record.embedding)
            if score >= score_threshold:
                matches.append(Match(id=record.id, score=score, text=record.text, source=record.source))

        matches.sort(key=lambda m: m.score, reverse=True)
        return matches[:top_k]

    def ids(self, namespace: str) -> List[str]:
        with self._lock:
            return list(self._namespaces.get(namespace, {}))

    def delete_namespace(self, namespace: str):
        with self._lock:
            self._namespaces.pop(namespace, None)
