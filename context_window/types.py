"""
Value types and collaborator signatures shared across the pipeline.
"""
from dataclasses import dataclass, field, replace
from typing import Any, Awaitable, Callable, Dict, List


@dataclass(frozen=True)
class Record:
    """A fingerprinted chunk ready to be stored in the vector index."""
    id: str
    text: str
    source: str
    embedding: List[float] = field(default_factory=list)

    def with_embedding(self, embedding: List[float]) -> "Record":
        return replace(self, embedding=list(embedding))

    def to_vector(self) -> Dict[str, Any]:
        """Pinecone upsert payload."""
        return {
            "id": self.id,
            "values": self.embedding,
            "metadata": {"text": self.text, "source": self.source},
        }


@dataclass(frozen=True)
class Match:
    """A single retrieval result."""
    id: str
    score: float
    text: str
    source: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "score": self.score,
            "text": self.text,
            "source": self.source,
        }


@dataclass(frozen=True)
class PackedContext:
    text: str
    sources: List[str]


@dataclass(frozen=True)
class AskResult:
    """Answer text plus the source files it was grounded on."""
    text: str
    sources: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "sources": list(self.sources)}


# Collaborator signatures
TextReader = Callable[[str], Awaitable[str]]
FilePredicate = Callable[[str], bool]
EmbedFn = Callable[[List[str]], Awaitable[List[List[float]]]]
ChatFn = Callable[[str, str, str], Awaitable[str]]
UpsertFn = Callable[[List[Record], str], Awaitable[None]]
QueryFn = Callable[[List[float], int, str, float], Awaitable[List[Match]]]
