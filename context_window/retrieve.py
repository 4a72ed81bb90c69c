"""
Question answering over an ingested namespace.

Features:
- Similarity search with a score threshold
- Context packing under a character budget with deduplicated sources
- Strict grounded prompting, short-circuiting to a fixed answer when
  nothing relevant was retrieved
"""
from typing import Iterable, List, Optional

from .config import (
    DEFAULT_MAX_CONTEXT_CHARS,
    DEFAULT_SCORE_THRESHOLD,
    DEFAULT_TOP_K,
    ContextWindowOptions,
    default_ai_model,
    normalize_options,
)
from .embedding import EmbeddingClient
from .errors import ConfigurationError, EmbeddingError, GenerationError, QueryError
from .generation import ChatClient
from .indexing import PineconeStore
from .ingest import ingest_paths
from .logger import get_logger
from .types import AskResult, ChatFn, EmbedFn, Match, PackedContext, QueryFn

logger = get_logger(__name__)

CONTEXT_SEPARATOR = "\n\n---\n\n"
UNKNOWN_ANSWER = "I don't know based on the uploaded files."


def pack_context(matches: Iterable[Match], max_context_chars: int) -> PackedContext:
    """
    Concatenate ranked matches until the character budget is reached.

    Stops at the first match that would overflow the budget; smaller,
    lower-ranked matches after it are not considered.

    Args:
        matches: Matches sorted by descending similarity
        max_context_chars: Budget for the total length of selected chunk texts

    Returns:
        Packed context text and unique source labels in first-seen order
    """
    chunks = []
    sources = []
    seen_sources = set()
    total_chars = 0

    for match in matches:
        if total_chars + len(match.text) > max_context_chars:
            break

        chunks.append(match.text)
        total_chars += len(match.text)

        if match.source not in seen_sources:
            seen_sources.add(match.source)
            sources.append(match.source)

    return PackedContext(text=CONTEXT_SEPARATOR.join(chunks), sources=sources)


def build_system_prompt(context: str) -> str:
    return f"""You are a strict RAG assistant.

Answer ONLY using the provided context. If not fully supported,
say: "{UNKNOWN_ANSWER}"
Cite sources like [filename]. Keep answers concise.

Context:
{context}"""


class ContextWindow:
    """
    A question-answering handle bound to one namespace.

    Embeds each question, retrieves matching chunks, packs them under the
    context budget and asks the chat model to answer from that context only.
    """

    def __init__(
        self,
        namespace: str,
        embed: EmbedFn,
        query: QueryFn,
        chat: ChatFn,
        ai_model: Optional[str] = None,
        top_k: int = DEFAULT_TOP_K,
        max_context_chars: int = DEFAULT_MAX_CONTEXT_CHARS,
        score_threshold: float = DEFAULT_SCORE_THRESHOLD
    ):
        self.namespace = namespace
        self.ai_model = ai_model or default_ai_model()
        self.top_k = top_k
        self.max_context_chars = max_context_chars
        self.score_threshold = score_threshold
        self._embed = embed
        self._query = query
        self._chat = chat

    async def _embed_question(self, question: str) -> List[float]:
        try:
            vectors = await self._embed([question])
        except EmbeddingError:
            raise
        except Exception as e:
            raise EmbeddingError("Question embedding failed", e) from e

        if len(vectors) != 1:
            raise EmbeddingError(f"Expected 1 question vector, got {len(vectors)}")
        return vectors[0]

    async def retrieve(self, question: str) -> List[Match]:
        """Matches for a question, ranked and filtered by the score threshold"""
        vector = await self._embed_question(question)
        try:
            return await self._query(vector, self.top_k, self.namespace, self.score_threshold)
        except (ConfigurationError, QueryError):
            raise
        except Exception as e:
            raise QueryError(f"Query against namespace {self.namespace} failed", e) from e

    async def ask(self, question: str) -> AskResult:
        """
        Ask a question and get an answer based on the ingested documents.

        Args:
            question: The question to ask

        Returns:
            The answer text and the source files it cites
        """
        matches = await self.retrieve(question)
        packed = pack_context(matches, self.max_context_chars)

        if not packed.text.strip():
            logger.info(f"No context above threshold in namespace '{self.namespace}'")
            return AskResult(text=UNKNOWN_ANSWER, sources=[])

        try:
            answer = await self._chat(self.ai_model, build_system_prompt(packed.text), question)
        except GenerationError:
            raise
        except Exception as e:
            raise GenerationError("Answer generation failed", e) from e

        return AskResult(text=answer, sources=packed.sources)


def _default_clients(embedding_client, chat_client, store):
    # Defaults only for collaborators that were not injected
    return (
        embedding_client or EmbeddingClient(),
        chat_client or ChatClient(),
        store or PineconeStore(),
    )


def connect_context_window(
    namespace: str,
    ai_model: Optional[str] = None,
    top_k: Optional[int] = None,
    max_context_chars: Optional[int] = None,
    score_threshold: Optional[float] = None,
    embedding_client=None,
    chat_client=None,
    store=None
) -> ContextWindow:
    """
    Create a context window for an existing namespace without ingesting data.

    An unknown namespace is not an error: questions against it simply
    retrieve nothing and get the fixed "I don't know" answer.
    """
    embedding_client, chat_client, store = _default_clients(embedding_client, chat_client, store)
    return ContextWindow(
        namespace=namespace,
        embed=embedding_client.embed,
        query=store.query,
        chat=chat_client.complete,
        ai_model=ai_model,
        top_k=DEFAULT_TOP_K if top_k is None else top_k,
        max_context_chars=DEFAULT_MAX_CONTEXT_CHARS if max_context_chars is None else max_context_chars,
        score_threshold=DEFAULT_SCORE_THRESHOLD if score_threshold is None else score_threshold,
    )


async def create_context_window(
    opts: ContextWindowOptions,
    embedding_client=None,
    chat_client=None,
    store=None
) -> ContextWindow:
    """
    Create a context window, ingesting its data first.

    1. Validates and normalizes options
    2. Ensures the vector index exists
    3. Ingests the data paths into the namespace
    4. Returns a window bound to the namespace

    Example:
        cw = await create_context_window(ContextWindowOptions(
            namespace="my-book",
            data=["./my-book.pdf"],
        ))
        result = await cw.ask("When was America founded?")
    """
    config = normalize_options(opts)
    embedding_client, chat_client, store = _default_clients(embedding_client, chat_client, store)

    await store.ensure_index(embedding_client.dimensions)

    await ingest_paths(
        inputs=config.data_paths,
        namespace=config.namespace,
        embed=embedding_client.embed,
        upsert=store.upsert,
        chunk_size=config.chunk_size,
        chunk_overlap=config.chunk_overlap,
    )

    return ContextWindow(
        namespace=config.namespace,
        embed=embedding_client.embed,
        query=store.query,
        chat=chat_client.complete,
        ai_model=config.ai_model,
        top_k=config.top_k,
        max_context_chars=config.max_context_chars,
        score_threshold=config.score_threshold,
    )
