import hashlib
import re

PREFIX_CHARS = 64

_WHITESPACE = re.compile(r"\s+")


def stable_hash(s: str) -> str:
    return hashlib.sha1(s.encode("utf-8")).hexdigest()


def fingerprint(document_key: str, chunk_index: int, chunk_text: str) -> str:
    """
    Stable record id for a chunk.

    Only the first 64 characters of the chunk (whitespace collapsed) are
    hashed, so re-ingesting an unchanged file yields the same ids and the
    vector store overwrites instead of duplicating.
    """
    preview = _WHITESPACE.sub(" ", chunk_text[:PREFIX_CHARS])
    return stable_hash(f"{document_key}#{chunk_index}:{preview}")
