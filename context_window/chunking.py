"""
Sliding-window text chunking.
"""
from dataclasses import dataclass
from typing import Any, Dict, List

from .config import DEFAULT_CHUNK_OVERLAP, DEFAULT_CHUNK_SIZE


@dataclass(frozen=True)
class Chunk:
    """A contiguous window of a source document"""
    source_id: str
    index: int
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_id": self.source_id,
            "index": self.index,
            "text": self.text
        }


def chunk_text(
    text: str,
    size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_CHUNK_OVERLAP
) -> List[str]:
    """
    Split text into overlapping fixed-size windows.

    Each window starts size - overlap characters after the previous one,
    so consecutive windows share overlap characters. The last window may
    be shorter than size.

    Args:
        text: Text to split
        size: Window length in characters
        overlap: Characters shared by consecutive windows (0 <= overlap < size)

    Returns:
        List of chunk strings in document order
    """
    if size <= 0:
        raise ValueError(f"size must be positive, got {size}")
    if not 0 <= overlap < size:
        raise ValueError(f"overlap must be in [0, size), got {overlap}")

    if not text:
        return []

    if len(text) <= size:
        return [text]

    chunks = []
    step = size - overlap
    start = 0
    while start < len(text):
        end = start + size
        chunks.append(text[start:end])
        if end >= len(text):
            break
        start += step

    return chunks


def chunk_document(
    source_id: str,
    text: str,
    size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_CHUNK_OVERLAP
) -> List[Chunk]:
    """Chunk a document and tag each window with its position."""
    return [
        Chunk(source_id=source_id, index=i, text=piece)
        for i, piece in enumerate(chunk_text(text, size, overlap))
    ]
