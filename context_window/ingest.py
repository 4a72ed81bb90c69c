"""
Ingest files into a vector store namespace.

Files are read, chunked and fingerprinted one by one, then embedded in
batches and upserted in a single call. Fingerprints are stable, so
re-ingesting unchanged files overwrites the same records.
"""
import asyncio
import os
from dataclasses import dataclass
from typing import Dict, List, Sequence

from tqdm import tqdm

from .chunking import chunk_document
from .config import DEFAULT_CHUNK_OVERLAP, DEFAULT_CHUNK_SIZE, validate_chunking
from .errors import EmbeddingError, ExtractionError, UpsertError
from .fingerprint import fingerprint
from .logger import get_logger
from .readers import is_supported_file, read_as_text
from .types import EmbedFn, FilePredicate, Record, TextReader, UpsertFn

logger = get_logger(__name__)

EMBED_BATCH_SIZE = 100


@dataclass(frozen=True)
class IngestStats:
    files: int
    skipped: int
    chunks: int

    def to_dict(self) -> Dict[str, int]:
        return {"files": self.files, "skipped": self.skipped, "chunks": self.chunks}


def collect_files(
    paths: Sequence[str],
    is_supported: FilePredicate = is_supported_file
) -> List[str]:
    """
    Recursively expand files and directories into supported file paths.

    Directories are walked in sorted order; a file reached twice is kept once.

    Raises:
        ExtractionError: if an input path does not exist
    """
    files = []
    seen = set()

    def add(filepath: str):
        key = os.path.realpath(filepath)
        if key not in seen and is_supported(filepath):
            seen.add(key)
            files.append(filepath)

    for path in paths:
        if os.path.isfile(path):
            add(path)
        elif os.path.isdir(path):
            for root, dirs, names in os.walk(path):
                dirs.sort()
                for name in sorted(names):
                    add(os.path.join(root, name))
        else:
            raise ExtractionError(f"Input path does not exist: {path}")

    return files


async def build_records(
    filepath: str,
    chunk_size: int,
    chunk_overlap: int,
    read: TextReader = read_as_text
) -> List[Record]:
    """Read, chunk and fingerprint one file. Embeddings are left empty."""
    text = await read(filepath)
    if not text or not text.strip():
        return []

    source = os.path.basename(filepath)
    return [
        Record(id=fingerprint(filepath, chunk.index, chunk.text), text=chunk.text, source=source)
        for chunk in chunk_document(filepath, text, chunk_size, chunk_overlap)
    ]


async def embed_records(
    records: List[Record],
    embed: EmbedFn,
    batch_size: int = EMBED_BATCH_SIZE
) -> List[Record]:
    """
    Embed records in fixed-size batches.

    Vectors are assigned back by position within each batch, which relies on
    the embedding function returning vectors in request order. Batches run
    one after another; a parallel version has to map results back by record
    id instead of position.

    Raises:
        EmbeddingError: if any batch fails or returns the wrong number of vectors
    """
    embedded = []
    for i in tqdm(range(0, len(records), batch_size), desc="Embedding batches"):
        batch = records[i:i + batch_size]
        try:
            vectors = await embed([record.text for record in batch])
        except EmbeddingError:
            raise
        except Exception as e:
            raise EmbeddingError(f"Embedding batch {i // batch_size} failed", e) from e

        if len(vectors) != len(batch):
            raise EmbeddingError(
                f"Embedding batch {i // batch_size} returned {len(vectors)} vectors "
                f"for {len(batch)} texts"
            )
        embedded.extend(record.with_embedding(vector) for record, vector in zip(batch, vectors))

    return embedded


async def ingest_paths(
    inputs: Sequence[str],
    namespace: str,
    embed: EmbedFn,
    upsert: UpsertFn,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
    read: TextReader = read_as_text,
    is_supported: FilePredicate = is_supported_file,
    batch_size: int = EMBED_BATCH_SIZE
) -> IngestStats:
    """
    Ingest files into the vector store.

    1. Recursively collects all supported files from input paths
    2. Reads and chunks each file, skipping empty or unreadable ones
    3. Generates stable ids for idempotent ingestion
    4. Embeds chunks in batches
    5. Upserts everything to the namespace

    Args:
        inputs: File or directory paths
        namespace: Vector store namespace
        embed: Embedding function
        upsert: Upsert function (batches internally)
        chunk_size: Characters per chunk
        chunk_overlap: Characters shared by consecutive chunks
        read: Text extraction function
        is_supported: File-type predicate used while walking directories
        batch_size: Texts per embedding call

    Returns:
        Ingestion statistics

    Raises:
        ConfigurationError: if the chunk size or overlap is out of range
        ExtractionError: if an input path does not exist
        EmbeddingError: if any embedding batch fails
        UpsertError: if the upsert fails
    """
    validate_chunking(chunk_size, chunk_overlap)
    files = await asyncio.to_thread(collect_files, list(inputs), is_supported)

    if not files:
        logger.warning("No supported files found to ingest")
        return IngestStats(files=0, skipped=0, chunks=0)

    logger.info(f"Ingesting {len(files)} file(s) into namespace '{namespace}'...")

    pending: List[Record] = []
    skipped = 0
    for filepath in files:
        try:
            records = await build_records(filepath, chunk_size, chunk_overlap, read)
        except Exception as e:
            logger.error(f"Failed to process {filepath}: {e}")
            skipped += 1
            continue

        if not records:
            logger.warning(f"Skipping empty file: {filepath}")
            skipped += 1
            continue

        pending.extend(records)

    if not pending:
        logger.warning("No chunks generated from files")
        return IngestStats(files=len(files), skipped=skipped, chunks=0)

    logger.info(f"Generated {len(pending)} chunk(s), embedding...")
    embedded = await embed_records(pending, embed, batch_size)

    logger.info(f"Upserting {len(embedded)} chunk(s) to vector store...")
    try:
        await upsert(embedded, namespace)
    except UpsertError:
        raise
    except Exception as e:
        raise UpsertError(f"Upsert to namespace {namespace} failed", e) from e

    logger.info("Ingestion complete!")
    return IngestStats(files=len(files), skipped=skipped, chunks=len(embedded))
