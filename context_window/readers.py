"""
Text extraction for ingestible files.
Plain text and Markdown are read directly, PDFs go through the Unstructured API.
"""
import asyncio
import os
import pathlib
from typing import Optional

import unstructured_client
from unstructured_client.models import operations, shared

from .config import require_env
from .errors import ExtractionError

SUPPORTED_EXTENSIONS = (".txt", ".md", ".pdf")


def is_supported_file(filepath: str) -> bool:
    """Check if a file can be ingested based on its extension."""
    return pathlib.Path(filepath).suffix.lower() in SUPPORTED_EXTENSIONS


class DocumentReader():
    def __init__(self, client: Optional[unstructured_client.UnstructuredClient] = None):
        self._client = client

    @property
    def client(self) -> unstructured_client.UnstructuredClient:
        # Only PDFs need the API, so plain-text corpora work without a key
        if self._client is None:
            self._client = unstructured_client.UnstructuredClient(
                api_key_auth=require_env(
                    "UNSTRUCTURED_API_KEY",
                    "It is needed to extract text from PDF files."
                )
            )
        return self._client

    def _read_plain(self, filepath: str) -> str:
        with open(filepath, "r", encoding="utf-8") as f:
            return f.read()

    def _read_pdf(self, filepath: str) -> str:
        with open(filepath, "rb") as file_content:
            req = operations.PartitionRequest(
                partition_parameters=shared.PartitionParameters(
                    files=shared.Files(
                        content=file_content.read(),
                        file_name=os.path.basename(filepath),
                    ),
                    strategy=shared.Strategy.FAST,
                    languages=['eng'],
                ),
            )

        res = self.client.general.partition(request=req)
        texts = [element.get("text", "") for element in res.elements or []]
        return "\n\n".join(t for t in texts if t)

    def read_sync(self, filepath: str) -> str:
        """
        Extract the text of a single file.

        Args:
            filepath: Path to a .txt, .md or .pdf file

        Returns:
            Extracted text

        Raises:
            ExtractionError: if the file type is unsupported or the file cannot be read
        """
        ext = pathlib.Path(filepath).suffix.lower()
        if ext not in SUPPORTED_EXTENSIONS:
            raise ExtractionError(
                f"Unsupported file type: {ext or '<none>'}. "
                f"Supported types: {', '.join(SUPPORTED_EXTENSIONS)}"
            )

        try:
            if ext == ".pdf":
                return self._read_pdf(filepath)
            return self._read_plain(filepath)
        except ExtractionError:
            raise
        except Exception as e:
            raise ExtractionError(f"Failed to read file {filepath}", e) from e

    async def read_as_text(self, filepath: str) -> str:
        return await asyncio.to_thread(self.read_sync, filepath)


_default_reader = None


async def read_as_text(filepath: str) -> str:
    """
    Convenience function to extract text with a shared reader.
    """
    global _default_reader

    if _default_reader is None:
        _default_reader = DocumentReader()

    return await _default_reader.read_as_text(filepath)
