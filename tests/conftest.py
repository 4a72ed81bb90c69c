"""Shared pytest fixtures for context-window tests."""
import json
import string
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from context_window.memory_store import InMemoryStore


def pytest_addoption(parser):
    """Add command line options for integration tests."""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests (requires API credentials)"
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test (requires --run-integration)"
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --run-integration is passed."""
    if config.getoption("--run-integration"):
        return

    skip_integration = pytest.mark.skip(reason="Need --run-integration to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


def letter_vector(text):
    """Letter-frequency vector: non-negative, so cosine scores stay in [0, 1]."""
    lowered = text.lower()
    return [float(lowered.count(c)) + 0.01 for c in string.ascii_lowercase]


class FakeEmbeddingClient:
    """Deterministic stand-in for EmbeddingClient that records every call."""

    dimensions = len(string.ascii_lowercase)

    def __init__(self):
        self.calls = []

    async def embed(self, texts):
        self.calls.append(list(texts))
        return [letter_vector(t) for t in texts]


@pytest.fixture
def fake_embedding_client():
    return FakeEmbeddingClient()


@pytest.fixture
def memory_store():
    return InMemoryStore()


@pytest.fixture
def fake_chat_client():
    client = MagicMock()
    client.complete = AsyncMock(return_value="America was founded in 1776 [history.txt].")
    return client


@pytest.fixture
def mock_bedrock_client():
    """Mock AWS Bedrock client for embedding and chat tests."""
    with patch("boto3.client") as mock_client:
        client_instance = MagicMock()
        mock_client.return_value = client_instance
        yield client_instance


@pytest.fixture
def sample_embedding():
    """Sample 1024-dimension embedding vector."""
    return [0.1] * 1024


@pytest.fixture
def mock_embedding_response(sample_embedding):
    """Mock response from Titan embedding API."""
    response_body = MagicMock()
    response_body.read.return_value = json.dumps({"embedding": sample_embedding})
    return {"body": response_body}


@pytest.fixture
def history_file(tmp_path):
    path = tmp_path / "history.txt"
    path.write_text("America was founded in 1776.")
    return path


@pytest.fixture
def corpus_dir(tmp_path):
    """Directory tree with supported, unsupported and empty files."""
    root = tmp_path / "corpus"
    (root / "nested").mkdir(parents=True)
    (root / "a.txt").write_text("Alpha document about apples.")
    (root / "b.md").write_text("# Beta\n\nBananas are yellow.")
    (root / "nested" / "c.txt").write_text("Cherries grow on trees.")
    (root / "image.png").write_bytes(b"\x89PNG")
    (root / "empty.txt").write_text("   \n")
    return root
