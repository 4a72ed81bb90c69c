"""Tests for the indexing module."""
import pytest
from unittest.mock import MagicMock, patch

from context_window.errors import (
    ConfigurationError,
    IndexProvisioningError,
    QueryError,
    UpsertError,
)
from context_window.indexing import PineconeStore
from context_window.types import Record


def make_match(id, score, text="content", source="doc.txt"):
    match = MagicMock()
    match.id = id
    match.score = score
    match.metadata = {"text": text, "source": source}
    return match


class TestPineconeStore:
    """Tests for PineconeStore class."""

    @pytest.fixture
    def mock_store(self):
        """Create store with a mocked Pinecone client."""
        with patch("context_window.indexing.Pinecone") as mock_pinecone, \
             patch("context_window.indexing.time.sleep") as mock_sleep:

            mock_pc_instance = MagicMock()
            mock_pc_instance.list_indexes.return_value = []
            mock_pc_instance.describe_index.return_value = MagicMock(status={"ready": True})
            mock_index = MagicMock()
            mock_pc_instance.Index.return_value = mock_index
            mock_pinecone.return_value = mock_pc_instance

            store = PineconeStore(
                index_name="test-index",
                api_key="test-key",
                batch_size=10,
                poll_interval=2.0,
                max_poll_attempts=3
            )

            store._mock_pc = mock_pc_instance
            store._mock_index = mock_index
            store._mock_sleep = mock_sleep

            yield store

    def test_client_is_created_on_first_use(self, monkeypatch):
        monkeypatch.delenv("PINECONE_API_KEY", raising=False)
        with patch("context_window.indexing.Pinecone") as mock_pinecone:
            store = PineconeStore(index_name="test-index")

            mock_pinecone.assert_not_called()
            with pytest.raises(ConfigurationError, match="PINECONE_API_KEY"):
                store.pc

    def test_api_key_from_env(self, monkeypatch):
        monkeypatch.setenv("PINECONE_API_KEY", "env-key")
        with patch("context_window.indexing.Pinecone") as mock_pinecone:
            store = PineconeStore(index_name="test-index")
            assert store.pc is store.pc

        mock_pinecone.assert_called_once_with(api_key="env-key")

    def test_index_name_from_env(self, monkeypatch):
        monkeypatch.setenv("PINECONE_INDEX_NAME", "env-index")
        with patch("context_window.indexing.Pinecone"):
            store = PineconeStore(api_key="key")
        assert store.index_name == "env-index"

    @pytest.mark.asyncio
    async def test_ensure_index_creates_index(self, mock_store):
        """Test that a missing index is created and polled until ready."""
        await mock_store.ensure_index(1024)

        mock_store._mock_pc.create_index.assert_called_once()
        call_kwargs = mock_store._mock_pc.create_index.call_args[1]
        assert call_kwargs["name"] == "test-index"
        assert call_kwargs["dimension"] == 1024
        assert call_kwargs["metric"] == "cosine"
        mock_store._mock_pc.describe_index.assert_called_with("test-index")

    def test_ensure_index_uses_existing_index(self, mock_store):
        existing = MagicMock()
        existing.name = "test-index"
        mock_store._mock_pc.list_indexes.return_value = [existing]

        mock_store.ensure_index_sync(1024)

        mock_store._mock_pc.create_index.assert_not_called()

    def test_ensure_index_waits_for_ready(self, mock_store):
        mock_store._mock_pc.describe_index.side_effect = [
            MagicMock(status={"ready": False}),
            MagicMock(status={"ready": True}),
        ]

        mock_store.ensure_index_sync(1024)

        assert mock_store._mock_pc.describe_index.call_count == 2
        mock_store._mock_sleep.assert_called_once_with(2.0)

    def test_ensure_index_times_out(self, mock_store):
        mock_store._mock_pc.describe_index.return_value = MagicMock(status={"ready": False})

        with pytest.raises(IndexProvisioningError, match="timed out after 6 seconds"):
            mock_store.ensure_index_sync(1024)

        assert mock_store._mock_pc.describe_index.call_count == 3

    def test_ensure_index_provider_error(self, mock_store):
        mock_store._mock_pc.create_index.side_effect = Exception("quota exceeded")

        with pytest.raises(IndexProvisioningError, match="quota exceeded"):
            mock_store.ensure_index_sync(1024)

    @pytest.mark.asyncio
    async def test_upsert_batches(self, mock_store):
        """Test upserting records in batches into the namespace."""
        records = [
            Record(id=f"id-{i}", text=f"text {i}", source="doc.txt", embedding=[0.1, 0.2])
            for i in range(25)
        ]

        await mock_store.upsert(records, "ns")

        assert mock_store._mock_index.upsert.call_count == 3
        first_call = mock_store._mock_index.upsert.call_args_list[0][1]
        assert first_call["namespace"] == "ns"
        assert len(first_call["vectors"]) == 10
        assert first_call["vectors"][0] == {
            "id": "id-0",
            "values": [0.1, 0.2],
            "metadata": {"text": "text 0", "source": "doc.txt"},
        }

    def test_upsert_empty_is_noop(self, mock_store):
        assert mock_store.upsert_sync([], "ns") == 0
        mock_store._mock_index.upsert.assert_not_called()

    def test_upsert_error(self, mock_store):
        mock_store._mock_index.upsert.side_effect = Exception("503")
        records = [Record(id="a", text="t", source="s", embedding=[0.1])]

        with pytest.raises(UpsertError, match="503"):
            mock_store.upsert_sync(records, "ns")

    @pytest.mark.asyncio
    async def test_query_filters_by_score(self, mock_store):
        mock_store._mock_index.query.return_value = MagicMock(matches=[
            make_match("a", 0.91, "alpha", "a.txt"),
            make_match("b", 0.42, "beta", "b.txt"),
            make_match("c", 0.75, "gamma", "c.txt"),
        ])

        matches = await mock_store.query([0.1, 0.2], top_k=5, namespace="ns", score_threshold=0.5)

        assert [m.id for m in matches] == ["a", "c"]
        assert matches[0].text == "alpha"
        assert matches[0].source == "a.txt"
        call_kwargs = mock_store._mock_index.query.call_args[1]
        assert call_kwargs == {
            "vector": [0.1, 0.2],
            "top_k": 5,
            "namespace": "ns",
            "include_metadata": True,
        }

    def test_query_missing_metadata(self, mock_store):
        match = MagicMock()
        match.id = "a"
        match.score = 0.9
        match.metadata = None
        mock_store._mock_index.query.return_value = MagicMock(matches=[match])

        matches = mock_store.query_sync([0.1], top_k=1, namespace="ns")

        assert matches[0].text == ""
        assert matches[0].source == ""

    def test_query_error(self, mock_store):
        mock_store._mock_index.query.side_effect = Exception("timeout")

        with pytest.raises(QueryError, match="timeout"):
            mock_store.query_sync([0.1], top_k=1, namespace="ns")

    def test_delete_namespace(self, mock_store):
        mock_store.delete_namespace("ns")

        mock_store._mock_index.delete.assert_called_once_with(delete_all=True, namespace="ns")
