"""Unit tests for the vector-store backends (clients are mocked)."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from pydantic import ValidationError

from kb_ingest.config import Settings
from kb_ingest.errors import ConfigError
from kb_ingest.ingestion.ids import build_points
from kb_ingest.ingestion.models import Chunk, Point
from kb_ingest.store import MetadataFilter, get_vector_store


def _points() -> list[Point]:
    chunks = [
        Chunk(
            path="faq.md",
            file_name="faq",
            section_title="FAQ",
            section_anchor="faq",
            section_index=1,
            chunk_index=i,
            text=f"answer {i}",
            ext=".md",
        )
        for i in (1, 2)
    ]
    return build_points(chunks, [[0.1, 0.2, 0.3], [0.4, 0.5, 0.6]])


# ── MetadataFilter ──────────────────────────────────────────────────────


def test_metadata_filter_equals() -> None:
    flt = MetadataFilter.equals("fileName", "faq")
    assert (flt.field, flt.value) == ("fileName", "faq")
    assert str(flt) == "fileName='faq'"


def test_metadata_filter_rejects_fractional_values() -> None:
    with pytest.raises(ValidationError):
        MetadataFilter.equals("sectionIndex", 1.5)


# ── Chroma ──────────────────────────────────────────────────────────────


class TestChromaVectorStore:
    @pytest.fixture()
    def client(self) -> MagicMock:
        return MagicMock()

    @pytest.fixture()
    def chroma(self, client: MagicMock):
        from kb_ingest.store.chroma_store import ChromaVectorStore

        return ChromaVectorStore("kb_docs_v1", client=client, distance_metric="cosine")

    def test_collection_created_lazily_with_metric(self, chroma, client: MagicMock) -> None:
        client.get_or_create_collection.assert_not_called()
        _ = chroma.collection
        _ = chroma.collection
        client.get_or_create_collection.assert_called_once_with(
            name="kb_docs_v1", metadata={"hnsw:space": "cosine"}
        )

    def test_upsert_splits_text_from_metadata(self, chroma, client: MagicMock) -> None:
        points = _points()
        chroma.upsert(points)

        collection = client.get_or_create_collection.return_value
        kwargs = collection.upsert.call_args.kwargs
        assert kwargs["ids"] == [p.id for p in points]
        assert kwargs["embeddings"] == [[0.1, 0.2, 0.3], [0.4, 0.5, 0.6]]
        assert kwargs["documents"] == ["answer 1", "answer 2"]
        assert kwargs["metadatas"][1] == {
            "fileName": "faq",
            "path": "faq.md",
            "sectionTitle": "FAQ",
            "sectionAnchor": "faq",
            "sectionIndex": 1,
            "chunkIndex": 2,
            "source": "kb",
            "ext": ".md",
        }

    def test_upsert_of_nothing_is_skipped(self, chroma, client: MagicMock) -> None:
        chroma.upsert([])
        client.get_or_create_collection.assert_not_called()

    def test_count_and_delete_use_where_filter(self, chroma, client: MagicMock) -> None:
        collection = client.get_or_create_collection.return_value
        collection.get.return_value = {"ids": ["a", "b", "c"]}
        flt = MetadataFilter.equals("fileName", "faq")

        assert chroma.count(flt) == 3
        chroma.delete(flt)

        collection.get.assert_called_once_with(where={"fileName": {"$eq": "faq"}}, include=[])
        collection.delete.assert_called_once_with(where={"fileName": {"$eq": "faq"}})

    def test_text_filter_is_rejected(self, chroma) -> None:
        with pytest.raises(ValueError, match="text"):
            chroma.count(MetadataFilter.equals("text", "answer 1"))

    def test_health_check(self, chroma, client: MagicMock) -> None:
        assert chroma.health_check() is True
        client.heartbeat.side_effect = ConnectionError("down")
        assert chroma.health_check() is False


# ── Qdrant ──────────────────────────────────────────────────────────────


class TestQdrantVectorStore:
    @pytest.fixture()
    def client(self) -> MagicMock:
        client = MagicMock()
        client.collection_exists.return_value = False
        return client

    @pytest.fixture()
    def qdrant(self, client: MagicMock):
        from kb_ingest.store.qdrant_store import QdrantVectorStore

        return QdrantVectorStore("kb_docs_v1", client=client)

    def test_first_upsert_creates_collection(self, qdrant, client: MagicMock) -> None:
        from qdrant_client.models import Distance

        points = _points()
        qdrant.upsert(points)
        qdrant.upsert(points)

        client.create_collection.assert_called_once()
        params = client.create_collection.call_args.kwargs["vectors_config"]
        assert params.size == 3
        assert params.distance == Distance.COSINE

        kwargs = client.upsert.call_args.kwargs
        assert kwargs["collection_name"] == "kb_docs_v1"
        assert kwargs["wait"] is True
        assert [str(p.id) for p in kwargs["points"]] == [p.id for p in points]
        assert kwargs["points"][0].payload["text"] == "answer 1"

    def test_existing_collection_is_reused(self, qdrant, client: MagicMock) -> None:
        client.collection_exists.return_value = True
        qdrant.upsert(_points())
        client.create_collection.assert_not_called()

    def test_count_and_delete_with_payload_filter(self, qdrant, client: MagicMock) -> None:
        from qdrant_client.models import FilterSelector

        client.collection_exists.return_value = True
        client.count.return_value = MagicMock(count=7)
        flt = MetadataFilter.equals("fileName", "faq")

        assert qdrant.count(flt) == 7
        qdrant.delete(flt)

        count_kwargs = client.count.call_args.kwargs
        assert count_kwargs["exact"] is True
        condition = count_kwargs["count_filter"].must[0]
        assert condition.key == "fileName"
        assert condition.match.value == "faq"

        selector = client.delete.call_args.kwargs["points_selector"]
        assert isinstance(selector, FilterSelector)
        assert selector.filter.must[0].key == "fileName"

    def test_missing_collection_counts_zero(self, qdrant, client: MagicMock) -> None:
        assert qdrant.count(MetadataFilter.equals("fileName", "faq")) == 0
        qdrant.delete(MetadataFilter.equals("fileName", "faq"))
        client.count.assert_not_called()
        client.delete.assert_not_called()

    def test_unknown_metric_rejected(self, client: MagicMock) -> None:
        from kb_ingest.store.qdrant_store import QdrantVectorStore

        with pytest.raises(ValueError, match="distance"):
            QdrantVectorStore("kb", client=client, distance_metric="manhattan")

    def test_health_check(self, qdrant, client: MagicMock) -> None:
        assert qdrant.health_check() is True
        client.get_collections.side_effect = ConnectionError("down")
        assert qdrant.health_check() is False


# ── factory ─────────────────────────────────────────────────────────────


def test_factory_defaults_to_chroma() -> None:
    from kb_ingest.store.chroma_store import ChromaVectorStore

    cfg = Settings(_env_file=None, chroma_host="chroma.local", chroma_port=9000)
    with patch("kb_ingest.store.chroma_store.chromadb.HttpClient") as http_client:
        store = get_vector_store(cfg)
        http_client.assert_not_called()
        assert store.health_check() is True
    assert isinstance(store, ChromaVectorStore)
    assert store.collection_name == "kb_docs_v1"
    http_client.assert_called_once_with(host="chroma.local", port=9000)


def test_unreachable_chroma_server_is_a_config_error() -> None:
    from kb_ingest.store.chroma_store import ChromaVectorStore

    store = ChromaVectorStore("kb_docs_v1", host="localhost", port=1)
    error = ValueError("Could not connect to a Chroma server. Are you sure it is running?")
    with patch("kb_ingest.store.chroma_store.chromadb.HttpClient", side_effect=error):
        assert store.health_check() is False
        with pytest.raises(ConfigError, match="localhost:1"):
            store.count(MetadataFilter.equals("fileName", "faq"))


def test_factory_builds_qdrant_with_collection_override() -> None:
    from kb_ingest.store.qdrant_store import QdrantVectorStore

    cfg = Settings(_env_file=None, vector_store="qdrant", qdrant_url="http://qdrant:6333", qdrant_api_key="k")
    with patch("kb_ingest.store.qdrant_store.QdrantClient") as qdrant_client:
        store = get_vector_store(cfg, "other")
    assert isinstance(store, QdrantVectorStore)
    assert store.collection_name == "other"
    qdrant_client.assert_called_once_with(url="http://qdrant:6333", api_key="k")
