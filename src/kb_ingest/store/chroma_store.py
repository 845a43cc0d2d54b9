"""Chroma implementation of the vector-store abstraction."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import chromadb

from kb_ingest.errors import ConfigError
from kb_ingest.store.base import VectorStoreBase
from kb_ingest.store.models import MetadataFilter

if TYPE_CHECKING:
    from kb_ingest.ingestion.models import Point

logger = logging.getLogger(__name__)

# Chroma keeps the chunk text as the record's document, not as metadata.
_DOCUMENT_FIELD = "text"


def _build_chroma_where(flt: MetadataFilter) -> dict[str, Any]:
    """Convert a :class:`MetadataFilter` to Chroma ``where`` syntax."""
    if flt.field == _DOCUMENT_FIELD:
        raise ValueError("Chroma cannot filter on 'text'; choose a metadata field")
    return {flt.field: {"$eq": flt.value}}


def _to_metadata(payload: dict[str, Any]) -> dict[str, Any]:
    # Chroma metadata values must be flat str/int/float/bool
    return {
        k: v
        for k, v in payload.items()
        if k != _DOCUMENT_FIELD and isinstance(v, (str, int, float, bool))
    }


class ChromaVectorStore(VectorStoreBase):
    """Chroma-backed vector store.

    Parameters
    ----------
    collection_name:
        Name of the Chroma collection; created on first use.
    host:
        Chroma server hostname.
    port:
        Chroma server port.
    distance_metric:
        ``cosine`` | ``l2`` | ``ip``; only applied when the collection is created.
    client:
        Pre-built Chroma client. When *None* an ``HttpClient`` is created
        on first use.
    """

    def __init__(
        self,
        collection_name: str,
        *,
        host: str = "localhost",
        port: int = 8000,
        distance_metric: str = "cosine",
        client: Any = None,
    ) -> None:
        super().__init__(collection_name)
        self._host = host
        self._port = port
        self._client = client
        self._distance_metric = distance_metric
        self._collection: Any = None

    @property
    def client(self) -> Any:
        if self._client is None:
            try:
                self._client = chromadb.HttpClient(host=self._host, port=self._port)
            except Exception as exc:
                raise ConfigError(f"Cannot connect to Chroma at {self._host}:{self._port}: {exc}") from exc
        return self._client

    @property
    def collection(self) -> Any:
        if self._collection is None:
            self._collection = self.client.get_or_create_collection(
                name=self.collection_name,
                metadata={"hnsw:space": self._distance_metric},
            )
        return self._collection

    # -- VectorStoreBase overrides --------------------------------------------

    def upsert(self, points: Sequence[Point]) -> None:
        if not points:
            return
        payloads = [p.payload for p in points]
        self.collection.upsert(
            ids=[p.id for p in points],
            embeddings=[p.vector for p in points],
            documents=[payload[_DOCUMENT_FIELD] for payload in payloads],
            metadatas=[_to_metadata(payload) for payload in payloads],
        )

    def count(self, flt: MetadataFilter) -> int:
        result = self.collection.get(where=_build_chroma_where(flt), include=[])
        return len(result.get("ids") or [])

    def delete(self, flt: MetadataFilter) -> None:
        self.collection.delete(where=_build_chroma_where(flt))

    def health_check(self) -> bool:
        try:
            self.client.heartbeat()
            return True
        except Exception:
            logger.warning("Chroma health-check failed", exc_info=True)
            return False
