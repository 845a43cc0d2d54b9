"""Qdrant implementation of the vector-store abstraction."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from qdrant_client import QdrantClient
from qdrant_client.models import (
    Distance,
    FieldCondition,
    Filter,
    FilterSelector,
    MatchValue,
    PointStruct,
    VectorParams,
)

from kb_ingest.store.base import VectorStoreBase
from kb_ingest.store.models import MetadataFilter

if TYPE_CHECKING:
    from kb_ingest.ingestion.models import Point

logger = logging.getLogger(__name__)

_DISTANCES = {
    "cosine": Distance.COSINE,
    "l2": Distance.EUCLID,
    "ip": Distance.DOT,
}


def _build_qdrant_filter(flt: MetadataFilter) -> Filter:
    """Convert a :class:`MetadataFilter` to a Qdrant ``must`` filter."""
    return Filter(must=[FieldCondition(key=flt.field, match=MatchValue(value=flt.value))])


class QdrantVectorStore(VectorStoreBase):
    """Qdrant-backed vector store.

    The collection is created on the first upsert, sized to the vectors
    of that batch.

    Parameters
    ----------
    collection_name:
        Name of the Qdrant collection.
    url / api_key:
        Qdrant server connection details.
    distance_metric:
        ``cosine`` | ``l2`` | ``ip``.
    client:
        Pre-built ``QdrantClient``. When *None* one is created from *url*.
    """

    def __init__(
        self,
        collection_name: str,
        *,
        url: str = "",
        api_key: str = "",
        distance_metric: str = "cosine",
        client: Any = None,
    ) -> None:
        super().__init__(collection_name)
        if distance_metric not in _DISTANCES:
            raise ValueError(f"Unsupported distance metric: {distance_metric!r}")
        self._client = client if client is not None else QdrantClient(url=url, api_key=api_key or None)
        self._distance = _DISTANCES[distance_metric]
        self._ready = False

    def _exists(self) -> bool:
        if not self._ready:
            self._ready = self._client.collection_exists(self.collection_name)
        return self._ready

    def _ensure_collection(self, vector_size: int) -> None:
        if self._exists():
            return
        logger.info(
            "Creating Qdrant collection %r (size=%d, distance=%s)",
            self.collection_name,
            vector_size,
            self._distance,
        )
        self._client.create_collection(
            collection_name=self.collection_name,
            vectors_config=VectorParams(size=vector_size, distance=self._distance),
        )
        self._ready = True

    # -- VectorStoreBase overrides --------------------------------------------

    def upsert(self, points: Sequence[Point]) -> None:
        if not points:
            return
        self._ensure_collection(len(points[0].vector))
        self._client.upsert(
            collection_name=self.collection_name,
            points=[PointStruct(id=p.id, vector=p.vector, payload=p.payload) for p in points],
            wait=True,
        )

    def count(self, flt: MetadataFilter) -> int:
        if not self._exists():
            return 0
        result = self._client.count(
            collection_name=self.collection_name,
            count_filter=_build_qdrant_filter(flt),
            exact=True,
        )
        return result.count

    def delete(self, flt: MetadataFilter) -> None:
        if not self._exists():
            return
        self._client.delete(
            collection_name=self.collection_name,
            points_selector=FilterSelector(filter=_build_qdrant_filter(flt)),
            wait=True,
        )

    def health_check(self) -> bool:
        try:
            self._client.get_collections()
            return True
        except Exception:
            logger.warning("Qdrant health-check failed", exc_info=True)
            return False
