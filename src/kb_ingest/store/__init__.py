"""
Store — vector-store backends behind one narrow interface.

Public surface
--------------
- :class:`VectorStoreBase` — abstract backend (upsert / count / delete).
- :class:`ChromaVectorStore` — default Chroma backend.
- :class:`QdrantVectorStore` — Qdrant backend.
- :class:`MetadataFilter` — equality filter on one payload field.
- :func:`get_vector_store` — build the backend named in the settings.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from kb_ingest.store.base import VectorStoreBase
from kb_ingest.store.models import MetadataFilter

if TYPE_CHECKING:
    from kb_ingest.config import Settings

__all__ = [
    "ChromaVectorStore",
    "MetadataFilter",
    "QdrantVectorStore",
    "VectorStoreBase",
    "get_vector_store",
]


def get_vector_store(settings: Settings, collection_name: str | None = None) -> VectorStoreBase:
    """Return the backend selected by ``settings.vector_store``."""
    name = collection_name or settings.collection_name
    if settings.vector_store == "qdrant":
        from kb_ingest.store.qdrant_store import QdrantVectorStore

        return QdrantVectorStore(
            name,
            url=settings.qdrant_url,
            api_key=settings.qdrant_api_key,
            distance_metric=settings.distance_metric,
        )

    from kb_ingest.store.chroma_store import ChromaVectorStore

    return ChromaVectorStore(
        name,
        host=settings.chroma_host,
        port=settings.chroma_port,
        distance_metric=settings.distance_metric,
    )


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import backends to avoid pulling in client libraries at import time."""
    if name == "ChromaVectorStore":
        from kb_ingest.store.chroma_store import ChromaVectorStore

        return ChromaVectorStore
    if name == "QdrantVectorStore":
        from kb_ingest.store.qdrant_store import QdrantVectorStore

        return QdrantVectorStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
