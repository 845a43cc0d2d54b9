"""Abstract base class for vector-store backends.

Adding a new backend only requires subclassing :class:`VectorStoreBase`
and implementing the four abstract methods. The ingestion pipeline never
touches a client library directly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING

from kb_ingest.store.models import MetadataFilter

if TYPE_CHECKING:
    from kb_ingest.ingestion.models import Point


class VectorStoreBase(ABC):
    """Backend-agnostic vector-store interface.

    Parameters
    ----------
    collection_name:
        Logical name of the collection / index.
    """

    def __init__(self, collection_name: str) -> None:
        self.collection_name = collection_name

    @abstractmethod
    def upsert(self, points: Sequence[Point]) -> None:
        """Insert *points*, overwriting any record with the same id."""
        ...

    @abstractmethod
    def count(self, flt: MetadataFilter) -> int:
        """Return the number of records whose payload matches *flt*."""
        ...

    @abstractmethod
    def delete(self, flt: MetadataFilter) -> None:
        """Delete every record whose payload matches *flt*."""
        ...

    @abstractmethod
    def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable and ready."""
        ...
