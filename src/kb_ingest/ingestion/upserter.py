"""Batched, retried upsert of points into the vector store."""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from typing import TYPE_CHECKING

from kb_ingest.ingestion.embedder import batched
from kb_ingest.retry import RetryPolicy

if TYPE_CHECKING:
    from kb_ingest.ingestion.models import Point
    from kb_ingest.store.base import VectorStoreBase

logger = logging.getLogger(__name__)


class Upserter:
    """Write points to *store* in consecutive batches of at most *batch_size*.

    Ids are deterministic, so submitting the same logical chunk twice
    overwrites the earlier record instead of adding a new one.
    """

    def __init__(
        self,
        store: VectorStoreBase,
        *,
        batch_size: int = 2000,
        retry: RetryPolicy | None = None,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        self._store = store
        self.batch_size = batch_size
        self._retry = retry or RetryPolicy()

    def upsert(self, points: Sequence[Point]) -> int:
        """Upsert *points* and return how many were submitted."""
        batches = list(batched(points, self.batch_size))
        upserted = 0
        t0 = time.monotonic()
        for number, batch in enumerate(batches, 1):
            self._retry.call(
                lambda batch=batch: self._store.upsert(batch),
                f"upsert-{number}/{len(batches)}",
            )
            upserted += len(batch)
            logger.info("  upserted batch %d/%d (%d points)", number, len(batches), len(batch))

        logger.info(
            "Upserted %d point(s) into %r in %.1fs (%d batches)",
            upserted,
            self._store.collection_name,
            time.monotonic() - t0,
            len(batches),
        )
        return upserted
