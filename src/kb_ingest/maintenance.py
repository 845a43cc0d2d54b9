"""Administrative operations on an ingested collection."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel

from kb_ingest.store.models import MetadataFilter

if TYPE_CHECKING:
    from kb_ingest.store.base import VectorStoreBase

logger = logging.getLogger(__name__)


class DeleteReport(BaseModel):
    """Counts reported by :func:`delete_by_filter`."""

    collection: str
    filter: str
    matched: int
    deleted: int


def delete_by_filter(store: VectorStoreBase, field: str, value: str | int | bool) -> DeleteReport:
    """Delete every record whose payload *field* equals *value*.

    Typical use is removing one source file from the knowledge base::

        delete_by_filter(store, "fileName", "onboarding-guide")
    """
    flt = MetadataFilter.equals(field, value)
    matched = store.count(flt)
    logger.info("Found %d matching record(s) in %r for %s", matched, store.collection_name, flt)

    if matched:
        store.delete(flt)
        remaining = store.count(flt)
    else:
        remaining = 0

    report = DeleteReport(
        collection=store.collection_name,
        filter=str(flt),
        matched=matched,
        deleted=matched - remaining,
    )
    logger.info("Delete completed: %d of %d record(s) removed", report.deleted, report.matched)
    return report
