"""Ingestion orchestrator: load → split → id → embed → upsert.

Stages run strictly in sequence and every batch is processed one at a
time, so at most one request is outstanding against either service.

Usage::

    from kb_ingest.config import settings
    from kb_ingest.ingestion.pipeline import IngestionPipeline

    report = IngestionPipeline.from_settings(settings).run(settings.input_dir)
    print(report.status, report.upserted)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel

from kb_ingest.errors import BENIGN_ERRORS, ConfigError, EmptyResultError, NoDocumentsError
from kb_ingest.ingestion.chunker import build_splitter, chunk_documents
from kb_ingest.ingestion.embedder import EmbeddingBatcher, LazyEmbeddings, get_embedding_function
from kb_ingest.ingestion.ids import build_points
from kb_ingest.ingestion.loader import DEFAULT_EXTENSIONS, load_directory
from kb_ingest.ingestion.models import Chunk, Document
from kb_ingest.ingestion.upserter import Upserter
from kb_ingest.retry import RetryPolicy
from kb_ingest.store import get_vector_store

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings

    from kb_ingest.config import Settings
    from kb_ingest.store.base import VectorStoreBase

logger = logging.getLogger(__name__)


class IngestionReport(BaseModel):
    """Outcome of one :meth:`IngestionPipeline.run`."""

    status: Literal["completed", "no_documents", "no_chunks"]
    collection: str
    documents: int = 0
    chunks: int = 0
    upserted: int = 0

    def __str__(self) -> str:
        if self.status == "completed":
            return f"Upserted {self.upserted} chunks into {self.collection} from {self.documents} documents"
        return f"Nothing ingested ({self.status})"


class IngestionPipeline:
    """Sequence the ingestion stages over one input directory.

    Parameters
    ----------
    embeddings:
        Embedding provider (LangChain ``Embeddings``).
    store:
        Target vector store.
    chunk_size / chunk_overlap:
        Chunking parameters in estimated tokens.
    embed_batch_size:
        Texts per embedding call.
    upsert_batch_size:
        Points per upsert call.
    retry:
        Policy shared by embedding and upsert calls.
    """

    def __init__(
        self,
        embeddings: Embeddings,
        store: VectorStoreBase,
        *,
        chunk_size: int = 512,
        chunk_overlap: int = 64,
        embed_batch_size: int = 128,
        upsert_batch_size: int = 2000,
        retry: RetryPolicy | None = None,
    ) -> None:
        retry = retry or RetryPolicy()
        try:
            build_splitter(chunk_size, chunk_overlap)
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self._store = store
        self._batcher = EmbeddingBatcher(embeddings, batch_size=embed_batch_size, retry=retry)
        self._upserter = Upserter(store, batch_size=upsert_batch_size, retry=retry)

    @classmethod
    def from_settings(cls, settings: Settings, **overrides) -> IngestionPipeline:
        """Build a pipeline with the collaborators named in *settings*.

        Keyword *overrides* replace individual settings fields first. The
        embedding provider is built, and the Chroma server contacted, only
        once there are chunks to write.
        """
        if overrides:
            settings = settings.model_copy(update=overrides)
        settings.validate_for_ingestion()
        return cls(
            LazyEmbeddings(partial(get_embedding_function, settings)),
            get_vector_store(settings),
            chunk_size=settings.chunk_size,
            chunk_overlap=settings.chunk_overlap,
            embed_batch_size=settings.embed_batch_size,
            upsert_batch_size=settings.upsert_batch_size,
            retry=RetryPolicy.from_settings(settings),
        )

    @property
    def collection_name(self) -> str:
        return self._store.collection_name

    # -- public API -----------------------------------------------------------

    def run(
        self,
        input_dir: str | Path,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    ) -> IngestionReport:
        """Ingest every eligible file in *input_dir*.

        Returns a report with status ``no_documents`` or ``no_chunks``
        (after logging a warning) when there is nothing to write.

        Raises
        ------
        InputError
            *input_dir* cannot be read.
        ConfigError
            The vector store is unreachable.
        AlignmentError
            Embedding output does not match the chunks; nothing was upserted.
        ProviderError
            A batch kept failing after every retry.
        """
        documents: list[Document] = []
        try:
            documents = load_directory(input_dir, extensions)
            chunks = self.prepare(documents)
        except BENIGN_ERRORS as exc:
            logger.warning("%s", exc)
            status = "no_documents" if isinstance(exc, NoDocumentsError) else "no_chunks"
            return IngestionReport(
                status=status,
                collection=self.collection_name,
                documents=len(documents),
            )

        if not self._store.health_check():
            raise ConfigError(f"Vector store for collection {self.collection_name!r} is unreachable")

        vectors = self._batcher.embed([c.text for c in chunks])
        points = build_points(chunks, vectors)
        upserted = self._upserter.upsert(points)

        report = IngestionReport(
            status="completed",
            collection=self.collection_name,
            documents=len(documents),
            chunks=len(chunks),
            upserted=upserted,
        )
        logger.info("%s (deterministic ids)", report)
        return report

    def prepare(self, documents: Iterable[Document]) -> list[Chunk]:
        """Split *documents* into the final ordered chunk list.

        Raises
        ------
        EmptyResultError
            No non-empty chunk survived splitting.
        """
        chunks = chunk_documents(documents, self.chunk_size, self.chunk_overlap)
        if not chunks:
            raise EmptyResultError(
                "No non-empty chunks produced. Check your Markdown and splitter settings."
            )
        return chunks
