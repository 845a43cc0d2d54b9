"""Batched embedding with retry and alignment checks."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING, Callable, TypeVar

from langchain_core.embeddings import Embeddings

from kb_ingest.errors import AlignmentError, ConfigError
from kb_ingest.retry import RetryPolicy

if TYPE_CHECKING:
    from kb_ingest.config import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MODELS = {
    "huggingface": "sentence-transformers/all-MiniLM-L6-v2",
    "openai": "text-embedding-3-small",
}


def batched(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of *items* holding at most *size* elements."""
    if size < 1:
        raise ValueError(f"batch size must be >= 1, got {size}")
    for start in range(0, len(items), size):
        yield items[start : start + size]


def get_embedding_function(settings: Settings) -> Embeddings:
    """Return the configured LangChain embedding provider."""
    model = settings.embedding_model or DEFAULT_MODELS[settings.embedding_provider]

    if settings.embedding_provider == "openai":
        from langchain_openai import OpenAIEmbeddings

        kwargs: dict = {"model": model}
        if settings.openai_base_url:
            logger.info("Using OpenAI-compatible endpoint: %s", settings.openai_base_url)
            kwargs["base_url"] = settings.openai_base_url
            # Self-hosted endpoints often ignore the key; the client requires one.
            kwargs["api_key"] = settings.openai_api_key or "EMPTY"
        else:
            kwargs["api_key"] = settings.openai_api_key
        return OpenAIEmbeddings(**kwargs)

    from langchain_huggingface import HuggingFaceEmbeddings

    return HuggingFaceEmbeddings(
        model_name=model,
        encode_kwargs={"normalize_embeddings": True},
    )


class LazyEmbeddings(Embeddings):
    """Build the wrapped provider on the first embedding call.

    Local models are loaded (and possibly downloaded) when the provider is
    constructed, so a run with nothing to embed never touches them.
    """

    def __init__(self, factory: Callable[[], Embeddings]) -> None:
        self._factory = factory
        self._embeddings: Embeddings | None = None

    @property
    def resolved(self) -> bool:
        return self._embeddings is not None

    def _get(self) -> Embeddings:
        if self._embeddings is None:
            try:
                self._embeddings = self._factory()
            except Exception as exc:
                raise ConfigError(f"Cannot initialise embedding provider: {exc}") from exc
        return self._embeddings

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return self._get().embed_documents(texts)

    def embed_query(self, text: str) -> list[float]:
        return self._get().embed_query(text)


class EmbeddingBatcher:
    """Embed texts in order-preserving batches, one provider call per batch.

    Parameters
    ----------
    embeddings:
        Any LangChain ``Embeddings`` implementation.
    batch_size:
        Maximum number of texts per provider call.
    retry:
        Policy applied to each provider call.
    """

    def __init__(
        self,
        embeddings: Embeddings,
        *,
        batch_size: int = 128,
        retry: RetryPolicy | None = None,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        self._embeddings = embeddings
        self.batch_size = batch_size
        self._retry = retry or RetryPolicy()

    def embed(self, texts: Sequence[str]) -> list[list[float]]:
        """Return one vector per text, in the order of *texts*.

        Raises
        ------
        AlignmentError
            A batch (or the whole run) returned a different number of
            vectors than texts were sent. Not retried.
        ProviderError
            A batch kept failing after every retry.
        """
        batches = list(batched(texts, self.batch_size))
        vectors: list[list[float]] = []
        t0 = time.monotonic()

        for number, batch in enumerate(batches, 1):
            label = f"embed-batch-{number}/{len(batches)}"
            result = self._retry.call(
                lambda batch=batch: self._embeddings.embed_documents(list(batch)),
                label,
            )
            if result is None or len(result) != len(batch):
                got = 0 if result is None else len(result)
                raise AlignmentError(
                    f"Embedding size mismatch in {label}: got {got}, expected {len(batch)}",
                    expected=len(batch),
                    actual=got,
                )
            vectors.extend(list(v) for v in result)
            logger.info("  embedded %d / %d", len(vectors), len(texts))

        if len(vectors) != len(texts):
            raise AlignmentError(
                f"Vector/text misalignment: vectors={len(vectors)}, texts={len(texts)}",
                expected=len(texts),
                actual=len(vectors),
            )

        logger.info(
            "Embedding complete: %d vector(s) in %d batch(es), %.1fs",
            len(vectors),
            len(batches),
            time.monotonic() - t0,
        )
        return vectors
