"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings

from kb_ingest.errors import ConfigError


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # Input
    input_dir: str = Field(default="./assets", description="Directory holding the knowledge-base files")
    extensions: list[str] = Field(
        default=[".md", ".markdown", ".txt"],
        description="File suffixes that take part in ingestion (case-insensitive)",
    )

    # Chunking (estimated tokens, ~4 chars each)
    chunk_size: int = 512
    chunk_overlap: int = 64

    # Batching
    embed_batch_size: int = 128
    upsert_batch_size: int = 2000

    # Retry policy shared by embedding and upsert calls
    retry_max_attempts: int = 4
    retry_base_delay: float = Field(default=2.0, description="Seconds before the first retry")
    retry_max_delay: float = Field(default=15.0, description="Upper bound on a single backoff delay")

    # Embedding
    embedding_provider: Literal["huggingface", "openai"] = "huggingface"
    embedding_model: str = Field(
        default="",
        description=(
            "Model identifier. Empty selects the provider default: "
            "'sentence-transformers/all-MiniLM-L6-v2' for huggingface, "
            "'text-embedding-3-small' for openai."
        ),
    )
    openai_api_key: str = ""
    openai_base_url: str = Field(
        default="",
        description="Optional OpenAI-compatible endpoint. Leave empty to use OpenAI cloud.",
    )

    # Vector store
    vector_store: Literal["chroma", "qdrant"] = "chroma"
    collection_name: str = "kb_docs_v1"
    distance_metric: Literal["cosine", "l2", "ip"] = "cosine"
    chroma_host: str = "localhost"
    chroma_port: int = 8000
    qdrant_url: str = ""
    qdrant_api_key: str = ""

    # Logging
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    def validate_for_ingestion(self) -> None:
        """Raise :class:`ConfigError` when the settings cannot drive a run."""
        problems: list[str] = []
        if not self.collection_name.strip():
            problems.append("collection_name must not be empty")
        if self.chunk_size < 1:
            problems.append(f"chunk_size must be >= 1, got {self.chunk_size}")
        if self.chunk_overlap < 0 or self.chunk_overlap >= self.chunk_size:
            problems.append(
                f"chunk_overlap ({self.chunk_overlap}) must be >= 0 and < chunk_size ({self.chunk_size})"
            )
        if self.embed_batch_size < 1:
            problems.append(f"embed_batch_size must be >= 1, got {self.embed_batch_size}")
        if self.upsert_batch_size < 1:
            problems.append(f"upsert_batch_size must be >= 1, got {self.upsert_batch_size}")
        if self.retry_max_attempts < 1:
            problems.append(f"retry_max_attempts must be >= 1, got {self.retry_max_attempts}")
        if self.embedding_provider == "openai" and not self.openai_api_key and not self.openai_base_url:
            problems.append("OPENAI_API_KEY is required when EMBEDDING_PROVIDER=openai")
        if self.vector_store == "qdrant" and not self.qdrant_url:
            problems.append("QDRANT_URL is required when VECTOR_STORE=qdrant")
        if problems:
            raise ConfigError("; ".join(problems))


# Singleton — import `settings` wherever needed.
settings = Settings()
