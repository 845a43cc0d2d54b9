"""Exception hierarchy shared by every ingestion stage."""

from __future__ import annotations


class IngestionError(Exception):
    """Base class for all errors raised by ``kb_ingest``."""


class ConfigError(IngestionError):
    """Required configuration is missing or invalid."""


class InputError(IngestionError):
    """The input directory cannot be used."""


class NoDocumentsError(InputError):
    """The input directory holds no eligible files."""


class EmptyResultError(IngestionError):
    """Splitting produced no non-empty chunks."""


class AlignmentError(IngestionError):
    """Embedding output does not line up with its input.

    Never retried: a mismatch means the provider broke its contract and
    writing anything would pair vectors with the wrong chunks.
    """

    def __init__(self, message: str, *, expected: int, actual: int) -> None:
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class ProviderError(IngestionError):
    """A call to the embedding provider or vector store kept failing."""

    def __init__(self, label: str, attempts: int) -> None:
        super().__init__(f"[{label}] failed after {attempts} attempt(s)")
        self.label = label
        self.attempts = attempts


# Conditions that end a run early without being failures.
BENIGN_ERRORS: tuple[type[IngestionError], ...] = (NoDocumentsError, EmptyResultError)
