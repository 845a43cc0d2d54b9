"""Shared pytest configuration and fixtures."""

from pathlib import Path

import pytest

from fakes import FakeEmbeddings, InMemoryVectorStore
from kb_ingest.retry import RetryPolicy


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


@pytest.fixture()
def sleeps() -> list[float]:
    """Delays requested by :func:`no_wait_retry`, in order."""
    return []


@pytest.fixture()
def no_wait_retry(sleeps: list[float]) -> RetryPolicy:
    """Four-attempt policy that records delays instead of sleeping."""
    return RetryPolicy(max_attempts=4, base_delay=2.0, max_delay=15.0, sleep=sleeps.append)


@pytest.fixture()
def embeddings() -> FakeEmbeddings:
    return FakeEmbeddings()


@pytest.fixture()
def store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.fixture()
def kb_dir(tmp_path: Path) -> Path:
    """Two-file corpus with headed sections."""
    root = tmp_path / "assets"
    root.mkdir()
    (root / "onboarding.md").write_text(
        "# Onboarding\n"
        "Welcome to the team. Read this first.\n\n"
        "## Accounts\n"
        "Request a laptop. Then ask IT for an account.\n\n"
        "## Tools\n"
        "We use Git for source control.\n",
        encoding="utf-8",
    )
    (root / "faq.md").write_text(
        "# FAQ\n"
        "Where is the office? On the third floor.\n",
        encoding="utf-8",
    )
    (root / "logo.png").write_bytes(b"\x89PNG\r\n")
    return root
