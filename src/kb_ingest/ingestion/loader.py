"""Document loader: reads the eligible files of one directory."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from kb_ingest.errors import InputError, NoDocumentsError
from kb_ingest.ingestion.models import Document

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS: tuple[str, ...] = (".md", ".markdown", ".txt")


def load_directory(
    path: str | Path,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
) -> list[Document]:
    """Load every regular file in *path* whose suffix is in *extensions*.

    Only the top level of *path* is listed; sub-directories and other
    entries are skipped. Documents come back sorted by file name so that
    downstream ordering does not depend on the filesystem.

    Parameters
    ----------
    path:
        Directory holding the source files.
    extensions:
        Recognized suffixes, compared case-insensitively.

    Returns
    -------
    list[Document]
        One record per eligible file, ``path`` relative to *path*.

    Raises
    ------
    InputError
        *path* is missing, not a directory, or cannot be listed.
    NoDocumentsError
        Nothing in *path* is eligible.
    """
    root = Path(path)
    allowed = {_normalise_ext(e) for e in extensions}

    if not root.exists():
        raise InputError(f"Input directory not found: {root}")
    if not root.is_dir():
        raise InputError(f"Input path is not a directory: {root}")
    try:
        entries = sorted(root.iterdir(), key=lambda p: p.name)
    except OSError as exc:
        raise InputError(f"Cannot list input directory {root}: {exc}") from exc

    documents: list[Document] = []
    for entry in entries:
        if not entry.is_file() or entry.suffix.lower() not in allowed:
            continue
        try:
            text = entry.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise InputError(f"Cannot read {entry}: {exc}") from exc
        documents.append(
            Document(
                path=entry.relative_to(root).as_posix(),
                text=text,
                file_name=entry.stem,
                ext=entry.suffix.lower(),
            )
        )

    if not documents:
        raise NoDocumentsError(
            f"No files with extensions {sorted(allowed)} in {root}"
        )
    logger.info("Loaded %d document(s) from %s", len(documents), root)
    return documents


def _normalise_ext(ext: str) -> str:
    ext = ext.strip().lower()
    return ext if ext.startswith(".") else f".{ext}"
