"""Text chunking strategies."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable

from langchain_text_splitters import RecursiveCharacterTextSplitter

from kb_ingest.ingestion.models import Chunk, Document, Section
from kb_ingest.ingestion.sections import split_sections

logger = logging.getLogger(__name__)

# Paragraph, line and sentence boundaries are preferred over cutting words.
SEPARATORS = ["\n\n", "\n", ". ", "? ", "! ", "; ", " ", ""]

CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    """Rough token count (≈4 characters per token)."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def build_splitter(chunk_size: int = 512, chunk_overlap: int = 64) -> RecursiveCharacterTextSplitter:
    """Return the sentence-aware splitter used for every section.

    Parameters
    ----------
    chunk_size:
        Target chunk size in estimated tokens.
    chunk_overlap:
        Estimated tokens shared by consecutive chunks of one section.
    """
    if chunk_overlap >= chunk_size:
        raise ValueError(
            f"chunk_overlap ({chunk_overlap}) must be < chunk_size ({chunk_size})"
        )
    return RecursiveCharacterTextSplitter(
        chunk_size=chunk_size,
        chunk_overlap=chunk_overlap,
        length_function=estimate_tokens,
        separators=SEPARATORS,
        keep_separator="end",
    )


def split_section(splitter: RecursiveCharacterTextSplitter, section: Section) -> list[Chunk]:
    """Split one *section* into trimmed, non-empty chunks numbered from 1."""
    chunks: list[Chunk] = []
    for piece in splitter.split_text(section.text):
        text = piece.strip()
        # headings-only or whitespace pieces never reach the store
        if not text:
            continue
        chunks.append(
            Chunk(
                path=section.source_path,
                file_name=section.file_name,
                section_title=section.title,
                section_anchor=section.anchor,
                section_index=section.section_index,
                chunk_index=len(chunks) + 1,
                text=text,
                ext=section.ext,
            )
        )
    return chunks


def chunk_documents(
    documents: Iterable[Document],
    chunk_size: int = 512,
    chunk_overlap: int = 64,
) -> list[Chunk]:
    """Split *documents* into sections, then into chunks, preserving order.

    Returns
    -------
    list[Chunk]
        Chunks in document → section → chunk order, ready for embedding.
    """
    splitter = build_splitter(chunk_size, chunk_overlap)
    chunks: list[Chunk] = []
    n_sections = 0
    for document in documents:
        for section in split_sections(document):
            n_sections += 1
            chunks.extend(split_section(splitter, section))
    logger.info("Produced %d chunk(s) from %d section(s)", len(chunks), n_sections)
    return chunks
