"""Deterministic chunk identifiers and point assembly."""

from __future__ import annotations

from collections.abc import Sequence
from uuid import UUID, uuid5

from kb_ingest.errors import AlignmentError
from kb_ingest.ingestion.models import Chunk, Point

KB_NAMESPACE = UUID("6f1a73a1-8d1b-4c31-9b00-1c4c2e0f9b12")


def stable_id(path: str, section_index: int, chunk_index: int) -> str:
    """UUIDv5 of ``"{path}|s{section_index}|c{chunk_index}"`` under :data:`KB_NAMESPACE`.

    Only the structural position goes into the id, never the text, so a
    re-run overwrites the record at the same position.
    """
    return str(uuid5(KB_NAMESPACE, f"{path}|s{section_index}|c{chunk_index}"))


def chunk_id(chunk: Chunk) -> str:
    return stable_id(chunk.path, chunk.section_index, chunk.chunk_index)


def build_points(chunks: Sequence[Chunk], vectors: Sequence[Sequence[float]]) -> list[Point]:
    """Pair ``chunks[i]`` with ``vectors[i]``.

    Raises
    ------
    AlignmentError
        When the two sequences differ in length.
    """
    if len(vectors) != len(chunks):
        raise AlignmentError(
            f"Vector/chunk misalignment: vectors={len(vectors)}, chunks={len(chunks)}",
            expected=len(chunks),
            actual=len(vectors),
        )
    return [
        Point(id=chunk_id(chunk), vector=list(vector), chunk=chunk)
        for chunk, vector in zip(chunks, vectors)
    ]
