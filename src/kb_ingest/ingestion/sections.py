"""Heading-aware section splitting for Markdown documents."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from pathlib import PurePosixPath

from kb_ingest.ingestion.models import Document, Section

logger = logging.getLogger(__name__)

# ATX heading: up to three spaces of indent, 1-6 '#', whitespace, text.
_HEADING_RE = re.compile(r" {0,3}#{1,6}[ \t]+\S")
_TITLE_RE = re.compile(r" {0,3}#{1,6}[ \t]+(.+?)(?:[ \t]+#+)?[ \t]*$")
_FENCES = ("```", "~~~")


def slugify(title: str) -> str:
    """Anchor for *title*: ``"Getting Started!"`` → ``"getting-started"``."""
    slug = title.lower().strip()
    slug = re.sub(r"[^\w\s-]|_", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    return re.sub(r"-+", "-", slug)


def _headings(text: str) -> Iterator[tuple[int, str]]:
    """Yield ``(offset, line)`` for every heading line outside a code fence."""
    offset = 0
    fence: str | None = None
    for line in text.splitlines(keepends=True):
        stripped = line.lstrip(" ")
        if fence is not None:
            if stripped.startswith(fence):
                fence = None
        elif stripped.startswith(_FENCES):
            fence = stripped[:3]
        elif _HEADING_RE.match(line):
            yield offset, line
        offset += len(line)


def infer_section_title(text: str, path: str) -> str:
    """First heading in *text*, falling back to the base name of *path*."""
    for _, line in _headings(text):
        match = _TITLE_RE.match(line.rstrip("\r\n"))
        if match:
            return match.group(1).strip()
    return PurePosixPath(path).stem.strip()


def split_sections(document: Document) -> list[Section]:
    """Split *document* at every Markdown heading.

    Each heading line opens a new section that runs up to the next
    heading. Text before the first heading forms its own section.
    Headings inside fenced code blocks are ignored. Section text is the
    verbatim slice of the document, so concatenating all sections
    (including skipped blank ones) rebuilds the original text.

    ``section_index`` starts at 1 for every document; whitespace-only
    sections are skipped without consuming an index.
    """
    text = document.text
    boundaries = [0]
    boundaries.extend(offset for offset, _ in _headings(text) if offset > 0)
    boundaries.append(len(text))

    sections: list[Section] = []
    for start, end in zip(boundaries, boundaries[1:]):
        body = text[start:end]
        if not body.strip():
            continue
        title = infer_section_title(body, document.path)
        sections.append(
            Section(
                source_path=document.path,
                file_name=document.file_name,
                ext=document.ext,
                section_index=len(sections) + 1,
                title=title,
                anchor=slugify(title),
                text=body,
            )
        )

    logger.debug("Split %s into %d section(s)", document.path, len(sections))
    return sections
