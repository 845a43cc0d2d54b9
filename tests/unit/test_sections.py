"""Unit tests for heading-aware section splitting."""

from __future__ import annotations

import pytest

from kb_ingest.ingestion.models import Document
from kb_ingest.ingestion.sections import infer_section_title, slugify, split_sections


def _doc(text: str, path: str = "guide.md") -> Document:
    return Document(path=path, text=text, file_name=path.rsplit("/", 1)[-1].rsplit(".", 1)[0], ext=".md")


@pytest.mark.parametrize(
    ("title", "expected"),
    [
        ("Getting Started!", "getting-started"),
        ("  Hello   World  ", "hello-world"),
        ("foo - bar", "foo-bar"),
        ("snake_case Title", "snakecase-title"),
        ("Ünïcödé Überblick", "ünïcödé-überblick"),
        ("Version 2.0 (beta)", "version-20-beta"),
    ],
)
def test_slugify(title: str, expected: str) -> None:
    assert slugify(title) == expected


def test_infer_title_uses_first_heading() -> None:
    assert infer_section_title("intro\n## Setup ##\n### Later\n", "guide.md") == "Setup"


def test_infer_title_falls_back_to_file_name() -> None:
    assert infer_section_title("#NoSpace is not a heading\n", "docs/intro.md") == "intro"


def test_infer_title_skips_fenced_comments() -> None:
    text = "Run this first:\n```sh\n# install deps\npip install .\n```\n"
    assert infer_section_title(text, "g.md") == "g"
    assert split_sections(_doc(text, "g.md"))[0].anchor == "g"


def test_two_headings_give_two_sections() -> None:
    sections = split_sections(_doc("## Alpha\nFirst body.\n\n## Beta\nSecond body.\n"))
    assert [s.section_index for s in sections] == [1, 2]
    assert [s.title for s in sections] == ["Alpha", "Beta"]
    assert [s.anchor for s in sections] == ["alpha", "beta"]
    assert all(s.source_path == "guide.md" for s in sections)


def test_sections_rebuild_the_document() -> None:
    text = "Preamble line.\n# One\nbody one\n## Two\nbody two\n### Three\nbody three"
    sections = split_sections(_doc(text))
    assert "".join(s.text for s in sections) == text
    assert [s.title for s in sections] == ["guide", "One", "Two", "Three"]


def test_headings_inside_code_fences_are_ignored() -> None:
    text = "# Real\n```bash\n# not a heading\n```\n~~~\n## also not\n~~~\nafter\n"
    sections = split_sections(_doc(text))
    assert len(sections) == 1
    assert sections[0].title == "Real"


def test_blank_sections_do_not_consume_an_index() -> None:
    sections = split_sections(_doc("\n\n   \n# Only\nbody\n"))
    assert [(s.section_index, s.title) for s in sections] == [(1, "Only")]


def test_heading_only_section_is_kept() -> None:
    sections = split_sections(_doc("# Title\n## Sub\nbody\n"))
    assert [s.text for s in sections] == ["# Title\n", "## Sub\nbody\n"]


def test_numbering_restarts_per_document() -> None:
    a = split_sections(_doc("# A1\nx\n# A2\ny\n", path="a.md"))
    b = split_sections(_doc("# B1\nz\n", path="b.md"))
    assert [s.section_index for s in a] == [1, 2]
    assert [s.section_index for s in b] == [1]


def test_empty_document_has_no_sections() -> None:
    assert split_sections(_doc("")) == []
