"""Unit tests for the document loader."""

from __future__ import annotations

from pathlib import Path

import pytest

from kb_ingest.errors import InputError, NoDocumentsError
from kb_ingest.ingestion.loader import load_directory


def test_loads_only_recognized_files_in_name_order(tmp_path: Path) -> None:
    (tmp_path / "b.txt").write_text("plain text", encoding="utf-8")
    (tmp_path / "a.md").write_text("# Hello\nWorld", encoding="utf-8")
    (tmp_path / "c.pdf").write_bytes(b"%PDF-1.7")
    nested = tmp_path / "nested"
    nested.mkdir()
    (nested / "d.md").write_text("# Skipped", encoding="utf-8")

    docs = load_directory(tmp_path, [".md", ".txt"])

    assert [d.path for d in docs] == ["a.md", "b.txt"]
    assert docs[0].text == "# Hello\nWorld"
    assert docs[0].file_name == "a"
    assert docs[0].ext == ".md"
    assert docs[1].ext == ".txt"


def test_extension_match_is_case_insensitive(tmp_path: Path) -> None:
    (tmp_path / "README.MD").write_text("# Readme", encoding="utf-8")
    docs = load_directory(tmp_path, ["md"])
    assert [d.path for d in docs] == ["README.MD"]
    assert docs[0].ext == ".md"


def test_directory_named_like_a_file_is_skipped(tmp_path: Path) -> None:
    (tmp_path / "notes.md").mkdir()
    with pytest.raises(NoDocumentsError):
        load_directory(tmp_path, [".md"])


def test_empty_directory_signals_no_documents(tmp_path: Path) -> None:
    with pytest.raises(NoDocumentsError, match="No files"):
        load_directory(tmp_path)


def test_no_documents_is_an_input_error(tmp_path: Path) -> None:
    with pytest.raises(InputError):
        load_directory(tmp_path)


def test_missing_directory_raises(tmp_path: Path) -> None:
    with pytest.raises(InputError, match="not found"):
        load_directory(tmp_path / "missing")


def test_file_instead_of_directory_raises(tmp_path: Path) -> None:
    path = tmp_path / "a.md"
    path.write_text("x", encoding="utf-8")
    with pytest.raises(InputError, match="not a directory"):
        load_directory(path)
