"""Record types passed between ingestion stages.

Every stage consumes one of these frozen models and returns new ones; no
stage mutates another stage's output.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Document(BaseModel):
    """A loaded source file.

    Attributes
    ----------
    path:
        Path relative to the input directory, POSIX separators.
    text:
        Full UTF-8 contents.
    file_name:
        Base name without extension.
    ext:
        Lower-cased suffix including the dot (``".md"``).
    """

    model_config = ConfigDict(frozen=True)

    path: str
    text: str
    file_name: str
    ext: str


class Section(BaseModel):
    """A heading-delimited region of a :class:`Document`."""

    model_config = ConfigDict(frozen=True)

    source_path: str
    file_name: str
    ext: str
    section_index: int = Field(ge=1)
    title: str
    anchor: str
    text: str


class Chunk(BaseModel):
    """The atomic unit that is embedded and stored.

    Field aliases are the camelCase payload keys written to the vector store.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    path: str
    file_name: str
    section_title: str
    section_anchor: str
    section_index: int = Field(ge=1)
    chunk_index: int = Field(ge=1)
    text: str = Field(min_length=1)
    source: Literal["kb"] = "kb"
    ext: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """Return the flat payload: ``text``, ``fileName``, ``path``, ``sectionTitle`` …"""
        return self.model_dump(by_alias=True, exclude_none=True)


class Point(BaseModel):
    """A chunk paired with its vector under a deterministic id."""

    model_config = ConfigDict(frozen=True)

    id: str
    vector: list[float]
    chunk: Chunk

    @property
    def payload(self) -> dict[str, Any]:
        return self.chunk.to_payload()
