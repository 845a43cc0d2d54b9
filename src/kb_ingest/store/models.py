"""Domain models for vector-store maintenance queries."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class MetadataFilter(BaseModel):
    """Equality match on one flat payload field.

    Attributes
    ----------
    field:
        Payload key to match (e.g. ``"fileName"``, ``"path"``).
    value:
        Value the field must equal.
    """

    model_config = ConfigDict(frozen=True)

    field: str
    value: str | int | bool

    @classmethod
    def equals(cls, field: str, value: str | int | bool) -> MetadataFilter:
        return cls(field=field, value=value)

    def __str__(self) -> str:
        return f"{self.field}={self.value!r}"
