"""Vector-store wire models.

A :class:`Vector` is what the pipeline writes for each embedded chunk; a
:class:`Match` is one ranked hit returned by a similarity query.  Both are
frozen, mirroring the store's JSON shapes field for field.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

# Metadata values the store accepts as filterable scalars.
MetadataValue = str | int | float | bool


class Vector(BaseModel):
    """An embedding plus the metadata stored alongside it."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Vector ID, ``<document_id>_<chunk_index>`` for chunk vectors.")
    values: list[float] = Field(description="Embedding components.")
    metadata: dict[str, MetadataValue] = Field(
        default_factory=dict,
        description="Filterable metadata (document_id, file_hash, text, indexed_at, ...).",
    )


class Match(BaseModel):
    """A single similarity-query hit, in store ranking order."""

    model_config = ConfigDict(frozen=True)

    id: str
    score: float = 0.0
    metadata: dict[str, MetadataValue] = Field(default_factory=dict)
