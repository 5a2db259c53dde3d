"""Query-side models: the user's question, its filter, and the answers.

``Query`` and ``QueryFilter`` describe what to look for; ``SearchResult``
is one retrieved chunk joined back to its document; ``QueryResult`` wraps
an optional generated answer with the sources it was grounded in.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)  # noqa: UP017


# ---------------------------------------------------------------------------
# QueryFilter: restricts a similarity query by vector metadata.
# ---------------------------------------------------------------------------
class QueryFilter(BaseModel):
    """Metadata constraints applied to a similarity query.

    ``date_from`` / ``date_to`` bound the ``indexed_at`` timestamp stored on
    every vector.  ``metadata`` entries are exact-match constraints.
    """

    model_config = ConfigDict(frozen=True)

    file_type: str | None = Field(default=None, description="Extension with leading dot, e.g. '.md'.")
    date_from: datetime | None = None
    date_to: datetime | None = None
    metadata: dict[str, str] = Field(default_factory=dict)

    def is_empty(self) -> bool:
        return (
            self.file_type is None
            and self.date_from is None
            and self.date_to is None
            and not self.metadata
        )

    def to_store_filter(self) -> dict[str, Any] | None:
        """Translate into the store's filter predicate, or ``None`` when unconstrained.

        Returns
        -------
        dict or None
            e.g. ``{"file_type": {"$eq": ".md"}, "indexed_at": {"$gte": 1700000000}}``.
        """
        if self.is_empty():
            return None

        predicate: dict[str, Any] = {}
        for key, value in self.metadata.items():
            predicate[key] = {"$eq": value}
        if self.file_type is not None:
            predicate["file_type"] = {"$eq": self.file_type.lower()}

        indexed_range: dict[str, int] = {}
        if self.date_from is not None:
            indexed_range["$gte"] = int(self.date_from.timestamp())
        if self.date_to is not None:
            indexed_range["$lte"] = int(self.date_to.timestamp())
        if indexed_range:
            predicate["indexed_at"] = indexed_range
        return predicate


class Query(BaseModel):
    """A natural-language search request."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    text: str = Field(min_length=1)
    top_k: int | None = Field(default=None, ge=1, description="Falls back to the service default.")
    namespace: str | None = None
    filter: QueryFilter = Field(default_factory=QueryFilter)
    created_at: datetime = Field(default_factory=_utcnow)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------
class SearchResult(BaseModel):
    """One retrieved chunk, joined back to the document it came from."""

    model_config = ConfigDict(frozen=True)

    document_id: str
    chunk_id: str = ""
    score: float = 0.0
    content: str = ""
    file_name: str = ""
    file_path: str = ""
    file_type: str = ""
    metadata: dict[str, str] = Field(default_factory=dict)


class QueryResult(BaseModel):
    """An answer (possibly empty) with the sources that back it."""

    model_config = ConfigDict(frozen=True)

    query_id: str
    answer: str = ""
    sources: list[SearchResult] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=_utcnow)
