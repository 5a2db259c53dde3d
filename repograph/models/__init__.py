"""Pydantic data models for the repograph pipeline."""

from repograph.models.document import Chunk, Document, FileMetadata, ProcessingState
from repograph.models.ingestion import IngestionResult
from repograph.models.query import Query, QueryFilter, QueryResult, SearchResult
from repograph.models.vector import Match, Vector

__all__ = [
    "Chunk",
    "Document",
    "FileMetadata",
    "IngestionResult",
    "Match",
    "ProcessingState",
    "Query",
    "QueryFilter",
    "QueryResult",
    "SearchResult",
    "Vector",
]
