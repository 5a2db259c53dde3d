"""Pydantic request/response schemas for the repograph API.

Defines the public contract for all REST endpoints: ingestion, document
lookup and deletion, similarity query, index stats, and health.

Convention: request schemas end with "Request", response schemas end with
"Response".  Field(...) adds constraints and descriptions for the API docs.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from repograph.models.document import Document, ProcessingState
from repograph.models.ingestion import IngestionResult
from repograph.models.query import SearchResult


class IngestFileRequest(BaseModel):
    """Ingest a single file readable by the server."""

    path: str = Field(..., min_length=1, description="Server-side path of the file.")


class ScanDirectoryRequest(BaseModel):
    """Ingest every supported file under a server-side directory."""

    path: str = Field(..., min_length=1)
    recursive: bool = True
    concurrency: int = Field(default=1, ge=1, le=16)


class DirectoryIngestionResponse(BaseModel):
    """Per-file results of a directory ingestion plus totals."""

    results: list[IngestionResult]
    total: int
    indexed: int
    duplicates: int
    failed: int


class DocumentResponse(BaseModel):
    """A stored document without its content or chunk bodies."""

    id: str
    file_name: str
    file_path: str
    file_type: str
    file_size: int
    file_hash: str
    processing_state: ProcessingState
    summary: str | None = None
    chunk_count: int = 0
    already_indexed: bool = False
    created_at: datetime
    updated_at: datetime
    indexed_at: datetime | None = None
    error: str | None = None

    @classmethod
    def from_document(cls, document: Document) -> DocumentResponse:
        return cls(
            id=document.id,
            file_name=document.file_name,
            file_path=document.file_path,
            file_type=document.file_type,
            file_size=document.file_size,
            file_hash=document.file_hash,
            processing_state=document.processing_state,
            summary=document.summary,
            chunk_count=len(document.chunks),
            already_indexed=document.already_indexed,
            created_at=document.created_at,
            updated_at=document.updated_at,
            indexed_at=document.indexed_at,
            error=document.error,
        )


class DocumentListResponse(BaseModel):
    documents: list[DocumentResponse]
    total: int


class DeleteDocumentResponse(BaseModel):
    document_id: str
    deleted: bool


class QueryRequest(BaseModel):
    """Similarity search over the index, optionally with a generated answer."""

    query: str = Field(..., min_length=1, max_length=2000)
    top_k: int | None = Field(default=None, ge=1, le=100)
    namespace: str | None = None
    file_type: str | None = Field(default=None, description="e.g. '.md'")
    date_from: datetime | None = None
    date_to: datetime | None = None
    metadata: dict[str, str] = Field(default_factory=dict)
    generate_answer: bool = False


class QueryResponse(BaseModel):
    query_id: str
    answer: str = ""
    results: list[SearchResult]
    total: int


class IndexStatsResponse(BaseModel):
    """Raw statistics payload from the vector store."""

    stats: dict[str, Any]


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: dict[str, Any]


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
