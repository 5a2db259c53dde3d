"""FastAPI API routes for repograph.

Service dependencies are resolved from ``app.state`` via FastAPI's
``Depends`` using the ``Annotated`` pattern.

# ─── API ROUTE MAP ─────────────────────────────────────────────────────
#
# Endpoint                         Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/v1/health                   GET     Health check + provider status
# /api/v1/documents                GET     List processed documents
# /api/v1/documents                POST    Ingest one server-side file
# /api/v1/documents/scan           POST    Ingest a server-side directory
# /api/v1/documents/{id}           GET     Document details
# /api/v1/documents/{id}           DELETE  Delete document and its vectors
# /api/v1/query                    POST    Similarity search (+ optional answer)
# /api/v1/index/stats              GET     Vector index statistics
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request

from repograph import __version__
from repograph.api.schemas import (
    DeleteDocumentResponse,
    DirectoryIngestionResponse,
    DocumentListResponse,
    DocumentResponse,
    HealthResponse,
    IndexStatsResponse,
    IngestFileRequest,
    QueryRequest,
    QueryResponse,
    ScanDirectoryRequest,
)
from repograph.models.document import ProcessingState
from repograph.models.ingestion import IngestionResult
from repograph.models.query import Query, QueryFilter
from repograph.services.ingestion.ingestion_service import IngestionService
from repograph.services.search_service import SearchService
from repograph.utils.errors import FileReadError, UnsupportedFileTypeError
from repograph.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

# All routes in this file are prefixed with /api/v1.
router = APIRouter(prefix="/api/v1")


# ---------------------------------------------------------------------------
# Dependency injection helpers: resolve singletons from app.state
# ---------------------------------------------------------------------------


def _get_ingestion_service(request: Request) -> IngestionService:
    """Return the ingestion service from application state."""
    return request.app.state.ingestion_service


def _get_search_service(request: Request) -> SearchService:
    """Return the search service from application state."""
    return request.app.state.search_service


IngestionDep = Annotated[IngestionService, Depends(_get_ingestion_service)]
SearchDep = Annotated[SearchService, Depends(_get_search_service)]


# ---------------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------------


@router.post(
    "/documents",
    response_model=IngestionResult,
    summary="Ingest a single file",
)
async def ingest_document(body: IngestFileRequest, ingestion: IngestionDep) -> IngestionResult:
    try:
        return await ingestion.ingest_file(body.path)
    except UnsupportedFileTypeError as exc:
        raise HTTPException(status_code=415, detail=exc.message) from exc
    except FileReadError as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc


@router.post(
    "/documents/scan",
    response_model=DirectoryIngestionResponse,
    summary="Ingest every supported file in a directory",
)
async def scan_directory(
    body: ScanDirectoryRequest, ingestion: IngestionDep
) -> DirectoryIngestionResponse:
    try:
        results = await ingestion.ingest_directory(
            body.path, recursive=body.recursive, concurrency=body.concurrency
        )
    except FileReadError as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc

    return DirectoryIngestionResponse(
        results=results,
        total=len(results),
        indexed=sum(
            1 for r in results if r.state is ProcessingState.INDEXED and not r.skipped_duplicate
        ),
        duplicates=sum(1 for r in results if r.skipped_duplicate),
        failed=sum(1 for r in results if r.state is ProcessingState.FAILED),
    )


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


@router.get("/documents", response_model=DocumentListResponse, summary="List documents")
async def list_documents(ingestion: IngestionDep) -> DocumentListResponse:
    documents = await ingestion.list_documents()
    return DocumentListResponse(
        documents=[DocumentResponse.from_document(d) for d in documents],
        total=len(documents),
    )


@router.get(
    "/documents/{document_id}",
    response_model=DocumentResponse,
    summary="Get one document",
)
async def get_document(document_id: str, ingestion: IngestionDep) -> DocumentResponse:
    document = await ingestion.get_document(document_id)
    if document is None:
        raise HTTPException(status_code=404, detail=f"Document not found: {document_id}")
    return DocumentResponse.from_document(document)


@router.delete(
    "/documents/{document_id}",
    response_model=DeleteDocumentResponse,
    summary="Delete a document and its vectors",
)
async def delete_document(document_id: str, ingestion: IngestionDep) -> DeleteDocumentResponse:
    deleted = await ingestion.delete_document(document_id)
    if not deleted:
        raise HTTPException(status_code=404, detail=f"Document not found: {document_id}")
    return DeleteDocumentResponse(document_id=document_id, deleted=True)


# ---------------------------------------------------------------------------
# Query
# ---------------------------------------------------------------------------


@router.post("/query", response_model=QueryResponse, summary="Similarity search")
async def query_index(body: QueryRequest, search: SearchDep) -> QueryResponse:
    query = Query(
        text=body.query,
        top_k=body.top_k,
        namespace=body.namespace,
        filter=QueryFilter(
            file_type=body.file_type,
            date_from=body.date_from,
            date_to=body.date_to,
            metadata=body.metadata,
        ),
    )

    if body.generate_answer:
        result = await search.answer(query)
        return QueryResponse(
            query_id=result.query_id,
            answer=result.answer,
            results=result.sources,
            total=len(result.sources),
        )

    results = await search.search(query)
    return QueryResponse(query_id=query.id, results=results, total=len(results))


# ---------------------------------------------------------------------------
# Index / health
# ---------------------------------------------------------------------------


@router.get("/index/stats", response_model=IndexStatsResponse, summary="Vector index statistics")
async def index_stats(ingestion: IngestionDep) -> IndexStatsResponse:
    return IndexStatsResponse(stats=await ingestion.get_index_stats())


@router.get("/health", response_model=HealthResponse, summary="Application health check")
async def health_check(request: Request) -> HealthResponse:
    """Return application health, version, and provider configuration."""
    providers: dict[str, Any] = getattr(request.app.state, "provider_status", {})
    healthy = bool(providers) and all(
        p.get("available", False) for p in providers.values() if p.get("required", True)
    )
    return HealthResponse(
        status="healthy" if healthy else "degraded",
        version=__version__,
        providers=providers,
    )
