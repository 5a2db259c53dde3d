"""repograph API layer: routes, schemas, and middleware."""

from repograph.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from repograph.api.routes import router
from repograph.api.schemas import (
    DirectoryIngestionResponse,
    DocumentResponse,
    ErrorResponse,
    HealthResponse,
    QueryRequest,
    QueryResponse,
)

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "router",
    "DirectoryIngestionResponse",
    "DocumentResponse",
    "ErrorResponse",
    "HealthResponse",
    "QueryRequest",
    "QueryResponse",
]
