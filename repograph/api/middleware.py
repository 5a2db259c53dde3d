"""API middleware: CORS, request logging, and error handling.

Provides helper functions and middleware classes to configure cross-origin
resource sharing, structured request logging (via structlog), and automatic
conversion of ``RepographError`` subclasses into JSON ``ErrorResponse``
bodies.

Starlette middleware is a stack (last added, first executed).  main.py adds
ErrorHandlingMiddleware first and RequestLoggingMiddleware second, so the
request log sees the final status code after errors were converted.
"""

from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from repograph.api.schemas import ErrorResponse
from repograph.utils.errors import (
    BatchUpsertError,
    ConfigurationError,
    FileReadError,
    ProviderUnavailableError,
    RemoteAPIError,
    RepographError,
    ResponseDecodeError,
    UnsupportedFileTypeError,
)
from repograph.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

# First matching class wins; anything else is a 500.
_STATUS_CODES: tuple[tuple[type[RepographError], int], ...] = (
    (UnsupportedFileTypeError, 415),
    (FileReadError, 404),
    (ProviderUnavailableError, 503),
    (ConfigurationError, 503),
    (RemoteAPIError, 502),
    (ResponseDecodeError, 502),
    (BatchUpsertError, 502),
)


def status_code_for(exc: RepographError) -> int:
    for error_type, status_code in _STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return 500


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Add CORS middleware to the FastAPI application.

    Parameters
    ----------
    app:
        The FastAPI application instance.
    allowed_origins:
        Explicit list of allowed origins.  Defaults to ``["*"]`` for
        development; override with specific origins in production.
    """
    origins = allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# ---------------------------------------------------------------------------
# Request Logging
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status code, and duration."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        response: Response | None = None

        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = response.status_code if response else 500
            _logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=status_code,
                duration_ms=duration_ms,
            )


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Catch ``RepographError`` subclasses and return structured JSON errors.

    The client sees the exception class name and message with a status
    code chosen by :func:`status_code_for`.  Stack traces stay in the
    server log.  Other exceptions fall through to FastAPI's default 500
    handler.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except RepographError as exc:
            status_code = status_code_for(exc)
            _logger.error(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                provider=exc.provider_name,
                status=status_code,
                path=str(request.url.path),
            )
            body = ErrorResponse(error=type(exc).__name__, detail=exc.message)
            return JSONResponse(status_code=status_code, content=body.model_dump())
