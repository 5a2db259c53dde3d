"""repograph FastAPI application entry point.

Wires together all providers, services, and routes via dependency injection.
Loads configuration from ``.env`` and ``config/config.yaml`` and configures
structured logging.

``build_components`` is shared with the CLI so both entry points assemble
the same object graph.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from repograph import __version__
from repograph.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from repograph.api.routes import router as api_router
from repograph.config.loader import load_config
from repograph.config.settings import Settings
from repograph.interfaces.llm_provider import ILLMProvider
from repograph.pipeline.orchestrator import DocumentPipeline
from repograph.providers.document_store.memory_document_store import MemoryDocumentStore
from repograph.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
from repograph.providers.llm.openai_provider import OpenAILLMProvider
from repograph.providers.vector_store.pinecone_provider import PineconeVectorStore
from repograph.services.extraction.registry import ExtractorRegistry
from repograph.services.ingestion.chunker import TextChunker
from repograph.services.ingestion.ingestion_service import IngestionService
from repograph.services.ingestion.scanner import FileScanner
from repograph.services.search_service import SearchService
from repograph.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config(settings=settings)

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


def _build_llm_provider(app_settings: Settings) -> ILLMProvider | None:
    """Return an LLM provider when an OpenAI key is configured, else ``None``.

    Without an LLM the pipeline skips summarisation and vision analysis and
    queries return sources without a generated answer.
    """
    if app_settings.openai_api_key:
        return OpenAILLMProvider(settings=app_settings)
    return None


# ---------------------------------------------------------------------------
# Full DI assembly
# ---------------------------------------------------------------------------


def build_components(
    app_settings: Settings,
    app_config: dict | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> dict[str, Any]:
    """Construct every provider and service instance.

    Returns a flat dict of named components to be stored on ``app.state``.
    The caller owns ``http_client`` and must close it on shutdown.

    Raises
    ------
    ConfigurationError
        If the vector store is not configured.
    """
    app_config = app_config if app_config is not None else load_config(settings=app_settings)

    # -- Shared resources --
    http_client = http_client or httpx.AsyncClient(timeout=app_settings.http_timeout)

    # -- Providers --
    vector_store = PineconeVectorStore(settings=app_settings, http_client=http_client)
    embedding_provider = OpenAIEmbeddingProvider(settings=app_settings)
    llm = _build_llm_provider(app_settings)
    document_store = MemoryDocumentStore()

    # -- Pipeline pieces --
    registry = ExtractorRegistry()
    chunker = TextChunker(
        chunk_size=app_settings.chunk_size,
        overlap=app_settings.chunk_overlap,
    )
    scanner = FileScanner.from_config(app_config)

    pipeline = DocumentPipeline(
        registry=registry,
        chunker=chunker,
        embedding_provider=embedding_provider,
        vector_store=vector_store,
        llm=llm,
        summarize_enabled=app_settings.summarize_enabled,
        vision_enabled=app_settings.vision_enabled,
        expected_dimension=app_settings.vector_dimension,
    )

    # -- Services --
    ingestion_service = IngestionService(
        scanner=scanner,
        registry=registry,
        pipeline=pipeline,
        document_store=document_store,
        vector_store=vector_store,
    )
    search_service = SearchService(
        embedding_provider=embedding_provider,
        vector_store=vector_store,
        document_store=document_store,
        llm=llm,
        default_top_k=app_settings.query_top_k,
    )

    provider_status: dict[str, dict[str, Any]] = {
        "vector_store": {
            "name": vector_store.get_provider_name(),
            "available": True,
            "required": True,
        },
        "embedding": {
            "name": embedding_provider.get_provider_name(),
            "available": embedding_provider.is_available(),
            "required": True,
        },
        "llm": {
            "name": llm.get_provider_name() if llm else None,
            "available": llm.is_available() if llm else False,
            "required": False,
        },
    }

    return {
        "http_client": http_client,
        "vector_store": vector_store,
        "embedding_provider": embedding_provider,
        "llm": llm,
        "document_store": document_store,
        "registry": registry,
        "chunker": chunker,
        "scanner": scanner,
        "pipeline": pipeline,
        "ingestion_service": ingestion_service,
        "search_service": search_service,
        "provider_status": provider_status,
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise all providers and services on startup, clean up on shutdown."""
    components = build_components(settings, config)

    for key, value in components.items():
        setattr(application.state, key, value)

    _logger.info(
        "app_startup",
        version=__version__,
        environment=settings.app_env,
        pinecone_host=components["vector_store"].host,
        llm_enabled=components["llm"] is not None,
    )

    yield

    # -- Shutdown: close shared httpx client --
    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    _logger.info("app_shutdown", message="HTTP client closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="repograph API",
        version=__version__,
        description=(
            "Scan local files, extract their text, chunk and embed it, and "
            "index the vectors in a Pinecone-compatible store for similarity "
            "search."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)

    # -- API routes --
    application.include_router(api_router)

    return application


app = create_app()

# ---------------------------------------------------------------------------
# Server entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "repograph.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
