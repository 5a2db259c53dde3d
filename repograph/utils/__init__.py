"""Utility modules for repograph.

- **errors** -- Domain exception hierarchy rooted at RepographError; each
  pipeline concern raises its own subclass so callers can handle failures
  granularly (e.g. retry only the tail after a BatchUpsertError).
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
"""

from repograph.utils.errors import (
    BatchUpsertError,
    ConfigurationError,
    EmbeddingError,
    FileReadError,
    InvalidStateTransitionError,
    LLMError,
    PipelineError,
    ProviderUnavailableError,
    RemoteAPIError,
    RepographError,
    ResponseDecodeError,
    UnsupportedFileTypeError,
)
from repograph.utils.logging import configure_logging, get_logger

__all__ = [
    "BatchUpsertError",
    "ConfigurationError",
    "EmbeddingError",
    "FileReadError",
    "InvalidStateTransitionError",
    "LLMError",
    "PipelineError",
    "ProviderUnavailableError",
    "RemoteAPIError",
    "RepographError",
    "ResponseDecodeError",
    "UnsupportedFileTypeError",
    "configure_logging",
    "get_logger",
]
