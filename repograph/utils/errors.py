"""Custom exception hierarchy for repograph.

All application exceptions inherit from :class:`RepographError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "pinecone", "openai") caused the failure.

The hierarchy is organized by pipeline concern:

    RepographError  (base -- catch-all for any repograph error)
    +-- FileReadError              (local file could not be read)
    +-- UnsupportedFileTypeError   (no extractor accepts the extension)
    +-- RemoteAPIError             (non-2xx response from the vector store)
    +-- ResponseDecodeError        (malformed JSON response body)
    +-- BatchUpsertError           (first failing batch of an upsert)
    +-- ConfigurationError         (startup / missing config)
    +-- ProviderUnavailableError   (external service down / unreachable)
    +-- EmbeddingError             (embedding call failed or wrong shape)
    +-- LLMError                   (summary / vision call failed)
    +-- PipelineError              (orchestration failures)
        +-- InvalidStateTransitionError

No class in this module retries anything.  Retry and backoff are the
caller's responsibility.
"""

from __future__ import annotations


class RepographError(Exception):
    """Base exception for all repograph errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  The ``__str__`` method prefixes the provider name in brackets
    for structured log output, e.g. ``[pinecone] API error (status 500)``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Extraction errors
# ---------------------------------------------------------------------------

class FileReadError(RepographError):
    """Raised when a local file cannot be opened or read."""

    def __init__(
        self,
        message: str = "Failed to read file",
        provider_name: str | None = None,
        file_path: str | None = None,
    ) -> None:
        self._file_path = file_path
        super().__init__(message=message, provider_name=provider_name)

    @property
    def file_path(self) -> str | None:
        return self._file_path


class UnsupportedFileTypeError(RepographError):
    """Raised when no registered extractor accepts a file extension."""

    def __init__(
        self,
        message: str = "Unsupported file type",
        provider_name: str | None = None,
        extension: str | None = None,
    ) -> None:
        self._extension = extension
        super().__init__(message=message, provider_name=provider_name)

    @property
    def extension(self) -> str | None:
        return self._extension


# ---------------------------------------------------------------------------
# Vector-store errors
# ---------------------------------------------------------------------------

class RemoteAPIError(RepographError):
    """Raised when the vector store answers with a non-2xx status.

    The response body is kept verbatim so operators can see exactly what
    the store rejected.
    """

    def __init__(
        self,
        status_code: int,
        body: str = "",
        provider_name: str | None = None,
    ) -> None:
        self._status_code = status_code
        self._body = body
        super().__init__(
            message=f"API error (status {status_code}): {body}",
            provider_name=provider_name,
        )

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def body(self) -> str:
        return self._body


class ResponseDecodeError(RepographError):
    """Raised when a response body is not the JSON shape we expect."""

    def __init__(
        self,
        message: str = "Failed to decode response",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class BatchUpsertError(RepographError):
    """Raised on the first batch of an upsert that fails.

    Batches before ``batch_number`` are already durably written; nothing is
    rolled back.  ``committed_count`` tells the caller how many leading
    vectors made it, so only the tail needs to be retried.  The underlying
    :class:`RemoteAPIError` (or transport error) is chained as
    ``__cause__``.
    """

    def __init__(
        self,
        batch_number: int,
        total_batches: int,
        committed_count: int,
        reason: str = "",
        provider_name: str | None = None,
    ) -> None:
        self._batch_number = batch_number
        self._total_batches = total_batches
        self._committed_count = committed_count
        message = f"failed to upsert batch {batch_number} of {total_batches}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message=message, provider_name=provider_name)

    @property
    def batch_number(self) -> int:
        return self._batch_number

    @property
    def total_batches(self) -> int:
        return self._total_batches

    @property
    def committed_count(self) -> int:
        return self._committed_count


# ---------------------------------------------------------------------------
# External service / provider errors
# ---------------------------------------------------------------------------

class ProviderUnavailableError(RepographError):
    """Raised when an external service cannot be reached at all."""

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class EmbeddingError(RepographError):
    """Raised when embedding generation fails or returns the wrong shape."""

    def __init__(
        self,
        message: str = "Embedding generation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class LLMError(RepographError):
    """Raised when an LLM summary or vision call fails."""

    def __init__(
        self,
        message: str = "LLM API call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Orchestration / configuration errors
# ---------------------------------------------------------------------------

class ConfigurationError(RepographError):
    """Raised when configuration is invalid or missing at construction time."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class PipelineError(RepographError):
    """Raised when pipeline orchestration fails."""

    def __init__(
        self,
        message: str = "Pipeline orchestration failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class InvalidStateTransitionError(PipelineError):
    """Raised when a document is moved to a state its lifecycle forbids."""

    def __init__(
        self,
        current: str,
        target: str,
        provider_name: str | None = None,
    ) -> None:
        self._current = current
        self._target = target
        super().__init__(
            message=f"Invalid processing state transition: {current} -> {target}",
            provider_name=provider_name,
        )

    @property
    def current(self) -> str:
        return self._current

    @property
    def target(self) -> str:
        return self._target
