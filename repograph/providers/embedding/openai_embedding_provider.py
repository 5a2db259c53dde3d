"""OpenAI-compatible embedding provider adapter.

Wraps the ``openai`` async client to implement :class:`IEmbeddingProvider`.
Supports both real OpenAI and OpenAI-compatible providers via custom
``base_url`` and model name settings.
"""

from __future__ import annotations

import openai
import structlog

from repograph.config.settings import Settings
from repograph.interfaces.embedding_provider import IEmbeddingProvider
from repograph.utils.errors import EmbeddingError

logger = structlog.get_logger(logger_name=__name__)

_OPENAI_BATCH_LIMIT = 2048
_DEFAULT_MODEL = "text-embedding-3-small"

# Native output sizes of known embedding models.
_MODEL_DIMENSIONS: dict[str, int] = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}

# Models that accept the ``dimensions`` request parameter.
_SHORTENABLE_MODELS = frozenset({"text-embedding-3-small", "text-embedding-3-large"})


class OpenAIEmbeddingProvider(IEmbeddingProvider):
    """Embedding provider backed by an OpenAI-compatible embeddings API.

    Vectors are produced at ``settings.vector_dimension`` so they fit the
    index.  ``text-embedding-3-*`` models are asked to shorten their output
    when the index dimension is smaller than the model's native size; for
    other models the two must already agree.
    """

    def __init__(self, settings: Settings) -> None:
        self._api_key = settings.openai_api_key

        client_kwargs: dict = {"api_key": self._api_key}
        if settings.openai_base_url:
            client_kwargs["base_url"] = settings.openai_base_url

        self._client = openai.AsyncOpenAI(**client_kwargs)
        self._model = settings.openai_embedding_model or _DEFAULT_MODEL
        self._dimension = settings.vector_dimension
        native = _MODEL_DIMENSIONS.get(self._model)
        self._request_dimensions = (
            self._dimension
            if self._model in _SHORTENABLE_MODELS and native != self._dimension
            else None
        )
        self._provider_label = (
            "openai-compatible_embedding" if settings.openai_base_url else "openai_embedding"
        )

    # ------------------------------------------------------------------
    # IEmbeddingProvider implementation
    # ------------------------------------------------------------------

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors, splitting into batches of 2048 inputs."""
        if not texts:
            return []

        extra: dict = {}
        if self._request_dimensions is not None:
            extra["dimensions"] = self._request_dimensions

        try:
            all_embeddings: list[list[float]] = []
            for start in range(0, len(texts), _OPENAI_BATCH_LIMIT):
                batch = texts[start : start + _OPENAI_BATCH_LIMIT]
                response = await self._client.embeddings.create(
                    input=batch,
                    model=self._model,
                    **extra,
                )
                all_embeddings.extend(item.embedding for item in response.data)
                logger.info(
                    "openai_embedding_batch",
                    model=self._model,
                    provider=self._provider_label,
                    batch_size=len(batch),
                    tokens=response.usage.total_tokens if response.usage else None,
                )
            return all_embeddings
        except openai.APIError as exc:
            raise EmbeddingError(
                message=f"{self._provider_label} API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    async def embed_single(self, text: str) -> list[float]:
        result = await self.embed([text])
        return result[0]

    def get_dimension(self) -> int:
        return self._dimension

    def get_provider_name(self) -> str:
        return self._provider_label

    def is_available(self) -> bool:
        """Return ``True`` if an API key is configured."""
        return bool(self._api_key)
