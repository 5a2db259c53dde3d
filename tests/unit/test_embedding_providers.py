"""Unit tests for the OpenAI embedding provider adapter."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import openai
import pytest

from conftest import make_settings
from repograph.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
from repograph.utils.errors import EmbeddingError

_PATCH_TARGET = "repograph.providers.embedding.openai_embedding_provider.openai.AsyncOpenAI"


def _response(count: int, dim: int) -> MagicMock:
    response = MagicMock()
    response.data = [MagicMock(embedding=[0.1 * (i + 1)] * dim) for i in range(count)]
    response.usage = MagicMock(total_tokens=10 * count)
    return response


def _mock_client(create: AsyncMock) -> AsyncMock:
    client = AsyncMock()
    client.embeddings.create = create
    return client


class TestOpenAIEmbeddingProvider:
    def test_provider_name(self) -> None:
        assert OpenAIEmbeddingProvider(make_settings(openai_api_key="sk-test")).get_provider_name() == "openai_embedding"
        compatible = OpenAIEmbeddingProvider(
            make_settings(openai_api_key="sk-test", openai_base_url="http://localhost:1234/v1")
        )
        assert compatible.get_provider_name() == "openai-compatible_embedding"

    def test_is_available_follows_key(self) -> None:
        assert OpenAIEmbeddingProvider(make_settings(openai_api_key="sk-test")).is_available()
        assert not OpenAIEmbeddingProvider(make_settings(openai_api_key="")).is_available()

    def test_dimension_comes_from_settings(self) -> None:
        provider = OpenAIEmbeddingProvider(make_settings(openai_api_key="sk-test", vector_dimension=512))
        assert provider.get_dimension() == 512

    @pytest.mark.asyncio
    async def test_embed_returns_one_vector_per_text(self) -> None:
        create = AsyncMock(return_value=_response(2, 1536))
        with patch(_PATCH_TARGET, return_value=_mock_client(create)):
            provider = OpenAIEmbeddingProvider(
                make_settings(openai_api_key="sk-test", vector_dimension=1536)
            )
            result = await provider.embed(["hello", "world"])

        assert len(result) == 2
        assert len(result[0]) == 1536
        kwargs = create.call_args.kwargs
        assert kwargs["model"] == "text-embedding-3-small"
        assert kwargs["input"] == ["hello", "world"]
        # Native size matches the index, so no shortening is requested.
        assert "dimensions" not in kwargs

    @pytest.mark.asyncio
    async def test_smaller_index_requests_shortened_vectors(self) -> None:
        create = AsyncMock(return_value=_response(1, 256))
        with patch(_PATCH_TARGET, return_value=_mock_client(create)):
            provider = OpenAIEmbeddingProvider(
                make_settings(openai_api_key="sk-test", vector_dimension=256)
            )
            await provider.embed(["hello"])

        assert create.call_args.kwargs["dimensions"] == 256

    @pytest.mark.asyncio
    async def test_embed_empty_makes_no_call(self) -> None:
        create = AsyncMock()
        with patch(_PATCH_TARGET, return_value=_mock_client(create)):
            provider = OpenAIEmbeddingProvider(make_settings(openai_api_key="sk-test"))
            assert await provider.embed([]) == []
        create.assert_not_called()

    @pytest.mark.asyncio
    async def test_large_input_is_batched(self) -> None:
        create = AsyncMock(side_effect=[_response(2048, 4), _response(2, 4)])
        with patch(_PATCH_TARGET, return_value=_mock_client(create)):
            provider = OpenAIEmbeddingProvider(make_settings(openai_api_key="sk-test"))
            result = await provider.embed([f"t{i}" for i in range(2050)])

        assert create.await_count == 2
        assert len(result) == 2050

    @pytest.mark.asyncio
    async def test_embed_single(self) -> None:
        create = AsyncMock(return_value=_response(1, 8))
        with patch(_PATCH_TARGET, return_value=_mock_client(create)):
            provider = OpenAIEmbeddingProvider(make_settings(openai_api_key="sk-test"))
            assert len(await provider.embed_single("hello")) == 8

    @pytest.mark.asyncio
    async def test_api_error_becomes_embedding_error(self) -> None:
        create = AsyncMock(
            side_effect=openai.APIError(message="Rate limit", request=MagicMock(), body=None)
        )
        with patch(_PATCH_TARGET, return_value=_mock_client(create)):
            provider = OpenAIEmbeddingProvider(make_settings(openai_api_key="sk-test"))
            with pytest.raises(EmbeddingError) as exc_info:
                await provider.embed(["test"])

        assert exc_info.value.provider_name == "openai_embedding"
        assert isinstance(exc_info.value.__cause__, openai.APIError)
