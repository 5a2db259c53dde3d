"""Unit tests for SearchService: query embedding, filter translation, result joins, answers."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from conftest import FakeEmbeddingProvider, make_document
from repograph.models.document import Chunk
from repograph.models.query import Query, QueryFilter
from repograph.models.vector import Match
from repograph.providers.document_store.memory_document_store import MemoryDocumentStore
from repograph.services.search_service import SearchService
from repograph.utils.errors import LLMError, RemoteAPIError

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _vector_store(matches: list[Match]) -> MagicMock:
    store = MagicMock()
    store.query_vectors = AsyncMock(return_value=matches)
    return store


def _service(
    store: MagicMock,
    documents: MemoryDocumentStore | None = None,
    llm: MagicMock | None = None,
    default_top_k: int = 5,
) -> SearchService:
    return SearchService(
        embedding_provider=FakeEmbeddingProvider(),
        vector_store=store,
        document_store=documents or MemoryDocumentStore(),
        llm=llm,
        default_top_k=default_top_k,
    )


def _orphan_match(score: float = 0.9) -> Match:
    return Match(
        id="remote-doc_0",
        score=score,
        metadata={
            "document_id": "remote-doc",
            "chunk_id": "remote-chunk",
            "chunk_index": 0.0,
            "text": "Indexed by another process.",
            "file_name": "other.md",
            "file_path": "/srv/other.md",
            "file_type": ".md",
            "file_hash": "abc",
        },
    )


# ---------------------------------------------------------------------------
# search()
# ---------------------------------------------------------------------------


class TestSearch:
    @pytest.mark.asyncio
    async def test_embeds_query_and_uses_default_top_k(self) -> None:
        store = _vector_store([])
        await _service(store, default_top_k=7).search(Query(text="chunk ids"))

        args = store.query_vectors.await_args
        assert args.args[0] == FakeEmbeddingProvider.vector_for("chunk ids")
        assert args.kwargs["top_k"] == 7
        assert args.kwargs["filter"] is None
        assert args.kwargs["namespace"] is None

    @pytest.mark.asyncio
    async def test_query_overrides_and_filter(self) -> None:
        store = _vector_store([])
        date_from = datetime(2024, 5, 1, tzinfo=timezone.utc)
        query = Query(
            text="x",
            top_k=2,
            namespace="team",
            filter=QueryFilter(file_type=".MD", date_from=date_from),
        )
        await _service(store).search(query)

        kwargs = store.query_vectors.await_args.kwargs
        assert kwargs["top_k"] == 2
        assert kwargs["namespace"] == "team"
        assert kwargs["filter"] == {
            "file_type": {"$eq": ".md"},
            "indexed_at": {"$gte": int(date_from.timestamp())},
        }

    @pytest.mark.asyncio
    async def test_joins_local_document_chunks(self) -> None:
        documents = MemoryDocumentStore()
        document = make_document("alpha beta gamma", file_name="local.md", file_path="/src/local.md")
        chunk = Chunk(
            document_id=document.id,
            content="alpha beta gamma",
            start_index=0,
            end_index=16,
            chunk_index=0,
        )
        document.chunks = [chunk]
        await documents.add(document)

        match = Match(
            id=f"{document.id}_0",
            score=0.77,
            metadata={"document_id": document.id, "chunk_index": 0.0, "text": "stale", "file_hash": "h"},
        )
        [result] = await _service(_vector_store([match]), documents).search(Query(text="alpha"))

        assert result.document_id == document.id
        assert result.chunk_id == chunk.id
        assert result.content == "alpha beta gamma"
        assert result.file_name == "local.md"
        assert result.file_path == "/src/local.md"
        assert result.score == 0.77
        assert result.metadata == {"chunk_index": "0.0", "file_hash": "h"}

    @pytest.mark.asyncio
    async def test_falls_back_to_vector_metadata(self) -> None:
        [result] = await _service(_vector_store([_orphan_match()])).search(Query(text="x"))

        assert result.document_id == "remote-doc"
        assert result.chunk_id == "remote-chunk"
        assert result.content == "Indexed by another process."
        assert result.file_path == "/srv/other.md"
        assert "text" not in result.metadata
        assert result.metadata["file_hash"] == "abc"

    @pytest.mark.asyncio
    async def test_store_ranking_preserved(self) -> None:
        matches = [_orphan_match(0.9), _orphan_match(0.95), _orphan_match(0.1)]
        results = await _service(_vector_store(matches)).search(Query(text="x"))
        assert [r.score for r in results] == [0.9, 0.95, 0.1]

    @pytest.mark.asyncio
    async def test_store_errors_propagate(self) -> None:
        store = MagicMock()
        store.query_vectors = AsyncMock(side_effect=RemoteAPIError(500, "boom", "pinecone"))
        with pytest.raises(RemoteAPIError):
            await _service(store).search(Query(text="x"))


# ---------------------------------------------------------------------------
# answer()
# ---------------------------------------------------------------------------


class TestAnswer:
    @pytest.mark.asyncio
    async def test_without_llm_returns_sources_only(self) -> None:
        result = await _service(_vector_store([_orphan_match()])).answer(Query(text="x"))
        assert result.answer == ""
        assert len(result.sources) == 1

    @pytest.mark.asyncio
    async def test_llm_answer_uses_numbered_passages(self) -> None:
        llm = MagicMock()
        llm.complete = AsyncMock(return_value="It is numbered per document [1].")
        query = Query(text="how are chunks numbered?")

        result = await _service(_vector_store([_orphan_match()]), llm=llm).answer(query)

        assert result.answer == "It is numbered per document [1]."
        assert result.query_id == query.id
        prompt = llm.complete.await_args.kwargs["user_prompt"]
        assert "[1] (other.md)" in prompt
        assert "Indexed by another process." in prompt
        assert prompt.endswith("## Question\nhow are chunks numbered?")

    @pytest.mark.asyncio
    async def test_no_matches_skips_llm(self) -> None:
        llm = MagicMock()
        llm.complete = AsyncMock()
        result = await _service(_vector_store([]), llm=llm).answer(Query(text="x"))
        assert result.answer == ""
        assert result.sources == []
        llm.complete.assert_not_called()

    @pytest.mark.asyncio
    async def test_llm_failure_degrades_to_empty_answer(self) -> None:
        llm = MagicMock()
        llm.complete = AsyncMock(side_effect=LLMError("quota", provider_name="openai"))
        result = await _service(_vector_store([_orphan_match()]), llm=llm).answer(Query(text="x"))
        assert result.answer == ""
        assert len(result.sources) == 1
