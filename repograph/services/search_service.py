"""Query path: embed a question, search the index, join hits back to documents.

Data flow:
  1. EMBED    -- the query text becomes one vector via the embedding provider.
  2. SEARCH   -- top-K similarity query against the vector store, with the
                 query's filter translated to the store's predicate syntax.
  3. JOIN     -- each match's ``document_id`` / ``chunk_index`` metadata is
                 resolved against the document store.  Matches whose
                 document is unknown locally (e.g. indexed by another
                 process) fall back to the metadata stored with the vector.
  4. ANSWER   -- optionally, the LLM composes an answer grounded in the
                 retrieved passages.

The store's ranking is kept as-is; no re-ranking happens here.
"""

from __future__ import annotations

from repograph.interfaces.document_store import IDocumentStore
from repograph.interfaces.embedding_provider import IEmbeddingProvider
from repograph.interfaces.llm_provider import ILLMProvider
from repograph.interfaces.vector_store_provider import IVectorStoreProvider
from repograph.models.document import Chunk, Document
from repograph.models.query import Query, QueryResult, SearchResult
from repograph.models.vector import Match
from repograph.utils.errors import LLMError
from repograph.utils.logging import get_logger

logger = get_logger(__name__)

# Metadata keys promoted to SearchResult fields rather than copied into
# SearchResult.metadata.
_PROMOTED_KEYS = frozenset(
    {"document_id", "chunk_id", "text", "file_name", "file_path", "file_type"}
)


class SearchService:
    """Similarity search over the vector index with optional answer synthesis.

    Parameters
    ----------
    embedding_provider:
        Embeds the query text.
    vector_store:
        Answers the similarity query.
    document_store:
        Resolves matches to locally known documents and chunks.
    llm:
        Optional; when present :meth:`answer` asks it to compose a reply.
    default_top_k:
        Used when a query does not set ``top_k``.
    """

    _SYSTEM_PROMPT = (
        "You answer questions using only the numbered passages provided. "
        "Cite passages by their number in square brackets, e.g. [2]. "
        "If the passages do not contain the answer, say that you could not "
        "find it in the indexed documents. Be concise."
    )

    # Token budget guard: at ~4 chars/token this is ~10K tokens of context.
    _MAX_CONTEXT_CHARS = 40_000

    def __init__(
        self,
        embedding_provider: IEmbeddingProvider,
        vector_store: IVectorStoreProvider,
        document_store: IDocumentStore,
        llm: ILLMProvider | None = None,
        default_top_k: int = 5,
    ) -> None:
        self._embedding_provider = embedding_provider
        self._vector_store = vector_store
        self._document_store = document_store
        self._llm = llm
        self._default_top_k = default_top_k

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def search(self, query: Query) -> list[SearchResult]:
        """Return the top matches for *query* in store ranking order."""
        embedding = await self._embedding_provider.embed_single(query.text)
        matches = await self._vector_store.query_vectors(
            embedding,
            top_k=query.top_k or self._default_top_k,
            filter=query.filter.to_store_filter(),
            namespace=query.namespace,
        )

        results = [await self._to_result(match) for match in matches]
        logger.info("search_complete", query_id=query.id, results=len(results))
        return results

    async def answer(self, query: Query) -> QueryResult:
        """Search, then ask the LLM for an answer grounded in the hits.

        Without an LLM, or when nothing matched, the answer is empty.  An
        LLM failure is logged and also yields an empty answer; the sources
        are returned either way.
        """
        sources = await self.search(query)
        if self._llm is None or not sources:
            return QueryResult(query_id=query.id, sources=sources)

        try:
            answer = await self._llm.complete(
                system_prompt=self._SYSTEM_PROMPT,
                user_prompt=self._build_user_prompt(query.text, sources),
                temperature=0.2,
                max_tokens=800,
            )
        except LLMError as exc:
            logger.error("answer_generation_failed", query_id=query.id, error=str(exc))
            answer = ""

        return QueryResult(query_id=query.id, answer=answer, sources=sources)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _to_result(self, match: Match) -> SearchResult:
        meta = match.metadata
        document_id = str(meta.get("document_id", ""))
        extra = {k: str(v) for k, v in meta.items() if k not in _PROMOTED_KEYS}

        document = await self._document_store.get(document_id) if document_id else None
        if document is not None:
            chunk = _find_chunk(document, meta.get("chunk_index"))
            if chunk is not None:
                return SearchResult(
                    document_id=document.id,
                    chunk_id=chunk.id,
                    score=match.score,
                    content=chunk.content,
                    file_name=document.file_name,
                    file_path=document.file_path,
                    file_type=document.file_type,
                    metadata=extra,
                )

        return SearchResult(
            document_id=document_id,
            chunk_id=str(meta.get("chunk_id", "")),
            score=match.score,
            content=str(meta.get("text", "")),
            file_name=str(meta.get("file_name", "")),
            file_path=str(meta.get("file_path", "")),
            file_type=str(meta.get("file_type", "")),
            metadata=extra,
        )

    def _build_user_prompt(self, question: str, sources: list[SearchResult]) -> str:
        parts: list[str] = ["## Passages"]
        used = 0
        for number, source in enumerate(sources, start=1):
            passage = f"[{number}] ({source.file_name})\n{source.content}\n"
            if used + len(passage) > self._MAX_CONTEXT_CHARS:
                logger.info("answer_context_truncated", passages_used=number - 1)
                break
            parts.append(passage)
            used += len(passage)

        parts.append(f"## Question\n{question}")
        return "\n".join(parts)


def _find_chunk(document: Document, chunk_index: object) -> Chunk | None:
    # Vector metadata round-trips numbers as floats (e.g. 3.0).
    if isinstance(chunk_index, bool) or not isinstance(chunk_index, (int, float)):
        return None
    for chunk in document.chunks:
        if chunk.chunk_index == int(chunk_index):
            return chunk
    return None
