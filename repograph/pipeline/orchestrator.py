"""Orchestrator that drives one document from SCANNED to INDEXED.

ARCHITECTURE NOTE:
    :class:`DocumentPipeline` coordinates the extractor registry, the text
    chunker, an embedding provider, the vector store, and an optional LLM.
    None of them know about each other; the pipeline passes the
    :class:`~repograph.models.document.Document` from step to step and
    records progress on it through the document's state machine.

    Steps, in order:
        0. Dedup     -- ask the vector store whether this file hash is already
                        indexed; if so jump straight to INDEXED and stop.
        1. Extract   -- registry picks an extractor by extension      -> EXTRACTED
        2. Analyze   -- raster images only, vision LLM describes them  -> ANALYZED
        3. Summarize -- LLM summary of the extracted text              -> SUMMARIZED
        4. Chunk     -- overlapping character windows                  -> CHUNKED
        5. Embed     -- one embedding call for all chunk texts         -> EMBEDDED
        6. Index     -- batched upsert of one vector per chunk         -> INDEXED

    Steps 2 and 3 are skipped when no LLM is configured or the feature is
    disabled; the state machine allows skipping exactly those two states.

    Any failure marks the document FAILED with the error message, is
    logged, and the ORIGINAL exception propagates to the caller.  Nothing
    is retried.  If step 6 fails part-way, the batches already sent stay in
    the store; the document is still FAILED.
"""

from __future__ import annotations

import asyncio
import time
from pathlib import Path

from repograph.interfaces.embedding_provider import IEmbeddingProvider
from repograph.interfaces.llm_provider import ILLMProvider
from repograph.interfaces.vector_store_provider import IVectorStoreProvider
from repograph.models.document import Document, ProcessingState
from repograph.models.vector import Vector
from repograph.services.extraction.registry import ExtractorRegistry
from repograph.services.ingestion.chunker import TextChunker
from repograph.utils.errors import EmbeddingError, FileReadError
from repograph.utils.logging import get_logger

# Raster formats vision models accept; .svg and .bmp keep the marker only.
VISION_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".gif", ".webp"})

# Characters of extracted text sent to the summariser.
_SUMMARY_INPUT_LIMIT = 12_000

_SUMMARY_SYSTEM_PROMPT = (
    "You summarise documents for a search index. Write a concise, factual "
    "summary of the document in at most five sentences. Do not speculate."
)

_VISION_PROMPT = (
    "Describe this image for a search index. Transcribe any visible text "
    "verbatim, then describe the main subjects, layout, and any charts or "
    "diagrams in plain prose."
)


class DocumentPipeline:
    """Runs the extraction -> chunk -> embed -> index pipeline for one document.

    Parameters
    ----------
    registry:
        Chooses an extractor by file extension.
    chunker:
        Splits extracted content into overlapping chunks.
    embedding_provider:
        Embeds chunk texts.
    vector_store:
        Dedup lookup and vector upsert.
    llm:
        Optional; enables the vision and summary steps.
    summarize_enabled, vision_enabled:
        Feature switches for the two optional steps.
    expected_dimension:
        Length every embedding must have (the index dimension).  Defaults to
        ``embedding_provider.get_dimension()``.
    """

    def __init__(
        self,
        registry: ExtractorRegistry,
        chunker: TextChunker,
        embedding_provider: IEmbeddingProvider,
        vector_store: IVectorStoreProvider,
        llm: ILLMProvider | None = None,
        summarize_enabled: bool = True,
        vision_enabled: bool = True,
        expected_dimension: int | None = None,
    ) -> None:
        self._registry = registry
        self._chunker = chunker
        self._embedding_provider = embedding_provider
        self._vector_store = vector_store
        self._llm = llm
        self._summarize_enabled = summarize_enabled
        self._vision_enabled = vision_enabled
        self._expected_dimension = expected_dimension
        self._logger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def process(self, document: Document) -> Document:
        """Drive *document* through every step and return it.

        Empty or whitespace-only content yields no chunks and writes no
        vectors.  No stored vector carries that file hash, so such a file is
        never seen as a duplicate and goes through the pipeline again on
        every run, without any embedding or upsert request.

        Returns
        -------
        Document
            The same instance, now INDEXED (freshly or as a duplicate).

        Raises
        ------
        Exception
            Whatever the failing step raised, unchanged.  The document is
            left in FAILED with ``error`` set.
        """
        start = time.monotonic()
        try:
            if await self._vector_store.check_document_exists(document.file_hash):
                document.mark_already_indexed()
                self._logger.info(
                    "document_already_indexed",
                    document_id=document.id,
                    file_name=document.file_name,
                    file_hash=document.file_hash[:12],
                )
                return document

            await self._extract(document)
            await self._analyze(document)
            await self._summarize(document)
            self._chunk(document)
            await self._embed(document)
            await self._index(document)
        except asyncio.CancelledError:
            self._fail(document, "processing cancelled")
            raise
        except Exception as exc:
            self._fail(document, str(exc))
            raise

        self._logger.info(
            "document_indexed",
            document_id=document.id,
            file_name=document.file_name,
            chunks=len(document.chunks),
            time_s=round(time.monotonic() - start, 3),
        )
        return document

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _extract(self, document: Document) -> None:
        document.content = await asyncio.to_thread(self._registry.extract, document.file_path)
        document.transition_to(ProcessingState.EXTRACTED)
        self._logger.debug(
            "document_extracted", document_id=document.id, chars=len(document.content)
        )

    async def _analyze(self, document: Document) -> None:
        if (
            self._llm is None
            or not self._vision_enabled
            or document.file_type.lower() not in VISION_EXTENSIONS
            or not self._llm.supports_vision()
        ):
            return

        image_bytes = await asyncio.to_thread(_read_bytes, document.file_path)
        analysis = await self._llm.vision_extract(image_bytes, _VISION_PROMPT)
        document.vision_analysis = analysis
        document.content = f"{document.content}\n\n{analysis}" if document.content else analysis
        document.transition_to(ProcessingState.ANALYZED)
        self._logger.debug("document_analyzed", document_id=document.id, chars=len(analysis))

    async def _summarize(self, document: Document) -> None:
        if self._llm is None or not self._summarize_enabled or not document.content.strip():
            return

        excerpt = document.content[:_SUMMARY_INPUT_LIMIT]
        document.summary = await self._llm.complete(
            system_prompt=_SUMMARY_SYSTEM_PROMPT,
            user_prompt=f"File: {document.file_name}\n\n{excerpt}",
            temperature=0.2,
            max_tokens=300,
        )
        document.transition_to(ProcessingState.SUMMARIZED)
        self._logger.debug("document_summarized", document_id=document.id)

    def _chunk(self, document: Document) -> None:
        document.attach_chunks(self._chunker.chunk(document))
        document.transition_to(ProcessingState.CHUNKED)

    async def _embed(self, document: Document) -> None:
        chunks = document.chunks
        if chunks:
            embeddings = await self._embedding_provider.embed([c.content for c in chunks])
            if len(embeddings) != len(chunks):
                raise EmbeddingError(
                    message=(
                        f"expected {len(chunks)} embeddings, got {len(embeddings)}"
                    ),
                    provider_name=self._embedding_provider.get_provider_name(),
                )

            dimension = self._expected_dimension or self._embedding_provider.get_dimension()
            for chunk, embedding in zip(chunks, embeddings):
                if len(embedding) != dimension:
                    raise EmbeddingError(
                        message=(
                            f"embedding for chunk {chunk.chunk_index} has dimension "
                            f"{len(embedding)}, expected {dimension}"
                        ),
                        provider_name=self._embedding_provider.get_provider_name(),
                    )
                chunk.embedding = embedding

        document.transition_to(ProcessingState.EMBEDDED)

    async def _index(self, document: Document) -> None:
        indexed_at = int(time.time())
        vectors = [
            Vector(
                id=chunk.vector_id,
                values=chunk.embedding or [],
                metadata={
                    "document_id": document.id,
                    "chunk_id": chunk.id,
                    "chunk_index": chunk.chunk_index,
                    "file_hash": document.file_hash,
                    "file_name": document.file_name,
                    "file_path": document.file_path,
                    "file_type": document.file_type,
                    "text": chunk.content,
                    "indexed_at": indexed_at,
                },
            )
            for chunk in document.chunks
        ]
        await self._vector_store.upsert_vectors(vectors)
        document.transition_to(ProcessingState.INDEXED)

    def _fail(self, document: Document, error: str) -> None:
        if not document.processing_state.is_terminal:
            document.mark_failed(error)
        self._logger.error(
            "document_processing_failed",
            document_id=document.id,
            file_name=document.file_name,
            state=document.processing_state.value,
            error=error,
        )


def _read_bytes(file_path: str) -> bytes:
    try:
        return Path(file_path).read_bytes()
    except OSError as exc:
        raise FileReadError(
            message=f"Failed to read {file_path}: {exc}",
            provider_name="vision",
            file_path=file_path,
        ) from exc
