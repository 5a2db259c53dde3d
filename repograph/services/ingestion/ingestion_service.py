"""Ingestion entry points: scan files, run the pipeline, remember the result.

The :class:`IngestionService` sits above :class:`DocumentPipeline`.  It
turns paths into scanned documents, hands them to the pipeline, records
every processed document in the document store, and reports an
:class:`IngestionResult` per file.  It also owns the inverse operation,
deleting a document's vectors and its stored record.

All collaborators are injected via the constructor, so any of them can be
replaced (e.g. a fake vector store in tests) without changing this class.
"""

from __future__ import annotations

import asyncio
import time
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

from repograph.models.document import FileMetadata, ProcessingState
from repograph.models.ingestion import IngestionResult
from repograph.utils.errors import UnsupportedFileTypeError

if TYPE_CHECKING:
    from repograph.interfaces.document_store import IDocumentStore
    from repograph.interfaces.vector_store_provider import IVectorStoreProvider
    from repograph.models.document import Document
    from repograph.pipeline.orchestrator import DocumentPipeline
    from repograph.services.extraction.registry import ExtractorRegistry
    from repograph.services.ingestion.scanner import FileScanner

logger = structlog.get_logger(logger_name=__name__)


class IngestionService:
    """Coordinates scanning, pipeline processing, and document bookkeeping.

    Parameters
    ----------
    scanner:
        Builds hashed ``SCANNED`` documents from paths.
    registry:
        Used to reject unsupported file types before any work is done.
    pipeline:
        Processes one document to INDEXED (or FAILED).
    document_store:
        Remembers processed documents for lookup and deletion.
    vector_store:
        Target of deletions and stats requests.
    """

    def __init__(
        self,
        scanner: FileScanner,
        registry: ExtractorRegistry,
        pipeline: DocumentPipeline,
        document_store: IDocumentStore,
        vector_store: IVectorStoreProvider,
    ) -> None:
        self._scanner = scanner
        self._registry = registry
        self._pipeline = pipeline
        self._document_store = document_store
        self._vector_store = vector_store

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def ingest_file(self, path: str | Path) -> IngestionResult:
        """Scan and process one file.

        Raises
        ------
        UnsupportedFileTypeError
            If no extractor handles the file's extension.  Nothing is read.
        FileReadError
            If the file is missing or unreadable.
        Exception
            Whatever the pipeline raised.  The FAILED document is still
            stored.
        """
        file_path = Path(path)
        if not self._registry.supports(file_path.suffix):
            raise UnsupportedFileTypeError(
                message=f"No extractor registered for file type '{file_path.suffix or '<none>'}'",
                extension=file_path.suffix,
            )

        start = time.monotonic()
        document = await asyncio.to_thread(self._scanner.scan_file, file_path)
        try:
            await self._pipeline.process(document)
        finally:
            await self._document_store.add(document)

        result = IngestionResult.from_document(document, time.monotonic() - start)
        logger.info(
            "ingestion_complete",
            file_name=result.file_name,
            state=result.state.value,
            chunks=result.chunks_indexed,
            skipped_duplicate=result.skipped_duplicate,
            time_s=result.ingestion_time,
        )
        return result

    async def ingest_directory(
        self,
        path: str | Path,
        recursive: bool = True,
        concurrency: int = 1,
    ) -> list[IngestionResult]:
        """Ingest every supported file under *path*.

        Parameters
        ----------
        path:
            Directory to scan.
        recursive:
            Descend into subdirectories (excluded names are never entered).
        concurrency:
            Maximum number of files processed at once.  Defaults to 1
            (sequential).

        Returns
        -------
        list[IngestionResult]
            One result per supported file, in path order.  A file that fails
            yields a FAILED result instead of aborting the run; unsupported
            files are skipped without a result.
        """
        files = await asyncio.to_thread(self._scanner.scan_directory, path, recursive)
        supported = [meta for meta in files if self._registry.supports(meta.extension)]
        if len(supported) < len(files):
            logger.info(
                "unsupported_files_skipped",
                dir_path=str(path),
                skipped=len(files) - len(supported),
            )

        # max(1, ...) guards against deadlock from a zero or negative value.
        semaphore = asyncio.Semaphore(max(1, concurrency))

        async def _process_file(meta: FileMetadata) -> IngestionResult:
            async with semaphore:
                try:
                    return await self.ingest_file(meta.path)
                except Exception as exc:
                    return await self._failed_result(meta, exc)

        results = list(await asyncio.gather(*(_process_file(meta) for meta in supported)))

        logger.info(
            "directory_ingestion_complete",
            dir_path=str(path),
            files_processed=len(results),
            indexed=sum(1 for r in results if r.state is ProcessingState.INDEXED),
            duplicates=sum(1 for r in results if r.skipped_duplicate),
            failed=sum(1 for r in results if r.state is ProcessingState.FAILED),
        )
        return results

    async def get_document(self, document_id: str) -> Document | None:
        return await self._document_store.get(document_id)

    async def list_documents(self) -> list[Document]:
        return await self._document_store.list_documents()

    async def delete_document(self, document_id: str) -> bool:
        """Delete a document's vectors, then its stored record.

        A document recorded as a duplicate owns no vectors (they belong to
        the document first indexed with the same hash), so only its record
        is removed.

        Returns
        -------
        bool
            ``False`` if no document has this ID.
        """
        document = await self._document_store.get(document_id)
        if document is None:
            return False

        vector_ids = [] if document.already_indexed else [c.vector_id for c in document.chunks]
        await self._vector_store.delete_vectors(vector_ids)
        await self._document_store.remove(document_id)

        logger.info("document_deleted", document_id=document_id, vectors=len(vector_ids))
        return True

    async def get_index_stats(self) -> dict[str, Any]:
        return await self._vector_store.get_stats()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _failed_result(self, meta: FileMetadata, exc: Exception) -> IngestionResult:
        logger.warning("file_ingestion_failed", file_path=meta.path, error=str(exc))

        # The pipeline stores FAILED documents before re-raising; report
        # that document's ID when there is one.
        stored = await self._document_store.get_by_hash(meta.hash) if meta.hash else None
        if stored is not None and stored.processing_state is ProcessingState.FAILED:
            return IngestionResult.from_document(stored)

        return IngestionResult(
            document_id="",
            file_name=meta.name,
            file_hash=meta.hash,
            state=ProcessingState.FAILED,
            error=str(exc),
        )
