"""In-memory document store.

Keeps processed documents in a dict keyed by ID plus a secondary index on
content hash.  Suitable for single-process deployments and tests; a
database-backed store can replace it through :class:`IDocumentStore`.
"""

from __future__ import annotations

import structlog

from repograph.interfaces.document_store import IDocumentStore
from repograph.models.document import Document

logger = structlog.get_logger(logger_name=__name__)


class MemoryDocumentStore(IDocumentStore):
    """Dict-backed :class:`IDocumentStore`.  Not shared across processes."""

    def __init__(self) -> None:
        # Insertion-ordered, so list_documents() returns oldest first.
        self._documents: dict[str, Document] = {}
        self._by_hash: dict[str, str] = {}

    # ------------------------------------------------------------------
    # IDocumentStore implementation
    # ------------------------------------------------------------------

    async def add(self, document: Document) -> None:
        self._documents.pop(document.id, None)
        self._documents[document.id] = document
        if document.file_hash:
            self._by_hash[document.file_hash] = document.id
        logger.debug("document_stored", document_id=document.id, state=document.processing_state.value)

    async def get(self, document_id: str) -> Document | None:
        return self._documents.get(document_id)

    async def get_by_hash(self, file_hash: str) -> Document | None:
        document_id = self._by_hash.get(file_hash)
        if document_id is None:
            return None
        return self._documents.get(document_id)

    async def remove(self, document_id: str) -> bool:
        document = self._documents.pop(document_id, None)
        if document is None:
            return False

        if self._by_hash.get(document.file_hash) == document_id:
            del self._by_hash[document.file_hash]
            # Fall back to an older document with the same content, if any.
            for other in reversed(self._documents.values()):
                if other.file_hash == document.file_hash:
                    self._by_hash[other.file_hash] = other.id
                    break

        logger.debug("document_removed", document_id=document_id)
        return True

    async def list_documents(self) -> list[Document]:
        return list(self._documents.values())

    def __len__(self) -> int:
        return len(self._documents)
