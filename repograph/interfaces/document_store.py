"""Abstract base class for local document stores.

The document store remembers every :class:`~repograph.models.document.Document`
the ingestion service has processed, so search results can be joined back
to their source and documents can be deleted by ID.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from repograph.models.document import Document


# Concrete implementation: MemoryDocumentStore (repograph/providers/document_store/)
class IDocumentStore(ABC):
    """Contract for document persistence.

    All operations are async so a database-backed store can replace the
    in-memory one without changing callers.
    """

    @abstractmethod
    async def add(self, document: Document) -> None:
        """Store *document*, replacing any entry with the same ID."""

    @abstractmethod
    async def get(self, document_id: str) -> Document | None:
        """Return the document with *document_id*, or ``None``."""

    @abstractmethod
    async def get_by_hash(self, file_hash: str) -> Document | None:
        """Return the most recently added document whose content hash is *file_hash*."""

    @abstractmethod
    async def remove(self, document_id: str) -> bool:
        """Remove a document.

        Returns
        -------
        bool
            ``True`` if a document was removed, ``False`` if none matched.
        """

    @abstractmethod
    async def list_documents(self) -> list[Document]:
        """Return every stored document, oldest first."""
