"""Document store providers.

MemoryDocumentStore keeps processed documents in process memory.  For
persistence across restarts, implement IDocumentStore over a database and
register it in main.py.
"""

from repograph.providers.document_store.memory_document_store import MemoryDocumentStore

__all__ = ["MemoryDocumentStore"]
