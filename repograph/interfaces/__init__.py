"""Public interface definitions for extractors and external service providers.

Business logic (pipeline, services) depends only on these abstract base
classes.  Concrete adapters are built and injected in ``repograph/main.py``.

CONCRETE PROVIDER MAP:
    Interface               →  Concrete implementations
    ─────────────────────────────────────────────────────────────────────
    IContentExtractor       →  TextExtractor, ImageExtractor, DocumentExtractor,
                               SpreadsheetExtractor, CodeExtractor
    IVectorStoreProvider    →  PineconeVectorStore
    IEmbeddingProvider      →  OpenAIEmbeddingProvider
    ILLMProvider            →  OpenAILLMProvider
    IDocumentStore          →  MemoryDocumentStore
"""

from repograph.interfaces.document_store import IDocumentStore
from repograph.interfaces.embedding_provider import IEmbeddingProvider
from repograph.interfaces.extractor import IContentExtractor
from repograph.interfaces.llm_provider import ILLMProvider
from repograph.interfaces.vector_store_provider import IVectorStoreProvider

__all__ = [
    "IContentExtractor",
    "IDocumentStore",
    "IEmbeddingProvider",
    "ILLMProvider",
    "IVectorStoreProvider",
]
