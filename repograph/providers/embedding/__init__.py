"""Embedding provider implementations.

Embeddings convert chunk text into numeric vectors that are written to the
vector index and compared at query time.  OpenAIEmbeddingProvider talks to
OpenAI or any OpenAI-compatible embeddings endpoint.
"""

from repograph.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

__all__ = ["OpenAIEmbeddingProvider"]
