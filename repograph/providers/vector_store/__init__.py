"""Vector store provider implementations.

PineconeVectorStore talks to a Pinecone index over its HTTP data-plane API
using the application's shared httpx client.  To target another vector
database, implement IVectorStoreProvider and register it in main.py.
"""

from repograph.providers.vector_store.pinecone_provider import PineconeVectorStore

__all__ = ["PineconeVectorStore"]
