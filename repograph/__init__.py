"""repograph: document ingestion and vector indexing pipeline.

Scans local files, extracts their text, chunks and embeds it, and indexes
the vectors in a Pinecone-compatible vector store for similarity search.
"""

__version__ = "0.1.0"
