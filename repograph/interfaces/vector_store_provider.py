"""Abstract base class for vector-store service providers.

Defines the contract for writing chunk embeddings, running similarity
queries, and inspecting the remote index.  The pipeline and the search
service only ever talk to this interface, so the backend (Pinecone or any
store speaking a compatible protocol) can be swapped in ``main.py``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from repograph.models.vector import Match, Vector


# Concrete implementation: PineconeVectorStore (repograph/providers/vector_store/)
class IVectorStoreProvider(ABC):
    """Contract for vector-store services.

    All network methods are async.  Implementations do not retry; retry
    policy belongs to the caller.

    **Filter syntax** (the *filter* argument of :meth:`query_vectors`):

    * ``{"file_hash": {"$eq": "<sha256>"}}``: exact match on a metadata key.
    * ``{"indexed_at": {"$gte": 1700000000, "$lte": 1800000000}}``: numeric
      range on the unix-seconds index timestamp.
    """

    @abstractmethod
    async def upsert_vectors(self, vectors: list[Vector]) -> int:
        """Write *vectors* to the index in fixed-size batches.

        Parameters
        ----------
        vectors:
            Vectors to insert or overwrite, keyed by ``Vector.id``.  An empty
            list performs no remote call.

        Returns
        -------
        int
            Number of vectors the store reports as upserted.

        Raises
        ------
        repograph.utils.errors.BatchUpsertError
            On the first batch that fails.  Earlier batches stay committed.
        """

    @abstractmethod
    async def query_vectors(
        self,
        embedding: list[float],
        top_k: int,
        filter: dict[str, Any] | None = None,
        namespace: str | None = None,
    ) -> list[Match]:
        """Return the *top_k* nearest vectors to *embedding*.

        Parameters
        ----------
        embedding:
            Query vector; its length must equal the index dimension.
        top_k:
            Maximum number of matches.
        filter:
            Optional metadata predicate (see class docstring).
        namespace:
            Overrides the configured namespace for this call.

        Returns
        -------
        list[Match]
            Matches in the store's ranking order, metadata included.

        Raises
        ------
        repograph.utils.errors.RemoteAPIError
            On a non-2xx response.
        repograph.utils.errors.ResponseDecodeError
            If the response body is malformed.
        """

    @abstractmethod
    async def check_document_exists(self, file_hash: str) -> bool:
        """Return ``True`` if any vector carries ``file_hash`` in its metadata.

        Never raises: a failed lookup is reported as ``False`` so ingestion
        can proceed (at the cost of a possible duplicate).
        """

    @abstractmethod
    async def delete_vectors(self, ids: list[str]) -> None:
        """Delete the vectors with the given IDs.  Unknown IDs are ignored."""

    @abstractmethod
    async def get_stats(self) -> dict[str, Any]:
        """Return the store's index statistics payload unmodified."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"pinecone"``."""
