"""Pinecone vector-store adapter over the index's HTTP+JSON data-plane API.

Speaks four endpoints on the per-index host:

* ``POST /vectors/upsert``        -- ``{vectors: [...], namespace?}``, in batches of 100
* ``POST /query``                 -- ``{vector, topK, includeMetadata, filter?, namespace?}``
* ``POST /describe_index_stats``  -- ``{}``
* ``POST /vectors/delete``        -- ``{ids: [...], namespace?}``, in batches of 1000

Every request carries ``Api-Key`` and ``Content-Type: application/json``.
The ``httpx.AsyncClient`` is injected and shared with the rest of the
application; this adapter never creates or closes one.

Failure semantics:

* non-2xx status       -> :class:`RemoteAPIError` (body kept verbatim)
* any httpx failure  -> :class:`ProviderUnavailableError`
* unparseable body     -> :class:`ResponseDecodeError`
* failed upsert batch  -> :class:`BatchUpsertError`; earlier batches stay written

Nothing is retried here.  :meth:`PineconeVectorStore.check_document_exists`
is the one method that swallows errors: it answers ``False`` when the
store cannot be asked.
"""

from __future__ import annotations

import math
from typing import Any

import httpx
from pydantic import ValidationError

from repograph.config.settings import Settings
from repograph.interfaces.vector_store_provider import IVectorStoreProvider
from repograph.models.vector import Match, Vector
from repograph.utils.errors import (
    BatchUpsertError,
    ConfigurationError,
    ProviderUnavailableError,
    RemoteAPIError,
    RepographError,
    ResponseDecodeError,
)
from repograph.utils.logging import get_logger

_PROVIDER_NAME = "pinecone"
UPSERT_BATCH_SIZE = 100
DELETE_BATCH_SIZE = 1000


class PineconeVectorStore(IVectorStoreProvider):
    """Batched, namespaced access to one Pinecone index.

    Parameters
    ----------
    settings:
        Supplies the API key, index name, host coordinates, vector
        dimension, and namespace flag.
    http_client:
        Shared ``httpx.AsyncClient`` used for every request.

    Raises
    ------
    ConfigurationError
        If the API key or index name is empty.
    """

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient) -> None:
        if not settings.pinecone_api_key:
            raise ConfigurationError(
                message="PINECONE_API_KEY is required", provider_name=_PROVIDER_NAME
            )
        if not settings.pinecone_index_name:
            raise ConfigurationError(
                message="PINECONE_INDEX_NAME is required", provider_name=_PROVIDER_NAME
            )

        self._http = http_client
        self._api_key = settings.pinecone_api_key
        self._host = settings.get_pinecone_host()
        self._dimension = settings.vector_dimension
        self._namespace: str | None = (
            settings.pinecone_namespace if settings.pinecone_use_namespaces else None
        )
        self._timeout = settings.http_timeout
        self._logger = get_logger(__name__)

    @property
    def host(self) -> str:
        return self._host

    @property
    def namespace(self) -> str | None:
        return self._namespace

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        return {"Api-Key": self._api_key, "Content-Type": "application/json"}

    def _with_namespace(self, body: dict[str, Any], namespace: str | None = None) -> dict[str, Any]:
        resolved = namespace if namespace is not None else self._namespace
        if resolved:
            body["namespace"] = resolved
        return body

    async def _post(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        """POST *body* to ``host + path`` and return the decoded JSON object."""
        url = f"{self._host}{path}"
        try:
            response = await self._http.post(
                url, json=body, headers=self._headers(), timeout=self._timeout
            )
        except httpx.HTTPError as exc:
            raise ProviderUnavailableError(
                message=f"Request to {path} failed: {exc}",
                provider_name=_PROVIDER_NAME,
            ) from exc

        if not response.is_success:
            raise RemoteAPIError(
                status_code=response.status_code,
                body=response.text,
                provider_name=_PROVIDER_NAME,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise ResponseDecodeError(
                message=f"Invalid JSON from {path}: {exc}",
                provider_name=_PROVIDER_NAME,
            ) from exc
        if not isinstance(payload, dict):
            raise ResponseDecodeError(
                message=f"Expected a JSON object from {path}, got {type(payload).__name__}",
                provider_name=_PROVIDER_NAME,
            )
        return payload

    # ------------------------------------------------------------------
    # IVectorStoreProvider implementation
    # ------------------------------------------------------------------

    async def upsert_vectors(self, vectors: list[Vector]) -> int:
        """Upsert *vectors* sequentially in batches of :data:`UPSERT_BATCH_SIZE`.

        Returns
        -------
        int
            Sum of the store's ``upsertedCount`` per batch (the batch size
            when the store omits it).

        Raises
        ------
        BatchUpsertError
            On the first failing batch, with the underlying error as
            ``__cause__``.  Batches before it are not rolled back.
        """
        if not vectors:
            return 0

        total_batches = math.ceil(len(vectors) / UPSERT_BATCH_SIZE)
        committed = 0
        upserted = 0

        for batch_number, offset in enumerate(range(0, len(vectors), UPSERT_BATCH_SIZE), start=1):
            batch = vectors[offset : offset + UPSERT_BATCH_SIZE]
            body = self._with_namespace(
                {"vectors": [vector.model_dump() for vector in batch]}
            )
            try:
                payload = await self._post("/vectors/upsert", body)
            except RepographError as exc:
                self._logger.error(
                    "upsert_batch_failed",
                    batch=batch_number,
                    total_batches=total_batches,
                    committed=committed,
                    error=str(exc),
                )
                raise BatchUpsertError(
                    batch_number=batch_number,
                    total_batches=total_batches,
                    committed_count=committed,
                    reason=exc.message,
                    provider_name=_PROVIDER_NAME,
                ) from exc

            count = payload.get("upsertedCount")
            upserted += count if isinstance(count, int) else len(batch)
            committed += len(batch)
            self._logger.debug(
                "upsert_batch_complete",
                batch=batch_number,
                total_batches=total_batches,
                vectors=len(batch),
            )

        self._logger.info(
            "vectors_upserted",
            vectors=len(vectors),
            batches=total_batches,
            upserted=upserted,
            namespace=self._namespace,
        )
        return upserted

    async def query_vectors(
        self,
        embedding: list[float],
        top_k: int,
        filter: dict[str, Any] | None = None,  # noqa: A002
        namespace: str | None = None,
    ) -> list[Match]:
        body: dict[str, Any] = {
            "vector": embedding,
            "topK": top_k,
            "includeMetadata": True,
        }
        if filter:
            body["filter"] = filter
        self._with_namespace(body, namespace)

        payload = await self._post("/query", body)

        raw_matches = payload.get("matches", [])
        if not isinstance(raw_matches, list):
            raise ResponseDecodeError(
                message="'matches' is not a list", provider_name=_PROVIDER_NAME
            )
        try:
            matches = [
                Match(
                    id=item["id"],
                    score=item.get("score", 0.0),
                    metadata=item.get("metadata") or {},
                )
                for item in raw_matches
            ]
        except (KeyError, TypeError, AttributeError, ValidationError) as exc:
            raise ResponseDecodeError(
                message=f"Malformed match in query response: {exc}",
                provider_name=_PROVIDER_NAME,
            ) from exc

        self._logger.debug("vector_query_complete", top_k=top_k, matches=len(matches))
        return matches

    async def check_document_exists(self, file_hash: str) -> bool:
        """Look for any vector tagged with *file_hash*.

        Queries with a zero vector of the index dimension, ``top_k=1``, and
        an equality filter on ``file_hash``.  Any error short of cancellation
        is logged and reported as ``False`` so an unreachable store never
        blocks ingestion.
        """
        try:
            matches = await self.query_vectors(
                [0.0] * self._dimension,
                top_k=1,
                filter={"file_hash": {"$eq": file_hash}},
            )
        except Exception as exc:
            self._logger.warning(
                "existence_check_failed",
                file_hash=file_hash[:12],
                error=str(exc),
            )
            return False
        return len(matches) > 0

    async def delete_vectors(self, ids: list[str]) -> None:
        if not ids:
            return

        for offset in range(0, len(ids), DELETE_BATCH_SIZE):
            batch = ids[offset : offset + DELETE_BATCH_SIZE]
            await self._post("/vectors/delete", self._with_namespace({"ids": batch}))

        self._logger.info("vectors_deleted", count=len(ids), namespace=self._namespace)

    async def get_stats(self) -> dict[str, Any]:
        return await self._post("/describe_index_stats", {})

    def get_provider_name(self) -> str:
        return _PROVIDER_NAME
