"""Integration tests for FastAPI API endpoints using TestClient.

The app is assembled with the real services over a fake Pinecone index
and a deterministic embedding provider, mounted the same way main.py
mounts them.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from conftest import FakeEmbeddingProvider, FakePineconeIndex, make_settings
from repograph import __version__
from repograph.api.middleware import ErrorHandlingMiddleware, RequestLoggingMiddleware
from repograph.api.routes import router as api_router
from repograph.main import build_components
from repograph.pipeline.orchestrator import DocumentPipeline
from repograph.services.ingestion.ingestion_service import IngestionService
from repograph.services.search_service import SearchService

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _create_test_app(http_client: httpx.AsyncClient) -> FastAPI:
    """Build an app whose embedding provider is swapped for the fake one."""
    components = build_components(
        make_settings(), {"ingestion": {"exclude_dirs": ["node_modules"]}}, http_client
    )
    embedder = FakeEmbeddingProvider()

    pipeline = DocumentPipeline(
        registry=components["registry"],
        chunker=components["chunker"],
        embedding_provider=embedder,
        vector_store=components["vector_store"],
        expected_dimension=embedder.get_dimension(),
    )
    components["pipeline"] = pipeline
    components["ingestion_service"] = IngestionService(
        scanner=components["scanner"],
        registry=components["registry"],
        pipeline=pipeline,
        document_store=components["document_store"],
        vector_store=components["vector_store"],
    )
    components["search_service"] = SearchService(
        embedding_provider=embedder,
        vector_store=components["vector_store"],
        document_store=components["document_store"],
    )
    components["provider_status"]["embedding"]["available"] = True

    app = FastAPI()
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.include_router(api_router)
    for key, value in components.items():
        setattr(app.state, key, value)
    return app


@pytest.fixture
def client(http_client: httpx.AsyncClient) -> TestClient:
    return TestClient(_create_test_app(http_client))


def _ingest(client: TestClient, path: Path) -> dict[str, Any]:
    response = client.post("/api/v1/documents", json={"path": str(path)})
    assert response.status_code == 200, response.text
    return response.json()


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class TestHealth:
    def test_healthy_when_required_providers_available(self, client: TestClient) -> None:
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["version"] == __version__
        assert body["providers"]["vector_store"]["name"] == "pinecone"
        assert body["providers"]["llm"]["available"] is False

    def test_degraded_when_required_provider_missing(self, client: TestClient) -> None:
        client.app.state.provider_status["embedding"]["available"] = False
        assert client.get("/api/v1/health").json()["status"] == "degraded"

    def test_degraded_without_status(self) -> None:
        app = FastAPI()
        app.include_router(api_router)
        assert TestClient(app).get("/api/v1/health").json()["status"] == "degraded"


# ---------------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------------


class TestIngestionEndpoints:
    def test_ingest_file(self, client: TestClient, sample_dir: Path) -> None:
        body = _ingest(client, sample_dir / "README.md")
        assert body["state"] == "INDEXED"
        assert body["chunks_indexed"] > 0
        assert body["skipped_duplicate"] is False

    def test_ingest_same_file_twice(self, client: TestClient, sample_dir: Path) -> None:
        _ingest(client, sample_dir / "README.md")
        second = _ingest(client, sample_dir / "README.md")
        assert second["skipped_duplicate"] is True
        assert second["chunks_indexed"] == 0

    def test_unsupported_type_is_415(self, client: TestClient, sample_dir: Path) -> None:
        response = client.post("/api/v1/documents", json={"path": str(sample_dir / "data.bin")})
        assert response.status_code == 415

    def test_missing_file_is_404(self, client: TestClient, tmp_path: Path) -> None:
        response = client.post("/api/v1/documents", json={"path": str(tmp_path / "missing.md")})
        assert response.status_code == 404

    def test_empty_path_rejected(self, client: TestClient) -> None:
        assert client.post("/api/v1/documents", json={"path": ""}).status_code == 422

    def test_scan_directory(self, client: TestClient, sample_dir: Path) -> None:
        response = client.post("/api/v1/documents/scan", json={"path": str(sample_dir)})
        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 3
        assert body["indexed"] == 3
        assert body["duplicates"] == 0
        assert body["failed"] == 0
        assert [r["file_name"] for r in body["results"]] == ["README.md", "notes.txt", "app.py"]

    def test_scan_missing_directory_is_404(self, client: TestClient, tmp_path: Path) -> None:
        response = client.post("/api/v1/documents/scan", json={"path": str(tmp_path / "nope")})
        assert response.status_code == 404

    def test_upsert_failure_is_502_and_document_kept(
        self, client: TestClient, sample_dir: Path, fake_index: FakePineconeIndex
    ) -> None:
        fake_index.fail_all = 500

        response = client.post("/api/v1/documents", json={"path": str(sample_dir / "README.md")})

        assert response.status_code == 502
        assert response.json()["error"] == "BatchUpsertError"
        [document] = client.get("/api/v1/documents").json()["documents"]
        assert document["processing_state"] == "FAILED"
        assert "batch 1 of 1" in document["error"]

    def test_scan_reports_failures_per_file(
        self, client: TestClient, sample_dir: Path, fake_index: FakePineconeIndex
    ) -> None:
        fake_index.fail_all = 500

        body = client.post("/api/v1/documents/scan", json={"path": str(sample_dir)}).json()

        assert body["failed"] == 3
        assert body["indexed"] == 0
        assert all(r["state"] == "FAILED" for r in body["results"])


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


class TestDocumentEndpoints:
    def test_list_and_get(self, client: TestClient, sample_dir: Path) -> None:
        ingested = _ingest(client, sample_dir / "README.md")

        listing = client.get("/api/v1/documents").json()
        assert listing["total"] == 1
        assert listing["documents"][0]["id"] == ingested["document_id"]

        document = client.get(f"/api/v1/documents/{ingested['document_id']}").json()
        assert document["file_name"] == "README.md"
        assert document["processing_state"] == "INDEXED"
        assert document["chunk_count"] == ingested["chunks_indexed"]
        assert document["indexed_at"] is not None

    def test_get_unknown_is_404(self, client: TestClient) -> None:
        response = client.get("/api/v1/documents/unknown")
        assert response.status_code == 404
        assert response.json()["detail"] == "Document not found: unknown"

    def test_delete(
        self, client: TestClient, sample_dir: Path, fake_index: FakePineconeIndex
    ) -> None:
        ingested = _ingest(client, sample_dir / "README.md")

        response = client.delete(f"/api/v1/documents/{ingested['document_id']}")

        assert response.status_code == 200
        assert response.json() == {"document_id": ingested["document_id"], "deleted": True}
        assert fake_index.vectors == {}
        assert client.get(f"/api/v1/documents/{ingested['document_id']}").status_code == 404

    def test_delete_unknown_is_404(self, client: TestClient) -> None:
        assert client.delete("/api/v1/documents/unknown").status_code == 404


# ---------------------------------------------------------------------------
# Query / stats
# ---------------------------------------------------------------------------


class TestQueryEndpoints:
    def test_query_returns_ranked_results(self, client: TestClient, sample_dir: Path) -> None:
        client.post("/api/v1/documents/scan", json={"path": str(sample_dir)})

        response = client.post(
            "/api/v1/query",
            json={"query": "Short notes about the index.\n", "top_k": 2},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 2
        assert body["answer"] == ""
        assert body["results"][0]["file_name"] == "notes.txt"
        assert body["results"][0]["score"] >= body["results"][1]["score"]

    def test_query_file_type_filter(self, client: TestClient, sample_dir: Path) -> None:
        client.post("/api/v1/documents/scan", json={"path": str(sample_dir)})

        body = client.post(
            "/api/v1/query", json={"query": "main", "top_k": 10, "file_type": ".py"}
        ).json()

        assert {r["file_name"] for r in body["results"]} == {"app.py"}

    def test_generate_answer_without_llm(self, client: TestClient, sample_dir: Path) -> None:
        client.post("/api/v1/documents/scan", json={"path": str(sample_dir)})

        body = client.post(
            "/api/v1/query", json={"query": "notes", "generate_answer": True}
        ).json()

        assert body["answer"] == ""
        assert body["total"] == len(body["results"]) > 0

    def test_query_validation(self, client: TestClient) -> None:
        assert client.post("/api/v1/query", json={"query": ""}).status_code == 422
        assert client.post("/api/v1/query", json={"query": "x", "top_k": 0}).status_code == 422

    def test_index_stats(self, client: TestClient, sample_dir: Path) -> None:
        _ingest(client, sample_dir / "docs" / "notes.txt")

        body = client.get("/api/v1/index/stats").json()

        assert body["stats"]["totalVectorCount"] == 1
        assert body["stats"]["dimension"] == 8

    def test_store_failure_becomes_502(
        self, client: TestClient, fake_index: FakePineconeIndex
    ) -> None:
        fake_index.fail_all = 503
        response = client.get("/api/v1/index/stats")
        assert response.status_code == 502
        assert response.json()["error"] == "RemoteAPIError"
