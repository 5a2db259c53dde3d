"""Shared pytest fixtures for the repograph test suite."""

from __future__ import annotations

import hashlib
import json
import math
from pathlib import Path
from typing import Any

import httpx
import pytest
import structlog

from repograph.config.settings import Settings
from repograph.interfaces.embedding_provider import IEmbeddingProvider
from repograph.models.document import Document

TEST_DIMENSION = 8
TEST_HOST = "https://docs-test.svc.us-east-1.aws.pinecone.io"


# ---------------------------------------------------------------------------
# Logging isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _restore_structlog_config():
    """Undo any structlog.configure() a test triggers (e.g. via cli main()).

    configure_logging() binds the current sys.stderr, which under capsys is
    a stream pytest closes after the test.
    """
    saved = structlog.get_config()
    yield
    structlog.configure(**saved)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


def make_settings(**overrides: Any) -> Settings:
    """Build a Settings instance that ignores any local .env file."""
    defaults: dict[str, Any] = {
        "pinecone_api_key": "pc-test-key",
        "pinecone_index_name": "docs",
        "pinecone_host": TEST_HOST,
        "vector_dimension": TEST_DIMENSION,
        "openai_api_key": "",
        "chunk_size": 200,
        "chunk_overlap": 40,
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


# ---------------------------------------------------------------------------
# Fake Pinecone index (served through httpx.MockTransport)
# ---------------------------------------------------------------------------


def _matches_filter(metadata: dict[str, Any], predicate: dict[str, Any] | None) -> bool:
    if not predicate:
        return True
    for key, condition in predicate.items():
        value = metadata.get(key)
        for op, expected in condition.items():
            if op == "$eq" and value != expected:
                return False
            if op == "$gte" and (value is None or value < expected):
                return False
            if op == "$lte" and (value is None or value > expected):
                return False
    return True


class FakePineconeIndex:
    """In-memory stand-in for one Pinecone index's data-plane API.

    Records every request.  ``fail_upsert_call`` makes the Nth upsert
    request (1-based) answer 500; ``fail_all`` makes every request answer
    with that status.
    """

    def __init__(self) -> None:
        self.vectors: dict[str, dict[str, Any]] = {}
        self.requests: list[httpx.Request] = []
        self.fail_upsert_call: int | None = None
        self.fail_all: int | None = None
        self._upsert_calls = 0

    def bodies(self, path: str) -> list[dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests if r.url.path == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_all is not None:
            return httpx.Response(self.fail_all, text="service unavailable")

        body = json.loads(request.content) if request.content else {}
        path = request.url.path

        if path == "/vectors/upsert":
            self._upsert_calls += 1
            if self._upsert_calls == self.fail_upsert_call:
                return httpx.Response(500, text="internal error")
            for vector in body["vectors"]:
                self.vectors[vector["id"]] = vector
            return httpx.Response(200, json={"upsertedCount": len(body["vectors"])})

        if path == "/query":
            candidates = [
                v for v in self.vectors.values() if _matches_filter(v["metadata"], body.get("filter"))
            ]
            query = body["vector"]
            scored = sorted(
                (
                    (sum(a * b for a, b in zip(query, v["values"])), v)
                    for v in candidates
                ),
                key=lambda pair: pair[0],
                reverse=True,
            )
            matches = [
                {"id": v["id"], "score": score, "metadata": v["metadata"]}
                for score, v in scored[: body["topK"]]
            ]
            return httpx.Response(200, json={"matches": matches, "namespace": ""})

        if path == "/vectors/delete":
            for vector_id in body["ids"]:
                self.vectors.pop(vector_id, None)
            return httpx.Response(200, json={})

        if path == "/describe_index_stats":
            return httpx.Response(
                200,
                json={
                    "dimension": TEST_DIMENSION,
                    "totalVectorCount": len(self.vectors),
                    "namespaces": {"": {"vectorCount": len(self.vectors)}},
                },
            )

        return httpx.Response(404, text=f"unknown path {path}")


@pytest.fixture
def fake_index() -> FakePineconeIndex:
    return FakePineconeIndex()


@pytest.fixture
def http_client(fake_index: FakePineconeIndex) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(fake_index.handler))


# ---------------------------------------------------------------------------
# Fake embedding provider
# ---------------------------------------------------------------------------


class FakeEmbeddingProvider(IEmbeddingProvider):
    """Deterministic unit-length embeddings derived from a SHA-256 of the text.

    Identical texts score exactly 1.0 against each other under a dot
    product, and any other text scores lower.
    """

    def __init__(self, dimension: int = TEST_DIMENSION) -> None:
        self._dimension = dimension
        self.calls: list[list[str]] = []

    @staticmethod
    def vector_for(text: str, dimension: int = TEST_DIMENSION) -> list[float]:
        digest = hashlib.sha256(text.encode("utf-8")).digest()
        raw = [digest[i] / 255.0 - 0.5 for i in range(dimension)]
        norm = math.sqrt(sum(v * v for v in raw)) or 1.0
        return [v / norm for v in raw]

    async def embed(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        return [self.vector_for(t, self._dimension) for t in texts]

    async def embed_single(self, text: str) -> list[float]:
        return (await self.embed([text]))[0]

    def get_dimension(self) -> int:
        return self._dimension

    def get_provider_name(self) -> str:
        return "fake"

    def is_available(self) -> bool:
        return True


@pytest.fixture
def embedding_provider() -> FakeEmbeddingProvider:
    return FakeEmbeddingProvider()


# ---------------------------------------------------------------------------
# Sample files and documents
# ---------------------------------------------------------------------------

SAMPLE_MARKDOWN = (
    "# Ingestion\n\n"
    "Files are scanned and hashed before anything else happens. "
    "The hash decides whether a file was already indexed.\n\n"
    "Extraction turns each file into plain text. Binary formats yield a "
    "placeholder that still carries the file name.\n\n"
    "Chunks overlap so that sentences crossing a boundary appear whole in "
    "at least one chunk. Every chunk becomes one vector in the index.\n"
)


@pytest.fixture
def sample_dir(tmp_path: Path) -> Path:
    """A small project tree with supported, unsupported, hidden, and excluded files."""
    root = tmp_path / "project"
    (root / "docs").mkdir(parents=True)
    (root / "src").mkdir()
    (root / "node_modules" / "pkg").mkdir(parents=True)
    (root / ".git").mkdir()

    (root / "README.md").write_text(SAMPLE_MARKDOWN, encoding="utf-8")
    (root / "docs" / "notes.txt").write_text("Short notes about the index.\n", encoding="utf-8")
    (root / "src" / "app.py").write_text("def main():\n    return 42\n", encoding="utf-8")
    (root / "data.bin").write_bytes(b"\x00\x01\x02")
    (root / ".env").write_text("SECRET=1\n", encoding="utf-8")
    (root / "node_modules" / "pkg" / "index.js").write_text("module.exports = 1;\n")
    (root / ".git" / "HEAD").write_text("ref: refs/heads/main\n")
    return root


def make_document(content: str = "", **overrides: Any) -> Document:
    fields: dict[str, Any] = {
        "file_name": "notes.md",
        "file_path": "/tmp/notes.md",
        "file_type": ".md",
        "file_size": len(content),
        "file_hash": hashlib.sha256(content.encode("utf-8")).hexdigest(),
        "content": content,
    }
    fields.update(overrides)
    return Document(**fields)
