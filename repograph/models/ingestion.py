"""Outcome of ingesting one file."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from repograph.models.document import Document, ProcessingState


# ---------------------------------------------------------------------------
# IngestionResult: what the CLI and API report back per file.
# ---------------------------------------------------------------------------
class IngestionResult(BaseModel):
    """Summary of a single document ingestion run."""

    model_config = ConfigDict(frozen=True)

    document_id: str = Field(description="ID assigned to the ingested document.")
    file_name: str
    file_hash: str = ""
    state: ProcessingState
    chunks_indexed: int = Field(default=0, ge=0, description="Vectors written for this file.")
    skipped_duplicate: bool = Field(
        default=False,
        description="True when identical content was already indexed.",
    )
    ingestion_time: float = Field(
        default=0.0,
        ge=0.0,
        description="Wall-clock time in seconds for the ingestion run.",
    )
    error: str | None = None

    @classmethod
    def from_document(cls, document: Document, ingestion_time: float = 0.0) -> IngestionResult:
        indexed = (
            document.processing_state is ProcessingState.INDEXED and not document.already_indexed
        )
        return cls(
            document_id=document.id,
            file_name=document.file_name,
            file_hash=document.file_hash,
            state=document.processing_state,
            chunks_indexed=len(document.chunks) if indexed else 0,
            skipped_duplicate=document.already_indexed,
            ingestion_time=round(ingestion_time, 3),
            error=document.error,
        )
