"""Document lifecycle models for the repograph ingestion pipeline.

Defines the :class:`Document` entity, its :class:`Chunk` children, the
scanner-level :class:`FileMetadata`, and the :class:`ProcessingState`
state machine that the orchestrator drives.

Unlike the immutable request/response models elsewhere in the package, a
``Document`` is mutated in place as it moves through the pipeline.  The
orchestrator is its single writer; callers must not run two pipelines over
the same instance concurrently.

State machine:

    SCANNED → EXTRACTED → [ANALYZED] → [SUMMARIZED] → CHUNKED → EMBEDDED → INDEXED
        \\__________________________________________________________/
                            any non-terminal state → FAILED

ANALYZED and SUMMARIZED are optional; every other forward state must be
visited in order.  INDEXED and FAILED are terminal.  The duplicate
short-circuit (:meth:`Document.mark_already_indexed`) is the only way to
reach INDEXED without passing through the intermediate states.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from repograph.utils.errors import InvalidStateTransitionError


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)  # noqa: UP017


def _new_id() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# ProcessingState: the lifecycle of a document.
# ---------------------------------------------------------------------------
class ProcessingState(str, Enum):  # noqa: UP042  StrEnum needs 3.11+
    """Processing states of a document, in forward order."""

    SCANNED = "SCANNED"         # File discovered and hashed
    EXTRACTED = "EXTRACTED"     # Text pulled out by an extractor
    ANALYZED = "ANALYZED"       # Vision analysis attached (images only)
    SUMMARIZED = "SUMMARIZED"   # LLM summary attached
    CHUNKED = "CHUNKED"         # Content split into chunks
    EMBEDDED = "EMBEDDED"       # Every chunk carries an embedding
    INDEXED = "INDEXED"         # Vectors written to the store
    FAILED = "FAILED"           # A step failed; terminal

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES


_FORWARD_ORDER: tuple[ProcessingState, ...] = (
    ProcessingState.SCANNED,
    ProcessingState.EXTRACTED,
    ProcessingState.ANALYZED,
    ProcessingState.SUMMARIZED,
    ProcessingState.CHUNKED,
    ProcessingState.EMBEDDED,
    ProcessingState.INDEXED,
)
_OPTIONAL_STATES = frozenset({ProcessingState.ANALYZED, ProcessingState.SUMMARIZED})
_TERMINAL_STATES = frozenset({ProcessingState.INDEXED, ProcessingState.FAILED})


# ---------------------------------------------------------------------------
# FileMetadata: what the scanner knows about a file before processing.
# ---------------------------------------------------------------------------
class FileMetadata(BaseModel):
    """Filesystem facts about a scanned file."""

    model_config = ConfigDict(frozen=True)

    path: str
    name: str
    extension: str
    size: int = Field(default=0, ge=0)
    modified_time: datetime | None = None
    # SHA-256 hex digest of the file bytes; empty for directories.
    hash: str = ""
    mime_type: str = "application/octet-stream"
    is_directory: bool = False
    custom: dict[str, str] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Chunk: a bounded slice of a document's content, the unit of embedding.
# ---------------------------------------------------------------------------
class Chunk(BaseModel):
    """A contiguous character range of a document's extracted content."""

    id: str = Field(default_factory=_new_id)
    # Back-reference for lookups only; the Document owns its chunks.
    document_id: str
    content: str
    start_index: int = Field(ge=0)
    end_index: int
    chunk_index: int = Field(ge=0)
    metadata: dict[str, str] = Field(default_factory=dict)
    embedding: list[float] | None = None
    created_at: datetime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def _check_range(self) -> Chunk:
        if self.end_index <= self.start_index:
            raise ValueError(
                f"chunk range must be non-empty: [{self.start_index}, {self.end_index})"
            )
        return self

    @property
    def vector_id(self) -> str:
        """ID of this chunk's vector in the store (unique per document and ordinal)."""
        return f"{self.document_id}_{self.chunk_index}"


# ---------------------------------------------------------------------------
# Document: a file under processing.
# ---------------------------------------------------------------------------
class Document(BaseModel):
    """A file moving through the ingestion pipeline.

    Two documents with the same ``file_hash`` are the same logical content;
    the orchestrator uses the hash to avoid indexing duplicates.
    """

    id: str = Field(default_factory=_new_id)
    file_name: str
    file_path: str
    file_type: str
    file_size: int = Field(default=0, ge=0)
    file_hash: str
    content: str = ""
    raw_content: bytes | None = Field(default=None, exclude=True, repr=False)
    metadata: dict[str, str] = Field(default_factory=dict)
    summary: str | None = None
    vision_analysis: str | None = None
    processing_state: ProcessingState = ProcessingState.SCANNED
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
    indexed_at: datetime | None = None
    error: str | None = None
    # True when INDEXED was reached by the duplicate short-circuit.
    already_indexed: bool = False
    chunks: list[Chunk] = Field(default_factory=list)

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    def can_transition_to(self, target: ProcessingState) -> bool:
        """Return ``True`` if moving to *target* is legal from the current state."""
        current = self.processing_state
        if current.is_terminal:
            return False
        if target is ProcessingState.FAILED:
            return True

        current_rank = _FORWARD_ORDER.index(current)
        target_rank = _FORWARD_ORDER.index(target)
        if target_rank <= current_rank:
            return False
        skipped = _FORWARD_ORDER[current_rank + 1 : target_rank]
        return all(state in _OPTIONAL_STATES for state in skipped)

    def transition_to(self, target: ProcessingState) -> None:
        """Move to *target*, bumping ``updated_at``.

        Raises
        ------
        InvalidStateTransitionError
            If the move goes backwards, leaves a terminal state, or skips a
            required state.
        """
        if not self.can_transition_to(target):
            raise InvalidStateTransitionError(
                current=self.processing_state.value, target=target.value
            )
        self._set_state(target)

    def mark_already_indexed(self) -> None:
        """Jump straight to INDEXED because identical content is already stored."""
        if self.processing_state.is_terminal:
            raise InvalidStateTransitionError(
                current=self.processing_state.value,
                target=ProcessingState.INDEXED.value,
            )
        self.already_indexed = True
        self._set_state(ProcessingState.INDEXED)

    def mark_failed(self, error: str) -> None:
        """Record *error* and move to FAILED."""
        self.transition_to(ProcessingState.FAILED)
        self.error = error

    def _set_state(self, target: ProcessingState) -> None:
        now = _utcnow()
        self.processing_state = target
        self.updated_at = now
        if target is ProcessingState.INDEXED:
            self.indexed_at = now

    # ------------------------------------------------------------------
    # Chunks
    # ------------------------------------------------------------------

    def attach_chunks(self, chunks: list[Chunk]) -> None:
        """Replace this document's chunks after validating their ranges.

        Raises
        ------
        ValueError
            If a chunk belongs to another document, indices are not strictly
            increasing, or a range falls outside ``content``.
        """
        length = len(self.content)
        previous_index = -1
        for chunk in chunks:
            if chunk.document_id != self.id:
                raise ValueError(f"chunk {chunk.id} belongs to document {chunk.document_id}")
            if chunk.chunk_index <= previous_index:
                raise ValueError("chunk_index values must be strictly increasing")
            if chunk.end_index > length:
                raise ValueError(
                    f"chunk {chunk.chunk_index} ends at {chunk.end_index}, "
                    f"past content length {length}"
                )
            previous_index = chunk.chunk_index
        self.chunks = list(chunks)
