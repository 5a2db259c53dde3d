"""Unit tests for the TextChunker: overlapping, boundary-aligned character windows."""

from __future__ import annotations

import pytest

from conftest import SAMPLE_MARKDOWN, make_document
from repograph.services.ingestion.chunker import TextChunker

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_LONG_TEXT = "\n\n".join(
    f"Paragraph {n}. " + " ".join(f"word{n}_{i}" for i in range(40)) + "."
    for n in range(12)
)


def _make_chunker(chunk_size: int = 200, overlap: int = 40) -> TextChunker:
    """Build a TextChunker with a predictable configuration."""
    return TextChunker(chunk_size=chunk_size, overlap=overlap)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_defaults(self) -> None:
        chunker = TextChunker()
        assert chunker.chunk_size == 1000
        assert chunker.overlap == 200

    @pytest.mark.parametrize(("size", "overlap"), [(0, 0), (-5, 0), (100, 100), (100, -1)])
    def test_invalid_parameters_rejected(self, size: int, overlap: int) -> None:
        with pytest.raises(ValueError):
            TextChunker(chunk_size=size, overlap=overlap)


# ---------------------------------------------------------------------------
# Chunk invariants
# ---------------------------------------------------------------------------


class TestChunkInvariants:
    def test_content_matches_source_offsets(self) -> None:
        document = make_document(_LONG_TEXT)
        for chunk in _make_chunker().chunk(document):
            assert chunk.content == document.content[chunk.start_index : chunk.end_index]

    def test_indices_are_sequential_from_zero(self) -> None:
        chunks = _make_chunker().chunk(make_document(_LONG_TEXT))
        assert [c.chunk_index for c in chunks] == list(range(len(chunks)))

    def test_chunks_are_bounded_and_non_empty(self) -> None:
        chunks = _make_chunker(chunk_size=200).chunk(make_document(_LONG_TEXT))
        assert len(chunks) > 1
        for chunk in chunks:
            assert 0 < len(chunk.content) <= 200
            assert chunk.content.strip()

    def test_starts_strictly_advance(self) -> None:
        chunks = _make_chunker().chunk(make_document(_LONG_TEXT))
        starts = [c.start_index for c in chunks]
        assert starts == sorted(set(starts))

    def test_consecutive_chunks_overlap_or_touch(self) -> None:
        chunks = _make_chunker(chunk_size=200, overlap=40).chunk(make_document(_LONG_TEXT))
        for previous, current in zip(chunks, chunks[1:]):
            # No non-whitespace text falls between two chunks.
            gap = _LONG_TEXT[previous.end_index : current.start_index]
            assert gap.strip() == ""

    def test_every_word_is_covered(self) -> None:
        chunks = _make_chunker().chunk(make_document(_LONG_TEXT))
        covered = " ".join(c.content for c in chunks)
        for word in _LONG_TEXT.split():
            assert word in covered

    def test_chunks_carry_document_metadata(self) -> None:
        document = make_document(SAMPLE_MARKDOWN, file_name="README.md", file_type=".md")
        chunks = _make_chunker().chunk(document)
        assert chunks
        for chunk in chunks:
            assert chunk.document_id == document.id
            assert chunk.metadata == {"file_name": "README.md", "file_type": ".md"}

    def test_chunks_attach_cleanly(self) -> None:
        document = make_document(_LONG_TEXT)
        document.attach_chunks(_make_chunker().chunk(document))
        assert document.chunks


# ---------------------------------------------------------------------------
# Boundaries
# ---------------------------------------------------------------------------


class TestBoundaries:
    def test_short_text_is_one_chunk(self) -> None:
        chunks = _make_chunker().chunk(make_document("A single short sentence."))
        assert len(chunks) == 1
        assert chunks[0].start_index == 0
        assert chunks[0].end_index == len("A single short sentence.")

    @pytest.mark.parametrize("content", ["", "   \n\n\t  "])
    def test_empty_or_blank_content_yields_no_chunks(self, content: str) -> None:
        assert _make_chunker().chunk(make_document(content)) == []

    def test_prefers_paragraph_break(self) -> None:
        first = "Alpha sentence one. " * 6  # 120 chars
        text = first.rstrip() + "\n\n" + "Beta sentence two. " * 10
        spans = _make_chunker(chunk_size=200, overlap=20).split(text)
        first_end = spans[0][1]
        assert text[first_end : first_end + 2] == "\n\n"

    def test_falls_back_to_sentence_end(self) -> None:
        text = "One two three four five six seven. " * 10
        start, end = _make_chunker(chunk_size=100, overlap=10).split(text)[0]
        assert text[start:end].endswith(".")

    def test_falls_back_to_word_break(self) -> None:
        text = " ".join(["lorem"] * 60)
        start, end = _make_chunker(chunk_size=100, overlap=10).split(text)[0]
        assert text[end] == " "
        assert not text[start:end].endswith(" ")

    def test_hard_cut_without_breaks(self) -> None:
        text = "x" * 450
        spans = _make_chunker(chunk_size=200, overlap=50).split(text)
        assert spans[0] == (0, 200)
        assert spans[-1][1] == 450
        for start, end in spans:
            assert end - start <= 200

    def test_zero_overlap(self) -> None:
        text = "x" * 300
        assert _make_chunker(chunk_size=100, overlap=0).split(text) == [
            (0, 100),
            (100, 200),
            (200, 300),
        ]

    def test_leading_whitespace_skipped(self) -> None:
        spans = _make_chunker().split("\n\n   Indented start.")
        assert spans == [(5, len("\n\n   Indented start."))]
