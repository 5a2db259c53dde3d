"""Text chunking with overlapping character windows and natural boundaries.

Splits a document's extracted content into :class:`~repograph.models.document.Chunk`
objects sized for embedding models.

The chunking strategy has two goals:

1. **Boundary-preserving** -- A window that would end mid-text is pulled back
   to the nearest paragraph break, then sentence end, then word break, as
   long as that keeps at least half the window.  Only text with no usable
   break is cut hard.

2. **Overlapping windows** -- Each window after the first starts ``overlap``
   characters before the previous one ended (moved forward to a word
   boundary), so content spanning a boundary appears whole in at least one
   chunk.

Every chunk's ``content`` is exactly ``document.content[start_index:end_index]``,
so offsets can always be mapped back to the source text.
"""

from __future__ import annotations

import structlog

from repograph.models.document import Chunk, Document

logger = structlog.get_logger(logger_name=__name__)

# Searched in this order; the first kind found in the back half of the
# window decides where the chunk ends.
_PARAGRAPH_BREAK = "\n\n"
_SENTENCE_ENDS = (". ", "! ", "? ", "\n")


class TextChunker:
    """Splits document content into overlapping, boundary-aligned chunks.

    Parameters
    ----------
    chunk_size:
        Maximum characters per chunk (default 1000).
    overlap:
        Characters shared between consecutive chunks (default 200).  Must be
        smaller than *chunk_size*.

    Raises
    ------
    ValueError
        If *chunk_size* is not positive or *overlap* is outside
        ``[0, chunk_size)``.
    """

    def __init__(self, chunk_size: int = 1000, overlap: int = 200) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if overlap < 0 or overlap >= chunk_size:
            raise ValueError(
                f"overlap must be in [0, chunk_size), got overlap={overlap} chunk_size={chunk_size}"
            )
        self._chunk_size = chunk_size
        self._overlap = overlap

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @property
    def overlap(self) -> int:
        return self._overlap

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def chunk(self, document: Document) -> list[Chunk]:
        """Split ``document.content`` into :class:`Chunk` objects.

        Parameters
        ----------
        document:
            The document to chunk.  It is not modified; the caller attaches
            the result with :meth:`Document.attach_chunks`.

        Returns
        -------
        list[Chunk]
            Chunks in order with ``chunk_index`` 0, 1, 2, ...  Empty or
            whitespace-only content yields an empty list.
        """
        content = document.content
        chunks = [
            Chunk(
                document_id=document.id,
                content=content[start:end],
                start_index=start,
                end_index=end,
                chunk_index=index,
                metadata={"file_name": document.file_name, "file_type": document.file_type},
            )
            for index, (start, end) in enumerate(self.split(content))
        ]

        logger.debug(
            "chunking_complete",
            document_id=document.id,
            num_chunks=len(chunks),
            content_chars=len(content),
        )
        return chunks

    def split(self, text: str) -> list[tuple[int, int]]:
        """Return ``(start, end)`` character spans covering *text*.

        Spans are non-empty, strictly advancing, and together cover every
        non-whitespace character of *text*.
        """
        length = len(text)
        spans: list[tuple[int, int]] = []
        start = self._skip_whitespace(text, 0)

        while start < length:
            end = min(start + self._chunk_size, length)
            if end < length:
                end = self._find_break(text, start, end)
            spans.append((start, end))
            if end >= length:
                break

            next_start = max(end - self._overlap, start + 1)
            next_start = self._align_to_word(text, next_start, end)
            start = self._skip_whitespace(text, next_start)

        return spans

    # ------------------------------------------------------------------
    # Boundary search
    # ------------------------------------------------------------------

    def _find_break(self, text: str, start: int, end: int) -> int:
        """Pull *end* back to the best natural boundary in the back half of the window."""
        window = text[start:end]
        floor = self._chunk_size // 2

        paragraph = window.rfind(_PARAGRAPH_BREAK, floor)
        if paragraph > 0:
            return start + paragraph

        sentence = max(window.rfind(marker, floor) for marker in _SENTENCE_ENDS)
        if sentence >= 0:
            # Keep the punctuation (or newline) inside this chunk.
            return start + sentence + 1

        space = window.rfind(" ", floor)
        if space > 0:
            return start + space

        return end

    @staticmethod
    def _align_to_word(text: str, pos: int, limit: int) -> int:
        """Move *pos* forward off a partial word; gives *limit* if no word break precedes it."""
        if pos <= 0 or text[pos - 1].isspace() or text[pos].isspace():
            return pos
        for i in range(pos, limit):
            if text[i].isspace():
                return i
        return limit

    @staticmethod
    def _skip_whitespace(text: str, pos: int) -> int:
        length = len(text)
        while pos < length and text[pos].isspace():
            pos += 1
        return pos
