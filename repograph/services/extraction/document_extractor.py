"""Extractor for office and PDF documents.

Binary document formats are not parsed.  Each file yields a tagged
placeholder naming the format and the file, so the document still flows
through chunking and indexing and can be found by name.  Plugging in a real
parser means replacing :meth:`DocumentExtractor.extract` for that format.
"""

from __future__ import annotations

from pathlib import Path

import structlog

from repograph.interfaces.extractor import IContentExtractor

logger = structlog.get_logger(logger_name=__name__)

_PRESENTATION_EXTENSIONS = frozenset({".pptx", ".ppt"})


class DocumentExtractor(IContentExtractor):
    """Returns a tagged placeholder for .pdf, .docx, .doc, .pptx, .ppt and .odt files."""

    supported_extensions = frozenset({".pdf", ".docx", ".doc", ".pptx", ".ppt", ".odt"})

    def extract(self, file_path: str | Path) -> str:
        path = Path(file_path)
        fmt = path.suffix.lstrip(".").upper()
        kind = "Presentation" if path.suffix.lower() in _PRESENTATION_EXTENSIONS else "Document"

        logger.debug("extracting_document_placeholder", file_path=str(path), format=fmt)
        return f"[{fmt} {kind}: {path.name}]\n({fmt} extraction not yet implemented - placeholder)"

    def get_extractor_name(self) -> str:
        return "document"
