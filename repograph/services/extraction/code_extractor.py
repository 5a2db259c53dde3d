"""Extractor for source-code files."""

from __future__ import annotations

from pathlib import Path

import structlog

from repograph.interfaces.extractor import IContentExtractor
from repograph.services.extraction.text_extractor import read_text_file

logger = structlog.get_logger(logger_name=__name__)


class CodeExtractor(IContentExtractor):
    """Returns source files verbatim."""

    supported_extensions = frozenset(
        {".go", ".py", ".js", ".ts", ".java", ".c", ".cpp", ".h", ".rs", ".rb", ".php", ".sql"}
    )

    def extract(self, file_path: str | Path) -> str:
        logger.debug("extracting_code", file_path=str(file_path))
        return read_text_file(file_path, self.get_extractor_name())

    def get_extractor_name(self) -> str:
        return "code"
