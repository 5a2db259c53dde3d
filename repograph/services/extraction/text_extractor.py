"""Extractor for plain-text and structured-text files (.txt, .md, .json, ...)."""

from __future__ import annotations

from pathlib import Path

import structlog

from repograph.interfaces.extractor import IContentExtractor
from repograph.utils.errors import FileReadError

logger = structlog.get_logger(logger_name=__name__)


def read_text_file(file_path: str | Path, extractor_name: str) -> str:
    """Read *file_path* as UTF-8, replacing undecodable bytes.

    Raises
    ------
    FileReadError
        If the file cannot be opened or read.
    """
    try:
        return Path(file_path).read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise FileReadError(
            message=f"Failed to read {file_path}: {exc}",
            provider_name=extractor_name,
            file_path=str(file_path),
        ) from exc


class TextExtractor(IContentExtractor):
    """Returns the file's contents verbatim."""

    supported_extensions = frozenset(
        {".txt", ".md", ".log", ".csv", ".json", ".yaml", ".yml", ".xml", ".toml"}
    )

    def extract(self, file_path: str | Path) -> str:
        logger.debug("extracting_text", file_path=str(file_path))
        return read_text_file(file_path, self.get_extractor_name())

    def get_extractor_name(self) -> str:
        return "text"
