"""Extractor for spreadsheets: CSV read verbatim, Excel workbooks as placeholders."""

from __future__ import annotations

from pathlib import Path

import structlog

from repograph.interfaces.extractor import IContentExtractor
from repograph.services.extraction.text_extractor import read_text_file

logger = structlog.get_logger(logger_name=__name__)


class SpreadsheetExtractor(IContentExtractor):
    """Handles .xlsx, .xls and .csv files.

    In the default registry ``.csv`` is claimed by
    :class:`~repograph.services.extraction.text_extractor.TextExtractor`
    first; CSV support here matters only for registries built without it.
    """

    supported_extensions = frozenset({".xlsx", ".xls", ".csv"})

    def extract(self, file_path: str | Path) -> str:
        path = Path(file_path)
        logger.debug("extracting_spreadsheet", file_path=str(path))

        if path.suffix.lower() == ".csv":
            return read_text_file(path, self.get_extractor_name())

        return f"[Spreadsheet: {path.name}]\n(XLSX extraction not yet implemented - placeholder)"

    def get_extractor_name(self) -> str:
        return "spreadsheet"
