"""Content extraction for the repograph ingestion pipeline.

Each extractor converts one family of file formats into plain text:

- **TextExtractor**        -- .txt .md .log .csv .json .yaml .yml .xml .toml, read verbatim
- **ImageExtractor**       -- .png .jpg .jpeg .gif .bmp .svg .webp, ``[IMAGE FILE: name]`` marker
- **DocumentExtractor**    -- .pdf .docx .doc .pptx .ppt .odt, tagged placeholders
- **SpreadsheetExtractor** -- .xlsx .xls (placeholder) and .csv (verbatim)
- **CodeExtractor**        -- common source-code extensions, read verbatim

:class:`ExtractorRegistry` dispatches a file to the first extractor that
accepts its extension.
"""

from repograph.services.extraction.code_extractor import CodeExtractor
from repograph.services.extraction.document_extractor import DocumentExtractor
from repograph.services.extraction.image_extractor import ImageExtractor
from repograph.services.extraction.registry import ExtractorRegistry, default_extractors
from repograph.services.extraction.spreadsheet_extractor import SpreadsheetExtractor
from repograph.services.extraction.text_extractor import TextExtractor

__all__ = [
    "CodeExtractor",
    "DocumentExtractor",
    "ExtractorRegistry",
    "ImageExtractor",
    "SpreadsheetExtractor",
    "TextExtractor",
    "default_extractors",
]
