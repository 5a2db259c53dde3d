"""Extension-based dispatch to content extractors.

The registry holds an ordered list of extractors and selects the FIRST one
whose extension set accepts a file.  Order therefore matters where sets
overlap: with the default order ``.csv`` goes to :class:`TextExtractor`,
not :class:`SpreadsheetExtractor`.

The registry is immutable after construction and safe to share across
concurrent pipelines.
"""

from __future__ import annotations

from pathlib import Path

import structlog

from repograph.interfaces.extractor import IContentExtractor
from repograph.services.extraction.code_extractor import CodeExtractor
from repograph.services.extraction.document_extractor import DocumentExtractor
from repograph.services.extraction.image_extractor import ImageExtractor
from repograph.services.extraction.spreadsheet_extractor import SpreadsheetExtractor
from repograph.services.extraction.text_extractor import TextExtractor
from repograph.utils.errors import UnsupportedFileTypeError

logger = structlog.get_logger(logger_name=__name__)


def default_extractors() -> list[IContentExtractor]:
    """Return the built-in extractors in dispatch order."""
    return [
        TextExtractor(),
        ImageExtractor(),
        DocumentExtractor(),
        SpreadsheetExtractor(),
        CodeExtractor(),
    ]


class ExtractorRegistry:
    """Ordered, first-match-wins collection of :class:`IContentExtractor` objects.

    Parameters
    ----------
    extractors:
        Extractors in priority order.  Defaults to :func:`default_extractors`.
    """

    def __init__(self, extractors: list[IContentExtractor] | None = None) -> None:
        self._extractors: tuple[IContentExtractor, ...] = tuple(
            extractors if extractors is not None else default_extractors()
        )

    @property
    def extractors(self) -> tuple[IContentExtractor, ...]:
        return self._extractors

    def select(self, extension: str) -> IContentExtractor:
        """Return the first extractor accepting *extension*.

        Parameters
        ----------
        extension:
            File extension with leading dot, any case (``".MD"`` works).

        Raises
        ------
        UnsupportedFileTypeError
            If no registered extractor accepts the extension.
        """
        for extractor in self._extractors:
            if extractor.can_process(extension):
                return extractor
        raise UnsupportedFileTypeError(
            message=f"No extractor registered for file type '{extension or '<none>'}'",
            extension=extension,
        )

    def supports(self, extension: str) -> bool:
        return any(extractor.can_process(extension) for extractor in self._extractors)

    def extract(self, file_path: str | Path) -> str:
        """Select an extractor by the file's suffix and run it.

        Raises
        ------
        UnsupportedFileTypeError
            If the suffix is not handled.
        FileReadError
            If the chosen extractor cannot read the file.
        """
        path = Path(file_path)
        extractor = self.select(path.suffix)
        content = extractor.extract(path)
        logger.debug(
            "content_extracted",
            file_path=str(path),
            extractor=extractor.get_extractor_name(),
            chars=len(content),
        )
        return content

    def supported_extensions(self) -> set[str]:
        """Return the union of every registered extractor's extensions."""
        extensions: set[str] = set()
        for extractor in self._extractors:
            extensions.update(extractor.supported_extensions)
        return extensions
