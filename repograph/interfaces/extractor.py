"""Abstract base class for content extractors.

An extractor turns a file on disk into plain text.  Each extractor declares
the set of extensions it accepts; the registry in
``repograph/services/extraction/`` walks its extractors in registration
order and hands the file to the first one that accepts the extension.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path


# Concrete implementations: TextExtractor, ImageExtractor, DocumentExtractor,
# SpreadsheetExtractor, CodeExtractor
# Located in: repograph/services/extraction/
class IContentExtractor(ABC):
    """Contract for synchronous, stateless file-to-text extractors.

    Extractors never touch the network and never mutate shared state, so a
    single instance can serve any number of concurrent callers.
    """

    # Lower-cased, leading-dot extensions this extractor accepts.
    supported_extensions: frozenset[str] = frozenset()

    def can_process(self, extension: str) -> bool:
        """Return ``True`` if *extension* (any case, with leading dot) is accepted."""
        return extension.lower() in self.supported_extensions

    @abstractmethod
    def extract(self, file_path: str | Path) -> str:
        """Extract the textual content of *file_path*.

        Parameters
        ----------
        file_path:
            Path to a local file whose extension this extractor accepts.

        Returns
        -------
        str
            The extracted text, or a tagged placeholder for formats whose
            content is not parsed.

        Raises
        ------
        repograph.utils.errors.FileReadError
            If the file cannot be opened or read.
        """

    @abstractmethod
    def get_extractor_name(self) -> str:
        """Return a short identifier, e.g. ``"text"`` or ``"image"``."""
