"""Extractor for image files.

Images carry no extractable text of their own.  The extractor returns a
marker naming the file; the pipeline's vision step (when enabled) appends
the model's description of the image afterwards.
"""

from __future__ import annotations

from pathlib import Path

import structlog

from repograph.interfaces.extractor import IContentExtractor

logger = structlog.get_logger(logger_name=__name__)


class ImageExtractor(IContentExtractor):
    """Returns ``[IMAGE FILE: <name>]`` without reading the file."""

    supported_extensions = frozenset({".png", ".jpg", ".jpeg", ".gif", ".bmp", ".svg", ".webp"})

    def extract(self, file_path: str | Path) -> str:
        logger.debug("image_file_detected", file_path=str(file_path))
        return f"[IMAGE FILE: {Path(file_path).name}]"

    def get_extractor_name(self) -> str:
        return "image"
