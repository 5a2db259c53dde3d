"""Filesystem scanner: turns paths into hashed :class:`Document` objects.

The scanner is the pipeline's entry point.  It streams each file through
SHA-256 (the hash is the deduplication key the vector store is checked
against) and records filesystem facts as :class:`FileMetadata`.

Directory scans skip excluded directory names (``.git``, ``node_modules``
and so on), hidden files, and files larger than ``max_file_size_mb``.
"""

from __future__ import annotations

import hashlib
import mimetypes
import os
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path

import structlog

from repograph.models.document import Document, FileMetadata
from repograph.utils.errors import FileReadError

logger = structlog.get_logger(logger_name=__name__)

_HASH_BLOCK_SIZE = 64 * 1024


class FileScanner:
    """Discovers files and builds ``SCANNED`` documents from them.

    Parameters
    ----------
    exclude_dirs:
        Directory names never descended into.
    max_file_size_mb:
        Files larger than this are left out of directory scans.  ``0``
        disables the limit.
    follow_symlinks:
        Whether directory scans follow symbolic links.
    """

    def __init__(
        self,
        exclude_dirs: Iterable[str] = (),
        max_file_size_mb: float = 50,
        follow_symlinks: bool = False,
    ) -> None:
        self._exclude_dirs = frozenset(exclude_dirs)
        self._max_file_size = int(max_file_size_mb * 1024 * 1024)
        self._follow_symlinks = follow_symlinks

    @classmethod
    def from_config(cls, config: dict) -> FileScanner:
        """Build a scanner from the ``ingestion`` section of the loaded config."""
        ingestion = config.get("ingestion", {})
        return cls(
            exclude_dirs=ingestion.get("exclude_dirs", ()),
            max_file_size_mb=ingestion.get("max_file_size_mb", 50),
            follow_symlinks=ingestion.get("follow_symlinks", False),
        )

    # ------------------------------------------------------------------
    # Single files
    # ------------------------------------------------------------------

    def describe(self, path: str | Path) -> FileMetadata:
        """Stat and hash *path*.

        Raises
        ------
        FileReadError
            If the file does not exist or cannot be read.
        """
        file_path = Path(path)
        try:
            stat = file_path.stat()
        except OSError as exc:
            raise FileReadError(
                message=f"Cannot stat {file_path}: {exc}",
                provider_name="scanner",
                file_path=str(file_path),
            ) from exc

        is_directory = file_path.is_dir()
        mime_type, _ = mimetypes.guess_type(file_path.name)
        return FileMetadata(
            path=str(file_path),
            name=file_path.name,
            extension=file_path.suffix.lower(),
            size=stat.st_size,
            modified_time=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),  # noqa: UP017
            hash="" if is_directory else self.hash_file(file_path),
            mime_type=mime_type or "application/octet-stream",
            is_directory=is_directory,
        )

    def scan_file(self, path: str | Path) -> Document:
        """Build a ``SCANNED`` :class:`Document` for *path*.

        Raises
        ------
        FileReadError
            If *path* is missing, unreadable, or a directory.
        """
        meta = self.describe(path)
        if meta.is_directory:
            raise FileReadError(
                message=f"{meta.path} is a directory",
                provider_name="scanner",
                file_path=meta.path,
            )

        document = Document(
            file_name=meta.name,
            file_path=meta.path,
            file_type=meta.extension,
            file_size=meta.size,
            file_hash=meta.hash,
            metadata={
                "mime_type": meta.mime_type,
                "modified_time": meta.modified_time.isoformat() if meta.modified_time else "",
            },
        )
        logger.debug(
            "file_scanned",
            file_path=meta.path,
            size=meta.size,
            file_hash=meta.hash[:12],
        )
        return document

    @staticmethod
    def hash_file(path: str | Path) -> str:
        """Return the SHA-256 hex digest of *path*, read in blocks."""
        digest = hashlib.sha256()
        try:
            with open(path, "rb") as f:
                for block in iter(lambda: f.read(_HASH_BLOCK_SIZE), b""):
                    digest.update(block)
        except OSError as exc:
            raise FileReadError(
                message=f"Failed to hash {path}: {exc}",
                provider_name="scanner",
                file_path=str(path),
            ) from exc
        return digest.hexdigest()

    # ------------------------------------------------------------------
    # Directories
    # ------------------------------------------------------------------

    def scan_directory(self, root: str | Path, recursive: bool = True) -> list[FileMetadata]:
        """List the files under *root* that pass the scan filters, sorted by path.

        Files that vanish or become unreadable mid-scan are logged and
        skipped.

        Raises
        ------
        FileReadError
            If *root* is not a directory.
        """
        root_path = Path(root)
        if not root_path.is_dir():
            raise FileReadError(
                message=f"{root_path} is not a directory",
                provider_name="scanner",
                file_path=str(root_path),
            )

        found: list[FileMetadata] = []
        for candidate in self._walk(root_path, recursive):
            try:
                size = candidate.stat().st_size
            except OSError as exc:
                logger.warning("scan_stat_failed", file_path=str(candidate), error=str(exc))
                continue
            if self._max_file_size and size > self._max_file_size:
                logger.info(
                    "scan_skipped_large_file",
                    file_path=str(candidate),
                    size=size,
                    limit=self._max_file_size,
                )
                continue
            try:
                found.append(self.describe(candidate))
            except FileReadError as exc:
                logger.warning("scan_read_failed", file_path=str(candidate), error=exc.message)

        found.sort(key=lambda meta: meta.path)
        logger.info("directory_scanned", root=str(root_path), files=len(found))
        return found

    def _walk(self, root: Path, recursive: bool) -> Iterable[Path]:
        for dirpath, dirnames, filenames in os.walk(root, followlinks=self._follow_symlinks):
            # Pruning dirnames in place stops os.walk descending into them.
            dirnames[:] = [
                d for d in dirnames if d not in self._exclude_dirs and not d.startswith(".")
            ]
            for name in filenames:
                if name.startswith("."):
                    continue
                path = Path(dirpath) / name
                if path.is_symlink() and not self._follow_symlinks:
                    continue
                yield path
            if not recursive:
                break
