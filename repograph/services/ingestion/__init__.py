"""Document ingestion for the repograph vector index.

Stages overview:

1. **Scan** (scanner.py / FileScanner) -- Stats and SHA-256-hashes files,
   producing ``SCANNED`` documents; walks directories with exclusions.

2. **Process** (pipeline/orchestrator.py / DocumentPipeline) -- Extract,
   optionally analyse and summarise, chunk, embed, and index.

3. **Chunk** (chunker.py / TextChunker) -- Splits content into overlapping
   character windows aligned to paragraph, sentence, or word breaks.

The IngestionService class ties the stages together and keeps the
processed documents in the document store.
"""

from repograph.services.ingestion.chunker import TextChunker
from repograph.services.ingestion.ingestion_service import IngestionService
from repograph.services.ingestion.scanner import FileScanner

__all__ = [
    "FileScanner",
    "IngestionService",
    "TextChunker",
]
