"""Pipeline orchestration for repograph document ingestion."""

from repograph.pipeline.orchestrator import DocumentPipeline

__all__ = ["DocumentPipeline"]
