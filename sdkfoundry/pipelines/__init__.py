"""Ingestion pipeline: scanner, extractor, inferencer, harvester, materializer."""

from .models import IngestResult, IngestStats
from .scanner import IngestionError, RepositoryLayoutError
from .ingest import build_result, run_ingestion

__all__ = [
    "IngestResult",
    "IngestStats",
    "IngestionError",
    "RepositoryLayoutError",
    "build_result",
    "run_ingestion",
]
