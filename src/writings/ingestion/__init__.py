"""Ingestion package interfaces."""

from .ingestor import IngestionError, WritingIngestor, extract_sections
from .markup import MarkupError, load_markup

__all__ = ["IngestionError", "MarkupError", "WritingIngestor", "extract_sections", "load_markup"]
