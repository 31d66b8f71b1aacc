from .fiscal_document_repository import FiscalDocumentRepository
from .document_line_repository import DocumentLineRepository
from .series_counter_repository import SeriesCounterRepository

__all__ = [
    "FiscalDocumentRepository",
    "DocumentLineRepository",
    "SeriesCounterRepository",
]
