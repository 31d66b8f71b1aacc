from .base import BaseModel
from .client import Client
from .document_line import DocumentLine, LineItem
from .document_type import DocumentType
from .fiscal_document import FiscalDocument, DocumentStatus, FiscalStatus
from .series_counter import SeriesCounter

__all__ = [
    "BaseModel",
    "Client",
    "DocumentLine",
    "LineItem",
    "DocumentType",
    "FiscalDocument",
    "DocumentStatus",
    "FiscalStatus",
    "SeriesCounter",
]
