from .fiscal_document_repository import SqlAlchemyFiscalDocumentRepository
from .document_line_repository import SqlAlchemyDocumentLineRepository
from .series_counter_repository import SqlAlchemySeriesCounterRepository
from .client_directory import SqlAlchemyClientDirectory

__all__ = [
    "SqlAlchemyFiscalDocumentRepository",
    "SqlAlchemyDocumentLineRepository",
    "SqlAlchemySeriesCounterRepository",
    "SqlAlchemyClientDirectory",
]
