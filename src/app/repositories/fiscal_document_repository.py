"""Fiscal Document Repository Interface

Defines the contract for fiscal document persistence operations.
"""

from abc import ABC, abstractmethod
from typing import Optional, List, Sequence
from src.domain.document_type import DocumentType
from src.domain.fiscal_document import FiscalDocument, DocumentStatus, FiscalStatus


class FiscalDocumentRepository(ABC):
    """
    Repository interface for FiscalDocument persistence

    get_by_id(for_update=True) locks the row so that two finalize calls
    on the same draft cannot run side by side.
    """

    @abstractmethod
    async def create(self, document: FiscalDocument) -> FiscalDocument:
        """
        Create a new document

        Args:
            document: FiscalDocument entity to persist

        Returns:
            Created FiscalDocument with generated ID
        """
        pass

    @abstractmethod
    async def get_by_id(self, document_id: int, for_update: bool = False) -> Optional[FiscalDocument]:
        """
        Retrieve document by ID

        Args:
            document_id: Document ID
            for_update: If True, lock the row with SELECT FOR UPDATE

        Returns:
            FiscalDocument if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_by_iud(self, iud: str) -> Optional[FiscalDocument]:
        """
        Retrieve document by its unique document identifier

        Args:
            iud: 45 character identifier

        Returns:
            FiscalDocument if found, None otherwise
        """
        pass

    @abstractmethod
    async def update(self, document: FiscalDocument) -> FiscalDocument:
        """
        Update an existing document

        Args:
            document: FiscalDocument entity with updated values

        Returns:
            Updated FiscalDocument
        """
        pass

    @abstractmethod
    async def reserve_sequence(self, document: FiscalDocument) -> bool:
        """
        Persist the reservation held on ``document`` if the stored row is
        still an unreserved draft

        The document is reloaded afterwards, so when another finalize
        reserved it first it carries that reservation instead.

        Returns:
            True if this call stored the reservation
        """
        pass

    @abstractmethod
    async def issue_draft(self, document: FiscalDocument) -> bool:
        """
        Persist the issue fields held on ``document`` if the stored row is
        still the draft with the same reservation

        The document is reloaded afterwards.

        Returns:
            True if this call moved the document out of draft
        """
        pass

    @abstractmethod
    async def list_documents(
        self,
        status: Optional[DocumentStatus] = None,
        document_type: Optional[DocumentType] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[FiscalDocument]:
        """
        List documents, newest first

        Args:
            status: Optional filter by lifecycle status
            document_type: Optional filter by type
            limit: Maximum number of documents to return
            offset: Offset for pagination

        Returns:
            List of documents
        """
        pass

    @abstractmethod
    async def list_for_transmission(
        self,
        fiscal_statuses: Sequence[FiscalStatus],
        max_attempts: int,
        limit: int = 50,
    ) -> List[FiscalDocument]:
        """
        Issued documents waiting for (re)transmission, oldest first

        Args:
            fiscal_statuses: Fiscal statuses to pick up (pending, failed)
            max_attempts: Skip documents with this many attempts or more
            limit: Batch size

        Returns:
            List of documents
        """
        pass
