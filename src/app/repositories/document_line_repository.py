"""Document Line Repository Interface

Defines the contract for document line persistence operations.
"""

from abc import ABC, abstractmethod
from typing import List, Sequence
from src.domain.document_line import DocumentLine, LineItem


class DocumentLineRepository(ABC):
    """Repository interface for DocumentLine persistence"""

    @abstractmethod
    async def get_by_document_id(self, document_id: int) -> List[DocumentLine]:
        """
        Retrieve the lines of a document in position order

        Args:
            document_id: Document ID

        Returns:
            List of DocumentLine
        """
        pass

    @abstractmethod
    async def replace_lines(self, document_id: int, items: Sequence[LineItem]) -> List[DocumentLine]:
        """
        Replace every line of a draft document

        Args:
            document_id: Document ID
            items: New line items in order

        Returns:
            Created DocumentLine rows

        Raises:
            DocumentNotEditableError: If the document is no longer a draft,
                or already holds a sequence number
        """
        pass
