"""Fiscal Authority Service Interface

Defines the contract for transmitting issued documents to the tax authority.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from pydantic import BaseModel
from src.domain.document_line import DocumentLine
from src.domain.fiscal_document import FiscalDocument


class TransmissionResult(BaseModel):
    """Outcome of one transmission attempt"""

    success: bool
    error: Optional[str] = None


class FiscalAuthorityService(ABC):
    """
    Abstract transmission channel to the tax authority

    Transmission is decoupled from issue: a document is legally complete
    locally whatever the outcome, and failed attempts are retried later.
    """

    # False for channels that never reach an authority
    delivers: bool = True

    @abstractmethod
    async def transmit(self, document: FiscalDocument, lines: List[DocumentLine]) -> TransmissionResult:
        """
        Send one issued document

        Args:
            document: Issued (or paid / void) document with its IUD
            lines: Document lines in order

        Returns:
            TransmissionResult; implementations do not raise on delivery errors
        """
        pass
