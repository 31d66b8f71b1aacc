"""Fiscal document use cases"""
from .create_draft import CreateDraft
from .update_draft import UpdateDraft
from .finalize_document import FinalizeDocument
from .create_credit_note import CreateCreditNote
from .register_payment import RegisterPayment
from .void_document import VoidDocument
from .get_document import GetDocument, ListDocuments
from .transmit_document import TransmitDocument
from .dtos import (
    LineItemDTO,
    CreateDraftCommandDTO,
    UpdateDraftCommandDTO,
    CreateCreditNoteCommandDTO,
    RegisterPaymentCommandDTO,
    VoidDocumentCommandDTO,
    DocumentLineDTO,
    DocumentSummaryDTO,
    DocumentResponseDTO,
    ListDocumentsQueryDTO,
    ListDocumentsResponseDTO,
    TransmissionResultDTO,
    TransmissionBatchResultDTO,
)

__all__ = [
    "CreateDraft",
    "UpdateDraft",
    "FinalizeDocument",
    "CreateCreditNote",
    "RegisterPayment",
    "VoidDocument",
    "GetDocument",
    "ListDocuments",
    "TransmitDocument",
    "LineItemDTO",
    "CreateDraftCommandDTO",
    "UpdateDraftCommandDTO",
    "CreateCreditNoteCommandDTO",
    "RegisterPaymentCommandDTO",
    "VoidDocumentCommandDTO",
    "DocumentLineDTO",
    "DocumentSummaryDTO",
    "DocumentResponseDTO",
    "ListDocumentsQueryDTO",
    "ListDocumentsResponseDTO",
    "TransmissionResultDTO",
    "TransmissionBatchResultDTO",
]
