"""Data Transfer Objects for Fiscal Document Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field
from src.domain.document_line import DocumentLine, LineItem
from src.domain.document_type import DocumentType
from src.domain.fiscal_document import DocumentStatus, FiscalDocument


class LineItemDTO(BaseModel):
    """
    Line item as handed in by the form / import collaborator

    tax_rate may be omitted; the configured default VAT rate applies.
    """

    description: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Line description"
    )

    item_code: Optional[str] = Field(
        default=None,
        max_length=50,
        description="External item code"
    )

    quantity: Decimal = Field(
        ...,
        gt=0,
        description="Quantity (must be > 0)"
    )

    unit_price: Decimal = Field(
        ...,
        ge=0,
        description="Unit price (must be >= 0)"
    )

    tax_rate: Optional[Decimal] = Field(
        default=None,
        ge=0,
        le=100,
        description="VAT rate in percent (defaults to the configured rate)"
    )

    def to_item(self, default_tax_rate: Decimal) -> LineItem:
        return LineItem(
            description=self.description,
            item_code=self.item_code,
            quantity=self.quantity,
            unit_price=self.unit_price,
            tax_rate=default_tax_rate if self.tax_rate is None else self.tax_rate,
        )


class CreateDraftCommandDTO(BaseModel):
    """
    Command DTO for creating a draft document

    Client tax id and address default to the directory entry and may be
    overridden on the draft.
    """

    document_type: DocumentType = Field(
        default=DocumentType.INVOICE,
        description="Document type (FTE, FRE or TVE)"
    )

    document_date: Optional[date] = Field(
        default=None,
        description="Document date (defaults to today)"
    )

    due_date: Optional[date] = Field(
        default=None,
        description="Payment due date"
    )

    client_id: Optional[int] = Field(
        default=None,
        description="Client directory reference"
    )

    client_tax_id: Optional[str] = Field(
        default=None,
        description="Override for the client's tax id"
    )

    client_address: Optional[str] = Field(
        default=None,
        description="Override for the client's address"
    )

    items: List[LineItemDTO] = Field(
        default_factory=list,
        description="Ordered line items"
    )

    notes: Optional[str] = Field(
        default=None,
        description="Free text notes"
    )

    retention: bool = Field(
        default=False,
        description="Apply withholding tax"
    )

    payment_method: Optional[str] = Field(
        default=None,
        description="Payment method (for settled types)"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "document_type": "FTE",
                "document_date": "2024-03-05",
                "due_date": "2024-04-04",
                "client_id": 1,
                "items": [
                    {"description": "Consulting", "quantity": "3", "unit_price": "100.00", "tax_rate": "15"},
                    {"description": "Travel", "quantity": "1", "unit_price": "50.00", "tax_rate": "0"},
                ],
                "retention": False,
            }
        }


class UpdateDraftCommandDTO(BaseModel):
    """
    Command DTO for editing a draft

    Only fields present in the request are applied; ``items`` replaces the
    whole line list.
    """

    document_id: int = Field(..., description="Draft document ID")
    document_type: Optional[DocumentType] = Field(default=None, description="New document type")
    document_date: Optional[date] = Field(default=None, description="New document date")
    due_date: Optional[date] = Field(default=None, description="New due date")
    client_id: Optional[int] = Field(default=None, description="New client reference")
    client_tax_id: Optional[str] = Field(default=None, description="Client tax id override")
    client_address: Optional[str] = Field(default=None, description="Client address override")
    items: Optional[List[LineItemDTO]] = Field(default=None, description="Replacement line items")
    notes: Optional[str] = Field(default=None, description="Free text notes")
    retention: Optional[bool] = Field(default=None, description="Apply withholding tax")
    payment_method: Optional[str] = Field(default=None, description="Payment method")
    reason: Optional[str] = Field(default=None, description="Credit note reason")


class CreateCreditNoteCommandDTO(BaseModel):
    """
    Command DTO for creating a credit-note draft against an issued document

    Used as input to CreateCreditNote use case.
    """

    reference_document_id: int = Field(
        ...,
        description="Issued document being reversed"
    )

    line_positions: Optional[List[int]] = Field(
        default=None,
        description="Positions of the referenced lines to reverse (all when omitted)"
    )

    reason: Optional[str] = Field(
        default=None,
        max_length=500,
        description="Reason for the reversal (required before finalize)"
    )

    document_date: Optional[date] = Field(
        default=None,
        description="Credit note date (defaults to today)"
    )

    notes: Optional[str] = Field(
        default=None,
        description="Free text notes"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "reference_document_id": 42,
                "line_positions": [0],
                "reason": "Service not delivered",
            }
        }


class RegisterPaymentCommandDTO(BaseModel):
    """Command DTO for registering the payment of an issued invoice"""

    document_id: int = Field(..., description="Issued document ID")
    payment_method: str = Field(..., min_length=1, max_length=50, description="Payment method (e.g., 'transfer')")
    paid_on: Optional[date] = Field(default=None, description="Payment date (defaults to today)")


class VoidDocumentCommandDTO(BaseModel):
    """Command DTO for cancelling an issued document"""

    document_id: int = Field(..., description="Issued document ID")
    reason: str = Field(..., min_length=1, max_length=500, description="Cancellation reason")


class DocumentLineDTO(BaseModel):
    """Line of a document as returned to callers"""

    position: int
    description: str
    item_code: Optional[str] = None
    quantity: Decimal
    unit_price: Decimal
    tax_rate: Decimal
    line_total: Decimal

    @classmethod
    def from_line(cls, line: DocumentLine) -> "DocumentLineDTO":
        return cls(
            position=line.position,
            description=line.description,
            item_code=line.item_code,
            quantity=line.quantity,
            unit_price=line.unit_price,
            tax_rate=line.tax_rate,
            line_total=line.line_total,
        )


class DocumentSummaryDTO(BaseModel):
    """Document header without lines, used in listings"""

    document_id: int = Field(..., description="Document ID")
    document_type: str = Field(..., description="Document type code (FTE, FRE, TVE, NCE)")
    status: str = Field(..., description="Lifecycle status")
    fiscal_status: str = Field(..., description="Tax authority transmission status")
    display_id: Optional[str] = Field(default=None, description="Human readable identifier")
    iud: Optional[str] = Field(default=None, description="45 character unique document identifier")
    document_date: date
    client_id: Optional[int] = None
    client_name: str
    total: Decimal
    issued_at: Optional[datetime] = None
    created_at: datetime

    @classmethod
    def from_document(cls, document: FiscalDocument) -> "DocumentSummaryDTO":
        return cls(
            document_id=document.id,
            document_type=document.document_type.value,
            status=document.status.value,
            fiscal_status=document.fiscal_status.value,
            display_id=document.display_id,
            iud=document.iud,
            document_date=document.document_date,
            client_id=document.client_id,
            client_name=document.client_name,
            total=document.total,
            issued_at=document.issued_at,
            created_at=document.created_at,
        )


class DocumentResponseDTO(DocumentSummaryDTO):
    """
    Full document as returned by every document use case

    verification_url is only set once the document carries an IUD.
    """

    due_date: Optional[date] = None
    client_tax_id: Optional[str] = None
    client_address: Optional[str] = None
    notes: Optional[str] = None
    payment_method: Optional[str] = None
    retention: bool
    series: Optional[str] = None
    sequence_number: Optional[int] = None
    subtotal: Decimal
    tax_total: Decimal
    withholding_total: Decimal
    reference_document_id: Optional[int] = None
    reference_iud: Optional[str] = None
    reason: Optional[str] = None
    void_reason: Optional[str] = None
    fiscal_attempts: int = 0
    fiscal_last_error: Optional[str] = None
    verification_url: Optional[str] = None
    lines: List[DocumentLineDTO] = Field(default_factory=list)

    @classmethod
    def build(
        cls,
        document: FiscalDocument,
        lines: List[DocumentLine],
        verification_base_url: str,
    ) -> "DocumentResponseDTO":
        summary = DocumentSummaryDTO.from_document(document).model_dump()
        return cls(
            **summary,
            due_date=document.due_date,
            client_tax_id=document.client_tax_id,
            client_address=document.client_address,
            notes=document.notes,
            payment_method=document.payment_method,
            retention=document.retention,
            series=document.series,
            sequence_number=document.sequence_number,
            subtotal=document.subtotal,
            tax_total=document.tax_total,
            withholding_total=document.withholding_total,
            reference_document_id=document.reference_document_id,
            reference_iud=document.reference_iud,
            reason=document.reason,
            void_reason=document.void_reason,
            fiscal_attempts=document.fiscal_attempts,
            fiscal_last_error=document.fiscal_last_error,
            verification_url=f"{verification_base_url}{document.iud}" if document.iud else None,
            lines=[DocumentLineDTO.from_line(line) for line in sorted(lines, key=lambda l: l.position)],
        )

    class Config:
        json_schema_extra = {
            "example": {
                "document_id": 42,
                "document_type": "FTE",
                "status": "issued",
                "fiscal_status": "pending",
                "display_id": "FTE A2024/007",
                "iud": "CV1240305123456789000010100000000712345678906",
                "document_date": "2024-03-05",
                "client_id": 1,
                "client_name": "Loja Central Lda",
                "client_tax_id": "123456789",
                "client_address": "Rua 5 de Julho, Praia",
                "retention": False,
                "series": "A",
                "sequence_number": 7,
                "subtotal": "350.00",
                "tax_total": "45.00",
                "withholding_total": "0.00",
                "total": "395.00",
                "verification_url": "https://pe.efatura.cv/dfe/view/CV1240305123456789000010100000000712345678906",
                "created_at": "2024-03-05T10:00:00",
            }
        }


class ListDocumentsQueryDTO(BaseModel):
    """Query DTO for listing documents"""

    status: Optional[DocumentStatus] = Field(default=None, description="Filter by lifecycle status")
    document_type: Optional[DocumentType] = Field(default=None, description="Filter by document type")
    limit: int = Field(default=20, ge=1, le=100, description="Page size")
    offset: int = Field(default=0, ge=0, description="Pagination offset")


class ListDocumentsResponseDTO(BaseModel):
    """Response DTO for document listings"""

    documents: List[DocumentSummaryDTO]
    limit: int
    offset: int


class TransmissionResultDTO(BaseModel):
    """Outcome of one transmission attempt"""

    document_id: int
    display_id: Optional[str] = None
    fiscal_status: str
    fiscal_attempts: int
    error: Optional[str] = None


class TransmissionBatchResultDTO(BaseModel):
    """Summary of one transmission worker cycle"""

    processed: int = 0
    transmitted: int = 0
    failed: int = 0
    results: List[TransmissionResultDTO] = Field(default_factory=list)
