"""Fiscal Document Domain Entity

A sales document that starts as a mutable draft and becomes an immutable
legal document once issued.
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlalchemy import BigInteger, Date, Numeric, String, Text, event, inspect
from sqlmodel import Field, Column, Index
from src.domain.base import BaseModel, BigIntegerId
from src.domain.document_type import DocumentType
from src.domain.errors import DocumentNotEditableError


class DocumentStatus(str, Enum):
    """Document lifecycle status"""
    DRAFT = "draft"
    ISSUED = "issued"
    PAID = "paid"
    VOID = "void"


class FiscalStatus(str, Enum):
    """Transmission status towards the tax authority"""
    NOT_SENT = "not_sent"
    PENDING = "pending"
    TRANSMITTED = "transmitted"
    FAILED = "failed"


# Columns that may still change after a document leaves the draft state
MUTABLE_AFTER_ISSUE = frozenset({
    "status",
    "fiscal_status",
    "fiscal_attempts",
    "fiscal_last_error",
    "fiscal_transmitted_at",
    "paid_at",
    "voided_at",
    "void_reason",
    "updated_at",
})


class FiscalDocument(BaseModel, table=True):
    """
    Fiscal Document - draft or issued sales document

    Domain Rules:
    - Only drafts are mutable; totals are recomputed on every mutation
    - (series, sequence_number) is unique and assigned exactly once
    - iud (45 chars) and display_id are set on issue and never change
    - After issue only status and fiscal transmission columns change
    - Status transitions: draft -> issued -> paid | void
    """

    __tablename__ = "fiscal_documents"
    __table_args__ = (
        Index('ix_fiscal_documents_status', 'status'),
        Index('ix_fiscal_documents_fiscal_status', 'fiscal_status'),
        Index('ix_fiscal_documents_series_sequence', 'series', 'sequence_number', unique=True),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntegerId, primary_key=True, autoincrement=True),
        description="Unique document identifier (auto-increment)"
    )

    document_type: DocumentType = Field(
        default=DocumentType.INVOICE,
        description="Document type (FTE, FRE, TVE, NCE, ...)"
    )

    status: DocumentStatus = Field(
        default=DocumentStatus.DRAFT,
        description="Lifecycle status (draft, issued, paid, void)"
    )

    fiscal_status: FiscalStatus = Field(
        default=FiscalStatus.NOT_SENT,
        description="Tax authority transmission status"
    )

    document_date: date = Field(
        default_factory=date.today,
        sa_column=Column(Date, nullable=False),
        description="Document date (encoded in the identifier)"
    )

    due_date: Optional[date] = Field(
        default=None,
        sa_column=Column(Date, nullable=True),
        description="Payment due date"
    )

    client_id: Optional[int] = Field(
        default=None,
        description="Client directory reference"
    )

    client_name: str = Field(
        default="",
        sa_column=Column(String(255), nullable=False, default=""),
        description="Client display name snapshot"
    )

    client_tax_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(20), nullable=True),
        description="Client tax id (NIF) snapshot"
    )

    client_address: Optional[str] = Field(
        default=None,
        sa_column=Column(String(500), nullable=True),
        description="Client address snapshot"
    )

    notes: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
        description="Free text notes"
    )

    payment_method: Optional[str] = Field(
        default=None,
        sa_column=Column(String(50), nullable=True),
        description="Payment method for settled documents"
    )

    retention: bool = Field(
        default=False,
        description="Whether withholding tax is retained at source"
    )

    subtotal: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
        description="Sum of line totals before tax"
    )

    tax_total: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
        description="Sum of per-line VAT"
    )

    withholding_total: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
        description="Withholding tax retained"
    )

    total: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
        description="subtotal + tax_total - withholding_total"
    )

    series: Optional[str] = Field(
        default=None,
        sa_column=Column(String(10), nullable=True),
        description="Numbering series, set when the sequence is reserved"
    )

    sequence_number: Optional[int] = Field(
        default=None,
        sa_column=Column(BigInteger, nullable=True),
        description="Internal sequence number within the series"
    )

    random_code: Optional[str] = Field(
        default=None,
        sa_column=Column(String(10), nullable=True),
        description="10 digit random component of the identifier, generated once"
    )

    display_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(50), nullable=True, unique=True),
        description="Human readable identifier (e.g., FTE A2024/007)"
    )

    iud: Optional[str] = Field(
        default=None,
        sa_column=Column(String(45), nullable=True, unique=True),
        description="45 character unique document identifier"
    )

    reference_document_id: Optional[int] = Field(
        default=None,
        description="Document reversed by this credit note"
    )

    reference_iud: Optional[str] = Field(
        default=None,
        sa_column=Column(String(45), nullable=True),
        description="Identifier of the reversed document"
    )

    reason: Optional[str] = Field(
        default=None,
        sa_column=Column(String(500), nullable=True),
        description="Credit note reason"
    )

    void_reason: Optional[str] = Field(
        default=None,
        sa_column=Column(String(500), nullable=True),
        description="Cancellation reason"
    )

    fiscal_attempts: int = Field(
        default=0,
        description="Number of transmission attempts"
    )

    fiscal_last_error: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
        description="Last transmission error"
    )

    fiscal_transmitted_at: Optional[datetime] = Field(
        default=None,
        description="Timestamp of successful transmission"
    )

    issued_at: Optional[datetime] = Field(
        default=None,
        description="Timestamp when the document was issued"
    )

    paid_at: Optional[datetime] = Field(
        default=None,
        description="Timestamp when payment was registered"
    )

    voided_at: Optional[datetime] = Field(
        default=None,
        description="Timestamp when the document was voided"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Document creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last update timestamp"
    )

    @property
    def is_draft(self) -> bool:
        return self.status == DocumentStatus.DRAFT

    @property
    def has_reservation(self) -> bool:
        """True once a sequence number has been allocated for this draft"""
        return self.sequence_number is not None

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": 1,
                "document_type": "FTE",
                "status": "issued",
                "fiscal_status": "pending",
                "document_date": "2024-03-05",
                "client_name": "Oficina Central Lda",
                "client_tax_id": "123456789",
                "subtotal": "350.00",
                "tax_total": "45.00",
                "withholding_total": "0.00",
                "total": "395.00",
                "series": "A",
                "sequence_number": 7,
                "display_id": "FTE A2024/007",
                "iud": "CV1240305123456789000010100000000712345678906",
            }
        }


@event.listens_for(FiscalDocument, "before_update")
def _reject_frozen_column_changes(mapper, connection, target):
    """Refuse to flush changes to frozen columns of an issued document"""
    state = inspect(target)
    status_history = state.attrs.status.history
    persisted_status = status_history.deleted[0] if status_history.deleted else target.status
    if persisted_status == DocumentStatus.DRAFT:
        return

    for attr in state.attrs:
        if attr.key in MUTABLE_AFTER_ISSUE:
            continue
        if attr.history.has_changes():
            raise DocumentNotEditableError(
                f"Document {target.id} is {persisted_status.value}; "
                f"column '{attr.key}' is frozen"
            )
