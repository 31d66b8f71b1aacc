"""Document State Machine

Draft mutation, issue, payment, cancellation and transmission bookkeeping
for FiscalDocument. Pure: no I/O, the caller persists the entity.

    draft --issue--> issued --mark_paid--> paid
                       |
                       +----void---------> void
"""

from datetime import datetime
from typing import Optional, Sequence
from src.domain import money
from src.domain.document_line import LineItem
from src.domain.errors import (
    DocumentNotEditableError,
    FinalizeInProgressError,
    InvalidTransitionError,
)
from src.domain.fiscal_document import DocumentStatus, FiscalDocument, FiscalStatus
from src.domain.totals import DocumentTotals, calculate_totals

EDITABLE_FIELDS = frozenset({
    "document_type",
    "document_date",
    "due_date",
    "client_id",
    "client_name",
    "client_tax_id",
    "client_address",
    "notes",
    "payment_method",
    "retention",
    "reason",
    "reference_document_id",
    "reference_iud",
})

TRANSITIONS = {
    DocumentStatus.DRAFT: frozenset({DocumentStatus.ISSUED}),
    DocumentStatus.ISSUED: frozenset({DocumentStatus.PAID, DocumentStatus.VOID}),
    DocumentStatus.PAID: frozenset(),
    DocumentStatus.VOID: frozenset(),
}


class DocumentStateMachine:
    """Applies lifecycle rules to a FiscalDocument"""

    def __init__(self, withholding_rate: money.Number):
        self.withholding_rate = withholding_rate

    def ensure_editable(self, document: FiscalDocument) -> None:
        if document.status != DocumentStatus.DRAFT:
            raise DocumentNotEditableError(
                f"Document {document.display_id or document.id} is {document.status.value} and cannot be modified"
            )
        if document.has_reservation:
            raise FinalizeInProgressError(
                f"Document {document.id} already holds sequence {document.series}/{document.sequence_number}; "
                f"finalize it instead of editing"
            )

    def edit(self, document: FiscalDocument, items: Sequence[LineItem], **changes) -> DocumentTotals:
        """Apply field changes to a draft and recompute its totals"""
        self.ensure_editable(document)
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Not editable: {', '.join(sorted(unknown))}")

        for name, value in changes.items():
            setattr(document, name, value)
        return self.recalculate(document, items)

    def recalculate(self, document: FiscalDocument, items: Sequence[LineItem]) -> DocumentTotals:
        self.ensure_editable(document)
        totals = calculate_totals(items, document.retention, self.withholding_rate)
        document.subtotal = totals.subtotal
        document.tax_total = totals.tax_total
        document.withholding_total = totals.withholding_total
        document.total = totals.total
        document.updated_at = datetime.utcnow()
        return totals

    def reserve(self, document: FiscalDocument, series: str, sequence_number: int, random_code: str) -> None:
        """Attach an allocated sequence number and the frozen random component"""
        self.ensure_editable(document)
        document.series = series
        document.sequence_number = sequence_number
        document.random_code = random_code
        document.updated_at = datetime.utcnow()

    def issue(self, document: FiscalDocument, iud: str, display_id: str, issued_at: Optional[datetime] = None) -> None:
        """Draft -> Issued; the document is frozen from here on"""
        if not document.has_reservation:
            raise InvalidTransitionError("A sequence number must be reserved before issue")
        self._transition(document, DocumentStatus.ISSUED)
        now = issued_at or datetime.utcnow()
        document.iud = iud
        document.display_id = display_id
        document.issued_at = now
        document.fiscal_status = FiscalStatus.PENDING
        document.updated_at = now

    def mark_paid(self, document: FiscalDocument, paid_at: Optional[datetime] = None) -> None:
        self._transition(document, DocumentStatus.PAID)
        now = paid_at or datetime.utcnow()
        document.paid_at = now
        document.updated_at = now

    def void(self, document: FiscalDocument, reason: str, voided_at: Optional[datetime] = None) -> None:
        """Issued -> Void; totals and identifier stay as they are"""
        self._transition(document, DocumentStatus.VOID)
        now = voided_at or datetime.utcnow()
        document.void_reason = reason
        document.voided_at = now
        document.updated_at = now

    def record_transmission(
        self,
        document: FiscalDocument,
        succeeded: bool,
        error: Optional[str] = None,
        at: Optional[datetime] = None,
    ) -> None:
        """Record a transmission attempt; independent of the lifecycle status"""
        if document.status == DocumentStatus.DRAFT:
            raise InvalidTransitionError("Drafts are not transmitted")
        if document.fiscal_status not in (FiscalStatus.PENDING, FiscalStatus.FAILED):
            raise InvalidTransitionError(
                f"Cannot transmit a document whose fiscal status is {document.fiscal_status.value}"
            )
        now = at or datetime.utcnow()
        document.fiscal_attempts = (document.fiscal_attempts or 0) + 1
        if succeeded:
            document.fiscal_status = FiscalStatus.TRANSMITTED
            document.fiscal_transmitted_at = now
            document.fiscal_last_error = None
        else:
            document.fiscal_status = FiscalStatus.FAILED
            document.fiscal_last_error = error
        document.updated_at = now

    def _transition(self, document: FiscalDocument, target: DocumentStatus) -> None:
        if target not in TRANSITIONS[document.status]:
            raise InvalidTransitionError(
                f"Cannot move document {document.display_id or document.id} "
                f"from {document.status.value} to {target.value}"
            )
        document.status = target
