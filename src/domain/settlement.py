"""Settlement Events

Typed payloads handed to the ledger collaborator after issue or payment.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Optional, Union
from pydantic import BaseModel, Field
from src.domain.fiscal_document import FiscalDocument


class SettlementDirection(str, Enum):
    """Which way money moves in the ledger"""
    INCOME = "income"
    REFUND = "refund"


class _SettlementBase(BaseModel):
    document_id: int
    display_id: str
    iud: str
    client_id: Optional[int] = None
    client_name: str = ""
    amount: Decimal = Field(..., ge=0, description="Absolute amount in currency units")
    occurred_at: datetime = Field(default_factory=datetime.utcnow)


class ImmediateSettlement(_SettlementBase):
    """Document settled on issue (invoice-receipt, sales slip, credit note)"""
    kind: Literal["immediate"] = "immediate"
    direction: SettlementDirection
    settlement_date: date
    payment_method: Optional[str] = None


class PendingSettlement(_SettlementBase):
    """Plain invoice issued and awaiting payment"""
    kind: Literal["pending"] = "pending"
    due_date: Optional[date] = None


class PaymentSettlement(_SettlementBase):
    """Payment registered against a pending invoice"""
    kind: Literal["payment"] = "payment"
    direction: SettlementDirection = SettlementDirection.INCOME
    settlement_date: date
    payment_method: str


SettlementEvent = Annotated[
    Union[ImmediateSettlement, PendingSettlement, PaymentSettlement],
    Field(discriminator="kind"),
]


def _base_fields(document: FiscalDocument) -> dict:
    return {
        "document_id": document.id,
        "display_id": document.display_id,
        "iud": document.iud,
        "client_id": document.client_id,
        "client_name": document.client_name,
        "amount": abs(document.total),
    }


def settlement_for_issue(document: FiscalDocument) -> Union[ImmediateSettlement, PendingSettlement]:
    """Event emitted once a document has been issued"""
    if document.document_type.is_auto_settled:
        direction = (
            SettlementDirection.REFUND
            if document.document_type.is_credit_note
            else SettlementDirection.INCOME
        )
        return ImmediateSettlement(
            direction=direction,
            settlement_date=document.document_date,
            payment_method=document.payment_method,
            **_base_fields(document),
        )
    return PendingSettlement(due_date=document.due_date, **_base_fields(document))


def settlement_for_payment(document: FiscalDocument, payment_method: str, paid_on: date) -> PaymentSettlement:
    return PaymentSettlement(
        settlement_date=paid_on,
        payment_method=payment_method,
        **_base_fields(document),
    )
