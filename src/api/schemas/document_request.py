"""Request schemas for the Fiscal Document API

Pydantic models for validating incoming HTTP requests.
"""

from datetime import date
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
from src.domain.document_type import DocumentType


class LineItemRequestSchema(BaseModel):
    """Line item in a draft request"""

    description: str = Field(..., min_length=1, max_length=255, description="Line description")
    item_code: Optional[str] = Field(default=None, max_length=50, description="External item code")
    quantity: Decimal = Field(..., gt=0, description="Quantity (must be > 0)")
    unit_price: Decimal = Field(..., ge=0, description="Unit price (must be >= 0)")
    tax_rate: Optional[Decimal] = Field(default=None, ge=0, le=100, description="VAT rate in percent")

    @field_validator("description")
    @classmethod
    def validate_description(cls, v):
        """Reject whitespace-only descriptions"""
        if not v.strip():
            raise ValueError("Description must not be blank")
        return v.strip()


class CreateDraftRequestSchema(BaseModel):
    """
    Request schema for creating a draft

    Used for POST /fiscal/documents endpoint.
    """

    document_type: DocumentType = Field(default=DocumentType.INVOICE, description="FTE, FRE or TVE")
    document_date: Optional[date] = Field(default=None, description="Document date (defaults to today)")
    due_date: Optional[date] = Field(default=None, description="Payment due date")
    client_id: Optional[int] = Field(default=None, description="Client directory reference")
    client_tax_id: Optional[str] = Field(default=None, description="Client tax id override")
    client_address: Optional[str] = Field(default=None, description="Client address override")
    items: List[LineItemRequestSchema] = Field(default_factory=list, description="Line items")
    notes: Optional[str] = Field(default=None, description="Free text notes")
    retention: bool = Field(default=False, description="Apply withholding tax")
    payment_method: Optional[str] = Field(default=None, max_length=50, description="Payment method")

    class Config:
        json_schema_extra = {
            "example": {
                "document_type": "FTE",
                "client_id": 1,
                "items": [
                    {"description": "Consulting", "quantity": "3", "unit_price": "100.00", "tax_rate": "15"},
                    {"description": "Travel", "quantity": "1", "unit_price": "50.00", "tax_rate": "0"},
                ],
            }
        }


class UpdateDraftRequestSchema(BaseModel):
    """
    Request schema for editing a draft

    Used for PATCH /fiscal/documents/{id}. Omitted fields are left as they are.
    """

    document_type: Optional[DocumentType] = None
    document_date: Optional[date] = None
    due_date: Optional[date] = None
    client_id: Optional[int] = None
    client_tax_id: Optional[str] = None
    client_address: Optional[str] = None
    items: Optional[List[LineItemRequestSchema]] = None
    notes: Optional[str] = None
    retention: Optional[bool] = None
    payment_method: Optional[str] = Field(default=None, max_length=50)
    reason: Optional[str] = Field(default=None, max_length=500)


class CreditNoteRequestSchema(BaseModel):
    """Request schema for POST /fiscal/documents/{id}/credit-notes"""

    line_positions: Optional[List[int]] = Field(
        default=None,
        description="Positions of the lines to reverse (all when omitted)"
    )
    reason: Optional[str] = Field(default=None, max_length=500, description="Reversal reason")
    document_date: Optional[date] = Field(default=None, description="Credit note date")
    notes: Optional[str] = Field(default=None, description="Free text notes")


class PaymentRequestSchema(BaseModel):
    """Request schema for POST /fiscal/documents/{id}/payments"""

    payment_method: str = Field(..., min_length=1, max_length=50, description="Payment method")
    paid_on: Optional[date] = Field(default=None, description="Payment date (defaults to today)")


class VoidRequestSchema(BaseModel):
    """Request schema for POST /fiscal/documents/{id}/void"""

    reason: str = Field(..., min_length=1, max_length=500, description="Cancellation reason")
