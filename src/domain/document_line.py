"""Document Line Domain Entity

Tracks individual line items within a fiscal document.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel as ValueObject, Field as ValueField
from sqlmodel import Field, Column, Index
from sqlalchemy import BigInteger, ForeignKey, Integer, Numeric, String
from src.domain.base import BaseModel, BigIntegerId
from src.domain import money


class LineItem(ValueObject):
    """
    Line item value - what callers hand in and what totals are computed from

    line_total = quantity * unit_price (tax is computed separately)
    """

    description: str
    item_code: Optional[str] = None
    quantity: Decimal
    unit_price: Decimal
    tax_rate: Decimal = ValueField(default=Decimal("0"))

    @property
    def line_total(self) -> Decimal:
        return money.mul(self.unit_price, self.quantity)

    def negated(self) -> "LineItem":
        """Credit note counterpart: same quantity, sign-reversed price"""
        return self.model_copy(update={"unit_price": -abs(self.unit_price)})


class DocumentLine(BaseModel, table=True):
    """
    Document Line - persisted line item of a fiscal document

    Domain Rules:
    - Each line belongs to exactly one document, ordered by position
    - line_total = quantity * unit_price, rounded to the cent
    - Immutable once the owning document is issued
    """

    __tablename__ = "document_lines"
    __table_args__ = (
        Index('ix_document_lines_document_id', 'document_id'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntegerId, primary_key=True, autoincrement=True),
        description="Unique line identifier (auto-increment)"
    )

    document_id: int = Field(
        sa_column=Column(BigInteger, ForeignKey("fiscal_documents.id", ondelete="CASCADE"), nullable=False),
        description="Foreign key to FiscalDocument"
    )

    position: int = Field(
        sa_column=Column(Integer, nullable=False),
        description="Zero based order within the document"
    )

    description: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Line description"
    )

    item_code: Optional[str] = Field(
        default=None,
        sa_column=Column(String(50), nullable=True),
        description="External item code"
    )

    quantity: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Quantity (> 0)"
    )

    unit_price: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Unit price (negative on credit notes)"
    )

    tax_rate: Decimal = Field(
        sa_column=Column(Numeric(5, 2), nullable=False),
        description="VAT rate in percent (0-100)"
    )

    line_total: Decimal = Field(
        sa_column=Column(Numeric(18, 2), nullable=False),
        description="quantity * unit_price"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Line creation timestamp"
    )

    @classmethod
    def from_item(cls, document_id: int, position: int, item: LineItem) -> "DocumentLine":
        return cls(
            document_id=document_id,
            position=position,
            description=item.description,
            item_code=item.item_code,
            quantity=item.quantity,
            unit_price=item.unit_price,
            tax_rate=item.tax_rate,
            line_total=item.line_total,
        )

    def to_item(self) -> LineItem:
        return LineItem(
            description=self.description,
            item_code=self.item_code,
            quantity=self.quantity,
            unit_price=self.unit_price,
            tax_rate=self.tax_rate,
        )
