"""Totals Calculator

Derives subtotal, tax, withholding and total from line items.
"""

from decimal import Decimal
from typing import Iterable
from pydantic import BaseModel
from src.domain import money
from src.domain.document_line import LineItem


class DocumentTotals(BaseModel):
    """Computed totals, each a whole number of cents"""

    subtotal: Decimal = money.ZERO
    tax_total: Decimal = money.ZERO
    withholding_total: Decimal = money.ZERO
    total: Decimal = money.ZERO


def calculate_totals(
    items: Iterable[LineItem],
    retention: bool,
    withholding_rate: money.Number,
) -> DocumentTotals:
    """
    Compute document totals

    Each line total and each line's VAT is rounded before summation;
    withholding is ``withholding_rate`` percent of the subtotal when
    retention is active. Credit notes pass sign-reversed items, which
    yields a total <= 0 with the same formula.

    Args:
        items: Line items in document order
        retention: Whether withholding applies
        withholding_rate: Withholding rate in percent (e.g. 4)

    Returns:
        DocumentTotals with total = subtotal + tax_total - withholding_total
    """
    subtotal = money.ZERO
    tax_total = money.ZERO

    for item in items:
        line_total = item.line_total
        subtotal = money.add(subtotal, line_total)
        tax_total = money.add(tax_total, money.percent_of(line_total, item.tax_rate))

    withholding_total = money.percent_of(subtotal, withholding_rate) if retention else money.ZERO
    total = money.sub(money.add(subtotal, tax_total), withholding_total)

    return DocumentTotals(
        subtotal=subtotal,
        tax_total=tax_total,
        withholding_total=withholding_total,
        total=total,
    )
