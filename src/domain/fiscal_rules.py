"""Fiscal Validation Rules

Per document type emission rules. Validation never raises: it returns a
list of field-tagged issues, and an empty list means the draft can be
issued.
"""

import re
from decimal import Decimal
from typing import List, Optional, Sequence
from pydantic import BaseModel
from src.domain.document_line import LineItem
from src.domain.document_type import DocumentType
from src.domain.fiscal_document import FiscalDocument

TAX_ID_LENGTH = 9
GENERIC_CONSUMER_TAX_ID = "999999999"
MIN_ADDRESS_LENGTH = 3

_TAX_ID_WEIGHTS = (9, 8, 7, 6, 5, 4, 3, 2)
_WHITESPACE = re.compile(r"\s+")


class ValidationIssue(BaseModel):
    """A single rule violation tied to a document field"""

    field: str
    message: str


def normalize_tax_id(tax_id: Optional[str]) -> str:
    return _WHITESPACE.sub("", tax_id or "")


def tax_id_check_digit(first_eight: str) -> int:
    """Weighted modulo 11 check digit over the first eight digits

    NOTE: weights 9..2 follow the common modulo 11 NIF scheme; they still
    have to be confirmed against the issuing authority's reference ids.
    """
    total = sum(int(d) * w for d, w in zip(first_eight, _TAX_ID_WEIGHTS))
    check = 11 - (total % 11)
    return 0 if check >= 10 else check


def is_valid_tax_id(tax_id: Optional[str], checksum: bool = True) -> bool:
    """9 digit tax id, optionally verified by its check digit"""
    value = normalize_tax_id(tax_id)
    if len(value) != TAX_ID_LENGTH or not value.isdigit():
        return False
    if value == GENERIC_CONSUMER_TAX_ID or not checksum:
        return True
    return tax_id_check_digit(value[:8]) == int(value[8])


def validate_line_items(items: Sequence[LineItem], document_type: DocumentType) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    for index, item in enumerate(items):
        prefix = f"items[{index}]"
        if not item.description or not item.description.strip():
            issues.append(ValidationIssue(field=f"{prefix}.description", message="Description is required."))
        if item.quantity <= 0:
            issues.append(ValidationIssue(field=f"{prefix}.quantity", message="Quantity must be greater than zero."))
        if document_type.is_credit_note:
            if item.unit_price > 0:
                issues.append(ValidationIssue(
                    field=f"{prefix}.unit_price",
                    message="Credit note prices must be zero or negative.",
                ))
        elif item.unit_price < 0:
            issues.append(ValidationIssue(field=f"{prefix}.unit_price", message="Unit price cannot be negative."))
        if not (Decimal(0) <= item.tax_rate <= Decimal(100)):
            issues.append(ValidationIssue(field=f"{prefix}.tax_rate", message="Tax rate must be between 0 and 100."))
    return issues


def validate_for_emission(
    document: FiscalDocument,
    items: Sequence[LineItem],
    checksum_enabled: bool = True,
) -> List[ValidationIssue]:
    """
    Check that a draft can be issued

    | Rule                       | FTE / FRE / NCE | TVE               |
    |----------------------------|-----------------|-------------------|
    | client present             | required        | required          |
    | at least one line          | required        | required          |
    | tax id present             | required        | optional          |
    | tax id valid (if present)  | required        | required          |
    | address (>= 3 chars)       | required        | not required      |

    Credit notes must also reference the reversed document and carry a
    reason.

    Returns:
        List of ValidationIssue, empty when the draft is emission-ready
    """
    issues: List[ValidationIssue] = []
    document_type = document.document_type

    if not document_type.is_emittable:
        issues.append(ValidationIssue(
            field="document_type",
            message=f"Document type {document_type.value} cannot be issued from a draft.",
        ))

    if not document.client_id:
        issues.append(ValidationIssue(field="client", message="Client is required."))

    if not items:
        issues.append(ValidationIssue(field="items", message="The document must have at least one line item."))
    else:
        issues.extend(validate_line_items(items, document_type))

    tax_id = normalize_tax_id(document.client_tax_id)
    if not tax_id:
        if document_type.requires_tax_id:
            issues.append(ValidationIssue(field="client_tax_id", message="Client tax id is required."))
    elif not is_valid_tax_id(tax_id, checksum=checksum_enabled):
        issues.append(ValidationIssue(field="client_tax_id", message="Client tax id is invalid (9 digits with a valid check digit)."))

    if document_type.requires_address:
        address = (document.client_address or "").strip()
        if len(address) < MIN_ADDRESS_LENGTH:
            issues.append(ValidationIssue(field="client_address", message="Client address is required."))

    if document.retention and not document_type.allows_retention:
        issues.append(ValidationIssue(
            field="retention",
            message=f"Withholding cannot be applied to {document_type.value} documents.",
        ))

    if document_type.is_credit_note:
        if not document.reference_document_id:
            issues.append(ValidationIssue(
                field="reference_document_id",
                message="Credit notes must reference the original document.",
            ))
        if not (document.reason or "").strip():
            issues.append(ValidationIssue(field="reason", message="A reason is required for credit notes."))
    elif document.total < 0:
        issues.append(ValidationIssue(field="total", message="Total cannot be negative outside credit notes."))

    return issues
