"""Fiscal document types and their behaviour"""

from enum import Enum


class DocumentType(str, Enum):
    """Closed set of electronic document types"""
    INVOICE = "FTE"            # Fatura
    INVOICE_RECEIPT = "FRE"    # Fatura-recibo (settled on issue)
    SALES_SLIP = "TVE"         # Talão de venda (walk-up sale)
    RECEIPT = "RCE"
    CREDIT_NOTE = "NCE"
    DEBIT_NOTE = "NDE"
    DELIVERY_NOTE = "DTE"
    SHIPPING_NOTE = "DVE"
    LIQUIDATION_NOTE = "NLE"

    @property
    def type_code(self) -> str:
        """Two digit code embedded in the unique document identifier"""
        return _TYPE_CODES[self]

    @property
    def is_emittable(self) -> bool:
        """Whether drafts of this type can be issued by the engine"""
        return self in EMITTABLE_TYPES

    @property
    def is_auto_settled(self) -> bool:
        """Settled in the ledger at issue time, without a payment event"""
        return self in (
            DocumentType.INVOICE_RECEIPT,
            DocumentType.SALES_SLIP,
            DocumentType.CREDIT_NOTE,
        )

    @property
    def is_credit_note(self) -> bool:
        return self is DocumentType.CREDIT_NOTE

    @property
    def requires_tax_id(self) -> bool:
        return self is not DocumentType.SALES_SLIP

    @property
    def requires_address(self) -> bool:
        return self is not DocumentType.SALES_SLIP

    @property
    def allows_retention(self) -> bool:
        # Credit notes inherit the retention of the document they reverse
        return self in (DocumentType.INVOICE, DocumentType.CREDIT_NOTE)


_TYPE_CODES = {
    DocumentType.INVOICE: "01",
    DocumentType.INVOICE_RECEIPT: "02",
    DocumentType.SALES_SLIP: "03",
    DocumentType.RECEIPT: "04",
    DocumentType.CREDIT_NOTE: "05",
    DocumentType.DEBIT_NOTE: "06",
    DocumentType.DELIVERY_NOTE: "07",
    DocumentType.SHIPPING_NOTE: "08",
    DocumentType.LIQUIDATION_NOTE: "09",
}

EMITTABLE_TYPES = frozenset({
    DocumentType.INVOICE,
    DocumentType.INVOICE_RECEIPT,
    DocumentType.SALES_SLIP,
    DocumentType.CREDIT_NOTE,
})
