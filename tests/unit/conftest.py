import pytest
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.domain.document_line import DocumentLine, LineItem
from src.domain.document_type import DocumentType
from src.domain.fiscal_document import FiscalDocument, DocumentStatus, FiscalStatus
from src.domain.fiscal_settings import FiscalSettings


@pytest.fixture
def mock_uow():
    """Mock unit of work with async commit / rollback"""
    uow = MagicMock()
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    return uow


@pytest.fixture
def fiscal_settings():
    """Issuer settings used across unit tests"""
    return FiscalSettings(
        country_code="CV",
        repository_code="1",
        issuer_tax_id="123456789",
        led_code="1",
        series="A",
        withholding_rate=Decimal("4"),
        default_tax_rate=Decimal("15"),
    )


@pytest.fixture
def sample_items():
    """3 x 100 @ 15% and 1 x 50 @ 0%: subtotal 350, tax 45"""
    return [
        LineItem(description="Consulting", quantity=Decimal("3"), unit_price=Decimal("100"), tax_rate=Decimal("15")),
        LineItem(description="Travel", quantity=Decimal("1"), unit_price=Decimal("50"), tax_rate=Decimal("0")),
    ]


@pytest.fixture
def make_draft():
    """Factory for a complete, emission-ready FTE draft"""

    def _make(**overrides):
        values = dict(
            id=10,
            document_type=DocumentType.INVOICE,
            status=DocumentStatus.DRAFT,
            document_date=date(2024, 3, 5),
            client_id=1,
            client_name="Loja Central Lda",
            client_tax_id="123456789",
            client_address="Rua 5 de Julho, Praia",
            subtotal=Decimal("350.00"),
            tax_total=Decimal("45.00"),
            withholding_total=Decimal("0.00"),
            total=Decimal("395.00"),
            created_at=datetime(2024, 3, 5, 9, 0, 0),
            updated_at=datetime(2024, 3, 5, 9, 0, 0),
        )
        values.update(overrides)
        return FiscalDocument(**values)

    return _make


@pytest.fixture
def make_issued(make_draft):
    """Factory for an issued FTE A2024/007"""

    def _make(**overrides):
        values = dict(
            id=42,
            status=DocumentStatus.ISSUED,
            fiscal_status=FiscalStatus.PENDING,
            series="A",
            sequence_number=7,
            random_code="1234567890",
            display_id="FTE A2024/007",
            iud="CV1240305123456789000010100000000712345678906",
            issued_at=datetime(2024, 3, 5, 10, 0, 0),
        )
        values.update(overrides)
        return make_draft(**values)

    return _make


@pytest.fixture
def make_lines(sample_items):
    """Factory for persisted lines of a document"""

    def _make(document_id, items=None):
        return [
            DocumentLine.from_item(document_id, position, item)
            for position, item in enumerate(items if items is not None else sample_items)
        ]

    return _make
