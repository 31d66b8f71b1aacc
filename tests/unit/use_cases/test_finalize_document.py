"""Unit tests for FinalizeDocument use case

Tests cover:
- Issue of a valid draft (reservation, identifier, freeze, settlement)
- Validation failure without sequence allocation
- Sequence allocation failure
- Resumption of an interrupted finalize with the same number
- Ledger failures not undoing the issue
"""

import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, patch

from src.app.use_cases.documents.finalize_document import FinalizeDocument
from src.domain.document_type import DocumentType
from src.domain.fiscal_document import DocumentStatus, FiscalStatus
from src.domain.settlement import ImmediateSettlement, PendingSettlement, SettlementDirection

EXPECTED_IUD = "CV1240305123456789000010100000000712345678906"
RANDOM_CODE_PATH = "src.app.use_cases.documents.finalize_document.generate_random_code"


@pytest.fixture
def use_case(
    mock_uow, mock_document_repo, mock_line_repo, mock_counter_repo, mock_ledger_service, fiscal_settings
):
    return FinalizeDocument(
        uow=mock_uow,
        document_repo=mock_document_repo,
        line_repo=mock_line_repo,
        counter_repo=mock_counter_repo,
        ledger_service=mock_ledger_service,
        settings=fiscal_settings,
    )


@pytest.fixture
def ready_draft(make_draft, make_lines, mock_document_repo, mock_line_repo):
    """An emission-ready FTE draft dated 2024-03-05 with the sample lines"""
    draft = make_draft()
    mock_document_repo.get_by_id = AsyncMock(return_value=draft)
    mock_line_repo.get_by_document_id = AsyncMock(return_value=make_lines(draft.id))
    return draft


@pytest.mark.asyncio
class TestFinalizeSuccess:
    async def test_finalize_issues_document(
        self, use_case, ready_draft, mock_counter_repo, mock_uow, mock_ledger_service
    ):
        """
        Given: An emission-ready draft and a counter at 6
        When: The draft is finalized
        Then: It is issued as FTE A2024/007 with the expected identifier
        """
        # Act
        with patch(RANDOM_CODE_PATH, return_value="1234567890"):
            result = await use_case.execute(ready_draft.id)

        # Assert
        assert result.is_ok()
        response = result.value
        assert response.status == "issued"
        assert response.fiscal_status == "pending"
        assert response.display_id == "FTE A2024/007"
        assert response.iud == EXPECTED_IUD
        assert response.sequence_number == 7
        assert response.verification_url == f"https://pe.efatura.cv/dfe/view/{EXPECTED_IUD}"
        assert response.total == Decimal("395.00")

        mock_counter_repo.next_sequence.assert_called_once_with("A")
        # One commit for the reservation, one for the issue
        assert mock_uow.commit.call_count == 2
        assert ready_draft.random_code == "1234567890"

    async def test_plain_invoice_emits_pending_settlement(self, use_case, ready_draft, mock_ledger_service):
        await use_case.execute(ready_draft.id)

        event = mock_ledger_service.record_settlement.call_args.args[0]
        assert isinstance(event, PendingSettlement)
        assert event.amount == Decimal("395.00")

    async def test_invoice_receipt_settles_immediately(
        self, use_case, ready_draft, mock_ledger_service
    ):
        """Auto-settled types stay issued and the ledger gets an immediate settlement"""
        # Arrange
        ready_draft.document_type = DocumentType.INVOICE_RECEIPT

        # Act
        result = await use_case.execute(ready_draft.id)

        # Assert
        assert result.value.status == "issued"
        assert result.value.display_id == "FRE A2024/007"
        event = mock_ledger_service.record_settlement.call_args.args[0]
        assert isinstance(event, ImmediateSettlement)
        assert event.direction == SettlementDirection.INCOME

    async def test_ledger_failure_does_not_undo_issue(
        self, use_case, ready_draft, mock_ledger_service, mock_uow
    ):
        mock_ledger_service.record_settlement = AsyncMock(side_effect=Exception("ledger down"))

        result = await use_case.execute(ready_draft.id)

        assert result.is_ok()
        assert ready_draft.status == DocumentStatus.ISSUED
        mock_uow.rollback.assert_not_called()


@pytest.mark.asyncio
class TestFinalizeValidation:
    async def test_missing_tax_id_returns_field_error_without_allocation(
        self, use_case, ready_draft, mock_counter_repo, mock_document_repo, mock_uow
    ):
        """
        Given: A plain invoice draft without client tax id
        When: Finalize is called
        Then: VALIDATION_FAILED on client_tax_id, and no sequence is allocated
        """
        # Arrange
        ready_draft.client_tax_id = None

        # Act
        result = await use_case.execute(ready_draft.id)

        # Assert
        assert result.is_err()
        assert result.error.code == "VALIDATION_FAILED"
        assert [d["field"] for d in result.error.details] == ["client_tax_id"]
        mock_counter_repo.next_sequence.assert_not_called()
        mock_document_repo.update.assert_not_called()
        mock_uow.commit.assert_not_called()
        assert ready_draft.status == DocumentStatus.DRAFT
        assert ready_draft.sequence_number is None
        assert ready_draft.iud is None

    async def test_draft_without_lines(self, use_case, ready_draft, mock_line_repo, mock_counter_repo):
        mock_line_repo.get_by_document_id = AsyncMock(return_value=[])

        result = await use_case.execute(ready_draft.id)

        assert result.error.code == "VALIDATION_FAILED"
        assert "items" in [d["field"] for d in result.error.details]
        mock_counter_repo.next_sequence.assert_not_called()

    async def test_not_found(self, use_case, mock_document_repo):
        mock_document_repo.get_by_id = AsyncMock(return_value=None)

        result = await use_case.execute(404)

        assert result.error.code == "DOCUMENT_NOT_FOUND"


@pytest.mark.asyncio
class TestFinalizeFailures:
    async def test_sequence_allocation_failure(
        self, use_case, ready_draft, mock_counter_repo, mock_uow, mock_document_repo
    ):
        """
        Given: The counter store is unavailable
        When: Finalize is called
        Then: SEQUENCE_ALLOCATION_FAILED, no identifier, document stays a draft
        """
        # Arrange
        mock_counter_repo.next_sequence = AsyncMock(side_effect=Exception("connection refused"))

        # Act
        result = await use_case.execute(ready_draft.id)

        # Assert
        assert result.error.code == "SEQUENCE_ALLOCATION_FAILED"
        assert ready_draft.iud is None
        assert ready_draft.sequence_number is None
        assert ready_draft.status == DocumentStatus.DRAFT
        mock_document_repo.update.assert_not_called()
        mock_uow.commit.assert_not_called()
        mock_uow.rollback.assert_called()

    async def test_identifier_overflow_keeps_reservation(self, use_case, ready_draft, mock_counter_repo, mock_uow):
        # Arrange
        mock_counter_repo.next_sequence = AsyncMock(return_value=1_000_000_000)

        # Act
        result = await use_case.execute(ready_draft.id)

        # Assert
        assert result.error.code == "IDENTIFIER_ENCODING_FAILED"
        assert ready_draft.iud is None
        assert ready_draft.sequence_number == 1_000_000_000
        # Only the reservation was committed
        assert mock_uow.commit.call_count == 1


@pytest.mark.asyncio
class TestFinalizeResumption:
    async def test_resume_uses_reserved_number_and_random_code(
        self, use_case, ready_draft, mock_counter_repo, mock_uow
    ):
        """
        Given: A draft whose finalize stopped after the reservation
        When: Finalize is called again
        Then: No new number is allocated and the identifier uses the stored fields
        """
        # Arrange
        ready_draft.series = "A"
        ready_draft.sequence_number = 7
        ready_draft.random_code = "1234567890"

        # Act
        with patch(RANDOM_CODE_PATH, return_value="9999999999") as random_code:
            result = await use_case.execute(ready_draft.id)

        # Assert
        assert result.is_ok()
        assert result.value.iud == EXPECTED_IUD
        mock_counter_repo.next_sequence.assert_not_called()
        random_code.assert_not_called()
        assert mock_uow.commit.call_count == 1

    async def test_issued_document_is_returned_unchanged(
        self, use_case, make_issued, make_lines, mock_document_repo, mock_line_repo, mock_counter_repo, mock_uow
    ):
        # Arrange
        document = make_issued()
        mock_document_repo.get_by_id = AsyncMock(return_value=document)
        mock_line_repo.get_by_document_id = AsyncMock(return_value=make_lines(document.id))

        # Act
        result = await use_case.execute(document.id)

        # Assert
        assert result.is_ok()
        assert result.value.iud == EXPECTED_IUD
        assert document.fiscal_status == FiscalStatus.PENDING
        mock_counter_repo.next_sequence.assert_not_called()
        mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
class TestFinalizeConcurrentCalls:
    async def test_lost_reservation_resumes_the_stored_one(
        self, use_case, make_draft, make_lines, mock_document_repo, mock_line_repo,
        mock_counter_repo, mock_uow, mock_ledger_service
    ):
        """
        Given: Another finalize reserved the draft between load and reservation
        When: This finalize's conditional reservation changes no row
        Then: Its number is released and the stored reservation is issued
        """
        # Arrange
        draft = make_draft()
        reserved = make_draft(series="A", sequence_number=7, random_code="1234567890")
        mock_document_repo.get_by_id = AsyncMock(side_effect=[draft, reserved])
        mock_document_repo.reserve_sequence = AsyncMock(return_value=False)
        mock_line_repo.get_by_document_id = AsyncMock(return_value=make_lines(draft.id))
        mock_counter_repo.next_sequence = AsyncMock(return_value=8)

        # Act
        with patch(RANDOM_CODE_PATH, return_value="5555555555"):
            result = await use_case.execute(draft.id)

        # Assert
        assert result.is_ok()
        assert result.value.iud == EXPECTED_IUD
        assert result.value.sequence_number == 7
        mock_uow.rollback.assert_called_once()
        # Only the issue was committed
        assert mock_uow.commit.call_count == 1
        mock_ledger_service.record_settlement.assert_called_once()

    async def test_lost_issue_returns_issued_document_without_settlement(
        self, use_case, make_draft, make_issued, make_lines, mock_document_repo, mock_line_repo,
        mock_uow, mock_ledger_service
    ):
        # Arrange
        reserved = make_draft(id=42, series="A", sequence_number=7, random_code="1234567890")
        issued = make_issued()
        mock_document_repo.get_by_id = AsyncMock(side_effect=[reserved, issued])
        mock_document_repo.issue_draft = AsyncMock(return_value=False)
        mock_line_repo.get_by_document_id = AsyncMock(return_value=make_lines(42))

        # Act
        result = await use_case.execute(42)

        # Assert
        assert result.is_ok()
        assert result.value.status == "issued"
        assert result.value.display_id == "FTE A2024/007"
        mock_uow.commit.assert_not_called()
        mock_uow.rollback.assert_called_once()
        mock_ledger_service.record_settlement.assert_not_called()
