"""Unit tests for FiscalTransmissionWorker

Tests cover:
- Worker initialization with configuration
- run_once picking up pending / failed documents
- Transmission disabled and unconfigured endpoint scenarios
- Per-document error handling
- Shutdown and cleanup
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from src.adapter.services.fiscal_authority_service import LoggingFiscalAuthorityService
from src.worker.fiscal_transmitter import FiscalTransmissionWorker
from src.app.use_cases.documents.dtos import TransmissionResultDTO
from libs.result import Return, Error
from src.domain.fiscal_document import FiscalStatus


def _session_factory():
    session = MagicMock()
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=False)
    return MagicMock(return_value=session)


@pytest.fixture
def mock_fiscal_authority():
    return MagicMock()


class TestFiscalTransmissionWorkerInit:
    """Test worker initialization"""

    @patch("src.worker.fiscal_transmitter.ApplicationConfig")
    @patch("src.worker.fiscal_transmitter.create_async_engine")
    def test_initializes_with_default_config(
        self, mock_create_engine, mock_app_config, mock_fiscal_authority, fiscal_settings
    ):
        """
        Given: No custom configuration provided
        When: Worker is initialized
        Then: Uses defaults from ApplicationConfig
        """
        # Arrange
        mock_app_config.DB_URI = "sqlite+aiosqlite:///./default.db"
        mock_app_config.FISCAL_TRANSMISSION_MAX_ATTEMPTS = 10
        mock_app_config.FISCAL_TRANSMISSION_BATCH_SIZE = 50
        mock_create_engine.return_value = MagicMock()

        # Act
        worker = FiscalTransmissionWorker(fiscal_authority=mock_fiscal_authority, settings=fiscal_settings)

        # Assert
        assert worker.db_uri == "sqlite+aiosqlite:///./default.db"
        assert worker.max_attempts == 10
        assert worker.batch_size == 50
        mock_create_engine.assert_called_once()

    @patch("src.worker.fiscal_transmitter.create_async_engine")
    def test_initializes_with_custom_values(self, mock_create_engine, mock_fiscal_authority, fiscal_settings):
        worker = FiscalTransmissionWorker(
            db_uri="sqlite+aiosqlite:///./custom.db",
            fiscal_authority=mock_fiscal_authority,
            settings=fiscal_settings,
            max_attempts=3,
            batch_size=5,
        )

        assert worker.db_uri == "sqlite+aiosqlite:///./custom.db"
        assert worker.max_attempts == 3
        assert worker.batch_size == 5
        assert worker.fiscal_authority is mock_fiscal_authority


@pytest.mark.asyncio
class TestFiscalTransmissionWorkerRunOnce:
    """Test run_once execution"""

    @patch("src.worker.fiscal_transmitter.ApplicationConfig")
    @patch("src.worker.fiscal_transmitter.TransmitDocument")
    @patch("src.worker.fiscal_transmitter.SqlAlchemyUnitOfWork")
    @patch("src.worker.fiscal_transmitter.SqlAlchemyDocumentLineRepository")
    @patch("src.worker.fiscal_transmitter.SqlAlchemyFiscalDocumentRepository")
    @patch("src.worker.fiscal_transmitter.create_async_engine")
    @patch("src.worker.fiscal_transmitter.sessionmaker")
    async def test_run_once_transmits_batch(
        self,
        mock_sessionmaker,
        mock_create_engine,
        mock_document_repo_class,
        mock_line_repo_class,
        mock_uow_class,
        mock_use_case_class,
        mock_app_config,
        make_issued,
        mock_fiscal_authority,
        fiscal_settings,
    ):
        """
        Given: Two documents waiting for transmission, one accepted and one rejected
        When: run_once is called
        Then: Both are attempted and the batch summary counts them
        """
        # Arrange
        mock_app_config.FISCAL_TRANSMISSION_ENABLED = True
        mock_sessionmaker.return_value = _session_factory()
        mock_create_engine.return_value = MagicMock()

        repo = MagicMock()
        repo.list_for_transmission = AsyncMock(return_value=[make_issued(id=1), make_issued(id=2)])
        mock_document_repo_class.return_value = repo

        mock_use_case = MagicMock()
        mock_use_case.execute = AsyncMock(side_effect=[
            Return.ok(TransmissionResultDTO(
                document_id=1, display_id="FTE A2024/001", fiscal_status="transmitted", fiscal_attempts=1
            )),
            Return.ok(TransmissionResultDTO(
                document_id=2, display_id="FTE A2024/002", fiscal_status="failed", fiscal_attempts=1, error="timeout"
            )),
        ])
        mock_use_case_class.return_value = mock_use_case

        # Act
        worker = FiscalTransmissionWorker(
            fiscal_authority=mock_fiscal_authority, settings=fiscal_settings, max_attempts=5, batch_size=20
        )
        result = await worker.run_once()

        # Assert
        assert result.processed == 2
        assert result.transmitted == 1
        assert result.failed == 1
        assert [r.document_id for r in result.results] == [1, 2]
        repo.list_for_transmission.assert_called_once_with(
            fiscal_statuses=[FiscalStatus.PENDING, FiscalStatus.FAILED],
            max_attempts=5,
            limit=20,
        )
        assert mock_use_case.execute.call_count == 2

    @patch("src.worker.fiscal_transmitter.ApplicationConfig")
    @patch("src.worker.fiscal_transmitter.TransmitDocument")
    @patch("src.worker.fiscal_transmitter.SqlAlchemyUnitOfWork")
    @patch("src.worker.fiscal_transmitter.SqlAlchemyDocumentLineRepository")
    @patch("src.worker.fiscal_transmitter.SqlAlchemyFiscalDocumentRepository")
    @patch("src.worker.fiscal_transmitter.create_async_engine")
    @patch("src.worker.fiscal_transmitter.sessionmaker")
    async def test_use_case_error_does_not_stop_batch(
        self,
        mock_sessionmaker,
        mock_create_engine,
        mock_document_repo_class,
        mock_line_repo_class,
        mock_uow_class,
        mock_use_case_class,
        mock_app_config,
        make_issued,
        mock_fiscal_authority,
        fiscal_settings,
    ):
        # Arrange
        mock_app_config.FISCAL_TRANSMISSION_ENABLED = True
        mock_sessionmaker.return_value = _session_factory()
        repo = MagicMock()
        repo.list_for_transmission = AsyncMock(return_value=[make_issued(id=1), make_issued(id=2)])
        mock_document_repo_class.return_value = repo

        mock_use_case = MagicMock()
        mock_use_case.execute = AsyncMock(side_effect=[
            Return.err(Error(code="TRANSMIT_DOCUMENT_FAILED", message="Failed to transmit document")),
            Return.ok(TransmissionResultDTO(document_id=2, fiscal_status="transmitted", fiscal_attempts=1)),
        ])
        mock_use_case_class.return_value = mock_use_case

        # Act
        worker = FiscalTransmissionWorker(
            fiscal_authority=mock_fiscal_authority, settings=fiscal_settings, max_attempts=5, batch_size=20
        )
        result = await worker.run_once()

        # Assert
        assert result.processed == 2
        assert result.transmitted == 1
        assert result.failed == 1

    @patch("src.worker.fiscal_transmitter.ApplicationConfig")
    @patch("src.worker.fiscal_transmitter.SqlAlchemyFiscalDocumentRepository")
    @patch("src.worker.fiscal_transmitter.create_async_engine")
    async def test_run_once_skips_when_disabled(
        self, mock_create_engine, mock_document_repo_class, mock_app_config, mock_fiscal_authority, fiscal_settings
    ):
        """
        Given: Fiscal transmission is disabled
        When: run_once is called
        Then: Nothing is read or sent
        """
        # Arrange
        mock_app_config.FISCAL_TRANSMISSION_ENABLED = False
        mock_create_engine.return_value = MagicMock()

        # Act
        worker = FiscalTransmissionWorker(
            fiscal_authority=mock_fiscal_authority, settings=fiscal_settings, max_attempts=5, batch_size=20
        )
        result = await worker.run_once()

        # Assert
        assert result.processed == 0
        mock_document_repo_class.assert_not_called()

    @patch("src.worker.fiscal_transmitter.ApplicationConfig")
    @patch("src.worker.fiscal_transmitter.SqlAlchemyFiscalDocumentRepository")
    @patch("src.worker.fiscal_transmitter.create_async_engine")
    async def test_run_once_skips_without_authority_endpoint(
        self, mock_create_engine, mock_document_repo_class, mock_app_config, fiscal_settings
    ):
        """
        Given: Transmission is enabled but only the logging stand-in is configured
        When: run_once is called
        Then: No document is picked up, so none burns an attempt
        """
        # Arrange
        mock_app_config.FISCAL_TRANSMISSION_ENABLED = True
        mock_create_engine.return_value = MagicMock()

        # Act
        worker = FiscalTransmissionWorker(
            fiscal_authority=LoggingFiscalAuthorityService(), settings=fiscal_settings, max_attempts=5, batch_size=20
        )
        result = await worker.run_once()

        # Assert
        assert result.processed == 0
        mock_document_repo_class.assert_not_called()


@pytest.mark.asyncio
class TestFiscalTransmissionWorkerShutdown:
    @patch("src.worker.fiscal_transmitter.create_async_engine")
    async def test_shutdown_disposes_engine(self, mock_create_engine, mock_fiscal_authority, fiscal_settings):
        # Arrange
        mock_engine = MagicMock()
        mock_engine.dispose = AsyncMock()
        mock_create_engine.return_value = mock_engine
        worker = FiscalTransmissionWorker(
            fiscal_authority=mock_fiscal_authority, settings=fiscal_settings, max_attempts=5, batch_size=20
        )

        # Act
        await worker.shutdown()

        # Assert
        mock_engine.dispose.assert_called_once()
