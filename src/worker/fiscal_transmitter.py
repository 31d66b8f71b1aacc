"""Fiscal Transmission Background Worker

Periodically sends issued documents that are pending (or failed) to the
tax authority. Issue never waits for this worker.
"""

import asyncio
import logging
from typing import Optional
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.repositories import SqlAlchemyFiscalDocumentRepository, SqlAlchemyDocumentLineRepository
from src.adapter.services.fiscal_authority_service import create_fiscal_authority_service
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.fiscal_authority_service import FiscalAuthorityService
from src.app.use_cases.documents import TransmitDocument, TransmissionBatchResultDTO
from src.depends import build_fiscal_settings
from src.domain.fiscal_document import FiscalStatus
from src.domain.fiscal_settings import FiscalSettings

logger = logging.getLogger(__name__)


class FiscalTransmissionWorker:
    """
    Background worker for fiscal transmission

    Features:
    - Picks up documents in pending / failed fiscal status, oldest first
    - Skips documents that reached the attempt limit
    - One session per document, so one failure never rolls back another
    - Does nothing while no authority endpoint is configured
    - Can run once or continuously

    Usage:
        # Run once
        worker = FiscalTransmissionWorker()
        result = await worker.run_once()

        # Run continuously
        worker = FiscalTransmissionWorker()
        await worker.run_forever(interval_seconds=300)
    """

    def __init__(
        self,
        db_uri: Optional[str] = None,
        fiscal_authority: Optional[FiscalAuthorityService] = None,
        settings: Optional[FiscalSettings] = None,
        max_attempts: Optional[int] = None,
        batch_size: Optional[int] = None,
    ):
        """
        Initialize the worker

        Args:
            db_uri: Database URI (defaults to ApplicationConfig.DB_URI)
            fiscal_authority: Transmission channel (defaults to the configured one)
            settings: Fiscal settings (defaults to ApplicationConfig values)
            max_attempts: Attempt limit per document
            batch_size: Documents per cycle
        """
        self.db_uri = db_uri or ApplicationConfig.DB_URI
        self.fiscal_authority = fiscal_authority or create_fiscal_authority_service(
            ApplicationConfig.FISCAL_AUTHORITY_URL,
            api_key=ApplicationConfig.FISCAL_AUTHORITY_API_KEY,
        )
        self.settings = settings or build_fiscal_settings()
        self.max_attempts = max_attempts or ApplicationConfig.FISCAL_TRANSMISSION_MAX_ATTEMPTS
        self.batch_size = batch_size or ApplicationConfig.FISCAL_TRANSMISSION_BATCH_SIZE

        # Create engine and session factory
        self.engine = create_async_engine(self.db_uri, echo=False, future=True)
        self.async_session_factory = sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
        )

        logger.info("FiscalTransmissionWorker initialized")

    async def run_once(self) -> TransmissionBatchResultDTO:
        """
        Transmit one batch

        Returns:
            TransmissionBatchResultDTO with per-document outcomes
        """
        batch = TransmissionBatchResultDTO()

        if not ApplicationConfig.FISCAL_TRANSMISSION_ENABLED:
            logger.info("Fiscal transmission is disabled, skipping")
            return batch

        if not self.fiscal_authority.delivers:
            logger.warning("No fiscal authority endpoint configured, skipping transmission")
            return batch

        async with self.async_session_factory() as session:
            document_ids = [
                document.id
                for document in await SqlAlchemyFiscalDocumentRepository(session).list_for_transmission(
                    fiscal_statuses=[FiscalStatus.PENDING, FiscalStatus.FAILED],
                    max_attempts=self.max_attempts,
                    limit=self.batch_size,
                )
            ]

        for document_id in document_ids:
            async with self.async_session_factory() as session:
                use_case = TransmitDocument(
                    uow=SqlAlchemyUnitOfWork(session),
                    document_repo=SqlAlchemyFiscalDocumentRepository(session),
                    line_repo=SqlAlchemyDocumentLineRepository(session),
                    fiscal_authority=self.fiscal_authority,
                    settings=self.settings,
                )
                result = await use_case.execute(document_id)

            batch.processed += 1
            if result.is_err():
                batch.failed += 1
                logger.error(f"Document {document_id} not transmitted: {result.error.code} {result.error.message}")
                continue

            batch.results.append(result.value)
            if result.value.fiscal_status == FiscalStatus.TRANSMITTED.value:
                batch.transmitted += 1
            else:
                batch.failed += 1

        return batch

    async def run_forever(self, interval_seconds: int = 300):
        """
        Transmit continuously at the specified interval

        Args:
            interval_seconds: Seconds between cycles (default: 5 minutes)
        """
        logger.info(f"Starting continuous fiscal transmission with {interval_seconds}s interval")

        while True:
            try:
                result = await self.run_once()
                logger.info(
                    f"Transmission cycle complete. "
                    f"Processed {result.processed}, transmitted {result.transmitted}, failed {result.failed}"
                )
            except Exception as e:
                logger.error(f"Transmission cycle failed: {e}")

            await asyncio.sleep(interval_seconds)

    async def shutdown(self):
        """Cleanup resources"""
        await self.engine.dispose()
        logger.info("FiscalTransmissionWorker shutdown complete")


async def main():
    """
    Entry point for running the worker as a standalone script

    Usage:
        # Run once
        python -m src.worker.fiscal_transmitter --once

        # Run continuously with custom interval (in seconds)
        python -m src.worker.fiscal_transmitter --interval 60
    """
    import argparse

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Fiscal Transmission Worker")
    parser.add_argument(
        "--once", action="store_true", help="Run once and exit"
    )
    parser.add_argument(
        "--interval", type=int, default=ApplicationConfig.FISCAL_TRANSMISSION_INTERVAL_SECONDS,
        help="Interval between runs in seconds"
    )
    args = parser.parse_args()

    worker = FiscalTransmissionWorker()

    try:
        if args.once:
            result = await worker.run_once()
            print("Transmission complete:")
            print(f"  Processed: {result.processed}")
            print(f"  Transmitted: {result.transmitted}")
            print(f"  Failed: {result.failed}")
            for r in result.results:
                if r.error:
                    print(f"  - {r.display_id}: {r.error}")
        else:
            await worker.run_forever(interval_seconds=args.interval)
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
