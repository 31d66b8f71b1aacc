"""TransmitDocument Use Case

Sends one issued document to the tax authority and records the outcome.
"""

import logging
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.fiscal_authority_service import FiscalAuthorityService, TransmissionResult
from src.app.repositories.fiscal_document_repository import FiscalDocumentRepository
from src.app.repositories.document_line_repository import DocumentLineRepository
from src.domain.document_state import DocumentStateMachine
from src.domain.fiscal_document import DocumentStatus, FiscalStatus
from src.domain.fiscal_settings import FiscalSettings
from .dtos import TransmissionResultDTO

logger = logging.getLogger(__name__)


class TransmitDocument:
    """
    Use Case: Transmit an issued document to the tax authority

    Business Rules:
    1. Only non-draft documents whose fiscal status is pending or failed
       are transmitted
    2. The outcome never changes the lifecycle status, numbering or
       identifier; it only updates the fiscal transmission fields
    3. A failed attempt is recorded (attempt count, last error) and can be
       retried
    4. Without a channel that reaches the authority nothing is attempted;
       the document keeps its fiscal status and attempt count

    Flow:
    1. Load document and check fiscal status
    2. Transmit with lines
    3. Record outcome
    4. Commit transaction
    """

    def __init__(
        self,
        uow: UnitOfWork,
        document_repo: FiscalDocumentRepository,
        line_repo: DocumentLineRepository,
        fiscal_authority: FiscalAuthorityService,
        settings: FiscalSettings,
    ):
        self.uow = uow
        self.document_repo = document_repo
        self.line_repo = line_repo
        self.fiscal_authority = fiscal_authority
        self.state_machine = DocumentStateMachine(settings.withholding_rate)

    async def execute(self, document_id: int) -> Result[TransmissionResultDTO]:
        try:
            # Step 1: Load document and check fiscal status
            document = await self.document_repo.get_by_id(document_id, for_update=True)
            if not document:
                return Return.err(
                    Error(
                        code="DOCUMENT_NOT_FOUND",
                        message=f"Document {document_id} not found",
                    )
                )

            if document.status == DocumentStatus.DRAFT or document.fiscal_status not in (
                FiscalStatus.PENDING,
                FiscalStatus.FAILED,
            ):
                return Return.err(
                    Error(
                        code="TRANSMISSION_NOT_ALLOWED",
                        message=f"Document {document.display_id or document.id} cannot be transmitted "
                                f"(status={document.status.value}, fiscal_status={document.fiscal_status.value})",
                    )
                )

            if not self.fiscal_authority.delivers:
                logger.warning(f"Not transmitting {document.display_id}: no fiscal authority configured")
                await self.uow.rollback()
                return Return.err(
                    Error(
                        code="FISCAL_AUTHORITY_NOT_CONFIGURED",
                        message="No fiscal authority endpoint is configured",
                    )
                )

            # Step 2: Transmit with lines
            lines = await self.line_repo.get_by_document_id(document.id)
            try:
                outcome = await self.fiscal_authority.transmit(document, lines)
            except Exception as e:
                outcome = TransmissionResult(success=False, error=str(e) or type(e).__name__)

            # Step 3: Record outcome
            self.state_machine.record_transmission(document, outcome.success, error=outcome.error)
            updated = await self.document_repo.update(document)

            # Step 4: Commit transaction
            await self.uow.commit()

            if outcome.success:
                logger.info(f"Document {updated.display_id} transmitted after {updated.fiscal_attempts} attempt(s)")
            else:
                logger.error(
                    f"Transmission of {updated.display_id} failed "
                    f"(attempt {updated.fiscal_attempts}): {outcome.error}"
                )

            return Return.ok(
                TransmissionResultDTO(
                    document_id=updated.id,
                    display_id=updated.display_id,
                    fiscal_status=updated.fiscal_status.value,
                    fiscal_attempts=updated.fiscal_attempts,
                    error=updated.fiscal_last_error,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="TRANSMIT_DOCUMENT_FAILED",
                    message="Failed to transmit document",
                    reason=str(e),
                )
            )
