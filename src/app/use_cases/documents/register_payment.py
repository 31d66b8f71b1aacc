"""RegisterPayment Use Case

Marks an issued invoice as paid and notifies the ledger.
"""

import logging
from datetime import date, datetime
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.ledger_service import LedgerService
from src.app.repositories.fiscal_document_repository import FiscalDocumentRepository
from src.app.repositories.document_line_repository import DocumentLineRepository
from src.domain.document_state import DocumentStateMachine
from src.domain.errors import InvalidTransitionError
from src.domain.fiscal_settings import FiscalSettings
from src.domain.settlement import settlement_for_payment
from .dtos import RegisterPaymentCommandDTO, DocumentResponseDTO

logger = logging.getLogger(__name__)


class RegisterPayment:
    """
    Use Case: Register payment of an issued invoice

    Business Rules:
    1. Auto-settled types (FRE, TVE, NCE) are settled on issue and refuse
       payment registration
    2. Only issued documents become paid (paid and void are terminal)
    3. A payment settlement is sent to the ledger after commit

    Flow:
    1. Load document
    2. Check settlement mode
    3. Transition to paid
    4. Commit transaction
    5. Emit payment settlement
    """

    def __init__(
        self,
        uow: UnitOfWork,
        document_repo: FiscalDocumentRepository,
        line_repo: DocumentLineRepository,
        ledger_service: LedgerService,
        settings: FiscalSettings,
    ):
        self.uow = uow
        self.document_repo = document_repo
        self.line_repo = line_repo
        self.ledger_service = ledger_service
        self.settings = settings
        self.state_machine = DocumentStateMachine(settings.withholding_rate)

    async def execute(self, command: RegisterPaymentCommandDTO) -> Result[DocumentResponseDTO]:
        try:
            # Step 1: Load document
            document = await self.document_repo.get_by_id(command.document_id, for_update=True)
            if not document:
                return Return.err(
                    Error(
                        code="DOCUMENT_NOT_FOUND",
                        message=f"Document {command.document_id} not found",
                    )
                )

            # Step 2: Check settlement mode
            if document.document_type.is_auto_settled:
                return Return.err(
                    Error(
                        code="ALREADY_SETTLED",
                        message=f"{document.document_type.value} documents are settled when issued",
                    )
                )

            # Step 3: Transition to paid
            paid_on = command.paid_on or date.today()
            try:
                self.state_machine.mark_paid(document, paid_at=datetime.utcnow())
            except InvalidTransitionError as e:
                return Return.err(Error(code=e.code, message=str(e)))

            paid = await self.document_repo.update(document)

            # Step 4: Commit transaction
            await self.uow.commit()
            logger.info(f"Payment registered for {paid.display_id} ({command.payment_method}, {paid_on})")

            # Step 5: Emit payment settlement
            event = settlement_for_payment(paid, command.payment_method, paid_on)
            try:
                if not await self.ledger_service.record_settlement(event):
                    logger.error(f"Ledger did not accept payment settlement for {paid.display_id}")
            except Exception as e:
                logger.error(f"Ledger rejected payment settlement for {paid.display_id}: {e}")

            lines = await self.line_repo.get_by_document_id(paid.id)
            return Return.ok(DocumentResponseDTO.build(paid, lines, self.settings.qr_base_url))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="REGISTER_PAYMENT_FAILED",
                    message="Failed to register payment",
                    reason=str(e),
                )
            )
