"""VoidDocument Use Case

Cancels an issued document; totals and identifier are kept for audit.
"""

import logging
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.fiscal_document_repository import FiscalDocumentRepository
from src.app.repositories.document_line_repository import DocumentLineRepository
from src.domain.document_state import DocumentStateMachine
from src.domain.errors import InvalidTransitionError
from src.domain.fiscal_settings import FiscalSettings
from .dtos import VoidDocumentCommandDTO, DocumentResponseDTO

logger = logging.getLogger(__name__)


class VoidDocument:
    """
    Use Case: Void an issued document

    Business Rules:
    1. Only issued documents can be voided
    2. Void is terminal; only status, reason and timestamp change
    """

    def __init__(
        self,
        uow: UnitOfWork,
        document_repo: FiscalDocumentRepository,
        line_repo: DocumentLineRepository,
        settings: FiscalSettings,
    ):
        self.uow = uow
        self.document_repo = document_repo
        self.line_repo = line_repo
        self.settings = settings
        self.state_machine = DocumentStateMachine(settings.withholding_rate)

    async def execute(self, command: VoidDocumentCommandDTO) -> Result[DocumentResponseDTO]:
        try:
            document = await self.document_repo.get_by_id(command.document_id, for_update=True)
            if not document:
                return Return.err(
                    Error(
                        code="DOCUMENT_NOT_FOUND",
                        message=f"Document {command.document_id} not found",
                    )
                )

            try:
                self.state_machine.void(document, command.reason)
            except InvalidTransitionError as e:
                return Return.err(Error(code=e.code, message=str(e)))

            voided = await self.document_repo.update(document)
            await self.uow.commit()
            logger.info(f"Document {voided.display_id} voided: {command.reason}")

            lines = await self.line_repo.get_by_document_id(voided.id)
            return Return.ok(DocumentResponseDTO.build(voided, lines, self.settings.qr_base_url))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="VOID_DOCUMENT_FAILED",
                    message="Failed to void document",
                    reason=str(e),
                )
            )
