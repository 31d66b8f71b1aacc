"""CreateCreditNote Use Case

Opens a credit-note draft that reverses (part of) an issued document.
"""

import logging
from datetime import date
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.fiscal_document_repository import FiscalDocumentRepository
from src.app.repositories.document_line_repository import DocumentLineRepository
from src.domain.document_state import DocumentStateMachine
from src.domain.document_type import DocumentType
from src.domain.fiscal_document import DocumentStatus, FiscalDocument
from src.domain.fiscal_settings import FiscalSettings
from .dtos import CreateCreditNoteCommandDTO, DocumentResponseDTO

logger = logging.getLogger(__name__)


class CreateCreditNote:
    """
    Use Case: Create a credit-note draft against an issued document

    Business Rules:
    1. The referenced document must be issued or paid, and not itself a
       credit note
    2. Lines are the sign-reversed copies of the selected referenced lines
       (all lines when no selection is given)
    3. Client snapshot, payment method and retention flag are copied
    4. The reason may be supplied later; finalize requires it

    Flow:
    1. Load and check referenced document
    2. Select and negate lines
    3. Build credit-note draft and compute totals
    4. Persist draft and lines
    5. Commit transaction
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

    async def execute(self, command: CreateCreditNoteCommandDTO) -> Result[DocumentResponseDTO]:
        try:
            # Step 1: Load and check referenced document
            reference = await self.document_repo.get_by_id(command.reference_document_id)
            if not reference:
                return Return.err(
                    Error(
                        code="REFERENCE_DOCUMENT_NOT_FOUND",
                        message=f"Document {command.reference_document_id} not found",
                    )
                )

            if reference.status not in (DocumentStatus.ISSUED, DocumentStatus.PAID):
                return Return.err(
                    Error(
                        code="INVALID_REFERENCE_DOCUMENT",
                        message=f"Document {reference.display_id or reference.id} is "
                                f"{reference.status.value}; only issued or paid documents can be credited",
                    )
                )

            if reference.document_type.is_credit_note:
                return Return.err(
                    Error(
                        code="INVALID_REFERENCE_DOCUMENT",
                        message="A credit note cannot be credited",
                    )
                )

            # Step 2: Select and negate lines
            reference_lines = await self.line_repo.get_by_document_id(reference.id)
            if command.line_positions is None:
                selected = reference_lines
            else:
                by_position = {line.position: line for line in reference_lines}
                unknown = sorted(set(command.line_positions) - set(by_position))
                if unknown:
                    return Return.err(
                        Error(
                            code="VALIDATION_FAILED",
                            message="Selected lines do not exist on the referenced document",
                            details=[
                                {"field": "line_positions", "message": f"Unknown line position {p}."}
                                for p in unknown
                            ],
                        )
                    )
                selected = [by_position[p] for p in sorted(set(command.line_positions))]

            if not selected:
                return Return.err(
                    Error(
                        code="VALIDATION_FAILED",
                        message="A credit note needs at least one line",
                        details=[{"field": "line_positions", "message": "Select at least one line."}],
                    )
                )

            items = [line.to_item().negated() for line in selected]

            # Step 3: Build credit-note draft and compute totals
            document = FiscalDocument(
                document_type=DocumentType.CREDIT_NOTE,
                document_date=command.document_date or date.today(),
                client_id=reference.client_id,
                client_name=reference.client_name,
                client_tax_id=reference.client_tax_id,
                client_address=reference.client_address,
                payment_method=reference.payment_method,
                retention=reference.retention,
                notes=command.notes,
                reference_document_id=reference.id,
                reference_iud=reference.iud,
                reason=command.reason,
            )
            self.state_machine.recalculate(document, items)

            # Step 4: Persist draft and lines
            created = await self.document_repo.create(document)
            lines = await self.line_repo.replace_lines(created.id, items)

            # Step 5: Commit transaction
            await self.uow.commit()

            logger.info(
                f"Credit note draft {created.id} created against {reference.display_id} "
                f"({len(lines)} lines, total={created.total})"
            )
            return Return.ok(DocumentResponseDTO.build(created, lines, self.settings.qr_base_url))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="CREATE_CREDIT_NOTE_FAILED",
                    message="Failed to create credit note",
                    reason=str(e),
                )
            )
