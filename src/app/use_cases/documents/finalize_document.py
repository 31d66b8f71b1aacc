"""FinalizeDocument Use Case

Turns a draft into an issued, uniquely identified legal document.
"""

import logging
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.ledger_service import LedgerService
from src.app.repositories.fiscal_document_repository import FiscalDocumentRepository
from src.app.repositories.document_line_repository import DocumentLineRepository
from src.app.repositories.series_counter_repository import SeriesCounterRepository
from src.domain.document_state import DocumentStateMachine
from src.domain.errors import IdentifierEncodingError
from src.domain.fiscal_document import FiscalDocument
from src.domain.fiscal_rules import validate_for_emission
from src.domain.fiscal_settings import FiscalSettings
from src.domain.identifier import encode_iud, format_display_id, generate_random_code
from src.domain.settlement import settlement_for_issue
from .dtos import DocumentResponseDTO

logger = logging.getLogger(__name__)


class FinalizeDocument:
    """
    Use Case: Finalize (issue) a draft document

    Business Rules:
    1. Validation failures leave the draft untouched; no number is allocated
    2. The sequence number is allocated before the identifier is generated,
       and stored on the draft together with the random component in its
       own commit (the reservation)
    3. A draft that already holds a reservation is resumed with the same
       sequence number and random component, never a new one
    4. Once issued only status and fiscal transmission fields change;
       fiscal status becomes pending, transmission happens elsewhere
    5. A settlement event goes to the ledger after issue; ledger failures
       are logged and do not undo the issue
    6. Finalizing an already issued document returns it unchanged
    7. Reservation and issue are conditional writes on the draft row; a
       finalize that loses either race to a concurrent call releases its
       number, resumes the stored reservation and never settles

    Flow:
    1. Load document
    2. Validate for emission
    3. Reserve sequence number and random component, commit
    4. Encode identifier and issue, commit
    5. Emit settlement event
    """

    def __init__(
        self,
        uow: UnitOfWork,
        document_repo: FiscalDocumentRepository,
        line_repo: DocumentLineRepository,
        counter_repo: SeriesCounterRepository,
        ledger_service: LedgerService,
        settings: FiscalSettings,
    ):
        self.uow = uow
        self.document_repo = document_repo
        self.line_repo = line_repo
        self.counter_repo = counter_repo
        self.ledger_service = ledger_service
        self.settings = settings
        self.state_machine = DocumentStateMachine(settings.withholding_rate)

    async def execute(self, document_id: int) -> Result[DocumentResponseDTO]:
        """
        Execute finalization

        Args:
            document_id: Draft document ID

        Returns:
            Result[DocumentResponseDTO]: Issued document, or VALIDATION_FAILED
            with the field-tagged issues in ``details``
        """
        try:
            # Step 1: Load document
            document = await self.document_repo.get_by_id(document_id, for_update=True)
            if not document:
                return Return.err(
                    Error(
                        code="DOCUMENT_NOT_FOUND",
                        message=f"Document {document_id} not found",
                    )
                )

            lines = await self.line_repo.get_by_document_id(document.id)

            if not document.is_draft:
                logger.info(f"Document {document.display_id} already {document.status.value}, nothing to finalize")
                return Return.ok(DocumentResponseDTO.build(document, lines, self.settings.qr_base_url))

            if document.has_reservation:
                logger.warning(
                    f"Resuming finalize of document {document.id} with reserved "
                    f"sequence {document.series}/{document.sequence_number}"
                )
            else:
                # Step 2: Validate for emission
                items = [line.to_item() for line in lines]
                issues = validate_for_emission(
                    document, items, checksum_enabled=self.settings.tax_id_checksum_enabled
                )
                if issues:
                    logger.info(
                        f"Document {document.id} rejected: "
                        + ", ".join(issue.field for issue in issues)
                    )
                    await self.uow.rollback()
                    return Return.err(
                        Error(
                            code="VALIDATION_FAILED",
                            message="Document is not ready to be issued",
                            details=[issue.model_dump() for issue in issues],
                        )
                    )

                # Step 3: Reserve sequence number and random component
                reservation_error = await self._reserve(document)
                if reservation_error:
                    return Return.err(reservation_error)

                document, lines = await self._reload(document_id)
                if not document.is_draft:
                    logger.info(f"Document {document.display_id} was issued by a concurrent finalize")
                    return Return.ok(DocumentResponseDTO.build(document, lines, self.settings.qr_base_url))

            # Step 4: Encode identifier and issue
            try:
                iud = encode_iud(document, self.settings)
            except IdentifierEncodingError as e:
                await self.uow.rollback()
                logger.error(
                    f"Identifier encoding failed for document {document.id} "
                    f"(sequence {document.series}/{document.sequence_number}): {e}"
                )
                return Return.err(
                    Error(
                        code=e.code,
                        message="Failed to encode the unique document identifier",
                        reason=str(e),
                    )
                )

            display_id = format_display_id(
                document.document_type,
                document.series,
                document.document_date.year,
                document.sequence_number,
            )
            self.state_machine.issue(document, iud, display_id)
            if not await self.document_repo.issue_draft(document):
                # Only the finalize that issued the draft settles it
                await self.uow.rollback()
                document, lines = await self._reload(document_id)
                logger.info(f"Document {document.display_id} was issued by a concurrent finalize")
                return Return.ok(DocumentResponseDTO.build(document, lines, self.settings.qr_base_url))
            await self.uow.commit()
            issued = document
            logger.info(f"Issued {issued.display_id} iud={issued.iud} total={issued.total}")

            # Step 5: Emit settlement event
            await self._record_settlement(issued)

            return Return.ok(DocumentResponseDTO.build(issued, lines, self.settings.qr_base_url))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="FINALIZE_DOCUMENT_FAILED",
                    message="Failed to finalize document",
                    reason=str(e),
                )
            )

    async def _reserve(self, document: FiscalDocument):
        series = self.settings.series
        try:
            sequence_number = await self.counter_repo.next_sequence(series)
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Sequence allocation failed for series {series}: {e}")
            return Error(
                code="SEQUENCE_ALLOCATION_FAILED",
                message=f"Could not allocate a sequence number in series {series}",
                reason=str(e),
            )

        document_id = document.id
        self.state_machine.reserve(document, series, sequence_number, generate_random_code())
        if not await self.document_repo.reserve_sequence(document):
            # Rolling back also returns the number to the counter
            await self.uow.rollback()
            logger.warning(
                f"Document {document_id} was reserved by a concurrent finalize, "
                f"released {series}/{sequence_number}"
            )
            return None
        await self.uow.commit()
        logger.info(f"Allocated {series}/{sequence_number} to document {document_id}")
        return None

    async def _reload(self, document_id: int):
        document = await self.document_repo.get_by_id(document_id, for_update=True)
        lines = await self.line_repo.get_by_document_id(document_id)
        return document, lines

    async def _record_settlement(self, document: FiscalDocument) -> None:
        event = settlement_for_issue(document)
        try:
            accepted = await self.ledger_service.record_settlement(event)
        except Exception as e:
            logger.error(f"Ledger rejected {event.kind} settlement for {document.display_id}: {e}")
            return
        if not accepted:
            logger.error(f"Ledger did not accept {event.kind} settlement for {document.display_id}")
