"""CreateDraft Use Case

Opens a mutable draft sales document for a client.
"""

import logging
from datetime import date
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.client_directory import ClientDirectory
from src.app.repositories.fiscal_document_repository import FiscalDocumentRepository
from src.app.repositories.document_line_repository import DocumentLineRepository
from src.domain.document_state import DocumentStateMachine
from src.domain.fiscal_document import FiscalDocument
from src.domain.fiscal_settings import FiscalSettings
from .dtos import CreateDraftCommandDTO, DocumentResponseDTO

logger = logging.getLogger(__name__)


class CreateDraft:
    """
    Use Case: Create a draft document

    Business Rules:
    1. Only FTE, FRE and TVE drafts are created here; credit notes are
       created from the document they reverse (CreateCreditNote)
    2. The client, when given, must exist in the client directory; its
       name, tax id and address are snapshotted on the draft
    3. Lines without a tax rate get the configured default rate
    4. Totals are computed immediately; nothing is validated for emission yet

    Flow:
    1. Check document type
    2. Resolve client snapshot
    3. Build draft and compute totals
    4. Persist draft and lines
    5. Commit transaction
    """

    def __init__(
        self,
        uow: UnitOfWork,
        document_repo: FiscalDocumentRepository,
        line_repo: DocumentLineRepository,
        client_directory: ClientDirectory,
        settings: FiscalSettings,
    ):
        self.uow = uow
        self.document_repo = document_repo
        self.line_repo = line_repo
        self.client_directory = client_directory
        self.settings = settings
        self.state_machine = DocumentStateMachine(settings.withholding_rate)

    async def execute(self, command: CreateDraftCommandDTO) -> Result[DocumentResponseDTO]:
        """
        Execute draft creation

        Args:
            command: CreateDraftCommandDTO with type, client, items and flags

        Returns:
            Result[DocumentResponseDTO]: Success with the draft or error
        """
        try:
            # Step 1: Check document type
            document_type = command.document_type
            if not document_type.is_emittable or document_type.is_credit_note:
                return Return.err(
                    Error(
                        code="UNSUPPORTED_DOCUMENT_TYPE",
                        message=f"Drafts of type {document_type.value} cannot be created",
                        reason="Credit notes are created from the document they reverse"
                        if document_type.is_credit_note
                        else "Only FTE, FRE and TVE drafts are supported",
                    )
                )

            # Step 2: Resolve client snapshot
            client_name = ""
            client_tax_id = command.client_tax_id
            client_address = command.client_address
            if command.client_id is not None:
                client = await self.client_directory.get_by_id(command.client_id)
                if not client:
                    return Return.err(
                        Error(
                            code="CLIENT_NOT_FOUND",
                            message=f"Client {command.client_id} not found",
                        )
                    )
                client_name = client.name
                if client_tax_id is None:
                    client_tax_id = client.tax_id
                if client_address is None:
                    client_address = client.address

            # Step 3: Build draft and compute totals
            items = [item.to_item(self.settings.default_tax_rate) for item in command.items]
            document = FiscalDocument(
                document_type=document_type,
                document_date=command.document_date or date.today(),
                due_date=command.due_date,
                client_id=command.client_id,
                client_name=client_name,
                client_tax_id=client_tax_id,
                client_address=client_address,
                notes=command.notes,
                retention=command.retention,
                payment_method=command.payment_method,
            )
            self.state_machine.recalculate(document, items)

            # Step 4: Persist draft and lines
            created = await self.document_repo.create(document)
            lines = await self.line_repo.replace_lines(created.id, items)

            # Step 5: Commit transaction
            await self.uow.commit()

            logger.info(f"Draft {created.id} ({document_type.value}) created with {len(lines)} lines")
            return Return.ok(DocumentResponseDTO.build(created, lines, self.settings.qr_base_url))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="CREATE_DRAFT_FAILED",
                    message="Failed to create draft document",
                    reason=str(e),
                )
            )
