"""UpdateDraft Use Case

Applies edits to a draft document and recomputes its totals.
"""

from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.client_directory import ClientDirectory
from src.app.repositories.fiscal_document_repository import FiscalDocumentRepository
from src.app.repositories.document_line_repository import DocumentLineRepository
from src.domain.document_state import DocumentStateMachine
from src.domain.errors import DocumentNotEditableError
from src.domain.fiscal_settings import FiscalSettings
from .dtos import UpdateDraftCommandDTO, DocumentResponseDTO


class UpdateDraft:
    """
    Use Case: Edit a draft document

    Business Rules:
    1. Only drafts without a reserved sequence number can be edited
    2. A draft cannot be turned into a credit note or back
    3. Credit note lines are fixed when the credit note is created
    4. Changing the client refreshes the name, tax id and address snapshot
       unless the request overrides them
    5. Every edit recomputes the totals

    Flow:
    1. Load draft and check it is editable
    2. Check type and line locks
    3. Resolve new client snapshot
    4. Apply changes and recompute totals
    5. Persist document (and lines when replaced)
    6. Commit transaction
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

    async def execute(self, command: UpdateDraftCommandDTO) -> Result[DocumentResponseDTO]:
        try:
            # Step 1: Load draft and check it is editable
            document = await self.document_repo.get_by_id(command.document_id, for_update=True)
            if not document:
                return Return.err(
                    Error(
                        code="DOCUMENT_NOT_FOUND",
                        message=f"Document {command.document_id} not found",
                    )
                )

            try:
                self.state_machine.ensure_editable(document)
            except DocumentNotEditableError as e:
                return Return.err(Error(code=e.code, message=str(e)))

            changes = command.model_dump(exclude_unset=True, exclude={"document_id", "items"})
            for required in ("document_type", "document_date", "retention"):
                if changes.get(required, False) is None:
                    del changes[required]

            # Step 2: Check type and line locks
            new_type = changes.get("document_type")
            if new_type is not None and new_type != document.document_type:
                if new_type.is_credit_note or document.document_type.is_credit_note:
                    return Return.err(
                        Error(
                            code="DOCUMENT_TYPE_LOCKED",
                            message="A draft cannot be converted to or from a credit note",
                        )
                    )
                if not new_type.is_emittable:
                    return Return.err(
                        Error(
                            code="UNSUPPORTED_DOCUMENT_TYPE",
                            message=f"Drafts of type {new_type.value} cannot be issued",
                        )
                    )

            if command.items is not None and document.document_type.is_credit_note:
                return Return.err(
                    Error(
                        code="CREDIT_NOTE_LINES_LOCKED",
                        message="Credit note lines are chosen when the credit note is created",
                    )
                )

            # Step 3: Resolve new client snapshot
            if changes.get("client_id") is not None and changes["client_id"] != document.client_id:
                client = await self.client_directory.get_by_id(changes["client_id"])
                if not client:
                    return Return.err(
                        Error(
                            code="CLIENT_NOT_FOUND",
                            message=f"Client {changes['client_id']} not found",
                        )
                    )
                changes["client_name"] = client.name
                changes.setdefault("client_tax_id", client.tax_id)
                changes.setdefault("client_address", client.address)
            elif "client_id" in changes and changes["client_id"] is None:
                changes["client_name"] = ""

            # Step 4: Apply changes and recompute totals
            if command.items is not None:
                items = [item.to_item(self.settings.default_tax_rate) for item in command.items]
            else:
                items = [line.to_item() for line in await self.line_repo.get_by_document_id(document.id)]

            self.state_machine.edit(document, items, **changes)

            # Step 5: Persist document (and lines when replaced)
            updated = await self.document_repo.update(document)
            if command.items is not None:
                lines = await self.line_repo.replace_lines(updated.id, items)
            else:
                lines = await self.line_repo.get_by_document_id(updated.id)

            # Step 6: Commit transaction
            await self.uow.commit()

            return Return.ok(DocumentResponseDTO.build(updated, lines, self.settings.qr_base_url))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="UPDATE_DRAFT_FAILED",
                    message="Failed to update draft document",
                    reason=str(e),
                )
            )
