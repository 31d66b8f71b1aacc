"""GetDocument / ListDocuments Use Cases

Read-only access to drafts and issued documents.
"""

from libs.result import Result, Return, Error
from src.app.repositories.fiscal_document_repository import FiscalDocumentRepository
from src.app.repositories.document_line_repository import DocumentLineRepository
from src.domain.fiscal_settings import FiscalSettings
from .dtos import (
    DocumentResponseDTO,
    DocumentSummaryDTO,
    ListDocumentsQueryDTO,
    ListDocumentsResponseDTO,
)


class GetDocument:
    """Use Case: Retrieve one document with its lines"""

    def __init__(
        self,
        document_repo: FiscalDocumentRepository,
        line_repo: DocumentLineRepository,
        settings: FiscalSettings,
    ):
        self.document_repo = document_repo
        self.line_repo = line_repo
        self.settings = settings

    async def execute(self, document_id: int) -> Result[DocumentResponseDTO]:
        try:
            document = await self.document_repo.get_by_id(document_id)
            if not document:
                return Return.err(
                    Error(
                        code="DOCUMENT_NOT_FOUND",
                        message=f"Document {document_id} not found",
                    )
                )

            lines = await self.line_repo.get_by_document_id(document.id)
            return Return.ok(DocumentResponseDTO.build(document, lines, self.settings.qr_base_url))

        except Exception as e:
            return Return.err(
                Error(
                    code="GET_DOCUMENT_FAILED",
                    message="Failed to retrieve document",
                    reason=str(e),
                )
            )


class ListDocuments:
    """
    Use Case: List documents, newest first

    Optional filters on status and document type, offset pagination.
    """

    def __init__(self, document_repo: FiscalDocumentRepository):
        self.document_repo = document_repo

    async def execute(self, query: ListDocumentsQueryDTO) -> Result[ListDocumentsResponseDTO]:
        try:
            documents = await self.document_repo.list_documents(
                status=query.status,
                document_type=query.document_type,
                limit=query.limit,
                offset=query.offset,
            )
            return Return.ok(
                ListDocumentsResponseDTO(
                    documents=[DocumentSummaryDTO.from_document(d) for d in documents],
                    limit=query.limit,
                    offset=query.offset,
                )
            )

        except Exception as e:
            return Return.err(
                Error(
                    code="LIST_DOCUMENTS_FAILED",
                    message="Failed to list documents",
                    reason=str(e),
                )
            )
