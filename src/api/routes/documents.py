"""Fiscal Document API Routes

FastAPI routes for the draft lifecycle, issue, payment and transmission.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.error import ClientError
from src.api.schemas.document_request import (
    CreateDraftRequestSchema,
    UpdateDraftRequestSchema,
    CreditNoteRequestSchema,
    PaymentRequestSchema,
    VoidRequestSchema,
)
from src.app.use_cases.documents import (
    CreateDraft,
    UpdateDraft,
    FinalizeDocument,
    CreateCreditNote,
    RegisterPayment,
    VoidDocument,
    GetDocument,
    ListDocuments,
    TransmitDocument,
    CreateDraftCommandDTO,
    UpdateDraftCommandDTO,
    CreateCreditNoteCommandDTO,
    RegisterPaymentCommandDTO,
    VoidDocumentCommandDTO,
    DocumentResponseDTO,
    ListDocumentsQueryDTO,
    ListDocumentsResponseDTO,
    TransmissionResultDTO,
)
from src.app.services.fiscal_authority_service import FiscalAuthorityService
from src.app.services.ledger_service import LedgerService
from src.adapter.repositories import (
    SqlAlchemyFiscalDocumentRepository,
    SqlAlchemyDocumentLineRepository,
    SqlAlchemySeriesCounterRepository,
    SqlAlchemyClientDirectory,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import (
    get_session,
    get_fiscal_settings,
    get_ledger_service,
    get_fiscal_authority_service,
)
from src.domain.document_type import DocumentType
from src.domain.fiscal_document import DocumentStatus
from src.domain.fiscal_settings import FiscalSettings

router = APIRouter(prefix="/fiscal/documents", tags=["Fiscal Documents"])


def _error_example(code: str, message: str, details=None) -> dict:
    error = {"code": code, "message": message}
    if details:
        error["details"] = details
    return {"content": {"application/json": {"example": {"error": error}}}}


NOT_FOUND = {"description": "Document not found", **_error_example("DOCUMENT_NOT_FOUND", "Document 42 not found")}
NOT_EDITABLE = {
    "description": "Document is not a draft, or finalize is in progress",
    **_error_example("DOCUMENT_NOT_EDITABLE", "Document FTE A2024/007 is issued and cannot be modified"),
}


@router.post(
    "",
    response_model=DocumentResponseDTO,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"description": "Client not found", **_error_example("CLIENT_NOT_FOUND", "Client 9 not found")},
        400: {
            "description": "Unsupported document type",
            **_error_example("UNSUPPORTED_DOCUMENT_TYPE", "Drafts of type RCE cannot be created"),
        },
    },
)
async def create_draft(
    request: CreateDraftRequestSchema,
    session: AsyncSession = Depends(get_session),
    settings: FiscalSettings = Depends(get_fiscal_settings),
):
    """
    Create a draft document.

    Drafts are fully mutable and are not validated for emission until
    they are finalized. Lines without a tax rate get the default VAT rate.

    **Returns:**
    - 201: Draft created
    - 404: Client not found
    - 400: Unsupported document type
    """
    use_case = CreateDraft(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyFiscalDocumentRepository(session),
        SqlAlchemyDocumentLineRepository(session),
        SqlAlchemyClientDirectory(session),
        settings,
    )
    result = await use_case.execute(CreateDraftCommandDTO(**request.model_dump()))

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value


@router.get("", response_model=ListDocumentsResponseDTO)
async def list_documents(
    status_filter: Optional[DocumentStatus] = Query(default=None, alias="status"),
    document_type: Optional[DocumentType] = Query(default=None),
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    session: AsyncSession = Depends(get_session),
):
    """List documents, newest first, optionally filtered by status and type."""
    use_case = ListDocuments(SqlAlchemyFiscalDocumentRepository(session))
    result = await use_case.execute(
        ListDocumentsQueryDTO(status=status_filter, document_type=document_type, limit=limit, offset=offset)
    )

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value


@router.get("/{document_id}", response_model=DocumentResponseDTO, responses={404: NOT_FOUND})
async def get_document(
    document_id: int,
    session: AsyncSession = Depends(get_session),
    settings: FiscalSettings = Depends(get_fiscal_settings),
):
    """Retrieve a document with its lines and verification URL."""
    use_case = GetDocument(
        SqlAlchemyFiscalDocumentRepository(session),
        SqlAlchemyDocumentLineRepository(session),
        settings,
    )
    result = await use_case.execute(document_id)

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value


@router.patch(
    "/{document_id}",
    response_model=DocumentResponseDTO,
    responses={404: NOT_FOUND, 409: NOT_EDITABLE},
)
async def update_draft(
    document_id: int,
    request: UpdateDraftRequestSchema,
    session: AsyncSession = Depends(get_session),
    settings: FiscalSettings = Depends(get_fiscal_settings),
):
    """
    Edit a draft. Only the fields present in the body are changed;
    `items` replaces the whole line list. Totals are recomputed.

    **Returns:**
    - 200: Draft updated
    - 404: Document or client not found
    - 409: Document is issued, or finalize is in progress
    """
    use_case = UpdateDraft(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyFiscalDocumentRepository(session),
        SqlAlchemyDocumentLineRepository(session),
        SqlAlchemyClientDirectory(session),
        settings,
    )
    command = UpdateDraftCommandDTO(document_id=document_id, **request.model_dump(exclude_unset=True))
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value


@router.post(
    "/{document_id}/finalize",
    response_model=DocumentResponseDTO,
    responses={
        404: NOT_FOUND,
        422: {
            "description": "Draft is not ready to be issued",
            **_error_example(
                "VALIDATION_FAILED",
                "Document is not ready to be issued",
                [{"field": "client_tax_id", "message": "Client tax id is required."}],
            ),
        },
    },
)
async def finalize_document(
    document_id: int,
    session: AsyncSession = Depends(get_session),
    settings: FiscalSettings = Depends(get_fiscal_settings),
    ledger_service: LedgerService = Depends(get_ledger_service),
):
    """
    Issue a draft: validate, allocate the sequence number, encode the
    45 character identifier and freeze the document.

    Calling it again on a document whose finalize was interrupted resumes
    with the same sequence number; calling it on an issued document
    returns it unchanged.

    **Returns:**
    - 200: Document issued
    - 404: Document not found
    - 422: Validation failed (field-tagged details)
    """
    use_case = FinalizeDocument(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyFiscalDocumentRepository(session),
        SqlAlchemyDocumentLineRepository(session),
        SqlAlchemySeriesCounterRepository(session),
        ledger_service,
        settings,
    )
    result = await use_case.execute(document_id)

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value


@router.post(
    "/{document_id}/credit-notes",
    response_model=DocumentResponseDTO,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {
            "description": "Referenced document not found",
            **_error_example("REFERENCE_DOCUMENT_NOT_FOUND", "Document 42 not found"),
        },
        400: {
            "description": "Referenced document cannot be credited",
            **_error_example("INVALID_REFERENCE_DOCUMENT", "A credit note cannot be credited"),
        },
    },
)
async def create_credit_note(
    document_id: int,
    request: CreditNoteRequestSchema,
    session: AsyncSession = Depends(get_session),
    settings: FiscalSettings = Depends(get_fiscal_settings),
):
    """Create a credit-note draft reversing (some of) the lines of `document_id`."""
    use_case = CreateCreditNote(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyFiscalDocumentRepository(session),
        SqlAlchemyDocumentLineRepository(session),
        settings,
    )
    command = CreateCreditNoteCommandDTO(reference_document_id=document_id, **request.model_dump())
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value


@router.post(
    "/{document_id}/payments",
    response_model=DocumentResponseDTO,
    responses={
        404: NOT_FOUND,
        409: {
            "description": "Document settled on issue or not payable",
            **_error_example("ALREADY_SETTLED", "FRE documents are settled when issued"),
        },
    },
)
async def register_payment(
    document_id: int,
    request: PaymentRequestSchema,
    session: AsyncSession = Depends(get_session),
    settings: FiscalSettings = Depends(get_fiscal_settings),
    ledger_service: LedgerService = Depends(get_ledger_service),
):
    """Register the payment of an issued invoice (issued -> paid)."""
    use_case = RegisterPayment(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyFiscalDocumentRepository(session),
        SqlAlchemyDocumentLineRepository(session),
        ledger_service,
        settings,
    )
    command = RegisterPaymentCommandDTO(document_id=document_id, **request.model_dump())
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value


@router.post(
    "/{document_id}/void",
    response_model=DocumentResponseDTO,
    responses={
        404: NOT_FOUND,
        409: {
            "description": "Document cannot be voided",
            **_error_example("INVALID_STATUS_TRANSITION", "Cannot move document FTE A2024/007 from paid to void"),
        },
    },
)
async def void_document(
    document_id: int,
    request: VoidRequestSchema,
    session: AsyncSession = Depends(get_session),
    settings: FiscalSettings = Depends(get_fiscal_settings),
):
    """Cancel an issued document. Totals and identifier are kept."""
    use_case = VoidDocument(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyFiscalDocumentRepository(session),
        SqlAlchemyDocumentLineRepository(session),
        settings,
    )
    result = await use_case.execute(VoidDocumentCommandDTO(document_id=document_id, reason=request.reason))

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value


@router.post(
    "/{document_id}/transmit",
    response_model=TransmissionResultDTO,
    responses={
        404: NOT_FOUND,
        409: {
            "description": "Document is a draft or already transmitted",
            **_error_example("TRANSMISSION_NOT_ALLOWED", "Document FTE A2024/007 cannot be transmitted"),
        },
        503: {
            "description": "No fiscal authority endpoint is configured",
            **_error_example("FISCAL_AUTHORITY_NOT_CONFIGURED", "No fiscal authority endpoint is configured"),
        },
    },
)
async def transmit_document(
    document_id: int,
    session: AsyncSession = Depends(get_session),
    settings: FiscalSettings = Depends(get_fiscal_settings),
    fiscal_authority: FiscalAuthorityService = Depends(get_fiscal_authority_service),
):
    """
    Transmit an issued document to the tax authority now.

    A failed delivery is still a 200: the response carries
    `fiscal_status=failed` and the error, and the attempt can be retried.
    Without a configured authority endpoint nothing is sent (503).
    """
    use_case = TransmitDocument(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyFiscalDocumentRepository(session),
        SqlAlchemyDocumentLineRepository(session),
        fiscal_authority,
        settings,
    )
    result = await use_case.execute(document_id)

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value
