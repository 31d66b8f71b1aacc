"""SQLAlchemy Fiscal Document Repository Implementation

Implements fiscal document persistence using SQLAlchemy async session.
"""

from typing import Optional, List, Sequence
from datetime import datetime
from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.fiscal_document_repository import FiscalDocumentRepository
from src.domain.document_type import DocumentType
from src.domain.fiscal_document import FiscalDocument, DocumentStatus, FiscalStatus


class SqlAlchemyFiscalDocumentRepository(FiscalDocumentRepository):
    """
    SQLAlchemy implementation of FiscalDocumentRepository

    Uses async session for database operations.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, document: FiscalDocument) -> FiscalDocument:
        self.session.add(document)
        await self.session.flush()
        await self.session.refresh(document)
        return document

    async def get_by_id(self, document_id: int, for_update: bool = False) -> Optional[FiscalDocument]:
        statement = select(FiscalDocument).where(FiscalDocument.id == document_id)

        if for_update:
            statement = statement.with_for_update()

        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_by_iud(self, iud: str) -> Optional[FiscalDocument]:
        statement = select(FiscalDocument).where(FiscalDocument.iud == iud)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def update(self, document: FiscalDocument) -> FiscalDocument:
        """
        Update an existing document

        The before_update hook on FiscalDocument rejects changes to frozen
        columns of issued documents at flush time.
        """
        document.updated_at = datetime.utcnow()
        self.session.add(document)
        await self.session.flush()
        await self.session.refresh(document)
        return document

    async def reserve_sequence(self, document: FiscalDocument) -> bool:
        statement = (
            update(FiscalDocument)
            .where(FiscalDocument.id == document.id)
            .where(FiscalDocument.status == DocumentStatus.DRAFT)
            .where(FiscalDocument.sequence_number.is_(None))
            .values(
                series=document.series,
                sequence_number=document.sequence_number,
                random_code=document.random_code,
                updated_at=datetime.utcnow(),
            )
        )
        return await self._apply_if_unchanged(document, statement)

    async def issue_draft(self, document: FiscalDocument) -> bool:
        statement = (
            update(FiscalDocument)
            .where(FiscalDocument.id == document.id)
            .where(FiscalDocument.status == DocumentStatus.DRAFT)
            .where(FiscalDocument.sequence_number == document.sequence_number)
            .values(
                status=document.status,
                fiscal_status=document.fiscal_status,
                iud=document.iud,
                display_id=document.display_id,
                issued_at=document.issued_at,
                updated_at=document.updated_at,
            )
        )
        return await self._apply_if_unchanged(document, statement)

    async def _apply_if_unchanged(self, document: FiscalDocument, statement) -> bool:
        # Pending attribute changes are dropped; the row is the only source of truth
        self.session.expire(document)
        result = await self.session.execute(statement.execution_options(synchronize_session=False))
        await self.session.refresh(document)
        return result.rowcount == 1

    async def list_documents(
        self,
        status: Optional[DocumentStatus] = None,
        document_type: Optional[DocumentType] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[FiscalDocument]:
        statement = select(FiscalDocument)

        if status:
            statement = statement.where(FiscalDocument.status == status)
        if document_type:
            statement = statement.where(FiscalDocument.document_type == document_type)

        statement = statement.order_by(FiscalDocument.created_at.desc(), FiscalDocument.id.desc())
        statement = statement.limit(limit).offset(offset)

        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def list_for_transmission(
        self,
        fiscal_statuses: Sequence[FiscalStatus],
        max_attempts: int,
        limit: int = 50,
    ) -> List[FiscalDocument]:
        statement = (
            select(FiscalDocument)
            .where(FiscalDocument.status != DocumentStatus.DRAFT)
            .where(FiscalDocument.fiscal_status.in_(list(fiscal_statuses)))
            .where(FiscalDocument.fiscal_attempts < max_attempts)
            .order_by(FiscalDocument.issued_at.asc(), FiscalDocument.id.asc())
            .limit(limit)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())
