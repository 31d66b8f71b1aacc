"""SQLAlchemy Document Line Repository Implementation"""

from typing import List, Sequence
from sqlalchemy import delete
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.document_line_repository import DocumentLineRepository
from src.domain.document_line import DocumentLine, LineItem
from src.domain.errors import DocumentNotEditableError, FinalizeInProgressError
from src.domain.fiscal_document import FiscalDocument, DocumentStatus


class SqlAlchemyDocumentLineRepository(DocumentLineRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_document_id(self, document_id: int) -> List[DocumentLine]:
        statement = (
            select(DocumentLine)
            .where(DocumentLine.document_id == document_id)
            .order_by(DocumentLine.position.asc())
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def replace_lines(self, document_id: int, items: Sequence[LineItem]) -> List[DocumentLine]:
        await self._ensure_unreserved_draft(document_id)
        await self.session.execute(
            delete(DocumentLine).where(DocumentLine.document_id == document_id)
        )
        lines = [
            DocumentLine.from_item(document_id, position, item)
            for position, item in enumerate(items)
        ]
        self.session.add_all(lines)
        await self.session.flush()
        return lines

    async def _ensure_unreserved_draft(self, document_id: int) -> None:
        """Lines are rewritten only while the owning document is an unreserved draft"""
        statement = select(FiscalDocument.status, FiscalDocument.sequence_number).where(
            FiscalDocument.id == document_id
        )
        owner = (await self.session.execute(statement)).one_or_none()
        if owner is None:
            return
        status, sequence_number = owner
        if status != DocumentStatus.DRAFT:
            raise DocumentNotEditableError(f"Document {document_id} is {status.value}; its lines are frozen")
        if sequence_number is not None:
            raise FinalizeInProgressError(
                f"Document {document_id} already holds sequence {sequence_number}; its lines are frozen"
            )
