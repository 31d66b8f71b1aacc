"""SQLAlchemy Client Directory Implementation"""

from typing import Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.services.client_directory import ClientDirectory
from src.domain.client import Client


class SqlAlchemyClientDirectory(ClientDirectory):
    """Read-only access to the clients table"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, client_id: int) -> Optional[Client]:
        statement = select(Client).where(Client.id == client_id)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()
