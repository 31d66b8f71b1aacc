"""Client Directory Interface

Read-only lookup of clients referenced by draft documents.
"""

from abc import ABC, abstractmethod
from typing import Optional
from src.domain.client import Client


class ClientDirectory(ABC):
    @abstractmethod
    async def get_by_id(self, client_id: int) -> Optional[Client]:
        """
        Retrieve client by ID

        Args:
            client_id: Client ID

        Returns:
            Client if found, None otherwise
        """
        pass
