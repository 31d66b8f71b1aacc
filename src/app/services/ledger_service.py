"""Ledger Service Interface

Defines the contract for recording settlements in the accounting ledger.
"""

from abc import ABC, abstractmethod
from src.domain.settlement import SettlementEvent


class LedgerService(ABC):
    """
    Abstract sink for settlement events

    Called after a document is issued or paid. Implementations may log,
    POST to a webhook, or write to an accounting system.
    """

    @abstractmethod
    async def record_settlement(self, event: SettlementEvent) -> bool:
        """
        Record a settlement event

        Args:
            event: ImmediateSettlement, PendingSettlement or PaymentSettlement

        Returns:
            True if the ledger accepted the event, False otherwise
        """
        pass
