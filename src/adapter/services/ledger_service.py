"""Ledger Service Implementations

Provides concrete sinks for settlement events.
"""

import logging
from typing import Optional
import httpx
from src.app.services.ledger_service import LedgerService
from src.domain.settlement import SettlementEvent

logger = logging.getLogger(__name__)


class LoggingLedgerService(LedgerService):
    """
    Ledger service that logs settlements

    Useful for development and testing, or as a fallback.
    """

    async def record_settlement(self, event: SettlementEvent) -> bool:
        logger.info(
            f"[SETTLEMENT] {event.kind} {event.display_id} "
            f"client={event.client_name!r} amount={event.amount}"
        )
        return True


class WebhookLedgerService(LedgerService):
    """
    Ledger service that POSTs settlement events as JSON

    The body is the event's JSON form, tagged by its ``kind`` field.
    """

    def __init__(self, webhook_url: str, timeout: float = 10.0):
        """
        Initialize webhook ledger service

        Args:
            webhook_url: URL to POST settlements to
            timeout: Request timeout in seconds
        """
        self.webhook_url = webhook_url
        self.timeout = timeout

    async def record_settlement(self, event: SettlementEvent) -> bool:
        payload = event.model_dump(mode="json")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.webhook_url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
                response.raise_for_status()
                logger.info(
                    f"Settlement {event.kind} for {event.display_id} sent to {self.webhook_url}"
                )
                return True
        except httpx.HTTPError as e:
            logger.error(f"Failed to send settlement for {event.display_id}: {e}")
            return False


class CompositeLedgerService(LedgerService):
    """
    Ledger service that delegates to multiple sinks

    Succeeds if at least one sink accepted the event.
    """

    def __init__(self, services: list[LedgerService]):
        self.services = services

    async def record_settlement(self, event: SettlementEvent) -> bool:
        success = False
        for service in self.services:
            try:
                if await service.record_settlement(event):
                    success = True
            except Exception as e:
                logger.error(f"Ledger service {type(service).__name__} failed: {e}")
        return success


def create_ledger_service(webhook_url: Optional[str] = None) -> LedgerService:
    """
    Factory function to create the configured ledger service

    Args:
        webhook_url: Optional webhook URL. If provided, creates a composite
                     service with logging + webhook. Otherwise, just logging.

    Returns:
        Configured LedgerService
    """
    services: list[LedgerService] = [LoggingLedgerService()]

    if webhook_url:
        services.append(WebhookLedgerService(webhook_url))

    if len(services) == 1:
        return services[0]

    return CompositeLedgerService(services)
