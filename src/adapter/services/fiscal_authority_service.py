"""Fiscal Authority Service Implementations

Transmission of issued documents to the tax authority over HTTP.
"""

import logging
from typing import List, Optional
import httpx
from src.app.services.fiscal_authority_service import FiscalAuthorityService, TransmissionResult
from src.domain.document_line import DocumentLine
from src.domain.fiscal_document import FiscalDocument

logger = logging.getLogger(__name__)

NOT_CONFIGURED = "No fiscal authority endpoint configured"


def build_transmission_payload(document: FiscalDocument, lines: List[DocumentLine]) -> dict:
    """JSON body describing one issued document"""
    return {
        "iud": document.iud,
        "document_number": document.display_id,
        "document_type": document.document_type.value,
        "type_code": document.document_type.type_code,
        "status": document.status.value,
        "issue_date": document.document_date.isoformat(),
        "due_date": document.due_date.isoformat() if document.due_date else None,
        "customer": {
            "name": document.client_name,
            "tax_id": document.client_tax_id,
            "address": document.client_address,
        },
        "reference_iud": document.reference_iud,
        "reason": document.reason,
        "lines": [
            {
                "position": line.position,
                "description": line.description,
                "item_code": line.item_code,
                "quantity": str(line.quantity),
                "unit_price": str(line.unit_price),
                "tax_rate": str(line.tax_rate),
                "line_total": str(line.line_total),
            }
            for line in lines
        ],
        "totals": {
            "subtotal": str(document.subtotal),
            "tax_total": str(document.tax_total),
            "withholding_total": str(document.withholding_total),
            "total": str(document.total),
        },
    }


class LoggingFiscalAuthorityService(FiscalAuthorityService):
    """
    Fiscal authority stand-in that only logs

    Used when no authority endpoint is configured (development, training).
    Nothing is sent, so every attempt is reported as undelivered.
    """

    delivers = False

    async def transmit(self, document: FiscalDocument, lines: List[DocumentLine]) -> TransmissionResult:
        logger.warning(f"[FISCAL] not transmitting {document.display_id} iud={document.iud} ({len(lines)} lines)")
        return TransmissionResult(success=False, error=NOT_CONFIGURED)


class HttpFiscalAuthorityService(FiscalAuthorityService):
    """
    Sends documents to the authority's REST endpoint

    Delivery errors are reported in the result rather than raised, so the
    caller can record them and retry later.
    """

    def __init__(self, endpoint_url: str, api_key: Optional[str] = None, timeout: float = 15.0):
        """
        Args:
            endpoint_url: URL accepting one document per POST
            api_key: Optional bearer token
            timeout: Request timeout in seconds
        """
        self.endpoint_url = endpoint_url
        self.api_key = api_key
        self.timeout = timeout

    async def transmit(self, document: FiscalDocument, lines: List[DocumentLine]) -> TransmissionResult:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.endpoint_url,
                    json=build_transmission_payload(document, lines),
                    headers=headers,
                )
                response.raise_for_status()
                logger.info(f"Document {document.display_id} transmitted (iud={document.iud})")
                return TransmissionResult(success=True)
        except httpx.HTTPStatusError as e:
            message = f"HTTP {e.response.status_code}: {e.response.text[:200]}"
            logger.error(f"Transmission of {document.display_id} rejected: {message}")
            return TransmissionResult(success=False, error=message)
        except httpx.HTTPError as e:
            logger.error(f"Transmission of {document.display_id} failed: {e}")
            return TransmissionResult(success=False, error=str(e) or type(e).__name__)


def create_fiscal_authority_service(
    endpoint_url: Optional[str] = None,
    api_key: Optional[str] = None,
) -> FiscalAuthorityService:
    """HTTP service when an endpoint is configured, logging stand-in otherwise"""
    if endpoint_url:
        return HttpFiscalAuthorityService(endpoint_url, api_key=api_key)
    return LoggingFiscalAuthorityService()
