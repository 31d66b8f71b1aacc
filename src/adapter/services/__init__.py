from .unit_of_work import SqlAlchemyUnitOfWork
from .ledger_service import (
    LoggingLedgerService,
    WebhookLedgerService,
    CompositeLedgerService,
    create_ledger_service,
)
from .fiscal_authority_service import (
    LoggingFiscalAuthorityService,
    HttpFiscalAuthorityService,
    create_fiscal_authority_service,
)

__all__ = [
    "SqlAlchemyUnitOfWork",
    "LoggingLedgerService",
    "WebhookLedgerService",
    "CompositeLedgerService",
    "create_ledger_service",
    "LoggingFiscalAuthorityService",
    "HttpFiscalAuthorityService",
    "create_fiscal_authority_service",
]
