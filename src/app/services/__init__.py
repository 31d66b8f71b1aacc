from .unit_of_work import UnitOfWork
from .ledger_service import LedgerService
from .fiscal_authority_service import FiscalAuthorityService, TransmissionResult
from .client_directory import ClientDirectory

__all__ = [
    "UnitOfWork",
    "LedgerService",
    "FiscalAuthorityService",
    "TransmissionResult",
    "ClientDirectory",
]
