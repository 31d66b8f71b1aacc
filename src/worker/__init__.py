"""Background workers for the fiscal document engine"""
from .fiscal_transmitter import FiscalTransmissionWorker

__all__ = ["FiscalTransmissionWorker"]
