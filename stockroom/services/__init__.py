"""
Stockroom services: one class per concern, all classmethods.

    from stockroom.services import LedgerStore, TransferWorkflow, DirectRelocation
"""

from stockroom.services.ledger import LedgerStore
from stockroom.services.movements import MovementLog
from stockroom.services.reconciliation import Reconciliation
from stockroom.services.registry import ServiceRegistry
from stockroom.services.relocation import DirectRelocation
from stockroom.services.transfers import TransferWorkflow

__all__ = [
    'LedgerStore',
    'ServiceRegistry',
    'MovementLog',
    'TransferWorkflow',
    'DirectRelocation',
    'Reconciliation',
]
