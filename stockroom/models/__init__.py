"""
Stockroom Models.

Core models for department inventory:
- Department / Section: Where stock and services live
- InventoryItem: Master count per catalog item
- LedgerRow: Quantity of an item at a location
- ServiceOffering: Indivisible service at one location
- Transfer / TransferLine: Cross-department requests
- Movement: Immutable audit trail
"""

from stockroom.models.department import Department, Section
from stockroom.models.enums import LineKind, MovementType, PricingModel, TransferStatus
from stockroom.models.item import InventoryItem
from stockroom.models.ledger import LedgerRow
from stockroom.models.movement import Movement
from stockroom.models.service_offering import ServiceOffering
from stockroom.models.transfer import Transfer, TransferLine

__all__ = [
    'TransferStatus',
    'LineKind',
    'MovementType',
    'PricingModel',
    'Department',
    'Section',
    'InventoryItem',
    'LedgerRow',
    'ServiceOffering',
    'Transfer',
    'TransferLine',
    'Movement',
]
