"""
Django Stockroom: department inventory transfers and reconciliation.

Usage:
    from stockroom import stockroom, StockroomError

    transfer = stockroom.create_transfer(bar, kitchen, [ItemLine(cola, 10)])
    stockroom.approve_transfer(transfer, kitchen)
    stockroom.reconcile(apply=False)
"""


def __getattr__(name):
    """Lazy import to avoid circular imports during app loading."""
    if name == 'stockroom':
        from stockroom.service import Stockroom
        return Stockroom
    elif name == 'StockroomError':
        from stockroom.exceptions import StockroomError
        return StockroomError
    elif name in _MODELS:
        from stockroom import models
        return getattr(models, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


_MODELS = (
    'Department',
    'Section',
    'InventoryItem',
    'LedgerRow',
    'ServiceOffering',
    'Transfer',
    'TransferLine',
    'Movement',
    'TransferStatus',
    'MovementType',
)

__all__ = [
    'stockroom',
    'StockroomError',
    *_MODELS,
]

__version__ = '0.1.0'
