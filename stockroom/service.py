"""
Stockroom Service: The single public interface for all stockroom operations.

Usage:
    from stockroom import stockroom, StockroomError
    from stockroom.records import ItemLine, ServiceLine

    transfer = stockroom.create_transfer(bar, restaurant, [ItemLine(cola, Decimal('10'))])
    stockroom.approve_transfer(transfer, restaurant)
    stockroom.available(cola, restaurant)  # 10
"""

from stockroom.services import (
    DirectRelocation,
    LedgerStore,
    MovementLog,
    Reconciliation,
    ServiceRegistry,
    TransferWorkflow,
)


class Stockroom:
    """
    Single interface for all stockroom operations.

    Thin delegation to the service classes; see each for details.

    IMPORTANT: All state-changing methods run in one database transaction
    with row locks. Failures leave no partial state.
    """

    # ══════════════════════════════════════════════════════════════
    # LEDGER
    # ══════════════════════════════════════════════════════════════

    available = LedgerStore.available
    distributed_total = LedgerStore.distributed_total
    get_row = LedgerStore.get_row
    list_rows = LedgerStore.list_rows
    reserve = LedgerStore.reserve
    release = LedgerStore.release

    # ══════════════════════════════════════════════════════════════
    # SERVICES
    # ══════════════════════════════════════════════════════════════

    services_at = ServiceRegistry.services_at

    # ══════════════════════════════════════════════════════════════
    # TRANSFERS
    # ══════════════════════════════════════════════════════════════

    create_transfer = TransferWorkflow.create
    approve_transfer = TransferWorkflow.approve
    reject_transfer = TransferWorkflow.reject
    get_transfer = TransferWorkflow.get
    list_transfers = TransferWorkflow.list_transfers

    # ══════════════════════════════════════════════════════════════
    # RELOCATION
    # ══════════════════════════════════════════════════════════════

    relocate_item = DirectRelocation.relocate_item
    relocate_service = DirectRelocation.relocate_service

    # ══════════════════════════════════════════════════════════════
    # AUDIT
    # ══════════════════════════════════════════════════════════════

    history = MovementLog.history
    reconcile = Reconciliation.reconcile
