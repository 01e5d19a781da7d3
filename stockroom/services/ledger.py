"""
Ledger store: quantity rows per (item, department, section).

Mutations lock the row with select_for_update() and apply an F() update
guarded by the invariant, so a concurrent writer can never push quantity
below zero or below the reserved floor.

The ledger never writes Movements: the orchestrating service records the
business intent in the same transaction.
"""

import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import F

from stockroom.exceptions import StockroomError
from stockroom.models.ledger import LedgerRow

logger = logging.getLogger('stockroom')


def _check_amount(amount) -> None:
    if amount is None or amount <= 0:
        raise StockroomError('INVALID_QUANTITY', requested=amount)


def _check_section(department, section) -> None:
    if section is not None and section.department_id != department.pk:
        raise StockroomError(
            'INVALID_REQUEST',
            'Section does not belong to the department',
            department=department.code,
            section=section.code,
        )


class LedgerStore:
    """Ledger row lookups and atomic quantity updates."""

    # ══════════════════════════════════════════════════════════════
    # QUERIES
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def get_row(cls, item, department, section=None) -> LedgerRow | None:
        """Row at an exact coordinate, or None."""
        return LedgerRow.objects.for_item(item).at_location(department, section).first()

    @classmethod
    def available(cls, item, department=None, section=None) -> Decimal:
        """
        Unreserved quantity of an item.

        Args:
            item: InventoryItem
            department: Restrict to a department (None = everywhere)
            section: Restrict to a section of ``department``
        """
        rows = LedgerRow.objects.for_item(item)
        if department is not None:
            rows = rows.at_location(department, section)
        return sum((row.available for row in rows), Decimal('0'))

    @classmethod
    def distributed_total(cls, item) -> Decimal:
        """Sum of quantity across every row of the item."""
        return LedgerRow.objects.for_item(item).total_quantity()

    @classmethod
    def list_rows(cls, item=None, department=None, section=None,
                  include_empty: bool = False):
        """List rows with filters."""
        qs = LedgerRow.objects.select_related('item', 'department', 'section')

        if item is not None:
            qs = qs.for_item(item)

        if department is not None:
            if section is not None:
                qs = qs.at_location(department, section)
            else:
                qs = qs.filter(department=department)

        if not include_empty:
            qs = qs.non_empty()

        return qs.order_by('item__sku', 'department__code', 'section__code')

    # ══════════════════════════════════════════════════════════════
    # MUTATIONS
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def get_or_create(cls, item, department, section=None,
                      unit_price: Decimal | None = None) -> LedgerRow:
        """
        Existing row at the coordinate, or a fresh zero-quantity row.

        A new row snapshots ``unit_price`` (falls back to the catalog price).
        """
        _check_section(department, section)
        price = unit_price if unit_price is not None else item.unit_price

        with transaction.atomic():
            row, created = LedgerRow.objects.get_or_create(
                item=item,
                department=department,
                section=section,
                defaults={'unit_price': price},
            )

        if created:
            logger.debug(
                "stock.ledger.row_created",
                extra={"row_id": row.pk, "item": item.sku, "location": row.location_label},
            )
        return row

    @classmethod
    def lock_rows(cls, *rows: LedgerRow) -> list[LedgerRow]:
        """
        Lock several rows in pk order.

        Must run inside the caller's transaction. Writers touching the same
        rows always acquire them in the same order.
        """
        pks = sorted({row.pk for row in rows})
        return list(LedgerRow.objects.select_for_update().filter(pk__in=pks).order_by('pk'))

    @classmethod
    def decrement(cls, row: LedgerRow, amount: Decimal) -> LedgerRow:
        """
        Remove ``amount`` from the row.

        Raises:
            StockroomError('INSUFFICIENT_QUANTITY'): If amount > quantity - reserved
            StockroomError('INVALID_QUANTITY'): If amount <= 0

        Concurrency:
            - Joins the caller's transaction (opens one if there is none)
            - Locks the row, re-checks, then applies a guarded F() update
        """
        _check_amount(amount)

        with transaction.atomic():
            locked = LedgerRow.objects.select_for_update().get(pk=row.pk)

            if locked.available < amount:
                raise StockroomError(
                    'INSUFFICIENT_QUANTITY',
                    available=locked.available,
                    requested=amount,
                    row_id=locked.pk,
                )

            updated = LedgerRow.objects.filter(
                pk=locked.pk,
                quantity__gte=F('reserved') + amount,
            ).update(quantity=F('quantity') - amount)

            if not updated:
                locked.refresh_from_db()
                raise StockroomError(
                    'INSUFFICIENT_QUANTITY',
                    available=locked.available,
                    requested=amount,
                    row_id=locked.pk,
                )

            locked.refresh_from_db()

        logger.debug(
            "stock.ledger.decrement",
            extra={"row_id": locked.pk, "qty": str(amount), "quantity": str(locked.quantity)},
        )
        return locked

    @classmethod
    def increment(cls, row: LedgerRow, amount: Decimal) -> LedgerRow:
        """
        Add ``amount`` to the row.

        Raises:
            StockroomError('INVALID_QUANTITY'): If amount <= 0
        """
        _check_amount(amount)

        with transaction.atomic():
            locked = LedgerRow.objects.select_for_update().get(pk=row.pk)
            LedgerRow.objects.filter(pk=locked.pk).update(quantity=F('quantity') + amount)
            locked.refresh_from_db()

        logger.debug(
            "stock.ledger.increment",
            extra={"row_id": locked.pk, "qty": str(amount), "quantity": str(locked.quantity)},
        )
        return locked

    @classmethod
    def reserve(cls, row: LedgerRow, amount: Decimal) -> LedgerRow:
        """
        Commit ``amount`` of the row to a pending fulfillment.

        Raises:
            StockroomError('INSUFFICIENT_AVAILABLE'): If amount > quantity - reserved
            StockroomError('INVALID_QUANTITY'): If amount <= 0
        """
        _check_amount(amount)

        with transaction.atomic():
            locked = LedgerRow.objects.select_for_update().get(pk=row.pk)

            if locked.available < amount:
                raise StockroomError(
                    'INSUFFICIENT_AVAILABLE',
                    available=locked.available,
                    requested=amount,
                    row_id=locked.pk,
                )

            LedgerRow.objects.filter(pk=locked.pk).update(reserved=F('reserved') + amount)
            locked.refresh_from_db()

        logger.debug(
            "stock.ledger.reserve",
            extra={"row_id": locked.pk, "qty": str(amount), "reserved": str(locked.reserved)},
        )
        return locked

    @classmethod
    def release(cls, row: LedgerRow, amount: Decimal) -> LedgerRow:
        """
        Give back ``amount`` of a previous reservation.

        Raises:
            StockroomError('INVALID_QUANTITY'): If amount <= 0 or amount > reserved
        """
        _check_amount(amount)

        with transaction.atomic():
            locked = LedgerRow.objects.select_for_update().get(pk=row.pk)

            if locked.reserved < amount:
                raise StockroomError(
                    'INVALID_QUANTITY',
                    'Cannot release more than is reserved',
                    reserved=locked.reserved,
                    requested=amount,
                    row_id=locked.pk,
                )

            LedgerRow.objects.filter(pk=locked.pk).update(reserved=F('reserved') - amount)
            locked.refresh_from_db()

        logger.debug(
            "stock.ledger.release",
            extra={"row_id": locked.pk, "qty": str(amount), "reserved": str(locked.reserved)},
        )
        return locked
