"""
Reconciliation: repair drift between an item's master count and its rows.

For every item: delta = total_quantity - sum(row.quantity).

    delta > 0  -> surplus is placed on one candidate row
    delta < 0  -> shortfall is taken from rows with available stock,
                  largest first, never below ``reserved``
    delta == 0 -> nothing to do

``total_quantity`` is ground truth and is never written. Each item is
handled in its own transaction; a problem with one item is reported and
the run continues.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.db import DatabaseError

from stockroom.conf import stockroom_settings
from stockroom.db import atomic_operation
from stockroom.exceptions import StockroomError
from stockroom.models.department import Department
from stockroom.models.enums import MovementType
from stockroom.models.item import InventoryItem
from stockroom.models.ledger import LedgerRow
from stockroom.records import Adjustment, ReconciliationReport
from stockroom.services.ledger import LedgerStore
from stockroom.services.movements import MovementLog, new_reference

logger = logging.getLogger('stockroom')


@dataclass
class _Step:
    """Planned change; ``row`` is None when the row has to be created."""

    department: Department
    section: object
    delta: Decimal
    row: LedgerRow | None = None


class Reconciliation:
    """Offline drift detection and repair."""

    @classmethod
    def reconcile(cls, items=None, apply: bool = True, user=None) -> ReconciliationReport:
        """
        Reconcile items (all of them by default) in pk order.

        Args:
            items: Iterable of InventoryItem (None = every item)
            apply: False computes the same plan without writing anything
            user: Actor recorded on the adjustment Movements

        Returns:
            ReconciliationReport with the adjustments and unresolved issues
        """
        reference = new_reference('reconciliation')
        report = ReconciliationReport(reference=reference, applied=apply)

        if items is None:
            items = InventoryItem.objects.order_by('pk')
        else:
            items = sorted(items, key=lambda item: item.pk)

        for item in items:
            report.checked += 1
            try:
                if apply:
                    with atomic_operation():
                        adjustments, issues = cls._reconcile_item(item, reference, user, apply=True)
                else:
                    adjustments, issues = cls._reconcile_item(item, reference, user, apply=False)
            except (StockroomError, DatabaseError) as exc:
                adjustments, issues = [], [f"{item.sku}: {exc}"]

            for issue in issues:
                logger.warning(
                    "stock.reconciliation.issue",
                    extra={"reference": reference, "item": item.sku, "issue": issue},
                )

            report.adjustments.extend(adjustments)
            report.issues.extend(issues)

        logger.info(
            "stock.reconciliation.completed",
            extra={
                "reference": reference,
                "applied": apply,
                "checked": report.checked,
                "adjustments": len(report.adjustments),
                "issues": len(report.issues),
            },
        )
        return report

    # ══════════════════════════════════════════════════════════════
    # INTERNALS
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def _reconcile_item(cls, item, reference: str, user, apply: bool):
        """Plan (and optionally apply) the adjustments of one item."""
        items = InventoryItem.objects.filter(pk=item.pk)
        rows = LedgerRow.objects.filter(item_id=item.pk).order_by('pk')
        if apply:
            items = items.select_for_update()
            rows = rows.select_for_update()

        current = items.first()
        if current is None:
            raise StockroomError('NOT_FOUND', item_id=item.pk)
        rows = list(rows)

        distributed = sum((row.quantity for row in rows), Decimal('0'))
        delta = current.total_quantity - distributed
        if delta == 0:
            return [], []

        issues = []
        if delta > 0:
            step = cls._surplus_step(current, rows, delta)
            if step is None:
                return [], [f"{current.sku}: no department available for surplus {delta}"]
            steps = [step]
        else:
            steps, remainder = cls._shortfall_steps(rows, -delta)
            if remainder > 0:
                issues.append(
                    f"{current.sku}: shortfall of {remainder} could not be absorbed "
                    f"without going below reserved stock"
                )

        adjustments = [
            Adjustment(
                item_id=current.pk,
                sku=current.sku,
                department_code=step.department.code,
                section_code=getattr(step.section, 'code', None),
                delta=step.delta,
            )
            for step in steps
        ]

        if apply:
            for step in steps:
                cls._apply_step(current, step, reference, user, distributed)

        return adjustments, issues

    @classmethod
    def _surplus_step(cls, item, rows, delta) -> _Step | None:
        """
        Where surplus goes, in order of preference:

        1. existing row at an active department of the item's category
        2. department level of the first active department of that category
        3. first existing row
        4. the configured fallback department
        5. first active department
        """
        if item.category:
            for row in rows:
                if row.department.is_active and row.department.category == item.category:
                    return _Step(row.department, row.section, delta, row)

            matching = Department.objects.filter(
                is_active=True, category=item.category,
            ).order_by('code').first()
            if matching is not None:
                return cls._department_level_step(item, matching, delta)

        if rows:
            row = rows[0]
            return _Step(row.department, row.section, delta, row)

        fallback_code = stockroom_settings.RECONCILIATION_FALLBACK_DEPARTMENT
        if fallback_code:
            fallback = Department.objects.filter(code=fallback_code).first()
            if fallback is not None:
                return cls._department_level_step(item, fallback, delta)

        first_active = Department.objects.filter(is_active=True).order_by('code').first()
        if first_active is not None:
            return cls._department_level_step(item, first_active, delta)

        return None

    @classmethod
    def _department_level_step(cls, item, department, delta) -> _Step:
        return _Step(department, None, delta, LedgerStore.get_row(item, department))

    @classmethod
    def _shortfall_steps(cls, rows, shortfall):
        """Take ``shortfall`` from rows, largest available first."""
        candidates = sorted(
            (row for row in rows if row.available > 0),
            key=lambda row: (-row.available, row.pk),
        )

        steps = []
        remaining = shortfall
        for row in candidates:
            if remaining <= 0:
                break
            take = min(row.available, remaining)
            steps.append(_Step(row.department, row.section, -take, row))
            remaining -= take

        return steps, remaining

    @classmethod
    def _apply_step(cls, item, step: _Step, reference: str, user, distributed) -> None:
        if step.delta > 0:
            row = step.row or LedgerStore.get_or_create(item, step.department, step.section)
            row = LedgerStore.increment(row, step.delta)
        else:
            row = LedgerStore.decrement(step.row, -step.delta)

        MovementLog.record_item(
            MovementType.RECONCILIATION_ADJUST, row, step.delta, reference,
            user=user,
            reason='Reconciliation adjustment',
            expected=str(item.total_quantity),
            distributed=str(distributed),
        )

        logger.info(
            "stock.reconciliation.adjusted",
            extra={
                "reference": reference,
                "item": item.sku,
                "location": row.location_label,
                "delta": str(step.delta),
            },
        )
