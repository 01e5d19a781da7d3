"""
Transfer workflow: request, approval and execution of cross-department moves.

    create()  -> PENDING   (source department asks; nothing moves)
    approve() -> COMPLETED (destination accepts; every line moves or none)
    reject()  -> REJECTED  (destination refuses; nothing moves)

approve() and reject() lock the transfer row, so concurrent calls are
serialized: the loser sees a non-pending status and fails ALREADY_PROCESSED.
"""

import logging
from collections.abc import Iterable

from django.utils import timezone

from stockroom.db import atomic_operation, run_with_retry
from stockroom.exceptions import StockroomError
from stockroom.models.enums import LineKind, MovementType, TransferStatus
from stockroom.models.ledger import LedgerRow
from stockroom.models.service_offering import ServiceOffering
from stockroom.models.transfer import Transfer, TransferLine
from stockroom.records import ItemLine, LinePayload, Location, ServiceLine
from stockroom.services.ledger import LedgerStore, _check_amount, _check_section
from stockroom.services.movements import MovementLog
from stockroom.services.registry import ServiceRegistry

logger = logging.getLogger('stockroom')

DIRECTIONS = ('all', 'sent', 'received')


def _parse_transfer_id(transfer) -> int:
    """Extract PK from a Transfer, a pk, or a "transfer:{pk}" string."""
    if isinstance(transfer, Transfer):
        return transfer.pk
    if isinstance(transfer, int):
        return transfer
    if isinstance(transfer, str):
        value = transfer.split(':', 1)[1] if transfer.startswith('transfer:') else transfer
        try:
            return int(value)
        except ValueError:
            pass
    raise StockroomError('NOT_FOUND', transfer_id=transfer)


def _lock_transfer(pk: int) -> Transfer:
    try:
        return Transfer.objects.select_for_update().get(pk=pk)
    except Transfer.DoesNotExist:
        raise StockroomError('NOT_FOUND', transfer_id=f"transfer:{pk}") from None


def _authorize(transfer: Transfer, approver_department) -> None:
    """Only the receiving department may approve or reject."""
    if approver_department is None or approver_department.pk != transfer.to_department_id:
        raise StockroomError(
            'FORBIDDEN',
            transfer_id=transfer.transfer_id,
            approver=getattr(approver_department, 'code', None),
        )


def _require_pending(transfer: Transfer) -> None:
    if transfer.status != TransferStatus.PENDING:
        raise StockroomError(
            'ALREADY_PROCESSED',
            transfer_id=transfer.transfer_id,
            current=transfer.status,
            expected=TransferStatus.PENDING,
        )


class TransferWorkflow:
    """Transfer request state machine."""

    # ══════════════════════════════════════════════════════════════
    # QUERIES
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def get(cls, transfer) -> Transfer:
        """Transfer with its lines."""
        pk = _parse_transfer_id(transfer)
        try:
            return Transfer.objects.prefetch_related('lines__item', 'lines__service').get(pk=pk)
        except Transfer.DoesNotExist:
            raise StockroomError('NOT_FOUND', transfer_id=f"transfer:{pk}") from None

    @classmethod
    def list_transfers(cls, department, direction: str = 'all', status: str | None = None):
        """
        Transfers touching a department, newest first.

        Args:
            department: Department
            direction: 'sent', 'received' or 'all'
            status: Optional TransferStatus filter
        """
        if direction not in DIRECTIONS:
            raise StockroomError('INVALID_REQUEST', 'Unknown direction', direction=direction)

        if direction == 'sent':
            qs = Transfer.objects.sent_by(department)
        elif direction == 'received':
            qs = Transfer.objects.received_by(department)
        else:
            qs = Transfer.objects.involving(department)

        if status is not None:
            qs = qs.filter(status=status)

        return qs.select_related('from_department', 'to_department').prefetch_related('lines')

    # ══════════════════════════════════════════════════════════════
    # LIFECYCLE
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def create(cls, from_department, to_department, lines: Iterable[LinePayload], user=None,
               from_section=None, to_section=None, notes: str = '', **metadata) -> Transfer:
        """
        Create a pending transfer request.

        Availability is checked optimistically; nothing is reserved, so a
        request can still fail at approval if the source runs dry meanwhile.

        Args:
            lines: Iterable of ItemLine / ServiceLine

        Raises:
            StockroomError('INVALID_REQUEST'): Same department on both sides,
                no lines, duplicated line, or section outside its department
            StockroomError('INVALID_QUANTITY'): Item line quantity <= 0
            StockroomError('NOT_FOUND'): No source row for an item, or unknown service
            StockroomError('INSUFFICIENT_QUANTITY'): Source has less than requested
            StockroomError('NOT_FOUND_AT_SOURCE'): Service is not at the source
        """
        if from_department.pk == to_department.pk:
            raise StockroomError(
                'INVALID_REQUEST',
                'Source and destination departments must differ',
                department=from_department.code,
            )
        _check_section(from_department, from_section)
        _check_section(to_department, to_section)

        lines = list(lines)
        if not lines:
            raise StockroomError('INVALID_REQUEST', 'Transfer needs at least one line')

        seen = set()
        for line in lines:
            if isinstance(line, ItemLine):
                _check_amount(line.quantity)
                key = (LineKind.ITEM, line.item.pk)
            elif isinstance(line, ServiceLine):
                key = (LineKind.SERVICE, line.service.pk)
            else:
                raise StockroomError('INVALID_REQUEST', 'Unknown line type', line=repr(line))
            if key in seen:
                raise StockroomError('INVALID_REQUEST', 'Duplicated transfer line', line=repr(line))
            seen.add(key)

        source = Location.of(from_department, from_section)

        with atomic_operation():
            for line in lines:
                if isinstance(line, ItemLine):
                    cls._precheck_item(line, from_department, from_section)
                else:
                    cls._precheck_service(line, source)

            transfer = Transfer.objects.create(
                from_department=from_department,
                from_section=from_section,
                to_department=to_department,
                to_section=to_section,
                status=TransferStatus.PENDING,
                user=user,
                notes=notes,
                metadata=metadata,
            )
            TransferLine.objects.bulk_create([
                TransferLine(transfer=transfer, kind=LineKind.ITEM,
                             item=line.item, quantity=line.quantity)
                if isinstance(line, ItemLine) else
                TransferLine(transfer=transfer, kind=LineKind.SERVICE,
                             service=line.service)
                for line in lines
            ])

        logger.info(
            "stock.transfer.created",
            extra={
                "transfer_id": transfer.transfer_id,
                "from": from_department.code,
                "to": to_department.code,
                "lines": len(lines),
            },
        )
        return transfer

    @classmethod
    def approve(cls, transfer, approver_department, user=None) -> Transfer:
        """
        Approve and execute a pending transfer.

        1. Locks the transfer; checks destination authority and PENDING status
        2. Item lines: decrement source row, increment destination row
           (created with the source's price snapshot if missing)
        3. Service lines: relocate source -> destination
        4. One transfer_out and one transfer_in Movement per line
        5. Transition: PENDING -> COMPLETED

        Any failure rolls back every line; the request stays PENDING.

        Raises:
            StockroomError('NOT_FOUND'): Transfer does not exist
            StockroomError('FORBIDDEN'): Approver is not the destination
            StockroomError('ALREADY_PROCESSED'): Transfer is not PENDING
            StockroomError('INSUFFICIENT_QUANTITY'): Source ran dry since creation
            StockroomError('NOT_FOUND_AT_SOURCE'): Service left the source
            StockroomError('OPERATION_FAILED'): Transaction failed after retries
        """
        pk = _parse_transfer_id(transfer)

        def _execute() -> Transfer:
            with atomic_operation():
                locked = _lock_transfer(pk)
                _authorize(locked, approver_department)
                _require_pending(locked)

                lines = list(locked.lines.select_related('item', 'service'))
                # Rows are locked item by item, each pair in pk order
                item_lines = sorted(
                    (line for line in lines if line.kind == LineKind.ITEM),
                    key=lambda line: line.item_id,
                )
                service_lines = [line for line in lines if line.kind == LineKind.SERVICE]

                for line in item_lines:
                    cls._execute_item_line(locked, line, user)
                for line in service_lines:
                    cls._execute_service_line(locked, line, user)

                locked.status = TransferStatus.COMPLETED
                locked.resolved_at = timezone.now()
                locked.resolved_by = user
                locked.save(update_fields=['status', 'resolved_at', 'resolved_by'])
                return locked

        completed = run_with_retry(_execute, label='transfer.approve')
        logger.info(
            "stock.transfer.approved",
            extra={
                "transfer_id": completed.transfer_id,
                "approver": approver_department.code,
            },
        )
        return completed

    @classmethod
    def reject(cls, transfer, approver_department, user=None, reason: str = '') -> Transfer:
        """
        Reject a pending transfer. Nothing moves.

        Transition: PENDING -> REJECTED

        Raises:
            StockroomError('NOT_FOUND'): Transfer does not exist
            StockroomError('FORBIDDEN'): Rejecter is not the destination
            StockroomError('ALREADY_PROCESSED'): Transfer is not PENDING
        """
        pk = _parse_transfer_id(transfer)

        def _execute() -> Transfer:
            with atomic_operation():
                locked = _lock_transfer(pk)
                _authorize(locked, approver_department)
                _require_pending(locked)

                locked.status = TransferStatus.REJECTED
                locked.resolved_at = timezone.now()
                locked.resolved_by = user
                if reason:
                    locked.metadata['reject_reason'] = reason
                locked.save(update_fields=['status', 'resolved_at', 'resolved_by', 'metadata'])
                return locked

        rejected = run_with_retry(_execute, label='transfer.reject')
        logger.info(
            "stock.transfer.rejected",
            extra={"transfer_id": rejected.transfer_id, "reason": reason},
        )
        return rejected

    # ══════════════════════════════════════════════════════════════
    # INTERNALS
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def _precheck_item(cls, line: ItemLine, department, section) -> None:
        row = LedgerStore.get_row(line.item, department, section)
        if row is None:
            raise StockroomError(
                'NOT_FOUND',
                'Item is not stocked at the source',
                item=line.item.sku,
                department=department.code,
            )
        if row.available < line.quantity:
            raise StockroomError(
                'INSUFFICIENT_QUANTITY',
                available=row.available,
                requested=line.quantity,
                item=line.item.sku,
            )

    @classmethod
    def _precheck_service(cls, line: ServiceLine, source: Location) -> None:
        current = ServiceOffering.objects.filter(pk=line.service.pk).first()
        if current is None:
            raise StockroomError('NOT_FOUND', service_id=line.service.pk)
        if Location(current.department_id, current.section_id) != source:
            raise StockroomError(
                'NOT_FOUND_AT_SOURCE',
                service=current.code,
                expected=str(source),
            )

    @classmethod
    def _execute_item_line(cls, transfer: Transfer, line: TransferLine, user) -> None:
        source = LedgerRow.objects.for_item(line.item).at_location(
            transfer.from_department, transfer.from_section,
        ).first()
        if source is None:
            raise StockroomError(
                'NOT_FOUND',
                'Item is not stocked at the source',
                item=line.item.sku,
                transfer_id=transfer.transfer_id,
            )

        destination = LedgerStore.get_or_create(
            line.item,
            transfer.to_department,
            transfer.to_section,
            unit_price=source.unit_price,
        )
        # A->B and B->A of the same item must not lock the pair in opposite order
        LedgerStore.lock_rows(source, destination)

        source = LedgerStore.decrement(source, line.quantity)
        destination = LedgerStore.increment(destination, line.quantity)

        MovementLog.record_item(
            MovementType.TRANSFER_OUT, source, -line.quantity, transfer.transfer_id,
            user=user, reason=f"Transfer to {transfer.to_department.code}",
        )
        MovementLog.record_item(
            MovementType.TRANSFER_IN, destination, line.quantity, transfer.transfer_id,
            user=user, reason=f"Transfer from {transfer.from_department.code}",
        )

    @classmethod
    def _execute_service_line(cls, transfer: Transfer, line: TransferLine, user) -> None:
        source = Location(transfer.from_department_id, transfer.from_section_id)
        destination = Location(transfer.to_department_id, transfer.to_section_id)

        ServiceRegistry.relocate(line.service, source, destination)

        MovementLog.record_service(
            MovementType.TRANSFER_OUT, line.service, source, transfer.transfer_id,
            user=user, reason=f"Transfer to {transfer.to_department.code}",
        )
        MovementLog.record_service(
            MovementType.TRANSFER_IN, line.service, destination, transfer.transfer_id,
            user=user, reason=f"Transfer from {transfer.from_department.code}",
        )
