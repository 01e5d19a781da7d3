"""
Direct relocation: immediate moves between sections of one department.

No request/approval step: the caller already has authority over both ends.
"""

import logging
from decimal import Decimal

from stockroom.db import atomic_operation
from stockroom.exceptions import StockroomError
from stockroom.models.enums import MovementType
from stockroom.records import Location, RelocationResult
from stockroom.services.ledger import LedgerStore, _check_amount, _check_section
from stockroom.services.movements import MovementLog, new_reference
from stockroom.services.registry import ServiceRegistry

logger = logging.getLogger('stockroom')


def _check_sections(department, from_section, to_section) -> None:
    if to_section is None:
        raise StockroomError(
            'INVALID_REQUEST',
            'Destination section is required',
            department=department.code,
        )
    _check_section(department, from_section)
    _check_section(department, to_section)
    if from_section is not None and from_section.pk == to_section.pk:
        raise StockroomError(
            'INVALID_REQUEST',
            'Source and destination sections must differ',
            section=to_section.code,
        )


class DirectRelocation:
    """Intra-department moves of items and services."""

    @classmethod
    def relocate_item(cls, quantity: Decimal, item, department, from_section, to_section,
                      user=None) -> RelocationResult:
        """
        Move ``quantity`` of ``item`` between two locations of ``department``.

        Args:
            from_section: Source section (None = department level)
            to_section: Destination section

        Raises:
            StockroomError('INVALID_REQUEST'): Missing/foreign/identical sections
            StockroomError('INVALID_QUANTITY'): quantity <= 0
            StockroomError('NOT_FOUND'): No row at the source
            StockroomError('INSUFFICIENT_QUANTITY'): Source has less than quantity
        """
        _check_amount(quantity)
        _check_sections(department, from_section, to_section)

        reference = new_reference('relocation')

        with atomic_operation():
            source = LedgerStore.get_row(item, department, from_section)
            if source is None:
                raise StockroomError(
                    'NOT_FOUND',
                    'Item is not stocked at the source',
                    item=item.sku,
                    department=department.code,
                    section=getattr(from_section, 'code', None),
                )

            source = LedgerStore.decrement(source, quantity)
            destination = LedgerStore.get_or_create(
                item, department, to_section, unit_price=source.unit_price,
            )
            destination = LedgerStore.increment(destination, quantity)

            movements = [
                MovementLog.record_item(
                    MovementType.RELOCATION, source, -quantity, reference,
                    user=user, reason=f"Relocated to {to_section.code}",
                ),
                MovementLog.record_item(
                    MovementType.RELOCATION, destination, quantity, reference,
                    user=user, reason=f"Relocated from {source.location_label}",
                ),
            ]

        logger.info(
            "stock.relocation.item",
            extra={
                "reference": reference,
                "item": item.sku,
                "qty": str(quantity),
                "from": source.location_label,
                "to": destination.location_label,
            },
        )
        return RelocationResult(
            reference=reference,
            source=source,
            destination=destination,
            movements=movements,
        )

    @classmethod
    def relocate_service(cls, service, department, from_section, to_section,
                         user=None) -> RelocationResult:
        """
        Move ``service`` between two locations of ``department``.

        Raises:
            StockroomError('INVALID_REQUEST'): Missing/foreign/identical sections
            StockroomError('NOT_FOUND'): Service does not exist
            StockroomError('NOT_FOUND_AT_SOURCE'): Service is not at the source
            StockroomError('ALREADY_PRESENT'): Destination already hosts it
        """
        _check_sections(department, from_section, to_section)

        source = Location.of(department, from_section)
        destination = Location.of(department, to_section)
        reference = new_reference('relocation')

        with atomic_operation():
            moved = ServiceRegistry.relocate(service, source, destination)
            movement = MovementLog.record_service(
                MovementType.RELOCATION, moved, destination, reference,
                user=user,
                reason=f"Relocated to {to_section.code}",
                from_section=getattr(from_section, 'code', None),
            )

        logger.info(
            "stock.relocation.service",
            extra={
                "reference": reference,
                "service": moved.code,
                "from": str(source),
                "to": str(destination),
            },
        )
        return RelocationResult(
            reference=reference,
            source=moved,
            destination=moved,
            movements=[movement],
        )
