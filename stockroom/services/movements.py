"""
Movement log: append-only audit entries written by the orchestrators.
"""

import uuid

from stockroom.models.enums import MovementType
from stockroom.models.movement import Movement


def new_reference(prefix: str) -> str:
    """Reference for operations without a record of their own."""
    return f"{prefix}:{uuid.uuid4().hex}"


class MovementLog:
    """Appends and reads Movement entries."""

    @classmethod
    def record_item(cls, movement_type: MovementType, row, delta, reference: str,
                    user=None, reason: str = '', **metadata) -> Movement:
        """Log a quantity change on a ledger row."""
        return Movement.objects.create(
            movement_type=movement_type,
            item_id=row.item_id,
            ledger_row=row,
            department_id=row.department_id,
            section_id=row.section_id,
            delta=delta,
            reference=reference,
            reason=reason,
            user=user,
            metadata=metadata,
        )

    @classmethod
    def record_service(cls, movement_type: MovementType, service, location, reference: str,
                       user=None, reason: str = '', **metadata) -> Movement:
        """Log a service arriving at or leaving ``location``."""
        return Movement.objects.create(
            movement_type=movement_type,
            service=service,
            department_id=location.department_id,
            section_id=location.section_id,
            delta=None,
            reference=reference,
            reason=reason,
            user=user,
            metadata=metadata,
        )

    @classmethod
    def history(cls, item=None, service=None, department=None, reference: str | None = None,
                movement_type: MovementType | None = None):
        """Movements filtered by subject, location, cause or type (oldest first)."""
        qs = Movement.objects.select_related('item', 'service', 'department', 'section')

        if item is not None:
            qs = qs.for_item(item)
        if service is not None:
            qs = qs.for_service(service)
        if department is not None:
            qs = qs.filter(department=department)
        if reference is not None:
            qs = qs.for_reference(reference)
        if movement_type is not None:
            qs = qs.filter(movement_type=movement_type)

        return qs
