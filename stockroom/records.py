"""
Value objects passed into and returned from the stock services.

Transfer lines are a tagged variant: ``ItemLine`` carries a quantity,
``ServiceLine`` carries only the service.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Union


@dataclass(frozen=True)
class ItemLine:
    """Move ``quantity`` units of ``item``."""

    item: Any  # InventoryItem
    quantity: Decimal


@dataclass(frozen=True)
class ServiceLine:
    """Move ``service`` as a whole."""

    service: Any  # ServiceOffering


LinePayload = Union[ItemLine, ServiceLine]


@dataclass(frozen=True)
class Location:
    """A (department, section) coordinate; section_id None = department level."""

    department_id: int
    section_id: int | None = None

    @classmethod
    def of(cls, department, section=None) -> Location:
        return cls(
            department_id=department.pk,
            section_id=section.pk if section is not None else None,
        )

    def __str__(self) -> str:
        if self.section_id is None:
            return f"department:{self.department_id}"
        return f"department:{self.department_id}/section:{self.section_id}"


@dataclass(frozen=True)
class RelocationResult:
    """Outcome of a direct relocation."""

    reference: str
    source: Any       # LedgerRow (items) or ServiceOffering (services)
    destination: Any  # LedgerRow (items) or ServiceOffering (services)
    movements: list = field(default_factory=list)


@dataclass(frozen=True)
class Adjustment:
    """One reconciliation change applied (or planned) to a ledger row."""

    item_id: int
    sku: str
    department_code: str
    section_code: str | None
    delta: Decimal


@dataclass
class ReconciliationReport:
    """Summary of a reconciliation run."""

    reference: str
    applied: bool
    checked: int = 0
    adjustments: list[Adjustment] = field(default_factory=list)
    issues: list[str] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        """No adjustments were needed and nothing was left unresolved."""
        return not self.adjustments and not self.issues
