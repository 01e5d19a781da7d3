"""
LedgerRow model: quantity of one item at one location.
"""

from decimal import Decimal

from django.db import models
from django.db.models import F, Q, Sum
from django.db.models.functions import Coalesce
from django.utils.translation import gettext_lazy as _


class LedgerRowQuerySet(models.QuerySet):
    """QuerySet with helper filters for ledger rows."""

    def for_item(self, item):
        """Rows of a specific item."""
        return self.filter(item=item)

    def at_location(self, department, section=None):
        """Rows at an exact location (section=None means department level)."""
        qs = self.filter(department=department)
        if section is None:
            return qs.filter(section__isnull=True)
        return qs.filter(section=section)

    def non_empty(self):
        return self.filter(quantity__gt=0)

    def with_available(self):
        """Annotate ``_available`` (quantity - reserved) for ordering/filtering."""
        return self.annotate(_available=F('quantity') - F('reserved'))

    def total_quantity(self) -> Decimal:
        return self.aggregate(
            t=Coalesce(Sum('quantity'), Decimal('0'))
        )['t']


class LedgerRow(models.Model):
    """
    Quantity of an item at a (department, section) coordinate.

    Coordinates:
    - department: WHO holds it
    - section: WHERE inside the department: null means department level

    Invariants (enforced by the database):
    - quantity >= 0
    - 0 <= reserved <= quantity
    - one row per (item, department, section)

    Rows are never deleted when they reach zero, so reservation history and
    section scoping persist. Only LedgerStore mutates quantity/reserved.
    """

    item = models.ForeignKey(
        'stockroom.InventoryItem',
        on_delete=models.PROTECT,
        related_name='ledger_rows',
        verbose_name=_('Item'),
    )
    department = models.ForeignKey(
        'stockroom.Department',
        on_delete=models.PROTECT,
        related_name='ledger_rows',
        verbose_name=_('Department'),
    )
    section = models.ForeignKey(
        'stockroom.Section',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='ledger_rows',
        verbose_name=_('Section'),
        help_text=_('Empty = department level, unassigned to any section.'),
    )

    quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal('0'),
        verbose_name=_('Quantity'),
    )
    reserved = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal('0'),
        verbose_name=_('Reserved'),
        help_text=_('Committed but not yet fulfilled.'),
    )
    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0'),
        verbose_name=_('Unit price'),
        help_text=_('Price snapshot taken when the row was created.'),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = LedgerRowQuerySet.as_manager()

    class Meta:
        verbose_name = _('Ledger row')
        verbose_name_plural = _('Ledger rows')
        constraints = [
            models.UniqueConstraint(
                fields=['item', 'department', 'section'],
                name='unique_ledger_row_section',
            ),
            # NULL sections never collide in a plain unique index
            models.UniqueConstraint(
                fields=['item', 'department'],
                condition=Q(section__isnull=True),
                name='unique_ledger_row_department_level',
            ),
            models.CheckConstraint(
                condition=Q(quantity__gte=0),
                name='ledger_row_quantity_non_negative',
            ),
            models.CheckConstraint(
                condition=Q(reserved__gte=0) & Q(reserved__lte=F('quantity')),
                name='ledger_row_reserved_within_quantity',
            ),
        ]
        indexes = [
            models.Index(fields=['department', 'section'], name='ledger_row_location_idx'),
        ]

    @property
    def available(self) -> Decimal:
        """Quantity not committed to a reservation."""
        return self.quantity - self.reserved

    @property
    def location_label(self) -> str:
        if self.section_id is None:
            return self.department.code
        return self.section.qualified_code

    def __str__(self) -> str:
        return f"{self.item} [{self.location_label}]: {self.quantity}"
