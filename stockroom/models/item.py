"""
InventoryItem model: master count of a catalog item.
"""

from decimal import Decimal

from django.db import models
from django.utils.translation import gettext_lazy as _


class InventoryItem(models.Model):
    """
    Catalog entry with a single authoritative ``total_quantity``.

    The catalog owns this record. Transfers never touch ``total_quantity``;
    reconciliation treats it as ground truth and moves the distributed
    LedgerRows toward it.
    """

    sku = models.CharField(max_length=64, unique=True, verbose_name=_('SKU'))
    name = models.CharField(max_length=200, verbose_name=_('Name'))
    category = models.CharField(
        max_length=50,
        blank=True,
        default='',
        db_index=True,
        verbose_name=_('Category'),
    )
    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0'),
        verbose_name=_('Unit price'),
    )
    total_quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal('0'),
        verbose_name=_('Total quantity'),
        help_text=_('Master count across all departments.'),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Inventory item')
        verbose_name_plural = _('Inventory items')
        ordering = ['sku']

    def __str__(self) -> str:
        return f"{self.name} ({self.sku})"
