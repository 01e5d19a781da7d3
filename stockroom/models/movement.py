"""
Movement model: append-only audit trail of quantity and location changes.
"""

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from stockroom.models.enums import MovementType


class MovementQuerySet(models.QuerySet):

    def for_reference(self, reference: str):
        return self.filter(reference=reference)

    def for_item(self, item):
        return self.filter(item=item)

    def for_service(self, service):
        return self.filter(service=service)


class Movement(models.Model):
    """
    Immutable record of a quantity or location change.

    Rules:
    - NEVER update() or delete()
    - Corrections are new Movements with inverse delta
    - Written by the orchestrating service, in the same transaction as the
      ledger/registry change it describes

    ``reference`` ties the entry to its cause: ``transfer:{pk}``,
    ``relocation:{hex}`` or ``reconciliation:{hex}``. It is a plain string
    because relocations and reconciliation runs have no record of their own.
    """

    movement_type = models.CharField(
        max_length=30,
        choices=MovementType.choices,
        db_index=True,
        verbose_name=_('Type'),
    )

    # Exactly one of item/service
    item = models.ForeignKey(
        'stockroom.InventoryItem',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='movements',
        verbose_name=_('Item'),
    )
    service = models.ForeignKey(
        'stockroom.ServiceOffering',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='movements',
        verbose_name=_('Service'),
    )
    ledger_row = models.ForeignKey(
        'stockroom.LedgerRow',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='movements',
        verbose_name=_('Ledger row'),
    )

    # Location affected by this entry
    department = models.ForeignKey(
        'stockroom.Department',
        on_delete=models.PROTECT,
        related_name='+',
        verbose_name=_('Department'),
    )
    section = models.ForeignKey(
        'stockroom.Section',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Section'),
    )

    delta = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        null=True,
        blank=True,
        verbose_name=_('Delta'),
        help_text=_('Positive = in, negative = out. Empty for services.'),
    )
    reference = models.CharField(
        max_length=64,
        db_index=True,
        verbose_name=_('Reference'),
    )
    reason = models.CharField(max_length=255, blank=True, default='', verbose_name=_('Reason'))
    metadata = models.JSONField(default=dict, blank=True, verbose_name=_('Metadata'))

    timestamp = models.DateTimeField(default=timezone.now, db_index=True, verbose_name=_('Timestamp'))
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('User'),
    )

    objects = MovementQuerySet.as_manager()

    class Meta:
        verbose_name = _('Movement')
        verbose_name_plural = _('Movements')
        ordering = ['timestamp', 'pk']
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(item__isnull=False, service__isnull=True)
                    | Q(item__isnull=True, service__isnull=False)
                ),
                name='movement_item_xor_service',
            ),
        ]
        indexes = [
            models.Index(fields=['item', 'timestamp'], name='movement_item_time_idx'),
            models.Index(fields=['service', 'timestamp'], name='movement_service_time_idx'),
        ]

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValueError(
                "Movements are immutable. "
                "To correct one, record a new Movement with the inverse delta."
            )
        if not self.reference:
            raise ValueError("Movement reference is required")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Movements are immutable and cannot be deleted.")

    def __str__(self) -> str:
        subject = self.item or self.service
        if self.delta is None:
            return f"{self.movement_type} {subject} | {self.reference}"
        signal = '+' if self.delta > 0 else ''
        return f"{self.movement_type} {signal}{self.delta} {subject} | {self.reference}"
