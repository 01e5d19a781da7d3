"""
Transfer model: cross-department request awaiting destination approval.
"""

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from stockroom.models.enums import LineKind, TransferStatus


class TransferQuerySet(models.QuerySet):
    """Custom QuerySet for Transfer with direction filters."""

    def pending(self):
        return self.filter(status=TransferStatus.PENDING)

    def sent_by(self, department):
        return self.filter(from_department=department)

    def received_by(self, department):
        return self.filter(to_department=department)

    def involving(self, department):
        return self.filter(Q(from_department=department) | Q(to_department=department))


class Transfer(models.Model):
    """
    Multi-line stock/service move from one department to another.

    LIFECYCLE:

        ┌─────────┐   approve()   ┌───────────┐
        │ PENDING │ ────────────► │ COMPLETED │
        └─────────┘               └───────────┘
             │
             │ reject()           ┌───────────┐
             └──────────────────► │ REJECTED  │
                                  └───────────┘

    Created by the source department; only the destination department may
    approve or reject. Nothing moves until approve() executes; no stock is
    reserved while the request is pending.
    """

    from_department = models.ForeignKey(
        'stockroom.Department',
        on_delete=models.PROTECT,
        related_name='outgoing_transfers',
        verbose_name=_('From department'),
    )
    from_section = models.ForeignKey(
        'stockroom.Section',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('From section'),
        help_text=_('Empty = department level.'),
    )
    to_department = models.ForeignKey(
        'stockroom.Department',
        on_delete=models.PROTECT,
        related_name='incoming_transfers',
        verbose_name=_('To department'),
    )
    to_section = models.ForeignKey(
        'stockroom.Section',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('To section'),
        help_text=_('Empty = department level.'),
    )

    status = models.CharField(
        max_length=20,
        choices=TransferStatus.choices,
        default=TransferStatus.PENDING,
        db_index=True,
        verbose_name=_('Status'),
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Requested by'),
    )
    resolved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Resolved by'),
    )
    notes = models.TextField(blank=True, default='', verbose_name=_('Notes'))
    metadata = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    resolved_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name=_('Resolved at'),
        help_text=_('When the transfer was completed or rejected'),
    )

    objects = TransferQuerySet.as_manager()

    class Meta:
        verbose_name = _('Transfer')
        verbose_name_plural = _('Transfers')
        ordering = ['-created_at', '-pk']
        constraints = [
            models.CheckConstraint(
                condition=~Q(from_department=models.F('to_department')),
                name='transfer_departments_differ',
            ),
        ]
        indexes = [
            models.Index(fields=['to_department', 'status'], name='transfer_incoming_idx'),
            models.Index(fields=['from_department', 'status'], name='transfer_outgoing_idx'),
        ]

    @property
    def transfer_id(self) -> str:
        """Transfer identifier in standard format, used as movement reference."""
        return f"transfer:{self.pk}"

    @property
    def is_pending(self) -> bool:
        return self.status == TransferStatus.PENDING

    def __str__(self) -> str:
        return f"{self.transfer_id} {self.from_department} → {self.to_department} ({self.status})"


class TransferLine(models.Model):
    """
    One line of a transfer: either an item with a quantity or a service.

    The two payload shapes are kept apart by a check constraint, so the
    execution step can branch on ``kind`` alone.
    """

    transfer = models.ForeignKey(
        Transfer,
        on_delete=models.CASCADE,
        related_name='lines',
        verbose_name=_('Transfer'),
    )
    kind = models.CharField(
        max_length=20,
        choices=LineKind.choices,
        verbose_name=_('Kind'),
    )
    item = models.ForeignKey(
        'stockroom.InventoryItem',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Item'),
    )
    service = models.ForeignKey(
        'stockroom.ServiceOffering',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Service'),
    )
    quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        null=True,
        blank=True,
        verbose_name=_('Quantity'),
    )

    class Meta:
        verbose_name = _('Transfer line')
        verbose_name_plural = _('Transfer lines')
        ordering = ['pk']
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(
                        kind=LineKind.ITEM,
                        item__isnull=False,
                        service__isnull=True,
                        quantity__gt=0,
                    )
                    | Q(
                        kind=LineKind.SERVICE,
                        item__isnull=True,
                        service__isnull=False,
                        quantity__isnull=True,
                    )
                ),
                name='transfer_line_tagged_payload',
            ),
        ]

    @property
    def product(self):
        """The item or service this line moves."""
        return self.item if self.kind == LineKind.ITEM else self.service

    def __str__(self) -> str:
        if self.kind == LineKind.ITEM:
            return f"{self.quantity}x {self.item}"
        return f"{self.service}"
