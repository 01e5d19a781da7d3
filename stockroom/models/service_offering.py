"""
ServiceOffering model: an indivisible, assignable service.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _

from stockroom.models.enums import PricingModel


class ServiceOfferingQuerySet(models.QuerySet):

    def at_location(self, department, section=None):
        qs = self.filter(department=department)
        if section is None:
            return qs.filter(section__isnull=True)
        return qs.filter(section=section)

    def active(self):
        return self.filter(is_active=True)


class ServiceOffering(models.Model):
    """
    Named service (pool lane, game table, sauna slot) at exactly one location.

    Unlike a LedgerRow, a service has no quantity: relocation moves the whole
    record or nothing. ``code`` is unique, so a service can never appear at
    two locations at once.
    """

    code = models.SlugField(
        unique=True,
        max_length=64,
        verbose_name=_('Code'),
    )
    name = models.CharField(max_length=200, verbose_name=_('Name'))
    service_type = models.CharField(
        max_length=50,
        blank=True,
        default='',
        verbose_name=_('Service type'),
        help_text=_('Free-form kind, e.g. pool, game, sauna.'),
    )
    pricing_model = models.CharField(
        max_length=20,
        choices=PricingModel.choices,
        default=PricingModel.PER_COUNT,
        verbose_name=_('Pricing model'),
    )
    price_per_count = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        verbose_name=_('Price per count'),
    )
    price_per_minute = models.DecimalField(
        max_digits=10,
        decimal_places=4,
        null=True,
        blank=True,
        verbose_name=_('Price per minute'),
    )

    # Current location
    department = models.ForeignKey(
        'stockroom.Department',
        on_delete=models.PROTECT,
        related_name='services',
        verbose_name=_('Department'),
    )
    section = models.ForeignKey(
        'stockroom.Section',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='services',
        verbose_name=_('Section'),
        help_text=_('Empty = department level.'),
    )

    is_active = models.BooleanField(default=True, verbose_name=_('Active'))
    metadata = models.JSONField(default=dict, blank=True, verbose_name=_('Metadata'))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ServiceOfferingQuerySet.as_manager()

    class Meta:
        verbose_name = _('Service offering')
        verbose_name_plural = _('Service offerings')
        ordering = ['code']
        indexes = [
            models.Index(fields=['department', 'section'], name='service_location_idx'),
        ]

    def __str__(self) -> str:
        return self.name
