"""
Enums for Stockroom models.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class TransferStatus(models.TextChoices):
    """
    Transfer request lifecycle.

    PENDING -> COMPLETED (destination approved, stock moved)
    PENDING -> REJECTED  (destination refused, nothing moved)

    Terminal states never change.
    """
    PENDING = 'pending', _('Pending')
    COMPLETED = 'completed', _('Completed')
    REJECTED = 'rejected', _('Rejected')


class LineKind(models.TextChoices):
    """Payload shape of a transfer line."""
    ITEM = 'item', _('Item')            # quantity-bearing ledger entry
    SERVICE = 'service', _('Service')   # location-only service offering


class MovementType(models.TextChoices):
    """Why a quantity or location changed."""
    TRANSFER_OUT = 'transfer_out', _('Transfer out')
    TRANSFER_IN = 'transfer_in', _('Transfer in')
    RELOCATION = 'relocation', _('Relocation')
    RECONCILIATION_ADJUST = 'reconciliation_adjust', _('Reconciliation adjustment')


class PricingModel(models.TextChoices):
    """How a service offering is charged."""
    PER_COUNT = 'per_count', _('Per count')
    PER_TIME = 'per_time', _('Per time')
