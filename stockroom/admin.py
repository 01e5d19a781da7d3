"""
Stockroom Admin.

- Department (with Section inline), InventoryItem, ServiceOffering: editable
- LedgerRow: read-only (quantity, reserved, available)
- Movement: read-only audit trail
- Transfer: read-only with "approve" / "reject" actions
"""

import logging

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from stockroom.exceptions import StockroomError
from stockroom.models import (
    Department,
    InventoryItem,
    LedgerRow,
    Movement,
    Section,
    ServiceOffering,
    Transfer,
    TransferLine,
    TransferStatus,
)

logger = logging.getLogger(__name__)


class ReadOnlyAdminMixin:
    """Records only change through the stockroom services."""

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# =========================================================================
# DEPARTMENT ADMIN
# =========================================================================

class SectionInline(admin.TabularInline):
    model = Section
    extra = 0
    fields = ['code', 'name', 'is_active']


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    """Department admin: editable, sections inline."""

    list_display = ['code', 'name', 'category', 'is_active']
    list_filter = ['is_active', 'category']
    search_fields = ['code', 'name']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [SectionInline]


# =========================================================================
# CATALOG ADMIN
# =========================================================================

@admin.register(InventoryItem)
class InventoryItemAdmin(admin.ModelAdmin):
    list_display = ['sku', 'name', 'category', 'unit_price', 'total_quantity']
    list_filter = ['category']
    search_fields = ['sku', 'name']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(ServiceOffering)
class ServiceOfferingAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'service_type', 'pricing_model',
                    'department', 'section', 'is_active']
    list_filter = ['is_active', 'pricing_model', 'department']
    search_fields = ['code', 'name']
    readonly_fields = ['created_at', 'updated_at']


# =========================================================================
# LEDGER ADMIN (read-only)
# =========================================================================

@admin.register(LedgerRow)
class LedgerRowAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    """LedgerRow admin: read-only. Quantities only change via the services."""

    list_display = ['item', 'department', 'section', 'quantity', 'reserved',
                    'available_display', 'unit_price']
    list_filter = ['department']
    search_fields = ['item__sku', 'item__name']
    list_select_related = ['item', 'department', 'section']

    @admin.display(description=_('Available'))
    def available_display(self, obj):
        return obj.available


# =========================================================================
# MOVEMENT ADMIN (read-only audit trail)
# =========================================================================

@admin.register(Movement)
class MovementAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    """Movement admin: read-only. Immutable audit trail."""

    list_display = ['timestamp', 'movement_type', 'subject_display', 'department',
                    'section', 'delta', 'reference', 'user']
    list_filter = ['movement_type', 'department']
    search_fields = ['reference', 'reason', 'item__sku', 'service__code']
    date_hierarchy = 'timestamp'

    @admin.display(description=_('Subject'))
    def subject_display(self, obj):
        return str(obj.item or obj.service)


# =========================================================================
# TRANSFER ADMIN (read-only with approve/reject actions)
# =========================================================================

class TransferLineInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = TransferLine
    extra = 0
    fields = ['kind', 'item', 'service', 'quantity']
    readonly_fields = fields


@admin.register(Transfer)
class TransferAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    """Transfer admin: actions act as the destination department."""

    list_display = ['id', 'from_department', 'to_department', 'status',
                    'created_at', 'resolved_at']
    list_filter = ['status', 'from_department', 'to_department']
    inlines = [TransferLineInline]
    actions = ['approve_transfers', 'reject_transfers']

    @admin.action(description=_('Approve selected transfers'))
    def approve_transfers(self, request, queryset):
        from stockroom import stockroom

        count = 0
        for transfer in queryset.filter(status=TransferStatus.PENDING).select_related('to_department'):
            try:
                stockroom.approve_transfer(transfer, transfer.to_department, user=request.user)
                count += 1
            except StockroomError as exc:
                logger.warning("approve_transfers: failed to approve %s: %s", transfer.transfer_id, exc)

        self.message_user(request, _('{count} transfer(s) approved.').format(count=count))

    @admin.action(description=_('Reject selected transfers'))
    def reject_transfers(self, request, queryset):
        from stockroom import stockroom

        count = 0
        for transfer in queryset.filter(status=TransferStatus.PENDING).select_related('to_department'):
            try:
                stockroom.reject_transfer(
                    transfer, transfer.to_department, user=request.user, reason='Rejected via admin',
                )
                count += 1
            except StockroomError as exc:
                logger.warning("reject_transfers: failed to reject %s: %s", transfer.transfer_id, exc)

        self.message_user(request, _('{count} transfer(s) rejected.').format(count=count))
