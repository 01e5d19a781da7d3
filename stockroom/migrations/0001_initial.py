"""
Initial migration for Stockroom models.
"""

from decimal import Decimal
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    """Create Stockroom models: Department, Section, InventoryItem, LedgerRow,
    ServiceOffering, Transfer, TransferLine, Movement."""

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Department',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.SlugField(unique=True, verbose_name='Code')),
                ('name', models.CharField(max_length=100, verbose_name='Name')),
                ('category', models.CharField(blank=True, db_index=True, default='', help_text='Item category this department stocks (e.g. drinks, food).', max_length=50, verbose_name='Category')),
                ('is_active', models.BooleanField(default=True, verbose_name='Active')),
                ('metadata', models.JSONField(blank=True, default=dict, verbose_name='Metadata')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Department',
                'verbose_name_plural': 'Departments',
                'ordering': ['code'],
            },
        ),
        migrations.CreateModel(
            name='InventoryItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sku', models.CharField(max_length=64, unique=True, verbose_name='SKU')),
                ('name', models.CharField(max_length=200, verbose_name='Name')),
                ('category', models.CharField(blank=True, db_index=True, default='', max_length=50, verbose_name='Category')),
                ('unit_price', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12, verbose_name='Unit price')),
                ('total_quantity', models.DecimalField(decimal_places=3, default=Decimal('0'), help_text='Master count across all departments.', max_digits=12, verbose_name='Total quantity')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Inventory item',
                'verbose_name_plural': 'Inventory items',
                'ordering': ['sku'],
            },
        ),
        migrations.CreateModel(
            name='Section',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.SlugField(verbose_name='Code')),
                ('name', models.CharField(max_length=100, verbose_name='Name')),
                ('is_active', models.BooleanField(default=True, verbose_name='Active')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('department', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='sections', to='stockroom.department', verbose_name='Department')),
            ],
            options={
                'verbose_name': 'Section',
                'verbose_name_plural': 'Sections',
                'ordering': ['department', 'code'],
                'constraints': [
                    models.UniqueConstraint(fields=('department', 'code'), name='unique_section_code_per_department'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ServiceOffering',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.SlugField(max_length=64, unique=True, verbose_name='Code')),
                ('name', models.CharField(max_length=200, verbose_name='Name')),
                ('service_type', models.CharField(blank=True, default='', help_text='Free-form kind, e.g. pool, game, sauna.', max_length=50, verbose_name='Service type')),
                ('pricing_model', models.CharField(choices=[('per_count', 'Per count'), ('per_time', 'Per time')], default='per_count', max_length=20, verbose_name='Pricing model')),
                ('price_per_count', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True, verbose_name='Price per count')),
                ('price_per_minute', models.DecimalField(blank=True, decimal_places=4, max_digits=10, null=True, verbose_name='Price per minute')),
                ('is_active', models.BooleanField(default=True, verbose_name='Active')),
                ('metadata', models.JSONField(blank=True, default=dict, verbose_name='Metadata')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('department', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='services', to='stockroom.department', verbose_name='Department')),
                ('section', models.ForeignKey(blank=True, help_text='Empty = department level.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='services', to='stockroom.section', verbose_name='Section')),
            ],
            options={
                'verbose_name': 'Service offering',
                'verbose_name_plural': 'Service offerings',
                'ordering': ['code'],
                'indexes': [
                    models.Index(fields=['department', 'section'], name='service_location_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='LedgerRow',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.DecimalField(decimal_places=3, default=Decimal('0'), max_digits=12, verbose_name='Quantity')),
                ('reserved', models.DecimalField(decimal_places=3, default=Decimal('0'), help_text='Committed but not yet fulfilled.', max_digits=12, verbose_name='Reserved')),
                ('unit_price', models.DecimalField(decimal_places=2, default=Decimal('0'), help_text='Price snapshot taken when the row was created.', max_digits=12, verbose_name='Unit price')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('department', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='ledger_rows', to='stockroom.department', verbose_name='Department')),
                ('item', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='ledger_rows', to='stockroom.inventoryitem', verbose_name='Item')),
                ('section', models.ForeignKey(blank=True, help_text='Empty = department level, unassigned to any section.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='ledger_rows', to='stockroom.section', verbose_name='Section')),
            ],
            options={
                'verbose_name': 'Ledger row',
                'verbose_name_plural': 'Ledger rows',
                'indexes': [
                    models.Index(fields=['department', 'section'], name='ledger_row_location_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('item', 'department', 'section'), name='unique_ledger_row_section'),
                    models.UniqueConstraint(condition=models.Q(('section__isnull', True)), fields=('item', 'department'), name='unique_ledger_row_department_level'),
                    models.CheckConstraint(condition=models.Q(('quantity__gte', 0)), name='ledger_row_quantity_non_negative'),
                    models.CheckConstraint(condition=models.Q(('reserved__gte', 0), ('reserved__lte', models.F('quantity'))), name='ledger_row_reserved_within_quantity'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Transfer',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('completed', 'Completed'), ('rejected', 'Rejected')], db_index=True, default='pending', max_length=20, verbose_name='Status')),
                ('notes', models.TextField(blank=True, default='', verbose_name='Notes')),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('resolved_at', models.DateTimeField(blank=True, help_text='When the transfer was completed or rejected', null=True, verbose_name='Resolved at')),
                ('from_department', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='outgoing_transfers', to='stockroom.department', verbose_name='From department')),
                ('from_section', models.ForeignKey(blank=True, help_text='Empty = department level.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='+', to='stockroom.section', verbose_name='From section')),
                ('resolved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='Resolved by')),
                ('to_department', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='incoming_transfers', to='stockroom.department', verbose_name='To department')),
                ('to_section', models.ForeignKey(blank=True, help_text='Empty = department level.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='+', to='stockroom.section', verbose_name='To section')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='Requested by')),
            ],
            options={
                'verbose_name': 'Transfer',
                'verbose_name_plural': 'Transfers',
                'ordering': ['-created_at', '-pk'],
                'indexes': [
                    models.Index(fields=['to_department', 'status'], name='transfer_incoming_idx'),
                    models.Index(fields=['from_department', 'status'], name='transfer_outgoing_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('from_department', models.F('to_department')), _negated=True), name='transfer_departments_differ'),
                ],
            },
        ),
        migrations.CreateModel(
            name='TransferLine',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('kind', models.CharField(choices=[('item', 'Item'), ('service', 'Service')], max_length=20, verbose_name='Kind')),
                ('quantity', models.DecimalField(blank=True, decimal_places=3, max_digits=12, null=True, verbose_name='Quantity')),
                ('item', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='+', to='stockroom.inventoryitem', verbose_name='Item')),
                ('service', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='+', to='stockroom.serviceoffering', verbose_name='Service')),
                ('transfer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='lines', to='stockroom.transfer', verbose_name='Transfer')),
            ],
            options={
                'verbose_name': 'Transfer line',
                'verbose_name_plural': 'Transfer lines',
                'ordering': ['pk'],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(models.Q(('item__isnull', False), ('kind', 'item'), ('quantity__gt', 0), ('service__isnull', True)), models.Q(('item__isnull', True), ('kind', 'service'), ('quantity__isnull', True), ('service__isnull', False)), _connector='OR'), name='transfer_line_tagged_payload'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Movement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('movement_type', models.CharField(choices=[('transfer_out', 'Transfer out'), ('transfer_in', 'Transfer in'), ('relocation', 'Relocation'), ('reconciliation_adjust', 'Reconciliation adjustment')], db_index=True, max_length=30, verbose_name='Type')),
                ('delta', models.DecimalField(blank=True, decimal_places=3, help_text='Positive = in, negative = out. Empty for services.', max_digits=12, null=True, verbose_name='Delta')),
                ('reference', models.CharField(db_index=True, max_length=64, verbose_name='Reference')),
                ('reason', models.CharField(blank=True, default='', max_length=255, verbose_name='Reason')),
                ('metadata', models.JSONField(blank=True, default=dict, verbose_name='Metadata')),
                ('timestamp', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Timestamp')),
                ('department', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='+', to='stockroom.department', verbose_name='Department')),
                ('item', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='movements', to='stockroom.inventoryitem', verbose_name='Item')),
                ('ledger_row', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='movements', to='stockroom.ledgerrow', verbose_name='Ledger row')),
                ('section', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='+', to='stockroom.section', verbose_name='Section')),
                ('service', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='movements', to='stockroom.serviceoffering', verbose_name='Service')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='User')),
            ],
            options={
                'verbose_name': 'Movement',
                'verbose_name_plural': 'Movements',
                'ordering': ['timestamp', 'pk'],
                'indexes': [
                    models.Index(fields=['item', 'timestamp'], name='movement_item_time_idx'),
                    models.Index(fields=['service', 'timestamp'], name='movement_service_time_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(models.Q(('item__isnull', False), ('service__isnull', True)), models.Q(('item__isnull', True), ('service__isnull', False)), _connector='OR'), name='movement_item_xor_service'),
                ],
            },
        ),
    ]
