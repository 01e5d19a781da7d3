"""
Management command to reconcile item master counts with ledger rows.

Usage:
    python manage.py reconcile_inventory
    python manage.py reconcile_inventory --dry-run
    python manage.py reconcile_inventory --sku COLA-330 --sku WATER-500
"""

from django.core.management.base import BaseCommand, CommandError

from stockroom import stockroom
from stockroom.models import InventoryItem


class Command(BaseCommand):
    """Reconcile inventory command."""

    help = 'Repairs drift between item total quantities and department ledger rows'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show the adjustments without applying them'
        )
        parser.add_argument(
            '--sku',
            action='append',
            dest='skus',
            default=[],
            help='Only reconcile this SKU (repeatable)'
        )

    def handle(self, *args, **options):
        items = None
        if options['skus']:
            items = list(InventoryItem.objects.filter(sku__in=options['skus']))
            missing = set(options['skus']) - {item.sku for item in items}
            if missing:
                raise CommandError(f"Unknown SKU(s): {', '.join(sorted(missing))}")

        report = stockroom.reconcile(items=items, apply=not options['dry_run'])

        verb = 'Applied' if report.applied else 'Would apply'
        for adjustment in report.adjustments:
            location = adjustment.department_code
            if adjustment.section_code:
                location = f"{location}:{adjustment.section_code}"
            self.stdout.write(f"{verb} {adjustment.delta:+} to {adjustment.sku} at {location}")

        for issue in report.issues:
            self.stderr.write(self.style.WARNING(issue))

        summary = (
            f"{report.checked} item(s) checked, {len(report.adjustments)} adjustment(s), "
            f"{len(report.issues)} issue(s) [{report.reference}]"
        )
        if report.issues:
            self.stdout.write(self.style.WARNING(summary))
        else:
            self.stdout.write(self.style.SUCCESS(summary))
