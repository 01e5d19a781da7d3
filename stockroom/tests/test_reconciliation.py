"""
Tests for reconciliation.
"""

from decimal import Decimal
from unittest import mock

import pytest
from django.db import IntegrityError
from django.test import override_settings

from stockroom import stockroom
from stockroom.models import Department, InventoryItem, Movement, MovementType
from stockroom.services import LedgerStore


pytestmark = pytest.mark.django_db


class TestReconcileSurplus:
    """Master count above the distributed sum."""

    def test_surplus_added_and_second_run_is_noop(self, make_row, cola, bar):
        """Total 100, rows sum to 90: one row gets +10, then nothing to do."""
        cola.total_quantity = Decimal('100')
        cola.save()
        row = make_row(cola, bar, 90)

        report = stockroom.reconcile()

        row.refresh_from_db()
        assert row.quantity == Decimal('100')
        assert report.applied
        assert len(report.adjustments) == 1
        assert report.adjustments[0].delta == Decimal('10')
        assert report.adjustments[0].department_code == 'bar'
        movements = Movement.objects.filter(movement_type=MovementType.RECONCILIATION_ADJUST)
        assert movements.count() == 1
        assert movements.get().reference == report.reference

        second = stockroom.reconcile()

        assert second.is_clean
        assert second.checked == 1
        assert Movement.objects.count() == 1

    def test_surplus_prefers_matching_category(self, make_row, cola, bar, restaurant):
        cola.total_quantity = Decimal('60')
        cola.save()
        make_row(cola, restaurant, 40)
        bar_row = make_row(cola, bar, 10)

        stockroom.reconcile(items=[cola])

        bar_row.refresh_from_db()
        assert bar_row.quantity == Decimal('20')

    def test_surplus_skips_rows_at_inactive_departments(self, make_row, cola, bar):
        """The drinks row sits at a closed bar: surplus goes to the open club."""
        cola.total_quantity = Decimal('20')
        cola.save()
        bar_row = make_row(cola, bar, 10)
        bar.is_active = False
        bar.save()
        club = Department.objects.create(code='club', name='Club', category='drinks')

        report = stockroom.reconcile(items=[cola])

        bar_row.refresh_from_db()
        assert bar_row.quantity == Decimal('10')
        assert LedgerStore.get_row(cola, club).quantity == Decimal('10')
        assert report.adjustments[0].department_code == 'club'

    def test_surplus_creates_department_level_row(self, cola, restaurant, bar):
        """No rows yet: surplus lands at the first active drinks department."""
        report = stockroom.reconcile(items=[cola])

        row = LedgerStore.get_row(cola, bar)
        assert row.quantity == Decimal('50')
        assert row.unit_price == Decimal('3.00')
        assert report.adjustments[0].section_code is None

    def test_surplus_falls_back_to_first_existing_row(self, make_row, restaurant, terrace, bar):
        bread = InventoryItem.objects.create(
            sku='BREAD', name='Bread', category='bakery', total_quantity=Decimal('12'),
        )
        make_row(bread, restaurant, 2)
        make_row(bread, bar, 0, section=terrace)

        stockroom.reconcile(items=[bread])

        assert LedgerStore.get_row(bread, restaurant).quantity == Decimal('12')

    def test_surplus_uses_configured_fallback_department(self, restaurant):
        storeroom = Department.objects.create(code='storeroom', name='Storeroom')
        soap = InventoryItem.objects.create(
            sku='SOAP', name='Soap', category='cleaning', total_quantity=Decimal('7'),
        )

        stockroom.reconcile(items=[soap])

        assert LedgerStore.get_row(soap, storeroom).quantity == Decimal('7')
        assert LedgerStore.get_row(soap, restaurant) is None

    @override_settings(STOCKROOM={})
    def test_surplus_without_fallback_uses_first_active_department(self, restaurant, bar):
        soap = InventoryItem.objects.create(
            sku='SOAP', name='Soap', category='cleaning', total_quantity=Decimal('7'),
        )

        stockroom.reconcile(items=[soap])

        assert LedgerStore.get_row(soap, bar).quantity == Decimal('7')

    def test_surplus_without_departments_is_an_issue(self, db):
        soap = InventoryItem.objects.create(sku='SOAP', name='Soap', total_quantity=Decimal('7'))

        report = stockroom.reconcile(items=[soap])

        assert report.adjustments == []
        assert len(report.issues) == 1
        assert 'SOAP' in report.issues[0]


class TestReconcileShortfall:
    """Master count below the distributed sum."""

    def test_shortfall_taken_from_largest_first(self, make_row, cola, bar, restaurant, counter):
        cola.total_quantity = Decimal('20')
        cola.save()
        small = make_row(cola, restaurant, 5)
        large = make_row(cola, bar, 25, section=counter)

        report = stockroom.reconcile(items=[cola])

        small.refresh_from_db()
        large.refresh_from_db()
        assert large.quantity == Decimal('15')
        assert small.quantity == Decimal('5')
        assert report.is_clean is False
        assert report.issues == []

    def test_shortfall_spans_rows(self, make_row, cola, bar, restaurant):
        cola.total_quantity = Decimal('4')
        cola.save()
        make_row(cola, bar, 6)
        make_row(cola, restaurant, 5)

        report = stockroom.reconcile(items=[cola])

        assert stockroom.distributed_total(cola) == Decimal('4')
        assert sorted(a.delta for a in report.adjustments) == [Decimal('-6'), Decimal('-1')]

    def test_shortfall_never_goes_below_reserved(self, make_row, cola, bar):
        cola.total_quantity = Decimal('0')
        cola.save()
        row = make_row(cola, bar, 10, reserved=4)

        report = stockroom.reconcile(items=[cola])

        row.refresh_from_db()
        assert row.quantity == Decimal('4')
        assert len(report.issues) == 1
        assert 'COLA-330' in report.issues[0]

        # Reported again, not silently dropped
        again = stockroom.reconcile(items=[cola])
        assert again.adjustments == []
        assert len(again.issues) == 1


class TestReconcileRun:

    def test_dry_run_writes_nothing(self, make_row, cola, bar):
        row = make_row(cola, bar, 40)

        report = stockroom.reconcile(apply=False)

        row.refresh_from_db()
        assert not report.applied
        assert report.adjustments[0].delta == Decimal('10')
        assert row.quantity == Decimal('40')
        assert not Movement.objects.exists()

    def test_master_count_is_never_written(self, make_row, cola, water, bar):
        make_row(cola, bar, 10)
        make_row(water, bar, 100)

        stockroom.reconcile()

        cola.refresh_from_db()
        water.refresh_from_db()
        assert cola.total_quantity == Decimal('50')
        assert water.total_quantity == Decimal('30')
        assert stockroom.distributed_total(cola) == Decimal('50')
        assert stockroom.distributed_total(water) == Decimal('30')

    def test_one_reference_per_run(self, make_row, cola, water, bar):
        make_row(cola, bar, 10)
        make_row(water, bar, 10)

        report = stockroom.reconcile()

        references = set(Movement.objects.values_list('reference', flat=True))
        assert references == {report.reference}
        assert report.checked == 2

    def test_database_error_on_one_item_does_not_stop_the_run(self, make_row, cola, water, bar):
        cola_row = make_row(cola, bar, 40)
        water_row = make_row(water, bar, 20)
        real_increment = LedgerStore.increment.__func__

        def failing_increment(cls, row, amount):
            if row.item_id == cola.pk:
                raise IntegrityError('duplicate key value')
            return real_increment(cls, row, amount)

        with mock.patch.object(LedgerStore, 'increment', classmethod(failing_increment)):
            report = stockroom.reconcile()

        cola_row.refresh_from_db()
        water_row.refresh_from_db()
        assert cola_row.quantity == Decimal('40')
        assert water_row.quantity == Decimal('30')
        assert report.checked == 2
        assert [a.sku for a in report.adjustments] == ['WATER-500']
        assert len(report.issues) == 1
        assert report.issues[0].startswith('COLA-330: duplicate key value')
        assert not Movement.objects.filter(item=cola).exists()
