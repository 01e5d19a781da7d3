"""
Tests for direct (intra-department) relocation.
"""

from decimal import Decimal

import pytest

from stockroom import stockroom, StockroomError
from stockroom.models import Movement, MovementType
from stockroom.services import LedgerStore


pytestmark = pytest.mark.django_db


class TestRelocateItem:
    """Tests for stockroom.relocate_item()."""

    def test_relocate_from_department_level(self, cola_at_bar, cola, bar, terrace, user):
        result = stockroom.relocate_item(Decimal('15'), cola, bar, None, terrace, user=user)

        assert result.reference.startswith('relocation:')
        assert result.source.quantity == Decimal('35')
        assert result.destination.quantity == Decimal('15')
        assert result.destination.section_id == terrace.pk
        assert result.destination.unit_price == Decimal('2.50')

        movements = list(Movement.objects.for_reference(result.reference))
        assert movements == result.movements
        assert [m.delta for m in movements] == [Decimal('-15'), Decimal('15')]
        assert {m.movement_type for m in movements} == {MovementType.RELOCATION}
        assert all(m.user == user for m in movements)

    def test_relocate_between_sections(self, make_row, cola, bar, counter, terrace):
        make_row(cola, bar, 8, section=counter)
        make_row(cola, bar, 2, section=terrace)

        stockroom.relocate_item(Decimal('8'), cola, bar, counter, terrace)

        assert LedgerStore.get_row(cola, bar, counter).quantity == Decimal('0')
        assert LedgerStore.get_row(cola, bar, terrace).quantity == Decimal('10')
        assert stockroom.distributed_total(cola) == Decimal('10')

    def test_destination_section_required(self, cola_at_bar, cola, bar):
        with pytest.raises(StockroomError) as exc:
            stockroom.relocate_item(Decimal('1'), cola, bar, None, None)

        assert exc.value.code == 'INVALID_REQUEST'

    def test_sections_must_differ(self, make_row, cola, bar, counter):
        make_row(cola, bar, 8, section=counter)

        with pytest.raises(StockroomError) as exc:
            stockroom.relocate_item(Decimal('1'), cola, bar, counter, counter)

        assert exc.value.code == 'INVALID_REQUEST'

    def test_section_of_another_department(self, cola_at_bar, cola, bar, hall_1):
        with pytest.raises(StockroomError) as exc:
            stockroom.relocate_item(Decimal('1'), cola, bar, None, hall_1)

        assert exc.value.code == 'INVALID_REQUEST'
        assert exc.value.kind == 'InvalidRequest'

    def test_missing_source_row(self, cola, bar, counter, terrace):
        with pytest.raises(StockroomError) as exc:
            stockroom.relocate_item(Decimal('1'), cola, bar, counter, terrace)

        assert exc.value.code == 'NOT_FOUND'

    def test_insufficient_quantity_changes_nothing(self, cola_at_bar, cola, bar, terrace):
        with pytest.raises(StockroomError) as exc:
            stockroom.relocate_item(Decimal('51'), cola, bar, None, terrace)

        assert exc.value.code == 'INSUFFICIENT_QUANTITY'
        assert LedgerStore.get_row(cola, bar).quantity == Decimal('50')
        assert LedgerStore.get_row(cola, bar, terrace) is None
        assert not Movement.objects.exists()


class TestRelocateService:
    """Tests for stockroom.relocate_service()."""

    def test_relocate_then_retry(self, pool_table, recreation, hall_1, hall_2):
        """Service moves once; a second attempt from the old section fails."""
        result = stockroom.relocate_service(pool_table, recreation, hall_1, hall_2)

        pool_table.refresh_from_db()
        assert pool_table.section_id == hall_2.pk
        assert result.destination.section_id == hall_2.pk
        assert len(result.movements) == 1
        assert result.movements[0].movement_type == MovementType.RELOCATION
        assert result.movements[0].section_id == hall_2.pk

        with pytest.raises(StockroomError) as exc:
            stockroom.relocate_service(pool_table, recreation, hall_1, hall_2)

        assert exc.value.code == 'NOT_FOUND_AT_SOURCE'
        assert Movement.objects.for_service(pool_table).count() == 1

    def test_service_exists_at_one_location_only(self, pool_table, recreation, hall_1, hall_2):
        stockroom.relocate_service(pool_table, recreation, hall_1, hall_2)

        assert list(stockroom.services_at(recreation, hall_1)) == []
        assert list(stockroom.services_at(recreation, hall_2)) == [pool_table]

    def test_wrong_source(self, pool_table, recreation, hall_2):
        """Service sits in hall-2, caller claims it is at department level."""
        pool_table.section = hall_2
        pool_table.save()

        with pytest.raises(StockroomError) as exc:
            stockroom.relocate_service(pool_table, recreation, None, hall_2)

        assert exc.value.code == 'NOT_FOUND_AT_SOURCE'

    def test_same_section_is_invalid(self, pool_table, recreation, hall_1):
        with pytest.raises(StockroomError) as exc:
            stockroom.relocate_service(pool_table, recreation, hall_1, hall_1)

        assert exc.value.code == 'INVALID_REQUEST'
