"""
Tests for the service registry.
"""

import pytest

from stockroom import stockroom, StockroomError
from stockroom.records import Location
from stockroom.services import ServiceRegistry


pytestmark = pytest.mark.django_db


class TestServicesAt:

    def test_services_at_section(self, pool_table, recreation, hall_1, hall_2):
        assert list(stockroom.services_at(recreation, hall_1)) == [pool_table]
        assert list(stockroom.services_at(recreation, hall_2)) == []
        assert list(stockroom.services_at(recreation)) == []

    def test_inactive_services_hidden(self, pool_table, recreation, hall_1):
        pool_table.is_active = False
        pool_table.save()

        assert list(stockroom.services_at(recreation, hall_1)) == []
        assert list(stockroom.services_at(recreation, hall_1, include_inactive=True)) == [pool_table]


class TestServiceRelocate:
    """Tests for ServiceRegistry.relocate()."""

    def test_relocate(self, pool_table, recreation, hall_1, hall_2):
        moved = ServiceRegistry.relocate(
            pool_table,
            Location.of(recreation, hall_1),
            Location.of(recreation, hall_2),
        )

        pool_table.refresh_from_db()
        assert moved.section_id == hall_2.pk
        assert pool_table.section_id == hall_2.pk

    def test_retry_fails_not_found_at_source(self, pool_table, recreation, hall_1, hall_2):
        """A repeated call with the same pair never moves the service twice."""
        source, destination = Location.of(recreation, hall_1), Location.of(recreation, hall_2)
        ServiceRegistry.relocate(pool_table, source, destination)

        with pytest.raises(StockroomError) as exc:
            ServiceRegistry.relocate(pool_table, source, destination)

        assert exc.value.code == 'NOT_FOUND_AT_SOURCE'
        assert exc.value.kind == 'NotFound'

    def test_same_location_is_already_present(self, pool_table, recreation, hall_1):
        here = Location.of(recreation, hall_1)

        with pytest.raises(StockroomError) as exc:
            ServiceRegistry.relocate(pool_table, here, here)

        assert exc.value.code == 'ALREADY_PRESENT'
        assert exc.value.kind == 'Conflict'

    def test_unknown_service(self, recreation, hall_1, hall_2):
        with pytest.raises(StockroomError) as exc:
            ServiceRegistry.relocate(
                999999, Location.of(recreation, hall_1), Location.of(recreation, hall_2),
            )

        assert exc.value.code == 'NOT_FOUND'

    def test_destination_section_must_belong_to_department(
        self, pool_table, recreation, hall_1, bar,
    ):
        with pytest.raises(StockroomError) as exc:
            ServiceRegistry.relocate(
                pool_table, Location.of(recreation, hall_1), Location(bar.pk, hall_1.pk),
            )

        assert exc.value.code == 'INVALID_REQUEST'
        pool_table.refresh_from_db()
        assert pool_table.section_id == hall_1.pk
