"""
Service registry: location pointer of indivisible service offerings.
"""

import logging

from django.db import transaction

from stockroom.exceptions import StockroomError
from stockroom.models.department import Section
from stockroom.models.service_offering import ServiceOffering
from stockroom.records import Location

logger = logging.getLogger('stockroom')


class ServiceRegistry:
    """Lookups and relocation of ServiceOffering records."""

    @classmethod
    def services_at(cls, department, section=None, include_inactive: bool = False):
        """Services currently at a location (section=None = department level)."""
        qs = ServiceOffering.objects.at_location(department, section)
        if not include_inactive:
            qs = qs.active()
        return qs

    @classmethod
    def relocate(cls, service, from_location: Location, to_location: Location) -> ServiceOffering:
        """
        Move a service from one location to another.

        Single-row update of the location pointer. Retrying with the same
        destination fails NOT_FOUND_AT_SOURCE, so a service is never moved twice.

        Raises:
            StockroomError('NOT_FOUND'): Service does not exist
            StockroomError('NOT_FOUND_AT_SOURCE'): Service is not at from_location
            StockroomError('ALREADY_PRESENT'): Destination already holds this service
            StockroomError('INVALID_REQUEST'): Destination section is not in the destination department

        Concurrency:
            - Joins the caller's transaction (opens one if there is none)
            - Locks the service row before comparing locations
        """
        pk = getattr(service, 'pk', service)

        with transaction.atomic():
            try:
                locked = ServiceOffering.objects.select_for_update().get(pk=pk)
            except ServiceOffering.DoesNotExist:
                raise StockroomError('NOT_FOUND', service_id=pk) from None

            current = Location(locked.department_id, locked.section_id)

            if current != from_location:
                raise StockroomError(
                    'NOT_FOUND_AT_SOURCE',
                    service=locked.code,
                    expected=str(from_location),
                    current=str(current),
                )

            if current == to_location:
                raise StockroomError(
                    'ALREADY_PRESENT',
                    service=locked.code,
                    location=str(to_location),
                )

            if to_location.section_id is not None:
                in_department = Section.objects.filter(
                    pk=to_location.section_id,
                    department_id=to_location.department_id,
                ).exists()
                if not in_department:
                    raise StockroomError(
                        'INVALID_REQUEST',
                        'Section does not belong to the department',
                        location=str(to_location),
                    )

            # Same identity under a different record; impossible while code is unique
            clash = ServiceOffering.objects.filter(
                code=locked.code,
                department_id=to_location.department_id,
                section_id=to_location.section_id,
            ).exclude(pk=locked.pk).exists()
            if clash:
                raise StockroomError(
                    'ALREADY_PRESENT',
                    service=locked.code,
                    location=str(to_location),
                )

            locked.department_id = to_location.department_id
            locked.section_id = to_location.section_id
            locked.save(update_fields=['department', 'section', 'updated_at'])

        logger.info(
            "stock.service.relocated",
            extra={
                "service": locked.code,
                "from": str(from_location),
                "to": str(to_location),
            },
        )
        return locked
