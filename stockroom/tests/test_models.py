"""
Tests for model invariants enforced outside the services.
"""

from decimal import Decimal

import pytest
from django.db import IntegrityError, transaction

from stockroom.models import LineKind, Movement, MovementType, Transfer, TransferLine


pytestmark = pytest.mark.django_db


class TestMovementImmutability:

    @pytest.fixture
    def movement(self, cola_at_bar):
        return Movement.objects.create(
            movement_type=MovementType.RELOCATION,
            item=cola_at_bar.item,
            ledger_row=cola_at_bar,
            department=cola_at_bar.department,
            delta=Decimal('1'),
            reference='relocation:test',
        )

    def test_update_refused(self, movement):
        movement.reason = 'edited'

        with pytest.raises(ValueError):
            movement.save()

    def test_delete_refused(self, movement):
        with pytest.raises(ValueError):
            movement.delete()

        assert Movement.objects.filter(pk=movement.pk).exists()

    def test_reference_required(self, cola_at_bar):
        with pytest.raises(ValueError):
            Movement.objects.create(
                movement_type=MovementType.RELOCATION,
                item=cola_at_bar.item,
                department=cola_at_bar.department,
                delta=Decimal('1'),
                reference='',
            )

    def test_item_or_service_required(self, bar):
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                Movement.objects.create(
                    movement_type=MovementType.RELOCATION,
                    department=bar,
                    reference='relocation:test',
                )


class TestTransferConstraints:

    def test_departments_must_differ(self, bar):
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                Transfer.objects.create(from_department=bar, to_department=bar)

    def test_service_line_cannot_carry_quantity(self, bar, restaurant, pool_table):
        transfer = Transfer.objects.create(from_department=bar, to_department=restaurant)

        with pytest.raises(IntegrityError):
            with transaction.atomic():
                TransferLine.objects.create(
                    transfer=transfer,
                    kind=LineKind.SERVICE,
                    service=pool_table,
                    quantity=Decimal('1'),
                )

    def test_item_line_needs_positive_quantity(self, bar, restaurant, cola):
        transfer = Transfer.objects.create(from_department=bar, to_department=restaurant)

        with pytest.raises(IntegrityError):
            with transaction.atomic():
                TransferLine.objects.create(
                    transfer=transfer, kind=LineKind.ITEM, item=cola, quantity=Decimal('0'),
                )

    def test_transfer_id(self, bar, restaurant):
        transfer = Transfer.objects.create(from_department=bar, to_department=restaurant)

        assert transfer.transfer_id == f"transfer:{transfer.pk}"
        assert transfer.is_pending
