"""
Pytest fixtures for Stockroom tests.
"""

from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model

from stockroom.models import (
    Department,
    InventoryItem,
    LedgerRow,
    Section,
    ServiceOffering,
)


User = get_user_model()


@pytest.fixture
def user(db):
    """Create a test user."""
    return User.objects.create_user(
        username='testuser',
        password='testpass123'
    )


# ══════════════════════════════════════════════════════════════
# DEPARTMENTS
# ══════════════════════════════════════════════════════════════


@pytest.fixture
def bar(db):
    """Drinks department."""
    return Department.objects.create(code='bar', name='Main Bar', category='drinks')


@pytest.fixture
def restaurant(db):
    """Food department."""
    return Department.objects.create(code='restaurant', name='Restaurant', category='food')


@pytest.fixture
def recreation(db):
    """Department hosting services (pool tables)."""
    return Department.objects.create(code='recreation', name='Recreation', category='games')


@pytest.fixture
def counter(bar):
    return Section.objects.create(department=bar, code='counter', name='Counter')


@pytest.fixture
def terrace(bar):
    return Section.objects.create(department=bar, code='terrace', name='Terrace')


@pytest.fixture
def hall_1(recreation):
    return Section.objects.create(department=recreation, code='hall-1', name='Pool Hall 1')


@pytest.fixture
def hall_2(recreation):
    return Section.objects.create(department=recreation, code='hall-2', name='Pool Hall 2')


# ══════════════════════════════════════════════════════════════
# CATALOG
# ══════════════════════════════════════════════════════════════


@pytest.fixture
def cola(db):
    """Drinks item with a catalog price different from row snapshots."""
    return InventoryItem.objects.create(
        sku='COLA-330',
        name='Cola 330ml',
        category='drinks',
        unit_price=Decimal('3.00'),
        total_quantity=Decimal('50'),
    )


@pytest.fixture
def water(db):
    return InventoryItem.objects.create(
        sku='WATER-500',
        name='Water 500ml',
        category='drinks',
        unit_price=Decimal('1.50'),
        total_quantity=Decimal('30'),
    )


@pytest.fixture
def pool_table(recreation, hall_1):
    """Service at recreation / hall-1."""
    return ServiceOffering.objects.create(
        code='pool-table-1',
        name='Pool Table 1',
        service_type='pool',
        pricing_model='per_time',
        price_per_minute=Decimal('0.5000'),
        department=recreation,
        section=hall_1,
    )


@pytest.fixture
def make_row(db):
    """Factory for ledger rows with a given quantity."""
    def _make_row(item, department, quantity, section=None, reserved='0', unit_price='2.50'):
        return LedgerRow.objects.create(
            item=item,
            department=department,
            section=section,
            quantity=Decimal(str(quantity)),
            reserved=Decimal(str(reserved)),
            unit_price=Decimal(str(unit_price)),
        )
    return _make_row


@pytest.fixture
def cola_at_bar(make_row, cola, bar):
    """50 units of cola at the bar, department level, priced 2.50."""
    return make_row(cola, bar, 50)
