"""Unit tests for the inventory ledger's conditional decrement."""

from __future__ import annotations

from uuid import uuid4

import pytest
from django.db import transaction

from modules.catalog.exceptions import OutOfStock, ProductNotAvailable
from modules.catalog.inventory import DjangoInventoryLedger

pytestmark = pytest.mark.unit


@pytest.fixture()
def ledger():
    return DjangoInventoryLedger()


class TestReserve:
    def test_decrements_and_returns_remaining(self, ledger, make_product):
        product = make_product(stock_quantity=10)
        with transaction.atomic():
            remaining = ledger.reserve(product.id, 3)

        assert remaining == 7
        product.refresh_from_db()
        assert product.stock_quantity == 7

    def test_can_take_the_last_unit(self, ledger, make_product):
        product = make_product(stock_quantity=1)
        with transaction.atomic():
            assert ledger.reserve(product.id, 1) == 0

    def test_rejects_more_than_available(self, ledger, make_product):
        product = make_product(stock_quantity=2)
        with pytest.raises(OutOfStock) as exc_info:
            with transaction.atomic():
                ledger.reserve(product.id, 3)

        assert exc_info.value.requested == 3
        assert exc_info.value.available == 2
        product.refresh_from_db()
        assert product.stock_quantity == 2

    def test_inactive_product_not_available(self, ledger, make_product):
        product = make_product(is_active=False, stock_quantity=5)
        with pytest.raises(ProductNotAvailable):
            with transaction.atomic():
                ledger.reserve(product.id, 1)
        product.refresh_from_db()
        assert product.stock_quantity == 5

    def test_missing_product_not_available(self, ledger):
        with pytest.raises(ProductNotAvailable):
            with transaction.atomic():
                ledger.reserve(uuid4(), 1)

    def test_rollback_restores_stock(self, ledger, make_product):
        product = make_product(stock_quantity=4)
        with pytest.raises(RuntimeError):
            with transaction.atomic():
                ledger.reserve(product.id, 4)
                raise RuntimeError("abort checkout")

        product.refresh_from_db()
        assert product.stock_quantity == 4

    @pytest.mark.parametrize("quantity", [0, -2])
    def test_rejects_non_positive_quantity(self, ledger, make_product, quantity):
        product = make_product()
        with pytest.raises(ValueError):
            with transaction.atomic():
                ledger.reserve(product.id, quantity)


@pytest.mark.django_db(transaction=True)
def test_requires_an_open_transaction(make_product):
    product = make_product(stock_quantity=3)
    with pytest.raises(RuntimeError):
        DjangoInventoryLedger().reserve(product.id, 1)
    product.refresh_from_db()
    assert product.stock_quantity == 3
