from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

from modules.catalog.models import Product


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def staff_user():
    return get_user_model().objects.create_user(
        "support", password="support123", is_staff=True
    )


@pytest.fixture()
def auth_client(staff_user):
    """APIClient authenticated as a staff user (bypasses JWT issuance)."""
    client = APIClient()
    client.force_authenticate(user=staff_user)
    return client


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


@pytest.fixture()
def make_product():
    """Factory for catalog products with sensible defaults."""
    counter = {"n": 0}

    def _make(**overrides) -> Product:
        counter["n"] += 1
        defaults = {
            "sku": f"TEST-{counter['n']:03d}",
            "name": f"Test Product {counter['n']}",
            "description": "A product used by the test suite.",
            "price": Decimal("10.00"),
            "stock_quantity": 10,
            "category": "Electronics",
            "is_active": True,
        }
        defaults.update(overrides)
        return Product.objects.create(**defaults)

    return _make


@pytest.fixture()
def checkout_payload():
    """Build a valid checkout request body for the given (product, qty) lines."""

    def _payload(*lines, **overrides) -> dict:
        body = {
            "customer_name": "Ada Lovelace",
            "customer_email": "ada@example.com",
            "shipping_address": "12 Analytical Row, London",
            "billing_address": "",
            "payment_method": "credit_card",
            "notes": "",
            "items": [
                {"product_id": str(product.id), "quantity": quantity}
                for product, quantity in lines
            ],
        }
        body.update(overrides)
        return body

    return _payload
