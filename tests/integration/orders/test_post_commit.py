"""Post-commit behaviour of the checkout against a real commit.

``transaction=True`` makes ``on_commit`` callbacks run as they do in
production, inside the request that placed the order.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from rest_framework import status

from modules.core.models import EventStatus, OutboxEvent
from modules.orders.models import Order

pytestmark = [pytest.mark.integration, pytest.mark.django_db(transaction=True)]

ORDERS_URL = "/api/v1/checkout/orders/"


def test_result_backend_outage_after_commit_still_returns_201(
    api_client, make_product, checkout_payload
):
    product = make_product(stock_quantity=5)

    with patch("modules.notifications.dispatcher.send_order_confirmation") as task:
        task.delay.side_effect = RedisConnectionError("result backend down")
        response = api_client.post(
            ORDERS_URL, checkout_payload((product, 1)), format="json"
        )

    assert response.status_code == status.HTTP_201_CREATED
    task.delay.assert_called_once()
    order = Order.objects.get(order_number=response.json()["order_number"])
    product.refresh_from_db()
    assert product.stock_quantity == 4
    event = OutboxEvent.objects.get(aggregate_id=str(order.id))
    assert event.status == EventStatus.PENDING


def test_confirmation_is_sent_once_the_order_commits(
    api_client, make_product, checkout_payload, mailoutbox
):
    product = make_product()

    response = api_client.post(
        ORDERS_URL, checkout_payload((product, 2)), format="json"
    )

    assert response.status_code == status.HTTP_201_CREATED
    number = response.json()["order_number"]
    assert [m.subject for m in mailoutbox] == [f"Order Confirmation - {number}"]
    order = Order.objects.get(order_number=number)
    event = OutboxEvent.objects.get(aggregate_id=str(order.id))
    assert event.status == EventStatus.PUBLISHED
