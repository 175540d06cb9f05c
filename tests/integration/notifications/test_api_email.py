"""HTTP tests for the back-office email endpoints."""

from __future__ import annotations

import uuid
from smtplib import SMTPException
from unittest.mock import patch

import pytest
from django.core import mail
from rest_framework import status

from modules.orders.dtos import CreateOrderDTO
from modules.orders.services import build_order_service

pytestmark = pytest.mark.integration

BY_ID_URL = "/api/v1/email/order-confirmation"
BY_NUMBER_URL = "/api/v1/email/order-confirmation-by-number"
CUSTOM_URL = "/api/v1/email/custom-notification"


@pytest.fixture()
def order(make_product, checkout_payload):
    dto = CreateOrderDTO.parse(checkout_payload((make_product(), 1)))
    return build_order_service().create_order(dto)


class TestOrderConfirmation:
    def test_sends_by_id(self, auth_client, order):
        response = auth_client.post(BY_ID_URL, {"order_id": str(order.id)}, format="json")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {
            "detail": "Order confirmation email sent successfully."
        }
        assert mail.outbox[0].subject == f"Order Confirmation - {order.order_number}"

    def test_sends_by_number(self, auth_client, order):
        response = auth_client.post(
            BY_NUMBER_URL, {"order_number": order.order_number}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        assert mail.outbox[0].to == [order.customer_email]

    def test_unknown_order_returns_404(self, auth_client):
        response = auth_client.post(
            BY_ID_URL, {"order_id": str(uuid.uuid4())}, format="json"
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["code"] == "order_not_found"
        assert mail.outbox == []

    def test_malformed_order_id_returns_400(self, auth_client):
        response = auth_client.post(BY_ID_URL, {"order_id": "nope"}, format="json")
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_transport_error_returns_502(self, auth_client, order):
        with patch(
            "modules.notifications.views.send_order_confirmation_email",
            side_effect=SMTPException("connection closed"),
        ):
            response = auth_client.post(
                BY_NUMBER_URL, {"order_number": order.order_number}, format="json"
            )

        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        assert response.json()["code"] == "email_failed"
        assert "connection closed" in response.json()["detail"]


class TestCustomNotification:
    def test_sends_plain_email(self, auth_client):
        response = auth_client.post(
            CUSTOM_URL,
            {"to": "grace@example.com", "subject": "Delay", "message": "Sorry!"},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"detail": "Email notification sent successfully."}
        sent = mail.outbox[0]
        assert (sent.to, sent.subject, sent.body) == (
            ["grace@example.com"],
            "Delay",
            "Sorry!",
        )

    def test_invalid_recipient_returns_400(self, auth_client):
        response = auth_client.post(
            CUSTOM_URL,
            {"to": "not-an-email", "subject": "Delay", "message": "Sorry!"},
            format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "to" in response.json()
