"""Email API views.

Authenticated, synchronous delivery endpoints: the response reports
whether the mail backend accepted the message.
"""

from __future__ import annotations

from smtplib import SMTPException

import structlog
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.notifications.mail import send_custom_email, send_order_confirmation_email
from modules.notifications.serializers import (
    CustomNotificationSerializer,
    OrderConfirmationByNumberSerializer,
    OrderConfirmationSerializer,
)
from modules.orders.exceptions import OrderNotFound
from modules.orders.services import build_order_service

logger = structlog.get_logger(__name__)


def delivery_failed(exc: Exception) -> Response:
    return Response(
        {"detail": f"Failed to send email: {exc}", "code": "email_failed"},
        status=status.HTTP_502_BAD_GATEWAY,
    )


def order_not_found(exc: OrderNotFound) -> Response:
    return Response(
        {"detail": str(exc), "code": exc.code},
        status=status.HTTP_404_NOT_FOUND,
    )


class OrderConfirmationView(APIView):
    """POST /api/v1/email/order-confirmation"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request) -> Response:
        serializer = OrderConfirmationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order_id = str(serializer.validated_data["order_id"])

        try:
            order = build_order_service().get_order(order_id)
            send_order_confirmation_email(order)
        except OrderNotFound as exc:
            return order_not_found(exc)
        except (SMTPException, OSError) as exc:
            logger.error("notification.confirmation_failed", order_id=order_id, error=str(exc))
            return delivery_failed(exc)

        return Response({"detail": "Order confirmation email sent successfully."})


class OrderConfirmationByNumberView(APIView):
    """POST /api/v1/email/order-confirmation-by-number"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request) -> Response:
        serializer = OrderConfirmationByNumberSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order_number = serializer.validated_data["order_number"]

        try:
            order = build_order_service().get_order_by_number(order_number)
            send_order_confirmation_email(order)
        except OrderNotFound as exc:
            return order_not_found(exc)
        except (SMTPException, OSError) as exc:
            logger.error(
                "notification.confirmation_failed",
                order_number=order_number,
                error=str(exc),
            )
            return delivery_failed(exc)

        return Response({"detail": "Order confirmation email sent successfully."})


class CustomNotificationView(APIView):
    """POST /api/v1/email/custom-notification"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request) -> Response:
        serializer = CustomNotificationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            send_custom_email(data["to"], data["subject"], data["message"])
        except (SMTPException, OSError) as exc:
            logger.error("notification.custom_failed", subject=data["subject"], error=str(exc))
            return delivery_failed(exc)

        return Response({"detail": "Email notification sent successfully."})
