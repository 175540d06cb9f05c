"""Email rendering and delivery through Django's mail framework.

Both helpers return the number of messages sent and let transport errors
(``smtplib.SMTPException``, ``OSError``) propagate to the caller.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from django.conf import settings
from django.core.mail import EmailMultiAlternatives, send_mail
from django.template.loader import render_to_string

if TYPE_CHECKING:
    from modules.orders.models import Order

logger = structlog.get_logger(__name__)

ORDER_CONFIRMATION_TEMPLATE = "notifications/order_confirmation"


def order_confirmation_subject(order: Order) -> str:
    return f"Order Confirmation - {order.order_number}"


def send_order_confirmation_email(order: Order) -> int:
    """Send the text + HTML confirmation to the order's customer."""
    context = {"order": order, "lines": list(order.lines.all())}
    message = EmailMultiAlternatives(
        subject=order_confirmation_subject(order),
        body=render_to_string(f"{ORDER_CONFIRMATION_TEMPLATE}.txt", context),
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[order.customer_email],
    )
    message.attach_alternative(
        render_to_string(f"{ORDER_CONFIRMATION_TEMPLATE}.html", context),
        "text/html",
    )
    sent = message.send()
    logger.info(
        "notification.confirmation_sent",
        order_id=str(order.id),
        order_number=order.order_number,
    )
    return sent


def send_custom_email(to: str, subject: str, body: str) -> int:
    sent = send_mail(
        subject=subject,
        message=body,
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[to],
    )
    logger.info("notification.custom_sent", subject=subject)
    return sent
