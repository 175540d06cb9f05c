"""Celery tasks for order notifications.

``send_order_confirmation`` performs the delivery and settles the
order's ``OrderPlaced`` outbox event.  ``relay_pending_confirmations``
runs on Celery beat and re-submits events the immediate dispatch did
not settle (broker down at commit time, worker crash, SMTP error).
Each re-submission, successful or not, uses one of the event's
``NOTIFICATION_MAX_RETRIES`` attempts.
"""

from __future__ import annotations

from datetime import timedelta
from smtplib import SMTPException

import structlog
from celery import shared_task
from django.conf import settings
from django.utils import timezone
from kombu.exceptions import KombuError

from modules.core.models import EventStatus, OutboxEvent
from modules.notifications.mail import send_order_confirmation_email
from modules.orders.constants import ORDER_PLACED_EVENT
from modules.orders.repositories.django_repository import OrderDjangoRepository

logger = structlog.get_logger(__name__)


@shared_task(name="notifications.send_order_confirmation")
def send_order_confirmation(order_id: str) -> dict:
    """Email the confirmation for *order_id* and settle its outbox event."""
    log = logger.bind(order_id=order_id)
    order = OrderDjangoRepository().get_by_id(order_id)
    if order is None:
        log.warning("notification.order_missing")
        return {"status": "missing", "order_id": order_id}

    events = list(
        OutboxEvent.objects.for_aggregate(ORDER_PLACED_EVENT, order_id).exclude(
            status=EventStatus.PUBLISHED
        )
    )
    try:
        send_order_confirmation_email(order)
    except (SMTPException, OSError) as exc:
        for event in events:
            event.mark_as_failed(str(exc))
        log.error("notification.delivery_failed", error=str(exc))
        raise

    for event in events:
        event.mark_as_published()
    return {"status": "sent", "order_number": order.order_number}


@shared_task(name="notifications.relay_pending_confirmations")
def relay_pending_confirmations() -> int:
    """Re-enqueue confirmations whose outbox event is still unsettled."""
    cutoff = timezone.now() - timedelta(
        seconds=settings.NOTIFICATION_RELAY_GRACE_SECONDS
    )
    due = OutboxEvent.objects.due_for_relay(
        ORDER_PLACED_EVENT, cutoff, settings.NOTIFICATION_MAX_RETRIES
    )
    relayed = failed = 0
    for event in due:
        try:
            send_order_confirmation.delay(event.aggregate_id)
        except (KombuError, OSError) as exc:
            event.mark_as_failed(str(exc))
            failed += 1
            logger.warning(
                "notification.relay_failed",
                order_id=event.aggregate_id,
                retry_count=event.retry_count,
                error=str(exc),
            )
            continue
        event.mark_as_relayed()
        relayed += 1
    logger.info("notification.relay_completed", relayed=relayed, failed=failed)
    return relayed
