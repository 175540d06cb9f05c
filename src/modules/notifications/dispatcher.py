"""Notification dispatcher: hands committed orders to the mail worker.

The dispatcher only *requests* a notification.  Delivery, retries and the
outbox bookkeeping belong to the Celery tasks in ``tasks.py``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import structlog
from kombu.exceptions import KombuError

from modules.notifications.tasks import send_order_confirmation
from modules.orders.exceptions import NotificationFailure

if TYPE_CHECKING:
    from modules.orders.models import Order

logger = structlog.get_logger(__name__)


class INotificationDispatcher(ABC):
    @abstractmethod
    def order_placed(self, order: Order) -> None:
        """Request the confirmation for a committed order.

        Raises:
            NotificationFailure: the request could not be handed off.
        """


class CeleryNotificationDispatcher(INotificationDispatcher):
    """Enqueues ``notifications.send_order_confirmation`` on the broker."""

    def order_placed(self, order: Order) -> None:
        try:
            result = send_order_confirmation.delay(str(order.id))
        except (KombuError, OSError) as exc:
            raise NotificationFailure(
                f"Could not enqueue confirmation for order {order.order_number}: {exc}"
            ) from exc
        logger.info(
            "notification.enqueued",
            order_id=str(order.id),
            order_number=order.order_number,
            task_id=result.id,
        )
