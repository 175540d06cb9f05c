"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.

``save`` writes the Order, its OrderLines and an ``OutboxEvent`` in one
transaction.  The order number is never pre-checked: a candidate is
inserted inside a savepoint and, if the unique constraint rejects it, the
savepoint is rolled back and a new candidate is drawn.

Status updates lock the order row with ``select_for_update()``.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import UUID

import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from modules.core.models import OutboxEvent
from modules.orders.constants import NOTIFICATIONS_TOPIC
from modules.orders.dtos import CreateOrderDTO
from modules.orders.events import OrderPlaced
from modules.orders.exceptions import InvalidOrderStatus, StorageFailure
from modules.orders.models import Order, OrderLine
from modules.orders.pricing import PricedOrder
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create (aggregate root + children + outbox)
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, draft: CreateOrderDTO, priced: PricedOrder) -> Order:
        order = self._insert_with_unique_number(draft, priced.total)

        OrderLine.objects.bulk_create(
            [
                OrderLine(
                    order=order,
                    product_id=line.product.id,
                    product_name=line.product.name,
                    product_sku=line.product.sku,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    line_total=line.line_total,
                )
                for line in priced.lines
            ]
        )

        order.add_domain_event(
            OrderPlaced(
                aggregate_id=order.id,
                order_number=order.order_number,
                customer_email=order.customer_email,
                total_amount=str(order.total_amount),
            )
        )
        event_count = self._publish_events(order)

        logger.info(
            "order.persisted",
            order_id=str(order.id),
            order_number=order.order_number,
            line_count=len(priced.lines),
            event_count=event_count,
        )
        return order

    def _insert_with_unique_number(
        self, draft: CreateOrderDTO, total: Decimal
    ) -> Order:
        max_attempts = settings.ORDER_NUMBER_MAX_RETRIES
        for attempt in range(1, max_attempts + 1):
            order = Order(
                order_number=Order.generate_order_number(),
                customer_name=draft.customer_name,
                customer_email=draft.customer_email,
                shipping_address=draft.shipping_address,
                billing_address=draft.billing_address,
                payment_method=draft.payment_method,
                notes=draft.notes,
                total_amount=total,
            )
            try:
                with transaction.atomic():
                    order.save(force_insert=True)
                return order
            except IntegrityError:
                if not Order.objects.filter(order_number=order.order_number).exists():
                    raise
                logger.warning(
                    "order.number_collision",
                    order_number=order.order_number,
                    attempt=attempt,
                )
        raise StorageFailure(
            f"Could not allocate a unique order number after {max_attempts} attempts."
        )

    def _publish_events(self, order: Order) -> int:
        events = order.domain_events
        for event in events:
            OutboxEvent.objects.create(
                event_type=event.event_name,
                aggregate_id=str(event.aggregate_id),
                payload=_serialize_event_payload(event),
                topic=NOTIFICATIONS_TOPIC,
            )
        order.clear_domain_events()
        return len(events)

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    @transaction.atomic
    def update_status(self, order_number: str, new_status: str) -> Optional[Order]:
        """Row-locked status change.

        Raises:
            InvalidOrderStatus: unknown status or forbidden transition.
        """
        order = (
            Order.objects.select_for_update().filter(order_number=order_number).first()
        )
        if order is None:
            return None

        if not order.can_transition_to(new_status):
            raise InvalidOrderStatus(
                f"Cannot transition order {order_number} "
                f"from {order.status} to {new_status}."
            )

        old_status = order.status
        order.status = new_status
        order.save(update_fields=["status"])
        logger.info(
            "order.status_persisted",
            order_number=order_number,
            old_status=old_status,
            new_status=new_status,
        )
        return self.get_by_number(order_number)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Order]:
        """Returns ``None`` for non-existent or malformed IDs."""
        try:
            return Order.objects.prefetch_related("lines__product").filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_number(self, order_number: str) -> Optional[Order]:
        return (
            Order.objects.prefetch_related("lines__product")
            .filter(order_number=order_number)
            .first()
        )

    def list(self, filters: Optional[Dict[str, Any]] = None):
        queryset = Order.objects.prefetch_related("lines__product").order_by(
            "-created_at", "-id"
        )
        if filters:
            queryset = queryset.filter(**filters)
        return queryset


def _serialize_event_payload(event: Any) -> Dict[str, Any]:
    data = asdict(event)
    normalized = _normalize_for_json(data)
    return json.loads(json.dumps(normalized))


def _normalize_for_json(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, list):
        return [_normalize_for_json(item) for item in value]
    if isinstance(value, dict):
        return {key: _normalize_for_json(val) for key, val in value.items()}
    return value
