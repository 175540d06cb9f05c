"""Order service layer (Use Cases).

``OrderService.create_order`` is the checkout coordinator.  One attempt
moves through ``CheckoutStage``::

    start -> validating -> pricing -> reserving -> persisting -> committed

and any middle stage may end in ``aborted``.  Everything from the first
product read to the outbox write happens inside one ``transaction.atomic``
block: an exception at any point (including a timeout) rolls back the
stock decrements together with the order rows, so no half-applied
checkout is ever visible.

Business rules enforced:
- Prices always come from the catalog snapshot, never from the request.
- Missing or inactive products abort before any stock is touched.
- Stock is reserved through the ledger's conditional decrement, one line
  at a time in product-id order, so concurrent checkouts cannot oversell.
- The confirmation notification is requested only after commit; a failure
  to enqueue it never fails the checkout.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, Dict, Optional

import structlog
from django.conf import settings
from django.db import DatabaseError, connection, transaction

from modules.catalog.exceptions import OutOfStock, ProductNotAvailable
from modules.orders.constants import CheckoutStage, OrderStatus
from modules.orders.exceptions import (
    InsufficientStock,
    InvalidOrderStatus,
    NotificationFailure,
    OrderError,
    OrderNotFound,
    ProductUnavailable,
    StorageFailure,
    StorageTimeout,
)
from modules.orders.pricing import PricedOrder, price_lines

if TYPE_CHECKING:
    from modules.catalog.dtos import ProductSnapshot
    from modules.catalog.inventory import IInventoryLedger
    from modules.catalog.repositories.interfaces import IProductRepository
    from modules.notifications.dispatcher import INotificationDispatcher
    from modules.orders.dtos import CreateOrderDTO
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

# SQLSTATE raised by PostgreSQL when statement_timeout cancels a query.
QUERY_CANCELED = "57014"


class OrderService:
    """Application service for Order use-cases.

    Receives its collaborators via constructor injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        product_repository: IProductRepository,
        inventory_ledger: IInventoryLedger,
        dispatcher: INotificationDispatcher,
    ) -> None:
        self._order_repo = order_repository
        self._product_repo = product_repository
        self._ledger = inventory_ledger
        self._dispatcher = dispatcher

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_order(
        self, dto: CreateOrderDTO, *, timeout: Optional[float] = None
    ) -> Order:
        """Place an order all-or-nothing.

        *dto* has already passed structural validation
        (``CreateOrderDTO.parse``).  *timeout* is the time budget in
        seconds, defaulting to ``ORDER_TRANSACTION_TIMEOUT``.

        Raises:
            ProductUnavailable: a line references a missing/inactive product.
            InvalidQuantity: a line quantity is not a positive integer.
            InsufficientStock: the ledger refused a reservation.
            StorageTimeout: the time budget ran out; nothing was committed.
            StorageFailure: the database failed; nothing was committed.
        """
        budget = settings.ORDER_TRANSACTION_TIMEOUT if timeout is None else timeout
        deadline = time.monotonic() + budget
        stage = CheckoutStage.START
        log = logger.bind(line_count=len(dto.items))
        log.info("order.checkout_started", stage=stage)

        try:
            with transaction.atomic():
                self._apply_statement_timeout(budget)

                stage = CheckoutStage.VALIDATING
                snapshots = [self._snapshot(item.product_id) for item in dto.items]
                self._check_deadline(deadline)

                stage = CheckoutStage.PRICING
                priced = price_lines(
                    [
                        (snapshot, item.quantity)
                        for snapshot, item in zip(snapshots, dto.items)
                    ]
                )

                stage = CheckoutStage.RESERVING
                self._reserve(priced, deadline, log)

                stage = CheckoutStage.PERSISTING
                order = self._order_repo.save(dto, priced)
                self._check_deadline(deadline)

                transaction.on_commit(lambda: self._notify(order))
        except OrderError as exc:
            log.warning(
                "order.checkout_aborted",
                stage=stage,
                next_stage=CheckoutStage.ABORTED,
                code=exc.code,
                error=str(exc),
            )
            raise
        except DatabaseError as exc:
            failure = self._storage_failure(exc)
            log.error(
                "order.checkout_aborted",
                stage=stage,
                next_stage=CheckoutStage.ABORTED,
                code=failure.code,
                exc_info=True,
            )
            raise failure from exc

        log.info(
            "order.committed",
            stage=CheckoutStage.COMMITTED,
            order_id=str(order.id),
            order_number=order.order_number,
            total_amount=str(order.total_amount),
        )
        return self._order_repo.get_by_id(str(order.id)) or order

    def update_status(self, order_number: str, new_status: str) -> Order:
        """Move an order to *new_status*.

        Raises:
            InvalidOrderStatus: unknown status or forbidden transition.
            OrderNotFound: no order has that number.
        """
        log = logger.bind(order_number=order_number, new_status=new_status)
        if new_status not in OrderStatus.values:
            log.warning("order.invalid_status")
            raise InvalidOrderStatus(
                f"Invalid status '{new_status}'. "
                f"Valid values: {', '.join(OrderStatus.values)}."
            )

        try:
            order = self._order_repo.update_status(order_number, new_status)
        except InvalidOrderStatus:
            log.warning("order.invalid_transition")
            raise
        if order is None:
            raise OrderNotFound(f"Order {order_number} not found.")

        log.info("order.status_updated")
        return order

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: str) -> Order:
        """Retrieve a single order by ID.

        Raises:
            OrderNotFound: if the order does not exist.
        """
        order = self._order_repo.get_by_id(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def get_order_by_number(self, order_number: str) -> Order:
        """Pure read; calling it repeatedly returns the same data.

        Raises:
            OrderNotFound: if the order does not exist.
        """
        order = self._order_repo.get_by_number(order_number)
        if not order:
            raise OrderNotFound(f"Order {order_number} not found.")
        return order

    def list_orders(self, filters: Optional[Dict[str, Any]] = None):
        """Return orders newest first, optionally filtered."""
        return self._order_repo.list(filters)

    # ------------------------------------------------------------------
    # Checkout steps
    # ------------------------------------------------------------------

    def _snapshot(self, product_id: Any) -> ProductSnapshot:
        snapshot = self._product_repo.snapshot(product_id)
        if snapshot is None or not snapshot.active:
            raise ProductUnavailable(product_id)
        return snapshot

    def _reserve(self, priced: PricedOrder, deadline: float, log: Any) -> None:
        ordered = sorted(priced.lines, key=lambda line: str(line.product.id))
        for line in ordered:
            self._check_deadline(deadline)
            product_id = line.product.id
            try:
                remaining = self._ledger.reserve(product_id, line.quantity)
            except OutOfStock as exc:
                raise InsufficientStock(product_id, exc.requested, exc.available) from exc
            except ProductNotAvailable as exc:
                raise ProductUnavailable(product_id) from exc
            log.info(
                "order.stock_reserved",
                product_id=str(product_id),
                quantity=line.quantity,
                remaining=remaining,
            )

    def _notify(self, order: Order) -> None:
        """Runs after commit: the order stands whatever happens here.

        The outbox relay re-sends confirmations that were never handed off.
        """
        log = logger.bind(order_id=str(order.id), order_number=order.order_number)
        try:
            self._dispatcher.order_placed(order)
        except NotificationFailure as exc:
            log.warning("notification.dispatch_failed", error=str(exc))
        except Exception:
            log.exception("notification.dispatch_failed")

    # ------------------------------------------------------------------
    # Time budget
    # ------------------------------------------------------------------

    @staticmethod
    def _check_deadline(deadline: float) -> None:
        if time.monotonic() > deadline:
            raise StorageTimeout("Checkout exceeded its time budget.")

    @staticmethod
    def _apply_statement_timeout(budget: float) -> None:
        """Bound every statement of the transaction on PostgreSQL."""
        if connection.vendor != "postgresql":
            return
        with connection.cursor() as cursor:
            cursor.execute(
                "SELECT set_config('statement_timeout', %s, true)",
                [str(max(int(budget * 1000), 1))],
            )

    @staticmethod
    def _storage_failure(exc: DatabaseError) -> StorageFailure:
        cause = exc.__cause__
        sqlstate = getattr(cause, "sqlstate", None) or getattr(cause, "pgcode", None)
        if sqlstate == QUERY_CANCELED:
            return StorageTimeout("Checkout exceeded its time budget.")
        return StorageFailure("The order could not be stored. It is safe to retry.")


def build_order_service() -> OrderService:
    """Wire the service with its Django-backed collaborators."""
    from modules.catalog.inventory import DjangoInventoryLedger
    from modules.catalog.repositories.django_repository import ProductDjangoRepository
    from modules.notifications.dispatcher import CeleryNotificationDispatcher
    from modules.orders.repositories.django_repository import OrderDjangoRepository

    return OrderService(
        order_repository=OrderDjangoRepository(),
        product_repository=ProductDjangoRepository(),
        inventory_ledger=DjangoInventoryLedger(),
        dispatcher=CeleryNotificationDispatcher(),
    )
