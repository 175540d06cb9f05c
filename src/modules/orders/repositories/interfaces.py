"""Order repository interface.

Extends ``IRepository[Order]`` with the methods the Order aggregate
needs: atomic creation together with its lines and outbox event, look-up
by the public order number, and row-locked status updates.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.dtos import CreateOrderDTO
    from modules.orders.models import Order
    from modules.orders.pricing import PricedOrder


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The aggregate is the Order, its OrderLine children and the outbox
    record announcing it.  Every mutation is atomic.
    """

    @abstractmethod
    def save(self, draft: CreateOrderDTO, priced: PricedOrder) -> Order:
        """Persist the order, its lines and its ``OrderPlaced`` event.

        Generates a unique order number, retrying on a unique-constraint
        conflict.  Must be called inside the checkout transaction.
        """

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with its lines prefetched."""

    @abstractmethod
    def get_by_number(self, order_number: str) -> Optional[Order]:
        """Retrieve an order by its public number; ``None`` if absent."""

    @abstractmethod
    def update_status(self, order_number: str, new_status: str) -> Optional[Order]:
        """Change the status under a row lock; ``None`` if the order is absent."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> Any:
        """Orders, newest first, optionally narrowed with ORM look-ups."""
