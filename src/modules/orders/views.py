"""Order API views.

Exposes the ``OrderService`` via HTTP using DRF ViewSets.
Domain exceptions are caught and translated into HTTP status codes;
the view never swallows generic exceptions.

Every error body is ``{"detail": ..., "code": ...}`` plus, where useful,
the fields of the exception (``fields`` for validation errors, the
product and quantities for stock conflicts).
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.permissions import AllowAny, BasePermission, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.core.pagination import StandardResultsSetPagination
from modules.orders.dtos import CreateOrderDTO
from modules.orders.exceptions import (
    InsufficientStock,
    InvalidOrderStatus,
    OrderError,
    OrderNotFound,
    ProductUnavailable,
    StorageFailure,
    ValidationFailed,
)
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.serializers import (
    OrderListSerializer,
    OrderSerializer,
    UpdateOrderStatusSerializer,
)
from modules.orders.services import build_order_service


def error_response(exc: OrderError, http_status: int, **extra) -> Response:
    return Response(
        {"detail": str(exc), "code": exc.code, **extra},
        status=http_status,
    )


class OrderViewSet(GenericViewSet):
    """ViewSet for checkout and order look-ups.

    Orders are addressed by ``order_number``.  Placing and viewing an
    order is public; listing and status changes require a JWT.
    Does **not** extend ``ModelViewSet``: all ORM access goes through
    the service/repository layer.
    """

    queryset = Order.objects.none()
    serializer_class = OrderSerializer
    lookup_field = "order_number"
    filterset_class = OrderFilter
    ordering_fields = ["created_at", "total_amount", "status"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, OrderingFilter]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_order_service()

    def get_permissions(self) -> list[BasePermission]:
        if self.action in {"create", "retrieve"}:
            return [AllowAny()]
        return [IsAuthenticated()]

    def get_throttles(self) -> list[BaseThrottle]:
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "order_creation"
        elif self.action in {"list", "retrieve"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/checkout/orders/"""
        try:
            dto = CreateOrderDTO.parse(request.data)
            order = self._service.create_order(dto)
        except ValidationFailed as exc:
            return error_response(
                exc, status.HTTP_400_BAD_REQUEST, fields=exc.fields
            )
        except ProductUnavailable as exc:
            return error_response(
                exc, status.HTTP_400_BAD_REQUEST, product_id=str(exc.product_id)
            )
        except InsufficientStock as exc:
            return error_response(
                exc,
                status.HTTP_409_CONFLICT,
                product_id=str(exc.product_id),
                requested=exc.requested,
                available=exc.available,
            )
        except StorageFailure as exc:
            return error_response(exc, status.HTTP_503_SERVICE_UNAVAILABLE)

        out = OrderSerializer(order)
        return Response(out.data, status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def get_queryset(self):
        return self._service.list_orders()

    def list(self, request: Request) -> Response:
        """GET /api/v1/checkout/orders/

        Filtering (customer email, status, date range) is handled by
        ``OrderFilter``; ordering by ``OrderingFilter``.  Paginated.
        """
        queryset = self.filter_queryset(self.get_queryset())

        paginator = StandardResultsSetPagination()
        page = paginator.paginate_queryset(queryset, request)
        serializer = OrderListSerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, order_number: str | None = None) -> Response:
        """GET /api/v1/checkout/orders/{order_number}/"""
        try:
            order = self._service.get_order_by_number(order_number or "")
        except OrderNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        return Response(OrderSerializer(order).data)

    # ------------------------------------------------------------------
    # Status Update
    # ------------------------------------------------------------------

    @action(detail=True, methods=["patch"], url_path="status")
    def update_status(
        self, request: Request, order_number: str | None = None
    ) -> Response:
        """PATCH /api/v1/checkout/orders/{order_number}/status/"""
        serializer = UpdateOrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            order = self._service.update_status(
                order_number or "", serializer.validated_data["status"]
            )
        except OrderNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        except InvalidOrderStatus as exc:
            return error_response(exc, status.HTTP_400_BAD_REQUEST)

        return Response(OrderSerializer(order).data)
