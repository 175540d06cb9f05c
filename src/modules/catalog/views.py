"""Catalog API views.

Public, read-only endpoints backed by ``CatalogService``.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.filters import OrderingFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import GenericViewSet

from modules.catalog.exceptions import ProductNotFound
from modules.catalog.filters import ProductFilter
from modules.catalog.models import Product
from modules.catalog.repositories.django_repository import ProductDjangoRepository
from modules.catalog.serializers import ProductSerializer
from modules.catalog.services import CatalogService


class ProductViewSet(ListModelMixin, GenericViewSet):
    """GET /api/v1/catalog/products/ and /api/v1/catalog/products/{pk}/"""

    permission_classes = [AllowAny]
    filterset_class = ProductFilter
    ordering_fields = ["name", "price", "created_at"]
    ordering = ["name", "id"]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    queryset = Product.objects.none()
    serializer_class = ProductSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = CatalogService(repository=ProductDjangoRepository())

    def get_queryset(self):
        return self._service.list_products()

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        try:
            product = self._service.get_product(pk or "")
        except ProductNotFound:
            return Response(
                {"detail": "Product not found.", "code": "product_not_found"},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(ProductSerializer(product).data)


class CategoryListView(APIView):
    """GET /api/v1/catalog/categories/"""

    permission_classes = [AllowAny]

    def get(self, request: Request) -> Response:
        service = CatalogService(repository=ProductDjangoRepository())
        return Response({"categories": service.list_categories()})
