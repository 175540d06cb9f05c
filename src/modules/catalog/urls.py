"""Catalog URL configuration."""

from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from modules.catalog.views import CategoryListView, ProductViewSet

router = DefaultRouter(trailing_slash=True)
router.register("catalog/products", ProductViewSet, basename="product")

urlpatterns = [
    path("catalog/categories/", CategoryListView.as_view(), name="catalog-categories"),
    *router.urls,
]
