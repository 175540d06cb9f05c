"""Pagination shared by every list endpoint.

Mirrors the storefront's ``per_page`` query parameter (default 10,
capped at 100).
"""

from rest_framework.pagination import PageNumberPagination


class StandardResultsSetPagination(PageNumberPagination):
    page_size = 10
    page_size_query_param = "per_page"
    max_page_size = 100
