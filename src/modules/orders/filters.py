import django_filters

from modules.orders.constants import OrderStatus
from modules.orders.models import Order


class OrderFilter(django_filters.FilterSet):
    customer_email = django_filters.CharFilter(
        field_name="customer_email", lookup_expr="icontains"
    )
    status = django_filters.ChoiceFilter(
        field_name="status", choices=OrderStatus.choices
    )
    date_from = django_filters.DateFilter(
        field_name="created_at", lookup_expr="date__gte"
    )
    date_to = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")

    class Meta:
        model = Order
        fields = ["customer_email", "status", "date_from", "date_to"]
