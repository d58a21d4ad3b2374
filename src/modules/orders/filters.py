import django_filters

from modules.orders.constants import OrderStatus
from modules.orders.models import Order


class OrderFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(field_name="status", choices=OrderStatus.choices)
    customer = django_filters.UUIDFilter(field_name="customer_id")
    start_date = django_filters.DateFilter(field_name="placed_at", lookup_expr="date__gte")
    end_date = django_filters.DateFilter(field_name="placed_at", lookup_expr="date__lte")
    min_total = django_filters.NumberFilter(field_name="total_cents", lookup_expr="gte")
    max_total = django_filters.NumberFilter(field_name="total_cents", lookup_expr="lte")

    class Meta:
        model = Order
        fields = [
            "status",
            "customer",
            "start_date",
            "end_date",
            "min_total",
            "max_total",
        ]
