import django_filters

from modules.orders.constants import OrderStatus
from modules.orders.models import Order


class OrderExportFilter(django_filters.FilterSet):
    user_id = django_filters.NumberFilter(field_name="user_id")
    status = django_filters.ChoiceFilter(
        field_name="status", choices=OrderStatus.choices
    )
    min_amount = django_filters.NumberFilter(
        field_name="total_amount", lookup_expr="gte"
    )
    max_amount = django_filters.NumberFilter(
        field_name="total_amount", lookup_expr="lte"
    )

    class Meta:
        model = Order
        fields = [
            "user_id",
            "status",
            "min_amount",
            "max_amount",
        ]
